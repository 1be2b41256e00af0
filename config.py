# config.py — Central configuration for the selective TSP solver

# Instance file: one "x;y;cost" row per node
INSTANCE_PATH = "./data/example.csv"
DELIMITER = ";"

# Method to run: "local_search", "msls", "ils" or "lns"
METHOD = "local_search"

# Start tour for plain local search: "random", "greedy" or "regret"
START_TOUR = "random"

# Local search: "steepest" (best improving move) or "greedy" (first improving
# move of a shuffled neighbourhood)
LOCAL_SEARCH = "steepest"

# Neighbourhood: "candidates" (k nearest by distance + cost), "exhaustive"
# (all swaps and 2-opt moves) or "nodes" (all swaps and node exchanges)
NEIGHBOURHOOD = "candidates"
CANDIDATE_COUNT = 10

# Incremental move cache (steepest search over "candidates" or "exhaustive")
USE_MOVE_CACHE = True
REBUILD_EVERY = 25       # full cache rebuild after this many accepted moves
VERIFY_DELTAS = False    # recompute every applied delta from scratch

# Experiment: None runs from every node, otherwise a list of start node ids
START_NODES = None
SEED = 42

# Wrappers
TIME_LIMIT_S = 15.0
MSLS_RUNS = 200
ILS_PERTURB_EXCHANGES = 5
LNS_REMOVE_FRACTION = 0.3
LNS_SEGMENT_LENGTH = 5
LNS_LOCAL_SEARCH = True

# Output
OUTPUT_DIR = "./results"
SAVE_IMAGE = True        # write the best tour as a PNG
DISPLAY_FINAL = False    # show the best tour at the end

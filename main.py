import os
import random
from functools import partial

import numpy as np

import config
from models import Node
from distances import build_model
from local_search import LocalSearch
from metaheuristics import (
    iterated_local_search,
    large_neighbourhood_search,
    multiple_start_local_search,
)
from experiment import Experiment, save_path
from visualise import save_tour_image, plot_tour

METHODS = ("local_search", "msls", "ils", "lns")


def load_nodes(path, delimiter=";"):
    """Read one "x;y;cost" row per node; ids follow row order."""
    rows = np.loadtxt(path, delimiter=delimiter, dtype=int, ndmin=2)
    if rows.size and rows.shape[1] != 3:
        raise ValueError(f"Expected 3 columns (x, y, cost) in {path}, got {rows.shape[1]}")
    return [Node(i, int(x), int(y), int(cost)) for i, (x, y, cost) in enumerate(rows)]


def make_solver(method, model, rng):
    local_search = LocalSearch(
        model,
        neighbourhood=config.NEIGHBOURHOOD,
        use_cache=config.USE_MOVE_CACHE,
        rebuild_every=config.REBUILD_EVERY,
        verify=config.VERIFY_DELTAS,
        start_tour=config.START_TOUR,
        rng=rng,
        search=config.LOCAL_SEARCH,
    )
    if method == "local_search":
        return local_search
    if method == "msls":
        solver = partial(multiple_start_local_search, model, runs=config.MSLS_RUNS,
                         rng=rng, local_search=local_search)
    elif method == "ils":
        solver = partial(iterated_local_search, model, time_limit=config.TIME_LIMIT_S,
                         rng=rng, exchanges=config.ILS_PERTURB_EXCHANGES,
                         local_search=local_search)
    elif method == "lns":
        solver = partial(large_neighbourhood_search, model, time_limit=config.TIME_LIMIT_S,
                         rng=rng, fraction=config.LNS_REMOVE_FRACTION,
                         segment_length=config.LNS_SEGMENT_LENGTH,
                         local_search_after_repair=config.LNS_LOCAL_SEARCH,
                         local_search=local_search)
    else:
        raise ValueError(f"Unknown method {method!r}, expected one of {METHODS}")
    solver.method_name = method
    return solver


def main():
    # Load instance
    print(f"Loading instance from {config.INSTANCE_PATH}...")
    nodes = load_nodes(config.INSTANCE_PATH, config.DELIMITER)

    print("Building distance model...")
    model = build_model(nodes, config.CANDIDATE_COUNT)
    print(f"Loaded {model.size} nodes, tours visit {model.selection_size}")

    rng = random.Random(config.SEED)
    solver = make_solver(config.METHOD, model, rng)

    starts = config.START_NODES if config.START_NODES is not None else range(model.size)
    print(f"\nRunning {config.METHOD} (search={config.LOCAL_SEARCH}, "
          f"neighbourhood={config.NEIGHBOURHOOD}, cache={config.USE_MOVE_CACHE})...")
    experiment = Experiment(solver, starts, name=config.METHOD)
    best = experiment.run()
    experiment.report()

    # Print results
    print("\n" + "=" * 50)
    print("BEST TOUR FOUND:")
    print(f"  Score:    {best.score}")
    print(f"  Distance: {best.distance}")
    print(f"  Cost:     {best.cost}")
    print(f"  Tour:     {' -> '.join(str(n) for n in best.nodes)}")
    print("=" * 50)

    # Export
    base = os.path.join(config.OUTPUT_DIR, config.METHOD)
    save_path(best, base + ".txt")
    print(f"Tour exported to {base}.txt")
    if config.SAVE_IMAGE:
        save_tour_image(base + ".png", nodes, best)
        print(f"Image saved to {base}.png")

    if config.DISPLAY_FINAL:
        plot_tour(nodes, best.nodes, title=f"{config.METHOD}: {best.score}")


if __name__ == "__main__":
    main()

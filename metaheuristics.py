"""Search strategies built on top of steepest descent.

Time limits are checked between descents, never inside one. Randomness comes
from the ``rng`` argument (a ``random.Random``) so runs can be reproduced.

Each strategy accepts ``on_iteration(tour, iteration, is_new_best)``, called
after every descent; returning False from it stops the search early.
"""
import random
import time

from construct import random_tour, regret_insertion
from local_search import LocalSearch
from models import Solution
from tour import Tour


def _out_of_budget(started, time_limit, iteration, max_iterations):
    if max_iterations is not None and iteration >= max_iterations:
        return True
    if time_limit is not None and time.perf_counter() - started >= time_limit:
        return True
    return False


def _check_budget(time_limit, max_iterations):
    if time_limit is None and max_iterations is None:
        raise ValueError("Need a time limit, an iteration limit or both")


def multiple_start_local_search(model, start, runs=200, rng=None, local_search=None,
                                on_iteration=None):
    """Best of ``runs`` descents from independent random tours."""
    if runs < 1:
        raise ValueError(f"Need at least one run, got {runs}")
    rng = rng or random.Random()
    local_search = local_search or LocalSearch(model)

    best, best_score = None, None
    done = 0
    for i in range(runs):
        tour = local_search.improve(random_tour(model, start, rng))
        done += 1
        score = tour.cost(model)
        is_new_best = best_score is None or score < best_score
        if is_new_best:
            best, best_score = tour, score
        if on_iteration is not None and on_iteration(tour, i, is_new_best) is False:
            break
    return Solution.from_tour(best, model, method="msls", runs=done)


def perturb(tour, universe, rng, exchanges=5):
    """Copy of tour with ``exchanges`` random segment reversals and one random replacement."""
    tour = tour.copy()
    m = tour.size
    if m >= 4:
        for _ in range(exchanges):
            i = rng.randrange(m)
            j = rng.randrange(m)
            while j in (i, (i + 1) % m, (i - 1) % m):
                j = rng.randrange(m)
            i, j = sorted((i, j))
            tour.reverse(i + 1, j)

    outside = sorted(tour.unselected(universe))
    if outside:
        tour.replace(rng.randrange(m), rng.choice(outside))
    return tour


def iterated_local_search(model, start, time_limit=None, max_iterations=None, rng=None,
                          exchanges=5, local_search=None, on_iteration=None, verbose=False):
    """Perturb the incumbent and descend again; keep the result unless it is worse."""
    _check_budget(time_limit, max_iterations)
    rng = rng or random.Random()
    local_search = local_search or LocalSearch(model)
    universe = model.node_ids()

    current = local_search.improve(random_tour(model, start, rng))
    current_score = current.cost(model)
    best, best_score = current, current_score
    runs = 1

    started = time.perf_counter()
    iteration = 0
    while not _out_of_budget(started, time_limit, iteration, max_iterations):
        candidate = local_search.improve(perturb(current, universe, rng, exchanges))
        runs += 1
        score = candidate.cost(model)
        if score <= current_score:
            current, current_score = candidate, score
        is_new_best = score < best_score
        if is_new_best:
            best, best_score = candidate, score
            if verbose:
                print(f"  [ils {iteration + 1}] New best: {score}")
        if on_iteration is not None and on_iteration(candidate, iteration, is_new_best) is False:
            break
        iteration += 1

    return Solution.from_tour(best, model, method="ils", runs=runs)


def destroy(tour, model, rng, fraction=0.3, segment_length=5):
    """Remove whole segments picked by roulette over their cost; returns the kept nodes in order.

    A segment's weight is its visiting costs plus the edges leaving its nodes,
    so expensive stretches are removed more often. Segments never overlap.
    """
    if not 0 <= fraction < 1:
        raise ValueError(f"Removal fraction must be in [0, 1), got {fraction}")
    nodes = list(tour)
    m = len(nodes)
    segment_length = max(1, min(segment_length, m))
    needed = int(fraction * m) // segment_length

    weights = []
    for i in range(m):
        w = 0
        for k in range(segment_length):
            node = nodes[(i + k) % m]
            w += model.cost(node) + model.distance(node, nodes[(i + k + 1) % m])
        weights.append(w)

    removed = [False] * m
    available = list(range(m))
    picked = 0
    while picked < needed and available:
        valid = [i for i in available
                 if not any(removed[(i + k) % m] for k in range(segment_length))]
        if not valid:
            break
        valid_weights = [weights[i] for i in valid]
        if sum(valid_weights) > 0:
            chosen = rng.choices(valid, weights=valid_weights, k=1)[0]
        else:
            chosen = rng.choice(valid)
        for k in range(segment_length):
            removed[(chosen + k) % m] = True
        available.remove(chosen)
        picked += 1

    return [node for node, gone in zip(nodes, removed) if not gone]


def repair(model, partial, regret_weight=0.5, score_weight=0.5):
    return Tour.from_cycle(regret_insertion(model, partial, regret_weight=regret_weight,
                                            score_weight=score_weight))


def large_neighbourhood_search(model, start, time_limit=None, max_iterations=None, rng=None,
                               fraction=0.3, segment_length=5, local_search_after_repair=True,
                               local_search=None, on_iteration=None, verbose=False):
    """Destroy and repair the best tour, optionally descending after each repair."""
    _check_budget(time_limit, max_iterations)
    rng = rng or random.Random()
    local_search = local_search or LocalSearch(model)

    best = local_search.improve(random_tour(model, start, rng))
    best_score = best.cost(model)
    runs = 1

    started = time.perf_counter()
    iteration = 0
    while not _out_of_budget(started, time_limit, iteration, max_iterations):
        candidate = repair(model, destroy(best, model, rng, fraction, segment_length))
        if local_search_after_repair:
            local_search.improve(candidate)
            runs += 1
        score = candidate.cost(model)
        is_new_best = score < best_score
        if is_new_best:
            best, best_score = candidate, score
            if verbose:
                print(f"  [lns {iteration + 1}] New best: {score}")
        if on_iteration is not None and on_iteration(candidate, iteration, is_new_best) is False:
            break
        iteration += 1

    method = "lns+ls" if local_search_after_repair else "lns"
    return Solution.from_tour(best, model, method=method, runs=runs)

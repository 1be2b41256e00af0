"""Start tours for the local search.

Every function returns a closed Tour over ceil(N / 2) distinct nodes that
begins at the requested start node.
"""
import random

from tour import Tour


def random_tour(model, start, rng=None):
    """Start node followed by a random sample of the remaining nodes in random order."""
    rng = rng or random.Random()
    others = [i for i in range(model.size) if i != start]
    chosen = rng.sample(others, model.selection_size - 1)
    return Tour.from_cycle([start] + chosen)


def _nearest(model, node, unvisited):
    return min(unvisited, key=lambda j: (model.objective(node, j), j))


def greedy_cycle_tour(model, start):
    """Cheapest insertion on distance + visiting cost, seeded with the start's nearest node."""
    target = model.selection_size
    unvisited = model.node_ids() - {start}
    path = [start]
    if target > 1:
        first = _nearest(model, start, unvisited)
        path.append(first)
        unvisited.discard(first)

    while len(path) < target:
        best = None
        for cand in sorted(unvisited):
            for i, curr in enumerate(path):
                nxt = path[(i + 1) % len(path)]
                increment = (model.objective(curr, cand) + model.objective(cand, nxt)
                             - model.objective(curr, nxt))
                if best is None or increment < best[0]:
                    best = (increment, cand, i + 1)
        _, node, position = best
        path.insert(position, node)
        unvisited.discard(node)
    return Tour.from_cycle(path)


def _insertion_costs(model, path, cand):
    costs = []
    n = len(path)
    for i, curr in enumerate(path):
        nxt = path[(i + 1) % n]
        increment = (model.distance(curr, cand) + model.distance(cand, nxt)
                     - model.distance(curr, nxt) + model.cost(cand))
        costs.append((increment, i + 1))
    costs.sort()
    return costs


def regret_insertion(model, partial, target=None, regret_weight=0.5, score_weight=0.5):
    """Complete an open cycle by weighted 2-regret insertion.

    Each step inserts the node minimising
    ``score_weight * best_increment - regret_weight * (second_best - best)``
    at its cheapest position. Returns the completed node list (open).
    """
    if not partial:
        raise ValueError("Cannot repair an empty tour")
    target = model.selection_size if target is None else target
    path = list(partial)
    unvisited = model.node_ids() - set(path)

    while len(path) < target:
        best = None
        for cand in sorted(unvisited):
            costs = _insertion_costs(model, path, cand)
            increment, position = costs[0]
            regret = costs[1][0] - increment if len(costs) > 1 else 0
            weighted = score_weight * increment - regret_weight * regret
            if best is None or weighted < best[0]:
                best = (weighted, cand, position)
        _, node, position = best
        path.insert(position, node)
        unvisited.discard(node)
    return path


def regret_tour(model, start, regret_weight=0.5, score_weight=0.5):
    return Tour.from_cycle(regret_insertion(model, [start], regret_weight=regret_weight,
                                            score_weight=score_weight))


def make_start_tour(kind, model, start, rng=None):
    if kind == "random":
        return random_tour(model, start, rng)
    if kind == "greedy":
        return greedy_cycle_tour(model, start)
    if kind == "regret":
        return regret_tour(model, start)
    raise ValueError(f"Unknown start tour {kind!r}, expected 'random', 'greedy' or 'regret'")

import random
from collections import Counter

from construct import make_start_tour
from models import Solution
from move_cache import MoveCache
from moves import InterSwap, apply_move
from neighbourhood import make_neighbourhood

INITIALIZED = "initialized"
SEARCHING = "searching"
CONVERGED = "converged"


STEEPEST = "steepest"
GREEDY = "greedy"
SEARCHES = (STEEPEST, GREEDY)


class Descent:
    """One local-search run over one tour.

    ``search="steepest"`` applies the best improving move each iteration,
    through the move cache when ``use_cache`` is set and the neighbourhood
    supports it. ``search="greedy"`` shuffles the full neighbourhood with
    ``rng`` and applies the first improving move it meets; it never uses the
    cache.

    Goes INITIALIZED -> SEARCHING -> CONVERGED. The tour is improved in place
    and owned by this descent until it converges; a converged descent cannot
    be run again, start a new one from a fresh tour instead.
    """

    def __init__(self, tour, model, neighbourhood="candidates", universe=None,
                 use_cache=True, rebuild_every=25, verify=False, search=STEEPEST, rng=None):
        if search not in SEARCHES:
            raise ValueError(f"Unknown search {search!r}, expected one of {SEARCHES}")
        self.tour = tour
        self.model = model
        self.neighbourhood = make_neighbourhood(neighbourhood, model)
        self.universe = set(universe) if universe is not None else model.node_ids()
        outside = tour.selected() - self.universe
        if outside:
            raise ValueError(f"Tour visits nodes outside the universe: {sorted(outside)}")
        self.search = search
        self.rng = rng or random.Random()
        self.use_cache = use_cache and search == STEEPEST and self.neighbourhood.cacheable
        self.rebuild_every = rebuild_every
        self.verify = verify
        self.state = INITIALIZED
        self.iterations = 0
        self.stats = Counter()

    def run(self):
        if self.state != INITIALIZED:
            raise RuntimeError(f"Descent is {self.state}; start a new descent from a fresh tour")
        self.tour.check()
        self.state = SEARCHING
        if self.search == GREEDY:
            self._search_greedy()
        elif self.use_cache:
            self._search_cached()
        else:
            self._search_full()
        self.state = CONVERGED
        return self.tour

    def _search_cached(self):
        cache = MoveCache(self.tour, self.model, self.neighbourhood,
                          self.tour.unselected(self.universe))
        cache.rebuild()
        while True:
            record = cache.next_move()
            if record is None:
                break
            before = self.tour.cost(self.model) if self.verify else None
            anchors = cache.apply(record)
            self._after_move(record.move, before)

            if self.rebuild_every and self.iterations % self.rebuild_every == 0:
                cache.rebuild()
            else:
                cache.refresh(anchors)
                cache.revisit_skipped()
        self.stats = cache.stats

    def _search_full(self):
        unselected = self.tour.unselected(self.universe)
        while True:
            best = min(self.neighbourhood.moves(self.tour, unselected),
                       key=lambda m: (m.delta, m.key()), default=None)
            if best is None or best.delta >= 0:
                break
            before = self.tour.cost(self.model) if self.verify else None
            apply_move(self.tour, best)
            if isinstance(best, InterSwap):
                unselected.discard(best.new)
                unselected.add(best.old)
            self.stats["applied"] += 1
            self._after_move(best, before)

    def _search_greedy(self):
        unselected = self.tour.unselected(self.universe)
        while True:
            moves = list(self.neighbourhood.moves(self.tour, unselected))
            self.rng.shuffle(moves)
            first = next((m for m in moves if m.delta < 0), None)
            if first is None:
                break
            before = self.tour.cost(self.model) if self.verify else None
            apply_move(self.tour, first)
            if isinstance(first, InterSwap):
                unselected.discard(first.new)
                unselected.add(first.old)
            self.stats["applied"] += 1
            self._after_move(first, before)

    def _after_move(self, move, before):
        self.iterations += 1
        nodes = self.tour.nodes
        if nodes[0] != nodes[-1]:
            raise RuntimeError(f"Tour lost closure after applying {move!r}")
        if self.verify:
            self.tour.check()
            actual = self.tour.cost(self.model) - before
            if actual != move.delta:
                raise RuntimeError(f"Applied {move!r} but the tour cost changed by {actual}")


def steepest_descent(tour, model, universe=None, neighbourhood="candidates",
                     use_cache=True, rebuild_every=25, verify=False):
    """Improve tour in place until no improving swap or 2-opt move remains; returns it."""
    descent = Descent(tour, model, neighbourhood=neighbourhood, universe=universe,
                      use_cache=use_cache, rebuild_every=rebuild_every, verify=verify)
    return descent.run()


class LocalSearch:
    """Descent settings shared by every run over one model."""

    def __init__(self, model, neighbourhood="candidates", use_cache=True,
                 rebuild_every=25, verify=False, start_tour="random", rng=None,
                 search=STEEPEST):
        if search not in SEARCHES:
            raise ValueError(f"Unknown search {search!r}, expected one of {SEARCHES}")
        self.model = model
        self.neighbourhood = make_neighbourhood(neighbourhood, model)
        self.use_cache = use_cache
        self.rebuild_every = rebuild_every
        self.verify = verify
        self.start_tour = start_tour
        self.rng = rng
        self.search = search

    @property
    def method_name(self):
        cached = self.use_cache and self.search == STEEPEST and self.neighbourhood.cacheable
        cache = "cached" if cached else "full"
        return f"{self.search}-{self.neighbourhood.name}-{cache}-{self.start_tour}_start"

    def descend(self, tour, universe=None):
        """Run one descent over tour and return the finished Descent."""
        descent = Descent(tour, self.model, neighbourhood=self.neighbourhood, universe=universe,
                          use_cache=self.use_cache, rebuild_every=self.rebuild_every,
                          verify=self.verify, search=self.search, rng=self.rng)
        descent.run()
        return descent

    def improve(self, tour, universe=None):
        return self.descend(tour, universe).tour

    def solve(self, start):
        tour = make_start_tour(self.start_tour, self.model, start, self.rng)
        descent = self.descend(tour)
        return Solution.from_tour(descent.tour, self.model, method=self.method_name,
                                  iterations=descent.iterations)

    def __call__(self, start):
        return self.solve(start)

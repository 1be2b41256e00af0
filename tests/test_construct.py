import random

import pytest
from models import Node
from distances import build_model
from construct import (
    greedy_cycle_tour,
    make_start_tour,
    random_tour,
    regret_insertion,
    regret_tour,
)


def _assert_valid(tour, model, start=None):
    tour.check()
    assert tour.size == model.selection_size
    assert tour.selected() <= model.node_ids()
    if start is not None:
        assert tour.nodes[0] == start


class TestRandomTour:
    def test_valid(self, small_model):
        _assert_valid(random_tour(small_model, 7, random.Random(1)), small_model, 7)

    def test_reproducible(self, small_model):
        a = random_tour(small_model, 0, random.Random(3))
        b = random_tour(small_model, 0, random.Random(3))
        assert a == b

    def test_odd_instance_rounds_up(self, square_nodes):
        model = build_model(square_nodes + [Node(4, 5, 5)])
        assert random_tour(model, 0, random.Random(0)).size == 3


class TestGreedyCycle:
    def test_valid(self, small_model):
        _assert_valid(greedy_cycle_tour(small_model, 5), small_model, 5)

    def test_deterministic(self, small_model):
        assert greedy_cycle_tour(small_model, 5) == greedy_cycle_tour(small_model, 5)

    def test_beats_random_start(self, medium_model):
        greedy = greedy_cycle_tour(medium_model, 0).cost(medium_model)
        rng = random.Random(0)
        randoms = [random_tour(medium_model, 0, rng).cost(medium_model) for _ in range(10)]
        assert greedy < min(randoms)


class TestRegret:
    def test_valid(self, small_model):
        _assert_valid(regret_tour(small_model, 2), small_model, 2)

    def test_completes_partial(self, small_model):
        path = regret_insertion(small_model, [0, 1, 2])
        assert len(path) == small_model.selection_size
        assert {0, 1, 2} <= set(path)
        assert len(set(path)) == len(path)

    def test_target(self, small_model):
        assert len(regret_insertion(small_model, [4], target=4)) == 4

    def test_empty_partial(self, small_model):
        with pytest.raises(ValueError):
            regret_insertion(small_model, [])


class TestMakeStartTour:
    @pytest.mark.parametrize("kind", ["random", "greedy", "regret"])
    def test_kinds(self, small_model, kind):
        _assert_valid(make_start_tour(kind, small_model, 3, random.Random(0)), small_model, 3)

    def test_unknown(self, small_model):
        with pytest.raises(ValueError):
            make_start_tour("nearest", small_model, 0)

import random

import pytest
from models import Node
from distances import build_model
from tour import Tour
from neighbourhood import ExhaustiveNeighbourhood
from construct import random_tour
from moves import (
    EXCHANGE,
    SWAP,
    NODE_EXCHANGE,
    EdgeExchange,
    InterSwap,
    NodeExchange,
    apply_move,
    evaluate,
    exchange_allowed,
    exchange_orientation,
    inverse,
    make_exchange,
    make_node_exchange,
    make_swap,
)


@pytest.fixture
def centre_model(square_nodes):
    # square plus a cheap node in the middle
    return build_model(square_nodes + [Node(4, 5, 5, 1)], candidate_count=4)


class TestInterSwap:
    def test_delta(self, centre_model):
        tour = Tour([0, 1, 2, 0])
        move = make_swap(tour, centre_model, 1, 4)
        assert move.delta == -5

    def test_apply_matches_delta(self, centre_model):
        tour = Tour([0, 1, 2, 0])
        before = tour.cost(centre_model)
        move = make_swap(tour, centre_model, 1, 4)
        apply_move(tour, move)
        assert tour.nodes == [0, 4, 2, 0]
        assert tour.cost(centre_model) - before == move.delta

    def test_swap_at_start(self, centre_model):
        tour = Tour([0, 1, 2, 0])
        move = make_swap(tour, centre_model, 0, 4)
        before = tour.cost(centre_model)
        apply_move(tour, move)
        assert tour.nodes == [4, 1, 2, 4]
        assert tour.cost(centre_model) - before == move.delta

    def test_rejects_selected_new(self, centre_model):
        tour = Tour([0, 1, 2, 0])
        with pytest.raises(ValueError):
            make_swap(tour, centre_model, 1, 2)
        with pytest.raises(ValueError):
            apply_move(tour, InterSwap(1, 2, 0))

    def test_rejects_unselected_old(self, centre_model):
        tour = Tour([0, 1, 2, 0])
        with pytest.raises(ValueError):
            make_swap(tour, centre_model, 3, 4)

    def test_key(self):
        assert InterSwap(1, 4).key() == (SWAP, 1, 4)
        assert InterSwap(1, 4).kind == SWAP


class TestEdgeExchange:
    def test_crossing_exchange_improves(self, square_model):
        tour = Tour([0, 2, 1, 3, 0])
        assert tour.cost(square_model) == 48
        move = make_exchange(tour, square_model, 0, 1)
        assert move.delta == -8
        apply_move(tour, move)
        assert tour.cost(square_model) == 40
        assert not (tour.has_edge(0, 2) and tour.has_edge(1, 3))
        tour.check()

    def test_adds_edges(self, square_model):
        tour = Tour([0, 2, 1, 3, 0])
        move = make_exchange(tour, square_model, 0, 1)
        apply_move(tour, move)
        for u, v in move.added_edges():
            assert tour.has_edge(u, v)
        for u, v in move.removed_edges():
            assert not tour.has_edge(u, v)

    def test_closing_edge(self, square_model):
        tour = Tour([0, 2, 1, 3, 0])
        # removes (3, 0) and (2, 1)
        move = make_exchange(tour, square_model, 3, 2)
        before = tour.cost(square_model)
        apply_move(tour, move)
        tour.check()
        assert tour.cost(square_model) - before == move.delta

    def test_adjacent_edges_rejected(self, square_model):
        tour = Tour([0, 1, 2, 3, 0])
        assert not exchange_allowed(tour, 0, 1)
        assert not exchange_allowed(tour, 1, 0)
        assert not exchange_allowed(tour, 2, 2)
        with pytest.raises(ValueError):
            make_exchange(tour, square_model, 0, 1)

    def test_key_ignores_orientation(self):
        m1 = EdgeExchange(0, 2, 1, 3)
        m2 = EdgeExchange(2, 0, 3, 1)
        m3 = EdgeExchange(1, 3, 0, 2)
        assert m1.key() == m2.key() == m3.key()
        assert m1.key()[0] == EXCHANGE

    def test_key_distinguishes_reconnection(self):
        # same removed edges, other pair of added edges
        assert EdgeExchange(0, 2, 1, 3).key() != EdgeExchange(0, 2, 3, 1).key()

    def test_orientation_follows_traversal(self):
        move = EdgeExchange(0, 2, 1, 3)
        assert exchange_orientation(Tour([0, 2, 1, 3, 0]), move) == (0, 1)
        assert exchange_orientation(Tour([0, 3, 1, 2, 0]), move) == (2, 3)

    def test_orientation_none_when_mixed(self):
        # (0, 1) forwards, (3, 2) backwards
        move = EdgeExchange(0, 1, 3, 2)
        assert exchange_orientation(Tour([0, 1, 2, 3, 0]), move) is None
        with pytest.raises(ValueError):
            apply_move(Tour([0, 1, 2, 3, 0]), move)

    def test_apply_reversed_orientation(self, square_model):
        move = make_exchange(Tour([0, 2, 1, 3, 0]), square_model, 0, 1)
        tour = Tour([0, 3, 1, 2, 0])
        before = tour.cost(square_model)
        apply_move(tour, move)
        tour.check()
        assert tour.cost(square_model) - before == move.delta


class TestNodeExchange:
    @pytest.mark.parametrize("u, v", [(0, 4), (1, 2), (0, 9), (9, 0), (3, 7)])
    def test_apply_matches_delta(self, small_model, u, v):
        tour = Tour.from_cycle(range(10))
        move = make_node_exchange(tour, small_model, u, v)
        before = tour.cost(small_model)
        apply_move(tour, move)
        tour.check()
        assert tour.position_of(u) == v
        assert tour.position_of(v) == u
        assert tour.cost(small_model) - before == move.delta

    def test_all_pairs_on_random_tour(self, small_model):
        tour = random_tour(small_model, 0, random.Random(2))
        nodes = list(tour)
        for i, u in enumerate(nodes):
            for v in nodes[i + 1:]:
                move = make_node_exchange(tour, small_model, u, v)
                cost = tour.cost(small_model)
                apply_move(tour, move)
                assert tour.cost(small_model) - cost == move.delta
                apply_move(tour, inverse(move))
                assert tour.as_list() == [*nodes, nodes[0]]

    def test_two_node_tour(self, small_model):
        tour = Tour([0, 1, 0])
        assert make_node_exchange(tour, small_model, 0, 1).delta == 0

    def test_key_is_unordered(self):
        assert NodeExchange(3, 1).key() == NodeExchange(1, 3).key() == (NODE_EXCHANGE, 1, 3)

    def test_rejects_unselected(self, small_model):
        tour = Tour.from_cycle(range(10))
        with pytest.raises(ValueError):
            make_node_exchange(tour, small_model, 0, 15)
        with pytest.raises(ValueError):
            make_node_exchange(tour, small_model, 4, 4)
        with pytest.raises(ValueError):
            apply_move(tour, NodeExchange(0, 15))

    def test_evaluate(self, small_model):
        tour = Tour.from_cycle(range(10))
        move = make_node_exchange(tour, small_model, 2, 6)
        assert evaluate(tour, small_model, move) == move.delta


class TestEvaluate:
    def test_matches_stored_delta(self, square_model):
        tour = Tour([0, 2, 1, 3, 0])
        move = make_exchange(tour, square_model, 0, 1)
        assert evaluate(tour, square_model, move) == move.delta

    def test_unknown_move(self, square_model):
        with pytest.raises(TypeError):
            evaluate(Tour([0, 1, 0]), square_model, object())
        with pytest.raises(TypeError):
            apply_move(Tour([0, 1, 0]), object())


class TestInverse:
    def test_swap_inverse(self):
        inv = inverse(InterSwap(1, 4, -5))
        assert (inv.old, inv.new, inv.delta) == (4, 1, 5)

    @pytest.mark.parametrize("seed", range(5))
    def test_round_trip_restores_tour(self, small_model, seed):
        rng = random.Random(seed)
        tour = random_tour(small_model, 0, rng)
        unselected = tour.unselected(small_model.node_ids())
        moves = list(ExhaustiveNeighbourhood(small_model).moves(tour, unselected))
        for move in rng.sample(moves, 20):
            before = tour.as_list()
            cost = tour.cost(small_model)
            apply_move(tour, move)
            tour.check()
            assert tour.cost(small_model) - cost == move.delta
            undo = inverse(move)
            assert evaluate(tour, small_model, undo) == undo.delta
            apply_move(tour, undo)
            tour.check()
            assert tour.as_list() == before

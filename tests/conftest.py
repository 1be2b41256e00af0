import random

import pytest
from models import Node
from distances import build_model


def make_instance(n, seed, size=1000, max_cost=500):
    rng = random.Random(seed)
    return [Node(i, rng.randrange(size), rng.randrange(size), rng.randrange(max_cost))
            for i in range(n)]


@pytest.fixture
def square_nodes():
    # unit square scaled by 10, visited in crossing order 0 -> 2 -> 1 -> 3
    return [Node(0, 0, 0), Node(1, 0, 10), Node(2, 10, 10), Node(3, 10, 0)]


@pytest.fixture
def square_model(square_nodes):
    return build_model(square_nodes, candidate_count=3)


@pytest.fixture
def small_model():
    return build_model(make_instance(20, seed=1), candidate_count=5)


@pytest.fixture
def medium_model():
    return build_model(make_instance(40, seed=7), candidate_count=6)

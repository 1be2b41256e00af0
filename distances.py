import numpy as np


def rounded_distance_matrix(xs, ys):
    """Symmetric matrix of Euclidean distances rounded to the nearest integer (halves up)."""
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    dx = xs[:, None] - xs[None, :]
    dy = ys[:, None] - ys[None, :]
    return np.floor(np.sqrt(dx ** 2 + dy ** 2) + 0.5).astype(np.int64)


def nearest_candidates(matrix, costs, k):
    """For each node, the k other nodes with the smallest distance + visiting cost.

    Ties are broken by node id. k is clamped to n - 1.
    """
    n = len(costs)
    k = max(0, min(k, n - 1))
    score = matrix + np.asarray(costs)[None, :]
    np.fill_diagonal(score, np.iinfo(np.int64).max)
    order = np.argsort(score, axis=1, kind="stable")[:, :k]
    return [row.tolist() for row in order]


class DistanceModel:
    """Read-only distance matrix, visiting costs and candidate lists.

    Lookups go through nested Python lists; numpy is only used to build them.
    """

    def __init__(self, matrix, costs, candidate_count=10):
        matrix = np.asarray(matrix, dtype=np.int64)
        costs = np.asarray(costs, dtype=np.int64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Distance matrix must be square, got shape {matrix.shape}")
        if matrix.shape[0] != len(costs):
            raise ValueError(f"Got {len(costs)} costs for {matrix.shape[0]} nodes")
        if (costs < 0).any():
            raise ValueError("Visiting costs must be non-negative")

        self.matrix = matrix
        self.costs = costs
        self._dist = matrix.tolist()
        self._cost = costs.tolist()
        self.candidate_count = max(0, min(candidate_count, len(costs) - 1))
        self._candidates = nearest_candidates(matrix, costs, self.candidate_count)

        self._links = [set(c) for c in self._candidates]
        for i, cands in enumerate(self._candidates):
            for j in cands:
                self._links[j].add(i)

    @property
    def size(self):
        return len(self._cost)

    @property
    def selection_size(self):
        """Number of nodes a tour must visit, ceil(N / 2)."""
        return (self.size + 1) // 2

    def node_ids(self):
        return set(range(self.size))

    def distance(self, i, j):
        return self._dist[i][j]

    def cost(self, i):
        return self._cost[i]

    def objective(self, i, j):
        """Cost of travelling i -> j and visiting j."""
        if i == j:
            return 0
        return self._dist[i][j] + self._cost[j]

    def candidates(self, i):
        return self._candidates[i]

    def links(self, i):
        """Nodes sharing a candidate relation with i in either direction."""
        return self._links[i]

    def linked(self, i, j):
        return j in self._links[i]

    def path_distance(self, nodes):
        return sum(self._dist[a][b] for a, b in zip(nodes, nodes[1:]))

    def path_cost(self, nodes):
        """Visiting cost of a closed node sequence, counting the repeated start once."""
        if not nodes:
            return 0
        return sum(self._cost[i] for i in nodes[:-1])

    def tour_cost(self, nodes):
        return self.path_distance(nodes) + self.path_cost(nodes)

    def __repr__(self):
        return f"DistanceModel(n={self.size}, k={self.candidate_count})"


def build_model(nodes, candidate_count=10):
    """Build a DistanceModel from Node objects ordered by id."""
    nodes = sorted(nodes, key=lambda n: n.id)
    for expected, node in enumerate(nodes):
        if node.id != expected:
            raise ValueError(f"Node ids must be 0..N-1, missing id {expected}")
    matrix = rounded_distance_matrix([n.x for n in nodes], [n.y for n in nodes])
    return DistanceModel(matrix, [n.cost for n in nodes], candidate_count)

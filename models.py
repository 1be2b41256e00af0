class Node:
    def __init__(self, id, x, y, cost=0):
        if cost < 0:
            raise ValueError(f"Visiting cost must be non-negative, got {cost!r} for node {id}")
        self.id = id
        self.x = x
        self.y = y
        self.cost = cost

    def distance(self, other):
        """Rounded Euclidean distance, halves rounded up."""
        return int(((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5 + 0.5)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return False
        return self.id == other.id

    def __hash__(self):
        return self.id

    def __repr__(self):
        return f"Node(id={self.id}, x={self.x}, y={self.y}, cost={self.cost})"


class Solution:
    """Summary of a finished tour, detached from the mutable Tour it came from."""

    def __init__(self, nodes, distance=0, cost=0, method=None, iterations=0, runs=1):
        self.nodes = list(nodes)
        self.distance = distance
        self.cost = cost
        self.method = method
        self.iterations = iterations  # accepted moves of the last descent
        self.runs = runs  # descents behind this solution

    @property
    def score(self):
        return self.distance + self.cost

    @classmethod
    def from_tour(cls, tour, model, method=None, iterations=0, runs=1):
        nodes = tour.as_list()
        return cls(
            nodes,
            distance=model.path_distance(nodes),
            cost=model.path_cost(nodes),
            method=method,
            iterations=iterations,
            runs=runs,
        )

    def __repr__(self):
        return (f"Solution(score={self.score}, dist={self.distance}, cost={self.cost}, "
                f"nodes={len(self.nodes) - 1}, method={self.method})")

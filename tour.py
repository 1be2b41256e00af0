class Tour:
    """Closed cycle over a subset of node ids.

    ``nodes`` has length M + 1 with ``nodes[0] == nodes[M]``; positions are
    0..M-1 and the closing edge (nodes[M-1], nodes[0]) is implicit in the
    repeated start. Every node's position is indexed for O(1) lookup.
    """

    def __init__(self, nodes):
        nodes = list(nodes)
        if len(nodes) < 3 or nodes[0] != nodes[-1]:
            raise ValueError(f"Tour must be closed and visit at least 2 nodes, got {nodes!r}")
        self.nodes = nodes
        self._pos = {}
        for p, node in enumerate(nodes[:-1]):
            if node in self._pos:
                raise ValueError(f"Node {node} appears twice in tour")
            self._pos[node] = p

    @classmethod
    def from_cycle(cls, cycle):
        """Build a tour from an open or already closed sequence of node ids."""
        cycle = list(cycle)
        if len(cycle) > 1 and cycle[0] == cycle[-1]:
            return cls(cycle)
        return cls(cycle + cycle[:1])

    @property
    def size(self):
        return len(self.nodes) - 1

    def __len__(self):
        return self.size

    def __iter__(self):
        return iter(self.nodes[:-1])

    def as_list(self):
        return list(self.nodes)

    def copy(self):
        return Tour(self.nodes)

    def node_at(self, position):
        return self.nodes[position]

    def position_of(self, node):
        """Position of node in the tour, -1 when it is not selected."""
        return self._pos.get(node, -1)

    def contains(self, node):
        return node in self._pos

    def _require(self, node):
        p = self._pos.get(node, -1)
        if p < 0:
            raise RuntimeError(f"Position lookup missed: node {node} is not in the tour")
        return p

    def pred(self, position):
        return self.nodes[position - 1] if position > 0 else self.nodes[-2]

    def succ(self, position):
        return self.nodes[position + 1]

    def pred_node(self, node):
        return self.pred(self._require(node))

    def succ_node(self, node):
        return self.succ(self._require(node))

    def selected(self):
        return set(self._pos)

    def unselected(self, universe):
        return set(universe) - self._pos.keys()

    def has_edge(self, u, v):
        return self.edge_direction(u, v) is not None

    def edge_direction(self, u, v):
        """True if v follows u, False if u follows v, None if (u, v) is not a tour edge."""
        p = self._pos.get(u, -1)
        if p < 0 or u == v:
            return None
        if self.succ(p) == v:
            return True
        if self.pred(p) == v:
            return False
        return None

    # Primitive mutations

    def replace(self, position, node):
        """Put an unselected node at position, dropping the node that was there."""
        if not 0 <= position < self.size:
            raise ValueError(f"Position {position} out of range for tour of size {self.size}")
        if node in self._pos:
            raise ValueError(f"Node {node} is already in the tour")
        old = self.nodes[position]
        del self._pos[old]
        self.nodes[position] = node
        if position == 0:
            self.nodes[-1] = node
        self._pos[node] = position
        return old

    def reverse(self, i, j):
        """Reverse the nodes at positions i..j inclusive."""
        if not 0 <= i <= j < self.size:
            raise ValueError(f"Cannot reverse positions {i}..{j} of tour of size {self.size}")
        self.nodes[i:j + 1] = self.nodes[i:j + 1][::-1]
        if i == 0:
            self.nodes[-1] = self.nodes[0]
        for p in range(i, j + 1):
            self._pos[self.nodes[p]] = p

    def exchange(self, i, j):
        """Swap the nodes at positions i and j."""
        if not (0 <= i < self.size and 0 <= j < self.size):
            raise ValueError(f"Cannot exchange positions {i} and {j} of tour of size {self.size}")
        nodes = self.nodes
        nodes[i], nodes[j] = nodes[j], nodes[i]
        nodes[-1] = nodes[0]
        self._pos[nodes[i]] = i
        self._pos[nodes[j]] = j

    def cost(self, model):
        return model.tour_cost(self.nodes)

    def check(self):
        """Raise RuntimeError if closure, uniqueness or the position index is broken."""
        if self.nodes[0] != self.nodes[-1]:
            raise RuntimeError(f"Tour lost closure: starts at {self.nodes[0]}, ends at {self.nodes[-1]}")
        interior = self.nodes[:-1]
        if len(set(interior)) != len(interior):
            raise RuntimeError("Tour interior contains duplicate nodes")
        if len(self._pos) != len(interior):
            raise RuntimeError("Tour position index does not match its nodes")
        for p, node in enumerate(interior):
            if self._pos.get(node) != p:
                raise RuntimeError(f"Position index says {self._pos.get(node)} for node {node} at {p}")

    def __eq__(self, other):
        if not isinstance(other, Tour):
            return False
        return self.nodes == other.nodes

    def __repr__(self):
        return f"Tour(size={self.size}, nodes={self.nodes})"

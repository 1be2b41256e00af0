"""Move catalog: inter-route node swap, intra-route 2-opt edge exchange and
intra-route node exchange.

Deltas are O(1) given the tour's position index. A negative delta improves
the objective (edge distances + visiting costs).
"""

SWAP = 0
EXCHANGE = 1
NODE_EXCHANGE = 2


def _edge(u, v):
    return (u, v) if u < v else (v, u)


class Move:
    kind = None

    def __init__(self, delta=None):
        self.delta = delta

    def key(self):
        raise NotImplementedError

    def nodes(self):
        raise NotImplementedError


class InterSwap(Move):
    """Replace selected node ``old`` with unselected node ``new`` at the same position."""

    kind = SWAP

    def __init__(self, old, new, delta=None):
        super().__init__(delta)
        self.old = old
        self.new = new

    def key(self):
        return (SWAP, self.old, self.new)

    def nodes(self):
        return (self.old, self.new)

    def __repr__(self):
        return f"InterSwap({self.old} -> {self.new}, delta={self.delta})"


class EdgeExchange(Move):
    """2-opt: remove edges (a, a_next) and (b, b_next), add (a, b) and (a_next, b_next).

    The removed edges are kept as seen when the move was built, so the move
    stays meaningful after the tour is traversed the other way round.
    """

    kind = EXCHANGE

    def __init__(self, a, a_next, b, b_next, delta=None):
        super().__init__(delta)
        self.a = a
        self.a_next = a_next
        self.b = b
        self.b_next = b_next

    def removed_edges(self):
        return (self.a, self.a_next), (self.b, self.b_next)

    def added_edges(self):
        return (self.a, self.b), (self.a_next, self.b_next)

    def key(self):
        r1, r2 = sorted((_edge(self.a, self.a_next), _edge(self.b, self.b_next)))
        n1, n2 = sorted((_edge(self.a, self.b), _edge(self.a_next, self.b_next)))
        return (EXCHANGE, r1, r2, n1, n2)

    def nodes(self):
        return (self.a, self.a_next, self.b, self.b_next)

    def __repr__(self):
        return (f"EdgeExchange(({self.a},{self.a_next}) x ({self.b},{self.b_next}), "
                f"delta={self.delta})")


class NodeExchange(Move):
    """Swap the positions of two selected nodes ``u`` and ``v``."""

    kind = NODE_EXCHANGE

    def __init__(self, u, v, delta=None):
        super().__init__(delta)
        self.u = u
        self.v = v

    def key(self):
        u, v = _edge(self.u, self.v)
        return (NODE_EXCHANGE, u, v)

    def nodes(self):
        return (self.u, self.v)

    def __repr__(self):
        return f"NodeExchange({self.u} <-> {self.v}, delta={self.delta})"


def swap_delta(tour, model, old, new):
    pred = tour.pred_node(old)
    succ = tour.succ_node(old)
    removed = model.distance(pred, old) + model.cost(old) + model.distance(old, succ)
    added = model.distance(pred, new) + model.cost(new) + model.distance(new, succ)
    return added - removed


def exchange_delta(model, a, a_next, b, b_next):
    removed = model.distance(a, a_next) + model.distance(b, b_next)
    added = model.distance(a, b) + model.distance(a_next, b_next)
    return added - removed


def exchange_allowed(tour, a, b):
    """Whether the edges leaving a and b are distinct and share no node."""
    if a == b or not tour.contains(a) or not tour.contains(b):
        return False
    return tour.succ_node(a) != b and tour.succ_node(b) != a


def make_swap(tour, model, old, new):
    if not tour.contains(old):
        raise ValueError(f"Cannot swap out node {old}: it is not in the tour")
    if tour.contains(new):
        raise ValueError(f"Cannot swap in node {new}: it is already in the tour")
    return InterSwap(old, new, swap_delta(tour, model, old, new))


def make_exchange(tour, model, a, b):
    """Edge exchange on the edges leaving a and b in the tour's current direction."""
    if not exchange_allowed(tour, a, b):
        raise ValueError(f"Edges leaving {a} and {b} are identical or adjacent")
    a_next = tour.succ_node(a)
    b_next = tour.succ_node(b)
    return EdgeExchange(a, a_next, b, b_next, exchange_delta(model, a, a_next, b, b_next))


def node_exchange_delta(tour, model, u, v):
    """Delta of swapping the positions of u and v, adjacent or not."""
    p = tour.position_of(u)
    q = tour.position_of(v)
    m = tour.size
    nodes = tour.nodes
    # starts of the edges touching either position
    starts = {(p - 1) % m, p, (q - 1) % m, q}

    def moved(node):
        if node == u:
            return v
        if node == v:
            return u
        return node

    before = after = 0
    for s in starts:
        x, y = nodes[s], nodes[s + 1]
        before += model.distance(x, y)
        after += model.distance(moved(x), moved(y))
    return after - before


def make_node_exchange(tour, model, u, v):
    if u == v or not tour.contains(u) or not tour.contains(v):
        raise ValueError(f"Cannot exchange nodes {u} and {v}: both must be distinct tour nodes")
    return NodeExchange(u, v, node_exchange_delta(tour, model, u, v))


def exchange_orientation(tour, move):
    """Current start nodes of the two removed edges, or None if the exchange is not legal.

    Legal means both edges exist and are traversed the same way round as when
    the move was built, or both the other way round.
    """
    d1 = tour.edge_direction(move.a, move.a_next)
    d2 = tour.edge_direction(move.b, move.b_next)
    if d1 is None or d2 is None or d1 != d2:
        return None
    if d1:
        return move.a, move.b
    return move.a_next, move.b_next


def evaluate(tour, model, move):
    """Delta of move against the current tour, computed from scratch."""
    if isinstance(move, InterSwap):
        return make_swap(tour, model, move.old, move.new).delta
    if isinstance(move, EdgeExchange):
        if exchange_orientation(tour, move) is None:
            raise ValueError(f"{move!r} is not a legal exchange in the current tour")
        return exchange_delta(model, move.a, move.a_next, move.b, move.b_next)
    if isinstance(move, NodeExchange):
        return make_node_exchange(tour, model, move.u, move.v).delta
    raise TypeError(f"Unknown move type: {type(move).__name__}")


def apply_move(tour, move):
    """Apply move to tour in place."""
    if isinstance(move, InterSwap):
        if tour.contains(move.new):
            raise ValueError(f"Cannot swap in node {move.new}: it is already in the tour")
        p = tour.position_of(move.old)
        if p < 0:
            raise ValueError(f"Cannot swap out node {move.old}: it is not in the tour")
        tour.replace(p, move.new)
    elif isinstance(move, EdgeExchange):
        starts = exchange_orientation(tour, move)
        if starts is None:
            raise ValueError(f"{move!r} is not a legal exchange in the current tour")
        p1 = tour.position_of(starts[0])
        p2 = tour.position_of(starts[1])
        if p1 > p2:
            p1, p2 = p2, p1
        tour.reverse(p1 + 1, p2)
    elif isinstance(move, NodeExchange):
        p1 = tour.position_of(move.u)
        p2 = tour.position_of(move.v)
        if p1 < 0 or p2 < 0:
            raise ValueError(f"{move!r} needs both nodes in the tour")
        tour.exchange(p1, p2)
    else:
        raise TypeError(f"Unknown move type: {type(move).__name__}")


def inverse(move):
    """The move that undoes ``move`` once it has been applied."""
    delta = -move.delta if move.delta is not None else None
    if isinstance(move, InterSwap):
        return InterSwap(move.new, move.old, delta)
    if isinstance(move, EdgeExchange):
        return EdgeExchange(move.a, move.b, move.a_next, move.b_next, delta)
    if isinstance(move, NodeExchange):
        return NodeExchange(move.u, move.v, delta)
    raise TypeError(f"Unknown move type: {type(move).__name__}")

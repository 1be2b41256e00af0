from moves import (
    EdgeExchange,
    InterSwap,
    NodeExchange,
    exchange_allowed,
    exchange_delta,
    exchange_orientation,
    node_exchange_delta,
    swap_delta,
)


class Neighbourhood:
    """Enumerates swap and intra-route moves for a tour.

    ``moves`` lists the whole neighbourhood, ``anchored_moves`` only the moves
    in which a given node is a swap endpoint or an endpoint of a removed edge.
    Both yield moves with their deltas filled in.
    """

    name = None
    cacheable = True

    def __init__(self, model):
        self.model = model

    def swap(self, tour, old, new):
        return InterSwap(old, new, swap_delta(tour, self.model, old, new))

    def exchange(self, tour, a, b):
        a_next = tour.succ_node(a)
        b_next = tour.succ_node(b)
        return EdgeExchange(a, a_next, b, b_next, exchange_delta(self.model, a, a_next, b, b_next))

    def moves(self, tour, unselected):
        raise NotImplementedError

    def anchored_moves(self, tour, node, unselected):
        raise NotImplementedError

    def admits(self, tour, move):
        raise NotImplementedError


class ExhaustiveNeighbourhood(Neighbourhood):
    name = "exhaustive"

    def moves(self, tour, unselected):
        outside = sorted(unselected)
        for old in tour:
            for new in outside:
                yield self.swap(tour, old, new)

        nodes = tour.nodes
        m = tour.size
        for i in range(m):
            for j in range(i + 2, m):
                if i == 0 and j == m - 1:
                    continue
                yield self.exchange(tour, nodes[i], nodes[j])

    def anchored_moves(self, tour, node, unselected):
        if not tour.contains(node):
            for old in tour:
                yield self.swap(tour, old, node)
            return

        for new in sorted(unselected):
            yield self.swap(tour, node, new)

        for start in (tour.pred_node(node), node):
            for other in tour:
                if exchange_allowed(tour, start, other):
                    yield self.exchange(tour, start, other)

    def admits(self, tour, move):
        return True


class CandidateNeighbourhood(Neighbourhood):
    """Moves that add at least one edge between candidate-linked nodes.

    A swap of ``old`` for ``new`` qualifies when ``new`` is linked to the
    predecessor or successor of ``old``; an exchange qualifies when either
    added edge is linked. Links are symmetric and fixed for the model, so the
    neighbourhood is a function of the tour alone.
    """

    name = "candidates"

    def moves(self, tour, unselected):
        seen = set()
        links = self.model.links
        for node in tour:
            pred = tour.pred_node(node)
            succ = tour.succ_node(node)
            for cand in sorted(links(node)):
                if cand in unselected:
                    for old in (pred, succ):
                        move = self.swap(tour, old, cand)
                        if move.key() not in seen:
                            seen.add(move.key())
                            yield move
                elif tour.contains(cand):
                    pairs = ((node, cand), (pred, tour.pred_node(cand)))
                    for a, b in pairs:
                        if exchange_allowed(tour, a, b):
                            move = self.exchange(tour, a, b)
                            if move.key() not in seen:
                                seen.add(move.key())
                                yield move

    def anchored_moves(self, tour, node, unselected):
        links = self.model.links
        if not tour.contains(node):
            for linked in sorted(links(node)):
                if tour.contains(linked):
                    for old in (tour.pred_node(linked), tour.succ_node(linked)):
                        yield self.swap(tour, old, node)
            return

        pred = tour.pred_node(node)
        succ = tour.succ_node(node)
        for new in sorted((links(pred) | links(succ)) & unselected):
            yield self.swap(tour, node, new)

        # removed edge (start -> end) paired with (other -> other_next) adds
        # (start, other) and (end, other_next)
        for start, end in ((node, succ), (pred, node)):
            for other in sorted(links(start)):
                if exchange_allowed(tour, start, other):
                    yield self.exchange(tour, start, other)
            for other_next in sorted(links(end)):
                if not tour.contains(other_next):
                    continue
                other = tour.pred_node(other_next)
                if exchange_allowed(tour, start, other):
                    yield self.exchange(tour, start, other)

    def admits(self, tour, move):
        linked = self.model.linked
        if isinstance(move, InterSwap):
            if not tour.contains(move.old):
                return False
            return (linked(tour.pred_node(move.old), move.new)
                    or linked(tour.succ_node(move.old), move.new))
        if isinstance(move, EdgeExchange):
            if exchange_orientation(tour, move) is None:
                return False
            return any(linked(u, v) for u, v in move.added_edges())
        return False


class NodeExchangeNeighbourhood(Neighbourhood):
    """Swaps plus every intra-route exchange of two node positions.

    Only enumerated as a whole; descents over it scan the full neighbourhood
    each iteration instead of using the move cache.
    """

    name = "nodes"
    cacheable = False

    def moves(self, tour, unselected):
        outside = sorted(unselected)
        for old in tour:
            for new in outside:
                yield self.swap(tour, old, new)

        nodes = tour.nodes
        m = tour.size
        for i in range(m):
            for j in range(i + 1, m):
                u, v = nodes[i], nodes[j]
                yield NodeExchange(u, v, node_exchange_delta(tour, self.model, u, v))

    def admits(self, tour, move):
        return True


NEIGHBOURHOODS = {
    ExhaustiveNeighbourhood.name: ExhaustiveNeighbourhood,
    CandidateNeighbourhood.name: CandidateNeighbourhood,
    NodeExchangeNeighbourhood.name: NodeExchangeNeighbourhood,
}


def make_neighbourhood(kind, model):
    if isinstance(kind, Neighbourhood):
        return kind
    try:
        return NEIGHBOURHOODS[kind](model)
    except KeyError:
        raise ValueError(f"Unknown neighbourhood {kind!r}, expected one of {sorted(NEIGHBOURHOODS)}")

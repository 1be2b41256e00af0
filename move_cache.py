"""Incremental move cache for steepest descent.

Improving moves found in earlier iterations are kept in a heap ordered by
(delta, key) together with the tour context they were computed against.
Before a cached move is used it is classified against the current tour:

    INVALID_REMOVE  a structural precondition no longer holds; drop it
    VALID_APPLY     the captured context matches exactly; the delta is exact
    RECALCULATE     the move still exists but its context shifted; recompute
    VALID_SKIP      both edges exist but their relative direction makes the
                    captured reconnection split the cycle; keep it aside and
                    look at it again after the next accepted move

After a move is applied only the moves anchored at the affected nodes are
regenerated. A newer record for the same key replaces the older one; the
superseded heap entry is discarded when it reaches the top.
"""
import heapq
import itertools
from collections import Counter

from moves import EdgeExchange, InterSwap, apply_move, exchange_delta, exchange_orientation, swap_delta

INVALID_REMOVE = "invalid_remove"
VALID_APPLY = "valid_apply"
RECALCULATE = "recalculate"
VALID_SKIP = "valid_skip"


class MoveRecord:
    def __init__(self, move):
        self.move = move
        self.key = move.key()

    @property
    def delta(self):
        return self.move.delta

    def classify(self, tour, unselected):
        raise NotImplementedError

    def recalculated(self, tour, model):
        """The same logical move with a delta computed against the current tour."""
        raise NotImplementedError


class SwapRecord(MoveRecord):
    def __init__(self, move, position, pred, succ):
        super().__init__(move)
        self.position = position
        self.pred = pred
        self.succ = succ

    def classify(self, tour, unselected):
        move = self.move
        if move.new not in unselected or tour.contains(move.new):
            return INVALID_REMOVE
        position = tour.position_of(move.old)
        if position < 0:
            return INVALID_REMOVE
        if (position == self.position
                and tour.pred(position) == self.pred
                and tour.succ(position) == self.succ):
            return VALID_APPLY
        return RECALCULATE

    def recalculated(self, tour, model):
        move = self.move
        return InterSwap(move.old, move.new, swap_delta(tour, model, move.old, move.new))

    def __repr__(self):
        return f"SwapRecord({self.move!r}, pos={self.position}, pred={self.pred}, succ={self.succ})"


class ExchangeRecord(MoveRecord):
    def __init__(self, move, positions, directions):
        super().__init__(move)
        self.positions = positions
        self.directions = directions

    def classify(self, tour, unselected):
        move = self.move
        current = (tour.edge_direction(move.a, move.a_next),
                   tour.edge_direction(move.b, move.b_next))
        if None in current:
            return INVALID_REMOVE
        same = [c == d for c, d in zip(current, self.directions)]
        if all(same):
            positions = (tour.position_of(move.a), tour.position_of(move.b))
            return VALID_APPLY if positions == self.positions else RECALCULATE
        if not any(same):
            return RECALCULATE
        return VALID_SKIP

    def recalculated(self, tour, model):
        starts = exchange_orientation(tour, self.move)
        if starts is None:
            raise ValueError(f"{self.move!r} cannot be recalculated: its edges are not aligned")
        move = self.move
        if starts[0] == move.a:
            a, a_next, b, b_next = move.a, move.a_next, move.b, move.b_next
        else:
            a, a_next, b, b_next = move.a_next, move.a, move.b_next, move.b
        return EdgeExchange(a, a_next, b, b_next, exchange_delta(model, a, a_next, b, b_next))

    def __repr__(self):
        return f"ExchangeRecord({self.move!r}, pos={self.positions}, dirs={self.directions})"


def capture(tour, move):
    """Record move together with the tour context its delta depends on."""
    if isinstance(move, InterSwap):
        position = tour.position_of(move.old)
        if position < 0:
            raise ValueError(f"Cannot capture {move!r}: node {move.old} is not in the tour")
        return SwapRecord(move, position, tour.pred(position), tour.succ(position))
    if isinstance(move, EdgeExchange):
        directions = (tour.edge_direction(move.a, move.a_next),
                      tour.edge_direction(move.b, move.b_next))
        if None in directions or directions[0] != directions[1]:
            raise ValueError(f"Cannot capture {move!r}: it is not a legal exchange")
        return ExchangeRecord(move, (tour.position_of(move.a), tour.position_of(move.b)), directions)
    raise TypeError(f"Unknown move type: {type(move).__name__}")


def affected_nodes(tour, move):
    """Nodes whose anchored moves must be regenerated once move is applied.

    Computed against the tour before the move. For a swap: both swapped nodes
    and the old node's neighbours. For an exchange: the four edge endpoints,
    their neighbours, and every node of the segment that gets reversed.
    """
    if isinstance(move, InterSwap):
        return {move.old, move.new, tour.pred_node(move.old), tour.succ_node(move.old)}
    if isinstance(move, EdgeExchange):
        starts = exchange_orientation(tour, move)
        if starts is None:
            raise ValueError(f"{move!r} is not a legal exchange in the current tour")
        affected = set()
        for node in move.nodes():
            affected.update((node, tour.pred_node(node), tour.succ_node(node)))
        p1, p2 = sorted(tour.position_of(s) for s in starts)
        affected.update(tour.nodes[p1 + 1:p2 + 1])
        return affected
    raise TypeError(f"Unknown move type: {type(move).__name__}")


class MoveCache:
    """Improving moves for one descent over one tour.

    The cache owns the set of unselected nodes and keeps it in step with the
    swaps it applies.
    """

    def __init__(self, tour, model, neighbourhood, unselected):
        self.tour = tour
        self.model = model
        self.neighbourhood = neighbourhood
        self.unselected = set(unselected)
        self.stats = Counter()
        self._heap = []
        self._live = {}
        self._skipped = []
        self._counter = itertools.count()

    def __len__(self):
        return len(self._live)

    def __contains__(self, key):
        return key in self._live

    def record(self, key):
        return self._live.get(key)

    @property
    def skipped(self):
        return list(self._skipped)

    def offer(self, move):
        """Cache move if it improves, replacing any older record with the same key."""
        if move.delta >= 0:
            self._live.pop(move.key(), None)
            return None
        record = capture(self.tour, move)
        self._push(record)
        return record

    def _push(self, record):
        self._live[record.key] = record
        heapq.heappush(self._heap, (record.delta, record.key, next(self._counter), record))

    def rebuild(self):
        """Throw everything away and score the whole neighbourhood again."""
        self._heap = []
        self._live = {}
        self._skipped = []
        for move in self.neighbourhood.moves(self.tour, self.unselected):
            self.offer(move)
        self.stats["rebuilds"] += 1

    def refresh(self, anchors):
        for node in sorted(anchors):
            for move in self.neighbourhood.anchored_moves(self.tour, node, self.unselected):
                self.offer(move)

    def pop(self):
        """Remove and return the best live record, or None when the cache is empty."""
        while self._heap:
            _, key, _, record = heapq.heappop(self._heap)
            if self._live.get(key) is record:
                del self._live[key]
                return record
        return None

    def best_delta(self):
        while self._heap:
            delta, key, _, record = self._heap[0]
            if self._live.get(key) is record:
                return delta
            heapq.heappop(self._heap)
        return None

    def classify(self, record):
        status = record.classify(self.tour, self.unselected)
        self.stats[status] += 1
        return status

    def next_move(self):
        """Best record that classifies as VALID_APPLY, or None once nothing improves."""
        while True:
            record = self.pop()
            if record is None:
                return None
            status = self.classify(record)
            if status == VALID_APPLY:
                return record
            if status == VALID_SKIP:
                self._skipped.append(record)
            elif status == RECALCULATE:
                self._recalculate(record)

    def _recalculate(self, record):
        move = record.recalculated(self.tour, self.model)
        if self.neighbourhood.admits(self.tour, move):
            self.offer(move)
        else:
            self.stats["dropped"] += 1

    def apply(self, record):
        """Apply a VALID_APPLY record to the tour; returns the affected nodes."""
        move = record.move
        affected = affected_nodes(self.tour, move)
        apply_move(self.tour, move)
        if isinstance(move, InterSwap):
            self.unselected.discard(move.new)
            self.unselected.add(move.old)
        self.stats["applied"] += 1
        return affected

    def revisit_skipped(self):
        """Classify the records set aside as VALID_SKIP again after the tour changed."""
        skipped, self._skipped = self._skipped, []
        for record in skipped:
            if record.key in self._live:
                continue
            status = self.classify(record)
            if status == VALID_APPLY:
                self._push(record)
            elif status == VALID_SKIP:
                self._skipped.append(record)
            elif status == RECALCULATE:
                self._recalculate(record)

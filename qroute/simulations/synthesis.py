"""
Per-pair path synthesis and the cost/path table built from it.

For an ordered pair (v, w) the search walks control and target towards each
other through relabelling moves until the two sit on a native edge, in either
direction. Every such *recorded* path is scored by its realized cost and the
cheapest one, followed by its restoring suffix, is what the table keeps.
"""
import time
from typing import Dict, Generator, Iterator, Optional, Tuple

import numpy as np
from attrs import field, frozen

from .connectivity import ConnectivityGraph
from .errors import ConfigurationError, FormatError
from .trans_path import (
    StepKind,
    TransformationPath,
    TransformationStep,
    cascade_gate_count,
)

from ..util.log import get_logger
logger = get_logger(__name__)


# (kind, which end moves, edge test) in the order the search tries them
_MOVES = (
    (StepKind.CAB, "control", lambda adj, a, i: adj[a, i]),
    (StepKind.CBA, "control", lambda adj, a, i: adj[i, a]),
    (StepKind.TAB, "target", lambda adj, a, i: adj[a, i]),
    (StepKind.TBA, "target", lambda adj, a, i: adj[i, a]),
)


def _lower_bound(prefix: Tuple[TransformationStep, ...]) -> int:
    """Smallest realized cost any completion of ``prefix`` can reach."""
    bound = 2 * sum(s.cost for s in prefix)
    if all(s.kind in (StepKind.CAB, StepKind.TBA) for s in prefix):
        bound = min(bound, cascade_gate_count(len(prefix)) - 1)
    return bound


def _search(adj, v, w, prefix, visited, bound, early_stop):
    if adj[v, w]:
        sent = yield TransformationPath(prefix + (TransformationStep(StepKind.NOP, (v, w)),))
        if sent is not None:
            bound = sent if bound is None else min(bound, sent)
        if early_stop:
            return bound
    elif adj[w, v]:
        sent = yield TransformationPath(prefix + (TransformationStep(StepKind.FLIP, (v, w)),))
        if sent is not None:
            bound = sent if bound is None else min(bound, sent)
        if early_stop:
            return bound

    for i in range(adj.shape[0]):
        if i in visited:
            continue
        next_visited = visited | {i}
        for kind, end, has_edge in _MOVES:
            anchor = v if end == "control" else w
            if not has_edge(adj, anchor, i):
                continue
            next_prefix = prefix + (TransformationStep(kind, (anchor, i)),)
            if bound is not None and _lower_bound(next_prefix) > bound:
                continue
            if end == "control":
                bound = yield from _search(adj, i, w, next_prefix, next_visited, bound, early_stop)
            else:
                bound = yield from _search(adj, v, i, next_prefix, next_visited, bound, early_stop)
    return bound


def enumerate_paths(
    graph: ConnectivityGraph, v: int, w: int, early_stop: bool = True
) -> Generator[TransformationPath, Optional[int], Optional[int]]:
    """Yield every recorded path for CNOT(v, w) in search order.

    With ``early_stop`` a branch ends as soon as control and target share an
    edge; without it the walk goes on past such states, which only adds
    paths that cost more. Sending an integer back into the generator prunes
    branches that cannot get below that cost.
    """
    graph.check_qubit(v)
    graph.check_qubit(w)
    if v == w:
        raise ConfigurationError(f"CNOT needs two distinct qubits, got ({v}, {w})")
    return (yield from _search(graph.adjacency, v, w, (), frozenset((v, w)), None, early_stop))


def score_path(recorded: TransformationPath) -> Tuple[int, TransformationPath]:
    """Realized cost and forward form of a recorded path, cascade when cheaper."""
    cost = recorded.realized_cost
    cascade = recorded.to_cascade()
    if cascade is not None and cascade.realized_cost < cost:
        return cascade.realized_cost, cascade
    return cost, recorded


def synthesize_path(
    graph: ConnectivityGraph, v: int, w: int
) -> Tuple[Optional[TransformationPath], int]:
    """Cheapest stored path for CNOT(v, w) and its realized cost.

    Returns ``(None, 0)`` for ``v == w`` and ``(None, -1)`` when no path
    exists.
    """
    if v == w:
        return None, 0
    best_cost, best = None, None
    explored = 0
    search = enumerate_paths(graph, v, w)
    try:
        recorded = next(search)
        while True:
            explored += 1
            cost, forward = score_path(recorded)
            if best is None or cost < best_cost:
                best_cost, best = cost, forward
            recorded = search.send(best_cost)
    except StopIteration:
        pass
    if best is None:
        return None, -1
    logger.debug(
        "cnot(%d,%d): %d recorded paths, best cost %d: %s", v, w, explored, best_cost, best
    )
    return best.with_restore(), best_cost


class CostPathTable:
    """Realized cost and stored path for every ordered pair of a graph.

    ``costs`` is an ``N x N`` read-only integer array with a zero diagonal;
    ``paths`` maps each off-diagonal pair to its stored path.
    """

    def __init__(self, costs, paths: Dict[Tuple[int, int], TransformationPath]):
        matrix = np.array(costs, dtype=np.int64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise FormatError(f"Cost table must be square, got shape {matrix.shape}")
        if (matrix < 0).any():
            raise FormatError("Cost table entries must be non-negative")
        if np.diagonal(matrix).any():
            raise FormatError("Cost table diagonal must be zero")
        size = matrix.shape[0]
        missing = [
            (v, w) for v in range(size) for w in range(size)
            if v != w and (v, w) not in paths
        ]
        if missing:
            raise FormatError(f"Cost table has no path for pairs {missing}")
        matrix.setflags(write=False)
        self._costs = matrix
        self._paths = dict(paths)

    @property
    def size(self) -> int:
        return self._costs.shape[0]

    @property
    def costs(self) -> np.ndarray:
        return self._costs

    def cost(self, v: int, w: int) -> int:
        return int(self._costs[v, w])

    def path(self, v: int, w: int) -> Optional[TransformationPath]:
        if v == w:
            return None
        return self._paths[(v, w)]

    def items(self) -> Iterator[Tuple[Tuple[int, int], TransformationPath]]:
        """Off-diagonal pairs in row-major order."""
        for v in range(self.size):
            for w in range(self.size):
                if v != w:
                    yield (v, w), self._paths[(v, w)]

    def __getitem__(self, pair) -> Optional[TransformationPath]:
        return self.path(*pair)

    def __eq__(self, other):
        if not isinstance(other, CostPathTable):
            return NotImplemented
        return np.array_equal(self._costs, other._costs) and self._paths == other._paths

    def __repr__(self):
        return f"CostPathTable(size={self.size}, total cost={int(self._costs.sum())})"


def build_cost_table(graph: ConnectivityGraph) -> CostPathTable:
    """Run :func:`synthesize_path` for every ordered pair of ``graph``."""
    start = time.perf_counter()
    size = graph.size
    costs = np.zeros((size, size), dtype=np.int64)
    paths = {}
    for v in range(size):
        for w in range(size):
            if v == w:
                continue
            path, cost = synthesize_path(graph, v, w)
            if path is None:
                logger.debug("No path for cnot(%d,%d) on %s", v, w, graph)
                raise ConfigurationError(
                    f"No transformation path for cnot({v},{w}): {graph} is not weakly connected"
                )
            costs[v, w] = cost
            paths[(v, w)] = path
    logger.debug(
        "Built cost table for %s in %.3fs, total cost %d",
        graph, time.perf_counter() - start, int(costs.sum()),
    )
    return CostPathTable(costs, paths)


def _check_context(instance, attribute, value):
    if value.size != instance.graph.size:
        raise ConfigurationError(
            f"Cost table size {value.size} does not match {instance.graph}"
        )


@frozen(eq=False)
class RoutingContext:
    """A connectivity graph bundled with its complete cost/path table."""
    graph: ConnectivityGraph
    table: CostPathTable = field(validator=_check_context)

    @classmethod
    def build(cls, graph: ConnectivityGraph) -> "RoutingContext":
        return cls(graph, build_cost_table(graph))

    @property
    def size(self) -> int:
        return self.graph.size

    def cost(self, v: int, w: int) -> int:
        return self.table.cost(v, w)

    def path(self, v: int, w: int) -> Optional[TransformationPath]:
        return self.table.path(v, w)

    def __repr__(self):
        return f"RoutingContext({self.graph.name}, size={self.size})"

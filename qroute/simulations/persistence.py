"""
Text persistence for a routing context and the edge-list graph reader.

Layout written by :func:`dumps`::

    5
    - X X - -            adjacency rows, outgoing edges of qubit i
    ...
    0 3 3 10 10          cost rows
    ...
    cnot(0,1) =>         one block per ordered pair, row-major
    nop 0 1
    cost = 0
    ...
"""
import re
from typing import Iterator, List, Tuple

import numpy as np

from .connectivity import ConnectivityGraph
from .errors import ConfigurationError, FormatError
from .synthesis import CostPathTable, RoutingContext
from .trans_path import StepKind, TransformationPath, TransformationStep

from ..util.log import get_logger
logger = get_logger(__name__)


_MARKER = re.compile(r"^cnot\(\s*(\d+)\s*,\s*(\d+)\s*\)\s*=>(.*)$")
_COST = re.compile(r"^cost\s*=\s*(-?\d+)\s*$")


def dumps(context: RoutingContext) -> str:
    graph, table = context.graph, context.table
    lines = [str(graph.size)]
    lines.extend(graph.rows())
    lines.extend(" ".join(str(int(c)) for c in row) for row in table.costs)
    for (v, w), path in table.items():
        lines.append(f"cnot({v},{w}) => ")
        lines.extend(str(s) for s in path)
        lines.append(f"cost = {table.cost(v, w)}")
    return "\n".join(lines) + "\n"


def save(context: RoutingContext, path) -> None:
    with open(path, "w") as f:
        f.write(dumps(context))
    logger.debug("Saved %r to %s", context, path)


class _Lines:
    """Non-blank stripped lines with their 1-based line numbers."""

    def __init__(self, text: str):
        self._lines = [
            (n, line.strip()) for n, line in enumerate(text.splitlines(), start=1)
            if line.strip()
        ]
        self._pos = 0

    def next(self, what: str) -> Tuple[int, str]:
        if self._pos >= len(self._lines):
            raise FormatError(f"Unexpected end of input, expected {what}")
        item = self._lines[self._pos]
        self._pos += 1
        return item

    def peek(self):
        if self._pos >= len(self._lines):
            return None
        return self._lines[self._pos]


def _parse_int(token: str, where: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise FormatError(f"{where}: {what} must be an integer, got {token!r}") from None


def _parse_steps(tokens: List[str], lineno: int, size: int) -> Iterator[TransformationStep]:
    pos = 0
    while pos < len(tokens):
        token = tokens[pos]
        try:
            kind = StepKind.from_token(token)
        except ValueError:
            raise FormatError(f"line {lineno}: unknown step kind {token!r}") from None
        operands = tokens[pos + 1:pos + 1 + kind.arity]
        if len(operands) != kind.arity:
            raise FormatError(
                f"line {lineno}: {token} needs {kind.arity} operands, got {len(operands)}"
            )
        qubits = tuple(_parse_int(t, f"line {lineno}", "step operand") for t in operands)
        if any(not 0 <= q < size for q in qubits):
            raise FormatError(f"line {lineno}: step operand outside [0, {size}): {qubits}")
        try:
            parsed = TransformationStep(kind, qubits)
        except ValueError as exc:
            raise FormatError(f"line {lineno}: {exc}") from None
        yield parsed
        pos += 1 + kind.arity


def loads(text: str) -> RoutingContext:
    """Parse :func:`dumps` output into a new :class:`RoutingContext`.

    Raises:
        FormatError: malformed or inconsistent input.
    """
    lines = _Lines(text)
    lineno, line = lines.next("the qubit count")
    size = _parse_int(line, f"line {lineno}", "qubit count")
    if size <= 0:
        raise FormatError(f"line {lineno}: qubit count must be positive, got {size}")

    rows = [lines.next(f"adjacency row {i}")[1] for i in range(size)]
    graph = ConnectivityGraph.from_rows(rows)

    costs = np.zeros((size, size), dtype=np.int64)
    for i in range(size):
        lineno, line = lines.next(f"cost row {i}")
        tokens = line.split()
        if len(tokens) != size:
            raise FormatError(f"line {lineno}: cost row has {len(tokens)} entries, expected {size}")
        costs[i] = [_parse_int(t, f"line {lineno}", "cost") for t in tokens]

    paths = {}
    for v in range(size):
        for w in range(size):
            if v == w:
                continue
            lineno, line = lines.next(f"the cnot({v},{w}) marker")
            match = _MARKER.match(line)
            if match is None:
                raise FormatError(f"line {lineno}: expected 'cnot({v},{w}) =>', got {line!r}")
            pair = (int(match.group(1)), int(match.group(2)))
            if pair != (v, w):
                raise FormatError(f"line {lineno}: expected cnot({v},{w}), got cnot{pair}")

            steps = list(_parse_steps(match.group(3).split(), lineno, size))
            while True:
                lineno, line = lines.next(f"the cost line of cnot({v},{w})")
                if line.startswith("cost"):
                    break
                steps.extend(_parse_steps(line.split(), lineno, size))

            cost_match = _COST.match(line)
            if cost_match is None:
                raise FormatError(f"line {lineno}: malformed cost line {line!r}")
            cost = int(cost_match.group(1))
            if cost != costs[v, w]:
                raise FormatError(
                    f"line {lineno}: cnot({v},{w}) cost {cost} disagrees with the table entry {costs[v, w]}"
                )
            if not steps:
                raise FormatError(f"line {lineno}: cnot({v},{w}) has an empty path")
            path = TransformationPath(steps)
            if path.overhead != cost:
                raise FormatError(
                    f"line {lineno}: cnot({v},{w}) path {path} costs {path.overhead}, file says {cost}"
                )
            paths[(v, w)] = path

    if lines.peek() is not None:
        lineno, line = lines.peek()
        raise FormatError(f"line {lineno}: trailing data {line!r}")

    try:
        context = RoutingContext(graph, CostPathTable(costs, paths))
    except ConfigurationError as exc:
        raise FormatError(str(exc)) from exc
    logger.debug("Loaded %r", context)
    return context


def load(path) -> RoutingContext:
    with open(path) as f:
        text = f.read()
    logger.debug("Loading routing context from %s", path)
    return loads(text)


def read_graph(path, name: str = None) -> ConnectivityGraph:
    """Read the edge-list format: the qubit count, then ``v w`` pairs."""
    with open(path) as f:
        tokens = f.read().split()
    if not tokens:
        raise FormatError(f"{path}: empty graph file")
    size = _parse_int(tokens[0], str(path), "qubit count")
    numbers = [_parse_int(t, str(path), "edge endpoint") for t in tokens[1:]]
    if len(numbers) % 2:
        raise FormatError(f"{path}: dangling edge endpoint {numbers[-1]}")
    edges = list(zip(numbers[0::2], numbers[1::2]))
    return ConnectivityGraph.from_edges(size, edges, name=name)

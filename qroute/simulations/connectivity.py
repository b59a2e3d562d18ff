from typing import Iterable, List, Sequence, Tuple

import numpy as np
import networkx as nx

from .errors import ConfigurationError, FormatError

from ..util.log import get_logger
logger = get_logger(__name__)


class ConnectivityGraph:
    """Directed coupling graph of a device.

    ``adjacency[v, w]`` is True iff the hardware runs CNOT(control=v, target=w)
    natively. The matrix is copied on construction and made read-only, the
    diagonal is always False.
    """

    def __init__(self, adjacency, name: str = None):
        try:
            matrix = np.array(adjacency, dtype=bool)
        except (TypeError, ValueError) as exc:
            raise FormatError(f"Adjacency data is not a boolean matrix: {exc}") from exc
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise FormatError(f"Adjacency matrix must be square, got shape {matrix.shape}")
        if matrix.shape[0] == 0:
            raise FormatError("Connectivity graph needs at least one qubit")
        if matrix.diagonal().any():
            loops = [int(q) for q in np.flatnonzero(matrix.diagonal())]
            raise FormatError(f"Connectivity graph has self loops on qubits {loops}")
        matrix.setflags(write=False)
        self._adjacency = matrix
        self.name = name or f"graph{matrix.shape[0]}"
        logger.debug("%s initialised: |V|=%d, |E|=%d", self, self.size, int(matrix.sum()))

    # -- alternative constructors --------------------------------------------
    @classmethod
    def from_edges(cls, size: int, edges: Iterable[Tuple[int, int]], name: str = None):
        """Build from ``(control, target)`` pairs."""
        if not isinstance(size, (int, np.integer)) or size <= 0:
            raise FormatError(f"Graph size must be a positive integer, got {size!r}")
        matrix = np.zeros((size, size), dtype=bool)
        for v, w in edges:
            if not (0 <= v < size and 0 <= w < size):
                raise ConfigurationError(
                    f"Edge ({v}, {w}) references a qubit outside [0, {size})"
                )
            if v == w:
                raise FormatError(f"Self loop on qubit {v}")
            matrix[v, w] = True
        return cls(matrix, name=name)

    @classmethod
    def from_networkx(cls, graph: nx.DiGraph, name: str = None):
        """Nodes must be the integers ``0..N-1``; an undirected graph gives both directions."""
        nodes = sorted(graph.nodes)
        if nodes != list(range(len(nodes))):
            raise FormatError(f"Graph nodes must be 0..N-1, got {nodes}")
        edges = list(graph.edges)
        if not graph.is_directed():
            edges += [(w, v) for v, w in edges]
        return cls.from_edges(len(nodes), edges, name=name or graph.name or None)

    @classmethod
    def from_rows(cls, rows: Sequence[str], name: str = None):
        """Parse ``X``/``-`` rows, one row of outgoing edges per qubit."""
        size = len(rows)
        matrix = np.zeros((size, size), dtype=bool)
        for i, row in enumerate(rows):
            tokens = row.split()
            if len(tokens) != size:
                raise FormatError(
                    f"Row {i} has {len(tokens)} entries, expected {size}: {row!r}"
                )
            for j, token in enumerate(tokens):
                if token not in ("X", "-"):
                    raise FormatError(f"Unknown adjacency token {token!r} in row {i}")
                matrix[i, j] = token == "X"
        return cls(matrix, name=name)

    # -- queries -------------------------------------------------------------
    @property
    def size(self) -> int:
        return self._adjacency.shape[0]

    @property
    def adjacency(self) -> np.ndarray:
        return self._adjacency

    def __len__(self):
        return self.size

    def has_edge(self, v: int, w: int) -> bool:
        return bool(self._adjacency[v, w])

    def check_qubit(self, q: int) -> int:
        if not 0 <= q < self.size:
            raise ConfigurationError(f"Physical qubit {q} outside [0, {self.size})")
        return q

    def edges(self) -> List[Tuple[int, int]]:
        return [(int(v), int(w)) for v, w in zip(*np.nonzero(self._adjacency))]

    def successors(self, v: int) -> List[int]:
        return [int(w) for w in np.flatnonzero(self._adjacency[v])]

    def predecessors(self, w: int) -> List[int]:
        return [int(v) for v in np.flatnonzero(self._adjacency[:, w])]

    def incident_degree(self, q: int) -> int:
        """Edges into plus edges out of ``q``."""
        return int(self._adjacency[q].sum() + self._adjacency[:, q].sum())

    def to_networkx(self) -> nx.DiGraph:
        graph = nx.DiGraph(name=self.name)
        graph.add_nodes_from(range(self.size))
        graph.add_edges_from(self.edges())
        return graph

    def is_weakly_connected(self) -> bool:
        return nx.is_weakly_connected(self.to_networkx())

    def rows(self) -> List[str]:
        """``X``/``-`` rows as written by the persistence layer."""
        return [
            " ".join("X" if flag else "-" for flag in row) for row in self._adjacency
        ]

    def __eq__(self, other):
        if not isinstance(other, ConnectivityGraph):
            return NotImplemented
        return np.array_equal(self._adjacency, other._adjacency)

    def __hash__(self):
        return hash(self._adjacency.tobytes())

    def __repr__(self):
        return f"ConnectivityGraph({self.name}, num qubits={self.size})"

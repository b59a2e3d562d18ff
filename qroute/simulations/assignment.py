"""
Logical-to-physical qubit assignment.

An assignment ``a`` puts logical line ``l`` on physical qubit ``a[l]``. Its
cost is the overhead the expander will add for the circuit's CNOTs:

    sum over (c, t) of occurrence[c, t] * table[a[c], a[t]]
"""
import itertools
import math
import time
from typing import Sequence, Tuple

import numpy as np
from attrs import field, frozen

from .. import config
from .errors import ConfigurationError
from .quantum import QuantumCircuit
from .synthesis import CostPathTable, RoutingContext

from ..util.log import get_logger
logger = get_logger(__name__)


STRATEGIES = ("auto", "exhaustive", "heuristic")


def _as_assignments(values) -> Tuple[Tuple[int, ...], ...]:
    return tuple(tuple(int(q) for q in a) for a in values)


@frozen
class AssignmentResult:
    strategy: str
    cost: int = field(converter=int)
    assignments: Tuple[Tuple[int, ...], ...] = field(converter=_as_assignments)
    evaluated: int = 0

    @property
    def best(self) -> Tuple[int, ...]:
        """First minimal assignment in enumeration order."""
        return self.assignments[0]


def _cost_matrix(table) -> np.ndarray:
    if isinstance(table, RoutingContext):
        return table.table.costs
    if isinstance(table, CostPathTable):
        return table.costs
    costs = np.asarray(table)
    if costs.ndim != 2 or costs.shape[0] != costs.shape[1]:
        raise ConfigurationError(f"Cost table must be square, got shape {costs.shape}")
    return costs


def _check_sizes(occurrence: np.ndarray, costs: np.ndarray) -> Tuple[int, int]:
    if occurrence.ndim != 2 or occurrence.shape[0] != occurrence.shape[1]:
        raise ConfigurationError(f"Occurrence matrix must be square, got shape {occurrence.shape}")
    logical, physical = occurrence.shape[0], costs.shape[0]
    if logical > physical:
        raise ConfigurationError(
            f"{logical} logical qubits do not fit on {physical} physical qubits"
        )
    return logical, physical


def occurrence_matrix(circuit: QuantumCircuit, size: int = None) -> np.ndarray:
    """``m[c, t]`` counts the CNOTs with control line ``c`` and target line ``t``."""
    size = circuit.qubit_count if size is None else size
    if size < circuit.qubit_count:
        raise ConfigurationError(
            f"Occurrence matrix of size {size} cannot hold {circuit.qubit_count} lines"
        )
    counts = np.zeros((size, size), dtype=np.int64)
    for instr in circuit:
        if instr.is_cnot():
            counts[instr.controls[0].line, instr.targets[0]] += 1
    return counts


def check_assignment(assignment: Sequence[int], logical: int, physical: int) -> Tuple[int, ...]:
    assignment = tuple(int(q) for q in assignment)
    if len(assignment) != logical:
        raise ConfigurationError(
            f"Assignment {assignment} has {len(assignment)} entries, expected {logical}"
        )
    if any(not 0 <= q < physical for q in assignment):
        raise ConfigurationError(f"Assignment {assignment} leaves [0, {physical})")
    if len(set(assignment)) != len(assignment):
        raise ConfigurationError(f"Assignment {assignment} is not injective")
    return assignment


def assignment_cost(occurrence, table, assignment: Sequence[int]) -> int:
    occurrence = np.asarray(occurrence)
    costs = _cost_matrix(table)
    logical, physical = _check_sizes(occurrence, costs)
    assignment = check_assignment(assignment, logical, physical)
    return _total(occurrence, costs, assignment)


def _total(occurrence: np.ndarray, costs: np.ndarray, assignment) -> int:
    index = list(assignment)
    return int((occurrence * costs[np.ix_(index, index)]).sum())


def exhaustive_search(occurrence, table, max_candidates: int = None) -> AssignmentResult:
    """Score every injective assignment, keeping all minimal ones.

    Candidates come as each size-L combination of physical qubits in
    lexicographic order, then every permutation of it.
    """
    occurrence = np.asarray(occurrence)
    costs = _cost_matrix(table)
    logical, physical = _check_sizes(occurrence, costs)
    candidates = math.perm(physical, logical)
    if max_candidates is not None and candidates > max_candidates:
        raise ConfigurationError(
            f"Exhaustive search over {candidates} assignments exceeds the limit of {max_candidates}"
        )

    start = time.perf_counter()
    best_cost, best = None, []
    evaluated = 0
    for subset in itertools.combinations(range(physical), logical):
        for assignment in itertools.permutations(subset):
            evaluated += 1
            cost = _total(occurrence, costs, assignment)
            if best_cost is None or cost < best_cost:
                best_cost, best = cost, [assignment]
            elif cost == best_cost:
                best.append(assignment)
    logger.debug(
        "Exhaustive search: %d candidates in %.3fs, cost %d, %d optimal assignments",
        evaluated, time.perf_counter() - start, best_cost, len(best),
    )
    return AssignmentResult("exhaustive", best_cost, best, evaluated)


def heuristic_search(occurrence, table) -> AssignmentResult:
    """Greedy pivot-and-swap placement.

    The occurrence matrix is padded to one slot per physical qubit and slot
    ``s`` starts on qubit ``s``. Each round takes the unplaced slot with the
    largest cost-weighted CNOT load (more CNOTs, then lower index, on ties),
    tries exchanging its qubit with every other unplaced slot and keeps the
    cheapest layout, then marks that slot placed.
    """
    occurrence = np.asarray(occurrence)
    costs = _cost_matrix(table)
    logical, physical = _check_sizes(occurrence, costs)

    padded = np.zeros((physical, physical), dtype=np.int64)
    padded[:logical, :logical] = occurrence
    cnots = padded.sum(axis=0) + padded.sum(axis=1)

    layout = list(range(physical))
    placed = set()
    evaluated = 1
    total = _total(padded, costs, layout)
    for _ in range(physical):
        unplaced = [s for s in range(physical) if s not in placed]
        weighted = padded * costs[np.ix_(layout, layout)]
        load = weighted.sum(axis=0) + weighted.sum(axis=1)
        pivot = max(unplaced, key=lambda s: (load[s], cnots[s], -s))

        best_layout, best_total = layout, total
        for other in unplaced:
            if other == pivot:
                continue
            trial = list(layout)
            trial[pivot], trial[other] = trial[other], trial[pivot]
            evaluated += 1
            trial_total = _total(padded, costs, trial)
            if trial_total < best_total:
                best_layout, best_total = trial, trial_total
        layout, total = best_layout, best_total
        placed.add(pivot)

    assignment = tuple(layout[:logical])
    logger.debug("Heuristic search: %d layouts tried, cost %d, assignment %s", evaluated, total, assignment)
    return AssignmentResult("heuristic", total, [assignment], evaluated)


def search_assignment(
    occurrence, table, strategy: str = "auto", limit: int = None
) -> AssignmentResult:
    """Pick the strategy and run it.

    ``auto`` enumerates exhaustively while ``N!/(N-L)!`` stays within
    ``limit`` (``config.EXHAUSTIVE_LIMIT`` by default) and falls back to the
    heuristic beyond that.
    """
    if strategy not in STRATEGIES:
        raise ConfigurationError(f"Unknown assignment strategy {strategy!r}, expected one of {STRATEGIES}")
    occurrence = np.asarray(occurrence)
    costs = _cost_matrix(table)
    logical, physical = _check_sizes(occurrence, costs)
    limit = config.EXHAUSTIVE_LIMIT if limit is None else limit

    if strategy == "auto":
        candidates = math.perm(physical, logical)
        strategy = "exhaustive" if candidates <= limit else "heuristic"
        logger.debug("auto strategy: %d candidates, limit %d -> %s", candidates, limit, strategy)
    if strategy == "exhaustive":
        return exhaustive_search(occurrence, costs)
    return heuristic_search(occurrence, costs)

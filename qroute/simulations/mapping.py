from typing import Optional, Sequence, Tuple

from attrs import frozen

from .assignment import (
    AssignmentResult,
    assignment_cost,
    occurrence_matrix,
    search_assignment,
)
from .errors import ConfigurationError
from .expansion import expand_cnots
from .quantum import QuantumCircuit
from .synthesis import RoutingContext

from ..util.log import get_logger
logger = get_logger(__name__)


@frozen(eq=False)
class MappingResult:
    circuit: QuantumCircuit
    assignment: Tuple[int, ...]
    cost: int
    search: Optional[AssignmentResult] = None


def map_circuit(
    circuit: QuantumCircuit,
    context: RoutingContext,
    strategy: str = "auto",
    assignment: Sequence[int] = None,
) -> MappingResult:
    """Place ``circuit`` on the device of ``context`` and rewrite its CNOTs.

    Without an explicit ``assignment`` the first best one found by
    :func:`search_assignment` is used. The rewritten circuit has one line
    per physical qubit and ``cost`` extra gates, plus two ``X`` for every
    negatively controlled CNOT.
    """
    if circuit.qubit_count > context.size:
        raise ConfigurationError(
            f"Circuit has {circuit.qubit_count} lines but {context.graph} has only "
            f"{context.size} qubits"
        )
    occurrence = occurrence_matrix(circuit)
    if assignment is None:
        search = search_assignment(occurrence, context, strategy=strategy)
        chosen, cost = search.best, search.cost
    else:
        search = None
        cost = assignment_cost(occurrence, context, assignment)
        chosen = tuple(int(q) for q in assignment)

    placed = circuit.permute_lines(chosen, qubit_count=context.size)
    expanded = expand_cnots(placed, context)
    logger.debug(
        "Mapped %r onto %s with assignment %s, expected overhead %d",
        circuit, context.graph, chosen, cost,
    )
    return MappingResult(expanded, chosen, cost, search)

"""
Rewrite a circuit so every CNOT runs along a native edge.
"""
from typing import List

from .errors import ConfigurationError, UnsupportedGateError
from .quantum import QuantumCircuit, QuantumInstruction
from .quantum_gates import SINGLE_QUBIT_GATES, H, X
from .quantum_util import Control
from .synthesis import RoutingContext
from .trans_path import StepKind, TransformationPath, TransformationStep

from ..util.log import get_logger
logger = get_logger(__name__)


def _cx(control: int, target: int) -> QuantumInstruction:
    return QuantumInstruction(X(), (target,), (Control(control),))


def _h(target: int) -> QuantumInstruction:
    return QuantumInstruction(H(), (target,))


def _lower_nop(a, b):
    return [_cx(a, b)]


def _lower_flip(a, b):
    return [_h(a), _h(b), _cx(b, a), _h(a), _h(b)]


def _lower_cab(a, b):
    return [_h(a), _h(b), _cx(a, b), _h(a), _h(b), _cx(a, b)]


def _lower_cba(a, b):
    return [_cx(b, a), _h(a), _h(b), _cx(b, a), _h(b)]


def _lower_tab(a, b):
    return [_cx(a, b), _h(a), _h(b), _cx(a, b), _h(b)]


def _lower_tba(a, b):
    return [_h(a), _h(b), _cx(b, a), _h(a), _h(b), _cx(b, a)]


_FORWARD = {
    StepKind.NOP: _lower_nop,
    StepKind.FLIP: _lower_flip,
    StepKind.CAB: _lower_cab,
    StepKind.CBA: _lower_cba,
    StepKind.TAB: _lower_tab,
    StepKind.TBA: _lower_tba,
}


def lower_step(step: TransformationStep) -> List[QuantumInstruction]:
    """Native gates for one two-operand step.

    An inverse move is its forward sequence played backwards (every gate in
    it is self-inverse).
    """
    kind = step.kind
    if kind is StepKind.CNOT3:
        raise ValueError("cnot3 steps are lowered by lower_path, they depend on the cascade so far")
    a, b = step.qubits
    if kind in _FORWARD:
        return _FORWARD[kind](a, b)
    return list(reversed(_FORWARD[kind.inverse()](a, b)))


def lower_path(path: TransformationPath) -> List[QuantumInstruction]:
    """Native gates for a whole stored path.

    Consecutive ``cnot3`` steps build one cascade: the first emits
    ``CX(a,b) CX(b,c) CX(a,b) CX(b,c)``, every later one appends ``CX(b,c)``,
    a replay of the cascade so far, and ``CX(b,c)`` again.
    """
    out: List[QuantumInstruction] = []
    block: List[QuantumInstruction] = []
    for step in path:
        if step.kind is StepKind.CNOT3:
            a, b, c = step.qubits
            if not block:
                block = [_cx(a, b), _cx(b, c), _cx(a, b), _cx(b, c)]
            else:
                block = block + [_cx(b, c)] + block + [_cx(b, c)]
            continue
        if block:
            out.extend(block)
            block = []
        out.extend(lower_step(step))
    out.extend(block)
    return out


def expand_cnots(circuit: QuantumCircuit, context: RoutingContext) -> QuantumCircuit:
    """Return a new circuit whose CNOTs all follow native edges of ``context.graph``.

    Line ``l`` of ``circuit`` is taken to be physical qubit ``l``; missing
    physical lines are added idle. Single-qubit gates are copied through and
    a negative control is wrapped in ``X`` on its line.

    Raises:
        ConfigurationError: the circuit has more lines than the device has qubits.
        UnsupportedGateError: any gate besides single-qubit gates and CNOT.
    """
    if circuit.qubit_count > context.size:
        raise ConfigurationError(
            f"Circuit has {circuit.qubit_count} lines but {context.graph} has only "
            f"{context.size} qubits"
        )
    result = circuit.copy_metadata()
    while result.qubit_count < context.size:
        result.add_line()

    rewritten = 0
    for position, instr in enumerate(circuit):
        if instr.is_single_qubit() and instr.gate.name in SINGLE_QUBIT_GATES:
            result.add_instruction(instr)
            continue
        if not instr.is_cnot():
            logger.debug("Cannot lower %r at position %d", instr, position)
            raise UnsupportedGateError(position, instr.gate)

        control = instr.controls[0]
        target = instr.targets[0]
        if not control.polarity:
            result.add_instruction(QuantumInstruction(X(), (control.line,)))
        path = context.path(control.line, target)
        for lowered in lower_path(path):
            result.add_instruction(lowered)
        if len(path) > 1 or path[0].kind is not StepKind.NOP:
            rewritten += 1
        if not control.polarity:
            result.add_instruction(QuantumInstruction(X(), (control.line,)))

    logger.debug(
        "Expanded %d -> %d gates on %s, %d CNOTs rewritten",
        len(circuit), len(result), context.graph, rewritten,
    )
    return result

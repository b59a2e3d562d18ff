"""
Transformation steps and paths.

A path is the recipe for one logical CNOT on a device that lacks the edge:
relabelling moves walk the control and target towards each other, a ``nop``
or ``flip`` applies the CNOT on a (possibly reversed) native edge, and the
inverse suffix walks the qubits back. ``cnot3`` steps realize the same CNOT
as a conjugation cascade along a directed chain instead.

A cascade is priced by the CNOTs it actually emits, ``2**n + 2**(n+1) - 2``
less the logical CNOT itself, and not by the ``2 * sum - last`` rule used for
relabelling paths.
"""
from enum import Enum
from typing import Tuple, Optional

from attrs import field, frozen, validators

from ..util.log import get_logger
logger = get_logger(__name__)


class StepKind(Enum):
    """Step kinds; the value is the persisted token."""
    CAB = "cab"      # control advances along edge a->b
    CBA = "cba"      # control retreats along edge b->a
    TAB = "tab"      # target advances along edge a->b
    TBA = "tba"      # target retreats along edge b->a
    CABI = "cabi"
    CBAI = "cbai"
    TABI = "tabi"
    TBAI = "tbai"
    NOP = "nop"      # native CNOT(a, b)
    FLIP = "flip"    # CNOT(a, b) on the reversed edge b->a
    CNOT3 = "cnot3"  # cascade step, three operands

    @property
    def cost(self) -> int:
        return _STEP_COSTS[self]

    @property
    def arity(self) -> int:
        return 3 if self is StepKind.CNOT3 else 2

    @property
    def is_move(self) -> bool:
        return self in _INVERSES and self is not _INVERSES[self]

    def inverse(self) -> "StepKind":
        return _INVERSES[self]

    @classmethod
    def from_token(cls, token: str) -> "StepKind":
        return cls(token)


# overhead gates added by the lowering of each kind, see expansion.lower_step
_STEP_COSTS = {
    StepKind.CAB: 6,
    StepKind.CBA: 5,
    StepKind.TAB: 5,
    StepKind.TBA: 6,
    StepKind.CABI: 6,
    StepKind.CBAI: 5,
    StepKind.TABI: 5,
    StepKind.TBAI: 6,
    StepKind.NOP: 0,
    StepKind.FLIP: 4,
    StepKind.CNOT3: 3,
}

_INVERSES = {
    StepKind.CAB: StepKind.CABI,
    StepKind.CBA: StepKind.CBAI,
    StepKind.TAB: StepKind.TABI,
    StepKind.TBA: StepKind.TBAI,
    StepKind.CABI: StepKind.CAB,
    StepKind.CBAI: StepKind.CBA,
    StepKind.TABI: StepKind.TAB,
    StepKind.TBAI: StepKind.TBA,
    StepKind.NOP: StepKind.NOP,
    StepKind.FLIP: StepKind.FLIP,
    StepKind.CNOT3: StepKind.CNOT3,
}


def cascade_gate_count(n: int) -> int:
    """CNOTs emitted by ``n`` chained cnot3 steps."""
    if n < 0:
        raise ValueError(f"Cascade length must be non-negative, got {n}")
    if n == 0:
        return 0
    return 2 ** n + 2 ** (n + 1) - 2


def _check_operands(instance, attribute, value):
    kind = instance.kind
    if len(value) != kind.arity:
        raise ValueError(
            f"{kind.value} takes {kind.arity} operands, got {len(value)}: {value}"
        )
    if len(set(value)) != len(value):
        raise ValueError(f"{kind.value} operands must be distinct, got {value}")
    if any(q < 0 for q in value):
        raise ValueError(f"{kind.value} operands must be non-negative, got {value}")


def _as_int_tuple(values) -> Tuple[int, ...]:
    return tuple(int(v) for v in values)


@frozen
class TransformationStep:
    kind: StepKind = field(validator=validators.instance_of(StepKind))
    qubits: Tuple[int, ...] = field(converter=_as_int_tuple, validator=_check_operands)

    @property
    def cost(self) -> int:
        return self.kind.cost

    def inverse(self) -> "TransformationStep":
        return TransformationStep(self.kind.inverse(), self.qubits)

    def __str__(self):
        return " ".join([self.kind.value] + [str(q) for q in self.qubits])


def step(kind, *qubits) -> TransformationStep:
    """``step("cab", 0, 2)`` shorthand."""
    if not isinstance(kind, StepKind):
        kind = StepKind.from_token(kind)
    return TransformationStep(kind, qubits)


@frozen
class TransformationPath:
    """Ordered, immutable sequence of steps.

    A *recorded* path is the forward part found by the search and ends in a
    ``nop`` or ``flip``; :meth:`with_restore` turns it into the stored form.
    A *cascade* path consists of ``cnot3`` steps only.
    """
    steps: Tuple[TransformationStep, ...] = field(converter=tuple, factory=tuple)

    @property
    def cost(self) -> int:
        """Plain sum of the step costs."""
        return sum(s.cost for s in self.steps)

    @property
    def is_cascade(self) -> bool:
        return bool(self.steps) and all(s.kind is StepKind.CNOT3 for s in self.steps)

    @property
    def realized_cost(self) -> int:
        """Gates added on top of the original CNOT once this path is lowered.

        For a recorded path the moves are paid twice (forward and restore)
        and the final step once.
        """
        if not self.steps:
            return 0
        if self.is_cascade:
            return cascade_gate_count(len(self.steps)) - 1
        return 2 * self.cost - self.steps[-1].cost

    @property
    def overhead(self) -> int:
        """Gates added by lowering this path exactly as stored."""
        if self.is_cascade:
            return cascade_gate_count(len(self.steps)) - 1
        return self.cost

    def inverse_suffix(self) -> "TransformationPath":
        return TransformationPath(s.inverse() for s in reversed(self.steps[:-1]))

    def with_restore(self) -> "TransformationPath":
        if self.is_cascade:
            return self
        return TransformationPath(self.steps + self.inverse_suffix().steps)

    def chain(self) -> Optional[Tuple[int, ...]]:
        """Directed chain walked by a ``cab``/``tba`` path ending in ``nop``.

        Returns ``None`` when the path has any other shape.
        """
        if len(self.steps) < 2 or self.steps[-1].kind is not StepKind.NOP:
            return None
        control_side, target_side = [], []
        for s in self.steps[:-1]:
            if s.kind is StepKind.CAB:
                if not control_side:
                    control_side.append(s.qubits[0])
                control_side.append(s.qubits[1])
            elif s.kind is StepKind.TBA:
                if not target_side:
                    target_side.append(s.qubits[0])
                target_side.append(s.qubits[1])
            else:
                return None
        last = self.steps[-1].qubits
        if not control_side:
            control_side = [last[0]]
        if not target_side:
            target_side = [last[1]]
        return tuple(control_side) + tuple(reversed(target_side))

    def to_cascade(self) -> Optional["TransformationPath"]:
        chain = self.chain()
        if chain is None:
            return None
        head = chain[0]
        return TransformationPath(
            TransformationStep(StepKind.CNOT3, (head, chain[k], chain[k + 1]))
            for k in range(1, len(chain) - 1)
        )

    def __len__(self):
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __getitem__(self, item):
        return self.steps[item]

    def __str__(self):
        return ", ".join(str(s) for s in self.steps)

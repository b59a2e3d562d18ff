from typing import List, Tuple, Dict, Iterator, Sequence, Optional

from .quantum_gates import QuantumGate, X, H
from .quantum_util import Control, as_controls

from ..util.log import get_logger
logger = get_logger(__name__)


class QuantumInstruction:
    def __init__(self, gate, targets, controls=()):
        self.gate: QuantumGate = gate
        self.targets: Tuple[int, ...] = tuple(int(t) for t in targets)
        self.controls: Tuple[Control, ...] = as_controls(controls)
        if not self.targets:
            raise ValueError(f"{gate!r} needs at least one target line")

    @property
    def gate_indices(self) -> Tuple[int, ...]:
        """Every line the instruction touches, controls first."""
        return tuple(c.line for c in self.controls) + self.targets

    @property
    def control_lines(self) -> Tuple[int, ...]:
        return tuple(c.line for c in self.controls)

    def is_cnot(self) -> bool:
        return (
            self.gate.name == "X"
            and len(self.controls) == 1
            and len(self.targets) == 1
        )

    def is_single_qubit(self) -> bool:
        return not self.controls and len(self.targets) == 1 and self.gate.num_qubits == 1

    def relabel(self, mapping: Sequence[int]) -> "QuantumInstruction":
        """Copy of this instruction with line ``l`` moved to ``mapping[l]``."""
        return QuantumInstruction(
            self.gate,
            tuple(mapping[t] for t in self.targets),
            tuple(Control(mapping[c.line], c.polarity) for c in self.controls),
        )

    def __eq__(self, other):
        if not isinstance(other, QuantumInstruction):
            return NotImplemented
        return (self.gate, self.targets, self.controls) == (
            other.gate, other.targets, other.controls
        )

    def __hash__(self):
        return hash((self.gate, self.targets, self.controls))

    def __str__(self):
        if self.controls:
            return self.gate.name + f" {self.controls} -> {self.targets}"
        return self.gate.name + f" {self.targets}"

    def __repr__(self) -> str:
        param_str = f" params={self.gate.params}" if self.gate.params else ""
        ctrl_str = f" controls={self.controls}" if self.controls else ""
        return (
            f"<QuantumInstruction name='{self.gate.name}' "
            f"targets={self.targets}{ctrl_str}{param_str}>"
        )


class QuantumCircuit:
    """Ordered, append-only list of instructions over ``qubit_count`` lines.

    Every line carries an input and an output name (``i0``/``o0`` ... by
    default), copied along by :meth:`copy_metadata` so a rewritten circuit
    keeps the naming of its source.
    """
    def __init__(self, qubit_count=None, instructions=None, inputs=None, outputs=None):
        if qubit_count is None:
            qubit_count = 0
        if qubit_count < 0:
            raise ValueError(f"qubit_count must be non-negative, got {qubit_count}")
        self.qubit_count: int = qubit_count
        self.inputs: List[str] = (
            [f"i{k}" for k in range(qubit_count)] if inputs is None else list(inputs)
        )
        self.outputs: List[str] = (
            [f"o{k}" for k in range(qubit_count)] if outputs is None else list(outputs)
        )
        if len(self.inputs) != qubit_count or len(self.outputs) != qubit_count:
            raise ValueError(
                f"Need {qubit_count} input and output names, got "
                f"{len(self.inputs)} and {len(self.outputs)}"
            )
        self.instructions: List[QuantumInstruction] = []
        for instruction in instructions or []:
            self.add_instruction(instruction)

    def add_instruction(
        self,
        instruction: QuantumInstruction = None,
        gate: QuantumGate = None,
        targets: Tuple[int, ...] = None,
        controls=(),
    ) -> QuantumInstruction:
        if instruction is None:
            assert isinstance(
                gate, QuantumGate
            ), f"{gate} must be a QuantumGate instance"
            circ_instrc = QuantumInstruction(gate=gate, targets=targets, controls=controls)
        else:
            assert isinstance(
                instruction, QuantumInstruction
            ), "add_instruction requires a QuantumInstruction or a QuantumGate and targets as input"
            circ_instrc = instruction

        if not self.valid_gate_indices(circ_instrc):
            raise ValueError(
                f"Gate indices invalid or out of bounds for instruction {circ_instrc} "
                f"on a {self.qubit_count}-line circuit"
            )
        self.instructions.append(circ_instrc)
        return circ_instrc

    def append(self, gate: QuantumGate, targets, controls=()) -> QuantumInstruction:
        """Append ``gate`` on ``targets`` (a line or a tuple of lines)."""
        if isinstance(targets, int):
            targets = (targets,)
        return self.add_instruction(gate=gate, targets=tuple(targets), controls=controls)

    def cx(self, control: int, target: int) -> QuantumInstruction:
        return self.append(X(), (target,), (Control(control),))

    def h(self, target: int) -> QuantumInstruction:
        return self.append(H(), (target,))

    def valid_gate_indices(self, instruction: QuantumInstruction) -> bool:
        indices_in_range = all(
            0 <= qubit_index < self.qubit_count
            for qubit_index in instruction.gate_indices
        )
        indices_not_repeated = len(instruction.gate_indices) == len(
            set(instruction.gate_indices)
        )
        return indices_in_range and indices_not_repeated

    def add_line(self, input_name: str = None, output_name: str = None) -> int:
        """Append an idle line and return its index."""
        index = self.qubit_count
        self.inputs.append(f"i{index}" if input_name is None else input_name)
        self.outputs.append(f"o{index}" if output_name is None else output_name)
        self.qubit_count += 1
        return index

    def copy_metadata(self) -> "QuantumCircuit":
        """Fresh empty circuit with the same lines and line names."""
        return QuantumCircuit(
            qubit_count=self.qubit_count,
            inputs=self.inputs,
            outputs=self.outputs,
        )

    def copy(self) -> "QuantumCircuit":
        circ = self.copy_metadata()
        circ.instructions = list(self.instructions)
        return circ

    def permute_lines(
        self, assignment: Sequence[int], qubit_count: Optional[int] = None
    ) -> "QuantumCircuit":
        """Relabel line ``l`` to ``assignment[l]``.

        ``qubit_count`` widens the result (physical lines not hit by the
        assignment stay idle). Line names travel with their line.
        """
        width = self.qubit_count if qubit_count is None else qubit_count
        if len(assignment) != self.qubit_count:
            raise ValueError(
                f"Assignment {tuple(assignment)} does not cover {self.qubit_count} lines"
            )
        if len(set(assignment)) != len(assignment) or not all(
            0 <= a < width for a in assignment
        ):
            raise ValueError(f"Assignment {tuple(assignment)} is not injective into {width} lines")

        inputs = [f"i{k}" for k in range(width)]
        outputs = [f"o{k}" for k in range(width)]
        for logical, physical in enumerate(assignment):
            inputs[physical] = self.inputs[logical]
            outputs[physical] = self.outputs[logical]
        # idle lines may collide with a moved name, rename them
        taken = set(self.inputs) | set(self.outputs)
        moved = set(assignment)
        for k in range(width):
            if k not in moved:
                suffix = k
                while f"i{suffix}" in taken or f"o{suffix}" in taken:
                    suffix += width
                inputs[k], outputs[k] = f"i{suffix}", f"o{suffix}"
                taken.update((inputs[k], outputs[k]))

        circ = QuantumCircuit(qubit_count=width, inputs=inputs, outputs=outputs)
        circ.instructions = [instr.relabel(assignment) for instr in self.instructions]
        return circ

    def count_ops(self) -> Dict[str, int]:
        """Histogram of gate names, a controlled X is counted as ``CX``."""
        hist: Dict[str, int] = {}
        for instr in self.instructions:
            name = "CX" if instr.is_cnot() else instr.gate.name
            hist[name] = hist.get(name, 0) + 1
        return hist

    def depth(self) -> int:
        if not self.qubit_count:
            return 0
        depth_at_idx = [0] * self.qubit_count
        for instruction in self.instructions:
            new_depth = max(
                depth_at_idx[gate_idx] for gate_idx in instruction.gate_indices
            )
            for gate_idx in instruction.gate_indices:
                depth_at_idx[gate_idx] = new_depth + 1
        return max(depth_at_idx)

    def num_gates(self) -> int:
        return len(self.instructions)

    def __len__(self):
        return len(self.instructions)

    def __iter__(self) -> Iterator[QuantumInstruction]:
        return iter(self.instructions)

    def __getitem__(self, item):
        return self.instructions[item]

    def __eq__(self, other):
        if not isinstance(other, QuantumCircuit):
            return NotImplemented
        return (
            self.qubit_count == other.qubit_count
            and self.instructions == other.instructions
        )

    def __repr__(self) -> str:
        """
        <QuantumCircuit 5 qubits, 13 instructions (CX:6, H:5, T:2), depth=7>
        """
        gate_summary = ", ".join(
            f"{name}:{cnt}" for name, cnt in sorted(self.count_ops().items())
        )
        return (
            f"<QuantumCircuit {self.qubit_count} qubits, "
            f"{len(self.instructions)} instructions ({gate_summary}), "
            f"depth={self.depth()}>"
        )

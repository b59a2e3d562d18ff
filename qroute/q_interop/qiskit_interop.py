import re

import qiskit
import qiskit.qasm2
import qiskit.circuit.library as qiskit_library
from qiskit import QuantumCircuit as QiskitCircuit

from ..simulations import quantum_gates as quantum_gateset
from ..simulations.errors import UnsupportedGateError
from ..simulations.quantum import QuantumCircuit, QuantumInstruction
from ..simulations.quantum_util import Control

from ..util.log import get_logger
logger = get_logger(__name__)


def get_qiskit_gates():
    """Map qroute gate names to qiskit gate classes."""
    GATE_QISKIT = dict()
    GATE_QISKIT["X"] = qiskit_library.XGate
    GATE_QISKIT["Y"] = qiskit_library.YGate
    GATE_QISKIT["Z"] = qiskit_library.ZGate
    GATE_QISKIT["H"] = qiskit_library.HGate
    GATE_QISKIT["S"] = qiskit_library.SGate
    GATE_QISKIT["Sdg"] = qiskit_library.SdgGate
    GATE_QISKIT["T"] = qiskit_library.TGate
    GATE_QISKIT["Tdg"] = qiskit_library.TdgGate
    GATE_QISKIT["RX"] = qiskit_library.RXGate
    GATE_QISKIT["RY"] = qiskit_library.RYGate
    GATE_QISKIT["RZ"] = qiskit_library.RZGate
    GATE_QISKIT["SWAP"] = qiskit_library.SwapGate
    return GATE_QISKIT


# qiskit instruction name -> (qroute gate name, number of leading control qubits)
_FROM_QISKIT = {
    "x": ("X", 0),
    "y": ("Y", 0),
    "z": ("Z", 0),
    "h": ("H", 0),
    "s": ("S", 0),
    "sdg": ("Sdg", 0),
    "t": ("T", 0),
    "tdg": ("Tdg", 0),
    "rx": ("RX", 0),
    "ry": ("RY", 0),
    "rz": ("RZ", 0),
    "swap": ("SWAP", 0),
    "cx": ("X", 1),
    "cy": ("Y", 1),
    "cz": ("Z", 1),
    "ch": ("H", 1),
    "cs": ("S", 1),
    "csdg": ("Sdg", 1),
    "crx": ("RX", 1),
    "cry": ("RY", 1),
    "crz": ("RZ", 1),
    "cswap": ("SWAP", 1),
    "ccx": ("X", 2),
}


def quantum_circuit_to_qiskit(qc: QuantumCircuit) -> QiskitCircuit:
    """Controls come first on the qiskit side, negative controls through ``ctrl_state``."""
    gates = get_qiskit_gates()
    circuit = QiskitCircuit(qc.qubit_count, 0)
    for instruction in qc.instructions:
        gate_cls = gates[instruction.gate.name]
        qiskit_gate = gate_cls(*instruction.gate.params)
        if instruction.controls:
            ctrl_state = sum(
                1 << k for k, c in enumerate(instruction.controls) if c.polarity
            )
            qiskit_gate = qiskit_gate.control(len(instruction.controls), ctrl_state=ctrl_state)
        circuit.append(qiskit_gate, list(instruction.gate_indices))
    return circuit


def qiskit_to_quantum_circuit(qc: QiskitCircuit) -> QuantumCircuit:
    """Controlled forms are read back for the names in ``_FROM_QISKIT`` only."""
    circ = QuantumCircuit(qubit_count=qc.num_qubits)

    for position, circuit_instruction in enumerate(qc.data):
        operation = circuit_instruction.operation
        # open controls come as "cx_o0", "ccx_o2", ...
        name = re.sub(r"_o\d+$", "", operation.name)
        if name == "barrier":
            continue
        if name not in _FROM_QISKIT:
            raise UnsupportedGateError(position, name)

        gate_name, num_controls = _FROM_QISKIT[name]
        GateCls = getattr(quantum_gateset, gate_name)
        qidx = tuple(qc.find_bit(q).index for q in circuit_instruction.qubits)

        if gate_name in quantum_gateset.ROTATION_GATES:
            gate = GateCls(float(operation.params[0]))
        else:
            gate = GateCls()

        ctrl_state = getattr(operation, "ctrl_state", None)
        controls = tuple(
            Control(line, True if ctrl_state is None else bool(ctrl_state >> k & 1))
            for k, line in enumerate(qidx[:num_controls])
        )
        circ.add_instruction(QuantumInstruction(gate, qidx[num_controls:], controls))

    logger.debug("Converted qiskit circuit with %d operations to %r", len(qc.data), circ)
    return circ


def to_qasm(qc: QuantumCircuit) -> str:
    """OpenQASM 2 text of ``qc``."""
    return qiskit.qasm2.dumps(quantum_circuit_to_qiskit(qc))

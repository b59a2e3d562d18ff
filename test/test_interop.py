import math
import pytest

from qiskit import QuantumCircuit as QiskitCircuit
from qiskit.quantum_info import Operator

import qroute.simulations.quantum_gates as g
from qroute.q_interop.qiskit_interop import (
    qiskit_to_quantum_circuit,
    quantum_circuit_to_qiskit,
    to_qasm,
)
from qroute.simulations.errors import UnsupportedGateError
from qroute.simulations.expansion import expand_cnots
from qroute.simulations.quantum import QuantumCircuit, QuantumInstruction
from qroute.simulations.quantum_devices import IBM_QX4
from qroute.simulations.quantum_util import Control
from qroute.simulations.synthesis import RoutingContext

# in-house gate factory, qiskit instruction name
_GATE_CASES = [
    (lambda: g.X(), "x"),
    (lambda: g.Y(), "y"),
    (lambda: g.Z(), "z"),
    (lambda: g.H(), "h"),
    (lambda: g.S(), "s"),
    (lambda: g.Sdg(), "sdg"),
    (lambda: g.T(), "t"),
    (lambda: g.Tdg(), "tdg"),
    (lambda: g.RX(math.pi / 3), "rx"),
    (lambda: g.RY(math.pi / 7), "ry"),
    (lambda: g.RZ(math.pi / 5), "rz"),
]


@pytest.mark.parametrize("factory, qiskit_name", _GATE_CASES)
def test_single_qubit_gate_round_trip(factory, qiskit_name):
    qc = QuantumCircuit(qubit_count=2)
    qc.append(factory(), 1)
    qk = quantum_circuit_to_qiskit(qc)
    assert qk.data[0].operation.name == qiskit_name
    assert qk.find_bit(qk.data[0].qubits[0]).index == 1
    back = qiskit_to_quantum_circuit(qk)
    assert back.instructions == qc.instructions


def test_cnot_and_toffoli_round_trip():
    qc = QuantumCircuit(qubit_count=3)
    qc.cx(2, 0)
    qc.append(g.X(), 1, (0, 2))
    qc.append(g.SWAP(), (0, 2))
    qk = quantum_circuit_to_qiskit(qc)
    assert [ci.operation.name for ci in qk.data] == ["cx", "ccx", "swap"]
    assert qiskit_to_quantum_circuit(qk).instructions == qc.instructions


@pytest.mark.parametrize(
    "factory, targets, controls, qiskit_name",
    [
        (lambda: g.Z(), (1,), (0,), "cz"),
        (lambda: g.Y(), (0,), (2,), "cy"),
        (lambda: g.H(), (2,), (1,), "ch"),
        (lambda: g.RZ(0.25), (1,), (2,), "crz"),
        (lambda: g.SWAP(), (0, 2), (1,), "cswap"),
    ],
)
def test_controlled_gate_round_trip(factory, targets, controls, qiskit_name):
    qc = QuantumCircuit(qubit_count=3)
    qc.append(factory(), targets, controls)
    qk = quantum_circuit_to_qiskit(qc)
    assert qk.data[0].operation.name == qiskit_name
    assert qiskit_to_quantum_circuit(qk).instructions == qc.instructions


def test_negative_control():
    qc = QuantumCircuit(qubit_count=2)
    qc.append(g.X(), 1, (Control(0, False),))
    qk = quantum_circuit_to_qiskit(qc)
    assert qk.data[0].operation.ctrl_state == 0
    back = qiskit_to_quantum_circuit(qk)
    assert back[0].controls == (Control(0, False),)

    reference = QiskitCircuit(2)
    reference.x(0)
    reference.cx(0, 1)
    reference.x(0)
    assert Operator(qk).equiv(Operator(reference))


def test_qiskit_circuit_to_quantum_circuit():
    qk = QiskitCircuit(3)
    qk.h(0)
    qk.cx(0, 2)
    qk.barrier()
    qk.rz(0.5, 1)
    qc = qiskit_to_quantum_circuit(qk)
    assert qc.qubit_count == 3
    assert qc.instructions == [
        QuantumInstruction(g.H(), (0,)),
        QuantumInstruction(g.X(), (2,), (0,)),
        QuantumInstruction(g.RZ(0.5), (1,)),
    ]


def test_unknown_qiskit_gate():
    qk = QiskitCircuit(2)
    qk.h(0)
    qk.sx(1)
    with pytest.raises(UnsupportedGateError) as excinfo:
        qiskit_to_quantum_circuit(qk)
    assert excinfo.value.position == 1


def test_qasm_export_of_rewritten_circuit():
    context = RoutingContext.build(IBM_QX4)
    qc = QuantumCircuit(qubit_count=5)
    qc.h(0)
    qc.cx(0, 1)
    expanded = expand_cnots(qc, context)
    qasm = to_qasm(expanded)
    assert qasm.startswith("OPENQASM 2.0;")
    assert "qreg q[5];" in qasm
    assert "cx q[1],q[0];" in qasm
    assert qasm.count("h q[") == 5

from .qiskit_interop import (
    get_qiskit_gates,
    quantum_circuit_to_qiskit,
    qiskit_to_quantum_circuit,
    to_qasm,
)

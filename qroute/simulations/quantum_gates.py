from typing import Tuple

__all__ = [
    "QuantumGate",
    "X", "Y", "Z", "H",
    "S", "Sdg", "T", "Tdg",
    "RX", "RY", "RZ",
    "SWAP",
    "ROTATION_GATES",
    "SINGLE_QUBIT_GATES",
]


class QuantumGate:
    def __init__(self, name, num_qubits):
        self.name: str = name
        self.num_qubits: int = num_qubits

    def __eq__(self, other):
        if not isinstance(other, QuantumGate):
            return NotImplemented
        return (self.name, self.num_qubits, self.params) == (
            other.name, other.num_qubits, other.params
        )

    def __hash__(self):
        return hash((self.name, self.num_qubits, self.params))

    @property
    def params(self) -> Tuple[float, ...]:
        return ()

    def __repr__(self):
        return f"{self.name}()"


class X(QuantumGate):
    """NOT. With one control it is a CNOT, with more a Toffoli."""
    def __init__(self):
        super().__init__(name="X", num_qubits=1)


class Y(QuantumGate):
    def __init__(self):
        super().__init__(name="Y", num_qubits=1)


class Z(QuantumGate):
    def __init__(self):
        super().__init__(name="Z", num_qubits=1)


class H(QuantumGate):
    def __init__(self):
        super().__init__(name="H", num_qubits=1)


class S(QuantumGate):
    def __init__(self):
        super().__init__(name="S", num_qubits=1)


class Sdg(QuantumGate):
    def __init__(self):
        super().__init__(name="Sdg", num_qubits=1)


class T(QuantumGate):
    def __init__(self):
        super().__init__(name="T", num_qubits=1)


class Tdg(QuantumGate):
    def __init__(self):
        super().__init__(name="Tdg", num_qubits=1)


class _Rotation(QuantumGate):
    def __init__(self, name, theta: float):
        self.param = float(theta)
        super().__init__(name=name, num_qubits=1)

    @property
    def params(self) -> Tuple[float, ...]:
        return (self.param,)

    def __repr__(self):
        return f"{self.name}({self.param})"


class RX(_Rotation):
    def __init__(self, theta: float):
        super().__init__("RX", theta)


class RY(_Rotation):
    def __init__(self, theta: float):
        super().__init__("RY", theta)


class RZ(_Rotation):
    def __init__(self, theta: float):
        super().__init__("RZ", theta)


class SWAP(QuantumGate):
    def __init__(self):
        super().__init__(name="SWAP", num_qubits=2)


ROTATION_GATES = ("RX", "RY", "RZ")

# gates the expander copies through untouched when they carry no control
SINGLE_QUBIT_GATES = ("X", "Y", "Z", "H", "S", "Sdg", "T", "Tdg") + ROTATION_GATES

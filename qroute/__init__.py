# -*- coding: utf-8 -*-
"""Direction-aware CNOT rewriting and qubit assignment.

Given the directed coupling graph of a device, ``qroute`` works out for every
ordered qubit pair the cheapest native-gate sequence that realizes a CNOT in
that direction, picks a logical-to-physical qubit assignment minimizing the
total overhead, and rewrites circuits accordingly.

    >>> from qroute import RoutingContext, map_circuit, IBM_QX2
    >>> ctx = RoutingContext.build(IBM_QX2)
    >>> result = map_circuit(circuit, ctx)

"""

# Set up the logger.
from .util.log import get_logger
logger = get_logger(__name__)

__version__ = "0.3.0"

from .simulations.errors import (
    QRouteError,
    FormatError,
    ConfigurationError,
    UnsupportedGateError,
)
from .simulations.quantum_gates import *
from .simulations.quantum_util import Control
from .simulations.quantum import QuantumCircuit, QuantumInstruction
from .simulations.connectivity import ConnectivityGraph
from .simulations.trans_path import StepKind, TransformationStep, TransformationPath
from .simulations.synthesis import CostPathTable, RoutingContext, synthesize_path, build_cost_table
from .simulations.expansion import expand_cnots
from .simulations.assignment import (
    AssignmentResult,
    occurrence_matrix,
    assignment_cost,
    exhaustive_search,
    heuristic_search,
    search_assignment,
)
from .simulations.mapping import MappingResult, map_circuit
from .simulations.persistence import dumps, loads, save, load, read_graph
from .simulations.quantum_devices import IBM_QX2, IBM_QX3, IBM_QX4, get_device

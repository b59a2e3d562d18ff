import itertools

import numpy as np
import pytest

from qroute.simulations.assignment import (
    AssignmentResult,
    assignment_cost,
    exhaustive_search,
    heuristic_search,
    occurrence_matrix,
    search_assignment,
)
from qroute.simulations.connectivity import ConnectivityGraph
from qroute.simulations.errors import ConfigurationError
from qroute.simulations.quantum import QuantumCircuit
from qroute.simulations.quantum_devices import IBM_QX2, IBM_QX4
from qroute.simulations.quantum_gates import *
from qroute.simulations.quantum_util import Control
from qroute.simulations.synthesis import RoutingContext


@pytest.fixture(scope="module")
def scenario_context():
    graph = ConnectivityGraph.from_edges(5, [(0, 1), (0, 2), (3, 2), (3, 4)], name="scenario")
    return RoutingContext.build(graph)


@pytest.fixture(scope="module")
def qx4_context():
    return RoutingContext.build(IBM_QX4)


def random_occurrence(rng, logical, density=0.6, high=4):
    occ = rng.integers(0, high, size=(logical, logical))
    occ[rng.random((logical, logical)) > density] = 0
    np.fill_diagonal(occ, 0)
    return occ


def brute_force(occurrence, costs):
    logical, physical = occurrence.shape[0], costs.shape[0]
    best = None
    for a in itertools.permutations(range(physical), logical):
        total = sum(
            occurrence[c, t] * costs[a[c], a[t]]
            for c in range(logical) for t in range(logical)
        )
        best = total if best is None else min(best, total)
    return best


def test_occurrence_matrix():
    qc = QuantumCircuit(qubit_count=3)
    qc.cx(0, 1)
    qc.h(2)
    qc.cx(0, 1)
    qc.append(X(), 0, (Control(2, False),))
    qc.append(X(), 1, (0, 2))
    occ = occurrence_matrix(qc)
    assert occ.tolist() == [[0, 2, 0], [0, 0, 0], [1, 0, 0]]
    assert occurrence_matrix(qc, size=5).shape == (5, 5)
    with pytest.raises(ConfigurationError):
        occurrence_matrix(qc, size=2)


def test_assignment_cost(scenario_context):
    occ = np.array([[0, 1], [0, 0]])
    assert assignment_cost(occ, scenario_context, (0, 1)) == 0
    assert assignment_cost(occ, scenario_context, (1, 0)) == 4
    assert assignment_cost(occ, scenario_context, (2, 4)) == 10
    assert assignment_cost(occ, scenario_context.table, (2, 4)) == 10
    assert assignment_cost(occ, scenario_context.table.costs, (2, 4)) == 10


@pytest.mark.parametrize("assignment", [(0,), (0, 0), (0, 5), (-1, 2)])
def test_bad_assignment(scenario_context, assignment):
    with pytest.raises(ConfigurationError):
        assignment_cost(np.zeros((2, 2), dtype=int), scenario_context, assignment)


def test_too_many_logical_qubits(scenario_context):
    occ = np.zeros((6, 6), dtype=int)
    for search in (exhaustive_search, heuristic_search, search_assignment):
        with pytest.raises(ConfigurationError):
            search(occ, scenario_context)


def test_single_cnot_prefers_native_pair(scenario_context):
    occ = np.zeros((3, 3), dtype=int)
    occ[0, 1] = 1
    result = exhaustive_search(occ, scenario_context)
    assert result.cost == 0
    assert scenario_context.graph.has_edge(result.best[0], result.best[1])
    assert result.evaluated == 5 * 4 * 3
    # every tied optimum is kept
    for a in result.assignments:
        assert assignment_cost(occ, scenario_context, a) == 0
    assert result.best == (0, 1, 2)


def test_exhaustive_enumeration_order(scenario_context):
    occ = np.zeros((2, 2), dtype=int)
    result = exhaustive_search(occ, scenario_context)
    assert result.cost == 0
    assert result.assignments[:4] == ((0, 1), (1, 0), (0, 2), (2, 0))
    assert len(result.assignments) == 20


def test_exhaustive_matches_brute_force(qx4_context):
    rng = np.random.default_rng(1234)
    costs = qx4_context.table.costs
    for _ in range(5):
        occ = random_occurrence(rng, 3)
        result = exhaustive_search(occ, qx4_context)
        assert result.cost == brute_force(occ, costs)
        assert all(assignment_cost(occ, qx4_context, a) == result.cost for a in result.assignments)


def test_heuristic_never_beats_exhaustive(qx4_context):
    rng = np.random.default_rng(99)
    for logical in (2, 3, 4, 5):
        occ = random_occurrence(rng, logical)
        exact = exhaustive_search(occ, qx4_context)
        approx = heuristic_search(occ, qx4_context)
        assert approx.cost >= exact.cost
        assert approx.cost == assignment_cost(occ, qx4_context, approx.best)
        assert len(set(approx.best)) == logical


def test_heuristic_fixes_a_reversed_cnot(scenario_context):
    occ = np.zeros((2, 2), dtype=int)
    occ[1, 0] = 3
    result = heuristic_search(occ, scenario_context)
    assert result.strategy == "heuristic"
    assert result.cost == 0
    assert result.best == (1, 0)


def test_max_candidates():
    occ = np.zeros((3, 3), dtype=int)
    with pytest.raises(ConfigurationError):
        exhaustive_search(occ, np.zeros((5, 5), dtype=int), max_candidates=59)
    assert exhaustive_search(occ, np.zeros((5, 5), dtype=int), max_candidates=60).evaluated == 60


def test_search_assignment_strategies(qx4_context):
    occ = np.array([[0, 2], [1, 0]])
    assert search_assignment(occ, qx4_context).strategy == "exhaustive"
    assert search_assignment(occ, qx4_context, limit=19).strategy == "heuristic"
    assert search_assignment(occ, qx4_context, limit=20).strategy == "exhaustive"
    assert search_assignment(occ, qx4_context, strategy="heuristic").strategy == "heuristic"
    with pytest.raises(ConfigurationError):
        search_assignment(occ, qx4_context, strategy="annealing")


def test_auto_limit_comes_from_config(monkeypatch, qx4_context):
    from qroute import config
    monkeypatch.setattr(config, "EXHAUSTIVE_LIMIT", 1)
    occ = np.array([[0, 1], [0, 0]])
    assert search_assignment(occ, qx4_context).strategy == "heuristic"


def test_result_is_frozen():
    result = AssignmentResult("exhaustive", 3, [[0, 1]], 1)
    assert result.assignments == ((0, 1),)
    with pytest.raises(AttributeError):
        result.cost = 0


def test_qx2_full_width_heuristic():
    context = RoutingContext.build(IBM_QX2)
    occ = np.ones((5, 5), dtype=int) - np.eye(5, dtype=int)
    approx = heuristic_search(occ, context)
    exact = exhaustive_search(occ, context)
    assert sorted(approx.best) == [0, 1, 2, 3, 4]
    assert approx.cost >= exact.cost

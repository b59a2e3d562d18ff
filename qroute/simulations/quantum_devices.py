from .connectivity import ConnectivityGraph
from .errors import ConfigurationError

from ..util.log import get_logger
logger = get_logger(__name__)


IBM_QX2 = ConnectivityGraph.from_edges(
    5,
    [(0, 1), (0, 2), (1, 2), (3, 2), (3, 4), (4, 2)],
    name="ibmqx2",
)

IBM_QX4 = ConnectivityGraph.from_edges(
    5,
    [(1, 0), (2, 0), (2, 1), (2, 4), (3, 2), (3, 4)],
    name="ibmqx4",
)

IBM_QX3 = ConnectivityGraph.from_edges(
    16,
    [
        (0, 1), (1, 2), (2, 3), (3, 14),
        (4, 3), (4, 5),
        (6, 7), (6, 11),
        (7, 10), (8, 7),
        (9, 8), (9, 10),
        (11, 10),
        (12, 5), (12, 11), (12, 13),
        (13, 4), (13, 14),
        (15, 0), (15, 14),
    ],
    name="ibmqx3",
)

DEVICES = {
    "qx2": IBM_QX2,
    "qx3": IBM_QX3,
    "qx4": IBM_QX4,
}


def get_device(name: str) -> ConnectivityGraph:
    """Look up a built-in device by ``qx2``/``ibmqx2`` style name."""
    key = name.lower().replace("ibm", "").replace("_", "").replace("-", "")
    if key not in DEVICES:
        raise ConfigurationError(f"Unknown device {name!r}, known devices: {sorted(DEVICES)}")
    return DEVICES[key]

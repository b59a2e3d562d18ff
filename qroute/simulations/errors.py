class QRouteError(Exception):
    """Base class for every error raised by qroute."""
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class FormatError(QRouteError, ValueError):
    """Malformed connectivity graph or persisted cost/path table."""


class ConfigurationError(QRouteError):
    """Problem size or qubit indices do not fit the connectivity graph."""


class UnsupportedGateError(QRouteError):
    """A gate the expander cannot lower.

    ``position`` is the index of the offending instruction in the input circuit.
    """
    def __init__(self, position: int, gate, message: str = None):
        self.position = position
        self.gate = gate
        if message is None:
            message = f"Unsupported gate {gate!r} at position {position}"
        super().__init__(message)

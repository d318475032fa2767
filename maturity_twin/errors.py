"""Exceptions raised by the digital twin engine."""


class TwinError(Exception):
    """Base class for twin engine errors."""
    pass


class InvalidGoalError(TwinError, ValueError):
    """Raised when a goal type is not one of the recognised outcome metrics."""
    pass


class InvalidInterventionError(TwinError, ValueError):
    """Raised when an intervention descriptor names an unknown type."""
    pass


class CausalGraphError(TwinError, ValueError):
    """Raised when the causal node/edge table is not a valid DAG."""
    pass


class TwinConfigError(TwinError, ValueError):
    """Raised when a policy override file cannot be applied."""
    pass

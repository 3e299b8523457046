class FlowSimError(Exception):
    """Base class for simulator errors."""


class InvalidConfiguration(FlowSimError, ValueError):
    """Raised when run parameters are rejected before a run starts."""
    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}={value!r}: {reason}")

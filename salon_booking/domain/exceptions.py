
class SchedulingError(ValueError):
    """Base class for local validation failures in the scheduling core."""
    pass


class InvalidRange(SchedulingError):
    """Raised when a date range starts after it ends."""
    pass


class InvalidInterval(SchedulingError):
    """Raised when a booked interval does not end after it starts."""
    pass


class InvalidDuration(SchedulingError):
    """Raised when the aggregate service duration is not positive."""
    pass


class InvalidWorkingWindow(SchedulingError):
    """Raised when a working window is malformed or used for the wrong weekday."""
    pass

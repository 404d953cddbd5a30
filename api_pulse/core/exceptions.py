"""Exception hierarchy for the monitoring engine."""


class MonitorError(Exception):
    """Base class for all engine errors.

    ``reason`` is a stable machine-readable code used by the service layer
    when turning the error into a failed operation result.
    """

    reason = "monitor_error"


class ProbeFailure(MonitorError):
    """Network-level failure while probing a target.

    Never escapes the prober; it only carries the failure description
    into a DOWN observation.
    """

    reason = "probe_failure"


class ValidationError(MonitorError):
    """Invalid input rejected before any probing or storage happens."""

    reason = "validation_error"


class StorageError(MonitorError):
    """The durable store rejected a read or write."""

    reason = "storage_error"


class NoDataError(MonitorError):
    """No observations exist for the requested target."""

    reason = "no_data"

    def __init__(self, target_name: str):
        self.target_name = target_name
        super().__init__(f"No test data found for target '{target_name}'")


class SchedulerStateError(MonitorError):
    """Scheduler operation not allowed in the current state."""

    reason = "scheduler_state"


class AlreadyRunningError(SchedulerStateError):
    reason = "already_running"

    def __init__(self, message: str = "Scheduler is already running"):
        super().__init__(message)


class NotRunningError(SchedulerStateError):
    reason = "not_running"

    def __init__(self, message: str = "Scheduler is not running"):
        super().__init__(message)


class NeverStartedError(SchedulerStateError):
    reason = "never_started"

    def __init__(self, message: str = "Scheduler was never started. Use start instead."):
        super().__init__(message)

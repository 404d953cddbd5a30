"""Status classification for probe outcomes."""

from typing import Optional

from api_pulse.models.observation import ProbeStatus

UNREACHABLE_STATUS_CODE = 0
SLOW_THRESHOLD_MS = 2000


def classify(
    status_code: int,
    response_time_ms: int,
    slow_threshold_ms: int = SLOW_THRESHOLD_MS
) -> ProbeStatus:
    """
    Map a raw probe outcome to a health status.

    Unreachable targets and HTTP error responses are DOWN. A successful
    response strictly slower than the threshold is SLOW.

    Args:
        status_code: HTTP status code (0 when unreachable)
        response_time_ms: Elapsed time in milliseconds
        slow_threshold_ms: Latency above which a response is SLOW

    Returns:
        ProbeStatus: UP, DOWN or SLOW
    """
    if status_code == UNREACHABLE_STATUS_CODE or status_code >= 400:
        return ProbeStatus.DOWN
    if response_time_ms > slow_threshold_ms:
        return ProbeStatus.SLOW
    return ProbeStatus.UP


def describe_http_failure(status_code: int) -> Optional[str]:
    """Error message for an HTTP response classified DOWN, None otherwise."""
    if status_code >= 400:
        return f"HTTP {status_code}"
    return None

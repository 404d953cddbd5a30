"""Prober for checking HTTP targets with a bounded timeout."""

import asyncio
import time
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from api_pulse.config import ProbeTarget
from api_pulse.core.classifier import (
    SLOW_THRESHOLD_MS,
    UNREACHABLE_STATUS_CODE,
    classify,
    describe_http_failure,
)
from api_pulse.core.exceptions import ProbeFailure
from api_pulse.models.observation import ProbeStatus
from api_pulse.utils.clock import utcnow
from api_pulse.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 5000


class ProbeResult:
    """Unsaved observation produced by a single probe."""

    def __init__(
        self,
        target_name: str,
        target_url: str,
        status_code: int,
        response_time_ms: int,
        status: ProbeStatus,
        error_message: Optional[str] = None,
        observed_at: Optional[datetime] = None
    ):
        """
        Initialize probe result.

        Args:
            target_name: Name of the probed target
            target_url: URL that was requested
            status_code: HTTP status code (0 if unreachable)
            response_time_ms: Elapsed time in milliseconds
            status: Classified health status
            error_message: Failure description (DOWN only)
            observed_at: When the probe started
        """
        self.target_name = target_name
        self.target_url = target_url
        self.status_code = status_code
        self.response_time_ms = response_time_ms
        self.status = status
        self.error_message = error_message
        self.observed_at = observed_at or utcnow()

    @property
    def reachable(self) -> bool:
        """Whether the target answered at all, whatever the status code."""
        return self.status_code != UNREACHABLE_STATUS_CODE

    def to_dict(self) -> Dict[str, Any]:
        """Fields of the observation this result will be stored as."""
        return {
            "target_name": self.target_name,
            "target_url": self.target_url,
            "status_code": self.status_code,
            "response_time_ms": self.response_time_ms,
            "status": self.status,
            "error_message": self.error_message,
            "observed_at": self.observed_at,
        }

    def __repr__(self) -> str:
        """String representation of probe result."""
        return (
            f"<ProbeResult(target_name='{self.target_name}', "
            f"status={self.status.value}, status_code={self.status_code}, "
            f"response_time_ms={self.response_time_ms})>"
        )


class Prober:
    """
    Prober for monitoring HTTP targets.

    Issues one GET per probe, bounded by a fixed timeout. Network-level
    failures never propagate: they are converted into DOWN results with
    status code 0 and a description of the failure.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        slow_threshold_ms: int = SLOW_THRESHOLD_MS,
        max_concurrent: int = 20
    ):
        """
        Initialize prober.

        Args:
            timeout_ms: Per-request timeout in milliseconds
            slow_threshold_ms: Latency above which a response is SLOW
            max_concurrent: Maximum concurrent connections
        """
        self.timeout_ms = timeout_ms
        self.slow_threshold_ms = slow_threshold_ms
        self.max_concurrent = max_concurrent
        self.session: Optional[aiohttp.ClientSession] = None

        logger.info(
            "Prober initialized",
            extra={
                "timeout_ms": timeout_ms,
                "slow_threshold_ms": slow_threshold_ms,
                "max_concurrent": max_concurrent
            }
        )

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    @property
    def _client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout_ms / 1000)

    async def start(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            connector = aiohttp.TCPConnector(limit=self.max_concurrent)
            self.session = aiohttp.ClientSession(
                timeout=self._client_timeout,
                connector=connector
            )
            logger.info("HTTP session started")

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            logger.info("HTTP session closed")

    async def probe(self, target: ProbeTarget) -> ProbeResult:
        """
        Probe a single target and classify the outcome.

        Args:
            target: Target to probe

        Returns:
            ProbeResult: Classified result; never raises for network failures

        Example:
            ```python
            async with Prober() as prober:
                result = await prober.probe(ProbeTarget(name="GitHub API", url="https://api.github.com"))
                print(result.status, result.response_time_ms)
            ```
        """
        if self.session is None:
            await self.start()

        observed_at = utcnow()
        start_time = time.monotonic()

        try:
            status_code = await self._fetch_status(target.url)
        except ProbeFailure as e:
            response_time_ms = self._elapsed_ms(start_time)

            logger.warning(
                "Probe failed",
                extra={
                    "target_name": target.name,
                    "url": target.url,
                    "error": str(e),
                    "response_time_ms": response_time_ms
                }
            )

            return ProbeResult(
                target_name=target.name,
                target_url=target.url,
                status_code=UNREACHABLE_STATUS_CODE,
                response_time_ms=response_time_ms,
                status=classify(UNREACHABLE_STATUS_CODE, response_time_ms, self.slow_threshold_ms),
                error_message=str(e),
                observed_at=observed_at
            )

        response_time_ms = self._elapsed_ms(start_time)
        status = classify(status_code, response_time_ms, self.slow_threshold_ms)

        logger.info(
            "Probe completed",
            extra={
                "target_name": target.name,
                "status_code": status_code,
                "response_time_ms": response_time_ms,
                "status": status.value
            }
        )

        return ProbeResult(
            target_name=target.name,
            target_url=target.url,
            status_code=status_code,
            response_time_ms=response_time_ms,
            status=status,
            error_message=describe_http_failure(status_code) if status is ProbeStatus.DOWN else None,
            observed_at=observed_at
        )

    async def _fetch_status(self, url: str) -> int:
        """
        Perform the GET request and return the response status.

        Raises:
            ProbeFailure: On any network-level failure
        """
        try:
            async with self.session.get(url, timeout=self._client_timeout) as response:
                # Read the body so the timing covers the full response
                await response.read()
                return response.status

        except asyncio.TimeoutError as e:
            raise ProbeFailure(f"Request timed out after {self.timeout_ms}ms") from e

        except aiohttp.ClientConnectorError as e:
            raise ProbeFailure(f"Connection error: {_describe(e)}") from e

        except aiohttp.ClientError as e:
            raise ProbeFailure(f"Client error: {_describe(e)}") from e

        except Exception as e:
            logger.exception(
                "Probe unexpected error",
                extra={"url": url, "error": str(e)}
            )
            raise ProbeFailure(f"Unexpected error: {_describe(e)}") from e

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return max(0, int(round((time.monotonic() - start_time) * 1000)))


def _describe(error: Exception) -> str:
    return str(error) or error.__class__.__name__

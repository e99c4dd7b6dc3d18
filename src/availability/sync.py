"""HTTP client for fetching and saving a partner's weekly schedule.

Talks to ``/partner/availability/weekly`` on the partner API. Responses use
the ``{status, message, data}`` envelope. Transient failures (timeouts,
connection and other transport errors, 429 and 5xx) are retried with
tenacity; everything else fails fast.
"""

import functools
from typing import Any

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.availability.config import get_config
from src.availability.errors import (
    AuthenticationError,
    MalformedScheduleError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.availability.logging import get_logger
from src.availability.models import WeeklySchedule, parse_weekly_schedule

logger = get_logger(__name__)

WEEKLY_AVAILABILITY_PATH = "/partner/availability/weekly"


def _retrying(func):
    """Retry on TransientError with the client's attempt count and backoff."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        return retry(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, max=10),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )(func)(self, *args, **kwargs)

    return wrapper


class ScheduleSyncClient:
    """Fetches and saves WeeklySchedule documents for a partner."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        retry_wait: float = 1.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Partner API base URL. Defaults to the configured one.
            token: Bearer token. Defaults to the configured one.
            timeout: Per-request timeout in seconds.
            retry_attempts: Attempts per call before giving up on transient errors.
            retry_wait: Multiplier for the exponential backoff between attempts.
            session: Optional pre-built requests.Session (tests inject a mock).
        """
        config = get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds
        self.retry_attempts = retry_attempts or config.sync_retry_attempts
        self.retry_wait = retry_wait
        self.session = session or requests.Session()

        token = token if token is not None else config.api_token
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        self.session.headers["Accept"] = "application/json"

    def _request(self, method: str, partner_id: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{WEEKLY_AVAILABILITY_PATH}"
        try:
            resp = self.session.request(
                method,
                url,
                params={"partnerId": partner_id},
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as e:
            logger.warning("sync_timeout", method=method, partner_id=partner_id)
            raise TransientError(f"{method} {url} timed out") from e
        except requests.ConnectionError as e:
            logger.warning(
                "sync_connection_error",
                method=method,
                partner_id=partner_id,
                error=str(e),
            )
            raise TransientError(f"{method} {url} failed to connect: {e}") from e
        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ) as e:
            logger.error("sync_invalid_url", method=method, url=url, error=str(e))
            raise PermanentError(f"{method} {url} is not a valid request URL: {e}") from e
        except requests.RequestException as e:
            logger.warning(
                "sync_request_failed",
                method=method,
                partner_id=partner_id,
                error=str(e),
                type=type(e).__name__,
            )
            raise TransientError(f"{method} {url} failed: {e}") from e

        status = resp.status_code
        if status in (401, 403):
            logger.error("sync_unauthorized", status=status, partner_id=partner_id)
            raise AuthenticationError(f"{method} {url} rejected with {status}")
        if status == 429:
            logger.warning("sync_rate_limited", partner_id=partner_id)
            raise RateLimitError(f"{method} {url} rate limited")
        if status >= 500:
            logger.warning("sync_server_error", status=status, partner_id=partner_id)
            raise TransientError(f"{method} {url} failed with {status}")
        return resp

    @staticmethod
    def _envelope(resp: requests.Response) -> dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as e:
            raise MalformedScheduleError("Response body is not JSON") from e
        if not isinstance(body, dict):
            raise MalformedScheduleError("Response body is not a JSON object")
        return body

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text[:200]
        return body.get("message", "") if isinstance(body, dict) else ""

    @_retrying
    def fetch_weekly_schedule(self, partner_id: str) -> WeeklySchedule | None:
        """Fetch the persisted weekly schedule.

        Returns:
            The schedule, or None when the partner has none yet.

        Raises:
            MalformedScheduleError: If the envelope or the schedule's top-level
                fields are invalid. Invalid days and records are skipped.
            AuthenticationError: On 401/403.
            TransientError: If retries are exhausted.
        """
        resp = self._request("GET", partner_id)
        if resp.status_code == 404:
            logger.info("schedule_not_found", partner_id=partner_id)
            return None
        if resp.status_code >= 400:
            raise PermanentError(f"Fetch failed with {resp.status_code}")

        data = self._envelope(resp).get("data")
        if data is None:
            logger.info("schedule_not_found", partner_id=partner_id, reason="empty_data")
            return None
        if isinstance(data, dict):
            data.setdefault("partnerId", partner_id)

        try:
            schedule, skipped = parse_weekly_schedule(data)
        except ValueError as e:
            logger.warning("schedule_invalid", partner_id=partner_id, error=str(e))
            raise MalformedScheduleError(f"Invalid weekly schedule: {e}") from e
        if skipped:
            logger.warning("schedule_entries_skipped", partner_id=partner_id, count=skipped)

        logger.info(
            "schedule_fetched",
            partner_id=partner_id,
            days=len(schedule.schedule),
            slot_duration=schedule.slot_duration_minutes,
        )
        return schedule

    @_retrying
    def save_weekly_schedule(self, partner_id: str, schedule: WeeklySchedule) -> bool:
        """Replace the persisted weekly schedule.

        Returns:
            True when the API accepted the schedule.

        Raises:
            PermanentError: If the API rejects the payload.
            TransientError: If retries are exhausted.
        """
        resp = self._request("PUT", partner_id, json=schedule.to_wire())
        if resp.status_code >= 400:
            message = self._error_message(resp)
            logger.error(
                "schedule_save_rejected",
                partner_id=partner_id,
                status=resp.status_code,
                message=message,
            )
            raise PermanentError(f"Save rejected with {resp.status_code}: {message}")

        logger.info("schedule_saved", partner_id=partner_id)
        return True

    def close(self) -> None:
        self.session.close()

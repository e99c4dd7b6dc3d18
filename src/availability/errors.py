"""Error hierarchy for schedule sync retry classification.

This hierarchy lets tenacity retry decorators tell transient failures
(should retry) from permanent failures (should not retry).

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def fetch_weekly_schedule(partner_id: str):
        ...
"""


class ScheduleSyncError(Exception):
    """Base exception for all schedule sync errors."""

    pass


class TransientError(ScheduleSyncError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, connection resets, 502/503/504 from the API.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429).

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(ScheduleSyncError):
    """Failure that won't succeed on retry.

    Examples: 400 validation errors, unknown partner, rejected payload.
    """

    pass


class AuthenticationError(PermanentError):
    """API token missing, expired or not allowed to touch this partner."""

    pass


class MalformedScheduleError(PermanentError):
    """The backend returned a weekly schedule that does not match the wire shape."""

    pass

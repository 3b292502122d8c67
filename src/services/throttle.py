# brute force protection for login
from datetime import datetime, timedelta
from typing import Dict, Optional

from store.models import LoginAttempts
from utils.errors import ThrottledError
from utils.logger import get_logger

_logger = get_logger(__name__)


class LoginThrottle:
    """
    Per-identifier failure counter with a cool-down window.

    Keys are the raw identifiers callers typed, not user ids: the username and
    the email of one account are counted separately.

    An entry is only dropped on a successful login, so every identifier that
    ever failed stays in memory, unknown ones included. The table is bounded
    by the number of distinct identifiers tried during the process lifetime.
    """

    def __init__(self, max_failures: int = 5, window: timedelta = timedelta(minutes=5)):
        self.max_failures = max_failures
        self.window = window
        self._attempts: Dict[str, LoginAttempts] = {}

    def __len__(self) -> int:
        return len(self._attempts)

    def failures(self, identifier: str) -> int:
        attempts = self._attempts.get(identifier)
        return attempts.count if attempts else 0

    def retry_after(self, identifier: str, when: datetime) -> Optional[timedelta]:
        """Time left before ``identifier`` may try again, None if not locked."""
        attempts = self._attempts.get(identifier)
        if attempts is None or attempts.last_failure is None:
            return None
        if attempts.count < self.max_failures:
            return None
        elapsed = when - attempts.last_failure
        if elapsed >= self.window:
            return None
        return self.window - elapsed

    def check(self, identifier: str, when: datetime) -> None:
        """Raise ThrottledError while ``identifier`` is locked out."""
        wait = self.retry_after(identifier, when)
        if wait is not None:
            _logger.warning(f"Login for '{identifier}' throttled, {wait} left")
            raise ThrottledError(wait)

    def record(self, identifier: str, succeeded: bool, when: datetime) -> None:
        if succeeded:
            self._attempts.pop(identifier, None)
            return
        attempts = self._attempts.setdefault(identifier, LoginAttempts())
        attempts.count += 1
        attempts.last_failure = when
        _logger.debug(f"Failed login #{attempts.count} for '{identifier}'")

    def check_and_record_attempt(
        self, identifier: str, succeeded: bool, when: Optional[datetime] = None
    ) -> None:
        """Gate then record one attempt whose outcome is already known."""
        when = when or datetime.now()
        self.check(identifier, when)
        self.record(identifier, succeeded, when)

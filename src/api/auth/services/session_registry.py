import asyncio
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from fastapi.logger import logger


@dataclass
class AdminSession:
    """An authenticated admin session"""
    token: str
    created_at: float
    last_activity: float

    def idle_seconds(self, now: float) -> float:
        return now - self.last_activity

    def is_expired(self, timeout: int, now: float) -> bool:
        return timeout > 0 and self.idle_seconds(now) > timeout


class SessionRegistry:
    """
    Admin sessions for one application instance.

    Owned by the application (stored on `app.state`) and handed to request
    handlers through a dependency. `run_idle_monitor` is the periodic task
    that expires idle sessions; the application starts and cancels it.
    """

    def __init__(self, timeout: int = 0, clock: Callable[[], float] = time.monotonic):
        # Idle seconds before a session expires; 0 disables expiry
        self.timeout = timeout
        self._clock = clock
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def open(self) -> AdminSession:
        now = self.now()
        session = AdminSession(
            token=secrets.token_urlsafe(32), created_at=now, last_activity=now)
        with self._lock:
            self._sessions[session.token] = session
        logger.info("Admin session opened")
        return session

    def get(self, token: Optional[str]) -> Optional[AdminSession]:
        """Return the live session for `token`, dropping it if it has gone idle"""
        if not token:
            return None
        now = self._clock()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self.timeout, now):
                del self._sessions[token]
                logger.info("Admin session expired")
                return None
            return session

    def touch(self, token: str) -> None:
        with self._lock:
            session = self._sessions.get(token)
            if session is not None:
                session.last_activity = self._clock()

    def close(self, token: Optional[str]) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                token for token, session in self._sessions.items()
                if session.is_expired(self.timeout, now)
            ]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info(f"Expired {len(expired)} idle admin session(s)")
        return len(expired)

    async def run_idle_monitor(self, interval: float = 1.0) -> None:
        """Check for idle sessions every `interval` seconds until cancelled"""
        while True:
            await asyncio.sleep(interval)
            self.purge_expired()

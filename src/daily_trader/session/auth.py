"""Mock authentication — credential checks, user registry, and token persistence."""

import asyncio
import logging
import time
import uuid
from pathlib import Path

from daily_trader.domain.errors import MissingCredentials
from daily_trader.domain.models import RegisterResult, User
from daily_trader.domain.ports import TokenStore

logger = logging.getLogger(__name__)


class MemoryTokenStore:
    """TokenStore that keeps the token for the life of the process."""

    def __init__(self) -> None:
        self._token: str | None = None

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """TokenStore that writes the opaque token to a single file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        token = self._path.read_text(encoding="utf-8").strip()
        return token or None

    def save(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class Authenticator:
    """Accepts any non-empty credentials and issues a mock token.

    Registered users keep their display name; unknown emails log in as a user
    named after the local part of the address.
    """

    def __init__(self, token_store: TokenStore, *, delay_seconds: float = 0.0) -> None:
        self._tokens = token_store
        self._delay = delay_seconds
        self._users: dict[str, User] = {}
        self._current: User | None = None

    @property
    def current_user(self) -> User | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    @property
    def token(self) -> str | None:
        return self._tokens.load()

    async def login(self, email: str, password: str) -> User:
        await self._simulate_latency()
        if not email or not password:
            raise MissingCredentials("Email and password are required.")

        user = self._users.get(email.lower()) or User(
            id=f"user-{uuid.uuid5(uuid.NAMESPACE_URL, email.lower()).hex[:12]}",
            email=email,
            name=email.split("@", 1)[0],
        )
        token = f"mock_token_{int(time.time() * 1000)}"
        self._tokens.save(token)
        self._current = user
        logger.info("Logged in as %s", user.email)
        return user

    async def register(self, email: str, password: str, name: str) -> RegisterResult:
        await self._simulate_latency()
        if not email or not password or not name:
            raise MissingCredentials("Email, password and name are all required.")

        key = email.lower()
        if key not in self._users:
            self._users[key] = User(id=f"user-{len(self._users) + 1:06d}", email=email, name=name)
            logger.info("Registered %s", email)
        return RegisterResult(ok=True, message="Registration complete.")

    def logout(self) -> None:
        if self._current is not None:
            logger.info("Logged out %s", self._current.email)
        self._current = None
        self._tokens.clear()

    async def _simulate_latency(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from services import security
from services.throttle import LoginThrottle
from store import models
from store.database import Database
from utils.config import Settings
from utils.errors import ConflictError, InvalidCredentialError
from utils.logger import get_logger

_logger = get_logger(__name__)


class AccountService:
    def __init__(self, db: Database, throttle: LoginThrottle, settings: Settings) -> None:
        self.db = db
        self.throttle = throttle
        self.settings = settings

    def _session(self, user: models.User) -> models.Session:
        public = user.public()
        return models.Session(
            token=security.create_session_token(public, self.settings), user=public
        )

    # ---------------------------
    # Registration & Login
    # ---------------------------

    async def register(
        self,
        username: str,
        email: str,
        name: str,
        password: str,
        phone: Optional[str] = None,
    ) -> models.Session:
        """
        Create a USER account and log it in.
        Username and email must both be unused, compared case-insensitively.
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValueError("Username, email and password are required.")

        pwd_hash = security.hash_password(password)
        async with self.db.connect() as conn:
            taken = conn.users.find(
                lambda u: u.username.lower() == username.lower()
                or u.email.lower() == email.lower()
            )
            if taken:
                _logger.info(f"Registration refused, '{username}'/'{email}' taken")
                raise ConflictError()

            user = models.User(
                uid=self.db.next_uid(),
                username=username,
                email=email,
                name=(name or "").strip() or username,
                pwd_hash=pwd_hash,
                role="USER",
                phone=(phone or "").strip() or None,
            )
            conn.users.put(user.uid, user)

        _logger.info(f"Registered user {user.uid} ({user.username})")
        return self._session(user)

    async def login(
        self, identifier: str, password: str, when: Optional[datetime] = None
    ) -> models.Session:
        """
        Log in by username or email, both matched case-sensitively.
        Too many recent failures for ``identifier`` raise ThrottledError
        before the password is even looked at.
        """
        when = when or datetime.now()
        async with self.db.connect() as conn:
            self.throttle.check(identifier, when)

            user = conn.users.find(
                lambda u: u.username == identifier or u.email == identifier
            )
            ok = user is not None and security.verify_password(password, user.pwd_hash)
            self.throttle.record(identifier, ok, when)

        if not ok:
            _logger.info(f"Invalid credentials for '{identifier}'")
            raise InvalidCredentialError()

        _logger.info(f"User {user.uid} logged in")
        return self._session(user)

    async def current_user(self, token: str) -> models.PublicUser:
        """Resolve a session token back to its user."""
        claims = security.decode_session_token(token, self.settings)
        if not claims or not str(claims.get("sub", "")).isdigit():
            raise InvalidCredentialError("Session expired, please log in again.")
        async with self.db.connect() as conn:
            user = conn.users.get(int(claims["sub"]))
        if user is None:
            raise InvalidCredentialError("Session expired, please log in again.")
        return user.public()

    # ---------------------------
    # Password change
    # ---------------------------

    async def change_password(self, uid: int, old_password: str, new_password: str) -> None:
        if not new_password:
            raise ValueError("New password cannot be empty.")
        new_hash = security.hash_password(new_password)
        async with self.db.connect() as conn:
            user = conn.users.get(uid)
            if user is None or not security.verify_password(old_password, user.pwd_hash):
                raise InvalidCredentialError("Invalid current password.")
            conn.users.put(uid, replace(user, pwd_hash=new_hash))
        _logger.info(f"Password changed for user {uid}")

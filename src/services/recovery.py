# password recovery: one active 6 digit code per user, single use, short lived
from __future__ import annotations

import random
import secrets
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from services import security
from services.notifications import NotificationGateway
from store import models
from store.database import Database
from utils.config import Settings
from utils.errors import InvalidOrExpiredTokenError, MissingChannelError, NotFoundError
from utils.logger import get_logger

_logger = get_logger(__name__)


class RecoveryService:
    def __init__(
        self,
        db: Database,
        gateway: NotificationGateway,
        settings: Settings,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.db = db
        self.gateway = gateway
        self.settings = settings
        self.rng = rng or secrets.SystemRandom()

    def _generate_code(self) -> str:
        digits = self.settings.recovery_code_length
        return f"{self.rng.randrange(10**digits):0{digits}d}"

    async def request_recovery(
        self,
        identifier: str,
        channel: models.Channel,
        when: Optional[datetime] = None,
    ) -> bool:
        """
        Issue a fresh code for the user matching ``identifier`` (username or
        email, case-insensitive) and send it on ``channel``.

        Any earlier code for that user stops working. Returns True once the
        code is handed to the gateway, whatever the gateway answers.
        """
        if channel not in models.CHANNELS:
            raise ValueError(f"Unknown channel: {channel}")
        when = when or datetime.now()
        needle = (identifier or "").strip().lower()

        async with self.db.connect() as conn:
            user = conn.users.find(
                lambda u: u.email.lower() == needle or u.username.lower() == needle
            )
            if user is None:
                raise NotFoundError("User not found. Check the data you entered.")
            if channel == "phone" and not user.phone:
                raise MissingChannelError()

            # drop this user's old code and anything used or expired
            for stale in conn.resets.filter(
                lambda r: r.uid == user.uid or not r.is_active(when)
            ):
                conn.resets.delete(stale.rid)

            reset = models.PasswordReset(
                rid=f"reset_{uuid.uuid4().hex[:12]}",
                uid=user.uid,
                code=self._generate_code(),
                expires_at=when + timedelta(minutes=self.settings.recovery_ttl_minutes),
            )
            conn.resets.put(reset.rid, reset)
            site_name = conn.settings.site_name

        _logger.info(f"Recovery code issued for user {user.uid} via {channel}")
        message = f"{site_name} recovery code: {reset.code}"
        if channel == "phone":
            await self.gateway.deliver("phone", user.phone, message)
        else:
            await self.gateway.deliver("email", user.email, message, "Password recovery")
        return True

    async def redeem_recovery(
        self, code: str, new_password: str, when: Optional[datetime] = None
    ) -> None:
        """
        Set a new password with a code from ``request_recovery``.

        The lookup is by code alone, codes are not scoped to a user.
        """
        if not new_password:
            raise ValueError("New password cannot be empty.")
        when = when or datetime.now()
        code = (code or "").strip()
        new_hash = security.hash_password(new_password)

        async with self.db.connect() as conn:
            reset = conn.resets.find(lambda r: r.code == code and r.is_active(when))
            if reset is None:
                _logger.info("Rejected invalid or expired recovery code")
                raise InvalidOrExpiredTokenError()

            user = conn.users.get(reset.uid)
            if user is None:
                raise NotFoundError("Associated user not found.")

            conn.users.put(user.uid, replace(user, pwd_hash=new_hash))
            conn.resets.put(reset.rid, replace(reset, used=True))

        _logger.info(f"Password reset for user {user.uid}")

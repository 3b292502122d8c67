import random
import unittest
from datetime import datetime, timedelta

from support import make_api
from utils.errors import (
    InvalidCredentialError,
    InvalidOrExpiredTokenError,
    MissingChannelError,
    NotFoundError,
)

T0 = datetime(2025, 11, 1, 12, 0, 0)


class FixedRandom(random.Random):
    def randrange(self, *args, **kwargs):
        return 42


class RecoveryTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.api, self.gateway = make_api()
        self.api.recovery.rng = random.Random(1234)
        session = await self.api.register("ana", "ana@x.com", "Ana", "p1")
        self.uid = session.user.uid
        await self.api.register("bia", "bia@x.com", "Bia", "pw", phone="11955554444")

    def _tokens(self, uid):
        return self.api.db.resets.filter(lambda r: r.uid == uid)

    # ---------- Requesting a code ----------

    async def test_request_by_email_sends_six_digit_code(self):
        self.assertTrue(await self.api.request_recovery("ana", "email", when=T0))

        sent = self.gateway.to("ana@x.com")
        self.assertEqual(len(sent), 1)
        self.assertEqual(sent[0].channel, "email")
        code = self.gateway.last_code()
        self.assertRegex(code, r"^\d{6}$")

        (token,) = self._tokens(self.uid)
        self.assertEqual(token.code, code)
        self.assertEqual(token.expires_at, T0 + timedelta(minutes=10))
        self.assertFalse(token.used)

    async def test_identifier_lookup_is_case_insensitive(self):
        await self.api.request_recovery("ANA@X.COM", "email", when=T0)
        await self.api.request_recovery("Ana", "email", when=T0)
        self.assertEqual(len(self.gateway.to("ana@x.com")), 2)

    async def test_unknown_user(self):
        with self.assertRaises(NotFoundError) as ctx:
            await self.api.request_recovery("nobody", "email", when=T0)
        self.assertEqual(ctx.exception.kind, "not_found")
        self.assertEqual(self.gateway.sent, [])

    async def test_phone_channel_requires_phone(self):
        with self.assertRaises(MissingChannelError) as ctx:
            await self.api.request_recovery("ana", "phone", when=T0)
        self.assertEqual(ctx.exception.kind, "missing_channel")
        self.assertEqual(self._tokens(self.uid), [])
        self.assertEqual(self.gateway.sent, [])

    async def test_phone_channel_delivers_to_phone(self):
        await self.api.request_recovery("bia", "phone", when=T0)
        (sent,) = self.gateway.sent
        self.assertEqual(sent.channel, "phone")
        self.assertEqual(sent.recipient, "11955554444")

    async def test_unknown_channel(self):
        with self.assertRaises(ValueError):
            await self.api.request_recovery("ana", "pigeon", when=T0)

    async def test_code_is_zero_padded(self):
        self.api.recovery.rng = FixedRandom()
        await self.api.request_recovery("ana", "email", when=T0)
        self.assertEqual(self.gateway.last_code(), "000042")

    # ---------- Redeeming ----------

    async def test_redeem_sets_new_password(self):
        await self.api.request_recovery("ana", "email", when=T0)
        code = self.gateway.last_code()

        await self.api.redeem_recovery(code, "fresh", when=T0 + timedelta(minutes=1))

        (token,) = self._tokens(self.uid)
        self.assertTrue(token.used)
        await self.api.login("ana", "fresh", when=T0)
        with self.assertRaises(InvalidCredentialError):
            await self.api.login("ana", "p1", when=T0)

    async def test_second_request_invalidates_first_code(self):
        await self.api.request_recovery("ana", "email", when=T0)
        first = self.gateway.last_code()
        await self.api.request_recovery("ana", "email", when=T0 + timedelta(seconds=5))
        second = self.gateway.last_code()
        self.assertEqual(len(self._tokens(self.uid)), 1)

        with self.assertRaises(InvalidOrExpiredTokenError):
            await self.api.redeem_recovery(first, "fresh", when=T0 + timedelta(minutes=1))
        await self.api.redeem_recovery(second, "fresh", when=T0 + timedelta(minutes=1))

    async def test_code_is_single_use(self):
        await self.api.request_recovery("ana", "email", when=T0)
        code = self.gateway.last_code()
        await self.api.redeem_recovery(code, "fresh", when=T0)
        with self.assertRaises(InvalidOrExpiredTokenError) as ctx:
            await self.api.redeem_recovery(code, "again", when=T0)
        self.assertEqual(ctx.exception.kind, "invalid_or_expired_token")

    async def test_code_expires_after_ten_minutes(self):
        await self.api.request_recovery("ana", "email", when=T0)
        code = self.gateway.last_code()
        with self.assertRaises(InvalidOrExpiredTokenError):
            await self.api.redeem_recovery(code, "fresh", when=T0 + timedelta(minutes=10))

    async def test_code_valid_just_before_expiry(self):
        await self.api.request_recovery("ana", "email", when=T0)
        code = self.gateway.last_code()
        await self.api.redeem_recovery(
            code, "fresh", when=T0 + timedelta(minutes=9, seconds=59)
        )

    async def test_codes_for_other_users_are_untouched(self):
        await self.api.request_recovery("bia", "email", when=T0)
        bia_code = self.gateway.last_code()
        await self.api.request_recovery("ana", "email", when=T0)
        await self.api.redeem_recovery(bia_code, "fresh", when=T0)
        await self.api.login("bia", "fresh", when=T0)

    async def test_garbage_code(self):
        with self.assertRaises(InvalidOrExpiredTokenError):
            await self.api.redeem_recovery("abc", "fresh", when=T0)
        with self.assertRaises(ValueError):
            await self.api.redeem_recovery("123456", "", when=T0)

    async def test_user_deleted_after_issue(self):
        await self.api.request_recovery("ana", "email", when=T0)
        code = self.gateway.last_code()
        self.api.db.users.delete(self.uid)
        with self.assertRaises(NotFoundError):
            await self.api.redeem_recovery(code, "fresh", when=T0)

    async def test_used_and_expired_codes_are_pruned(self):
        carla = await self.api.register("carla", "carla@x.com", "Carla", "pw")
        await self.api.request_recovery("carla", "email", when=T0)
        await self.api.request_recovery("ana", "email", when=T0)
        await self.api.redeem_recovery(self.gateway.last_code(), "fresh", when=T0)
        self.assertEqual(len(self._tokens(self.uid)), 1)
        self.assertEqual(len(self._tokens(carla.user.uid)), 1)

        later = T0 + timedelta(minutes=30)
        await self.api.request_recovery("bia", "email", when=later)

        self.assertEqual(self._tokens(self.uid), [])
        self.assertEqual(self._tokens(carla.user.uid), [])
        self.assertEqual(len(self.api.db.resets), 1)

    async def test_live_codes_of_other_users_survive_pruning(self):
        await self.api.request_recovery("ana", "email", when=T0)
        ana_code = self.gateway.last_code()
        await self.api.request_recovery("bia", "email", when=T0 + timedelta(minutes=5))
        self.assertEqual(len(self.api.db.resets), 2)
        await self.api.redeem_recovery(ana_code, "fresh", when=T0 + timedelta(minutes=6))

"""
Tests for the session and identity gateway.
"""
import re
from datetime import timedelta
from unittest import mock
from urllib.parse import parse_qs, urlparse

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone

from formcraft_app.exceptions import (
    AccountLocked,
    EmailTaken,
    InvalidCredentials,
    OAuthError,
    PasswordResetInvalid,
    WeakPassword,
)
from formcraft_app.services.session_store import (
    SessionStore,
    _generate_oauth_state,
    _verify_oauth_state,
    check_password_strength,
)

User = get_user_model()

PASSWORD = "tr1cky-horse-battery"


class FakeClock:
    def __init__(self):
        self.now = timezone.now()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class PasswordStrengthTests(TestCase):
    def test_short_password(self):
        with self.assertRaises(WeakPassword):
            check_password_strength("abc123")

    def test_common_passwords(self):
        for password in ("password", "Password", "letmein"):
            with self.assertRaises(WeakPassword):
                check_password_strength(password)

    def test_reasonable_password(self):
        check_password_strength(PASSWORD)


class SignUpInTests(TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = SessionStore(clock=self.clock)

    def test_sign_up_returns_tokens(self):
        user, tokens = self.store.sign_up("  Ana@Example.com ", PASSWORD, first_name="Ana")

        self.assertEqual(user.email, "ana@example.com")
        self.assertTrue(user.check_password(PASSWORD))
        self.assertEqual(set(tokens), {"access", "refresh"})

    def test_duplicate_email(self):
        self.store.sign_up("ana@example.com", PASSWORD)
        with self.assertRaises(EmailTaken):
            self.store.sign_up("ANA@example.com", PASSWORD)

    def test_weak_password_rejected(self):
        with self.assertRaises(WeakPassword):
            self.store.sign_up("ana@example.com", "password")
        self.assertFalse(User.objects.exists())

    def test_wrong_password(self):
        self.store.sign_up("ana@example.com", PASSWORD)
        with self.assertRaises(InvalidCredentials):
            self.store.sign_in("ana@example.com", "wrong-password")

    def test_lockout_after_five_failures(self):
        self.store.sign_up("ana@example.com", PASSWORD)
        for _ in range(5):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("ana@example.com", "wrong-password")

        with self.assertRaises(AccountLocked) as ctx:
            self.store.sign_in("ana@example.com", PASSWORD)
        self.assertIn("15 minutes", str(ctx.exception))

        self.clock.advance(minutes=10)
        with self.assertRaises(AccountLocked) as ctx:
            self.store.sign_in("ana@example.com", PASSWORD)
        self.assertIn("5 minutes", str(ctx.exception))

        self.clock.advance(minutes=6)
        user, _ = self.store.sign_in("ana@example.com", PASSWORD)
        self.assertEqual(user.email, "ana@example.com")

    def test_sign_out_keeps_other_lockouts(self):
        self.store.sign_up("victim@example.com", PASSWORD)
        other, _ = self.store.sign_up("other@example.com", PASSWORD)
        for _ in range(5):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("victim@example.com", "wrong-password")

        self.store.sign_out(other)

        with self.assertRaises(AccountLocked):
            self.store.sign_in("victim@example.com", "wrong-password")

    def test_sign_out_resets_own_attempts(self):
        user, _ = self.store.sign_up("ana@example.com", PASSWORD)
        for _ in range(4):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("ana@example.com", "wrong-password")

        self.store.sign_out(user)

        for _ in range(4):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("ana@example.com", "wrong-password")
        user, _ = self.store.sign_in("ana@example.com", PASSWORD)
        self.assertEqual(user.email, "ana@example.com")

    def test_success_resets_attempts(self):
        self.store.sign_up("ana@example.com", PASSWORD)
        for _ in range(4):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("ana@example.com", "wrong-password")
        self.store.sign_in("ana@example.com", PASSWORD)

        for _ in range(4):
            with self.assertRaises(InvalidCredentials):
                self.store.sign_in("ana@example.com", "wrong-password")
        self.assertIsNone(self.store.attempts.remaining_lockout("ana@example.com"))


class TokenTests(TestCase):
    def setUp(self):
        self.store = SessionStore()
        self.user, self.tokens = self.store.sign_up("ana@example.com", PASSWORD)

    def test_refresh_rotates(self):
        tokens = self.store.refresh(self.tokens["refresh"])
        self.assertIn("access", tokens)
        self.assertNotEqual(tokens["refresh"], self.tokens["refresh"])

        with self.assertRaises(InvalidCredentials):
            self.store.refresh(self.tokens["refresh"])

    def test_garbage_refresh_token(self):
        with self.assertRaises(InvalidCredentials):
            self.store.refresh("not-a-token")

    def test_sign_out_blacklists(self):
        self.store.sign_out(self.user, self.tokens["refresh"])

        self.assertIsNone(self.store.last_activity(self.user))
        with self.assertRaises(InvalidCredentials):
            self.store.refresh(self.tokens["refresh"])

    def test_sign_out_tolerates_bad_token(self):
        self.store.sign_out(self.user, "not-a-token")


class PasswordResetTests(TestCase):
    def setUp(self):
        self.store = SessionStore()
        self.user, _ = self.store.sign_up("ana@example.com", PASSWORD)

    def _reset_link_params(self):
        self.assertEqual(len(mail.outbox), 1)
        url = re.search(r"https?://\S+", mail.outbox[0].body).group(0)
        params = parse_qs(urlparse(url).query)
        return params["uid"][0], params["token"][0]

    def test_reset_flow(self):
        self.store.request_password_reset("ANA@example.com")
        uid, token = self._reset_link_params()

        self.store.complete_password_reset(uid, token, "another-fine-secret")

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("another-fine-secret"))
        with self.assertRaises(PasswordResetInvalid):
            self.store.complete_password_reset(uid, token, "yet-another-secret")

    def test_unknown_email_is_silent(self):
        self.store.request_password_reset("nobody@example.com")
        self.assertEqual(len(mail.outbox), 0)

    def test_bad_token(self):
        self.store.request_password_reset("ana@example.com")
        uid, _ = self._reset_link_params()
        with self.assertRaises(PasswordResetInvalid):
            self.store.complete_password_reset(uid, "bad-token", "another-fine-secret")

    def test_bad_uid(self):
        with self.assertRaises(PasswordResetInvalid):
            self.store.complete_password_reset("!!", "bad-token", "another-fine-secret")


class OAuthStateTests(TestCase):
    def test_round_trip(self):
        self.assertTrue(_verify_oauth_state(_generate_oauth_state()))

    def test_tampered(self):
        timestamp, nonce, _ = _generate_oauth_state().split(":")
        self.assertFalse(_verify_oauth_state(f"{timestamp}:{nonce}:0000000000000000"))
        self.assertFalse(_verify_oauth_state("garbage"))
        self.assertFalse(_verify_oauth_state(None))

    def test_expired(self):
        state = _generate_oauth_state()
        issued_at = int(state.split(":")[0])
        with mock.patch("formcraft_app.services.session_store.time.time", return_value=issued_at + 601):
            self.assertFalse(_verify_oauth_state(state))


def _response(status_code, payload):
    response = mock.Mock(status_code=status_code, text=str(payload))
    response.json.return_value = payload
    return response


@override_settings(GOOGLE_OAUTH_CLIENT_ID="client-id", GOOGLE_OAUTH_CLIENT_SECRET="client-secret")
class GoogleSignInTests(TestCase):
    def setUp(self):
        self.store = SessionStore()

    def test_authorization_url(self):
        url = self.store.google_authorization_url()
        params = parse_qs(urlparse(url).query)
        self.assertEqual(params["client_id"], ["client-id"])
        self.assertTrue(_verify_oauth_state(params["state"][0]))

    @override_settings(GOOGLE_OAUTH_CLIENT_ID="")
    def test_authorization_url_unconfigured(self):
        with self.assertRaises(OAuthError):
            self.store.google_authorization_url()

    @mock.patch("formcraft_app.services.session_store.requests.get")
    @mock.patch("formcraft_app.services.session_store.requests.post")
    def test_creates_then_reuses_user(self, post, get):
        post.return_value = _response(200, {"access_token": "google-token"})
        get.return_value = _response(
            200, {"id": "g-1", "email": "Ana@Example.com", "name": "Ana Lima", "picture": "https://x/p.png"}
        )

        user, tokens, created = self.store.sign_in_with_google("code", _generate_oauth_state())
        self.assertTrue(created)
        self.assertEqual(user.email, "ana@example.com")
        self.assertEqual((user.first_name, user.last_name), ("Ana", "Lima"))
        self.assertIn("access", tokens)

        again, _, created = self.store.sign_in_with_google("code", _generate_oauth_state())
        self.assertFalse(created)
        self.assertEqual(again.pk, user.pk)

    def test_bad_state(self):
        with self.assertRaises(OAuthError):
            self.store.sign_in_with_google("code", "bad-state")

    @mock.patch("formcraft_app.services.session_store.requests.post")
    def test_token_exchange_failure(self, post):
        post.return_value = _response(400, {"error": "invalid_grant"})
        with self.assertRaises(OAuthError):
            self.store.sign_in_with_google("code", _generate_oauth_state())


class SecurityStatusTests(TestCase):
    def test_activity_window(self):
        clock = FakeClock()
        store = SessionStore(clock=clock)
        user, _ = store.sign_up("ana@example.com", PASSWORD)
        clock.now = user.date_joined
        store.record_activity(user)

        status = store.security_status(user)
        self.assertTrue(status["session_valid"])
        self.assertTrue(status["last_activity_recent"])
        self.assertEqual(status["account_age_days"], 0)

        clock.advance(days=3)
        status = store.security_status(user)
        self.assertFalse(status["last_activity_recent"])
        self.assertEqual(status["account_age_days"], 3)

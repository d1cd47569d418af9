import unittest

from capture_backend.auth import (
    AuthError,
    AuthService,
    EmailTakenError,
    hash_password,
    verify_password,
)
from capture_backend.db import InMemoryDbClient
from capture_backend.sessions import InMemorySessionStore


class PasswordHashTests(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        self.assertNotEqual(hashed, "correct horse")
        self.assertTrue(verify_password("correct horse", hashed))
        self.assertFalse(verify_password("wrong horse", hashed))

    def test_verify_with_garbage_hash(self):
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class AuthServiceTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.sessions = InMemorySessionStore()
        self.auth = AuthService(db=self.db, sessions=self.sessions, session_ttl_seconds=60)

    def test_sign_up_normalizes_email(self):
        user = self.auth.sign_up("  Ranger@Example.ORG ", "pw123456")
        self.assertEqual(user.email, "ranger@example.org")
        self.assertEqual(user.display_name, "ranger@example.org")

    def test_sign_up_twice_fails(self):
        self.auth.sign_up("a@example.org", "pw123456")
        with self.assertRaises(EmailTakenError):
            self.auth.sign_up("A@example.org", "pw123456")

    def test_sign_up_requires_credentials(self):
        with self.assertRaises(AuthError):
            self.auth.sign_up("", "pw")

    def test_sign_up_rejects_password_over_bcrypt_limit(self):
        with self.assertRaises(AuthError):
            self.auth.sign_up("long@example.org", "p" * 100)
        self.assertIsNone(self.db.get_user_by_email("long@example.org"))

    def test_sign_up_accepts_password_at_bcrypt_limit(self):
        self.auth.sign_up("edge@example.org", "p" * 72)
        user, _ = self.auth.sign_in("edge@example.org", "p" * 72)
        self.assertEqual(user.email, "edge@example.org")

    def test_multibyte_password_counts_bytes(self):
        with self.assertRaises(AuthError):
            self.auth.sign_up("wide@example.org", "\u00e9" * 40)

    def test_sign_in_resolve_sign_out(self):
        created = self.auth.sign_up("a@example.org", "pw123456", "Ann")
        user, token = self.auth.sign_in("a@example.org", "pw123456")
        self.assertEqual(user.user_id, created.user_id)
        self.assertEqual(self.auth.resolve(token).display_name, "Ann")

        self.auth.sign_out(token)
        with self.assertRaises(AuthError):
            self.auth.resolve(token)

    def test_sign_in_with_unknown_email(self):
        with self.assertRaises(AuthError):
            self.auth.sign_in("nobody@example.org", "pw")

    def test_session_for_deleted_profile_is_revoked(self):
        self.auth.sign_up("a@example.org", "pw123456")
        _, token = self.auth.sign_in("a@example.org", "pw123456")
        self.db.users.clear()
        with self.assertRaises(AuthError):
            self.auth.resolve(token)
        self.assertNotIn(token, self.sessions.sessions)


if __name__ == "__main__":
    unittest.main()

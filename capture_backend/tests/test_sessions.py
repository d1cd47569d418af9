import unittest
from unittest.mock import MagicMock, patch

from redis import exceptions as redis_exceptions

from capture_backend.sessions import InMemorySessionStore, RedisSessionStore


class InMemorySessionStoreTests(unittest.TestCase):
    def test_create_resolve_delete(self):
        store = InMemorySessionStore()
        token = store.create("user-1", ttl_seconds=60)
        self.assertEqual(store.get_user_id(token), "user-1")
        store.delete(token)
        self.assertIsNone(store.get_user_id(token))

    def test_expired_session_is_dropped(self):
        store = InMemorySessionStore()
        token = store.create("user-1", ttl_seconds=-1)
        self.assertIsNone(store.get_user_id(token))
        self.assertNotIn(token, store.sessions)

    def test_tokens_are_unique(self):
        store = InMemorySessionStore()
        self.assertNotEqual(store.create("u", 60), store.create("u", 60))


class RedisSessionStoreTests(unittest.TestCase):
    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_create_sets_key_with_expiry(self, from_url):
        client = MagicMock()
        from_url.return_value = client
        store = RedisSessionStore(url="redis://localhost:6379/0", key_prefix="s:")

        token = store.create("user-1", ttl_seconds=120)

        client.set.assert_called_once_with(f"s:{token}", "user-1", ex=120)

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_get_user_id_decodes_value(self, from_url):
        client = MagicMock()
        client.get.return_value = b"user-1"
        from_url.return_value = client
        store = RedisSessionStore(url="redis://localhost:6379/0", key_prefix="s:")

        self.assertEqual(store.get_user_id("abc"), "user-1")
        client.get.assert_called_once_with("s:abc")

        client.get.return_value = None
        self.assertIsNone(store.get_user_id("abc"))

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_connection_error_retries_on_fresh_client(self, from_url):
        broken = MagicMock()
        broken.get.side_effect = redis_exceptions.ConnectionError("reset")
        fresh = MagicMock()
        fresh.get.return_value = b"user-1"
        from_url.side_effect = [broken, fresh]
        store = RedisSessionStore(url="redis://localhost:6379/0")

        self.assertEqual(store.get_user_id("abc"), "user-1")
        self.assertIs(store.client, fresh)

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_get_user_id_is_none_when_redis_stays_down(self, from_url):
        broken = MagicMock()
        broken.get.side_effect = redis_exceptions.ConnectionError("reset")
        from_url.return_value = broken
        store = RedisSessionStore(url="redis://localhost:6379/0")

        self.assertIsNone(store.get_user_id("abc"))
        self.assertEqual(broken.get.call_count, 2)

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_create_retries_after_reset(self, from_url):
        broken = MagicMock()
        broken.set.side_effect = redis_exceptions.ConnectionError("reset")
        fresh = MagicMock()
        from_url.side_effect = [broken, fresh]
        store = RedisSessionStore(url="redis://localhost:6379/0", key_prefix="s:")

        token = store.create("user-1", ttl_seconds=60)

        fresh.set.assert_called_once_with(f"s:{token}", "user-1", ex=60)

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_delete_raises_when_redis_stays_down(self, from_url):
        broken = MagicMock()
        broken.delete.side_effect = redis_exceptions.ConnectionError("reset")
        from_url.return_value = broken
        store = RedisSessionStore(url="redis://localhost:6379/0")

        with self.assertRaises(redis_exceptions.ConnectionError):
            store.delete("abc")

    @patch("capture_backend.sessions.redis.Redis.from_url")
    def test_delete_removes_key(self, from_url):
        client = MagicMock()
        from_url.return_value = client
        store = RedisSessionStore(url="redis://localhost:6379/0", key_prefix="s:")
        store.delete("abc")
        client.delete.assert_called_once_with("s:abc")


if __name__ == "__main__":
    unittest.main()

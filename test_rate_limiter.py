import unittest

from norskbot.ratelimit import (
    InMemoryRateLimitStore,
    RateLimitEntry,
    RateLimitPolicy,
    RateLimiter,
    RateLimitScope,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


USER = RateLimitScope(user_id=1, channel_id=10, guild_id=100, user_tag="ola#0001")
POLICY = RateLimitPolicy(window=1.0, max_per_window=2)


class TestRateLimiter(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(InMemoryRateLimitStore(), clock=self.clock)

    def test_window_scenario(self):
        first = self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertFalse(first.is_rate_limited)
        self.assertEqual(first.uses_left, 1)

        self.clock.advance(0.3)
        second = self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertFalse(second.is_rate_limited)
        self.assertEqual(second.uses_left, 0)

        self.clock.advance(0.3)
        third = self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertTrue(third.is_rate_limited)
        self.assertAlmostEqual(third.time_until_next_use, 0.4)
        self.assertEqual(third.uses_left, 0)

        self.clock.advance(0.5)
        after = self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertFalse(after.is_rate_limited)
        self.assertEqual(after.uses_left, 1)

    def test_rejected_uses_are_not_counted(self):
        for _ in range(5):
            self.limiter.rate_limit("cmd", USER, POLICY)
        entry = self.limiter.store.get(RateLimiter.scope_key("cmd", USER, False))
        self.assertEqual(entry.uses, 2)

    def test_window_boundary_is_inclusive(self):
        self.limiter.rate_limit("cmd", USER, POLICY)
        self.limiter.rate_limit("cmd", USER, POLICY)
        self.clock.advance(1.0)
        self.assertTrue(self.limiter.rate_limit("cmd", USER, POLICY).is_rate_limited)

    def test_rejection_is_logged_on_root_logger(self):
        self.limiter.rate_limit("cmd", USER, POLICY)
        self.limiter.rate_limit("cmd", USER, POLICY)
        with self.assertLogs(level="INFO") as logs:
            self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertEqual([r.name for r in logs.records], ["root"])
        self.assertIn("ola#0001", logs.output[0])

    def test_privileged_scope_is_never_limited(self):
        moderator = RateLimitScope(user_id=2, channel_id=10, guild_id=100, privileged=True)
        for _ in range(50):
            result = self.limiter.rate_limit("cmd", moderator, POLICY)
            self.assertFalse(result.is_rate_limited)
            self.assertIsNone(result.uses_left)
        self.assertEqual(len(self.limiter.store), 0)

    def test_per_channel_scope_by_default(self):
        other_channel = RateLimitScope(user_id=1, channel_id=11, guild_id=100)
        self.limiter.rate_limit("cmd", USER, POLICY)
        self.limiter.rate_limit("cmd", USER, POLICY)
        self.assertFalse(self.limiter.rate_limit("cmd", other_channel, POLICY).is_rate_limited)

    def test_by_user_scope_spans_channels(self):
        policy = RateLimitPolicy(window=1.0, max_per_window=2, by_user=True)
        other_channel = RateLimitScope(user_id=1, channel_id=11, guild_id=200)
        self.limiter.rate_limit("cmd", USER, policy)
        self.limiter.rate_limit("cmd", USER, policy)
        self.assertTrue(self.limiter.rate_limit("cmd", other_channel, policy).is_rate_limited)

    def test_keys_are_independent(self):
        self.limiter.rate_limit("a", USER, POLICY)
        self.limiter.rate_limit("a", USER, POLICY)
        self.assertFalse(self.limiter.rate_limit("b", USER, POLICY).is_rate_limited)

    def test_sweep_evicts_stale_entries(self):
        self.limiter.rate_limit("old", USER, POLICY)
        self.clock.advance(100)
        self.limiter.rate_limit("new", USER, POLICY)
        self.assertEqual(self.limiter.sweep(max_age=10), 1)
        self.assertEqual(len(self.limiter.store), 1)


class TestInMemoryRateLimitStore(unittest.TestCase):
    def test_lru_bound(self):
        store = InMemoryRateLimitStore(max_entries=2)
        store.set("a", RateLimitEntry(0))
        store.set("b", RateLimitEntry(0))
        store.get("a")
        store.set("c", RateLimitEntry(0))
        self.assertIsNone(store.get("b"))
        self.assertIsNotNone(store.get("a"))
        self.assertEqual(len(store), 2)

    def test_evict_older_than(self):
        store = InMemoryRateLimitStore()
        store.set("a", RateLimitEntry(5))
        store.set("b", RateLimitEntry(15))
        self.assertEqual(store.evict(older_than=10), 1)
        self.assertIsNone(store.get("a"))

    def test_rejects_non_positive_size(self):
        with self.assertRaises(ValueError):
            InMemoryRateLimitStore(max_entries=0)


if __name__ == "__main__":
    unittest.main()

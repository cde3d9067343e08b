"""Tests for the per-key velocity window store."""

import threading

import pytest

from velocitygate.lib.sliding_window import VelocityWindowStore


class TestRecordAndCount:
    """Tests for VelocityWindowStore.record_and_count()."""

    def test_first_hit_counts_one(self, store):
        assert store.record_and_count("10.0.0.1") == 1

    def test_hits_within_window_accumulate(self, store, clock):
        for expected in range(1, 6):
            assert store.record_and_count("10.0.0.1") == expected
            clock.advance(0.1)

    def test_old_hits_drop_out_of_window(self, store, clock):
        store.record_and_count("10.0.0.1")
        clock.advance(0.6)
        store.record_and_count("10.0.0.1")
        clock.advance(0.6)
        # First hit is now 1.2s old, second 0.6s old
        assert store.record_and_count("10.0.0.1") == 2

    def test_hit_after_quiet_period_counts_one(self, store, clock):
        for _ in range(10):
            store.record_and_count("10.0.0.1")
        clock.advance(1.5)
        assert store.record_and_count("10.0.0.1") == 1

    def test_hit_exactly_window_old_is_kept(self, store):
        store.record_and_count("10.0.0.1", now=10.0)
        assert store.record_and_count("10.0.0.1", now=11.0) == 2

    def test_blank_key_is_ignored(self, store):
        assert store.record_and_count("") == 0
        assert store.record_and_count("   ") == 0
        assert store.record_and_count(None) == 0
        assert store.tracked_key_count() == 0

    def test_keys_are_independent(self, store):
        store.record_and_count("10.0.0.1")
        store.record_and_count("10.0.0.1")
        assert store.record_and_count("10.0.0.2") == 1

    def test_out_of_order_timestamp_keeps_window_sorted(self, store):
        store.record_and_count("k", now=10.0)
        store.record_and_count("k", now=10.5)
        assert store.record_and_count("k", now=10.2) == 3
        # 10.0 and 10.2 are older than 11.3 - 1.0; only 10.5 survives
        assert store.record_and_count("k", now=11.3) == 2


class TestCurrentCount:
    """Tests for VelocityWindowStore.current_count()."""

    def test_unknown_key_returns_zero(self, store):
        assert store.current_count("10.0.0.9") == 0

    def test_does_not_record(self, store):
        store.record_and_count("10.0.0.1")
        assert store.current_count("10.0.0.1") == 1
        assert store.current_count("10.0.0.1") == 1

    def test_expired_key_reads_zero_and_is_dropped(self, store, clock):
        store.record_and_count("10.0.0.1")
        clock.advance(2.0)
        assert store.current_count("10.0.0.1") == 0
        assert store.tracked_key_count() == 0

    def test_blank_key_returns_zero(self, store):
        assert store.current_count("") == 0


class TestEvictIdle:
    """Tests for VelocityWindowStore.evict_idle()."""

    def test_recent_keys_survive(self, store, clock):
        store.record_and_count("10.0.0.1")
        clock.advance(30.0)
        assert store.evict_idle() == 0
        assert store.tracked_key_count() == 1

    def test_idle_keys_are_removed(self, store, clock):
        store.record_and_count("10.0.0.1")
        store.record_and_count("10.0.0.2")
        clock.advance(61.0)
        store.record_and_count("10.0.0.3")
        assert store.evict_idle() == 2
        assert store.tracked_key_count() == 1
        assert store.current_count("10.0.0.3") == 1

    def test_key_with_one_recent_hit_survives(self, store, clock):
        store.record_and_count("10.0.0.1")
        clock.advance(59.0)
        store.record_and_count("10.0.0.1")
        clock.advance(2.0)
        assert store.evict_idle() == 0
        assert store.tracked_key_count() == 1

    def test_explicit_now(self, store):
        store.record_and_count("10.0.0.1", now=0.0)
        assert store.evict_idle(now=59.0) == 0
        assert store.evict_idle(now=61.0) == 1


class TestResetAndTracking:
    """Tests for reset() and tracked_key_count()."""

    def test_tracked_key_count(self, store):
        for key in ("203.0.113.1", "203.0.113.2", "203.0.113.3"):
            store.record_and_count(key)
        store.record_and_count("203.0.113.1")
        assert store.tracked_key_count() == 3

    def test_reset_clears_everything(self, store):
        keys = [f"198.51.100.{i}" for i in range(20)]
        for key in keys:
            store.record_and_count(key)
        store.reset()
        assert store.tracked_key_count() == 0
        for key in keys:
            assert store.current_count(key) == 0


class TestConstruction:
    """Tests for constructor validation."""

    def test_idle_threshold_must_exceed_window(self):
        with pytest.raises(ValueError, match="idle_threshold"):
            VelocityWindowStore(window=1.0, idle_threshold=1.0)

    def test_shards_must_be_positive(self):
        with pytest.raises(ValueError, match="shards"):
            VelocityWindowStore(shards=0)

    def test_single_shard_works(self, clock):
        store = VelocityWindowStore(shards=1, clock=clock)
        store.record_and_count("a")
        store.record_and_count("b")
        assert store.tracked_key_count() == 2


class TestConcurrency:
    """Concurrent writers must not lose updates."""

    def test_concurrent_same_key_counts_every_hit(self, clock):
        store = VelocityWindowStore(clock=clock)
        threads_count = 32
        hits_per_thread = 25
        barrier = threading.Barrier(threads_count)

        def worker():
            barrier.wait()
            for _ in range(hits_per_thread):
                store.record_and_count("10.0.0.1")

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.current_count("10.0.0.1") == threads_count * hits_per_thread

    def test_eviction_during_writes_keeps_active_key(self, clock):
        store = VelocityWindowStore(clock=clock)
        stop = threading.Event()

        def sweeper():
            while not stop.is_set():
                store.evict_idle()

        t = threading.Thread(target=sweeper)
        t.start()
        try:
            for _ in range(500):
                store.record_and_count("10.0.0.1")
        finally:
            stop.set()
            t.join()

        assert store.current_count("10.0.0.1") == 500

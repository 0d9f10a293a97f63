"""
Tests for RefreshScheduler: due/spacing decisions and the error latch.
"""

from __future__ import annotations

import unittest

from custom_components.openweather_rest.scheduler import RefreshScheduler


class TestRefreshScheduler(unittest.TestCase):

    def test_first_poll_always_allowed(self):
        scheduler = RefreshScheduler(20)
        # Even with a monotonic clock close to zero
        self.assertTrue(scheduler.is_due(5.0))
        self.assertTrue(scheduler.can_poll(5.0))

    def test_refresh_interval_in_seconds(self):
        self.assertEqual(RefreshScheduler(20).refresh_interval, 1200)

    def test_not_due_before_interval(self):
        scheduler = RefreshScheduler(20)
        scheduler.mark_polled(1000.0)
        self.assertFalse(scheduler.is_due(1000.0 + 1199))

    def test_due_exactly_at_interval(self):
        scheduler = RefreshScheduler(20)
        scheduler.mark_polled(1000.0)
        self.assertTrue(scheduler.is_due(1000.0 + 1200))

    def test_spacing_blocks_burst(self):
        scheduler = RefreshScheduler(20)
        scheduler.mark_polled(1000.0)
        self.assertFalse(scheduler.can_poll(1059.9))
        self.assertTrue(scheduler.can_poll(1060.0))

    def test_latch_blocks_until_cleared(self):
        scheduler = RefreshScheduler(1)
        scheduler.mark_polled(1000.0)
        scheduler.latch()
        self.assertFalse(scheduler.can_poll(99999.0))
        scheduler.clear_error()
        self.assertTrue(scheduler.can_poll(99999.0))

    def test_last_polled_never_decreases(self):
        scheduler = RefreshScheduler(20)
        scheduler.mark_polled(2000.0)
        scheduler.mark_polled(1500.0)
        self.assertEqual(scheduler.last_polled_at, 2000.0)

    def test_reset_clears_latch_and_stamp(self):
        scheduler = RefreshScheduler(20)
        scheduler.mark_polled(2000.0)
        scheduler.latch()
        scheduler.reset()
        self.assertFalse(scheduler.has_error)
        self.assertEqual(scheduler.last_polled_at, 0.0)
        self.assertTrue(scheduler.can_poll(2001.0))

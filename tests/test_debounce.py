"""
Tests for the quiet-period debouncer
"""
from unittest import TestCase

from PyQt5.QtCore import QCoreApplication
from PyQt5.QtTest import QTest

from pharmabill import config
from pharmabill.billing.debounce import Debouncer

QUIET_MS = 40


class DebouncerTests(TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self):
        self.calls = []
        self.debouncer = Debouncer(QUIET_MS, lambda generation, text: self.calls.append((generation, text)))

    def test_burst_fires_once_with_last_value(self):
        """Keystrokes a, ab, abc inside the quiet window -> one search for abc"""
        for text in ("a", "ab", "abc"):
            self.debouncer.schedule(text)
        QTest.qWait(QUIET_MS * 5)
        self.assertEqual([text for _, text in self.calls], ["abc"])

    def test_nothing_fires_before_quiet_period(self):
        self.debouncer.schedule("a")
        self.assertTrue(self.debouncer.is_pending)
        self.assertEqual(self.calls, [])
        QTest.qWait(QUIET_MS * 5)
        self.assertFalse(self.debouncer.is_pending)
        self.assertEqual(len(self.calls), 1)

    def test_separate_bursts_fire_separately(self):
        self.debouncer.schedule("a")
        QTest.qWait(QUIET_MS * 5)
        self.debouncer.schedule("b")
        QTest.qWait(QUIET_MS * 5)
        self.assertEqual([text for _, text in self.calls], ["a", "b"])

    def test_cancel_drops_pending_call(self):
        self.debouncer.schedule("a")
        self.debouncer.cancel()
        QTest.qWait(QUIET_MS * 5)
        self.assertEqual(self.calls, [])

    def test_stale_generation_is_not_current(self):
        """A slow result for an earlier search must not overwrite a newer one"""
        self.debouncer.schedule("a")
        QTest.qWait(QUIET_MS * 5)
        first_generation = self.calls[0][0]
        self.assertTrue(self.debouncer.is_current(first_generation))
        self.debouncer.schedule("ab")
        self.assertFalse(self.debouncer.is_current(first_generation))

    def test_cancel_invalidates_in_flight_results(self):
        generation = self.debouncer.schedule("a")
        self.debouncer.cancel()
        self.assertFalse(self.debouncer.is_current(generation))


class QuietPeriodSettingsTests(TestCase):
    def test_each_search_has_its_own_quiet_period(self):
        self.assertEqual(config.CUSTOMER_SEARCH_QUIET_MS, 300)
        self.assertEqual(config.MEDICINE_SEARCH_QUIET_MS, 500)
        self.assertGreater(config.BILL_SEARCH_QUIET_MS, 0)

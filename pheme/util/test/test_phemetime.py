#!/usr/bin/env python

"""
@file pheme/util/test/test_phemetime.py
"""

import time

from twisted.trial import unittest

from pheme.util.phemetime import PhemeTime, now_ms

class PhemeTimeTest(unittest.TestCase):

    def test_given_time(self):
        t = PhemeTime(1234567890123)
        self.assertEqual(t.time_ms, 1234567890123)
        self.assertEqual(t.time_str, '2009-02-13T23:31:30.123Z')

    def test_now(self):
        before = int(time.time() * 1000)
        now = now_ms()
        self.assertTrue(before - 1 <= now <= int(time.time() * 1000) + 1)

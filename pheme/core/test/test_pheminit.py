#!/usr/bin/env python

"""
@file pheme/core/test/test_pheminit.py
@brief test cases for the pheminit module
"""

import logging

from twisted.trial import unittest

from pheme.core import pheminit
from pheme.util.config import Config

class PheminitTest(unittest.TestCase):

    def test_module_config(self):
        conf = pheminit.config('pheme.storage.castorage')
        self.assertIsInstance(conf, Config)
        self.assertEqual(conf['scheme'], 'cas')
        self.assertEqual(conf.getValue('missing', 'fallback'), 'fallback')

    def test_registry_pricing(self):
        conf = pheminit.config('pheme.registry.store_registry')
        self.assertTrue(conf['gas_price'] > 0)
        self.assertIn('set_pointer', conf['gas_costs'])

    def test_log_levels(self):
        pheminit.set_log_levels()
        self.assertEqual(logging.getLogger('pheme.data').level, logging.WARNING)

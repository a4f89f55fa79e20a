#!/usr/bin/env python

"""
@file pheme/__init__.py
@brief Pheme core: ordered content chains over content addressed storage
"""

from pheme.core.version import version

__version__ = version.base()

#!/usr/bin/env python

"""
@file pheme/util/path.py
@brief resolves resource paths relative to the project root
"""

import os.path

import pheme

# Directory holding both the pheme package and the res package
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(pheme.__file__)))

def adjust_dir(path):
    """
    @brief Makes a relative resource path (e.g. 'res/config/pheme.config')
        absolute against the project root. Absolute paths and paths starting
        with '~' are returned expanded but otherwise unchanged.
    """
    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return path
    return os.path.join(ROOT_DIR, path)

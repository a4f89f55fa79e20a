#!/usr/bin/env python

"""
@file setup.py
@brief setup file for the pheme core: content chains over content
        addressed storage
@see https://setuptools.pypa.io/
"""

import os

from setuptools import setup, find_packages

from pheme.core.version import version

# Workaround a bug in "package_data" that ignores directories. Build flattened list of all files.
excludeFiles = set(['phemelocal.config', 'loglevelslocal.cfg'])
resFiles = [os.path.relpath(os.path.join(root, file), 'res')
            for root, dirs, files in os.walk('res')
            for file in files
            if file not in excludeFiles]

setup( name = 'pheme-core',
       version = version.base(),
       description = 'Ordered content chains per handle on content addressed storage',
       license = 'Apache 2.0',
       keywords = ['pheme', 'ipfs', 'content-addressing'],

       packages = find_packages(include=['pheme', 'pheme.*']) + ['res'],
       package_data = {
           'res': resFiles
                      },
       python_requires = '>=3.8',
       install_requires = [
           'Twisted>=22.10',
           'zope.interface>=5.0',
           'simplejson>=3.17',
                          ],
       extras_require = {
           # tests run under twisted.trial: trial pheme
           'test': ['Twisted>=22.10'],
                        },
       include_package_data = True,
       classifiers = [
           'Development Status :: 3 - Alpha',
           'Framework :: Twisted',
           'Intended Audience :: Developers',
           'License :: OSI Approved :: Apache Software License',
           'Operating System :: OS Independent',
           'Programming Language :: Python :: 3',
           'Topic :: Internet',
                     ]
     )

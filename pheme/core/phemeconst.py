#!/usr/bin/env python

"""
@file pheme/core/phemeconst.py
@brief definitions of pheme package wide constants
"""

# Name of central logging configuration file
LOGCONF_FILENAME = 'res/logging/phemelogging.conf'

# Name of environment variable to override logging configuration
PHEME_ALTERNATE_LOGGING_CONF = "PHEME_ALTERNATE_LOGGING_CONF"

# Name of central pheme configuration file (not to be changed)
PHEME_CONF_FILENAME = 'res/config/pheme.config'

# Name of local pheme config override file (can be changed locally)
PHEME_LOCAL_CONF_FILENAME = 'res/config/phemelocal.config'

# pheme master version
from pheme.core.version import version
VERSION = version.base()

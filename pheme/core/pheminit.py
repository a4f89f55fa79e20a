#!/usr/bin/env python

"""
@file pheme/core/pheminit.py
@brief definitions and code that needs to run for any use of pheme
"""

import logging
import logging.config
import os
import os.path

from pheme.util.path import adjust_dir
from pheme.core import phemeconst as pc
from pheme.util.config import Config, load_literal

# Configure logging system (console, logfile, other loggers)
logconf = adjust_dir(pc.LOGCONF_FILENAME)
if pc.PHEME_ALTERNATE_LOGGING_CONF in os.environ:
    # make sure that path exists
    altpath = adjust_dir(os.environ.get(pc.PHEME_ALTERNATE_LOGGING_CONF))
    if os.path.exists(altpath):
        logconf = altpath
    else:
        logging.getLogger(__name__).warning(
            "%s specified (%s), but not found",
            pc.PHEME_ALTERNATE_LOGGING_CONF, altpath)

if os.path.exists(logconf):
    logging.config.fileConfig(logconf, disable_existing_loggers=False)

# Load configuration properties for any module to access
pheme_config = Config(pc.PHEME_CONF_FILENAME)

# Update configuration with local override config
pheme_config.update_from_file(pc.PHEME_LOCAL_CONF_FILENAME)

def config(name):
    """
    Get a subtree of the global configuration, typically for a module
    """
    return Config(name, pheme_config)

def set_log_levels(levelfilekey=None):
    """
    Sets logging levels of per module loggers to given values. Loggers of
    packages are higher in the chain of module specific loggers.
    If called with None argument, will read the global and local files with
    log levels. Otherwise, read the file indicated by the config entry and if
    it exists, set the log levels as given.
    """
    if levelfilekey is None:
        set_log_levels('loglevels')
        set_log_levels('loglevelslocal')
        return

    levellistkey = pheme_config.getValue2(__name__, levelfilekey, None)
    if not levellistkey:
        return
    levelfile = adjust_dir(levellistkey)
    if not os.path.isfile(levelfile):
        return

    levellist = load_literal(levelfile)
    assert type(levellist) is list
    for name, level in levellist:
        logging.getLogger(name).setLevel(level)

set_log_levels()

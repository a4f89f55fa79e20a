#!/usr/bin/env python

"""
@file pheme/util/phemelog.py
@brief Abstracts from any form of logging in pheme
"""
import logging

# Loading pheminit configures the logging system from res/logging
from pheme.core import pheminit

class LogFactory(object):
    """
    Factory for producing logger objects with additional handlers.
    A global instance of this factory is declared in this module, and
    is used by the getLogger global used all over pheme.
    """
    def __init__(self):
        self._handlers = []

    def get_logger(self, loggername):
        """
        Creates an instance of a logger.
        Adds any registered handlers with this factory.

        Note: as this method is called typically on module load, if you haven't
        registered a handler at this time, that instance of a logger will not
        have that handler.
        """
        logger = logging.getLogger(loggername)
        for handler in self._handlers:
            if handler not in logger.handlers:
                logger.addHandler(handler)

        return logger

    def add_handler(self, handler):
        """
        Adds a handler to be added to the logger requested with get_logger.
        The handler must be derived from logging.Handler.
        """
        self._handlers.append(handler)

    def remove_handler(self, handler):
        self._handlers.remove(handler)

# declare global instance
log_factory = LogFactory()

def getLogger(loggername=__name__):
    """
    This function is used to assign every module in the code base a separate
    logger instance. Currently it just delegates to Python logging.
    """
    return log_factory.get_logger(loggername)

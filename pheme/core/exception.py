#!/usr/bin/env python

"""
@file pheme/core/exception.py
@brief module for exceptions
"""

class PhemeError(Exception):
    pass

class ConfigurationError(PhemeError):
    pass

class UnknownProtocolError(PhemeError):
    """
    Raised when an address carries a scheme no storage is registered for.
    """

class NotFoundError(PhemeError):
    """
    Raised when a chain does not contain the block a mutation refers to.
    """

class EstimationError(PhemeError):
    """
    Raised when the cost of a task can not be computed, e.g. because the
    target state is already invalid.
    """

class StorageError(PhemeError):
    pass

class RegistryError(PhemeError):
    pass

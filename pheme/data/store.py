"""
@file pheme/data/store.py
@package pheme.data.IStore Pure virtual base class for key/value stores
@package pheme.data.Store In-memory implementation of pheme.data.IStore
@brief base interface for the key-value stores below the content storage
        and the registry, and the default in memory implementation
"""

from zope.interface import Interface
from zope.interface import implementer

from twisted.internet import defer


class IStore(Interface):
    """
    Interface all store backend implementations.
    All operations are returning deferreds and operate asynchronously.
    """

    def get(key):
        """
        @param key  an immutable key associated with a value
        @retval Deferred, for value associated with key, or None if not existing.
        """

    def put(key, value):
        """
        @param key  an immutable key to be associated with a value
        @param value  an object to be associated with the key. The caller must
                not modify this object after it was
        @retval Deferred, for success of this operation
        """


@implementer(IStore)
class Store(object):
    """
    Memory implementation of an asynchronous key/value store, using a dict.
    Simulates typical usage of using a client connection to a backend
    technology.
    """

    def __init__(self):
        self.kvs = {}

    def get(self, key):
        """
        @see IStore.get
        """
        return defer.maybeDeferred(self.kvs.get, key, None)

    def put(self, key, value):
        """
        @see IStore.put
        """
        return defer.maybeDeferred(self.kvs.update, {key:value})

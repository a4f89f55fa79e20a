#!/usr/bin/env python

"""
@file pheme/storage/castorage.py
@brief IStorage implementation keeping content as blobs in a content
        addressable store (CAStore) on top of any IStore backend.
        Addresses look like cas://<sha1 hex of the encoded blob>.
"""

from zope.interface import implementer

from twisted.internet import defer

from pheme.core import pheminit
from pheme.core.exception import StorageError
from pheme.data.objstore import Blob, CAStore, sha1hex
from pheme.data.store import Store
from pheme.storage.base import IStorage, BaseStorage, hash_from_url

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

CONF = pheminit.config(__name__)

@implementer(IStorage)
class CAStorage(BaseStorage):
    """
    Content addressed storage backed by a CAStore.
    """

    def __init__(self, backend=None, scheme=None, namespace=None):
        """
        @param backend IStore instance; an in-memory Store if not given
        @param scheme address scheme this storage answers to
        @param namespace key prefix within the backend
        """
        self.scheme = scheme or CONF.getValue('scheme', 'cas')
        if backend is None:
            backend = Store()
        self.backend = backend
        self.cas = CAStore(backend, namespace or CONF.getValue('namespace', 'pheme'))

    def _address(self, id):
        return '%s://%s' % (self.scheme, id)

    def address_for_estimation(self):
        return self._address(sha1hex(Blob(b'').value))

    @defer.inlineCallbacks
    def write_data(self, data):
        if not isinstance(data, bytes):
            raise TypeError("Storage only accepts bytes, got %s" % type(data).__name__)
        id = yield self.cas.put(Blob(data))
        address = self._address(id)
        log.debug("Wrote %d bytes to %s", len(data), address)
        return address

    @defer.inlineCallbacks
    def read_data(self, address):
        id = hash_from_url(address)
        obj = yield self.cas.get(id)
        if obj is None:
            log.error("Storage address %s does not exist", address)
            raise StorageError("Nothing stored at %s" % address)
        return obj.content

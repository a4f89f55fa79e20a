#!/usr/bin/env python

"""
@file pheme/storage/base.py
@package pheme.storage.base.IStorage interface of content addressed storages
@package pheme.storage.base.StorageRouter dispatch on address scheme
@brief Storage addresses have the form scheme://payload. A StorageRouter
        holds one IStorage per scheme and hands every call to the storage
        owning the address.
"""

import re

import simplejson as json

from zope.interface import Interface, implementer

from twisted.internet import defer

from pheme.core.exception import ConfigurationError, UnknownProtocolError

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

ADDRESS_RE = re.compile(r'^([a-zA-Z0-9.+-]+)://(.*)$')

def scheme_from_url(address):
    """
    @retval the scheme prefix of address, or '' if address has none
    """
    match = ADDRESS_RE.match(address or '')
    return match.group(1) if match else ''

def hash_from_url(address):
    """
    @retval the payload of address (the part after scheme://), or ''
    """
    match = ADDRESS_RE.match(address or '')
    return match.group(2) if match else ''


class IStorage(Interface):
    """
    Interface of a content addressed byte/object store.
    All I/O operations are returning deferreds.
    """

    def read_data(address):
        """
        @param address scheme://payload address returned by write_data
        @retval Deferred, for the stored bytes
        """

    def write_data(data):
        """
        @param data bytes to store
        @retval Deferred, for the content derived address of data
        """

    def read_object(address):
        """
        @retval Deferred, for the deserialized object stored at address
        """

    def write_object(value):
        """
        @param value JSON serializable object
        @retval Deferred, for the address of the serialized value
        """

    def estimate_write(data):
        """
        @retval Deferred, for the cost of writing data
        """

    def address_for_estimation():
        """
        @retval a well formed address standing in for unknown addresses when
            pricing tasks before their writes happened
        """

    def public_url_for(address):
        """
        @retval public URL through which address can be fetched, or ''
        """

    def serialize(value):
        """
        @retval bytes encoding of value; equal values encode to equal bytes
        """

    def deserialize(data):
        """
        @retval object decoded from bytes produced by serialize
        """


class BaseStorage(object):
    """
    Object and estimation support shared by the storage implementations.
    Subclasses implement read_data, write_data and address_for_estimation.
    """

    def serialize(self, value):
        return json.dumps(value, sort_keys=True, separators=(',', ':')).encode('utf-8')

    def deserialize(self, data):
        return json.loads(data.decode('utf-8'))

    def read_object(self, address):
        d = self.read_data(address)
        d.addCallback(self.deserialize)
        return d

    def write_object(self, value):
        return self.write_data(self.serialize(value))

    def estimate_write(self, data):
        # Content addressed networks charge nothing for a write
        return defer.succeed(0)

    def public_url_for(self, address):
        return ''


@implementer(IStorage)
class StorageRouter(object):
    """
    Composite storage dispatching each call to the storage registered for
    the scheme of the address. Writes go to the preferred scheme.
    """

    def __init__(self, storages, preferred=None):
        """
        @param storages dict of scheme:IStorage
        @param preferred scheme new content is written to; defaults to the
            first registered scheme
        """
        if not storages:
            raise ConfigurationError("At least one storage must be supplied.")
        self.storages = dict(storages)
        self.preferred = preferred or next(iter(storages))
        if self.preferred not in self.storages:
            raise ConfigurationError("Preferred storage protocol %r is not registered" % self.preferred)

    def storage_for(self, address):
        """
        @retval the IStorage owning address
        @throws UnknownProtocolError if no storage is registered for its scheme
        """
        scheme = scheme_from_url(address)
        try:
            return self.storages[scheme]
        except KeyError:
            log.warning("No storage registered for address %r", address)
            raise UnknownProtocolError("Unknown storage protocol: %r" % scheme)

    def _writer(self, scheme=None):
        scheme = scheme or self.preferred
        try:
            return self.storages[scheme]
        except KeyError:
            raise UnknownProtocolError("Unknown storage protocol: %r" % scheme)

    def read_data(self, address):
        return defer.maybeDeferred(lambda: self.storage_for(address).read_data(address))

    def write_data(self, data, scheme=None):
        return defer.maybeDeferred(lambda: self._writer(scheme).write_data(data))

    def read_object(self, address):
        return defer.maybeDeferred(lambda: self.storage_for(address).read_object(address))

    def write_object(self, value, scheme=None):
        return defer.maybeDeferred(lambda: self._writer(scheme).write_object(value))

    def estimate_write(self, data, scheme=None):
        return defer.maybeDeferred(lambda: self._writer(scheme).estimate_write(data))

    def address_for_estimation(self):
        return self.storages[self.preferred].address_for_estimation()

    def public_url_for(self, address):
        if not address:
            return ''
        return self.storage_for(address).public_url_for(address)

    def serialize(self, value):
        return self.storages[self.preferred].serialize(value)

    def deserialize(self, data):
        return self.storages[self.preferred].deserialize(data)

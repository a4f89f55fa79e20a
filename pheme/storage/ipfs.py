#!/usr/bin/env python

"""
@file pheme/storage/ipfs.py
@brief IStorage implementation for IPFS. Writes go through the HTTP API of
        an IPFS node (/api/v0/add), reads through a public gateway.
        Addresses look like ipfs://<multihash>.
"""

import uuid
from io import BytesIO

import simplejson as json

from zope.interface import implementer

from twisted.internet import defer, reactor
from twisted.web.client import Agent, FileBodyProducer, readBody
from twisted.web.http_headers import Headers

from pheme.core import pheminit
from pheme.core.exception import StorageError
from pheme.storage.base import IStorage, BaseStorage, hash_from_url

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

CONF = pheminit.config(__name__)

SCHEME = 'ipfs'

def multipart_body(data, boundary, filename='blob'):
    """
    @brief Encodes data as the single file field of a multipart/form-data body
    """
    return b''.join([
        b'--' + boundary + b'\r\n',
        b'Content-Disposition: form-data; name="file"; filename="' + filename.encode('ascii') + b'"\r\n',
        b'Content-Type: application/octet-stream\r\n\r\n',
        data,
        b'\r\n--' + boundary + b'--\r\n',
    ])

@implementer(IStorage)
class IPFSStorage(BaseStorage):
    """
    Storage on the IPFS network.
    """

    def __init__(self, rpc_url=None, gateway_url=None, agent=None):
        """
        @param rpc_url base url of the IPFS node HTTP API
        @param gateway_url base url of the IPFS gateway used for reads
        @param agent twisted.web.client.Agent like object
        """
        self.rpc_url = (rpc_url or CONF.getValue('rpc_url', 'http://localhost:5001')).rstrip('/')
        self.gateway_url = (gateway_url or CONF.getValue('gateway_url', 'http://localhost:8080')).rstrip('/')
        self.agent = agent or Agent(reactor)

    def address_for_estimation(self):
        return CONF.getValue('estimation_address',
                'ipfs://qmv8ndh7ageh9b24zngaextmuhj7aiuw3scc8hkczvjkww')

    def public_url_for(self, address):
        if not address:
            return ''
        ipfs_hash = hash_from_url(address)
        return '%s/ipfs/%s' % (self.gateway_url, ipfs_hash) if ipfs_hash else ''

    @defer.inlineCallbacks
    def _request(self, method, url, headers=None, body=None):
        log.debug("IPFS %s %s", method, url)
        response = yield self.agent.request(method, url.encode('ascii'),
                Headers(headers or {}), body)
        content = yield readBody(response)
        if response.code != 200:
            log.error("IPFS %s %s failed with %d: %r", method, url, response.code, content[:200])
            raise StorageError("IPFS request %s failed with HTTP %d" % (url, response.code))
        return content

    @defer.inlineCallbacks
    def write_data(self, data):
        if not isinstance(data, bytes):
            raise TypeError("Storage only accepts bytes, got %s" % type(data).__name__)
        boundary = uuid.uuid4().hex.encode('ascii')
        body = FileBodyProducer(BytesIO(multipart_body(data, boundary)))
        headers = {b'Content-Type': [b'multipart/form-data; boundary=' + boundary]}
        content = yield self._request(b'POST', self.rpc_url + '/api/v0/add?pin=true',
                headers, body)
        try:
            ipfs_hash = json.loads(content.decode('utf-8'))['Hash']
        except (ValueError, KeyError):
            raise StorageError("Unexpected IPFS add response: %r" % content[:200])
        address = '%s://%s' % (SCHEME, ipfs_hash)
        log.debug("Wrote %d bytes to %s", len(data), address)
        return address

    def read_data(self, address):
        url = self.public_url_for(address)
        if not url:
            return defer.fail(StorageError("Not an IPFS address: %r" % address))
        return self._request(b'GET', url)

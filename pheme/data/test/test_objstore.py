#!/usr/bin/env python

"""
@file pheme/data/test/test_objstore.py
@brief test content addressable object store
"""

import hashlib

from twisted.internet import defer
from twisted.trial import unittest

from pheme.data import store
from pheme.data import objstore


class BlobObjectTest(unittest.TestCase):

    def setUp(self):
        self.blob = objstore.Blob(b'foo')
        self.encoded = b"blob 3\x00foo"
        self.types = objstore.CAStore.TYPES

    def test_type(self):
        self.assertEqual(self.blob.type, 'blob')

    def test_hash(self):
        self.assertEqual(self.blob.hash, hashlib.sha1(self.encoded).hexdigest())

    def test_encode(self):
        self.assertEqual(self.blob.encode(), self.encoded)

    def test_decode(self):
        test = objstore.BaseObject.decode(self.encoded, self.types)
        self.assertEqual(test.content, b'foo')

    def test_decode_bad_length(self):
        self.assertRaises(objstore.ObjectDecodeError,
                objstore.BaseObject.decode, b"blob 5\x00foo", self.types)

    def test_decode_no_header(self):
        self.assertRaises(objstore.ObjectDecodeError,
                objstore.BaseObject.decode, b"foo", self.types)

    def test_decode_unknown_type(self):
        self.assertRaises(objstore.ObjectDecodeError,
                objstore.BaseObject.decode, b"tree 3\x00foo", self.types)


class CAStoreTest(unittest.TestCase):

    def setUp(self):
        self.backend = store.Store()
        self.cas = objstore.CAStore(self.backend, namespace='test')

    @defer.inlineCallbacks
    def test_blob(self):
        b = objstore.Blob(b'test content')
        id = yield self.cas.put(b)
        self.assertEqual(id, b.hash)
        b_out = yield self.cas.get(id)
        self.assertEqual(b.hash, b_out.hash)
        self.assertEqual(b_out.content, b'test content')

    @defer.inlineCallbacks
    def test_namespaced_key(self):
        b = objstore.Blob(b'where')
        id = yield self.cas.put(b)
        raw = yield self.backend.get('test.objects.' + id)
        self.assertEqual(raw, b.value)

    @defer.inlineCallbacks
    def test_same_content_same_id(self):
        id1 = yield self.cas.put(objstore.Blob(b'deja vu'))
        id2 = yield self.cas.put(objstore.Blob(b'deja vu'))
        id3 = yield self.cas.put(objstore.Blob(b'jamais vu'))
        self.assertEqual(id1, id2)
        self.assertNotEqual(id1, id3)

    @defer.inlineCallbacks
    def test_get_missing(self):
        obj = yield self.cas.get('0' * 40)
        self.assertEqual(obj, None)

    def test_get_corrupt(self):
        self.backend.kvs['test.objects.' + '1' * 40] = b"garbage"
        d = self.cas.get('1' * 40)
        return self.assertFailure(d, objstore.ObjectDecodeError)

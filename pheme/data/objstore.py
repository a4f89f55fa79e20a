#!/usr/bin/env python
"""
@file pheme/data/objstore.py
@brief storing immutable values (blobs) under the sha1 hash of their
        encoding, on top of any IStore backend
"""

import hashlib

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

NULL_CHR = b"\x00"

def sha1hex(val):
    return hashlib.sha1(val).hexdigest()


class ObjectDecodeError(ValueError):
    """
    Raised when a value read from the store is not a valid encoded object.
    """


class BaseObject(object):
    """Base object of content addressable value store
    Instances of these objects are immutable.
    """

    type = None

    @property
    def value(self):
        """
        @brief Bytes that actually go into the store (i.e. content
        addressable key/value store).
        """
        return self.encode()

    @property
    def hash(self):
        return sha1hex(self.value)

    def encode(self):
        body = self._encode_body()
        header = b"%s %d" % (self.type.encode('ascii'), len(body)) + NULL_CHR
        return header + body

    @staticmethod
    def decode(value, types):
        """
        @brief Decode an encoded object. Once the header is decoded, the type
        name is known and the actual type (class) is retrieved from the
        provided types dict, to which the rest of the decoding is delegated.
        @note Header format:
            [type][space][content-length][null-char]
        @param value An encoded storable object.
        @param types A dictionary of type_name:type_class where type_class
        is a derived class of BaseObject.
        @retval A new instance of the encoded object
        """
        sep_index = value.find(NULL_CHR)
        if sep_index < 0:
            raise ObjectDecodeError("Missing object header")
        type, content_length = value[:sep_index].split()
        body = value[sep_index+1:]
        if len(body) != int(content_length):
            raise ObjectDecodeError("Object body length mismatch")
        type = type.decode('ascii')
        if type not in types:
            raise ObjectDecodeError("Unknown object type %r" % type)
        return types[type]._decode_body(body)

    def _encode_body(self):
        raise NotImplementedError

    @classmethod
    def _decode_body(cls, encoded_body):
        raise NotImplementedError

class Blob(BaseObject):
    """
    Blob is a container for blob of bytes (raw content, or serialized object).
    """
    type = 'blob'

    def __init__(self, content):
        """
        @param content serializable blob (bytes)
        @note once content is set, it should not change
        """
        self.content = content

    def _encode_body(self):
        return self.content

    @classmethod
    def _decode_body(cls, encoded_body):
        return cls(encoded_body)


class StoreContextWrapper(object):
    """
    Context wrapper around backend store.
    """

    def __init__(self, backend, prefix):
        self.backend = backend
        self.prefix = prefix

    def get(self, id):
        return self.backend.get(self.prefix + id)

    def put(self, id, val):
        return self.backend.put(self.prefix + id, val)

class CAStore(object):
    """
    Content Addressable Store
    Manages a set of immutable objects, each kept under the hex sha1 of its
    encoding.
    """
    TYPES = {
            Blob.type:Blob,
            }

    def __init__(self, backend, namespace=''):
        """
        @param backend storage interface (IStore)
        @param namespace root prefix qualifying context for this CAS with in the
        general space of the backend store.
        """
        self.objstore = StoreContextWrapper(backend, namespace + '.objects.')

    def put(self, obj):
        """
        @param obj hashable object to store
        @retval Deferred, fires with the hex sha1 id of the stored object
        @note The hash is only computed here, so an id handed out by this
        method always corresponds to an object in the store.
        """
        value = obj.value
        id = sha1hex(value)
        log.debug("CAStore put %s object %s (%d bytes)", obj.type, id, len(value))
        d = self.objstore.put(id, value)
        d.addCallback(lambda _: id)
        return d

    def get(self, id):
        """
        @param id hex sha1 key where an object is stored
        @retval Deferred, fires with the store object or None if not existing.
        @note A stored value that does not decode fails with ObjectDecodeError
        """
        d = self.objstore.get(id)
        def _decode_cb(raw):
            if raw is None:
                return None
            return BaseObject.decode(raw, self.TYPES)
        d.addCallback(_decode_cb)
        return d

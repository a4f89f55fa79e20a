#!/usr/bin/env python

"""
@file pheme/core/chain.py
@brief Chain engine: keeps an ordered history of content blocks per handle
        as a chain of immutable, content addressed nodes. The registry
        only holds the address of the newest node (the pointer).

Every operation returns a Task. Mutations write all new storage objects
first and update the registry pointer last, so a failure half way leaves
the pointer untouched (and at worst some unreferenced objects in storage).

Changing a node changes its address, and with it the address of every
node above it. Replacing or removing a block therefore rewrites each
newer node, oldest first, each one linked to the freshly written node
below it.

There is no compare-and-set on the pointer: two mutations of the same
handle running at once may both rebuild from the same old head and the
later pointer write wins. Pheme(serialize=True) holds one mutation per
handle at a time within this process.
"""

import uuid

from twisted.internet import defer

from pheme.core import pheminit
from pheme.core.exception import ConfigurationError, EstimationError, NotFoundError
from pheme.core.task import create_task
from pheme.storage.base import StorageRouter
from pheme.storage.castorage import CAStorage
from pheme.util.phemetime import now_ms

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

CONF = pheminit.config(__name__)

class ChainNode(object):
    """
    One immutable step of a chain: a content address plus the address of
    the previous (older) node, or None for the oldest node.
    """

    def __init__(self, address, uuid, timestamp, meta=None, previous=None):
        self.address = address
        self.uuid = uuid
        self.timestamp = timestamp
        self.meta = dict(meta or {})
        self.previous = previous or None

    def __repr__(self):
        return "ChainNode(%r, uuid=%r, previous=%r)" % (self.address, self.uuid, self.previous)

    def to_dict(self):
        """
        @retval the stored form of this node
        """
        value = {
            'address': self.address,
            'uuid': self.uuid,
            'timestamp': self.timestamp,
            'meta': self.meta,
        }
        if self.previous:
            value['previous'] = self.previous
        return value

    @classmethod
    def from_dict(cls, value):
        return cls(value['address'], value['uuid'], value['timestamp'],
                value.get('meta'), value.get('previous'))

    def block(self):
        """
        @retval the form handed out to callers (no link)
        """
        return {
            'address': self.address,
            'uuid': self.uuid,
            'timestamp': self.timestamp,
            'meta': dict(self.meta),
        }

    def relink(self, previous):
        return ChainNode(self.address, self.uuid, self.timestamp, self.meta, previous)

    def replace(self, address, meta=None):
        """
        @retval node with new content for the same uuid; timestamp and link
            are kept
        """
        return ChainNode(address, self.uuid, self.timestamp, meta, self.previous)


class Pheme(object):
    """
    Chain engine over one registry and a set of storages.
    """

    def __init__(self, registry, storages=None, preferred=None, serialize=None):
        """
        @param registry IRegistry instance
        @param storages dict of scheme:IStorage, or a StorageRouter. An
            in-memory CAStorage if not given.
        @param preferred scheme new content is written to
        @param serialize if True, mutations of one handle never overlap
        """
        if registry is None:
            raise ConfigurationError("Cannot initialize without a valid registry supplied.")
        self.registry = registry

        if isinstance(storages, StorageRouter):
            self.storage = storages
        else:
            if not storages:
                cas = CAStorage()
                storages = {cas.scheme: cas}
            self.storage = StorageRouter(storages, preferred)

        if serialize is None:
            serialize = CONF.getValue('serialize_mutations', False)
        self.serialize = serialize
        self._locks = {}

    # Chain access

    @defer.inlineCallbacks
    def _walk(self, address):
        """
        @retval Deferred, for the list of nodes reachable from address,
            newest first
        """
        nodes = []
        while address:
            value = yield self.storage.read_object(address)
            node = ChainNode.from_dict(value)
            nodes.append(node)
            address = node.previous
        return nodes

    @defer.inlineCallbacks
    def _load(self, handle):
        """
        @retval Deferred, for (pointer or None, nodes newest first)
        """
        pointer = yield self.registry.get_pointer(handle).execute()
        nodes = yield self._walk(pointer)
        return pointer or None, nodes

    @staticmethod
    def _find(handle, nodes, block_uuid):
        for index, node in enumerate(nodes):
            if node.uuid == block_uuid:
                return index
        log.warning("No block %r in the chain of %r", block_uuid, handle)
        raise NotFoundError("%s handle does not need modification" % handle)

    @defer.inlineCallbacks
    def _rebuild(self, previous, nodes):
        """
        @brief Writes nodes (oldest first) one on top of the other, starting
            on previous.
        @retval Deferred, for (address of the last node written or previous
            if nothing was written, rebuilt nodes oldest first)
        """
        rebuilt = []
        for node in nodes:
            node = node.relink(previous)
            previous = yield self.storage.write_object(node.to_dict())
            log.debug("Rebuilt node %s at %s", node.uuid, previous)
            rebuilt.append(node)
        return previous, rebuilt

    @defer.inlineCallbacks
    def _commit(self, handle, head, context):
        task = self.registry.set_pointer(handle, head or '')
        yield task.execute()
        context['pointer'] = head or None
        context['tx_hash'] = task.context.get('tx_hash', '')
        log.info("Handle %r now points to %r", handle, head or '')

    def _mutation(self, handle, execute):
        """
        @retval execute, guarded by the lock of handle when serializing.
            A lock is dropped once no mutation of its handle is running or
            waiting.
        """
        if not self.serialize:
            return execute

        def run(context):
            lock = self._locks.setdefault(handle, defer.DeferredLock())

            def _release(result):
                if not lock.locked and self._locks.get(handle) is lock:
                    del self._locks[handle]
                return result

            d = lock.run(execute, context)
            d.addBoth(_release)
            return d

        return run

    # Estimation helpers

    @defer.inlineCallbacks
    def _estimate_nodes(self, nodes):
        cost = 0
        stand_in = self.storage.address_for_estimation()
        for node in nodes:
            data = self.storage.serialize(node.relink(stand_in).to_dict())
            node_cost = yield self.storage.estimate_write(data)
            cost += node_cost
        return cost

    @defer.inlineCallbacks
    def _estimate_pointer(self, handle, empty=False):
        address = '' if empty else self.storage.address_for_estimation()
        cost = yield self.registry.set_pointer(handle, address).estimate()
        return cost

    @defer.inlineCallbacks
    def _load_for_estimate(self, handle, block_uuid):
        pointer, nodes = yield self._load(handle)
        try:
            index = self._find(handle, nodes, block_uuid)
        except NotFoundError as ex:
            raise EstimationError(str(ex))
        return nodes, index

    # Operations

    def register_handle(self, handle):
        """
        @retval Task registering handle with an empty chain
        """
        return self.registry.register(handle)

    def get_handle_owner(self, handle):
        return self.registry.get_owner(handle)

    def load_handle(self, handle):
        """
        @retval Task, executes to (head address or None, blocks newest first)
        """
        @defer.inlineCallbacks
        def execute(context):
            pointer, nodes = yield self._load(handle)
            return pointer, [node.block() for node in nodes]

        return create_task({'execute': execute}, {'handle': handle})

    def push_to_handle(self, handle, content, meta=None):
        """
        @param content bytes of the new block
        @param meta dict describing the block
        @retval Task, executes to (new head address, blocks newest first)
        """
        meta = dict(meta or {})

        @defer.inlineCallbacks
        def estimate(context):
            content_cost = yield self.storage.estimate_write(content)
            stand_in = ChainNode(self.storage.address_for_estimation(), str(uuid.uuid4()),
                    now_ms(), meta)
            node_cost = yield self._estimate_nodes([stand_in])
            pointer_cost = yield self._estimate_pointer(handle)
            return content_cost + node_cost + pointer_cost

        @defer.inlineCallbacks
        def execute(context):
            content_address = yield self.storage.write_data(content)
            pointer = yield self.registry.get_pointer(handle).execute()
            # Nothing may be read once the pointer has moved
            older = yield self._walk(pointer)
            node = ChainNode(content_address, str(uuid.uuid4()), now_ms(), meta, pointer)
            head = yield self.storage.write_object(node.to_dict())
            log.debug("Pushed block %s to %r at %s", node.uuid, handle, head)
            yield self._commit(handle, head, context)
            return head, [node.block()] + [n.block() for n in older]

        return create_task({
            'estimate': estimate,
            'execute': self._mutation(handle, execute),
        }, {'handle': handle, 'pointer': None, 'tx_hash': ''})

    def replace_from_handle(self, handle, block_uuid, content, meta=None):
        """
        @brief Replaces content and meta of the block with block_uuid. The
            block keeps its uuid, timestamp and position.
        @retval Task, executes to (new head address, blocks newest first);
            fails with NotFoundError if no block has block_uuid
        """
        meta = dict(meta or {})

        @defer.inlineCallbacks
        def estimate(context):
            nodes, index = yield self._load_for_estimate(handle, block_uuid)
            content_cost = yield self.storage.estimate_write(content)
            replacement = nodes[index].replace(self.storage.address_for_estimation(), meta)
            node_cost = yield self._estimate_nodes([replacement] + nodes[:index])
            pointer_cost = yield self._estimate_pointer(handle)
            return content_cost + node_cost + pointer_cost

        @defer.inlineCallbacks
        def execute(context):
            pointer, nodes = yield self._load(handle)
            index = self._find(handle, nodes, block_uuid)
            content_address = yield self.storage.write_data(content)
            replacement = nodes[index].replace(content_address, meta)
            newer = list(reversed(nodes[:index]))
            head, rebuilt = yield self._rebuild(replacement.previous, [replacement] + newer)
            yield self._commit(handle, head, context)
            chain = list(reversed(rebuilt)) + nodes[index + 1:]
            return head, [node.block() for node in chain]

        return create_task({
            'estimate': estimate,
            'execute': self._mutation(handle, execute),
        }, {'handle': handle, 'pointer': None, 'tx_hash': ''})

    def remove_from_handle(self, handle, block_uuid):
        """
        @brief Removes the block with block_uuid; the next newer block is
            linked to the next older one.
        @retval Task, executes to (new head address or None, blocks newest
            first); fails with NotFoundError if no block has block_uuid
        """
        @defer.inlineCallbacks
        def estimate(context):
            nodes, index = yield self._load_for_estimate(handle, block_uuid)
            node_cost = yield self._estimate_nodes(nodes[:index])
            empty = len(nodes) == 1
            pointer_cost = yield self._estimate_pointer(handle, empty)
            return node_cost + pointer_cost

        @defer.inlineCallbacks
        def execute(context):
            pointer, nodes = yield self._load(handle)
            index = self._find(handle, nodes, block_uuid)
            newer = list(reversed(nodes[:index]))
            head, rebuilt = yield self._rebuild(nodes[index].previous, newer)
            yield self._commit(handle, head, context)
            chain = list(reversed(rebuilt)) + nodes[index + 1:]
            return head or None, [node.block() for node in chain]

        return create_task({
            'estimate': estimate,
            'execute': self._mutation(handle, execute),
        }, {'handle': handle, 'pointer': None, 'tx_hash': ''})

    def get_handle_profile(self, handle):
        """
        @retval Task, executes to the profile dict of handle ({} if unset)
        """
        @defer.inlineCallbacks
        def execute(context):
            address = yield self.registry.get_profile(handle).execute()
            if not address:
                return {}
            profile = yield self.storage.read_object(address)
            return profile

        return create_task({'execute': execute}, {'handle': handle})

    def update_handle_profile(self, handle, profile):
        """
        @retval Task, executes to the storage address of the new profile
        """
        @defer.inlineCallbacks
        def estimate(context):
            data_cost = yield self.storage.estimate_write(self.storage.serialize(profile))
            registry_cost = yield self.registry.set_profile(handle,
                    self.storage.address_for_estimation()).estimate()
            return data_cost + registry_cost

        @defer.inlineCallbacks
        def execute(context):
            address = yield self.storage.write_object(profile)
            task = self.registry.set_profile(handle, address)
            yield task.execute()
            context['profile'] = address
            context['tx_hash'] = task.context.get('tx_hash', '')
            log.info("Handle %r profile now at %r", handle, address)
            return address

        return create_task({'estimate': estimate, 'execute': execute},
                {'handle': handle, 'profile': None, 'tx_hash': ''})

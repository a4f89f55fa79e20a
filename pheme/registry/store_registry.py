#!/usr/bin/env python

"""
@file pheme/registry/store_registry.py
@brief IRegistry implementation keeping handle records in an IStore.

Records are kept simplejson encoded under 'handle.<name>', the registration
order under 'handles'. Writes are restricted to the owner of a handle,
where the caller is identified by the account the registry was connected
with. Setter tasks are priced like ledger transactions: the gas price
times a per-method gas cost, both looked up once per task.
"""

import simplejson as json

from zope.interface import implementer

from twisted.internet import defer

from pheme.core import pheminit
from pheme.core.exception import EstimationError, RegistryError
from pheme.core.task import create_task
from pheme.data.objstore import sha1hex
from pheme.data.store import Store
from pheme.registry.base import IRegistry

import pheme.util.phemelog
log = pheme.util.phemelog.getLogger(__name__)

CONF = pheminit.config(__name__)

# Handles are stored in 32 byte slots
MAX_HANDLE_LENGTH = 32

DEFAULT_ACCOUNT = 'local'

@implementer(IRegistry)
class StoreRegistry(object):
    """
    Registry of handles on top of an asynchronous key/value store.
    """

    def __init__(self, backend=None, account=DEFAULT_ACCOUNT, gas_price=None, gas_costs=None):
        """
        @param backend IStore instance; an in-memory Store if not given
        @param account identity performing writes through this instance
        @param gas_price price of one unit of gas
        @param gas_costs dict of method name: gas units
        """
        self.backend = backend if backend is not None else Store()
        self.account = account
        if gas_price is None:
            gas_price = CONF.getValue('gas_price', 1)
        self.gas_price = gas_price
        self.gas_costs = dict(CONF.getValue('gas_costs', {}))
        self.gas_costs.update(gas_costs or {})
        self._tx_count = 0

    def connect(self, account):
        """
        @retval a StoreRegistry on the same records acting as account
        """
        return StoreRegistry(self.backend, account, self.gas_price, self.gas_costs)

    # Record access

    @staticmethod
    def _key(handle):
        return 'handle.' + handle

    @defer.inlineCallbacks
    def _get_record(self, handle):
        raw = yield self.backend.get(self._key(handle))
        return json.loads(raw) if raw else None

    def _put_record(self, handle, record):
        return self.backend.put(self._key(handle), json.dumps(record, sort_keys=True))

    @defer.inlineCallbacks
    def _get_handles(self):
        raw = yield self.backend.get('handles')
        return json.loads(raw) if raw else []

    @staticmethod
    def _check_handle(handle):
        if not handle or not isinstance(handle, str):
            raise RegistryError("Invalid handle %r" % (handle,))
        if len(handle.encode('utf-8')) > MAX_HANDLE_LENGTH:
            raise RegistryError("Handle %r is longer than %d bytes" % (handle, MAX_HANDLE_LENGTH))

    @defer.inlineCallbacks
    def _owned_record(self, handle):
        """
        @retval Deferred, for the record of handle if the account owns it
        """
        self._check_handle(handle)
        record = yield self._get_record(handle)
        if record is None:
            raise RegistryError("Handle %r is not registered" % handle)
        if record['owner'] != self.account:
            raise RegistryError("Account %r does not own handle %r" % (self.account, handle))
        return record

    # Task builders

    def _build_getter_task(self, method, fn, *args):
        def execute(context):
            log.debug("%s%r", method, args)
            return fn(*args)

        return create_task({
            'estimate': lambda context: 0,
            'execute': execute,
        }, {'tx_hash': ''})

    def _build_setter_task(self, method, validate, apply, *args):
        """
        @param method name of the priced method (key of gas_costs)
        @param validate callable(*args) returning a Deferred for the state
            apply works on; fails with RegistryError on invalid state
        @param apply callable(state, *args) performing the write
        """
        cache = {}

        def get_gas_price():
            if 'gas_price' not in cache:
                cache['gas_price'] = self.gas_price
            return cache['gas_price']

        @defer.inlineCallbacks
        def estimate_gas():
            if 'gas' not in cache:
                try:
                    yield validate(*args)
                except RegistryError as ex:
                    raise EstimationError("Can not estimate %s: %s" % (method, ex))
                cache['gas'] = self.gas_costs.get(method, 0)
            return cache['gas']

        @defer.inlineCallbacks
        def estimate(context):
            gas = yield estimate_gas()
            return get_gas_price() * gas

        @defer.inlineCallbacks
        def execute(context):
            state = yield validate(*args)
            yield apply(state, *args)
            context['tx_hash'] = self._next_tx_hash(method, args)
            log.debug("%s%r by %s: tx %s", method, args, self.account, context['tx_hash'])

        return create_task({'estimate': estimate, 'execute': execute}, {'tx_hash': ''})

    def _next_tx_hash(self, method, args):
        self._tx_count += 1
        payload = json.dumps([self.account, method, list(args), self._tx_count])
        return '0x' + sha1hex(payload.encode('utf-8'))

    # IRegistry

    def register(self, handle):
        return self._build_setter_task('register', self._validate_register,
                self._apply_register, handle)

    @defer.inlineCallbacks
    def _validate_register(self, handle):
        self._check_handle(handle)
        record = yield self._get_record(handle)
        if record is not None and record['owner'] != self.account:
            raise RegistryError("Handle %r is already registered" % handle)
        return record

    @defer.inlineCallbacks
    def _apply_register(self, record, handle):
        if record is not None:
            # Registering an owned handle again changes nothing
            return
        yield self._put_record(handle, {'owner': self.account, 'pointer': '', 'profile': ''})
        handles = yield self._get_handles()
        handles.append(handle)
        yield self.backend.put('handles', json.dumps(handles))
        log.info("Registered handle %r for %s", handle, self.account)

    def _get_field(self, handle, field):
        d = self._get_record(handle)
        d.addCallback(lambda record: record[field] if record else '')
        return d

    def _set_field(self, field):
        def apply(record, handle, value):
            record[field] = value
            return self._put_record(handle, record)
        return apply

    def _validate_owned(self, handle, value):
        return self._owned_record(handle)

    def get_pointer(self, handle):
        return self._build_getter_task('get_pointer', self._get_field, handle, 'pointer')

    def set_pointer(self, handle, value=''):
        return self._build_setter_task('set_pointer', self._validate_owned,
                self._set_field('pointer'), handle, value or '')

    def get_profile(self, handle):
        return self._build_getter_task('get_profile', self._get_field, handle, 'profile')

    def set_profile(self, handle, value=''):
        return self._build_setter_task('set_profile', self._validate_owned,
                self._set_field('profile'), handle, value or '')

    def get_owner(self, handle):
        return self._build_getter_task('get_owner', self._get_field, handle, 'owner')

    def set_owner(self, handle, value=''):
        return self._build_setter_task('set_owner', self._validate_owned,
                self._set_field('owner'), handle, value or '')

    @defer.inlineCallbacks
    def _handle_at(self, index):
        handles = yield self._get_handles()
        if not 0 <= index < len(handles):
            raise RegistryError("No handle at index %d" % index)
        return handles[index]

    def get_handle_at(self, index):
        return self._build_getter_task('get_handle_at', self._handle_at, index)

    @defer.inlineCallbacks
    def _handle_count(self):
        handles = yield self._get_handles()
        return len(handles)

    def get_handle_count(self):
        return self._build_getter_task('get_handle_count', self._handle_count)

    @defer.inlineCallbacks
    def _handle_by_owner(self, owner):
        handles = yield self._get_handles()
        for handle in handles:
            record = yield self._get_record(handle)
            if record and record['owner'] == owner:
                return handle
        return ''

    def get_handle_by_owner(self, owner):
        return self._build_getter_task('get_handle_by_owner', self._handle_by_owner, owner)

from types import MappingProxyType
from typing import (
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from cachetools import LRUCache
from eth_hash.auto import keccak
from eth_typing import (
    Address,
    BlockNumber,
    Hash32,
)
from eth_utils import (
    encode_hex,
    get_extended_debug_logger,
)

from forkvm import config
from forkvm.AbstractClass import (
    ApplyBackendAPI,
    BackendAPI,
    ExecutionContextAPI,
    RemoteStateAPI,
)
from forkvm.db.Account import ForkAccount
from forkvm.Diff import (
    Apply,
    Basic,
    Delete,
    Modify,
    validate_apply,
)
from forkvm.EVMLog import Log, validate_log
from forkvm.Exception import RemoteResolutionError, RemoteStateError
from forkvm.utils.constant import LATEST_BLOCK
from forkvm.utils.EVMTyping import BlockIdentifier
from forkvm.utils.Validation import (
    validate_block_identifier,
    validate_canonical_address,
    validate_is_boolean,
    validate_uint256,
)

BALANCE = "balance"
NONCE = "nonce"
CODE = "code"
STORAGE = "storage"


class ForkMemoryBackend(BackendAPI, ApplyBackendAPI):
    """
    In-memory world state layered over a read-only remote node.

    Reads are answered from the local account records when the field is
    resolved there, and from the remote node, pinned to ``block``, when it is
    not. Only :meth:`apply` changes the local records; nothing is ever written
    to the remote node.

    A backend is not safe for concurrent use. Readers and the committer are
    expected to share one thread for the lifetime of the session.

    By default the result of a remote lookup is used for the current read
    only, so every read of an unresolved field costs a round trip. With
    ``cache_remote_reads`` the results are kept in a bounded read cache that
    sits beside the account records: it does not make an address exist, it
    is not part of :attr:`state`, and every commit evicts the entries it
    overwrites, prunes or deletes.
    """

    logger = get_extended_debug_logger("forkvm.state.ForkMemoryBackend")

    def __init__(
        self,
        execution_context: ExecutionContextAPI,
        remote: RemoteStateAPI,
        accounts: Mapping[Address, ForkAccount] = None,
        block: BlockIdentifier = LATEST_BLOCK,
        storage_block: Optional[BlockIdentifier] = None,
        cache_remote_reads: bool = False,
        read_cache_size: int = config.READ_CACHE_SIZE,
    ) -> None:
        validate_block_identifier(block, title="Fork block")
        if storage_block is None:
            storage_block = block
        else:
            validate_block_identifier(storage_block, title="Storage block")
        validate_is_boolean(cache_remote_reads, title="cache_remote_reads")

        self.execution_context = execution_context
        self._remote = remote
        self._block = block
        self._storage_block = storage_block
        self._state: Dict[Address, ForkAccount] = {}
        self._logs: List[Log] = []
        self._read_cache: Optional[LRUCache] = (
            LRUCache(maxsize=read_cache_size) if cache_remote_reads else None
        )

        for address, account in (accounts or {}).items():
            validate_canonical_address(address, title="Seeded Address")
            if not isinstance(account, ForkAccount):
                raise TypeError(
                    f"Seeded account for {encode_hex(address)} must be a ForkAccount"
                )
            self._state[address] = account.copy()

        if storage_block != block:
            self.logger.warning(
                "Storage reads are pinned to block %r, other fields to block %r",
                storage_block,
                block,
            )
        self.logger.debug(
            "Fork backend at block %r with %d seeded accounts",
            block,
            len(self._state),
        )

    @property
    def block(self) -> BlockIdentifier:
        return self._block

    @property
    def storage_block(self) -> BlockIdentifier:
        return self._storage_block

    #
    # Execution context (read-only)
    #
    @property
    def gas_price(self) -> int:
        return self.execution_context.gas_price

    @property
    def origin(self) -> Address:
        return self.execution_context.origin

    @property
    def chain_id(self) -> int:
        return self.execution_context.chain_id

    @property
    def block_number(self) -> BlockNumber:
        return self.execution_context.block_number

    @property
    def block_coinbase(self) -> Address:
        return self.execution_context.coinbase

    @property
    def block_timestamp(self) -> int:
        return self.execution_context.timestamp

    @property
    def block_difficulty(self) -> int:
        return self.execution_context.difficulty

    @property
    def block_gas_limit(self) -> int:
        return self.execution_context.gas_limit

    def block_hash(self, block_number: int) -> Hash32:
        return self.execution_context.block_hash(block_number)

    #
    # Reads
    #
    def exists(self, address: Address) -> bool:
        validate_canonical_address(address, title="Account Address")
        return address in self._state

    def basic(self, address: Address) -> Basic:
        validate_canonical_address(address, title="Account Address")
        account = self._get_account(address)

        balance = account.balance
        if balance is None:
            balance = self._resolve(address, BALANCE)
        nonce = account.nonce
        if nonce is None:
            nonce = self._resolve(address, NONCE)
        return Basic(balance, nonce)

    def code(self, address: Address) -> bytes:
        validate_canonical_address(address, title="Code Address")
        account = self._get_account(address)
        if account.code is not None:
            return account.code
        return self._resolve(address, CODE)

    def code_size(self, address: Address) -> int:
        return len(self.code(address))

    def code_hash(self, address: Address) -> Hash32:
        return Hash32(keccak(self.code(address)))

    def storage(self, address: Address, slot: int) -> int:
        validate_canonical_address(address, title="Storage Address")
        validate_uint256(slot, title="Storage Slot")
        account = self._get_account(address)
        if account.has_storage_slot(slot):
            return account.storage[slot]
        return self._resolve(address, STORAGE, slot)

    def _get_account(self, address: Address) -> ForkAccount:
        account = self._state.get(address)
        if account is None:
            return ForkAccount()
        return account

    def _resolve(
        self, address: Address, field: str, slot: int = None
    ) -> Union[int, bytes]:
        cache_key = self._cache_key(address, field, slot)
        if self._read_cache is not None and cache_key in self._read_cache:
            return self._read_cache[cache_key]

        block = self._storage_block if field == STORAGE else self._block
        if slot is None:
            self.logger.debug2(
                "Fetching %s of %s at block %r", field, encode_hex(address), block
            )
        else:
            self.logger.debug2(
                "Fetching slot %s of %s at block %r",
                hex(slot),
                encode_hex(address),
                block,
            )

        try:
            if field == BALANCE:
                value = self._remote.get_balance(address, block)
            elif field == NONCE:
                value = self._remote.get_transaction_count(address, block)
            elif field == CODE:
                value = self._remote.get_code(address, block)
            else:
                value = self._remote.get_storage_at(address, slot, block)
        except RemoteStateError as exc:
            raise RemoteResolutionError(address, field, block, slot) from exc

        if self._read_cache is not None:
            self._read_cache[cache_key] = value
        return value

    #
    # Read cache
    #
    @staticmethod
    def _cache_key(address: Address, field: str, slot: int = None) -> Hashable:
        if slot is None:
            return (address, field)
        return (address, field, slot)

    def _evict(self, address: Address, field: str, slot: int = None) -> None:
        if self._read_cache is not None:
            self._read_cache.pop(self._cache_key(address, field, slot), None)

    def _evict_storage(self, address: Address) -> None:
        if self._read_cache is None:
            return
        stale = [
            key
            for key in self._read_cache
            if key[0] == address and key[1] == STORAGE
        ]
        for key in stale:
            del self._read_cache[key]

    def _evict_account(self, address: Address) -> None:
        if self._read_cache is None:
            return
        stale = [key for key in self._read_cache if key[0] == address]
        for key in stale:
            del self._read_cache[key]

    #
    # Commit
    #
    def apply(
        self,
        values: Iterable[Apply],
        logs: Iterable[Log],
        delete_empty: bool,
    ) -> None:
        validate_is_boolean(delete_empty, title="delete_empty")
        # the whole diff is checked before any entry is applied
        entries = [validate_apply(entry) for entry in values]
        new_logs = tuple(logs)
        for log in new_logs:
            validate_log(log)
        remote_code: Dict[Address, bytes] = {}
        if delete_empty:
            remote_code = self._fetch_code_for_empty_check(entries)

        for entry in entries:
            if isinstance(entry, Modify):
                self._apply_modify(entry, delete_empty, remote_code)
            else:
                self._apply_delete(entry)

        self._logs.extend(new_logs)
        self.logger.debug(
            "Applied %d account changes and %d logs", len(entries), len(new_logs)
        )

    def _fetch_code_for_empty_check(
        self, entries: Iterable[Apply]
    ) -> Dict[Address, bytes]:
        """
        Fetch the remote code of every account that a zero balance, zero nonce
        Modify may leave empty while its code is unresolved locally. Runs
        before any entry is applied, so a failed lookup leaves the backend
        untouched.
        """
        # code each address will hold when its entry is reached, None if unresolved
        local_code: Dict[Address, Optional[bytes]] = {}
        fetched: Dict[Address, bytes] = {}
        for entry in entries:
            address = entry.address
            if isinstance(entry, Delete):
                local_code[address] = None
                continue
            if entry.code is not None:
                local_code[address] = entry.code
            elif address not in local_code:
                local_code[address] = self._get_account(address).code
            if any(entry.basic):
                continue

            if local_code[address] is None and address not in fetched:
                fetched[address] = self._resolve(address, CODE)
            if not local_code[address]:
                # the record may be removed as empty here
                local_code[address] = None
        return fetched

    def _apply_modify(
        self, entry: Modify, delete_empty: bool, remote_code: Mapping[Address, bytes]
    ) -> None:
        address = entry.address
        account = self._state.get(address)
        if account is None:
            account = ForkAccount()
            self._state[address] = account

        account.balance, account.nonce = entry.basic
        self._evict(address, BALANCE)
        self._evict(address, NONCE)
        if entry.code is not None:
            account.code = entry.code
            self._evict(address, CODE)

        if entry.reset_storage:
            account.storage = None
            self._evict_storage(address)

        storage: Dict[int, int] = {}
        for slot, value in (account.storage or {}).items():
            if value:
                storage[slot] = value
            else:
                self._evict(address, STORAGE, slot)

        for slot, value in entry.storage:
            if value:
                storage[slot] = value
            else:
                storage.pop(slot, None)
            self._evict(address, STORAGE, slot)
        account.storage = storage

        self.logger.debug2(
            "Modified %s: balance=%d nonce=%d slots=%d",
            encode_hex(address),
            account.balance,
            account.nonce,
            len(storage),
        )

        if delete_empty and account.is_empty(code=remote_code.get(address)):
            self.logger.debug2("Removing empty account %s", encode_hex(address))
            del self._state[address]
            self._evict_account(address)

    def _apply_delete(self, entry: Delete) -> None:
        self.logger.debug2("Deleting account %s", encode_hex(entry.address))
        self._state.pop(entry.address, None)
        self._evict_account(entry.address)

    #
    # Inspection
    #
    @property
    def state(self) -> Mapping[Address, ForkAccount]:
        """
        Return a read-only view of copies of the account records. Changing a
        returned record does not change the backend.
        """
        return MappingProxyType(self.snapshot())

    @property
    def logs(self) -> Tuple[Log, ...]:
        return tuple(self._logs)

    def snapshot(self) -> Dict[Address, ForkAccount]:
        """
        Return an independent copy of every account record.
        """
        return {address: account.copy() for address, account in self._state.items()}

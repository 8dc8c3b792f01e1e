from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    TYPE_CHECKING,
    Iterable,
    Mapping,
    Sequence,
    Tuple,
)

from eth_typing import (
    Address,
    BlockNumber,
    Hash32,
)

from forkvm.utils.EVMTyping import BlockIdentifier

if TYPE_CHECKING:
    from forkvm.db.Account import ForkAccount
    from forkvm.Diff import Apply, Basic
    from forkvm.EVMLog import Log


class ExecutionContextAPI(ABC):
    """
    A class representing context information that remains constant over the
    execution of a block.
    """

    @property
    @abstractmethod
    def gas_price(self) -> int:
        """
        Return the gas price used by the session.
        """
        ...

    @property
    @abstractmethod
    def origin(self) -> Address:
        """
        Return the origin address used by the session.
        """
        ...

    @property
    @abstractmethod
    def chain_id(self) -> int:
        """
        Return the id of the chain.
        """
        ...

    @property
    @abstractmethod
    def block_number(self) -> BlockNumber:
        """
        Return the number of the block.
        """
        ...

    @property
    @abstractmethod
    def timestamp(self) -> int:
        """
        Return the timestamp of the block.
        """
        ...

    @property
    @abstractmethod
    def difficulty(self) -> int:
        """
        Return the difficulty of the block.
        """
        ...

    @property
    @abstractmethod
    def gas_limit(self) -> int:
        """
        Return the gas limit of the block.
        """
        ...

    @property
    @abstractmethod
    def coinbase(self) -> Address:
        """
        Return the coinbase address of the block.
        """
        ...

    @property
    @abstractmethod
    def block_hashes(self) -> Tuple[Hash32, ...]:
        """
        Return the hashes of the most recent blocks, newest first.
        """
        ...

    @abstractmethod
    def block_hash(self, block_number: int) -> Hash32:
        """
        Return the hash of the block with the given ``block_number``, or the
        zero hash when the block is not in the recent-hash window.
        """
        ...


class RemoteStateAPI(ABC):
    """
    A read-only source of account state, usually a node reached over JSON-RPC.

    Every query blocks the caller until the node answers and raises
    :class:`~forkvm.Exception.RemoteStateError` on failure.
    """

    @abstractmethod
    def get_balance(self, address: Address, block: BlockIdentifier) -> int:
        """
        Return the balance of ``address`` at ``block``.
        """
        ...

    @abstractmethod
    def get_transaction_count(self, address: Address, block: BlockIdentifier) -> int:
        """
        Return the nonce of ``address`` at ``block``.
        """
        ...

    @abstractmethod
    def get_code(self, address: Address, block: BlockIdentifier) -> bytes:
        """
        Return the code deployed at ``address`` at ``block``.
        """
        ...

    @abstractmethod
    def get_storage_at(
        self, address: Address, slot: int, block: BlockIdentifier
    ) -> int:
        """
        Return the value of storage ``slot`` of ``address`` at ``block``.
        """
        ...


class BackendAPI(ABC):
    """
    Read access to world state, as consumed by an interpreter.
    """

    @property
    @abstractmethod
    def gas_price(self) -> int: ...

    @property
    @abstractmethod
    def origin(self) -> Address: ...

    @property
    @abstractmethod
    def chain_id(self) -> int: ...

    @property
    @abstractmethod
    def block_number(self) -> BlockNumber: ...

    @property
    @abstractmethod
    def block_coinbase(self) -> Address: ...

    @property
    @abstractmethod
    def block_timestamp(self) -> int: ...

    @property
    @abstractmethod
    def block_difficulty(self) -> int: ...

    @property
    @abstractmethod
    def block_gas_limit(self) -> int: ...

    @abstractmethod
    def block_hash(self, block_number: int) -> Hash32:
        """
        Return the hash of a recent block, or the zero hash.
        """
        ...

    @abstractmethod
    def exists(self, address: Address) -> bool:
        """
        Return ``True`` if the backend holds a record for ``address``.
        """
        ...

    @abstractmethod
    def basic(self, address: Address) -> "Basic":
        """
        Return the balance and nonce of ``address``.
        """
        ...

    @abstractmethod
    def code(self, address: Address) -> bytes:
        """
        Return the code of ``address``.
        """
        ...

    @abstractmethod
    def code_size(self, address: Address) -> int:
        """
        Return the length of the code of ``address``.
        """
        ...

    @abstractmethod
    def code_hash(self, address: Address) -> Hash32:
        """
        Return the keccak hash of the code of ``address``.
        """
        ...

    @abstractmethod
    def storage(self, address: Address, slot: int) -> int:
        """
        Return the value of storage ``slot`` of ``address``.
        """
        ...


class ApplyBackendAPI(ABC):
    """
    Write access to world state: folds the outcome of an execution step back
    into the backend.
    """

    @abstractmethod
    def apply(
        self,
        values: Iterable["Apply"],
        logs: Iterable["Log"],
        delete_empty: bool,
    ) -> None:
        """
        Apply the account changes in ``values`` in order and append ``logs``.
        Accounts left empty are removed when ``delete_empty`` is set.
        """
        ...

    @property
    @abstractmethod
    def state(self) -> Mapping[Address, "ForkAccount"]:
        """
        Return a read-only view of the account records held by the backend.
        """
        ...

    @property
    @abstractmethod
    def logs(self) -> Sequence["Log"]:
        """
        Return every log appended so far, in order.
        """
        ...

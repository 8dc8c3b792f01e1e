from typing import Dict, List, Tuple

import pytest
from eth_typing import Address

from forkvm.AbstractClass import RemoteStateAPI
from forkvm.Exception import RemoteStateError
from forkvm.ExecutionContext import ExecutionContext
from forkvm.utils.EVMTyping import BlockIdentifier

BLOCK_NUMBER = 100
ORIGIN = Address(b"\x01" * 20)
COINBASE = Address(b"\xc0" * 20)
BLOCK_HASHES = tuple(bytes([i + 1]) * 32 for i in range(4))


class StubRemote(RemoteStateAPI):
    """
    In-memory remote node that records every query made against it.
    """

    def __init__(self) -> None:
        self.balances: Dict[Address, int] = {}
        self.nonces: Dict[Address, int] = {}
        self.codes: Dict[Address, bytes] = {}
        self.storage: Dict[Tuple[Address, int], int] = {}
        self.calls: List[tuple] = []
        self.fail = False

    def _record(self, *call) -> None:
        self.calls.append(call)
        if self.fail:
            raise RemoteStateError("node unavailable", method=call[0])

    def get_balance(self, address: Address, block: BlockIdentifier) -> int:
        self._record("balance", address, block)
        return self.balances.get(address, 0)

    def get_transaction_count(self, address: Address, block: BlockIdentifier) -> int:
        self._record("nonce", address, block)
        return self.nonces.get(address, 0)

    def get_code(self, address: Address, block: BlockIdentifier) -> bytes:
        self._record("code", address, block)
        return self.codes.get(address, b"")

    def get_storage_at(
        self, address: Address, slot: int, block: BlockIdentifier
    ) -> int:
        self._record("storage", address, slot, block)
        return self.storage.get((address, slot), 0)

    def calls_for(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def remote() -> StubRemote:
    return StubRemote()


@pytest.fixture
def execution_context() -> ExecutionContext:
    return ExecutionContext(
        gas_price=10,
        origin=ORIGIN,
        chain_id=1,
        block_number=BLOCK_NUMBER,
        timestamp=1_700_000_000,
        difficulty=0,
        gas_limit=30_000_000,
        coinbase=COINBASE,
        block_hashes=BLOCK_HASHES,
    )

from typing import (
    Sequence,
    Tuple,
)

from eth_typing import (
    Address,
    BlockNumber,
    Hash32,
)

from forkvm.AbstractClass import ExecutionContextAPI
from forkvm.utils.constant import MAX_PREV_HEADER_DEPTH, ZERO_HASH32
from forkvm.utils.Validation import (
    validate_canonical_address,
    validate_hash32,
    validate_lte,
    validate_uint256,
)


class ExecutionContext(ExecutionContextAPI):
    __slots__ = [
        "_gas_price",
        "_origin",
        "_chain_id",
        "_block_number",
        "_timestamp",
        "_difficulty",
        "_gas_limit",
        "_coinbase",
        "_block_hashes",
    ]

    def __init__(
        self,
        gas_price: int,
        origin: Address,
        chain_id: int,
        block_number: BlockNumber,
        timestamp: int,
        difficulty: int,
        gas_limit: int,
        coinbase: Address,
        block_hashes: Sequence[Hash32] = (),
    ) -> None:
        validate_uint256(gas_price, title="ExecutionContext.gas_price")
        validate_canonical_address(origin, title="ExecutionContext.origin")
        validate_uint256(chain_id, title="ExecutionContext.chain_id")
        validate_uint256(block_number, title="ExecutionContext.block_number")
        validate_uint256(timestamp, title="ExecutionContext.timestamp")
        validate_uint256(difficulty, title="ExecutionContext.difficulty")
        validate_uint256(gas_limit, title="ExecutionContext.gas_limit")
        validate_canonical_address(coinbase, title="ExecutionContext.coinbase")
        block_hashes = tuple(block_hashes)
        validate_lte(
            len(block_hashes),
            MAX_PREV_HEADER_DEPTH,
            title="ExecutionContext.block_hashes length",
        )
        for block_hash in block_hashes:
            validate_hash32(block_hash, title="ExecutionContext.block_hashes item")

        self._gas_price = gas_price
        self._origin = origin
        self._chain_id = chain_id
        self._block_number = block_number
        self._timestamp = timestamp
        self._difficulty = difficulty
        self._gas_limit = gas_limit
        self._coinbase = coinbase
        self._block_hashes = block_hashes

    @property
    def gas_price(self) -> int:
        return self._gas_price

    @property
    def origin(self) -> Address:
        return self._origin

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def block_number(self) -> BlockNumber:
        return self._block_number

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def difficulty(self) -> int:
        return self._difficulty

    @property
    def gas_limit(self) -> int:
        return self._gas_limit

    @property
    def coinbase(self) -> Address:
        return self._coinbase

    @property
    def block_hashes(self) -> Tuple[Hash32, ...]:
        return self._block_hashes

    def block_hash(self, block_number: int) -> Hash32:
        # block_hashes[0] is the parent of the current block
        ancestor_depth = self._block_number - block_number - 1
        is_ancestor_depth_out_of_range = (
            block_number >= self._block_number
            or ancestor_depth >= len(self._block_hashes)
        )
        if is_ancestor_depth_out_of_range:
            return ZERO_HASH32
        return self._block_hashes[ancestor_depth]

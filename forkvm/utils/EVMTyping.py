from typing import Literal, Union

from eth_typing import BlockNumber

BlockTag = Literal["latest", "earliest", "pending", "safe", "finalized"]

# a historical block reference: a concrete block number or a named tag
BlockIdentifier = Union[BlockNumber, int, BlockTag]

from eth_hash.auto import keccak
from eth_typing import Hash32

UINT_256_MAX = 2**256 - 1
UINT_256_CEILING = 2**256

ZERO_HASH32 = Hash32(32 * b"\x00")
EMPTY_SHA3 = Hash32(keccak(b""))

# the BLOCKHASH opcode only reaches back this many blocks
MAX_PREV_HEADER_DEPTH = 256

LATEST_BLOCK = "latest"
BLOCK_TAGS = frozenset(("latest", "earliest", "pending", "safe", "finalized"))

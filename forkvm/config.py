# forkvm/config.py
import os

# JSON-RPC endpoint of the node the backend forks from
RPC_URL = os.environ.get("FORKVM_RPC_URL", "http://127.0.0.1:8545")

# block the fork is pinned to, a block number or "latest"
_fork_block = os.environ.get("FORKVM_FORK_BLOCK", "latest")
FORK_BLOCK = int(_fork_block, 0) if _fork_block[:1].isdigit() else _fork_block

# seconds to wait for a single JSON-RPC round trip
REQUEST_TIMEOUT = float(os.environ.get("FORKVM_REQUEST_TIMEOUT", "30"))

# entries kept by the optional read cache of a fork backend
READ_CACHE_SIZE = int(os.environ.get("FORKVM_READ_CACHE_SIZE", "4096"))

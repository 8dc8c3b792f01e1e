from typing import (
    Any,
    Mapping,
)

from eth_typing import Address

from forkvm import config
from forkvm.AbstractClass import ExecutionContextAPI
from forkvm.db.Account import ForkAccount
from forkvm.Diff import Basic, Delete, Modify
from forkvm.EthereumAPI import EthereumAPI
from forkvm.EVMLog import Log
from forkvm.Exception import (
    ProviderConnectionError,
    RemoteResolutionError,
    RemoteStateError,
    VMError,
)
from forkvm.ExecutionContext import ExecutionContext
from forkvm.State import ForkMemoryBackend
from forkvm.utils.EVMTyping import BlockIdentifier


def build_backend(
    execution_context: ExecutionContextAPI,
    rpc_url: str = None,
    block: BlockIdentifier = None,
    accounts: Mapping[Address, ForkAccount] = None,
    **kwargs: Any,
) -> ForkMemoryBackend:
    """
    Connect to the node at ``rpc_url`` and return a backend forked from it at
    ``block``. Unreachable nodes fail here, before any execution starts.
    """
    if rpc_url is None:
        rpc_url = config.RPC_URL
    if block is None:
        block = config.FORK_BLOCK

    remote = EthereumAPI.connect(
        rpc_url, timeout=config.REQUEST_TIMEOUT, block=block
    )
    return ForkMemoryBackend(
        execution_context=execution_context,
        remote=remote,
        accounts=accounts,
        block=block,
        **kwargs,
    )

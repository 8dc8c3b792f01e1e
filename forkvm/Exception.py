from typing import Any, Optional, Sequence

from eth_typing import Address
from eth_utils import encode_hex

from forkvm.utils.EVMTyping import BlockIdentifier


class VMError(Exception):
    """
    Base class for errors raised by the fork backend.
    """


class RemoteStateError(VMError):
    """
    Raised when the remote node fails to answer a query, either because the
    transport failed or because the node returned a JSON-RPC error.
    """

    def __init__(
        self, message: str, method: str = None, params: Sequence[Any] = ()
    ) -> None:
        super().__init__(message)
        self.method = method
        self.params = tuple(params)


class ProviderConnectionError(RemoteStateError):
    """
    Raised when the remote node cannot be reached while setting up a backend.
    """


class RemoteResolutionError(VMError):
    """
    Raised when an account field that is not cached locally could not be
    resolved against the remote node.
    """

    def __init__(
        self,
        address: Address,
        field: str,
        block: BlockIdentifier,
        slot: Optional[int] = None,
    ) -> None:
        self.address = address
        self.field = field
        self.block = block
        self.slot = slot
        target = f"{field} of {encode_hex(address)}"
        if slot is not None:
            target = f"{target} at slot {hex(slot)}"
        super().__init__(f"Could not resolve {target} at block {block!r}")

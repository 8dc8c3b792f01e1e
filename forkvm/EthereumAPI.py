import itertools
import json
from typing import (
    Any,
    Callable,
    Sequence,
    TypeVar,
)

import requests
from eth_typing import Address
from eth_utils import (
    decode_hex,
    encode_hex,
    get_extended_debug_logger,
    to_int,
)

from forkvm import config
from forkvm.AbstractClass import RemoteStateAPI
from forkvm.Exception import ProviderConnectionError, RemoteStateError
from forkvm.utils.EVMTyping import BlockIdentifier
from forkvm.utils.Validation import (
    validate_block_identifier,
    validate_canonical_address,
    validate_uint256,
)

T = TypeVar("T")


def encode_block_identifier(block: BlockIdentifier) -> str:
    """
    Encode a block number as a hex quantity; tags such as ``"latest"`` are
    passed through unchanged.
    """
    validate_block_identifier(block)
    if isinstance(block, str):
        return block
    return hex(block)


def _hex_to_int(result: Any) -> int:
    return to_int(hexstr=result)


def _hex_to_bytes(result: Any) -> bytes:
    if not isinstance(result, str):
        raise TypeError(f"expected a hex string, got {type(result)}")
    return decode_hex(result)


class EthereumAPI(RemoteStateAPI):
    """
    Blocking JSON-RPC client used as the remote state source of a fork
    backend. Holds no state besides its HTTP session, so one instance can be
    shared between backends.
    """

    logger = get_extended_debug_logger("forkvm.rpc.EthereumAPI")

    def __init__(
        self,
        url: str,
        timeout: float = config.REQUEST_TIMEOUT,
        session: requests.Session = None,
    ) -> None:
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise ProviderConnectionError(f"Invalid HTTP provider url: {url!r}")
        self.url = url
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._request_ids = itertools.count(1)

    @classmethod
    def connect(
        cls,
        url: str,
        timeout: float = config.REQUEST_TIMEOUT,
        block: BlockIdentifier = None,
    ) -> "EthereumAPI":
        """
        Build a client and make sure the node answers before any execution
        starts. When ``block`` is a block number, the node must also know that
        block.
        """
        api = cls(url, timeout=timeout)
        try:
            chain_id = api.chain_id()
            if isinstance(block, int):
                api.get_block_by_number(block)
        except RemoteStateError as exc:
            raise ProviderConnectionError(
                f"Could not connect to HTTP provider {url}: {exc}",
                method=exc.method,
                params=exc.params,
            ) from exc
        cls.logger.debug("Connected to %s (chain id %d)", url, chain_id)
        return api

    #
    # Transport
    #
    def make_request(self, method: str, params: Sequence[Any]) -> Any:
        headers = {"Content-Type": "application/json"}
        data = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": next(self._request_ids),
        }
        self.logger.debug2("%s %s", method, params)

        try:
            response = self._session.post(
                self.url,
                headers=headers,
                data=json.dumps(data),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise RemoteStateError(
                f"Request {method} failed: {exc}", method=method, params=params
            ) from exc
        except ValueError as exc:
            raise RemoteStateError(
                f"Response to {method} is not valid JSON", method=method, params=params
            ) from exc

        if not isinstance(payload, dict):
            raise RemoteStateError(
                f"Unexpected response to {method}: {payload!r}",
                method=method,
                params=params,
            )
        if payload.get("error") is not None:
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise RemoteStateError(
                f"Node returned an error for {method}: {message}",
                method=method,
                params=params,
            )
        if "result" not in payload:
            raise RemoteStateError(
                f"Response to {method} has no result", method=method, params=params
            )
        return payload["result"]

    def _call(
        self, method: str, params: Sequence[Any], decode: Callable[[Any], T]
    ) -> T:
        result = self.make_request(method, params)
        try:
            return decode(result)
        except (TypeError, ValueError) as exc:
            raise RemoteStateError(
                f"Malformed result for {method}: {result!r}",
                method=method,
                params=params,
            ) from exc

    #
    # Chain
    #
    def chain_id(self) -> int:
        return self._call("eth_chainId", [], _hex_to_int)

    def get_block_by_number(
        self, block: BlockIdentifier = "latest", include_transactions: bool = False
    ) -> dict:
        params = [encode_block_identifier(block), include_transactions]

        def _expect_block(result: Any) -> dict:
            if not isinstance(result, dict):
                raise ValueError("block not found")
            return result

        return self._call("eth_getBlockByNumber", params, _expect_block)

    #
    # Account state
    #
    def get_balance(self, address: Address, block: BlockIdentifier) -> int:
        validate_canonical_address(address, title="Balance Address")
        params = [encode_hex(address), encode_block_identifier(block)]
        return self._call("eth_getBalance", params, _hex_to_int)

    def get_transaction_count(self, address: Address, block: BlockIdentifier) -> int:
        validate_canonical_address(address, title="Nonce Address")
        params = [encode_hex(address), encode_block_identifier(block)]
        return self._call("eth_getTransactionCount", params, _hex_to_int)

    def get_code(self, address: Address, block: BlockIdentifier) -> bytes:
        validate_canonical_address(address, title="Code Address")
        params = [encode_hex(address), encode_block_identifier(block)]
        return self._call("eth_getCode", params, _hex_to_bytes)

    def get_storage_at(
        self, address: Address, slot: int, block: BlockIdentifier
    ) -> int:
        validate_canonical_address(address, title="Storage Address")
        validate_uint256(slot, title="Storage Slot")
        params = [encode_hex(address), hex(slot), encode_block_identifier(block)]
        return self._call("eth_getStorageAt", params, _hex_to_int)

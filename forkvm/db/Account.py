from typing import (
    Any,
    Dict,
    Optional,
)

from eth_utils import ValidationError

from forkvm.utils.Validation import (
    validate_is_bytes,
    validate_uint256,
)

# sentinel for copy(): distinguishes "not overridden" from "set to None"
_UNCHANGED: Any = object()


class ForkAccount:
    """
    The locally cached state of one address.

    Each field is either unresolved (``None``, never fetched) or resolved (a
    cached value, possibly ``0``, ``b""`` or ``{}``). A resolved ``storage``
    mapping is filled lazily per slot: a slot missing from it is still
    unknown, not zero.
    """

    __slots__ = ["balance", "nonce", "code", "storage"]

    def __init__(
        self,
        balance: Optional[int] = None,
        nonce: Optional[int] = None,
        code: Optional[bytes] = None,
        storage: Optional[Dict[int, int]] = None,
    ) -> None:
        if balance is not None:
            validate_uint256(balance, title="ForkAccount.balance")
        if nonce is not None:
            validate_uint256(nonce, title="ForkAccount.nonce")
        if code is not None:
            validate_is_bytes(code, title="ForkAccount.code")
        if storage is not None:
            if not isinstance(storage, dict):
                raise ValidationError(
                    f"ForkAccount.storage must be a dict.  Got: {type(storage)}"
                )
            for slot, value in storage.items():
                validate_uint256(slot, title="ForkAccount.storage slot")
                validate_uint256(value, title="ForkAccount.storage value")
            storage = dict(storage)

        self.balance = balance
        self.nonce = nonce
        self.code = code
        self.storage = storage

    def copy(
        self,
        balance: Optional[int] = _UNCHANGED,
        nonce: Optional[int] = _UNCHANGED,
        code: Optional[bytes] = _UNCHANGED,
        storage: Optional[Dict[int, int]] = _UNCHANGED,
    ) -> "ForkAccount":
        return ForkAccount(
            balance=self.balance if balance is _UNCHANGED else balance,
            nonce=self.nonce if nonce is _UNCHANGED else nonce,
            code=self.code if code is _UNCHANGED else code,
            storage=self.storage if storage is _UNCHANGED else storage,
        )

    def has_storage_slot(self, slot: int) -> bool:
        return self.storage is not None and slot in self.storage

    def is_empty(self, code: Optional[bytes] = None) -> bool:
        """
        An account is empty when its balance and nonce are zero and it has no
        code. ``code`` stands in for the code of the account while it is
        unresolved here; unresolved balance and nonce count as zero.
        """
        if self.code is not None:
            code = self.code
        return not self.balance and not self.nonce and not code

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ForkAccount):
            return NotImplemented
        return (
            self.balance == other.balance
            and self.nonce == other.nonce
            and self.code == other.code
            and self.storage == other.storage
        )

    def __repr__(self) -> str:
        return (
            f"ForkAccount(balance={self.balance!r}, nonce={self.nonce!r}, "
            f"code={self.code!r}, storage={self.storage!r})"
        )

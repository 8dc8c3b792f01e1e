from typing import (
    Iterable,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

from eth_typing import Address
from eth_utils import ValidationError

from forkvm.utils.Validation import (
    validate_canonical_address,
    validate_is_boolean,
    validate_is_bytes,
    validate_length,
    validate_uint256,
)


class Basic(NamedTuple):
    """
    Balance and nonce of an account.
    """

    balance: int
    nonce: int


class Modify(NamedTuple):
    """
    Overwrite the balance and nonce of ``address``, optionally replace its
    code, and merge ``storage`` into its storage. ``storage`` is a mapping
    or an iterable of ``(slot, value)`` pairs; a zero value deletes a slot.
    """

    address: Address
    basic: Basic
    code: Optional[bytes] = None
    storage: Union[Mapping[int, int], Iterable[Tuple[int, int]]] = ()
    reset_storage: bool = False


class Delete(NamedTuple):
    """
    Remove the record of ``address`` from the backend.
    """

    address: Address


Apply = Union[Modify, Delete]


def validate_apply(entry: Apply) -> Apply:
    """
    Check the shape of a diff entry. Returns the entry with its storage
    updates materialized into a tuple, so that one-shot iterables can be
    validated and applied.
    """
    if isinstance(entry, Delete):
        validate_canonical_address(entry.address, title="Delete.address")
        return entry

    if not isinstance(entry, Modify):
        raise ValidationError(f"Diff entry must be Modify or Delete.  Got: {type(entry)}")

    validate_canonical_address(entry.address, title="Modify.address")
    if not isinstance(entry.basic, tuple):
        raise ValidationError(f"Modify.basic must be a Basic.  Got: {entry.basic!r}")
    validate_length(entry.basic, 2, title="Modify.basic")
    balance, nonce = entry.basic
    validate_uint256(balance, title="Modify.basic.balance")
    validate_uint256(nonce, title="Modify.basic.nonce")
    if entry.code is not None:
        validate_is_bytes(entry.code, title="Modify.code")
    validate_is_boolean(entry.reset_storage, title="Modify.reset_storage")

    storage = entry.storage
    if isinstance(storage, Mapping):
        storage = storage.items()
    storage = tuple(storage)
    for item in storage:
        if not isinstance(item, (tuple, list)):
            raise ValidationError(
                f"Modify.storage item must be a (slot, value) pair.  Got: {item!r}"
            )
        validate_length(item, 2, title="Modify.storage item")
        slot, value = item
        validate_uint256(slot, title="Modify.storage slot")
        validate_uint256(value, title="Modify.storage value")

    return entry._replace(basic=Basic(balance, nonce), storage=storage)

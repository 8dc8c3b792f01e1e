from typing import (
    Any,
    Sequence,
)

from eth_typing import Address, Hash32
from eth_utils import ValidationError

from forkvm.utils.constant import BLOCK_TAGS, UINT_256_MAX


def validate_uint256(value: int, title: str = "Value") -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{title} must be an integer: Got: {type(value)}")
    if value < 0:
        raise ValidationError(f"{title} cannot be negative: Got: {value}")
    if value > UINT_256_MAX:
        raise ValidationError(f"{title} exceeds maximum uint256 size.  Got: {value}")


def validate_is_bytes(value: bytes, title: str = "Value", size: int = None) -> None:
    if not isinstance(value, bytes):
        raise ValidationError(f"{title} must be a byte string.  Got: {type(value)}")
    if size is not None and len(value) != size:
        raise ValidationError(f"{title} must be size `{size}`. Got size `{len(value)}`")


def validate_canonical_address(value: Address, title: str = "Value") -> None:
    if not isinstance(value, bytes) or not len(value) == 20:
        raise ValidationError(f"{title} {value!r} is not a valid canonical address")


def validate_hash32(value: Hash32, title: str = "Value") -> None:
    validate_is_bytes(value, title=title, size=32)


def validate_length(value: Sequence[Any], length: int, title: str = "Value") -> None:
    if not len(value) == length:
        raise ValidationError(
            f"{title} must be of length {length}.  Got {value} of length {len(value)}"
        )


def validate_lte(value: int, maximum: int, title: str = "Value") -> None:
    if value > maximum:
        raise ValidationError(f"{title} {value} is not less than or equal to {maximum}")


def validate_is_boolean(value: bool, title: str = "Value") -> None:
    if not isinstance(value, bool):
        raise ValidationError(f"{title} must be an boolean.  Got type: {type(value)}")


def validate_block_identifier(value: Any, title: str = "Block") -> None:
    if isinstance(value, str):
        if value not in BLOCK_TAGS:
            raise ValidationError(
                f"{title} tag must be one of {sorted(BLOCK_TAGS)}.  Got: {value!r}"
            )
        return
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"{title} must be a block number or tag.  Got: {type(value)}"
        )
    if value < 0:
        raise ValidationError(f"{title} cannot be negative: Got: {value}")

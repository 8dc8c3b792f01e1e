from typing import (
    NamedTuple,
    Tuple,
)

from eth_typing import Address, Hash32
from eth_utils import ValidationError

from forkvm.utils.Validation import (
    validate_canonical_address,
    validate_hash32,
    validate_is_bytes,
)


class Log(NamedTuple):
    """
    An event emitted during execution.
    """

    address: Address
    topics: Tuple[Hash32, ...]
    data: bytes


def validate_log(log: Log) -> None:
    if not isinstance(log, Log):
        raise ValidationError(f"Log entry must be a Log.  Got: {type(log)}")
    validate_canonical_address(log.address, title="Log entry address")
    if not isinstance(log.topics, tuple):
        raise ValidationError(
            f"Log entry topics must be a tuple.  Got: {type(log.topics)}"
        )
    for topic in log.topics:
        validate_hash32(topic, title="Log entry topic")
    validate_is_bytes(log.data, title="Log entry data")

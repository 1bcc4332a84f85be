"""
VCMMD wire format.

A VE config travels as an array of (key, value, text) structs, signature
"a(qts)":

    key    uint16  ConfigKey tag
    value  uint64  the value for numeric keys, 0 for string keys
    text   string  the value for string keys, "" for numeric keys

Every entry has the same shape whatever its kind, so peers that only know
about numeric keys can ignore the text field, and vice versa. Older daemons
reply with "a(qt)" pairs, or with a bare "at" array indexed by key; both are
accepted when decoding.

Tags this library doesn't know are dropped when decoding, so a newer daemon
can send extra keys without breaking an older client.
"""

import logging
from typing import Any, Iterable

from libvcmmd.ve.config import (
    ConfigKey,
    ConfigRecord,
    is_known_key,
    is_string_key,
    is_wire_string,
)

logger = logging.getLogger(__name__)

CONFIG_SIGNATURE = "a(qts)"

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


class WireError(ValueError):
    """Exception raised when a reply does not have the expected shape."""

    pass


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid integer argument
    return isinstance(value, int) and not isinstance(value, bool)


# ============================================================================
# Config
# ============================================================================

def encode_config(record: ConfigRecord) -> list[tuple[int, int, str]]:
    """
    Encode a config record as a list of (key, value, text) triples.

    Returns:
        Triples in the record's insertion order, ready to be sent with
        CONFIG_SIGNATURE.
    """
    triples = []
    for entry in record:
        if entry.is_string:
            triples.append((int(entry.key), 0, entry.value))
        else:
            triples.append((int(entry.key), entry.value, ""))
    return triples


def _decode_entry(record: ConfigRecord, key: Any, value: Any, text: Any) -> None:
    if not _is_int(key) or not 0 <= key <= UINT16_MAX:
        raise WireError(f"Invalid config key {key!r}")

    if not is_known_key(key):
        logger.debug(f"Ignoring unknown config key {key}")
        return

    if is_string_key(key):
        if not isinstance(text, str) or not record.append_string(key, text):
            raise WireError(f"Invalid entry for {ConfigKey(key).name}: {text!r}")
    else:
        if not record.append(key, value):
            raise WireError(f"Invalid entry for {ConfigKey(key).name}: {value!r}")


def decode_config(items: Iterable[Any]) -> ConfigRecord:
    """
    Decode a config record from a received array.

    Accepts the current (key, value, text) triples, legacy (key, value)
    pairs, or a legacy array of bare values whose index is the key. In the
    last form only numeric keys can be carried, so positions holding string
    keys are skipped. Arrays mixing forms are rejected.

    Args:
        items: The decoded array argument.

    Returns:
        A new ConfigRecord.

    Raises:
        WireError: If an item is malformed, forms are mixed or a key
                   repeats. No partial record is ever returned.
    """
    if not isinstance(items, (list, tuple)):
        raise WireError(f"Expected an array of config entries, got {items!r}")

    record = ConfigRecord()
    if not items:
        return record

    # The first item decides the form; the daemon never mixes them
    if _is_int(items[0]):
        # Bare "at" array: position is the key
        for index, item in enumerate(items):
            if not _is_int(item):
                raise WireError(f"Mixed config array, {item!r} at position {index}")
            if not is_known_key(index):
                logger.debug(f"Ignoring unknown config key {index}")
                continue
            if is_string_key(index):
                continue
            _decode_entry(record, index, item, "")
        return record

    if not isinstance(items[0], (list, tuple)) or len(items[0]) not in (2, 3):
        raise WireError(f"Malformed config entry {items[0]!r}")
    arity = len(items[0])

    for item in items:
        if not isinstance(item, (list, tuple)) or len(item) != arity:
            raise WireError(f"Malformed or mixed config entry {item!r}")
        if arity == 3:
            _decode_entry(record, *item)
        else:
            key, value = item
            if is_string_key(key):
                raise WireError(f"Missing text for string key {key}")
            _decode_entry(record, key, value, "")

    return record


# ============================================================================
# Scalars
# ============================================================================

def encode_name(name: str) -> str:
    """
    Validate a VE or policy name.

    Names are opaque to the library; whether one is acceptable is for the
    daemon to decide. They only have to be representable on the bus.

    Raises:
        TypeError: If `name` is not a str.
        ValueError: If `name` contains a NUL character or is not valid
                    UTF-8 (lone surrogates).
    """
    if not isinstance(name, str):
        raise TypeError(f"Name must be a str, got {name!r}")
    if not is_wire_string(name):
        raise ValueError(f"Name {name!r} cannot be sent on the bus")
    return name


def encode_ve_type(ve_type: int) -> int:
    """
    Validate a VE type (int32). Unknown values are passed through so the
    daemon can reject them itself.
    """
    if not _is_int(ve_type):
        raise TypeError(f"VE type must be an int, got {ve_type!r}")
    if not INT32_MIN <= ve_type <= INT32_MAX:
        raise ValueError(f"VE type {ve_type} does not fit in int32")
    return int(ve_type)


def encode_flags(flags: int) -> int:
    """Validate request flags (uint32)."""
    if not _is_int(flags):
        raise TypeError(f"Flags must be an int, got {flags!r}")
    if not 0 <= flags <= UINT32_MAX:
        raise ValueError(f"Flags {flags:#x} do not fit in uint32")
    return int(flags)


def decode_result_code(args: list) -> int:
    """
    Get the result code from a reply: its leading int32 argument.

    Raises:
        WireError: If the reply is empty or doesn't start with an int32.
    """
    if not args:
        raise WireError("Reply has no arguments")
    code = args[0]
    if not _is_int(code) or not INT32_MIN <= code <= INT32_MAX:
        raise WireError(f"Reply does not start with a result code: {code!r}")
    return code


def decode_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise WireError(f"Expected a boolean, got {value!r}")
    return value


def decode_string(value: Any) -> str:
    if not isinstance(value, str):
        raise WireError(f"Expected a string, got {value!r}")
    return value

"""
D-Bus type signature parsing.

A signature is a string of type characters describing a sequence of values,
e.g. "sia(qts)u" is a string, an int32, an array of (uint16, uint64, string)
structs and a uint32. This module splits signatures into "single complete
types", which is what the marshaller needs to walk values one at a time.
"""

from .constants import (
    BASIC_TYPES,
    DICT_ENTRY_BEGIN_CHAR,
    DICT_ENTRY_END_CHAR,
    STRUCT_BEGIN_CHAR,
    STRUCT_END_CHAR,
    TYPE_ARRAY,
    TYPE_VARIANT,
)

_CLOSING = {
    STRUCT_BEGIN_CHAR: STRUCT_END_CHAR,
    DICT_ENTRY_BEGIN_CHAR: DICT_ENTRY_END_CHAR,
}


class SignatureError(ValueError):
    """Exception raised for a malformed type signature."""

    pass


def _complete_type_end(signature: str, start: int) -> int:
    """Return the index just past the complete type starting at `start`."""
    if start >= len(signature):
        raise SignatureError(f"Truncated signature {signature!r}")

    char = signature[start]

    if ord(char) in BASIC_TYPES or ord(char) == TYPE_VARIANT:
        return start + 1

    if ord(char) == TYPE_ARRAY:
        return _complete_type_end(signature, start + 1)

    if char in _CLOSING:
        closing = _CLOSING[char]
        pos = start + 1
        fields = 0
        while pos < len(signature) and signature[pos] != closing:
            pos = _complete_type_end(signature, pos)
            fields += 1
        if pos >= len(signature):
            raise SignatureError(f"Unterminated {char!r} in {signature!r}")
        if fields == 0:
            raise SignatureError(f"Empty container in {signature!r}")
        if char == DICT_ENTRY_BEGIN_CHAR and fields != 2:
            raise SignatureError(f"Dict entry must have two fields in {signature!r}")
        return pos + 1

    raise SignatureError(f"Unknown type code {char!r} in {signature!r}")


def split_signature(signature: str) -> list[str]:
    """
    Split a signature into its single complete types.

    Args:
        signature: A D-Bus signature, possibly empty.

    Returns:
        List of complete type signatures, e.g. "sa(qt)u" -> ["s", "a(qt)", "u"].

    Raises:
        SignatureError: If the signature is malformed.
    """
    types = []
    pos = 0
    while pos < len(signature):
        end = _complete_type_end(signature, pos)
        types.append(signature[pos:end])
        pos = end
    return types


def element_signature(array_signature: str) -> str:
    """Return the element type of an array signature ("a(qt)" -> "(qt)")."""
    if not array_signature or ord(array_signature[0]) != TYPE_ARRAY:
        raise SignatureError(f"{array_signature!r} is not an array type")
    return array_signature[1:]


def field_signatures(container_signature: str) -> list[str]:
    """Return the field types of a struct or dict entry ("(qts)" -> ["q", "t", "s"])."""
    if not container_signature or container_signature[0] not in _CLOSING:
        raise SignatureError(f"{container_signature!r} is not a struct type")
    return split_signature(container_signature[1:-1])

"""
D-Bus method call marshalling.

This module converts between Python values and libdbus message arguments.
Values are mapped as follows:

    D-Bus type              Python type
    ----------------------  ---------------------------
    y n q i u x t           int
    b                       bool
    d                       float
    s o g                   str
    a<T>                    list
    a{KV}                   dict
    (...)                   tuple
    v                       (read only) the contained value

Appending is driven by an explicit signature since Python values alone
don't say which integer width to use. Reading is driven by the type codes
libdbus reports for the received message.
"""

from dataclasses import dataclass, field
from typing import Any

from .bindings import ffi
from .constants import (
    DICT_ENTRY_BEGIN_CHAR,
    INTEGER_TYPES,
    STRING_TYPES,
    STRUCT_BEGIN_CHAR,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_DICT_ENTRY,
    TYPE_DOUBLE,
    TYPE_INVALID,
    TYPE_STRUCT,
    TYPE_VARIANT,
)
from .signature import element_signature, field_signatures, split_signature


class DBusError(Exception):
    """Base class for bus-level failures."""

    pass


class NoMemoryError(DBusError):
    """libdbus could not allocate a message or append an argument to it."""

    pass


class ConnectionFailedError(DBusError):
    """The bus could not be reached, or the reply could not be read."""

    pass


@dataclass
class MethodCall:
    """
    Describes a method call to be sent over the bus.

    Attributes:
        destination: Well-known bus name of the service
        path: Object path of the remote object
        interface: Interface the method belongs to
        member: Method name
        signature: D-Bus signature of `args`
        args: Argument values, in signature order
    """
    destination: str
    path: str
    interface: str
    member: str
    signature: str = ""
    args: tuple = field(default_factory=tuple)


# ============================================================================
# Appending
# ============================================================================

def _basic_pointer(code: int, value: Any, keepalive: list):
    """Build a pointer to `value` laid out the way append_basic expects it."""
    if code in INTEGER_TYPES:
        ctype, low, high = INTEGER_TYPES[code]
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int for type {chr(code)!r}, got {value!r}")
        if not low <= value <= high:
            raise ValueError(f"{value} out of range for type {chr(code)!r}")
        return ffi.new(f"{ctype} *", value)

    if code == TYPE_BOOLEAN:
        # libdbus rejects booleans other than 0 and 1
        return ffi.new("dbus_bool_t *", 1 if value else 0)

    if code == TYPE_DOUBLE:
        return ffi.new("double *", float(value))

    if code in STRING_TYPES:
        if not isinstance(value, str):
            raise TypeError(f"Expected str for type {chr(code)!r}, got {value!r}")
        if "\0" in value:
            raise ValueError(f"String {value!r} contains a NUL character")
        buf = ffi.new("char[]", value.encode("utf-8"))
        keepalive.append(buf)
        return ffi.new("char **", buf)

    raise TypeError(f"Cannot append values of type {chr(code)!r}")


def _append_container(lib, it, code: int, contained: str | None, values, keepalive: list):
    """Open a container, fill it from `values` and close it."""
    sub = ffi.new("DBusMessageIter *")

    if contained is None:
        sig_ptr = ffi.NULL
    else:
        sig_ptr = ffi.new("char[]", contained.encode())
        keepalive.append(sig_ptr)

    if not lib.dbus_message_iter_open_container(it, code, sig_ptr, sub):
        raise NoMemoryError(f"Failed to open container {chr(code)!r}")

    try:
        for sig, value in values:
            _append_value(lib, sub, sig, value, keepalive)
    except BaseException:
        lib.dbus_message_iter_abandon_container(it, sub)
        raise

    if not lib.dbus_message_iter_close_container(it, sub):
        raise NoMemoryError(f"Failed to close container {chr(code)!r}")


def _append_value(lib, it, signature: str, value: Any, keepalive: list):
    code = ord(signature[0])

    if code == TYPE_ARRAY:
        element = element_signature(signature)
        if element.startswith(DICT_ENTRY_BEGIN_CHAR):
            items = [(element, item) for item in dict(value).items()]
        else:
            items = [(element, item) for item in value]
        _append_container(lib, it, TYPE_ARRAY, element, items, keepalive)
        return

    if signature[0] in (STRUCT_BEGIN_CHAR, DICT_ENTRY_BEGIN_CHAR):
        fields = field_signatures(signature)
        value = tuple(value)
        if len(value) != len(fields):
            raise TypeError(
                f"Expected {len(fields)} fields for {signature!r}, got {len(value)}"
            )
        code = TYPE_STRUCT if signature[0] == STRUCT_BEGIN_CHAR else TYPE_DICT_ENTRY
        _append_container(lib, it, code, None, list(zip(fields, value)), keepalive)
        return

    if code == TYPE_VARIANT:
        raise TypeError("Appending variants is not supported")

    ptr = _basic_pointer(code, value, keepalive)
    if not lib.dbus_message_iter_append_basic(it, code, ptr):
        raise NoMemoryError(f"Failed to append argument of type {signature!r}")


def append_args(lib, msg, signature: str, args) -> None:
    """
    Append `args` to a message according to `signature`.

    Raises:
        NoMemoryError: If libdbus fails to grow the message.
        TypeError, ValueError: If a value does not fit its declared type.
    """
    types = split_signature(signature)
    args = tuple(args)
    if len(types) != len(args):
        raise TypeError(
            f"Signature {signature!r} describes {len(types)} arguments, got {len(args)}"
        )

    it = ffi.new("DBusMessageIter *")
    lib.dbus_message_iter_init_append(msg, it)

    # append_basic copies its input, but the buffers must stay alive until then
    keepalive: list = []
    for sig, value in zip(types, args):
        _append_value(lib, it, sig, value, keepalive)


def build_message(lib, call: MethodCall):
    """
    Create a libdbus method call message from a MethodCall.

    The caller owns the returned message and must dbus_message_unref() it.

    Raises:
        NoMemoryError: If the message or one of its arguments could not be
                       allocated.
    """
    msg = lib.dbus_message_new_method_call(
        call.destination.encode(),
        call.path.encode(),
        call.interface.encode(),
        call.member.encode(),
    )
    if msg == ffi.NULL:
        raise NoMemoryError(f"Failed to allocate {call.member} message")

    try:
        append_args(lib, msg, call.signature, call.args)
    except BaseException:
        lib.dbus_message_unref(msg)
        raise

    return msg


# ============================================================================
# Reading
# ============================================================================

def _read_items(lib, it) -> list:
    """Read every remaining value at the iterator's level."""
    items = []
    while lib.dbus_message_iter_get_arg_type(it) != TYPE_INVALID:
        items.append(_read_value(lib, it))
        lib.dbus_message_iter_next(it)
    return items


def _read_value(lib, it) -> Any:
    code = lib.dbus_message_iter_get_arg_type(it)

    if code in INTEGER_TYPES:
        out = ffi.new(f"{INTEGER_TYPES[code][0]} *")
        lib.dbus_message_iter_get_basic(it, out)
        return int(out[0])

    if code == TYPE_BOOLEAN:
        out = ffi.new("dbus_bool_t *")
        lib.dbus_message_iter_get_basic(it, out)
        return bool(out[0])

    if code == TYPE_DOUBLE:
        out = ffi.new("double *")
        lib.dbus_message_iter_get_basic(it, out)
        return float(out[0])

    if code in STRING_TYPES:
        out = ffi.new("char **")
        lib.dbus_message_iter_get_basic(it, out)
        try:
            return ffi.string(out[0]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConnectionFailedError(f"Invalid string in reply: {e}") from e

    if code in (TYPE_ARRAY, TYPE_STRUCT, TYPE_DICT_ENTRY, TYPE_VARIANT):
        sub = ffi.new("DBusMessageIter *")
        lib.dbus_message_iter_recurse(it, sub)
        items = _read_items(lib, sub)

        if code == TYPE_ARRAY:
            if lib.dbus_message_iter_get_element_type(it) == TYPE_DICT_ENTRY:
                return dict(items)
            return items
        if code == TYPE_VARIANT:
            if len(items) != 1:
                raise ConnectionFailedError("Malformed variant in reply")
            return items[0]
        return tuple(items)

    raise ConnectionFailedError(f"Unsupported argument type {code} in reply")


def read_args(lib, msg) -> list:
    """
    Read all arguments of a received message as Python values.

    Raises:
        ConnectionFailedError: If the message holds something we can't decode.
    """
    it = ffi.new("DBusMessageIter *")
    if not lib.dbus_message_iter_init(msg, it):
        # Message has no arguments
        return []
    return _read_items(lib, it)

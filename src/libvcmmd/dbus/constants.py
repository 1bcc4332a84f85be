"""
D-Bus constants.

These values come from the libdbus headers:
- /usr/include/dbus-1.0/dbus/dbus-protocol.h
- /usr/include/dbus-1.0/dbus/dbus-shared.h
"""

from enum import IntEnum

# Shared object to dlopen. The ".3" suffix is the stable ABI version of
# libdbus-1, present on every distribution shipping D-Bus.
LIBDBUS_NAME = "libdbus-1.so.3"


class BusType(IntEnum):
    """Well-known message buses (DBusBusType)."""

    SESSION = 0
    SYSTEM = 1
    STARTER = 2


# Let libdbus pick its default reply timeout (25 seconds in practice).
DEFAULT_TIMEOUT = -1

# ============================================================================
# Type codes
# ============================================================================
# libdbus identifies argument types by the ASCII code of their signature
# character. A type code of 0 marks the end of the argument list.

TYPE_INVALID = 0

# Basic types
TYPE_BYTE = ord("y")
TYPE_BOOLEAN = ord("b")
TYPE_INT16 = ord("n")
TYPE_UINT16 = ord("q")
TYPE_INT32 = ord("i")
TYPE_UINT32 = ord("u")
TYPE_INT64 = ord("x")
TYPE_UINT64 = ord("t")
TYPE_DOUBLE = ord("d")
TYPE_STRING = ord("s")
TYPE_OBJECT_PATH = ord("o")
TYPE_SIGNATURE = ord("g")

# Container types
TYPE_ARRAY = ord("a")
TYPE_VARIANT = ord("v")
TYPE_STRUCT = ord("r")
TYPE_DICT_ENTRY = ord("e")

# Delimiters used in signatures in place of the STRUCT/DICT_ENTRY codes
STRUCT_BEGIN_CHAR = "("
STRUCT_END_CHAR = ")"
DICT_ENTRY_BEGIN_CHAR = "{"
DICT_ENTRY_END_CHAR = "}"

# Integer types and the range each one can carry, as (ctype, min, max)
INTEGER_TYPES = {
    TYPE_BYTE: ("uint8_t", 0, 0xFF),
    TYPE_INT16: ("int16_t", -(1 << 15), (1 << 15) - 1),
    TYPE_UINT16: ("uint16_t", 0, 0xFFFF),
    TYPE_INT32: ("int32_t", -(1 << 31), (1 << 31) - 1),
    TYPE_UINT32: ("uint32_t", 0, 0xFFFFFFFF),
    TYPE_INT64: ("int64_t", -(1 << 63), (1 << 63) - 1),
    TYPE_UINT64: ("uint64_t", 0, 0xFFFFFFFFFFFFFFFF),
}

# String-like types, all passed to libdbus as "const char *"
STRING_TYPES = (TYPE_STRING, TYPE_OBJECT_PATH, TYPE_SIGNATURE)

BASIC_TYPES = (
    tuple(INTEGER_TYPES) + STRING_TYPES + (TYPE_BOOLEAN, TYPE_DOUBLE)
)

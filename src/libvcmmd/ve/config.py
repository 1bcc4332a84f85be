"""
VE configuration.

A VE config is a small ordered record of key/value pairs describing the
resources a VE wants. Keys come from a fixed set, each holding either a
number or a string. If a key is omitted when registering or updating a VE,
the daemon keeps the current value, or uses its default.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Mapping


class ConfigKey(IntEnum):
    """
    Known VE config keys.

    The integer value is the key's tag on the wire (uint16). New keys must be
    appended so existing tags never change.
    """

    # Best-effort memory protection, in bytes. A VE should always be given at
    # least this much memory unless things get really bad on the host.
    GUARANTEE = 0

    # Memory limit, in bytes. Must be >= GUARANTEE.
    LIMIT = 1

    # Swap hard limit, in bytes.
    SWAP = 2

    # Video RAM reserved for a VM, in bytes.
    VRAM = 3

    # NUMA nodes the VE is bound to, e.g. "0-1".
    NODE_LIST = 4

    # Host CPUs the VE is bound to, e.g. "0-3,8".
    CPU_LIST = 5

    # How GUARANTEE is chosen, see GuaranteeType.
    GUARANTEE_TYPE = 6

    # Number of vCPUs.
    CPUNUM = 7


class GuaranteeType(IntEnum):
    """Values for ConfigKey.GUARANTEE_TYPE."""

    AUTO = 0    # daemon computes the guarantee from LIMIT
    MANUAL = 1  # GUARANTEE is used as given


STRING_KEYS = frozenset({ConfigKey.NODE_LIST, ConfigKey.CPU_LIST})

UINT64_MAX = (1 << 64) - 1


def is_known_key(key: int) -> bool:
    """Check whether `key` is one of the ConfigKey tags."""
    if isinstance(key, bool) or not isinstance(key, int):
        return False
    try:
        ConfigKey(key)
    except ValueError:
        return False
    return True


def is_string_key(key: int) -> bool:
    """Check whether `key` holds a string rather than a number."""
    return is_known_key(key) and ConfigKey(key) in STRING_KEYS


def is_wire_string(text: str) -> bool:
    """Check whether `text` can be sent as a D-Bus string (UTF-8, no NUL)."""
    if "\0" in text:
        return False
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass(frozen=True)
class ConfigEntry:
    """
    A single config entry.

    Attributes:
        key: Config key
        value: int for numeric keys, str for string keys
    """
    key: ConfigKey
    value: int | str

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)

    def __str__(self) -> str:
        return f"{self.key.name}={self.value!r}" if self.is_string else f"{self.key.name}={self.value}"


class ConfigRecord:
    """
    Ordered VE config record.

    Each key appears at most once and must hold a value of the kind its key
    is classified as. Appending either adds exactly one entry and returns
    True, or leaves the record untouched and returns False. Insertion order
    is kept since it determines the order of entries on the wire.

    Usage:
        config = ConfigRecord()
        config.append(ConfigKey.GUARANTEE, 100 << 20)
        config.append(ConfigKey.LIMIT, 500 << 20)
        config.append_string(ConfigKey.NODE_LIST, "0")

        config.extract(ConfigKey.LIMIT)           # 524288000
        config.extract_string(ConfigKey.SWAP)     # None, SWAP is numeric
    """

    # At most one entry per known key
    CAPACITY = len(ConfigKey)

    def __init__(self):
        self._entries: dict[ConfigKey, ConfigEntry] = {}

    @classmethod
    def from_dict(cls, values: Mapping[int, int | str]) -> "ConfigRecord":
        """
        Build a record from a key -> value mapping, keeping its order.

        Raises:
            ValueError: If any key/value pair would be rejected by append()
                        or append_string().
        """
        record = cls()
        for key, value in values.items():
            if is_string_key(key):
                ok = record.append_string(key, value)
            else:
                ok = record.append(key, value)
            if not ok:
                raise ValueError(f"Invalid config entry {key!r}: {value!r}")
        return record

    def _can_add(self, key: int) -> bool:
        return (
            is_known_key(key)
            and ConfigKey(key) not in self._entries
            and len(self._entries) < self.CAPACITY
        )

    def append(self, key: int, value: int) -> bool:
        """
        Append a numeric entry.

        Returns:
            False if `key` is unknown, string-typed or already present, or if
            `value` is not an unsigned 64-bit integer. True otherwise.
        """
        if not self._can_add(key) or is_string_key(key):
            return False
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        if not 0 <= value <= UINT64_MAX:
            return False

        key = ConfigKey(key)
        self._entries[key] = ConfigEntry(key, value)
        return True

    def append_string(self, key: int, text: str) -> bool:
        """
        Append a string entry. An empty string is a valid value.

        Returns:
            False if `key` is unknown, numeric or already present, or if
            `text` is not a str that can go on the bus (it holds a NUL or
            a lone surrogate). True otherwise.
        """
        if not self._can_add(key) or not is_string_key(key):
            return False
        if not isinstance(text, str) or not is_wire_string(text):
            return False

        key = ConfigKey(key)
        self._entries[key] = ConfigEntry(key, text)
        return True

    def extract(self, key: int) -> int | None:
        """Get a numeric value, or None if absent or `key` is string-typed."""
        entry = self._entries.get(key) if is_known_key(key) else None
        if entry is None or entry.is_string:
            return None
        return entry.value

    def extract_string(self, key: int) -> str | None:
        """Get a string value, or None if absent or `key` is numeric."""
        entry = self._entries.get(key) if is_known_key(key) else None
        if entry is None or not entry.is_string:
            return None
        return entry.value

    def to_dict(self) -> dict[ConfigKey, int | str]:
        return {entry.key: entry.value for entry in self._entries.values()}

    @property
    def entries(self) -> list[ConfigEntry]:
        """Get the entries in insertion order (read-only copy)."""
        return list(self._entries.values())

    def __iter__(self) -> Iterator[ConfigEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, int) and is_known_key(key) and key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigRecord):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"ConfigRecord({', '.join(str(entry) for entry in self._entries.values())})"

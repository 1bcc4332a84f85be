"""
Virtual environment description.

This package contains:
- config: The VE config record and its keys
- types: VE types, states and request flags
"""

from .config import ConfigEntry, ConfigKey, ConfigRecord, GuaranteeType, is_string_key
from .types import VEFlags, VEState, VEType

__all__ = [
    "ConfigEntry",
    "ConfigKey",
    "ConfigRecord",
    "GuaranteeType",
    "is_string_key",
    "VEFlags",
    "VEState",
    "VEType",
]

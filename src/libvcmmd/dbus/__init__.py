"""
D-Bus interface layer.

This package provides a minimal cffi binding to libdbus, enough to send a
method call to a service and decode its reply into Python values.

Main classes:
- BusConnection: Sends MethodCalls over the system or session bus
- MethodCall: Describes a method call (address, name, signature, arguments)
"""

from .bindings import get_lib
from .connection import BusConnection
from .constants import BusType
from .message import ConnectionFailedError, DBusError, MethodCall, NoMemoryError
from .signature import SignatureError, split_signature

__all__ = [
    "BusConnection",
    "BusType",
    "MethodCall",
    "DBusError",
    "NoMemoryError",
    "ConnectionFailedError",
    "SignatureError",
    "get_lib",
    "split_signature",
]

"""
Bus connection.

This module sends method calls over a libdbus bus connection and waits for
the reply. The connection itself is owned by libdbus: dbus_bus_get() hands
out a process-wide shared connection per bus type, establishing it on first
use, so there is nothing for us to open or close beyond taking and dropping
a reference around each call.
"""

import logging

from .bindings import LibraryLoadError, ffi, get_lib
from .constants import DEFAULT_TIMEOUT, BusType
from .message import ConnectionFailedError, MethodCall, build_message, read_args

logger = logging.getLogger(__name__)


class BusConnection:
    """
    Sends method calls over the system (or session) bus.

    Every call is a single blocking round trip. There is no caller-supplied
    timeout: libdbus applies its default reply timeout and any failure to
    get a reply is reported as a connection failure, never as a partial
    result.

    Usage:
        bus = BusConnection()
        reply_args = bus.call(MethodCall(
            destination="org.freedesktop.DBus",
            path="/org/freedesktop/DBus",
            interface="org.freedesktop.DBus",
            member="GetId",
        ))
    """

    def __init__(self, bus_type: BusType = BusType.SYSTEM):
        """
        Args:
            bus_type: Which bus to connect to. The VCMMD service lives on the
                      system bus; the session bus is useful for testing.
        """
        self._bus_type = BusType(bus_type)

    @property
    def bus_type(self) -> BusType:
        return self._bus_type

    def call(self, call: MethodCall) -> list:
        """
        Send a method call and block until its reply arrives.

        The request is fully built before the bus is touched, so allocation
        failures never result in a partially sent request.

        Args:
            call: The method call to send.

        Returns:
            The reply's arguments as Python values.

        Raises:
            NoMemoryError: If the request could not be built.
            ConnectionFailedError: If the bus is unreachable, the call got an
                                   error reply or no reply at all, or the
                                   reply could not be decoded.
        """
        try:
            lib = get_lib()
        except LibraryLoadError as e:
            raise ConnectionFailedError(str(e)) from e

        msg = build_message(lib, call)
        try:
            conn = lib.dbus_bus_get(int(self._bus_type), ffi.NULL)
            if conn == ffi.NULL:
                raise ConnectionFailedError(
                    f"Failed to connect to the {self._bus_type.name.lower()} bus"
                )

            try:
                # A lost bus must show up as a failed call, not _exit() the process
                lib.dbus_connection_set_exit_on_disconnect(conn, 0)

                logger.debug(f"Calling {call.interface}.{call.member} on {call.destination}")
                reply = lib.dbus_connection_send_with_reply_and_block(
                    conn, msg, DEFAULT_TIMEOUT, ffi.NULL
                )
                lib.dbus_connection_flush(conn)
            finally:
                lib.dbus_connection_unref(conn)
        finally:
            lib.dbus_message_unref(msg)

        if reply == ffi.NULL:
            raise ConnectionFailedError(f"No reply to {call.member}")

        try:
            return read_args(lib, reply)
        finally:
            lib.dbus_message_unref(reply)

    def __str__(self) -> str:
        return f"BusConnection(bus={self._bus_type.name.lower()})"

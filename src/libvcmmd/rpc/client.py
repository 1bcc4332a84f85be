"""
VCMMD RPC client.

This module turns a method name and its arguments into a single blocking
request to the daemon, and the daemon's reply into a result code plus
whatever payload follows it.
"""

import logging
import threading
from dataclasses import dataclass, field

from libvcmmd.dbus import BusConnection, ConnectionFailedError, MethodCall, NoMemoryError
from libvcmmd.errors import SUCCESS, LibraryError
from .codec import WireError, decode_result_code
from .constants import SERVICE_ADDRESS, ServiceAddress

logger = logging.getLogger(__name__)


@dataclass
class Reply:
    """
    Outcome of a call.

    Attributes:
        code: Result code; 0 on success, a ServiceError or LibraryError
              value otherwise
        payload: Reply arguments following the result code. Only meaningful
                 for the codes the calling operation documents.
    """
    code: int
    payload: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS


# Process-wide connection used when no bus is given explicitly
_default_bus: BusConnection | None = None
_default_bus_lock = threading.Lock()


def get_default_bus() -> BusConnection:
    """Get the shared system bus connection, creating it on first use."""
    global _default_bus

    with _default_bus_lock:
        if _default_bus is None:
            _default_bus = BusConnection()
        return _default_bus


class RpcClient:
    """
    Issues requests to the VCMMD daemon.

    Nothing is retried and nothing is cached: each call() is exactly one
    round trip. Failures never raise; they come back as a LibraryError code.

    Usage:
        client = RpcClient()
        reply = client.call("ActivateVE", "su", "ct1", 0)
        if reply.code:
            print(strerror(reply.code))
    """

    def __init__(self, bus=None, address: ServiceAddress = SERVICE_ADDRESS):
        """
        Args:
            bus: Object with a call(MethodCall) -> list method. Defaults to
                 the process-wide system bus connection.
            address: Where the daemon lives.
        """
        self._bus = bus
        self._address = address

    @property
    def bus(self):
        if self._bus is None:
            return get_default_bus()
        return self._bus

    @property
    def address(self) -> ServiceAddress:
        return self._address

    def call(self, method: str, signature: str = "", *args, has_result_code: bool = True) -> Reply:
        """
        Call a daemon method and wait for the reply.

        Args:
            method: Method name, e.g. "RegisterVE".
            signature: D-Bus signature of `args`.
            *args: Method arguments, in the order the method defines.
            has_result_code: Whether the reply leads with an int32 result
                             code. If False, the whole reply is returned as
                             payload with a success code.

        Returns:
            The Reply. NO_MEMORY if the request could not be built (nothing
            was sent), CONNECTION_FAILED if the daemon could not be reached
            or its reply could not be decoded.
        """
        request = MethodCall(
            destination=self._address.bus_name,
            path=self._address.object_path,
            interface=self._address.interface,
            member=method,
            signature=signature,
            args=args,
        )

        try:
            reply_args = self.bus.call(request)
        except NoMemoryError as e:
            logger.warning(f"Failed to build {method} request: {e}")
            return Reply(LibraryError.NO_MEMORY)
        except ConnectionFailedError as e:
            logger.warning(f"{method} failed: {e}")
            return Reply(LibraryError.CONNECTION_FAILED)

        if not has_result_code:
            return Reply(SUCCESS, list(reply_args))

        try:
            code = decode_result_code(reply_args)
        except WireError as e:
            logger.warning(f"Malformed {method} reply: {e}")
            return Reply(LibraryError.CONNECTION_FAILED)

        logger.debug(f"{method} returned {code}")
        return Reply(code, list(reply_args[1:]))

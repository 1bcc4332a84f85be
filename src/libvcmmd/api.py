"""
VCMMD client operations.

One function per daemon operation. Each performs a single blocking round
trip and reports its outcome as an integer code: 0 on success, otherwise a
ServiceError (the daemon refused) or a LibraryError (the request never got
an answer). Operations that return data return a (code, value) tuple, where
value is None unless code is 0.

A VE's lifecycle, as enforced by the daemon:

    register_ve -> activate_ve -> [update_ve ...] -> deactivate_ve -> unregister_ve

register_ve should be called before starting a VE; if it fails the VE must
not be started. activate_ve tells the daemon it may start tuning the VE.
deactivate_ve is meant to be called before pausing a VE, and unregister_ve
before stopping it.
"""

import logging
import threading

from .dbus import get_lib
from .errors import SUCCESS, LibraryError, ServiceError
from .rpc import constants
from .rpc.client import RpcClient
from .rpc.codec import (
    WireError,
    decode_bool,
    decode_config,
    decode_result_code,
    decode_string,
    encode_config,
    encode_flags,
    encode_name,
    encode_ve_type,
)
from .ve import ConfigRecord, VEFlags, VEState, VEType

logger = logging.getLogger(__name__)

_default_client: RpcClient | None = None
_default_client_lock = threading.Lock()


def init() -> None:
    """
    Load libdbus and run its thread-safety bootstrap.

    Must happen before the bus is used from any thread. Calling this once at
    startup is optional since the first operation does it too, but doing it
    early surfaces a missing libdbus right away. Safe to call more than once.

    Raises:
        OSError: If libdbus cannot be loaded.
    """
    get_lib()


def _client(client: RpcClient | None) -> RpcClient:
    global _default_client

    if client is not None:
        return client

    with _default_client_lock:
        if _default_client is None:
            _default_client = RpcClient()
        return _default_client


def register_ve(
    name: str,
    ve_type: VEType,
    config: ConfigRecord,
    flags: int = VEFlags.NONE,
    *,
    client: RpcClient | None = None,
) -> int:
    """
    Register a VE with the daemon.

    The daemon checks whether it can meet the requirements in `config`. If
    it can, it remembers the VE but does not tune it until activate_ve().

    Args:
        name: VE name, unique among registered VEs.
        ve_type: VE type.
        config: Requested resources. Omitted keys get daemon defaults.
        flags: VEFlags; FORCE skips the guarantee check.

    Returns:
        0, or INVALID_VE_NAME, INVALID_VE_TYPE, INVALID_VE_CONFIG,
        VE_NAME_ALREADY_IN_USE, NO_SPACE, or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_REGISTER_VE,
        constants.SIG_REGISTER_VE,
        encode_name(name),
        encode_ve_type(ve_type),
        encode_config(config),
        encode_flags(flags),
    ).code


def activate_ve(name: str, flags: int = VEFlags.NONE, *, client: RpcClient | None = None) -> int:
    """
    Allow the daemon to start managing a registered VE.

    If this fails the caller should stop the VE and unregister it.

    Returns:
        0, or VE_NOT_REGISTERED, VE_ALREADY_ACTIVE, VE_OPERATION_FAILED,
        or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_ACTIVATE_VE,
        constants.SIG_ACTIVATE_VE,
        encode_name(name),
        encode_flags(flags),
    ).code


def commit_ve(name: str, *, client: RpcClient | None = None) -> int:
    """
    Confirm that a VE has started with the resources it was given.

    Returns:
        0, or VE_NOT_REGISTERED, VE_NOT_ACTIVE, VE_OPERATION_FAILED,
        or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_COMMIT_VE,
        constants.SIG_COMMIT_VE,
        encode_name(name),
    ).code


def update_ve(
    name: str,
    config: ConfigRecord,
    flags: int = VEFlags.NONE,
    *,
    client: RpcClient | None = None,
) -> int:
    """
    Change the config of an active VE.

    Fails if the daemon finds it cannot meet the new requirements.

    Returns:
        0, or INVALID_VE_CONFIG, VE_NOT_REGISTERED, VE_NOT_ACTIVE,
        VE_OPERATION_FAILED, NO_SPACE, or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_UPDATE_VE,
        constants.SIG_UPDATE_VE,
        encode_name(name),
        encode_config(config),
        encode_flags(flags),
    ).code


def deactivate_ve(name: str, *, client: RpcClient | None = None) -> int:
    """
    Stop the daemon from tuning a VE. The VE stays registered and keeps
    counting towards the host load.

    Returns:
        0, or VE_NOT_REGISTERED, VE_NOT_ACTIVE, or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_DEACTIVATE_VE,
        constants.SIG_DEACTIVATE_VE,
        encode_name(name),
    ).code


def unregister_ve(name: str, *, client: RpcClient | None = None) -> int:
    """
    Make the daemon forget about a VE.

    Returns:
        0, or VE_NOT_REGISTERED, or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_UNREGISTER_VE,
        constants.SIG_UNREGISTER_VE,
        encode_name(name),
    ).code


def get_ve_config(name: str, *, client: RpcClient | None = None) -> tuple[int, ConfigRecord | None]:
    """
    Get the config the daemon holds for a VE.

    Returns:
        (0, config), or (VE_NOT_REGISTERED, None), or (LibraryError, None).
    """
    reply = _client(client).call(
        constants.METHOD_GET_VE_CONFIG,
        constants.SIG_GET_VE_CONFIG,
        encode_name(name),
    )
    if not reply.ok:
        return reply.code, None

    try:
        if not reply.payload:
            raise WireError("GetVEConfig reply has no config")
        return SUCCESS, decode_config(reply.payload[0])
    except WireError as e:
        logger.warning(f"Malformed GetVEConfig reply: {e}")
        return LibraryError.CONNECTION_FAILED, None


def get_ve_state(name: str, *, client: RpcClient | None = None) -> tuple[int, VEState | None]:
    """
    Get the state of a VE.

    A VE the daemon doesn't know about is reported as UNREGISTERED with a
    success code; that is a state, not an error.

    Returns:
        (0, state), or (LibraryError, None), or any other error the daemon
        reports with None.
    """
    reply = _client(client).call(
        constants.METHOD_IS_VE_ACTIVE,
        constants.SIG_IS_VE_ACTIVE,
        encode_name(name),
    )
    if reply.code == ServiceError.VE_NOT_REGISTERED:
        return SUCCESS, VEState.UNREGISTERED
    if not reply.ok:
        return reply.code, None

    try:
        if not reply.payload:
            raise WireError("IsVEActive reply has no state")
        active = decode_bool(reply.payload[0])
    except WireError as e:
        logger.warning(f"Malformed IsVEActive reply: {e}")
        return LibraryError.CONNECTION_FAILED, None

    return SUCCESS, VEState.ACTIVE if active else VEState.REGISTERED


def _get_policy_name(method: str, client: RpcClient | None) -> tuple[int, str | None]:
    # Policy replies may or may not lead with a result code
    reply = _client(client).call(method, has_result_code=False)
    if not reply.ok:
        return reply.code, None

    args = reply.payload
    try:
        if args and not isinstance(args[0], str):
            code = decode_result_code(args)
            if code != SUCCESS:
                return code, None
            args = args[1:]
        if len(args) != 1:
            raise WireError(f"Unexpected {method} reply {reply.payload!r}")
        return SUCCESS, decode_string(args[0])
    except WireError as e:
        logger.warning(f"Malformed {method} reply: {e}")
        return LibraryError.CONNECTION_FAILED, None


def get_current_policy(*, client: RpcClient | None = None) -> tuple[int, str | None]:
    """
    Get the name of the load-management policy the daemon is running.

    Returns:
        (0, name), or (error code, None).
    """
    return _get_policy_name(constants.METHOD_GET_CURRENT_POLICY, client)


def get_policy_from_file(*, client: RpcClient | None = None) -> tuple[int, str | None]:
    """
    Get the name of the policy set in the daemon's config file, which is
    the one it will use after a restart.

    Returns:
        (0, name), or (error code, None).
    """
    return _get_policy_name(constants.METHOD_GET_POLICY_FROM_FILE, client)


def set_policy(name: str, *, client: RpcClient | None = None) -> int:
    """
    Switch the daemon to another load-management policy.

    Returns:
        0, or the daemon's error code, or a LibraryError.
    """
    return _client(client).call(
        constants.METHOD_SWITCH_POLICY,
        constants.SIG_SWITCH_POLICY,
        encode_name(name),
    ).code

"""
libvcmmd - client library for the VCMMD memory management daemon.

Usage:
    from libvcmmd import ConfigKey, ConfigRecord, VEType, register_ve, strerror

    config = ConfigRecord()
    config.append(ConfigKey.GUARANTEE, 100 << 20)
    config.append(ConfigKey.LIMIT, 500 << 20)

    err = register_ve("ct1", VEType.CT, config)
    if err:
        print(f"Failed to register ct1: {strerror(err)}")
"""

__version__ = "0.1.0"

from .api import (
    activate_ve,
    commit_ve,
    deactivate_ve,
    get_current_policy,
    get_policy_from_file,
    get_ve_config,
    get_ve_state,
    init,
    register_ve,
    set_policy,
    unregister_ve,
    update_ve,
)
from .errors import SUCCESS, LibraryError, ServiceError, VCMMDError, check, strerror
from .rpc import Reply, RpcClient
from .ve import ConfigEntry, ConfigKey, ConfigRecord, GuaranteeType, VEFlags, VEState, VEType

__all__ = [
    "__version__",
    # Operations
    "init",
    "register_ve",
    "activate_ve",
    "commit_ve",
    "update_ve",
    "deactivate_ve",
    "unregister_ve",
    "get_ve_config",
    "get_ve_state",
    "get_current_policy",
    "get_policy_from_file",
    "set_policy",
    # Errors
    "SUCCESS",
    "ServiceError",
    "LibraryError",
    "VCMMDError",
    "check",
    "strerror",
    # Data model
    "ConfigEntry",
    "ConfigKey",
    "ConfigRecord",
    "GuaranteeType",
    "VEFlags",
    "VEState",
    "VEType",
    # Transport
    "Reply",
    "RpcClient",
]

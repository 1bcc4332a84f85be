"""
VCMMD service address and method names.

The daemon exports a single LoadManager object on the system bus. The
address below is constant across all operations.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceAddress:
    """
    Where to send requests.

    Attributes:
        bus_name: Well-known bus name of the daemon
        object_path: Path of the LoadManager object
        interface: Interface implementing the methods below
    """
    bus_name: str
    object_path: str
    interface: str


SERVICE_ADDRESS = ServiceAddress(
    bus_name="com.virtuozzo.vcmmd",
    object_path="/LoadManager",
    interface="com.virtuozzo.vcmmd.LoadManager",
)

# ============================================================================
# Methods
# ============================================================================
# Each method is listed with its argument signature. Every reply starts with
# an int32 result code, except where noted.

# RegisterVE(name, type, config, flags)
METHOD_REGISTER_VE = "RegisterVE"
SIG_REGISTER_VE = "sia(qts)u"

# ActivateVE(name, flags)
METHOD_ACTIVATE_VE = "ActivateVE"
SIG_ACTIVATE_VE = "su"

# CommitVE(name): confirm the VE started with the resources it was given
METHOD_COMMIT_VE = "CommitVE"
SIG_COMMIT_VE = "s"

# UpdateVE(name, config, flags)
METHOD_UPDATE_VE = "UpdateVE"
SIG_UPDATE_VE = "sa(qts)u"

# DeactivateVE(name)
METHOD_DEACTIVATE_VE = "DeactivateVE"
SIG_DEACTIVATE_VE = "s"

# UnregisterVE(name)
METHOD_UNREGISTER_VE = "UnregisterVE"
SIG_UNREGISTER_VE = "s"

# GetVEConfig(name) -> (code, config)
METHOD_GET_VE_CONFIG = "GetVEConfig"
SIG_GET_VE_CONFIG = "s"

# IsVEActive(name) -> (code, active)
METHOD_IS_VE_ACTIVE = "IsVEActive"
SIG_IS_VE_ACTIVE = "s"

# GetCurrentPolicy() -> (code, name); older daemons reply with just the name
METHOD_GET_CURRENT_POLICY = "GetCurrentPolicy"

# GetPolicyFromFile() -> (name); no result code
METHOD_GET_POLICY_FROM_FILE = "GetPolicyFromFile"

# SwitchPolicy(name)
METHOD_SWITCH_POLICY = "SwitchPolicy"
SIG_SWITCH_POLICY = "s"

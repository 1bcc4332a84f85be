"""
VE identity.

A VE is referred to by name only. Its type is declared once, at registration,
and its state lives in the daemon; we only ever observe it.
"""

from enum import Enum, IntEnum, IntFlag


class VEType(IntEnum):
    """Kind of virtual environment, sent as an int32 on registration."""

    CT = 0          # container
    VM = 1          # virtual machine, guest OS unspecified
    VM_LINUX = 2    # virtual machine running Linux
    VM_WINDOWS = 3  # virtual machine running Windows


class VEState(Enum):
    """
    VE state as seen by the daemon.

        UNREGISTERED --register--> REGISTERED --activate--> ACTIVE
        ACTIVE --deactivate--> REGISTERED --unregister--> UNREGISTERED

    Config updates are only accepted while ACTIVE. The daemon enforces all of
    this; the library only reports what it observes.
    """

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    ACTIVE = "active"


class VEFlags(IntFlag):
    """Flags accepted by RegisterVE, ActivateVE and UpdateVE (uint32)."""

    NONE = 0

    # Skip the daemon's check that the VE guarantee can be satisfied
    FORCE = 1

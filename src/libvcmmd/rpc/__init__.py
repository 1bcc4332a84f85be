"""
VCMMD request/response protocol.

This package contains:
- constants: Service address, method names and signatures
- codec: Encoding of configs and call arguments, decoding of replies
- client: RpcClient, which performs a single blocking call
"""

from .client import Reply, RpcClient, get_default_bus
from .codec import CONFIG_SIGNATURE, WireError, decode_config, encode_config
from .constants import SERVICE_ADDRESS, ServiceAddress

__all__ = [
    "Reply",
    "RpcClient",
    "get_default_bus",
    "CONFIG_SIGNATURE",
    "WireError",
    "decode_config",
    "encode_config",
    "SERVICE_ADDRESS",
    "ServiceAddress",
]

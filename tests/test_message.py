"""
Test marshalling against the real libdbus.

Messages are built and read back without being sent, so no bus is needed,
only the library itself.
"""

import pytest

from libvcmmd.dbus import MethodCall, get_lib
from libvcmmd.dbus.bindings import LibraryLoadError
from libvcmmd.dbus.message import build_message, read_args

try:
    lib = get_lib()
except LibraryLoadError:
    lib = None

pytestmark = pytest.mark.skipif(lib is None, reason="libdbus-1 is not available")


def marshal(signature: str, *args) -> list:
    msg = build_message(lib, MethodCall(
        destination="com.virtuozzo.vcmmd",
        path="/LoadManager",
        interface="com.virtuozzo.vcmmd.LoadManager",
        member="RegisterVE",
        signature=signature,
        args=args,
    ))
    try:
        return read_args(lib, msg)
    finally:
        lib.dbus_message_unref(msg)


class TestMarshal:
    def test_register_arguments(self):
        config = [(0, 100 << 20, ""), (4, 0, "0-1")]
        assert marshal("sia(qts)u", "ct1", 0, config, 1) == ["ct1", 0, config, 1]

    def test_empty_array(self):
        assert marshal("sa(qts)", "ct1", []) == ["ct1", []]

    def test_dict(self):
        assert marshal("a{st}b", {"limit": 5}, True) == [{"limit": 5}, True]

    def test_no_arguments(self):
        assert marshal("") == []

    def test_value_out_of_range(self):
        with pytest.raises(ValueError):
            marshal("q", 1 << 16)

    def test_wrong_arity(self):
        with pytest.raises(TypeError):
            marshal("su", "ct1")

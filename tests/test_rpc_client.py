"""
Test the RPC client against fake buses.
"""

from libvcmmd.dbus import MethodCall
from libvcmmd.errors import LibraryError
from libvcmmd.rpc import SERVICE_ADDRESS, RpcClient, ServiceAddress


class TestRequest:
    """Test what gets sent."""

    def test_addressed_to_service(self, canned):
        client, bus = canned()
        client.call("ActivateVE", "su", "ct1", 0)

        assert bus.requests == [
            MethodCall(
                destination="com.virtuozzo.vcmmd",
                path="/LoadManager",
                interface="com.virtuozzo.vcmmd.LoadManager",
                member="ActivateVE",
                signature="su",
                args=("ct1", 0),
            )
        ]

    def test_custom_address(self, canned):
        address = ServiceAddress("org.example.test", "/Test", "org.example.Test")
        bus = canned()[1]
        client = RpcClient(bus=bus, address=address)
        client.call("Ping")

        request = bus.requests[0]
        assert (request.destination, request.path, request.interface) == (
            "org.example.test",
            "/Test",
            "org.example.Test",
        )
        assert client.address is address
        assert RpcClient(bus=bus).address is SERVICE_ADDRESS


class TestReply:
    """Test how replies are interpreted."""

    def test_success(self, canned):
        client, _ = canned(reply=[0])
        reply = client.call("UnregisterVE", "s", "ct1")
        assert reply.ok
        assert reply.code == 0
        assert reply.payload == []

    def test_payload_follows_code(self, canned):
        client, _ = canned(reply=[0, True])
        reply = client.call("IsVEActive", "s", "ct1")
        assert reply.payload == [True]

    def test_service_error(self, canned):
        client, _ = canned(reply=[5, []])
        reply = client.call("GetVEConfig", "s", "ct1")
        assert not reply.ok
        assert reply.code == 5

    def test_unknown_code_passed_through(self, canned):
        client, _ = canned(reply=[77])
        assert client.call("CommitVE", "s", "ct1").code == 77

    def test_empty_reply(self, canned):
        client, _ = canned(reply=[])
        reply = client.call("CommitVE", "s", "ct1")
        assert reply.code == LibraryError.CONNECTION_FAILED
        assert reply.payload == []

    def test_reply_without_code(self, canned):
        client, _ = canned(reply=["performance", 0])
        reply = client.call("CommitVE", "s", "ct1")
        assert reply.code == LibraryError.CONNECTION_FAILED
        assert reply.payload == []

    def test_has_result_code_false(self, canned):
        client, _ = canned(reply=["performance"])
        reply = client.call("GetPolicyFromFile", has_result_code=False)
        assert reply.ok
        assert reply.payload == ["performance"]


class TestFailures:
    """Test transport failures."""

    def test_connection_failed(self, unreachable):
        reply = unreachable.call("DeactivateVE", "s", "ct1")
        assert reply.code == LibraryError.CONNECTION_FAILED

    def test_connection_failed_without_code(self, unreachable):
        reply = unreachable.call("GetPolicyFromFile", has_result_code=False)
        assert reply.code == LibraryError.CONNECTION_FAILED

    def test_no_memory(self, out_of_memory):
        reply = out_of_memory.call("DeactivateVE", "s", "ct1")
        assert reply.code == LibraryError.NO_MEMORY
        assert reply.payload == []

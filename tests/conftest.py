"""
Shared fixtures: fake buses standing in for the system bus and the daemon.
"""

import pytest

from libvcmmd.dbus import ConnectionFailedError, NoMemoryError, split_signature
from libvcmmd.rpc import RpcClient


class FakeDaemon:
    """
    Fake VCMMD daemon.

    Answers MethodCalls the way the real daemon does, including its per-VE
    state machine, and records every request it receives.
    """

    def __init__(self):
        self.ves: dict[str, dict] = {}
        self.policy = "performance"
        self.configured_policy = "performance"
        self.requests = []

    def call(self, request) -> list:
        # The signature must describe exactly the arguments sent
        assert len(split_signature(request.signature)) == len(request.args)
        self.requests.append(request)
        handler = getattr(self, f"_{request.member}")
        return handler(*request.args)

    def _RegisterVE(self, name, ve_type, config, flags):
        if not name:
            return [1]
        if ve_type not in (0, 1, 2, 3):
            return [2]
        if name in self.ves:
            return [4]
        self.ves[name] = {"type": ve_type, "config": list(config), "active": False}
        return [0]

    def _ActivateVE(self, name, flags):
        if name not in self.ves:
            return [5]
        if self.ves[name]["active"]:
            return [6]
        self.ves[name]["active"] = True
        return [0]

    def _CommitVE(self, name):
        if name not in self.ves:
            return [5]
        return [0] if self.ves[name]["active"] else [9]

    def _UpdateVE(self, name, config, flags):
        if name not in self.ves:
            return [5]
        if not self.ves[name]["active"]:
            return [9]
        current = {key: (key, value, text) for key, value, text in self.ves[name]["config"]}
        for key, value, text in config:
            current[key] = (key, value, text)
        self.ves[name]["config"] = list(current.values())
        return [0]

    def _DeactivateVE(self, name):
        if name not in self.ves:
            return [5]
        if not self.ves[name]["active"]:
            return [9]
        self.ves[name]["active"] = False
        return [0]

    def _UnregisterVE(self, name):
        if self.ves.pop(name, None) is None:
            return [5]
        return [0]

    def _GetVEConfig(self, name):
        if name not in self.ves:
            return [5, []]
        return [0, list(self.ves[name]["config"])]

    def _IsVEActive(self, name):
        if name not in self.ves:
            return [5, False]
        return [0, self.ves[name]["active"]]

    def _GetCurrentPolicy(self):
        return [0, self.policy]

    def _GetPolicyFromFile(self):
        return [self.configured_policy]

    def _SwitchPolicy(self, name):
        self.policy = name
        return [0]


class CannedBus:
    """Bus that returns a fixed reply, or raises a fixed error."""

    def __init__(self, reply=None, error=None):
        self.reply = reply if reply is not None else [0]
        self.error = error
        self.requests = []

    def call(self, request) -> list:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.reply)


@pytest.fixture
def daemon():
    return FakeDaemon()


@pytest.fixture
def client(daemon):
    return RpcClient(bus=daemon)


@pytest.fixture
def canned():
    """Factory for clients backed by a CannedBus."""

    def make(reply=None, error=None):
        bus = CannedBus(reply=reply, error=error)
        return RpcClient(bus=bus), bus

    return make


@pytest.fixture
def unreachable():
    return RpcClient(bus=CannedBus(error=ConnectionFailedError("no bus")))


@pytest.fixture
def out_of_memory():
    return RpcClient(bus=CannedBus(error=NoMemoryError("no memory")))

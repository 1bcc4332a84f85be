"""
Test error codes and their descriptions.
"""

import pytest

from libvcmmd.errors import (
    SUCCESS,
    LibraryError,
    ServiceError,
    VCMMDError,
    check,
    classify,
    strerror,
)


class TestStrerror:
    def test_success(self):
        assert strerror(SUCCESS) == "Success"

    @pytest.mark.parametrize("code", list(ServiceError) + list(LibraryError))
    def test_every_known_code_has_a_message(self, code):
        message = strerror(code)
        assert message
        assert message != "Unknown error"
        assert strerror(int(code)) == message

    @pytest.mark.parametrize("code", [-1, 11, 999, 1002, 2**31 - 1, -(2**31)])
    def test_unknown_codes(self, code):
        assert strerror(code) == "Unknown error"

    def test_known_messages(self):
        assert strerror(ServiceError.VE_NAME_ALREADY_IN_USE) == "VE name already in use"
        assert strerror(LibraryError.CONNECTION_FAILED) == "Failed to connect to VCMMD service"

    def test_never_raises(self):
        assert strerror(None) == "Unknown error"


class TestClassify:
    def test_bands(self):
        assert classify(1) is ServiceError.INVALID_VE_NAME
        assert classify(10) is ServiceError.TOO_MANY_REQUESTS
        assert classify(1000) is LibraryError.NO_MEMORY
        assert classify(1001) is LibraryError.CONNECTION_FAILED

    def test_outside_bands(self):
        assert classify(0) is None
        assert classify(500) is None

    def test_bands_are_disjoint(self):
        assert not set(map(int, ServiceError)) & set(map(int, LibraryError))
        assert min(ServiceError) == 1
        assert min(LibraryError) == 1000


class TestCheck:
    def test_success_passes(self):
        check(0)

    def test_error_raises(self):
        with pytest.raises(VCMMDError) as excinfo:
            check(ServiceError.VE_NOT_REGISTERED)

        assert excinfo.value.code == 5
        assert excinfo.value.kind is ServiceError.VE_NOT_REGISTERED
        assert "VE not registered" in str(excinfo.value)

    def test_unknown_code(self):
        with pytest.raises(VCMMDError) as excinfo:
            check(4242)
        assert excinfo.value.kind is None

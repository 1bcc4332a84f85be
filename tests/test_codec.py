"""
Test encoding configs and arguments for the wire, and decoding replies.
"""

import pytest

from libvcmmd.rpc.codec import (
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
from libvcmmd.ve import ConfigKey, ConfigRecord, VEType

MB = 1 << 20


class TestEncodeConfig:
    def test_empty(self):
        assert encode_config(ConfigRecord()) == []

    def test_triples(self):
        config = ConfigRecord()
        config.append(ConfigKey.LIMIT, 500 * MB)
        config.append_string(ConfigKey.CPU_LIST, "0-3")
        config.append(ConfigKey.GUARANTEE, 100 * MB)

        assert encode_config(config) == [
            (1, 500 * MB, ""),
            (5, 0, "0-3"),
            (0, 100 * MB, ""),
        ]

    def test_tags_are_plain_ints(self):
        config = ConfigRecord.from_dict({ConfigKey.SWAP: 1})
        key, _, _ = encode_config(config)[0]
        assert type(key) is int


class TestDecodeConfig:
    def test_round_trip(self):
        config = ConfigRecord.from_dict({
            ConfigKey.GUARANTEE: 100 * MB,
            ConfigKey.LIMIT: 500 * MB,
            ConfigKey.NODE_LIST: "",
            ConfigKey.VRAM: 16 * MB,
            ConfigKey.CPU_LIST: "0,2",
        })
        assert decode_config(encode_config(config)) == config

    def test_unknown_tags_dropped(self):
        items = [(0, 100, ""), (200, 7, "future"), (1, 500, "")]
        config = decode_config(items)

        assert config.to_dict() == {ConfigKey.GUARANTEE: 100, ConfigKey.LIMIT: 500}

    def test_legacy_pairs(self):
        config = decode_config([(0, 100), (2, 0)])
        assert config.to_dict() == {ConfigKey.GUARANTEE: 100, ConfigKey.SWAP: 0}

    def test_legacy_pair_for_string_key(self):
        with pytest.raises(WireError):
            decode_config([(4, 0)])

    def test_raw_array(self):
        # Position is the key; trailing unknown positions are dropped
        values = [100, 500, 0, 16, 99, 99, 1, 4, 12345]
        config = decode_config(values)

        assert config.to_dict() == {
            ConfigKey.GUARANTEE: 100,
            ConfigKey.LIMIT: 500,
            ConfigKey.SWAP: 0,
            ConfigKey.VRAM: 16,
            ConfigKey.GUARANTEE_TYPE: 1,
            ConfigKey.CPUNUM: 4,
        }

    def test_duplicate_key(self):
        with pytest.raises(WireError):
            decode_config([(0, 100, ""), (0, 200, "")])

    def test_duplicate_unknown_key_ignored(self):
        config = decode_config([(300, 1, ""), (300, 2, "")])
        assert len(config) == 0

    @pytest.mark.parametrize("item", [
        (0, "100", ""),         # numeric value sent as string
        (4, 0, 5),              # string key without text
        ("0", 100, ""),         # key not an int
        (0x10000, 1, ""),       # key wider than uint16
        (0, -1, ""),            # negative value
        (0, 1, "", "extra"),    # wrong arity
        "garbage",
        None,
    ])
    def test_malformed_entry(self, item):
        with pytest.raises(WireError):
            decode_config([item])

    @pytest.mark.parametrize("items", [
        [100, (1, 200, "")],        # raw array, then a triple
        [(0, 1, ""), 5],            # triple, then a raw value
        [(0, 1), (1, 2, "")],       # pair, then a triple
        [(0, 1, ""), (1, 2)],       # triple, then a pair
    ])
    def test_mixed_forms(self, items):
        with pytest.raises(WireError):
            decode_config(items)

    def test_not_an_array(self):
        with pytest.raises(WireError):
            decode_config("a(qts)")

    def test_no_partial_record(self):
        with pytest.raises(WireError):
            decode_config([(0, 100, ""), (1, 200, ""), (1, 300, "")])


class TestScalars:
    def test_name(self):
        assert encode_name("ct1") == "ct1"
        assert encode_name("") == ""

    def test_bad_name(self):
        with pytest.raises(TypeError):
            encode_name(b"ct1")
        with pytest.raises(ValueError):
            encode_name("ct\0")
        with pytest.raises(ValueError):
            encode_name("ct\ud800")

    def test_ve_type(self):
        assert encode_ve_type(VEType.VM) == 1
        assert type(encode_ve_type(VEType.VM)) is int
        assert encode_ve_type(77) == 77

    def test_bad_ve_type(self):
        with pytest.raises(TypeError):
            encode_ve_type("ct")
        with pytest.raises(ValueError):
            encode_ve_type(1 << 31)

    def test_flags(self):
        assert encode_flags(0) == 0
        assert encode_flags(0xFFFFFFFF) == 0xFFFFFFFF
        with pytest.raises(ValueError):
            encode_flags(-1)
        with pytest.raises(TypeError):
            encode_flags(True)

    def test_result_code(self):
        assert decode_result_code([0]) == 0
        assert decode_result_code([5, False]) == 5

    @pytest.mark.parametrize("args", [[], ["0"], [True], [1 << 31], [None]])
    def test_bad_result_code(self, args):
        with pytest.raises(WireError):
            decode_result_code(args)

    def test_bool_and_string(self):
        assert decode_bool(True) is True
        assert decode_string("performance") == "performance"
        with pytest.raises(WireError):
            decode_bool(1)
        with pytest.raises(WireError):
            decode_string(1)

"""
System ID parsing and registry tests.
"""

from uuid import UUID

import pytest

from pypssh.exceptions import DecodingError
from pypssh.system import SystemId, SystemRegistry, lookup, system_name, to_uuid


class TestSystemId:
    """System ID coercion and lookup"""

    @pytest.mark.parametrize("value", [
        "EDEF8BA979D64ACEA3C827DCD51D21ED",
        "edef8ba9-79d6-4ace-a3c8-27dcd51d21ed",
        bytes.fromhex("edef8ba979d64acea3c827dcd51d21ed"),
        UUID(hex="edef8ba979d64acea3c827dcd51d21ed"),
        SystemId.Widevine,
    ])
    def test_to_uuid(self, value):
        assert to_uuid(value) == SystemId.Widevine.value

    def test_names(self):
        assert system_name("9a04f07998404286ab92e65be0885f95") == "PlayReady"
        assert system_name("5e629af538da4063897797ffbd9902d4") == "Marlin"
        assert system_name("1077efecc0b24d02ace33c1e52e2fb4b") == "Common"

    def test_unknown_is_common(self):
        assert lookup("00000000000000000000000000000000") is None
        assert system_name("00000000000000000000000000000000") == "common"

    def test_invalid_hex(self):
        with pytest.raises(DecodingError):
            to_uuid("not-a-system-id")

    def test_wrong_size_bytes(self):
        with pytest.raises(DecodingError):
            to_uuid(b"\x00" * 8)


class TestSystemRegistry:
    """Explicit codec table"""

    def test_register(self):
        decoder = object()
        registry = SystemRegistry().register(SystemId.Marlin, decoder=decoder)

        assert registry.decoder(SystemId.Marlin) is decoder
        assert registry.encoder(SystemId.Marlin) is None
        assert registry.systems() == [SystemId.Marlin]

    def test_rejects_non_system(self):
        with pytest.raises(TypeError):
            SystemRegistry().register("Marlin", decoder=object())

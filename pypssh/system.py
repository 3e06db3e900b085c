from enum import Enum
from uuid import UUID

from pypssh.exceptions import DecodingError


class SystemId(Enum):
    """DRM System IDs recognised in PSSH boxes. The member name is the display name."""
    Widevine = UUID(hex="edef8ba979d64acea3c827dcd51d21ed")
    PlayReady = UUID(hex="9a04f07998404286ab92e65be0885f95")
    Marlin = UUID(hex="5e629af538da4063897797ffbd9902d4")
    Common = UUID(hex="1077efecc0b24d02ace33c1e52e2fb4b")


UNKNOWN_SYSTEM_NAME = "common"


def to_uuid(system_id):
    """
    Coerce a System ID to a UUID.

    Accepts a SystemId, a UUID, 16 raw bytes, or a hex string in any case,
    with or without hyphens.
    """
    if isinstance(system_id, SystemId):
        return system_id.value
    if isinstance(system_id, UUID):
        return system_id
    if isinstance(system_id, (bytes, bytearray)):
        if len(system_id) != 16:
            raise DecodingError("System ID must be 16 bytes, got {0}".format(len(system_id)))
        return UUID(bytes=bytes(system_id))
    if isinstance(system_id, str):
        try:
            return UUID(hex=system_id)
        except ValueError as e:
            raise DecodingError("Invalid System ID {0!r}: {1}".format(system_id, e))
    raise TypeError("Expected system_id to be a UUID, bytes or str not {0}".format(type(system_id)))


def lookup(system_id):
    """Return the known SystemId for an id, or None if it is not recognised."""
    try:
        return SystemId(to_uuid(system_id))
    except ValueError:
        return None


def system_name(system_id):
    system = lookup(system_id)
    if system is None:
        return UNKNOWN_SYSTEM_NAME
    return system.name


class SystemRegistry:
    """
    Binds DRM systems to the codecs that build and parse their init data.

    Systems without a registered decoder (Marlin, Common, unknown ids) are
    still decoded at the box level; their init data is left as raw bytes.
    """

    def __init__(self):
        self.__encoders = {}
        self.__decoders = {}

    def register(self, system, encoder=None, decoder=None):
        """
        Register codecs for a system.

        Parameters:
            system: A SystemId member.
            encoder: Callable taking a config object and returning a base64 PSSH.
            decoder: Callable taking raw init data bytes and returning a data object.
        """
        if not isinstance(system, SystemId):
            raise TypeError("Expected system to be a {0} not {1}".format(SystemId, system))
        if encoder:
            self.__encoders[system] = encoder
        if decoder:
            self.__decoders[system] = decoder
        return self

    def encoder(self, system):
        return self.__encoders.get(system)

    def decoder(self, system):
        return self.__decoders.get(system)

    def systems(self):
        return sorted(set(self.__encoders) | set(self.__decoders), key=lambda s: s.name)


__all__ = ("SystemId", "SystemRegistry", "UNKNOWN_SYSTEM_NAME", "to_uuid", "lookup", "system_name")

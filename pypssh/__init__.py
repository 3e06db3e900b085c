import logging

from pypssh import playready, widevine
from pypssh.exceptions import DecodingError, MalformedBoxError, PyPsshException, SchemaValidationError
from pypssh.key import ContentKey, decode_key, encode_key
from pypssh.playready import KeyPair, PlayReadyConfig, PlayReadyData
from pypssh.pssh import DecodeResult, build_pssh, decode_boxes, decode_pssh, encode_pssh
from pypssh.system import SystemId, SystemRegistry
from pypssh.widevine import WidevineConfig, WidevineData

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def tools(system):
    """Return the codec module for a DRM system, by SystemId or name ("widevine", "playready")."""
    if isinstance(system, SystemId):
        system = system.name
    name = str(system).lower()
    if name == SystemId.Widevine.name.lower():
        return widevine
    if name == SystemId.PlayReady.name.lower():
        return playready
    raise ValueError("Unknown drm system")


__all__ = (
    "tools", "encode_pssh", "decode_pssh", "decode_boxes", "build_pssh", "encode_key", "decode_key",
    "ContentKey", "DecodeResult", "KeyPair", "PlayReadyConfig", "PlayReadyData", "WidevineConfig", "WidevineData",
    "SystemId", "SystemRegistry", "PyPsshException", "SchemaValidationError", "MalformedBoxError", "DecodingError",
    "playready", "widevine"
)

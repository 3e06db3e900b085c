import logging

from google.protobuf.message import DecodeError

from pypssh.box import encode_box
from pypssh.exceptions import MalformedBoxError, SchemaValidationError
from pypssh.system import SystemId
from pypssh.utils import b64decode, b64encode, unhex
from pypssh.widevine_pssh_data import AESCTR, WidevinePsshData

logger = logging.getLogger(__name__)


class WidevineConfig:
    def __init__(
        self,
        key_ids=None,
        content_id=None,
        track_type="",
        provider="",
        protection_scheme="cenc",
        algorithm=AESCTR,
        data_only=False
    ):
        """
        Settings for a Widevine PSSH.

        Parameters:
            key_ids: Key IDs as hex strings. Stored in the Widevine PSSH Data only.
            content_id: Content ID text, stored as its UTF-8 bytes (not hex decoded).
            track_type: Track type, e.g. "SD", "HD", "AUDIO".
            provider: Content provider name.
            protection_scheme: Four character scheme code, e.g. "cenc" or "cbcs".
                An empty string leaves it out.
            algorithm: 0 for unencrypted, 1 for AES-CTR.
            data_only: Return only the Widevine PSSH Data, not a whole box.
        """
        self.key_ids = list(key_ids or [])
        self.content_id = content_id
        self.track_type = track_type
        self.provider = provider
        self.protection_scheme = protection_scheme
        self.algorithm = algorithm
        self.data_only = data_only

    system = SystemId.Widevine


class WidevineData:
    """The fields found in a Widevine PSSH Data. Fields that were not set are None."""

    def __init__(self, key_ids=None, provider=None, content_id=None, track_type=None,
                 protection_scheme=None, algorithm=None):
        self.key_ids = key_ids
        self.provider = provider
        self.content_id = content_id
        self.track_type = track_type
        self.protection_scheme = protection_scheme
        self.algorithm = algorithm

    @property
    def key_count(self):
        return len(self.key_ids or [])

    def __repr__(self):
        return "{name}({items})".format(
            name=self.__class__.__name__,
            items=", ".join(["{0}={1}".format(k, repr(v)) for k, v in self.__dict__.items() if v is not None])
        )


def scheme_to_int(scheme):
    """Read a four character scheme code as a big-endian int32, e.g. "cenc" -> 0x63656E63."""
    data = scheme.encode("ascii") if isinstance(scheme, str) else bytes(scheme)
    if len(data) != 4:
        raise SchemaValidationError("protection_scheme: expected a 4 character code, got {0!r}".format(scheme))
    return int.from_bytes(data, "big", signed=True)


def int_to_scheme(value):
    return value.to_bytes(4, "big", signed=True).decode("ascii", errors="replace")


def encode_data(config):
    """
    Build the Widevine PSSH Data for a config.

    Raises:
        SchemaValidationError: If the protobuf schema rejects a field.
    """
    try:
        payload = {"algorithm": config.algorithm}
        if config.key_ids:
            payload["key_id"] = [unhex(key_id, what="key id") for key_id in config.key_ids]
        if config.content_id:
            content_id = config.content_id
            payload["content_id"] = content_id.encode("utf8") if isinstance(content_id, str) else content_id
        if config.track_type:
            payload["track_type"] = config.track_type
        if config.provider:
            payload["provider"] = config.provider
        if config.protection_scheme:
            payload["protection_scheme"] = scheme_to_int(config.protection_scheme)

        message = WidevinePsshData(**payload)
    except (TypeError, ValueError) as e:
        raise SchemaValidationError(str(e))

    return message.SerializeToString()


def _text(value):
    # upb hands back bytes for proto2 strings that are not valid UTF-8
    if isinstance(value, bytes):
        return value.decode("utf8", errors="replace")
    return value


def decode(data):
    """
    Parse Widevine PSSH Data.

    Raises:
        MalformedBoxError: If the data is not a Widevine PSSH Data.
    """
    header = WidevinePsshData()
    try:
        header.ParseFromString(data)
    except DecodeError as e:
        raise MalformedBoxError("Failed to parse Widevine PSSH Data, {0}".format(e))

    result = WidevineData()
    if header.key_id:
        result.key_ids = [key_id.hex() for key_id in header.key_id]
    if header.HasField("provider"):
        result.provider = _text(header.provider)
    if header.HasField("content_id"):
        result.content_id = header.content_id.hex().upper()
    if header.HasField("track_type"):
        result.track_type = _text(header.track_type)
    if header.HasField("protection_scheme"):
        result.protection_scheme = int_to_scheme(header.protection_scheme)
    if header.HasField("algorithm"):
        result.algorithm = header.algorithm
    return result


def decode_data(data):
    """Parse base64 Widevine PSSH Data, without a box around it."""
    return decode(b64decode(data, "Widevine PSSH Data"))


def encode_pssh(config):
    """Build a base64 Widevine PSSH box, or only its data if config.data_only is set."""
    data = encode_data(config)
    if config.data_only:
        return b64encode(data)
    # version 0 box; the key ids are only in the data
    return b64encode(encode_box(SystemId.Widevine, config.key_ids, data))


__all__ = ("WidevineConfig", "WidevineData", "encode_data", "decode", "decode_data", "encode_pssh")

import logging

from pypssh import playready, widevine
from pypssh.box import encode_box, parse_box, parse_boxes
from pypssh.exceptions import MalformedBoxError
from pypssh.system import SystemId, SystemRegistry, lookup, system_name
from pypssh.utils import BinaryReader, b64decode, b64encode, hex_to_guid

logger = logging.getLogger(__name__)

registry = SystemRegistry()
registry.register(SystemId.Widevine, encoder=widevine.encode_pssh, decoder=widevine.decode)
registry.register(SystemId.PlayReady, encoder=playready.encode_pssh, decoder=playready.decode)


class DecodeResult:
    def __init__(self, system_id, system_name, version, key_ids, data_object, data_size):
        """
        A decoded PSSH box.

        Parameters:
            system_id: System ID as a UUID.
            system_name: Display name of the DRM system, "common" if unknown.
            version: Box version.
            key_ids: Key IDs from the box as hex (version 1 boxes only).
            data_object: WidevineData, PlayReadyData, or None for other systems.
            data_size: Size of the init data in bytes.
        """
        self.system_id = system_id
        self.system_name = system_name
        self.version = version
        self.key_ids = key_ids
        self.data_object = data_object
        self.data_size = data_size

    @property
    def key_count(self):
        """Key IDs in the box, plus those in the Widevine PSSH Data, where Widevine keeps them."""
        count = len(self.key_ids)
        if isinstance(self.data_object, widevine.WidevineData):
            count += self.data_object.key_count
        return count

    def __repr__(self):
        return "DecodeResult({0} v{1}; {2} keys, {3} bytes of data)".format(
            self.system_name, self.version, self.key_count, self.data_size)

    def report(self):
        """Human readable summary of the box."""
        lines = ["PSSH Box v{0}".format(self.version)]
        lines.append("  System ID: {0} {1}".format(self.system_name, hex_to_guid(self.system_id.hex)))

        if self.key_ids:
            lines.append("  Key IDs ({0}):".format(len(self.key_ids)))
            for key_id in self.key_ids:
                lines.append("    {0}".format(hex_to_guid(key_id)))

        lines.append("  PSSH Data (size: {0}):".format(self.data_size))
        if self.data_size > 0:
            lines.append("    {0} Data:".format(self.system_name))
            if isinstance(self.data_object, widevine.WidevineData):
                lines.extend(self._widevine_report(self.data_object))
            elif isinstance(self.data_object, playready.PlayReadyData):
                lines.extend(self._playready_report(self.data_object))

        lines.append("\n")
        return "\n".join(lines)

    @staticmethod
    def _widevine_report(data):
        lines = []
        if data.key_ids:
            lines.append("      Key IDs ({0})".format(len(data.key_ids)))
            for key_id in data.key_ids:
                lines.append("        {0}".format(hex_to_guid(key_id)))
        if data.provider:
            lines.append("      Provider: {0}".format(data.provider))
        if data.content_id:
            lines.append("      Content ID")
            lines.append("        - UTF-8: {0}".format(bytes.fromhex(data.content_id).decode("utf8", errors="replace")))
            lines.append("        - HEX  : {0}".format(data.content_id))
        return lines

    @staticmethod
    def _playready_report(data):
        lines = ["      Record size({0})".format(data.record_size)]
        if data.record_type_name:
            lines.append("        Record Type: {0} ({1})".format(data.record_type_name, data.record_type))
        if data.record_xml:
            lines.append("        Record XML:")
            lines.append("          {0}".format(data.record_xml))
        return lines


def build_pssh(system_id, key_ids, data):
    """
    Wrap init data in a PSSH box.

    Parameters:
        system_id: System ID as a SystemId, UUID, bytes, or hex string.
        key_ids: Key IDs as hex. Written to the box for every system but Widevine.
        data: Init data as bytes, or base64.

    Returns the box as base64.
    """
    if isinstance(data, str):
        data = b64decode(data, "init data")
    return b64encode(encode_box(system_id, key_ids, data))


def encode_pssh(config, registry=registry):
    """Build a base64 PSSH box (or only its init data) from a WidevineConfig or PlayReadyConfig."""
    encoder = registry.encoder(getattr(config, "system", None))
    if not encoder:
        raise ValueError("Unknown drm system for {0}".format(type(config).__name__))
    return encoder(config)


def _decode_box(box, registry):
    system = lookup(box.system_id)
    name = system_name(box.system_id)

    data_object = None
    decoder = registry.decoder(system) if system else None
    if decoder:
        data_object = decoder(box.init_data)
    else:
        logger.debug("No decoder for %s (%s), leaving init data unparsed", name, box.system_id)

    return DecodeResult(
        system_id=box.system_id,
        system_name=name,
        version=box.version,
        key_ids=[key_id.hex() for key_id in box.key_ids],
        data_object=data_object,
        data_size=len(box.init_data)
    )


def decode_pssh(data, registry=registry):
    """
    Decode a base64 PSSH box.

    Only the first box is decoded, anything after it is ignored.

    Raises:
        DecodingError: If the data is not base64.
        MalformedBoxError: If the box or its init data is corrupt or truncated.
    """
    raw = b64decode(data, "PSSH box")
    reader = BinaryReader(raw, little_endian=False)
    box = parse_box(reader)
    if reader.has_data():
        logger.debug("Ignoring %d bytes after the PSSH box", reader.remaining())
    return _decode_box(box, registry)


def decode_boxes(data, registry=registry):
    """Decode every PSSH box in a run of concatenated boxes, given as bytes or base64."""
    if isinstance(data, str):
        data = b64decode(data, "PSSH boxes")
    boxes = parse_boxes(data)
    if not boxes:
        raise MalformedBoxError("No PSSH boxes found")
    return [_decode_box(box, registry) for box in boxes]


__all__ = ("DecodeResult", "registry", "build_pssh", "encode_pssh", "decode_pssh", "decode_boxes")

import logging
import struct

from pypssh.exceptions import MalformedBoxError
from pypssh.system import SystemId, to_uuid
from pypssh.utils import BinaryReader, unhex

logger = logging.getLogger(__name__)

BOX_TYPE = b"pssh"
KEY_ID_SIZE = 16


class Box(object):
    """Defines a PSSH box and related functions."""

    def __init__(self, version, system_id, key_ids, init_data, size=None):
        """
        Parameters:
            version: The version number of the box, 0 or 1
            system_id: The System ID as a UUID
            key_ids: A list of 16-byte Key IDs (only carried by version 1 boxes)
            init_data: The DRM system specific data
            size: The size of the box as declared in its header
        """
        self.version = version
        self.flags = 0
        self.system_id = system_id
        self.key_ids = key_ids or []
        self.init_data = init_data or b""
        self.size = size

    def __repr__(self):
        return "Box(v{0}; {1}, {2} key ids, {3} bytes of data)".format(
            self.version, self.system_id, len(self.key_ids), len(self.init_data))


def box_version(system_id, key_ids):
    """
    The version a box for this system and these key ids is written as.

    Widevine stays at version 0 even when it has key ids: they are carried
    in the Widevine PSSH Data instead, for older clients.
    """
    if key_ids and to_uuid(system_id) != SystemId.Widevine.value:
        return 1
    return 0


def encode_box(system_id, key_ids, data):
    """
    Build a PSSH box.

    Parameters:
        system_id: System ID as a SystemId, UUID, bytes, or hex string.
        key_ids: Key IDs as hex strings (or 16 raw bytes) in standard byte order.
        data: The init data bytes.
    """
    system_id = to_uuid(system_id)
    version = box_version(system_id, key_ids)
    key_ids = [unhex(key_id, KEY_ID_SIZE, "key id") for key_id in key_ids or []] if version == 1 else []

    # the version is written little-endian and the flags big-endian
    parts = [
        BOX_TYPE,
        struct.pack("<H", version),
        struct.pack(">H", 0),
        system_id.bytes,
    ]
    if version == 1:
        parts.append(struct.pack(">I", len(key_ids)))
        parts.extend(key_ids)
    parts.append(struct.pack(">I", len(data)))
    parts.append(data)

    body = b"".join(parts)
    logger.debug("Encoded PSSH v%d for %s with %d key ids", version, system_id, len(key_ids))
    return struct.pack(">I", len(body) + 4) + body


def parse_box(reader):
    """Parse one PSSH box at the reader's position."""
    start = reader.position
    size = reader.read_int(4, "box size")

    box_type = reader.read_bytes(4, "box type")
    if box_type != BOX_TYPE:
        raise MalformedBoxError("Invalid box type 0x{0}, not 'pssh'".format(box_type.hex()))

    version = reader.read_int(2, "box version", little_endian=True)
    if version > 1:
        raise MalformedBoxError("Invalid PSSH version {0}".format(version))
    reader.read_int(2, "box flags")

    system_id = to_uuid(reader.read_bytes(16, "system id"))

    key_ids = []
    if version == 1:
        count = reader.read_int(4, "key id count")
        if count * KEY_ID_SIZE > reader.remaining():
            raise MalformedBoxError(
                "Key ID count {0} exceeds the {1} bytes left in the box".format(count, reader.remaining()))
        for _ in range(count):
            key_ids.append(reader.read_bytes(KEY_ID_SIZE, "key id"))

    data_size = reader.read_int(4, "data size")
    init_data = reader.read_bytes(data_size, "init data")

    if start + size != reader.position:
        raise MalformedBoxError("Box size {0} does not match size of data {1}".format(size, reader.position - start))

    return Box(version, system_id, key_ids, init_data, size)


def parse_boxes(data):
    """Parses one or more PSSH boxes for the given binary data."""
    reader = BinaryReader(data, little_endian=False)
    boxes = []
    while reader.has_data():
        boxes.append(parse_box(reader))
    return boxes


__all__ = ("Box", "box_version", "encode_box", "parse_box", "parse_boxes")

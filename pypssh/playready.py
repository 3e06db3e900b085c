import logging
import re
import struct
from xml.sax.saxutils import escape

from pypssh.box import encode_box
from pypssh.exceptions import MalformedBoxError
from pypssh.key import decode_key, encode_key
from pypssh.system import SystemId
from pypssh.utils import BinaryReader, b64decode, b64encode

logger = logging.getLogger(__name__)

XMLNS = "http://schemas.microsoft.com/DRM/2007/03/PlayReadyHeader"
IIS_DRM_VERSION = "8.0.1906.32"

PRO_HEADER_SIZE = 10
RIGHTS_MANAGEMENT_HEADER = 0x01
EMBEDDED_LICENSE_STORE = 0x03

RECORD_TYPES = {
    RIGHTS_MANAGEMENT_HEADER: "Rights Management Header",
    EMBEDDED_LICENSE_STORE: "Embedded License Store",
}

KID_ELEMENT = re.compile(r'<KID>([A-Za-z0-9+/=]+)</KID>')
KID_VALUE = re.compile(r'<KID\b[^>]*\bVALUE="([A-Za-z0-9+/=]+)"')


class KeyPair:
    def __init__(self, kid, key=None):
        """
        Parameters:
            kid: Key ID as hex in standard byte order.
            key: Content key as hex, if known.
        """
        if not kid:
            raise ValueError("Key ID must be provided")
        self.kid = kid
        self.key = key

    @classmethod
    def coerce(cls, value):
        """Accept a KeyPair, a (kid, key) tuple, a {"kid", "key"} dict, or a bare kid."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(value.get("kid"), value.get("key"))
        if isinstance(value, (tuple, list)):
            return cls(*value)
        return cls(value)

    def __repr__(self):
        return "KeyPair(kid={0!r}, key={1})".format(self.kid, "<set>" if self.key else None)


class PlayReadyConfig:
    def __init__(
        self,
        key_pairs,
        license_url=None,
        key_seed=None,
        compatibility_mode=False,
        checksum=True,
        data_only=False
    ):
        """
        Settings for a PlayReady PSSH.

        Parameters:
            key_pairs: KeyPairs (or anything KeyPair.coerce accepts) in order.
            license_url: License acquisition URL, put in LA_URL.
            key_seed: Base64 key seed. When set, content keys are derived from it
                and the keys in key_pairs are ignored.
            compatibility_mode: Write a v4.0.0.0 header holding only the first
                key pair, instead of a v4.2.0.0 header holding all of them.
            checksum: Include each KID's checksum.
            data_only: Return only the PlayReady Object, not a whole box.
        """
        self.key_pairs = [KeyPair.coerce(pair) for pair in key_pairs or []]
        if compatibility_mode and not self.key_pairs:
            raise ValueError("At least one key pair is required for a v4.0.0.0 header")
        self.license_url = license_url
        self.key_seed = key_seed
        self.compatibility_mode = compatibility_mode
        self.checksum = checksum
        self.data_only = data_only

    system = SystemId.PlayReady

    @property
    def key_ids(self):
        return [pair.kid for pair in self.key_pairs]


class PlayReadyData:
    def __init__(self, record_size, record_type, record_xml, record_count=1, record_data=None):
        """
        The first record of a PlayReady Object.

        Parameters:
            record_size: Size of the record value in bytes.
            record_type: 1 for a Rights Management Header, 3 for an Embedded License Store.
            record_xml: The header XML, for Rights Management Header records.
            record_count: Number of records the object declares.
            record_data: The raw record value.
        """
        self.record_size = record_size
        self.record_type = record_type
        self.record_xml = record_xml
        self.record_count = record_count
        self.record_data = record_data

    @property
    def record_type_name(self):
        return RECORD_TYPES.get(self.record_type)

    def key_ids(self):
        """The Key IDs in the header XML, as hex in standard byte order."""
        if not self.record_xml:
            return []
        kids = KID_ELEMENT.findall(self.record_xml) + KID_VALUE.findall(self.record_xml)
        return [decode_key(kid) for kid in kids]

    def __repr__(self):
        return "PlayReadyData(record_size={0}, record_type={1}, record_count={2})".format(
            self.record_size, self.record_type, self.record_count)


def content_keys(config):
    return [encode_key(pair.kid, pair.key, config.key_seed) for pair in config.key_pairs]


def _custom_attributes():
    return "<CUSTOMATTRIBUTES><IIS_DRM_VERSION>{0}</IIS_DRM_VERSION></CUSTOMATTRIBUTES>".format(IIS_DRM_VERSION)


def build_xml_v4_0(key, license_url, checksum=True):
    """v4.0.0.0 WRMHEADER, which can only hold a single KID."""
    xml = ['<WRMHEADER xmlns="{0}" version="4.0.0.0">'.format(XMLNS)]
    xml.append("<DATA>")
    xml.append("<PROTECTINFO><KEYLEN>16</KEYLEN><ALGID>AESCTR</ALGID></PROTECTINFO>")
    xml.append("<KID>{0}</KID>".format(key.kid))
    if checksum and key.checksum:
        xml.append("<CHECKSUM>{0}</CHECKSUM>".format(key.checksum))
    if license_url:
        xml.append("<LA_URL>{0}</LA_URL>".format(escape(license_url)))
    xml.append(_custom_attributes())
    xml.append("</DATA>")
    xml.append("</WRMHEADER>")
    return "".join(xml)


def build_xml_v4_2(keys, license_url, checksum=True):
    """v4.2.0.0 WRMHEADER with a KID entry per key."""
    xml = ['<?xml version="1.0" encoding="UTF-8"?>']
    xml.append('<WRMHEADER xmlns="{0}" version="4.2.0.0">'.format(XMLNS))
    xml.append("<DATA>")
    xml.append("<PROTECTINFO><KIDS>")
    for key in keys:
        if checksum and key.checksum:
            xml.append('<KID ALGID="AESCTR" CHECKSUM="{0}" VALUE="{1}">'.format(key.checksum, key.kid))
        else:
            xml.append('<KID ALGID="AESCTR" VALUE="{0}">'.format(key.kid))
        xml.append("</KID>")
    xml.append("</KIDS></PROTECTINFO>")
    if license_url:
        xml.append("<LA_URL>")
        xml.append("{0}?cfg=".format(escape(license_url)))
        xml.append(",".join("(kid:{0})".format(key.kid) for key in keys))
        xml.append("</LA_URL>")
    xml.append(_custom_attributes())
    xml.append("</DATA>")
    xml.append("</WRMHEADER>")
    return "".join(xml)


def build_xml(config):
    """Build the WRMHEADER XML for a config."""
    keys = content_keys(config)
    if config.compatibility_mode:
        return build_xml_v4_0(keys[0], config.license_url, config.checksum)
    return build_xml_v4_2(keys, config.license_url, config.checksum)


def encode_data(config):
    """Build the PlayReady Object (PRO) for a config: a single Rights Management Header record."""
    xml = build_xml(config).encode("utf-16-le")
    if len(xml) > 0xFFFF:
        raise ValueError("PlayReady Header is too large for a PRO record ({0} bytes)".format(len(xml)))

    header = struct.pack("<IHHH", len(xml) + PRO_HEADER_SIZE, 1, RIGHTS_MANAGEMENT_HEADER, len(xml))
    return header + xml


def decode(data):
    """
    Parse a PlayReady Object (PRO). Only the first record is read.

    https://learn.microsoft.com/en-us/playready/specifications/playready-header-specification

    Raises:
        MalformedBoxError: If the declared lengths run past the end of the data.
    """
    reader = BinaryReader(data, little_endian=True)

    pro_length = reader.read_int(4, "PRO length")
    if pro_length > len(data):
        raise MalformedBoxError(
            "The PlayReadyObject declares {0} bytes but only {1} are present".format(pro_length, len(data)))
    pro_record_count = reader.read_int(2, "PRO record count")
    prr_type = reader.read_int(2, "PRO record type")
    prr_length = reader.read_int(2, "PRO record length")
    prr_value = reader.read_bytes(prr_length, "PRO record")

    if pro_record_count > 1:
        logger.debug("PlayReadyObject has %d records, only the first is decoded", pro_record_count)

    xml = None
    if prr_type == RIGHTS_MANAGEMENT_HEADER:
        xml = prr_value.decode("utf-16-le", errors="replace")

    return PlayReadyData(
        record_size=prr_length,
        record_type=prr_type,
        record_xml=xml,
        record_count=pro_record_count,
        record_data=prr_value
    )


def decode_data(data):
    """Parse a base64 PlayReady Object, without a box around it."""
    return decode(b64decode(data, "PlayReady Object"))


def encode_pssh(config):
    """Build a base64 PlayReady PSSH box, or only its PRO if config.data_only is set."""
    data = encode_data(config)
    if config.data_only:
        return b64encode(data)
    return b64encode(encode_box(SystemId.PlayReady, config.key_ids, data))


__all__ = (
    "KeyPair", "PlayReadyConfig", "PlayReadyData", "build_xml", "encode_data", "decode", "decode_data",
    "encode_pssh"
)

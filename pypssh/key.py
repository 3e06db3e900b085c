import logging

from Crypto.Cipher import AES
from Crypto.Hash import SHA256

from pypssh.exceptions import DecodingError
from pypssh.utils import b64decode, b64encode, unhex

logger = logging.getLogger(__name__)

DRM_AES_KEYSIZE_128 = 16
KEY_SEED_SIZE = 30
CHECKSUM_SIZE = 8

# Microsoft's published test key seed
TEST_KEY_SEED = "XVBovsmzhP9gRIZxWfFta3VVRPzVEWmJsazEJ46I"


class ContentKey:
    def __init__(self, kid, key=None, checksum=None):
        """
        A PlayReady content key as it appears in a PlayReady Header.

        Parameters:
            kid: Base64 Key ID in Microsoft GUID byte order.
            key: Base64 content key in Microsoft GUID byte order, if known.
            checksum: Base64 of the first 8 bytes of AES-ECB(key, kid), if a key is known.
        """
        self.kid = kid
        self.key = key
        self.checksum = checksum

    def __repr__(self):
        return "{name}({items})".format(
            name=self.__class__.__name__,
            items=", ".join(["{0}={1}".format(k, repr(v)) for k, v in self.__dict__.items()])
        )

    def __eq__(self, other):
        if not isinstance(other, ContentKey):
            return NotImplemented
        return (self.kid, self.key, self.checksum) == (other.kid, other.key, other.checksum)

    def to_dict(self):
        return {"kid": self.kid, "key": self.key, "checksum": self.checksum}


def swap_endian(guid):
    """
    Convert a 16-byte ID between standard and Microsoft GUID byte order.

    The first three groups (4, 2 and 2 bytes) are reversed and the last 8
    bytes are kept. Applying it twice gives back the input.

    Parameters:
        guid: Hex string or 16 raw bytes.
    """
    data = unhex(guid, DRM_AES_KEYSIZE_128, "GUID")
    return data[0:4][::-1] + data[4:6][::-1] + data[6:8][::-1] + data[8:16]


def _checksum(key, kid_guid):
    cipher = AES.new(key, AES.MODE_ECB)
    return cipher.encrypt(kid_guid)[:CHECKSUM_SIZE]


def generate_content_key(kid_guid, key_seed):
    """
    Derive a raw content key from a GUID-order Key ID and a key seed.

    https://learn.microsoft.com/en-us/playready/specifications/playready-key-seed
    """
    # truncate or zero-pad the seed to 30 bytes
    seed = key_seed[:KEY_SEED_SIZE].ljust(KEY_SEED_SIZE, b"\x00")

    sha_a = SHA256.new()
    sha_a.update(seed)
    sha_a.update(kid_guid)
    digest_a = sha_a.digest()

    sha_b = SHA256.new()
    sha_b.update(seed)
    sha_b.update(kid_guid)
    sha_b.update(seed)
    digest_b = sha_b.digest()

    sha_c = SHA256.new()
    sha_c.update(seed)
    sha_c.update(kid_guid)
    sha_c.update(seed)
    sha_c.update(kid_guid)
    digest_c = sha_c.digest()

    n = DRM_AES_KEYSIZE_128
    return bytes(
        digest_a[i] ^ digest_a[i + n] ^ digest_b[i] ^ digest_b[i + n] ^ digest_c[i] ^ digest_c[i + n]
        for i in range(n)
    )


def derive_from_seed(kid, key_seed):
    """
    Derive the Content Key for a Key ID from a base64 key seed.

    Parameters:
        kid: Key ID as hex in standard byte order.
        key_seed: Base64 key seed; truncated to, or zero-padded up to, 30 bytes.

    Raises:
        DecodingError: If the kid is not 16 bytes of hex or the seed is not base64.
    """
    kid_guid = swap_endian(kid)
    content_key = generate_content_key(kid_guid, b64decode(key_seed, "key seed"))
    return ContentKey(
        kid=b64encode(kid_guid),
        key=b64encode(swap_endian(content_key)),
        checksum=b64encode(_checksum(content_key, kid_guid))
    )


def encode_explicit(kid, key):
    """
    Encode a known Content Key for a Key ID.

    Parameters:
        kid: Key ID as hex in standard byte order.
        key: 16 byte content key as hex.
    """
    kid_guid = swap_endian(kid)
    raw_key = unhex(key, DRM_AES_KEYSIZE_128, "content key")
    return ContentKey(
        kid=b64encode(kid_guid),
        key=b64encode(swap_endian(raw_key)),
        checksum=b64encode(_checksum(raw_key, kid_guid))
    )


def encode_key(kid, key=None, key_seed=None):
    """
    Build the ContentKey for a Key ID.

    The key is derived when a key seed is given, otherwise the explicit key
    is used. With neither, only the GUID-order Key ID is returned.
    """
    if key_seed:
        logger.debug("Deriving content key for %s from key seed", kid)
        return derive_from_seed(kid, key_seed)
    if key:
        return encode_explicit(kid, key)
    logger.debug("No key or key seed for %s, checksum will be omitted", kid)
    return ContentKey(kid=b64encode(swap_endian(kid)))


def decode_key(key):
    """Convert a base64 GUID-order key (or Key ID) back to standard order hex."""
    data = b64decode(key, "key")
    if len(data) != DRM_AES_KEYSIZE_128:
        raise DecodingError("key must be {0} bytes, got {1}".format(DRM_AES_KEYSIZE_128, len(data)))
    return swap_endian(data).hex()


__all__ = (
    "ContentKey", "TEST_KEY_SEED", "swap_endian", "generate_content_key", "derive_from_seed",
    "encode_explicit", "encode_key", "decode_key"
)

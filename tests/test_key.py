"""
PlayReady content key encoding and key seed derivation tests.
"""

import base64
import os

import pytest

from pypssh.exceptions import DecodingError
from pypssh.key import (TEST_KEY_SEED, ContentKey, decode_key, derive_from_seed, encode_explicit, encode_key,
                        generate_content_key, swap_endian)

KID = "6f651ae1dbe44434bcb4690d1564c41c"
KEY = "2a85da88fae41e2e36aeb2d5c94997b1"
KS_KEY = "88da852ae4fa2e1e36aeb2d5c94997b1"

PRO_KID = "4Rplb+TbNES8tGkNFWTEHA=="
PRO_CONTENT_KEY = "iNqFKuT6Lh42rrLVyUmXsQ=="
PRO_KS_CONTENT_KEY = "KoXaiPrkHi42rrLVyUmXsQ=="
PRO_CHECKSUM_KEY = "f8Acn4I4wU0="


class TestSwapEndian:
    """GUID byte order conversion"""

    def test_swaps_first_three_groups(self):
        """Only the first 8 bytes are reordered"""
        result = swap_endian("0123456789abcdef0123456789abcdef")
        assert result.hex() == "67452301ab89efcd0123456789abcdef"

    def test_is_its_own_inverse(self):
        """Swapping twice gives back the input"""
        for _ in range(32):
            value = os.urandom(16)
            assert swap_endian(swap_endian(value)) == value

    def test_accepts_hyphenated_guid(self):
        assert swap_endian("01234567-89ab-cdef-0123-456789abcdef") == swap_endian("0123456789abcdef0123456789abcdef")

    def test_rejects_wrong_size(self):
        with pytest.raises(DecodingError):
            swap_endian("0123")

    def test_rejects_invalid_hex(self):
        with pytest.raises(DecodingError):
            swap_endian("zz23456789abcdef0123456789abcdef")


class TestEncodeKey:
    """Explicit content keys"""

    def test_known_checksum(self):
        """Kid, key and checksum match published values"""
        result = encode_key(KID, KEY)

        assert result.kid == PRO_KID
        assert result.key == PRO_CONTENT_KEY
        assert result.checksum == PRO_CHECKSUM_KEY

    def test_kid_in_guid_order(self):
        result = encode_explicit("0123456789abcdef0123456789abcdef", "0123456789abcdef0123456789abcdef")

        assert result.kid == "Z0UjAauJ780BI0VniavN7w=="
        assert result.checksum == "0x91WFtGXBI="

    def test_kid_only(self):
        """Without key or seed there is nothing to checksum"""
        result = encode_key(KID)

        assert result.kid == PRO_KID
        assert result.key is None
        assert result.checksum is None

    def test_invalid_key(self):
        with pytest.raises(DecodingError):
            encode_key(KID, "not-a-key")


class TestKeySeed:
    """Content keys derived from a key seed"""

    def test_matches_pre_derived_key(self):
        """Deriving from the seed equals encoding the derived key explicitly"""
        result = encode_key(KID, key_seed=TEST_KEY_SEED)
        control = encode_key(KID, KS_KEY)

        assert result.kid == PRO_KID
        assert result.key == control.key
        assert result.checksum == control.checksum

    def test_seed_takes_precedence_over_key(self):
        assert encode_key(KID, KEY, TEST_KEY_SEED) == derive_from_seed(KID, TEST_KEY_SEED)

    def test_published_content_key(self):
        # https://brokenpipe.wordpress.com/2016/10/06/generating-a-playready-content-key-using-a-key-seed-and-key-id/
        result = derive_from_seed("0102030405060708090aaabbccddeeff", TEST_KEY_SEED)

        assert decode_key(result.key) == base64.b64decode("GUf166PQbx+sgBADjyBMvw==").hex()
        assert result.checksum == "EV/EKanLDy4="

    def test_tears_of_steel_content_key(self):
        kid_guid = swap_endian("a2c786d0f9ef4cb3b333cd323a4284a5")
        key = generate_content_key(kid_guid, base64.b64decode(TEST_KEY_SEED))

        assert key.hex() == "4edb7704cdbf03617f4800bd878a6df2"

    def test_seed_truncated_to_30_bytes(self):
        long_seed = base64.b64encode(base64.b64decode(TEST_KEY_SEED) + b"extra bytes").decode()
        assert derive_from_seed(KID, long_seed) == derive_from_seed(KID, TEST_KEY_SEED)

    def test_short_seed_zero_padded(self):
        short = base64.b64decode(TEST_KEY_SEED)[:20]
        padded = short + b"\x00" * 10
        assert derive_from_seed(KID, base64.b64encode(short).decode()) == \
            derive_from_seed(KID, base64.b64encode(padded).decode())

    def test_invalid_seed(self):
        with pytest.raises(DecodingError):
            derive_from_seed(KID, "not base64!")


class TestDecodeKey:
    """Base64 GUID order back to hex"""

    def test_static_content_key(self):
        assert decode_key(PRO_CONTENT_KEY) == KEY

    def test_generated_content_key(self):
        assert decode_key(PRO_KS_CONTENT_KEY) == KS_KEY

    def test_kid(self):
        assert decode_key(PRO_KID) == KID

    def test_invalid_base64(self):
        with pytest.raises(DecodingError):
            decode_key("%%%")

    def test_wrong_size(self):
        with pytest.raises(DecodingError):
            decode_key(base64.b64encode(b"short").decode())


def test_content_key_to_dict():
    key = ContentKey("a", "b", "c")
    assert key.to_dict() == {"kid": "a", "key": "b", "checksum": "c"}

class PyPsshException(Exception):
    """Exceptions used by pypssh."""


class SchemaValidationError(PyPsshException):
    """The Widevine PSSH Data was rejected by the protobuf schema."""


class MalformedBoxError(PyPsshException):
    """The PSSH Box or its init data is corrupt, truncated, or not what it claims to be."""


class DecodingError(PyPsshException):
    """Base64 or hex input could not be decoded, or is of the wrong size."""


__all__ = ("PyPsshException", "SchemaValidationError", "MalformedBoxError", "DecodingError")

import base64
import binascii

from pypssh.exceptions import DecodingError, MalformedBoxError


# https://github.com/shaka-project/shaka-packager/blob/main/packager/tools/pssh/pssh-box.py
class BinaryReader(object):
  """A helper class used to read binary data from an binary string."""

  def __init__(self, data, little_endian=False):
    self.data = data
    self.little_endian = little_endian
    self.position = 0

  def has_data(self):
    """Returns whether the reader has any data left to read."""
    return self.position < len(self.data)

  def remaining(self):
    """Returns the number of bytes left to read."""
    return len(self.data) - self.position

  def read_bytes(self, count, what='data'):
    """Reads the given number of bytes into an array."""
    if count < 0 or self.remaining() < count:
      raise MalformedBoxError(
          'Not enough data for %s: %d bytes declared, %d available' % (what, count, self.remaining()))
    ret = self.data[self.position:self.position+count]
    self.position += count
    return ret

  def read_int(self, size, what='integer', little_endian=None):
    """Reads an unsigned integer of the given size (in bytes).

    The byte order is the reader's unless little_endian is given.
    """
    if little_endian is None:
      little_endian = self.little_endian
    data = self.read_bytes(size, what)
    return int.from_bytes(data, 'little' if little_endian else 'big')


def b64decode(value, what='value'):
  """Decodes strict base64 text, raising DecodingError instead of binascii.Error."""
  if isinstance(value, str):
    value = value.strip()
  try:
    return base64.b64decode(value, validate=True)
  except (binascii.Error, ValueError) as e:
    raise DecodingError('Invalid base64 for %s: %s' % (what, e))


def b64encode(data):
  return base64.b64encode(data).decode('ascii')


def unhex(value, size=None, what='value'):
  """Decodes a hex string (hyphens allowed), optionally enforcing its byte size."""
  if isinstance(value, (bytes, bytearray)):
    data = bytes(value)
  else:
    try:
      data = bytes.fromhex(value.replace('-', ''))
    except (AttributeError, ValueError) as e:
      raise DecodingError('Invalid hex for %s: %s' % (what, e))
  if size is not None and len(data) != size:
    raise DecodingError('%s must be %d bytes, got %d' % (what, size, len(data)))
  return data


def hex_to_guid(value):
  """Groups a 32 character hex string as 8-4-4-4-12."""
  return '-'.join([value[0:8], value[8:12], value[12:16], value[16:20], value[20:32]])


__all__ = ("BinaryReader", "b64decode", "b64encode", "unhex", "hex_to_guid")

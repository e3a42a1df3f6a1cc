'''
### BinaryStream Module

This module defines the `BinaryReader` and `BinaryWriter` classes, which wrap a byte buffer or
a writable stream with an explicit byte order and an anchor stack for relative offsets.

Classes:
    `BinaryReader`:
        Reads big- or little-endian values from an in-memory byte buffer.

    `BinaryWriter`:
        Writes big- or little-endian values to a binary stream.

Functionality:
    - Positions are reported relative to the innermost anchor ('position', 'goto').
    - Anchors are pushed and popped in strict LIFO order ('push_anchor', 'pop_anchor', 'anchored').
    - Positions can be saved and restored around a jump ('keep', 'back').
    - Reading past the end of the buffer raises 'EOFError'.

Dependencies:
    `struct`:
        For byte-level unpacking and packing.

Intended Usage:
    Binary deserializers and serializers push an anchor at the start of a bank so that every
    offset field they read or write resolves against the bank start rather than the file start.
'''
from contextlib import contextmanager

from .Helpers import *

BIG_ENDIAN    = '>'
LITTLE_ENDIAN = '<'


class AnchorStack:
  ''' Represents the stack of base offsets shared by a reader or writer '''
  def __init__(self):
    self.anchors = [0]
    self.kept    = []

  @property
  def base(self) -> int:
    return self.anchors[-1]

  def push(self, position: int):
    self.anchors.append(position)

  def pop(self):
    if len(self.anchors) == 1:
      raise IndexError('Anchor stack is empty')
    self.anchors.pop()


class BinaryReader:
  ''' Represents a cursor over an immutable byte buffer '''
  def __init__(self, data: bytes, endian: str = BIG_ENDIAN):
    self.data   = data
    self.endian = endian
    self.stack  = AnchorStack()
    self._position = 0

  @property
  def position(self) -> int:
    return self._position - self.stack.base

  @property
  def length(self) -> int:
    return len(self.data) - self.stack.base

  def push_anchor(self):
    self.stack.push(self._position)

  def pop_anchor(self):
    self.stack.pop()

  @contextmanager
  def anchored(self):
    self.push_anchor()
    try:
      yield self
    finally:
      self.pop_anchor()

  def goto(self, offset: int):
    self._position = self.stack.base + offset

  def step(self, count: int):
    self._position += count

  def keep(self):
    self.stack.kept.append(self._position)

  def back(self):
    self._position = self.stack.kept.pop()

  def unpack(self, fmt: str) -> tuple:
    size = struct.calcsize(self.endian + fmt)
    if self._position < 0 or self._position + size > len(self.data):
      raise EOFError(f'Read of {size} bytes at 0x{self._position:X} is past the end of the data')

    values = struct.unpack_from(self.endian + fmt, self.data, self._position)
    self._position += size
    return values

  def read_bytes(self, count: int) -> bytes:
    if count < 0 or self._position + count > len(self.data):
      raise EOFError(f'Read of {count} bytes at 0x{self._position:X} is past the end of the data')

    data = bytes(self.data[self._position:self._position + count])
    self._position += count
    return data

  def read_u8(self) -> int:
    return self.unpack('B')[0]

  def read_u16(self) -> int:
    return self.unpack('H')[0]

  def read_s16(self) -> int:
    return self.unpack('h')[0]

  def read_u32(self) -> int:
    return self.unpack('I')[0]

  def read_s32(self) -> int:
    return self.unpack('i')[0]

  def read_f32(self) -> float:
    return self.unpack('f')[0]

  def read_s8s(self, count: int) -> list[int]:
    return list(self.unpack(f'{count}b'))

  def read_u16s(self, count: int) -> list[int]:
    return list(self.unpack(f'{count}H'))

  def read_s32s(self, count: int) -> list[int]:
    if count < 0:
      raise EOFError(f'Negative table length {count} at 0x{self._position:X}')
    return list(self.unpack(f'{count}i'))

  def read_cstring(self, length: int) -> str:
    raw = self.read_bytes(length)
    return raw.split(b'\x00', 1)[0].decode('ascii', errors='replace')


class BinaryWriter:
  ''' Represents a cursor over a writable, seekable binary stream '''
  def __init__(self, stream, endian: str = BIG_ENDIAN):
    self.stream = stream
    self.endian = endian
    self.stack  = AnchorStack()

  @property
  def position(self) -> int:
    return self.stream.tell() - self.stack.base

  def push_anchor(self):
    self.stack.push(self.stream.tell())

  def pop_anchor(self):
    self.stack.pop()

  @contextmanager
  def anchored(self):
    self.push_anchor()
    try:
      yield self
    finally:
      self.pop_anchor()

  def goto(self, offset: int):
    self.stream.seek(self.stack.base + offset)

  def keep(self):
    self.stack.kept.append(self.stream.tell())

  def back(self):
    self.stream.seek(self.stack.kept.pop())

  def pack(self, fmt: str, *values):
    self.stream.write(struct.pack(self.endian + fmt, *values))

  def write_bytes(self, data: bytes):
    self.stream.write(data)

  def write_u8(self, value: int):
    self.pack('B', value)

  def write_s8(self, value: int):
    self.pack('b', value)

  def write_u16(self, value: int):
    self.pack('H', value)

  def write_s16(self, value: int):
    self.pack('h', value)

  def write_u32(self, value: int):
    self.pack('I', value)

  def write_s32(self, value: int):
    self.pack('i', value)

  def write_f32(self, value: float):
    self.pack('f', value)

  def write_s32s(self, values: list[int]):
    self.pack(f'{len(values)}i', *values)

  def write_cstring(self, text: str, length: int):
    raw = text.encode('ascii', errors='replace')[:length - 1]
    self.stream.write(raw + b'\x00' * (length - len(raw)))

  def write_padding(self, multiple: int, value: int = 0):
    remainder = self.position % multiple
    if remainder:
      self.stream.write(bytes([value]) * (multiple - remainder))


if __name__ == '__main__':
  pass

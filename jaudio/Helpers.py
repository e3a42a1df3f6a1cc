'''
### Helpers Module

This module provides low-level utility functions to assist with binary data manipulation,
alignment and value conversion, commonly used throughout the bank parsing and serialization process.

Functions:
    `align_to_4`, `align_to_16`, `align_to_32`:
        Round the given integer up to the next multiple of 4, 16 or 32.

    `add_padding_to_16`, `add_padding_to_32`:
        Add zero-bytes padding to a byte sequence so its length is a multiple of 16 or 32.

    `to_float32`:
        Rounds a Python float to the nearest single precision value.

    `format_float`:
        Formats a single precision value with the fewest digits that read back exactly.

    `key_to_name`, `name_to_key`:
        Convert between MIDI key numbers and note names (e.g. 60 <-> 'C4').

    `calculate_sample_count`:
        Derives the number of samples held by a payload of a given wave format and size.

    `riff_chunk`, `list_chunk`:
        Build RIFF chunks for Microsoft WAVE and SoundFont output.

Dependencies:
    `struct`:
        Imported and exposed for byte-level packing and unpacking operations needed by other modules.

Intended Usage:
    This module is intended to be imported whenever binary data alignment or padding is required,
    ensuring consistency and correctness when reading or writing binary bank files.
    It also exposes the standard `struct` module for convenient binary data handling.
'''

# Import struct as it is used by /ibnk and /wsys
import struct as _struct

from .Enums import WaveFormat

NOTE_NAMES = ('C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B')
NOTE_OFFSETS = {'C': 0, 'D': 2, 'E': 4, 'F': 5, 'G': 7, 'A': 9, 'B': 11}

''' Helper Functions '''
def align_to_4(data: int) -> int:
  return (data + 0x03) & ~0x03

def align_to_16(data: int) -> int:
  return (data + 0x0F) & ~0x0F # or (size + 0xF) // 0x10 * 0x10

def align_to_32(data: int) -> int:
  return (data + 0x1F) & ~0x1F

def add_padding_to_16(packed_data: bytes) -> bytes:
  padding: int = (-len(packed_data)) & 0x0F # or (0x10 - (size % 0x10)) % 0x10
  return packed_data + b'\x00' * padding

def add_padding_to_32(packed_data: bytes) -> bytes:
  padding: int = (-len(packed_data)) & 0x1F
  return packed_data + b'\x00' * padding

def to_float32(value: float) -> float:
  return _struct.unpack('<f', _struct.pack('<f', value))[0]

def format_float(value: float) -> str:
  value = to_float32(value)
  if abs(value) < 1e9 and value == int(value):
    return str(int(value))

  # Shortest representation that survives a round trip through single precision
  for precision in range(1, 10):
    text = f'{value:.{precision}g}'
    if to_float32(float(text)) == value:
      return text

  return repr(value)

def key_to_name(key: int) -> str:
  return f'{NOTE_NAMES[key % 12]}{key // 12 - 1}'

def name_to_key(text: str) -> int:
  ''' Parses a key number or note name, returning -1 if the text is neither '''
  text = text.strip()

  try:
    return int(text)
  except ValueError:
    pass

  if not text or text[0].upper() not in NOTE_OFFSETS:
    return -1

  key = NOTE_OFFSETS[text[0].upper()]
  rest = text[1:]

  # Accidentals
  while rest and rest[0] in '#b':
    key += 1 if rest[0] == '#' else -1
    rest = rest[1:]

  try:
    octave = int(rest)
  except ValueError:
    return -1

  return key + (octave + 1) * 12

def calculate_sample_count(wave_format: WaveFormat, size: int) -> int:
  if wave_format == WaveFormat.ADPCM4:
    return size // 9 * 16
  elif wave_format == WaveFormat.ADPCM2:
    return size // 5 * 16
  elif wave_format == WaveFormat.PCM8:
    return size
  elif wave_format == WaveFormat.PCM16:
    return size // 2

  raise ValueError(f'Unknown wave format {wave_format}')

def riff_chunk(tag: bytes, data: bytes, endian: str = '<') -> bytes:
  # Chunks are word aligned
  pad = b'\x00' if len(data) & 1 else b''
  return tag + _struct.pack(endian + 'I', len(data)) + data + pad

def list_chunk(list_type: bytes, chunks: list[bytes]) -> bytes:
  return riff_chunk(b'LIST', list_type + b''.join(chunks))

# Expose struct
struct = _struct

if __name__ == '__main__':
  pass

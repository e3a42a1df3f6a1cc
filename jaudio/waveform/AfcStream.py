'''
### AfcStream Module

This module encodes and decodes stereo streamed audio files: a 32-byte big-endian header followed
by either interleaved PCM16 sample pairs or interleaved ADPCM4 frames (a 9-byte left frame followed
by a 9-byte right frame for every 16 samples), padded to 32 bytes.

Classes:
    `AfcStream`:
        Represents the header fields and the two decoded channels of a stream.

Functionality:
    - Build a stream from two channels of PCM16 samples ('to_bytes').
    - Parse a stream back into two channels of PCM16 samples ('from_bytes').

Dependencies:
    `Waveform`:
        For ADPCM4 frame conversion.

Intended Usage:
    Used by the WAVE errand to turn WAVE files into streams and back.
'''
from ..Helpers import add_padding_to_32, align_to_16, struct
from ..Console import fatal
from .Waveform import FRAME_SAMPLES, ADPCM4_FRAME_SIZE, History, adpcm4_to_pcm16, pcm16_to_adpcm4

HEADER_SIZE  = 0x20
STREAM_PCM   = 2
STREAM_ADPCM = 4
DEFAULT_FRAME_RATE = 30


class AfcStream:
  ''' Represents a stereo stream '''
  def __init__(self):
    self.sample_rate = 32000
    self.format      = STREAM_ADPCM
    self.frame_rate  = DEFAULT_FRAME_RATE
    self.loop        = False
    self.loop_start  = 0
    self.left  = []
    self.right = []

  @property
  def sample_count(self) -> int:
    return len(self.left)

  @property
  def data_size(self) -> int:
    if self.format == STREAM_ADPCM:
      return align_to_16(self.sample_count) // FRAME_SAMPLES * ADPCM4_FRAME_SIZE * 2
    return self.sample_count * 4

  @classmethod
  def from_channels(cls, left: list[int], right: list[int], sample_rate: int, stream_format: int = STREAM_ADPCM):
    self = cls()
    self.left = list(left)
    self.right = list(right)
    self.sample_rate = sample_rate
    self.format = stream_format
    return self

  @classmethod
  def from_bytes(cls, data: bytes):
    self = cls()

    if len(data) < HEADER_SIZE:
      fatal('AFC: the stream is shorter than its header')

    (data_size, sample_count, self.sample_rate, self.format,
     _, self.frame_rate, loop, self.loop_start) = struct.unpack_from('>2i4H2i', data, 0)
    self.loop = loop != 0

    if self.format not in (STREAM_PCM, STREAM_ADPCM):
      fatal('AFC: unknown stream format %s', self.format)
    if HEADER_SIZE + data_size > len(data):
      fatal('AFC: the stream data is truncated')

    payload = data[HEADER_SIZE:HEADER_SIZE + data_size]

    if self.format == STREAM_PCM:
      samples = struct.unpack(f'>{sample_count * 2}h', payload[:sample_count * 4])
      self.left  = list(samples[0::2])
      self.right = list(samples[1::2])
    else:
      left_history, right_history = History(), History()
      frame_pair = ADPCM4_FRAME_SIZE * 2

      for offset in range(0, len(payload) - frame_pair + 1, frame_pair):
        self.left.extend(adpcm4_to_pcm16(payload[offset:offset + ADPCM4_FRAME_SIZE], left_history))
        self.right.extend(adpcm4_to_pcm16(payload[offset + ADPCM4_FRAME_SIZE:offset + frame_pair], right_history))

      del self.left[sample_count:]
      del self.right[sample_count:]

    return self

  def to_bytes(self) -> bytes:
    header = struct.pack(
      '>2i4H2i', self.data_size, self.sample_count, int(self.sample_rate), self.format,
      0, self.frame_rate, 1 if self.loop else 0, self.loop_start
    )

    if self.format == STREAM_PCM:
      interleaved = [sample for pair in zip(self.left, self.right) for sample in pair]
      payload = struct.pack(f'>{len(interleaved)}h', *interleaved)
    else:
      left_history, right_history = History(), History()
      payload = bytearray()

      for offset in range(0, self.sample_count, FRAME_SAMPLES):
        payload += pcm16_to_adpcm4(self.left[offset:offset + FRAME_SAMPLES], left_history)
        payload += pcm16_to_adpcm4(self.right[offset:offset + FRAME_SAMPLES], right_history)

    return add_padding_to_32(add_padding_to_32(header) + bytes(payload))

if __name__ == '__main__':
  pass

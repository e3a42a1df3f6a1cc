import math

import pytest

from jaudio.Console import FatalError
from jaudio.Helpers import struct
from jaudio.waveform.AfcStream import AfcStream, STREAM_PCM, STREAM_ADPCM

LEFT  = [int(6000 * math.sin(i / 5)) for i in range(40)]
RIGHT = [int(3000 * math.cos(i / 7)) for i in range(40)]


def test_pcm_round_trip():
  stream = AfcStream.from_channels(LEFT, RIGHT, 32000, STREAM_PCM)
  stream.loop, stream.loop_start = True, 8
  data = stream.to_bytes()

  assert len(data) % 32 == 0
  assert struct.unpack_from('>2i4H2i', data, 0) == (160, 40, 32000, STREAM_PCM, 0, 30, 1, 8)

  result = AfcStream.from_bytes(data)
  assert (result.left, result.right) == (LEFT, RIGHT)
  assert (result.loop, result.loop_start, result.sample_rate) == (True, 8, 32000)

def test_adpcm_round_trip():
  stream = AfcStream.from_channels(LEFT, RIGHT, 22050)
  stream.frame_rate = 60
  data = stream.to_bytes()

  # 40 samples take three frame pairs
  assert stream.data_size == 3 * 18
  assert struct.unpack_from('>i', data, 0)[0] == 54

  result = AfcStream.from_bytes(data)
  assert result.format == STREAM_ADPCM
  assert result.frame_rate == 60
  assert result.sample_count == 40
  assert max(abs(a - b) for a, b in zip(LEFT, result.left)) <= 4096
  assert max(abs(a - b) for a, b in zip(RIGHT, result.right)) <= 4096

def test_unknown_format_is_fatal():
  data = struct.pack('>2i4H2i', 0, 0, 32000, 3, 0, 30, 0, 0) + b'\x00' * 8

  with pytest.raises(FatalError):
    AfcStream.from_bytes(data)

def test_truncated_stream_is_fatal():
  with pytest.raises(FatalError):
    AfcStream.from_bytes(b'\x00' * 16)

  data = struct.pack('>2i4H2i', 1000, 10, 32000, STREAM_PCM, 0, 30, 0, 0) + b'\x00' * 8
  with pytest.raises(FatalError):
    AfcStream.from_bytes(data)

'''
### MicrosoftWave Module

This module writes 16-bit linear PCM Microsoft WAVE files, optionally carrying a 'smpl' chunk with
the root key and a single forward loop.

Functions:
    `build_wav`:
        Returns a complete RIFF/WAVE file as bytes.

    `write_wav`:
        Writes 'build_wav' output to a binary stream.

Dependencies:
    `Helpers`:
        For the RIFF chunk builder and 'struct'.
'''
from ..Helpers import riff_chunk, struct

WAVE_FORMAT_PCM = 1
DEFAULT_ROOT_KEY = 60

def _smpl_chunk(sample_rate: float, root_key: int, loop: tuple[int, int] = None) -> bytes:
  period = int(1000000000 / sample_rate) if sample_rate > 0 else 0
  data = struct.pack('<9I', 0, 0, period, root_key, 0, 0, 0, 1 if loop else 0, 0)

  if loop:
    loop_start, loop_end = loop
    # Loop ends are inclusive in the smpl chunk
    data += struct.pack('<6I', 0, 0, loop_start, max(loop_end - 1, 0), 0, 0)

  return riff_chunk(b'smpl', data)

def build_wav(pcm16: bytes, sample_rate: float, channels: int = 1, root_key: int = DEFAULT_ROOT_KEY, loop: tuple[int, int] = None) -> bytes:
  ''' Builds a WAVE file from little-endian, interleaved PCM16 data '''
  rate = int(sample_rate)
  block_align = channels * 2

  fmt = struct.pack('<2H2I2H', WAVE_FORMAT_PCM, channels, rate, rate * block_align, block_align, 16)
  chunks = riff_chunk(b'fmt ', fmt)

  if loop is not None or root_key != DEFAULT_ROOT_KEY:
    chunks += _smpl_chunk(sample_rate, root_key, loop)

  chunks += riff_chunk(b'data', pcm16)
  return riff_chunk(b'RIFF', b'WAVE' + chunks)

def write_wav(stream, pcm16: bytes, sample_rate: float, channels: int = 1, root_key: int = DEFAULT_ROOT_KEY, loop: tuple[int, int] = None) -> None:
  stream.write(build_wav(pcm16, sample_rate, channels, root_key, loop))

if __name__ == '__main__':
  pass

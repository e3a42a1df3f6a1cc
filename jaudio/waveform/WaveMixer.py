'''
### WaveMixer Module

This module defines the wave mixers, which present a source of audio samples (a raw archive payload
or a Microsoft WAVE file) as a mono stream that can be read sample by sample or written out in any
of the four wave formats.

Classes:
    `WaveMixer`:
        The shared interface: sample count, random access, bulk write and loop history seeding.

    `RawWaveMixer`:
        A headerless buffer already encoded in one of the wave formats (big-endian PCM16).

    `MicrosoftWaveMixer`:
        A RIFF/WAVE file with 8- or 16-bit linear PCM, mono or stereo, mixed down by a 'MixerMode'.

Functionality:
    - 'read_pcm8' and 'read_pcm16' return the (mixed) sample at an index.
    - 'write' streams every sample through the requested format, zero filling the last ADPCM frame.
    - 'calculate_history' replays the encoder from sample 0 up to the frame holding a loop start,
      returning the predictor state a decoder has when it reaches that frame. A sample outside
      the wave raises ValueError.
    - 'copy_wave_info' fills in missing wave metadata from the source.

Dependencies:
    `wave`:
        Parses the little-endian RIFF/WAVE container. Big-endian RIFX files are walked chunk by
        chunk with 'struct', since 'wave' only reads RIFF.

    `Waveform`:
        For the sample format conversions.

Intended Usage:
    mixer = MicrosoftWaveMixer('kick.wav', MixerMode.LEFT)
    mixer.write(WaveFormat.ADPCM4, writer)
'''
import io
import wave

from ..Enums import MixerMode, WaveFormat
from ..Helpers import calculate_sample_count, struct
from ..Console import fatal
from .Waveform import (
  FRAME_SAMPLES, ADPCM4_FRAME_SIZE, ADPCM2_FRAME_SIZE,
  History, pcm8_to_pcm16, pcm16_to_pcm8, decode_frames, encode_frames
)

FORMAT_BITS = {WaveFormat.ADPCM4: 4, WaveFormat.ADPCM2: 2}
FRAME_SIZES = {WaveFormat.ADPCM4: ADPCM4_FRAME_SIZE, WaveFormat.ADPCM2: ADPCM2_FRAME_SIZE}


class WaveMixer:
  ''' Represents a mono sample source '''
  def __init__(self):
    self.mix_mode = MixerMode.MIX
    self._pcm16 = None
    self._pcm8  = None

  @property
  def sample_count(self) -> int:
    raise NotImplementedError

  def _build_pcm16(self) -> list[int]:
    raise NotImplementedError

  def _build_pcm8(self) -> list[int]:
    return [pcm16_to_pcm8(sample) for sample in self.pcm16_samples()]

  def pcm16_samples(self) -> list[int]:
    if self._pcm16 is None:
      self._pcm16 = self._build_pcm16()
    return self._pcm16

  def pcm8_samples(self) -> list[int]:
    if self._pcm8 is None:
      self._pcm8 = self._build_pcm8()
    return self._pcm8

  def read_pcm8(self, index: int) -> int:
    return self.pcm8_samples()[index]

  def read_pcm16(self, index: int) -> int:
    return self.pcm16_samples()[index]

  def encode(self, wave_format: WaveFormat, endian: str = '>') -> bytes:
    ''' Returns every sample converted to 'wave_format' '''
    if wave_format == WaveFormat.PCM8:
      samples = self.pcm8_samples()
      return struct.pack(f'{len(samples)}b', *samples)
    elif wave_format == WaveFormat.PCM16:
      samples = self.pcm16_samples()
      return struct.pack(f'{endian}{len(samples)}h', *samples)

    return encode_frames(self.pcm16_samples(), FORMAT_BITS[wave_format])

  def write(self, wave_format: WaveFormat, writer) -> None:
    writer.write_bytes(self.encode(wave_format, writer.endian))

  def _check_sample(self, sample: int) -> None:
    if not 0 <= sample < self.sample_count:
      raise ValueError(f"sample {sample} is outside the wave (0..{self.sample_count - 1})")

  def calculate_history(self, sample: int, wave_format: WaveFormat) -> tuple[int, int]:
    self._check_sample(sample)
    if not wave_format.is_adpcm:
      return 0, 0

    frames = sample // FRAME_SAMPLES
    if frames == 0:
      return 0, 0

    samples = self.pcm16_samples()[:frames * FRAME_SAMPLES]

    # The encoder tracks the decoder's predictor state frame by frame
    history = History()
    encode_frames(samples, FORMAT_BITS[wave_format], history)
    return history.last, history.penult

  def copy_wave_info(self, wave) -> None:
    if wave.sample_count <= 0:
      wave.sample_count = self.sample_count


class RawWaveMixer(WaveMixer):
  ''' Represents a headerless payload in a known wave format '''
  def __init__(self, data: bytes, wave_format: WaveFormat):
    super().__init__()
    self.data   = bytes(data)
    self.format = wave_format
    self._sample_count = calculate_sample_count(wave_format, len(self.data))

  @classmethod
  def from_file(cls, filename: str, wave_format: WaveFormat):
    with open(filename, 'rb') as f:
      return cls(f.read(), wave_format)

  @property
  def sample_count(self) -> int:
    return self._sample_count

  def _payload(self) -> bytes:
    # Whole samples or whole frames only
    if self.format == WaveFormat.PCM8:
      return self.data[:self._sample_count]
    elif self.format == WaveFormat.PCM16:
      return self.data[:self._sample_count * 2]

    return self.data[:self._sample_count // FRAME_SAMPLES * FRAME_SIZES[self.format]]

  def _build_pcm16(self) -> list[int]:
    payload = self._payload()

    if self.format == WaveFormat.PCM8:
      return [pcm8_to_pcm16(sample) for sample in struct.unpack(f'{len(payload)}b', payload)]
    elif self.format == WaveFormat.PCM16:
      return list(struct.unpack(f'>{len(payload) // 2}h', payload))

    return decode_frames(payload, FORMAT_BITS[self.format])

  def _build_pcm8(self) -> list[int]:
    if self.format == WaveFormat.PCM8:
      payload = self._payload()
      return list(struct.unpack(f'{len(payload)}b', payload))

    return super()._build_pcm8()

  def encode(self, wave_format: WaveFormat, endian: str = '>') -> bytes:
    if wave_format == self.format and (wave_format != WaveFormat.PCM16 or endian == '>'):
      return self._payload()

    return super().encode(wave_format, endian)

  def calculate_history(self, sample: int, wave_format: WaveFormat) -> tuple[int, int]:
    self._check_sample(sample)
    if wave_format != self.format or not wave_format.is_adpcm:
      return super().calculate_history(sample, wave_format)

    # Same format: decode the stored frames rather than re-encoding them
    frames = sample // FRAME_SAMPLES
    if frames == 0:
      return 0, 0

    history = History()
    decode_frames(self._payload()[:frames * FRAME_SIZES[self.format]], FORMAT_BITS[self.format], history)
    return history.last, history.penult


class MicrosoftWaveMixer(WaveMixer):
  ''' Represents a linear PCM Microsoft WAVE file, little-endian (RIFF) or big-endian (RIFX) '''
  def __init__(self, source, mix_mode: MixerMode = MixerMode.MIX):
    super().__init__()
    self.mix_mode = mix_mode

    data = _read_source(source)
    if data[0:4] == b'RIFX':
      self.channels, self.bit_depth, self.sample_rate, frames = read_rifx(data)
      endian = '>'
    else:
      try:
        with wave.open(io.BytesIO(data), 'rb') as reader:
          self.channels    = reader.getnchannels()
          self.bit_depth   = reader.getsampwidth() * 8
          self.sample_rate = reader.getframerate()
          frames = reader.readframes(reader.getnframes())
      except (wave.Error, EOFError) as e:
        fatal('WAV: %s', e)
      endian = '<'

    if self.channels not in (1, 2):
      fatal('WAV: only mono or stereo data is supported (found %s channels)', self.channels)
    if self.bit_depth not in (8, 16):
      fatal('WAV: only 8- or 16-bit samples are supported (found %s bits)', self.bit_depth)

    count = len(frames) // (self.bit_depth // 8)
    if self.bit_depth == 8:
      # 8-bit WAVE samples are unsigned
      interleaved = [byte - 128 for byte in frames[:count]]
    else:
      interleaved = list(struct.unpack(f'{endian}{count}h', frames[:count * 2]))

    self._sample_count = count // self.channels
    if self.channels == 2:
      self.left  = interleaved[0:self._sample_count * 2:2]
      self.right = interleaved[1:self._sample_count * 2:2]
    else:
      self.left = self.right = interleaved

  @property
  def sample_count(self) -> int:
    return self._sample_count

  def _select(self, left: int, right: int, mix) -> int:
    if self.mix_mode == MixerMode.LEFT:
      return left
    elif self.mix_mode == MixerMode.RIGHT:
      return right
    return mix(left, right)

  def _build_pcm16(self) -> list[int]:
    if self.channels == 1:
      if self.bit_depth == 8:
        return [pcm8_to_pcm16(sample) for sample in self.left]
      return list(self.left)

    if self.bit_depth == 8:
      return [pcm8_to_pcm16(self._select(l, r, mix_stereo_pcm8)) for l, r in zip(self.left, self.right)]
    return [self._select(l, r, mix_stereo_pcm16) for l, r in zip(self.left, self.right)]

  def _build_pcm8(self) -> list[int]:
    if self.channels == 1:
      if self.bit_depth == 8:
        return list(self.left)
      return [pcm16_to_pcm8(sample) for sample in self.left]

    if self.bit_depth == 8:
      return [self._select(l, r, mix_stereo_pcm8) for l, r in zip(self.left, self.right)]
    return [pcm16_to_pcm8(self._select(l, r, mix_stereo_pcm16)) for l, r in zip(self.left, self.right)]

  def channel_pcm16(self, channel: int) -> list[int]:
    ''' Returns one source channel as PCM16, unmixed '''
    samples = self.left if channel == 0 else self.right
    if self.bit_depth == 8:
      return [pcm8_to_pcm16(sample) for sample in samples]
    return list(samples)

  def copy_wave_info(self, wave) -> None:
    super().copy_wave_info(wave)
    if wave.sample_rate <= 0:
      wave.sample_rate = float(self.sample_rate)


''' Stereo Mixing '''
def mix_stereo_pcm8(left: int, right: int) -> int:
  return (left + right) >> 1

def mix_stereo_pcm16(left: int, right: int) -> int:
  return (left >> 1) + (right >> 1)


''' WAVE Containers '''
def _read_source(source) -> bytes:
  if hasattr(source, 'read'):
    return source.read()

  try:
    with open(source, 'rb') as f:
      return f.read()
  except OSError as e:
    fatal("WAV: could not open '%s' (%s)", source, e.strerror)

def read_rifx(data: bytes) -> tuple[int, int, int, bytes]:
  ''' Returns the channel count, bit depth, sample rate and sample data of a big-endian WAVE file '''
  if len(data) < 12 or data[8:12] != b'WAVE':
    fatal("WAV: could not find 'WAVE'")

  end = min(len(data), struct.unpack_from('>i', data, 4)[0] + 8)
  fmt, frames = None, None

  position = 12
  while position + 8 <= end:
    chunk_id = data[position:position + 4]
    size = struct.unpack_from('>i', data, position + 4)[0]
    body = data[position + 8:position + 8 + size]

    if chunk_id == b'fmt ':
      if len(body) < 16:
        fatal("WAV: 'fmt ' chunk is too short")
      fmt = struct.unpack_from('>hHiiHH', body)
    elif chunk_id == b'data':
      frames = body

    # Chunks are padded to even sizes
    position += 8 + max(size, 0) + (size & 1)

  if fmt is None:
    fatal("WAV: missing 'fmt ' chunk")
  if frames is None:
    fatal("WAV: missing 'data' chunk")

  format_tag, channels, sample_rate, _, _, bit_depth = fmt
  if format_tag != 1:
    fatal('WAV: only linear PCM is supported')

  return channels, bit_depth, sample_rate, frames


def create_mixer(filename: str, wave_format: WaveFormat, mix_mode: MixerMode = MixerMode.MIX):
  ''' Builds the mixer matching a file's extension, or returns None for unknown extensions '''
  extension = filename.lower().rsplit('.', 1)[-1] if '.' in filename else ''

  if extension == 'wav':
    return MicrosoftWaveMixer(filename, mix_mode)
  elif extension == 'raw':
    mixer = RawWaveMixer.from_file(filename, wave_format)
    mixer.mix_mode = mix_mode
    return mixer

  return None

if __name__ == '__main__':
  pass

import pytest

from jaudio.Console import FatalError
from jaudio.Enums import MixerMode, WaveFormat
from jaudio.Helpers import struct
from jaudio.waveform.Waveform import History, decode_frames, encode_frames
from jaudio.waveform.WaveMixer import (
  RawWaveMixer, MicrosoftWaveMixer, create_mixer, mix_stereo_pcm8, mix_stereo_pcm16
)

from conftest import write_wav

LEFT  = [1000, -2000, 30000, -32768, 7]
RIGHT = [3000, 2000, 30000, -32768, -7]


@pytest.fixture
def stereo_wav(tmp_path):
  path = tmp_path / 'stereo.wav'
  write_wav(path, 2, [sample for pair in zip(LEFT, RIGHT) for sample in pair])
  return str(path)


def test_stereo_mixing_formulas():
  assert mix_stereo_pcm8(127, 127) == 127
  assert mix_stereo_pcm8(-3, 0) == -2
  assert mix_stereo_pcm16(32767, 32767) == 32766
  assert mix_stereo_pcm16(-3, 0) == -2

@pytest.mark.parametrize('mode, expected', [
  (MixerMode.LEFT, LEFT),
  (MixerMode.RIGHT, RIGHT),
  (MixerMode.MIX, [(l >> 1) + (r >> 1) for l, r in zip(LEFT, RIGHT)]),
])
def test_stereo_mix_modes(stereo_wav, mode, expected):
  mixer = MicrosoftWaveMixer(stereo_wav, mode)

  assert mixer.sample_count == len(LEFT)
  assert [mixer.read_pcm16(i) for i in range(mixer.sample_count)] == expected

def test_eight_bit_wav(tmp_path):
  path = tmp_path / 'byte.wav'
  write_wav(path, 1, [-128, -1, 0, 127], bits=8)
  mixer = MicrosoftWaveMixer(str(path))

  assert mixer.pcm8_samples() == [-128, -1, 0, 127]
  assert mixer.pcm16_samples() == [-32768, -256, 0, 32512]
  assert mixer.encode(WaveFormat.PCM8) == struct.pack('4b', -128, -1, 0, 127)

def test_not_a_wav_is_fatal(tmp_path):
  path = tmp_path / 'noise.wav'
  path.write_bytes(b'not a riff file at all')

  with pytest.raises(FatalError):
    MicrosoftWaveMixer(str(path))

def test_raw_sample_counts():
  assert RawWaveMixer(b'\x00' * 18, WaveFormat.ADPCM4).sample_count == 32
  assert RawWaveMixer(b'\x00' * 11, WaveFormat.ADPCM2).sample_count == 32
  assert RawWaveMixer(b'\x00' * 7, WaveFormat.PCM16).sample_count == 3
  assert RawWaveMixer(b'\x00' * 7, WaveFormat.PCM8).sample_count == 7

def test_raw_pcm16_is_big_endian():
  mixer = RawWaveMixer(b'\x01\x00\xFF\xFF', WaveFormat.PCM16)

  assert mixer.pcm16_samples() == [256, -1]
  assert mixer.encode(WaveFormat.PCM16, '<') == b'\x00\x01\xFF\xFF'
  assert mixer.encode(WaveFormat.PCM8) == struct.pack('2b', 1, -1)

def test_raw_same_format_copies_payload():
  data = encode_frames(list(range(0, 3200, 100)), 4)
  assert RawWaveMixer(data + b'\x00', WaveFormat.ADPCM4).encode(WaveFormat.ADPCM4) == data

def test_encode_zero_fills_last_frame():
  mixer = RawWaveMixer(struct.pack('>3h', 100, 200, 300), WaveFormat.PCM16)
  data = mixer.encode(WaveFormat.ADPCM4)

  assert len(data) == 9
  assert data == encode_frames([100, 200, 300] + [0] * 13, 4)

def test_history_at_loop_start():
  samples = [(i * 37) % 2000 - 1000 for i in range(96)]
  mixer = RawWaveMixer(struct.pack(f'>{len(samples)}h', *samples), WaveFormat.PCM16)

  expected = History()
  encode_frames(samples[:48], 4, expected)

  assert mixer.calculate_history(48, WaveFormat.ADPCM4) == (expected.last, expected.penult)
  assert mixer.calculate_history(50, WaveFormat.ADPCM4) == (expected.last, expected.penult)
  assert mixer.calculate_history(8, WaveFormat.ADPCM4) == (0, 0)
  assert mixer.calculate_history(48, WaveFormat.PCM16) == (0, 0)

def test_same_format_history_decodes_stored_frames():
  samples = [(i * 91) % 4000 - 2000 for i in range(64)]
  data = encode_frames(samples, 2)

  decoded = History()
  decode_frames(data[:10], 2, decoded)

  mixer = RawWaveMixer(data, WaveFormat.ADPCM2)
  assert mixer.calculate_history(32, WaveFormat.ADPCM2) == (decoded.last, decoded.penult)

def test_create_mixer_by_extension(tmp_path, stereo_wav):
  raw = tmp_path / 'a.RAW'
  raw.write_bytes(b'\x00' * 4)
  other = tmp_path / 'a.mp3'
  other.write_bytes(b'')

  assert isinstance(create_mixer(str(raw), WaveFormat.PCM8), RawWaveMixer)
  assert isinstance(create_mixer(stereo_wav, WaveFormat.PCM8, MixerMode.LEFT), MicrosoftWaveMixer)
  assert create_mixer(str(other), WaveFormat.PCM8) is None

def test_copy_wave_info_keeps_existing_values(stereo_wav):
  class Target:
    sample_count = 0
    sample_rate = 0.0

  target = Target()
  MicrosoftWaveMixer(stereo_wav).copy_wave_info(target)
  assert (target.sample_count, target.sample_rate) == (len(LEFT), 22050.0)

  target.sample_count, target.sample_rate = 99, 8000.0
  MicrosoftWaveMixer(stereo_wav).copy_wave_info(target)
  assert (target.sample_count, target.sample_rate) == (99, 8000.0)

def rifx(channels: int, bits: int, rate: int, frames: bytes, data: bool = True) -> bytes:
  ''' Builds a big-endian linear PCM WAVE file '''
  block = channels * bits // 8
  body = b'WAVE' + b'fmt ' + struct.pack('>i', 16) + struct.pack('>hHiiHH', 1, channels, rate, rate * block, block, bits)
  if data:
    body += b'data' + struct.pack('>i', len(frames)) + frames
  return b'RIFX' + struct.pack('>i', len(body)) + body

@pytest.mark.parametrize('mode, expected', [
  (MixerMode.LEFT, LEFT),
  (MixerMode.RIGHT, RIGHT),
])
def test_rifx_stereo(tmp_path, mode, expected):
  interleaved = [sample for pair in zip(LEFT, RIGHT) for sample in pair]
  path = tmp_path / 'stereo.wav'
  path.write_bytes(rifx(2, 16, 32000, struct.pack(f'>{len(interleaved)}h', *interleaved)))

  mixer = MicrosoftWaveMixer(str(path), mode)
  assert mixer.sample_rate == 32000
  assert mixer.sample_count == len(LEFT)
  assert [mixer.read_pcm16(i) for i in range(mixer.sample_count)] == expected

def test_rifx_eight_bit(tmp_path):
  path = tmp_path / 'mono.wav'
  path.write_bytes(rifx(1, 8, 8000, bytes([128, 255, 0])))

  mixer = MicrosoftWaveMixer(str(path))
  assert mixer.sample_count == 3
  assert mixer.channel_pcm16(0) == [0, 127 << 8, -128 << 8]

def test_rifx_without_data_is_fatal(tmp_path):
  path = tmp_path / 'empty.wav'
  path.write_bytes(rifx(1, 16, 8000, b'', data=False))

  with pytest.raises(FatalError, match="'data'"):
    MicrosoftWaveMixer(str(path))

@pytest.mark.parametrize('sample', [32, 40, -1])
def test_history_outside_the_wave_raises(sample):
  mixer = RawWaveMixer(b'\x00' * 64, WaveFormat.PCM16)
  assert mixer.sample_count == 32

  with pytest.raises(ValueError):
    mixer.calculate_history(sample, WaveFormat.ADPCM4)

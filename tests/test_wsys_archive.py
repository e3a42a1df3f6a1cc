import io
import wave

import pytest

from jaudio.Console import FatalError, warning_count
from jaudio.Enums import WaveFormat
from jaudio.Errands import WaveOptions, convert_wsys
from jaudio.Helpers import struct
from jaudio.waveform.Waveform import History, encode_frames
from jaudio.waveform.WaveMixer import MicrosoftWaveMixer
from jaudio.wsys.Archive import WavePacker, WaveExtractor
from jaudio.wsys.WaveBank import Wave, WaveGroup, WaveBank

from conftest import write_wav

RAMP = list(range(-3200, 3200, 50))


@pytest.fixture
def workspace(tmp_path):
  waves = tmp_path / 'waves'
  waves.mkdir()
  (waves / 'ramp.raw').write_bytes(struct.pack(f'>{len(RAMP)}h', *RAMP))
  write_wav(waves / 'ramp.wav', 1, RAMP, rate=16000)

  (tmp_path / 'Voice.xml').write_text(
    '<wave-bank>\n'
    '  <wave-group archive="Voice_0.aw">\n'
    '    <wave id="1" file="ramp.raw" format="pcm16" rate="22050"/>\n'
    '    <wave id="2" file="ramp.wav" format="adpcm4" loop-start="32" loop-end="128"/>\n'
    '  </wave-group>\n'
    '</wave-bank>\n'
  )
  return tmp_path

def options(root, wave_dir: str = 'waves', extract_wav: bool = False) -> WaveOptions:
  return WaveOptions(str(root / wave_dir), str(root / 'banks'), extract_wav)


def test_pack_archive(workspace):
  bank = convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', options(workspace))
  raw, adpcm = bank.groups[0].waves

  archive = (workspace / 'banks' / 'Voice_0.aw').read_bytes()
  assert archive[:len(RAMP) * 2] == struct.pack(f'>{len(RAMP)}h', *RAMP)

  assert (raw.wave_start, raw.wave_size, raw.sample_count) == (0, 256, 128)
  assert adpcm.wave_start == 256
  assert adpcm.wave_size == 128 // 16 * 9
  assert len(archive) == 256 + 96

  # The WAVE file supplies the missing sample rate
  assert adpcm.sample_rate == 16000.0

  history = History()
  encode_frames(RAMP[:32], 4, history)
  assert (adpcm.history_last, adpcm.history_penult) == (history.last, history.penult)

  assert (workspace / 'Voice.ws').read_bytes()[0:4] == b'WSYS'

def test_missing_files_fail_after_all_waves(workspace):
  (workspace / 'waves' / 'ramp.raw').unlink()
  (workspace / 'waves' / 'ramp.wav').unlink()

  with pytest.raises(FatalError, match='2 wave file'):
    convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', options(workspace))
  assert warning_count() == 2

def test_unknown_extension_is_rejected(tmp_path):
  (tmp_path / 'sound.mp3').write_bytes(b'\x00' * 16)
  bank = WaveBank()
  group = WaveGroup('a.aw')
  bad = Wave(1, WaveFormat.PCM8)
  bad.file_name = 'sound.mp3'
  group.waves.append(bad)
  bank.groups.append(group)

  with pytest.raises(FatalError):
    WavePacker(str(tmp_path), str(tmp_path / 'banks'))(bank)

def test_extract_raw_files(workspace):
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', options(workspace))
  bank = convert_wsys(str(workspace / 'Voice.ws'), 'be', str(workspace / 'Out.xml'), 'xml', options(workspace, 'out'))

  names = [wave.file_name for _, wave in bank.waves()]
  assert names == ['Voice_0_00001.pcm16.raw', 'Voice_0_00002.adpcm4.raw']

  extracted = (workspace / 'out' / 'Voice_0_00001.pcm16.raw').read_bytes()
  assert extracted == struct.pack(f'>{len(RAMP)}h', *RAMP)
  assert len((workspace / 'out' / 'Voice_0_00002.adpcm4.raw').read_bytes()) == 72

  text = (workspace / 'Out.xml').read_text()
  assert 'file="Voice_0_00002.adpcm4.raw"' in text

def test_extract_wav_files(workspace):
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', options(workspace))
  convert_wsys(str(workspace / 'Voice.ws'), 'be', str(workspace / 'Out.yaml'), 'yaml', options(workspace, 'out', True))

  data = (workspace / 'out' / 'Voice_0_00001.pcm16.wav').read_bytes()
  assert data[0:4] == b'RIFF' and data[8:12] == b'WAVE'
  assert b'smpl' not in data

  with wave.open(str(workspace / 'out' / 'Voice_0_00001.pcm16.wav'), 'rb') as reader:
    assert reader.getframerate() == 22050
    assert reader.getnchannels() == 1
    frames = reader.readframes(reader.getnframes())
  assert list(struct.unpack(f'<{len(RAMP)}h', frames)) == RAMP

  looped = (workspace / 'out' / 'Voice_0_00002.adpcm4.wav').read_bytes()
  index = looped.index(b'smpl')
  loop_start, loop_end = struct.unpack_from('<2I', looped, index + 8 + 36 + 8)
  assert (loop_start, loop_end) == (32, 127)

def test_repack_extracted_wav(workspace):
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', options(workspace))
  convert_wsys(str(workspace / 'Voice.ws'), 'be', str(workspace / 'Out.xml'), 'xml', options(workspace, 'out', True))

  bank = convert_wsys(str(workspace / 'Out.xml'), 'xml', str(workspace / 'Again.ws'), 'be', options(workspace, 'out'))
  raw = bank.groups[0].waves[0]
  assert raw.wave_size == 256
  assert raw.sample_rate == 22050.0

def test_wave_extractor_rejects_ranges_past_archive(tmp_path):
  (tmp_path / 'a.aw').write_bytes(b'\x00' * 8)
  bank = WaveBank()
  group = WaveGroup('a.aw')
  wave_ = Wave(1, WaveFormat.PCM8)
  wave_.wave_start, wave_.wave_size = 0, 64
  group.waves.append(wave_)
  bank.groups.append(group)

  with pytest.raises(FatalError):
    WaveExtractor(str(tmp_path), str(tmp_path / 'out'))(bank)

def test_microsoft_wave_mixer_reads_streams():
  stream = io.BytesIO()
  with wave.open(stream, 'wb') as writer:
    writer.setnchannels(1)
    writer.setsampwidth(2)
    writer.setframerate(8000)
    writer.writeframes(struct.pack('<4h', 1, 2, 3, 4))
  stream.seek(0)

  assert MicrosoftWaveMixer(stream).pcm16_samples() == [1, 2, 3, 4]

def test_directories_follow_the_bank_files(workspace, monkeypatch):
  elsewhere = workspace / 'elsewhere'
  elsewhere.mkdir()
  monkeypatch.chdir(elsewhere)

  # Waves are read relative to the output, archives written relative to the input
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', WaveOptions())
  assert (workspace / 'banks' / 'Voice_0.aw').is_file()

  convert_wsys(str(workspace / 'Voice.ws'), 'be', str(workspace / 'out' / 'Out.xml'), 'xml', WaveOptions())
  assert (workspace / 'out' / 'waves' / 'Voice_0_00001.pcm16.raw').is_file()
  assert list(elsewhere.iterdir()) == []

def test_soundfont_reads_archives_beside_the_input(workspace, monkeypatch):
  monkeypatch.chdir(workspace / 'waves')
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Voice.ws'), 'be', WaveOptions())
  archive = (workspace / 'banks' / 'Voice_0.aw').read_bytes()
  (workspace / 'Voice_0.aw').write_bytes(archive)

  convert_wsys(str(workspace / 'Voice.ws'), 'be', str(workspace / 'Voice.sf2'), 'sf2', WaveOptions())
  data = (workspace / 'Voice.sf2').read_bytes()
  assert data[0:4] == b'RIFF'
  assert struct.pack(f'<{len(RAMP)}h', *RAMP) in data

  # Packed text banks read the archives they just wrote
  convert_wsys(str(workspace / 'Voice.xml'), 'xml', str(workspace / 'Direct.sf2'), 'sf2', WaveOptions())
  assert struct.pack(f'<{len(RAMP)}h', *RAMP) in (workspace / 'Direct.sf2').read_bytes()

def test_loop_past_the_wave_file_is_rejected(workspace):
  (workspace / 'Long.xml').write_text(
    '<wave-bank>\n'
    '  <wave-group archive="Long_0.aw">\n'
    '    <wave id="1" file="ramp.wav" format="adpcm4" loop-start="500" loop-end="600"/>\n'
    '  </wave-group>\n'
    '</wave-bank>\n'
  )

  with pytest.raises(FatalError, match='1 wave file'):
    convert_wsys(str(workspace / 'Long.xml'), 'xml', str(workspace / 'Long.ws'), 'be', options(workspace))
  assert warning_count() == 1

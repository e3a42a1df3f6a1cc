import io

import pytest

from jaudio.Console import FatalError, warning_count
from jaudio.Enums import WaveFormat
from jaudio.wsys.Xml import XmlDeserializer, XmlSerializer
from jaudio.wsys.Yaml import YamlDeserializer, YamlSerializer
from jaudio.wsys.WaveBank import Wave, WaveGroup, WaveBank

BANK_XML = b'''<?xml version="1.0" encoding="UTF-8"?>
<wave-bank name="Voice">
  <wave-group archive="Voice_0.aw">
    <wave id="12" file="a.raw" format="adpcm4" rate="32000" key="72" loop-start="0" loop-end="4096"/>
    <wave id="13" file="b.wav" format="pcm16" rate="22050"/>
  </wave-group>
</wave-bank>
'''


def read(data: bytes) -> WaveBank:
  return XmlDeserializer(io.BytesIO(data))(None)


def test_read_bank():
  bank = read(BANK_XML)
  assert bank.name == 'Voice'

  first, second = bank.groups[0].waves
  assert (first.wave_id, first.format, first.root_key, first.file_name) == (12, WaveFormat.ADPCM4, 72, 'a.raw')
  assert (first.loop, first.loop_start, first.loop_end) == (True, 0, 4096)
  assert second.root_key == 60
  assert second.loop is False
  assert second.sample_rate == 22050.0

def test_round_trip():
  stream = io.BytesIO()
  XmlSerializer(stream)(read(BANK_XML))
  text = stream.getvalue().decode('utf-8')

  assert text.count('key=') == 1
  assert 'loop-start="0"' in text

  bank = read(text.encode('utf-8'))
  assert [wave.wave_id for _, wave in bank.waves()] == [12, 13]
  assert bank.groups[0].archive_name == 'Voice_0.aw'

def test_lone_loop_bound_is_rejected():
  data = b'<wave-bank><wave-group archive="a.aw"><wave id="1" file="a.raw" format="pcm8" loop-start="4"/></wave-group></wave-bank>'

  with pytest.raises(FatalError, match='bad input xml'):
    read(data)
  assert warning_count() == 1

def test_bad_format_is_rejected():
  data = b'<wave-bank><wave-group archive="a.aw"><wave id="1" file="a.raw" format="mp3"/></wave-group></wave-bank>'

  with pytest.raises(FatalError):
    read(data)

def test_wrong_root_is_fatal():
  with pytest.raises(FatalError):
    read(b'<IBNK virtual-number="1"/>')

def test_yaml_round_trip_keeps_archive_fields():
  bank = WaveBank('Voice')
  group = WaveGroup('Voice_0.aw')
  wave = Wave(4, WaveFormat.ADPCM2)
  wave.file_name = 'Voice_0_00004.adpcm2.raw'
  wave.wave_start, wave.wave_size, wave.sample_count = 64, 50, 160
  wave.loop, wave.loop_start, wave.loop_end = True, 16, 160
  wave.history_last, wave.history_penult = 7, -9
  group.waves.append(wave)
  bank.groups.append(group)

  stream = io.StringIO()
  YamlSerializer(stream)(bank)
  result = YamlDeserializer(io.StringIO(stream.getvalue()))(None)

  copy = result.groups[0].waves[0]
  assert copy.file_name == wave.file_name
  assert (copy.wave_start, copy.wave_size, copy.sample_count) == (64, 50, 160)
  assert (copy.loop_start, copy.loop_end) == (16, 160)
  assert (copy.history_last, copy.history_penult) == (7, -9)
  assert copy.format == WaveFormat.ADPCM2

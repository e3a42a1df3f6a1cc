import io

import pytest

from jaudio.Console import FatalError, warning_count
from jaudio.Enums import OscillatorTableMode, SenseTrigger
from jaudio.ibnk.Xml import XmlDeserializer, XmlSerializer
from jaudio.ibnk.structs.Instrument import MelodicInstrument
from jaudio.ibnk.structs.DrumSet import DrumSet

BANK_XML = b'''<?xml version="1.0" encoding="UTF-8"?>
<IBNK virtual-number="3">
  <instrument program="0" volume="0.8">
    <oscillator target="volume" rate="2" width="1" base="0">
      <start-table>
        <linear time="10" offset="32767"/>
        <loop dest="0"/>
      </start-table>
    </oscillator>
    <sense-effect target="pitch" trigger="velocity" center-key="C4" range-lo="0.5" range-hi="1.5"/>
    <key-region key="B3">
      <velocity-region velocity="100" wave-id="4"/>
      <velocity-region wave-id="5" pitch="2"/>
    </key-region>
    <key-region>
      <velocity-region wave-id="6"/>
    </key-region>
  </instrument>
  <drum-set program="127">
    <percussion key="C2" pan="0.3" release="500">
      <velocity-region wave-id="40"/>
    </percussion>
  </drum-set>
</IBNK>
'''


def read(data: bytes):
  return XmlDeserializer(io.BytesIO(data))(None)

def write(bank) -> bytes:
  stream = io.BytesIO()
  XmlSerializer(stream)(bank)
  return stream.getvalue()


def test_read_bank():
  bank = read(BANK_XML)
  assert bank.virtual_number == 3

  instrument = bank[0]
  assert isinstance(instrument, MelodicInstrument)
  assert instrument.volume == pytest.approx(0.8)
  assert instrument.pitch == 1.0

  oscillator = instrument.oscillators[0]
  assert oscillator.rate == 2.0
  assert [entry.mode for entry in oscillator.start_table] == [OscillatorTableMode.LINEAR, OscillatorTableMode.LOOP]
  assert oscillator.release_table == []

  effect = instrument.sense_effects[0]
  assert (effect.trigger, effect.center_key) == (SenseTrigger.VELOCITY, 60)

  assert [region.key for region in instrument.key_regions] == [59, 127]
  regions = instrument.key_regions[0].velocity_regions
  assert [(r.velocity, r.wave_id, r.pitch) for r in regions] == [(100, 4, 1.0), (127, 5, 2.0)]

  drum_set = bank[127]
  assert isinstance(drum_set, DrumSet)
  assert drum_set[36].pan == pytest.approx(0.3)
  assert drum_set[36].release == 500
  assert drum_set[36].velocity_regions[0].wave_id == 40

def test_round_trip(sample_bank):
  bank = read(write(sample_bank))

  assert [program for program, _ in bank] == [0, 127]
  melodic = bank[0]
  assert melodic.volume == pytest.approx(0.75)
  assert melodic.pitch == pytest.approx(1.5)
  assert len(melodic.oscillators[0].release_table) == 2
  assert len(melodic.random_effects) == 1 and len(melodic.sense_effects) == 1
  assert [r.key for r in melodic.key_regions] == [59, 127]

  drum_set = bank[127]
  assert drum_set[36].pan == pytest.approx(0.25)
  assert drum_set[36].release == 1000
  assert drum_set[38].pan == 0.5

def test_default_values_are_left_out(sample_bank):
  text = write(sample_bank).decode('utf-8')

  assert 'key="B3"' in text
  assert 'pan="0.25"' in text
  assert 'pan="0.5"' not in text
  assert 'virtual-number="3"' in text

def test_missing_virtual_number_is_fatal():
  with pytest.raises(FatalError):
    read(b'<IBNK/>')

def test_bad_program_fails_after_full_pass():
  data = b'''<IBNK virtual-number="0">
    <instrument program="300"/>
    <instrument program="x"/>
    <instrument program="1"/>
  </IBNK>'''

  with pytest.raises(FatalError, match='bad input xml'):
    read(data)
  assert warning_count() == 2

def test_duplicate_program_is_rejected():
  data = b'<IBNK virtual-number="0"><instrument program="1"/><drum-set program="1"/></IBNK>'

  with pytest.raises(FatalError):
    read(data)
  assert warning_count() == 1

def test_missing_oscillator_target_is_fatal():
  data = b'<IBNK virtual-number="0"><instrument program="1"><oscillator rate="1"/></instrument></IBNK>'

  with pytest.raises(FatalError):
    read(data)

def test_unknown_table_element_is_fatal():
  data = b'''<IBNK virtual-number="0"><instrument program="1">
    <oscillator target="volume"><start-table><wobble/></start-table></oscillator>
  </instrument></IBNK>'''

  with pytest.raises(FatalError):
    read(data)

def test_malformed_document_is_fatal():
  with pytest.raises(FatalError):
    read(b'<IBNK virtual-number="0">')

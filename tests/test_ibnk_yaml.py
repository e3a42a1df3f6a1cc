import io

import pytest

from jaudio.Console import FatalError, warning_count
from jaudio.ibnk.InstrumentBank import InstrumentBank
from jaudio.ibnk.Yaml import YamlDeserializer, YamlSerializer
from jaudio.ibnk.structs.DrumSet import DrumSet
from jaudio.ibnk.structs.Instrument import MelodicInstrument

from conftest import make_oscillator


def test_round_trip(sample_bank):
  stream = io.StringIO()
  YamlSerializer(stream)(sample_bank)
  text = stream.getvalue()

  # Table entries are written in flow style
  assert '- [linear, 10, 32767]' in text

  bank = YamlDeserializer(io.StringIO(text))(None)
  assert bank.virtual_number == 3
  assert bank[0].oscillators[0] == make_oscillator()
  assert bank[0].volume == 0.75
  assert [r.key for r in bank[0].key_regions] == [59, 127]
  assert isinstance(bank[127], DrumSet)
  assert bank[127][36].pan == 0.25
  assert bank[127][38].random_effects[0].base == 1.0

def test_missing_instruments_is_fatal():
  with pytest.raises(FatalError):
    YamlDeserializer(io.StringIO('virtual number: 1\n'))(None)

def test_bad_instrument_data_is_fatal():
  text = 'instruments:\n  - type: melodic\n    volume: 1.0\n'
  with pytest.raises(FatalError, match='bad instrument data'):
    YamlDeserializer(io.StringIO(text))(None)

def test_malformed_yaml_is_fatal():
  with pytest.raises(FatalError):
    YamlDeserializer(io.StringIO('instruments: [\n'))(None)

def test_duplicate_program_keeps_first(sample_bank):
  data = sample_bank.to_yaml()
  data['instruments'][1]['program'] = 0

  bank = InstrumentBank.from_yaml(data)
  assert isinstance(bank[0], MelodicInstrument)
  assert len(bank) == 1
  assert warning_count() == 1

import wave

import pytest

from jaudio.Console import reset_warnings
from jaudio.Enums import InstrumentEffectTarget, OscillatorTableMode, SenseTrigger
from jaudio.Helpers import struct
from jaudio.ibnk.InstrumentBank import InstrumentBank
from jaudio.ibnk.structs.Oscillator import Oscillator, OscillatorTableEntry
from jaudio.ibnk.structs.Effect import RandomEffect, SenseEffect
from jaudio.ibnk.structs.VelocityRegion import VelocityRegion
from jaudio.ibnk.structs.Instrument import MelodicInstrument
from jaudio.ibnk.structs.DrumSet import DrumSet


@pytest.fixture(autouse=True)
def clear_warnings():
  reset_warnings()
  yield
  reset_warnings()


def make_oscillator() -> Oscillator:
  oscillator = Oscillator(InstrumentEffectTarget.VOLUME)
  oscillator.rate  = 1.0
  oscillator.width = 1.0
  oscillator.base  = 0.0
  oscillator.start_table = [
    OscillatorTableEntry(OscillatorTableMode.LINEAR, 10, 32767),
    OscillatorTableEntry(OscillatorTableMode.HOLD, 0, 0),
  ]
  oscillator.release_table = [
    OscillatorTableEntry(OscillatorTableMode.SQUARE, 20, 0),
    OscillatorTableEntry(OscillatorTableMode.STOP, 0, 0),
  ]
  return oscillator

def make_melodic() -> MelodicInstrument:
  instrument = MelodicInstrument()
  instrument.volume = 0.75
  instrument.pitch  = 1.5
  instrument.oscillators.append(make_oscillator())

  random_effect = RandomEffect(InstrumentEffectTarget.PITCH)
  random_effect.base, random_effect.distance = 1.0, 0.25
  instrument.effects.append(random_effect)

  sense_effect = SenseEffect(InstrumentEffectTarget.VOLUME, SenseTrigger.VELOCITY)
  sense_effect.center_key, sense_effect.range_lo, sense_effect.range_hi = 64, 0.5, 1.0
  instrument.effects.append(sense_effect)

  low = instrument.add_key_region(59)
  low.add_velocity_region(VelocityRegion(63, 10))
  loud = VelocityRegion(127, 11)
  loud.volume = 0.5
  low.add_velocity_region(loud)

  high = instrument.add_key_region(127)
  high.add_velocity_region(VelocityRegion(127, 12))
  return instrument

def make_drum_set() -> DrumSet:
  drum_set = DrumSet()
  kick = drum_set.add_percussion(36)
  kick.pan = 0.25
  kick.release = 1000
  kick.add_velocity_region(VelocityRegion(127, 5))

  snare = drum_set.add_percussion(38)
  snare.effects.append(RandomEffect(InstrumentEffectTarget.VOLUME))
  snare.add_velocity_region(VelocityRegion(127, 6))
  return drum_set

@pytest.fixture
def sample_bank() -> InstrumentBank:
  bank = InstrumentBank(virtual_number=3)
  bank.add(0, make_melodic())
  bank.add(127, make_drum_set())
  return bank


def write_wav(path, channels: int, samples: list[int], bits: int = 16, rate: int = 22050) -> None:
  ''' Writes interleaved samples as a linear PCM WAVE file '''
  with wave.open(str(path), 'wb') as writer:
    writer.setnchannels(channels)
    writer.setsampwidth(bits // 8)
    writer.setframerate(rate)
    if bits == 8:
      writer.writeframes(bytes(sample + 128 for sample in samples))
    else:
      writer.writeframes(struct.pack(f'<{len(samples)}h', *samples))

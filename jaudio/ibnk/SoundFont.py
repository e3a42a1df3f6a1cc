'''
### IBNK SoundFont Module

This module exports an instrument bank as a SoundFont preset/instrument skeleton. The export is
lossy and one-way: zones reference samples by wave id (the sample pool itself comes from the wave
bank), and a melodic instrument's envelope is approximated from the first points of its volume
oscillator's start and release tables.

Classes:
    `SoundFontSerializer`:
        Transform stage that writes the bank as a '.sf2' file.
'''
from ..Enums import InstrumentEffectTarget
from ..Console import message
from ..Transform import Serializer
from ..SoundFont import *
from .InstrumentBank import InstrumentBank
from .structs.Instrument import MelodicInstrument
from .structs.DrumSet import DrumSet

DRUM_BANK = 128
TABLE_TIME_SCALE = 600.0

def _envelope(instrument: MelodicInstrument) -> list[tuple]:
  oscillator = next((o for o in instrument.oscillators if o.target == InstrumentEffectTarget.VOLUME), None)
  if oscillator is None:
    return []

  def seconds(time: int) -> float:
    return time * oscillator.rate / TABLE_TIME_SCALE

  generators = []
  start, release = oscillator.start_table, oscillator.release_table

  # Zero-length stages keep the SoundFont defaults
  if len(start) > 0 and start[0].time > 0:
    generators.append((GEN_ATTACK_VOL_ENV, timecents(seconds(start[0].time))))

  if len(start) > 1:
    sustain = start[1].amount / 32767.0 * oscillator.width + oscillator.base
    if start[1].time > 0:
      generators.append((GEN_DECAY_VOL_ENV, timecents(seconds(start[1].time))))
    if sustain > 0:
      generators.append((GEN_SUSTAIN_VOL_ENV, centibels(sustain)))

  if len(release) > 0 and release[0].time > 0:
    generators.append((GEN_RELEASE_VOL_ENV, timecents(seconds(release[0].time))))

  return generators

def _melodic_zones(instrument: MelodicInstrument) -> list[list[tuple]]:
  zones = []

  envelope = _envelope(instrument)
  if envelope:
    zones.append(envelope) # global zone

  low_key = 0
  for key_region in instrument.key_regions:
    low_velocity = 0

    for region in key_region.velocity_regions:
      zones.append(
        [
          (GEN_KEY_RANGE, (low_key, key_region.key)),
          (GEN_VEL_RANGE, (low_velocity, region.velocity)),
          (GEN_INITIAL_ATTENUATION, centibels(instrument.volume * region.volume)),
        ]
        + tuning(instrument.pitch * region.pitch)
        + [(GEN_SAMPLE_MODES, 1), (GEN_SAMPLE_ID, region.wave_id)]
      )
      low_velocity = region.velocity + 1

    low_key = key_region.key + 1

  return zones

def _drum_zones(drum_set: DrumSet) -> list[list[tuple]]:
  zones = []

  for key, percussion in drum_set:
    low_velocity = 0

    for region in percussion.velocity_regions:
      zone = [
        (GEN_KEY_RANGE, (key, key)),
        (GEN_VEL_RANGE, (low_velocity, region.velocity)),
        (GEN_INITIAL_ATTENUATION, centibels(percussion.volume * region.volume)),
        (GEN_PAN, int((percussion.pan - 0.5) * 1000)),
      ]
      zone += tuning(percussion.pitch * region.pitch)
      zone += [
        (GEN_RELEASE_VOL_ENV, timecents(percussion.release / 32767.0)),
        (GEN_OVERRIDING_ROOT_KEY, key),
        (GEN_SAMPLE_ID, region.wave_id),
      ]
      zones.append(zone)
      low_velocity = region.velocity + 1

  return zones


class SoundFontSerializer(Serializer):
  ''' Represents the SoundFont bank writer stage '''
  def __init__(self, stream):
    self.stream = stream

  def serialize(self, bank: InstrumentBank) -> None:
    builder = SoundFontBuilder(bank.name or f'{bank.virtual_number:05}')

    message('Writing presets...')
    for program, instrument in bank:
      name = f'{bank.virtual_number:05}-{program:05}'

      if isinstance(instrument, DrumSet):
        zones, bank_number = _drum_zones(instrument), DRUM_BANK
      else:
        zones, bank_number = _melodic_zones(instrument), bank.virtual_number & 0xFFFF

      index = builder.add_instrument(name, zones)
      builder.add_preset(name, program, bank_number, [[(GEN_KEY_RANGE, (0, 127)), (GEN_INSTRUMENT, index)]])

    self.stream.write(builder.build())

if __name__ == '__main__':
  pass

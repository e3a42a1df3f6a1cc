'''
### Instrument Module

This module defines the `MelodicInstrument` class, which represents a playable melodic program in a
JAudio instrument bank, and `KeyRegion`, which groups the velocity regions used for the keys up to and
including its own.

Classes:
    `KeyRegion`:
        Represents a key region and its velocity regions.

    `MelodicInstrument`:
        Represents an 'INST' block: volume, pitch, up to two oscillators, up to two random and two
        sense effects, and its key regions.

Functionality:
    - Parse an instrument from a binary format ('from_bytes').
    - Export an instrument back to binary format ('write').
    - Convert the instrument to and from the YAML dictionary form ('to_yaml', 'from_yaml').
    - Report the size of the binary block ('struct_size') so offsets can be laid out before writing.

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.

    `Helpers`:
        For alignment.

Intended Usage:
    Instruments are read and written by the IBNK binary stages. Oscillators are passed in through a
    registry keyed by offset when reading, and resolved to offsets through the bank's oscillator
    table when writing.
'''
from bisect import bisect_left

# Import helper functions
from ...Helpers import *
from ...Enums import BinaryTag
from ...Console import warn
from .Oscillator import Oscillator
from .Effect import EFFECT_SIZE, InstrumentEffect, RandomEffect, SenseEffect
from .VelocityRegion import VelocityRegion, insert_velocity_region


class KeyRegion:
  ''' Represents a key region '''
  def __init__(self, key: int = 127):
    self.key = key
    self.velocity_regions = []

  def add_velocity_region(self, region: VelocityRegion) -> bool:
    return insert_velocity_region(self.velocity_regions, region)

  @classmethod
  def from_bytes(cls, reader):
    key = reader.read_u8()
    if key > 127:
      warn('IBNK: key region has a bad key %d', key)
      return None

    self = cls(key)
    reader.step(3)

    for offset in reader.read_s32s(reader.read_s32()):
      reader.goto(offset)
      region = VelocityRegion.from_bytes(reader)
      if region is not None and not self.add_velocity_region(region):
        warn('IBNK: key region %d has a duplicate velocity region %d', key, region.velocity)

    return self

  def write(self, writer) -> None:
    offset = writer.position + align_to_16(8 + 4 * len(self.velocity_regions))

    writer.write_u8(self.key)
    writer.write_padding(4)
    writer.write_s32(len(self.velocity_regions))
    writer.write_s32s([offset + 0x10 * i for i in range(len(self.velocity_regions))])
    writer.write_padding(16)

    for region in self.velocity_regions:
      region.write(writer)

  @classmethod
  def from_yaml(cls, region_dict: dict):
    self = cls(int(region_dict.get('key', 127)))
    for velocity_dict in region_dict.get('velocity regions', []):
      self.add_velocity_region(VelocityRegion.from_yaml(velocity_dict))
    return self

  def to_yaml(self) -> dict:
    return {
      "key": self.key,
      "velocity regions": [region.to_yaml() for region in self.velocity_regions]
    }

  @property
  def struct_size(self) -> int:
    return align_to_16(8 + 4 * len(self.velocity_regions)) + 0x10 * len(self.velocity_regions)


class MelodicInstrument:
  ''' Represents a melodic instrument '''
  TAG = BinaryTag.INST

  def __init__(self):
    self.volume = 1.0
    self.pitch  = 1.0

    self.oscillators = []
    self.effects     = []
    self.key_regions = []

  @property
  def random_effects(self) -> list[RandomEffect]:
    return [effect for effect in self.effects if isinstance(effect, RandomEffect)]

  @property
  def sense_effects(self) -> list[SenseEffect]:
    return [effect for effect in self.effects if isinstance(effect, SenseEffect)]

  def insert_key_region(self, region: KeyRegion) -> bool:
    keys = [r.key for r in self.key_regions]
    index = bisect_left(keys, region.key)
    if index < len(keys) and keys[index] == region.key:
      return False

    self.key_regions.insert(index, region)
    return True

  def add_key_region(self, key: int):
    ''' Returns the new key region, or None if the key already has one '''
    if not 0 <= key <= 127:
      raise ValueError(f'Key {key} is out of range')

    region = KeyRegion(key)
    return region if self.insert_key_region(region) else None

  @classmethod
  def from_bytes(cls, reader, oscillator_registry: dict):
    self = cls()
    reader.step(8) # Tag and an unused word

    self.volume = reader.read_f32()
    self.pitch  = reader.read_f32()
    oscillator_offsets = reader.read_s32s(2)
    random_offsets     = reader.read_s32s(2)
    sense_offsets      = reader.read_s32s(2)
    key_region_offsets = reader.read_s32s(reader.read_s32())

    for offset in oscillator_offsets:
      if offset == 0:
        continue

      if offset not in oscillator_registry:
        reader.goto(offset)
        oscillator_registry[offset] = Oscillator.from_bytes(reader)

      if oscillator_registry[offset] is not None:
        self.oscillators.append(oscillator_registry[offset])

    for effect_type, offsets in ((RandomEffect, random_offsets), (SenseEffect, sense_offsets)):
      for offset in offsets:
        if offset == 0:
          continue

        reader.goto(offset)
        effect = effect_type.from_bytes(reader)
        if effect is not None:
          self.effects.append(effect)

    for offset in key_region_offsets:
      reader.goto(offset)
      region = KeyRegion.from_bytes(reader)
      if region is not None and not self.insert_key_region(region):
        warn('IBNK: instrument has a duplicate key region %d', region.key)

    return self

  def write(self, writer, oscillator_offsets: dict) -> None:
    start = writer.position
    random_effects, sense_effects = self.random_effects, self.sense_effects

    effect_offset = start + align_to_16(44 + 4 * len(self.key_regions))
    random_offsets = [effect_offset + 0x10 * i for i in range(len(random_effects))]
    effect_offset += 0x10 * len(random_effects)
    sense_offsets = [effect_offset + 0x10 * i for i in range(len(sense_effects))]
    effect_offset += 0x10 * len(sense_effects)

    key_region_offsets = []
    for region in self.key_regions:
      key_region_offsets.append(effect_offset)
      effect_offset += region.struct_size

    def slots(offsets: list[int]) -> list[int]:
      return (offsets + [0, 0])[:2]

    writer.write_u32(self.TAG)
    writer.write_s32(0)
    writer.write_f32(self.volume)
    writer.write_f32(self.pitch)
    writer.write_s32s(slots([oscillator_offsets[oscillator.key] for oscillator in self.oscillators]))
    writer.write_s32s(slots(random_offsets))
    writer.write_s32s(slots(sense_offsets))
    writer.write_s32(len(self.key_regions))
    writer.write_s32s(key_region_offsets)
    writer.write_padding(16)

    for effect in random_effects + sense_effects:
      effect.write(writer)

    for region in self.key_regions:
      region.write(writer)

    writer.write_padding(32)

  @classmethod
  def from_yaml(cls, instrument_dict: dict):
    self = cls()
    self.volume = float(instrument_dict.get('volume', 1.0))
    self.pitch  = float(instrument_dict.get('pitch', 1.0))

    self.oscillators = [Oscillator.from_yaml(o) for o in instrument_dict.get('oscillators', [])]
    self.effects     = [InstrumentEffect.from_yaml(e) for e in instrument_dict.get('effects', [])]

    for region_dict in instrument_dict.get('key regions', []):
      self.insert_key_region(KeyRegion.from_yaml(region_dict))

    return self

  def to_yaml(self) -> dict:
    return {
      "type": "melodic",
      "volume": self.volume,
      "pitch": self.pitch,
      "oscillators": [oscillator.to_yaml() for oscillator in self.oscillators],
      "effects": [effect.to_yaml() for effect in self.effects],
      "key regions": [region.to_yaml() for region in self.key_regions]
    }

  @property
  def struct_size(self) -> int:
    size  = align_to_16(44 + 4 * len(self.key_regions))
    size += EFFECT_SIZE * len(self.effects)
    size += sum(region.struct_size for region in self.key_regions)
    return align_to_32(size)

if __name__ == '__main__':
  pass

'''
### DrumSet Module

This module defines the `DrumSet` class, which represents a percussion program in a JAudio instrument
bank, and `Percussion`, the per-key entry of a drum set.

Classes:
    `Percussion`:
        Represents the sound played by one key: volume, pitch, pan, release, up to two random
        effects and its velocity regions.

    `DrumSet`:
        Represents a 'PERC' (version 1) or 'PER2' (version 2) block holding 128 percussion slots.
        Version 2 adds the per-key pan and release tables; drum sets are always written as 'PER2'.

Functionality:
    - Parse a drum set from a binary format ('from_bytes').
    - Export a drum set back to binary format ('write').
    - Convert the drum set to and from the YAML dictionary form ('to_yaml', 'from_yaml').
    - Report the size of the binary block ('struct_size') so offsets can be laid out before writing.

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.

    `Helpers`:
        For alignment.
'''
# Import helper functions
from ...Helpers import *
from ...Enums import BinaryTag
from ...Console import warn
from .Effect import EFFECT_SIZE, InstrumentEffect, RandomEffect, SenseEffect
from .VelocityRegion import VELOCITY_REGION_SIZE, VelocityRegion, insert_velocity_region

PERCUSSION_COUNT = 128
DRUM_SET_HEADER_SIZE = 0x420


class Percussion:
  ''' Represents a percussion entry '''
  def __init__(self):
    self.volume  = 1.0
    self.pitch   = 1.0
    self.pan     = 0.5
    self.release = 0

    self.effects = []
    self.velocity_regions = []

  @property
  def random_effects(self) -> list[RandomEffect]:
    return [effect for effect in self.effects if isinstance(effect, RandomEffect)]

  @property
  def sense_effects(self) -> list[SenseEffect]:
    return [effect for effect in self.effects if isinstance(effect, SenseEffect)]

  def add_velocity_region(self, region: VelocityRegion) -> bool:
    return insert_velocity_region(self.velocity_regions, region)

  @classmethod
  def from_bytes(cls, reader):
    self = cls()

    self.volume = reader.read_f32()
    self.pitch  = reader.read_f32()
    random_offsets   = reader.read_s32s(2)
    velocity_offsets = reader.read_s32s(reader.read_s32())

    for offset in random_offsets:
      if offset == 0:
        continue

      reader.goto(offset)
      effect = RandomEffect.from_bytes(reader)
      if effect is not None:
        self.effects.append(effect)

    for offset in velocity_offsets:
      reader.goto(offset)
      region = VelocityRegion.from_bytes(reader)
      if region is not None and not self.add_velocity_region(region):
        warn('IBNK: percussion has a duplicate velocity region %d', region.velocity)

    return self

  def write(self, writer) -> None:
    random_effects = self.random_effects

    effect_offset = writer.position + align_to_16(20 + 4 * len(self.velocity_regions))
    random_offsets = [effect_offset + EFFECT_SIZE * i for i in range(len(random_effects))]
    region_offset = effect_offset + EFFECT_SIZE * len(random_effects)

    writer.write_f32(self.volume)
    writer.write_f32(self.pitch)
    writer.write_s32s((random_offsets + [0, 0])[:2])
    writer.write_s32(len(self.velocity_regions))
    writer.write_s32s([region_offset + VELOCITY_REGION_SIZE * i for i in range(len(self.velocity_regions))])
    writer.write_padding(16)

    for effect in random_effects:
      effect.write(writer)

    for region in self.velocity_regions:
      region.write(writer)

  @classmethod
  def from_yaml(cls, percussion_dict: dict):
    self = cls()
    self.volume  = float(percussion_dict.get('volume', 1.0))
    self.pitch   = float(percussion_dict.get('pitch', 1.0))
    self.pan     = float(percussion_dict.get('pan', 0.5))
    self.release = int(percussion_dict.get('release', 0))
    self.effects = [InstrumentEffect.from_yaml(e) for e in percussion_dict.get('effects', [])]

    for region_dict in percussion_dict.get('velocity regions', []):
      self.add_velocity_region(VelocityRegion.from_yaml(region_dict))

    return self

  def to_yaml(self) -> dict:
    return {
      "volume": self.volume,
      "pitch": self.pitch,
      "pan": self.pan,
      "release": self.release,
      "effects": [effect.to_yaml() for effect in self.effects],
      "velocity regions": [region.to_yaml() for region in self.velocity_regions]
    }

  @property
  def struct_size(self) -> int:
    return (
      align_to_16(20 + 4 * len(self.velocity_regions))
      + EFFECT_SIZE * len(self.random_effects)
      + VELOCITY_REGION_SIZE * len(self.velocity_regions)
    )


class DrumSet:
  ''' Represents a drum set '''
  TAG = BinaryTag.PER2

  def __init__(self):
    self.percussions = [None] * PERCUSSION_COUNT

  def __getitem__(self, key: int) -> Percussion:
    return self.percussions[key]

  def __iter__(self):
    ''' Yields (key, percussion) for every used key '''
    for key, percussion in enumerate(self.percussions):
      if percussion is not None:
        yield key, percussion

  def add_percussion(self, key: int):
    ''' Returns the new percussion, or None if the key already has one '''
    if not 0 <= key < PERCUSSION_COUNT:
      raise ValueError(f'Key {key} is out of range')

    if self.percussions[key] is not None:
      return None

    self.percussions[key] = Percussion()
    return self.percussions[key]

  @classmethod
  def from_bytes(cls, reader):
    self = cls()

    tag = reader.read_u32()
    reader.step(4 + PERCUSSION_COUNT)
    offsets = reader.read_s32s(PERCUSSION_COUNT)

    if tag == BinaryTag.PER2:
      pans     = reader.read_s8s(PERCUSSION_COUNT)
      releases = reader.read_u16s(PERCUSSION_COUNT)
    else:
      pans, releases = None, None

    for key, offset in enumerate(offsets):
      if offset == 0:
        continue

      reader.goto(offset)
      percussion = Percussion.from_bytes(reader)

      if pans is not None:
        percussion.pan     = pans[key] / 127.0
        percussion.release = releases[key]

      self.percussions[key] = percussion

    return self

  def write(self, writer) -> None:
    offset = writer.position + DRUM_SET_HEADER_SIZE
    offsets = []

    for percussion in self.percussions:
      if percussion is None:
        offsets.append(0)
      else:
        offsets.append(offset)
        offset += percussion.struct_size

    writer.write_u32(self.TAG)
    writer.write_s32(0)
    writer.write_bytes(b'\x00' * PERCUSSION_COUNT)
    writer.write_s32s(offsets)

    for percussion in self.percussions:
      writer.write_s8(0 if percussion is None else max(-128, min(127, int(percussion.pan * 127))))

    for percussion in self.percussions:
      writer.write_u16(0 if percussion is None else percussion.release & 0xFFFF)

    writer.write_padding(32)

    for _, percussion in self:
      percussion.write(writer)

    writer.write_padding(32)

  @classmethod
  def from_yaml(cls, drum_set_dict: dict):
    self = cls()
    for percussion_dict in drum_set_dict.get('percussions', []):
      self.percussions[int(percussion_dict['key'])] = Percussion.from_yaml(percussion_dict)
    return self

  def to_yaml(self) -> dict:
    return {
      "type": "drum set",
      "percussions": [{"key": key, **percussion.to_yaml()} for key, percussion in self]
    }

  @property
  def struct_size(self) -> int:
    return align_to_32(DRUM_SET_HEADER_SIZE + sum(percussion.struct_size for _, percussion in self))

if __name__ == '__main__':
  pass

'''
### Effect Module

This module defines the instrument effect structures of a JAudio instrument bank. Both variants
occupy 0x10 bytes in binary form.

Classes:
    `RandomEffect`:
        Randomizes a target parameter around a base value by up to a distance.

    `SenseEffect`:
        Scales a target parameter by the note's key or velocity, between two range values
        on either side of a center key.

Functionality:
    - Parse an effect from a binary format ('from_bytes').
    - Export an effect back to binary format ('write').
    - Convert the effect to and from the YAML dictionary form ('to_yaml', 'from_yaml').

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.
'''
# Import helper functions
from ...Helpers import *
from ...Enums import InstrumentEffectTarget, SenseTrigger
from ...Console import warn

EFFECT_SIZE = 0x10


class InstrumentEffect:
  ''' Represents the part shared by both effect variants '''
  def __init__(self, target: InstrumentEffectTarget = InstrumentEffectTarget.VOLUME):
    self.target = target

  @staticmethod
  def from_yaml(effect_dict: dict):
    if effect_dict.get('type') == 'sense':
      return SenseEffect.from_yaml(effect_dict)
    return RandomEffect.from_yaml(effect_dict)

  @property
  def struct_size(self) -> int:
    return EFFECT_SIZE


# struct size = 0x10
class RandomEffect(InstrumentEffect):
  ''' Represents a random effect '''
  def __init__(self, target: InstrumentEffectTarget = InstrumentEffectTarget.VOLUME):
    super().__init__(target)
    self.base     = 1.0
    self.distance = 0.0

  @classmethod
  def from_bytes(cls, reader):
    target = reader.read_u8()
    if not InstrumentEffectTarget.is_defined(target):
      warn('IBNK: random effect has an undefined target %d', target)
      return None

    self = cls(InstrumentEffectTarget(target))
    reader.step(3)

    self.base     = reader.read_f32()
    self.distance = reader.read_f32()
    return self

  def write(self, writer) -> None:
    writer.write_u8(int(self.target))
    writer.write_padding(4)
    writer.write_f32(self.base)
    writer.write_f32(self.distance)
    writer.write_padding(16)

  @classmethod
  def from_yaml(cls, effect_dict: dict):
    self = cls(InstrumentEffectTarget.parse(effect_dict.get('target', 'volume')))
    self.base     = float(effect_dict.get('base', 1.0))
    self.distance = float(effect_dict.get('distance', 0.0))
    return self

  def to_yaml(self) -> dict:
    return {
      "type": "random",
      "target": self.target.xml_name,
      "base": self.base,
      "distance": self.distance
    }


# struct size = 0x10
class SenseEffect(InstrumentEffect):
  ''' Represents a sense effect '''
  def __init__(self, target: InstrumentEffectTarget = InstrumentEffectTarget.VOLUME, trigger: SenseTrigger = SenseTrigger.KEY):
    super().__init__(target)
    self.trigger    = trigger
    self.center_key = 127
    self.range_lo   = 0.0
    self.range_hi   = 1.0

  @classmethod
  def from_bytes(cls, reader):
    target, trigger, center_key = reader.read_u8(), reader.read_u8(), reader.read_u8()

    if not InstrumentEffectTarget.is_defined(target):
      warn('IBNK: sense effect has an undefined target %d', target)
      return None

    if not SenseTrigger.is_defined(trigger):
      warn('IBNK: sense effect has an undefined trigger %d', trigger)
      trigger = SenseTrigger.NONE

    if center_key > 127:
      warn('IBNK: sense effect has a bad center key %d', center_key)
      return None

    self = cls(InstrumentEffectTarget(target), SenseTrigger(trigger))
    self.center_key = center_key
    reader.step(1)

    self.range_lo = reader.read_f32()
    self.range_hi = reader.read_f32()
    return self

  def write(self, writer) -> None:
    writer.write_u8(int(self.target))
    writer.write_u8(int(self.trigger))
    writer.write_u8(self.center_key)
    writer.write_padding(4)
    writer.write_f32(self.range_lo)
    writer.write_f32(self.range_hi)
    writer.write_padding(16)

  @classmethod
  def from_yaml(cls, effect_dict: dict):
    self = cls(
      InstrumentEffectTarget.parse(effect_dict.get('target', 'volume')),
      SenseTrigger.parse(effect_dict.get('trigger', 'key'))
    )
    self.center_key = int(effect_dict.get('center key', 127))
    self.range_lo   = float(effect_dict.get('range lo', 0.0))
    self.range_hi   = float(effect_dict.get('range hi', 1.0))
    return self

  def to_yaml(self) -> dict:
    return {
      "type": "sense",
      "target": self.target.xml_name,
      "trigger": self.trigger.xml_name,
      "center key": self.center_key,
      "range lo": self.range_lo,
      "range hi": self.range_hi
    }

if __name__ == '__main__':
  pass

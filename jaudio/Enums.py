'''
### Enums Module

This module defines enumerations used throughout the project to classify and interpret
constants found in JAudio instrument banks (IBNK), wave banks (WSYS) and their XML form.

Classes:
    `BinaryTag`:
        Four character section tags, stored as 32-bit integers in the stream's byte order.

    `WaveFormat`:
        Enumerates the sample encodings a wave archive can hold.

    `InstrumentEffectTarget`:
        Enumerates the parameters an oscillator or instrument effect can modulate.

    `SenseTrigger`:
        Enumerates the note properties a sense effect can follow.

    `OscillatorTableMode`:
        Enumerates the interpolation and control modes of an oscillator table entry.

    `MixerMode`:
        Enumerates the stereo to mono mixing policies of the Microsoft WAVE mixer.

Functionality:
    - Provides strongly typed constants for use in parsing, validation, and serialization logic.
    - Provides the lower-case names used as XML and YAML attribute values ('xml_name', 'from_xml_name').

Dependencies:
    `enum`:
        Used for defining enumeration types.

Intended Usage:
    This module should be imported wherever constant classification or tag identification
    is needed during XML parsing, binary parsing, or binary conversion.
'''

from enum import *


class XMLNamedEnum(IntEnum):
  ''' Integer enumeration with a lower-case, hyphenated text form '''
  @property
  def xml_name(self) -> str:
    return self.name.lower().replace('_', '-')

  @classmethod
  def from_xml_name(cls, text: str):
    ''' Returns the member named by 'text', or None if there is no such member '''
    if text is None:
      return None

    name = text.strip().upper().replace('-', '_')
    return cls.__members__.get(name)

  @classmethod
  def parse(cls, text: str):
    ''' Like 'from_xml_name', but raises ValueError for unknown names '''
    member = cls.from_xml_name(text)
    if member is None:
      raise ValueError(f"'{text}' is not a valid {cls.__name__}")
    return member

  @classmethod
  def is_defined(cls, value: int) -> bool:
    return value in cls._value2member_map_


class BinaryTag(IntEnum):
  IBNK = 0x49424E4B
  BANK = 0x42414E4B
  INST = 0x494E5354
  PERC = 0x50455243
  PER2 = 0x50455232
  WSYS = 0x57535953
  WINF = 0x57494E46
  WBCT = 0x57424354
  SCNE = 0x53434E45
  C_DF = 0x432D4446
  C_EX = 0x432D4558
  C_ST = 0x432D5354


class WaveFormat(XMLNamedEnum):
  ADPCM4 = 0
  ADPCM2 = 1
  PCM8   = 2
  PCM16  = 3

  @property
  def is_adpcm(self) -> bool:
    return self in (WaveFormat.ADPCM4, WaveFormat.ADPCM2)


class InstrumentEffectTarget(XMLNamedEnum):
  VOLUME = 0
  PITCH  = 1
  PAN    = 2
  FXMIX  = 3
  DOLBY  = 4


class SenseTrigger(XMLNamedEnum):
  NONE     = 0
  VELOCITY = 1
  KEY      = 2


class OscillatorTableMode(XMLNamedEnum):
  LINEAR      = 0
  SQUARE      = 1
  SQUARE_ROOT = 2
  SAMPLE_CELL = 3
  LOOP        = 13
  HOLD        = 14
  STOP        = 15

  @property
  def is_terminal(self) -> bool:
    return self.value > 10


class MixerMode(XMLNamedEnum):
  MIX   = 0
  LEFT  = 1
  RIGHT = 2


if __name__ == '__main__':
  pass

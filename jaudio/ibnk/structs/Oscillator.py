'''
### Oscillator Module

This module defines the `Oscillator` class, which represents an envelope/LFO generator attached to a
melodic instrument in a JAudio instrument bank, together with its start and release tables.

Classes:
    `OscillatorTableEntry`:
        Represents a single (mode, time, amount) point of a start or release table.

    `Oscillator`:
        Represents an oscillator: target, rate, width, base and its two tables.

Functionality:
    - Parse an oscillator from a binary format ('from_bytes').
    - Export an oscillator back to binary format ('write').
    - Convert the oscillator to and from the YAML dictionary form ('to_yaml', 'from_yaml').
    - Provide a structural key ('key') so identical oscillators can share one binary copy.

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.

    `Helpers`:
        For alignment and single precision rounding.

Intended Usage:
    Used by 'MelodicInstrument' and the IBNK binary stages. Oscillators are stored once per bank in
    the oscillator table, and instruments refer to them by offset.
'''
from typing import NamedTuple

# Import helper functions
from ...Helpers import *
from ...Enums import InstrumentEffectTarget, OscillatorTableMode
from ...Console import warn
from ...YAMLSerializer import FlowStyleList


class OscillatorTableEntry(NamedTuple):
  mode: OscillatorTableMode
  time: int
  amount: int


# struct size = 0x20 + tables
class Oscillator:
  ''' Represents an oscillator and its start and release tables '''
  def __init__(self, target: InstrumentEffectTarget = InstrumentEffectTarget.VOLUME):
    self.target = target
    self.rate   = 1.0
    self.width  = 1.0
    self.base   = 0.0

    self.start_table   = []
    self.release_table = []

  @property
  def key(self) -> tuple:
    return (
      int(self.target), to_float32(self.rate), to_float32(self.width), to_float32(self.base),
      tuple((int(e.mode), e.time, e.amount) for e in self.start_table),
      tuple((int(e.mode), e.time, e.amount) for e in self.release_table)
    )

  def __eq__(self, other) -> bool:
    return isinstance(other, Oscillator) and self.key == other.key

  def __hash__(self) -> int:
    return hash(self.key)

  @staticmethod
  def _read_table(reader) -> list[OscillatorTableEntry]:
    table = []

    while True:
      mode = reader.read_s16()
      if not OscillatorTableMode.is_defined(mode):
        warn('IBNK: oscillator table has an undefined mode %d', mode)
        break

      time, amount = reader.read_s16(), reader.read_s16()
      table.append(OscillatorTableEntry(OscillatorTableMode(mode), time, amount))

      # Loop, hold and stop end the table
      if OscillatorTableMode(mode).is_terminal:
        break

    return table

  @classmethod
  def from_bytes(cls, reader):
    target = reader.read_u8()
    if not InstrumentEffectTarget.is_defined(target):
      warn('IBNK: oscillator has an undefined target %d', target)
      return None

    self = cls(InstrumentEffectTarget(target))
    reader.step(3)

    self.rate = reader.read_f32()
    start_offset, release_offset = reader.read_s32(), reader.read_s32()
    self.width = reader.read_f32()
    self.base  = reader.read_f32()

    if start_offset != 0:
      reader.goto(start_offset)
      self.start_table = self._read_table(reader)

    if release_offset != 0:
      reader.goto(release_offset)
      self.release_table = self._read_table(reader)

    return self

  @staticmethod
  def _write_table(writer, table: list[OscillatorTableEntry]):
    for entry in table:
      writer.write_s16(int(entry.mode))
      writer.write_s16(entry.time)
      writer.write_s16(entry.amount)
    writer.write_padding(32)

  def write(self, writer) -> None:
    start_offset = writer.position + 0x20
    release_offset = start_offset + align_to_32(6 * len(self.start_table))

    writer.write_u8(int(self.target))
    writer.write_padding(4)
    writer.write_f32(self.rate)
    writer.write_s32(start_offset if self.start_table else 0)
    writer.write_s32(release_offset if self.release_table else 0)
    writer.write_f32(self.width)
    writer.write_f32(self.base)
    writer.write_padding(32)

    self._write_table(writer, self.start_table)
    self._write_table(writer, self.release_table)

  @classmethod
  def from_yaml(cls, oscillator_dict: dict):
    self = cls(InstrumentEffectTarget.parse(oscillator_dict["target"]))
    self.rate  = float(oscillator_dict.get('rate', 1.0))
    self.width = float(oscillator_dict.get('width', 1.0))
    self.base  = float(oscillator_dict.get('base', 0.0))

    def parse_table(points):
      return [OscillatorTableEntry(OscillatorTableMode.parse(mode), time, amount) for mode, time, amount in points]

    self.start_table   = parse_table(oscillator_dict.get('start table', []))
    self.release_table = parse_table(oscillator_dict.get('release table', []))
    return self

  def to_yaml(self) -> dict:
    return {
      "target": self.target.xml_name,
      "rate": self.rate,
      "width": self.width,
      "base": self.base,
      "start table": [FlowStyleList([e.mode.xml_name, e.time, e.amount]) for e in self.start_table],
      "release table": [FlowStyleList([e.mode.xml_name, e.time, e.amount]) for e in self.release_table]
    }

  @property
  def struct_size(self) -> int:
    return 0x20 + align_to_32(6 * len(self.start_table)) + align_to_32(6 * len(self.release_table))

if __name__ == '__main__':
  pass

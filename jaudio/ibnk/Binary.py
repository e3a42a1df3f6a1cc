'''
### IBNK Binary Module

This module reads and writes the binary instrument bank format.

Layout:
    0x000  'IBNK', total size, virtual number, padded to 0x20
    0x020  'IBNK' (older banks: 'BANK'), 240 instrument offsets, padded to 0x20
    0x400  oscillator table (each distinct oscillator once), then every instrument in program order

All offsets are relative to the start of the bank.

Classes:
    `BinaryDeserializer`:
        Transform stage that parses a bank from big- or little-endian bytes.

    `BinarySerializer`:
        Transform stage that checks a bank against the format limits and writes it.

Functions:
    `check_compatibility`:
        Reports every part of a bank the binary format cannot hold.

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.
'''
from ..BinaryStream import BinaryReader, BinaryWriter
from ..Enums import BinaryTag
from ..Console import message, warn, fatal, warning_count
from ..Transform import Deserializer, Serializer
from .InstrumentBank import InstrumentBank
from .structs.Instrument import MelodicInstrument
from .structs.DrumSet import DrumSet

TABLE_OFFSET = 0x20
TABLE_SLOTS  = 240
DATA_START   = 0x400

MAX_OSCILLATORS    = 2
MAX_RANDOM_EFFECTS = 2
MAX_SENSE_EFFECTS  = 2

def check_compatibility(bank: InstrumentBank) -> bool:
  ''' Warns about every limit the bank exceeds and returns whether there were none '''
  warnings = warning_count()

  for program, instrument in bank:
    if program >= TABLE_SLOTS:
      warn('IBNK: #%d instrument does not fit in the %d program slots', program, TABLE_SLOTS)

    if isinstance(instrument, MelodicInstrument):
      if len(instrument.oscillators) > MAX_OSCILLATORS:
        warn('IBNK: #%d instrument has more than two oscillators', program)
      if len(instrument.random_effects) > MAX_RANDOM_EFFECTS:
        warn('IBNK: #%d instrument has more than two random effects', program)
      if len(instrument.sense_effects) > MAX_SENSE_EFFECTS:
        warn('IBNK: #%d instrument has more than two sense effects', program)

    elif isinstance(instrument, DrumSet):
      for key, percussion in instrument:
        if len(percussion.random_effects) > MAX_RANDOM_EFFECTS:
          warn('IBNK: #%d drum set, #%d percussion has more than two random effects', program, key)
        if percussion.sense_effects:
          warn('IBNK: #%d drum set, #%d percussion has sense effects', program, key)

  return warning_count() == warnings


class BinaryDeserializer(Deserializer):
  ''' Represents the binary bank reader stage '''
  def __init__(self, data: bytes, endian: str):
    self.data   = data
    self.endian = endian

  def deserialize(self) -> InstrumentBank:
    reader = BinaryReader(self.data, self.endian)

    try:
      with reader.anchored():
        return self._read_bank(reader)
    except EOFError as e:
      fatal('IBNK: unexpected end of data (%s)', e)

  def _read_bank(self, reader: BinaryReader) -> InstrumentBank:
    message('Reading IBNK header...')

    if reader.read_u32() != BinaryTag.IBNK:
      fatal('IBNK: could not find header')

    reader.step(4) # Total size
    virtual_number = reader.read_s32()
    if virtual_number < 0:
      fatal('IBNK: bad virtual number %d', virtual_number)

    bank = InstrumentBank(virtual_number)

    reader.goto(TABLE_OFFSET)
    if reader.read_u32() not in (BinaryTag.IBNK, BinaryTag.BANK):
      fatal('IBNK: could not find instrument table')

    offsets = reader.read_s32s(TABLE_SLOTS)
    oscillator_registry = {}

    message('Reading instruments...')
    for program, offset in enumerate(offsets):
      if offset == 0:
        continue

      reader.goto(offset)
      tag = reader.read_u32()
      reader.goto(offset)

      if tag == BinaryTag.INST:
        instrument = MelodicInstrument.from_bytes(reader, oscillator_registry)
      elif tag in (BinaryTag.PERC, BinaryTag.PER2):
        instrument = DrumSet.from_bytes(reader)
      else:
        warn('IBNK: #%d instrument has an unknown type 0x%08X', program, tag)
        continue

      bank.add(program, instrument)

    return bank


class BinarySerializer(Serializer):
  ''' Represents the binary bank writer stage '''
  def __init__(self, stream, endian: str):
    self.stream = stream
    self.endian = endian

  def serialize(self, bank: InstrumentBank) -> None:
    message('Checking bank compatibility...')
    if not check_compatibility(bank):
      fatal('IBNK: instrument bank is incompatible with the binary format')

    # First pass: offsets
    oscillator_table = bank.generate_oscillator_table()
    oscillator_offsets = {}
    offset = DATA_START

    for key, oscillator in oscillator_table.items():
      oscillator_offsets[key] = offset
      offset += oscillator.struct_size

    instrument_offsets = []
    for program in range(TABLE_SLOTS):
      instrument = bank[program]
      if instrument is None:
        instrument_offsets.append(0)
      else:
        instrument_offsets.append(offset)
        offset += instrument.struct_size

    # Second pass: data
    writer = BinaryWriter(self.stream, self.endian)
    with writer.anchored():
      message('Writing IBNK header...')
      writer.write_u32(BinaryTag.IBNK)
      writer.write_s32(offset)
      writer.write_s32(bank.virtual_number)
      writer.write_padding(32)

      writer.write_u32(BinaryTag.IBNK)
      writer.write_s32s(instrument_offsets)
      writer.write_padding(32)

      message('Writing oscillator table...')
      for oscillator in oscillator_table.values():
        oscillator.write(writer)

      message('Writing instruments...')
      for program in range(TABLE_SLOTS):
        instrument = bank[program]
        if isinstance(instrument, MelodicInstrument):
          instrument.write(writer, oscillator_offsets)
        elif isinstance(instrument, DrumSet):
          instrument.write(writer)

if __name__ == '__main__':
  pass

'''
### InstrumentBank Module

This module defines the `InstrumentBank` class, the in-memory model every IBNK transform stage
builds or consumes.

Classes:
    `InstrumentBank`:
        A fixed-capacity collection of instruments indexed by program number, carrying the
        bank's virtual number and display name.

Functionality:
    - Add and look up instruments by program number ('add', '__getitem__').
    - Iterate the used programs in order ('__iter__').
    - Build the deduplicated oscillator table used by the binary writer ('generate_oscillator_table').
    - Convert the bank to and from the YAML dictionary form ('to_yaml', 'from_yaml').

Intended Usage:
    bank = InstrumentBank(virtual_number=3)
    bank.add(0, MelodicInstrument())
'''
from ..Console import warn
from .structs.Instrument import MelodicInstrument
from .structs.DrumSet import DrumSet

DEFAULT_CAPACITY = 256


class InstrumentBank:
  ''' Represents an instrument bank '''
  def __init__(self, virtual_number: int = 0, capacity: int = DEFAULT_CAPACITY):
    self.name = ''
    self.virtual_number = virtual_number
    self.instruments = [None] * capacity

  @property
  def capacity(self) -> int:
    return len(self.instruments)

  def __getitem__(self, program: int):
    return self.instruments[program]

  def __len__(self) -> int:
    return sum(1 for instrument in self.instruments if instrument is not None)

  def __iter__(self):
    ''' Yields (program, instrument) for every used program '''
    for program, instrument in enumerate(self.instruments):
      if instrument is not None:
        yield program, instrument

  def add(self, program: int, instrument) -> bool:
    ''' Stores 'instrument' at 'program', returning False if the slot is taken '''
    if not 0 <= program < self.capacity:
      raise IndexError(f'Program {program} is outside the bank capacity {self.capacity}')

    if self.instruments[program] is not None:
      return False

    self.instruments[program] = instrument
    return True

  def generate_oscillator_table(self) -> dict:
    ''' Returns every distinct oscillator keyed by its structural value, in first-seen order '''
    table = {}

    for _, instrument in self:
      if isinstance(instrument, MelodicInstrument):
        for oscillator in instrument.oscillators:
          table.setdefault(oscillator.key, oscillator)

    return table

  @classmethod
  def from_yaml(cls, bank_dict: dict):
    self = cls(int(bank_dict.get('virtual number', 0)))
    self.name = bank_dict.get('name', '')

    for instrument_dict in bank_dict.get('instruments', []):
      if instrument_dict.get('type') == 'drum set':
        instrument = DrumSet.from_yaml(instrument_dict)
      else:
        instrument = MelodicInstrument.from_yaml(instrument_dict)

      program = int(instrument_dict['program'])
      if not self.add(program, instrument):
        warn('IBNK YAML: duplicate program number %d', program)

    return self

  def to_yaml(self) -> dict:
    return {
      "name": self.name,
      "virtual number": self.virtual_number,
      "instruments": [{"program": program, **instrument.to_yaml()} for program, instrument in self]
    }

if __name__ == '__main__':
  pass

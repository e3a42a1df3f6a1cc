'''
### IBNK Xml Module

This module reads and writes the XML form of an instrument bank:

    <IBNK virtual-number="3">
      <instrument program="0" volume="0.8">
        <oscillator target="volume" rate="1" width="1" base="0">
          <start-table> <linear time="10" offset="32767"/> <hold/> </start-table>
        </oscillator>
        <key-region key="C4"> <velocity-region wave-id="12"/> </key-region>
      </instrument>
      <drum-set program="127">
        <percussion key="C2" pan="0.3"> <velocity-region wave-id="40"/> </percussion>
      </drum-set>
    </IBNK>

Attributes equal to their defaults (volume and pitch 1, pan 0.5, release 0, key and velocity 127
on a lone region, center-key 127) are left out when writing and filled in when reading.

Classes:
    `XmlDeserializer`:
        Transform stage that parses a bank from XML. Recoverable problems are reported as warnings
        and the offending element is skipped; if any warning was reported the whole input is
        rejected once every element has been checked.

    `XmlSerializer`:
        Transform stage that writes a bank as XML.

Dependencies:
    `xml.etree.ElementTree`:
        Used for parsing and building XML trees.

    `XMLParser`:
        For attribute readers and the document writer.
'''
import xml.etree.ElementTree as xml

from ..Enums import InstrumentEffectTarget, OscillatorTableMode, SenseTrigger
from ..Helpers import key_to_name
from ..Console import message, warn, fatal, warning_count
from ..Transform import Deserializer, Serializer
from ..XMLParser import read_int, read_float, read_key, read_enum, set_float, write_xml
from .InstrumentBank import InstrumentBank
from .structs.Oscillator import Oscillator, OscillatorTableEntry
from .structs.Effect import RandomEffect, SenseEffect
from .structs.VelocityRegion import VelocityRegion
from .structs.Instrument import MelodicInstrument
from .structs.DrumSet import DrumSet

''' Reading '''
def _float(element: xml.Element, name: str, default: float) -> float:
  value = read_float(element, name, default)
  if value is None:
    warn("IBNK XML: <%s> has a bad '%s' value '%s'", element.tag, name, element.get(name))
    return default
  return value

def _int(element: xml.Element, name: str, default: int) -> int:
  value = read_int(element, name, default)
  if value is None:
    warn("IBNK XML: <%s> has a bad '%s' value '%s'", element.tag, name, element.get(name))
    return default
  return value

def _read_table(element: xml.Element) -> list[OscillatorTableEntry]:
  table = []

  for child in element:
    mode = OscillatorTableMode.from_xml_name(child.tag)
    if mode is None:
      fatal('IBNK XML: <%s> has an unknown element <%s>', element.tag, child.tag)

    if mode == OscillatorTableMode.LOOP:
      table.append(OscillatorTableEntry(mode, _int(child, 'dest', 0), 0))
    elif mode in (OscillatorTableMode.HOLD, OscillatorTableMode.STOP):
      table.append(OscillatorTableEntry(mode, 0, 0))
    else:
      table.append(OscillatorTableEntry(mode, _int(child, 'time', 0), _int(child, 'offset', 0)))

  return table

def _read_oscillator(element: xml.Element) -> Oscillator:
  target = read_enum(element, 'target', InstrumentEffectTarget)
  if target is None:
    fatal("IBNK XML: <oscillator> has a missing or bad 'target'")

  oscillator = Oscillator(target)
  oscillator.rate  = _float(element, 'rate', 1.0)
  oscillator.width = _float(element, 'width', 1.0)
  oscillator.base  = _float(element, 'base', 0.0)

  for child in element:
    if child.tag == 'start-table':
      oscillator.start_table = _read_table(child)
    elif child.tag == 'release-table':
      oscillator.release_table = _read_table(child)

  return oscillator

def _read_effect(element: xml.Element):
  target = read_enum(element, 'target', InstrumentEffectTarget, InstrumentEffectTarget.VOLUME)
  if target is None:
    warn("IBNK XML: <%s> has a bad 'target' value '%s'", element.tag, element.get('target'))
    return None

  if element.tag == 'random-effect':
    effect = RandomEffect(target)
    effect.base     = _float(element, 'base', 1.0)
    effect.distance = _float(element, 'distance', 0.0)
    return effect

  trigger = read_enum(element, 'trigger', SenseTrigger, SenseTrigger.KEY)
  if trigger is None:
    warn("IBNK XML: <sense-effect> has a bad 'trigger' value '%s'", element.get('trigger'))
    return None

  center_key = read_key(element, 'center-key', 127)
  if center_key is None or center_key > 127:
    warn("IBNK XML: <sense-effect> has a bad 'center-key' value '%s'", element.get('center-key'))
    return None

  effect = SenseEffect(target, trigger)
  effect.center_key = center_key
  effect.range_lo   = _float(element, 'range-lo', 0.0)
  effect.range_hi   = _float(element, 'range-hi', 1.0)
  return effect

def _read_velocity_region(element: xml.Element):
  velocity = read_int(element, 'velocity', 127)
  if velocity is None or not 0 <= velocity <= 127:
    warn("IBNK XML: <velocity-region> has a bad 'velocity' value '%s'", element.get('velocity'))
    return None

  wave_id = read_int(element, 'wave-id')
  if wave_id is None or wave_id < 0:
    warn("IBNK XML: <velocity-region> has a missing or bad 'wave-id'")
    return None

  region = VelocityRegion(velocity, wave_id)
  region.volume = _float(element, 'volume', 1.0)
  region.pitch  = _float(element, 'pitch', 1.0)
  return region

def _read_velocity_regions(element: xml.Element, owner) -> None:
  for child in element.iter('velocity-region'):
    region = _read_velocity_region(child)
    if region is not None and not owner.add_velocity_region(region):
      warn('IBNK XML: duplicate <velocity-region> for velocity %d', region.velocity)

def _read_melodic(element: xml.Element) -> MelodicInstrument:
  instrument = MelodicInstrument()
  instrument.volume = _float(element, 'volume', 1.0)
  instrument.pitch  = _float(element, 'pitch', 1.0)

  for child in element:
    if child.tag == 'oscillator':
      instrument.oscillators.append(_read_oscillator(child))

    elif child.tag in ('random-effect', 'sense-effect'):
      effect = _read_effect(child)
      if effect is not None:
        instrument.effects.append(effect)

    elif child.tag == 'key-region':
      key = read_key(child, 'key', 127)
      if key is None or key > 127:
        warn("IBNK XML: <key-region> has a bad 'key' value '%s'", child.get('key'))
        continue

      region = instrument.add_key_region(key)
      if region is None:
        warn('IBNK XML: duplicate <key-region> for key %d', key)
        continue

      _read_velocity_regions(child, region)

  return instrument

def _read_drum_set(element: xml.Element) -> DrumSet:
  drum_set = DrumSet()

  for child in element.iter('percussion'):
    key = read_key(child, 'key')
    if key is None or key > 127:
      warn("IBNK XML: <percussion> has a missing or bad 'key'")
      continue

    percussion = drum_set.add_percussion(key)
    if percussion is None:
      warn('IBNK XML: duplicate <percussion> for key %d', key)
      continue

    percussion.volume  = _float(child, 'volume', 1.0)
    percussion.pitch   = _float(child, 'pitch', 1.0)
    percussion.pan     = _float(child, 'pan', 0.5)
    percussion.release = _int(child, 'release', 0)

    for effect_element in child:
      if effect_element.tag in ('random-effect', 'sense-effect'):
        effect = _read_effect(effect_element)
        if effect is not None:
          percussion.effects.append(effect)

    _read_velocity_regions(child, percussion)

  return drum_set


class XmlDeserializer(Deserializer):
  ''' Represents the XML bank reader stage '''
  def __init__(self, source):
    self.source = source

  def deserialize(self) -> InstrumentBank:
    try:
      root = xml.parse(self.source).getroot()
    except xml.ParseError as e:
      fatal('IBNK XML: %s', e)

    warnings = warning_count()

    virtual_number = read_int(root, 'virtual-number')
    if virtual_number is None or virtual_number < 0:
      fatal("IBNK XML: <%s> has a missing or bad 'virtual-number'", root.tag)

    bank = InstrumentBank(virtual_number)

    message('Reading instruments...')
    for element in root:
      if element.tag == 'instrument':
        instrument = _read_melodic(element)
      elif element.tag == 'drum-set':
        instrument = _read_drum_set(element)
      else:
        continue

      program = read_int(element, 'program')
      if program is None or not 0 <= program < bank.capacity:
        warn("IBNK XML: <%s> has a missing or bad 'program'", element.tag)
        continue

      if not bank.add(program, instrument):
        warn('IBNK XML: duplicate program number %d', program)

    if warning_count() != warnings:
      fatal('IBNK XML: bad input xml')

    return bank


''' Writing '''
def _write_table(parent: xml.Element, tag: str, table: list[OscillatorTableEntry]) -> None:
  if not table:
    return

  element = xml.SubElement(parent, tag)
  for entry in table:
    child = xml.SubElement(element, entry.mode.xml_name)
    if entry.mode == OscillatorTableMode.LOOP:
      child.set('dest', str(entry.time))
    elif entry.mode not in (OscillatorTableMode.HOLD, OscillatorTableMode.STOP):
      child.set('time', str(entry.time))
      child.set('offset', str(entry.amount))

def _write_oscillator(parent: xml.Element, oscillator: Oscillator) -> None:
  element = xml.SubElement(parent, 'oscillator')
  element.set('target', oscillator.target.xml_name)
  set_float(element, 'rate', oscillator.rate)
  set_float(element, 'width', oscillator.width)
  set_float(element, 'base', oscillator.base)

  _write_table(element, 'start-table', oscillator.start_table)
  _write_table(element, 'release-table', oscillator.release_table)

def _write_effect(parent: xml.Element, effect) -> None:
  if isinstance(effect, RandomEffect):
    element = xml.SubElement(parent, 'random-effect')
    element.set('target', effect.target.xml_name)
    set_float(element, 'base', effect.base)
    set_float(element, 'distance', effect.distance)

  elif isinstance(effect, SenseEffect):
    element = xml.SubElement(parent, 'sense-effect')
    element.set('target', effect.target.xml_name)
    element.set('trigger', effect.trigger.xml_name)
    if effect.center_key < 127:
      element.set('center-key', key_to_name(effect.center_key))
    set_float(element, 'range-lo', effect.range_lo)
    set_float(element, 'range-hi', effect.range_hi)

def _write_volume_pitch(element: xml.Element, owner) -> None:
  if owner.volume != 1.0:
    set_float(element, 'volume', owner.volume)
  if owner.pitch != 1.0:
    set_float(element, 'pitch', owner.pitch)

def _write_velocity_regions(parent: xml.Element, regions: list[VelocityRegion]) -> None:
  for region in regions:
    element = xml.SubElement(parent, 'velocity-region')
    if len(regions) > 1 or region.velocity != 127:
      element.set('velocity', str(region.velocity))
    element.set('wave-id', str(region.wave_id))
    _write_volume_pitch(element, region)

def _write_melodic(root: xml.Element, program: int, instrument: MelodicInstrument) -> None:
  element = xml.SubElement(root, 'instrument')
  element.set('program', str(program))
  _write_volume_pitch(element, instrument)

  for oscillator in instrument.oscillators:
    _write_oscillator(element, oscillator)

  for effect in instrument.effects:
    _write_effect(element, effect)

  for region in instrument.key_regions:
    child = xml.SubElement(element, 'key-region')
    if len(instrument.key_regions) > 1 or region.key != 127:
      child.set('key', key_to_name(region.key))
    _write_velocity_regions(child, region.velocity_regions)

def _write_drum_set(root: xml.Element, program: int, drum_set: DrumSet) -> None:
  element = xml.SubElement(root, 'drum-set')
  element.set('program', str(program))

  for key, percussion in drum_set:
    child = xml.SubElement(element, 'percussion')
    child.set('key', key_to_name(key))
    _write_volume_pitch(child, percussion)
    if percussion.pan != 0.5:
      set_float(child, 'pan', percussion.pan)
    if percussion.release != 0:
      child.set('release', str(percussion.release))

    for effect in percussion.effects:
      _write_effect(child, effect)

    _write_velocity_regions(child, percussion.velocity_regions)


class XmlSerializer(Serializer):
  ''' Represents the XML bank writer stage '''
  def __init__(self, stream):
    self.stream = stream

  def serialize(self, bank: InstrumentBank) -> None:
    root = xml.Element('IBNK')
    root.set('virtual-number', str(bank.virtual_number))

    message('Writing instruments...')
    for program, instrument in bank:
      if isinstance(instrument, MelodicInstrument):
        _write_melodic(root, program, instrument)
      elif isinstance(instrument, DrumSet):
        _write_drum_set(root, program, instrument)

    write_xml(root, self.stream)

if __name__ == '__main__':
  pass

'''
### WSYS Xml Module

This module reads and writes the XML form of a wave bank:

    <wave-bank name="Voice">
      <wave-group archive="Voice_0.aw">
        <wave id="12" file="Voice_0_00012.adpcm4.raw" format="adpcm4" rate="32000" loop-start="0" loop-end="4096"/>
      </wave-group>
    </wave-bank>

Archive ranges, sample counts and history seeds are not part of the XML form; the wave archive
packer fills them in from the wave files when the bank is converted to binary.

Classes:
    `XmlDeserializer`:
        Transform stage that parses a wave bank from XML.

    `XmlSerializer`:
        Transform stage that writes a wave bank as XML.
'''
import xml.etree.ElementTree as xml

from ..Enums import WaveFormat
from ..Console import message, warn, fatal, warning_count
from ..Transform import Deserializer, Serializer
from ..XMLParser import read_str, read_int, read_float, read_key, read_enum, set_float, write_xml
from .WaveBank import DEFAULT_ROOT_KEY, Wave, WaveGroup, WaveBank

def _read_wave(element: xml.Element):
  wave_id = read_int(element, 'id')
  if wave_id is None or not 0 <= wave_id <= 0xFFFF:
    warn("WSYS XML: <wave> has a missing or bad 'id'")
    return None

  wave_format = read_enum(element, 'format', WaveFormat)
  if wave_format is None:
    warn("WSYS XML: wave #%d has a missing or bad 'format'", wave_id)
    return None

  file_name = read_str(element, 'file')
  if not file_name:
    warn("WSYS XML: wave #%d has no 'file'", wave_id)
    return None

  wave = Wave(wave_id, wave_format)
  wave.file_name = file_name

  root_key = read_key(element, 'key', DEFAULT_ROOT_KEY)
  if root_key is None or root_key > 127:
    warn("WSYS XML: wave #%d has a bad 'key' value '%s'", wave_id, element.get('key'))
  else:
    wave.root_key = root_key

  sample_rate = read_float(element, 'rate', 0.0)
  if sample_rate is None or sample_rate < 0:
    warn("WSYS XML: wave #%d has a bad 'rate' value '%s'", wave_id, element.get('rate'))
  else:
    wave.sample_rate = sample_rate

  loop_start = read_int(element, 'loop-start')
  loop_end   = read_int(element, 'loop-end')

  if (loop_start is None) != (loop_end is None):
    warn("WSYS XML: wave #%d needs both 'loop-start' and 'loop-end'", wave_id)
  elif loop_start is not None:
    if loop_start < 0 or loop_end < loop_start:
      warn('WSYS XML: wave #%d has a bad loop (%d, %d)', wave_id, loop_start, loop_end)
    else:
      wave.loop = True
      wave.loop_start, wave.loop_end = loop_start, loop_end

  return wave


class XmlDeserializer(Deserializer):
  ''' Represents the XML wave bank reader stage '''
  def __init__(self, source):
    self.source = source

  def deserialize(self) -> WaveBank:
    try:
      root = xml.parse(self.source).getroot()
    except xml.ParseError as e:
      fatal('WSYS XML: %s', e)

    if root.tag != 'wave-bank':
      fatal("WSYS XML: expected <wave-bank> but found <%s>", root.tag)

    warnings = warning_count()
    bank = WaveBank(read_str(root, 'name', ''))

    message('Reading wave groups...')
    for element in root.iter('wave-group'):
      archive_name = read_str(element, 'archive')
      if not archive_name:
        warn("WSYS XML: <wave-group> has no 'archive'")
        continue

      group = WaveGroup(archive_name)
      for child in element.iter('wave'):
        wave = _read_wave(child)
        if wave is not None:
          group.waves.append(wave)

      bank.groups.append(group)

    if warning_count() != warnings:
      fatal('WSYS XML: bad input xml')

    return bank


class XmlSerializer(Serializer):
  ''' Represents the XML wave bank writer stage '''
  def __init__(self, stream):
    self.stream = stream

  def serialize(self, bank: WaveBank) -> None:
    root = xml.Element('wave-bank')
    if bank.name:
      root.set('name', bank.name)

    message('Writing wave groups...')
    for group in bank.groups:
      element = xml.SubElement(root, 'wave-group')
      element.set('archive', group.archive_name)

      for wave in group.waves:
        child = xml.SubElement(element, 'wave')
        child.set('id', str(wave.wave_id))
        child.set('file', wave.file_name)
        child.set('format', wave.format.xml_name)
        set_float(child, 'rate', wave.sample_rate)

        if wave.root_key != DEFAULT_ROOT_KEY:
          child.set('key', str(wave.root_key))

        if wave.loop:
          child.set('loop-start', str(wave.loop_start))
          child.set('loop-end', str(wave.loop_end))

    write_xml(root, self.stream)

if __name__ == '__main__':
  pass

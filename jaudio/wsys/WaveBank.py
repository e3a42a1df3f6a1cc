'''
### WaveBank Module

This module defines the in-memory model of a wave system bank (WSYS): wave groups, each backed by
one archive file, holding the waves an instrument bank refers to by id.

Classes:
    `Wave`:
        Represents a single wave: id, format, root key, sample rate, its byte range in the archive,
        loop bounds, sample count and the ADPCM history at the loop start.

    `WaveGroup`:
        Represents a wave group: its archive file name and its waves.

    `WaveBank`:
        Represents a wave bank: a name and its wave groups.

Functionality:
    - Parse a wave from a binary format ('Wave.from_bytes').
    - Export a wave back to binary format ('Wave.write').
    - Convert the model to and from the YAML dictionary form ('to_yaml', 'from_yaml').

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.

    `Helpers`:
        For deriving sample counts from payload sizes.
'''
# Import helper functions
from ..Helpers import *
from ..Enums import WaveFormat
from ..Console import warn, fatal
from ..YAMLSerializer import FlowStyleList

WAVE_SIZE = 0x30
DEFAULT_ROOT_KEY = 60


# struct size = 0x30
class Wave:
  ''' Represents a wave '''
  def __init__(self, wave_id: int = 0, wave_format: WaveFormat = WaveFormat.ADPCM4):
    self.wave_id     = wave_id
    self.format      = wave_format
    self.root_key    = DEFAULT_ROOT_KEY
    self.sample_rate = 0.0

    self.wave_start = 0
    self.wave_size  = 0

    self.loop       = False
    self.loop_start = 0
    self.loop_end   = 0

    self.sample_count   = 0
    self.history_last   = 0
    self.history_penult = 0

    # External file holding the audio data, relative to the wave directory
    self.file_name = ''

  @classmethod
  def from_bytes(cls, reader, wave_id: int):
    ''' Reads the record that follows the wave id '''
    self = cls(wave_id)
    reader.step(1)

    wave_format = reader.read_u8()
    if not WaveFormat.is_defined(wave_format):
      fatal('WSYS: wave #%d has a bad format %d', wave_id, wave_format)
    self.format = WaveFormat(wave_format)

    self.root_key = reader.read_u8()
    if self.root_key > 127:
      fatal('WSYS: wave #%d has a bad root key %d', wave_id, self.root_key)

    reader.step(1)
    self.sample_rate = reader.read_f32()
    if self.sample_rate < 0:
      fatal('WSYS: wave #%d has a bad sample rate %s', wave_id, self.sample_rate)

    self.wave_start, self.wave_size = reader.read_s32(), reader.read_s32()
    if self.wave_start < 0 or self.wave_size < 0:
      fatal('WSYS: wave #%d has a bad archive range', wave_id)

    self.loop = reader.read_u32() != 0
    self.loop_start, self.loop_end = reader.read_s32(), reader.read_s32()
    reader.step(4) # Stored sample count, recomputed below
    self.history_last, self.history_penult = reader.read_s16(), reader.read_s16()

    self.sample_count = calculate_sample_count(self.format, self.wave_size)

    if self.loop_start > self.loop_end:
      warn('WSYS: wave #%d has a loop start (%d) past its loop end (%d)', wave_id, self.loop_start, self.loop_end)
    if self.loop_start > self.sample_count or self.loop_end > self.sample_count:
      warn('WSYS: wave #%d has a loop past its sample count (%d)', wave_id, self.sample_count)

    return self

  def write(self, writer) -> None:
    writer.write_s32(self.wave_id & 0xFFFF)
    writer.write_u8(0xFF)
    writer.write_u8(int(self.format))
    writer.write_u8(self.root_key)
    writer.write_padding(4)
    writer.write_f32(self.sample_rate)
    writer.write_s32(self.wave_start)
    writer.write_s32(self.wave_size)
    writer.write_s32(-1 if self.loop else 0)
    writer.write_s32(self.loop_start if self.loop else 0)
    writer.write_s32(self.loop_end if self.loop else 0)
    writer.write_s32(self.sample_count)
    writer.write_s16(self.history_last if self.loop else 0)
    writer.write_s16(self.history_penult if self.loop else 0)
    writer.write_s32(0)
    writer.write_s32(0x1D8)

  @classmethod
  def from_yaml(cls, wave_dict: dict):
    self = cls(int(wave_dict['id']), WaveFormat.parse(wave_dict['format']))
    self.file_name   = wave_dict.get('file', '')
    self.root_key    = int(wave_dict.get('key', DEFAULT_ROOT_KEY))
    self.sample_rate = float(wave_dict.get('rate', 0.0))
    self.wave_start  = int(wave_dict.get('start', 0))
    self.wave_size   = int(wave_dict.get('size', 0))

    loop = wave_dict.get('loop')
    if loop is not None:
      self.loop = True
      self.loop_start, self.loop_end = int(loop[0]), int(loop[1])

    self.sample_count = int(wave_dict.get('sample count', 0))
    self.history_last, self.history_penult = (int(h) for h in wave_dict.get('history', [0, 0]))
    return self

  def to_yaml(self) -> dict:
    wave_dict = {
      "id": self.wave_id,
      "file": self.file_name,
      "format": self.format.xml_name,
      "key": self.root_key,
      "rate": self.sample_rate,
      "start": self.wave_start,
      "size": self.wave_size,
      "sample count": self.sample_count,
      "history": FlowStyleList([self.history_last, self.history_penult])
    }

    if self.loop:
      wave_dict["loop"] = FlowStyleList([self.loop_start, self.loop_end])

    return wave_dict

  @property
  def struct_size(self) -> int:
    return WAVE_SIZE


class WaveGroup:
  ''' Represents a wave group '''
  def __init__(self, archive_name: str = ''):
    self.archive_name = archive_name
    self.waves = []

  @classmethod
  def from_yaml(cls, group_dict: dict):
    self = cls(group_dict['archive'])
    self.waves = [Wave.from_yaml(w) for w in group_dict.get('waves', [])]
    return self

  def to_yaml(self) -> dict:
    return {
      "archive": self.archive_name,
      "waves": [wave.to_yaml() for wave in self.waves]
    }

  @property
  def struct_size(self) -> int:
    count = len(self.waves)
    return align_to_32(116 + 4 * count) + align_to_32(WAVE_SIZE * count) + align_to_32(8 + 4 * count) + 0x60


class WaveBank:
  ''' Represents a wave bank '''
  def __init__(self, name: str = ''):
    self.name = name
    self.groups = []

  def __iter__(self):
    return iter(self.groups)

  def __len__(self) -> int:
    return len(self.groups)

  def waves(self):
    ''' Yields (group, wave) for every wave in the bank '''
    for group in self.groups:
      for wave in group.waves:
        yield group, wave

  @classmethod
  def from_yaml(cls, bank_dict: dict):
    self = cls(bank_dict.get('name', ''))
    self.groups = [WaveGroup.from_yaml(g) for g in bank_dict.get('groups', [])]
    return self

  def to_yaml(self) -> dict:
    return {
      "name": self.name,
      "groups": [group.to_yaml() for group in self.groups]
    }

if __name__ == '__main__':
  pass

'''
### WSYS Binary Module

This module reads and writes the binary wave system format.

Layout:
    0x00   'WSYS', total size, two unused words, WINF offset, WBCT offset, padded to 0x20
    WINF   'WINF', group count, group offsets, padded to 0x20
    WBCT   'WBCT', unused word, scene count, scene offsets, padded to 0x20
    groups archive name (0x70 bytes), wave count, wave record offsets, padded to 0x20;
           0x30-byte wave records, padded to 0x20;
           'C-DF' id table, 'C-EX' and 'C-ST' (always empty), 'SCNE' pointing at all three

All offsets are relative to the start of the bank.

Classes:
    `BinaryDeserializer`:
        Transform stage that parses a wave bank from big- or little-endian bytes.

    `BinarySerializer`:
        Transform stage that writes a wave bank.

Dependencies:
    `BinaryStream`:
        For anchored, endian-aware reading and writing.
'''
from ..BinaryStream import BinaryReader, BinaryWriter
from ..Helpers import align_to_32
from ..Enums import BinaryTag
from ..Console import message, warn, fatal
from ..Transform import Deserializer, Serializer
from .WaveBank import WAVE_SIZE, Wave, WaveGroup, WaveBank

HEADER_SIZE = 0x20
ARCHIVE_NAME_SIZE = 0x70

def _expect(reader: BinaryReader, tag: BinaryTag) -> None:
  if reader.read_u32() != tag:
    fatal("WSYS: could not find '%s' at 0x%X", tag.name.replace('_', '-'), reader.position - 4)


class BinaryDeserializer(Deserializer):
  ''' Represents the binary wave bank reader stage '''
  def __init__(self, data: bytes, endian: str):
    self.data   = data
    self.endian = endian

  def deserialize(self) -> WaveBank:
    reader = BinaryReader(self.data, self.endian)

    try:
      with reader.anchored():
        return self._read_bank(reader)
    except EOFError as e:
      fatal('WSYS: unexpected end of data (%s)', e)

  def _read_bank(self, reader: BinaryReader) -> WaveBank:
    message('Reading WSYS header...')
    _expect(reader, BinaryTag.WSYS)
    reader.step(12) # Size and two unused words
    winf_offset, wbct_offset = reader.read_s32(), reader.read_s32()

    reader.goto(winf_offset)
    _expect(reader, BinaryTag.WINF)
    group_offsets = reader.read_s32s(reader.read_s32())

    reader.goto(wbct_offset)
    _expect(reader, BinaryTag.WBCT)
    reader.step(4)
    scene_offsets = reader.read_s32s(reader.read_s32())

    if len(group_offsets) != len(scene_offsets):
      fatal('WSYS: WINF count (%d) does not match WBCT count (%d)', len(group_offsets), len(scene_offsets))

    bank = WaveBank()

    message('Reading wave groups...')
    for group_offset, scene_offset in zip(group_offsets, scene_offsets):
      bank.groups.append(self._read_group(reader, group_offset, scene_offset))

    return bank

  def _read_group(self, reader: BinaryReader, group_offset: int, scene_offset: int) -> WaveGroup:
    reader.goto(group_offset)
    group = WaveGroup(reader.read_cstring(ARCHIVE_NAME_SIZE))
    info_offsets = reader.read_s32s(reader.read_s32())

    reader.goto(scene_offset)
    _expect(reader, BinaryTag.SCNE)
    reader.step(8)
    reader.goto(reader.read_s32())

    _expect(reader, BinaryTag.C_DF)
    id_offsets = reader.read_s32s(reader.read_s32())

    if len(id_offsets) != len(info_offsets):
      fatal("WSYS: '%s' C-DF count (%d) does not match its wave count (%d)", group.archive_name, len(id_offsets), len(info_offsets))

    for id_offset, info_offset in zip(id_offsets, info_offsets):
      reader.goto(id_offset)
      wave_id = reader.read_s32() & 0xFFFF

      reader.goto(info_offset)
      group.waves.append(Wave.from_bytes(reader, wave_id))

    return group


class BinarySerializer(Serializer):
  ''' Represents the binary wave bank writer stage '''
  def __init__(self, stream, endian: str):
    self.stream = stream
    self.endian = endian

  def serialize(self, bank: WaveBank) -> None:
    count = len(bank.groups)
    winf_size = align_to_32(8 + 4 * count)
    wbct_size = align_to_32(12 + 4 * count)

    # First pass: offsets
    offset = HEADER_SIZE + winf_size + wbct_size
    group_offsets, scene_offsets = [], []

    for group in bank.groups:
      waves = len(group.waves)
      group_offsets.append(offset)
      scene_offsets.append(
        offset + align_to_32(116 + 4 * waves) + align_to_32(WAVE_SIZE * waves) + align_to_32(8 + 4 * waves) + 0x40
      )
      offset += group.struct_size

    # Second pass: data
    writer = BinaryWriter(self.stream, self.endian)
    with writer.anchored():
      message('Writing WSYS header...')
      writer.write_u32(BinaryTag.WSYS)
      writer.write_s32(offset)
      writer.write_s32s([0, 0])
      writer.write_s32(HEADER_SIZE)
      writer.write_s32(HEADER_SIZE + winf_size)
      writer.write_padding(32)

      writer.write_u32(BinaryTag.WINF)
      writer.write_s32(count)
      writer.write_s32s(group_offsets)
      writer.write_padding(32)

      writer.write_u32(BinaryTag.WBCT)
      writer.write_s32(0)
      writer.write_s32(count)
      writer.write_s32s(scene_offsets)
      writer.write_padding(32)

      message('Writing wave groups...')
      for group in bank.groups:
        self._write_group(writer, group)

  def _write_group(self, writer: BinaryWriter, group: WaveGroup) -> None:
    if len(group.archive_name) >= ARCHIVE_NAME_SIZE:
      warn("WSYS: archive name '%s' is longer than %d characters", group.archive_name, ARCHIVE_NAME_SIZE - 1)

    waves_offset = writer.position + align_to_32(116 + 4 * len(group.waves))

    writer.write_cstring(group.archive_name, ARCHIVE_NAME_SIZE)
    writer.write_s32(len(group.waves))
    writer.write_s32s([waves_offset + WAVE_SIZE * i + 4 for i in range(len(group.waves))])
    writer.write_padding(32)

    for wave in group.waves:
      wave.write(writer)
    writer.write_padding(32)

    cdf_offset = writer.position
    writer.write_u32(BinaryTag.C_DF)
    writer.write_s32(len(group.waves))
    writer.write_s32s([waves_offset + WAVE_SIZE * i for i in range(len(group.waves))])
    writer.write_padding(32)

    cex_offset = writer.position
    writer.write_u32(BinaryTag.C_EX)
    writer.write_padding(32)

    cst_offset = writer.position
    writer.write_u32(BinaryTag.C_ST)
    writer.write_padding(32)

    writer.write_u32(BinaryTag.SCNE)
    writer.write_s32s([0, 0, cdf_offset, cex_offset, cst_offset])
    writer.write_padding(32)

if __name__ == '__main__':
  pass

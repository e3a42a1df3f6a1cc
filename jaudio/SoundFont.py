'''
### SoundFont Module

This module assembles SoundFont 2 ('sfbk') files: an INFO list, a sample pool and the preset,
instrument and sample header tables of the 'pdta' list.

Classes:
    `SoundFontBuilder`:
        Collects presets, instruments and samples, then packs them into a RIFF file ('build').

Functions:
    `centibels`, `cents`, `timecents`:
        Convert linear volume, pitch ratios and durations into SoundFont generator units.

Dependencies:
    `Helpers`:
        For the RIFF chunk builders and 'struct'.

Intended Usage:
    builder = SoundFontBuilder('bank')
    instrument = builder.add_instrument('00003-00000', [[(GEN_KEY_RANGE, (0, 127)), (GEN_SAMPLE_ID, 12)]])
    builder.add_preset('00003-00000', 0, 3, [[(GEN_INSTRUMENT, instrument)]])
    data = builder.build()
'''
import math

from .Helpers import riff_chunk, list_chunk, struct

# Generator operators
GEN_PAN                 = 17
GEN_ATTACK_VOL_ENV      = 34
GEN_DECAY_VOL_ENV       = 36
GEN_SUSTAIN_VOL_ENV     = 37
GEN_RELEASE_VOL_ENV     = 38
GEN_INSTRUMENT          = 41
GEN_KEY_RANGE           = 43 # lo byte = low key, hi byte = high key
GEN_VEL_RANGE           = 44
GEN_INITIAL_ATTENUATION = 48 # centibels
GEN_COARSE_TUNE         = 51
GEN_FINE_TUNE           = 52
GEN_SAMPLE_ID           = 53
GEN_SAMPLE_MODES        = 54 # bit 0: loop
GEN_OVERRIDING_ROOT_KEY = 58

SAMPLE_GAP = 46 # zero samples required after every sample
MONO_SAMPLE = 1

''' Unit Conversion '''
def _clamp(value: float, low: int, high: int) -> int:
  return max(low, min(high, int(round(value))))

def centibels(volume: float) -> int:
  if volume <= 0.0:
    return 1440
  return _clamp(-200.0 * math.log10(volume), 0, 1440)

def cents(pitch: float) -> int:
  if pitch <= 0.0:
    return 0
  return _clamp(1200.0 * math.log2(pitch), -12000, 12000)

def timecents(seconds: float) -> int:
  if seconds <= 0.0:
    return -12000
  return _clamp(1200.0 * math.log2(seconds), -12000, 8000)

def tuning(pitch: float) -> list[tuple]:
  ''' Splits a pitch ratio into coarse (semitone) and fine (cent) tune generators '''
  total = cents(pitch)
  coarse = int(total / 100)
  return [(GEN_COARSE_TUNE, coarse), (GEN_FINE_TUNE, total - coarse * 100)]


''' Record Packers '''
def _name20(name: str) -> bytes:
  return name.encode('ascii', errors='replace')[:20].ljust(20, b'\x00')

def _generator(oper: int, amount) -> bytes:
  if isinstance(amount, tuple):
    low, high = amount
    return struct.pack('<H2B', oper, low & 0xFF, high & 0xFF)
  return struct.pack('<2H', oper, int(amount) & 0xFFFF)

def _zone_table(headers: list[tuple]) -> tuple:
  ''' Packs (header, zones) pairs into header, bag and generator records '''
  bags, generators = b'', b''
  bag_index = generator_index = 0
  packed_headers = b''

  for header, zones in headers:
    packed_headers += header(bag_index)
    for zone in zones:
      bags += struct.pack('<2H', generator_index, 0)
      for oper, amount in zone:
        generators += _generator(oper, amount)
        generator_index += 1
      bag_index += 1

  return packed_headers, bags, generators, bag_index, generator_index


class SoundFontBuilder:
  ''' Represents a SoundFont under construction '''
  def __init__(self, name: str):
    self.name = name
    self.presets     = []
    self.instruments = []
    self.samples     = []
    self.sample_data = bytearray()

  def add_preset(self, name: str, preset: int, bank: int, zones: list[list[tuple]]) -> int:
    self.presets.append((name, preset, bank, zones))
    return len(self.presets) - 1

  def add_instrument(self, name: str, zones: list[list[tuple]]) -> int:
    self.instruments.append((name, zones))
    return len(self.instruments) - 1

  def add_sample(self, name: str, pcm16: bytes, sample_rate: float, root_key: int, loop: tuple[int, int] = None) -> int:
    ''' Appends little-endian PCM16 data to the pool, followed by the mandatory silence '''
    start = len(self.sample_data) // 2
    end = start + len(pcm16) // 2

    if loop is not None:
      loop_start, loop_end = start + loop[0], start + loop[1]
    else:
      loop_start, loop_end = start, end

    self.sample_data += pcm16
    self.sample_data += b'\x00' * (SAMPLE_GAP * 2)

    self.samples.append((name, start, end, loop_start, loop_end, int(sample_rate), root_key))
    return len(self.samples) - 1

  def _info(self) -> bytes:
    return list_chunk(b'INFO', [
      riff_chunk(b'ifil', struct.pack('<2H', 2, 1)),
      riff_chunk(b'isng', b'EMU8000\x00'),
      riff_chunk(b'INAM', self.name[:255].encode('ascii', errors='replace') + b'\x00'),
    ])

  def _pdta(self) -> bytes:
    presets = [
      (lambda bag, name=name, preset=preset, bank=bank: _name20(name) + struct.pack('<3H3I', preset, bank, bag, 0, 0, 0), zones)
      for name, preset, bank, zones in self.presets
    ]
    phdr, pbag, pgen, bag_count, gen_count = _zone_table(presets)
    phdr += _name20('EOP') + struct.pack('<3H3I', 0xFF, 0xFF, bag_count, 0, 0, 0)
    pbag += struct.pack('<2H', gen_count, 0)
    pgen += _generator(0, 0)

    instruments = [
      (lambda bag, name=name: _name20(name) + struct.pack('<H', bag), zones)
      for name, zones in self.instruments
    ]
    inst, ibag, igen, bag_count, gen_count = _zone_table(instruments)
    inst += _name20('EOI') + struct.pack('<H', bag_count)
    ibag += struct.pack('<2H', gen_count, 0)
    igen += _generator(0, 0)

    shdr = b''
    for name, start, end, loop_start, loop_end, rate, root_key in self.samples:
      shdr += _name20(name) + struct.pack('<5IBb2H', start, end, loop_start, loop_end, rate, root_key, 0, 0, MONO_SAMPLE)
    shdr += _name20('EOS') + struct.pack('<5IBb2H', 0, 0, 0, 0, 0, 0, 0, 0, 0)

    terminal_modulator = b'\x00' * 10
    return list_chunk(b'pdta', [
      riff_chunk(b'phdr', phdr),
      riff_chunk(b'pbag', pbag),
      riff_chunk(b'pmod', terminal_modulator),
      riff_chunk(b'pgen', pgen),
      riff_chunk(b'inst', inst),
      riff_chunk(b'ibag', ibag),
      riff_chunk(b'imod', terminal_modulator),
      riff_chunk(b'igen', igen),
      riff_chunk(b'shdr', shdr),
    ])

  def build(self) -> bytes:
    sdta = list_chunk(b'sdta', [riff_chunk(b'smpl', bytes(self.sample_data))])
    return riff_chunk(b'RIFF', b'sfbk' + self._info() + sdta + self._pdta())

if __name__ == '__main__':
  pass

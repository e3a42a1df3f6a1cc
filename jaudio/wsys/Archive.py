'''
### Archive Module

This module moves audio data between the archive files of a wave bank and standalone wave files.

Classes:
    `WavePacker`:
        Transform stage used when converting a text wave bank to binary. Every wave's '.wav' or
        '.raw' file is encoded to the wave's format and appended to its group's archive, 32-byte
        aligned; the archive range, sample count and loop history are written back onto the wave.

    `WaveExtractor`:
        Transform stage used when converting a binary wave bank to text. Every wave's payload is
        copied out of its archive into '{archive}_{id:05}.{format}.raw', or decoded into a mono
        16-bit '.wav' carrying the root key and loop in a 'smpl' chunk.

Functionality:
    - Missing or unusable wave files are reported one by one, then fail the whole run.
    - Archives are always stored big-endian, whatever the byte order of the bank itself.

Dependencies:
    `WaveMixer`:
        For reading wave files and encoding them to the target format.

    `MicrosoftWave`:
        For writing extracted '.wav' files.
'''
import os

from ..Enums import MixerMode, WaveFormat
from ..Console import message, warn, fatal
from ..BinaryStream import BinaryWriter, BIG_ENDIAN
from ..waveform.WaveMixer import RawWaveMixer, create_mixer
from ..waveform.MicrosoftWave import build_wav
from .WaveBank import WaveBank

ARCHIVE_ALIGNMENT = 32


class WavePacker:
  ''' Represents the stage that builds archive files from wave files '''
  def __init__(self, wave_dir: str = 'waves', bank_dir: str = 'banks', mix_mode: MixerMode = MixerMode.MIX):
    self.wave_dir = wave_dir
    self.bank_dir = bank_dir
    self.mix_mode = mix_mode

  def __call__(self, bank: WaveBank) -> WaveBank:
    if bank is None:
      return None

    bad_files = 0

    message('Packing wave archives...')
    for group in bank.groups:
      path = os.path.join(self.bank_dir, group.archive_name)

      try:
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        stream = open(path, 'wb')
      except OSError as e:
        fatal("WSYS: could not create archive '%s' (%s)", path, e.strerror)

      with stream:
        writer = BinaryWriter(stream, BIG_ENDIAN)
        for wave in group.waves:
          if not self._pack_wave(writer, wave):
            bad_files += 1

    if bad_files:
      fatal('WSYS: %d wave file(s) could not be packed', bad_files)

    return bank

  def _pack_wave(self, writer: BinaryWriter, wave) -> bool:
    source = os.path.join(self.wave_dir, wave.file_name)

    if not os.path.isfile(source):
      warn("WSYS: wave #%d file '%s' does not exist", wave.wave_id, source)
      return False

    mixer = create_mixer(source, wave.format, self.mix_mode)
    if mixer is None:
      warn("WSYS: wave #%d file '%s' is neither '.wav' nor '.raw'", wave.wave_id, source)
      return False

    mixer.copy_wave_info(wave)

    if wave.loop and wave.loop_start > 0 and wave.loop_start >= mixer.sample_count:
      warn("WSYS: wave #%d loop start %d is past the end of '%s' (%d samples)", wave.wave_id, wave.loop_start, source, mixer.sample_count)
      return False

    payload = mixer.encode(wave.format, BIG_ENDIAN)
    wave.wave_start = writer.position
    wave.wave_size  = len(payload)
    writer.write_bytes(payload)
    writer.write_padding(ARCHIVE_ALIGNMENT)

    if wave.loop and wave.loop_start > 0:
      wave.history_last, wave.history_penult = mixer.calculate_history(wave.loop_start, wave.format)
    else:
      wave.history_last, wave.history_penult = 0, 0

    return True


class WaveExtractor:
  ''' Represents the stage that splits archive files into wave files '''
  def __init__(self, bank_dir: str = 'banks', wave_dir: str = 'waves', extract_wav: bool = False):
    self.bank_dir = bank_dir
    self.wave_dir = wave_dir
    self.extract_wav = extract_wav

  def __call__(self, bank: WaveBank) -> WaveBank:
    if bank is None:
      return None

    try:
      os.makedirs(self.wave_dir, exist_ok=True)
    except OSError as e:
      fatal("WSYS: could not create wave directory '%s' (%s)", self.wave_dir, e.strerror)

    bad_waves = 0

    message('Extracting wave archives...')
    for group in bank.groups:
      path = os.path.join(self.bank_dir, group.archive_name)

      try:
        with open(path, 'rb') as f:
          archive = f.read()
      except OSError as e:
        fatal("WSYS: could not open archive '%s' (%s)", path, e.strerror)

      stem = os.path.splitext(os.path.basename(group.archive_name))[0]
      for wave in group.waves:
        if wave.wave_start + wave.wave_size > len(archive):
          warn("WSYS: wave #%d lies past the end of '%s'", wave.wave_id, path)
          bad_waves += 1
          continue

        self._extract_wave(archive, stem, wave)

    if bad_waves:
      fatal('WSYS: %d wave(s) could not be extracted', bad_waves)

    return bank

  def _extract_wave(self, archive: bytes, stem: str, wave) -> None:
    payload = archive[wave.wave_start:wave.wave_start + wave.wave_size]
    extension = 'wav' if self.extract_wav else 'raw'
    wave.file_name = f'{stem}_{wave.wave_id:05}.{wave.format.xml_name}.{extension}'

    if self.extract_wav:
      pcm16 = RawWaveMixer(payload, wave.format).encode(WaveFormat.PCM16, '<')
      loop = (wave.loop_start, wave.loop_end) if wave.loop else None
      payload = build_wav(pcm16, wave.sample_rate, 1, wave.root_key, loop)

    path = os.path.join(self.wave_dir, wave.file_name)
    try:
      with open(path, 'wb') as f:
        f.write(payload)
    except OSError as e:
      fatal("WSYS: could not create '%s' (%s)", path, e.strerror)

if __name__ == '__main__':
  pass

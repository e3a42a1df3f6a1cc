'''
### WSYS SoundFont Module

This module exports the waves of a wave bank as the sample pool of a SoundFont. Presets and
instruments are left empty; they come from the instrument bank export.

Classes:
    `SoundFontSerializer`:
        Transform stage that decodes every wave from its archive to PCM16 and writes a '.sf2' file.
        Archive names resolve against 'archive_dir'. Samples are named after the archive without
        its extension (at most 14 characters) and the wave id, e.g. 'Voice_0_00007'.
'''
import os

from ..Enums import WaveFormat
from ..Console import message, fatal
from ..Transform import Serializer
from ..SoundFont import SoundFontBuilder
from ..waveform.WaveMixer import RawWaveMixer
from .WaveBank import WaveBank


def sample_name(archive_name: str, wave_id: int) -> str:
  stem = os.path.splitext(os.path.basename(archive_name))[0]
  return f'{stem[:14]}_{wave_id:05}'


class SoundFontSerializer(Serializer):
  ''' Represents the SoundFont wave bank writer stage '''
  def __init__(self, stream, archive_dir: str = '.'):
    self.stream      = stream
    self.archive_dir = archive_dir

  def serialize(self, bank: WaveBank) -> None:
    builder = SoundFontBuilder(bank.name or 'wsys')

    message('Writing samples...')
    for group in bank.groups:
      path = os.path.join(self.archive_dir, group.archive_name)

      try:
        with open(path, 'rb') as f:
          archive = f.read()
      except OSError as e:
        fatal("WSYS: could not open archive '%s' (%s)", path, e.strerror)

      for wave in group.waves:
        payload = archive[wave.wave_start:wave.wave_start + wave.wave_size]
        pcm16 = RawWaveMixer(payload, wave.format).encode(WaveFormat.PCM16, '<')
        loop = (wave.loop_start, wave.loop_end) if wave.loop else None

        builder.add_sample(sample_name(group.archive_name, wave.wave_id), pcm16, wave.sample_rate, wave.root_key, loop)

    self.stream.write(builder.build())

if __name__ == '__main__':
  pass

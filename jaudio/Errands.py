'''
### Errands Module

This module builds and runs the transform chain for each kind of conversion the command line offers.

Functions:
    `convert_ibnk`:
        Converts an instrument bank between binary (big- or little-endian), XML and YAML, or exports
        it as a SoundFont.

    `convert_wsys`:
        Converts a wave bank between binary, XML and YAML, or exports its samples as a SoundFont.
        Text to binary conversions pack the wave files into archives; binary to text conversions
        extract them.

    `convert_wave`:
        Converts a single wave between raw payloads, Microsoft WAVE files and stereo streams.

Format tokens:
    'be', 'le'    binary, big- or little-endian
    'xml', 'yaml' text
    'sf2'         SoundFont (output only)

Intended Usage:
    convert_ibnk('Orchestra.bnk', 'be', 'Orchestra.xml', 'xml')
    convert_wsys('Orchestra.xml', 'xml', 'Orchestra.ws', 'be', WaveOptions(wave_dir='waves'))
'''
import io
import os
from dataclasses import dataclass

from .Enums import MixerMode, WaveFormat
from .Helpers import struct
from .Console import message, fatal
from .Transform import TransformChain
from .BinaryStream import BIG_ENDIAN, LITTLE_ENDIAN
from .ibnk import Binary as IbnkBinary, Xml as IbnkXml, Yaml as IbnkYaml, SoundFont as IbnkSoundFont
from .wsys import Binary as WsysBinary, Xml as WsysXml, Yaml as WsysYaml, SoundFont as WsysSoundFont
from .wsys.Archive import WavePacker, WaveExtractor
from .waveform.WaveMixer import RawWaveMixer, MicrosoftWaveMixer
from .waveform.MicrosoftWave import build_wav
from .waveform.AfcStream import AfcStream, STREAM_PCM, STREAM_ADPCM, DEFAULT_FRAME_RATE

BINARY_FORMATS = {'be': BIG_ENDIAN, 'le': LITTLE_ENDIAN}
TEXT_FORMATS = ('xml', 'yaml')
STREAM_FORMATS = {'pcm': STREAM_PCM, 'adpcm': STREAM_ADPCM}


@dataclass
class WaveOptions:
  wave_dir: str = 'waves'
  bank_dir: str = 'banks'
  extract_wav: bool = False
  mix_mode: MixerMode = MixerMode.MIX


@dataclass
class StreamOptions:
  mix_mode: MixerMode = MixerMode.MIX
  sample_rate: float = 0.0
  frame_rate: int = DEFAULT_FRAME_RATE
  loop: int = None
  stream_format: str = 'adpcm'


''' File Access '''
def read_file(path: str) -> bytes:
  try:
    with open(path, 'rb') as f:
      return f.read()
  except OSError as e:
    fatal("could not open '%s' (%s)", path, e.strerror)

def open_output(path: str, text: bool = False):
  try:
    directory = os.path.dirname(path)
    if directory:
      os.makedirs(directory, exist_ok=True)

    if text:
      return open(path, 'w', encoding='utf-8')
    return open(path, 'wb')
  except OSError as e:
    fatal("could not create '%s' (%s)", path, e.strerror)

def write_file(path: str, data: bytes) -> None:
  with open_output(path) as f:
    f.write(data)

def bank_name(path: str) -> str:
  return os.path.splitext(os.path.basename(path))[0]


def _name_stage(name: str):
  ''' Returns a stage that names the model after its input file unless it already has a name '''
  def stage(model):
    if model is not None and not model.name:
      model.name = name
    return model
  return stage

def _reader(label: str, path: str, fmt: str, binary, xml_, yaml_):
  ''' Returns the deserializer stage for 'fmt' from the given stage modules '''
  if fmt in BINARY_FORMATS:
    return binary.BinaryDeserializer(read_file(path), BINARY_FORMATS[fmt])
  elif fmt == 'xml':
    return xml_.XmlDeserializer(io.BytesIO(read_file(path)))
  elif fmt == 'yaml':
    return yaml_.YamlDeserializer(read_file(path).decode('utf-8'))

  fatal("%s: '%s' is not a valid input format", label, fmt)


''' Errands '''
def convert_ibnk(input_path: str, input_format: str, output_path: str, output_format: str):
  chain = TransformChain(_reader('IBNK', input_path, input_format, IbnkBinary, IbnkXml, IbnkYaml), _name_stage(bank_name(input_path)))

  if output_format not in BINARY_FORMATS and output_format not in TEXT_FORMATS and output_format != 'sf2':
    fatal("IBNK: '%s' is not a valid output format", output_format)

  with open_output(output_path, output_format == 'yaml') as stream:
    if output_format in BINARY_FORMATS:
      chain.append(IbnkBinary.BinarySerializer(stream, BINARY_FORMATS[output_format]))
    elif output_format == 'xml':
      chain.append(IbnkXml.XmlSerializer(stream))
    elif output_format == 'yaml':
      chain.append(IbnkYaml.YamlSerializer(stream))
    else:
      chain.append(IbnkSoundFont.SoundFontSerializer(stream))

    bank = chain.transform()

  message("Wrote '%s'", output_path)
  return bank

def convert_wsys(input_path: str, input_format: str, output_path: str, output_format: str, options: WaveOptions = None):
  options = options or WaveOptions()
  chain = TransformChain(_reader('WSYS', input_path, input_format, WsysBinary, WsysXml, WsysYaml), _name_stage(bank_name(input_path)))

  if output_format not in BINARY_FORMATS and output_format not in TEXT_FORMATS and output_format != 'sf2':
    fatal("WSYS: '%s' is not a valid output format", output_format)

  # Archives live beside the binary bank, wave files beside the output
  input_directory   = os.path.dirname(os.path.abspath(input_path))
  output_directory  = os.path.dirname(os.path.abspath(output_path))
  bank_directory    = os.path.join(input_directory, options.bank_dir)
  wave_directory    = os.path.join(output_directory, options.wave_dir)
  archive_directory = input_directory

  # Text input carries wave files, binary input carries archives
  if input_format in TEXT_FORMATS and output_format not in TEXT_FORMATS:
    chain.append(WavePacker(wave_directory, bank_directory, options.mix_mode))
    archive_directory = bank_directory
  elif input_format in BINARY_FORMATS and output_format in TEXT_FORMATS:
    chain.append(WaveExtractor(bank_directory, wave_directory, options.extract_wav))

  with open_output(output_path, output_format == 'yaml') as stream:
    if output_format in BINARY_FORMATS:
      chain.append(WsysBinary.BinarySerializer(stream, BINARY_FORMATS[output_format]))
    elif output_format == 'xml':
      chain.append(WsysXml.XmlSerializer(stream))
    elif output_format == 'yaml':
      chain.append(WsysYaml.YamlSerializer(stream))
    else:
      chain.append(WsysSoundFont.SoundFontSerializer(stream, archive_directory))

    bank = chain.transform()

  message("Wrote '%s'", output_path)
  return bank


''' Wave Errand '''
def _container(path: str) -> str:
  extension = os.path.splitext(path)[1].lower().lstrip('.')
  if extension not in ('raw', 'wav', 'afc'):
    fatal("WAVE: '%s' is not a '.raw', '.wav' or '.afc' file", path)
  return extension

def _raw_format(fmt: str, path: str) -> WaveFormat:
  wave_format = WaveFormat.from_xml_name(fmt)
  if wave_format is None:
    fatal("WAVE: '%s' needs a wave format (pcm8, pcm16, adpcm2 or adpcm4), not '%s'", path, fmt)
  return wave_format

def _loop(options: StreamOptions, sample_count: int):
  if options.loop is None:
    return None
  if not 0 <= options.loop < sample_count:
    fatal('WAVE: loop start %d is outside the wave (%d samples)', options.loop, sample_count)
  return options.loop, sample_count

def convert_wave(input_path: str, input_format: str, output_path: str, output_format: str, options: StreamOptions = None) -> None:
  options = options or StreamOptions()
  source, target = _container(input_path), _container(output_path)

  if source == 'afc':
    if target != 'wav':
      fatal("WAVE: streams can only be converted to '.wav'")

    stream = AfcStream.from_bytes(read_file(input_path))
    interleaved = [sample for pair in zip(stream.left, stream.right) for sample in pair]
    pcm16 = struct.pack(f'<{len(interleaved)}h', *interleaved)
    loop = (stream.loop_start, stream.sample_count) if stream.loop else None
    write_file(output_path, build_wav(pcm16, stream.sample_rate, 2, loop=loop))

  elif source == 'raw':
    mixer = RawWaveMixer(read_file(input_path), _raw_format(input_format, input_path))
    mixer.mix_mode = options.mix_mode

    if target == 'raw':
      write_file(output_path, mixer.encode(_raw_format(output_format, output_path)))
    elif target == 'wav':
      if options.sample_rate <= 0:
        fatal("WAVE: converting '%s' to '.wav' needs a sample rate", input_path)
      loop = _loop(options, mixer.sample_count)
      write_file(output_path, build_wav(mixer.encode(WaveFormat.PCM16, LITTLE_ENDIAN), options.sample_rate, loop=loop))
    else:
      fatal("WAVE: streams can only be built from '.wav' files")

  else:
    mixer = MicrosoftWaveMixer(io.BytesIO(read_file(input_path)), options.mix_mode)
    sample_rate = options.sample_rate if options.sample_rate > 0 else mixer.sample_rate

    if target == 'raw':
      write_file(output_path, mixer.encode(_raw_format(output_format, output_path)))
    elif target == 'wav':
      loop = _loop(options, mixer.sample_count)
      write_file(output_path, build_wav(mixer.encode(WaveFormat.PCM16, LITTLE_ENDIAN), sample_rate, loop=loop))
    else:
      stream = AfcStream.from_channels(
        mixer.channel_pcm16(0), mixer.channel_pcm16(1), int(sample_rate), STREAM_FORMATS[options.stream_format]
      )
      stream.frame_rate = options.frame_rate
      if options.loop is not None:
        _loop(options, mixer.sample_count)
        stream.loop, stream.loop_start = True, options.loop
      write_file(output_path, stream.to_bytes())

  message("Wrote '%s'", output_path)

if __name__ == '__main__':
  pass

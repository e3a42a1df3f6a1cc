''' Command line front end for converting JAudio instrument banks, wave banks and waves '''

# Define current version
CURRENT_VERSION = '2026.10.17'

import os
import sys
import logging
import argparse

from .Enums import MixerMode
from .Console import (
  GRAY_245, GRAY_248, YELLOW_229, BLUE_39, RESET,
  FatalError, configure_logging, message, warning_count
)
from .Errands import WaveOptions, StreamOptions, STREAM_FORMATS, convert_ibnk, convert_wsys, convert_wave

logger = logging.getLogger('jaudio')

EXTENSION_FORMATS = {'.xml': 'xml', '.yaml': 'yaml', '.yml': 'yaml', '.sf2': 'sf2'}


# Argument Parser
def _usage(command: str) -> str:
  program = os.path.basename(sys.argv[0])
  return (
    f'{GRAY_248}[>_]{RESET} {YELLOW_229}python{RESET} {BLUE_39}{program}{RESET} {BLUE_39}{command}{RESET} '
    f'{GRAY_245}[-h]{RESET} {BLUE_39}-input file [fmt] -output file [fmt]{RESET} {GRAY_245}[options]{RESET}'
  )

def _add_io_arguments(parser: argparse.ArgumentParser, formats: str) -> None:
  parser.add_argument(
    '-input',
    '--input',
    nargs='+',
    required=True,
    metavar=('FILE', 'FMT'),
    help=f"the file to convert and its format ({formats}); text formats are guessed from the extension"
  )
  parser.add_argument(
    '-output',
    '--output',
    nargs='+',
    required=True,
    metavar=('FILE', 'FMT'),
    help=f"the file to write and its format ({formats})"
  )

def _add_mix_mode(parser: argparse.ArgumentParser) -> None:
  parser.add_argument(
    '-mix-mode',
    '--mix-mode',
    type=str.upper,
    choices=[mode.name for mode in MixerMode],
    default=MixerMode.MIX.name,
    help="how stereo WAVE files are mixed down to mono (defaults to MIX)"
  )

def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog='jaudio-convert',
    formatter_class=argparse.RawDescriptionHelpFormatter,
    description='''This script converts JAudio instrument banks (IBNK), wave banks (WSYS) and waves between binary, XML, YAML and SoundFont.'''
  )
  parser.add_argument('--version', action='version', version=CURRENT_VERSION)
  commands = parser.add_subparsers(dest='command', required=True)

  ibnk = commands.add_parser('ibnk', usage=_usage('ibnk'), help="convert an instrument bank")
  _add_io_arguments(ibnk, 'be, le, xml, yaml, sf2')

  wsys = commands.add_parser('wsys', usage=_usage('wsys'), help="convert a wave bank")
  _add_io_arguments(wsys, 'be, le, xml, yaml, sf2')
  wsys.add_argument(
    '-wave-dir',
    '--wave-dir',
    default='waves',
    help="the directory of the wave files, relative to the output file (defaults to 'waves')"
  )
  wsys.add_argument(
    '-bank-dir',
    '--bank-dir',
    default='banks',
    help="the directory of the wave archives, relative to the input file (defaults to 'banks')"
  )
  wsys.add_argument(
    '-extract-wav',
    '--extract-wav',
    action='store_true',
    help="extract waves as 16-bit '.wav' files instead of '.raw' payloads"
  )
  _add_mix_mode(wsys)

  wave = commands.add_parser('wave', usage=_usage('wave'), help="convert a single wave")
  _add_io_arguments(wave, 'pcm8, pcm16, adpcm2, adpcm4 for .raw files')
  _add_mix_mode(wave)
  wave.add_argument(
    '-sample-rate',
    '--sample-rate',
    type=float,
    default=0.0,
    help="the sample rate of the output (required for '.raw' to '.wav')"
  )
  wave.add_argument(
    '-frame-rate',
    '--frame-rate',
    type=int,
    default=30,
    help="the frame rate written to '.afc' streams (defaults to 30)"
  )
  wave.add_argument(
    '-loop',
    '--loop',
    type=int,
    default=None,
    metavar='SAMPLE',
    help="loop from this sample to the end of the wave"
  )
  wave.add_argument(
    '-stream-format',
    '--stream-format',
    choices=list(STREAM_FORMATS),
    default='adpcm',
    help="the sample encoding of '.afc' streams (defaults to adpcm)"
  )

  return parser

def _file_and_format(parser: argparse.ArgumentParser, values: list[str], option: str, command: str) -> tuple[str, str]:
  if len(values) > 2:
    parser.error(f"{option} takes a file and an optional format")

  path = values[0]
  if len(values) == 2:
    return path, values[1].lower()

  extension = os.path.splitext(path)[1].lower()
  if command == 'wave' and extension in ('.wav', '.afc'):
    return path, extension.lstrip('.')
  if extension in EXTENSION_FORMATS and command != 'wave':
    return path, EXTENSION_FORMATS[extension]

  parser.error(f"{option} needs a format for '{path}'")


''' Main Function '''
def main(argv: list[str] = None) -> int:
  configure_logging()
  parser = build_parser()
  args = parser.parse_args(argv)

  input_path, input_format = _file_and_format(parser, args.input, '-input', args.command)
  output_path, output_format = _file_and_format(parser, args.output, '-output', args.command)

  try:
    if args.command == 'ibnk':
      convert_ibnk(input_path, input_format, output_path, output_format)

    elif args.command == 'wsys':
      options = WaveOptions(args.wave_dir, args.bank_dir, args.extract_wav, MixerMode[args.mix_mode])
      convert_wsys(input_path, input_format, output_path, output_format, options)

    else:
      options = StreamOptions(MixerMode[args.mix_mode], args.sample_rate, args.frame_rate, args.loop, args.stream_format)
      convert_wave(input_path, input_format, output_path, output_format, options)

  except FatalError as e:
    logger.error('%s', e)
    return 1

  if warning_count():
    message('Finished with %d warning(s)', warning_count())

  return 0

if __name__ == '__main__':
  sys.exit(main())

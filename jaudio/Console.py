'''
### Console Module

This module provides the diagnostic channel shared by every transform stage: coloured logging,
the process-wide warning counter and the fatal error raised on structural corruption.

Classes:
    `FatalError`:
        Raised when the input is structurally corrupt or a file cannot be opened.

    `ColorFormatter`:
        Prefixes log records with an ANSI coloured severity label.

Functions:
    `configure_logging`:
        Configures the 'jaudio' logger from the LOG_LEVEL environment variable.

    `message`, `warn`, `fatal`:
        Report progress, a recoverable defect, or a fatal defect.

    `warning_count`, `reset_warnings`:
        Inspect or clear the process-wide warning counter.

Dependencies:
    `logging`:
        All diagnostics are emitted as log records under the 'jaudio' logger.

Intended Usage:
    Parsers call 'warn' for anomalies that only drop or default a single entity and keep going;
    they call 'fatal' when nothing sensible can be produced. Only the command line front end
    catches 'FatalError'.
'''
import os
import sys
import logging
from typing import Final

# Create ANSI formatting for terminal messages
# ANSI COLORS: https://talyian.github.io/ansicolors/
# TERMINAL TEXT COLORS
RED        : Final = '\x1b[31m'
YELLOW     : Final = '\x1b[33m'
YELLOW_229 : Final = '\x1b[38;5;229m'
CYAN       : Final = '\x1b[36m'
BLUE_39    : Final = '\x1b[38;5;39m'
GRAY_245   : Final = '\x1b[38;5;245m'
GRAY_248   : Final = '\x1b[38;5;248m'
GREEN_79   : Final = '\x1b[38;5;79m'

# TERMINAL TEXT STYLES
BOLD      : Final = '\x1b[1m'
RESET     : Final = '\x1b[0m' # Resets all text styles and colors

LEVEL_COLORS = {
  logging.DEBUG:    GRAY_245,
  logging.INFO:     GREEN_79,
  logging.WARNING:  YELLOW,
  logging.ERROR:    RED,
  logging.CRITICAL: BOLD + RED,
}

logger = logging.getLogger('jaudio')

_warnings = 0


class FatalError(Exception):
  ''' Represents an unrecoverable conversion failure '''
  pass


class ColorFormatter(logging.Formatter):
  ''' Represents a formatter that colours the severity label '''
  def __init__(self, use_color: bool = True):
    super().__init__('%(levelname)s %(message)s')
    self.use_color = use_color

  def format(self, record: logging.LogRecord) -> str:
    record = logging.makeLogRecord(record.__dict__)
    label = record.levelname.lower()

    if self.use_color:
      color = LEVEL_COLORS.get(record.levelno, '')
      record.levelname = f'{color}{label}:{RESET}'
    else:
      record.levelname = f'{label}:'

    return super().format(record)


def configure_logging(default_level: str = 'INFO') -> int:
  ''' Configure the 'jaudio' logger and return the resolved log level '''
  level_name = os.environ.get('LOG_LEVEL', default_level).upper()
  level = getattr(logging, level_name, None)
  if not isinstance(level, int):
    level = getattr(logging, default_level.upper(), logging.INFO)
    invalid_level = level_name
  else:
    invalid_level = None

  handler = logging.StreamHandler(sys.stdout)
  handler.setFormatter(ColorFormatter(use_color=sys.stdout.isatty()))

  logger.handlers.clear()
  logger.addHandler(handler)
  logger.setLevel(level)
  logger.propagate = False

  if invalid_level is not None:
    logger.warning("Invalid LOG_LEVEL '%s'; using %s", invalid_level, logging.getLevelName(level))

  return level


def message(text: str, *args):
  logger.info(text, *args)

def warn(text: str, *args):
  global _warnings
  _warnings += 1
  logger.warning(text, *args)

def fatal(text: str, *args):
  if args:
    text = text % args
  raise FatalError(text)

def warning_count() -> int:
  return _warnings

def reset_warnings():
  global _warnings
  _warnings = 0


if __name__ == '__main__':
  pass

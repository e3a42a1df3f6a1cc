'''
### Waveform Module

This module implements the sample format conversions used by JAudio wave archives: PCM8 <-> PCM16
and PCM16 <-> ADPCM2/ADPCM4. ADPCM data is split into frames of 16 samples; each frame starts with
a header byte holding a scale exponent (high nibble) and a predictor index (low nibble), followed by
16 signed 4-bit codes (ADPCM4, 9 bytes per frame) or 16 signed 2-bit codes (ADPCM2, 5 bytes per frame).

Classes:
    `History`:
        The predictor state (last and penultimate decoded samples) threaded across frames.

Functions:
    `pcm8_to_pcm16`, `pcm16_to_pcm8`:
        Linear conversion of a single sample.

    `adpcm4_to_pcm16`, `adpcm2_to_pcm16`:
        Decode one frame into 16 samples, updating the history.

    `pcm16_to_adpcm4`, `pcm16_to_adpcm2`:
        Encode up to 16 samples (zero-filled to 16) into one frame, updating the history.

    `decode_frames`, `encode_frames`:
        Convert whole buffers frame by frame.

Functionality:
    - The encoder tries every predictor available to the format, picks the smallest scale that
      covers the open-loop prediction residuals, quantizes in closed loop against the decoder and
      keeps the predictor with the lowest squared error (ties go to the lowest index). The output
      is fully deterministic.

Dependencies:
    None.

Intended Usage:
    history = History()
    frame = pcm16_to_adpcm4(samples[0:16], history)
'''

FRAME_SAMPLES = 16

ADPCM4_FRAME_SIZE = 9
ADPCM2_FRAME_SIZE = 5

# Predictor pairs (last, penult) in 11-bit fixed point
ADPCM_COEFFICIENTS = (
  (    0,     0), ( 2048,     0), (    0,  2048), ( 1024,  1024),
  ( 4096, -2048), ( 3584, -1536), ( 3072, -1024), ( 4608, -2560),
  ( 4200, -2248), ( 4800, -2300), ( 5120, -3072), ( 2048, -2048),
  ( 1024, -1024), (-1024,  1024), (-1024,     0), (-2048,     0),
)

ADPCM4_PREDICTORS = 16
ADPCM2_PREDICTORS = 4


class History:
  ''' Represents the ADPCM predictor state '''
  def __init__(self, last: int = 0, penult: int = 0):
    self.last   = last
    self.penult = penult

  def __iter__(self):
    return iter((self.last, self.penult))

  def __repr__(self) -> str:
    return f'History(last={self.last}, penult={self.penult})'


''' Sample Conversion '''
def clamp16(sample: int) -> int:
  return -0x8000 if sample < -0x8000 else 0x7FFF if sample > 0x7FFF else sample

def pcm8_to_pcm16(sample: int) -> int:
  return sample * 256

def pcm16_to_pcm8(sample: int) -> int:
  return sample >> 8


''' Code Packing '''
def _unpack_codes(data: bytes, bits: int) -> list[int]:
  codes = []
  if bits == 4:
    for byte in data:
      for nibble in (byte >> 4, byte & 0xF):
        codes.append(nibble - 16 if nibble >= 8 else nibble)
  else:
    for byte in data:
      for shift in (6, 4, 2, 0):
        crumb = (byte >> shift) & 0x3
        codes.append(crumb - 4 if crumb >= 2 else crumb)

  return codes

def _pack_codes(codes: list[int], bits: int) -> bytes:
  packed = bytearray()
  if bits == 4:
    for i in range(0, FRAME_SAMPLES, 2):
      packed.append(((codes[i] & 0xF) << 4) | (codes[i + 1] & 0xF))
  else:
    for i in range(0, FRAME_SAMPLES, 4):
      packed.append(
        ((codes[i] & 0x3) << 6) | ((codes[i + 1] & 0x3) << 4) |
        ((codes[i + 2] & 0x3) << 2) | (codes[i + 3] & 0x3)
      )

  return bytes(packed)


''' Decoding '''
def _decode(frame: bytes, history: History, bits: int) -> list[int]:
  header = frame[0]
  scale  = 1 << (header >> 4)
  c0, c1 = ADPCM_COEFFICIENTS[header & 0xF]
  shift  = 11 if bits == 4 else 13

  last, penult = history.last, history.penult
  samples = []

  for code in _unpack_codes(frame[1:], bits):
    sample = clamp16((((code * scale) << shift) + c0 * last + c1 * penult) >> 11)
    samples.append(sample)
    penult, last = last, sample

  history.last, history.penult = last, penult
  return samples

def adpcm4_to_pcm16(frame: bytes, history: History) -> list[int]:
  return _decode(frame[:ADPCM4_FRAME_SIZE], history, 4)

def adpcm2_to_pcm16(frame: bytes, history: History) -> list[int]:
  return _decode(frame[:ADPCM2_FRAME_SIZE], history, 2)


''' Encoding '''
def _select_exponent(samples, history: History, c0: int, c1: int, low: int, high: int, step: int) -> int:
  # Open-loop residuals against the source samples
  last, penult = history.last, history.penult
  lowest = highest = 0

  for sample in samples:
    residual = sample - ((c0 * last + c1 * penult) >> 11)
    lowest   = min(lowest, residual)
    highest  = max(highest, residual)
    penult, last = last, sample

  for exponent in range(16):
    unit = step << exponent
    if low * unit <= lowest and highest <= high * unit:
      return exponent

  return 15

def _quantize(samples, history: History, c0: int, c1: int, exponent: int, low: int, high: int, shift: int):
  unit = (1 << exponent) << shift
  last, penult = history.last, history.penult
  codes = []
  error = 0

  for sample in samples:
    prediction = c0 * last + c1 * penult
    delta = (sample << 11) - prediction
    code  = max(low, min(high, (2 * delta + unit) // (2 * unit)))

    decoded = clamp16((code * unit + prediction) >> 11)
    error  += (sample - decoded) ** 2

    codes.append(code)
    penult, last = last, decoded

  return codes, error, last, penult

def _encode(samples, history: History, bits: int) -> bytes:
  samples = list(samples[:FRAME_SAMPLES])
  samples.extend([0] * (FRAME_SAMPLES - len(samples)))

  if bits == 4:
    low, high, shift, step, predictors = -8, 7, 11, 1, ADPCM4_PREDICTORS
  else:
    low, high, shift, step, predictors = -2, 1, 13, 4, ADPCM2_PREDICTORS

  best = None
  for index in range(predictors):
    c0, c1 = ADPCM_COEFFICIENTS[index]
    exponent = _select_exponent(samples, history, c0, c1, low, high, step)
    codes, error, last, penult = _quantize(samples, history, c0, c1, exponent, low, high, shift)

    if best is None or error < best[0]:
      best = (error, index, exponent, codes, last, penult)

  _, index, exponent, codes, last, penult = best
  history.last, history.penult = last, penult

  return bytes([(exponent << 4) | index]) + _pack_codes(codes, bits)

def pcm16_to_adpcm4(samples, history: History) -> bytes:
  return _encode(samples, history, 4)

def pcm16_to_adpcm2(samples, history: History) -> bytes:
  return _encode(samples, history, 2)


''' Buffers '''
def decode_frames(data: bytes, bits: int, history: History = None) -> list[int]:
  history = History() if history is None else history
  size = ADPCM4_FRAME_SIZE if bits == 4 else ADPCM2_FRAME_SIZE
  samples = []

  for offset in range(0, len(data) - size + 1, size):
    samples.extend(_decode(data[offset:offset + size], history, bits))

  return samples

def encode_frames(samples: list[int], bits: int, history: History = None) -> bytes:
  history = History() if history is None else history
  encoded = bytearray()

  for offset in range(0, len(samples), FRAME_SAMPLES):
    encoded += _encode(samples[offset:offset + FRAME_SAMPLES], history, bits)

  return bytes(encoded)

if __name__ == '__main__':
  pass

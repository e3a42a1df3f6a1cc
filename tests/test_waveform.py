import math

from jaudio.waveform.Waveform import (
  History, pcm8_to_pcm16, pcm16_to_pcm8, adpcm4_to_pcm16, adpcm2_to_pcm16,
  pcm16_to_adpcm4, pcm16_to_adpcm2, decode_frames, encode_frames, clamp16
)

SINE = [int(round(8000 * math.sin(2 * math.pi * i / 64))) for i in range(256)]

SINE_ADPCM4 = bytes.fromhex(
  '71066665654443321144caadaccccceddffe440002113325254544446464454525233112'
  '44000effddecccccad44acadaccccceddffe440002113325254544446464454525233112'
  '44000effddecccccad44acadaccccceddffe440002113325254544446464454525233112'
  '44000effddecccccad44acadaccccceddffe440002113325254544446464454525233112'
)

SINE_ADPCM2 = bytes.fromhex(
  '8114514104710ccffefb71aefbff3381010414518154514104710ccffefb71aefbff338101041451'
  '8154514104710ccffefb71aefbff3381010414518154514104710ccffefb71aefbff338101041451'
)


def test_pcm8_pcm16_conversion():
  assert pcm8_to_pcm16(1) == 256
  assert pcm8_to_pcm16(-128) == -32768
  assert pcm16_to_pcm8(32767) == 127
  assert pcm16_to_pcm8(-1) == -1
  assert pcm16_to_pcm8(255) == 0

def test_clamp16():
  assert clamp16(40000) == 32767
  assert clamp16(-40000) == -32768
  assert clamp16(12) == 12

def test_adpcm4_ramp_encodes_to_pinned_frame():
  history = History()
  frame = pcm16_to_adpcm4(list(range(16)), history)

  assert frame == bytes.fromhex('010111111111111111')
  assert (history.last, history.penult) == (15, 14)

def test_adpcm2_ramp_encodes_to_pinned_frame():
  history = History()
  frame = pcm16_to_adpcm2(list(range(0, 64, 4)), history)

  assert frame == bytes.fromhex('0115555555')
  assert (history.last, history.penult) == (60, 56)

def test_adpcm4_decodes_pinned_frame():
  history = History()
  assert adpcm4_to_pcm16(bytes.fromhex('010111111111111111'), history) == list(range(16))
  assert tuple(history) == (15, 14)

def test_adpcm2_decodes_pinned_frame():
  history = History()
  assert adpcm2_to_pcm16(bytes.fromhex('0115555555'), history) == list(range(0, 64, 4))

def test_adpcm4_sine_encodes_to_pinned_frames():
  history = History()
  assert encode_frames(SINE, 4, history) == SINE_ADPCM4
  assert tuple(history) == (-784, -1568)

def test_adpcm2_sine_encodes_to_pinned_frames():
  history = History()
  assert encode_frames(SINE, 2, history) == SINE_ADPCM2
  assert tuple(history) == (-1024, -2048)

def test_encoder_history_matches_decoder():
  encoder_history, decoder_history = History(), History()
  data = encode_frames(SINE, 4, encoder_history)
  decode_frames(data, 4, decoder_history)

  assert tuple(encoder_history) == tuple(decoder_history)

def test_short_frame_is_zero_filled():
  assert pcm16_to_adpcm4([0] * 5, History()) == pcm16_to_adpcm4([0] * 16, History())
  assert len(encode_frames([1, 2, 3], 2)) == 5

def test_adpcm4_sine_round_trip_error_bound():
  data = encode_frames(SINE, 4)
  decoded = decode_frames(data, 4)

  assert len(data) == 256 // 16 * 9
  assert len(decoded) == len(SINE)
  assert max(abs(a - b) for a, b in zip(SINE, decoded)) <= 64

def test_adpcm2_sine_round_trip_error_bound():
  data = encode_frames(SINE, 2)
  decoded = decode_frames(data, 2)

  assert len(data) == 256 // 16 * 5
  assert max(abs(a - b) for a, b in zip(SINE, decoded)) <= 512

def test_encoding_is_deterministic():
  assert encode_frames(SINE, 4) == encode_frames(SINE, 4)
  assert encode_frames(SINE, 2) == encode_frames(SINE, 2)

def test_decode_ignores_trailing_partial_frame():
  data = encode_frames(list(range(16)), 4) + b'\x00\x00'
  assert decode_frames(data, 4) == list(range(16))

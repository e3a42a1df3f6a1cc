import pytest

from jaudio.Cli import main, build_parser


@pytest.fixture
def bank_xml(tmp_path):
  path = tmp_path / 'bank.xml'
  path.write_text('<IBNK virtual-number="1"><instrument program="0"/></IBNK>')
  return path


def test_ibnk_conversion_succeeds(tmp_path, bank_xml):
  output = tmp_path / 'bank.bnk'
  assert main(['ibnk', '-input', str(bank_xml), '-output', str(output), 'be']) == 0
  assert output.read_bytes()[0:4] == b'IBNK'

def test_double_dash_spelling(tmp_path, bank_xml):
  output = tmp_path / 'bank.yaml'
  assert main(['ibnk', '--input', str(bank_xml), 'xml', '--output', str(output)]) == 0
  assert 'virtual number: 1' in output.read_text()

def test_fatal_error_exits_with_one(tmp_path):
  source = tmp_path / 'bad.xml'
  source.write_text('<IBNK/>')

  assert main(['ibnk', '-input', str(source), '-output', str(tmp_path / 'out.bnk'), 'be']) == 1

def test_missing_format_is_a_usage_error(tmp_path, bank_xml):
  with pytest.raises(SystemExit) as error:
    main(['ibnk', '-input', str(bank_xml), '-output', str(tmp_path / 'bank.bnk')])
  assert error.value.code == 2

def test_wsys_options():
  args = build_parser().parse_args(
    ['wsys', '-input', 'a.xml', '-output', 'a.ws', 'be', '-wave-dir', 'w', '-extract-wav', '-mix-mode', 'left']
  )

  assert (args.wave_dir, args.bank_dir, args.extract_wav, args.mix_mode) == ('w', 'banks', True, 'LEFT')

def test_wave_defaults():
  args = build_parser().parse_args(['wave', '-input', 'a.wav', '-output', 'a.afc'])

  assert (args.frame_rate, args.stream_format, args.loop, args.sample_rate) == (30, 'adpcm', None, 0.0)

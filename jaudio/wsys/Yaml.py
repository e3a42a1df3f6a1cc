'''
### WSYS Yaml Module

Transform stages for the YAML form of a wave bank. Every wave field is written, including archive
ranges and history seeds, so a YAML round trip reproduces the model exactly.
'''
import yaml

from ..Console import message, fatal
from ..Transform import Deserializer, Serializer
from ..YAMLSerializer import dump_yaml, load_yaml
from .WaveBank import WaveBank


class YamlDeserializer(Deserializer):
  ''' Represents the YAML wave bank reader stage '''
  def __init__(self, stream):
    self.stream = stream

  def deserialize(self) -> WaveBank:
    try:
      data = load_yaml(self.stream)
    except yaml.YAMLError as e:
      fatal('WSYS YAML: %s', e)

    if not isinstance(data, dict) or 'groups' not in data:
      fatal("WSYS YAML: missing 'groups'")

    message('Reading wave groups...')
    try:
      return WaveBank.from_yaml(data)
    except (KeyError, TypeError, ValueError, IndexError) as e:
      fatal('WSYS YAML: bad wave data (%s)', e)


class YamlSerializer(Serializer):
  ''' Represents the YAML wave bank writer stage '''
  def __init__(self, stream):
    self.stream = stream

  def serialize(self, bank: WaveBank) -> None:
    message('Writing wave groups...')
    dump_yaml(bank.to_yaml(), self.stream)

if __name__ == '__main__':
  pass

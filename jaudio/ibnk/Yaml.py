'''
### IBNK Yaml Module

Transform stages for the YAML form of an instrument bank. Unlike the XML form nothing is elided:
every field is written, so a YAML round trip reproduces the model exactly.
'''
import yaml

from ..Console import message, fatal
from ..Transform import Deserializer, Serializer
from ..YAMLSerializer import dump_yaml, load_yaml
from .InstrumentBank import InstrumentBank


class YamlDeserializer(Deserializer):
  ''' Represents the YAML bank reader stage '''
  def __init__(self, stream):
    self.stream = stream

  def deserialize(self) -> InstrumentBank:
    try:
      data = load_yaml(self.stream)
    except yaml.YAMLError as e:
      fatal('IBNK YAML: %s', e)

    if not isinstance(data, dict) or 'instruments' not in data:
      fatal("IBNK YAML: missing 'instruments'")

    message('Reading instruments...')
    try:
      return InstrumentBank.from_yaml(data)
    except (KeyError, TypeError, ValueError, IndexError) as e:
      fatal('IBNK YAML: bad instrument data (%s)', e)


class YamlSerializer(Serializer):
  ''' Represents the YAML bank writer stage '''
  def __init__(self, stream):
    self.stream = stream

  def serialize(self, bank: InstrumentBank) -> None:
    message('Writing instruments...')
    dump_yaml(bank.to_yaml(), self.stream)

if __name__ == '__main__':
  pass

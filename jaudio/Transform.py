'''
### Transform Module

This module defines `TransformChain`, the linear pipeline every errand builds: a deserializer,
any number of intermediate stages, and a serializer, each a callable taking and returning the model.

Classes:
    `TransformChain`:
        An ordered list of stages run in sequence; the first stage receives None.

    `Deserializer`, `Serializer`:
        Base classes that give stages their "build" and "consume" behaviour.

Intended Usage:
    chain = TransformChain(XmlDeserializer(stream), BinarySerializer(out_stream, '>'))
    chain.transform()
'''
import logging

logger = logging.getLogger(__name__)


class Deserializer:
  ''' Represents the first stage of a chain, which builds the model from its input '''
  def __call__(self, model):
    if model is not None:
      return model
    return self.deserialize()

  def deserialize(self):
    raise NotImplementedError


class Serializer:
  ''' Represents the last stage of a chain, which writes the model to its output '''
  def __call__(self, model):
    if model is None:
      return None
    self.serialize(model)
    return model

  def serialize(self, model):
    raise NotImplementedError


class TransformChain:
  ''' Represents an ordered pipeline of model stages '''
  def __init__(self, *stages):
    self.stages = list(stages)

  def append(self, stage):
    self.stages.append(stage)
    return self

  def transform(self, model=None):
    for stage in self.stages:
      logger.debug('Running stage %s', type(stage).__name__)
      model = stage(model)

    return model


if __name__ == '__main__':
  pass

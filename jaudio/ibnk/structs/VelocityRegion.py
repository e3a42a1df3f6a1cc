'''
### VelocityRegion Module

This module defines the `VelocityRegion` class, which maps the velocities up to and including its
own to one wave, with a volume and pitch adjustment. Velocity regions are shared by melodic key
regions and drum set percussion.

Classes:
    `VelocityRegion`:
        Represents a single velocity region (0x10 bytes in binary form).

Functions:
    `insert_velocity_region`:
        Inserts a region into a list kept sorted by velocity, refusing duplicates.
'''
from bisect import bisect_left

# Import helper functions
from ...Helpers import *
from ...Console import warn

VELOCITY_REGION_SIZE = 0x10


# struct size = 0x10
class VelocityRegion:
  ''' Represents a velocity region '''
  def __init__(self, velocity: int = 127, wave_id: int = 0):
    self.velocity = velocity
    self.wave_id  = wave_id
    self.volume   = 1.0
    self.pitch    = 1.0

  @classmethod
  def from_bytes(cls, reader):
    velocity = reader.read_u8()
    if velocity > 127:
      warn('IBNK: velocity region has a bad velocity %d', velocity)
      return None

    reader.step(3)
    self = cls(velocity, reader.read_u32() & 0xFFFF)
    self.volume = reader.read_f32()
    self.pitch  = reader.read_f32()
    return self

  def write(self, writer) -> None:
    writer.write_u8(self.velocity)
    writer.write_padding(4)
    writer.write_u32(self.wave_id & 0xFFFF)
    writer.write_f32(self.volume)
    writer.write_f32(self.pitch)

  @classmethod
  def from_yaml(cls, region_dict: dict):
    self = cls(int(region_dict.get('velocity', 127)), int(region_dict['wave id']))
    self.volume = float(region_dict.get('volume', 1.0))
    self.pitch  = float(region_dict.get('pitch', 1.0))
    return self

  def to_yaml(self) -> dict:
    return {
      "velocity": self.velocity,
      "wave id": self.wave_id,
      "volume": self.volume,
      "pitch": self.pitch
    }

  @property
  def struct_size(self) -> int:
    return VELOCITY_REGION_SIZE

def insert_velocity_region(regions: list[VelocityRegion], region: VelocityRegion) -> bool:
  velocities = [r.velocity for r in regions]
  index = bisect_left(velocities, region.velocity)

  if index < len(regions) and regions[index].velocity == region.velocity:
    return False

  regions.insert(index, region)
  return True

if __name__ == '__main__':
  pass

'''
### XMLParser Module

This module provides the attribute readers and document writer shared by the IBNK and WSYS
XML stages.

Functions:
    `read_int`, `read_float`, `read_key`, `read_enum`, `read_str`:
        Read an attribute, returning the default when it is absent and None when it is present
        but malformed.

    `set_float`:
        Writes a single precision value with the shortest exact text form.

    `write_xml`:
        Indents an element tree and writes it to a binary stream with an XML declaration.

Dependencies:
    `xml.etree.ElementTree`:
        Used for navigating and building XML trees.

Intended Usage:
    Stages decide what "missing" and "malformed" mean for each attribute: the readers only
    separate the three cases (absent, malformed, valid) so the caller can warn or fail.
'''
import xml.etree.ElementTree as xml

from .Helpers import format_float, name_to_key

def read_str(element: xml.Element, name: str, default=None):
  value = element.get(name)
  return default if value is None else value

def read_int(element: xml.Element, name: str, default=None):
  value = element.get(name)
  if value is None:
    return default

  try:
    return int(value.strip())
  except ValueError:
    return None

def read_float(element: xml.Element, name: str, default=None):
  value = element.get(name)
  if value is None:
    return default

  try:
    return float(value)
  except ValueError:
    return None

def read_key(element: xml.Element, name: str, default=None):
  value = element.get(name)
  if value is None:
    return default

  key = name_to_key(value)
  return key if key >= 0 else None

def read_enum(element: xml.Element, name: str, enum_type, default=None):
  value = element.get(name)
  if value is None:
    return default

  return enum_type.from_xml_name(value)

def set_float(element: xml.Element, name: str, value: float):
  element.set(name, format_float(value))

def write_xml(root: xml.Element, stream, comment: str = None) -> None:
  tree = xml.ElementTree(root)
  xml.indent(tree)
  stream.write(b'<?xml version="1.0" encoding="UTF-8"?>\n')

  if comment:
    stream.write(xml.tostring(xml.Comment(comment)) + b'\n')

  tree.write(stream, encoding='utf-8', xml_declaration=False)
  stream.write(b'\n')

if __name__ == '__main__':
  pass

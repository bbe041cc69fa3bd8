#!/usr/bin/env python
# encoding: utf-8
# Copyright 2016-2021 Alexander Mollberg
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Git's base85 line format.

Each line holds up to 52 bytes. The first character encodes how many:
'A'-'Z' for 1-26 and 'a'-'z' for 27-52. The rest of the line is the data in
groups of 5 characters per 4 bytes, using the same alphabet as
base64.b85encode.
"""
import base64
import zlib
from typing import List

from diffparse.errors import UnexpectedDataError

MAX_LINE_BYTES = 52
# Length character plus 52 bytes worth of 5-character groups
MAX_LINE_LENGTH = 1 + MAX_LINE_BYTES // 4 * 5


def line_length(line: bytes) -> int:
  code = line[:1]
  if b'A' <= code <= b'Z':
    return ord(code) - ord('A') + 1
  if b'a' <= code <= b'z':
    return ord(code) - ord('a') + 26 + 1
  raise UnexpectedDataError("Unexpected data in base85 section")


def encoded_length(length: int) -> int:
  return (length + 3) // 4 * 5


def decode_line(data: bytes, length: int) -> bytes:
  if len(data) != encoded_length(length):
    raise UnexpectedDataError("Unexpected base85 line length")
  try:
    decoded = base64.b85decode(data)
  except ValueError as e:
    raise UnexpectedDataError("Invalid base85 value") from e
  return decoded[:length]


def length_code(length: int) -> bytes:
  assert 0 < length <= MAX_LINE_BYTES
  if length <= 26:
    return bytes([ord('A') + length - 1])
  return bytes([ord('a') + length - 26 - 1])


def encode_line(chunk: bytes) -> bytes:
  return length_code(len(chunk)) + base64.b85encode(chunk, pad=True)


def encode_literal(content: bytes) -> List[bytes]:
  """
  Compress content and split it into the base85 lines of a git 'literal'
  block, without terminators.
  """
  compressed = zlib.compress(content)
  return [encode_line(compressed[i:i + MAX_LINE_BYTES])
          for i in range(0, len(compressed), MAX_LINE_BYTES)]

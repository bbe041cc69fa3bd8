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

# To be able to use the enclosing class type in class method type hints
from __future__ import annotations

import io
from contextlib import contextmanager
from typing import Optional, Tuple

CRLF = b'\r\n'
LF = b'\n'


class LineCursor(object):
  """
  Line oriented reader over a seekable binary file.

  Only the current line is ever held in memory; everything else is
  addressed by byte offset.
  """

  def __init__(self, fileobj):
    self._file = fileobj
    self._size = fileobj.seek(0, io.SEEK_END)
    fileobj.seek(0)

  @staticmethod
  def from_bytes(data: bytes) -> LineCursor:
    return LineCursor(io.BytesIO(data))

  def __repr__(self):
    return "<LineCursor: at %d of %d>" % (self.position(), self._size)

  @property
  def size(self) -> int:
    return self._size

  def read_line(self, limit: Optional[int] = None) \
          -> Tuple[bytes, Optional[bytes], bool]:
    """
    Read one line and split off its terminator.

    Returns (line, eol, eof). eof is set when the line was ended by the end
    of the file instead of a terminator. A line cut short by limit has
    neither an eol nor eof set.
    """
    if limit is None:
      raw = self._file.readline()
    else:
      raw = self._file.readline(limit)
    if raw.endswith(CRLF):
      return raw[:-2], CRLF, False
    if raw.endswith(LF):
      return raw[:-1], LF, False
    return raw, None, self.position() >= self._size

  def read(self, size: int) -> bytes:
    return self._file.read(size)

  def seek(self, offset: int):
    self._file.seek(offset)

  def position(self) -> int:
    return self._file.tell()

  def at_eof(self) -> bool:
    return self.position() >= self._size

  @contextmanager
  def preserved_position(self):
    saved = self.position()
    try:
      yield self
    finally:
      self.seek(saved)

  def first_eol(self) -> Optional[bytes]:
    """
    The terminator of the first line of the file.
    """
    with self.preserved_position():
      self.seek(0)
      _, eol, _ = self.read_line()
    return eol

  def close(self):
    self._file.close()

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
Readers that turn a literal block of a git binary patch into file content.

  LengthVerifyStream(DecompressStream(Base85DataStream(cursor, start, end)))

Each reader pulls from the one it wraps and is created fresh for every
read of a side, so reading one side never affects the other.
"""
import io
import zlib

from diffparse import base85
from diffparse import debug
from diffparse.errors import FilesizeMismatchError, UnexpectedDataError
from diffparse.line_cursor import LineCursor
from diffparse.text_range import TextRange


class Base85DataStream(io.RawIOBase):
  def __init__(self, cursor: LineCursor, start: int, end: int):
    super(Base85DataStream, self).__init__()
    self._cursor = cursor
    self._next_pos = start
    self._end_pos = end
    self._buffer = b''
    self._buf_pos = 0
    self._done = False

  def readable(self):
    return True

  def readinto(self, b):
    if self._done or not len(b):
      return 0
    view = memoryview(b)
    written = 0
    while written < len(view) and (self._buf_pos < len(self._buffer) or
                                   self._next_pos < self._end_pos):
      available = len(self._buffer) - self._buf_pos
      if available:
        n = min(len(view) - written, available)
        view[written:written + n] = \
          self._buffer[self._buf_pos:self._buf_pos + n]
        written += n
        self._buf_pos += n
        if written == len(view):
          return written

      if self._next_pos >= self._end_pos:
        break
      self._buffer = self._decode_next_line()
      self._buf_pos = 0

    self._done = True
    return written

  def _decode_next_line(self) -> bytes:
    with self._cursor.preserved_position():
      self._cursor.seek(self._next_pos)
      line, _, eof = self._cursor.read_line()
      self._next_pos = self._end_pos if eof else self._cursor.position()
    length = base85.line_length(line)
    if length < base85.MAX_LINE_BYTES:
      # Only the last line of a block is short
      self._next_pos = self._end_pos
    debug.get('streams').debug("base85 line of %d bytes", length)
    return base85.decode_line(line[1:], length)


class DecompressStream(io.RawIOBase):
  CHUNK_SIZE = 4096

  def __init__(self, inner: io.RawIOBase):
    super(DecompressStream, self).__init__()
    self._inner = inner
    self._decompressor = zlib.decompressobj()
    self._pending = b''

  def readable(self):
    return True

  def readinto(self, b):
    size = len(b)
    if size == 0:
      return 0
    while not self._pending:
      if self._decompressor.eof:
        return 0
      data = self._decompressor.unconsumed_tail
      if not data:
        data = self._inner.read(self.CHUNK_SIZE)
        if not data:
          # Out of input; LengthVerifyStream decides if that is too short
          return 0
      try:
        self._pending = self._decompressor.decompress(data, size)
      except zlib.error as e:
        raise UnexpectedDataError("Decompression of binary data failed") from e
    n = min(size, len(self._pending))
    b[:n] = self._pending[:n]
    self._pending = self._pending[n:]
    return n

  def close(self):
    self._inner.close()
    super(DecompressStream, self).close()


class LengthVerifyStream(io.RawIOBase):
  def __init__(self, inner: io.RawIOBase, expected_size: int):
    super(LengthVerifyStream, self).__init__()
    self._inner = inner
    self._expected_size = expected_size
    self._remaining = expected_size

  def readable(self):
    return True

  def readinto(self, b):
    view = memoryview(b)
    requested = len(view)
    total = 0
    # Fill the whole request unless the inner stream runs dry
    while total < requested:
      n = self._inner.readinto(view[total:])
      if not n:
        break
      total += n

    if total > self._remaining:
      raise FilesizeMismatchError(
        "Base85 data expands to longer than declared filesize",
        self._expected_size)
    if requested > total and total != self._remaining:
      raise FilesizeMismatchError(
        "Base85 data expands to smaller than declared filesize",
        self._expected_size)
    self._remaining -= total
    return total

  def close(self):
    self._inner.close()
    super(LengthVerifyStream, self).close()


def open_literal_stream(cursor: LineCursor, text_range: TextRange,
                        filesize: int) -> io.RawIOBase:
  # Git's 'delta' encoding would need an undelta step between these two
  s = Base85DataStream(cursor, text_range.start, text_range.end)
  s = DecompressStream(s)
  return LengthVerifyStream(s, filesize)

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
from typing import Iterator, Optional

from diffparse import debug
from diffparse.line_cursor import LineCursor
from diffparse.model import Patch
from diffparse.parse_binary import parse_binary_patch
from diffparse.parse_header import parse_header, ParseState
from diffparse.parse_hunks import parse_hunks


class PatchFile(object):
  """
  A patch file holding any number of file entries, read one at a time.

  The Patch records returned refer back into the file, so it must stay
  open for as long as their content is read.
  """

  def __init__(self, fileobj):
    self.cursor = LineCursor(fileobj)
    self._next_patch_offset = 0

  @staticmethod
  def open(path) -> PatchFile:
    return PatchFile(open(path, 'rb'))

  @staticmethod
  def from_bytes(data: bytes) -> PatchFile:
    return PatchFile(io.BytesIO(data))

  def __enter__(self):
    return self

  def __exit__(self, exc_type, exc_value, traceback):
    self.close()

  def close(self):
    self.cursor.close()

  def next_patch(self, reverse: bool = False,
                 ignore_whitespace: bool = False) -> Optional[Patch]:
    """
    Parse the next file entry. Returns None when there are no more.

    An error aborts only the entry being parsed; the following call
    starts where the failed entry stopped.
    """
    if self._next_patch_offset >= self.cursor.size:
      return None
    self.cursor.seek(self._next_patch_offset)
    try:
      patch, state = parse_header(self.cursor, reverse)
      if patch is None:
        return None
      if state == ParseState.BINARY_PATCH_FOUND:
        parse_binary_patch(patch, self.cursor, reverse)
        # Property hunks may follow
      parse_hunks(patch, self.cursor, ignore_whitespace)
    finally:
      self._next_patch_offset = self.cursor.position()
    debug.get('parser').debug("Next patch starts at offset %d",
                              self._next_patch_offset)
    return patch

  def patches(self, reverse: bool = False,
              ignore_whitespace: bool = False) -> Iterator[Patch]:
    while True:
      patch = self.next_patch(reverse, ignore_whitespace)
      if patch is None:
        return
      yield patch

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

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, TYPE_CHECKING

from diffparse.line_cursor import LineCursor
from diffparse.text_range import TextRange

if TYPE_CHECKING:
  from diffparse.model import Patch

ADD = b'+'
DELETE = b'-'
CONTEXT = b' '
NO_EOL_MARKER = b'\\'

Line = Tuple[bytes, Optional[bytes], bool]


@dataclass(eq=False)
class Hunk:
  cursor: LineCursor = field(repr=False)
  patch: Optional[Patch] = field(repr=False)
  diff_range: TextRange
  original_range: TextRange
  modified_range: TextRange
  # As written in the hunk header
  original_start: int = 0
  original_length: int = 0
  modified_start: int = 0
  modified_length: int = 0
  leading_context: int = 0
  trailing_context: int = 0
  original_no_final_eol: bool = False
  modified_no_final_eol: bool = False
  # Lines the header announced but the body did not deliver, or vice versa
  original_fuzz: int = 0
  modified_fuzz: int = 0

  @property
  def reverse(self):
    return self.patch is not None and self.patch.reverse

  # The properties below present the hunk in the direction the patch is
  # to be applied, using the attribute names of pygit2.DiffHunk.

  @property
  def old_start(self):
    return self.modified_start if self.reverse else self.original_start

  @property
  def old_lines(self):
    return self.modified_length if self.reverse else self.original_length

  @property
  def new_start(self):
    return self.original_start if self.reverse else self.modified_start

  @property
  def new_lines(self):
    return self.original_length if self.reverse else self.modified_length

  @property
  def old_no_final_eol(self):
    return self.modified_no_final_eol if self.reverse \
      else self.original_no_final_eol

  @property
  def new_no_final_eol(self):
    return self.original_no_final_eol if self.reverse \
      else self.modified_no_final_eol

  @property
  def fuzz_penalty(self):
    return self.modified_fuzz if self.reverse else self.original_fuzz

  def readline_original_text(self) -> Line:
    if self.reverse:
      return self._readline_side(self.modified_range, DELETE,
                                 self.modified_no_final_eol)
    return self._readline_side(self.original_range, ADD,
                               self.original_no_final_eol)

  def readline_modified_text(self) -> Line:
    if self.reverse:
      return self._readline_side(self.original_range, ADD,
                                 self.original_no_final_eol)
    return self._readline_side(self.modified_range, DELETE,
                               self.modified_no_final_eol)

  def readline_diff_text(self) -> Line:
    text_range = self.diff_range
    if text_range.exhausted():
      return b'', None, True
    with self.cursor.preserved_position():
      self.cursor.seek(text_range.current)
      line, eol, eof = self.cursor.read_line(text_range.remaining())
      text_range.current = self.cursor.position()
      if eof and eol is None and line:
        eol = self.cursor.first_eol()
        eof = False
    if self.reverse:
      if line.startswith(ADD):
        line = DELETE + line[1:]
      elif line.startswith(DELETE):
        line = ADD + line[1:]
    return line, eol, eof

  def reset_original_text(self):
    (self.modified_range if self.reverse else self.original_range).reset()

  def reset_modified_text(self):
    (self.original_range if self.reverse else self.modified_range).reset()

  def reset_diff_text(self):
    self.diff_range.reset()

  def original_text(self) -> Iterator[bytes]:
    self.reset_original_text()
    return _lines_with_eol(self.readline_original_text)

  def modified_text(self) -> Iterator[bytes]:
    self.reset_modified_text()
    return _lines_with_eol(self.readline_modified_text)

  def diff_text(self) -> Iterator[bytes]:
    self.reset_diff_text()
    return _lines_with_eol(self.readline_diff_text)

  def _readline_side(self, text_range: TextRange, skipped: bytes,
                     no_final_eol: bool) -> Line:
    if text_range.exhausted():
      return b'', None, True

    with self.cursor.preserved_position():
      self.cursor.seek(text_range.current)
      while True:
        line, eol, eof = self.cursor.read_line(text_range.remaining())
        text_range.current = self.cursor.position()
        filtered = line.startswith(skipped) or line.startswith(NO_EOL_MARKER)
        if not filtered or eof or text_range.exhausted():
          break

      if filtered:
        return b'', None, True
      if eof and eol is None and not no_final_eol and line:
        # The patch file ends without a terminator and without saying so;
        # report the terminator the file uses elsewhere.
        eol = self.cursor.first_eol()
        eof = False

    if line[:1] in (ADD, DELETE, CONTEXT):
      line = line[1:]
    # Anything else is a context line whose leading space was chopped
    return line, eol, eof


def _lines_with_eol(readline) -> Iterator[bytes]:
  while True:
    line, eol, eof = readline()
    if line or eol:
      yield line + (eol or b'')
    if eof:
      break

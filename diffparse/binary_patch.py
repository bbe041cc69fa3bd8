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
import io
from dataclasses import dataclass, field

from diffparse.line_cursor import LineCursor
from diffparse.streams import open_literal_stream
from diffparse.text_range import TextRange


@dataclass(eq=False)
class BinaryPatch:
  cursor: LineCursor = field(repr=False)
  # Offsets of the base85 lines of each literal block
  source_range: TextRange = field(default_factory=TextRange.empty)
  source_filesize: int = 0
  destination_range: TextRange = field(default_factory=TextRange.empty)
  destination_filesize: int = 0

  def swap_sides(self):
    self.source_range, self.destination_range = \
      self.destination_range, self.source_range
    self.source_filesize, self.destination_filesize = \
      self.destination_filesize, self.source_filesize

  def original_stream(self) -> io.RawIOBase:
    return open_literal_stream(self.cursor, self.source_range,
                               self.source_filesize)

  def result_stream(self) -> io.RawIOBase:
    return open_literal_stream(self.cursor, self.destination_range,
                               self.destination_filesize)

  def original_content(self) -> bytes:
    with self.original_stream() as s:
      return s.read()

  def result_content(self) -> bytes:
    with self.result_stream() as s:
      return s.read()

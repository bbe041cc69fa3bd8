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
from typing import Optional, Union

from diffparse.hunk import Hunk, ADD, DELETE
from diffparse.line_cursor import LineCursor
from diffparse.model import Patch
from diffparse.text_range import TextRange

ADD_HEADER = b'@@ -0,0 +1 @@\n'
DELETE_HEADER = b'@@ -1 +0,0 @@\n'
NO_EOL_LINE = b'\\ No newline at end of hunk\n'


def _single_line_hunk(line: Union[bytes, str], patch: Optional[Patch],
                      add: bool) -> Hunk:
  if isinstance(line, str):
    line = line.encode('utf-8')
  header = ADD_HEADER if add else DELETE_HEADER
  header_len = len(header)
  # Up to, but not including, the terminator of the one diff line
  text_end = header_len + 1 + len(line)
  buf = header + (ADD if add else DELETE) + line + b'\n' + NO_EOL_LINE

  synthesized = TextRange(header_len, text_end)
  # The side that has no text
  absent = TextRange.empty()

  return Hunk(cursor=LineCursor.from_bytes(buf),
              patch=patch,
              diff_range=TextRange(header_len, len(buf)),
              original_range=absent if add else synthesized,
              modified_range=synthesized if add else absent,
              original_start=0 if add else 1,
              original_length=0 if add else 1,
              modified_start=1 if add else 0,
              modified_length=1 if add else 0,
              original_no_final_eol=not add,
              modified_no_final_eol=add)


def create_adds_single_line(line: Union[bytes, str],
                            patch: Optional[Patch] = None) -> Hunk:
  """
  A hunk that adds the single line, which has no terminator, to an empty
  file.
  """
  return _single_line_hunk(line, patch, add=True)


def create_deletes_single_line(line: Union[bytes, str],
                               patch: Optional[Patch] = None) -> Hunk:
  """
  A hunk that deletes the single line, which has no terminator, leaving
  an empty file.
  """
  return _single_line_hunk(line, patch, add=False)

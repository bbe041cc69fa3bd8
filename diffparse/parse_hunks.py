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

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from diffparse import debug
from diffparse.errors import MalformedHunkHeaderError
from diffparse.hunk import Hunk, ADD, DELETE, CONTEXT, NO_EOL_MARKER
from diffparse.line_cursor import LineCursor
from diffparse.model import Patch, Operation
from diffparse.text_range import TextRange

TEXT_ATAT = b'@@'
PROP_ATAT = b'##'

_RANGE = rb'(\d+)(?:,(\d+))?'


@dataclass(frozen=True)
class HunkHeader:
  original_start: int
  original_length: int
  modified_start: int
  modified_length: int


@dataclass
class ParsedHunk:
  hunk: Hunk
  is_property: bool
  prop_name: Optional[str]
  prop_operation: Optional[Operation]


class LineType(Enum):
  NOISE = 0
  ORIGINAL = 1
  MODIFIED = 2
  CONTEXT = 3


def parse_hunk_header(line: bytes, atat: bytes = TEXT_ATAT) \
        -> Optional[HunkHeader]:
  """
  Parse '@@ -start[,length] +start[,length] @@ [anything]'.

  Returns None if the line is not meant as a hunk header at all and raises
  MalformedHunkHeaderError if it is but cannot be understood. An omitted
  length means one line.
  """
  if not line.startswith(atat + b' -'):
    return None
  pattern = re.escape(atat) + rb' -' + _RANGE + rb' \+' + _RANGE + rb' ' + \
            re.escape(atat)
  match = re.match(pattern, line)
  if match is None:
    raise MalformedHunkHeaderError(line)

  def length(group):
    return 1 if group is None else int(group)

  # Anything after the closing marker, like a function name, is ignored
  return HunkHeader(original_start=int(match.group(1)),
                    original_length=length(match.group(2)),
                    modified_start=int(match.group(3)),
                    modified_length=length(match.group(4)))


def _parse_prop_name(line: bytes, prefix: bytes) -> Optional[str]:
  name = line[len(prefix):].decode('utf-8', 'surrogateescape').strip()
  return name or None


def _hunk_text_end(cursor: LineCursor, last_line: int) -> int:
  """
  Where the text of the previous line ends, without its terminator.
  """
  off = max(last_line - 2, 0)
  cursor.seek(off)
  eolbuf = cursor.read(last_line - off)
  if eolbuf == b'\r\n':
    return last_line - 2
  if eolbuf[-1:] in (b'\n', b'\r'):
    return last_line - 1
  return last_line


def parse_next_hunk(patch: Patch, cursor: LineCursor,
                    ignore_whitespace: bool = False) -> Optional[ParsedHunk]:
  """
  Parse the next hunk of the patch, starting at the cursor.

  Returns None when there are no more hunks for this patch. The cursor is
  left at the first line that does not belong to the hunk.
  """
  if cursor.at_eof():
    return None

  in_hunk = False
  hunk_seen = False
  is_property = False
  prop_name = None
  prop_operation = None
  header = None
  original_lines = 0
  modified_lines = 0
  # Lines that came without being announced by the header
  original_extra = 0
  modified_extra = 0
  leading_context = 0
  trailing_context = 0
  changed_line_seen = False
  original_no_final_eol = False
  modified_no_final_eol = False
  original_end = None
  modified_end = None
  start = 0
  end = 0
  last_line_type = LineType.NOISE

  pos = cursor.position()
  while True:
    last_line = pos
    line, eol, eof = cursor.read_line()
    pos = cursor.position()

    # '\ No newline at end of file' or '\ No newline at end of property'
    if line.startswith(NO_EOL_MARKER):
      if in_hunk:
        # The marker ends the hunk text of the previous line, whose
        # terminator belongs to the patch file and not to the text.
        hunk_text_end = _hunk_text_end(cursor, last_line)
        cursor.seek(pos)

        if last_line_type == LineType.ORIGINAL and original_end is None:
          original_end = hunk_text_end
        elif last_line_type == LineType.MODIFIED and modified_end is None:
          modified_end = hunk_text_end
        elif last_line_type == LineType.CONTEXT:
          if original_end is None:
            original_end = hunk_text_end
          if modified_end is None:
            modified_end = hunk_text_end

        if last_line_type != LineType.MODIFIED:
          original_no_final_eol = True
        if last_line_type != LineType.ORIGINAL:
          modified_no_final_eol = True
      continue

    if in_hunk:
      if not hunk_seen:
        # The first line of the hunk text
        start = last_line

      c = line[:1]
      if original_lines > 0 and modified_lines > 0 and (
              c == CONTEXT
              # Tolerate chopped leading spaces on empty lines
              or (not eof and not line)
              or (ignore_whitespace and c not in (DELETE, ADD))):
        hunk_seen = True
        original_lines -= 1
        modified_lines -= 1
        if changed_line_seen:
          trailing_context += 1
        else:
          leading_context += 1
        last_line_type = LineType.CONTEXT
      elif c == DELETE and (original_lines > 0 or line[1:2] != DELETE):
        # A lone '--' line with no original lines left is more likely the
        # start of the next patch than a deleted line.
        hunk_seen = True
        changed_line_seen = True
        # Context in the middle of a hunk is neither leading nor trailing
        trailing_context = 0
        if original_lines > 0:
          original_lines -= 1
        else:
          original_extra += 1
        last_line_type = LineType.ORIGINAL
      elif c == ADD and (modified_lines > 0 or line[1:2] != ADD):
        hunk_seen = True
        changed_line_seen = True
        trailing_context = 0
        if modified_lines > 0:
          modified_lines -= 1
        else:
          modified_extra += 1
        last_line_type = LineType.MODIFIED
      else:
        # The hunk ends at end of file or at the start of this line
        end = pos if eof else last_line
        if original_end is None:
          original_end = end
        if modified_end is None:
          modified_end = end
        break
    else:
      if line.startswith(TEXT_ATAT):
        header = parse_hunk_header(line, TEXT_ATAT)
        in_hunk = header is not None
        if in_hunk:
          original_lines = header.original_length
          modified_lines = header.modified_length
          is_property = False
      elif line.startswith(PROP_ATAT):
        header = parse_hunk_header(line, PROP_ATAT)
        in_hunk = header is not None
        if in_hunk:
          original_lines = header.original_length
          modified_lines = header.modified_length
          is_property = True
      elif line.startswith(b'Added: '):
        prop_name = _parse_prop_name(line, b'Added: ')
        if prop_name:
          prop_operation = Operation.DELETED if patch.reverse \
            else Operation.ADDED
      elif line.startswith(b'Deleted: '):
        prop_name = _parse_prop_name(line, b'Deleted: ')
        if prop_name:
          prop_operation = Operation.ADDED if patch.reverse \
            else Operation.DELETED
      elif line.startswith(b'Modified: '):
        prop_name = _parse_prop_name(line, b'Modified: ')
        if prop_name:
          prop_operation = Operation.MODIFIED
      elif line.startswith(b'--- ') or line.startswith(b'diff --git '):
        # The header of another patch
        break

    if eof and not line:
      break

  if not eof:
    # The line just read may hold a patch or hunk header
    cursor.seek(last_line)

  if not (hunk_seen and start < end):
    debug.get('hunks').debug("No hunk found before offset %d", last_line)
    return None

  # Whatever is left of the counts was announced but never came
  original_length = header.original_length + original_extra - original_lines
  modified_length = header.modified_length + modified_extra - modified_lines
  original_fuzz = original_extra + original_lines
  modified_fuzz = modified_extra + modified_lines

  hunk = Hunk(cursor=cursor,
              patch=patch,
              diff_range=TextRange(start, end),
              original_range=TextRange(start, original_end),
              modified_range=TextRange(start, modified_end),
              original_start=header.original_start,
              original_length=original_length,
              modified_start=header.modified_start,
              modified_length=modified_length,
              leading_context=leading_context,
              trailing_context=trailing_context,
              original_no_final_eol=original_no_final_eol,
              modified_no_final_eol=modified_no_final_eol,
              original_fuzz=original_fuzz,
              modified_fuzz=modified_fuzz)
  debug.get('hunks').debug("Parsed hunk: %s", hunk)
  return ParsedHunk(hunk, is_property, prop_name, prop_operation)


def parse_hunks(patch: Patch, cursor: LineCursor,
                ignore_whitespace: bool = False):
  """
  Read all hunks of the patch. Text hunks go to patch.hunks in the order
  they appear, property hunks to patch.property_patches.
  """
  last_prop_name = None
  while True:
    parsed = parse_next_hunk(patch, cursor, ignore_whitespace)
    if parsed is None:
      break
    if parsed.is_property:
      # Further hunks of a property don't repeat its name
      prop_name = parsed.prop_name or last_prop_name
      if prop_name is None:
        debug.get('hunks').debug("Dropping property hunk without a name")
        continue
      last_prop_name = prop_name
      patch.add_property_hunk(prop_name, parsed.hunk, parsed.prop_operation)
    else:
      patch.hunks.append(parsed.hunk)
      last_prop_name = None

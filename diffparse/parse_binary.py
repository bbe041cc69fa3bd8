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
Location of the literal blocks following a 'GIT binary patch' line:

  GIT binary patch
  literal 12
  Tc${NkP*B)^o2WR;BjPy(>

  literal 10
  RcmZ>A&&?~=<|@r_0RRkN1I7RV

Git writes the postimage first and the preimage second.
"""
import re

from diffparse import base85
from diffparse import debug
from diffparse.binary_patch import BinaryPatch
from diffparse.line_cursor import LineCursor
from diffparse.model import Patch
from diffparse.text_range import TextRange

LITERAL = b'literal '


def _is_base85_line(line: bytes) -> bool:
  c = line[:1]
  return (b'A' <= c <= b'Z' or b'a' <= c <= b'z') \
    and len(line) <= base85.MAX_LINE_LENGTH \
    and b':' not in line \
    and b' ' not in line


def _parse_literal_size(line: bytes):
  match = re.match(rb'literal ([0-9]+)\s*$', line)
  if match is None:
    return None
  return int(match.group(1))


def parse_binary_patch(patch: Patch, cursor: LineCursor,
                       reverse: bool = False):
  """
  Find the two literal blocks and attach them to the patch as a
  BinaryPatch.

  Anything else, such as a 'delta' block, leaves the patch without a
  binary patch. The cursor is left at the line that ended the scan.
  """
  log = debug.get('binary')
  bpatch = BinaryPatch(cursor)
  in_blob = False
  in_src = False
  found = False

  pos = cursor.position()
  eof = False
  while not eof:
    last_line = pos
    line, _, eof = cursor.read_line()
    pos = cursor.position()

    if in_blob:
      if _is_base85_line(line):
        if in_src:
          bpatch.source_range.end = pos
        else:
          bpatch.destination_range.end = pos
      elif line.strip() and not (in_src and
                                 bpatch.source_range.start < last_line):
        log.debug("Unexpected line in binary patch: %r", line)
        break
      elif in_src:
        found = True
        break
      else:
        # A blank line ends the first block
        in_blob = False
        in_src = True
    elif line.startswith(LITERAL):
      size = _parse_literal_size(line)
      if size is None:
        log.debug("Malformed literal size: %r", line)
        break
      if in_src:
        bpatch.source_range = TextRange(pos, pos)
        bpatch.source_filesize = size
      else:
        bpatch.destination_range = TextRange(pos, pos)
        bpatch.destination_filesize = size
      in_blob = True
    else:
      log.debug("Not a literal block, giving up: %r", line)
      break

  if not eof:
    # The line just read may hold a patch or hunk header
    cursor.seek(last_line)
  elif in_src and (bpatch.source_range.end > bpatch.source_range.start
                   or not bpatch.source_filesize):
    found = True

  if not found:
    return
  if reverse:
    bpatch.swap_sides()
  log.debug("Binary patch: %s", bpatch)
  patch.binary_patch = bpatch

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
Recognition of the header of one file entry in a patch file.

Plain unified diffs:

  --- foo.c\t(revision 1)
  +++ foo.c\t(working copy)

Git extended diffs:

  diff --git a/foo.c b/bar.c
  similarity index 90%
  rename from foo.c
  rename to bar.c
  index 33e5b38..1f3e62d 100644
  --- a/foo.c
  +++ b/bar.c

The header is read line by line and run through TRANSITIONS, an ordered
table of (line prefix, required state, transition). The first entry whose
prefix and state both match decides the next state.
"""

# To be able to use the enclosing class type in class method type hints
from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Tuple

from diffparse import debug
from diffparse.line_cursor import LineCursor
from diffparse.model import Patch, Operation, Tristate, NULL_PATH


class ParseState(Enum):
  START = 'start'
  GIT_DIFF_SEEN = 'git_diff_seen'          # diff --git
  GIT_TREE_SEEN = 'git_tree_seen'          # a tree operation, not content
  GIT_MINUS_SEEN = 'git_minus_seen'        # --- /dev/null; or --- a/
  OLD_MODE_SEEN = 'old_mode_seen'          # old mode 100644
  GIT_MODE_SEEN = 'git_mode_seen'          # new mode 100644
  MOVE_FROM_SEEN = 'move_from_seen'        # rename from foo.c
  COPY_FROM_SEEN = 'copy_from_seen'        # copy from foo.c
  MINUS_SEEN = 'minus_seen'                # --- foo.c
  UNIDIFF_FOUND = 'unidiff_found'          # valid regular unidiff header
  GIT_HEADER_FOUND = 'git_header_found'    # valid git diff header
  BINARY_PATCH_FOUND = 'binary_patch_found'  # start of a binary patch


TERMINAL_STATES = {ParseState.UNIDIFF_FOUND,
                   ParseState.GIT_HEADER_FOUND,
                   ParseState.BINARY_PATCH_FOUND}
TREE_STATES = {ParseState.GIT_TREE_SEEN, ParseState.GIT_MODE_SEEN}


def _text(raw: bytes) -> str:
  return raw.decode('utf-8', 'surrogateescape')


def canonicalize_path(path: str) -> str:
  parts = [part for part in path.replace('\\', '/').split('/')
           if part not in ('', '.')]
  prefix = '/' if path.startswith('/') else ''
  return prefix + '/'.join(parts)


def _grab_path(raw) -> Optional[str]:
  path = (_text(raw) if isinstance(raw, bytes) else raw).strip()
  if path == NULL_PATH:
    return None
  return canonicalize_path(path)


def _until_tab(raw: bytes) -> bytes:
  return raw.split(b'\t', 1)[0]


def parse_executable_bit(mode_text: bytes) -> Tristate:
  """
  Translate a git file mode into whether the file is executable.

  0644 and 0755 are the only modes git writes for plain files, so only
  those two are taken as definitive.
  """
  match = re.match(rb'\s*([0-7]{1,6})\s*$', mode_text)
  if match is None:
    return Tristate.UNKNOWN
  mode = int(match.group(1), 8) & 0o777
  if mode == 0o644:
    return Tristate.FALSE
  if mode == 0o755:
    return Tristate.TRUE
  return Tristate.UNKNOWN


class HeaderScan(object):
  """
  The patch under construction and which of its paths have been named.
  """

  def __init__(self):
    self.patch = Patch()
    self.old_path_seen = False
    self.new_path_seen = False

  def set_old_path(self, path: Optional[str]):
    self.patch.old_path = path
    self.old_path_seen = True

  def set_new_path(self, path: Optional[str]):
    self.patch.new_path = path
    self.new_path_seen = True

  def complete(self):
    return self.old_path_seen and self.new_path_seen


# Transitions. Each takes the scan and the full line and returns the new
# state.

def diff_minus(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_old_path(_grab_path(_until_tab(line[len(b'--- '):])))
  return ParseState.MINUS_SEEN


def diff_plus(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_new_path(_grab_path(_until_tab(line[len(b'+++ '):])))
  if scan.patch.old_path is None and scan.patch.new_path is not None:
    scan.patch.operation = Operation.ADDED
  elif scan.patch.new_path is None and scan.patch.old_path is not None:
    scan.patch.operation = Operation.DELETED
  return ParseState.UNIDIFF_FOUND


def git_start(scan: HeaderScan, line: bytes) -> ParseState:
  # The line should look like 'diff --git a/path b/path'. The paths are
  # only taken from here when both are the same; renames and copies name
  # them on later lines.
  text = _text(line)
  old_marker = text.find(' a/')
  if old_marker < 0 or len(text) <= old_marker + 3:
    return ParseState.START
  new_marker = text.find(' b/', old_marker)
  if new_marker < 0 or len(text) <= new_marker + 3:
    return ParseState.START

  old_path_start = old_marker + 3
  search_from = old_path_start
  while True:
    new_marker = text.find(' b/', search_from)
    if new_marker < 0:
      break
    search_from = new_marker + 3
    old_path = text[old_path_start:new_marker]
    new_path = text[search_from:]
    if not new_path:
      break
    if old_path == new_path:
      scan.set_old_path(_grab_path(old_path))
      scan.set_new_path(_grab_path(new_path))
      break

  # Assume a plain modification until a tree header says otherwise
  scan.patch.operation = Operation.MODIFIED
  return ParseState.GIT_DIFF_SEEN


def git_minus(scan: HeaderScan, line: bytes) -> ParseState:
  line = _until_tab(line)
  if line.startswith(b'--- /dev/null'):
    scan.set_old_path(None)
  else:
    scan.set_old_path(_grab_path(line[len(b'--- a/'):]))
  return ParseState.GIT_MINUS_SEEN


def git_plus(scan: HeaderScan, line: bytes) -> ParseState:
  line = _until_tab(line)
  if line.startswith(b'+++ /dev/null'):
    scan.set_new_path(None)
  else:
    scan.set_new_path(_grab_path(line[len(b'+++ b/'):]))
  return ParseState.GIT_HEADER_FOUND


def _parse_mode(line: bytes, prefix: bytes) -> Tristate:
  executable = parse_executable_bit(line[len(prefix):])
  if executable == Tristate.UNKNOWN:
    debug.get('parser').debug("Mode of '%s' is neither 644 nor 755",
                              _text(line))
  return executable


def git_old_mode(scan: HeaderScan, line: bytes) -> ParseState:
  scan.patch.old_executable = _parse_mode(line, b'old mode ')
  return ParseState.OLD_MODE_SEEN


def git_new_mode(scan: HeaderScan, line: bytes) -> ParseState:
  scan.patch.new_executable = _parse_mode(line, b'new mode ')
  # The operation is left alone
  return ParseState.GIT_MODE_SEEN


def git_move_from(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_old_path(_grab_path(line[len(b'rename from '):]))
  return ParseState.MOVE_FROM_SEEN


def git_move_to(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_new_path(_grab_path(line[len(b'rename to '):]))
  scan.patch.operation = Operation.MOVED
  return ParseState.GIT_TREE_SEEN


def git_copy_from(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_old_path(_grab_path(line[len(b'copy from '):]))
  return ParseState.COPY_FROM_SEEN


def git_copy_to(scan: HeaderScan, line: bytes) -> ParseState:
  scan.set_new_path(_grab_path(line[len(b'copy to '):]))
  scan.patch.operation = Operation.COPIED
  return ParseState.GIT_TREE_SEEN


def git_new_file(scan: HeaderScan, line: bytes) -> ParseState:
  scan.patch.new_executable = _parse_mode(line, b'new file mode ')
  scan.patch.operation = Operation.ADDED
  return ParseState.GIT_TREE_SEEN


def git_deleted_file(scan: HeaderScan, line: bytes) -> ParseState:
  scan.patch.old_executable = _parse_mode(line, b'deleted file mode ')
  scan.patch.operation = Operation.DELETED
  return ParseState.GIT_TREE_SEEN


def git_index(state: ParseState):
  # 'index 33e5b38..1f3e62d' carries only hashes, 'index 33e5b38..1f3e62d
  # 100644' also the mode, which is unchanged or there would have been mode
  # lines. An added or deleted file has only one side, set by its own
  # mode line. Either way the state stays as it is.
  def transition(scan: HeaderScan, line: bytes) -> ParseState:
    fields = line[len(b'index '):].split(b' ', 1)
    patch = scan.patch
    if len(fields) == 2 \
            and patch.operation not in (Operation.ADDED, Operation.DELETED) \
            and patch.old_executable == Tristate.UNKNOWN \
            and patch.new_executable == Tristate.UNKNOWN:
      patch.new_executable = parse_executable_bit(fields[1])
      patch.old_executable = patch.new_executable
    return state
  return transition


def binary_patch_start(scan: HeaderScan, line: bytes) -> ParseState:
  scan.patch.operation = Operation.MODIFIED
  return ParseState.BINARY_PATCH_FOUND


TRANSITIONS = [
  (b'--- ', ParseState.START, diff_minus),
  (b'+++ ', ParseState.MINUS_SEEN, diff_plus),

  (b'diff --git', ParseState.START, git_start),
  (b'--- a/', ParseState.GIT_DIFF_SEEN, git_minus),
  (b'--- a/', ParseState.GIT_MODE_SEEN, git_minus),
  (b'--- a/', ParseState.GIT_TREE_SEEN, git_minus),
  (b'--- /dev/null', ParseState.GIT_MODE_SEEN, git_minus),
  (b'--- /dev/null', ParseState.GIT_TREE_SEEN, git_minus),
  (b'+++ b/', ParseState.GIT_MINUS_SEEN, git_plus),
  (b'+++ /dev/null', ParseState.GIT_MINUS_SEEN, git_plus),

  (b'old mode ', ParseState.GIT_DIFF_SEEN, git_old_mode),
  (b'new mode ', ParseState.OLD_MODE_SEEN, git_new_mode),

  (b'rename from ', ParseState.GIT_DIFF_SEEN, git_move_from),
  (b'rename from ', ParseState.GIT_MODE_SEEN, git_move_from),
  (b'rename to ', ParseState.MOVE_FROM_SEEN, git_move_to),

  (b'copy from ', ParseState.GIT_DIFF_SEEN, git_copy_from),
  (b'copy from ', ParseState.GIT_MODE_SEEN, git_copy_from),
  (b'copy to ', ParseState.COPY_FROM_SEEN, git_copy_to),

  (b'new file ', ParseState.GIT_DIFF_SEEN, git_new_file),

  (b'deleted file ', ParseState.GIT_DIFF_SEEN, git_deleted_file),

  (b'index ', ParseState.GIT_DIFF_SEEN, git_index(ParseState.GIT_DIFF_SEEN)),
  (b'index ', ParseState.GIT_TREE_SEEN, git_index(ParseState.GIT_TREE_SEEN)),
  (b'index ', ParseState.GIT_MODE_SEEN, git_index(ParseState.GIT_MODE_SEEN)),

  (b'GIT binary patch', ParseState.GIT_DIFF_SEEN, binary_patch_start),
  (b'GIT binary patch', ParseState.GIT_TREE_SEEN, binary_patch_start),
  (b'GIT binary patch', ParseState.GIT_MODE_SEEN, binary_patch_start),
]


def transition(state: ParseState, scan: HeaderScan, line: bytes) \
        -> Optional[ParseState]:
  """
  Run one line through the table. None if no entry matches.
  """
  for prefix, required_state, fn in TRANSITIONS:
    if state == required_state and line.startswith(prefix):
      return fn(scan, line)
  return None


def parse_header(cursor: LineCursor, reverse: bool = False) \
        -> Tuple[Optional[Patch], ParseState]:
  """
  Read lines from the cursor until a complete header has been recognized
  or the file ends.

  Returns the patch (None if no complete header was found) and the state
  the scan ended in. The cursor is left at the first line after the
  header.
  """
  scan = HeaderScan()
  state = ParseState.START
  line_after_tree_header_read = False
  pos = cursor.position()

  while True:
    last_line = pos
    line, _, eof = cursor.read_line()
    pos = cursor.position()

    new_state = transition(state, scan, line)
    valid_header_line = new_state is not None
    if valid_header_line:
      debug.get('parser').debug("%s -> %s: %s", state.value, new_state.value,
                                _text(line))
      state = new_state

    if state in TERMINAL_STATES:
      break
    elif state in TREE_STATES and line_after_tree_header_read \
            and not valid_header_line:
      # A header with only tree changes. The line just read may start the
      # next patch.
      cursor.seek(last_line)
      pos = last_line
      break
    elif state in TREE_STATES:
      line_after_tree_header_read = True
    elif not valid_header_line and state != ParseState.START \
            and state != ParseState.GIT_DIFF_SEEN:
      # Not a valid header after all. The line just read may begin a new
      # one so scan it again from the start.
      debug.get('parser').debug("Invalid header line in state %s: %s",
                                state.value, _text(line))
      cursor.seek(last_line)
      pos = last_line
      state = ParseState.START
      scan = HeaderScan()
      continue

    if eof:
      break

  if not scan.complete():
    debug.get('parser').debug("No complete header found")
    return None, state

  patch = scan.patch
  if reverse:
    patch.invert()
  debug.get('parser').debug("Parsed header: %s", patch)
  return patch, state

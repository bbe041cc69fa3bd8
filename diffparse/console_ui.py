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
from typing import List

from backports.shutil_get_terminal_size import get_terminal_size

from diffparse import debug
from diffparse.hunk import Hunk, ADD, DELETE
from diffparse.model import Patch, Operation, Tristate, NULL_PATH
from .console_color import *

OPERATION_LETTERS = {
  Operation.ADDED: 'A',
  Operation.DELETED: 'D',
  Operation.MODIFIED: 'M',
  Operation.COPIED: 'C',
  Operation.MOVED: 'R',
}

HASH_WIDTH = 8


def terminal_width():
  reported_terminal_column_size = get_terminal_size().columns
  if reported_terminal_column_size == 0:
    # Fall back to a default value
    reported_terminal_column_size = 80
  # Note: Subtracting two because ConEmu/Cmder line wraps two columns before
  return reported_terminal_column_size - 2


def truncate(text, width):
  if len(text) <= width:
    return text
  if width <= 3:
    return text[:width]
  # Keep the end of the path, where the file name is
  return '...' + text[len(text) - width + 3:]


def executable_transition(patch: Patch):
  old, new = patch.old_executable, patch.new_executable
  if old == Tristate.FALSE and new == Tristate.TRUE:
    return ' (+x)'
  if old == Tristate.TRUE and new == Tristate.FALSE:
    return ' (-x)'
  return ''


def format_paths(patch: Patch):
  old, new = patch.old_path, patch.new_path
  if old is None or new is None or old == new:
    return patch.nonnull_path() or NULL_PATH
  return old + ' -> ' + new


def format_patch_line(patch: Patch, width):
  letter = OPERATION_LETTERS[patch.operation]
  suffix = executable_transition(patch)
  paths = truncate(format_paths(patch), max(0, width - 2 - len(suffix)))
  return letter + ' ' + paths + suffix


def _range_text(start, length):
  if length == 1:
    return str(start)
  return '%d,%d' % (start, length)


def format_hunk_line(hunk: Hunk, atat='@@'):
  text = '%s -%s +%s %s' % (atat,
                            _range_text(hunk.old_start, hunk.old_lines),
                            _range_text(hunk.new_start, hunk.new_lines),
                            atat)
  notes = []
  if hunk.old_no_final_eol:
    notes.append('old: no final eol')
  if hunk.new_no_final_eol:
    notes.append('new: no final eol')
  if hunk.fuzz_penalty:
    notes.append('fuzz %d' % (hunk.fuzz_penalty,))
  if notes:
    text += ' (' + ', '.join(notes) + ')'
  return text


def _decode(line: bytes):
  return line.decode('utf-8', 'replace').rstrip('\r\n')


def print_hunk_text(hunk: Hunk, do_color, indent):
  for line in hunk.diff_text():
    text = _decode(line)
    if line.startswith(ADD):
      text = colored(text, ANSI_FG_GREEN, do_color)
    elif line.startswith(DELETE):
      text = colored(text, ANSI_FG_RED, do_color)
    print(indent + text)


def print_patch(patch: Patch, show_text=False, do_color=True, width=None):
  if width is None:
    width = terminal_width()
  print(format_patch_line(patch, width))
  indent = '  '
  for hunk in patch.hunks:
    print(indent + format_hunk_line(hunk))
    if show_text:
      print_hunk_text(hunk, do_color, indent * 2)
  if patch.binary_patch is not None:
    bpatch = patch.binary_patch
    print(indent + 'binary: %d -> %d bytes' % (bpatch.source_filesize,
                                               bpatch.destination_filesize))
  for name, prop_patch in patch.property_patches.items():
    print(indent + 'property %s (%s)' % (name, prop_patch.operation.value))
    for hunk in prop_patch.hunks:
      print(indent * 2 + format_hunk_line(hunk, '##'))
      if show_text:
        print_hunk_text(hunk, do_color, indent * 3)
  if patch.is_metadata_only() and not patch.property_patches:
    print(indent + colored('(no content change)', ANSI_FG_BRIGHT_BLACK,
                           do_color))


def print_patches(patches: List[Patch], show_text=False, do_color=True):
  width = terminal_width()
  debug.get('console').debug("Printing %d patches at width %d",
                             len(patches), width)
  for patch in patches:
    print_patch(patch, show_text, do_color, width)
  return len(patches)


def print_commit_header(commit, do_color=True):
  hash = str(commit.id)[0:HASH_WIDTH]
  message = commit.message.split('\n', 1)[0]
  width = terminal_width()
  message = message[0:max(0, width - HASH_WIDTH - 1)]
  print(colored(hash, ANSI_FG_CYAN, do_color), message)

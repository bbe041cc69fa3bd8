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

# Hierarchy:
# PatchFile
#  Patch                        one file entry of the patch file
#   .operation, .old_path, .new_path, .old_executable, .new_executable
#   .hunks[] : Hunk
#     .original_range, .modified_range, .diff_range : TextRange
#     .original_start, .original_length, .modified_start, .modified_length
#   .binary_patch : BinaryPatch
#     .source_range, .destination_range : TextRange
#   .property_patches{} : PropertyPatch
#     .hunks[] : Hunk

# To be able to use the enclosing class type in class method type hints
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
  from diffparse.binary_patch import BinaryPatch
  from diffparse.hunk import Hunk

NULL_PATH = '/dev/null'


def is_nullfile(fn):
  return fn == NULL_PATH


class Operation(Enum):
  ADDED = 'added'
  DELETED = 'deleted'
  MODIFIED = 'modified'
  COPIED = 'copied'
  MOVED = 'moved'

  def reversed(self) -> Operation:
    if self == Operation.ADDED:
      return Operation.DELETED
    if self == Operation.DELETED:
      return Operation.ADDED
    # Reversing a copy or a move has no single meaning; leave them be
    return self


class Tristate(Enum):
  TRUE = 'true'
  FALSE = 'false'
  UNKNOWN = 'unknown'


@dataclass(eq=False)
class PropertyPatch:
  name: str
  operation: Operation
  hunks: List[Hunk] = field(default_factory=list)


@dataclass(eq=False)
class Patch:
  old_path: Optional[str] = None
  new_path: Optional[str] = None
  operation: Operation = Operation.MODIFIED
  old_executable: Tristate = Tristate.UNKNOWN
  new_executable: Tristate = Tristate.UNKNOWN
  reverse: bool = False
  hunks: List[Hunk] = field(default_factory=list)
  binary_patch: Optional[BinaryPatch] = None
  property_patches: Dict[str, PropertyPatch] = field(default_factory=dict)

  def invert(self):
    """
    Switch the direction of the patch.

    Hunks and property hunks consult `reverse` when read, so only the
    header level information is swapped here.
    """
    self.reverse = not self.reverse
    self.old_path, self.new_path = self.new_path, self.old_path
    self.operation = self.operation.reversed()
    self.old_executable, self.new_executable = \
      self.new_executable, self.old_executable
    if self.binary_patch is not None:
      self.binary_patch.swap_sides()

  def is_metadata_only(self):
    return not self.hunks and self.binary_patch is None

  def nonnull_path(self):
    if self.old_path is not None:
      return self.old_path
    return self.new_path

  def add_property_hunk(self, name: str, hunk: Hunk,
                        operation: Optional[Operation]):
    prop_patch = self.property_patches.get(name)
    if prop_patch is None:
      prop_patch = PropertyPatch(name,
                                 operation if operation is not None
                                 else Operation.MODIFIED)
      self.property_patches[name] = prop_patch
    prop_patch.hunks.append(hunk)

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

from dataclasses import dataclass


@dataclass
class TextRange:
  # Inclusive
  start: int
  # Exclusive
  end: int
  # Next byte to be read
  current: int = None

  def __post_init__(self):
    if self.current is None:
      self.current = self.start

  @staticmethod
  def empty(offset: int = 0) -> TextRange:
    return TextRange(offset, offset)

  def is_empty(self):
    return self.start >= self.end

  def exhausted(self):
    return self.current >= self.end

  def remaining(self):
    return max(0, self.end - self.current)

  def reset(self):
    self.current = self.start

  def __len__(self):
    return max(0, self.end - self.start)

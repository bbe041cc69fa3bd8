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


class DiffParseError(RuntimeError):
  pass


class MalformedHunkHeaderError(DiffParseError):
  def __init__(self, line):
    super(MalformedHunkHeaderError, self).__init__(
      "Malformed hunk header: %r" % (line,))
    self.line = line


class UnexpectedDataError(DiffParseError):
  pass


class FilesizeMismatchError(UnexpectedDataError):
  def __init__(self, message, expected_size):
    super(FilesizeMismatchError, self).__init__(message)
    self.expected_size = expected_size

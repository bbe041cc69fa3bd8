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
import unittest

import pytest
from infrastructure import cursor_for

from diffparse import debug
from diffparse.model import Operation, Tristate
from diffparse.parse_header import parse_header, parse_executable_bit, \
  canonicalize_path, ParseState

debug.set_logging_categories('parser')


class UnidiffHeaderTest(unittest.TestCase):
  def test_plain(self):
    cursor = cursor_for("""
        --- a/foo.txt
        +++ b/foo.txt
        @@ -1 +1 @@
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.UNIDIFF_FOUND, state)
    self.assertEqual('a/foo.txt', patch.old_path)
    self.assertEqual('b/foo.txt', patch.new_path)
    self.assertEqual(Operation.MODIFIED, patch.operation)
    self.assertEqual(Tristate.UNKNOWN, patch.old_executable)
    self.assertEqual(Tristate.UNKNOWN, patch.new_executable)
    # The cursor is left at the hunk header
    self.assertEqual(b'@@ -1 +1 @@', cursor.read_line()[0])

  def test_timestamps(self):
    cursor = cursor_for("--- foo.c\t(revision 1)\n"
                        "+++ foo.c\t(working copy)\n")
    patch, _ = parse_header(cursor)
    self.assertEqual('foo.c', patch.old_path)
    self.assertEqual('foo.c', patch.new_path)

  def test_added(self):
    cursor = cursor_for("""
        --- /dev/null
        +++ b/new.txt
        """)
    patch, _ = parse_header(cursor)
    self.assertIsNone(patch.old_path)
    self.assertEqual('b/new.txt', patch.new_path)
    self.assertEqual(Operation.ADDED, patch.operation)

  def test_deleted(self):
    cursor = cursor_for("""
        --- a/old.txt
        +++ /dev/null
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual('a/old.txt', patch.old_path)
    self.assertIsNone(patch.new_path)
    self.assertEqual(Operation.DELETED, patch.operation)

  def test_leading_noise(self):
    cursor = cursor_for("""
        Index: foo.c
        ===================================================================
        --- foo.c
        +++ foo.c
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.UNIDIFF_FOUND, state)
    self.assertEqual('foo.c', patch.old_path)

  def test_restart_after_invalid_line(self):
    cursor = cursor_for("""
        --- foo
        garbage
        --- a/bar
        +++ b/bar
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual('a/bar', patch.old_path)
    self.assertEqual('b/bar', patch.new_path)

  def test_no_header(self):
    cursor = cursor_for("""
        just some text
        and some more
        """)
    patch, state = parse_header(cursor)
    self.assertIsNone(patch)
    self.assertEqual(ParseState.START, state)
    self.assertTrue(cursor.at_eof())

  def test_incomplete_header(self):
    patch, _ = parse_header(cursor_for("--- a/foo.txt\n"))
    self.assertIsNone(patch)


class GitHeaderTest(unittest.TestCase):
  def test_modification(self):
    cursor = cursor_for("""
        diff --git a/src/main.c b/src/main.c
        index 33e5b38..1f3e62d 100644
        --- a/src/main.c
        +++ b/src/main.c
        @@ -1 +1 @@
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_HEADER_FOUND, state)
    self.assertEqual('src/main.c', patch.old_path)
    self.assertEqual('src/main.c', patch.new_path)
    self.assertEqual(Operation.MODIFIED, patch.operation)
    self.assertEqual(Tristate.FALSE, patch.old_executable)
    self.assertEqual(Tristate.FALSE, patch.new_executable)

  def test_rename_with_content_change(self):
    cursor = cursor_for("""
        diff --git a/foo.c b/bar.c
        similarity index 90%
        rename from foo.c
        rename to bar.c
        index 33e5b38..1f3e62d 100755
        --- a/foo.c
        +++ b/bar.c
        @@ -1 +1 @@
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_HEADER_FOUND, state)
    self.assertEqual(Operation.MOVED, patch.operation)
    self.assertEqual('foo.c', patch.old_path)
    self.assertEqual('bar.c', patch.new_path)
    self.assertEqual(Tristate.TRUE, patch.new_executable)
    self.assertEqual(b'@@ -1 +1 @@', cursor.read_line()[0])

  def test_pure_rename(self):
    cursor = cursor_for("""
        diff --git a/old.txt b/new.txt
        similarity index 100%
        rename from old.txt
        rename to new.txt
        diff --git a/other.txt b/other.txt
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_TREE_SEEN, state)
    self.assertEqual(Operation.MOVED, patch.operation)
    self.assertEqual('old.txt', patch.old_path)
    self.assertEqual('new.txt', patch.new_path)
    self.assertTrue(patch.is_metadata_only())
    # The next patch starts where the scan stopped
    self.assertEqual(b'diff --git a/other.txt b/other.txt',
                     cursor.read_line()[0])

  def test_copy(self):
    cursor = cursor_for("""
        diff --git a/a.txt b/b.txt
        similarity index 100%
        copy from a.txt
        copy to b.txt
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Operation.COPIED, patch.operation)
    self.assertEqual('a.txt', patch.old_path)
    self.assertEqual('b.txt', patch.new_path)

  def test_mode_change(self):
    cursor = cursor_for("""
        diff --git a/run.sh b/run.sh
        old mode 100644
        new mode 100755
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_MODE_SEEN, state)
    self.assertEqual(Operation.MODIFIED, patch.operation)
    self.assertEqual(Tristate.FALSE, patch.old_executable)
    self.assertEqual(Tristate.TRUE, patch.new_executable)
    self.assertTrue(cursor.at_eof())

  def test_mode_change_with_content(self):
    cursor = cursor_for("""
        diff --git a/run.sh b/run.sh
        old mode 100755
        new mode 100644
        index 1111111..2222222
        --- a/run.sh
        +++ b/run.sh
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_HEADER_FOUND, state)
    self.assertEqual(Tristate.TRUE, patch.old_executable)
    self.assertEqual(Tristate.FALSE, patch.new_executable)

  def test_malformed_mode(self):
    cursor = cursor_for("""
        diff --git a/run.sh b/run.sh
        old mode 1006xx
        new mode 100755
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Tristate.UNKNOWN, patch.old_executable)
    self.assertEqual(Tristate.TRUE, patch.new_executable)

  def test_new_file(self):
    cursor = cursor_for("""
        diff --git a/new.sh b/new.sh
        new file mode 100755
        index 0000000..e69de29
        --- /dev/null
        +++ b/new.sh
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Operation.ADDED, patch.operation)
    self.assertIsNone(patch.old_path)
    self.assertEqual('new.sh', patch.new_path)
    self.assertEqual(Tristate.UNKNOWN, patch.old_executable)
    self.assertEqual(Tristate.TRUE, patch.new_executable)

  def test_empty_new_file(self):
    cursor = cursor_for("""
        diff --git a/empty b/empty
        new file mode 100644
        index 0000000..e69de29
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.GIT_TREE_SEEN, state)
    self.assertEqual(Operation.ADDED, patch.operation)
    self.assertEqual('empty', patch.new_path)
    self.assertTrue(patch.is_metadata_only())

  def test_deleted_file(self):
    cursor = cursor_for("""
        diff --git a/gone.txt b/gone.txt
        deleted file mode 100644
        index e69de29..0000000
        --- a/gone.txt
        +++ /dev/null
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Operation.DELETED, patch.operation)
    self.assertEqual('gone.txt', patch.old_path)
    self.assertIsNone(patch.new_path)
    self.assertEqual(Tristate.FALSE, patch.old_executable)

  def test_new_symlink_index_mode(self):
    cursor = cursor_for("""
        diff --git a/link b/link
        new file mode 120000
        index 0000000..1de5659 100755
        --- /dev/null
        +++ b/link
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Operation.ADDED, patch.operation)
    self.assertEqual(Tristate.UNKNOWN, patch.old_executable)
    self.assertEqual(Tristate.UNKNOWN, patch.new_executable)

  def test_deleted_symlink_index_mode(self):
    cursor = cursor_for("""
        diff --git a/link b/link
        deleted file mode 120000
        index 1de5659..0000000 100644
        --- a/link
        +++ /dev/null
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual(Operation.DELETED, patch.operation)
    self.assertEqual(Tristate.UNKNOWN, patch.old_executable)
    self.assertEqual(Tristate.UNKNOWN, patch.new_executable)

  def test_binary(self):
    cursor = cursor_for("""
        diff --git a/image.png b/image.png
        index 1234567..89abcde 100644
        GIT binary patch
        literal 10
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.BINARY_PATCH_FOUND, state)
    self.assertEqual(Operation.MODIFIED, patch.operation)
    self.assertEqual(b'literal 10', cursor.read_line()[0])

  def test_paths_with_spaces(self):
    cursor = cursor_for("""
        diff --git a/dir b/file b/dir b/file
        old mode 100644
        new mode 100755
        """)
    patch, _ = parse_header(cursor)
    self.assertEqual('dir b/file', patch.old_path)
    self.assertEqual('dir b/file', patch.new_path)

  def test_bad_git_line(self):
    cursor = cursor_for("""
        diff --git nonsense
        --- a/foo
        +++ b/foo
        """)
    patch, state = parse_header(cursor)
    self.assertEqual(ParseState.UNIDIFF_FOUND, state)
    self.assertEqual('a/foo', patch.old_path)


class ReverseTest(unittest.TestCase):
  NEW_FILE = """
      diff --git a/new.sh b/new.sh
      new file mode 100755
      index 0000000..e69de29
      --- /dev/null
      +++ b/new.sh
      """

  def test_added_becomes_deleted(self):
    patch, _ = parse_header(cursor_for(self.NEW_FILE), reverse=True)
    self.assertTrue(patch.reverse)
    self.assertEqual(Operation.DELETED, patch.operation)
    self.assertEqual('new.sh', patch.old_path)
    self.assertIsNone(patch.new_path)
    self.assertEqual(Tristate.TRUE, patch.old_executable)
    self.assertEqual(Tristate.UNKNOWN, patch.new_executable)

  def test_reverse_twice_is_identity(self):
    patch, _ = parse_header(cursor_for(self.NEW_FILE))
    fields = (patch.operation, patch.old_path, patch.new_path,
              patch.old_executable, patch.new_executable, patch.reverse)
    patch.invert()
    patch.invert()
    self.assertEqual(fields,
                     (patch.operation, patch.old_path, patch.new_path,
                      patch.old_executable, patch.new_executable,
                      patch.reverse))

  def test_modified_stays(self):
    cursor = cursor_for("""
        --- a/foo.txt
        +++ b/foo.txt
        """)
    patch, _ = parse_header(cursor, reverse=True)
    self.assertEqual(Operation.MODIFIED, patch.operation)
    self.assertEqual('b/foo.txt', patch.old_path)

  def test_copy_stays(self):
    cursor = cursor_for("""
        diff --git a/a.txt b/b.txt
        copy from a.txt
        copy to b.txt
        """)
    patch, _ = parse_header(cursor, reverse=True)
    self.assertEqual(Operation.COPIED, patch.operation)
    self.assertEqual('b.txt', patch.old_path)
    self.assertEqual('a.txt', patch.new_path)


@pytest.mark.parametrize("mode, expected", [
  (b'100644', Tristate.FALSE),
  (b'100755', Tristate.TRUE),
  (b'0644', Tristate.FALSE),
  (b'755', Tristate.TRUE),
  (b'120000', Tristate.UNKNOWN),
  (b'100664', Tristate.UNKNOWN),
  (b'banana', Tristate.UNKNOWN),
  (b'', Tristate.UNKNOWN),
])
def test_executable_bit(mode, expected):
  assert expected == parse_executable_bit(mode)


@pytest.mark.parametrize("path, expected", [
  ('foo.c', 'foo.c'),
  ('./foo.c', 'foo.c'),
  ('a//b/./c', 'a/b/c'),
  ('/abs/path', '/abs/path'),
  ('dir\\file', 'dir/file'),
])
def test_canonicalize_path(path, expected):
  assert expected == canonicalize_path(path)

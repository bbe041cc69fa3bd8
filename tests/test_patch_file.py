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
import os
import tempfile
import unittest

from infrastructure import patch_text, patch_file_for

from diffparse.errors import MalformedHunkHeaderError
from diffparse.model import Operation
from diffparse.patch_file import PatchFile

MULTI = """
    From 1234 Mon Sep 17 00:00:00 2001
    Subject: [PATCH] Several changes

    ---
     a.txt | 2 +-
    diff --git a/a.txt b/a.txt
    index 1111111..2222222 100644
    --- a/a.txt
    +++ b/a.txt
    @@ -1 +1 @@
    -a
    +A
    diff --git a/old.txt b/new.txt
    similarity index 100%
    rename from old.txt
    rename to new.txt
    diff --git a/run.sh b/run.sh
    old mode 100644
    new mode 100755
    diff --git a/gone.txt b/gone.txt
    deleted file mode 100644
    index 3333333..0000000
    --- a/gone.txt
    +++ /dev/null
    @@ -1,2 +0,0 @@
    -x
    -y
    -- 
    2.30.0
    """


class PatchFileTest(unittest.TestCase):
  def test_entries(self):
    with patch_file_for(MULTI) as patch_file:
      patches = list(patch_file.patches())
    self.assertEqual([Operation.MODIFIED, Operation.MOVED,
                      Operation.MODIFIED, Operation.DELETED],
                     [p.operation for p in patches])
    self.assertEqual(['a.txt', 'old.txt', 'run.sh', 'gone.txt'],
                     [p.old_path for p in patches])
    self.assertEqual([1, 0, 0, 1], [len(p.hunks) for p in patches])
    self.assertEqual((2, 0), (patches[3].hunks[0].original_length,
                              patches[3].hunks[0].modified_length))

  def test_next_patch_until_end(self):
    patch_file = patch_file_for(MULTI)
    self.addCleanup(patch_file.close)
    count = 0
    while patch_file.next_patch() is not None:
      count += 1
    self.assertEqual(4, count)
    self.assertIsNone(patch_file.next_patch())

  def test_empty(self):
    with PatchFile.from_bytes(b'') as patch_file:
      self.assertIsNone(patch_file.next_patch())
      self.assertEqual([], list(patch_file.patches()))

  def test_no_patches(self):
    with PatchFile.from_bytes(b'Just a commit message\n\nNothing else\n') \
            as patch_file:
      self.assertEqual([], list(patch_file.patches()))

  def test_error_aborts_one_entry(self):
    patch_file = patch_file_for("""
        --- a/good1
        +++ b/good1
        @@ -1 +1 @@
        -a
        +b
        --- a/bad
        +++ b/bad
        @@ -x +1 @@
        +foo
        --- a/good2
        +++ b/good2
        @@ -1 +1 @@
        -c
        +d
        """)
    self.addCleanup(patch_file.close)
    first = patch_file.next_patch()
    with self.assertRaises(MalformedHunkHeaderError):
      patch_file.next_patch()
    last = patch_file.next_patch()
    self.assertEqual('a/good2', last.old_path)
    self.assertIsNone(patch_file.next_patch())
    # Earlier patches are still readable
    self.assertEqual([b'b\n'], list(first.hunks[0].modified_text()))
    self.assertEqual([b'd\n'], list(last.hunks[0].modified_text()))

  def test_open(self):
    fd, path = tempfile.mkstemp(suffix='.patch')
    self.addCleanup(os.remove, path)
    with os.fdopen(fd, 'wb') as f:
      f.write(patch_text(MULTI))
    with PatchFile.open(path) as patch_file:
      patches = list(patch_file.patches())
      self.assertEqual(4, len(patches))
      self.assertEqual([b'A\n'], list(patches[0].hunks[0].modified_text()))

  def test_close(self):
    f = io.BytesIO(patch_text(MULTI))
    with PatchFile(f) as patch_file:
      patch_file.next_patch()
    self.assertTrue(f.closed)

  def test_reverse_all(self):
    with patch_file_for(MULTI) as patch_file:
      patches = list(patch_file.patches(reverse=True))
      self.assertEqual(Operation.ADDED, patches[3].operation)
      self.assertEqual(['x\n', 'y\n'],
                       [line.decode() for line in
                        patches[3].hunks[0].modified_text()])
      self.assertEqual('new.txt', patches[1].old_path)


if __name__ == '__main__':
  unittest.main()

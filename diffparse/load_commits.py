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
Diffs taken straight out of a git repository, written out as git patch
text by libgit2 and read back with PatchFile.
"""
from dataclasses import dataclass, field
from typing import List

import pygit2

from diffparse import debug
from diffparse.model import Patch
from diffparse.patch_file import PatchFile

UNSTAGED_HEX = '0000000000000000000000000000000000000000'
STAGED_HEX = '0000000100000000000000000000000000000000'


# Literal blocks instead of 'Binary files differ'
DIFF_FLAGS = pygit2.enums.DiffOption.SHOW_BINARY


def get_diff(repo: pygit2.Repository, commit, find_similar=True) \
        -> pygit2.Diff:
  if isinstance(commit, pygit2.Commit):
    if commit.parents:
      diff = repo.diff(commit.parents[0], commit, flags=DIFF_FLAGS)
    else:
      # A root commit adds everything in its tree
      diff = commit.tree.diff_to_tree(flags=DIFF_FLAGS, swap=True)
  else:
    diff = commit.get_diff(repo, flags=DIFF_FLAGS)
  if find_similar:
    diff.find_similar()
  return diff


def diff_to_bytes(diff: pygit2.Diff) -> bytes:
  return b''.join(patch.data for patch in diff if patch is not None)


class FakeCommit(object):
  def __init__(self, hex):
    self.id = pygit2.Oid(hex=hex)
    self.message = ''


class Unstaged(FakeCommit):
  def __init__(self):
    super(Unstaged, self).__init__(UNSTAGED_HEX)
    self.message = ' (unstaged changes)'

  def get_diff(self, repo, **kwargs):
    return repo.diff(None, None, cached=False, **kwargs)


class Staged(FakeCommit):
  def __init__(self):
    super(Staged, self).__init__(STAGED_HEX)
    self.message = ' (staged changes)'

  def get_diff(self, repo, **kwargs):
    # This does NOT compare staged to HEAD
    # repo.diff(None, None, cached=True)
    return repo.index.diff_to_tree(repo.head.peel().tree, **kwargs)


class RepositoryNotFoundError(RuntimeError):
  pass


class CommitSelectionError(RuntimeError):
  pass


def _revparse(repo, ref):
  try:
    return repo.revparse_single(ref)
  except (KeyError, ValueError) as e:
    raise CommitSelectionError(
      f"Error: '{ref}' does not name a commit.") from e


class CommitSelection(object):
  def __init__(self, since_ref, until_ref, max_count, include_staged,
               include_unstaged):
    self.start = since_ref
    self.end = until_ref
    self.include_staged = include_staged
    self.include_unstaged = include_unstaged
    self.max_count = max_count

  def __repr__(self):
    return "<CommitSelection: since %s until %s, max %s>" % (
      self.start, self.end, self.max_count)

  def get_items(self, repo) -> List[pygit2.Commit]:
    if repo.head_is_unborn:
      commits = []
    else:
      commits = self._get_commits(repo)

    def add_if_nonempty(commit):
      if len(commit.get_diff(repo)) > 0:
        commits.append(commit)

    if self.include_staged and not repo.head_is_unborn:
      add_if_nonempty(Staged())
    if self.include_unstaged:
      add_if_nonempty(Unstaged())
    return commits

  def _get_commits(self, repo) -> List[pygit2.Commit]:
    walker = repo.walk(repo.head.target,
                       pygit2.GIT_SORT_TOPOLOGICAL | pygit2.GIT_SORT_REVERSE)
    if self.end:
      walker.push(_revparse(repo, self.end).id)
    if self.start:
      walker.hide(_revparse(repo, self.start).id)
    walker.simplify_first_parent()
    # Collect all selected commits, oldest first
    commits = [commit for commit in walker]
    if self.end:
      end_commit = _revparse(repo, self.end)
      ids = [c.id for c in commits]
      if end_commit.id not in ids:
        raise CommitSelectionError(
          f"Error: 'until' commit {end_commit.id} is not a descendant from "
          f"the selected start commit so the selection does not make sense.")
      commits = commits[:ids.index(end_commit.id) + 1]

    if self.max_count:
      if self.start:
        commits = commits[:self.max_count]
      else:
        # The most recent ones
        commits = commits[-self.max_count:]

    for c in commits:
      if len(c.parent_ids) > 1:
        raise CommitSelectionError(
          f"Error: Commit selection includes {c.id} which is a merge commit "
          f"and cannot be handled.")
    return commits


@dataclass(eq=False)
class CommitPatches:
  commit: object
  # Keeps the backing file of the patches open
  patch_file: PatchFile = field(repr=False)
  patches: List[Patch] = field(default_factory=list)

  def message(self):
    return self.commit.message.split('\n', 1)[0]


class CommitLoader(object):
  @staticmethod
  def load(repo_dir, commit_selection, reverse=False,
           ignore_whitespace=False) -> List[CommitPatches]:
    repo_root = pygit2.discover_repository(repo_dir)
    if repo_root is None:
      raise RepositoryNotFoundError(
        'Error: Working directory is not a git repository.')
    repo = pygit2.Repository(repo_root)
    commits = commit_selection.get_items(repo)
    debug.get('console').debug("Selected commits: %s",
                               [str(c.id) for c in commits])
    loaded = []
    for commit in commits:
      patch_file = PatchFile.from_bytes(diff_to_bytes(get_diff(repo, commit)))
      patches = list(patch_file.patches(reverse, ignore_whitespace))
      loaded.append(CommitPatches(commit, patch_file, patches))
    return loaded

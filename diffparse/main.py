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
import argparse
import os
import sys

from diffparse.console_ui import print_patch, print_patches, \
  print_commit_header
from diffparse.errors import DiffParseError
from diffparse.load_commits import CommitSelection, CommitLoader, \
  CommitSelectionError, RepositoryNotFoundError
from diffparse.patch_file import PatchFile
from . import debug


def fail(message):
  print(message, file=sys.stderr)
  sys.exit(1)


def show_patch_file(path, args):
  with PatchFile.open(path) as patch_file:
    for patch in patch_file.patches(args.reverse, args.ignore_whitespace):
      print_patch(patch, show_text=args.text, do_color=not args.no_color)


def show_commits(args):
  max_count = args.n
  if not (args.until or args.since or args.n):
    max_count = 3
  selection = CommitSelection(since_ref=args.since,
                              until_ref=args.until,
                              max_count=max_count,
                              include_staged=not args.until,
                              include_unstaged=not args.until)
  debug.get('console').debug(selection)
  for commit_patches in CommitLoader.load(os.getcwd(), selection,
                                          args.reverse,
                                          args.ignore_whitespace):
    with commit_patches.patch_file:
      print_commit_header(commit_patches.commit, do_color=not args.no_color)
      print_patches(commit_patches.patches, show_text=args.text,
                    do_color=not args.no_color)


def main():
  if 'DIFFPARSE_DEBUG' in os.environ:
    debug_parser = debug.log_option_parser()
    parent_parsers = [debug_parser]
  else:
    parent_parsers = []

  # Parse command line arguments
  argparser = argparse.ArgumentParser(prog='diffparse',
                                      description='List the file entries and hunks of a unified or git diff',
                                      parents=parent_parsers)
  argparser.add_argument('patchfile', metavar='PATCHFILE', nargs='?',
                         help='The patch file to read. Without it the latest '
                              'commits of the repository in the current '
                              'directory are read.')
  argparser.add_argument('-R', '--reverse', action='store_true',
                         required=False,
                         help='Read the patches as if they were reversed.')
  argparser.add_argument('--ignore-whitespace', action='store_true',
                         required=False,
                         help='Accept context lines with mangled leading '
                              'whitespace.')
  argparser.add_argument('-t', '--text', action='store_true', required=False,
                         help='Show the text of each hunk.')
  argparser.add_argument('--no-color', action='store_true', required=False,
                         help='Disable color coding of the output.')
  inspecarg = argparser.add_argument_group('repository',
                                           'Specify the commits to read when no patch file is given')
  inspecarg.add_argument('-u', '--until', metavar='END_COMMIT', action='store',
                         required=False, dest='until',
                         help='Which commit to show until, inclusive.')
  inspecarg.add_argument('-n', metavar='NUMBER_OF_COMMITS', action='store',
                         type=int,
                         help='How many previous commits to show. Uncommitted changes are shown in addition to these.')
  inspecarg.add_argument('-s', '--since', metavar='START_COMMIT',
                         action='store',
                         help='Which commit to start showing from, exclusive.')

  args = argparser.parse_args()

  try:
    if args.patchfile:
      show_patch_file(args.patchfile, args)
    else:
      if args.until and not args.since:
        fail('Error: --since/-s must be used if --until/-u is used')
      show_commits(args)
  except (DiffParseError, OSError, RepositoryNotFoundError,
          CommitSelectionError) as e:
    debug.get('console').debug("Failed", exc_info=True)
    fail(str(e))


if __name__ == '__main__':
  main()

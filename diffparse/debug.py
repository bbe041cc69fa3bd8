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
import logging
import sys

# One logger per stage of reading a patch file
CATEGORIES = ["parser", "hunks", "binary", "streams", "console"]

logging.basicConfig()
for cat in CATEGORIES:
  logging.getLogger(cat).setLevel(logging.CRITICAL)


def get(category):
  return logging.getLogger(category)


def set_logging_categories(*categories):
  if 'all' in categories:
    categories = CATEGORIES
  for cat in categories:
    if cat in CATEGORIES:
      get(cat).setLevel(logging.DEBUG)
    else:
      logging.warning("Unknown logging category '%s'", cat)


def log_option_parser():
  """
  Enable the categories given with --log and strip the option from
  sys.argv. The returned parser is meant as a parent of the main parser so
  that --log shows up in its help.
  """
  p = argparse.ArgumentParser(add_help=False)
  p.add_argument("--log", nargs="+", default=[],
                 choices=['all'] + CATEGORIES,
                 metavar="CATEGORY",
                 help="Which categories of log messages to send to standard error: %(choices)s")
  args, unknown_args = p.parse_known_args()
  set_logging_categories(*args.log)
  sys.argv[1:] = unknown_args
  return p

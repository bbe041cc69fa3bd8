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

ANSI_ESC = '\033'
ANSI_FG_RED = ANSI_ESC + '[31m'
ANSI_FG_GREEN = ANSI_ESC + '[32m'
ANSI_FG_CYAN = ANSI_ESC + '[36m'
ANSI_FG_BRIGHT_BLACK = ANSI_ESC + '[90m'
ANSI_RESET = ANSI_ESC + '[0m'


def colored(text, color, do_color=True):
  if not do_color:
    return text
  return color + text + ANSI_RESET

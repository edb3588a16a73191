# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Contains helpers for reading the metadata files packaged inside of jars."""

import re

_ESCAPE_RE = re.compile(r'\\(u[0-9a-fA-F]{4}|.)', re.DOTALL)
_ESCAPED_CHARS = {'t': '\t', 'n': '\n', 'r': '\r', 'f': '\f'}


def _UnescapeOne(m):
  escaped = m.group(1)
  if len(escaped) == 5:
    return chr(int(escaped[1:], 16))
  return _ESCAPED_CHARS.get(escaped, escaped)


def _Unescape(value):
  return _ESCAPE_RE.sub(_UnescapeOne, value)


def _FindSeparator(line):
  """Returns the index of the first unescaped "=", ":" or whitespace, or -1."""
  i = 0
  while i < len(line):
    c = line[i]
    if c == '\\':
      i += 2
      continue
    if c in '=:' or c.isspace():
      return i
    i += 1
  return -1


def _LogicalLines(text):
  pending = ''
  for line in text.splitlines():
    line = line.lstrip()
    if not pending and (not line or line[0] in '#!'):
      continue
    # An odd number of trailing backslashes continues onto the next line.
    trailing = len(line) - len(line.rstrip('\\'))
    if trailing % 2 == 1:
      pending += line[:-1]
      continue
    yield pending + line
    pending = ''
  if pending:
    yield pending


def ParseProperties(text):
  """Parses the contents of a java.util.Properties file into a dict.

  Handles comments, "=", ":" and whitespace separators, line continuations and
  the common escapes. Later keys win, as with Properties.load().
  """
  ret = {}
  for line in _LogicalLines(text):
    index = _FindSeparator(line)
    if index < 0:
      ret[_Unescape(line)] = ''
      continue
    key = line[:index]
    value = line[index + 1:].lstrip()
    # "key = value": skip the "=" or ":" that follows whitespace.
    if line[index].isspace() and value[:1] in ('=', ':'):
      value = value[1:].lstrip()
    ret[_Unescape(key)] = _Unescape(value)
  return ret


def ParseManifest(text):
  """Parses the main section of a META-INF/MANIFEST.MF into a dict.

  Continuation lines start with a single space.
  """
  ret = {}
  last_key = None
  for line in text.splitlines():
    if not line:
      # Main section ends at the first blank line.
      break
    if line.startswith(' ') and last_key:
      ret[last_key] += line[1:]
      continue
    key, sep, value = line.partition(':')
    if not sep:
      continue
    last_key = key.strip()
    ret[last_key] = value.strip()
  return ret

# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Helpers for classpaths and for keying class files across dirs and jars."""

import os
import pathlib
import posixpath
from typing import Iterable, List, Union

Classpath = Union[str, Iterable[str]]


def SplitClasspath(classpath: Classpath) -> List[str]:
  """Returns |classpath| as a list of paths, in order.

  Accepts either an os.pathsep-joined string or an iterable of paths. Empty
  entries are dropped; duplicates are kept since order is what matters.
  """
  if classpath is None:
    return []
  if isinstance(classpath, str):
    entries = classpath.split(os.pathsep)
  else:
    entries = [os.fspath(p) for p in classpath]
  return [e for e in entries if e]


def JoinClasspath(paths: Iterable[str]) -> str:
  return os.pathsep.join(os.fspath(p) for p in paths)


def CanonicalPath(path) -> str:
  return os.path.realpath(os.path.abspath(os.fspath(path)))


def ArchiveEntryKey(path, root_dir) -> str:
  """Returns the jar entry name that |path| will have when |root_dir| is jarred.

  Both paths are canonicalized first so symlinked output dirs produce the same
  key. The result always uses / as separator.
  """
  rel_path = os.path.relpath(CanonicalPath(path), CanonicalPath(root_dir))
  if os.path.sep != posixpath.sep:
    rel_path = str(pathlib.PurePath(rel_path).as_posix())
  assert not rel_path.startswith('..'), (
      f'{path} is not inside of {root_dir}')
  return rel_path


def UniqueByCanonicalPath(paths: Iterable[str]) -> List[str]:
  """Drops later duplicates of the same file, keeping the original spelling."""
  seen = set()
  ret = []
  for p in paths:
    key = CanonicalPath(p)
    if key not in seen:
      seen.add(key)
      ret.append(os.fspath(p))
  return ret


def SubtractByCanonicalPath(paths: Iterable[str],
                            excluded: Iterable[str]) -> List[str]:
  """Returns |paths| minus every path that names the same file as |excluded|.

  Order of |paths| is kept.
  """
  excluded_keys = {CanonicalPath(p) for p in excluded}
  return [
      os.fspath(p) for p in UniqueByCanonicalPath(paths)
      if CanonicalPath(p) not in excluded_keys
  ]

#!/usr/bin/env python3
#
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Removes the classes of a compile output directory from shrunk jars.

Used after shrinking an apk together with its test classes: the test classes
keep what they use alive, and are then taken out again so that only the test
apk ships them.
"""

import argparse
import logging
import os
import sys
import tempfile
import zipfile
import zlib

from android_scala import action_helpers
from android_scala import errors
from android_scala import zip_helpers
from android_scala.util import build_utils
from android_scala.util import classpath_utils


def CollectClassEntryKeys(classes_dir):
  """Returns the sorted jar entry names of the .class files in |classes_dir|."""
  if not os.path.isdir(classes_dir):
    logging.info('No classes dir at %s', classes_dir)
    return []
  return sorted(
      classpath_utils.ArchiveEntryKey(p, classes_dir)
      for p in build_utils.FindInDirectory(classes_dir, '*.class'))


def _MatchingEntries(jar_path, entry_keys):
  with zipfile.ZipFile(jar_path) as z:
    return sorted(entry_keys.intersection(z.namelist()))


def PruneJars(jar_paths, entry_keys):
  """Removes every entry named in |entry_keys| from each of |jar_paths|.

  Either all jars are updated or none are. Jars that contain none of the
  entries are left alone, so running this twice is the same as running it
  once.

  Returns:
    A dict of jar path -> sorted list of the entry names removed from it.

  Raises:
    ArchiveIntegrityError: A jar could not be read or rewritten.
  """
  entry_keys = frozenset(entry_keys)
  removed = {}
  staged = []
  try:
    for jar_path in jar_paths:
      matches = _MatchingEntries(jar_path, entry_keys)
      if not matches:
        removed[jar_path] = []
        continue
      # Create in same directory to ensure same filesystem when moving.
      fd, tmp_path = tempfile.mkstemp(suffix='.jar.tmp',
                                      dir=os.path.dirname(jar_path) or '.')
      os.close(fd)
      staged.append((tmp_path, jar_path))
      removed[jar_path] = zip_helpers.copy_zip_without(jar_path, tmp_path,
                                                       matches)
    for tmp_path, jar_path in staged:
      os.replace(tmp_path, jar_path)
    staged = []
  except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
    raise errors.ArchiveIntegrityError(
        'Could not prune test classes from {}'.format(', '.join(jar_paths)),
        output=str(e)) from e
  finally:
    for tmp_path, _ in staged:
      if os.path.exists(tmp_path):
        os.unlink(tmp_path)

  for jar_path, names in removed.items():
    logging.info('Removed %d test classes from %s', len(names), jar_path)
  return removed


def main(argv):
  build_utils.InitLogging('ANDROID_SCALA_DEBUG')
  parser = argparse.ArgumentParser()
  parser.add_argument('--classes-dir',
                      required=True,
                      help='Compile output whose classes are removed.')
  parser.add_argument('--jar',
                      action='append',
                      required=True,
                      help='GN-list of jars to remove the classes from.')
  parser.add_argument('--stamp', help='Path to touch on success.')
  args = parser.parse_args(argv)

  jar_paths = action_helpers.parse_gn_list(args.jar)
  try:
    PruneJars(jar_paths, CollectClassEntryKeys(args.classes_dir))
  except errors.ArchiveIntegrityError as e:
    sys.stderr.write(str(e) + '\n')
    return 1

  if args.stamp:
    build_utils.Touch(args.stamp)
  return 0


if __name__ == '__main__':
  sys.exit(main(sys.argv[1:]))

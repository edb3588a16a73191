#!/usr/bin/env python3
#
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Finds which scala-library version, if any, a classpath carries.

Only the files named by the classpath are looked at. The version is read from
the metadata that scala-library packages next to its classes, so no JVM is
started and nothing from the calling process leaks into the answer.
"""

import argparse
import contextlib
import logging
import os
import sys
import zipfile

from android_scala import action_helpers
from android_scala.util import build_utils
from android_scala.util import classpath_utils
from android_scala.util import properties_utils

# Only scala-library provides this class.
_MARKER_CLASS = 'scala/util/Properties$.class'
# scala.util.Properties reads its version from this resource.
_LIBRARY_PROPERTIES = 'library.properties'
_PROPERTIES_VERSION_KEYS = ('maven.version.number', 'version.number')
_MANIFEST = 'META-INF/MANIFEST.MF'
_MANIFEST_VERSION_KEYS = ('Specification-Version', 'Implementation-Version')


class _ClasspathEntry:
  """A single directory or jar of a classpath, open for reading."""

  def __init__(self, path, zip_file=None):
    self.path = path
    self._zip_file = zip_file
    self._names = set(zip_file.namelist()) if zip_file else None

  def HasResource(self, name):
    if self._zip_file is None:
      return os.path.isfile(os.path.join(self.path, *name.split('/')))
    return name in self._names

  def ReadText(self, name):
    """Returns the resource's text, or None when this entry lacks it."""
    if not self.HasResource(name):
      return None
    if self._zip_file is None:
      with open(os.path.join(self.path, *name.split('/')),
                encoding='utf-8',
                errors='replace') as f:
        return f.read()
    return self._zip_file.read(name).decode('utf-8', errors='replace')


class _ScopedClasspath:
  """Lookup context limited to the given classpath entries.

  Jars are opened on first use and all of them are closed when the context
  exits, whether or not the lookup succeeded.
  """

  def __init__(self, classpath):
    self._paths = classpath_utils.SplitClasspath(classpath)
    self._opened = None
    self._exit_stack = contextlib.ExitStack()

  def __enter__(self):
    self._exit_stack.__enter__()
    return self

  def __exit__(self, exc_type, exc_val, exc_tb):
    return self._exit_stack.__exit__(exc_type, exc_val, exc_tb)

  def _Open(self, path):
    if os.path.isdir(path):
      return _ClasspathEntry(path)
    if not os.path.isfile(path):
      logging.debug('Skipping missing classpath entry %s', path)
      return None
    try:
      zip_file = self._exit_stack.enter_context(zipfile.ZipFile(path))
    except (zipfile.BadZipFile, OSError) as e:
      logging.warning('Skipping unreadable classpath entry %s: %s', path, e)
      return None
    return _ClasspathEntry(path, zip_file)

  def IterEntries(self):
    if self._opened is None:
      self._opened = []
      for path in self._paths:
        entry = self._Open(path)
        if entry:
          self._opened.append(entry)
    return iter(self._opened)

  def FindEntry(self, resource_name):
    """Returns the first entry providing |resource_name|, in classpath order."""
    for entry in self.IterEntries():
      if entry.HasResource(resource_name):
        return entry
    return None


def _VersionFromProperties(entry):
  text = entry.ReadText(_LIBRARY_PROPERTIES)
  if text is None:
    return None
  props = properties_utils.ParseProperties(text)
  for key in _PROPERTIES_VERSION_KEYS:
    if props.get(key):
      return props[key]
  return None


def _VersionFromManifest(entry):
  text = entry.ReadText(_MANIFEST)
  if text is None:
    return None
  attrs = properties_utils.ParseManifest(text)
  for key in _MANIFEST_VERSION_KEYS:
    if attrs.get(key):
      return attrs[key]
  return None


def ScalaVersionFromClasspath(classpath):
  """Returns scala version from scala-library in given classpath.

  Args:
    classpath: List of paths, or an os.pathsep-joined string.

  Returns:
    The version string (e.g. "2.11.7"), or None when the classpath does not
    contain scala-library or its version cannot be read.
  """
  with _ScopedClasspath(classpath) as scoped:
    marker_entry = scoped.FindEntry(_MARKER_CLASS)
    if marker_entry is None:
      return None

    # The jar holding the marker is asked first, then the remaining entries in
    # the order a class loader would search them.
    candidates = [marker_entry]
    candidates += [e for e in scoped.IterEntries() if e is not marker_entry]
    for entry in candidates:
      version = _VersionFromProperties(entry)
      if version:
        return version

    version = _VersionFromManifest(marker_entry)
    if version is None:
      logging.warning('Found %s in %s but no version metadata', _MARKER_CLASS,
                      marker_entry.path)
    return version


def main(argv):
  build_utils.InitLogging('ANDROID_SCALA_DEBUG')
  parser = argparse.ArgumentParser()
  parser.add_argument('--classpath',
                      action='append',
                      help='GN-list or os.pathsep-joined classpath to inspect.')
  parser.add_argument('--output',
                      help='Write the detected version to this file instead '
                      'of stdout.')
  args = parser.parse_args(argv)

  classpath = []
  for value in action_helpers.parse_gn_list(args.classpath):
    classpath += classpath_utils.SplitClasspath(value)

  version = ScalaVersionFromClasspath(classpath)
  if not version:
    logging.info('No scala-library found on classpath')
    return 1

  if args.output:
    with action_helpers.atomic_output(args.output, mode='w') as f:
      f.write(version + '\n')
  else:
    print(version)
  return 0


if __name__ == '__main__':
  sys.exit(main(sys.argv[1:]))

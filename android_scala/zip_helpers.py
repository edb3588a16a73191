# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Helpers for writing and rewriting jars."""

import os
import posixpath
import stat
import zipfile

# Entries written by this module all get this timestamp so that jars only
# change when their contents do.
HERMETIC_DATE_TIME = (2001, 1, 1, 0, 0, 0)

# Deflating tiny entries makes them bigger.
_MIN_COMPRESS_SIZE = 16


def add_to_zip_hermetic(zip_file, zip_path, *, src_path=None, data=None):
  """Adds |src_path| or |data| to |zip_file| as |zip_path|.

  The entry gets HERMETIC_DATE_TIME and 0644 permissions, plus the executable
  bits of |src_path| if any.
  """
  assert (src_path is None) != (data is None), (
      '|src_path| and |data| are mutually exclusive.')
  assert '\\' not in zip_path, 'zip_path should not contain \\: ' + zip_path
  assert not posixpath.isabs(zip_path), 'Absolute zip path: ' + zip_path
  assert posixpath.normpath(zip_path) == zip_path, (
      'Non-canonical zip_path: ' + zip_path)
  assert zip_path not in zip_file.namelist(), (
      'Tried to add a duplicate zip entry: ' + zip_path)

  zipinfo = zipfile.ZipInfo(zip_path, HERMETIC_DATE_TIME)
  zipinfo.external_attr = 0o644 << 16
  if src_path:
    mode = os.stat(src_path).st_mode
    zipinfo.external_attr |= (mode & (stat.S_IXUSR | stat.S_IXGRP
                                      | stat.S_IXOTH)) << 16
    with open(src_path, 'rb') as f:
      data = f.read()

  compress_type = zip_file.compression
  if len(data) < _MIN_COMPRESS_SIZE:
    compress_type = zipfile.ZIP_STORED
  zip_file.writestr(zipinfo, data, compress_type)


def zip_directory(output, base_dir, compress=True):
  """Zips every file below |base_dir|, sorted by entry name.

  Args:
    output: Path or writable file object.
    base_dir: Directory whose relative paths become the entry names.
    compress: Whether to deflate entries.
  """
  entries = []
  for root, _, files in os.walk(base_dir):
    for name in files:
      path = os.path.join(root, name)
      rel_path = os.path.relpath(path, base_dir)
      entries.append((rel_path.replace(os.sep, posixpath.sep), path))
  entries.sort()

  compression = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED
  with zipfile.ZipFile(output, 'w', compression) as z:
    for zip_path, path in entries:
      add_to_zip_hermetic(z, zip_path, src_path=path)


def _copy_zip_info(info):
  # A fresh ZipInfo so that sizes, CRC and flag bits are recomputed on write.
  ret = zipfile.ZipInfo(filename=info.filename, date_time=info.date_time)
  ret.compress_type = info.compress_type
  ret.external_attr = info.external_attr
  ret.create_system = info.create_system
  ret.comment = info.comment
  ret.extra = info.extra
  return ret


def copy_zip_without(src_path, output, names):
  """Copies every entry of |src_path| into |output| except |names|.

  Kept entries retain their name, order, timestamp, attributes and
  compression method.

  Args:
    src_path: Path of the zip file to read.
    output: Path or writable file object.
    names: Collection of entry names to leave out.

  Returns:
    Sorted list of the entry names that were left out.
  """
  names = frozenset(names)
  removed = []
  with zipfile.ZipFile(src_path) as in_zip, \
      zipfile.ZipFile(output, 'w') as out_zip:
    for info in in_zip.infolist():
      if info.filename in names:
        removed.append(info.filename)
        continue
      out_zip.writestr(_copy_zip_info(info), in_zip.read(info))
    out_zip.comment = in_zip.comment
  return sorted(removed)

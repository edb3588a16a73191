# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Output and argument helpers shared by the android-scala command lines."""

import contextlib
import filecmp
import json
import os
import pathlib
import tempfile

from typing import Optional
from typing import Sequence


@contextlib.contextmanager
def atomic_output(path, mode='w+b', only_if_changed=True):
  """Writes |path| through a temporary sibling file.

  Readers never see a partial |path|. When |only_if_changed| is set and the
  new contents equal the old, |path| is left alone so its mtime is kept.

  Example:
    with action_helpers.atomic_output(jar_path) as f:
      zip_helpers.zip_directory(f, classes_dir)
  """
  dirname = os.path.dirname(path) or '.'
  os.makedirs(dirname, exist_ok=True)
  f = tempfile.NamedTemporaryFile(mode,
                                  prefix='.',
                                  suffix='.' + os.path.basename(path),
                                  dir=dirname,
                                  delete=False)
  try:
    with f:
      yield f
    if only_if_changed and os.path.exists(path) and filecmp.cmp(
        f.name, path, shallow=False):
      return
    os.replace(f.name, path)
  finally:
    if os.path.exists(f.name):
      os.unlink(f.name)


def add_depfile_arg(parser):
  parser.add_argument('--depfile',
                      help='Path to depfile (refer to "gn help depfile")')


def _depfile_path(path):
  path = pathlib.PurePath(path).as_posix()
  return path.replace(' ', '\\ ')


def write_depfile(depfile_path: str,
                  first_output: str,
                  inputs: Optional[Sequence[str]] = None) -> None:
  """Writes a ninja depfile listing |inputs| as inputs of |first_output|.

  Inputs are sorted and de-duplicated, one per line.
  """
  assert depfile_path != first_output
  assert not isinstance(inputs, str)  # Easy mistake to make

  text = _depfile_path(first_output) + ': '
  if inputs:
    text += '\\\n ' + ' \\\n '.join(
        sorted({_depfile_path(p) for p in inputs}))
  path = pathlib.Path(depfile_path)
  path.parent.mkdir(parents=True, exist_ok=True)
  path.write_text(text + '\n')


def parse_gn_list(value):
  """Converts a "GN-list" command-line value into a list of strings.

  None and '' give [], a plain string gives [value], a JSON list such as
  '["a", "b"]' gives its items. A list (from action='append') is flattened.
  """
  if not value:
    return []
  if isinstance(value, list):
    return [item for v in value for item in parse_gn_list(v)]
  if not value.startswith('['):
    return [value]
  ret = json.loads(value)
  assert all(isinstance(x, str) for x in ret), value
  return ret

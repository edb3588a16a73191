#!/usr/bin/env python3
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

import os
import tempfile
import unittest
import zipfile

from android_scala import zip_helpers


def _make_test_jar(tmp_dir):
  jar = os.path.join(tmp_dir, 'classes.jar')
  with zipfile.ZipFile(jar, 'w') as z:
    manifest = zipfile.ZipInfo('META-INF/MANIFEST.MF', (2014, 5, 6, 7, 8, 10))
    # The jar tool marks the first entry with an empty 0xCAFE extra field.
    manifest.extra = b'\xfe\xca\x00\x00'
    z.writestr(manifest, 'Manifest-Version: 1.0\n')
    info = zipfile.ZipInfo('com/example/app/A.class', (2014, 5, 6, 7, 8, 10))
    info.compress_type = zipfile.ZIP_DEFLATED
    z.writestr(info, b'\xca\xfe\xba\xbe' * 32)
    z.writestr('com/example/app/test/B.class', b'\xca\xfe\xba\xbe BBBB')
  return jar


class ZipHelpersTest(unittest.TestCase):
  def test_zip_directory(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      classes_dir = os.path.join(tmp_dir, 'classes')
      os.makedirs(os.path.join(classes_dir, 'com', 'example'))
      for name in ('B.class', 'A.class'):
        with open(os.path.join(classes_dir, 'com', 'example', name), 'wb') as f:
          f.write(b'\xca\xfe\xba\xbe')

      jar = os.path.join(tmp_dir, 'out.jar')
      zip_helpers.zip_directory(jar, classes_dir)

      with zipfile.ZipFile(jar) as z:
        self.assertEqual(z.namelist(),
                         ['com/example/A.class', 'com/example/B.class'])
        self.assertEqual(z.getinfo('com/example/A.class').date_time,
                         (2001, 1, 1, 0, 0, 0))

  def test_add_to_zip_hermetic__duplicate(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      jar = os.path.join(tmp_dir, 'out.jar')
      with zipfile.ZipFile(jar, 'w') as z:
        zip_helpers.add_to_zip_hermetic(z, 'A.class', data=b'A')
        with self.assertRaises(AssertionError):
          zip_helpers.add_to_zip_hermetic(z, 'A.class', data=b'A')

  def test_copy_zip_without(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      jar = _make_test_jar(tmp_dir)
      out = os.path.join(tmp_dir, 'pruned.jar')

      removed = zip_helpers.copy_zip_without(
          jar, out, ['com/example/app/test/B.class', 'not/There.class'])

      self.assertEqual(removed, ['com/example/app/test/B.class'])
      with zipfile.ZipFile(jar) as orig, zipfile.ZipFile(out) as z:
        self.assertEqual(z.namelist(),
                         ['META-INF/MANIFEST.MF', 'com/example/app/A.class'])
        kept = z.getinfo('com/example/app/A.class')
        self.assertEqual(kept.date_time, (2014, 5, 6, 7, 8, 10))
        self.assertEqual(kept.compress_type, zipfile.ZIP_DEFLATED)
        self.assertEqual(z.read(kept), orig.read('com/example/app/A.class'))
        self.assertEqual(z.getinfo('META-INF/MANIFEST.MF').extra,
                         b'\xfe\xca\x00\x00')


if __name__ == '__main__':
  unittest.main()

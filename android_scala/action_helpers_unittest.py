#!/usr/bin/env python3
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

import os
import pathlib
import tempfile
import time
import unittest

from android_scala import action_helpers


class ActionHelpersTest(unittest.TestCase):
  def test_atomic_output(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      tmp_file = pathlib.Path(tmp_dir) / 'proguard-config.txt'
      tmp_file.write_text('-dontobfuscate')

      # Test that same contents does not change mtime.
      orig_mtime = os.path.getmtime(tmp_file)
      with action_helpers.atomic_output(str(tmp_file), 'wt') as af:
        time.sleep(.01)
        af.write('-dontobfuscate')
      self.assertEqual(os.path.getmtime(tmp_file), orig_mtime)

      # Test that contents is written.
      with action_helpers.atomic_output(str(tmp_file), 'wt') as af:
        af.write('-dontoptimize')
      self.assertEqual(tmp_file.read_text(), '-dontoptimize')

  def test_atomic_output_failureKeepsOriginal(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      tmp_file = pathlib.Path(tmp_dir) / 'classes.jar'
      tmp_file.write_bytes(b'original')
      with self.assertRaises(ValueError):
        with action_helpers.atomic_output(str(tmp_file)) as af:
          af.write(b'half written')
          raise ValueError('interrupted')
      self.assertEqual(tmp_file.read_bytes(), b'original')
      # No temporary files are left behind.
      self.assertEqual(['classes.jar'], os.listdir(tmp_dir))

  def test_parse_gn_list(self):
    def test(value, expected):
      self.assertEqual(action_helpers.parse_gn_list(value), expected)

    test(None, [])
    test('', [])
    test('scala-library.jar', ['scala-library.jar'])
    test('["one.jar"]', ['one.jar'])
    test(['["one.jar"]', '["two.jar"]'], ['one.jar', 'two.jar'])
    test(['["one", "two"]', 'three'], ['one', 'two', 'three'])

  def test_write_depfile(self):
    with tempfile.TemporaryDirectory() as tmp_dir:
      tmp_file = pathlib.Path(tmp_dir) / 'out.d'

      def capture_output(inputs):
        action_helpers.write_depfile(str(tmp_file), 'output', inputs)
        return tmp_file.read_text()

      self.assertEqual(capture_output(None), 'output: \n')
      self.assertEqual(capture_output([]), 'output: \n')
      self.assertEqual(capture_output(['a']), 'output: \\\n a\n')
      # Check sorted and de-duplicated.
      self.assertEqual(capture_output(['b', 'a', 'b']),
                       'output: \\\n a \\\n b\n')
      # Check converts to forward slashes.
      self.assertEqual(capture_output(['a', os.path.join('b', 'c')]),
                       'output: \\\n a \\\n b/c\n')

      # Arg should be a list.
      with self.assertRaises(AssertionError):
        capture_output('a')

      # Do not use depfile itself as an output.
      with self.assertRaises(AssertionError):
        action_helpers.write_depfile(str(tmp_file), str(tmp_file), [])


if __name__ == '__main__':
  unittest.main()

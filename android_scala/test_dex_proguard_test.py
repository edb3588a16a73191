#!/usr/bin/env python3
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

import os
import shutil
import tempfile
import unittest
from unittest import mock

from android_scala import errors
from android_scala import plugin
from android_scala import proguard
from android_scala import test_dex_proguard
from android_scala import unittest_utils
from android_scala.util import build_utils


def _ArgValues(cmd, flag):
  return [cmd[i + 1] for i, arg in enumerate(cmd) if arg == flag]


class UpdateTestVariantDexTaskTest(unittest.TestCase):
  def setUp(self):
    self._tmp_dir = tempfile.mkdtemp()
    self.addCleanup(shutil.rmtree, self._tmp_dir)
    self._toolchain = unittest_utils.FakeToolchain()
    patcher = mock.patch.object(build_utils,
                                'CheckOutput',
                                side_effect=self._toolchain)
    patcher.start()
    self.addCleanup(patcher.stop)
    self._fixture = unittest_utils.AndroidAppFixture(self._tmp_dir)
    bucket = self._fixture.project.configurations.Create(
        proguard.PROGUARD_CONFIGURATION)
    bucket.AddDependency(proguard.PROGUARD_COORDINATE)
    self._options = plugin.AndroidScalaPluginExtension()
    self._work_dir = os.path.join(self._tmp_dir, 'build', 'android-scala',
                                  'variant', 'debugTest')

  def _Update(self):
    return test_dex_proguard.UpdateTestVariantDexTask(
        self._fixture.project, self._fixture.test_variant, self._options)

  def testDexGetsSingleShrunkJar(self):
    self._Update()
    self._fixture.project.Run('dexDebugTest')

    outjar = os.path.join(self._work_dir, 'proguarded-classes.jar')
    dex = self._fixture.test_dex
    self.assertEqual([outjar], dex.input_files)
    self.assertEqual([], dex.libraries)
    self.assertEqual([
        'com.example.app.test.BTest', 'com.example.app.test.C',
        'com.example.support.Helper'
    ], unittest_utils.ClassNamesInJar(outjar))
    d8_cmd = self._toolchain.CallsTo('d8')[0]
    self.assertEqual(outjar, d8_cmd[-1])
    self.assertEqual(['javac', 'javac', 'proguard', 'd8'],
                     self._toolchain.ToolNames())

  def testProguardInputsAndLibraries(self):
    self._Update()
    self._fixture.project.Run('dexDebugTest')

    cmd = self._toolchain.CallsTo('proguard')[0]
    self.assertEqual(
        '/m2/net.sf.proguard-proguard-base-{}.jar'.format(
            proguard.PROGUARD_VERSION), cmd[cmd.index('-cp') + 1])
    self.assertEqual(
        [self._fixture.test_compile.destination_dir, self._fixture.support_jar],
        _ArgValues(cmd, '-injars'))
    self.assertEqual(
        [self._fixture.app_compile.destination_dir, self._fixture.android_jar],
        _ArgValues(cmd, '-libraryjars'))
    self.assertEqual([os.path.join(self._work_dir, 'proguard-config.txt')],
                     _ArgValues(cmd, '-include'))

  def testLibrariesComparedByCanonicalPath(self):
    self._fixture.test_dex.libraries = [
        os.path.join(self._tmp_dir, 'libs', '..', 'libs', 'test-support.jar')
    ]
    self._Update()
    self._fixture.project.Run('dexDebugTest')
    cmd = self._toolchain.CallsTo('proguard')[0]
    self.assertNotIn(self._fixture.support_jar, _ArgValues(cmd,
                                                           '-libraryjars'))
    self.assertEqual(2, len(_ArgValues(cmd, '-injars')))

  def testRepeatedUpdateAddsNoSecondPass(self):
    first = self._Update()
    self.assertIs(first, self._Update())
    self.assertEqual([first], self._fixture.test_dex.pre_actions)
    self._fixture.project.Run('dexDebugTest')

    outjar = os.path.join(self._work_dir, 'proguarded-classes.jar')
    self.assertEqual(1, len(self._toolchain.CallsTo('proguard')))
    self.assertEqual([outjar], self._fixture.test_dex.input_files)
    self.assertIn('com.example.app.test.BTest',
                  unittest_utils.ClassNamesInJar(outjar))

  def testOutputIsNeverAnInput(self):
    outjar = os.path.join(self._work_dir, 'proguarded-classes.jar')
    dex = self._fixture.test_dex
    dex.input_files = [os.path.join(self._work_dir, '.', 'proguarded-classes.jar')]
    dex.libraries = [self._fixture.support_jar]
    configuration = test_dex_proguard.CreateTestProguardConfiguration(
        self._fixture.test_variant, dex,
        os.path.join(self._work_dir, 'proguard-config.txt'), outjar)
    self.assertEqual(
        [self._fixture.test_compile.destination_dir, self._fixture.support_jar],
        configuration.injars)
    self.assertEqual(outjar, configuration.outjar)

  def testDefaultRulesAreByteIdentical(self):
    action = self._Update()
    self._fixture.project.Run('compileDebugTestJava')
    config_path = os.path.join(self._work_dir, 'proguard-config.txt')
    contents = []
    for _ in range(2):
      self._fixture.test_dex.input_files = [
          self._fixture.test_compile.destination_dir
      ]
      self._fixture.test_dex.libraries = [self._fixture.support_jar]
      action(self._fixture.test_dex)
      with open(config_path, 'rb') as f:
        contents.append(f.read())
    self.assertEqual(contents[0], contents[1])
    text = contents[0].decode()
    self.assertIn('-dontobfuscate', text)
    self.assertTrue(
        text.endswith('-keep class com.example.app.test.** { *; }\n'
                      '-keep class com.example.app.** { *; }\n'))

  def testOverrideFileReplacesDefaultRules(self):
    override = os.path.join(self._tmp_dir, 'test-rules.pro')
    with open(override, 'w') as f:
      f.write('-dontshrink\n')
    self._options.Configure(android_test_proguard_file=override)
    self._Update()
    self._fixture.project.Run('dexDebugTest')
    config = self._toolchain.proguard_configs[0]
    self.assertIn('-dontshrink\n', config)
    self.assertNotIn('-dontobfuscate', config)
    self.assertIn('-keep class com.example.app.test.** { *; }', config)
    self.assertIn('-keep class com.example.app.** { *; }', config)

  def testProguardFailure(self):
    self._toolchain.fail_proguard_with = 'Error: Can\'t find common super\n'
    self._Update()
    with self.assertRaises(errors.ArchiveIntegrityError) as cm:
      self._fixture.project.Run('dexDebugTest')
    self.assertEqual('Error: Can\'t find common super\n', cm.exception.output)
    self.assertIsInstance(cm.exception.__cause__,
                          build_utils.CalledProcessError)
    self.assertEqual([self._fixture.support_jar],
                     self._fixture.test_dex.libraries)
    self.assertNotIn('d8', self._toolchain.ToolNames())

  def testMissingOutput(self):
    self._toolchain.proguard_writes_output = False
    self._Update()
    with self.assertRaises(errors.ArchiveIntegrityError):
      self._fixture.project.Run('dexDebugTest')

  def testStaleOutputIsReplaced(self):
    os.makedirs(self._work_dir)
    outjar = os.path.join(self._work_dir, 'proguarded-classes.jar')
    unittest_utils.WriteJar(outjar, {'stale/Old.class': b''})
    self._Update()
    self._fixture.project.Run('dexDebugTest')
    self.assertNotIn('stale.Old', unittest_utils.ClassNamesInJar(outjar))


if __name__ == '__main__':
  unittest.main()

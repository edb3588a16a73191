#!/usr/bin/env python3
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

import os
import shutil
import tempfile
import unittest
from unittest import mock

from android_scala import build_graph
from android_scala import compile_scala
from android_scala import errors
from android_scala import plugin
from android_scala import proguard
from android_scala import unittest_utils
from android_scala.util import build_utils


class AndroidScalaPluginTest(unittest.TestCase):
  def setUp(self):
    self._tmp_dir = tempfile.mkdtemp()
    self.addCleanup(shutil.rmtree, self._tmp_dir)
    self._toolchain = unittest_utils.FakeToolchain()
    patcher = mock.patch.object(build_utils,
                                'CheckOutput',
                                side_effect=self._toolchain)
    patcher.start()
    self.addCleanup(patcher.stop)

  def _ApplyPlugin(self, **kwargs):
    fixture = unittest_utils.AndroidAppFixture(self._tmp_dir, **kwargs)
    scala_plugin = plugin.AndroidScalaPlugin()
    scala_plugin.Apply(fixture.project)
    return fixture, scala_plugin

  def testRequiresAndroidPlugin(self):
    project = build_graph.Project('app', self._tmp_dir)
    with self.assertRaises(errors.ConfigurationError):
      plugin.AndroidScalaPlugin().Apply(project)

  def testExtension(self):
    fixture, scala_plugin = self._ApplyPlugin()
    extension = fixture.android.extensions.GetByType(
        plugin.AndroidScalaPluginExtension)
    self.assertIs(scala_plugin.extension, extension)
    self.assertEqual('jvm-1.6', extension.target)
    self.assertTrue(extension.run_android_test_proguard)
    self.assertIsNone(extension.android_test_proguard_file)
    extension.Configure(target='jvm-1.7')
    self.assertEqual('jvm-1.7', extension.target)
    with self.assertRaises(errors.ConfigurationError):
      extension.Configure(targt='jvm-1.7')

  def testAppliedTwiceFails(self):
    fixture, _ = self._ApplyPlugin()
    with self.assertRaises(errors.ConfigurationError):
      plugin.AndroidScalaPlugin().Apply(fixture.project)

  def testSourceSets(self):
    fixture, scala_plugin = self._ApplyPlugin()
    for source_set in fixture.android.source_sets:
      scala = source_set.extensions.GetByType(build_graph.SourceDirectorySet)
      src_dir = os.path.join('src', source_set.name, 'scala')
      self.assertIs(scala, scala_plugin.scala_source_sets[source_set.name])
      self.assertEqual([src_dir], scala.srcdirs)
      self.assertEqual(['**/*.scala'], scala.includes)
      self.assertIn(scala, source_set.all_java)
      self.assertIn(scala, source_set.all_source)
      self.assertIn(src_dir, source_set.java.srcdirs)

  def testProguardDependency(self):
    fixture, _ = self._ApplyPlugin()
    fixture.project.Evaluate()
    configuration = fixture.project.configurations.GetByName(
        'androidScalaPluginProGuard')
    self.assertEqual([proguard.PROGUARD_COORDINATE],
                     configuration.dependencies)

  def testPreDexLibrariesRejected(self):
    fixture, _ = self._ApplyPlugin()
    self.assertFalse(fixture.android.dex_options.pre_dex_libraries)
    fixture.android.dex_options.pre_dex_libraries = True
    with self.assertRaises(errors.ConfigurationError):
      fixture.project.Run('dexDebug')
    self.assertEqual([], self._toolchain.calls)

  def testEndToEnd(self):
    fixture, _ = self._ApplyPlugin()
    fixture.project.Run('dexDebug', 'dexDebugTest')

    # The app ships only its own classes.
    self.assertEqual(['com.example.app.A'],
                     unittest_utils.ClassNamesInJar(
                         fixture.app_proguard.out_jar_files[0]))
    # The test apk gets one shrunk jar without the app's classes.
    self.assertEqual(1, len(fixture.test_dex.input_files))
    self.assertEqual([], fixture.test_dex.libraries)
    test_classes = unittest_utils.ClassNamesInJar(
        fixture.test_dex.input_files[0])
    self.assertIn('com.example.app.test.BTest', test_classes)
    self.assertIn('com.example.app.test.C', test_classes)
    self.assertNotIn('com.example.app.A', test_classes)
    self.assertEqual(['javac', 'javac', 'proguard', 'd8', 'proguard', 'd8'],
                     self._toolchain.ToolNames())

  def testTestProguardDisabled(self):
    fixture, scala_plugin = self._ApplyPlugin()
    scala_plugin.extension.Configure(run_android_test_proguard=False)
    fixture.project.Evaluate()
    self.assertEqual([], fixture.test_dex.pre_actions)
    self.assertEqual(1, len(fixture.app_proguard.pre_actions))

  def testLibraryProjectSkipsTestedVariantProguard(self):
    fixture, _ = self._ApplyPlugin(plugin_id='android-library')
    fixture.project.Evaluate()
    self.assertEqual([], fixture.app_proguard.pre_actions)
    self.assertEqual(1, len(fixture.test_dex.pre_actions))

  def testCompilesScalaWhenScalaLibraryPresent(self):
    fixture, _ = self._ApplyPlugin()
    scala_library = os.path.join(self._tmp_dir, 'libs', 'scala-library.jar')
    unittest_utils.WriteJar(
        scala_library, {
            'scala/util/Properties$.class': b'',
            'library.properties': 'maven.version.number=2.10.4\n',
        })
    scala_src = os.path.join(self._tmp_dir, 'src', 'main', 'scala', 'com',
                             'example', 'app', 'S.scala')
    unittest_utils.WriteSource(scala_src, declared=['com.example.app.S'])
    fixture.app_compile.classpath.append(scala_library)
    fixture.app_compile.source_files.append(scala_src)
    fixture.project.Run('compileDebugJava')

    self.assertIsInstance(fixture.app_compile.java_compiler,
                          compile_scala.ScalaJavaJointCompiler)
    # The test compile classpath has no scala-library.
    self.assertIsInstance(fixture.test_compile.java_compiler,
                          build_graph.JavacCompiler)
    self.assertEqual(['org.scala-lang:scala-compiler:2.10.4'],
                     fixture.project.configurations.GetByName(
                         'androidScalaPluginScalaCompilerForcompileDebugJava')
                     .dependencies)
    self.assertEqual(['scalac', 'javac'], self._toolchain.ToolNames())


if __name__ == '__main__':
  unittest.main()

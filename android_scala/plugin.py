# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Adds Scala support to a project using the Android plugin."""

import os

from android_scala import build_graph
from android_scala import compile_scala
from android_scala import errors
from android_scala import proguard
from android_scala import test_dex_proguard
from android_scala import tested_variant_proguard

APPLICATION_PLUGIN_ID = 'android'
LIBRARY_PLUGIN_ID = 'android-library'
EXTENSION_NAME = 'scala'
SCALA_SOURCE_INCLUDE = '**/*.scala'


class AndroidScalaPluginExtension:
  """Settings of the plugin, found as android.extensions 'scala'.

  Attributes:
    target: Value for scalac's -target: flag.
    run_android_test_proguard: Whether to shrink test apks before dexing.
    android_test_proguard_file: Rule file to use instead of the default rules
        when shrinking test apks.
  """

  def __init__(self):
    self.target = 'jvm-1.6'
    self.run_android_test_proguard = True
    self.android_test_proguard_file = None

  def Configure(self, **kwargs):
    for key, value in kwargs.items():
      if not hasattr(self, key):
        raise errors.ConfigurationError(
            'Unknown android-scala setting: {}'.format(key))
      setattr(self, key, value)
    return self


class AndroidScalaPlugin:
  def __init__(self):
    self.project = None
    self.android = None
    self.extension = None
    # Source set name -> its scala SourceDirectorySet.
    self.scala_source_sets = {}

  def Apply(self, project):
    """Registers the plugin with |project|.

    Returns:
      The plugin's AndroidScalaPluginExtension.
    """
    if not (project.HasPlugin(APPLICATION_PLUGIN_ID)
            or project.HasPlugin(LIBRARY_PLUGIN_ID)):
      raise errors.ConfigurationError(
          'Please apply \'android\' or \'android-library\' plugin before '
          'applying \'android-scala\' plugin')
    self.project = project
    self.android = project.extensions.GetByName('android')
    self.extension = self.android.extensions.Create(
        EXTENSION_NAME, AndroidScalaPluginExtension)
    self._UpdateSourceSets()
    project.AfterEvaluate(self._AfterEvaluate)

    # Pre-dexed libraries would bypass the test apk's ProGuard pass.
    self.android.dex_options.pre_dex_libraries = False
    project.task_graph.WhenReady(self._CheckDexOptions)
    return self.extension

  def _UpdateSourceSets(self):
    for source_set in self.android.source_sets:
      scala = source_set.extensions.Create(
          EXTENSION_NAME, build_graph.SourceDirectorySet,
          source_set.display_name + ' Scala source')
      default_src_dir = os.path.join('src', source_set.name, 'scala')
      scala.SrcDir(default_src_dir)
      scala.Include(SCALA_SOURCE_INCLUDE)
      source_set.all_java.append(scala)
      source_set.all_source.append(scala)
      # So that IDEs show the scala sources.
      source_set.java.SrcDir(default_src_dir)
      source_set.java.Include(SCALA_SOURCE_INCLUDE)
      self.scala_source_sets[source_set.name] = scala

  def _AddDependencies(self):
    configuration = self.project.configurations.FindByName(
        proguard.PROGUARD_CONFIGURATION)
    if configuration is None:
      configuration = self.project.configurations.Create(
          proguard.PROGUARD_CONFIGURATION)
    if proguard.PROGUARD_COORDINATE not in configuration.dependencies:
      configuration.AddDependency(proguard.PROGUARD_COORDINATE)

  def _AfterEvaluate(self, project):
    self._AddDependencies()
    is_application = project.HasPlugin(APPLICATION_PLUGIN_ID)
    for test_variant in self.android.test_variants:
      if is_application:
        tested_variant_proguard.UpdateTestedVariantProguardTask(test_variant)
      if self.extension.run_android_test_proguard and test_variant.dex:
        test_dex_proguard.UpdateTestVariantDexTask(project, test_variant,
                                                   self.extension)

    variants = list(self.android.test_variants)
    if is_application:
      variants += self.android.application_variants
    else:
      variants += self.android.library_variants
    for variant in variants:
      compile_scala.UpdateJavaCompileTask(project, variant.java_compile,
                                          self.extension)

  def _CheckDexOptions(self, _task_graph):
    if self.android.dex_options.pre_dex_libraries:
      raise errors.ConfigurationError(
          'Currently, android-scala plugin doesn\'t support enabling '
          'dex_options.pre_dex_libraries')

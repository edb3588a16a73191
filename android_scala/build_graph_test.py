#!/usr/bin/env python3
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

import os
import unittest

from pyfakefs import fake_filesystem_unittest

from android_scala import build_graph
from android_scala import errors

_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>org.scala-lang</groupId>
  <artifactId>scala-compiler</artifactId>
  <version>2.11.7</version>
  <dependencies>
    <dependency>
      <groupId>org.scala-lang</groupId>
      <artifactId>scala-library</artifactId>
      <version>2.11.7</version>
    </dependency>
    <dependency>
      <groupId>org.scala-lang</groupId>
      <artifactId>scala-reflect</artifactId>
      <version>2.11.7</version>
      <scope>compile</scope>
    </dependency>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.11</version>
      <scope>test</scope>
    </dependency>
    <dependency>
      <groupId>org.scala-lang.modules</groupId>
      <artifactId>scala-xml_2.11</artifactId>
      <version>${xml.version}</version>
    </dependency>
  </dependencies>
</project>
"""


class _RecordingTask(build_graph.Task):
  def __init__(self, project, name, log):
    super().__init__(project, name)
    self.log = log

  def Action(self):
    self.log.append(self.name)


class TaskTest(unittest.TestCase):
  def testActionOrder(self):
    log = []
    project = build_graph.Project('app', '/src/app')
    task = project.CreateTask(_RecordingTask, 'compile', log=log)
    task.DoLast(lambda t: log.append('last1:' + t.name))
    task.DoFirst(lambda t: log.append('first1'))
    task.DoFirst(lambda t: log.append('first2'))
    task.DoLast(lambda t: log.append('last2'))
    task.Execute()
    self.assertEqual(['first1', 'first2', 'compile', 'last1:compile', 'last2'],
                     log)
    self.assertEqual(':app:compile', task.path)

  def testFailingPreActionAbortsTask(self):
    log = []
    project = build_graph.Project('app', '/src/app')
    task = project.CreateTask(_RecordingTask, 'compile', log=log)

    def Fail(_task):
      raise errors.ArchiveIntegrityError('nope')

    task.DoFirst(Fail)
    task.DoLast(lambda t: log.append('last'))
    with self.assertRaises(errors.ArchiveIntegrityError):
      task.Execute()
    self.assertEqual([], log)


class ProjectTest(unittest.TestCase):
  def testRunOrdersTasksAndFiresWhenReady(self):
    log = []
    project = build_graph.Project('app', '/src/app')
    compile_task = project.CreateTask(_RecordingTask, 'compile', log=log)
    proguard_task = project.CreateTask(_RecordingTask, 'proguard', log=log)
    dex_task = project.CreateTask(_RecordingTask, 'dex', log=log)
    project.CreateTask(_RecordingTask, 'lint', log=log)
    project.AfterEvaluate(lambda p: proguard_task.DependsOn(compile_task))
    dex_task.DependsOn(proguard_task)
    project.task_graph.WhenReady(
        lambda graph: log.append('ready:{}'.format(graph.HasTask(dex_task))))
    project.Run('dex')
    self.assertEqual(['ready:True', 'compile', 'proguard', 'dex'], log)
    self.assertEqual('/src/app/build', project.build_dir)

  def testAfterEvaluateOnce(self):
    calls = []
    project = build_graph.Project('app', '/src/app')
    project.AfterEvaluate(calls.append)
    project.Evaluate()
    project.Evaluate()
    self.assertEqual([project], calls)
    # Late callbacks run right away.
    project.AfterEvaluate(calls.append)
    self.assertEqual([project, project], calls)

  def testDuplicateTask(self):
    project = build_graph.Project('app', '/src/app')
    project.CreateTask(build_graph.Task, 'dex')
    with self.assertRaises(ValueError):
      project.CreateTask(build_graph.Task, 'dex')


class ExtensionContainerTest(unittest.TestCase):
  def testLookup(self):
    container = build_graph.ExtensionContainer()
    android = container.Create('android', build_graph.AndroidExtension)
    self.assertIs(android, container.GetByName('android'))
    self.assertIs(android, container.GetByType(build_graph.AndroidExtension))
    self.assertIsNone(container.FindByType(build_graph.DexOptions))
    with self.assertRaises(KeyError):
      container.GetByType(build_graph.DexOptions)
    with self.assertRaises(errors.ConfigurationError):
      container.Create('android', build_graph.AndroidExtension)


class ConfigurationTest(unittest.TestCase):
  def testCreateAndResolve(self):
    resolved = {
        'a:b:1': ['/m2/b-1.jar', '/m2/c-1.jar'],
        'a:c:1': ['/m2/c-1.jar'],
    }
    configurations = build_graph.ConfigurationContainer(resolved.get)
    configuration = configurations.Create('tools')
    configuration.AddDependency('a:b:1')
    configuration.AddDependency('a:c:1')
    self.assertIn('tools', configurations)
    self.assertIs(configuration, configurations.GetByName('tools'))
    self.assertEqual(['/m2/b-1.jar', '/m2/c-1.jar'], configuration.Resolve())
    self.assertEqual('/m2/b-1.jar' + os.pathsep + '/m2/c-1.jar',
                     configuration.AsPath())
    with self.assertRaises(ValueError):
      configurations.Create('tools')
    self.assertIsNone(configurations.FindByName('other'))


class MavenLocalResolverTest(fake_filesystem_unittest.TestCase):
  def setUp(self):
    self.setUpPyfakefs()
    self._repo = '/home/user/.m2/repository'
    base = os.path.join(self._repo, 'org', 'scala-lang')
    for artifact in ('scala-compiler', 'scala-library', 'scala-reflect'):
      self.fs.create_file(
          os.path.join(base, artifact, '2.11.7',
                       '{}-2.11.7.jar'.format(artifact)))
    self.fs.create_file(os.path.join(base, 'scala-compiler', '2.11.7',
                                     'scala-compiler-2.11.7.pom'),
                        contents=_POM)

  def testTransitiveCompileDependencies(self):
    resolver = build_graph.MavenLocalResolver(self._repo)
    jars = resolver('org.scala-lang:scala-compiler:2.11.7')
    self.assertEqual(['scala-compiler-2.11.7.jar', 'scala-library-2.11.7.jar',
                      'scala-reflect-2.11.7.jar'],
                     [os.path.basename(j) for j in jars])

  def testMissingArtifact(self):
    resolver = build_graph.MavenLocalResolver(self._repo)
    with self.assertRaises(FileNotFoundError):
      resolver('net.sf.proguard:proguard-base:4.11')


class TestVariantTest(unittest.TestCase):
  def testCompileClasspathDefaultsToCompileTask(self):
    project = build_graph.Project('app', '/src/app')
    java_compile = project.CreateTask(build_graph.JavaCompileTask,
                                      'compileDebugTestJava',
                                      classpath=['/a.jar'])
    tested = build_graph.Variant('debug', 'com.example', java_compile)
    variant = build_graph.TestVariant('debugTest', 'com.example.test',
                                      java_compile, tested)
    self.assertEqual(['/a.jar'], variant.compile_classpath)
    variant = build_graph.TestVariant('debugTest',
                                      'com.example.test',
                                      java_compile,
                                      tested,
                                      compile_classpath=['/a.jar', '/b.jar'])
    self.assertEqual(['/a.jar', '/b.jar'], variant.compile_classpath)


if __name__ == '__main__':
  unittest.main()

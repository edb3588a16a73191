#!/usr/bin/env python3
#
# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Compiles .scala and .java sources of one compile task together.

scalac runs first over the .scala files. javac then compiles the .java files
with scalac's output on its classpath, so Java may use Scala classes but not
the other way around.
"""

import argparse
import logging
import os
import sys
import time

from android_scala import action_helpers
from android_scala import build_graph
from android_scala import errors
from android_scala import scala_version
from android_scala import zip_helpers
from android_scala.util import build_utils
from android_scala.util import classpath_utils

SCALA_COMPILER_CONFIGURATION_PREFIX = 'androidScalaPluginScalaCompilerFor'
SCALA_COMPILER_COORDINATE = 'org.scala-lang:scala-compiler:{}'
_SCALA_COMPILER_MODULE = 'org.scala-lang:scala-compiler:'

_REGISTRY_EXTENSION_NAME = 'androidScalaCompileTasks'


def PartitionSources(source_files):
  """Returns (scala_files, java_files), each in the given order."""
  scala_files = []
  java_files = []
  for f in source_files:
    if f.endswith('.scala'):
      scala_files.append(f)
    else:
      java_files.append(f)
  return scala_files, java_files


def RunScalac(scala_compiler_classpath,
              source_files,
              classpath,
              destination_dir,
              target=None,
              boot_classpath=None,
              encoding='UTF-8'):
  """Runs scalac. Raises build_utils.CalledProcessError on failure."""
  assert source_files, 'At least one .scala file must be passed in.'
  logging.info('Starting scalac on %d files', len(source_files))
  with build_utils.TempDir() as temp_dir:
    cmd = build_utils.JavaCmd() + [
        '-cp',
        classpath_utils.JoinClasspath(scala_compiler_classpath),
        build_utils.SCALAC_MAIN_CLASS,
        '-d',
        destination_dir,
        '-encoding',
        encoding,
    ]
    if target:
      cmd += ['-target:' + target]
    if boot_classpath:
      cmd += [
          '-javabootclasspath',
          classpath_utils.JoinClasspath(boot_classpath)
      ]
    if classpath:
      cmd += ['-classpath', classpath_utils.JoinClasspath(classpath)]

    # Pass source paths as response files to avoid extremely long command
    # lines that are tedius to debug.
    source_files_rsp_path = os.path.join(temp_dir, 'files_list.txt')
    with open(source_files_rsp_path, 'w') as f:
      f.write(' '.join(source_files))
    cmd += ['@' + source_files_rsp_path]

    logging.debug('Build command %s', cmd)
    start = time.time()
    build_utils.CheckOutput(cmd, print_stdout=True)
    logging.info('Scala compilation took %ss', time.time() - start)


class ScalaJavaJointCompiler:
  """Wraps a Java compiler so that .scala sources are compiled first.

  Args:
    scala_compiler_classpath: Callable returning the scala-compiler jars.
        Called only when there are .scala files to compile.
    java_compiler: The compiler being wrapped. Gets the .java files.
    target: Value for scalac's -target: flag.
  """

  def __init__(self, scala_compiler_classpath, java_compiler, target=None):
    self._scala_compiler_classpath = scala_compiler_classpath
    self.java_compiler = java_compiler
    self.target = target

  def Execute(self, spec):
    scala_files, java_files = PartitionSources(spec.source_files)
    build_utils.MakeDirectory(spec.destination_dir)
    if scala_files:
      RunScalac(self._scala_compiler_classpath(),
                scala_files,
                spec.classpath,
                spec.destination_dir,
                target=self.target,
                boot_classpath=spec.options.boot_classpath,
                encoding=spec.options.encoding)
    if java_files:
      self.java_compiler.Execute(
          spec.Replace(source_files=java_files,
                       classpath=spec.classpath + [spec.destination_dir]))


class ScalaCompileTaskDescriptor:
  """What was done to one compile task."""

  def __init__(self, task, version, configuration):
    self.task = task
    self.version = version
    self.configuration = configuration
    self.scala_compiler_classpath = None
    self.compiler = None

  def ScalaCompilerClasspath(self):
    if self.scala_compiler_classpath is None:
      self.scala_compiler_classpath = self.configuration.Resolve()
      logging.info('scala-compiler classpath for %s: %s', self.task.path,
                   self.scala_compiler_classpath)
    return self.scala_compiler_classpath


class ScalaCompileTaskRegistry:
  def __init__(self):
    self._descriptors = {}

  def Get(self, task):
    return self._descriptors.get(task.path)

  def Add(self, descriptor):
    assert descriptor.task.path not in self._descriptors
    self._descriptors[descriptor.task.path] = descriptor


def _GetRegistry(project):
  registry = project.extensions.FindByType(ScalaCompileTaskRegistry)
  if registry is None:
    registry = project.extensions.Create(_REGISTRY_EXTENSION_NAME,
                                         ScalaCompileTaskRegistry)
  return registry


def UpdateJavaCompileTask(project, task, options):
  """Lets |task| compile .scala sources when its classpath has scala-library.

  Args:
    project: The build_graph.Project owning |task|.
    task: A build_graph.JavaCompileTask.
    options: The plugin extension; its |target| is passed to scalac.

  Returns:
    The task's ScalaCompileTaskDescriptor, or None when the task was left as
    is because no scala-library is on its classpath.
  """
  registry = _GetRegistry(project)
  descriptor = registry.Get(task)
  if descriptor:
    return descriptor

  version = scala_version.ScalaVersionFromClasspath(task.classpath)
  if not version:
    return None
  logging.info('scala-library version=%s detected', version)

  configuration_name = SCALA_COMPILER_CONFIGURATION_PREFIX + task.name
  configuration = project.configurations.FindByName(configuration_name)
  if configuration is None:
    configuration = project.configurations.Create(configuration_name)
  coordinate = SCALA_COMPILER_COORDINATE.format(version)
  pinned = [
      d for d in configuration.dependencies
      if d.startswith(_SCALA_COMPILER_MODULE) and d != coordinate
  ]
  if pinned:
    raise errors.ConfigurationError(
        '{} requests {} but scala-library {} is on the classpath of {}'.format(
            configuration_name, ', '.join(pinned), version, task.path))
  if coordinate not in configuration.dependencies:
    configuration.AddDependency(coordinate)

  descriptor = ScalaCompileTaskDescriptor(task, version, configuration)
  descriptor.compiler = ScalaJavaJointCompiler(
      descriptor.ScalaCompilerClasspath,
      task.java_compiler,
      target=options.target)
  task.java_compiler = descriptor.compiler
  registry.Add(descriptor)
  return descriptor


def _ParseOptions(argv):
  parser = argparse.ArgumentParser()
  action_helpers.add_depfile_arg(parser)
  parser.add_argument('--classpath', action='append', help='Classpath to use.')
  parser.add_argument('--bootclasspath',
                      action='append',
                      help='Boot classpath for javac and scalac.')
  parser.add_argument('--scala-compiler-classpath',
                      action='append',
                      required=True,
                      help='Jars of scala-compiler and its dependencies.')
  parser.add_argument('--destination-dir',
                      required=True,
                      help='Directory to write .class files to.')
  parser.add_argument('--jar-path',
                      help='Also zip the destination dir into this jar.')
  parser.add_argument('--target', help='Value for scalac\'s -target: flag.')
  parser.add_argument('--encoding', default='UTF-8')

  args, extra_args = parser.parse_known_args(argv)
  if args.depfile and not args.jar_path:
    parser.error('--depfile requires --jar-path')

  def _ParseClasspath(values):
    ret = []
    for value in action_helpers.parse_gn_list(values):
      ret += classpath_utils.SplitClasspath(value)
    return ret

  args.classpath = _ParseClasspath(args.classpath)
  args.bootclasspath = _ParseClasspath(args.bootclasspath)
  args.scala_compiler_classpath = _ParseClasspath(
      args.scala_compiler_classpath)

  source_files = []
  for arg in extra_args:
    # Interpret a path prefixed with @ as a file containing a list of sources.
    if arg.startswith('@'):
      source_files.extend(build_utils.ReadSourcesList(arg[1:]))
    else:
      assert not arg.startswith('--'), f'Undefined option {arg}'
      source_files.append(arg)

  return args, source_files


def main(argv):
  build_utils.InitLogging('ANDROID_SCALA_DEBUG')
  args, source_files = _ParseOptions(argv)

  compiler = ScalaJavaJointCompiler(lambda: args.scala_compiler_classpath,
                                    build_graph.JavacCompiler(),
                                    target=args.target)
  spec = build_graph.CompileSpec(
      source_files, args.classpath, args.destination_dir,
      build_graph.CompileOptions(encoding=args.encoding,
                                 boot_classpath=args.bootclasspath))
  try:
    compiler.Execute(spec)
  except build_utils.CalledProcessError as e:
    sys.stderr.write(e.output)
    return 1

  if args.jar_path:
    with action_helpers.atomic_output(args.jar_path) as f:
      zip_helpers.zip_directory(f, args.destination_dir)

  if args.depfile:
    # GN already knows of the source files, so avoid listing individual files
    # in the depfile.
    action_helpers.write_depfile(args.depfile, args.jar_path,
                                 args.classpath + args.scala_compiler_classpath)
  return 0


if __name__ == '__main__':
  sys.exit(main(sys.argv[1:]))

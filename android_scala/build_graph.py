# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""In-memory model of the host build that the android-scala steps plug into.

The steps only ever touch the surface defined here: projects with named
dependency buckets and an extension registry, tasks with dependency edges and
pre/post action lists, Android variants and a task graph that becomes "ready"
before anything runs. A real build tool is adapted to this surface; tests and
the command line drive it directly.
"""

import logging
import os
from xml.etree import ElementTree

from android_scala import errors
from android_scala import proguard
from android_scala.util import build_utils
from android_scala.util import classpath_utils

_POM_NAMESPACE = '{http://maven.apache.org/POM/4.0.0}'
# Scopes a consumer of an artifact needs at compile and run time.
_TRANSITIVE_SCOPES = ('', 'compile', 'runtime')


class MavenLocalResolver:
  """Resolves "group:artifact:version" into jars of a Maven repository layout.

  Compile and runtime dependencies listed in each artifact's .pom are resolved
  transitively; the first version seen for an artifact wins.
  """

  def __init__(self, repository_dir=None):
    self.repository_dir = repository_dir or os.path.join(
        os.path.expanduser('~'), '.m2', 'repository')

  def _ArtifactPath(self, group, artifact, version, extension):
    return os.path.join(self.repository_dir, *group.split('.'), artifact,
                        version, '{}-{}.{}'.format(artifact, version,
                                                   extension))

  def _PomDependencies(self, pom_path):
    if not os.path.exists(pom_path):
      return []
    root = ElementTree.parse(pom_path).getroot()
    ret = []
    for dep in root.iter(_POM_NAMESPACE + 'dependency'):

      def text(tag):
        node = dep.find(_POM_NAMESPACE + tag)
        return (node.text or '').strip() if node is not None else ''

      if text('optional') == 'true' or text('scope') not in _TRANSITIVE_SCOPES:
        continue
      group, artifact, version = text('groupId'), text('artifactId'), text(
          'version')
      # Property references and ranges are not resolved.
      if not version or '$' in version or version[0] in '[(':
        logging.debug('Skipping unresolvable dependency %s:%s:%s in %s',
                      group, artifact, version, pom_path)
        continue
      ret.append(':'.join((group, artifact, version)))
    return ret

  def __call__(self, coordinate):
    ret = []
    seen_artifacts = set()
    pending = [coordinate]
    while pending:
      group, artifact, version = pending.pop(0).split(':')[:3]
      if (group, artifact) in seen_artifacts:
        continue
      seen_artifacts.add((group, artifact))
      jar_path = self._ArtifactPath(group, artifact, version, 'jar')
      if not os.path.exists(jar_path):
        raise FileNotFoundError(
            'Could not resolve {}:{}:{} (looked for {})'.format(
                group, artifact, version, jar_path))
      ret.append(jar_path)
      pending += self._PomDependencies(
          self._ArtifactPath(group, artifact, version, 'pom'))
    return ret


class Configuration:
  """A named bucket of dependency coordinates, resolved to files on demand."""

  def __init__(self, name, resolver):
    self.name = name
    self.dependencies = []
    self._resolver = resolver

  def AddDependency(self, coordinate):
    self.dependencies.append(coordinate)

  def Resolve(self):
    files = []
    for coordinate in self.dependencies:
      files += self._resolver(coordinate)
    return classpath_utils.UniqueByCanonicalPath(files)

  def AsPath(self):
    return classpath_utils.JoinClasspath(self.Resolve())


class ConfigurationContainer:
  def __init__(self, resolver):
    self._resolver = resolver
    self._configurations = {}

  def __iter__(self):
    return iter(self._configurations.values())

  def FindByName(self, name):
    return self._configurations.get(name)

  def GetByName(self, name):
    configuration = self.FindByName(name)
    if configuration is None:
      raise KeyError('No configuration named ' + name)
    return configuration

  def Create(self, name):
    if name in self._configurations:
      raise ValueError('Configuration already exists: ' + name)
    configuration = Configuration(name, self._resolver)
    self._configurations[name] = configuration
    return configuration


class ExtensionContainer:
  """Named, typed objects attached to a host object.

  Each extension is registered once and can then be looked up by name or by
  type.
  """

  def __init__(self):
    self._extensions = {}

  def Create(self, name, extension_type, *args, **kwargs):
    if name in self._extensions:
      raise errors.ConfigurationError(
          'Extension "{}" is already registered'.format(name))
    extension = extension_type(*args, **kwargs)
    self._extensions[name] = extension
    return extension

  def FindByName(self, name):
    return self._extensions.get(name)

  def GetByName(self, name):
    extension = self.FindByName(name)
    if extension is None:
      raise KeyError('No extension named ' + name)
    return extension

  def FindByType(self, extension_type):
    for extension in self._extensions.values():
      if isinstance(extension, extension_type):
        return extension
    return None

  def GetByType(self, extension_type):
    extension = self.FindByType(extension_type)
    if extension is None:
      raise KeyError('No extension of type ' + extension_type.__name__)
    return extension


class Task:
  """A unit of work in the task graph.

  Pre-actions, the task body and post-actions run in that order. Actions are
  callables taking the task; any exception aborts the task.
  """

  def __init__(self, project, name):
    self.project = project
    self.name = name
    self.dependencies = []
    self.pre_actions = []
    self.post_actions = []

  def __repr__(self):
    return '<{} {}>'.format(type(self).__name__, self.path)

  @property
  def path(self):
    return '{}:{}'.format(self.project.path, self.name)

  def DependsOn(self, *tasks):
    for task in tasks:
      if task not in self.dependencies:
        self.dependencies.append(task)

  def DoFirst(self, action):
    self.pre_actions.append(action)

  def DoLast(self, action):
    self.post_actions.append(action)

  def Action(self):
    """The task body."""

  def Execute(self):
    logging.info('Executing %s', self.path)
    for action in self.pre_actions:
      action(self)
    self.Action()
    for action in self.post_actions:
      action(self)


class CompileOptions:
  def __init__(self, encoding='UTF-8', boot_classpath=None, compiler_args=None):
    self.encoding = encoding
    self.boot_classpath = list(boot_classpath or [])
    self.compiler_args = list(compiler_args or [])

  def OptionMap(self):
    ret = {'encoding': self.encoding}
    if self.boot_classpath:
      ret['bootClasspath'] = classpath_utils.JoinClasspath(self.boot_classpath)
    return ret


class CompileSpec:
  """Everything a compiler needs for one invocation."""

  def __init__(self, source_files, classpath, destination_dir, options):
    self.source_files = list(source_files)
    self.classpath = list(classpath)
    self.destination_dir = destination_dir
    self.options = options

  def Replace(self, **kwargs):
    values = dict(source_files=self.source_files,
                  classpath=self.classpath,
                  destination_dir=self.destination_dir,
                  options=self.options)
    values.update(kwargs)
    return CompileSpec(**values)


def _WriteResponseFile(path, args):
  # Pass source paths as response files to avoid extremely long command
  # lines that are tedius to debug.
  with open(path, 'w') as f:
    f.write(' '.join(args))
  return '@' + path


class JavacCompiler:
  """Runs javac."""

  def Execute(self, spec):
    with build_utils.TempDir() as temp_dir:
      cmd = [build_utils.JAVAC_PATH, '-g', '-d', spec.destination_dir]
      cmd += ['-encoding', spec.options.encoding]
      # Prevent javac from compiling .java files not listed as inputs.
      cmd += ['-sourcepath', '']
      if spec.options.boot_classpath:
        cmd += [
            '-bootclasspath',
            classpath_utils.JoinClasspath(spec.options.boot_classpath)
        ]
      if spec.classpath:
        cmd += ['-classpath', classpath_utils.JoinClasspath(spec.classpath)]
      cmd += spec.options.compiler_args
      cmd += [
          _WriteResponseFile(os.path.join(temp_dir, 'files_list.txt'),
                             spec.source_files)
      ]
      build_utils.CheckOutput(cmd, print_stdout=True)


class JavaCompileTask(Task):
  def __init__(self,
               project,
               name,
               source_files=(),
               classpath=(),
               destination_dir=None,
               options=None,
               java_compiler=None):
    super().__init__(project, name)
    self.source_files = list(source_files)
    self.classpath = list(classpath)
    self.destination_dir = destination_dir or os.path.join(
        project.build_dir, 'intermediates', 'classes', name)
    self.options = options or CompileOptions()
    self.java_compiler = java_compiler or JavacCompiler()

  def Action(self):
    build_utils.MakeDirectory(self.destination_dir)
    if not self.source_files:
      logging.info('No sources for %s', self.path)
      return
    spec = CompileSpec(self.source_files, self.classpath, self.destination_dir,
                       self.options)
    self.java_compiler.Execute(spec)


class ProguardTask(Task):
  """The shrink step of a variant.

  Its ProguardConfiguration can be extended in place until the task runs.
  """

  def __init__(self,
               project,
               name,
               configuration=None,
               proguard_classpath=()):
    super().__init__(project, name)
    self.configuration = configuration or proguard.ProguardConfiguration()
    self.proguard_classpath = list(proguard_classpath)

  @property
  def out_jar_files(self):
    return [self.configuration.outjar] if self.configuration.outjar else []

  def Injars(self, path):
    self.configuration.AddInjar(path)

  def Libraryjars(self, path):
    self.configuration.AddLibraryjar(path)

  def Keepdirectories(self, directory_filter):
    self.configuration.AddKeepDirectories(directory_filter)

  def Action(self):
    proguard.RunProguard(self.proguard_classpath, self.configuration)


class DexTask(Task):
  """Converts class files into the dex files of an apk.

  |input_files| and |libraries| are both dexed as program inputs.
  """

  def __init__(self,
               project,
               name,
               input_files=(),
               libraries=(),
               output_dir=None,
               dexer_classpath=()):
    super().__init__(project, name)
    self.input_files = list(input_files)
    self.libraries = list(libraries)
    self.output_dir = output_dir or os.path.join(project.build_dir,
                                                 'intermediates', 'dex', name)
    self.dexer_classpath = list(dexer_classpath)

  def Action(self):
    build_utils.MakeDirectory(self.output_dir)
    cmd = build_utils.JavaCmd() + [
        '-cp',
        classpath_utils.JoinClasspath(self.dexer_classpath),
        'com.android.tools.r8.D8',
        '--output',
        self.output_dir,
    ]
    cmd += self.input_files + self.libraries
    build_utils.CheckOutput(cmd, print_stdout=True)


class Variant:
  def __init__(self, name, package_name, java_compile, proguard=None, dex=None):
    self.name = name
    self.package_name = package_name
    self.java_compile = java_compile
    self.proguard = proguard
    self.dex = dex


class TestVariant(Variant):
  def __init__(self,
               name,
               package_name,
               java_compile,
               tested_variant,
               proguard=None,
               dex=None,
               compile_classpath=None):
    super().__init__(name, package_name, java_compile, proguard, dex)
    self.tested_variant = tested_variant
    self._compile_classpath = compile_classpath

  @property
  def compile_classpath(self):
    if self._compile_classpath is not None:
      return list(self._compile_classpath)
    return list(self.java_compile.classpath)


class SourceDirectorySet:
  def __init__(self, name):
    self.name = name
    self.srcdirs = []
    self.includes = []

  def SrcDir(self, path):
    if path not in self.srcdirs:
      self.srcdirs.append(path)

  def Include(self, pattern):
    if pattern not in self.includes:
      self.includes.append(pattern)


class SourceSet:
  def __init__(self, name):
    self.name = name
    self.display_name = name
    self.java = SourceDirectorySet(name + ' Java source')
    self.all_java = [self.java]
    self.all_source = [self.java]
    self.extensions = ExtensionContainer()


class DexOptions:
  def __init__(self, pre_dex_libraries=True):
    self.pre_dex_libraries = pre_dex_libraries


class AndroidExtension:
  """What the Android plugin exposes to other plugins."""

  def __init__(self):
    self.source_sets = [SourceSet('main'), SourceSet('androidTest')]
    self.application_variants = []
    self.library_variants = []
    self.test_variants = []
    self.dex_options = DexOptions()
    self.extensions = ExtensionContainer()


class TaskGraph:
  """Orders the requested tasks and runs them.

  "When ready" callbacks run once the graph is final and before any task
  executes.
  """

  def __init__(self):
    self._when_ready = []
    self.tasks = None

  def WhenReady(self, callback):
    self._when_ready.append(callback)

  def HasTask(self, task):
    return self.tasks is not None and task in self.tasks

  def Populate(self, requested_tasks):
    self.tasks = build_utils.GetSortedTransitiveDependencies(
        requested_tasks, lambda t: t.dependencies)
    for callback in self._when_ready:
      callback(self)

  def Execute(self):
    assert self.tasks is not None, 'Populate() must be called first'
    for task in self.tasks:
      task.Execute()


class Project:
  """One build invocation's view of a project. Nothing outlives the run."""

  def __init__(self, name, project_dir, resolver=None):
    self.name = name
    self.path = ':' + name
    self.project_dir = project_dir
    self.build_dir = os.path.join(project_dir, 'build')
    self.plugins = set()
    self.extensions = ExtensionContainer()
    self.configurations = ConfigurationContainer(resolver
                                                 or MavenLocalResolver())
    self.tasks = {}
    self.task_graph = TaskGraph()
    self._after_evaluate = []
    self._evaluated = False

  def ApplyPlugin(self, plugin_id):
    self.plugins.add(plugin_id)

  def HasPlugin(self, plugin_id):
    return plugin_id in self.plugins

  def CreateTask(self, task_type, name, **kwargs):
    if name in self.tasks:
      raise ValueError('Task already exists: ' + name)
    task = task_type(self, name, **kwargs)
    self.tasks[name] = task
    return task

  def AfterEvaluate(self, callback):
    if self._evaluated:
      callback(self)
    else:
      self._after_evaluate.append(callback)

  def Evaluate(self):
    if self._evaluated:
      return
    self._evaluated = True
    for callback in self._after_evaluate:
      callback(self)

  def Run(self, *task_names):
    self.Evaluate()
    self.task_graph.Populate([self.tasks[n] for n in task_names])
    self.task_graph.Execute()

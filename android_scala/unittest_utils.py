# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Fake scalac, javac, ProGuard and D8 for tests that do not have a JDK.

Patch build_utils.CheckOutput with a FakeToolchain. Sources understood by the
fake compilers consist of lines of the form:

  class com.example.Foo
  uses com.example.Bar

Each "class" line produces com/example/Foo.class in the output directory.
Each "uses" line must name a class that is either declared by a source of the
same compiler invocation or present on its classpath, otherwise the compiler
fails the way scalac and javac do.
"""

import os
import zipfile

from android_scala import build_graph
from android_scala import proguard
from android_scala.util import build_utils

D8_MAIN_CLASS = 'com.android.tools.r8.D8'
CLASS_FILE_HEADER = b'\xca\xfe\xba\xbe'


def WriteSource(path, declared=(), used=()):
  os.makedirs(os.path.dirname(path), exist_ok=True)
  with open(path, 'w') as f:
    for name in declared:
      f.write('class {}\n'.format(name))
    for name in used:
      f.write('uses {}\n'.format(name))


def ClassEntryName(class_name):
  return class_name.replace('.', '/') + '.class'


def ClassNamesInJar(jar_path):
  with zipfile.ZipFile(jar_path) as z:
    return sorted(n[:-len('.class')].replace('/', '.') for n in z.namelist()
                  if n.endswith('.class'))


def _ArgValue(args, flag):
  return args[args.index(flag) + 1] if flag in args else None


def _ArgValues(args, flag):
  return [args[i + 1] for i, arg in enumerate(args) if arg == flag]


def _ClassEntries(path):
  """Returns {entry name: data} for the .class files of a dir or jar."""
  ret = {}
  if os.path.isdir(path):
    for root, _, files in os.walk(path):
      for f in files:
        if f.endswith('.class'):
          full_path = os.path.join(root, f)
          name = os.path.relpath(full_path, path).replace(os.sep, '/')
          with open(full_path, 'rb') as class_file:
            ret[name] = class_file.read()
  elif zipfile.is_zipfile(path):
    with zipfile.ZipFile(path) as z:
      for name in z.namelist():
        if name.endswith('.class'):
          ret[name] = z.read(name)
  return ret


class FakeToolchain:
  """Callable replacement for build_utils.CheckOutput.

  Records each invocation in |calls| as (tool name, args).
  """

  def __init__(self):
    self.calls = []
    self.proguard_configs = []
    self.fail_proguard_with = None
    self.proguard_writes_output = True

  def ToolNames(self):
    return [name for name, _ in self.calls]

  def CallsTo(self, tool_name):
    return [args for name, args in self.calls if name == tool_name]

  def __call__(self, args, cwd=None, **_kwargs):
    args = list(args)
    if build_utils.SCALAC_MAIN_CLASS in args:
      self.calls.append(('scalac', args))
      return self._Compile(args, cwd)
    if build_utils.PROGUARD_MAIN_CLASS in args:
      self.calls.append(('proguard', args))
      return self._Proguard(args, cwd)
    if D8_MAIN_CLASS in args:
      self.calls.append(('d8', args))
      return ''
    if args[0] == build_utils.JAVAC_PATH:
      self.calls.append(('javac', args))
      return self._Compile(args, cwd)
    raise AssertionError('Unexpected command: {}'.format(args))

  def _Compile(self, args, cwd):
    destination_dir = _ArgValue(args, '-d')
    classpath_value = _ArgValue(args, '-classpath')
    classpath = classpath_value.split(os.pathsep) if classpath_value else []
    source_files = []
    for arg in args:
      if arg.startswith('@'):
        source_files += build_utils.ReadSourcesList(arg[1:])

    available = set()
    for entry in classpath:
      available.update(_ClassEntries(entry))
    declared = {}
    uses = []
    for source_file in source_files:
      with open(source_file) as f:
        for lineno, line in enumerate(f, 1):
          kind, _, name = line.strip().partition(' ')
          if kind == 'class':
            declared[ClassEntryName(name)] = name
          elif kind == 'uses':
            uses.append((source_file, lineno, name))

    errors = [
        '{}:{}: error: not found: type {}\n'.format(path, lineno, name)
        for path, lineno, name in uses
        if ClassEntryName(name) not in available
        and ClassEntryName(name) not in declared
    ]
    if errors:
      raise build_utils.CalledProcessError(cwd or os.getcwd(), args,
                                           ''.join(errors))

    for entry_name, name in declared.items():
      path = os.path.join(destination_dir, *entry_name.split('/'))
      os.makedirs(os.path.dirname(path), exist_ok=True)
      with open(path, 'wb') as f:
        f.write(CLASS_FILE_HEADER + name.encode())
    return ''

  def _Proguard(self, args, cwd):
    config_text = ''
    for path in _ArgValues(args, '-include'):
      with open(path) as f:
        config_text += f.read()
    self.proguard_configs.append(config_text)
    if self.fail_proguard_with is not None:
      raise build_utils.CalledProcessError(cwd or os.getcwd(), args,
                                           self.fail_proguard_with)
    for path in _ArgValues(args, '-injars'):
      if not os.path.exists(path):
        message = 'Error: Can\'t read [{}] (No such file or directory)\n'
        raise build_utils.CalledProcessError(cwd or os.getcwd(), args,
                                             message.format(path))
    if not self.proguard_writes_output:
      return ''

    # Keeps every class of every input; the first input providing a class
    # wins, as ProGuard does for duplicates.
    entries = {}
    for path in _ArgValues(args, '-injars'):
      for name, data in _ClassEntries(path).items():
        entries.setdefault(name, data)
    outjar = _ArgValue(args, '-outjars')
    os.makedirs(os.path.dirname(outjar), exist_ok=True)
    with zipfile.ZipFile(outjar, 'w') as z:
      for name in sorted(entries):
        z.writestr(name, entries[name])
    return ''


class StaticResolver:
  """Resolves every coordinate to one made-up jar path."""

  def __init__(self, repository_dir='/m2'):
    self.repository_dir = repository_dir
    self.requested = []

  def __call__(self, coordinate):
    self.requested.append(coordinate)
    return [
        os.path.join(self.repository_dir,
                     coordinate.replace(':', '-') + '.jar')
    ]


def WriteJar(path, entries):
  os.makedirs(os.path.dirname(path), exist_ok=True)
  with zipfile.ZipFile(path, 'w') as z:
    for name, data in sorted(entries.items()):
      z.writestr(name, data)


class AndroidAppFixture:
  """An application project with a "debug" variant and its test variant.

  The app declares com.example.app.A. Its tests declare
  com.example.app.test.BTest, which uses A, and com.example.app.test.C, which
  nothing uses. The test variant also depends on a prebuilt support jar.
  """

  APP_PACKAGE = 'com.example.app'
  TEST_PACKAGE = 'com.example.app.test'

  def __init__(self, project_dir, plugin_id='android', shrink=True):
    self.project = build_graph.Project('app',
                                       project_dir,
                                       resolver=StaticResolver())
    self.project.ApplyPlugin(plugin_id)
    self.android = self.project.extensions.Create('android',
                                                  build_graph.AndroidExtension)

    self.android_jar = os.path.join(project_dir, 'sdk', 'android.jar')
    WriteJar(self.android_jar, {'android/app/Activity.class': CLASS_FILE_HEADER})
    self.support_jar = os.path.join(project_dir, 'libs', 'test-support.jar')
    WriteJar(self.support_jar,
             {'com/example/support/Helper.class': CLASS_FILE_HEADER})

    def Src(rel_path, declared=(), used=()):
      path = os.path.join(project_dir, *rel_path.split('/'))
      WriteSource(path, declared, used)
      return path

    app_sources = [
        Src('src/main/java/com/example/app/A.java',
            declared=['com.example.app.A'])
    ]
    test_sources = [
        Src('src/androidTest/java/com/example/app/test/BTest.java',
            declared=['com.example.app.test.BTest'],
            used=['com.example.app.A']),
        Src('src/androidTest/java/com/example/app/test/C.java',
            declared=['com.example.app.test.C']),
    ]

    self.app_compile = self.project.CreateTask(
        build_graph.JavaCompileTask,
        'compileDebugJava',
        source_files=app_sources,
        options=build_graph.CompileOptions(boot_classpath=[self.android_jar]))
    app_classes = self.app_compile.destination_dir

    self.app_proguard = None
    dex_inputs = [app_classes]
    if shrink:
      self.app_proguard = self.project.CreateTask(
          build_graph.ProguardTask,
          'proguardDebug',
          configuration=proguard.ProguardConfiguration(
              injars=[app_classes],
              libraryjars=[self.android_jar],
              outjar=os.path.join(self.project.build_dir, 'intermediates',
                                  'proguard', 'debug', 'classes.jar')))
      self.app_proguard.DependsOn(self.app_compile)
      dex_inputs = self.app_proguard.out_jar_files
    self.app_dex = self.project.CreateTask(build_graph.DexTask,
                                           'dexDebug',
                                           input_files=dex_inputs)
    self.app_dex.DependsOn(self.app_proguard or self.app_compile)
    self.app_variant = build_graph.Variant('debug', self.APP_PACKAGE,
                                           self.app_compile, self.app_proguard,
                                           self.app_dex)

    self.test_compile = self.project.CreateTask(
        build_graph.JavaCompileTask,
        'compileDebugTestJava',
        source_files=test_sources,
        classpath=[app_classes, self.support_jar],
        options=build_graph.CompileOptions(boot_classpath=[self.android_jar]))
    self.test_compile.DependsOn(self.app_compile)
    self.test_dex = self.project.CreateTask(
        build_graph.DexTask,
        'dexDebugTest',
        input_files=[self.test_compile.destination_dir],
        libraries=[self.support_jar])
    self.test_dex.DependsOn(self.test_compile)
    self.test_variant = build_graph.TestVariant('debugTest',
                                                self.TEST_PACKAGE,
                                                self.test_compile,
                                                self.app_variant,
                                                dex=self.test_dex)

    if plugin_id == 'android':
      self.android.application_variants.append(self.app_variant)
    else:
      self.android.library_variants.append(self.app_variant)
    self.android.test_variants.append(self.test_variant)

# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Contains common helpers for the android-scala build actions."""

import atexit
import contextlib
import fnmatch
import logging
import os
import shlex
import shutil
import subprocess
import sys
import tempfile
import textwrap


def _FindJavaHome():
  java_home = os.environ.get('JAVA_HOME')
  if java_home:
    return java_home
  javac = shutil.which('javac')
  if javac:
    # $JAVA_HOME/bin/javac
    return os.path.dirname(os.path.dirname(os.path.realpath(javac)))
  return None


JAVA_HOME = _FindJavaHome()
JAVA_PATH = os.path.join(JAVA_HOME, 'bin', 'java') if JAVA_HOME else 'java'
JAVAC_PATH = os.path.join(JAVA_HOME, 'bin', 'javac') if JAVA_HOME else 'javac'

# Entry points of the tools we launch through JavaCmd().
SCALAC_MAIN_CLASS = 'scala.tools.nsc.Main'
PROGUARD_MAIN_CLASS = 'proguard.ProGuard'


def JavaCmd(xmx='1G'):
  # A fixed heap keeps several concurrent compiles from exhausting memory.
  return [JAVA_PATH, '-Xmx' + xmx]


@contextlib.contextmanager
def TempDir(**kwargs):
  dirname = tempfile.mkdtemp(**kwargs)
  try:
    yield dirname
  finally:
    shutil.rmtree(dirname)


def MakeDirectory(dir_path):
  os.makedirs(dir_path, exist_ok=True)


def Touch(path):
  MakeDirectory(os.path.dirname(path) or '.')
  with open(path, 'a'):
    os.utime(path, None)


def FindInDirectory(directory, filename_filter='*'):
  files = []
  for root, _dirnames, filenames in os.walk(directory):
    files.extend(
        os.path.join(root, f) for f in fnmatch.filter(filenames,
                                                      filename_filter))
  return files


class CalledProcessError(Exception):
  """Raised by CheckOutput when the command exits non-zero.

  |output| holds the tool's stdout and stderr exactly as the tool wrote them.
  """

  def __init__(self, cwd, args, output):
    super().__init__()
    self.cwd = cwd
    self.args = args
    self.output = output

  def __str__(self):
    # Copy-pastable into a shell. Set PRINT_FULL_COMMAND=1 to see all of it.
    cmd = shlex.join(self.args)
    if os.environ.get('PRINT_FULL_COMMAND', '0') == '0':
      cmd = textwrap.shorten(cmd, width=200)
    return 'Command failed: ( cd {}; {} )\n{}'.format(
        os.path.abspath(self.cwd), cmd, self.output)


def CheckOutput(args, cwd=None, env=None, print_stdout=False,
                print_stderr=True):
  """Runs |args| and returns its stdout.

  Raises:
    CalledProcessError: The command failed. Its output is not printed, only
        carried by the exception.
  """
  cwd = cwd or os.getcwd()
  logging.info('CheckOutput: %s', ' '.join(args))
  child = subprocess.run(args,
                         stdout=subprocess.PIPE,
                         stderr=subprocess.PIPE,
                         cwd=cwd,
                         env=env,
                         check=False)
  stdout = child.stdout.decode('utf-8')
  stderr = child.stderr.decode('utf-8')
  if child.returncode != 0:
    raise CalledProcessError(cwd, args, stdout + stderr)

  if print_stdout and stdout:
    sys.stdout.write(stdout)
  if print_stderr and stderr:
    sys.stderr.write(stderr)
  return stdout


def GetSortedTransitiveDependencies(top, deps_func):
  """Returns |top| and everything it depends on, dependencies first.

  Ties keep the order in which nodes were discovered, depth-first. The graph
  must not have cycles.

  Args:
    top: A list of the top level nodes.
    deps_func: Returns the list of direct dependencies of a node.
  """
  ret = {}

  def discover(nodes):
    for node in nodes:
      if node not in ret:
        discover(deps_func(node))
        ret[node] = None

  discover(top)
  return list(ret)


def InitLogging(enabling_env):
  """Logs at DEBUG when |enabling_env| is set in the environment."""
  logging.basicConfig(
      level=logging.DEBUG if os.environ.get(enabling_env) else logging.WARNING,
      format='%(levelname).1s %(process)d %(relativeCreated)6d %(message)s')
  script_name = os.path.basename(sys.argv[0])
  logging.info('Started (%s)', script_name)

  my_pid = os.getpid()

  def log_exit():
    # Do not log for fork'ed processes.
    if os.getpid() == my_pid:
      logging.info("Job's done (%s)", script_name)

  atexit.register(log_exit)


def ReadSourcesList(sources_list_file_name):
  """Reads a file containing a list of source file names and returns a list.

  Entries may be separated by newlines or spaces, which covers both the files
  written by build files and the response files written by compile_scala.
  """
  with open(sources_list_file_name) as f:
    return f.read().split()

# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""ProGuard rules and invocation shared by the shrink steps."""

import logging
import os

from jinja2 import Template  # pylint: disable=F0401

from android_scala.util import build_utils
from android_scala.util import classpath_utils

# Dependency bucket holding the ProGuard tool itself.
PROGUARD_CONFIGURATION = 'androidScalaPluginProGuard'
PROGUARD_VERSION = '4.11'
PROGUARD_COORDINATE = 'net.sf.proguard:proguard-base:' + PROGUARD_VERSION

# Bump whenever DEFAULT_PROGUARD_CONFIG changes.
DEFAULT_PROGUARD_CONFIG_VERSION = 1

DEFAULT_PROGUARD_CONFIG = """\
-ignorewarnings

# execute shrinking only
-dontoptimize
-dontobfuscate
-dontpreverify

# standard libraries
-dontwarn android.**, java.**, javax.microedition.khronos.**, junit.framework.**, scala.**, **.R$*
-dontnote android.**, java.**, javax.microedition.khronos.**, junit.framework.**, scala.**, **.R$*

# test libraries
-dontwarn com.robotium.solo.**, org.mockito.**, junitx.**, com.google.android.apps.common.testing.**
-dontnote com.robotium.solo.**, org.mockito.**, junitx.**, com.google.android.apps.common.testing.**
-keep class com.google.dexmaker.mockito.** { *; }

# android framework entry points
-keep class * extends android.** { *; }
-keep class * extends junit.** { *; }
-keep class * implements android.** { *; }
-keepclasseswithmembers class * {
    public <init>(android.content.Context, android.util.AttributeSet);
}
-keepclasseswithmembers class * {
    public <init>(android.content.Context, android.util.AttributeSet, int);
}
-keepclassmembers class * {
    @android.webkit.JavascriptInterface <methods>;
}
-keep public class com.google.vending.licensing.ILicensingService
-keep public class com.android.vending.licensing.ILicensingService
-dontnote com.google.vending.licensing.ILicensingService
-dontnote com.android.vending.licensing.ILicensingService
-keepclassmembers enum * {
    public static **[] values();
    public static ** valueOf(java.lang.String);
}

# scala runtime
-keep class scala.collection.SeqLike { public protected *; }
-keep class scala.reflect.ScalaSignature { *; }
-keep class scala.reflect.ScalaLongSignature { *; }
-keep class scala.Predef$** { *; }
-keepclassmembers class * { ** MODULE$; }
-keep class * implements org.xml.sax.EntityResolver
-keepclassmembernames class scala.concurrent.forkjoin.ForkJoinPool {
    long eventCount;
    int  workerCounts;
    int  runControl;
    scala.concurrent.forkjoin.ForkJoinPool$WaitQueueNode syncStack;
    scala.concurrent.forkjoin.ForkJoinPool$WaitQueueNode spareStack;
}
-keepclassmembernames class scala.concurrent.forkjoin.ForkJoinWorkerThread {
    int base;
    int sp;
    int runState;
}
-keepclassmembernames class scala.concurrent.forkjoin.ForkJoinTask {
    int status;
}
-keepclassmembernames class scala.concurrent.forkjoin.LinkedTransferQueue {
    scala.concurrent.forkjoin.LinkedTransferQueue$PaddedAtomicReference head;
    scala.concurrent.forkjoin.LinkedTransferQueue$PaddedAtomicReference tail;
    scala.concurrent.forkjoin.LinkedTransferQueue$PaddedAtomicReference cleanMe;
}

# attributes
-keepattributes *Annotation*
-keepclasseswithmembernames class * { native <methods>; }
"""

_TEST_CONFIG_TEMPLATE = Template("""\
# AUTO-GENERATED FILE.  DO NOT MODIFY.
{% if base_rules_version is not none %}
# Default rules version {{ base_rules_version }}.
{% endif %}

{{ base_rules }}

# Classes of the test apk and of the apk under test.
{% for package in keep_packages %}
-keep class {{ package }}.** { *; }
{% endfor %}
""",
                                 trim_blocks=True,
                                 lstrip_blocks=True,
                                 keep_trailing_newline=True)


def RenderTestConfig(test_package, tested_package, override_path=None):
  """Returns the rules for shrinking a test apk together with its libraries.

  Args:
    test_package: Package name of the test variant.
    tested_package: Package name of the variant under test.
    override_path: Optional rule file whose text replaces the default rules.
        The keep rules for both packages are appended either way.
  """
  if override_path:
    with open(override_path) as f:
      base_rules = f.read()
    base_rules_version = None
  else:
    base_rules = DEFAULT_PROGUARD_CONFIG
    base_rules_version = DEFAULT_PROGUARD_CONFIG_VERSION
  return _TEST_CONFIG_TEMPLATE.render(
      base_rules=base_rules.rstrip('\n'),
      base_rules_version=base_rules_version,
      keep_packages=[test_package, tested_package])


class ProguardConfiguration:
  """Rule files, inputs, libraries and output of one ProGuard run.

  Library jars are for resolution only and never repeat an input, compared by
  canonical path.
  """

  def __init__(self, config_paths=(), injars=(), libraryjars=(), outjar=None):
    self.config_paths = list(config_paths)
    self.injars = []
    self.libraryjars = []
    self.keep_directories = []
    self.outjar = outjar
    for path in injars:
      self.AddInjar(path)
    for path in libraryjars:
      self.AddLibraryjar(path)

  def _Contains(self, paths, path):
    key = classpath_utils.CanonicalPath(path)
    return any(classpath_utils.CanonicalPath(p) == key for p in paths)

  def AddInjar(self, path):
    path = os.fspath(path)
    if self._Contains(self.injars, path):
      return
    self.injars.append(path)
    self.libraryjars = classpath_utils.SubtractByCanonicalPath(
        self.libraryjars, [path])

  def AddLibraryjar(self, path):
    path = os.fspath(path)
    if self._Contains(self.injars, path) or self._Contains(
        self.libraryjars, path):
      return
    self.libraryjars.append(path)

  def AddKeepDirectories(self, directory_filter):
    if directory_filter not in self.keep_directories:
      self.keep_directories.append(directory_filter)

  def BuildCommand(self, proguard_classpath):
    cmd = build_utils.JavaCmd() + [
        '-cp',
        classpath_utils.JoinClasspath(proguard_classpath),
        build_utils.PROGUARD_MAIN_CLASS,
    ]
    for path in self.config_paths:
      cmd += ['-include', path]
    for path in self.injars:
      cmd += ['-injars', path]
    for path in self.libraryjars:
      cmd += ['-libraryjars', path]
    for directory_filter in self.keep_directories:
      cmd += ['-keepdirectories', directory_filter]
    if self.outjar:
      cmd += ['-outjars', self.outjar]
    return cmd


def RunProguard(proguard_classpath, configuration):
  """Runs ProGuard. Raises build_utils.CalledProcessError on failure."""
  assert configuration.outjar, 'ProGuard needs an output jar'
  if os.path.exists(configuration.outjar):
    os.unlink(configuration.outjar)
  build_utils.MakeDirectory(os.path.dirname(configuration.outjar) or '.')
  logging.info('Running ProGuard on %d inputs into %s',
               len(configuration.injars), configuration.outjar)
  return build_utils.CheckOutput(
      configuration.BuildCommand(proguard_classpath), print_stderr=False)

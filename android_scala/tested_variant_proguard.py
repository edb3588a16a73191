# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.
"""Shrinks an apk together with its test classes, then drops the test classes.

Classes of the apk under test that only the tests use would otherwise be
shrunk away and the test apk would fail at runtime.
"""

import logging

from android_scala import prune_jar


class TestClassRecord:
  """Jar entry names of the test classes, filled in right before shrinking."""

  def __init__(self, classes_dir):
    self.classes_dir = classes_dir
    self.entry_keys = None


class RecordTestClassesAction:
  def __init__(self, record):
    self.record = record

  def __call__(self, task):
    self.record.entry_keys = prune_jar.CollectClassEntryKeys(
        self.record.classes_dir)
    logging.info('%s: recorded %d test classes from %s', task.path,
                 len(self.record.entry_keys), self.record.classes_dir)


class PruneTestClassesAction:
  def __init__(self, record):
    self.record = record

  def __call__(self, task):
    assert self.record.entry_keys is not None, (
        'Test classes were not recorded before ' + task.path)
    prune_jar.PruneJars(task.out_jar_files, self.record.entry_keys)


def UpdateTestedVariantProguardTask(test_variant):
  """Makes the tested variant's ProGuard step keep what the tests need.

  Returns:
    The TestClassRecord shared by the added actions, or None when the tested
    variant is not shrunk. Repeated calls return the record of the first one.
  """
  proguard_task = test_variant.tested_variant.proguard
  if proguard_task is None:
    return None
  for action in proguard_task.pre_actions:
    if isinstance(action, RecordTestClassesAction):
      return action.record

  test_compile_task = test_variant.java_compile
  classes_dir = test_compile_task.destination_dir
  proguard_task.DependsOn(test_compile_task)
  proguard_task.Injars(classes_dir)
  proguard_task.Keepdirectories(classes_dir)
  for path in test_variant.compile_classpath:
    proguard_task.Libraryjars(path)

  record = TestClassRecord(classes_dir)
  proguard_task.DoFirst(RecordTestClassesAction(record))
  proguard_task.DoLast(PruneTestClassesAction(record))
  return record

# Copyright 2026 The Chromium Authors
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.


class AndroidScalaError(Exception):
  """Base class for exceptions raised by the android-scala build steps."""


class ConfigurationError(AndroidScalaError):
  """When the host build is configured in a way the plugin cannot support."""


class ArchiveIntegrityError(AndroidScalaError):
  """When a jar could not be pruned or shrunk cleanly.

  The build must stop: a half-written jar cannot be trusted.
  """

  def __init__(self, message, output=None):
    super().__init__(message)
    # Diagnostics of the tool that failed, verbatim.
    self.output = output

  def __str__(self):
    msg = super().__str__()
    if self.output:
      return '{}\n{}'.format(msg, self.output)
    return msg

# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only


class ExzipError(Exception):
    def __init__(self, message, path=None, cause=None):
        self.message = message
        self.path = path
        self.cause = cause
        super().__init__(message)

    def __str__(self):
        text = self.message
        if self.path is not None:
            text = f"{text} [{self.path}]"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


class ConfigurationError(ExzipError):
    """
    The requested combination of options can't be satisfied.
    """


class FormatError(ExzipError):
    """
    Not a parseable zip archive, or offsets would leave the file bounds.
    """


class ArchiveIOError(ExzipError):
    """
    Reading, writing or renaming failed, or a preamble source is missing.
    """


class ExecutablePermissionError(ExzipError, PermissionError):
    """
    The content was replaced but the execute bits could not be set.
    """

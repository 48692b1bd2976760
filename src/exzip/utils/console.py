# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
import sys

# Only set a color if we have an interactive tty
if sys.stderr.isatty():
    RED = "\033[91m"
    GREEN = "\033[92m"
    NORMAL = "\033[0m"
else:
    RED = GREEN = NORMAL = ""


def eprint(*args, **kwargs):
    """
    Print to stderr.
    """
    print(*args, file=sys.stderr, **kwargs)


def debug(*args, **kwargs):
    """
    Print to stderr, only when EXZIP_DEBUG is set.
    """
    if os.environ.get("EXZIP_DEBUG"):
        eprint(*args, **kwargs)


def info(message):
    eprint(f"{GREEN}{message}{NORMAL}")


def fail(*args, **kwargs):
    """
    Print to stderr and exit.
    """
    eprint(*args, **kwargs)
    sys.exit(1)

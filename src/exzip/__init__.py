# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

"""Make zip archives (jar, pyz, zip) really executable, \
by prepending a shell script and patching the archive offsets."""

__version__ = "1.0.0"
__author__ = "Jip-Hop"
__copyright__ = "Copyright © 2024, Jip-Hop and the Jailmakers"
__license__ = "LGPL-3.0-only"

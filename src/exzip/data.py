# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

DEFAULT_CONFIG = """# Java command line arguments to embed, only used with the default stanza
flags=

# Shell script to prepend instead of the default stanza
# Looked up as a file first, then as a member of the archive itself
script_file=

# Specific file to make executable instead of the given artifacts
input_file=

# Copy the artifact to this name (next to it) and make the copy executable
# This does not work with multiple artifacts
program_file=
attach_program_file=0
program_file_type=sh

# Only artifacts with this classifier are made executable
classifier=

# Only artifacts of this type are made executable, unless allow_other_types=1
artifact_type=jar
allow_other_types=0

# Execute bits to add: all (u+x,g+x,o+x), owner (u+x) or an octal mask
exec_mode=all

# What to do with an archive that already has a preamble: replace or reject
existing_preamble=replace"""

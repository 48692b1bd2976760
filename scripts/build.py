#!/usr/bin/env python3
# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

from io import BytesIO
from pathlib import Path
from zipapp import create_archive

from exzip import __version__ as VERSION
from exzip.utils.prefix import apply_prefix

SRC_PATH = Path('./src')
DIST_PATH = Path('./dist')

# 10 lines will conveniently match the default of head(1)
PREAMBLE = f'''#!/usr/bin/env python3

exzip {VERSION}

Make jar, pyz and zip archives really executable.

SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
SPDX-License-Identifier: LGPL-3.0-only

-=-=-=- this is a zip file -=-=-=- what follows is binary -=-=-=-
'''


def build_tool() -> Path:

    # generate zipapp source archive, without interpreter line
    pyzbuffer = BytesIO()
    create_archive(SRC_PATH, target=pyzbuffer,
            main='exzip.cli:main',
            compressed=True)

    # output with preamble, offsets patched to match
    tool_path = DIST_PATH.joinpath('exzip')
    with open(tool_path, 'wb') as f:
        f.write(pyzbuffer.getvalue())
    apply_prefix(tool_path, [PREAMBLE.encode()], exec_mode=0o111)
    return tool_path


if __name__ == '__main__':
    DIST_PATH.mkdir(exist_ok=True)
    print(build_tool())

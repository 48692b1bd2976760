# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import pytest
from conftest import CONTENTS, read_all

from exzip import __version__
from exzip.cli import main


def test_version(capsys):
    with pytest.raises(SystemExit) as e:
        main(["--version"])
    assert e.value.code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_make(jar):
    assert main(["make", "--flags=-Xmx1g", "--exec-mode", "owner", str(jar)]) == 0

    data = jar.read_bytes()
    assert data.startswith(b'#!/bin/sh\n\nexec java -Xmx1g -jar "$0" "$@"\n\n')
    assert read_all(data) == CONTENTS
    assert jar.stat().st_mode & 0o777 == 0o744


def test_make_flags_with_several_options(jar):
    assert main(["make", "--flags=-Xmx1g -Dapp.mode=cli", str(jar)]) == 0

    assert jar.read_bytes().startswith(
        b'#!/bin/sh\n\nexec java -Xmx1g -Dapp.mode=cli -jar "$0" "$@"\n\n'
    )


def test_flags_help_mentions_equals_form(capsys):
    with pytest.raises(SystemExit):
        main(["make", "--help"])
    help_text = " ".join(capsys.readouterr().out.split())
    assert "must be given as --flags=..." in help_text


def test_make_with_config(jar, tmp_path, capsys):
    config = tmp_path / "exzip.conf"
    config.write_text("flags=-server\nprogram_file=app\nattach_program_file=1\n")

    assert main(["make", "-c", str(config), "--program-file-type", "bin", str(jar)]) == 0

    program = tmp_path / "app"
    assert program.read_bytes().startswith(b'#!/bin/sh\n\nexec java -server -jar')
    assert capsys.readouterr().out == f"bin\t{program}\n"


def test_make_skips_other_types(tmp_path, jar):
    pyz = jar.rename(tmp_path / "app.pyz")

    with pytest.raises(SystemExit) as e:
        main(["make", str(pyz)])
    assert e.value.code == 1

    assert main(["make", "--type", "pyz", str(pyz)]) == 0


def test_make_broken_file(tmp_path, capsys):
    broken = tmp_path / "broken.jar"
    broken.write_bytes(b"garbage")

    with pytest.raises(SystemExit) as e:
        main(["make", str(broken)])

    assert e.value.code == 1
    assert "end of central directory record not found" in capsys.readouterr().err


def test_make_existing_reject(jar):
    assert main(["make", str(jar)]) == 0
    with pytest.raises(SystemExit):
        main(["make", "--existing", "reject", str(jar)])


def test_bad_exec_mode(jar):
    with pytest.raises(SystemExit) as e:
        main(["make", "--exec-mode", "777", str(jar)])
    assert e.value.code == 2


def test_inspect(jar, capsys):
    main(["make", str(jar)])
    capsys.readouterr()

    assert main(["inspect", str(jar)]) == 0

    out = capsys.readouterr().out
    assert "preamble:   38 bytes" in out
    assert "shebang:    #!/bin/sh" in out
    assert "entries:    10" in out
    assert "executable: yes" in out


def test_no_command(capsys):
    assert main([]) == 0
    assert "commands" in capsys.readouterr().out

# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import argparse
import sys

from exzip import __doc__ as DESCRIPTION
from exzip import __version__
from exzip.actions.inspect import inspect_archive
from exzip.actions.make import Artifact, make_executable
from exzip.config import ExecutableConfig, load_config, parse_exec_mode
from exzip.errors import ConfigurationError, ExzipError
from exzip.utils.console import NORMAL, RED, fail

COMMAND_NAME = "exzip"


def make_command(
    files,
    config=None,
    flags=None,
    script_file=None,
    input_file=None,
    program_file=None,
    attach_program_file=None,
    program_file_type=None,
    classifier=None,
    artifact_type=None,
    allow_other_types=None,
    exec_mode=None,
    existing_preamble=None,
):
    base = load_config(config) if config else ExecutableConfig()
    options = base.merge(
        flags=flags,
        script_file=script_file,
        input_file=input_file,
        program_file=program_file,
        attach_program_file=attach_program_file,
        program_file_type=program_file_type,
        classifier=classifier,
        artifact_type=artifact_type,
        allow_other_types=allow_other_types,
        exec_mode=exec_mode,
        existing_preamble=existing_preamble,
    )

    def attach(path, type_tag):
        print(f"{type_tag}\t{path}")

    artifacts = [Artifact.from_path(f, options.classifier) for f in files]
    make_executable(options, artifacts, attach=attach)
    return 0


def inspect_command(file):
    return inspect_archive(file)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog=COMMAND_NAME,
        description=DESCRIPTION,
        allow_abbrev=False,
        epilog=f"For more info on some command, run: {COMMAND_NAME} some_command --help.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(title="commands", dest="command", metavar="")

    commands = {}
    for d in [
        dict(
            name="make",
            help="prepend a shell preamble and make archives executable",
            func=make_command,
        ),
        dict(
            name="inspect",
            help="show the preamble and index summary of an archive",
            func=inspect_command,
        ),
    ]:
        commands[d["name"]] = add_parser(subparsers, **d)

    make = commands["make"]
    make.add_argument("files", nargs="*", metavar="FILE", help="archives to process")
    make.add_argument(
        "-c", "--config", metavar="X", help="path to a key=value config file"
    )
    make.add_argument(
        "--flags",
        metavar="X",
        help="java command line arguments for the default stanza, "
        "values starting with - must be given as --flags=...",
    )
    make.add_argument(
        "--script-file",
        metavar="X",
        help="shell script to prepend, a file or a member of the archive",
    )
    make.add_argument(
        "--input-file", metavar="X", help="process this file instead of FILE arguments"
    )
    make.add_argument(
        "--program-file",
        metavar="X",
        help="write the executable to this name next to the archive",
    )
    make.add_argument(
        "--attach-program-file",
        action="store_const",
        const=True,
        help="print the program file as an attached artifact",
    )
    make.add_argument(
        "--program-file-type", metavar="X", help="type of the attached program file"
    )
    make.add_argument(
        "--classifier", metavar="X", help="only process artifacts with this classifier"
    )
    make.add_argument(
        "--type",
        dest="artifact_type",
        metavar="X",
        help="only process artifacts with this suffix (default: jar)",
    )
    make.add_argument(
        "--allow-other-types",
        action="store_const",
        const=True,
        help="process archives of any type",
    )
    make.add_argument(
        "--exec-mode",
        type=exec_mode_argument,
        metavar="X",
        help="execute bits to add: all, owner or an octal mask",
    )
    make.add_argument(
        "--existing",
        dest="existing_preamble",
        choices=["replace", "reject"],
        help="what to do with an archive that already has a preamble",
    )

    commands["inspect"].add_argument("file", help="archive to inspect")

    args = vars(parser.parse_args(argv))
    command = args.pop("command", None)
    if not command:
        parser.print_help()
        return 0

    func = args.pop("func")
    try:
        return func(**args)
    except ExzipError as e:
        fail(f"{RED}{e}{NORMAL}")


def exec_mode_argument(value):
    try:
        return parse_exec_mode(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))


def add_parser(subparser, **kwargs):
    kwargs["formatter_class"] = argparse.RawDescriptionHelpFormatter
    func = kwargs.pop("func")
    parser = subparser.add_parser(**kwargs)
    parser.set_defaults(func=func)
    return parser

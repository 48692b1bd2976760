# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
import zipfile
from importlib import resources

from exzip.errors import ArchiveIOError
from exzip.utils.console import debug

SEPARATOR = b"\n\n"


def default_preamble(flags=""):
    """
    Shell stanza that runs the archive it is prepended to as a jar.
    """
    stanza = f'#!/bin/sh\n\nexec java {flags} -jar "$0" "$@"'
    return [stanza.encode(), SEPARATOR]


class FileSystemSource:
    def load(self, identifier):
        if os.path.isfile(identifier) and os.access(identifier, os.R_OK):
            with open(identifier, "rb") as f:
                return f.read()


class ArchiveResourceSource:
    """
    Look the script up as a member of the archive about to be prefixed, the
    same way a class loader over the jar would find it.
    """

    def __init__(self, archive_path):
        self.archive_path = archive_path

    def load(self, identifier):
        name = identifier.lstrip("/")
        try:
            with zipfile.ZipFile(self.archive_path) as zf:
                try:
                    return zf.read(name)
                except KeyError:
                    return None
        except zipfile.BadZipFile:
            return None


class PackageResourceSource:
    def __init__(self, package):
        self.package = package

    def load(self, identifier):
        try:
            resource = resources.files(self.package).joinpath(identifier)
            if resource.is_file():
                return resource.read_bytes()
        except ModuleNotFoundError:
            return None


def resolve_preamble(identifier, sources):
    """
    Return the bytes of the first source that knows identifier.
    """
    try:
        for source in sources:
            data = source.load(identifier)
            if data is not None:
                debug(f"Loaded preamble {identifier} from {type(source).__name__}")
                return data
    except OSError as e:
        raise ArchiveIOError("unable to load preamble data", identifier, e) from e
    raise ArchiveIOError(f"unable to load {identifier}")


def build_preamble(config, archive_path, extra_sources=()):
    if not config.script_file:
        return default_preamble(config.flags)

    sources = [FileSystemSource(), ArchiveResourceSource(archive_path), *extra_sources]
    return [resolve_preamble(config.script_file, sources), SEPARATOR]

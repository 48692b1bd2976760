# SPDX-FileCopyrightText: © 2024 Jip-Hop and the Jailmakers <https://github.com/Jip-Hop/jailmaker>
#
# SPDX-License-Identifier: LGPL-3.0-only

import os
from pathlib import Path
from typing import Any, Iterable

from hatchling.builders.hooks.plugin.interface import BuildHookInterface

from exzip.actions.make import Artifact, make_executable
from exzip.config import ExecutableConfig
from exzip.utils.preamble import PackageResourceSource

# Keys of the hook table that hatchling reads itself
HATCH_KEYS = {
    "dependencies",
    "enable-by-default",
    "require-runtime-dependencies",
    "require-runtime-features",
}


class ExecutableBuildHook(BuildHookInterface):
    """
    Make the artifact of a build target executable, e.g.

        [tool.hatch.build.targets.wheel.hooks.exzip]
        program-file = "tool"
    """

    PLUGIN_NAME = "exzip"

    def get_options(self) -> ExecutableConfig:
        values = {
            key: value
            for key, value in self.config.items()
            if key not in HATCH_KEYS and key != "script-package"
        }
        return ExecutableConfig.from_mapping(values)

    def get_sources(self) -> list:
        package = self.config.get("script-package")
        return [PackageResourceSource(package)] if package else []

    def clean(self, versions: Iterable[str]) -> None:
        program_file = self.get_options().program_file
        if program_file:
            try:
                os.remove(Path(self.directory, program_file))
            except FileNotFoundError:
                pass

    def finalize(self, version: str, build_data: dict[str, Any], artifact_path: str) -> None:
        options = self.get_options()
        artifact = Artifact.from_path(artifact_path, classifier=self.target_name)
        if not any(key in self.config for key in ("artifact-type", "artifact_type")):
            # Hatch targets don't build jars, accept what this target built
            options = options.merge(artifact_type=artifact.type)
        attached = build_data.setdefault("exzip_attached", {})

        def attach(path, type_tag):
            attached[os.fspath(path)] = type_tag
            self.app.display_info(f"Attached {type_tag} artifact {path}")

        for path in make_executable(
            options, [artifact], attach=attach, extra_sources=self.get_sources()
        ):
            self.app.display_info(f"Made {path} executable")

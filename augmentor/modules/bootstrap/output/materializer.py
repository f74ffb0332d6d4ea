"""Copy the framework's layered output to the requested destination.

Layout produced by the framework and mirrored verbatim::

    quarkus-app/
    ├── app/            application archive
    ├── lib/
    │   ├── boot/       bootstrap runner (backfilled when empty)
    │   └── main/       shared libraries
    ├── quarkus/        generated bytecode
    └── quarkus-run.jar
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from augmentor.modules.bootstrap.coordinates import CoordinateInference
from augmentor.modules.bootstrap.domain import ArtifactCoordinate, AugmentationConfig, AugmentedOutput
from augmentor.modules.bootstrap.fileget import MavenRepositoryClient
from augmentor.modules.bootstrap.util.exceptions import OutputMaterializationError
from augmentor.settings import AugmentorSettings

BOOTSTRAP_RUNNER_MARKER = "quarkus-bootstrap-runner"
BOOTSTRAP_RUNNER_SUBPATH = "lib/boot"
BOOTSTRAP_RUNNER_FILENAME = "io.quarkus.quarkus-bootstrap-runner-{version}.jar"
RUNNER_JAR_NAME = "quarkus-run.jar"


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class OutputMaterializer:
    """Mirror the produced output tree and backfill the bootstrap runner."""

    def __init__(
        self,
        inference: CoordinateInference | None = None,
        repository: Optional[MavenRepositoryClient] = None,
        *,
        runner_marker: str = BOOTSTRAP_RUNNER_MARKER,
        boot_subpath: str = BOOTSTRAP_RUNNER_SUBPATH,
        runner_filename: str = BOOTSTRAP_RUNNER_FILENAME,
        runner_group: str = "io.quarkus",
        runner_version: Optional[str] = None,
        runner_jar_name: str = RUNNER_JAR_NAME,
    ) -> None:
        self.inference = inference or CoordinateInference()
        self.repository = repository
        self.runner_marker = runner_marker
        self.boot_subpath = boot_subpath
        self.runner_filename = runner_filename
        self.runner_group = runner_group
        self.runner_version = runner_version
        self.runner_jar_name = runner_jar_name
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(
        cls,
        settings: AugmentorSettings,
        inference: CoordinateInference | None = None,
        repository: Optional[MavenRepositoryClient] = None,
    ) -> "OutputMaterializer":
        return cls(
            inference=inference or CoordinateInference.from_settings(settings),
            repository=repository,
            runner_marker=settings.bootstrap_runner_marker,
            boot_subpath=settings.bootstrap_runner_subpath,
            runner_filename=settings.bootstrap_runner_filename,
            runner_group=settings.bootstrap_runner_group,
            runner_version=settings.bootstrap_runner_version,
            runner_jar_name=settings.runner_jar_name,
        )

    def materialize(self, output: AugmentedOutput, config: AugmentationConfig) -> None:
        source = Path(output.root)
        target = Path(config.output_dir)
        if not source.is_dir():
            raise OutputMaterializationError(f"augmentation output directory missing: {source}")

        self.log.info("Copying output %s -> %s", source, target)
        try:
            copied = self._copy_tree(source, target)
            self.ensure_bootstrap_runner(config, target)
        except OSError as exc:
            raise OutputMaterializationError(f"cannot copy augmentation output to {target}: {exc}") from exc
        self.log.info("Output copied successfully (%d files)", copied)

    def _copy_tree(self, source: Path, target: Path) -> int:
        target.mkdir(parents=True, exist_ok=True)
        if source.resolve() == target.resolve():
            return 0
        copied = 0
        for item in sorted(source.rglob("*")):
            dest = target / item.relative_to(source)
            if item.is_dir():
                dest.mkdir(parents=True, exist_ok=True)
            elif item.is_file():
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
                copied += 1
        return copied

    def ensure_bootstrap_runner(self, config: AugmentationConfig, target: Path) -> Optional[Path]:
        """Place the bootstrap runner under lib/boot when the framework left it empty."""
        boot_dir = target.joinpath(*self.boot_subpath.split("/"))
        boot_dir.mkdir(parents=True, exist_ok=True)
        if any(item.is_file() for item in boot_dir.iterdir()):
            return None

        self.log.info("%s is empty, looking for %s in runtime archives", self.boot_subpath, self.runner_marker)
        for jar in config.runtime_jars:
            if self.runner_marker not in jar.name or not jar.is_file():
                continue
            version = self.inference.extract_version(jar.name)
            dest = boot_dir / self.runner_filename.format(version=version)
            shutil.copy2(jar, dest)
            self.log.info("Copied %s -> %s", jar.name, dest.name)
            return dest
        return self._download_runner(config, boot_dir)

    def _download_runner(self, config: AugmentationConfig, boot_dir: Path) -> Optional[Path]:
        if self.repository is None:
            self.log.warning("No %s archive among runtime archives; %s stays empty", self.runner_marker, self.boot_subpath)
            return None
        version = self.runner_version or self._platform_version(config)
        if not version:
            self.log.warning("Cannot determine %s version, skipping download", self.runner_marker)
            return None
        coords = ArtifactCoordinate(group=self.runner_group, name=self.runner_marker, version=version)
        return self.repository.download(coords, boot_dir / self.runner_filename.format(version=version))

    def _platform_version(self, config: AugmentationConfig) -> Optional[str]:
        for jar in config.runtime_jars:
            coords = self.inference.infer(jar)
            if coords is not None and coords.group == self.runner_group:
                return coords.version
        return None

    def create_runner_jar(self, output: AugmentedOutput, config: AugmentationConfig) -> Optional[Path]:
        """Copy the runnable archive to ``<output>/<app-name>-runner.jar``."""
        run_jar = Path(output.root) / self.runner_jar_name
        if not run_jar.is_file():
            self.log.warning("%s not found in %s", self.runner_jar_name, output.root)
            return None
        dest = Path(config.output_dir) / f"{config.application_name}-runner.jar"
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(run_jar, dest)
        except OSError as exc:
            raise OutputMaterializationError(f"cannot create runner jar {dest}: {exc}") from exc
        self.log.info("Created runner JAR: %s", dest)
        return dest

    def describe_output(self, root: Path) -> List[str]:
        root = Path(root)
        lines: List[str] = []
        for item in sorted(root.rglob("*")):
            relative = item.relative_to(root).as_posix()
            if item.is_dir():
                lines.append(f"{relative}/")
            else:
                lines.append(f"{relative} ({format_size(item.stat().st_size)})")
        for line in lines:
            self.log.debug("  %s", line)
        return lines

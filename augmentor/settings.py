"""Runtime configuration for the Bazel Quarkus augmentor."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AugmentorSettings(BaseSettings):
    """Configuration values mapped from ``AUGMENTOR_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUGMENTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application defaults (overridable from the command line)
    app_name: str = "application"
    main_class: str = "io.quarkus.runner.GeneratedMain"
    synthetic_group: str = "io.quarkus.bazel"
    synthetic_version: str = "1.0.0-SNAPSHOT"

    # Coordinate inference
    repository_anchors: List[str] = Field(default_factory=lambda: ["maven2", "repository", "repo"])
    archive_extensions: List[str] = Field(default_factory=lambda: [".jar", ".war", ".ear", ".zip"])
    archive_prefixes: List[str] = Field(default_factory=lambda: ["processed_"])

    # Extension detection and mapping
    extension_metadata_entry: str = "META-INF/quarkus-extension.properties"
    companion_suffix: str = "-deployment"
    scan_workers: int = 1
    fail_on_unmapped: bool = False

    # Augmentation entry point
    augment_action: str = "quarkus.runner.bootstrap:AugmentActionImpl"

    # Output layout
    bootstrap_runner_marker: str = "quarkus-bootstrap-runner"
    bootstrap_runner_subpath: str = "lib/boot"
    bootstrap_runner_filename: str = "io.quarkus.quarkus-bootstrap-runner-{version}.jar"
    bootstrap_runner_group: str = "io.quarkus"
    bootstrap_runner_version: Optional[str] = None
    runner_jar_name: str = "quarkus-run.jar"
    create_runner_jar: bool = False

    # Maven repository used when the bootstrap runner is not on the runtime classpath
    repository_url: Optional[str] = None
    repository_username: Optional[str] = None
    repository_password: Optional[str] = None
    repository_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)-7s %(name)s - %(message)s"


@lru_cache
def get_settings() -> AugmentorSettings:
    """Return a cached settings instance."""
    return AugmentorSettings()

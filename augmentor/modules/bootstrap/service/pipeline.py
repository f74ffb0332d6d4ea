"""End-to-end augmentation flow: classify, map, model, augment, materialize."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from augmentor.modules.bootstrap.detection import ExtensionDetector
from augmentor.modules.bootstrap.domain import (
    AugmentationConfig,
    AugmentedOutput,
    DependencyModel,
    ExtensionDescriptor,
    MappingResult,
    PipelineSummary,
)
from augmentor.modules.bootstrap.mapping import ExtensionModuleMapper
from augmentor.modules.bootstrap.model import DependencyModelBuilder
from augmentor.modules.bootstrap.orchestrator import AugmentationOrchestrator
from augmentor.modules.bootstrap.output import OutputMaterializer
from augmentor.modules.bootstrap.util.exceptions import AugmentorError, UnmappedExtensionsError


@dataclass
class PreparedModel:
    extensions: List[ExtensionDescriptor]
    mapping: MappingResult
    model: DependencyModel
    summary: PipelineSummary


@dataclass
class PipelineResult:
    prepared: PreparedModel
    output: AugmentedOutput
    output_listing: List[str] = field(default_factory=list)
    runner_jar: Optional[Path] = None

    @property
    def summary(self) -> PipelineSummary:
        return self.prepared.summary


class AugmentationPipeline:
    """Runs every stage in order; each stage completes before the next starts."""

    def __init__(
        self,
        *,
        detector: ExtensionDetector,
        mapper: ExtensionModuleMapper,
        model_builder: DependencyModelBuilder,
        orchestrator: AugmentationOrchestrator,
        materializer: OutputMaterializer,
        fail_on_unmapped: bool = False,
        create_runner_jar: bool = False,
    ) -> None:
        self.detector = detector
        self.mapper = mapper
        self.model_builder = model_builder
        self.orchestrator = orchestrator
        self.materializer = materializer
        self.fail_on_unmapped = fail_on_unmapped
        self.create_runner_jar = create_runner_jar
        self.log = logging.getLogger(self.__class__.__name__)

    def prepare(self, config: AugmentationConfig) -> PreparedModel:
        summary = PipelineSummary(
            application_archives=len(config.application_jars),
            runtime_archives=len(config.runtime_jars),
            deployment_archives=len(config.deployment_jars),
        )
        try:
            extensions = self.detector.detect_all(dict.fromkeys(config.runtime_jars))
            summary.extensions_detected = len(extensions)

            mapping = self.mapper.resolve(extensions, config.deployment_jars)
            summary.extensions_mapped = len(mapping.mapped)
            summary.extensions_unmapped = len(mapping.unmapped)
            summary.mapping_conflicts = len(mapping.conflicts)

            model = self.model_builder.build(config, extensions)
        except AugmentorError as exc:
            exc.summary = summary
            raise

        skipped = len(set(self.model_builder.last_skipped))
        archives = dict.fromkeys([*config.runtime_jars, *config.deployment_jars])
        summary.archives_skipped = skipped
        summary.archives_classified = len(archives) - skipped
        summary.runtime_entries = len(model.runtime_entries())
        summary.augmentation_entries = len(model.augmentation_entries())
        summary.extension_entries = len(model.extension_entries())
        self._log_summary(summary)

        if self.fail_on_unmapped and mapping.unmapped:
            names = ", ".join(ext.coordinate.key for ext in mapping.unmapped)
            error = UnmappedExtensionsError(f"extensions without deployment archive: {names}")
            error.summary = summary
            raise error
        return PreparedModel(extensions=extensions, mapping=mapping, model=model, summary=summary)

    def run(self, config: AugmentationConfig) -> PipelineResult:
        prepared = self.prepare(config)
        try:
            if config.build_dir is not None:
                return self._augment(config, prepared, config.build_dir)
            with tempfile.TemporaryDirectory(prefix="augmentor-") as build_dir:
                return self._augment(config, prepared, Path(build_dir))
        except AugmentorError as exc:
            exc.summary = prepared.summary
            raise

    def _augment(self, config: AugmentationConfig, prepared: PreparedModel, build_dir: Path) -> PipelineResult:
        output = self.orchestrator.run(config, prepared.model, target_dir=build_dir)
        listing = self.materializer.describe_output(output.root) if output.root.is_dir() else []
        self.materializer.materialize(output, config)
        runner_jar = self.materializer.create_runner_jar(output, config) if self.create_runner_jar else None
        self.log.info("Augmentation complete, output: %s", config.output_dir)
        return PipelineResult(prepared=prepared, output=output, output_listing=listing, runner_jar=runner_jar)

    def _log_summary(self, summary: PipelineSummary) -> None:
        self.log.info(
            "Classified %d archives (%d skipped); extensions detected=%d mapped=%d unmapped=%d conflicts=%d",
            summary.archives_classified,
            summary.archives_skipped,
            summary.extensions_detected,
            summary.extensions_mapped,
            summary.extensions_unmapped,
            summary.mapping_conflicts,
        )
        self.log.info(
            "Model classpaths: runtime=%d augmentation=%d extensions=%d",
            summary.runtime_entries,
            summary.augmentation_entries,
            summary.extension_entries,
        )

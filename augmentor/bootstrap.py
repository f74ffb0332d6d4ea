"""Wire the augmentation components from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from augmentor.modules.bootstrap.coordinates import CoordinateInference
from augmentor.modules.bootstrap.detection import ExtensionDetector
from augmentor.modules.bootstrap.fileget import MavenRepositoryClient
from augmentor.modules.bootstrap.loader import LoaderStrategy
from augmentor.modules.bootstrap.mapping import ExtensionModuleMapper
from augmentor.modules.bootstrap.model import DependencyModelBuilder
from augmentor.modules.bootstrap.orchestrator import AugmentationOrchestrator
from augmentor.modules.bootstrap.output import OutputMaterializer
from augmentor.modules.bootstrap.service import AugmentationPipeline

from .settings import AugmentorSettings

log = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container that wires the pipeline stages with shared settings."""

    settings: AugmentorSettings
    strategy: Optional[LoaderStrategy] = None
    http_client: Optional[httpx.Client] = None
    inference: CoordinateInference = field(init=False)
    detector: ExtensionDetector = field(init=False)
    mapper: ExtensionModuleMapper = field(init=False)
    model_builder: DependencyModelBuilder = field(init=False)
    orchestrator: AugmentationOrchestrator = field(init=False)
    repository: Optional[MavenRepositoryClient] = field(init=False)
    materializer: OutputMaterializer = field(init=False)
    pipeline: AugmentationPipeline = field(init=False)

    def __post_init__(self) -> None:
        self.inference = CoordinateInference.from_settings(self.settings)
        self.detector = ExtensionDetector.from_settings(self.settings, inference=self.inference)
        self.mapper = ExtensionModuleMapper(inference=self.inference)
        self.model_builder = DependencyModelBuilder.from_settings(self.settings, inference=self.inference)
        self.orchestrator = AugmentationOrchestrator.from_settings(self.settings, strategy=self.strategy)
        self.repository = MavenRepositoryClient.from_settings(self.settings, client=self.http_client)
        if self.repository is not None:
            log.info("Bootstrap runner fallback repository: %s", self.repository.base_url)
        self.materializer = OutputMaterializer.from_settings(
            self.settings,
            inference=self.inference,
            repository=self.repository,
        )
        self.pipeline = AugmentationPipeline(
            detector=self.detector,
            mapper=self.mapper,
            model_builder=self.model_builder,
            orchestrator=self.orchestrator,
            materializer=self.materializer,
            fail_on_unmapped=self.settings.fail_on_unmapped,
            create_runner_jar=self.settings.create_runner_jar,
        )

    def close(self) -> None:
        if self.repository is not None:
            self.repository.close()


def build_container(
    settings: AugmentorSettings,
    strategy: Optional[LoaderStrategy] = None,
    http_client: Optional[httpx.Client] = None,
) -> ServiceContainer:
    return ServiceContainer(settings=settings, strategy=strategy, http_client=http_client)

"""Drive the framework's production augmentation inside the loader hierarchy.

Only one augmentation may run per process at a time: the import hook and the
ambient resolution context are process-wide for the duration of the call.
Concurrent callers receive ``SetupFailed`` with step ``concurrent``.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional

from augmentor.modules.bootstrap.domain import AugmentationConfig, AugmentedOutput, DependencyModel
from augmentor.modules.bootstrap.loader import (
    AugmentationContext,
    CuratedApplication,
    LoaderHierarchy,
    LoaderStrategy,
    QualifiedNameLoaderStrategy,
    ambient_resolution_context,
)
from augmentor.modules.bootstrap.util.exceptions import (
    AugmentationExecutionFailed,
    AugmentorError,
    SetupFailed,
    SetupStep,
)
from augmentor.settings import AugmentorSettings

DEFAULT_AUGMENT_ACTION = "quarkus.runner.bootstrap:AugmentActionImpl"

_RUN_LOCK = threading.Lock()


class AugmentationOrchestrator:
    """Build the loader tiers, resolve the action and run the production build."""

    def __init__(
        self,
        strategy: Optional[LoaderStrategy] = None,
        augment_action: str = DEFAULT_AUGMENT_ACTION,
    ) -> None:
        self.strategy = strategy or QualifiedNameLoaderStrategy()
        self.augment_action = augment_action
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(
        cls, settings: AugmentorSettings, strategy: Optional[LoaderStrategy] = None
    ) -> "AugmentationOrchestrator":
        return cls(strategy=strategy, augment_action=settings.augment_action)

    def run(
        self,
        config: AugmentationConfig,
        model: DependencyModel,
        target_dir: Optional[Path] = None,
    ) -> AugmentedOutput:
        if not _RUN_LOCK.acquire(blocking=False):
            raise SetupFailed(SetupStep.CONCURRENT, "another augmentation is already running in this process")
        try:
            return self._run_locked(config, model, Path(target_dir or config.build_dir or config.output_dir))
        finally:
            _RUN_LOCK.release()

    def _run_locked(self, config: AugmentationConfig, model: DependencyModel, target_dir: Path) -> AugmentedOutput:
        target_dir.mkdir(parents=True, exist_ok=True)
        hierarchy = LoaderHierarchy(config.runtime_classpath, config.deployment_jars)
        try:
            hierarchy.open()
        except AugmentorError:
            hierarchy.close()
            raise
        except Exception as exc:  # noqa: BLE001
            hierarchy.close()
            raise SetupFailed(SetupStep.LOADER, f"cannot build loader hierarchy: {exc}") from exc

        try:
            application = CuratedApplication(
                config=config,
                model=model,
                hierarchy=hierarchy,
                target_dir=target_dir,
            )
            try:
                entry_point = self.strategy.load_entry_point(
                    hierarchy.augmentation, self.augment_action, application
                )
            except AugmentorError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise SetupFailed(SetupStep.LOOKUP, f"cannot resolve {self.augment_action}: {exc}") from exc
            context = AugmentationContext(application=application, resolution_tier=hierarchy.augmentation)

            self.log.info("Running production augmentation for %s into %s", config.application_name, target_dir)
            started = time.perf_counter()
            with ambient_resolution_context(hierarchy.augmentation):
                try:
                    output = entry_point.run_production_build(context)
                except Exception as exc:  # noqa: BLE001
                    self.log.error("Augmentation failed after %.2fs: %s", time.perf_counter() - started, exc)
                    raise AugmentationExecutionFailed(exc) from exc
            self.log.info(
                "Production application created in %.2fs: %s",
                time.perf_counter() - started,
                output.jar,
            )
            return output
        finally:
            hierarchy.close()

"""Reaching the framework's augmentation action by qualified name.

The action type is not importable from the augmentor's own environment; it
lives in the deployment archives and is resolved through the augmentation
tier. ``LoaderStrategy`` is the seam for alternative ways of obtaining it.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol, Tuple

from augmentor.modules.bootstrap.domain import AugmentationConfig, AugmentedOutput, DependencyModel
from augmentor.modules.bootstrap.util.exceptions import SetupFailed, SetupStep

from .context import ambient_resolution_context
from .tiers import ArchiveTier, LoaderHierarchy

BUILD_METHOD = "create_production_application"


@dataclass
class CuratedApplication:
    """Application and classpath state handed to the framework action."""

    config: AugmentationConfig
    model: DependencyModel
    hierarchy: LoaderHierarchy
    target_dir: Path

    @property
    def base_name(self) -> str:
        return self.config.application_name

    @property
    def main_class(self) -> str:
        return self.config.main_class

    @property
    def runtime_loader(self) -> ArchiveTier:
        return self.hierarchy.runtime

    @property
    def augment_loader(self) -> ArchiveTier:
        return self.hierarchy.augmentation


@dataclass(frozen=True)
class AugmentationContext:
    """Explicit resolution context passed into the production build."""

    application: CuratedApplication
    resolution_tier: ArchiveTier

    def import_module(self, name: str):
        return self.resolution_tier.import_module(name)


class AugmentationEntryPoint(Protocol):
    def run_production_build(self, context: AugmentationContext) -> AugmentedOutput:  # pragma: no cover - interface
        ...


class LoaderStrategy(Protocol):
    def load_entry_point(
        self,
        tier: ArchiveTier,
        qualified_name: str,
        application: CuratedApplication,
    ) -> AugmentationEntryPoint:  # pragma: no cover - interface
        ...


def parse_qualified_name(qualified_name: str) -> Tuple[str, str]:
    """Accept ``package.module:Attr`` or dotted ``package.module.Attr``."""
    value = str(qualified_name or "").strip()
    if ":" in value:
        module_name, _, attr_name = value.partition(":")
    else:
        module_name, _, attr_name = value.rpartition(".")
    module_name, attr_name = module_name.strip(), attr_name.strip()
    if not module_name or not attr_name:
        raise SetupFailed(SetupStep.LOOKUP, f"invalid augmentation entry point name: {qualified_name!r}")
    return module_name, attr_name


def _accepts_one_argument(func: Callable[..., Any]) -> bool:
    try:
        inspect.signature(func).bind(object())
    except TypeError:
        return False
    except ValueError:
        return False
    return True


def to_augmented_output(result: Any) -> AugmentedOutput:
    """Normalize the framework result: a jar path, or an object exposing ``jar``."""
    if isinstance(result, AugmentedOutput):
        return result
    if isinstance(result, (str, Path)):
        return AugmentedOutput.from_jar(Path(result))
    jar = getattr(result, "jar", None)
    jar = getattr(jar, "path", jar)
    if isinstance(jar, (str, Path)):
        return AugmentedOutput.from_jar(Path(jar))
    raise TypeError(f"unrecognised augmentation result: {type(result).__name__}")


class ActionEntryPoint:
    """Adapts a framework action object to AugmentationEntryPoint."""

    def __init__(self, action: Any) -> None:
        self.action = action

    def run_production_build(self, context: AugmentationContext) -> AugmentedOutput:
        build = getattr(self.action, BUILD_METHOD)
        result = build(context) if _accepts_one_argument(build) else build()
        return to_augmented_output(result)


class QualifiedNameLoaderStrategy:
    """Import the action type through a tier and construct it with the application."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def load_entry_point(
        self,
        tier: ArchiveTier,
        qualified_name: str,
        application: CuratedApplication,
    ) -> AugmentationEntryPoint:
        module_name, attr_name = parse_qualified_name(qualified_name)
        try:
            module = tier.import_module(module_name)
        except ImportError as exc:
            raise SetupFailed(
                SetupStep.LOOKUP, f"module {module_name} not found in {tier.name} tier: {exc}"
            ) from exc
        except Exception as exc:  # noqa: BLE001
            raise SetupFailed(SetupStep.LOOKUP, f"importing {module_name} failed: {exc}") from exc

        action_type = getattr(module, attr_name, None)
        if action_type is None or not inspect.isclass(action_type):
            raise SetupFailed(SetupStep.LOOKUP, f"{qualified_name} is not a class in {tier.name} tier")
        if not callable(getattr(action_type, BUILD_METHOD, None)):
            raise SetupFailed(SetupStep.LOOKUP, f"{qualified_name} has no {BUILD_METHOD}()")

        try:
            inspect.signature(action_type).bind(application)
        except TypeError as exc:
            raise SetupFailed(
                SetupStep.CONSTRUCTOR, f"{qualified_name} has no constructor accepting the application: {exc}"
            ) from exc
        except ValueError:
            self.log.debug("No signature for %s, trying construction directly", qualified_name)

        try:
            with ambient_resolution_context(tier):
                action = action_type(application)
        except Exception as exc:  # noqa: BLE001
            raise SetupFailed(SetupStep.INSTANTIATE, f"cannot instantiate {qualified_name}: {exc}") from exc

        self.log.info("Augmentation action %s created (%s tier)", qualified_name, tier.name)
        return ActionEntryPoint(action)

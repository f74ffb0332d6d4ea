"""Two-tier archive loader hierarchy.

The runtime tier searches the application and runtime archives and is
parented by the interpreter's regular import machinery. The augmentation
tier searches the deployment archives and is parented by the runtime tier,
so deployment code sees user and runtime modules through one delegation
chain while the runtime tier never sees deployment-only modules.
"""

from __future__ import annotations

import importlib
import importlib.abc
import importlib.machinery
import logging
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from augmentor.modules.bootstrap.util.exceptions import SetupFailed, SetupStep

from .context import ambient_resolution_context, current_resolution_tier

log = logging.getLogger(__name__)

RUNTIME_TIER = "runtime"
AUGMENTATION_TIER = "augmentation"


def _is_namespace(spec: importlib.machinery.ModuleSpec) -> bool:
    if spec.submodule_search_locations is None:
        return False
    return spec.loader is None or type(spec.loader).__name__ == "NamespaceLoader"


def _within(location: Optional[str], roots: Tuple[str, ...]) -> bool:
    if not location:
        return False
    for root in roots:
        if location == root or location.startswith(root + os.sep) or location.startswith(root + "/"):
            return True
    return False


class ArchiveTier:
    """A named set of archives searched after its parent tier."""

    def __init__(self, name: str, archives: Iterable[Path | str], parent: Optional["ArchiveTier"] = None) -> None:
        self.name = name
        self.archives: Tuple[Path, ...] = tuple(Path(archive) for archive in archives)
        self.parent = parent
        self.search_path: List[str] = [os.path.abspath(str(archive)) for archive in self.archives]
        self.loaded: Set[str] = set()
        self.closed = False
        self.log = logging.getLogger(f"{self.__class__.__name__}.{name}")

    def __repr__(self) -> str:
        return f"ArchiveTier(name={self.name!r}, archives={len(self.archives)}, parent={getattr(self.parent, 'name', None)!r})"

    def chain(self) -> List["ArchiveTier"]:
        """Tiers from the root down to this one."""
        tiers: List[ArchiveTier] = []
        tier: Optional[ArchiveTier] = self
        while tier is not None:
            tiers.insert(0, tier)
            tier = tier.parent
        return tiers

    def verify(self) -> None:
        missing = [str(archive) for archive in self.archives if not archive.exists()]
        if missing:
            raise SetupFailed(SetupStep.LOADER, f"{self.name} tier archives not found: {', '.join(missing)}")

    def find_spec(self, fullname: str) -> Optional[importlib.machinery.ModuleSpec]:
        """Parent-first lookup; namespace portions from both tiers are merged."""
        if self.closed:
            return None
        inherited = self.parent.find_spec(fullname) if self.parent is not None else None
        own = importlib.machinery.PathFinder.find_spec(fullname, self.search_path) if self.search_path else None
        if inherited is None:
            if own is not None:
                self.loaded.add(fullname)
            return own
        if own is not None and _is_namespace(inherited) and _is_namespace(own):
            locations = list(inherited.submodule_search_locations or [])
            locations.extend(loc for loc in own.submodule_search_locations or [] if loc not in locations)
            merged = importlib.machinery.ModuleSpec(fullname, None, is_package=True)
            merged.submodule_search_locations = locations
            self.loaded.add(fullname)
            return merged
        return inherited

    def import_module(self, name: str) -> ModuleType:
        with ambient_resolution_context(self):
            return importlib.import_module(name)

    def owns_module(self, module: ModuleType) -> bool:
        roots = tuple(self.search_path)
        spec = getattr(module, "__spec__", None)
        if _within(getattr(spec, "origin", None), roots):
            return True
        try:
            locations = list(getattr(module, "__path__", None) or [])
        except TypeError:
            return False
        return any(_within(str(location), roots) for location in locations)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        roots = tuple(self.search_path)
        purged = [name for name, module in list(sys.modules.items()) if module is not None and self.owns_module(module)]
        for name in purged:
            sys.modules.pop(name, None)
        for key in [key for key in list(sys.path_importer_cache) if _within(key, roots)]:
            sys.path_importer_cache.pop(key, None)
        importlib.invalidate_caches()
        self.log.debug(
            "Released tier %s: %d top-level imports, %d modules purged",
            self.name,
            len(self.loaded),
            len(purged),
        )


class TierImportHook(importlib.abc.MetaPathFinder):
    """Routes top-level imports to the ambient tier of one hierarchy."""

    def __init__(self, hierarchy: "LoaderHierarchy") -> None:
        self.hierarchy = hierarchy

    def find_spec(self, fullname: str, path: Optional[Sequence[str]] = None, target: Optional[ModuleType] = None):
        if path is not None:
            return None
        tier = current_resolution_tier()
        if tier is None or not self.hierarchy.owns(tier):
            return None
        return tier.find_spec(fullname)


class LoaderHierarchy:
    """Registry of the runtime and augmentation tiers for one augmentation run."""

    def __init__(self, runtime_archives: Iterable[Path | str], augmentation_archives: Iterable[Path | str]) -> None:
        runtime = ArchiveTier(RUNTIME_TIER, runtime_archives)
        augmentation = ArchiveTier(AUGMENTATION_TIER, augmentation_archives, parent=runtime)
        self.tiers: Dict[str, ArchiveTier] = {RUNTIME_TIER: runtime, AUGMENTATION_TIER: augmentation}
        self._hook: Optional[TierImportHook] = None

    @property
    def runtime(self) -> ArchiveTier:
        return self.tiers[RUNTIME_TIER]

    @property
    def augmentation(self) -> ArchiveTier:
        return self.tiers[AUGMENTATION_TIER]

    def owns(self, tier: ArchiveTier) -> bool:
        return any(tier is candidate for candidate in self.tiers.values())

    def open(self) -> "LoaderHierarchy":
        for tier in self.tiers.values():
            tier.verify()
        self._hook = TierImportHook(self)
        sys.meta_path.append(self._hook)
        log.info(
            "Loader hierarchy ready: runtime=%d archives, augmentation=%d archives",
            len(self.runtime.archives),
            len(self.augmentation.archives),
        )
        return self

    def close(self) -> None:
        try:
            if self._hook is not None and self._hook in sys.meta_path:
                sys.meta_path.remove(self._hook)
            self._hook = None
        finally:
            try:
                self.augmentation.close()
            finally:
                self.runtime.close()

    def __enter__(self) -> "LoaderHierarchy":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

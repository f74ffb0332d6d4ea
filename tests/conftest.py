import textwrap
import uuid
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from augmentor.settings import AugmentorSettings, get_settings


def write_jar(path: Path, entries: Optional[Dict[str, str]] = None) -> Path:
    """Write a zip archive with explicit directory entries for every parent."""
    entries = entries or {"META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n"}
    path.parent.mkdir(parents=True, exist_ok=True)
    directories = set()
    for name in entries:
        parts = name.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            directories.add("/".join(parts[:depth]) + "/")
    with zipfile.ZipFile(path, "w") as zf:
        for directory in sorted(directories):
            zf.writestr(directory, "")
        for name, content in entries.items():
            zf.writestr(name, content)
    return path


@pytest.fixture
def make_jar(tmp_path):
    def _make(relative: str, entries: Optional[Dict[str, str]] = None) -> Path:
        return write_jar(tmp_path / relative, entries)

    return _make


@pytest.fixture
def unique():
    """Suffix for module names so imports never collide across tests."""
    return uuid.uuid4().hex[:8]


@pytest.fixture
def build_settings():
    def _build(**overrides) -> AugmentorSettings:
        return AugmentorSettings(_env_file=None, **overrides)

    return _build


@pytest.fixture
def fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


FRAMEWORK_ACTION = """
from pathlib import Path

from extlib_{u} import greeting


class AugmentActionImpl:
    def __init__(self, application):
        self.application = application

    def create_production_application(self, context):
        root = Path(self.application.target_dir) / "quarkus-app"
        for sub in ("app", "lib/boot", "lib/main", "quarkus"):
            (root / sub).mkdir(parents=True, exist_ok=True)
        (root / "app" / "greeting.txt").write_text(greeting())
        (root / "lib" / "main" / "extlib.jar").write_bytes(b"runtime-library")
        jar = root / "quarkus-run.jar"
        jar.write_bytes(b"runner")
        return jar
"""

BROKEN_FRAMEWORK_ACTION = """
class AugmentActionImpl:
    def __init__(self, application):
        self.application = application

    def create_production_application(self, context):
        raise RuntimeError("build step failed")
"""


@dataclass
class SampleProject:
    """One application archive, an extension plus a plain library, and the extension's companion."""

    root: Path
    application: Path
    runtime: List[Path]
    deployment: List[Path]
    action: str

    @property
    def output_dir(self) -> Path:
        return self.root / "out"


@pytest.fixture
def sample_project(tmp_path, make_jar, unique):
    def _build(broken: bool = False, with_companion: bool = True) -> SampleProject:
        action_source = BROKEN_FRAMEWORK_ACTION if broken else FRAMEWORK_ACTION
        extension_name = f"acme-ext-{unique}"
        application = make_jar("bazel-bin/app/app_deploy.jar", {f"appmain_{unique}.py": "MAIN = True\n"})
        extension = make_jar(
            f"maven2/org/acme/{extension_name}/1.0/{extension_name}-1.0.jar",
            {
                "META-INF/quarkus-extension.properties": (
                    f"deployment-artifact=org.acme\\:{extension_name}-deployment\\:1.0\n"
                ),
                f"extlib_{unique}/__init__.py": "def greeting():\n    return 'hello from the extension'\n",
            },
        )
        library = make_jar("maven2/org/slf4j/slf4j-api/2.0.9/slf4j-api-2.0.9.jar")
        deployment = []
        if with_companion:
            deployment.append(
                make_jar(
                    f"maven2/org/acme/{extension_name}-deployment/1.0/{extension_name}-deployment-1.0.jar",
                    {
                        f"fw_{unique}/__init__.py": "",
                        f"fw_{unique}/bootstrap.py": textwrap.dedent(action_source).replace("{u}", unique),
                    },
                )
            )
        return SampleProject(
            root=tmp_path,
            application=application,
            runtime=[extension, library],
            deployment=deployment,
            action=f"fw_{unique}.bootstrap:AugmentActionImpl",
        )

    return _build

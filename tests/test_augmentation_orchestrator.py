import sys
import textwrap
from pathlib import Path

import pytest

from augmentor.modules.bootstrap.domain import AugmentationConfig, AugmentedOutput
from augmentor.modules.bootstrap.loader import (
    TierImportHook,
    current_resolution_tier,
    parse_qualified_name,
    to_augmented_output,
)
from augmentor.modules.bootstrap.model import DependencyModelBuilder
from augmentor.modules.bootstrap.orchestrator import AugmentationOrchestrator
from augmentor.modules.bootstrap.orchestrator import augment as augment_module
from augmentor.modules.bootstrap.util.exceptions import (
    AugmentationExecutionFailed,
    SetupFailed,
    SetupStep,
)

WORKING_ACTION = """
from pathlib import Path

from rtlib_{u} import greeting


class AugmentActionImpl:
    def __init__(self, application):
        self.application = application

    def create_production_application(self, context):
        import gen_{u}

        root = Path(self.application.target_dir) / "quarkus-app"
        for sub in ("app", "lib/boot", "lib/main", "quarkus"):
            (root / sub).mkdir(parents=True, exist_ok=True)
        (root / "app" / "greeting.txt").write_text(greeting() + gen_{u}.SUFFIX)
        (root / "tier.txt").write_text(context.resolution_tier.name)
        jar = root / "quarkus-run.jar"
        jar.write_bytes(b"runner")
        return jar
"""

FAILING_ACTION = """
class AugmentActionImpl:
    def __init__(self, application):
        self.application = application

    def create_production_application(self, context):
        raise ValueError("processor exploded")
"""

NO_ARG_CONSTRUCTOR = """
class AugmentActionImpl:
    def __init__(self):
        pass

    def create_production_application(self):
        return "unused.jar"
"""

RAISING_CONSTRUCTOR = """
class AugmentActionImpl:
    def __init__(self, application):
        raise RuntimeError("cannot start")

    def create_production_application(self):
        return "unused.jar"
"""


def prepare(tmp_path, make_jar, unique, action_source):
    app = make_jar("app/app-1.0.jar", {f"appmod_{unique}.py": "NAME = 'app'\n"})
    runtime = make_jar(
        f"maven2/org/acme/rtlib-{unique}/1.0/rtlib-{unique}-1.0.jar",
        {f"rtlib_{unique}/__init__.py": "def greeting():\n    return 'hello'\n"},
    )
    deployment = make_jar(
        f"maven2/org/acme/fw-{unique}/1.0/fw-{unique}-1.0.jar",
        {
            f"fw_{unique}/__init__.py": "",
            f"fw_{unique}/bootstrap.py": textwrap.dedent(action_source).replace("{u}", unique),
            f"gen_{unique}.py": "SUFFIX = ' (generated)'\n",
        },
    )
    config = (
        AugmentationConfig.builder()
        .add_application_jars([app])
        .add_runtime_jars([runtime])
        .add_deployment_jars([deployment])
        .set_output_dir(tmp_path / "out")
        .set_application_name("demo")
        .build()
    )
    return config, DependencyModelBuilder().build(config)


def test_runs_production_build_in_augmentation_tier(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, WORKING_ACTION)
    orchestrator = AugmentationOrchestrator(augment_action=f"fw_{unique}.bootstrap:AugmentActionImpl")

    output = orchestrator.run(config, model, target_dir=tmp_path / "build")

    assert output.jar == tmp_path / "build" / "quarkus-app" / "quarkus-run.jar"
    assert output.root == tmp_path / "build" / "quarkus-app"
    assert (output.root / "app" / "greeting.txt").read_text() == "hello (generated)"
    assert (output.root / "tier.txt").read_text() == "augmentation"
    assert current_resolution_tier() is None
    assert not any(isinstance(finder, TierImportHook) for finder in sys.meta_path)
    assert f"fw_{unique}" not in sys.modules
    assert f"rtlib_{unique}" not in sys.modules


def test_dotted_entry_point_name(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, WORKING_ACTION)
    orchestrator = AugmentationOrchestrator(augment_action=f"fw_{unique}.bootstrap.AugmentActionImpl")

    output = orchestrator.run(config, model, target_dir=tmp_path / "build")

    assert output.jar.is_file()


def test_framework_failure_is_wrapped_with_cause(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, FAILING_ACTION)
    orchestrator = AugmentationOrchestrator(augment_action=f"fw_{unique}.bootstrap:AugmentActionImpl")

    with pytest.raises(AugmentationExecutionFailed) as excinfo:
        orchestrator.run(config, model, target_dir=tmp_path / "build")

    assert isinstance(excinfo.value.cause, ValueError)
    assert "processor exploded" in str(excinfo.value)
    assert excinfo.value.exit_code == 4
    assert current_resolution_tier() is None
    assert f"fw_{unique}.bootstrap" not in sys.modules


@pytest.mark.parametrize(
    "source, action, step",
    [
        (WORKING_ACTION, "missing_{u}.bootstrap:AugmentActionImpl", SetupStep.LOOKUP),
        (WORKING_ACTION, "fw_{u}.bootstrap:NoSuchAction", SetupStep.LOOKUP),
        (NO_ARG_CONSTRUCTOR, "fw_{u}.bootstrap:AugmentActionImpl", SetupStep.CONSTRUCTOR),
        (RAISING_CONSTRUCTOR, "fw_{u}.bootstrap:AugmentActionImpl", SetupStep.INSTANTIATE),
    ],
    ids=["missing-module", "missing-class", "constructor", "instantiate"],
)
def test_setup_failures_report_their_step(tmp_path, make_jar, unique, source, action, step):
    config, model = prepare(tmp_path, make_jar, unique, source)
    orchestrator = AugmentationOrchestrator(augment_action=action.replace("{u}", unique))

    with pytest.raises(SetupFailed) as excinfo:
        orchestrator.run(config, model, target_dir=tmp_path / "build")

    assert excinfo.value.step is step
    assert excinfo.value.exit_code == 3
    assert current_resolution_tier() is None
    assert not any(isinstance(finder, TierImportHook) for finder in sys.meta_path)


def test_missing_archive_fails_loader_setup(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, WORKING_ACTION)
    broken = AugmentationConfig(
        application_jars=config.application_jars,
        runtime_jars=(tmp_path / "gone-1.0.jar",),
        deployment_jars=config.deployment_jars,
        output_dir=config.output_dir,
    )

    with pytest.raises(SetupFailed) as excinfo:
        AugmentationOrchestrator().run(broken, model, target_dir=tmp_path / "build")

    assert excinfo.value.step is SetupStep.LOADER


def test_concurrent_runs_are_rejected(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, WORKING_ACTION)
    assert augment_module._RUN_LOCK.acquire(blocking=False)
    try:
        with pytest.raises(SetupFailed) as excinfo:
            AugmentationOrchestrator().run(config, model, target_dir=tmp_path / "build")
    finally:
        augment_module._RUN_LOCK.release()

    assert excinfo.value.step is SetupStep.CONCURRENT


class RecordingEntryPoint:
    def __init__(self):
        self.ambient = None

    def run_production_build(self, context):
        self.ambient = current_resolution_tier()
        jar = Path(context.application.target_dir) / "quarkus-app" / "quarkus-run.jar"
        jar.parent.mkdir(parents=True)
        jar.write_bytes(b"runner")
        return AugmentedOutput.from_jar(jar)


class StubStrategy:
    def __init__(self, entry_point):
        self.entry_point = entry_point
        self.calls = []

    def load_entry_point(self, tier, qualified_name, application):
        self.calls.append((tier, qualified_name, application))
        return self.entry_point


def test_custom_strategy_runs_under_ambient_augmentation_tier(tmp_path, make_jar, unique):
    config, model = prepare(tmp_path, make_jar, unique, WORKING_ACTION)
    entry_point = RecordingEntryPoint()
    strategy = StubStrategy(entry_point)

    output = AugmentationOrchestrator(strategy=strategy, augment_action="x:Y").run(
        config, model, target_dir=tmp_path / "build"
    )

    [(tier, name, application)] = strategy.calls
    assert name == "x:Y"
    assert tier.name == "augmentation"
    assert entry_point.ambient is tier
    assert application.base_name == "demo"
    assert application.model is model
    assert output.jar.read_bytes() == b"runner"
    assert current_resolution_tier() is None


def test_parse_qualified_name():
    assert parse_qualified_name("pkg.mod:Action") == ("pkg.mod", "Action")
    assert parse_qualified_name("pkg.mod.Action") == ("pkg.mod", "Action")
    with pytest.raises(SetupFailed):
        parse_qualified_name("Action")


def test_to_augmented_output_accepts_framework_shapes(tmp_path):
    class JarResult:
        def __init__(self, path):
            self.path = path

    class ProductionResult:
        def __init__(self, jar):
            self.jar = jar

    jar = tmp_path / "quarkus-app" / "quarkus-run.jar"

    assert to_augmented_output(str(jar)).root == jar.parent
    assert to_augmented_output(ProductionResult(jar)).jar == jar
    assert to_augmented_output(ProductionResult(JarResult(jar))).jar == jar
    with pytest.raises(TypeError):
        to_augmented_output(42)

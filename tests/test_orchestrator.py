from pathlib import Path

import pytest
from conftest import JAVA_PROJECT, RESOURCES_PROJECT, order_model

from regen_publisher.framework.artifacts import GeneratedDescriptorArtifact, GeneratedSourceArtifact
from regen_publisher.framework.config import PublishConfig
from regen_publisher.framework.errors import MalformedNamespace, NameSpaceExhausted, PublishCancelled
from regen_publisher.framework.orchestrator import RunOrchestrator
from regen_publisher.framework.progress import LoggingProgressCallback
from regen_publisher.framework.results import FileRole


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


class RecordingProgress:
    def __init__(self):
        self.events = []

    def save_started(self, total_tasks):
        self.events.append(("save_started", total_tasks))

    def start_task(self, task_name):
        self.events.append(("start_task", task_name))

    def check_cancel(self):
        self.events.append(("check_cancel",))

    def done(self):
        self.events.append(("done",))


class CancelOnTask(LoggingProgressCallback):
    def __init__(self, task_name):
        super().__init__()
        self.cancel_task = task_name

    def start_task(self, task_name):
        super().start_task(task_name)
        if task_name == self.cancel_task:
            self.cancel()


class CancelOnceWritten(LoggingProgressCallback):
    def __init__(self, path):
        super().__init__()
        self.path = path

    def check_cancel(self):
        if self.path.is_file():
            self.cancel()
        super().check_cancel()


def test_order_scenario_produces_the_expected_files(output_root, order_batch):
    orchestrator = RunOrchestrator(PublishConfig(output_root=str(output_root)))
    result = orchestrator.publish(order_batch)

    java = Path(JAVA_PROJECT)
    resources = Path(RESOURCES_PROJECT)
    assert set(_snapshot(output_root)) == {
        str(java / "com/acme/gen/model/OrderBase.java"),
        str(java / "com/acme/model/Order.java"),
        str(java / "com/acme/gen/dao/OrderMapperBase.java"),
        str(java / "com/acme/persistence/OrderMapper.java"),
        str(java / "com/acme/service/OrderService.java"),
        str(java / "com/acme/gen/model/OrderExample.java"),
        str(resources / "com/acme/gen/dao/OrderMapperBase.xml"),
        str(resources / "com/acme/persistence/OrderMapper.xml"),
    }
    assert result.warnings == []
    assert result.cancelled is False
    assert len(result.paths(FileRole.BASE)) == 4
    assert len(result.paths(FileRole.EXTENSION)) == 4
    assert result.projects == [JAVA_PROJECT, RESOURCES_PROJECT]
    assert orchestrator.shell.refreshed == [JAVA_PROJECT, RESOURCES_PROJECT]


def test_second_run_is_idempotent(output_root, order_batch):
    config = PublishConfig(output_root=str(output_root))
    RunOrchestrator(config).publish(order_batch)
    first = _snapshot(output_root)

    result = RunOrchestrator(config).publish(order_batch)

    assert _snapshot(output_root) == first
    assert result.warnings == []
    assert len(result.skipped_extensions) == 4
    assert result.paths(FileRole.EXTENSION) == []


def test_hand_edited_extension_survives_regeneration(output_root, order_batch):
    config = PublishConfig(output_root=str(output_root))
    RunOrchestrator(config).publish(order_batch)

    extension = output_root / JAVA_PROJECT / "com/acme/model/Order.java"
    edited = extension.read_text(encoding="utf-8").replace(
        "extends OrderBase {\n",
        "extends OrderBase {\n    public boolean isLarge() {\n        return true;\n    }\n",
    )
    extension.write_text(edited, encoding="utf-8")

    RunOrchestrator(config).publish(order_batch)

    assert extension.read_text(encoding="utf-8") == edited
    assert "public boolean isLarge()" in edited


def test_progress_is_reported_per_artifact(output_root, order_batch):
    progress = RecordingProgress()
    RunOrchestrator(PublishConfig(output_root=str(output_root))).publish(order_batch, progress)

    assert progress.events[0] == ("save_started", 4)
    assert progress.events[-1] == ("done",)
    tasks = [event[1] for event in progress.events if event[0] == "start_task"]
    assert tasks == [
        "Saving file Order.java",
        "Saving file OrderMapper.java",
        "Saving file OrderExample.java",
        "Saving file OrderMapper.xml",
    ]
    # One check per artifact plus one before each of the eight file writes.
    assert progress.events.count(("check_cancel",)) == 12


def test_cancellation_stops_the_pass_and_keeps_written_files(output_root, order_batch):
    orchestrator = RunOrchestrator(PublishConfig(output_root=str(output_root)))

    with pytest.raises(PublishCancelled) as excinfo:
        orchestrator.publish(order_batch, CancelOnTask("Saving file OrderMapper.java"))

    partial = excinfo.value.result
    assert partial.cancelled is True
    assert len(partial.files) == 2
    assert set(_snapshot(output_root)) == {
        str(Path(JAVA_PROJECT) / "com/acme/gen/model/OrderBase.java"),
        str(Path(JAVA_PROJECT) / "com/acme/model/Order.java"),
    }
    assert orchestrator.shell.refreshed == []


def test_cancellation_inside_an_artifact_stops_before_its_next_file(output_root, order_batch):
    java = output_root / JAVA_PROJECT
    progress = CancelOnceWritten(java / "com/acme/gen/dao/OrderMapperBase.java")

    with pytest.raises(PublishCancelled) as excinfo:
        RunOrchestrator(PublishConfig(output_root=str(output_root))).publish(order_batch, progress)

    assert not (java / "com/acme/service/OrderService.java").exists()
    assert not (java / "com/acme/persistence/OrderMapper.java").exists()
    assert [path.name for path in excinfo.value.result.paths(FileRole.BASE)] == [
        "OrderBase.java",
        "OrderMapperBase.java",
    ]


def test_unencodable_artifact_is_skipped_with_a_warning(output_root):
    order = GeneratedSourceArtifact(
        JAVA_PROJECT, "com.acme.gen.model", "Order.java", "public class Order { String s = \"\U0001f600\"; }", "GBK"
    )
    item = GeneratedSourceArtifact(
        JAVA_PROJECT, "com.acme.gen.model", "Item.java", "public class Item {}", "UTF-8"
    )

    result = RunOrchestrator(PublishConfig(output_root=str(output_root))).publish([order, item])

    java = output_root / JAVA_PROJECT
    assert len(result.warnings) == 1
    assert "Cannot encode" in result.warnings[0]
    assert not (java / "com/acme/gen/model/OrderBase.java").exists()
    assert not (java / "com/acme/model/Order.java").exists()
    assert (java / "com/acme/gen/model/ItemBase.java").is_file()
    assert (java / "com/acme/model/Item.java").is_file()


def test_project_creation_failure_becomes_a_warning(tmp_path, monkeypatch):
    def refuse(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "mkdir", refuse)
    config = PublishConfig(output_root=str(tmp_path / "fresh"), create_projects=True)

    result = RunOrchestrator(config).publish([order_model()])

    assert len(result.warnings) == 1
    assert "Cannot create project directory" in result.warnings[0]
    assert result.files == []


def test_shell_errors_become_warnings(output_root):
    stray = GeneratedSourceArtifact("missing/project", "com.acme.gen.model", "Customer.java", "class Customer {}")
    orchestrator = RunOrchestrator(PublishConfig(output_root=str(output_root)))

    result = orchestrator.publish([stray, order_model()])

    assert len(result.warnings) == 1
    assert "missing" in result.warnings[0]
    assert "does not exist" in result.warnings[0]
    assert (output_root / JAVA_PROJECT / "com/acme/model/Order.java").is_file()
    assert orchestrator.shell.refreshed == ["missing/project", JAVA_PROJECT]


def test_missing_projects_are_created_when_configured(tmp_path):
    root = tmp_path / "fresh"
    config = PublishConfig(output_root=str(root), create_projects=True)

    result = RunOrchestrator(config).publish([order_model()])

    assert result.warnings == []
    assert (root / JAVA_PROJECT / "com/acme/gen/model/OrderBase.java").is_file()


def test_dry_run_writes_nothing_and_skips_refresh(output_root, order_batch):
    orchestrator = RunOrchestrator(PublishConfig(output_root=str(output_root), write_files=False))

    result = orchestrator.publish(order_batch)

    assert _snapshot(output_root) == {}
    assert len(result.files) == 8
    assert result.write_files is False
    assert orchestrator.shell.refreshed == []


def test_split_disabled_uses_plain_dispositions(output_root, order_batch):
    config = PublishConfig(output_root=str(output_root), split_extensions=False)
    existing = output_root / JAVA_PROJECT / "com/acme/gen/model/Order.java"
    existing.parent.mkdir(parents=True)
    existing.write_text("hand written", encoding="utf-8")

    result = RunOrchestrator(config).publish(order_batch)

    assert existing.read_text(encoding="utf-8") == "hand written"
    renamed = existing.parent / "Order.java.1"
    assert renamed.is_file()
    assert {f.role for f in result.files} == {FileRole.PLAIN}
    assert result.warnings == [
        f"Existing file {existing.absolute()} was not overwritten; "
        f"generated file was saved as {renamed.absolute()}"
    ]
    assert (output_root / RESOURCES_PROJECT / "com/acme/gen/dao/OrderMapper.xml").is_file()


def test_overwrite_flag_applies_to_plain_artifacts(output_root):
    config = PublishConfig(output_root=str(output_root), overwrite=True)
    descriptor = GeneratedDescriptorArtifact(
        RESOURCES_PROJECT, "com/acme/gen/sql", "OrderSql.xml", "<sqlMap/>", is_mergeable=False
    )
    target = output_root / RESOURCES_PROJECT / "com/acme/gen/sql/OrderSql.xml"
    target.parent.mkdir(parents=True)
    target.write_text("<old/>", encoding="utf-8")

    result = RunOrchestrator(config).publish([descriptor])

    assert target.read_text(encoding="utf-8") == "<sqlMap/>"
    assert result.warnings == [f"Existing file {target.absolute()} was overwritten"]


def test_descriptor_merger_is_used_for_existing_plain_descriptors(output_root):
    class UpperMerger:
        def merged_source(self, artifact, existing_path):
            return Path(existing_path).read_text(encoding="utf-8") + artifact.formatted_content.upper()

    descriptor = GeneratedDescriptorArtifact(RESOURCES_PROJECT, "com/acme/gen/sql", "OrderSql.xml", "<new/>")
    target = output_root / RESOURCES_PROJECT / "com/acme/gen/sql/OrderSql.xml"
    target.parent.mkdir(parents=True)
    target.write_text("<kept/>", encoding="utf-8")

    orchestrator = RunOrchestrator(
        PublishConfig(output_root=str(output_root)), descriptor_merger=UpperMerger()
    )
    result = orchestrator.publish([descriptor])

    assert target.read_text(encoding="utf-8") == "<kept/><NEW/>"
    assert [f.disposition for f in result.files] == ["merged"]
    assert result.warnings == []


def test_malformed_namespace_is_fatal(output_root):
    shallow = GeneratedSourceArtifact(JAVA_PROJECT, "model", "Order.java", "public class Order {}")

    with pytest.raises(MalformedNamespace):
        RunOrchestrator(PublishConfig(output_root=str(output_root))).publish([shallow])


def test_name_space_exhaustion_is_fatal(output_root):
    class EverythingExists:
        def exists(self, path):
            return True

        def write(self, path, content, encoding):
            raise AssertionError("nothing should be written")

        def write_once(self, path, content, encoding):
            return False

    config = PublishConfig(output_root=str(output_root), split_extensions=False)
    orchestrator = RunOrchestrator(config, fs=EverythingExists())

    with pytest.raises(NameSpaceExhausted):
        orchestrator.publish([order_model()])


def test_warnings_are_reset_between_passes(output_root):
    shared = ["left over"]
    stray = GeneratedSourceArtifact("missing", "com.acme.gen.model", "Customer.java", "class Customer {}")
    orchestrator = RunOrchestrator(PublishConfig(output_root=str(output_root)), warnings=shared)

    first = orchestrator.publish([stray])
    assert len(shared) == 1 and "does not exist" in shared[0]

    second = orchestrator.publish([order_model()])
    assert shared == []
    assert second.warnings == []
    assert len(first.warnings) == 1 and "does not exist" in first.warnings[0]
    assert first.warnings is not shared


def test_orchestrator_requires_config():
    with pytest.raises(ValueError, match="requires a PublishConfig"):
        RunOrchestrator(None)

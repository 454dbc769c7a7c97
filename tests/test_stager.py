import logging
from pathlib import Path

import pytest

from featurestage.modules.featuresets.domain import (
    ArtifactCoordinate,
    NameMapping,
    ResolvedDependency,
    StagingAction,
    StagingIOError,
    StagingOptions,
)
from featurestage.modules.featuresets.staging import Stager


class RecordingExtractor:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def extract(self, source, dest_dir, includes=None, excludes=None):
        self.calls.append((source, dest_dir, includes, excludes))
        if self.error is not None:
            raise self.error


def resolved(tmp_path, artifact_id, extension="jar", content=b"data"):
    coordinate = ArtifactCoordinate("org.example", artifact_id, "1.0", extension=extension)
    file = tmp_path / "repo" / coordinate.file_name
    file.parent.mkdir(parents=True, exist_ok=True)
    file.write_bytes(content)
    return ResolvedDependency(coordinate, file)


def test_copy_to_stage_directory(tmp_path):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage, copy_types="jar")
    extractor = RecordingExtractor()

    report = Stager(extractor).stage([resolved(tmp_path, "core")], options)

    assert [entry.action for entry in report.entries] == [StagingAction.COPY]
    assert (stage / "core.jar").read_bytes() == b"data"
    assert extractor.calls == []


def test_excluded_copy_is_skipped_and_logged(tmp_path, caplog):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage, copy_types="jar", copy_excludes=["myartifact"])

    with caplog.at_level(logging.INFO):
        report = Stager(RecordingExtractor()).stage([resolved(tmp_path, "myartifact")], options)

    assert report.entries[0].action is StagingAction.SKIP
    assert not (stage / "myartifact.jar").exists()
    assert "Excluded: org.example:myartifact:jar:1.0" in caplog.text


def test_unpack_with_includes_and_mapped_name(tmp_path):
    stage = tmp_path / "stage"
    options = StagingOptions(
        stage_directory=stage,
        unpack_types="zip",
        includes="**/*.txt",
        mappings=[NameMapping("glassfish-docs", "docs")],
    )
    extractor = RecordingExtractor()
    dependency = resolved(tmp_path, "glassfish-docs", extension="zip")

    report = Stager(extractor).stage([dependency], options)

    assert report.entries[0].action is StagingAction.UNPACK
    assert report.entries[0].destination == stage / "docs"
    assert extractor.calls == [(dependency.file, stage / "docs", "**/*.txt", "")]
    assert (stage / "docs").is_dir()


def test_missing_file_is_logged_and_run_continues(tmp_path, caplog):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage)
    missing = ResolvedDependency(ArtifactCoordinate("org.example", "ghost", "1.0"), None)

    with caplog.at_level(logging.INFO):
        report = Stager(RecordingExtractor()).stage([missing, resolved(tmp_path, "core")], options)

    assert [entry.action for entry in report.entries] == [StagingAction.SKIP, StagingAction.COPY]
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "file is null" in errors[0].getMessage()
    assert (stage / "core.jar").exists()


def test_empty_file_name_is_skipped(tmp_path, caplog):
    dependency = ResolvedDependency(ArtifactCoordinate("org.example", "core", "1.0"), Path(""))

    with caplog.at_level(logging.INFO):
        entry = Stager(RecordingExtractor()).stage_one(dependency, StagingOptions(stage_directory=tmp_path))

    assert entry.action is StagingAction.SKIP
    assert "empty file name" in caplog.text


def test_copy_takes_precedence_over_unpack(tmp_path):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage, copy_types="jar,zip", unpack_types="zip")
    extractor = RecordingExtractor()

    report = Stager(extractor).stage([resolved(tmp_path, "bundle", extension="zip")], options)

    assert report.entries[0].action is StagingAction.COPY
    assert (stage / "bundle.zip").exists()
    assert extractor.calls == []


def test_unconfigured_type_is_silently_skipped(tmp_path, caplog):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage)

    with caplog.at_level(logging.INFO):
        report = Stager(RecordingExtractor()).stage([resolved(tmp_path, "parent", extension="pom")], options)

    assert report.entries[0].action is StagingAction.SKIP
    assert not stage.exists()
    assert caplog.text == ""


def test_copy_failure_is_logged_and_run_continues(tmp_path, caplog):
    stage = tmp_path / "stage"
    options = StagingOptions(stage_directory=stage, copy_types="jar")
    broken = ResolvedDependency(
        ArtifactCoordinate("org.example", "broken", "1.0"), tmp_path / "nowhere" / "broken-1.0.jar"
    )

    with caplog.at_level(logging.INFO):
        report = Stager(RecordingExtractor()).stage([broken, resolved(tmp_path, "core")], options)

    assert [entry.action for entry in report.entries] == [StagingAction.SKIP, StagingAction.COPY]
    assert "Failed to copy" in caplog.text
    assert (stage / "core.jar").exists()


def test_extraction_failure_aborts(tmp_path):
    options = StagingOptions(stage_directory=tmp_path / "stage", unpack_types="zip")
    extractor = RecordingExtractor(error=StagingIOError("boom"))
    dependencies = [resolved(tmp_path, "docs", extension="zip"), resolved(tmp_path, "core")]

    with pytest.raises(StagingIOError, match="boom"):
        Stager(extractor).stage(dependencies, options)

    assert not (tmp_path / "stage" / "core.jar").exists()


def test_copy_overwrites_and_keeps_stale_files(tmp_path):
    stage = tmp_path / "stage"
    stage.mkdir()
    (stage / "core.jar").write_bytes(b"old")
    (stage / "stale.jar").write_bytes(b"stale")
    options = StagingOptions(stage_directory=stage, copy_types="jar")

    Stager(RecordingExtractor()).stage([resolved(tmp_path, "core", content=b"new")], options)

    assert (stage / "core.jar").read_bytes() == b"new"
    assert (stage / "stale.jar").read_bytes() == b"stale"


def test_copy_uses_mapped_name(tmp_path):
    stage = tmp_path / "stage"
    options = StagingOptions(
        stage_directory=stage,
        mappings=[NameMapping("core", "glassfish-core", group_id="org.example")],
    )

    Stager(RecordingExtractor()).stage([resolved(tmp_path, "core")], options)

    assert (stage / "glassfish-core.jar").exists()

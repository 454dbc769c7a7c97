import os
import tarfile
from datetime import datetime, timezone
from zipfile import ZipFile

import pytest

from featurestage.modules.archive import (
    ArchiveExtractor,
    FileSet,
    PathSelector,
    ZipBuilder,
    match_path,
    parse_output_timestamp,
    split_patterns,
)
from featurestage.modules.featuresets.domain import (
    ConfigurationError,
    StagingIOError,
    UnknownArchiveFormatError,
)


@pytest.mark.parametrize(
    "pattern, path, expected",
    [
        ("**/*.txt", "a/b/c.txt", True),
        ("**/*.txt", "c.txt", True),
        ("*.txt", "a/c.txt", False),
        ("docs/", "docs/a/b.html", True),
        ("META-INF/**", "META-INF/MANIFEST.MF", True),
        ("lib/?.jar", "lib/a.jar", True),
        ("lib/?.jar", "lib/ab.jar", False),
    ],
)
def test_match_path(pattern, path, expected):
    assert match_path(pattern, path) is expected


def test_path_selector():
    selector = PathSelector("**/*.txt", "secret/**")

    assert selector.active
    assert selector.is_selected("notes.txt")
    assert not selector.is_selected("secret/notes.txt")
    assert not selector.is_selected("image.png")
    assert PathSelector().is_selected("anything")
    assert split_patterns(" a, ,b ") == ["a", "b"]


def make_zip(path, entries):
    with ZipFile(path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return path


def test_extract_zip_with_includes(tmp_path):
    archive = make_zip(
        tmp_path / "docs.zip",
        {"docs/readme.txt": "readme", "docs/img/logo.png": "png", "notes.txt": "notes"},
    )
    dest = tmp_path / "out"

    ArchiveExtractor().extract(archive, dest, "**/*.txt", "")

    assert (dest / "docs" / "readme.txt").read_text() == "readme"
    assert (dest / "notes.txt").exists()
    assert not (dest / "docs" / "img").exists()


def test_extract_tar(tmp_path):
    source = tmp_path / "payload.txt"
    source.write_text("payload")
    archive = tmp_path / "bundle.tar.gz"
    with tarfile.open(archive, "w:gz") as tf:
        tf.add(source, arcname="bundle/payload.txt")

    ArchiveExtractor().extract(archive, tmp_path / "out", excludes="**/*.log")

    assert (tmp_path / "out" / "bundle" / "payload.txt").read_text() == "payload"


def test_unknown_archive_format(tmp_path):
    source = tmp_path / "data.bin"
    source.write_bytes(b"x")

    with pytest.raises(UnknownArchiveFormatError, match="Unknown archiver type"):
        ArchiveExtractor().extract(source, tmp_path / "out")


def test_corrupt_archive_is_a_staging_error(tmp_path):
    source = tmp_path / "bad.zip"
    source.write_bytes(b"not a zip")

    with pytest.raises(StagingIOError, match="Error unpacking file"):
        ArchiveExtractor().extract(source, tmp_path / "out")


def test_entries_cannot_escape_destination(tmp_path):
    archive = make_zip(tmp_path / "evil.zip", {"../evil.txt": "evil"})

    with pytest.raises(StagingIOError, match="escapes"):
        ArchiveExtractor().extract(archive, tmp_path / "out")

    assert not (tmp_path / "evil.txt").exists()


def test_parse_output_timestamp():
    assert parse_output_timestamp(None) is None
    assert parse_output_timestamp("") is None
    assert parse_output_timestamp("1") is None
    assert parse_output_timestamp("1704067200") == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parse_output_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["1970-01-01T00:00:00Z", "2100-01-01T00:00:00Z", "yesterday"])
def test_parse_output_timestamp_rejects(value):
    with pytest.raises(ConfigurationError):
        parse_output_timestamp(value)


def populate(root, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def test_zip_is_reproducible(tmp_path):
    source = populate(tmp_path / "src", {"top.txt": "top", "docs/a.txt": "a"})
    timestamp = parse_output_timestamp("2024-01-01T00:00:00Z")
    builder = ZipBuilder()

    first = builder.build(tmp_path / "first.zip", [FileSet(source)], timestamp=timestamp)
    second = builder.build(tmp_path / "second.zip", [FileSet(source)], timestamp=timestamp)

    assert first.read_bytes() == second.read_bytes()
    with ZipFile(first) as zf:
        assert zf.namelist() == ["docs/", "docs/a.txt", "top.txt"]
        assert {info.date_time for info in zf.infolist()} == {(2024, 1, 1, 0, 0, 0)}
        assert zf.getinfo("top.txt").external_attr >> 16 == 0o100644


def test_zip_fileset_prefix_and_excludes(tmp_path):
    source = populate(tmp_path / "src", {"a.txt": "a", "b.log": "b"})

    target = ZipBuilder().build(tmp_path / "out.zip", [FileSet(source, prefix="glassfish7", excludes="*.log")])

    with ZipFile(target) as zf:
        assert zf.namelist() == ["glassfish7/", "glassfish7/a.txt"]


def test_zip_duplicate_modes(tmp_path):
    first = populate(tmp_path / "one", {"a.txt": "first"})
    second = populate(tmp_path / "two", {"a.txt": "second"})
    filesets = [FileSet(first), FileSet(second)]
    builder = ZipBuilder()

    preserved = builder.build(tmp_path / "preserve.zip", filesets, duplicate="preserve")
    with ZipFile(preserved) as zf:
        assert zf.namelist() == ["a.txt"]
        assert zf.read("a.txt") == b"first"

    with pytest.raises(StagingIOError, match="Duplicate"):
        builder.build(tmp_path / "fail.zip", filesets, duplicate="fail")

    with pytest.raises(ConfigurationError):
        builder.build(tmp_path / "bad.zip", filesets, duplicate="skip")


def test_missing_fileset_directory(tmp_path):
    with pytest.raises(StagingIOError):
        ZipBuilder().build(tmp_path / "out.zip", [FileSet(tmp_path / "missing")])


def test_zip_accepts_files_older_than_1980(tmp_path):
    source = populate(tmp_path / "src", {"epoch.txt": "epoch"})
    os.utime(source / "epoch.txt", (0, 0))
    builder = ZipBuilder()

    fixed = builder.build(
        tmp_path / "fixed.zip", [FileSet(source)], timestamp=parse_output_timestamp("2024-01-01T00:00:00Z")
    )
    clamped = builder.build(tmp_path / "clamped.zip", [FileSet(source)])

    with ZipFile(fixed) as zf:
        assert zf.getinfo("epoch.txt").date_time == (2024, 1, 1, 0, 0, 0)
    with ZipFile(clamped) as zf:
        assert zf.getinfo("epoch.txt").date_time == (1980, 1, 1, 0, 0, 0)
        assert zf.read("epoch.txt") == b"epoch"

import gzip
import json
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from variantgraph.adapters import (  # noqa: E402
    AnnotationJsonAdapter,
    iter_lines,
    list_annotation_files,
)
from variantgraph.config import RunSettings  # noqa: E402
from variantgraph.errors import DirectoryError, InputReadError, RecordDecodeError  # noqa: E402


def _annotation_line(index: int) -> str:
    return json.dumps(
        {
            "id": f"rs{index}",
            "seq_region_name": "7",
            "start": 1000 + index,
            "allele_string": "C/T",
        }
    )


def test_list_annotation_files_filters_by_suffix_case_insensitively(tmp_path: Path) -> None:
    (tmp_path / "a.json").write_text("")
    (tmp_path / "B.JSON").write_text("")
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "c.json.gz").write_bytes(b"")
    (tmp_path / "nested.json").mkdir()

    found = list_annotation_files(tmp_path)

    assert {path.name for path in found} == {"a.json", "B.JSON"}


def test_list_annotation_files_accepts_gzip_suffix_when_requested(tmp_path: Path) -> None:
    (tmp_path / "a.json").write_text("")
    (tmp_path / "c.json.gz").write_bytes(b"")

    found = list_annotation_files(tmp_path, RunSettings(include_gzip=True).recognized_suffixes())

    assert {path.name for path in found} == {"a.json", "c.json.gz"}


def test_list_annotation_files_rejects_missing_folder(tmp_path: Path) -> None:
    with pytest.raises(DirectoryError, match="does not exist"):
        list_annotation_files(tmp_path / "missing")


def test_list_annotation_files_rejects_plain_file(tmp_path: Path) -> None:
    path = tmp_path / "single.json"
    path.write_text("")

    with pytest.raises(DirectoryError, match="not a folder"):
        list_annotation_files(path)


def test_iter_lines_streams_lines_and_logs_progress(tmp_path: Path, caplog) -> None:
    path = tmp_path / "big.json"
    path.write_text("".join(f"line-{index}\n" for index in range(2500)))
    logger = logging.getLogger("variantgraph.test.reader")

    with caplog.at_level(logging.INFO, logger="variantgraph.test.reader"):
        lines = list(iter_lines(path, logger=logger))

    assert len(lines) == 2500
    assert lines[0] == "line-0"
    assert lines[-1] == "line-2499"
    progress = [record.getMessage() for record in caplog.records]
    assert progress == ["Processed 1000 lines", "Processed 2000 lines"]


def test_iter_lines_is_lazy(tmp_path: Path) -> None:
    path = tmp_path / "lazy.json"
    path.write_text("first\nsecond\n")

    lines = iter_lines(path)
    path.write_text("replaced\n")

    assert list(lines) == ["replaced"]


def test_iter_lines_reads_gzip_input(tmp_path: Path) -> None:
    path = tmp_path / "input.json.gz"
    with gzip.open(path, "wt", encoding="utf-8") as stream:
        stream.write("one\ntwo\n")

    assert list(iter_lines(path)) == ["one", "two"]


def test_iter_lines_wraps_read_failures(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_bytes(b"ok\n\xff\xfe\xfa\n")

    with pytest.raises(InputReadError, match="broken.json"):
        list(iter_lines(path))

    with pytest.raises(InputReadError):
        list(iter_lines(tmp_path / "absent.json"))


def test_adapter_decodes_files_in_line_order(tmp_path: Path) -> None:
    (tmp_path / "part1.json").write_text(
        _annotation_line(1) + "\n" + _annotation_line(2) + "\n"
    )
    (tmp_path / "ignored.txt").write_text("not json\n")

    adapter = AnnotationJsonAdapter(input_folder=tmp_path)
    records = list(adapter.read())

    assert [record.variant_id for record in records] == ["rs1", "rs2"]
    assert adapter.statistics.files == 1
    assert adapter.statistics.lines == 2
    assert adapter.statistics.records == 2


def test_adapter_stops_at_first_undecodable_line(tmp_path: Path) -> None:
    (tmp_path / "input.json").write_text(
        "\n".join([_annotation_line(1), "{broken", _annotation_line(3)]) + "\n"
    )
    adapter = AnnotationJsonAdapter(input_folder=tmp_path)
    seen = []

    with pytest.raises(RecordDecodeError) as excinfo:
        for record in adapter.read():
            seen.append(record.variant_id)

    assert seen == ["rs1"]
    assert excinfo.value.line_number == 2


def test_adapter_treats_blank_line_as_undecodable(tmp_path: Path) -> None:
    (tmp_path / "input.json").write_text(
        _annotation_line(0) + "\n\n" + _annotation_line(2) + "\n"
    )
    adapter = AnnotationJsonAdapter(input_folder=tmp_path)

    with pytest.raises(RecordDecodeError, match="malformed JSON") as excinfo:
        list(adapter.read())

    assert excinfo.value.line_number == 2
    assert adapter.statistics.records == 1


def test_adapter_releases_input_file_when_decoding_fails(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "input.json"
    path.write_text(_annotation_line(1) + "\n{broken\n")
    opened = []
    original_open = Path.open

    def tracking_open(self, *args, **kwargs):
        stream = original_open(self, *args, **kwargs)
        opened.append(stream)
        return stream

    monkeypatch.setattr(Path, "open", tracking_open)
    adapter = AnnotationJsonAdapter(input_folder=tmp_path)
    records = adapter.read()

    with pytest.raises(RecordDecodeError) as excinfo:
        for _ in records:
            pass

    assert excinfo.value.line_number == 2
    assert len(opened) == 1
    assert opened[0].closed


def test_adapter_releases_input_file_when_consumer_stops_early(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "input.json"
    path.write_text(_annotation_line(1) + "\n" + _annotation_line(2) + "\n")
    opened = []
    original_open = Path.open

    def tracking_open(self, *args, **kwargs):
        stream = original_open(self, *args, **kwargs)
        opened.append(stream)
        return stream

    monkeypatch.setattr(Path, "open", tracking_open)
    records = AnnotationJsonAdapter(input_folder=tmp_path).read()

    next(records)
    records.close()

    assert opened[0].closed

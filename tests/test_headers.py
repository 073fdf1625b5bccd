import csv
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from variantgraph.config import HEADER_COLUMNS, OutputFileType  # noqa: E402
from variantgraph.headers import HeaderGenerator  # noqa: E402


def test_generate_headers_writes_one_file_per_output_type(tmp_path: Path) -> None:
    written = HeaderGenerator().generate_headers(tmp_path, OutputFileType)

    assert sorted(path.name for path in written) == sorted(
        f"{output_type.file_prefix}-header.csv" for output_type in OutputFileType
    )
    for output_type in OutputFileType:
        with (tmp_path / f"{output_type.file_prefix}-header.csv").open(newline="") as stream:
            assert list(csv.reader(stream)) == [list(HEADER_COLUMNS[output_type])]


def test_generate_headers_overwrites_existing_content(tmp_path: Path) -> None:
    target = tmp_path / "ConsequenceTerm-header.csv"
    target.write_text("stale,header,columns\nextra\n")

    HeaderGenerator().generate_headers(tmp_path, [OutputFileType.CONSEQUENCE_TERM])

    assert target.read_text().splitlines() == ["consequenceTermId:ID(ConsequenceTerm)"]


def test_every_output_type_has_header_columns() -> None:
    assert set(HEADER_COLUMNS) == set(OutputFileType)
    assert all(HEADER_COLUMNS[output_type] for output_type in OutputFileType)

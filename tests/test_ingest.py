from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from conftest import report_payload, write_report
from contamscan.exceptions import AssemblyParseError, InputFileError
from contamscan.ingest import iter_assembly_records, iter_json_values, iter_records_from_handle


def _payloads(count: int) -> list[dict]:
    return [report_payload(f"GCA_{idx}.1", f"asm{idx}", f"Organism {idx}") for idx in range(count)]


def test_records_are_yielded_in_file_order(tmp_path: Path) -> None:
    report = write_report(tmp_path / "report.jsonl", _payloads(4))

    accessions = [record.accession for record in iter_assembly_records(report)]

    assert accessions == ["GCA_0.1", "GCA_1.1", "GCA_2.1", "GCA_3.1"]


def test_values_do_not_depend_on_line_framing() -> None:
    first, second, third = (json.dumps(payload) for payload in _payloads(3))
    pretty = json.dumps(report_payload("GCA_9.1", "asm9", "Organism 9"), indent=2)
    text = f"{first} {second}\n\n{third}\n{pretty}\n"

    values = list(iter_json_values(io.StringIO(text)))

    assert [index for index, _, _ in values] == [0, 1, 2, 3]
    assert [line for _, line, _ in values] == [1, 1, 3, 4]
    assert values[3][2]["accession"] == "GCA_9.1"


def test_iteration_is_lazy() -> None:
    good = json.dumps(report_payload("GCA_1.1", "asm", "Organism"))
    stream = io.StringIO(f"{good}\n{{not json}}\n")

    records = iter_records_from_handle(stream)
    first = next(records)

    assert first.accession == "GCA_1.1"
    with pytest.raises(AssemblyParseError):
        next(records)


def test_malformed_json_reports_record_index(tmp_path: Path) -> None:
    lines = [json.dumps(payload) for payload in _payloads(10)]
    lines[3] = '{"accession": "GCA_3.1", "assemblyInfo": {"assemblyName": "asm3"},, }'
    report = tmp_path / "report.jsonl"
    report.write_text("\n".join(lines) + "\n", encoding="utf-8")

    with pytest.raises(AssemblyParseError) as excinfo:
        list(iter_assembly_records(report))

    assert excinfo.value.index == 3
    assert excinfo.value.line_number == 4
    assert "record 3" in str(excinfo.value)


def test_truncated_final_record_is_an_error(tmp_path: Path) -> None:
    good = json.dumps(report_payload("GCA_1.1", "asm", "Organism"))
    report = tmp_path / "report.jsonl"
    report.write_text(f'{good}\n{{"accession": "GCA_2.1", "organism": ', encoding="utf-8")

    with pytest.raises(AssemblyParseError) as excinfo:
        list(iter_assembly_records(report))

    assert excinfo.value.index == 1


def test_missing_required_field_is_fatal_by_default(tmp_path: Path) -> None:
    payloads = _payloads(3)
    del payloads[1]["assemblyInfo"]["assemblyName"]
    report = write_report(tmp_path / "report.jsonl", payloads)

    with pytest.raises(AssemblyParseError) as excinfo:
        list(iter_assembly_records(report))

    assert excinfo.value.index == 1
    assert "assemblyInfo.assemblyName" in excinfo.value.reason


def test_skip_invalid_drops_schema_failures(tmp_path: Path) -> None:
    payloads = _payloads(3)
    payloads[1]["organism"] = {"taxId": 5}
    report = write_report(tmp_path / "report.jsonl", payloads)

    accessions = [record.accession for record in iter_assembly_records(report, skip_invalid=True)]

    assert accessions == ["GCA_0.1", "GCA_2.1"]


def test_skip_invalid_does_not_hide_json_errors(tmp_path: Path) -> None:
    report = tmp_path / "report.jsonl"
    report.write_text('{"accession": }\n', encoding="utf-8")

    with pytest.raises(AssemblyParseError):
        list(iter_assembly_records(report, skip_invalid=True))


def test_stream_can_be_restarted(tmp_path: Path) -> None:
    report = write_report(tmp_path / "report.jsonl", _payloads(2))

    first_pass = [record.accession for record in iter_assembly_records(report)]
    second_pass = [record.accession for record in iter_assembly_records(report)]

    assert first_pass == second_pass


def test_empty_file_yields_nothing(tmp_path: Path) -> None:
    report = tmp_path / "report.jsonl"
    report.write_text("\n\n", encoding="utf-8")

    assert list(iter_assembly_records(report)) == []


def test_missing_report_is_input_error(tmp_path: Path) -> None:
    with pytest.raises(InputFileError) as excinfo:
        list(iter_assembly_records(tmp_path / "absent.jsonl"))

    assert excinfo.value.exit_code == 1


def test_directory_report_is_input_error(tmp_path: Path) -> None:
    with pytest.raises(InputFileError, match="not a file"):
        list(iter_assembly_records(tmp_path))


def test_invalid_utf8_names_the_record(tmp_path: Path) -> None:
    lines = [json.dumps(payload).encode("utf-8") for payload in _payloads(3)]
    lines[1] = lines[1].replace(b"Organism 1", b"Organism \xff1")
    report = tmp_path / "report.jsonl"
    report.write_bytes(b"\n".join(lines) + b"\n")

    records = iter_assembly_records(report)
    assert next(records).accession == "GCA_0.1"
    with pytest.raises(AssemblyParseError, match="invalid UTF-8") as excinfo:
        next(records)

    assert excinfo.value.index == 1
    assert excinfo.value.line_number == 2
    assert "record 1" in str(excinfo.value)


def test_invalid_utf8_inside_multiline_record() -> None:
    first = json.dumps(report_payload("GCA_0.1", "asm0", "Organism 0")).encode("utf-8")
    pretty = json.dumps(report_payload("GCA_1.1", "asm1", "OrganismX"), indent=2).encode("utf-8")
    pretty = pretty.replace(b"OrganismX", b"Organism\xe9")
    handle = io.BytesIO(first + b"\n" + pretty + b"\n")

    with pytest.raises(AssemblyParseError) as excinfo:
        list(iter_json_values(handle))

    assert excinfo.value.index == 1
    assert excinfo.value.line_number > 2

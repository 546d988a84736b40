"""Lazy reader for NCBI Datasets ``assembly_data_report.jsonl`` files.

The report is treated as a stream of consecutive JSON values rather than
strictly one object per line: several objects may share a line and a single
object may span lines. Values are decoded one at a time so arbitrarily large
reports never have to fit in memory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO, Any, Iterator

from pydantic import ValidationError

from contamscan.exceptions import AssemblyParseError, InputFileError
from contamscan.models import AssemblyRecord
from contamscan.utils.validation import validate_existing_file

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\n\r"


def _needs_more_input(exc: json.JSONDecodeError, buffer: str) -> bool:
    # Truncated values fail at the end of the buffer, except unterminated
    # strings which report the position where the string started.
    if exc.msg.startswith("Unterminated string"):
        return True
    return exc.pos >= len(buffer.rstrip(_WHITESPACE))


def _read_line(handle: IO[Any], index: int, line_number: int) -> str:
    # Binary handles are decoded per line so a bad byte is pinned to its record.
    try:
        line = handle.readline()
        if isinstance(line, bytes):
            line = line.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise AssemblyParseError(index, line_number, f"invalid UTF-8: {exc.reason} at byte {exc.start}") from exc
    return line


def iter_json_values(handle: IO[Any]) -> Iterator[tuple[int, int, object]]:
    """Yield ``(index, line_number, value)`` for each JSON value in ``handle``.

    ``handle`` may be text or binary (UTF-8). ``line_number`` is the 1-based
    line on which the value starts. Malformed or undecodable input raises :class:`AssemblyParseError`; the stream cannot be resumed.
    """

    decoder = json.JSONDecoder()
    buffer = ""
    line_number = 1
    index = 0
    exhausted = False

    while True:
        stripped = buffer.lstrip(_WHITESPACE)
        line_number += buffer[: len(buffer) - len(stripped)].count("\n")
        buffer = stripped

        if not buffer:
            if exhausted:
                return
            chunk = _read_line(handle, index, line_number + buffer.count("\n"))
            if chunk == "":
                exhausted = True
            buffer = chunk
            continue

        try:
            value, end = decoder.raw_decode(buffer)
        except json.JSONDecodeError as exc:
            if not exhausted and _needs_more_input(exc, buffer):
                chunk = _read_line(handle, index, line_number + buffer.count("\n"))
                if chunk == "":
                    exhausted = True
                buffer += chunk
                continue
            raise AssemblyParseError(index, line_number, f"invalid JSON: {exc.msg}") from exc

        # A bare number at the end of the buffer may continue on the next read.
        if end == len(buffer) and not exhausted and not isinstance(value, (dict, list, str)):
            chunk = _read_line(handle, index, line_number + buffer.count("\n"))
            if chunk == "":
                exhausted = True
            else:
                buffer += chunk
                continue

        yield index, line_number, value
        line_number += buffer[:end].count("\n")
        buffer = buffer[end:]
        index += 1


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<record>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def iter_records_from_handle(
    handle: IO[Any],
    *,
    skip_invalid: bool = False,
) -> Iterator[AssemblyRecord]:
    for index, line_number, payload in iter_json_values(handle):
        try:
            yield AssemblyRecord.from_payload(payload)
        except ValidationError as exc:
            error = AssemblyParseError(index, line_number, _describe_validation_error(exc))
            if not skip_invalid:
                raise error from exc
            logger.warning("Skipping invalid record: %s", error)


def iter_assembly_records(
    path: Path,
    *,
    skip_invalid: bool = False,
) -> Iterator[AssemblyRecord]:
    """Lazily yield validated records from an assembly data report file.

    Each call reopens the file, so the sequence can be restarted from scratch.
    By default the first invalid record aborts iteration; ``skip_invalid``
    downgrades schema failures (not JSON syntax errors) to warnings.
    """

    validate_existing_file(path, "Assembly data report")
    try:
        handle = path.open("rb")
    except OSError as exc:
        raise InputFileError(f"Could not open assembly data report {path}: {exc}") from exc
    with handle:
        yield from iter_records_from_handle(handle, skip_invalid=skip_invalid)

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterable

from pydantic import TypeAdapter, ValidationError

from domain.operations import Batch, Operation

logger = logging.getLogger(__name__)

_BATCH_ADAPTER: TypeAdapter[list[Operation]] = TypeAdapter(list[Operation])


class OperationsReadError(Exception):
    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


def parse_batch(line: bytes | str) -> Batch:
    """Decode one JSON line into a batch. Raises ValidationError when malformed."""
    return _BATCH_ADAPTER.validate_json(line)


class OperationsReader:
    """Read line-delimited batches of operations.

    Each non-blank line holds one JSON array of operations. Lines are decoded
    one at a time, so a line that is not valid UTF-8 or fails validation is
    logged and skipped; I/O failures abort the read.
    """

    def __init__(self, lines: Iterable[bytes] | Iterable[str]) -> None:
        self._lines = lines
        self.skipped_lines = 0

    def read_batches(self) -> list[Batch]:
        batches: list[Batch] = []
        line_number = 0
        try:
            for line_number, line in enumerate(self._lines, start=1):
                if not line.strip():
                    continue
                try:
                    batches.append(parse_batch(line))
                except ValidationError as exc:
                    self.skipped_lines += 1
                    logger.warning(
                        "Skipping malformed line %d: %s (%d errors: %s)",
                        line_number,
                        _printable(line),
                        exc.error_count(),
                        _summarize_errors(exc),
                    )
        except OSError as exc:
            raise OperationsReadError(
                f"error reading operations after line {line_number}: {exc}", line_number=line_number
            ) from exc

        logger.info("Read %d batches, skipped %d malformed lines", len(batches), self.skipped_lines)
        return batches


def read_batches(stream: BinaryIO | Iterable[bytes] | Iterable[str]) -> list[Batch]:
    return OperationsReader(stream).read_batches()


def load_batches(path: Path) -> list[Batch]:
    try:
        handle = path.open("rb")
    except OSError as exc:
        raise OperationsReadError(f"cannot open operations file {path}: {exc}") from exc
    with handle:
        return read_batches(handle)


def _printable(line: bytes | str) -> str:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    return line.strip()


def _summarize_errors(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
    )

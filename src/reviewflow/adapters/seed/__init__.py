"""Seed data: generation, payload schema and JSON-lines files."""

from __future__ import annotations

from .files import SeedFileError, read_records, write_records
from .generator import DEFAULT_RECORD_COUNT, DEFAULT_SEED, generate_records
from .schema import RecordPayload
from .translator import parse_record, to_payload

__all__ = [
    "DEFAULT_RECORD_COUNT",
    "DEFAULT_SEED",
    "RecordPayload",
    "SeedFileError",
    "generate_records",
    "parse_record",
    "read_records",
    "to_payload",
    "write_records",
]

"""Tests for the log scanner."""

import pytest

from rgpd_gateway import PIIType
from rgpd_gateway.scanner import (
    LogLine, Severity, determine_severity, parse_log_file, scan_log_line, scan_log_lines,
)


LOG = "\n".join([
    "2024-01-01 INFO healthcheck ok",
    "2024-01-01 INFO login for jean@example.com",
    "2024-01-01 INFO payment IBAN FR76 1234 5678 90AB CDEF GHIJ K12",
    "2024-01-01 INFO request done",
])


def test_parse_log_file_numbers_lines():
    lines = parse_log_file("a\nb\n")
    assert [(l.line_number, l.content) for l in lines] == [(1, "a"), (2, "b"), (3, "")]


@pytest.mark.parametrize("types, count, severity", [
    ({PIIType.SSN}, 1, Severity.CRITICAL),
    ({PIIType.IBAN}, 1, Severity.CRITICAL),
    ({PIIType.ADDRESS}, 11, Severity.CRITICAL),
    ({PIIType.EMAIL}, 1, Severity.WARNING),
    ({PIIType.PERSON}, 1, Severity.WARNING),
    ({PIIType.ADDRESS}, 6, Severity.WARNING),
    ({PIIType.ADDRESS}, 1, Severity.INFO),
])
def test_severity(types, count, severity):
    assert determine_severity(types, count) is severity


def test_clean_line():
    assert scan_log_line(LogLine("2024-01-01 INFO request done", 1)) is None


def test_scan_reports_types_not_values():
    result = scan_log_lines(parse_log_file(LOG))

    assert result.total_lines == 4
    assert result.leak_count == 2
    email, iban = result.leaks
    assert (email.line_number, email.pii_types, email.severity) == (
        2, (PIIType.EMAIL,), Severity.WARNING,
    )
    assert iban.line_number == 3
    assert iban.severity is Severity.CRITICAL
    assert "jean@example.com" not in repr(result)
    assert isinstance(result.duration_ms, int)

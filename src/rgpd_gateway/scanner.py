"""Log scanner: safety net for PII that leaked into application logs.

Logs should never contain PII.  This runs the detector over log lines
and reports which lines leaked what *kind* of PII, with a severity.
Results carry types and counts only, never the matched values.
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from enum import Enum

from .detector import Detector
from .types import PIIType

_CRITICAL_TYPES = {PIIType.SSN, PIIType.IBAN}
_WARNING_TYPES = {PIIType.EMAIL, PIIType.PHONE, PIIType.PERSON}


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True, slots=True)
class LogLine:
    content: str
    line_number: int
    level: str | None = None


@dataclass(frozen=True, slots=True)
class PIILeak:
    line_number: int
    pii_types: tuple[PIIType, ...]
    pii_count: int
    severity: Severity


@dataclass(frozen=True, slots=True)
class ScanResult:
    total_lines: int
    leaks: tuple[PIILeak, ...]
    duration_ms: int

    @property
    def leak_count(self) -> int:
        return len(self.leaks)


def parse_log_file(content: str) -> list[LogLine]:
    return [
        LogLine(content=line, line_number=i)
        for i, line in enumerate(content.split("\n"), start=1)
    ]


def determine_severity(pii_types: set[PIIType], pii_count: int) -> Severity:
    """CRITICAL for SSN/IBAN or >10 hits, WARNING for contact data or >5 hits."""
    if pii_types & _CRITICAL_TYPES or pii_count > 10:
        return Severity.CRITICAL
    if pii_types & _WARNING_TYPES or pii_count > 5:
        return Severity.WARNING
    return Severity.INFO


def scan_log_line(line: LogLine, detector: Detector | None = None) -> PIILeak | None:
    detection = (detector or Detector()).detect(line.content)
    if detection.total_count == 0:
        return None
    types = list(dict.fromkeys(e.type for e in detection.entities))
    return PIILeak(
        line_number=line.line_number,
        pii_types=tuple(types),
        pii_count=detection.total_count,
        severity=determine_severity(set(types), detection.total_count),
    )


def scan_log_lines(lines: list[LogLine], detector: Detector | None = None) -> ScanResult:
    detector = detector or Detector()
    start = time.perf_counter()
    leaks = []
    for line in lines:
        leak = scan_log_line(line, detector)
        if leak is not None:
            leaks.append(leak)
    return ScanResult(
        total_lines=len(lines),
        leaks=tuple(leaks),
        duration_ms=round((time.perf_counter() - start) * 1000),
    )

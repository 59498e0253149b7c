"""CLI interface for rgpd-gateway.

Usage:
    # Detect PII (stdin: text, stdout: types and positions, never values)
    echo 'Contact Jean Dupont at jean@example.com' | rgpd-gateway detect

    # Mask PII (stdout: masked text + summary)
    echo 'Contact Jean Dupont at jean@example.com' | rgpd-gateway mask

    # Check a use case against the LLM usage policy (exit 1 if rejected)
    rgpd-gateway check-use-case SUMMARY

    # Scan a log file for leaked PII (exit 1 if anything leaked)
    rgpd-gateway scan-logs /var/log/app.log

Mappings from ``mask`` are not printed: they only exist for the
duration of one gateway call.
"""

from __future__ import annotations
import argparse
import json
import os
import sys

from .config import load_config, load_from_yaml
from .detector import Detector, DetectorConfig
from .masker import get_pii_summary, mask_pii
from .policy import validate_use_case
from .scanner import parse_log_file, scan_log_lines

DEFAULT_CONFIG = os.environ.get("RGPD_GATEWAY_CONFIG", "")


def _build_detector(args: argparse.Namespace) -> Detector:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    config = DetectorConfig(
        use_presidio=args.presidio or cfg["use_presidio"],
        language=args.language or cfg["language"],
        score_threshold=cfg["score_threshold"],
        skip_types=cfg["skip_types"],
        allow_list=cfg["allow_list"],
    )
    return Detector(config)


def _dump(data: object) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_detect(args: argparse.Namespace) -> int:
    """Report PII found in stdin text."""
    result = _build_detector(args).detect(sys.stdin.read())
    _dump({
        "total_count": result.total_count,
        "detected_types": sorted(t.value for t in result.detected_types),
        "entities": [
            {
                "type": e.type.value,
                "start": e.start_index,
                "end": e.end_index,
                "confidence": e.confidence,
                "source": e.source,
            }
            for e in result.entities
        ],
    })
    return 0


def cmd_mask(args: argparse.Namespace) -> int:
    """Mask PII in stdin text."""
    text = sys.stdin.read()
    detection = _build_detector(args).detect(text)
    result = mask_pii(text, detection.entities)
    _dump({"text": result.masked_text, **get_pii_summary(result.mappings)})
    return 0


def cmd_check_use_case(args: argparse.Namespace) -> int:
    v = validate_use_case(args.use_case)
    _dump({
        "allowed": v.allowed,
        "use_case": v.use_case,
        "risk_level": v.risk_level.value,
        "consent_required": v.consent_required,
        "human_validation_required": v.human_validation_required,
        "rejection_reason": v.rejection_reason,
    })
    return 0 if v.allowed else 1


def cmd_scan_logs(args: argparse.Namespace) -> int:
    """Scan a log file for leaked PII."""
    with open(args.path, encoding="utf-8", errors="replace") as f:
        lines = parse_log_file(f.read())
    result = scan_log_lines(lines, _build_detector(args))
    _dump({
        "total_lines": result.total_lines,
        "leak_count": result.leak_count,
        "duration_ms": result.duration_ms,
        "leaks": [
            {
                "line": leak.line_number,
                "pii_types": [t.value for t in leak.pii_types],
                "pii_count": leak.pii_count,
                "severity": leak.severity.value,
            }
            for leak in result.leaks
        ],
    })
    return 1 if result.leak_count else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rgpd-gateway",
        description="PII protection for the LLM gateway",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("--presidio", action="store_true", help="Enable the Presidio NER layer")
    parser.add_argument("--language", default="", help="Language code for NER")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("detect", help="Detect PII (text on stdin)")
    sub.add_parser("mask", help="Mask PII (text on stdin)")
    p = sub.add_parser("check-use-case", help="Validate a use case")
    p.add_argument("use_case")
    p = sub.add_parser("scan-logs", help="Scan a log file for PII")
    p.add_argument("path")

    args = parser.parse_args(argv)

    cmds = {
        "detect": cmd_detect,
        "mask": cmd_mask,
        "check-use-case": cmd_check_use_case,
        "scan-logs": cmd_scan_logs,
    }
    return cmds[args.command](args)


if __name__ == "__main__":
    sys.exit(main())

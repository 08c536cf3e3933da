"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json

from dbwarden.policy import ClassificationResult


def format_classification(result: ClassificationResult, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(result.to_dict(), indent=2)

    status = "valid" if result.valid else "invalid"
    lines = [f"{status}: {result.statement_type.value}"]
    if result.error:
        lines.append(f"  error: {result.error}")
    return "\n".join(lines)

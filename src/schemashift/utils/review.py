"""
Manual-review report for translation diagnostics.

Collects the non-fatal findings of one or more conversions (unmapped types,
malformed or ambiguous numeric specs) and writes them as JSON and Markdown.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from schemashift.models import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)

SUGGESTED_ACTIONS = {
    DiagnosticKind.UNMAPPED_TYPE: "Pick a target type and add it under type_overrides",
    DiagnosticKind.MALFORMED_NUMERIC_SPEC: "Check the column definition and set precision/scale by hand",
    DiagnosticKind.AMBIGUOUS_NUMERIC: "Confirm the column holds integers or widen it to DECIMAL",
}


class ReviewReport:
    """
    Diagnostics that need a human look before the generated scripts are run.

    Output Structure:
        <output_dir>/review/
        ├── manual_review.json
        └── manual_review.md
    """

    def __init__(self, command: Optional[str] = None, source: Optional[str] = None, target: Optional[str] = None):
        self.command = command
        self.source = source
        self.target = target
        self.items: List[Diagnostic] = []

    def add(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.items.extend(diagnostics)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Build the JSON report body."""
        by_kind = Counter(d.kind.value for d in self.items)
        by_table = Counter(d.table or "-" for d in self.items)
        items = []
        for d in self.items:
            item = d.to_dict()
            item["suggested_action"] = SUGGESTED_ACTIONS.get(d.kind)
            items.append(item)
        return {
            "generated_at": datetime.now().isoformat(),
            "command": self.command,
            "source": self.source,
            "target": self.target,
            "total_items": len(self.items),
            "summary_by_kind": dict(sorted(by_kind.items())),
            "summary_by_table": dict(sorted(by_table.items())),
            "items": items,
        }

    def save(self, output_dir: Path) -> Tuple[Path, Path]:
        """
        Save review report to files.

        Args:
            output_dir: Output directory

        Returns:
            Tuple of (json_path, markdown_path)
        """
        report = self.to_dict()
        review_dir = Path(output_dir) / "review"
        review_dir.mkdir(parents=True, exist_ok=True)

        json_path = review_dir / "manual_review.json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, default=str)

        md_path = review_dir / "manual_review.md"
        with open(md_path, "w", encoding="utf-8") as f:
            f.write(self._generate_markdown(report))

        logger.info(f"Manual review report with {len(self.items)} items saved to {review_dir}")
        return json_path, md_path

    def _generate_markdown(self, report: Dict[str, Any]) -> str:
        lines = [
            "# Manual Review Required",
            "",
            f"Generated: {report['generated_at']}",
            "",
        ]
        if self.command:
            lines.append(f"- **Command**: {self.command}")
        if self.source and self.target:
            lines.append(f"- **Direction**: {self.source} -> {self.target}")
        lines.extend([
            f"- **Items**: {report['total_items']}",
            "",
            "## Summary",
            "",
            "| Kind | Count |",
            "|------|-------|",
        ])
        for kind, count in report["summary_by_kind"].items():
            lines.append(f"| {kind} | {count} |")
        lines.append("")

        lines.append("## Items")
        lines.append("")
        lines.append("| Location | Kind | Native type | Message |")
        lines.append("|----------|------|-------------|---------|")
        for item in report["items"]:
            location = ".".join(p for p in (item["table"], item["column"]) if p) or "-"
            message = item["message"].replace("|", "\\|")
            lines.append(f"| {location} | {item['kind']} | {item['native_type']} | {message} |")
        lines.append("")

        return "\n".join(lines)

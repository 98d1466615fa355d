"""End-to-end validation pass over a JSON document-set file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from tradecheck.core.commkit import build_combined_correction
from tradecheck.core.extractor import extract_document_set
from tradecheck.core.fixplan import apply_all_blocking_fixes
from tradecheck.core.models import DocumentSet
from tradecheck.core.report import build_report, document_set_to_dict, report_to_dict

logger = logging.getLogger(__name__)

REPORT_FILE = "crosscheck_report.json"
DOCUMENT_SET_FILE = "document_set.json"
FIX_SUMMARY_FILE = "fix_summary.json"


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_document_set(payload: Dict[str, Any]) -> DocumentSet:
    """Accepts ``{"documents": {...}, "versions": {...}}`` or a bare kind -> content mapping."""
    if "documents" in payload:
        return extract_document_set(payload.get("documents") or {}, payload.get("versions"))
    return extract_document_set(payload)


def run_pipeline(
    input_path: Optional[str],
    output_dir: str,
    project_name: str = "",
    brand_name: str = "",
    auto_fix: bool = False,
    language: str = "en",
) -> Dict[str, Any]:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    payload = _load_json(Path(input_path)) if input_path else {}
    documents = load_document_set(payload)
    logger.info("Loaded %d document(s): %s", len(documents.kinds()), ", ".join(documents.kinds()) or "-")

    if auto_fix:
        bulk = apply_all_blocking_fixes(documents)
        documents = bulk.new_document_set
        _write_json(
            out_dir / FIX_SUMMARY_FILE,
            {
                "applied_count": bulk.applied_count,
                "updated_document_kinds": list(bulk.updated_document_kinds),
                "skipped_finding_ids": list(bulk.skipped_finding_ids),
                "message": build_combined_correction(bulk.changes, language),
            },
        )

    report = build_report(documents, project_name=project_name, brand_name=brand_name, language=language)
    summary = report.result.summary
    logger.info(
        "Score %d: %d blocking, %d warning, %d ok",
        summary.score,
        summary.blocking_count,
        summary.warning_count,
        summary.ok_count,
    )

    report_dict = report_to_dict(report)
    _write_json(out_dir / REPORT_FILE, report_dict)
    _write_json(out_dir / DOCUMENT_SET_FILE, document_set_to_dict(documents))
    return report_dict

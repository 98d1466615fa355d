"""Consistency report assembly and serialization."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence, Tuple

from tradecheck.core.commkit import build_message_context, generate_all_kits
from tradecheck.core.detector import detect, values_equal
from tradecheck.core.diagnosis import diagnose_all
from tradecheck.core.models import ConsistencyReport, Diagnosis, DocumentSet, Finding, FixPlanEntry
from tradecheck.core.questions import generate_questions
from tradecheck.core.rules import MAX_FIX_PLAN_ENTRIES, SEVERITY_RANK


def build_fix_plan(findings: Sequence[Finding], diagnoses: Sequence[Diagnosis]) -> Tuple[FixPlanEntry, ...]:
    by_id = {diagnosis.finding_id: diagnosis for diagnosis in diagnoses}
    ordered = sorted(
        (finding for finding in findings if finding.id in by_id),
        key=lambda finding: SEVERITY_RANK.get(finding.severity, 2),
    )
    entries: List[FixPlanEntry] = []
    for index, finding in enumerate(ordered[:MAX_FIX_PLAN_ENTRIES], start=1):
        resolution = by_id[finding.id].resolution
        targets = tuple(
            entry.document
            for entry in finding.detected_values
            if not values_equal(entry.value, resolution.source_value)
        )
        entries.append(
            FixPlanEntry(
                priority=f"P{index}",
                finding_id=finding.id,
                severity=finding.severity,
                title=finding.title,
                field_path=finding.field_path,
                source_document=resolution.source_of_truth,
                value=resolution.source_value,
                target_documents=targets,
            )
        )
    return tuple(entries)


def build_report(
    documents: DocumentSet,
    project_name: str = "",
    brand_name: str = "",
    language: str = "en",
) -> ConsistencyReport:
    """Run a full validation pass over ``documents``; nothing is modified."""
    result = detect(documents)
    diagnoses = diagnose_all(result.findings, documents)
    context = build_message_context(
        None,
        documents,
        project_name=project_name,
        seller_brand_name=brand_name,
        language=language,
    )
    return ConsistencyReport(
        project_name=project_name,
        result=result,
        diagnoses=diagnoses,
        questions=generate_questions(result.findings, diagnoses, documents),
        fix_plan=build_fix_plan(result.findings, diagnoses),
        communication_kits=generate_all_kits(result.findings, diagnoses, context),
        ready_to_finalize=result.summary.blocking_count == 0,
        document_versions={kind: documents.version(kind) for kind in documents.kinds()},
    )


def _plain(value: Any) -> Any:
    """Tuples become lists so the dict matches what ``json`` writes and reads back."""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def report_to_dict(report: ConsistencyReport) -> Dict[str, Any]:
    return _plain(asdict(report))


def document_set_to_dict(documents: DocumentSet) -> Dict[str, Any]:
    """Same shape the extractor reads back: ``{"documents": ..., "versions": ...}``."""
    return {
        "documents": {kind: _plain(asdict(documents.get(kind))) for kind in documents.kinds()},
        "versions": {kind: documents.version(kind) for kind in documents.kinds()},
    }

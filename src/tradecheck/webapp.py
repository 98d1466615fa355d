"""Flask JSON API over the consistency engine."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from tradecheck.core.commkit import build_combined_correction, build_message_context, generate_kit
from tradecheck.core.detector import detect
from tradecheck.core.diagnosis import diagnose, diagnose_all
from tradecheck.core.extractor import extract_document_set
from tradecheck.core.fixplan import apply_all_blocking_fixes, apply_answer, apply_fix
from tradecheck.core.models import DocumentSet, FixResult
from tradecheck.core.questions import answer_question, build_fix_summary, generate_questions
from tradecheck.core.report import build_report, document_set_to_dict, report_to_dict
from tradecheck.utils.logging import configure_logging

logger = logging.getLogger(__name__)

app = Flask(__name__)


def _setting(body: Dict[str, Any], key: str, env: str, default: str = "") -> str:
    return body.get(key) or os.getenv(env, default)


def _read_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def _documents(body: Dict[str, Any]) -> DocumentSet:
    raw = body.get("documents")
    if not isinstance(raw, dict):
        raise ValueError("'documents' must be an object keyed by document kind")
    return extract_document_set(raw, body.get("versions"))


def _report(documents: DocumentSet, body: Dict[str, Any]) -> Dict[str, Any]:
    report = build_report(
        documents,
        project_name=_setting(body, "project_name", "TRADECHECK_PROJECT_NAME"),
        brand_name=_setting(body, "brand_name", "TRADECHECK_BRAND_NAME"),
        language=_setting(body, "language", "TRADECHECK_LANGUAGE", "en"),
    )
    return report_to_dict(report)


def _fix_kit(documents: DocumentSet, result: FixResult, body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if not result.applied:
        return None
    finding = detect(documents).finding(result.finding_id)
    if finding is None:
        return None
    context = build_message_context(
        result,
        project_name=_setting(body, "project_name", "TRADECHECK_PROJECT_NAME"),
        seller_brand_name=_setting(body, "brand_name", "TRADECHECK_BRAND_NAME"),
        language=_setting(body, "language", "TRADECHECK_LANGUAGE", "en"),
    )
    return asdict(generate_kit(finding, diagnose(finding, documents), context))


def _fix_payload(documents: DocumentSet, result: FixResult, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "finding_id": result.finding_id,
        "applied": result.applied,
        "stale": result.stale,
        "updated_document_kinds": list(result.updated_document_kinds),
        "changes": [asdict(change) for change in result.changes],
        "communication_kit": _fix_kit(documents, result, body),
        "document_set": document_set_to_dict(result.new_document_set),
        "report": _report(result.new_document_set, body),
    }


@app.errorhandler(ValueError)
def bad_request(exc: ValueError):
    logger.warning("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


@app.get("/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/crosscheck")
def crosscheck():
    body = _read_body()
    return jsonify(_report(_documents(body), body))


@app.post("/api/fix")
def fix():
    body = _read_body()
    finding_id = body.get("finding_id")
    if not isinstance(finding_id, str) or not finding_id:
        raise ValueError("'finding_id' is required")
    documents = _documents(body)
    result = apply_fix(documents, finding_id, body.get("value"))
    return jsonify(_fix_payload(documents, result, body))


@app.post("/api/fix/blocking")
def fix_blocking():
    body = _read_body()
    documents = _documents(body)
    result = apply_all_blocking_fixes(documents)
    language = _setting(body, "language", "TRADECHECK_LANGUAGE", "en")
    return jsonify(
        {
            "applied_count": result.applied_count,
            "updated_document_kinds": list(result.updated_document_kinds),
            "skipped_finding_ids": list(result.skipped_finding_ids),
            "changes": [asdict(change) for change in result.changes],
            "message": build_combined_correction(result.changes, language),
            "document_set": document_set_to_dict(result.new_document_set),
            "report": _report(result.new_document_set, body),
        }
    )


@app.post("/api/answer")
def answer():
    body = _read_body()
    finding_id = body.get("finding_id")
    option_index = body.get("option_index")
    if not isinstance(option_index, int) or isinstance(option_index, bool):
        raise ValueError("'option_index' must be an integer")
    documents = _documents(body)
    findings = detect(documents).findings
    questions = generate_questions(findings, diagnose_all(findings, documents), documents)
    question = next((item for item in questions if item.finding_id == finding_id), None)
    if question is None:
        raise ValueError(f"No open confirmation question for {finding_id!r}")
    selected = answer_question(question, option_index)
    result = apply_answer(documents, selected)
    payload = _fix_payload(documents, result, body)
    payload["answer"] = asdict(selected)
    payload["summary"] = build_fix_summary([selected], findings).get(
        _setting(body, "language", "TRADECHECK_LANGUAGE", "en")
    )
    return jsonify(payload)


def main() -> None:
    configure_logging()
    app.run(host=os.getenv("TRADECHECK_HOST", "127.0.0.1"), port=int(os.getenv("TRADECHECK_PORT", "5000")))


if __name__ == "__main__":
    main()

import json

from tradecheck.core.detector import detect
from tradecheck.core.fixplan import apply_all_blocking_fixes
from tradecheck.core.pipeline import load_document_set
from tradecheck.core.report import build_report, document_set_to_dict, report_to_dict


def test_fix_plan_orders_blocking_first(documents):
    report = build_report(documents, project_name="Spring Order", brand_name="K-Glow")

    assert [entry.priority for entry in report.fix_plan] == ["P1", "P2", "P3", "P4", "P5"]
    assert all(entry.severity == "BLOCKING" for entry in report.fix_plan)
    assert not report.ready_to_finalize
    incoterms = next(entry for entry in report.fix_plan if entry.finding_id == "INCOTERMS_MISMATCH")
    assert incoterms.source_document == "Contract"
    assert incoterms.target_documents == ("Quotation",)


def test_fix_plan_is_capped(divergent_documents):
    plan = build_report(divergent_documents).fix_plan

    assert len(plan) == 8
    assert plan[-1].priority == "P8"
    assert all(entry.severity == "BLOCKING" for entry in plan)


def test_report_sections(documents):
    report = build_report(documents)

    assert len(report.diagnoses) == len(report.result.findings)
    assert len(report.communication_kits) == len(report.result.findings)
    assert len(report.questions) == 5
    assert report.document_versions == {
        "Quotation": 1,
        "Contract": 1,
        "CommercialInvoice": 1,
        "PackingList": 1,
    }


def test_report_serializes_to_json(documents):
    payload = report_to_dict(build_report(documents, project_name="Spring Order"))
    decoded = json.loads(json.dumps(payload, ensure_ascii=False))

    assert decoded["project_name"] == "Spring Order"
    assert decoded["result"]["summary"]["blocking_count"] == 5
    assert decoded["ready_to_finalize"] is False


def test_ready_after_bulk_fix(documents):
    fixed = apply_all_blocking_fixes(documents).new_document_set
    report = build_report(fixed)

    assert report.ready_to_finalize
    assert report.fix_plan == ()


def test_document_set_round_trip(documents):
    fixed = apply_all_blocking_fixes(documents).new_document_set
    payload = json.loads(json.dumps(document_set_to_dict(fixed)))
    restored = load_document_set(payload)

    assert restored.kinds() == fixed.kinds()
    assert restored.version("Quotation") == fixed.version("Quotation")
    assert detect(restored).summary == detect(fixed).summary
    assert detect(load_document_set(document_set_to_dict(documents))).summary == detect(documents).summary

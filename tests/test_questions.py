import copy

import pytest

from tradecheck.core.detector import detect
from tradecheck.core.diagnosis import diagnose, diagnose_all
from tradecheck.core.extractor import extract_document_set
from tradecheck.core.models import DetectedValue, Finding
from tradecheck.core.questions import answer_question, build_fix_summary, build_question, generate_questions


def _questions(documents):
    findings = detect(documents).findings
    return generate_questions(findings, diagnose_all(findings, documents), documents)


def test_questions_ranked_by_severity_then_confidence_gap(documents):
    questions = _questions(documents)

    assert [question.id for question in questions] == [
        "confirm-QTY_MISMATCH",
        "confirm-PRICE_MISMATCH",
        "confirm-TOTALS_MISMATCH",
        "confirm-PAYMENT_MISMATCH",
        "confirm-INCOTERMS_MISMATCH",
    ]


def test_question_cap(divergent_documents):
    questions = _questions(divergent_documents)

    assert len(questions) == 5
    assert all(question.severity == "BLOCKING" for question in questions)


def test_incoterms_options(documents):
    question = next(item for item in _questions(documents) if item.finding_id == "INCOTERMS_MISMATCH")

    assert question.field_path == "terms.incoterms"
    assert question.question.en == "Which Incoterms should we finalize?"
    assert [option.value for option in question.options] == ["FOB Incheon", "CIF Los Angeles"]
    assert [option.recommended for option in question.options] == [False, True]
    assert question.options[1].source_document == "Contract"
    assert question.options[1].source_documents == ("Contract", "CommercialInvoice")


def test_confident_warning_gets_no_question(raw_documents):
    quotation = raw_documents["Quotation"]
    invoice = copy.deepcopy(quotation)
    invoice["shipment"]["destinationPort"] = "Long Beach"
    documents = extract_document_set({"Quotation": quotation, "CommercialInvoice": invoice})

    assert [finding.id for finding in detect(documents).findings] == ["DESTINATION_MISMATCH"]
    assert _questions(documents) == ()


def test_ambiguous_warning_gets_question(raw_documents):
    quotation = raw_documents["Quotation"]
    contract = copy.deepcopy(quotation)
    contract["shipment"]["leadTimeDays"] = 45
    documents = extract_document_set({"Quotation": quotation, "Contract": contract})
    questions = _questions(documents)

    assert [question.finding_id for question in questions] == ["LEADTIME_MISMATCH"]
    assert questions[0].severity == "WARNING"
    assert [option.value for option in questions[0].options] == [30, 45]


def test_single_value_yields_no_question(documents):
    finding = Finding(
        id="CURRENCY_MISMATCH",
        severity="BLOCKING",
        field_path="terms.currency",
        title="Currency mismatch",
        description="",
        impact="",
        detected_values=(DetectedValue("Quotation", "USD"), DetectedValue("Contract", "USD")),
    )
    assert build_question(finding, diagnose(finding, documents)) is None


def test_answer_round_trip(documents):
    question = next(item for item in _questions(documents) if item.finding_id == "INCOTERMS_MISMATCH")
    answer = answer_question(question, 1)

    assert answer.question_id == "confirm-INCOTERMS_MISMATCH"
    assert answer.finding_id == "INCOTERMS_MISMATCH"
    assert answer.field_path == "terms.incoterms"
    assert answer.selected_value == "CIF Los Angeles"
    assert answer.source_document == "Contract"


def test_answer_out_of_range(documents):
    question = _questions(documents)[0]
    with pytest.raises(ValueError):
        answer_question(question, len(question.options))
    with pytest.raises(ValueError):
        answer_question(question, -1)


def test_fix_summary_is_bilingual(documents):
    findings = detect(documents).findings
    question = next(item for item in _questions(documents) if item.finding_id == "INCOTERMS_MISMATCH")
    summary = build_fix_summary([answer_question(question, 1)], findings)

    assert "Incoterms mismatch: finalized as CIF Los Angeles" in summary.en
    assert "CIF Los Angeles로 확정" in summary.ko

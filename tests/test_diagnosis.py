import pytest

from tradecheck.core.detector import detect
from tradecheck.core.diagnosis import diagnose, diagnose_all
from tradecheck.core.extractor import extract_document_set
from tradecheck.core.models import DetectedValue, Finding
from tradecheck.core.rules import CAUSE_TEMPLATES, MAX_ADJUSTMENT


def _diagnosis(documents, finding_id):
    finding = detect(documents).finding(finding_id)
    return diagnose(finding, documents)


def test_incoterms_contract_wins(documents):
    diagnosis = _diagnosis(documents, "INCOTERMS_MISMATCH")

    assert diagnosis.resolution.source_of_truth == "Contract"
    assert diagnosis.resolution.source_value == "CIF Los Angeles"
    assert "legally binding" in diagnosis.resolution.rationale.en
    assert "COUNTERPARTY" in diagnosis.communication_needs
    assert "LOGISTICS" in diagnosis.communication_needs
    assert diagnosis.probable_causes[0].cause_id == "INCO_C1"
    assert diagnosis.top_probability == pytest.approx(0.7)
    assert not diagnosis.needs_confirmation


def test_causes_sorted_by_probability(documents):
    for diagnosis in diagnose_all(detect(documents).findings, documents):
        probabilities = [cause.probability for cause in diagnosis.probable_causes]
        assert probabilities == sorted(probabilities, reverse=True)


def test_adjustment_is_bounded(documents, divergent_documents):
    for document_set in (documents, divergent_documents):
        for diagnosis in diagnose_all(detect(document_set).findings, document_set):
            baseline = {template.cause_id: template.probability for template in CAUSE_TEMPLATES[diagnosis.finding_id]}
            for cause in diagnosis.probable_causes:
                assert abs(cause.probability - baseline[cause.cause_id]) <= MAX_ADJUSTMENT + 1e-9
                assert 0.0 <= cause.probability <= 1.0


def test_diagnosis_is_deterministic(documents):
    findings = detect(documents).findings
    assert diagnose_all(findings, documents) == diagnose_all(findings, documents)


def test_low_confidence_needs_confirmation(documents):
    diagnosis = _diagnosis(documents, "QTY_MISMATCH")

    assert diagnosis.top_probability < 0.5
    assert diagnosis.needs_confirmation
    assert diagnosis.resolution.source_of_truth == "Quotation"
    assert diagnosis.resolution.source_value == {"SKU001": 500, "SKU002": 200}


def test_signal_evidence_is_recorded(documents):
    diagnosis = _diagnosis(documents, "QTY_MISMATCH")
    free_goods = next(cause for cause in diagnosis.probable_causes if cause.cause_id == "QTY_C3")

    assert free_goods.probability == pytest.approx(0.30)
    assert "Values differ by less than 5%" in free_goods.evidence


def test_totals_source_is_invoice(documents):
    diagnosis = _diagnosis(documents, "TOTALS_MISMATCH")

    assert diagnosis.resolution.source_of_truth == "CommercialInvoice"
    assert diagnosis.resolution.source_value == 8510
    assert diagnosis.resolution.risk_if_ignored.ko


def test_priority_skips_absent_documents(raw_documents):
    del raw_documents["Contract"]
    documents = extract_document_set(raw_documents)
    diagnosis = _diagnosis(documents, "INCOTERMS_MISMATCH")

    assert diagnosis.resolution.source_of_truth == "Quotation"
    assert diagnosis.resolution.source_value == "FOB Incheon"


def test_unknown_finding_falls_back_to_generic(documents):
    finding = Finding(
        id="HS_CODE_MISMATCH",
        severity="WARNING",
        field_path="items.hs_code",
        title="HS code mismatch",
        description="",
        impact="",
        detected_values=(DetectedValue("Quotation", "3304.99"), DetectedValue("Contract", "3304.10")),
    )
    diagnosis = diagnose(finding, documents)

    assert [cause.cause_id for cause in diagnosis.probable_causes] == ["GENERIC_C1"]
    assert diagnosis.top_probability == pytest.approx(0.3)
    assert diagnosis.needs_confirmation
    assert diagnosis.resolution.source_of_truth == "Contract"
    assert diagnosis.resolution.source_value == "3304.10"
    assert diagnosis.communication_needs == ("INTERNAL",)

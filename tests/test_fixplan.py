import pytest

from tradecheck.core.detector import detect
from tradecheck.core.diagnosis import diagnose_all
from tradecheck.core.extractor import extract_document_set
from tradecheck.core.fixplan import apply_all_blocking_fixes, apply_answer, apply_fix
from tradecheck.core.questions import answer_question, generate_questions


def test_totals_reconcile_after_fix(documents):
    result = apply_fix(documents, "TOTALS_MISMATCH", 8850)

    assert result.applied
    assert result.updated_document_kinds == ("CommercialInvoice",)
    assert detect(result.new_document_set).totals_diff.total_status == "OK"
    assert result.new_document_set.version("CommercialInvoice") == 2
    assert result.new_document_set.version("Quotation") == 1


def test_fix_is_copy_on_write(documents):
    apply_fix(documents, "TOTALS_MISMATCH", 8850)

    assert documents.get("CommercialInvoice").totals.grand_total == 8510
    assert documents.version("CommercialInvoice") == 1


def test_stale_fix_is_a_no_op(documents):
    result = apply_fix(documents, "DESTINATION_MISMATCH", "Long Beach")

    assert result.stale
    assert not result.applied
    assert result.new_document_set is documents
    assert result.updated_document_kinds == ()


def test_scalar_fix_reports_changes(documents):
    result = apply_fix(documents, "INCOTERMS_MISMATCH")

    assert result.updated_document_kinds == ("Quotation",)
    assert len(result.changes) == 1
    change = result.changes[0]
    assert change.field == "terms.incoterms"
    assert change.old_value == "FOB Incheon"
    assert change.new_value == "CIF Los Angeles"
    assert change.affected_documents == ("Quotation",)
    assert detect(result.new_document_set).finding("INCOTERMS_MISMATCH") is None


def test_quantity_fix_recomputes_amount(documents):
    result = apply_fix(documents, "QTY_MISMATCH")
    invoice = result.new_document_set.get("CommercialInvoice")

    assert result.updated_document_kinds == ("CommercialInvoice",)
    assert invoice.item("SKU001").quantity == 500
    assert invoice.item("SKU001").amount == 6000
    assert [change.field for change in result.changes] == ["items[SKU001].quantity"]
    assert result.changes[0].old_value == 480


def test_quantity_fix_adds_and_removes_skus(raw_documents):
    raw_documents["Quotation"]["items"].append(
        {"skuId": "SKU003", "name": "Toner", "qty": 100, "unitPrice": 9, "amount": 900}
    )
    raw_documents["CommercialInvoice"]["lineItems"].append(
        {"sku": "SKU009", "description": "Sample kit", "quantity": 5, "unitPrice": 0, "amount": 0}
    )
    documents = extract_document_set(raw_documents)
    result = apply_fix(documents, "QTY_MISMATCH")
    invoice = result.new_document_set.get("CommercialInvoice")
    packing = result.new_document_set.get("PackingList")

    assert invoice.item("SKU009") is None
    assert invoice.item("SKU003").quantity == 100
    assert invoice.item("SKU003").unit_price == 9
    assert invoice.item("SKU003").amount == 900
    assert packing.item("SKU003").quantity == 100
    assert packing.item("SKU003").unit_price is None
    assert detect(result.new_document_set).finding("QTY_MISMATCH") is None


def test_price_fix(documents):
    result = apply_fix(documents, "PRICE_MISMATCH")
    invoice = result.new_document_set.get("CommercialInvoice")

    assert invoice.item("SKU002").unit_price == 12.5
    assert invoice.item("SKU002").amount == 2500
    assert detect(result.new_document_set).finding("PRICE_MISMATCH") is None


def test_invalid_value_is_rejected(documents):
    with pytest.raises(ValueError):
        apply_fix(documents, "TOTALS_MISMATCH", "about right")
    with pytest.raises(ValueError):
        apply_fix(documents, "QTY_MISMATCH", 500)


def test_apply_answer(documents):
    findings = detect(documents).findings
    questions = generate_questions(findings, diagnose_all(findings, documents), documents)
    question = next(item for item in questions if item.finding_id == "PAYMENT_MISMATCH")
    option = next(index for index, item in enumerate(question.options) if item.value == "30/70")

    result = apply_answer(documents, answer_question(question, option))

    assert result.updated_document_kinds == ("Contract",)
    assert result.new_document_set.get("Contract").terms.payment_split == "30/70"


def test_bulk_fix_resolves_all_blocking(documents):
    result = apply_all_blocking_fixes(documents)
    after = detect(result.new_document_set)

    assert result.applied_count >= 5
    assert after.summary.blocking_count == 0
    assert after.summary.score == 100
    assert result.skipped_finding_ids == ()


def test_bulk_fix_is_idempotent(documents, divergent_documents):
    for document_set in (documents, divergent_documents):
        first = apply_all_blocking_fixes(document_set)
        second = apply_all_blocking_fixes(first.new_document_set)

        assert second.applied_count == 0
        assert second.new_document_set == first.new_document_set


def test_bulk_fix_leaves_warnings(divergent_documents):
    after = detect(apply_all_blocking_fixes(divergent_documents).new_document_set)

    assert after.summary.blocking_count == 0
    assert {finding.id for finding in after.findings} == {"LEADTIME_MISMATCH", "DESTINATION_MISMATCH"}


def test_fixing_blocking_finding_never_lowers_score(documents, divergent_documents):
    for document_set in (documents, divergent_documents):
        before = detect(document_set)
        for finding in before.findings:
            if finding.severity != "BLOCKING":
                continue
            fixed = apply_fix(document_set, finding.id)
            assert detect(fixed.new_document_set).summary.score >= before.summary.score


def test_answer_for_a_field_the_finding_no_longer_covers_is_stale(documents):
    findings = detect(documents).findings
    questions = generate_questions(findings, diagnose_all(findings, documents), documents)
    question = next(item for item in questions if item.finding_id == "TOTALS_MISMATCH")
    answer = answer_question(question, 0)
    moved = apply_fix(documents, "TOTALS_MISMATCH", 8850).new_document_set

    assert answer.field_path == "totals.grand_total"
    assert detect(moved).finding("TOTALS_MISMATCH").field_path == "totals.subtotal"

    result = apply_answer(moved, answer)

    assert result.stale
    assert not result.applied
    assert result.new_document_set is moved
    assert moved.get("CommercialInvoice").totals.subtotal == 8060
    assert moved.get("Quotation").totals.subtotal == 8500


def test_bulk_fix_keeps_items_without_source_quantity(raw_documents):
    del raw_documents["Quotation"]["items"][1]["qty"]
    result = apply_all_blocking_fixes(extract_document_set(raw_documents))
    invoice = result.new_document_set.get("CommercialInvoice")
    packing = result.new_document_set.get("PackingList")

    assert [item.sku_id for item in invoice.items] == ["SKU001", "SKU002"]
    assert [item.sku_id for item in packing.items] == ["SKU001", "SKU002"]
    assert invoice.item("SKU001").quantity == 500
    assert invoice.item("SKU002").quantity == 200
    assert detect(result.new_document_set).finding("QTY_MISMATCH") is None


def test_bulk_fix_is_not_blocked_by_missing_unit_price(raw_documents):
    del raw_documents["CommercialInvoice"]["lineItems"][1]["unitPrice"]
    result = apply_all_blocking_fixes(extract_document_set(raw_documents))

    assert result.skipped_finding_ids == ()
    assert detect(result.new_document_set).summary.blocking_count == 0


def test_quantity_fix_merges_split_lines(raw_documents):
    lines = raw_documents["CommercialInvoice"]["lineItems"]
    lines[0].update(quantity=300, amount=3600)
    lines.append({"sku": "SKU001", "description": "Hydrating Serum", "quantity": 100, "unitPrice": 12, "amount": 1200})
    result = apply_fix(extract_document_set(raw_documents), "QTY_MISMATCH")
    invoice = result.new_document_set.get("CommercialInvoice")

    assert [item.sku_id for item in invoice.items] == ["SKU001", "SKU002"]
    assert invoice.item("SKU001").quantity == 500
    assert invoice.item("SKU001").amount == 6000
    assert [(change.field, change.old_value) for change in result.changes] == [("items[SKU001].quantity", 400)]
    assert detect(result.new_document_set).finding("QTY_MISMATCH") is None

"""Cross-document mismatch detection.

``detect`` is a pure function of the document set: the same set always
yields the same findings, in the order of ``rules.CHECKS``.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Any, Dict, List, Optional, Sequence, Set, Tuple

from tradecheck.core.models import (
    COMMERCIAL_INVOICE,
    PACKING_LIST,
    QUOTATION,
    CalculationIssue,
    CanonicalFields,
    CrossCheckResult,
    CrossCheckSummary,
    DetectedValue,
    DocumentSet,
    Finding,
    FixAction,
    ItemDiffRow,
    MissingDocSuggestion,
    TotalsDiff,
)
from tradecheck.core.rules import (
    BLOCKING_PENALTY,
    CHECK_COUNT,
    CHECKS,
    ITEM_DOCUMENTS,
    MISSING_DOCUMENT_SUGGESTIONS,
    PRICE_DOCUMENTS,
    TOLERANCE,
    TOTALS_DOCUMENTS,
    WARNING_PENALTY,
    CheckRule,
    document_label,
    priority_rule_for,
)
from tradecheck.utils.normalize import format_value, is_number

logger = logging.getLogger(__name__)


def comparison_key(value: Any) -> Any:
    """Numbers by value, strings verbatim, mappings structurally."""
    if is_number(value):
        return ("num", float(value))
    if isinstance(value, dict):
        return ("map", tuple(sorted((str(k), comparison_key(v)) for k, v in value.items())))
    return ("str", value)


def values_equal(left: Any, right: Any) -> bool:
    return comparison_key(left) == comparison_key(right)


def distinct_values(detected: Tuple[DetectedValue, ...]) -> List[Tuple[Any, Tuple[str, ...]]]:
    """Distinct observed values in first-seen order, with the documents holding each."""
    grouped: Dict[Any, Tuple[Any, List[str]]] = {}
    for entry in detected:
        key = comparison_key(entry.value)
        if key not in grouped:
            grouped[key] = (entry.value, [])
        grouped[key][1].append(entry.document)
    return [(value, tuple(documents)) for value, documents in grouped.values()]


def _typed(value: Any, value_type: str, kind: str, path: str) -> Any:
    if value is None:
        return None
    if value_type == "number" and not is_number(value):
        logger.warning("%s: %s=%r is not a number, skipped for comparison", kind, path, value)
        return None
    if value_type == "text":
        if not isinstance(value, str):
            logger.warning("%s: %s=%r is not text, skipped for comparison", kind, path, value)
            return None
        if not value:
            return None
    return value


def collect_values(documents: DocumentSet, path: str, value_type: str = "text") -> Tuple[DetectedValue, ...]:
    collected: List[DetectedValue] = []
    for kind in documents.kinds():
        value = _typed(documents.get(kind).value_at(path), value_type, kind, path)
        if value is not None:
            collected.append(DetectedValue(document=kind, value=value))
    return tuple(collected)


def unobserved_skus(documents: DocumentSet, attribute: str, kinds: Sequence[str]) -> Set[str]:
    """SKUs with a line whose ``attribute`` is undefined in one of ``kinds``; these are not compared."""
    skus: Set[str] = set()
    for kind in kinds:
        fields = documents.get(kind)
        if fields is None:
            continue
        skus.update(item.sku_id for item in fields.items if not is_number(getattr(item, attribute)))
    return skus


def _item_values(
    fields: CanonicalFields,
    attribute: str,
    kind: str,
    skus: Optional[Set[str]] = None,
    skip: AbstractSet[str] = frozenset(),
) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for item in fields.items:
        if item.sku_id in skip or (skus is not None and item.sku_id not in skus):
            continue
        value = _typed(getattr(item, attribute), "number", kind, f"items[{item.sku_id}].{attribute}")
        if value is None:
            continue
        if item.sku_id not in values:
            values[item.sku_id] = value
        elif attribute == "quantity":
            logger.info("%s: %s is listed on several lines, quantities summed", kind, item.sku_id)
            values[item.sku_id] += value
        elif not values_equal(values[item.sku_id], value):
            logger.warning("%s: %s is listed with different %s values, first line kept", kind, item.sku_id, attribute)
    return values


def collect_item_values(documents: DocumentSet, attribute: str) -> Tuple[DetectedValue, ...]:
    """Per-document ``{sku_id: value}`` maps for the item check on ``attribute``."""
    if attribute == "unit_price":
        kinds = [kind for kind in PRICE_DOCUMENTS if documents.has(kind)]
        if len(kinds) < 2:
            return ()
        common = set.intersection(*({item.sku_id for item in documents.get(kind).items} for kind in kinds))
    else:
        kinds = [kind for kind in ITEM_DOCUMENTS if documents.has(kind)]
        common = None
    skip = unobserved_skus(documents, attribute, kinds)
    collected: List[DetectedValue] = []
    for kind in kinds:
        values = _item_values(documents.get(kind), attribute, kind, common, skip)
        if values:
            collected.append(DetectedValue(document=kind, value=values))
    return tuple(collected)


def totals_field_path(documents: DocumentSet) -> str:
    """Grand total when grand totals disagree, otherwise the subtotal."""
    grand = collect_values(_totals_only(documents), "totals.grand_total", "number")
    if len(distinct_values(grand)) > 1:
        return "totals.grand_total"
    subtotal = collect_values(_totals_only(documents), "totals.subtotal", "number")
    if len(distinct_values(subtotal)) > 1:
        return "totals.subtotal"
    return "totals.grand_total"


def _totals_only(documents: DocumentSet) -> DocumentSet:
    return DocumentSet(
        documents={kind: documents.get(kind) for kind in TOTALS_DOCUMENTS if documents.has(kind)},
        versions=documents.versions,
    )


def observed_values(check: CheckRule, documents: DocumentSet) -> Tuple[str, Tuple[DetectedValue, ...]]:
    """Field path and observed values a check compares."""
    if check.kind == "items":
        attribute = check.field_path.split(".", 1)[1]
        return check.field_path, collect_item_values(documents, attribute)
    if check.kind == "totals":
        path = totals_field_path(documents)
        return path, collect_values(_totals_only(documents), path, "number")
    return check.field_path, collect_values(documents, check.field_path, check.value_type)


def recommended_source(field_path: str, detected: Tuple[DetectedValue, ...]) -> Tuple[Optional[str], Any]:
    """First document in the priority list holding a value, else the first observed."""
    observed = {entry.document: entry.value for entry in detected}
    for kind in priority_rule_for(field_path).priority:
        if kind in observed:
            return kind, observed[kind]
    if detected:
        return detected[0].document, detected[0].value
    return None, None


def _fix_actions(field_path: str, detected: Tuple[DetectedValue, ...]) -> Tuple[FixAction, ...]:
    actions: List[FixAction] = []
    for value, kinds in distinct_values(detected):
        actions.append(
            FixAction(
                type="APPLY_VALUE",
                label=f"Match the {document_label(kinds[0])} value ({format_value(value)})",
                field_path=field_path,
                value=value,
                source_document=kinds[0],
            )
        )
    actions.append(FixAction(type="MANUAL_REVIEW", label="Review manually", field_path=field_path))
    return tuple(actions)


def _recommendation(check: CheckRule, source: Optional[str], value: Any) -> str:
    if source is None:
        return ""
    if check.kind == "items":
        noun = "quantity" if check.field_path.endswith("quantity") else "unit price"
        return f"Unify to {source} {noun}"
    return f"Unify to {source} value ({format_value(value)})"


def _description(check: CheckRule, detected: Tuple[DetectedValue, ...]) -> str:
    if check.kind != "items":
        return check.description
    skus = set()
    baseline = detected[0].value
    for entry in detected[1:]:
        for sku in set(baseline) | set(entry.value):
            if sku not in baseline or sku not in entry.value or not values_equal(baseline[sku], entry.value[sku]):
                skus.add(sku)
    return f"{check.description} ({len(skus)} SKU(s) affected)"


def run_check(check: CheckRule, documents: DocumentSet) -> Optional[Finding]:
    field_path, detected = observed_values(check, documents)
    if len(detected) < 2 or len(distinct_values(detected)) < 2:
        return None
    source, value = recommended_source(field_path, detected)
    return Finding(
        id=check.finding_id,
        severity=check.severity,
        field_path=field_path,
        title=check.title,
        description=_description(check, detected),
        impact=check.impact,
        detected_values=detected,
        recommended_value=value,
        recommendation=_recommendation(check, source, value),
        fix_actions=_fix_actions(field_path, detected),
    )


def _accumulate(row: Dict[str, Any], key: str, value: Any) -> None:
    current = row.get(key)
    if not is_number(value):
        row[key] = current
    elif current is None:
        row[key] = value
    else:
        row[key] = current + value


def _first_defined(row: Dict[str, Any], key: str, value: Any) -> None:
    if row.get(key) is None:
        row[key] = value


def build_item_diff(documents: DocumentSet) -> Tuple[ItemDiffRow, ...]:
    compared = [kind for kind in ITEM_DOCUMENTS if documents.has(kind)]
    rows: Dict[str, Dict[str, Any]] = {}
    for kind in compared:
        for item in documents.get(kind).items:
            row = rows.setdefault(item.sku_id, {"sku_id": item.sku_id, "name": item.name, "present": set()})
            row["name"] = row["name"] or item.name
            row["present"].add(kind)
            if kind == QUOTATION:
                _accumulate(row, "qty_quotation", item.quantity)
                _first_defined(row, "unit_price_quotation", item.unit_price)
            elif kind == COMMERCIAL_INVOICE:
                _accumulate(row, "qty_invoice", item.quantity)
                _first_defined(row, "unit_price_invoice", item.unit_price)
            elif kind == PACKING_LIST:
                _accumulate(row, "qty_packing_list", item.quantity)

    result: List[ItemDiffRow] = []
    for row in rows.values():
        present = row.pop("present")
        if len(present) < len(compared):
            status = "MISSING"
        else:
            quantities = [row.get(key) for key in ("qty_quotation", "qty_invoice", "qty_packing_list")]
            quantities = [qty for qty in quantities if is_number(qty)]
            prices = [row.get(key) for key in ("unit_price_quotation", "unit_price_invoice")]
            prices = [price for price in prices if is_number(price)]
            qty_differs = len({comparison_key(qty) for qty in quantities}) > 1
            price_differs = len(prices) == 2 and not values_equal(prices[0], prices[1])
            status = "MISMATCH" if qty_differs or price_differs else "OK"
        result.append(ItemDiffRow(status=status, **row))
    return tuple(result)


def _total(fields: Optional[CanonicalFields], name: str) -> Optional[float]:
    if fields is None:
        return None
    value = getattr(fields.totals, name)
    return value if is_number(value) else None


def _diff_status(left: Optional[float], right: Optional[float], both_present: bool) -> str:
    if not both_present or left is None or right is None:
        return "MISSING"
    return "OK" if values_equal(left, right) else "MISMATCH"


def build_totals_diff(documents: DocumentSet) -> TotalsDiff:
    quotation = documents.get(QUOTATION)
    invoice = documents.get(COMMERCIAL_INVOICE)
    both = quotation is not None and invoice is not None
    q_sub, i_sub = _total(quotation, "subtotal"), _total(invoice, "subtotal")
    q_total, i_total = _total(quotation, "grand_total"), _total(invoice, "grand_total")
    return TotalsDiff(
        quotation_subtotal=q_sub,
        invoice_subtotal=i_sub,
        quotation_total=q_total,
        invoice_total=i_total,
        subtotal_status=_diff_status(q_sub, i_sub, both),
        total_status=_diff_status(q_total, i_total, both),
    )


def find_calculation_issues(documents: DocumentSet) -> Tuple[CalculationIssue, ...]:
    issues: List[CalculationIssue] = []
    for kind in documents.kinds():
        fields = documents.get(kind)
        for item in fields.items:
            if not (is_number(item.quantity) and is_number(item.unit_price) and is_number(item.amount)):
                continue
            if kind == PACKING_LIST and not item.unit_price:
                continue
            expected = round(item.quantity * item.unit_price, 2)
            if abs(expected - item.amount) > TOLERANCE:
                issues.append(
                    CalculationIssue(kind, f"items[{item.sku_id}].amount", expected, item.amount, "amount = quantity x unit_price")
                )
        totals = fields.totals
        if is_number(totals.subtotal) and is_number(totals.grand_total):
            extras = [value for value in (totals.shipping, totals.insurance) if is_number(value)]
            expected = round(totals.subtotal + sum(extras), 2)
            if abs(expected - totals.grand_total) > TOLERANCE:
                issues.append(
                    CalculationIssue(
                        kind,
                        "totals.grand_total",
                        expected,
                        totals.grand_total,
                        "grand_total = subtotal + shipping + insurance",
                    )
                )
    return tuple(issues)


def find_missing_documents(documents: DocumentSet) -> Tuple[MissingDocSuggestion, ...]:
    return tuple(
        MissingDocSuggestion(document=kind, suggestion=suggestion)
        for kind, suggestion in MISSING_DOCUMENT_SUGGESTIONS.items()
        if not documents.has(kind)
    )


def score(blocking_count: int, warning_count: int) -> int:
    return max(0, 100 - BLOCKING_PENALTY * blocking_count - WARNING_PENALTY * warning_count)


def detect(documents: DocumentSet) -> CrossCheckResult:
    findings: List[Finding] = []
    for check in CHECKS:
        finding = run_check(check, documents)
        if finding is not None:
            findings.append(finding)

    blocking_count = sum(1 for finding in findings if finding.severity == "BLOCKING")
    warning_count = sum(1 for finding in findings if finding.severity == "WARNING")
    summary = CrossCheckSummary(
        blocking_count=blocking_count,
        warning_count=warning_count,
        ok_count=CHECK_COUNT - blocking_count - warning_count,
        score=score(blocking_count, warning_count),
    )
    logger.debug(
        "Cross-check over %s: %d blocking, %d warning, score %d",
        ",".join(documents.kinds()) or "-",
        blocking_count,
        warning_count,
        summary.score,
    )
    return CrossCheckResult(
        summary=summary,
        findings=tuple(findings),
        missing_docs=find_missing_documents(documents),
        item_diff=build_item_diff(documents),
        totals_diff=build_totals_diff(documents),
        calculation_issues=find_calculation_issues(documents),
    )

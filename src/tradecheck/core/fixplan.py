"""Fix application: propagate a chosen value into every document that holds the field.

Document sets are never edited in place. Each applied fix returns a new set
whose changed documents carry an incremented version.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Tuple

from tradecheck.core.detector import comparison_key, detect, unobserved_skus, values_equal
from tradecheck.core.diagnosis import diagnose
from tradecheck.core.models import (
    BulkFixResult,
    CanonicalFields,
    ConfirmationAnswer,
    DocumentSet,
    FieldChange,
    Finding,
    FixResult,
    LineItem,
)
from tradecheck.core.rules import CHECKS, ITEM_DOCUMENTS, PRICE_DOCUMENTS, check_for
from tradecheck.utils.normalize import is_number, parse_number

logger = logging.getLogger(__name__)

# Totals can need two passes: grand total first, then subtotal.
MAX_ATTEMPTS_PER_FINDING = 3


def _line_amount(quantity: Any, unit_price: Any, current: Any) -> Any:
    if not (is_number(quantity) and is_number(unit_price)):
        return current
    return round(quantity * unit_price, 2)


def _coerce_scalar(finding: Finding, value: Any) -> Any:
    check = check_for(finding.id)
    if (check is not None and check.value_type == "number") or finding.field_path.startswith("totals."):
        number = parse_number(value)
        if number is None:
            raise ValueError(f"{finding.id} expects a number, got {value!r}")
        return number
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{finding.id} expects text, got {value!r}")
    return value.strip()


def _coerce_item_map(finding: Finding, value: Any) -> Dict[str, Any]:
    if not isinstance(value, Mapping) or not value:
        raise ValueError(f"{finding.id} expects a mapping of sku -> value, got {value!r}")
    coerced: Dict[str, Any] = {}
    for sku_id, raw in value.items():
        number = parse_number(raw)
        if number is None:
            raise ValueError(f"{finding.id}: value for {sku_id} is not a number ({raw!r})")
        coerced[str(sku_id)] = number
    return coerced


def _group_changes(field: str, olds: List[Tuple[str, Any]], new_value: Any) -> List[FieldChange]:
    grouped: Dict[Any, Tuple[Any, List[str]]] = {}
    for kind, old in olds:
        key = comparison_key(old)
        if key not in grouped:
            grouped[key] = (old, [])
        grouped[key][1].append(kind)
    return [
        FieldChange(field=field, old_value=old, new_value=new_value, affected_documents=tuple(kinds))
        for old, kinds in grouped.values()
    ]


def _apply_scalar(
    documents: DocumentSet, path: str, value: Any
) -> Tuple[Dict[str, CanonicalFields], List[FieldChange]]:
    updates: Dict[str, CanonicalFields] = {}
    olds: List[Tuple[str, Any]] = []
    for kind in documents.kinds():
        fields = documents.get(kind)
        current = fields.value_at(path)
        if current is None or values_equal(current, value):
            continue
        updates[kind] = fields.with_value(path, value)
        olds.append((kind, current))
    return updates, _group_changes(path, olds, value)


def _donor_item(documents: DocumentSet, sku_id: str) -> LineItem:
    for kind in ITEM_DOCUMENTS:
        fields = documents.get(kind)
        if fields is not None and fields.item(sku_id) is not None:
            return fields.item(sku_id)
    return LineItem(sku_id=sku_id)


def _quantity_total(lines: List[LineItem]) -> Any:
    quantities = [line.quantity for line in lines if is_number(line.quantity)]
    if len(quantities) == 1:
        return quantities[0]
    return sum(quantities)


def _item_changes(attribute: str, per_sku: Dict[str, List[Tuple[str, Any]]], values: Dict[str, Any]) -> List[FieldChange]:
    changes: List[FieldChange] = []
    for sku_id, olds in per_sku.items():
        changes.extend(_group_changes(f"items[{sku_id}].{attribute}", olds, values.get(sku_id)))
    return changes


def _apply_quantities(
    documents: DocumentSet, quantities: Dict[str, Any]
) -> Tuple[Dict[str, CanonicalFields], List[FieldChange]]:
    updates: Dict[str, CanonicalFields] = {}
    per_sku: Dict[str, List[Tuple[str, Any]]] = {}
    # SKUs lacking a quantity in any document are left untouched
    unobserved = unobserved_skus(documents, "quantity", ITEM_DOCUMENTS)
    for kind in ITEM_DOCUMENTS:
        fields = documents.get(kind)
        if fields is None or not any(is_number(item.quantity) for item in fields.items):
            continue
        lines: Dict[str, List[LineItem]] = {}
        for item in fields.items:
            lines.setdefault(item.sku_id, []).append(item)
        items: List[LineItem] = []
        for item in fields.items:
            group = lines[item.sku_id]
            if item.sku_id in unobserved:
                items.append(item)
                continue
            total = _quantity_total(group)
            if item.sku_id not in quantities:
                # dropped: the chosen quantities do not list this SKU
                if item is group[0]:
                    per_sku.setdefault(item.sku_id, []).append((kind, total))
                continue
            quantity = quantities[item.sku_id]
            if values_equal(total, quantity):
                items.append(item)
                continue
            if item is not group[0]:
                # merged into the first line of the SKU
                continue
            per_sku.setdefault(item.sku_id, []).append((kind, total))
            items.append(replace(item, quantity=quantity, amount=_line_amount(quantity, item.unit_price, item.amount)))
        for sku_id, quantity in quantities.items():
            if sku_id in lines:
                continue
            donor = _donor_item(documents, sku_id)
            unit_price = donor.unit_price if kind in PRICE_DOCUMENTS else None
            items.append(
                replace(
                    donor,
                    quantity=quantity,
                    unit_price=unit_price,
                    amount=_line_amount(quantity, unit_price, None),
                )
            )
            per_sku.setdefault(sku_id, []).append((kind, None))
        if tuple(items) != fields.items:
            updates[kind] = replace(fields, items=tuple(items))
    return updates, _item_changes("quantity", per_sku, quantities)


def _apply_prices(
    documents: DocumentSet, prices: Dict[str, Any]
) -> Tuple[Dict[str, CanonicalFields], List[FieldChange]]:
    updates: Dict[str, CanonicalFields] = {}
    per_sku: Dict[str, List[Tuple[str, Any]]] = {}
    for kind in PRICE_DOCUMENTS:
        fields = documents.get(kind)
        if fields is None:
            continue
        items: List[LineItem] = []
        for item in fields.items:
            price = prices.get(item.sku_id)
            if price is not None and is_number(item.unit_price) and not values_equal(item.unit_price, price):
                per_sku.setdefault(item.sku_id, []).append((kind, item.unit_price))
                item = replace(item, unit_price=price, amount=_line_amount(item.quantity, price, item.amount))
            items.append(item)
        if tuple(items) != fields.items:
            updates[kind] = replace(fields, items=tuple(items))
    return updates, _item_changes("unit_price", per_sku, prices)


def _apply_to_finding(documents: DocumentSet, finding: Finding, value: Any) -> FixResult:
    if finding.field_path == "items.quantity":
        updates, changes = _apply_quantities(documents, _coerce_item_map(finding, value))
    elif finding.field_path == "items.unit_price":
        updates, changes = _apply_prices(documents, _coerce_item_map(finding, value))
    else:
        updates, changes = _apply_scalar(documents, finding.field_path, _coerce_scalar(finding, value))

    if not updates:
        return FixResult(finding_id=finding.id, updated_document_kinds=(), new_document_set=documents)
    new_documents = documents.with_updates(updates)
    updated = tuple(kind for kind in new_documents.kinds() if kind in updates)
    logger.info(
        "Applied %s on %s: %s",
        finding.id,
        finding.field_path,
        ", ".join(f"{kind} v{new_documents.version(kind)}" for kind in updated),
    )
    return FixResult(
        finding_id=finding.id,
        updated_document_kinds=updated,
        new_document_set=new_documents,
        changes=tuple(changes),
        applied=True,
    )


def apply_fix(documents: DocumentSet, finding_id: str, chosen_value: Any = None) -> FixResult:
    """Write ``chosen_value`` for ``finding_id`` into every document that defines the field.

    Detection runs first against ``documents``: when the finding is no longer
    reported the request is stale and the same set comes back unchanged.
    ``chosen_value=None`` applies the diagnosed source-of-truth value.
    """
    finding = detect(documents).finding(finding_id)
    if finding is None:
        logger.info("Fix for %s is stale: finding not present in current documents", finding_id)
        return FixResult(finding_id=finding_id, updated_document_kinds=(), new_document_set=documents, stale=True)
    if chosen_value is None:
        chosen_value = diagnose(finding, documents).resolution.source_value
    return _apply_to_finding(documents, finding, chosen_value)


def apply_answer(documents: DocumentSet, answer: ConfirmationAnswer) -> FixResult:
    """Apply a confirmation answer, only while its finding still covers the answered field."""
    finding = detect(documents).finding(answer.finding_id)
    if finding is not None and finding.field_path != answer.field_path:
        logger.info(
            "Answer for %s is stale: asked about %s, finding now covers %s",
            answer.finding_id,
            answer.field_path,
            finding.field_path,
        )
        return FixResult(
            finding_id=answer.finding_id, updated_document_kinds=(), new_document_set=documents, stale=True
        )
    return apply_fix(documents, answer.finding_id, answer.selected_value)


def apply_all_blocking_fixes(documents: DocumentSet) -> BulkFixResult:
    """Resolve every BLOCKING finding with its diagnosed value, in detection order.

    Each step re-detects against the progressively updated set, so later
    fixes observe earlier ones. Running it again on its own output applies
    nothing.
    """
    current = documents
    applied_count = 0
    changes: List[FieldChange] = []
    updated: set = set()
    skipped: List[str] = []
    for check in CHECKS:
        if check.severity != "BLOCKING":
            continue
        for _ in range(MAX_ATTEMPTS_PER_FINDING):
            finding = detect(current).finding(check.finding_id)
            if finding is None:
                break
            value = diagnose(finding, current).resolution.source_value
            result = _apply_to_finding(current, finding, value)
            if not result.applied:
                skipped.append(finding.id)
                break
            current = result.new_document_set
            applied_count += 1
            changes.extend(result.changes)
            updated.update(result.updated_document_kinds)

    if applied_count:
        logger.info("Applied %d blocking fix(es), %d skipped", applied_count, len(skipped))
    return BulkFixResult(
        updated_document_kinds=tuple(kind for kind in current.kinds() if kind in updated),
        new_document_set=current,
        applied_count=applied_count,
        changes=tuple(changes),
        skipped_finding_ids=tuple(skipped),
    )


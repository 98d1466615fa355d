"""Structured document content -> canonical fields (field-path normalization)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from tradecheck.core.models import (
    COMMERCIAL_INVOICE,
    CONTRACT,
    DOCUMENT_KINDS,
    PACKING_LIST,
    QUOTATION,
    CanonicalFields,
    DocumentSet,
    LineItem,
    Party,
    Shipment,
    Terms,
    Totals,
)
from tradecheck.utils.normalize import normalize_text, parse_date_to_iso, parse_number

logger = logging.getLogger(__name__)

NUMBER_FIELDS = {
    "terms.validity_days",
    "shipment.lead_time_days",
    "totals.subtotal",
    "totals.shipping",
    "totals.insurance",
    "totals.grand_total",
}

DATE_FIELDS = {"shipment.delivery_date"}

# Accepted on every document kind, checked after the kind-specific aliases.
COMMON_ALIASES: Dict[str, List[str]] = {
    "buyer.name": ["buyer.name", "buyer.companyName", "buyer.company_name", "buyer.legalName"],
    "buyer.contact": ["buyer.contact", "buyer.contactName", "buyer.contact_name"],
    "buyer.address": ["buyer.address", "buyer.addressLine1", "buyer.address_line1"],
    "buyer.city": ["buyer.city"],
    "buyer.country": ["buyer.country"],
    "buyer.email": ["buyer.email"],
    "buyer.phone": ["buyer.phone"],
    "seller.name": ["seller.name", "seller.legalName", "seller.legal_name", "seller.companyName"],
    "seller.contact": ["seller.contact", "seller.contactName"],
    "seller.address": ["seller.address", "seller.addressLine1", "seller.address_line1"],
    "seller.city": ["seller.city"],
    "seller.country": ["seller.country"],
    "seller.email": ["seller.email"],
    "seller.phone": ["seller.phone"],
    "terms.incoterms": ["terms.incoterms", "incoterms"],
    "terms.payment_method": ["terms.payment_method", "terms.paymentMethod", "paymentMethod"],
    "terms.payment_split": ["terms.payment_split", "terms.paymentSplit", "paymentSplit"],
    "terms.currency": ["terms.currency", "currency"],
    "terms.validity_days": ["terms.validity_days", "terms.validityDays"],
    "shipment.destination_country": [
        "shipment.destination_country",
        "shipment.shipToCountry",
        "shipment.destinationCountry",
    ],
    "shipment.destination_city": ["shipment.destination_city", "shipment.shipToCity", "shipment.destinationCity"],
    "shipment.destination_port": [
        "shipment.destination_port",
        "shipment.destinationPort",
        "shipment.portOfDischarge",
    ],
    "shipment.lead_time_days": ["shipment.lead_time_days", "shipment.leadTimeDays", "leadTimeDays"],
    "shipment.delivery_date": ["shipment.delivery_date", "shipment.deliveryDate"],
    "totals.subtotal": ["totals.subtotal", "totals.subTotal"],
    "totals.shipping": ["totals.shipping", "totals.freight"],
    "totals.insurance": ["totals.insurance"],
    "totals.grand_total": ["totals.grand_total", "totals.grandTotal", "totals.total", "totals.totalAmount"],
}

KIND_ALIASES: Dict[str, Dict[str, List[str]]] = {
    QUOTATION: {
        "terms.validity_days": ["validity.days", "validUntilDays"],
    },
    CONTRACT: {
        "seller.name": ["parties.seller.legalName", "parties.seller.name"],
        "buyer.name": ["parties.buyer.legalName", "parties.buyer.name"],
        "buyer.address": ["parties.buyer.address"],
        "terms.incoterms": ["deliveryTerms.incoterms"],
        "terms.payment_method": ["paymentTerms.method"],
        "terms.payment_split": ["paymentTerms.split"],
        "shipment.lead_time_days": ["deliveryTerms.leadTimeDays"],
    },
    COMMERCIAL_INVOICE: {
        "seller.name": ["exporter.name", "shipper.name"],
        "seller.address": ["exporter.address", "shipper.address"],
        "buyer.name": ["consignee.name", "importer.name"],
        "buyer.address": ["consignee.address", "importer.address"],
        "buyer.country": ["consignee.country"],
        "shipment.destination_port": ["portOfDischarge", "finalDestination"],
    },
    PACKING_LIST: {
        "seller.name": ["shipper.name", "exporter.name"],
        "buyer.name": ["consignee.name"],
        "buyer.address": ["consignee.address"],
        "shipment.destination_port": ["portOfDischarge", "finalDestination"],
    },
}

ITEM_LIST_KEYS = ["items", "lineItems", "line_items", "goods", "packages"]

ITEM_ALIASES: Dict[str, List[str]] = {
    "sku_id": ["sku_id", "skuId", "sku", "itemCode", "code"],
    "name": ["name", "skuName", "sku_name", "description", "productName"],
    "hs_code": ["hs_code", "hsCode"],
    "quantity": ["quantity", "qty"],
    "unit": ["unit", "uom"],
    "unit_price": ["unit_price", "unitPrice", "price"],
    "amount": ["amount", "lineTotal", "total"],
    "packaging": ["packaging", "packing"],
}

ITEM_NUMBER_FIELDS = {"quantity", "unit_price", "amount"}


def _lookup(content: Mapping[str, Any], dotted: str) -> Any:
    current: Any = content
    for part in dotted.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _first_present(content: Mapping[str, Any], paths: List[str]) -> Tuple[Any, Optional[str]]:
    for path in paths:
        value = _lookup(content, path)
        if value is None or value == "":
            continue
        return value, path
    return None, None


def _coerce(path: str, value: Any, kind: str, source_path: Optional[str]) -> Any:
    if value is None:
        return None
    if path in NUMBER_FIELDS:
        number = parse_number(value)
        if number is None:
            logger.warning("%s: %s=%r is not a number, treated as undefined", kind, source_path, value)
        return number
    if path in DATE_FIELDS:
        return parse_date_to_iso(value) or normalize_text(value)
    text = normalize_text(value)
    if text is None:
        logger.warning("%s: %s=%r is not text, treated as undefined", kind, source_path, value)
    return text


def _extract_item(kind: str, index: int, raw: Any) -> Optional[LineItem]:
    if not isinstance(raw, Mapping):
        logger.warning("%s: items[%d] is not an object, skipped", kind, index)
        return None
    values: Dict[str, Any] = {}
    for name, aliases in ITEM_ALIASES.items():
        value, source = _first_present(raw, aliases)
        if value is None:
            values[name] = None
            continue
        if name in ITEM_NUMBER_FIELDS:
            number = parse_number(value)
            if number is None:
                logger.warning("%s: items[%d].%s=%r is not a number, treated as undefined", kind, index, source, value)
            values[name] = number
        else:
            values[name] = normalize_text(value)
    sku_id = values.pop("sku_id") or values.get("name") or f"LINE-{index + 1}"
    return LineItem(sku_id=sku_id, **values)


def _extract_items(kind: str, content: Mapping[str, Any]) -> Tuple[LineItem, ...]:
    raw_items, _ = _first_present(content, ITEM_LIST_KEYS)
    if raw_items is None:
        return ()
    if not isinstance(raw_items, (list, tuple)):
        logger.warning("%s: item list is not an array, treated as empty", kind)
        return ()
    items: List[LineItem] = []
    for index, raw in enumerate(raw_items):
        item = _extract_item(kind, index, raw)
        if item is not None:
            items.append(item)
    return tuple(items)


def extract(kind: str, content: Any) -> CanonicalFields:
    """Map one document's structured content onto the canonical fields.

    Missing source fields come back as ``None``; partially completed drafts
    never raise. Only an unknown document kind is rejected.
    """
    if kind not in DOCUMENT_KINDS:
        raise ValueError(f"Unknown document kind: {kind!r}")
    if isinstance(content, CanonicalFields):
        return content
    if not isinstance(content, Mapping):
        logger.warning("%s: content is not an object, extracted as empty", kind)
        return CanonicalFields()

    kind_aliases = KIND_ALIASES.get(kind, {})
    groups: Dict[str, Dict[str, Any]] = {"buyer": {}, "seller": {}, "terms": {}, "shipment": {}, "totals": {}}
    for path, aliases in COMMON_ALIASES.items():
        value, source = _first_present(content, kind_aliases.get(path, []) + aliases)
        group, _, name = path.partition(".")
        groups[group][name] = _coerce(path, value, kind, source)

    return CanonicalFields(
        buyer=Party(**groups["buyer"]),
        seller=Party(**groups["seller"]),
        terms=Terms(**groups["terms"]),
        shipment=Shipment(**groups["shipment"]),
        items=_extract_items(kind, content),
        totals=Totals(**groups["totals"]),
    )


def extract_document_set(
    raw_documents: Mapping[str, Any],
    versions: Optional[Mapping[str, Any]] = None,
) -> DocumentSet:
    documents: Dict[str, CanonicalFields] = {}
    for kind, content in (raw_documents or {}).items():
        if kind not in DOCUMENT_KINDS:
            logger.warning("Unknown document kind %r ignored", kind)
            continue
        if content is None:
            continue
        documents[kind] = extract(kind, content)

    resolved_versions: Dict[str, int] = {}
    for kind in documents:
        version = parse_number((versions or {}).get(kind))
        resolved_versions[kind] = int(version) if version else 1
    return DocumentSet(documents=documents, versions=resolved_versions)

"""Canonical data models for cross-document consistency checks."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

DocumentKind = Literal["Quotation", "Contract", "CommercialInvoice", "PackingList"]
Severity = Literal["BLOCKING", "WARNING", "OK"]
DiffStatus = Literal["OK", "MISMATCH", "MISSING"]
Audience = Literal["COUNTERPARTY", "INTERNAL", "LOGISTICS"]

QUOTATION: DocumentKind = "Quotation"
CONTRACT: DocumentKind = "Contract"
COMMERCIAL_INVOICE: DocumentKind = "CommercialInvoice"
PACKING_LIST: DocumentKind = "PackingList"

DOCUMENT_KINDS: Tuple[DocumentKind, ...] = (QUOTATION, CONTRACT, COMMERCIAL_INVOICE, PACKING_LIST)


@dataclass(frozen=True)
class LocalizedText:
    en: str
    ko: str

    def get(self, lang: str) -> str:
        if lang == "ko":
            return self.ko
        return self.en


# Canonical fields


@dataclass(frozen=True)
class Party:
    name: Optional[str] = None
    contact: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class Terms:
    incoterms: Optional[str] = None
    payment_method: Optional[str] = None
    payment_split: Optional[str] = None
    currency: Optional[str] = None
    validity_days: Optional[int] = None


@dataclass(frozen=True)
class Shipment:
    destination_country: Optional[str] = None
    destination_city: Optional[str] = None
    destination_port: Optional[str] = None
    lead_time_days: Optional[int] = None
    delivery_date: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    sku_id: str
    name: Optional[str] = None
    hs_code: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    amount: Optional[float] = None
    packaging: Optional[str] = None


@dataclass(frozen=True)
class Totals:
    subtotal: Optional[float] = None
    shipping: Optional[float] = None
    insurance: Optional[float] = None
    grand_total: Optional[float] = None


@dataclass(frozen=True)
class CanonicalFields:
    buyer: Party = field(default_factory=Party)
    seller: Party = field(default_factory=Party)
    terms: Terms = field(default_factory=Terms)
    shipment: Shipment = field(default_factory=Shipment)
    items: Tuple[LineItem, ...] = ()
    totals: Totals = field(default_factory=Totals)

    def value_at(self, path: str) -> Any:
        group, _, name = path.partition(".")
        record = getattr(self, group, None)
        if record is None or not name:
            return record
        return getattr(record, name, None)

    def with_value(self, path: str, value: Any) -> "CanonicalFields":
        group, _, name = path.partition(".")
        record = getattr(self, group)
        return replace(self, **{group: replace(record, **{name: value})})

    def item(self, sku_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.sku_id == sku_id:
                return item
        return None


@dataclass(frozen=True)
class DocumentSet:
    """Documents by kind plus a version counter per kind.

    Never mutated: fixes go through ``with_updates`` which returns a new set.
    """

    documents: Mapping[str, CanonicalFields] = field(default_factory=dict)
    versions: Mapping[str, int] = field(default_factory=dict)

    def get(self, kind: str) -> Optional[CanonicalFields]:
        return self.documents.get(kind)

    def has(self, kind: str) -> bool:
        return self.documents.get(kind) is not None

    def kinds(self) -> Tuple[str, ...]:
        return tuple(kind for kind in DOCUMENT_KINDS if self.has(kind))

    def version(self, kind: str) -> int:
        if not self.has(kind):
            return 0
        return self.versions.get(kind, 1)

    def with_updates(self, updates: Mapping[str, CanonicalFields]) -> "DocumentSet":
        documents = dict(self.documents)
        versions = {kind: self.version(kind) for kind in self.kinds()}
        for kind, fields in updates.items():
            documents[kind] = fields
            versions[kind] = versions.get(kind, 0) + 1
        return DocumentSet(documents=documents, versions=versions)


# Detection results


@dataclass(frozen=True)
class DetectedValue:
    document: str
    value: Any


@dataclass(frozen=True)
class FixAction:
    type: Literal["APPLY_VALUE", "MANUAL_REVIEW"]
    label: str
    field_path: Optional[str] = None
    value: Any = None
    source_document: Optional[str] = None


@dataclass(frozen=True)
class Finding:
    id: str
    severity: Severity
    field_path: str
    title: str
    description: str
    impact: str
    detected_values: Tuple[DetectedValue, ...]
    recommended_value: Any = None
    recommendation: str = ""
    fix_actions: Tuple[FixAction, ...] = ()

    def value_for(self, kind: str) -> Any:
        for detected in self.detected_values:
            if detected.document == kind:
                return detected.value
        return None


@dataclass(frozen=True)
class MissingDocSuggestion:
    document: str
    suggestion: LocalizedText


@dataclass(frozen=True)
class ItemDiffRow:
    sku_id: str
    name: Optional[str]
    qty_quotation: Optional[float] = None
    qty_packing_list: Optional[float] = None
    qty_invoice: Optional[float] = None
    unit_price_quotation: Optional[float] = None
    unit_price_invoice: Optional[float] = None
    status: DiffStatus = "OK"


@dataclass(frozen=True)
class TotalsDiff:
    quotation_subtotal: Optional[float] = None
    invoice_subtotal: Optional[float] = None
    quotation_total: Optional[float] = None
    invoice_total: Optional[float] = None
    subtotal_status: DiffStatus = "MISSING"
    total_status: DiffStatus = "MISSING"


@dataclass(frozen=True)
class CalculationIssue:
    document: str
    location: str
    expected: float
    actual: float
    rule: str


@dataclass(frozen=True)
class CrossCheckSummary:
    blocking_count: int
    warning_count: int
    ok_count: int
    score: int


@dataclass(frozen=True)
class CrossCheckResult:
    summary: CrossCheckSummary
    findings: Tuple[Finding, ...]
    missing_docs: Tuple[MissingDocSuggestion, ...]
    item_diff: Tuple[ItemDiffRow, ...]
    totals_diff: TotalsDiff
    calculation_issues: Tuple[CalculationIssue, ...] = ()

    def finding(self, finding_id: str) -> Optional[Finding]:
        for finding in self.findings:
            if finding.id == finding_id:
                return finding
        return None


# Diagnosis


@dataclass(frozen=True)
class CauseHypothesis:
    cause_id: str
    label: LocalizedText
    probability: float
    evidence: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Resolution:
    source_of_truth: str
    source_value: Any
    action_summary: LocalizedText
    rationale: LocalizedText
    risk_if_ignored: LocalizedText


@dataclass(frozen=True)
class Diagnosis:
    finding_id: str
    field_path: str
    probable_causes: Tuple[CauseHypothesis, ...]
    resolution: Resolution
    communication_needs: Tuple[Audience, ...]
    needs_confirmation: bool

    @property
    def top_probability(self) -> float:
        if not self.probable_causes:
            return 0.0
        return self.probable_causes[0].probability


# Confirmation


@dataclass(frozen=True)
class ConfirmationOption:
    label: str
    value: Any
    source_document: str
    source_documents: Tuple[str, ...] = ()
    recommended: bool = False


@dataclass(frozen=True)
class ConfirmationQuestion:
    id: str
    finding_id: str
    field_path: str
    question: LocalizedText
    options: Tuple[ConfirmationOption, ...]
    severity: Severity = "BLOCKING"


@dataclass(frozen=True)
class ConfirmationAnswer:
    question_id: str
    finding_id: str
    field_path: str
    selected_value: Any
    source_document: Optional[str] = None


# Fix application


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: Any
    new_value: Any
    affected_documents: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FixResult:
    finding_id: str
    updated_document_kinds: Tuple[str, ...]
    new_document_set: DocumentSet
    changes: Tuple[FieldChange, ...] = ()
    applied: bool = False
    stale: bool = False


@dataclass(frozen=True)
class BulkFixResult:
    updated_document_kinds: Tuple[str, ...]
    new_document_set: DocumentSet
    applied_count: int
    changes: Tuple[FieldChange, ...] = ()
    skipped_finding_ids: Tuple[str, ...] = ()


# Communication


@dataclass(frozen=True)
class MessageVariant:
    subject: Optional[str]
    body: str


@dataclass(frozen=True)
class GeneratedMessage:
    audience: Audience
    message_type: Literal["CORRECTION", "CONFIRMATION_REQUEST", "NOTE"]
    subject: Optional[str]
    body: str
    variants: Dict[str, MessageVariant] = field(default_factory=dict)


@dataclass(frozen=True)
class MessageContext:
    project_name: str
    seller_brand_name: str
    counterparty_contact: Optional[str] = None
    counterparty_company: Optional[str] = None
    document_versions: Mapping[str, int] = field(default_factory=dict)
    changes: Tuple[FieldChange, ...] = ()
    impact: Optional[LocalizedText] = None
    language: str = "en"


@dataclass(frozen=True)
class CommunicationKit:
    finding_id: str
    counterparty_correction: Optional[GeneratedMessage] = None
    counterparty_confirmation: Optional[GeneratedMessage] = None
    counterparty_chat: Optional[GeneratedMessage] = None
    internal_note: Optional[GeneratedMessage] = None
    logistics_note: Optional[GeneratedMessage] = None

    def messages(self) -> Tuple[GeneratedMessage, ...]:
        return tuple(
            message
            for message in (
                self.counterparty_correction,
                self.counterparty_confirmation,
                self.counterparty_chat,
                self.internal_note,
                self.logistics_note,
            )
            if message is not None
        )


# Report


@dataclass(frozen=True)
class FixPlanEntry:
    priority: str
    finding_id: str
    severity: Severity
    title: str
    field_path: str
    source_document: str
    value: Any
    target_documents: Tuple[str, ...]


@dataclass(frozen=True)
class ConsistencyReport:
    project_name: str
    result: CrossCheckResult
    diagnoses: Tuple[Diagnosis, ...]
    questions: Tuple[ConfirmationQuestion, ...]
    fix_plan: Tuple[FixPlanEntry, ...]
    communication_kits: Tuple[CommunicationKit, ...]
    ready_to_finalize: bool
    document_versions: Mapping[str, int] = field(default_factory=dict)

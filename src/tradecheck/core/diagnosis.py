"""Root-cause diagnosis and source-of-truth selection for findings."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Set, Tuple

from tradecheck.core.detector import distinct_values, values_equal
from tradecheck.core.models import (
    COMMERCIAL_INVOICE,
    CONTRACT,
    QUOTATION,
    CauseHypothesis,
    Diagnosis,
    DocumentSet,
    Finding,
    LocalizedText,
    Resolution,
)
from tradecheck.core.rules import (
    CAUSE_TEMPLATES,
    COMMUNICATION_AUDIENCES,
    CONFIRMATION_THRESHOLD,
    DEFAULT_AUDIENCES,
    DEFAULT_RISK,
    GENERIC_CAUSE,
    MAX_ADJUSTMENT,
    RISK_MESSAGES,
    SIGNAL_EVIDENCE,
    CauseTemplate,
    document_label,
    priority_rule_for,
)
from tradecheck.utils.normalize import format_value, is_number

logger = logging.getLogger(__name__)


def _small_gap(finding: Finding) -> bool:
    values = [entry.value for entry in finding.detected_values]
    if all(is_number(value) for value in values):
        pairs = [(float(values[0]), float(value)) for value in values[1:]]
    elif all(isinstance(value, dict) for value in values):
        base = values[0]
        pairs = [
            (float(base[sku]), float(other[sku]))
            for other in values[1:]
            for sku in base
            if sku in other and is_number(base[sku]) and is_number(other[sku]) and base[sku] != other[sku]
        ]
    else:
        return False
    if not pairs:
        return False
    return all(left and abs(left - right) / abs(left) < 0.05 for left, right in pairs)


def _integer_multiple(finding: Finding) -> bool:
    values = [entry.value for entry in finding.detected_values if isinstance(entry.value, dict)]
    for index, base in enumerate(values):
        for other in values[index + 1:]:
            for sku, qty in base.items():
                peer = other.get(sku)
                if not (is_number(qty) and is_number(peer)) or not qty or not peer or qty == peer:
                    continue
                high, low = max(qty, peer), min(qty, peer)
                if float(high) % float(low) == 0:
                    return True
    return False


def _common_prefix(values: Iterable[Any]) -> bool:
    words = [str(value).lower().split() for value in values]
    if len(words) < 2 or not all(words):
        return False
    return len({first[0] for first in words}) == 1


def context_signals(finding: Finding, documents: DocumentSet) -> Set[str]:
    """Evidence flags derived from the finding and the documents only."""
    signals: Set[str] = set()
    observed: Dict[str, Any] = {entry.document: entry.value for entry in finding.detected_values}
    if documents.has(CONTRACT):
        signals.add("contract_present")
    if QUOTATION in observed and CONTRACT in observed:
        if not values_equal(observed[QUOTATION], observed[CONTRACT]):
            signals.add("contract_disagrees_with_quotation")
    groups = distinct_values(finding.detected_values)
    if len(finding.detected_values) >= 3 and len(groups) == 2 and min(len(kinds) for _, kinds in groups) == 1:
        signals.add("single_outlier")
    incoterms = [documents.get(kind).terms.incoterms for kind in documents.kinds()]
    if any(isinstance(term, str) and "DDP" in term.upper() for term in incoterms):
        signals.add("ddp_mentioned")
    if _small_gap(finding):
        signals.add("small_numeric_gap")
    if _integer_multiple(finding):
        signals.add("integer_multiple")
    quotation, invoice = documents.get(QUOTATION), documents.get(COMMERCIAL_INVOICE)
    if quotation is not None and invoice is not None:
        q, i = quotation.totals, invoice.totals
        if is_number(q.subtotal) and is_number(i.subtotal) and float(q.subtotal) == float(i.subtotal):
            signals.add("subtotals_match")
        if (q.shipping, q.insurance) != (i.shipping, i.insurance):
            signals.add("extra_charges_differ")
    if all(isinstance(value, str) for value in observed.values()) and _common_prefix(observed.values()):
        signals.add("names_share_prefix")
    return signals


def adjust_probability(template: CauseTemplate, signals: Set[str]) -> Tuple[float, Tuple[str, ...]]:
    delta = 0.0
    fired: List[str] = []
    for signal, weight in template.signals:
        if signal in signals:
            delta += weight
            fired.append(SIGNAL_EVIDENCE.get(signal, signal))
    delta = max(-MAX_ADJUSTMENT, min(MAX_ADJUSTMENT, delta))
    probability = max(0.0, min(1.0, template.probability + delta))
    return round(probability, 4), tuple(fired)


def rank_causes(finding: Finding, documents: DocumentSet) -> Tuple[CauseHypothesis, ...]:
    templates = CAUSE_TEMPLATES.get(finding.id)
    if not templates:
        logger.info("No cause template for %s, using generic cause", finding.id)
        templates = [GENERIC_CAUSE]
    signals = context_signals(finding, documents)
    hypotheses = []
    for template in templates:
        probability, fired = adjust_probability(template, signals)
        hypotheses.append(
            CauseHypothesis(
                cause_id=template.cause_id,
                label=template.label,
                probability=probability,
                evidence=template.evidence + fired,
            )
        )
    # sorted() is stable: equal probabilities keep table order
    return tuple(sorted(hypotheses, key=lambda hypothesis: -hypothesis.probability))


def choose_source_of_truth(finding: Finding, documents: DocumentSet) -> Tuple[str, Any, LocalizedText]:
    rule = priority_rule_for(finding.field_path)
    for kind in rule.priority:
        if not documents.has(kind):
            continue
        value = finding.value_for(kind)
        if value is not None:
            return kind, value, rule.reason
    if finding.detected_values:
        first = finding.detected_values[0]
        return first.document, first.value, rule.reason
    return rule.priority[0], finding.recommended_value, rule.reason


def diagnose(finding: Finding, documents: DocumentSet) -> Diagnosis:
    causes = rank_causes(finding, documents)
    source, value, rationale = choose_source_of_truth(finding, documents)
    shown = format_value(value)
    resolution = Resolution(
        source_of_truth=source,
        source_value=value,
        action_summary=LocalizedText(
            en=f"Unify all documents to the {document_label(source)} value ({shown}).",
            ko=f"{document_label(source, 'ko')} 값({shown})으로 다른 문서들을 통일합니다.",
        ),
        rationale=rationale,
        risk_if_ignored=RISK_MESSAGES.get(finding.id, DEFAULT_RISK),
    )
    top = causes[0].probability if causes else 0.0
    return Diagnosis(
        finding_id=finding.id,
        field_path=finding.field_path,
        probable_causes=causes,
        resolution=resolution,
        communication_needs=COMMUNICATION_AUDIENCES.get(finding.id, DEFAULT_AUDIENCES),
        needs_confirmation=top < CONFIRMATION_THRESHOLD,
    )


def diagnose_all(findings: Iterable[Finding], documents: DocumentSet) -> Tuple[Diagnosis, ...]:
    return tuple(diagnose(finding, documents) for finding in findings)

"""Confirmation questions for findings a human has to decide."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tradecheck.core.detector import distinct_values
from tradecheck.core.diagnosis import diagnose
from tradecheck.core.models import (
    ConfirmationAnswer,
    ConfirmationOption,
    ConfirmationQuestion,
    Diagnosis,
    DocumentSet,
    Finding,
    LocalizedText,
)
from tradecheck.core.rules import AMBIGUITY_THRESHOLD, MAX_QUESTIONS, SEVERITY_RANK, document_label
from tradecheck.utils.normalize import format_value

logger = logging.getLogger(__name__)

QUESTION_TEMPLATES: Dict[str, LocalizedText] = {
    "INCOTERMS_MISMATCH": LocalizedText(en="Which Incoterms should we finalize?", ko="인코텀즈(거래조건)는 어느 것으로 확정할까요?"),
    "PAYMENT_MISMATCH": LocalizedText(en="Which payment terms should we finalize?", ko="결제 조건은 어느 것으로 확정할까요?"),
    "PAYMENT_METHOD_MISMATCH": LocalizedText(en="Which payment method should we finalize?", ko="결제 방식은 어느 것으로 확정할까요?"),
    "CURRENCY_MISMATCH": LocalizedText(en="Which currency should we finalize?", ko="거래 통화는 어느 것으로 확정할까요?"),
    "QTY_MISMATCH": LocalizedText(
        en="Which quantities should we use across all documents?",
        ko="수량은 어느 값으로 통일할까요?",
    ),
    "PRICE_MISMATCH": LocalizedText(en="Which unit prices should we finalize?", ko="단가는 어느 값으로 확정할까요?"),
    "TOTALS_MISMATCH": LocalizedText(en="Which total amount should we finalize?", ko="총액은 어느 값으로 확정할까요?"),
    "BUYER_NAME_MISMATCH": LocalizedText(en="Which buyer company name should we use?", ko="바이어 회사명은 어느 것으로 통일할까요?"),
    "SELLER_NAME_MISMATCH": LocalizedText(en="Which seller legal name should we use?", ko="셀러 법인명은 어느 것으로 통일할까요?"),
    "ADDRESS_MISMATCH": LocalizedText(en="Which address should we use?", ko="배송/청구 주소는 어느 것으로 확정할까요?"),
    "LEADTIME_MISMATCH": LocalizedText(en="Which lead time should we finalize?", ko="납기(리드타임)는 어느 것으로 확정할까요?"),
    "DESTINATION_MISMATCH": LocalizedText(en="Which destination should we use?", ko="목적지/목적항은 어느 것으로 확정할까요?"),
}

DEFAULT_QUESTION = LocalizedText(en="Which value should we finalize?", ko="어느 값으로 확정할까요?")


def question_id(finding_id: str) -> str:
    return f"confirm-{finding_id}"


def needs_question(finding: Finding, diagnosis: Diagnosis) -> bool:
    if finding.severity == "BLOCKING" or diagnosis.needs_confirmation:
        return True
    causes = diagnosis.probable_causes
    return len(causes) > 1 and causes[0].probability < AMBIGUITY_THRESHOLD


def confidence_gap(diagnosis: Diagnosis) -> float:
    causes = diagnosis.probable_causes
    if not causes:
        return 0.0
    if len(causes) == 1:
        return causes[0].probability
    return causes[0].probability - causes[1].probability


def build_question(finding: Finding, diagnosis: Diagnosis) -> Optional[ConfirmationQuestion]:
    """One option per distinct observed value; None when there is nothing to choose."""
    groups = distinct_values(finding.detected_values)
    if len(groups) < 2:
        return None
    chosen = diagnosis.resolution.source_of_truth
    options = []
    for value, kinds in groups:
        labels = ", ".join(document_label(kind) for kind in kinds)
        options.append(
            ConfirmationOption(
                label=f"{labels} value: {format_value(value)}",
                value=value,
                source_document=chosen if chosen in kinds else kinds[0],
                source_documents=kinds,
                recommended=chosen in kinds,
            )
        )
    return ConfirmationQuestion(
        id=question_id(finding.id),
        finding_id=finding.id,
        field_path=finding.field_path,
        question=QUESTION_TEMPLATES.get(finding.id, DEFAULT_QUESTION),
        options=tuple(options),
        severity=finding.severity,
    )


def generate_questions(
    findings: Sequence[Finding],
    diagnoses: Iterable[Diagnosis],
    documents: DocumentSet,
) -> Tuple[ConfirmationQuestion, ...]:
    """Questions for BLOCKING or low-confidence findings, most urgent first, at most five."""
    by_id = {diagnosis.finding_id: diagnosis for diagnosis in diagnoses}
    ranked: List[Tuple[Tuple[int, float, int], ConfirmationQuestion]] = []
    for order, finding in enumerate(findings):
        diagnosis = by_id.get(finding.id) or diagnose(finding, documents)
        if not needs_question(finding, diagnosis):
            continue
        question = build_question(finding, diagnosis)
        if question is None:
            continue
        key = (SEVERITY_RANK.get(finding.severity, 2), round(confidence_gap(diagnosis), 4), order)
        ranked.append((key, question))
    ranked.sort(key=lambda entry: entry[0])
    if len(ranked) > MAX_QUESTIONS:
        logger.debug("Capping %d confirmation questions at %d", len(ranked), MAX_QUESTIONS)
    return tuple(question for _, question in ranked[:MAX_QUESTIONS])


def answer_question(question: ConfirmationQuestion, option_index: int) -> ConfirmationAnswer:
    if not 0 <= option_index < len(question.options):
        raise ValueError(f"Option {option_index} out of range for {question.id} ({len(question.options)} options)")
    option = question.options[option_index]
    return ConfirmationAnswer(
        question_id=question.id,
        finding_id=question.finding_id,
        field_path=question.field_path,
        selected_value=option.value,
        source_document=option.source_document,
    )


def build_fix_summary(answers: Sequence[ConfirmationAnswer], findings: Sequence[Finding]) -> LocalizedText:
    titles = {finding.id: finding.title for finding in findings}
    en_lines = []
    ko_lines = []
    for answer in answers:
        field = titles.get(answer.finding_id, answer.field_path)
        value = format_value(answer.selected_value)
        en_lines.append(f"• {field}: finalized as {value}")
        ko_lines.append(f"• {field}: {value}로 확정")
    en = "Updated documents with the following values:\n\n" + "\n".join(en_lines)
    ko = "다음 항목들을 확정하고 문서를 업데이트했습니다:\n\n" + "\n".join(ko_lines)
    return LocalizedText(
        en=en + "\n\nBlocking issues resolved. Ready for finalization.",
        ko=ko + "\n\n이제 막힘 항목이 해결되어 최종 확정이 가능합니다.",
    )

"""Counterparty, internal and logistics messages for findings and applied fixes.

Both language variants of a message are rendered from the same list of
``FieldChange`` entries, so they always state the same facts.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from tradecheck.core.detector import distinct_values, values_equal
from tradecheck.core.models import (
    BulkFixResult,
    CommunicationKit,
    Diagnosis,
    DocumentSet,
    FieldChange,
    Finding,
    FixResult,
    GeneratedMessage,
    LocalizedText,
    MessageContext,
    MessageVariant,
)
from tradecheck.core.rules import document_label
from tradecheck.utils.normalize import format_value

logger = logging.getLogger(__name__)

LANGUAGES = ("en", "ko")

COUNTERPARTY_QUESTIONS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "INCOTERMS_MISMATCH": {
        "en": ("Incoterms: which term should we confirm for this order?", "Please confirm who bears freight and insurance costs."),
        "ko": ("인코텀즈: 어느 조건으로 확정할까요?", "운송비/보험료 부담 주체를 확인해 주세요."),
    },
    "PAYMENT_MISMATCH": {
        "en": ("Payment: which split is correct?", "Are you considering changing to L/C terms?"),
        "ko": ("결제 조건: 어느 비율이 맞나요?", "L/C 조건으로 변경을 검토 중이신가요?"),
    },
    "PAYMENT_METHOD_MISMATCH": {
        "en": ("Payment method: T/T or L/C?", "Please confirm the bank details on your side."),
        "ko": ("결제 방식: T/T와 L/C 중 어느 것인가요?", "은행 정보를 확인해 주세요."),
    },
    "CURRENCY_MISMATCH": {
        "en": ("Currency: which currency is confirmed for this order?", "Would you prefer a different currency?"),
        "ko": ("결제 통화: 어느 통화로 확정 맞으신가요?", "다른 통화로 변경을 원하시나요?"),
    },
    "QTY_MISMATCH": {
        "en": ("Please confirm the quantities.", "Please confirm if free goods are included."),
        "ko": ("수량을 확인해 주세요.", "무료 증정품 포함 여부를 알려주세요."),
    },
    "PRICE_MISMATCH": {
        "en": ("Please confirm the unit prices are correct.", "Should a promotional discount be applied?"),
        "ko": ("단가가 정확한지 확인해 주세요.", "프로모션 할인이 적용되어야 하나요?"),
    },
    "TOTALS_MISMATCH": {
        "en": ("Please confirm the total amount is correct.", "Should shipping and insurance be included?"),
        "ko": ("총액이 정확한지 확인해 주세요.", "운송비/보험료가 포함되어야 하나요?"),
    },
    "BUYER_NAME_MISMATCH": {
        "en": ("Please confirm the correct company/consignee name.", "Let us know if customs requires a different name."),
        "ko": ("정확한 회사명/수취인명을 알려주세요.", "통관용 명칭이 다른 경우 별도로 알려주세요."),
    },
    "SELLER_NAME_MISMATCH": {
        "en": ("Please confirm the seller name your bank expects.",),
        "ko": ("은행에 등록된 셀러명을 확인해 주세요.",),
    },
    "ADDRESS_MISMATCH": {
        "en": ("Please confirm the shipping address.", "Let us know if BILL TO and SHIP TO are different."),
        "ko": ("배송지 주소를 확인해 주세요.", "BILL TO와 SHIP TO가 다른 경우 알려주세요."),
    },
    "LEADTIME_MISMATCH": {
        "en": ("Please confirm your required delivery date.", "Is this based on production or shipping lead time?"),
        "ko": ("희망 납기일을 확인해 주세요.", "생산 리드타임과 배송 리드타임 중 어느 기준인가요?"),
    },
    "DESTINATION_MISMATCH": {
        "en": ("Please confirm the destination port.", "Has the final delivery address changed?"),
        "ko": ("목적항을 확인해 주세요.", "최종 배송지가 변경되었나요?"),
    },
}

DEFAULT_COUNTERPARTY_QUESTIONS = {"en": ("Please confirm this item.",), "ko": ("해당 항목을 확인해 주세요.",)}

NEXT_STEPS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "INCOTERMS_MISMATCH": {
        "en": ("Update every document after buyer confirmation", "Notify the forwarder of the term change"),
        "ko": ("바이어 확인 후 모든 문서 업데이트", "포워더에게 조건 변경 통보"),
    },
    "PAYMENT_MISMATCH": {
        "en": ("Confirm final payment terms with the buyer", "Negotiate L/C conditions if needed"),
        "ko": ("바이어 결제 조건 최종 확인", "필요시 L/C 조건 협의"),
    },
    "PAYMENT_METHOD_MISMATCH": {
        "en": ("Confirm the payment method with finance", "Check bank instructions on the invoice"),
        "ko": ("재무팀과 결제 방식 확인", "인보이스 은행 정보 확인"),
    },
    "CURRENCY_MISMATCH": {
        "en": ("Recalculate prices and totals once the currency is fixed", "Check the exchange rate reference date"),
        "ko": ("통화 확정 후 단가/총액 재계산", "환율 적용 기준일 확인"),
    },
    "QTY_MISMATCH": {
        "en": ("Cross-check against the PO quantities", "Re-check packing units"),
        "ko": ("PO 수량과 대조 확인", "포장 단위 재확인"),
    },
    "PRICE_MISMATCH": {
        "en": ("Check the final price list", "Clarify discount conditions"),
        "ko": ("최종 단가표 확인", "할인 조건 명확화"),
    },
    "TOTALS_MISMATCH": {
        "en": ("Recalculate line amounts", "Check whether extra charges are included"),
        "ko": ("항목별 금액 재계산", "부대비용 포함 여부 확인"),
    },
    "BUYER_NAME_MISMATCH": {
        "en": ("Confirm the official company name", "Check the name used for customs"),
        "ko": ("공식 회사명 확인", "통관용 명칭 별도 확인"),
    },
    "SELLER_NAME_MISMATCH": {
        "en": ("Use the registered legal name on every document",),
        "ko": ("모든 문서에 등록 법인명 사용",),
    },
    "ADDRESS_MISMATCH": {
        "en": ("Finalize the delivery address", "Check customs brokerage for DDP"),
        "ko": ("배송지 최종 확정", "DDP인 경우 통관 대행 확인"),
    },
    "LEADTIME_MISMATCH": {
        "en": ("Confirm lead time with production", "Confirm the shipping schedule with logistics"),
        "ko": ("생산팀 납기 확인", "물류팀 배송 일정 확인"),
    },
    "DESTINATION_MISMATCH": {
        "en": ("Finalize the destination port", "Confirm routing with the forwarder"),
        "ko": ("목적항 최종 확정", "포워더에게 라우팅 확인"),
    },
}

DEFAULT_NEXT_STEPS = {
    "en": ("Discuss with the responsible team", "Ask the buyer to confirm the updated documents"),
    "ko": ("관련 담당자와 협의", "문서 업데이트 후 바이어 확인"),
}

DEFAULT_IMPACT = LocalizedText(en="No change in total amount", ko="총액 변동 없음")

# Keyed by whether the changes were already applied or are only proposed.
CORRECTION_WORDING: Dict[bool, Dict[str, Dict[str, str]]] = {
    True: {
        "en": {
            "subject": "Updated documents for {project} ({title})",
            "intro": "We noticed a mismatch across our documents and have now updated them for consistency.",
            "changes": "What changed",
            "files": "Updated files",
            "ask": "Could you please confirm if everything looks correct on your side?",
        },
        "ko": {
            "subject": "{project} 수정 문서 송부 ({title})",
            "intro": "문서 간 일부 항목이 일치하지 않아, 정확하게 수정한 버전으로 다시 보내드립니다.",
            "changes": "변경 사항",
            "files": "업데이트된 문서",
            "ask": "확인 부탁드리며, 문제 있으시면 알려주세요.",
        },
    },
    False: {
        "en": {
            "subject": "Proposed correction for {project} ({title})",
            "intro": "We noticed a mismatch across our documents and would like to correct it as follows.",
            "changes": "Proposed changes",
            "files": "Current files",
            "ask": "Could you please confirm this correction before we re-issue the documents?",
        },
        "ko": {
            "subject": "{project} 수정 제안 ({title})",
            "intro": "문서 간 일부 항목이 일치하지 않아, 아래와 같이 수정하고자 합니다.",
            "changes": "수정 제안",
            "files": "현재 문서",
            "ask": "확인해 주시면 수정한 문서를 재발행해 드리겠습니다.",
        },
    },
}


def change_lines(changes: Iterable[FieldChange]) -> List[str]:
    return [f"- {change.field}: {format_value(change.old_value)} → {format_value(change.new_value)}" for change in changes]


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def _numbered(lines: Iterable[str]) -> str:
    return "\n".join(f"{index}) {line}" for index, line in enumerate(lines, start=1))


def _updated_files(versions: Mapping[str, int], lang: str) -> List[str]:
    return [f"{document_label(kind, lang)}: v{version}" for kind, version in versions.items() if version]


def _message(
    audience: str,
    message_type: str,
    variants: Dict[str, MessageVariant],
    language: str,
) -> GeneratedMessage:
    primary = variants.get(language) or variants["en"]
    return GeneratedMessage(
        audience=audience,
        message_type=message_type,
        subject=primary.subject,
        body=primary.body,
        variants=variants,
    )


def proposed_changes(finding: Finding, diagnosis: Diagnosis) -> Tuple[FieldChange, ...]:
    """Changes that applying the recommended value would make, for unresolved findings."""
    target = diagnosis.resolution.source_value
    changes: List[FieldChange] = []
    if isinstance(target, dict):
        attribute = finding.field_path.split(".", 1)[1]
        for value, kinds in distinct_values(finding.detected_values):
            for sku_id in sorted(set(value) | set(target)):
                old, new = value.get(sku_id), target.get(sku_id)
                if values_equal(old, new):
                    continue
                changes.append(FieldChange(f"items[{sku_id}].{attribute}", old, new, kinds))
        return tuple(changes)
    for value, kinds in distinct_values(finding.detected_values):
        if not values_equal(value, target):
            changes.append(FieldChange(finding.field_path, value, target, kinds))
    return tuple(changes)


def _relevant_changes(finding: Finding, changes: Sequence[FieldChange]) -> Tuple[FieldChange, ...]:
    if finding.field_path.startswith("items."):
        suffix = "]." + finding.field_path.split(".", 1)[1]
        return tuple(change for change in changes if change.field.startswith("items[") and change.field.endswith(suffix))
    if finding.field_path.startswith("totals."):
        return tuple(change for change in changes if change.field.startswith("totals."))
    return tuple(change for change in changes if change.field == finding.field_path)


def counterparty_correction(
    finding: Finding, changes: Sequence[FieldChange], context: MessageContext, applied: bool = True
) -> GeneratedMessage:
    impact = context.impact or DEFAULT_IMPACT
    wording = CORRECTION_WORDING[applied]
    greeting_en = context.counterparty_contact or "there"
    greeting_ko = context.counterparty_contact or "담당자"
    lines = "\n".join(change_lines(changes))
    body_en = (
        f"Hi {greeting_en},\n"
        f"\n"
        f"{wording['en']['intro']}\n"
        f"\n"
        f"{wording['en']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"{wording['en']['files']}:\n"
        f"{_bullets(_updated_files(context.document_versions, 'en'))}\n"
        f"\n"
        f"Impact:\n"
        f"- {impact.en}\n"
        f"\n"
        f"{wording['en']['ask']}\n"
        f"\n"
        f"Best regards,\n"
        f"{context.seller_brand_name}"
    )
    body_ko = (
        f"{greeting_ko}님, 안녕하세요.\n"
        f"\n"
        f"{wording['ko']['intro']}\n"
        f"\n"
        f"{wording['ko']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"{wording['ko']['files']}:\n"
        f"{_bullets(_updated_files(context.document_versions, 'ko'))}\n"
        f"\n"
        f"영향:\n"
        f"- {impact.ko}\n"
        f"\n"
        f"{wording['ko']['ask']}\n"
        f"\n"
        f"감사합니다.\n"
        f"{context.seller_brand_name}"
    )
    variants = {
        "en": MessageVariant(subject=wording["en"]["subject"].format(project=context.project_name, title=finding.title), body=body_en),
        "ko": MessageVariant(subject=wording["ko"]["subject"].format(project=context.project_name, title=finding.title), body=body_ko),
    }
    return _message("COUNTERPARTY", "CORRECTION", variants, context.language)


def counterparty_confirmation(finding: Finding, context: MessageContext) -> GeneratedMessage:
    questions = COUNTERPARTY_QUESTIONS.get(finding.id, DEFAULT_COUNTERPARTY_QUESTIONS)
    greeting_en = context.counterparty_contact or "there"
    greeting_ko = context.counterparty_contact or "담당자"
    body_en = (
        f"Hi {greeting_en},\n"
        f"\n"
        f"To finalize the documents, could you please confirm the following?\n"
        f"\n"
        f"{_numbered(questions['en'])}\n"
        f"\n"
        f"Once confirmed, we will re-issue the final quotation and contract immediately.\n"
        f"\n"
        f"Best regards,\n"
        f"{context.seller_brand_name}"
    )
    body_ko = (
        f"{greeting_ko}님, 안녕하세요.\n"
        f"\n"
        f"문서 최종 확정을 위해 아래 사항을 확인 부탁드립니다.\n"
        f"\n"
        f"{_numbered(questions['ko'])}\n"
        f"\n"
        f"확인해 주시면 바로 최종 견적서/계약서를 재발행해 드리겠습니다.\n"
        f"\n"
        f"감사합니다.\n"
        f"{context.seller_brand_name}"
    )
    variants = {
        "en": MessageVariant(subject=f"Quick confirmation needed ({finding.title})", body=body_en),
        "ko": MessageVariant(subject=f"확인 요청 ({finding.title})", body=body_ko),
    }
    return _message("COUNTERPARTY", "CONFIRMATION_REQUEST", variants, context.language)


def counterparty_chat(
    finding: Finding, changes: Sequence[FieldChange], context: MessageContext, applied: bool = True
) -> GeneratedMessage:
    if changes:
        first = changes[0]
        preview = f"{first.field}: {format_value(first.old_value)} → {format_value(first.new_value)}"
    else:
        preview = finding.title
    if not applied:
        variants = {
            "en": MessageVariant(
                subject=None,
                body=f"We found a mismatch across our documents ({preview}). Can we re-issue them with this correction?",
            ),
            "ko": MessageVariant(
                subject=None,
                body=f"문서 간 조건이 다르게 들어가 있어요. ({preview}) 이렇게 맞춰서 재발행해도 될까요?",
            ),
        }
        return _message("COUNTERPARTY", "CORRECTION", variants, context.language)
    variants = {
        "en": MessageVariant(
            subject=None,
            body=f"We found a mismatch and re-issued consistent documents ({preview}). Could you please confirm?",
        ),
        "ko": MessageVariant(
            subject=None,
            body=f"문서 간 조건이 다르게 들어가서, 동일하게 맞춘 버전으로 재발행했어요. ({preview}) 확인 부탁드릴게요!",
        ),
    }
    return _message("COUNTERPARTY", "CORRECTION", variants, context.language)


def internal_note(
    finding: Finding,
    diagnosis: Diagnosis,
    changes: Sequence[FieldChange],
    context: MessageContext,
    applied: bool = True,
) -> GeneratedMessage:
    heading = CORRECTION_WORDING[applied]
    top = diagnosis.probable_causes[0] if diagnosis.probable_causes else None
    percent = round(top.probability * 100) if top else 0
    resolution = diagnosis.resolution
    steps = NEXT_STEPS.get(finding.id, DEFAULT_NEXT_STEPS)
    versions = ", ".join(
        f"{kind} v{version}" for kind, version in context.document_versions.items() if version
    ) or "-"
    lines = "\n".join(change_lines(changes)) or "-"
    body_en = (
        f"Document mismatch record: {finding.title}\n"
        f"\n"
        f"Probable cause: {top.label.en if top else 'Needs analysis'} ({percent}%)\n"
        f"Action: {resolution.action_summary.en}\n"
        f"Why: {resolution.rationale.en}\n"
        f"Risk: {resolution.risk_if_ignored.en}\n"
        f"\n"
        f"{heading['en']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"Next steps:\n"
        f"{_bullets(steps['en'])}\n"
        f"\n"
        f"Project: {context.project_name}\n"
        f"Document versions: {versions}"
    )
    body_ko = (
        f"문서 불일치 처리 기록: {finding.title}\n"
        f"\n"
        f"원인(추정): {top.label.ko if top else '원인 분석 필요'} ({percent}%)\n"
        f"조치: {resolution.action_summary.ko}\n"
        f"근거: {resolution.rationale.ko}\n"
        f"리스크: {resolution.risk_if_ignored.ko}\n"
        f"\n"
        f"{heading['ko']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"다음 할 일:\n"
        f"{_bullets(steps['ko'])}\n"
        f"\n"
        f"관련 프로젝트: {context.project_name}\n"
        f"문서 버전: {versions}"
    )
    variants = {
        "en": MessageVariant(subject=None, body=body_en),
        "ko": MessageVariant(subject=None, body=body_ko),
    }
    return _message("INTERNAL", "NOTE", variants, context.language)


def _changed_to(changes: Sequence[FieldChange], field: str) -> Optional[str]:
    for change in changes:
        if change.field == field:
            return format_value(change.new_value)
    return None


def logistics_note(
    finding: Finding, changes: Sequence[FieldChange], context: MessageContext, applied: bool = True
) -> GeneratedMessage:
    heading = CORRECTION_WORDING[applied]
    state_en = "updated" if applied else "proposed"
    state_ko = "변경된" if applied else "변경 예정인"
    incoterms = _changed_to(changes, "terms.incoterms")
    destination = _changed_to(changes, "shipment.destination_port") or _changed_to(changes, "buyer.address")
    lead_time = _changed_to(changes, "shipment.lead_time_days")
    lines = "\n".join(change_lines(changes)) or "-"
    body_en = (
        f"Hello,\n"
        f"\n"
        f"Please note the {state_en} shipment terms for {context.project_name}:\n"
        f"\n"
        f"- Incoterms: {incoterms or 'unchanged'}\n"
        f"- Destination: {destination or 'to be confirmed'}\n"
        f"- Lead time (days): {lead_time or 'to be advised'}\n"
        f"- Packing: standard export packing\n"
        f"\n"
        f"{heading['en']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"Please let us know if you need any clarification.\n"
        f"\n"
        f"Thanks,\n"
        f"{context.seller_brand_name}"
    )
    body_ko = (
        f"안녕하세요,\n"
        f"\n"
        f"{context.project_name} 건 {state_ko} 배송 조건 안내드립니다.\n"
        f"\n"
        f"- 인코텀즈: {incoterms or '변경 없음'}\n"
        f"- 목적지: {destination or '확정 후 안내 예정'}\n"
        f"- 리드타임(일): {lead_time or '추후 안내'}\n"
        f"- 포장: 표준 수출 포장\n"
        f"\n"
        f"{heading['ko']['changes']}:\n"
        f"{lines}\n"
        f"\n"
        f"추가 확인 필요하시면 알려주세요.\n"
        f"\n"
        f"감사합니다.\n"
        f"{context.seller_brand_name}"
    )
    variants = {
        "en": MessageVariant(subject=f"Shipment terms update: {context.project_name}", body=body_en),
        "ko": MessageVariant(subject=f"배송 조건 변경 안내: {context.project_name}", body=body_ko),
    }
    return _message("LOGISTICS", "NOTE", variants, context.language)


def generate_kit(finding: Finding, diagnosis: Diagnosis, context: MessageContext) -> CommunicationKit:
    """Messages for every audience the diagnosis names; the internal note is always present."""
    applied_changes = _relevant_changes(finding, context.changes)
    applied = bool(applied_changes)
    changes = applied_changes or proposed_changes(finding, diagnosis)
    needs = diagnosis.communication_needs
    kit = CommunicationKit(
        finding_id=finding.id, internal_note=internal_note(finding, diagnosis, changes, context, applied)
    )
    if "COUNTERPARTY" in needs:
        kit = replace(
            kit,
            counterparty_correction=counterparty_correction(finding, changes, context, applied),
            counterparty_confirmation=counterparty_confirmation(finding, context),
            counterparty_chat=counterparty_chat(finding, changes, context, applied),
        )
    if "LOGISTICS" in needs:
        kit = replace(kit, logistics_note=logistics_note(finding, changes, context, applied))
    return kit


def generate_all_kits(
    findings: Sequence[Finding], diagnoses: Sequence[Diagnosis], context: MessageContext
) -> Tuple[CommunicationKit, ...]:
    by_id = {diagnosis.finding_id: diagnosis for diagnosis in diagnoses}
    kits = []
    for finding in findings:
        diagnosis = by_id.get(finding.id)
        if diagnosis is None:
            logger.warning("No diagnosis for %s, communication kit skipped", finding.id)
            continue
        kits.append(generate_kit(finding, diagnosis, context))
    return tuple(kits)


def _first_party_value(documents: DocumentSet, attribute: str) -> Optional[str]:
    for kind in documents.kinds():
        value = getattr(documents.get(kind).buyer, attribute)
        if value:
            return value
    return None


def build_message_context(
    fix_result: Union[FixResult, BulkFixResult, None],
    documents: Optional[DocumentSet] = None,
    project_name: str = "",
    seller_brand_name: str = "",
    counterparty_contact: Optional[str] = None,
    counterparty_company: Optional[str] = None,
    impact: Optional[LocalizedText] = None,
    language: str = "en",
) -> MessageContext:
    """Context for a kit: versions and changes come from the fix when one was applied."""
    if fix_result is not None:
        documents = fix_result.new_document_set
    documents = documents or DocumentSet()
    return MessageContext(
        project_name=project_name,
        seller_brand_name=seller_brand_name,
        counterparty_contact=counterparty_contact or _first_party_value(documents, "contact"),
        counterparty_company=counterparty_company or _first_party_value(documents, "name"),
        document_versions={kind: documents.version(kind) for kind in documents.kinds()},
        changes=tuple(fix_result.changes) if fix_result is not None else (),
        impact=impact,
        language=language if language in LANGUAGES else "en",
    )


def build_combined_correction(changes: Sequence[FieldChange], lang: str = "en") -> str:
    """One message listing every change, for sending after a bulk fix."""
    lines = "\n".join(change_lines(changes))
    if lang == "ko":
        return f"문서 간 {len(changes)}개 항목을 수정했습니다.\n\n{lines}\n\n관련 문서를 업데이트했으니 확인 부탁드립니다."
    return f"We've corrected {len(changes)} item(s) across documents.\n\n{lines}\n\nPlease review the updated documents."

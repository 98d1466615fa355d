"""Static rule tables: checks, source-of-truth priorities, cause templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple

from tradecheck.core.models import (
    COMMERCIAL_INVOICE,
    CONTRACT,
    PACKING_LIST,
    QUOTATION,
    Audience,
    LocalizedText,
    Severity,
)

TOLERANCE = 0.01

BLOCKING_PENALTY = 12
WARNING_PENALTY = 4

MAX_QUESTIONS = 5
MAX_FIX_PLAN_ENTRIES = 8

CONFIRMATION_THRESHOLD = 0.5
AMBIGUITY_THRESHOLD = 0.7
MAX_ADJUSTMENT = 0.10

DOCUMENT_LABELS: Dict[str, LocalizedText] = {
    QUOTATION: LocalizedText(en="Quotation", ko="견적서(PI)"),
    CONTRACT: LocalizedText(en="Sales Contract", ko="계약서"),
    COMMERCIAL_INVOICE: LocalizedText(en="Commercial Invoice", ko="인보이스"),
    PACKING_LIST: LocalizedText(en="Packing List", ko="포장명세서"),
}


def document_label(kind: str, lang: str = "en") -> str:
    label = DOCUMENT_LABELS.get(kind)
    if label is None:
        return kind
    return label.get(lang)


@dataclass(frozen=True)
class CheckRule:
    finding_id: str
    field_path: str
    severity: Severity
    kind: Literal["scalar", "items", "totals"]
    value_type: Literal["text", "number"]
    title: str
    description: str
    impact: str
    field_label: LocalizedText


CHECKS: Tuple[CheckRule, ...] = (
    CheckRule(
        "BUYER_NAME_MISMATCH",
        "buyer.name",
        "BLOCKING",
        "scalar",
        "text",
        "Buyer company name mismatch",
        "The buyer company name differs between documents.",
        "A buyer name that differs between documents can hold the cargo at customs.",
        LocalizedText(en="Buyer company name", ko="바이어 회사명"),
    ),
    CheckRule(
        "SELLER_NAME_MISMATCH",
        "seller.name",
        "BLOCKING",
        "scalar",
        "text",
        "Seller legal name mismatch",
        "The seller/exporter legal name differs between documents.",
        "The exporter of record must match on every document presented to the bank and customs.",
        LocalizedText(en="Seller legal name", ko="셀러 법인명"),
    ),
    CheckRule(
        "ADDRESS_MISMATCH",
        "buyer.address",
        "BLOCKING",
        "scalar",
        "text",
        "Buyer address mismatch",
        "The buyer address differs between documents.",
        "An inconsistent consignee address risks misdelivery and customs queries.",
        LocalizedText(en="Buyer address", ko="바이어 주소"),
    ),
    CheckRule(
        "INCOTERMS_MISMATCH",
        "terms.incoterms",
        "BLOCKING",
        "scalar",
        "text",
        "Incoterms mismatch",
        "The Incoterms differ between documents.",
        "Different Incoterms lead to disputes over cost sharing and the point of risk transfer.",
        LocalizedText(en="Incoterms", ko="인코텀즈"),
    ),
    CheckRule(
        "PAYMENT_METHOD_MISMATCH",
        "terms.payment_method",
        "BLOCKING",
        "scalar",
        "text",
        "Payment method mismatch",
        "The payment method differs between documents.",
        "A payment method that differs between documents can block collection of the payment.",
        LocalizedText(en="Payment method", ko="결제 방식"),
    ),
    CheckRule(
        "PAYMENT_MISMATCH",
        "terms.payment_split",
        "BLOCKING",
        "scalar",
        "text",
        "Payment terms mismatch",
        "The payment split differs between the quotation and the contract.",
        "Mismatched payment terms can delay or block payment collection.",
        LocalizedText(en="Payment terms", ko="결제 조건"),
    ),
    CheckRule(
        "CURRENCY_MISMATCH",
        "terms.currency",
        "BLOCKING",
        "scalar",
        "text",
        "Currency mismatch",
        "The settlement currency differs between documents.",
        "A currency mismatch confuses payment and settlement.",
        LocalizedText(en="Currency", ko="통화"),
    ),
    CheckRule(
        "QTY_MISMATCH",
        "items.quantity",
        "BLOCKING",
        "items",
        "number",
        "SKU quantity mismatch",
        "SKU quantities differ between documents.",
        "Quantity mismatches cause customs holds and billing disputes.",
        LocalizedText(en="SKU quantities", ko="SKU 수량"),
    ),
    CheckRule(
        "PRICE_MISMATCH",
        "items.unit_price",
        "BLOCKING",
        "items",
        "number",
        "SKU unit price mismatch",
        "SKU unit prices differ between the quotation and the invoice.",
        "Unit price mismatches are a leading cause of payment disputes.",
        LocalizedText(en="SKU unit prices", ko="SKU 단가"),
    ),
    CheckRule(
        "TOTALS_MISMATCH",
        "totals.grand_total",
        "BLOCKING",
        "totals",
        "number",
        "Totals mismatch",
        "The totals differ between the quotation and the invoice.",
        "Totals that do not reconcile directly affect payment and settlement.",
        LocalizedText(en="Total amount", ko="총액"),
    ),
    CheckRule(
        "LEADTIME_MISMATCH",
        "shipment.lead_time_days",
        "WARNING",
        "scalar",
        "number",
        "Lead time mismatch",
        "The lead time differs between documents.",
        "Inconsistent lead times are a source of late-delivery claims.",
        LocalizedText(en="Lead time (days)", ko="리드타임(일)"),
    ),
    CheckRule(
        "DESTINATION_MISMATCH",
        "shipment.destination_port",
        "WARNING",
        "scalar",
        "text",
        "Destination mismatch",
        "The destination port differs between documents.",
        "A destination mismatch adds logistics cost and risks misrouting.",
        LocalizedText(en="Destination port", ko="목적항"),
    ),
)

CHECK_COUNT = len(CHECKS)

CHECKS_BY_ID: Dict[str, CheckRule] = {check.finding_id: check for check in CHECKS}

SEVERITY_RANK: Dict[str, int] = {"BLOCKING": 0, "WARNING": 1, "OK": 2}

ITEM_DOCUMENTS: Tuple[str, ...] = (QUOTATION, COMMERCIAL_INVOICE, PACKING_LIST)
PRICE_DOCUMENTS: Tuple[str, ...] = (QUOTATION, COMMERCIAL_INVOICE)
TOTALS_DOCUMENTS: Tuple[str, ...] = (QUOTATION, COMMERCIAL_INVOICE)

MISSING_DOCUMENT_SUGGESTIONS: Dict[str, LocalizedText] = {
    COMMERCIAL_INVOICE: LocalizedText(
        en="Without a commercial invoice, customs clearance and settlement will need rework. Create it now?",
        ko="인보이스가 없으면 통관/정산 단계에서 재작업이 생깁니다. 지금 생성할까요?",
    ),
    PACKING_LIST: LocalizedText(
        en="Without a packing list, the logistics check may run into problems. Create it now?",
        ko="포장명세서가 없으면 물류 확인에 문제가 생길 수 있습니다. 지금 생성할까요?",
    ),
}


@dataclass(frozen=True)
class PriorityRule:
    priority: Tuple[str, ...]
    reason: LocalizedText


SOURCE_OF_TRUTH_RULES: Dict[str, PriorityRule] = {
    "buyer.name": PriorityRule(
        (CONTRACT, QUOTATION, COMMERCIAL_INVOICE),
        LocalizedText(en="Buyer details follow the contract", ko="바이어 정보는 계약서 기준"),
    ),
    "seller.name": PriorityRule(
        (CONTRACT, COMMERCIAL_INVOICE, QUOTATION),
        LocalizedText(en="The seller legal name follows the contract", ko="셀러 법인명은 계약서 기준"),
    ),
    "buyer.address": PriorityRule(
        (CONTRACT, COMMERCIAL_INVOICE, QUOTATION),
        LocalizedText(en="The consignee address follows the contract", ko="수취인 주소는 계약서 기준"),
    ),
    "terms.incoterms": PriorityRule(
        (CONTRACT, QUOTATION, COMMERCIAL_INVOICE),
        LocalizedText(
            en="Contract terms take precedence because the contract is legally binding",
            ko="계약 조건은 법적 구속력 있는 계약서 기준",
        ),
    ),
    "terms.payment_method": PriorityRule(
        (CONTRACT, QUOTATION),
        LocalizedText(en="Payment terms follow the contract", ko="결제 조건은 계약서 우선"),
    ),
    "terms.payment_split": PriorityRule(
        (CONTRACT, QUOTATION),
        LocalizedText(en="The payment split follows the contract", ko="결제 비율은 계약서 우선"),
    ),
    "terms.currency": PriorityRule(
        (QUOTATION, COMMERCIAL_INVOICE, CONTRACT),
        LocalizedText(
            en="Currency follows the quotation as the transaction basis",
            ko="통화는 거래 기준 견적서 우선",
        ),
    ),
    "items.quantity": PriorityRule(
        (QUOTATION, COMMERCIAL_INVOICE, PACKING_LIST),
        LocalizedText(en="Quantities follow the quotation as the order basis", ko="수량은 주문 기준 견적서 우선"),
    ),
    "items.unit_price": PriorityRule(
        (QUOTATION, COMMERCIAL_INVOICE),
        LocalizedText(en="Unit prices follow the quotation", ko="단가는 견적 기준 견적서 우선"),
    ),
    "totals.grand_total": PriorityRule(
        (COMMERCIAL_INVOICE, QUOTATION),
        LocalizedText(
            en="The total follows the latest finalized invoice when one exists",
            ko="총액은 최신 finalized 인보이스 우선 (있을 경우)",
        ),
    ),
    "totals.subtotal": PriorityRule(
        (COMMERCIAL_INVOICE, QUOTATION),
        LocalizedText(
            en="The subtotal follows the latest finalized invoice when one exists",
            ko="소계는 최신 finalized 인보이스 우선 (있을 경우)",
        ),
    ),
    "shipment.lead_time_days": PriorityRule(
        (CONTRACT, QUOTATION),
        LocalizedText(en="Lead time follows the contract", ko="납기는 계약서 기준"),
    ),
    "shipment.destination_port": PriorityRule(
        (QUOTATION, COMMERCIAL_INVOICE),
        LocalizedText(en="Shipping details follow the quotation", ko="배송 정보는 견적서 기준"),
    ),
}

DEFAULT_PRIORITY_RULE = PriorityRule(
    (CONTRACT, QUOTATION),
    LocalizedText(en="General rule: the contract takes precedence", ko="일반 규칙: 계약서 우선"),
)


def priority_rule_for(field_path: str) -> PriorityRule:
    return SOURCE_OF_TRUTH_RULES.get(field_path, DEFAULT_PRIORITY_RULE)


@dataclass(frozen=True)
class CauseTemplate:
    cause_id: str
    label: LocalizedText
    probability: float
    evidence: Tuple[str, ...]
    # context signal -> probability delta
    signals: Tuple[Tuple[str, float], ...] = ()


CAUSE_TEMPLATES: Dict[str, List[CauseTemplate]] = {
    "INCOTERMS_MISMATCH": [
        CauseTemplate(
            "INCO_C1",
            LocalizedText(
                en="Initial proposal (FOB) changed to CIF during negotiation, only one document updated",
                ko="초기 제안(FOB) → 본오더 협상 중 CIF로 변경, 한 문서만 업데이트",
            ),
            0.6,
            ("Quotation and contract Incoterms differ", "The latest document reflects negotiated terms"),
            (("contract_disagrees_with_quotation", 0.05), ("single_outlier", 0.05)),
        ),
        CauseTemplate(
            "INCO_C2",
            LocalizedText(en="Buyer requested DDP but only one document was updated", ko="바이어가 DDP 요구했으나 일부 문서만 반영"),
            0.25,
            ("DDP not reflected in the contract", "Shipping terms change was requested"),
            (("ddp_mentioned", 0.10),),
        ),
        CauseTemplate(
            "INCO_C3",
            LocalizedText(en="Channel-specific terms (Amazon/FBA) mixed in documents", ko="채널(아마존/FBA) 기준 terms 문구가 섞임"),
            0.15,
            ("Buyer sells through several channels", "FBA-related conditions mentioned"),
        ),
    ],
    "PAYMENT_MISMATCH": [
        CauseTemplate(
            "PAY_C1",
            LocalizedText(en="T/T 30/70 under review for L/C, only the contract updated", ko="T/T 30/70 → L/C 검토 중, 계약서만 변경"),
            0.5,
            ("Quotation and contract payment terms differ", "Payment negotiation in progress"),
            (("contract_disagrees_with_quotation", 0.05),),
        ),
        CauseTemplate(
            "PAY_C2",
            LocalizedText(en="Sample order terms (prepayment) mixed with bulk order terms", ko="샘플 주문 조건(선결제)과 본오더 조건 혼재"),
            0.35,
            ("Sample and bulk order terms mixed", "Order stage differs between documents"),
        ),
        CauseTemplate(
            "PAY_C3",
            LocalizedText(en="Commission/agency fee inclusion differs between documents", ko="수수료/커미션(에이전시) 포함 여부 차이"),
            0.15,
            ("Agency fee notation differs",),
        ),
    ],
    "PAYMENT_METHOD_MISMATCH": [
        CauseTemplate(
            "PAYM_C1",
            LocalizedText(en="Switch between T/T and L/C agreed in negotiation, not applied everywhere", ko="협상 중 T/T와 L/C 전환이 합의되었으나 일부 문서만 반영"),
            0.55,
            ("Payment method differs between documents", "Contract reflects the negotiated method"),
            (("contract_disagrees_with_quotation", 0.05),),
        ),
        CauseTemplate(
            "PAYM_C2",
            LocalizedText(en="Template default payment method left unchanged", ko="템플릿 기본 결제 방식이 수정되지 않음"),
            0.45,
            ("One document still carries the template default",),
            (("single_outlier", 0.05),),
        ),
    ],
    "CURRENCY_MISMATCH": [
        CauseTemplate(
            "CUR_C1",
            LocalizedText(en="Quote in USD, contract negotiated in JPY/EUR", ko="견적은 USD, 계약서는 JPY/EUR로 협상"),
            0.6,
            ("Quote currency differs from the buyer's local currency", "Exchange rate under negotiation"),
            (("contract_disagrees_with_quotation", 0.05),),
        ),
        CauseTemplate(
            "CUR_C2",
            LocalizedText(en="Unit price in USD but KRW memo value mixed in totals", ko="단가 USD인데 총액 KRW로 메모된 값이 끼어듦"),
            0.25,
            ("Internal KRW reference value exposed", "Converted amounts mixed"),
        ),
        CauseTemplate(
            "CUR_C3",
            LocalizedText(en="Exchange rate reference confused with actual currency", ko="환율 환산 표시(참고용)와 실제 통화 혼동"),
            0.15,
            ("Reference rate not separated from the transaction currency",),
        ),
    ],
    "QTY_MISMATCH": [
        CauseTemplate(
            "QTY_C1",
            LocalizedText(en="Sample and bulk order quantities mixed", ko="샘플/본오더 수량 혼재"),
            0.4,
            ("Small and large quantities listed together", "Order stage differs between documents"),
        ),
        CauseTemplate(
            "QTY_C2",
            LocalizedText(en="Packaging unit conversion error (box/EA)", ko="패키징 단위(박스/EA) 변환 오류"),
            0.35,
            ("Box and unit quantities mixed", "Unit notation differs"),
            (("integer_multiple", 0.10),),
        ),
        CauseTemplate(
            "QTY_C3",
            LocalizedText(en="Free goods included in some documents but not others", ko="무료 증정(FREE GOODS) 포함/미포함"),
            0.25,
            ("Promotional goods notation differs", "Only some documents include free goods"),
            (("small_numeric_gap", 0.05),),
        ),
    ],
    "PRICE_MISMATCH": [
        CauseTemplate(
            "PRICE_C1",
            LocalizedText(en="Price tier change (volume-based) not reflected in all documents", ko="가격 티어 변경(수량 구간별) 반영 누락"),
            0.45,
            ("Volume tier pricing applied differently", "Volume discount missing"),
        ),
        CauseTemplate(
            "PRICE_C2",
            LocalizedText(en="Promotion/discount applied inconsistently across documents", ko="프로모션/할인 적용 문서 불일치"),
            0.35,
            ("Discount applied to some documents only", "Discount notation differs"),
        ),
        CauseTemplate(
            "PRICE_C3",
            LocalizedText(en="Decimal rounding differences between documents", ko="소수점 반올림/라운딩 기준 차이"),
            0.2,
            ("Unit price decimals differ", "Rounding method differs"),
            (("small_numeric_gap", 0.10),),
        ),
    ],
    "TOTALS_MISMATCH": [
        CauseTemplate(
            "TOT_C1",
            LocalizedText(en="Subtotal correct but shipping/insurance inclusion differs", ko="Subtotal는 맞는데 Shipping/Insurance 포함 여부 차이"),
            0.45,
            ("Subtotals agree but totals differ", "Extra charge basis differs"),
            (("subtotals_match", 0.05), ("extra_charges_differ", 0.05)),
        ),
        CauseTemplate(
            "TOT_C2",
            LocalizedText(en="Tax/VAT notation varies (especially for EU)", ko="세금/VAT(특히 EU) 표기 방식 혼재"),
            0.35,
            ("VAT included in some totals only", "EU buyer"),
        ),
        CauseTemplate(
            "TOT_C3",
            LocalizedText(en="Commission/bank fees shown inconsistently", ko="수수료/커미션/은행 수수료 표시 혼재"),
            0.2,
            ("Fee lines differ", "Bank charge inclusion differs"),
            (("small_numeric_gap", 0.05),),
        ),
    ],
    "BUYER_NAME_MISMATCH": [
        CauseTemplate(
            "BUYER_C1",
            LocalizedText(en="Legal name vs brand name vs branch name mixed", ko="법인명 vs 브랜드명 vs 지사명 혼용"),
            0.6,
            ("Company name written differently", "Same company under different names"),
            (("names_share_prefix", 0.10),),
        ),
        CauseTemplate(
            "BUYER_C2",
            LocalizedText(en="Buyer requested a different consignee name on the PO", ko="바이어가 PO 상 수취인명을 다르게 요청"),
            0.4,
            ("Separate consignee name requested", "PO name differs from the contract name"),
        ),
    ],
    "SELLER_NAME_MISMATCH": [
        CauseTemplate(
            "SELLER_C1",
            LocalizedText(en="Trading name used instead of the registered legal name", ko="등록 법인명 대신 상호명 사용"),
            0.6,
            ("Seller name written differently", "Registered name differs from the brand"),
            (("names_share_prefix", 0.10),),
        ),
        CauseTemplate(
            "SELLER_C2",
            LocalizedText(en="Export agent listed as exporter on one document", ko="수출 대행사가 일부 문서에 수출자로 기재"),
            0.4,
            ("Agent appears as exporter",),
        ),
    ],
    "ADDRESS_MISMATCH": [
        CauseTemplate(
            "ADDR_C1",
            LocalizedText(en="Bill-to and ship-to addresses confused", ko="BILL TO / SHIP TO 혼동"),
            0.5,
            ("Billing and delivery addresses mixed", "Address field filled incorrectly"),
        ),
        CauseTemplate(
            "ADDR_C2",
            LocalizedText(en="DDP terms but ship-to address not yet confirmed", ko="DDP인데 배송지 확정 전"),
            0.5,
            ("DDP terms set", "Delivery address not finalized"),
            (("ddp_mentioned", 0.10),),
        ),
    ],
    "LEADTIME_MISMATCH": [
        CauseTemplate(
            "LEAD_C1",
            LocalizedText(en="Sample lead time and bulk order lead time mixed", ko="샘플 리드타임/본오더 리드타임 혼재"),
            0.5,
            ("Sample and bulk delivery terms differ", "Order type differs between documents"),
        ),
        CauseTemplate(
            "LEAD_C2",
            LocalizedText(en="Production vs shipping vs arrival lead time definition confused", ko="생산 vs 출고 vs 도착 리드타임 정의 혼동"),
            0.5,
            ("Lead time basis differs", "Start/end point unclear"),
            (("small_numeric_gap", 0.05),),
        ),
    ],
    "DESTINATION_MISMATCH": [
        CauseTemplate(
            "DEST_C1",
            LocalizedText(en="Destination port changed but only some documents updated", ko="목적항 변경 후 일부 문서만 업데이트"),
            0.7,
            ("Destination port differs", "Latest change not reflected"),
            (("single_outlier", 0.05),),
        ),
        CauseTemplate(
            "DEST_C2",
            LocalizedText(en="Multiple destination options, not yet finalized", ko="여러 배송지 옵션 중 확정 전 상태"),
            0.3,
            ("Several candidate destinations", "Delivery place not finalized"),
        ),
    ],
}

GENERIC_CAUSE = CauseTemplate(
    "GENERIC_C1",
    LocalizedText(en="Needs manual review", ko="수동 검토 필요"),
    0.3,
    ("No cause template for this finding type",),
)

SIGNAL_EVIDENCE: Dict[str, str] = {
    "contract_present": "A contract is part of the document set",
    "contract_disagrees_with_quotation": "Quotation and contract carry different values",
    "single_outlier": "Exactly one document disagrees with the others",
    "ddp_mentioned": "DDP appears in the shipping terms",
    "small_numeric_gap": "Values differ by less than 5%",
    "integer_multiple": "One quantity is an integer multiple of another",
    "subtotals_match": "Subtotals agree between quotation and invoice",
    "extra_charges_differ": "Shipping or insurance differs between quotation and invoice",
    "names_share_prefix": "The differing names share a common prefix",
}

COMMUNICATION_AUDIENCES: Dict[str, Tuple[Audience, ...]] = {
    "INCOTERMS_MISMATCH": ("INTERNAL", "COUNTERPARTY", "LOGISTICS"),
    "PAYMENT_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "PAYMENT_METHOD_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "CURRENCY_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "PRICE_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "TOTALS_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "BUYER_NAME_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "SELLER_NAME_MISMATCH": ("INTERNAL", "COUNTERPARTY"),
    "ADDRESS_MISMATCH": ("INTERNAL", "LOGISTICS"),
    "DESTINATION_MISMATCH": ("INTERNAL", "LOGISTICS"),
    "LEADTIME_MISMATCH": ("INTERNAL", "LOGISTICS"),
    "QTY_MISMATCH": ("INTERNAL", "LOGISTICS"),
}

DEFAULT_AUDIENCES: Tuple[Audience, ...] = ("INTERNAL",)

RISK_MESSAGES: Dict[str, LocalizedText] = {
    "INCOTERMS_MISMATCH": LocalizedText(
        en="Incoterms mismatch can cause disputes over cost sharing and risk transfer. Risk of customs delays and additional costs.",
        ko="인코텀즈 불일치 시 비용 분담과 위험 이전 시점에 분쟁 발생 가능. 통관 지연 및 추가 비용 위험.",
    ),
    "PAYMENT_MISMATCH": LocalizedText(
        en="Payment term mismatch can delay payment collection or cause disputes. Risk of L/C negotiation failure.",
        ko="결제 조건 불일치 시 대금 수령 지연 또는 분쟁 가능. 신용장 조건 불일치로 네고 불가 위험.",
    ),
    "PAYMENT_METHOD_MISMATCH": LocalizedText(
        en="A payment method mismatch can stop the bank from releasing funds.",
        ko="결제 방식 불일치 시 은행 대금 지급이 거절될 수 있음.",
    ),
    "CURRENCY_MISMATCH": LocalizedText(
        en="Currency mismatch can cause exchange rate losses or settlement confusion. Risk of amount disputes with the buyer.",
        ko="통화 불일치 시 환율 손실 또는 정산 혼란 발생. 바이어와 금액 분쟁 위험.",
    ),
    "QTY_MISMATCH": LocalizedText(
        en="Quantity mismatch can cause customs hold, return shipment, or over/under-billing issues.",
        ko="수량 불일치 시 통관 보류, 반송, 또는 과소/과다 청구 문제 발생.",
    ),
    "PRICE_MISMATCH": LocalizedText(
        en="Price mismatch is a direct cause of payment disputes. Damages buyer trust.",
        ko="단가 불일치 시 대금 정산 분쟁의 직접적 원인. 바이어 신뢰도 하락.",
    ),
    "TOTALS_MISMATCH": LocalizedText(
        en="Total amount mismatch directly affects payment and settlement. Can cause audit issues.",
        ko="총액 불일치 시 결제 및 정산 직접 영향. 회계 감사 문제 가능.",
    ),
    "BUYER_NAME_MISMATCH": LocalizedText(
        en="Buyer name mismatch can cause cargo hold due to consignee verification failure at customs.",
        ko="바이어명 불일치 시 통관 시 수취인 확인 실패로 화물 보류 위험.",
    ),
    "SELLER_NAME_MISMATCH": LocalizedText(
        en="Seller name mismatch can invalidate documents presented under an L/C.",
        ko="셀러명 불일치 시 신용장 서류 하자로 처리될 위험.",
    ),
    "ADDRESS_MISMATCH": LocalizedText(
        en="Address mismatch risks delivery delay or wrong delivery. Can cause customs issues for DDP.",
        ko="주소 불일치 시 배송 지연 또는 오배송 위험. DDP 시 세관 문제 발생 가능.",
    ),
    "LEADTIME_MISMATCH": LocalizedText(
        en="Lead time mismatch can cause delivery delay claims. May trigger penalty for contract violation.",
        ko="납기 불일치 시 배송 지연 클레임 원인. 계약 위반으로 패널티 가능.",
    ),
    "DESTINATION_MISMATCH": LocalizedText(
        en="Destination mismatch can cause additional logistics costs. Risk of cargo misrouting.",
        ko="목적지 불일치 시 물류 비용 추가 발생. 화물 오배송 위험.",
    ),
}

DEFAULT_RISK = LocalizedText(
    en="Document inconsistency can cause trade disputes.",
    ko="문서 간 불일치는 거래 분쟁의 원인이 됩니다.",
)


def check_for(finding_id: str) -> Optional[CheckRule]:
    return CHECKS_BY_ID.get(finding_id)

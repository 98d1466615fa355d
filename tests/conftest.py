import copy

import pytest

from tradecheck.core.extractor import extract_document_set

RAW_DOCUMENTS = {
    "Quotation": {
        "buyer": {
            "companyName": "Pacific Beauty Inc.",
            "contactName": "Jane Kim",
            "addressLine1": "123 Main St, Los Angeles, CA",
        },
        "seller": {"legalName": "K-Glow Co., Ltd."},
        "terms": {"incoterms": "FOB Incheon", "paymentMethod": "T/T", "paymentSplit": "30/70", "currency": "USD"},
        "shipment": {"destinationPort": "Los Angeles", "leadTimeDays": 30},
        "items": [
            {"skuId": "SKU001", "name": "Hydrating Serum", "qty": 500, "unitPrice": 12, "amount": 6000},
            {"skuId": "SKU002", "name": "Sheet Mask", "qty": 200, "unitPrice": 12.5, "amount": 2500},
        ],
        "totals": {"subtotal": 8500, "shipping": 350, "grandTotal": 8850},
    },
    "Contract": {
        "parties": {
            "seller": {"legalName": "K-Glow Co., Ltd."},
            "buyer": {"legalName": "Pacific Beauty Inc.", "address": "123 Main St, Los Angeles, CA"},
        },
        "deliveryTerms": {"incoterms": "CIF Los Angeles", "leadTimeDays": 30},
        "paymentTerms": {"method": "T/T", "split": "50/50"},
        "currency": "USD",
    },
    "CommercialInvoice": {
        "exporter": {"name": "K-Glow Co., Ltd."},
        "consignee": {"name": "Pacific Beauty Inc.", "address": "123 Main St, Los Angeles, CA"},
        "incoterms": "CIF Los Angeles",
        "paymentMethod": "T/T",
        "currency": "USD",
        "portOfDischarge": "Los Angeles",
        "lineItems": [
            {"sku": "SKU001", "description": "Hydrating Serum", "quantity": 480, "unitPrice": 12, "amount": 5760},
            {"sku": "SKU002", "description": "Sheet Mask", "quantity": 200, "unitPrice": 11.5, "amount": 2300},
        ],
        "totals": {"subtotal": 8060, "shipping": 350, "insurance": 100, "grandTotal": 8510},
    },
    "PackingList": {
        "shipper": {"name": "K-Glow Co., Ltd."},
        "consignee": {"name": "Pacific Beauty Inc.", "address": "123 Main St, Los Angeles, CA"},
        "portOfDischarge": "Los Angeles",
        "packages": [
            {"sku": "SKU001", "description": "Hydrating Serum", "quantity": 500, "packaging": "10 cartons"},
            {"sku": "SKU002", "description": "Sheet Mask", "quantity": 200, "packaging": "4 cartons"},
        ],
    },
}

# Two documents that disagree on every checked field.
DIVERGENT_DOCUMENTS = {
    "Quotation": {
        "buyer": {"name": "Alpha Trading", "address": "1 First St"},
        "seller": {"name": "K-Glow Co., Ltd."},
        "terms": {"incoterms": "FOB Busan", "payment_method": "T/T", "payment_split": "30/70", "currency": "USD"},
        "shipment": {"destination_port": "Los Angeles", "lead_time_days": 30},
        "items": [{"sku_id": "A1", "quantity": 10, "unit_price": 5, "amount": 50}],
        "totals": {"subtotal": 50, "grand_total": 50},
    },
    "CommercialInvoice": {
        "buyer": {"name": "Beta Imports", "address": "2 Second Ave"},
        "seller": {"name": "KGlow Export"},
        "terms": {"incoterms": "CIF Long Beach", "payment_method": "L/C", "payment_split": "100", "currency": "EUR"},
        "shipment": {"destination_port": "Long Beach", "lead_time_days": 45},
        "items": [{"sku_id": "A1", "quantity": 12, "unit_price": 6, "amount": 72}],
        "totals": {"subtotal": 72, "grand_total": 72},
    },
}


@pytest.fixture
def raw_documents():
    return copy.deepcopy(RAW_DOCUMENTS)


@pytest.fixture
def documents(raw_documents):
    return extract_document_set(raw_documents)


@pytest.fixture
def divergent_raw():
    return copy.deepcopy(DIVERGENT_DOCUMENTS)


@pytest.fixture
def divergent_documents(divergent_raw):
    return extract_document_set(divergent_raw)


@pytest.fixture
def consistent_documents(raw_documents):
    quotation = raw_documents["Quotation"]
    return extract_document_set({kind: copy.deepcopy(quotation) for kind in raw_documents})

import pytest

from tradecheck.webapp import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_crosscheck(client, raw_documents):
    response = client.post("/api/crosscheck", json={"documents": raw_documents, "project_name": "Spring Order"})
    payload = response.get_json()

    assert response.status_code == 200
    assert payload["result"]["summary"]["blocking_count"] == 5
    assert payload["project_name"] == "Spring Order"


def test_crosscheck_rejects_bad_body(client):
    response = client.post("/api/crosscheck", data="not json", content_type="application/json")

    assert response.status_code == 400
    assert "error" in response.get_json()

    response = client.post("/api/crosscheck", json={"documents": []})
    assert response.status_code == 400


def test_fix_totals(client, raw_documents):
    response = client.post(
        "/api/fix",
        json={"documents": raw_documents, "finding_id": "TOTALS_MISMATCH", "value": 8850},
    )
    payload = response.get_json()

    assert response.status_code == 200
    assert payload["applied"] is True
    assert payload["updated_document_kinds"] == ["CommercialInvoice"]
    assert payload["document_set"]["versions"]["CommercialInvoice"] == 2
    assert payload["report"]["result"]["totals_diff"]["total_status"] == "OK"
    assert payload["communication_kit"]["internal_note"] is not None


def test_fix_requires_finding_id(client, raw_documents):
    response = client.post("/api/fix", json={"documents": raw_documents})

    assert response.status_code == 400


def test_stale_fix(client, raw_documents):
    response = client.post(
        "/api/fix",
        json={"documents": raw_documents, "finding_id": "DESTINATION_MISMATCH", "value": "Long Beach"},
    )
    payload = response.get_json()

    assert response.status_code == 200
    assert payload["stale"] is True
    assert payload["applied"] is False
    assert payload["communication_kit"] is None


def test_fix_blocking(client, raw_documents):
    response = client.post("/api/fix/blocking", json={"documents": raw_documents})
    payload = response.get_json()

    assert response.status_code == 200
    assert payload["applied_count"] >= 5
    assert payload["report"]["ready_to_finalize"] is True
    assert payload["message"].startswith("We've corrected")


def test_answer(client, raw_documents):
    response = client.post(
        "/api/answer",
        json={"documents": raw_documents, "finding_id": "INCOTERMS_MISMATCH", "option_index": 1},
    )
    payload = response.get_json()

    assert response.status_code == 200
    assert payload["answer"]["selected_value"] == "CIF Los Angeles"
    assert payload["updated_document_kinds"] == ["Quotation"]
    assert "finalized as CIF Los Angeles" in payload["summary"]


def test_answer_rejects_bad_option(client, raw_documents):
    response = client.post(
        "/api/answer",
        json={"documents": raw_documents, "finding_id": "INCOTERMS_MISMATCH", "option_index": 9},
    )
    assert response.status_code == 400

    response = client.post(
        "/api/answer",
        json={"documents": raw_documents, "finding_id": "DESTINATION_MISMATCH", "option_index": 0},
    )
    assert response.status_code == 400

import json

from tradecheck.core.pipeline import DOCUMENT_SET_FILE, FIX_SUMMARY_FILE, REPORT_FILE, run_pipeline


def _write_input(tmp_path, raw_documents):
    path = tmp_path / "document_set.json"
    path.write_text(json.dumps({"documents": raw_documents}), encoding="utf-8")
    return path


def test_pipeline_writes_report(tmp_path, raw_documents):
    input_path = _write_input(tmp_path, raw_documents)
    out_dir = tmp_path / "out"

    report = run_pipeline(str(input_path), str(out_dir), project_name="Spring Order")

    assert report["result"]["summary"]["blocking_count"] == 5
    written = json.loads((out_dir / REPORT_FILE).read_text(encoding="utf-8"))
    assert written["result"]["summary"]["score"] == 40
    assert report == written
    document_set = json.loads((out_dir / DOCUMENT_SET_FILE).read_text(encoding="utf-8"))
    assert document_set["versions"]["Quotation"] == 1
    assert not (out_dir / FIX_SUMMARY_FILE).exists()


def test_pipeline_auto_fix(tmp_path, raw_documents):
    input_path = _write_input(tmp_path, raw_documents)
    out_dir = tmp_path / "out"

    report = run_pipeline(str(input_path), str(out_dir), auto_fix=True)

    assert report["ready_to_finalize"] is True
    summary = json.loads((out_dir / FIX_SUMMARY_FILE).read_text(encoding="utf-8"))
    assert summary["applied_count"] >= 5
    assert summary["skipped_finding_ids"] == []
    assert summary["message"].startswith("We've corrected")


def test_pipeline_bare_mapping_input(tmp_path, raw_documents):
    path = tmp_path / "bare.json"
    path.write_text(json.dumps(raw_documents), encoding="utf-8")

    report = run_pipeline(str(path), str(tmp_path / "out"))

    assert report["result"]["summary"]["blocking_count"] == 5


def test_pipeline_missing_input(tmp_path):
    report = run_pipeline(str(tmp_path / "absent.json"), str(tmp_path / "out"))

    assert report["result"]["findings"] == []
    assert [entry["document"] for entry in report["result"]["missing_docs"]] == [
        "CommercialInvoice",
        "PackingList",
    ]

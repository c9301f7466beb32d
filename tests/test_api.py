import pytest
from fastapi.testclient import TestClient

from rscan.main import app
from rscan.session import Session


@pytest.fixture
def client():
    app.state.session = Session()
    return TestClient(app)


@pytest.fixture
def loaded(client, fasta_text):
    resp = client.post("/api/session/fasta", files={"file": ("aln.fasta", fasta_text.encode(), "text/plain")})
    assert resp.status_code == 200
    return client


def test_upload_lists_sequences(loaded):
    entries = loaded.get("/api/session/labels").json()
    assert [e["index"] for e in entries] == [0, 1, 2, 3]
    assert entries[0]["id"] == "s0"
    assert entries[0]["label"] == "s0 first sample"
    assert entries[0]["length"] == 10


def test_requires_alignment(client):
    assert client.get("/api/session/groups").status_code == 409
    assert client.post("/api/session/scan").status_code == 409


def test_bad_fasta(client):
    resp = client.post("/api/session/text", json={"text": ">a\nACGT\n>b\nAC\n"})
    assert resp.status_code == 400


def test_groups(loaded):
    assert loaded.get("/api/session/groups").json() == [[0], [1], [2], [3]]
    assert loaded.put("/api/session/groups", json={"groups": [[0, 1], [2, 3]]}).json() == [[0, 1], [2, 3]]
    assert loaded.put("/api/session/groups", json={"groups": [[0, 7]]}).status_code == 400
    assert loaded.put("/api/session/groups", json={"groups": []}).json() == [[0], [1], [2], [3]]


def test_params_and_presets(loaded):
    params = loaded.put("/api/session/params", json={"ka": 5, "formula": "1 - ka*(1-a)"}).json()
    assert params["ka"] == 5
    assert params["formula"] == "1 - ka*(1-a)"
    assert loaded.put("/api/session/params", json={"formula": "exec('x')"}).status_code == 400
    assert loaded.post("/api/session/consensus/low").json()["ka"] == 3
    assert loaded.post("/api/session/aspecificity/allow").json()["kb"] == 0
    assert loaded.post("/api/session/aspecificity/sometimes").status_code == 404


def test_color_ranges_and_layout(loaded):
    resp = loaded.put("/api/session/color-ranges", json={"ranges": [0.1, 0.2, 0.3, 0.4]})
    assert resp.json()["color_ranges"] == [0.1, 0.2, 0.3, 0.4]
    assert loaded.put("/api/session/color-ranges", json={"ranges": [0.1]}).status_code == 400
    assert loaded.put("/api/session/layout", json={"window_length": 4}).json()["window_length"] == 4


def test_scan_pages_and_csv(loaded):
    assert loaded.get("/api/session/pages").status_code == 409
    loaded.put("/api/session/groups", json={"groups": [[0, 1], [2, 3]]})
    loaded.put("/api/session/layout", json={"window_length": 8})

    summary = loaded.post("/api/session/scan").json()
    assert summary["num_seqs"] == 4
    assert summary["seq_size"] == 10

    pages = loaded.get("/api/session/pages").json()
    assert len(pages) == 2
    assert pages[1]["start"] == 8
    assert pages[0]["lines"][1]["cells"][1] == {"char": "A", "band": 4}

    resp = loaded.get("/api/session/scores.csv")
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.splitlines()
    assert len(lines) == 4
    assert lines[0].startswith("s0 first sample,")


def test_scan_formula_error(loaded):
    loaded.put("/api/session/groups", json={"groups": [[0, 1], [2, 3]]})
    loaded.put("/api/session/params", json={"formula": "a / b"})
    resp = loaded.post("/api/session/scan")
    assert resp.status_code == 422
    assert resp.json()["detail"]["position"] == 0


def test_color_scheme_endpoints(client):
    assert "classic" in client.get("/api/color-schemes").json()
    assert client.get("/api/color-schemes/classic").json()["name"] == "classic"
    assert client.get("/api/color-schemes/nope").status_code == 404



def test_upload_rejects_non_utf8(client):
    data = b">a\nAC\xff\xfeGT\n>b\nACGTAC\n"
    resp = client.post("/api/session/fasta", files={"file": ("aln.fasta", data, "text/plain")})
    assert resp.status_code == 400
    assert client.get("/api/session/labels").status_code == 409


def test_detect_type_endpoint_removed(client):
    assert client.get("/api/detect-type", params={"sequence": "ACGT"}).status_code == 404

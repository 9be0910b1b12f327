import io
import zipfile

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from backend import main
from mtef2latex.config import Selector

from tests.mtef_bytes import HEADER, FakeOle, char, line, mtef, ole_stream, tmpl

FRACTION = mtef(tmpl(Selector.FRACT, 0, line(char(0x61)), line(char(0x62))))


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def fake_olefile(monkeypatch):
    def factory(fp):
        raw = fp.read()
        if raw.startswith(b'EQ:'):
            return FakeOle({'Equation Native': raw[3:]})
        return FakeOle({})

    monkeypatch.setattr('olefile.OleFileIO', factory)


def _upload(name, data):
    return {"file": (name, data, "application/octet-stream")}


def test_root_lists_endpoints(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "/api/cong-thuc" in response.json()["endpoints"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_raw_mtef_equation(client):
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("eq.mtef", FRACTION))
    assert response.status_code == 200
    payload = response.json()
    assert payload["thanh_cong"] is True
    assert payload["latex"] == r"\frac{a}{b}"
    assert payload["metadata"]["mtef_version"] == 5
    assert payload["metadata"]["ung_dung"] == "MathType"
    assert payload["metadata"]["so_node"] == 1
    assert payload["metadata"]["canh_bao"] == []


def test_ole_equation(client, fake_olefile):
    response = client.post("/api/cong-thuc", files=_upload("oleObject1.bin", b"EQ:" + ole_stream(FRACTION)))
    assert response.status_code == 200
    assert response.json()["latex"] == r"\frac{a}{b}"


def test_backend_enables_extended_records(client):
    pile = mtef(bytes([0x04, 0x00, 0x01, 0x00]) + line(char(0x61)) + line(char(0x62)) + b"\x00")
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("pile.mtef", pile))
    assert response.status_code == 200
    assert response.json()["latex"] == r"\begin{array}{l} a \\ b \end{array}"


def test_decode_error_maps_to_400(client):
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("bad.mtef", HEADER + b"\x02\x00\x83"))
    assert response.status_code == 400
    payload = response.json()
    assert payload["loai"] == "MalformedBufferError"
    assert payload["tag"] == 2
    assert payload["offset"] == len(HEADER) + 3


def test_unresolved_lookup_maps_to_400(client):
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("eq.mtef", mtef(tmpl(99, 0, line(char(0x61))))))
    assert response.status_code == 400
    assert response.json()["loai"] == "UnresolvedLookupError"


def test_placeholder_mode_reports_warnings(client):
    data = mtef(tmpl(99, 0, line(char(0x61))))
    response = client.post("/api/cong-thuc?dang=mtef&giu_loi=true", files=_upload("eq.mtef", data))
    assert response.status_code == 200
    assert len(response.json()["metadata"]["canh_bao"]) == 1


def test_invalid_dang(client):
    response = client.post("/api/cong-thuc?dang=png", files=_upload("eq.mtef", FRACTION))
    assert response.status_code == 400


def test_missing_equation_stream(client, fake_olefile):
    response = client.post("/api/cong-thuc", files=_upload("oleObject1.bin", b"plain"))
    assert response.status_code == 400
    assert response.json()["loai"] == "OleContainerError"


def test_upload_size_limit(client, monkeypatch):
    monkeypatch.setattr(main, "GIOI_HAN_UPLOAD", 4)
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("eq.mtef", FRACTION))
    assert response.status_code == 400


def test_empty_upload(client):
    response = client.post("/api/cong-thuc?dang=mtef", files=_upload("eq.mtef", b""))
    assert response.status_code == 400


def _docx(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zout:
        for name, data in members.items():
            zout.writestr(name, data)
    return buffer.getvalue()


def test_docx_reports_each_equation(client, fake_olefile):
    docx = _docx({
        "word/document.xml": b"<w:document/>",
        "word/embeddings/oleObject1.bin": b"EQ:" + ole_stream(FRACTION),
        "word/embeddings/oleObject2.bin": b"not an equation",
    })
    response = client.post("/api/docx-cong-thuc", files=_upload("bai_tap.docx", docx))
    assert response.status_code == 200
    payload = response.json()
    assert payload["so_cong_thuc"] == 2
    assert payload["so_loi"] == 1
    first, second = payload["cong_thuc"]
    assert first["ten"] == "word/embeddings/oleObject1.bin"
    assert first["latex"] == r"\frac{a}{b}"
    assert second["thanh_cong"] is False
    assert second["loai"] == "OleContainerError"


def test_docx_endpoint_rejects_other_extensions(client):
    response = client.post("/api/docx-cong-thuc", files=_upload("bai_tap.pdf", b"%PDF"))
    assert response.status_code == 400


def test_docx_endpoint_rejects_broken_zip(client):
    response = client.post("/api/docx-cong-thuc", files=_upload("bai_tap.docx", b"not a zip"))
    assert response.status_code == 400
    assert response.json()["loai"] == "OleContainerError"


@pytest.mark.parametrize("gia_tri, mong_doi", [
    ("", True),
    ("off", False),
    ("0", False),
    ("yes", True),
])
def test_extended_records_env(monkeypatch, gia_tri, mong_doi):
    monkeypatch.setenv("MTEF_EXTENDED_RECORDS", gia_tri)
    assert main.tao_cau_hinh_giai_ma().extended_records is mong_doi


def test_invalid_extended_records_env_warns(monkeypatch, caplog):
    monkeypatch.setenv("MTEF_EXTENDED_RECORDS", "maybe")
    with caplog.at_level("WARNING", logger="mtef2latex.config"):
        config = main.tao_cau_hinh_giai_ma()
    assert config.extended_records is True
    assert any("MTEF_EXTENDED_RECORDS" in record.getMessage() for record in caplog.records)

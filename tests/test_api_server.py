from io import BytesIO

import cv2
import numpy as np
import pytest
from PIL import Image as PILImage

from pixel_recolor import api_server

from conftest import RED


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(api_server, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
    monkeypatch.setattr(api_server, "RESULTS_FOLDER", str(tmp_path / "results"))
    api_server.app.config["TESTING"] = True
    return api_server.app.test_client()


def _red_png_bytes() -> BytesIO:
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    pixels[...] = RED
    pixels[0, 1] = (0, 0, 0, 0)
    buf = BytesIO()
    PILImage.fromarray(pixels).save(buf, format="PNG")
    buf.seek(0)
    return buf


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


def test_recolor_roundtrip(client):
    resp = client.post("/api/recolor", data={
        "image": (_red_png_bytes(), "logo.png"),
        "target": "#ff0000",
        "replacement": "#00ff00",
        "tolerance": "0",
    }, content_type="multipart/form-data")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"]
    assert body["replaced_pixels"] == 3
    assert (body["width"], body["height"]) == (2, 2)
    assert body["image"].startswith("data:image/png;base64,")

    served = client.get(body["url"])
    assert served.status_code == 200
    with PILImage.open(BytesIO(served.data)) as img:
        arr = np.asarray(img.convert("RGBA"))
    assert arr[0, 0].tolist() == [0, 255, 0, 255]
    assert arr[0, 1].tolist() == [0, 0, 0, 0]


def test_recolor_requires_image(client):
    resp = client.post("/api/recolor", data={"target": "#ff0000", "replacement": "#00ff00"},
                       content_type="multipart/form-data")
    assert resp.status_code == 400


def test_recolor_rejects_bad_color(client):
    resp = client.post("/api/recolor", data={
        "image": (_red_png_bytes(), "logo.png"),
        "target": "red",
        "replacement": "#00ff00",
    }, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "Invalid parameters" in resp.get_json()["message"]


def test_unknown_image_is_404(client):
    assert client.get("/api/image/nothing.png").status_code == 404


def test_sixteen_bit_upload_decodes_like_files(client, tmp_path):
    bgra = np.empty((2, 2, 4), dtype=np.uint16)
    bgra[...] = (0x56F0, 0x34F0, 0x12F0, 0xFFFF)  # high bytes -> RGBA #123456ff
    ok, encoded = cv2.imencode(".png", bgra)
    assert ok

    resp = client.post("/api/recolor", data={
        "image": (BytesIO(encoded.tobytes()), "deep.png"),
        "target": "#123456ff",
        "replacement": "#00ff00",
        "tolerance": "0",
    }, content_type="multipart/form-data")

    assert resp.status_code == 200
    assert resp.get_json()["replaced_pixels"] == 4
    assert not any((tmp_path / "uploads").iterdir())


def test_undecodable_upload_is_400(client, tmp_path):
    resp = client.post("/api/recolor", data={
        "image": (BytesIO(b"not an image"), "junk.png"),
        "target": "#ff0000",
        "replacement": "#00ff00",
    }, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert not any((tmp_path / "uploads").iterdir())

import io
import importlib.util
import os

import pytest

from TRE.SGM.capture_encoder import CaptureEncoder
from TRE.SGM.frame_builder import FrameBuilder

SERVER_PATH = os.path.join(os.path.dirname(__file__), "..", "tools", "capture_server.py")


@pytest.fixture(scope="module")
def client():
    spec = importlib.util.spec_from_file_location("capture_server", SERVER_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    module.app.config["TESTING"] = True
    return module.app.test_client()


def _capture():
    fb = FrameBuilder()
    fb.add_word(0xBEEF, 16)
    fb.add_word(0x01, 8)
    return CaptureEncoder().encode_capture(fb.bits())


def test_health(client):
    assert client.get("/capture/health").get_json() == {"status": "ok"}


def test_missing_field(client):
    resp = client.post("/capture/process", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_json_report(client):
    resp = client.post(
        "/capture/process",
        data={"capture": (io.BytesIO(_capture()), "cap.bin")},
        content_type="multipart/form-data",
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["markers"] == 32 + 16 + 32 + 8 + 1
    assert [f["hex"] for f in body["frames"]] == ["1acffc1dbeef", "1acffc1d01"]
    assert body["summary"] == "Length: 40-48 bits"
    assert "debug" not in body


def test_binary_stream(client):
    resp = client.post(
        "/capture/process?format=bin",
        data={"capture": (io.BytesIO(_capture()), "cap.bin")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.data == bytes.fromhex("1acffc1dbeef1acffc1d01")

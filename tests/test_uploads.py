"""Tests for image uploads and the ImageKit client."""
import pytest
import requests

from poolrent.main import app
from poolrent.services import storage
from poolrent.services.storage import ImageUploader, UploadError, get_image_uploader
from tests.conftest import auth_headers, register_user

DATA_URL = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ"


class TestUploadEndpoints:

    def test_requires_token(self, client):
        resp = client.post("/api/upload/image", json={"file": DATA_URL})
        assert resp.status_code == 401

    def test_single_upload(self, client, uploader):
        token = register_user(client)["accessToken"]
        resp = client.post(
            "/api/upload/image",
            json={"file": DATA_URL, "folder": "/avatars"},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        assert resp.json()["url"].startswith("https://ik.imagekit.io/test/avatars/img_")
        assert uploader.calls[0][0] == DATA_URL

    def test_missing_file(self, client):
        token = register_user(client)["accessToken"]
        resp = client.post("/api/upload/image", json={"file": ""}, headers=auth_headers(token))
        assert resp.status_code == 400

    def test_multiple_upload_keeps_order(self, client, uploader):
        token = register_user(client)["accessToken"]
        resp = client.post(
            "/api/upload/images",
            json={"files": [DATA_URL, DATA_URL, DATA_URL], "folder": "/pools"},
            headers=auth_headers(token),
        )
        assert resp.status_code == 200
        urls = resp.json()["urls"]
        assert len(urls) == 3
        assert [u.rsplit("_", 1)[1] for u in urls] == ["0.jpg", "1.jpg", "2.jpg"]

    def test_empty_file_list(self, client):
        token = register_user(client)["accessToken"]
        resp = client.post("/api/upload/images", json={"files": []}, headers=auth_headers(token))
        assert resp.status_code == 400

    def test_batch_larger_than_a_pool_gallery(self, client, uploader):
        token = register_user(client)["accessToken"]
        resp = client.post("/api/upload/images", json={"files": [DATA_URL] * 8}, headers=auth_headers(token))
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"
        assert uploader.calls == []

    def test_provider_failure(self, client, uploader):
        token = register_user(client)["accessToken"]
        uploader.fail = True

        resp = client.post("/api/upload/image", json={"file": DATA_URL}, headers=auth_headers(token))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Upload failed"

    def test_one_failure_fails_the_batch(self, client, uploader):
        token = register_user(client)["accessToken"]
        bad = DATA_URL + "broken"
        uploader.fail_files.add(bad)

        resp = client.post(
            "/api/upload/images",
            json={"files": [DATA_URL, bad, DATA_URL]},
            headers=auth_headers(token),
        )
        assert resp.status_code == 400
        assert resp.json() == {"message": "Upload failed", "code": "UPLOAD_FAILED"}
        # Every upload was attempted and settled before the answer
        assert len(uploader.calls) == 3


class FakeResponse:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


class TestImageUploader:

    def test_unconfigured(self):
        with pytest.raises(UploadError):
            ImageUploader(private_key="", upload_url="https://upload.example").upload(DATA_URL, "a.jpg")

    def test_posts_multipart_with_basic_auth(self, monkeypatch):
        captured = {}

        def fake_post(url, files, auth, timeout):
            captured.update(url=url, files=files, auth=auth)
            return FakeResponse(200, {"url": "https://ik.imagekit.io/x/a.jpg"})

        monkeypatch.setattr(storage.requests, "post", fake_post)

        uploader = ImageUploader(private_key="private_key", upload_url="https://upload.example")
        url = uploader.upload(DATA_URL, "a.jpg", folder="/pools")

        assert url == "https://ik.imagekit.io/x/a.jpg"
        assert captured["auth"] == ("private_key", "")
        assert captured["files"]["fileName"] == (None, "a.jpg")
        assert captured["files"]["folder"] == (None, "/pools")

    def test_error_status(self, monkeypatch):
        monkeypatch.setattr(storage.requests, "post", lambda *a, **kw: FakeResponse(403, {"message": "denied"}))
        with pytest.raises(UploadError):
            ImageUploader(private_key="k", upload_url="https://upload.example").upload(DATA_URL, "a.jpg")

    def test_network_error(self, monkeypatch):
        def boom(*args, **kwargs):
            raise requests.ConnectionError("down")

        monkeypatch.setattr(storage.requests, "post", boom)
        with pytest.raises(UploadError):
            ImageUploader(private_key="k", upload_url="https://upload.example").upload(DATA_URL, "a.jpg")

    def test_non_json_success_body(self, monkeypatch):
        class HtmlResponse:
            status_code = 200
            ok = True
            text = "<html>Bad gateway</html>"

            def json(self):
                raise requests.JSONDecodeError("Expecting value", self.text, 0)

        monkeypatch.setattr(storage.requests, "post", lambda *a, **kw: HtmlResponse())
        with pytest.raises(UploadError):
            ImageUploader(private_key="k", upload_url="https://upload.example").upload(DATA_URL, "a.jpg")

    def test_success_without_url(self, monkeypatch):
        monkeypatch.setattr(storage.requests, "post", lambda *a, **kw: FakeResponse(200, {"fileId": "1"}))
        with pytest.raises(UploadError):
            ImageUploader(private_key="k", upload_url="https://upload.example").upload(DATA_URL, "a.jpg")


class TestUploadProviderErrorsOverHttp:

    def test_non_json_provider_body_answers_400(self, client, monkeypatch):
        class HtmlResponse:
            status_code = 200
            ok = True
            text = "<html>Bad gateway</html>"

            def json(self):
                raise requests.JSONDecodeError("Expecting value", self.text, 0)

        monkeypatch.setattr(storage.requests, "post", lambda *a, **kw: HtmlResponse())
        app.dependency_overrides[get_image_uploader] = lambda: ImageUploader(
            private_key="k", upload_url="https://upload.example"
        )
        token = register_user(client)["accessToken"]

        resp = client.post("/api/upload/image", json={"file": DATA_URL}, headers=auth_headers(token))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Upload failed"

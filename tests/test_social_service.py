"""
Tests for Social Service - Bluesky AT Protocol Integration

Tests cover session creation, blob upload, record composition,
posting, and error handling for the SocialService class.
HTTP is mocked at requests.get / requests.post.
"""

import logging
import re
from unittest.mock import patch

import pytest
import requests

from config import settings
from services.protocols import BlueskyCredentials, ExternalEmbed, ShareContent
from services.social_service import SocialService

BLOB = {
    "$type": "blob",
    "ref": {"$link": "bafkreibme22gw2h7y2h7tg2fhqotaqjucnbc24deqo72b6mkl2egezxhvy"},
    "mimeType": "image/png",
    "size": 1024,
}

SHARE_URL = "https://rmc-8.com/shosha/random_shosha/?book_id=meian-natsume&sentence_id=12"
POST_TEXT = f"『明暗』夏目漱石著\n#ランダム書写 #meiannatsume_12\n{SHARE_URL}"


@pytest.fixture
def social_service(bluesky_credentials):
    return SocialService(bluesky_credentials, lang="ja")


@pytest.fixture
def fake_xrpc(mock_http_response):
    """
    Route requests.post by XRPC method name.

    Returns:
        tuple: (responses dict keyed by method name, list of recorded calls)
    """
    responses = {
        "com.atproto.server.createSession": mock_http_response(
            json_data={"accessJwt": "jwt-123", "refreshJwt": "refresh", "did": "did:plc:abc"}
        ),
        "com.atproto.repo.uploadBlob": mock_http_response(json_data={"blob": BLOB}),
        "com.atproto.repo.createRecord": mock_http_response(
            json_data={"uri": "at://did:plc:abc/app.bsky.feed.post/1", "cid": "bafy"}
        ),
    }
    calls = []

    def _post(url, **kwargs):
        method = url.rsplit("/", 1)[-1]
        calls.append((method, kwargs))
        response = responses[method]
        if isinstance(response, Exception):
            raise response
        return response

    with patch("services.social_service.requests.post", side_effect=_post):
        yield responses, calls


@pytest.fixture
def image_download(mock_http_response):
    with patch("services.social_service.requests.get") as mock_get:
        mock_get.return_value = mock_http_response(content=b"\x89PNG...", headers={"Content-Type": "image/png"})
        yield mock_get


def _calls_for(calls, method):
    return [kwargs for name, kwargs in calls if name == method]


# =============================================================================
# Session Tests
# =============================================================================

class TestSession:
    """Tests for AT Protocol session creation."""

    def test_create_session_success(self, social_service, fake_xrpc):
        _, calls = fake_xrpc
        assert social_service.create_session() == "jwt-123"

        session_call = _calls_for(calls, "com.atproto.server.createSession")[0]
        assert session_call["json"] == {"identifier": "randomshosha.test", "password": "test-app-password"}

    def test_session_url(self, social_service, mock_http_response):
        with patch("services.social_service.requests.post") as mock_post:
            mock_post.return_value = mock_http_response(json_data={"accessJwt": "jwt"})
            social_service.create_session()

        assert mock_post.call_args[0][0] == f"{settings.BLUESKY_API_BASE}/com.atproto.server.createSession"

    def test_create_session_rejected(self, social_service, fake_xrpc, mock_http_response, capture_logs):
        responses, _ = fake_xrpc
        responses["com.atproto.server.createSession"] = mock_http_response(
            status_code=401, json_data={"error": "AuthenticationRequired"}
        )

        assert social_service.create_session() is None
        assert any("401" in r.getMessage() for r in capture_logs if r.levelno == logging.ERROR)

    def test_create_session_network_error(self, social_service, fake_xrpc):
        responses, _ = fake_xrpc
        responses["com.atproto.server.createSession"] = requests.ConnectionError("unreachable")
        assert social_service.create_session() is None

    def test_create_session_without_token(self, social_service, fake_xrpc, mock_http_response):
        responses, _ = fake_xrpc
        responses["com.atproto.server.createSession"] = mock_http_response(json_data={"did": "did:plc:abc"})
        assert social_service.create_session() is None

    def test_missing_credentials_skip_request(self):
        service = SocialService(BlueskyCredentials(identifier="", password=""))
        with patch("services.social_service.requests.post") as mock_post:
            assert service.create_session() is None
        mock_post.assert_not_called()

    def test_new_session_every_call(self, social_service, fake_xrpc):
        _, calls = fake_xrpc
        social_service.create_session()
        social_service.create_session()
        assert len(_calls_for(calls, "com.atproto.server.createSession")) == 2

    def test_password_not_logged(self, social_service, fake_xrpc, capture_logs):
        social_service.post_to_social("hello")
        assert all("test-app-password" not in r.getMessage() for r in capture_logs)


# =============================================================================
# Blob Upload Tests
# =============================================================================

class TestBlobUpload:
    """Tests for downloading an image and uploading it as a blob."""

    def test_upload_blob_success(self, social_service, fake_xrpc, image_download):
        _, calls = fake_xrpc
        blob = social_service.upload_blob("https://img.example/card.png", "jwt-123")

        assert blob == BLOB
        image_download.assert_called_once_with("https://img.example/card.png", timeout=settings.REQUEST_TIMEOUT)
        upload_call = _calls_for(calls, "com.atproto.repo.uploadBlob")[0]
        assert upload_call["data"] == b"\x89PNG..."
        assert upload_call["headers"] == {"Content-Type": "image/png", "Authorization": "Bearer jwt-123"}

    def test_missing_content_type_defaults_to_jpeg(self, social_service, fake_xrpc, mock_http_response):
        _, calls = fake_xrpc
        with patch("services.social_service.requests.get") as mock_get:
            mock_get.return_value = mock_http_response(content=b"jpeg-bytes", headers={})
            social_service.upload_blob("https://img.example/card", "jwt-123")

        upload_call = _calls_for(calls, "com.atproto.repo.uploadBlob")[0]
        assert upload_call["headers"]["Content-Type"] == "image/jpeg"

    def test_content_type_parameters_stripped(self, social_service, fake_xrpc, mock_http_response):
        _, calls = fake_xrpc
        with patch("services.social_service.requests.get") as mock_get:
            mock_get.return_value = mock_http_response(
                content=b"webp", headers={"Content-Type": "image/webp; charset=binary"}
            )
            social_service.upload_blob("https://img.example/card", "jwt-123")

        assert _calls_for(calls, "com.atproto.repo.uploadBlob")[0]["headers"]["Content-Type"] == "image/webp"

    def test_download_failure_returns_none(self, social_service, fake_xrpc):
        _, calls = fake_xrpc
        with patch("services.social_service.requests.get", side_effect=requests.ConnectionError("down")):
            assert social_service.upload_blob("https://img.example/card.png", "jwt-123") is None
        assert _calls_for(calls, "com.atproto.repo.uploadBlob") == []

    def test_download_error_status_returns_none(self, social_service, fake_xrpc, mock_http_response):
        with patch("services.social_service.requests.get") as mock_get:
            mock_get.return_value = mock_http_response(status_code=404, text="not found")
            assert social_service.upload_blob("https://img.example/card.png", "jwt-123") is None

    def test_upload_rejected_returns_none(self, social_service, fake_xrpc, image_download,
                                          mock_http_response, capture_logs):
        responses, _ = fake_xrpc
        responses["com.atproto.repo.uploadBlob"] = mock_http_response(
            status_code=400, json_data={"error": "BlobTooLarge"}
        )

        assert social_service.upload_blob("https://img.example/card.png", "jwt-123") is None
        assert any("BlobTooLarge" in r.getMessage() for r in capture_logs if r.levelno == logging.WARNING)

    def test_upload_without_blob_returns_none(self, social_service, fake_xrpc, image_download, mock_http_response):
        responses, _ = fake_xrpc
        responses["com.atproto.repo.uploadBlob"] = mock_http_response(json_data={})
        assert social_service.upload_blob("https://img.example/card.png", "jwt-123") is None


# =============================================================================
# Record Composition Tests
# =============================================================================

class TestRecordComposition:
    """Tests for building post records and embeds."""

    def test_record_without_facets_omits_field(self, social_service):
        record = social_service.build_post_record("ただの文章です").to_record()

        assert record["$type"] == "app.bsky.feed.post"
        assert record["text"] == "ただの文章です"
        assert "facets" not in record
        assert "embed" not in record

    def test_record_with_facets(self, social_service):
        record = social_service.build_post_record(POST_TEXT).to_record()

        assert len(record["facets"]) == 3
        assert record["facets"][0]["features"][0] == {
            "$type": "app.bsky.richtext.facet#link",
            "uri": SHARE_URL,
        }
        assert record["facets"][1]["index"] == {"byteStart": 28, "byteEnd": 47}

    def test_created_at_is_iso_utc(self, social_service):
        record = social_service.build_post_record("hello").to_record()
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", record["createdAt"])

    def test_record_nests_embed(self, social_service):
        embed = social_service.build_external_embed(SHARE_URL, thumb=BLOB)
        record = social_service.build_post_record(POST_TEXT, embed).to_record()

        assert record["embed"] == embed.to_record()
        assert record["embed"]["external"]["thumb"] is BLOB

    def test_post_record_is_immutable(self, social_service):
        post = social_service.build_post_record("hello")
        with pytest.raises(AttributeError):
            post.text = "changed"

    def test_embed_uses_japanese_defaults(self, social_service):
        embed = social_service.build_external_embed(SHARE_URL)
        assert embed.to_record() == {
            "$type": "app.bsky.embed.external",
            "external": {
                "uri": SHARE_URL,
                "title": "Random Shosha - 書写のお題",
                "description": "古典文学の一文を書写のお題として",
            },
        }

    def test_embed_uses_english_defaults(self, bluesky_credentials):
        embed = SocialService(bluesky_credentials, lang="en").build_external_embed(SHARE_URL)
        assert embed.title == "Random Shosha - Calligraphy Practice"
        assert embed.description == "Classic literature sentence for calligraphy practice"

    def test_embed_caller_values_and_thumb(self, social_service):
        embed = social_service.build_external_embed(SHARE_URL, "Title", "Description", thumb=BLOB)
        external = embed.to_record()["external"]
        assert external["title"] == "Title"
        assert external["description"] == "Description"
        assert external["thumb"] is BLOB

    def test_embed_without_thumb_omits_field(self):
        embed = ExternalEmbed(uri=SHARE_URL, title="Title", description="Description")
        assert "thumb" not in embed.to_record()["external"]


# =============================================================================
# Posting Tests
# =============================================================================

class TestPosting:
    """Tests for the full publish flow."""

    def test_post_text_only(self, social_service, fake_xrpc):
        _, calls = fake_xrpc
        assert social_service.post_to_social("ただの文章です") is True

        create_call = _calls_for(calls, "com.atproto.repo.createRecord")[0]
        assert create_call["headers"] == {"Authorization": "Bearer jwt-123"}
        payload = create_call["json"]
        assert payload["repo"] == "randomshosha.test"
        assert payload["collection"] == "app.bsky.feed.post"
        assert "facets" not in payload["record"]
        assert "embed" not in payload["record"]

    def test_post_with_thumbnail(self, social_service, fake_xrpc, image_download):
        _, calls = fake_xrpc
        result = social_service.post_to_social(
            POST_TEXT, share_url=SHARE_URL, ogp_image_url="https://img.example/card.png"
        )

        assert result is True
        record = _calls_for(calls, "com.atproto.repo.createRecord")[0]["json"]["record"]
        assert record["embed"]["external"]["thumb"] == BLOB
        assert record["embed"]["external"]["uri"] == SHARE_URL
        assert len(record["facets"]) == 3

    def test_failed_thumbnail_still_posts(self, social_service, fake_xrpc, image_download, mock_http_response):
        """A failed blob upload leaves the embed in place without a thumb."""
        responses, calls = fake_xrpc
        responses["com.atproto.repo.uploadBlob"] = mock_http_response(status_code=500, text="internal error")

        result = social_service.post_to_social(
            POST_TEXT, share_url=SHARE_URL, ogp_image_url="https://img.example/card.png"
        )

        assert result is True
        record = _calls_for(calls, "com.atproto.repo.createRecord")[0]["json"]["record"]
        assert record["embed"]["$type"] == "app.bsky.embed.external"
        assert "thumb" not in record["embed"]["external"]

    def test_image_ignored_without_share_url(self, social_service, fake_xrpc, image_download):
        _, calls = fake_xrpc
        assert social_service.post_to_social("hello", ogp_image_url="https://img.example/card.png") is True

        image_download.assert_not_called()
        assert "embed" not in _calls_for(calls, "com.atproto.repo.createRecord")[0]["json"]["record"]

    def test_auth_failure_aborts(self, social_service, fake_xrpc, mock_http_response):
        responses, calls = fake_xrpc
        responses["com.atproto.server.createSession"] = mock_http_response(status_code=401, json_data={})

        assert social_service.post_to_social(POST_TEXT, share_url=SHARE_URL) is False
        assert _calls_for(calls, "com.atproto.repo.createRecord") == []

    @pytest.mark.parametrize("status", [400, 401, 500])
    def test_create_record_rejected(self, social_service, fake_xrpc, mock_http_response, status):
        responses, _ = fake_xrpc
        responses["com.atproto.repo.createRecord"] = mock_http_response(
            status_code=status, json_data={"error": "InvalidRequest"}
        )
        assert social_service.post_to_social(POST_TEXT) is False

    def test_create_record_network_error(self, social_service, fake_xrpc):
        responses, _ = fake_xrpc
        responses["com.atproto.repo.createRecord"] = requests.ConnectionError("reset")
        assert social_service.post_to_social(POST_TEXT) is False

    def test_post_content_builds_ogp_thumbnail(self, social_service, fake_xrpc, image_download,
                                               sentence_record_factory):
        _, calls = fake_xrpc
        share = ShareContent(text=POST_TEXT, url=SHARE_URL)

        assert social_service.post_content(share, sentence_record_factory()) is True

        image_url = image_download.call_args[0][0]
        assert image_url.startswith(settings.OGP_IMAGE_API_URL + "?")
        assert "lang=ja" in image_url
        record = _calls_for(calls, "com.atproto.repo.createRecord")[0]["json"]["record"]
        assert record["embed"]["external"]["title"] == "Random Shosha - 書写のお題"
        assert record["embed"]["external"]["thumb"] == BLOB

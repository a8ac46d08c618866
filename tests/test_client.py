"""Vertex REST client request building and response parsing."""
from unittest.mock import MagicMock, patch

import pytest

from verbal_insights.infrastructure.llm import VertexRestClient, extract_json_object
from verbal_insights.infrastructure.media import encode_data_uri

POST = "verbal_insights.infrastructure.llm.client.requests.post"


def make_client():
    client = VertexRestClient(project="demo-project", location="us-central1", model="gemini-2.5-flash")
    client._token = "test-token"
    return client


def ok_response(text):
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return resp


class TestGenerateJson:

    def test_sends_prompt_and_media_parts(self):
        client = make_client()
        uri = encode_data_uri(b"RIFF", "audio/webm")
        with patch(POST, return_value=ok_response('{"summary": "ok"}')) as post:
            result = client.generate_json("Summarize this", media=[uri], operation="summarize_speech")

        assert result == {"summary": "ok"}
        url = post.call_args.args[0]
        assert url.endswith(
            "projects/demo-project/locations/us-central1/publishers/google/models/gemini-2.5-flash:generateContent"
        )
        body = post.call_args.kwargs["json"]
        text_part, media_part = body["contents"][0]["parts"]
        assert text_part["text"].endswith("Respond ONLY with minified JSON.")
        assert media_part == {"inlineData": {"mimeType": "audio/webm", "data": "UklGRg=="}}
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-token"

    def test_http_error_raises(self):
        client = make_client()
        resp = MagicMock(status_code=500, text="internal")
        with patch(POST, return_value=resp):
            with pytest.raises(RuntimeError, match="500"):
                client.generate_json("prompt")

    def test_joins_multiple_text_parts(self):
        client = make_client()
        resp = MagicMock(status_code=200)
        resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": "1}"}]}}]}
        with patch(POST, return_value=resp):
            assert client.generate_json("prompt") == {"a": 1}

    def test_token_is_fetched_once(self):
        client = make_client()
        client._token = None
        with patch.object(VertexRestClient, "_refresh_token",
                          autospec=True, side_effect=lambda c: setattr(c, "_token", "fresh")) as refresh:
            with patch(POST, return_value=ok_response("{}")):
                client.generate_json("one")
                client.generate_json("two")
        assert refresh.call_count == 1


class TestExtractJsonObject:

    def test_plain(self):
        assert extract_json_object('{"text": "hi"}') == {"text": "hi"}

    def test_fenced(self):
        assert extract_json_object('```json\n{"text": "hi"}\n```') == {"text": "hi"}

    def test_surrounded_by_prose(self):
        assert extract_json_object('Here you go: {"text": "hi"} Thanks!') == {"text": "hi"}

    @pytest.mark.parametrize("raw", ["no json here", "[1, 2]", ""])
    def test_rejects_non_objects(self, raw):
        with pytest.raises(ValueError):
            extract_json_object(raw)

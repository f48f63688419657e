"""Unit tests for the form definition source."""

import json

import httpx
import pytest

from formrender.source import (
    clean_up,
    decode,
    extract_form_definition,
    fetch_form,
    form_content_url,
)


class TestDecode:
    """Tests for definition text decoding."""

    @pytest.mark.unit
    def test_clean_up(self):
        assert clean_up('{\n  "id":\x83\n "a"}') == '{"id": "a"}'

    @pytest.mark.unit
    def test_plain_json(self):
        assert decode('  {"id": "form"}\n') == {"id": "form"}

    @pytest.mark.unit
    def test_double_encoded_string(self):
        wrapped = json.dumps(json.dumps({"id": "form", "items": []}))
        assert decode(wrapped) == {"id": "form", "items": []}

    @pytest.mark.unit
    def test_malformed_returns_none(self):
        assert decode("{not json") is None
        assert decode('"not json either"') is None


class TestExtractFormDefinition:
    @pytest.mark.unit
    def test_first_code_block(self):
        html = (
            "<html><body><div><pre><code>{&quot;id&quot;: &quot;one&quot;}</code></pre>"
            "<pre><code>{\"id\": \"two\"}</code></pre></div></body></html>"
        )
        assert extract_form_definition(html) == {"id": "one"}

    @pytest.mark.unit
    def test_code_outside_pre_ignored(self):
        assert extract_form_definition("<code>{}</code>") is None

    @pytest.mark.unit
    def test_no_block(self):
        assert extract_form_definition("<p>nothing</p>") is None


class TestFormContentUrl:
    @pytest.mark.unit
    def test_same_origin_page_rewritten(self):
        url = form_content_url("https://site.test/contact.html", "https://site.test")
        assert url == "https://site.test/contact/jcr:content/root/section/form.html"

    @pytest.mark.unit
    def test_json_and_foreign_urls_unchanged(self):
        assert form_content_url("https://site.test/f.json", "https://site.test") == (
            "https://site.test/f.json"
        )
        assert form_content_url("https://other.test/x", "https://site.test") == (
            "https://other.test/x"
        )
        assert form_content_url("https://site.test/x") == "https://site.test/x"


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchForm:
    """Tests for fetch_form using a mock transport."""

    @pytest.mark.unit
    async def test_json_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "form"})

        async with mock_client(handler) as client:
            assert await fetch_form("https://site.test/f.json", client) == {"id": "form"}

    @pytest.mark.unit
    async def test_html_response(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(
                200,
                text='<pre><code>{"id": "embedded"}</code></pre>',
                headers={"content-type": "text/html; charset=utf-8"},
            )

        async with mock_client(handler) as client:
            result = await fetch_form(
                "https://site.test/contact.html", client, base_origin="https://site.test"
            )
        assert result == {"id": "embedded"}
        assert seen == ["https://site.test/contact/jcr:content/root/section/form.html"]

    @pytest.mark.unit
    async def test_unknown_content_type(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x", headers={"content-type": "image/png"})

        async with mock_client(handler) as client:
            assert await fetch_form("https://site.test/x", client) is None

    @pytest.mark.unit
    async def test_error_status_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with mock_client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_form("https://site.test/missing.json", client)

    @pytest.mark.unit
    async def test_connection_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused")

        async with mock_client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await fetch_form("https://site.test/f.json", client)

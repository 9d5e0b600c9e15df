"""Tests for the Tagger GraphQL client."""

import json

import httpx
import pytest
import respx

from commanderlens.config import settings
from commanderlens.models.failure import TransientFetchError
from commanderlens.tagging.client import (
    TaggerAuth,
    TaggerCard,
    TaggerClient,
    extract_oracle_tags,
)


def _tag(name: str, **overrides) -> dict:
    tag = {
        "name": name,
        "slug": name,
        "type": "ORACLE_CARD_TAG",
        "namespace": "card",
        "status": "GOOD_STANDING",
        "ancestorTags": [],
    }
    tag.update(overrides)
    return tag


@pytest.fixture
def sol_ring_payload() -> dict:
    """FetchCard response for Sol Ring."""
    return {
        "data": {
            "card": {
                "name": "Sol Ring",
                "oracleId": "6ad8011d-3471-4369-9d68-b264cc027487",
                "taggings": [
                    {"status": "GOOD_STANDING", "tag": _tag("mana-rock")},
                    {"status": "GOOD_STANDING", "tag": _tag("adds-multiple-mana")},
                ],
            }
        }
    }


class TestExtractOracleTags:
    def test_keeps_good_standing_oracle_tags(self, sol_ring_payload: dict):
        card = TaggerCard.model_validate(sol_ring_payload["data"]["card"])

        assert extract_oracle_tags(card) == ["mana-rock", "adds-multiple-mana"]

    def test_skips_illustration_tags(self):
        card = TaggerCard.model_validate(
            {
                "name": "Sol Ring",
                "taggings": [
                    {"tag": _tag("ring", type="ILLUSTRATION_TAG", namespace="artwork")},
                    {"tag": _tag("mana-rock")},
                ],
            }
        )

        assert extract_oracle_tags(card) == ["mana-rock"]

    def test_skips_rejected_taggings_and_ancestors(self):
        card = TaggerCard.model_validate(
            {
                "name": "Sol Ring",
                "taggings": [
                    {"status": "REJECTED", "tag": _tag("ramp")},
                    {"tag": _tag("mana-rock", ancestorTags=[_tag("old", status="REJECTED")])},
                    {"tag": _tag("artifact", ancestorTags=[_tag("permanent")])},
                ],
            }
        )

        assert extract_oracle_tags(card) == ["artifact"]


class TestFetchCard:
    @pytest.mark.asyncio
    @respx.mock
    async def test_fetches_card(self, sol_ring_payload: dict):
        """Posts a FetchCard query and parses the taggings."""
        route = respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json=sol_ring_payload)
        )

        async with TaggerClient() as client:
            card = await client.fetch_card("C21", "263")

        assert card is not None
        assert card.name == "Sol Ring"
        assert len(card.taggings) == 2

        body = json.loads(route.calls.last.request.content)
        assert body["operationName"] == "FetchCard"
        assert body["variables"] == {"set": "c21", "number": "263", "back": False}

    @pytest.mark.asyncio
    @respx.mock
    async def test_null_card_is_not_found(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"data": {"card": None}})
        )

        async with TaggerClient() as client:
            assert await client.fetch_card("xxx", "1") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_is_transient(self):
        respx.post(settings.tagger_url).mock(return_value=httpx.Response(503))

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="HTTP 503"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_is_transient(self):
        respx.post(settings.tagger_url).mock(side_effect=httpx.ConnectTimeout("timed out"))

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="ConnectTimeout"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_graphql_error_is_transient(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"errors": [{"message": "bad query"}]})
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="GraphQL error"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_taggings_is_transient(self):
        """A card without a taggings field is a failed lookup."""
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"data": {"card": {"name": "Sol Ring"}}})
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="malformed"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_json_is_transient(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, content=b"<html>not json</html>")
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="malformed JSON"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_undecodable_body_is_transient(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, content=b'{"data": "\xff\xfe\xfa"}')
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_plain_string_graphql_errors_are_transient(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"errors": ["rate limited"]})
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="GraphQL error") as exc_info:
                await client.fetch_card("c21", "263")

        assert exc_info.value.detail == "rate limited"

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_with_undecodable_body(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(502, content=b"\xff\xfe bad gateway")
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="HTTP 502"):
                await client.fetch_card("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_auth_headers_when_configured(self, sol_ring_payload: dict):
        route = respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json=sol_ring_payload)
        )

        auth = TaggerAuth(csrf_token="token", cookie="_session=abc")
        async with TaggerClient(auth=auth) as client:
            await client.fetch_card("c21", "263")

        request = route.calls.last.request
        assert request.headers["X-CSRF-Token"] == "token"
        assert request.headers["Cookie"] == "_session=abc"


class TestSearchPrinting:
    @pytest.mark.asyncio
    @respx.mock
    async def test_prefers_exact_name(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": {
                        "cards": {
                            "results": [
                                {"name": "Sol Talisman", "set": "mh1", "collectorNumber": "226"},
                                {"name": "Sol Ring", "set": "c21", "collectorNumber": "263"},
                            ]
                        }
                    }
                },
            )
        )

        async with TaggerClient() as client:
            assert await client.search_printing("Sol Ring") == ("c21", "263")

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_results(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(200, json={"data": {"cards": {"results": []}}})
        )

        async with TaggerClient() as client:
            assert await client.search_printing("Nonexistent Card") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_cards_list_is_malformed(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(
                200,
                json={"data": {"cards": [{"name": "Sol Ring", "set": "c21"}]}},
            )
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="search payload is malformed"):
                await client.search_printing("Sol Ring")

    @pytest.mark.asyncio
    @respx.mock
    async def test_results_object_is_malformed(self):
        respx.post(settings.tagger_url).mock(
            return_value=httpx.Response(
                200, json={"data": {"cards": {"results": {"name": "Sol Ring"}}}}
            )
        )

        async with TaggerClient() as client:
            with pytest.raises(TransientFetchError, match="search payload is malformed"):
                await client.search_printing("Sol Ring")


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_does_not_close_borrowed_client(self):
        http_client = httpx.AsyncClient()
        client = TaggerClient(http_client=http_client)

        await client.aclose()

        assert not http_client.is_closed
        await http_client.aclose()

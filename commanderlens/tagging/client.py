"""
Scryfall Tagger GraphQL client.

Tagger exposes community-curated functional ("oracle") tags for each card
printing. It is not part of the public Scryfall REST API, so cards are
looked up by set code and collector number through its GraphQL endpoint.

Every failure (HTTP status, transport error, GraphQL error, malformed or
incomplete payload) is raised as TransientFetchError. A card the service
does not know about is not a failure: fetch_card returns None.
"""

from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from commanderlens.config import settings
from commanderlens.models.failure import TransientFetchError

GOOD_STANDING = "GOOD_STANDING"
ORACLE_TAG_TYPE = "ORACLE_CARD_TAG"

FETCH_CARD_QUERY = """
query FetchCard($set: String!, $number: String!, $back: Boolean = false) {
  card: cardBySet(set: $set, number: $number, back: $back) {
    name
    oracleId
    taggings(moderatorView: false) {
      status
      tag {
        name
        slug
        type
        namespace
        status
        ancestorTags {
          name
          slug
          type
          namespace
          status
        }
      }
    }
  }
}
"""

SEARCH_CARDS_QUERY = """
query SearchCards($input: CardSearchInput!) {
  cards(input: $input) {
    results {
      name
      set
      collectorNumber
    }
  }
}
"""


class TaggerTag(BaseModel):
    """A tag as returned by Tagger. Ancestors are parent tags in the taxonomy."""

    name: str
    slug: str = ""
    type: str | None = None
    namespace: str | None = None
    status: str | None = None
    ancestor_tags: list["TaggerTag"] = Field(default_factory=list, alias="ancestorTags")


class Tagging(BaseModel):
    """Association of a tag with a card."""

    tag: TaggerTag
    status: str | None = None


class TaggerCard(BaseModel):
    """Card payload from the FetchCard query."""

    name: str
    oracle_id: str | None = Field(default=None, alias="oracleId")
    # Required: a card without taggings is treated as a failed lookup
    taggings: list[Tagging]


class SearchResult(BaseModel):
    """One printing from the SearchCards query."""

    name: str
    set: str
    collector_number: str = Field(alias="collectorNumber")


@dataclass(frozen=True)
class TaggerAuth:
    """Tagger session credentials. Empty values send no auth headers."""

    csrf_token: str = ""
    cookie: str = ""

    @classmethod
    def from_settings(cls) -> "TaggerAuth":
        return cls(csrf_token=settings.tagger_csrf_token, cookie=settings.tagger_cookie)


def _is_good_standing(tag: TaggerTag) -> bool:
    """True if the tag and all of its ancestors are in good standing."""
    if tag.status and tag.status != GOOD_STANDING:
        return False
    return all(_is_good_standing(ancestor) for ancestor in tag.ancestor_tags)


def extract_oracle_tags(card: TaggerCard) -> list[str]:
    """
    Extract functional tag names from a card's taggings.

    Keeps only oracle tags (not illustration tags) where the tagging, the
    tag and every ancestor tag are in good standing. Order is preserved.
    """
    tags: list[str] = []
    for tagging in card.taggings:
        if tagging.status and tagging.status != GOOD_STANDING:
            continue

        tag = tagging.tag
        if tag.type != ORACLE_TAG_TYPE and tag.namespace != "card":
            continue

        if _is_good_standing(tag):
            tags.append(tag.name)

    return tags


class TaggerClient:
    """
    Async client for the Tagger GraphQL endpoint.

    Use as an async context manager, or pass in an httpx.AsyncClient whose
    lifecycle the caller owns.
    """

    def __init__(
        self,
        base_url: str | None = None,
        auth: TaggerAuth | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.tagger_url
        self.auth = auth or TaggerAuth.from_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.tagger_timeout_seconds
        )

    async def __aenter__(self) -> "TaggerClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, referer: str) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "*/*",
            "User-Agent": settings.tagger_user_agent,
            "Origin": "https://tagger.scryfall.com",
            "Referer": referer,
        }
        if self.auth.cookie:
            headers["Cookie"] = self.auth.cookie
        if self.auth.csrf_token:
            headers["X-CSRF-Token"] = self.auth.csrf_token
        return headers

    async def _post(
        self,
        operation: str,
        query: str,
        variables: dict[str, Any],
        referer: str,
    ) -> dict[str, Any]:
        """
        Issue one GraphQL request and return its `data` object.

        Raises:
            TransientFetchError: On any transport, HTTP or GraphQL failure
        """
        payload = {"query": query, "variables": variables, "operationName": operation}

        try:
            response = await self._client.post(
                self.base_url,
                json=payload,
                headers=self._headers(referer),
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise TransientFetchError(
                f"Tagger API error: HTTP {e.response.status_code}",
                detail=e.response.content[:200].decode("utf-8", errors="replace"),
            ) from e
        except httpx.RequestError as e:
            raise TransientFetchError(
                f"Tagger request failed: {type(e).__name__}", detail=str(e)
            ) from e
        except ValueError as e:
            # Covers undecodable bytes as well as invalid JSON
            raise TransientFetchError("Tagger returned malformed JSON", detail=str(e)) from e

        if not isinstance(body, dict):
            raise TransientFetchError("Tagger returned an unexpected response shape")
        if body.get("success") is False:
            raise TransientFetchError(
                "Tagger API rejected the request", detail=str(body.get("message"))
            )
        errors = body.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise TransientFetchError("Tagger GraphQL error", detail=messages)

        data = body.get("data")
        if not isinstance(data, dict):
            raise TransientFetchError("Tagger response is missing data")
        return data

    async def fetch_card(
        self,
        set_code: str,
        number: str,
        back: bool = False,
    ) -> TaggerCard | None:
        """
        Fetch a printing and its taggings.

        Args:
            set_code: Set code (e.g., "dom")
            number: Collector number
            back: Fetch the back face of a double-faced card

        Returns:
            The card, or None if Tagger has no such printing

        Raises:
            TransientFetchError: If the request fails or the payload is malformed
        """
        data = await self._post(
            "FetchCard",
            FETCH_CARD_QUERY,
            {"set": set_code.lower(), "number": number, "back": back},
            referer=f"https://tagger.scryfall.com/card/{set_code.lower()}/{number}",
        )

        card = data.get("card")
        if card is None:
            return None

        try:
            return TaggerCard.model_validate(card)
        except ValidationError as e:
            raise TransientFetchError("Tagger card payload is malformed", detail=str(e)) from e

    async def search_printing(self, name: str) -> tuple[str, str] | None:
        """
        Find a printing for a card name.

        Returns:
            (set code, collector number) of the first exact-name match,
            falling back to the first result; None if nothing matched

        Raises:
            TransientFetchError: If the request fails or the payload is malformed
        """
        data = await self._post(
            "SearchCards",
            SEARCH_CARDS_QUERY,
            {"input": {"query": f'!"{name}"', "mode": "CARD", "page": 1}},
            referer="https://tagger.scryfall.com/search",
        )

        cards = data.get("cards") or {}
        items = (cards.get("results") or []) if isinstance(cards, dict) else None
        if not isinstance(items, list):
            raise TransientFetchError("Tagger search payload is malformed")

        try:
            results = [SearchResult.model_validate(item) for item in items]
        except ValidationError as e:
            raise TransientFetchError("Tagger search payload is malformed", detail=str(e)) from e

        if not results:
            return None

        exact = next((r for r in results if r.name.lower() == name.lower()), results[0])
        return exact.set, exact.collector_number

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Iterable, Protocol

from .parsing import clean_repaired_url, extract_json_array, normalize_entries
from .prompts import build_lookup_prompt, build_url_repair_prompt
from .schemas import ApplicantProfile, SearchFilters


logger = logging.getLogger(__name__)

LOOKUP_FAILED_MESSAGE = "Failed to fetch applicant data from AI. Please check the server logs for more details."


class ApplicantLookupError(RuntimeError):
    pass


class GenerativeClient(Protocol):
    async def generate(self, prompt: str, *, web_search: bool = True, thinking_budget: int | None = None) -> str:
        ...


class ApplicantLookupService:
    """Finds applicant profiles through one grounded model call plus URL repairs."""

    def __init__(
        self,
        client: GenerativeClient,
        *,
        redirector_marker: str = "vertexaisearch.cloud.google.com",
        image_base: str = "https://picsum.photos/seed",
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.redirector_marker = redirector_marker
        self.image_base = image_base
        self._today = today

    async def lookup(
        self,
        query: str,
        filters: SearchFilters,
        exclude_urls: Iterable[str] = (),
    ) -> list[ApplicantProfile]:
        exclude = list(exclude_urls)
        prompt = build_lookup_prompt(query, filters, exclude, today=self._today())
        try:
            text = await self.client.generate(prompt, web_search=True)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error calling Gemini for applicant lookup")
            raise ApplicantLookupError(LOOKUP_FAILED_MESSAGE) from exc

        items = extract_json_array(text or "")
        if items is None:
            logger.warning("Could not parse applicant JSON array from response: %.500s", text)
            return []

        profiles = normalize_entries(items, self.image_base)
        profiles = await self._repair_sources(profiles)

        if exclude:
            seen = set(exclude)
            profiles = [p for p in profiles if p.primary_source_url not in seen]
        return profiles

    def needs_repair(self, profile: ApplicantProfile) -> bool:
        return self.redirector_marker in profile.primary_source_url

    async def find_public_url(self, page_title: str) -> str | None:
        """Ask the model for the public URL of a page with this exact title."""
        text = await self.client.generate(
            build_url_repair_prompt(page_title),
            web_search=True,
            thinking_budget=0,
        )
        url = clean_repaired_url(text)
        if url is None:
            logger.warning("Could not find a valid URL for title %r. Got: %r", page_title, text)
        return url

    async def _repair_sources(self, profiles: list[ApplicantProfile]) -> list[ApplicantProfile]:
        return list(await asyncio.gather(*(self._repair_one(p) for p in profiles)))

    async def _repair_one(self, profile: ApplicantProfile) -> ApplicantProfile:
        if not self.needs_repair(profile):
            return profile
        logger.info("Attempting to correct redirector URL for title: %s", profile.source_title)
        try:
            corrected = await self.find_public_url(profile.source_title)
        except Exception:  # noqa: BLE001
            logger.warning("URL correction failed for title %r", profile.source_title, exc_info=True)
            return profile
        if not corrected:
            return profile
        logger.info("Corrected URL to: %s", corrected)
        return profile.model_copy(update={"primary_source_url": corrected})

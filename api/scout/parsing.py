from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable
from urllib.parse import quote, urlparse

from pydantic import ValidationError

from .schemas import ApplicantProfile, ApplicantSummary


logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json[ \t]*\r?\n(.*?)\r?\n?[ \t]*```", re.DOTALL | re.IGNORECASE)


def extract_json_array(text: str) -> list[Any] | None:
    """Pull the applicant array out of a model response.

    A ```json fenced block wins; if one is present but broken, there is no
    array. Otherwise the whole response is tried as raw JSON.
    """
    if not text:
        return None
    match = _JSON_FENCE.search(text)
    if match:
        try:
            data = json.loads(match.group(1))
        except (ValueError, RecursionError):
            logger.warning("Failed to parse fenced JSON from response")
            return None
    else:
        try:
            data = json.loads(text.strip())
        except (ValueError, RecursionError):
            return None
    return data if isinstance(data, list) else None


def placeholder_image_url(name: str, image_base: str) -> str:
    return f"{image_base.rstrip('/')}/{quote(name, safe='')}/100"


def normalize_entries(items: Iterable[Any], image_base: str) -> list[ApplicantProfile]:
    profiles: list[ApplicantProfile] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            summary = ApplicantSummary.model_validate(item)
        except ValidationError:
            continue
        profiles.append(
            ApplicantProfile(
                name=summary.name,
                location=summary.location,
                bio=summary.bio,
                reasoning=summary.reasoning,
                social_profiles=summary.social_profiles,
                profile_image_url=placeholder_image_url(summary.name, image_base),
                primary_source_url=summary.primary_source_url,
                source_title=summary.source_title,
            )
        )
    return profiles


def clean_repaired_url(text: str | None) -> str | None:
    """Accept a repair response only if it is a bare absolute URL."""
    url = (text or "").strip()
    if not url.startswith("http") or any(ch.isspace() for ch in url):
        return None
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return None
    return url

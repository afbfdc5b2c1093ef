from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SocialProfile(CamelModel):
    platform: str
    url: str


class SearchFilters(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    location: str = ""
    source_types: list[str] = []
    accomplishment_areas: list[str] = []

    @field_validator("location", mode="before")
    @classmethod
    def _strip_location(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("source_types", "accomplishment_areas", mode="before")
    @classmethod
    def _dedupe_labels(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, (list, tuple, set)):
            return v
        seen: list[str] = []
        for label in v:
            if isinstance(label, str):
                label = label.strip()
                if not label:
                    continue
            if label not in seen:
                seen.append(label)
        return seen


class ApplicantProfile(CamelModel):
    name: str
    location: str
    bio: str
    reasoning: str
    social_profiles: list[SocialProfile] = []
    profile_image_url: str
    primary_source_url: str
    source_title: str


DEFAULT_LOCATION = "Unknown Location"
DEFAULT_BIO = "No bio generated."
DEFAULT_REASONING = "No reasoning provided."


class ApplicantSummary(CamelModel):
    """One entry of the JSON array the model returns, validated at the boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    primary_source_url: str = Field(min_length=1)
    source_title: str = Field(min_length=1)
    location: str = DEFAULT_LOCATION
    bio: str = DEFAULT_BIO
    reasoning: str = DEFAULT_REASONING
    social_profiles: list[SocialProfile] = []

    @field_validator("name", "primary_source_url", "source_title", mode="before")
    @classmethod
    def _strip_required(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("location", mode="before")
    @classmethod
    def _default_location(cls, v: Any) -> Any:
        return _or_default(v, DEFAULT_LOCATION)

    @field_validator("bio", mode="before")
    @classmethod
    def _default_bio(cls, v: Any) -> Any:
        return _or_default(v, DEFAULT_BIO)

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, v: Any) -> Any:
        return _or_default(v, DEFAULT_REASONING)

    @field_validator("social_profiles", mode="before")
    @classmethod
    def _default_socials(cls, v: Any) -> Any:
        # Drop malformed links rather than the whole applicant
        if not isinstance(v, list):
            return []
        return [s for s in v if isinstance(s, SocialProfile) or _is_social(s)]


def _is_social(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    return all(isinstance(item.get(k), str) and item.get(k).strip() for k in ("platform", "url"))


def _or_default(value: Any, default: str) -> Any:
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    return value


class SearchRequest(CamelModel):
    query: str = Field(min_length=1)
    filters: SearchFilters = SearchFilters()

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class LookupRequest(SearchRequest):
    exclude_urls: list[str] = []


class LookupResponse(CamelModel):
    applicants: list[ApplicantProfile]


class SearchOptions(CamelModel):
    source_types: list[str]
    accomplishment_areas: list[str]
    example_searches: list[str]


class StateBanner(CamelModel):
    title: str
    message: str
    tone: str = "info"  # info | error


class SocialLinkView(CamelModel):
    platform: str
    url: str
    icon: str


class ApplicantCardView(CamelModel):
    key: str
    profile: ApplicantProfile
    social_links: list[SocialLinkView] = []


class SessionView(CamelModel):
    session_id: str
    status: str
    query: Optional[str] = None
    filters: Optional[SearchFilters] = None
    error: Optional[str] = None
    banner: Optional[StateBanner] = None
    cards: list[ApplicantCardView] = []
    no_more_results: bool = False
    is_fetching_more: bool = False
    can_find_more: bool = False
    no_more_message: Optional[str] = None
    superseded: bool = False

from __future__ import annotations

import re

from .schemas import ApplicantCardView, ApplicantProfile, SessionView, SocialLinkView, StateBanner
from .sessions import SearchSession, SearchStatus


# Checked in order; first substring hit wins.
SOCIAL_ICONS: list[tuple[str, str]] = [
    ("linkedin", "linkedin"),
    ("twitter", "twitter"),
    ("instagram", "instagram"),
    ("tiktok", "tiktok"),
    ("github", "github"),
    ("website", "website"),
    ("personal", "website"),
]
DEFAULT_ICON = "website"

NO_MORE_MESSAGE = "No more results found for this query."


def icon_for_platform(platform: str) -> str:
    key = re.sub(r"\s+", "", (platform or "").lower())
    for needle, icon in SOCIAL_ICONS:
        if needle in key:
            return icon
    return DEFAULT_ICON


def card_for(profile: ApplicantProfile, index: int) -> ApplicantCardView:
    return ApplicantCardView(
        key=f"{profile.primary_source_url}-{index}",
        profile=profile,
        social_links=[
            SocialLinkView(platform=s.platform, url=s.url, icon=icon_for_platform(s.platform))
            for s in profile.social_profiles
        ],
    )


def banner_for(session: SearchSession) -> StateBanner | None:
    if session.status == SearchStatus.IDLE:
        return StateBanner(
            title="Welcome",
            message="Enter keywords above to discover promising future students.",
        )
    if session.status == SearchStatus.LOADING:
        return StateBanner(
            title="Analyzing search results...",
            message="The AI is summarizing top sources. This may take a moment.",
        )
    if session.status == SearchStatus.ERROR:
        return StateBanner(title="Search Failed", message=session.error or "", tone="error")
    if session.status == SearchStatus.SUCCESS and not session.applicants:
        return StateBanner(
            title="No Verifiable Results Found",
            message="The AI couldn't find and summarize relevant sources. Try broadening your search terms.",
        )
    return None


def render_session(session: SearchSession, *, superseded: bool = False) -> SessionView:
    showing_cards = session.status == SearchStatus.SUCCESS and bool(session.applicants)
    return SessionView(
        session_id=session.id,
        status=session.status,
        query=session.query,
        filters=session.filters,
        error=session.error,
        banner=banner_for(session),
        cards=[card_for(p, i) for i, p in enumerate(session.applicants)] if showing_cards else [],
        no_more_results=session.no_more_results,
        is_fetching_more=session.is_fetching_more,
        can_find_more=session.can_find_more,
        no_more_message=NO_MORE_MESSAGE if showing_cards and session.no_more_results else None,
        superseded=superseded,
    )

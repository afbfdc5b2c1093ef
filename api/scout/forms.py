from __future__ import annotations

from .schemas import SearchFilters, SearchRequest, SearchOptions


SOURCE_TYPES = ["GitHub", "Behance", "Dribbble", "Personal Blog", "Research Paper"]

ACCOMPLISHMENT_AREAS = [
    "Competitions",
    "Technology & Innovation",
    "Jobs & Internships",
    "Community Service & Activism",
    "Organization & Leadership",
    "Athletics",
    "Arts & Performance",
    "Academics & Research",
    "Travel & Exchange",
    "Personal Growth",
]

EXAMPLE_SEARCHES = [
    "International Math Olympiad high school winner",
    "Student who built a clean water filter project",
    "Teenager develops popular mobile app",
    "Winner of Regeneron Science Talent Search",
]


def toggle(selected: list[str], label: str) -> list[str]:
    if label in selected:
        return [s for s in selected if s != label]
    return [*selected, label]


def build_filters(location: str | None = None, source_types: list[str] | None = None, accomplishment_areas: list[str] | None = None) -> SearchFilters:
    return SearchFilters(
        location=location or "",
        source_types=source_types or [],
        accomplishment_areas=accomplishment_areas or [],
    )


def example_request(index: int) -> SearchRequest:
    """Example searches always run with empty filters."""
    if index < 0 or index >= len(EXAMPLE_SEARCHES):
        raise IndexError(f"no example search at index {index}")
    return SearchRequest(query=EXAMPLE_SEARCHES[index], filters=SearchFilters())


def search_options() -> SearchOptions:
    return SearchOptions(
        source_types=list(SOURCE_TYPES),
        accomplishment_areas=list(ACCOMPLISHMENT_AREAS),
        example_searches=list(EXAMPLE_SEARCHES),
    )

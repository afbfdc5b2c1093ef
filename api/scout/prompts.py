from __future__ import annotations

from datetime import date
from typing import Iterable

from .schemas import SearchFilters


def recency_cutoff(today: date) -> date:
    try:
        return today.replace(year=today.year - 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return today.replace(year=today.year - 1, day=28)


def _exclusion_block(exclude_urls: list[str]) -> str:
    if not exclude_urls:
        return ""
    lines = "\n".join(f"- {url}" for url in exclude_urls)
    return (
        "**IMPORTANT EXCLUSION CRITERIA:**\n"
        "You have already returned results from the following URLs. You MUST find completely new "
        "individuals from different web pages. DO NOT include any information from these sources:\n"
        f"{lines}\n"
    )


def _language_step(location: str) -> str:
    if not location:
        return (
            "1.  **Scope:**\n"
            "    - No particular region was requested. Search worldwide and consider students from any country.\n"
        )
    return (
        "1.  **Analyze the Location & Language:**\n"
        f'    - Identify the user\'s target location ("{location}").\n'
        "    - Determine the primary language(s) of that location. This is the most important step.\n"
        "    - **If the location is non-English speaking (like China, Brazil, Japan), your search strategy "
        "MUST adapt.** A simple English query will fail.\n"
    )


def _request_block(query: str, filters: SearchFilters) -> str:
    lines = [f'- **Query:** "{query}"']
    if filters.location:
        lines.append(f'- **Location Focus:** "{filters.location}".')
    if filters.source_types:
        lines.append(f"- **Source Type Focus:** {', '.join(filters.source_types)}.")
    if filters.accomplishment_areas:
        lines.append(f"- **TOP PRIORITY - Accomplishment Areas:** **{', '.join(filters.accomplishment_areas)}**.")
    return "\n".join(lines)


def build_lookup_prompt(query: str, filters: SearchFilters, exclude_urls: Iterable[str] = (), *, today: date) -> str:
    """Instruction for the primary search call.

    Optional directives (location, source types, areas, exclusions) are only
    present when the corresponding input is non-empty.
    """
    exclude = list(exclude_urls)
    cutoff = recency_cutoff(today).isoformat()
    areas = ", ".join(filters.accomplishment_areas)
    area_hint = f' and accomplishment area focus ("{areas}")' if areas else ""
    local_strategy = ""
    if filters.location:
        local_strategy = (
            "    - **Primary Strategy (Local Language):** Brainstorm 3-5 search queries using terms translated "
            "into the local language of the target location.\n"
            "    - **Secondary Strategy (International Events):** Formulate queries in English that look for "
            "students *from* that place who are participating in *international* events.\n"
        )

    return f"""You are an expert international talent scout with a special skill in crafting advanced, multilingual Google Search queries to uncover exceptional high school students from around the world.

Your mission is to find verifiable online evidence of student accomplishments.

**YOUR SEARCH STRATEGY (execute this mentally before searching):**

{_language_step(filters.location)}
2.  **Formulate Context-Aware Queries:**
{local_strategy}    - **Combine with User's Query:** Creatively weave the user's core query ("{query}"){area_hint} into your searches.

3.  **Execute and Analyze Results:**
    - Use your formulated queries to find web pages.
    - Analyze the content of the pages (even if they are in another language) to identify promising candidates.

**CRITICAL RULES FOR ANALYSIS:**
- **FOCUS ON HIGH SCHOOL STUDENTS:** Your primary goal is to find students currently in high school (e.g., Grade 11/Juniors, or the local equivalent). You MUST IGNORE and EXCLUDE any person identified as a university student, graduate, or professional.
- **FILTER BY RECENCY:** This is crucial. Focus on web pages published or updated within the last year. Use search operators like "after:{cutoff}" to find recent results.

{_exclusion_block(exclude)}
**USER'S SEARCH REQUEST:**
{_request_block(query, filters)}

**OUTPUT FORMAT:**
After your analysis, for each individual you identify, create a JSON object. Each JSON object MUST include the source URL and title from the specific search result you used.

- name: The person's full name.
- location: Their city and state/country, if available from the source.
- bio: A one-sentence summary of their key achievement from the source.
- reasoning: A 1-2 sentence explanation of why this person is a strong candidate, based *only* on the provided source.
- primarySourceUrl: The exact URL of the webpage where you found this person. This MUST be one of the URLs from the search results.
- sourceTitle: The title of that webpage.
- socialProfiles: An array of professional profiles (e.g., GitHub, LinkedIn) found on the page, like [{{ "platform": "GitHub", "url": "..." }}].

The keys name, primarySourceUrl and sourceTitle are required. Return ONLY a JSON array of these objects inside a markdown code block (```json ... ```). If you find a page with multiple winners, you can return multiple JSON objects, each pointing to the same primarySourceUrl. If no relevant individuals are found after your thorough search, return an empty array [].
"""


def build_url_repair_prompt(page_title: str) -> str:
    return (
        "You are a URL finder. Perform a Google Search for a webpage with the exact title: "
        f'"{page_title}".\n'
        "From the top search result, extract and return ONLY the public URL. Do not return any other "
        "text, explanation, or markdown. Just the URL."
    )

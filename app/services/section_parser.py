"""
Best-effort splitter for model-written reviews.

The completion service returns free text that usually, but not always, has
four headed sections. ``split_sections`` scans it line by line and treats any
line containing a section keyword as a heading. This is a leniency mechanism,
not a grammar: a body line that happens to contain another section's keyword
will open that section, and text before the first heading is dropped. A line
that reads as prose ("Overall, Jordan had...") and only names the section that
is already open stays in that section's body.
"""
import re
from typing import Dict, List, Optional, Tuple

from app.schemas.synthesis import SynthesisSections

PLACEHOLDER = "Unable to extract this section from the generated review."

# Checked in order; the first matching section wins for a line.
SECTION_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("strengths", ("strength",)),
    ("development", ("development", "feedback")),
    ("goals", ("goal", "next year")),
    ("overall", ("overall", "assessment")),
]

_LEADING_MARKERS = re.compile(r"^\s*(?:#+\s*|[-*•]\s+|\d+\s*[.)]\s*|\*\*|__)*")
_EMPHASIS = re.compile(r"\*\*|__")

# Longest label still read as a heading, e.g. "Key Goals for the Next Year"
MAX_HEADING_WORDS = 6


def match_section(line: str) -> Optional[str]:
    lowered = line.lower()
    for section, keywords in SECTION_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return section
    return None


def clean_heading(line: str) -> str:
    """Strip numbering, heading hashes, bullets and emphasis from a heading line."""
    stripped = _LEADING_MARKERS.sub("", line)
    return _EMPHASIS.sub("", stripped).strip()


def _inline_content(heading: str) -> str:
    # "Strengths: Consistently ships..." carries content after the colon
    if ":" in heading:
        return heading.split(":", 1)[1].strip()
    return ""


def reads_as_prose(heading: str) -> bool:
    label = heading.split(":", 1)[0].strip()
    return len(label.split()) > MAX_HEADING_WORDS or label.endswith((".", "!", "?"))


def split_sections(text: str) -> SynthesisSections:
    collected: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in (text or "").splitlines():
        section = match_section(line)
        if section is not None and section == current and reads_as_prose(clean_heading(line)):
            collected[current].append(line)
            continue
        if section is not None:
            current = section
            bucket = collected.setdefault(section, [])
            inline = _inline_content(clean_heading(line))
            if inline:
                bucket.append(inline)
            continue
        if current is not None:
            collected[current].append(line)

    if not collected:
        return SynthesisSections(
            strengths=PLACEHOLDER, development=PLACEHOLDER, goals=PLACEHOLDER, overall=PLACEHOLDER
        )

    result = {}
    for section, _ in SECTION_KEYWORDS:
        body = "\n".join(collected.get(section, [])).strip()
        result[section] = body or PLACEHOLDER
    return SynthesisSections(**result)


def found_any_section(sections: SynthesisSections) -> bool:
    return any(
        value != PLACEHOLDER
        for value in (sections.strengths, sections.development, sections.goals, sections.overall)
    )

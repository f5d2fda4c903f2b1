"""
StackIt Backend — Tag Rules
=============================

What:  The rules for building a question's tag list.
Why:   The ask-question form adds tags two ways (typing a tag and pressing
       Enter, or clicking a suggestion). Both go through add_tag(), and the
       API normalizes submitted lists with the same rules, so a stored
       question never carries blank or duplicate tags.

Rules:
    - Surrounding whitespace is stripped
    - Blank candidates are ignored
    - A tag already present (exact match) is ignored
    - Once MAX_TAGS are held, further candidates are ignored
"""

from typing import Iterable, List

MAX_TAGS = 5

SUGGESTED_TAGS = (
    "React",
    "JavaScript",
    "TypeScript",
    "Node.js",
    "CSS",
    "HTML",
    "SQL",
    "Python",
)


def add_tag(tags: List[str], candidate: str) -> List[str]:
    """
    Return a new tag list with `candidate` appended when the rules allow it.

    The input list is never mutated.

    Example:
        >>> add_tag(["SQL"], "  React ")
        ['SQL', 'React']
        >>> add_tag(["SQL"], "SQL")
        ['SQL']
    """
    cleaned = candidate.strip()
    if not cleaned or cleaned in tags or len(tags) >= MAX_TAGS:
        return list(tags)
    return [*tags, cleaned]


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """Strip, drop blanks and duplicates, keep first-seen order. No cap applied."""
    result: List[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Apply add_tag() over a whole submission; extra tags past the cap are dropped."""
    result: List[str] = []
    for tag in tags:
        result = add_tag(result, tag)
    return result


def suggestions_for(tags: List[str]) -> List[str]:
    """Suggested tags not yet on the question, in display order."""
    if len(tags) >= MAX_TAGS:
        return []
    return [tag for tag in SUGGESTED_TAGS if tag not in tags]

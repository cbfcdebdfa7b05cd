"""
Keyword list helpers used by the rule matcher.

Keyword lists keep the order in which keywords appear in the image so that tags
reach Flickr in the same order the photographer entered them.
"""

from typing import Iterable, List


def unique(keywords: Iterable[str]) -> List[str]:
    """Drop repeated keywords, keeping the first occurrence."""
    seen = set()
    result = []
    for keyword in keywords:
        if keyword not in seen:
            seen.add(keyword)
            result.append(keyword)
    return result


def intersection(keywords: Iterable[str], other: Iterable[str]) -> List[str]:
    """
    Keywords present in both lists.

    Args:
        keywords: Keywords to filter, order is preserved
        other: Keywords to look for

    Returns:
        De-duplicated list of the entries of ``keywords`` that are also in ``other``
    """
    lookup = set(other)
    return unique(k for k in keywords if k in lookup)


def difference(keywords: Iterable[str], other: Iterable[str]) -> List[str]:
    """
    Keywords in ``keywords`` that are not in ``other``.

    Args:
        keywords: Keywords to filter, order is preserved
        other: Keywords to remove

    Returns:
        De-duplicated list of the remaining keywords
    """
    lookup = set(other)
    return unique(k for k in keywords if k not in lookup)


def contains_all(keywords: Iterable[str], required: Iterable[str]) -> bool:
    """True if every keyword in ``required`` is in ``keywords``."""
    return set(required).issubset(keywords)


def contains_any(keywords: Iterable[str], candidates: Iterable[str]) -> bool:
    """True if at least one keyword in ``candidates`` is in ``keywords``."""
    return not set(candidates).isdisjoint(keywords)

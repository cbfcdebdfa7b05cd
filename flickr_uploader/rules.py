"""
Rule evaluation: decide which keywords to strip and which albums to add a photo to.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import Album, Rule
from .keywords import contains_all, contains_any, difference, intersection
from .logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class RuleResult:
    """Accumulated outcome of all rules for one image."""
    keywords_to_remove: List[str] = field(default_factory=list)
    keywords_to_add: List[str] = field(default_factory=list)
    albums_to_add: List[Album] = field(default_factory=list)

    @property
    def has_actions(self) -> bool:
        return bool(self.keywords_to_remove or self.albums_to_add)

    def describe(self) -> List[str]:
        """Human readable list of the actions that will be taken."""
        lines = []
        if self.keywords_to_remove:
            lines.append(f"  - keywords to remove: {', '.join(self.keywords_to_remove)}")
        if self.albums_to_add:
            lines.append(f"  - albums to add to: {', '.join(a.name for a in self.albums_to_add)}")
        return lines


def match_rule(keywords: Sequence[str], rule: Rule) -> Optional[List[str]]:
    """
    Check a single rule against an image's keywords.

    Args:
        keywords: The image's keywords
        rule: Rule to check

    Returns:
        The keywords matched by the rule if it applies, None otherwise
    """
    condition = rule.condition

    # Every `excludes_all` keyword present: the rule does not apply
    if condition.excludes_all and contains_all(keywords, condition.excludes_all):
        return None

    # Any `excludes_any` keyword present: the rule does not apply
    if condition.excludes_any and contains_any(keywords, condition.excludes_any):
        return None

    if condition.includes_all:
        if not contains_all(keywords, condition.includes_all):
            return None
        return list(condition.includes_all)

    if condition.includes_any:
        matched = intersection(keywords, condition.includes_any)
        return matched or None

    # Neither include list is set, so there is nothing to match against
    logger.debug("Rule has no includes_all/includes_any condition and is ignored")
    return None


def evaluate_rules(keywords: Sequence[str], rules: Sequence[Rule]) -> RuleResult:
    """
    Evaluate every rule against an image's keywords.

    All applicable rules contribute; there is no stop after the first match.

    Args:
        keywords: The image's keywords
        rules: Configured rules, in order

    Returns:
        RuleResult with the keywords to strip, the keywords to keep and the albums
    """
    result = RuleResult()

    for rule in rules or []:
        matched = match_rule(keywords, rule)
        if matched is None:
            continue

        logger.debug(f"Rule applies, matched keywords: {', '.join(matched)}")
        if rule.action.delete:
            result.keywords_to_remove.extend(matched)
        result.albums_to_add.extend(rule.action.albums)

    if result.keywords_to_remove:
        result.keywords_to_add = difference(keywords, result.keywords_to_remove)
    else:
        result.keywords_to_add = list(keywords)

    return result

"""
Rule scopes.

User rules live in named scopes: one global scope plus one scope per
site. The orchestrator flattens global + site rules into a single
RuleSet before calling the text pipeline, which never sees scopes.

Example:
    >>> book = RuleBook()
    >>> book.add("global", RuleSet(replacements=[{"find": "teh", "replace": "the"}]))
    >>> book.add(scope_for_origin("https://example.com"), RuleSet(deletions=["|"]))
    >>> rules = book.effective("site:https://example.com")
    >>> len(rules.replacements), len(rules.deletions)
    (1, 1)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from regionocr.exceptions import ConfigurationError
from regionocr.models import RuleSet

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"
SITE_PREFIX = "site:"


def scope_for_origin(origin: str | None) -> str:
    """Scope key for a page origin; an empty or opaque ("null") origin is global."""
    if not origin or origin == "null":
        return GLOBAL_SCOPE
    return f"{SITE_PREFIX}{origin}"


@dataclass
class RuleBook:
    """Rule sets keyed by scope."""

    scopes: dict[str, RuleSet] = field(default_factory=dict)

    def add(self, scope: str, rules: RuleSet) -> None:
        """Append ``rules`` to ``scope``."""
        self.scopes[scope] = self.scopes.get(scope, RuleSet()).merged(rules)

    def get(self, scope: str) -> RuleSet:
        return self.scopes.get(scope, RuleSet())

    def effective(self, scope: str | None = None) -> RuleSet:
        """
        Flatten the rules that apply in ``scope``.

        Global rules come first, followed by the scope's own rules.
        """
        rules = self.get(GLOBAL_SCOPE)
        if scope and scope != GLOBAL_SCOPE:
            rules = rules.merged(self.get(scope))
        return rules

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> RuleBook:
        """
        Build a rule book from ``{scope: {"replacements": [...], "deletions": [...]}}``.
        """
        book = cls()
        for scope, rules in (data or {}).items():
            if not isinstance(rules, Mapping):
                raise ConfigurationError(f"Rules for scope {scope!r} must be a mapping")
            book.add(str(scope), RuleSet.from_mapping(rules))
        return book

    @classmethod
    def load(cls, path: Path | str) -> RuleBook:
        """
        Load the ``rules`` section of a YAML config file.

        A file without a ``rules`` section gives an empty rule book.
        """
        path = Path(path)
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Malformed config file {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        book = cls.from_mapping(data.get("rules"))
        logger.debug("Loaded rules for %d scopes from %s", len(book.scopes), path)
        return book

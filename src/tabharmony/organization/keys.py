"""Derive hierarchical sort/group keys from tab URLs."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

from tabharmony.config.models import AltDomainRule
from tabharmony.host.models import TabRecord

from .models import HierarchicalKey, Item

LOGGER = logging.getLogger(__name__)

_SUPPORTED_SCHEMES = frozenset({"http", "https"})
NUMERIC_HOST = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}(?::\d+)?$")


class KeyExtractor:
    """Convert URLs into :class:`HierarchicalKey` values.

    Alt-domain rules are compiled once; a rule whose pattern is not a valid
    regular expression is skipped and the remaining rules still apply.
    """

    def __init__(self, rules: Iterable[AltDomainRule] = ()) -> None:
        self._rules: list[tuple[re.Pattern[str], str]] = []
        for rule in rules:
            try:
                compiled = re.compile(rule.pattern)
            except re.error as exc:
                LOGGER.debug("Skipping alt-domain rule %r: %s", rule.pattern, exc)
                continue
            self._rules.append((compiled, rule.replacement_host.strip().lower()))

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def extract(self, url: str) -> Optional[HierarchicalKey]:
        """Return the key for ``url``, or ``None`` when it cannot be parsed."""
        try:
            parts = urlsplit(url.strip())
        except ValueError:
            return None
        if parts.scheme.lower() not in _SUPPORTED_SCHEMES:
            return None

        host = parts.netloc.rpartition("@")[2].lower()
        if not host:
            return None
        path = parts.path

        host = self._rewrite_host(host, path)
        if NUMERIC_HOST.match(host):
            return HierarchicalKey(labels=(host,), path=path)

        labels = [label for label in host.split(".") if label]
        if not labels:
            return None
        if len(labels) > 1:
            labels.pop()
            labels.reverse()
        return HierarchicalKey(labels=tuple(labels), path=path)

    def item_for(self, tab: TabRecord) -> Item:
        """Wrap a host tab record into an :class:`Item` for the current run."""
        return Item(
            id=tab.id,
            current_index=tab.index,
            current_group_id=tab.group_id,
            key=self.extract(tab.url),
        )

    def _rewrite_host(self, host: str, path: str) -> str:
        subject = host + path
        for pattern, replacement in self._rules:
            if pattern.search(subject):
                return replacement
        return host


__all__ = ["NUMERIC_HOST", "KeyExtractor"]

"""Host rule store used to look up registry credentials."""

import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from nuget_lock.config import HostRule
from nuget_lock.models import HostCredentials

logger = logging.getLogger(__name__)


def _hostname(url: str) -> Optional[str]:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


class HostRules:
    """Ordered collection of host rules.

    Matching rules are applied from least to most specific, and later rules
    override earlier ones at the same specificity.
    """

    def __init__(self, rules: Optional[Iterable[HostRule]] = None):
        self._rules: List[HostRule] = []
        for rule in rules or []:
            self.add(rule)

    def add(self, rule: HostRule) -> None:
        self._rules.append(rule)

    def clear(self) -> None:
        self._rules = []

    def __len__(self) -> int:
        return len(self._rules)

    @staticmethod
    def _specificity(rule: HostRule, url: str) -> Optional[int]:
        """Rank of a rule for ``url``, or None when it does not apply."""
        if not rule.match_host:
            return 0

        match = rule.match_host
        if "://" in match:
            return 3 if url.startswith(match) else None

        hostname = _hostname(url)
        if not hostname:
            return None
        if hostname == match:
            return 2
        if hostname.endswith("." + match.lstrip(".")):
            return 1
        return None

    def find(self, host_type: Optional[str], url: str) -> HostCredentials:
        """Merge the credentials of every rule matching ``host_type`` and ``url``."""
        matches = []
        for index, rule in enumerate(self._rules):
            if rule.host_type and host_type and rule.host_type != host_type:
                continue
            rank = self._specificity(rule, url)
            if rank is None:
                continue
            # Rules bound to a host type beat generic ones of equal rank
            matches.append((rank, 1 if rule.host_type else 0, index, rule))

        credentials = HostCredentials()
        for _, _, _, rule in sorted(matches, key=lambda m: m[:3]):
            if rule.username is not None:
                credentials.username = rule.username
            if rule.password is not None:
                credentials.password = rule.password

        logger.debug(
            f"Host rules for {url} ({host_type}): {len(matches)} matched, "
            f"credentials {'found' if credentials.is_complete else 'not found'}"
        )
        return credentials

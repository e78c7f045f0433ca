"""Archive location strategies for module paths on known hosts."""

from __future__ import annotations

import re
from dataclasses import dataclass

from modcheck.errors import FetchError


@dataclass(frozen=True)
class ArchiveStrategy:
    """Maps module paths on one host to that host's tag-archive URL.

    ``template`` is formatted with the pattern's named groups plus
    ``path`` (the full module path) and ``version``.
    """

    name: str
    pattern: re.Pattern
    template: str
    host_prefix: str | None = None

    def url_for(self, module_path: str, version: str) -> str | None:
        match = self.pattern.match(module_path)
        if not match:
            return None
        return self.template.format(path=module_path, version=version, **match.groupdict())


_SEGMENT = r"[A-Za-z0-9_.~-]+"

STRATEGIES: tuple[ArchiveStrategy, ...] = (
    ArchiveStrategy(
        name="github",
        pattern=re.compile(rf"^github\.com/(?P<owner>{_SEGMENT})/(?P<repo>{_SEGMENT})(?:/.*)?$"),
        template="https://github.com/{owner}/{repo}/archive/refs/tags/{version}.zip",
        host_prefix="github.com/",
    ),
    ArchiveStrategy(
        name="gitlab",
        pattern=re.compile(rf"^gitlab\.com/(?P<owner>{_SEGMENT})/(?P<repo>{_SEGMENT})(?:/.*)?$"),
        template="https://gitlab.com/{owner}/{repo}/-/archive/{version}/{repo}-{version}.zip",
        host_prefix="gitlab.com/",
    ),
    ArchiveStrategy(
        name="bitbucket",
        pattern=re.compile(rf"^bitbucket\.org/(?P<owner>{_SEGMENT})/(?P<repo>{_SEGMENT})(?:/.*)?$"),
        template="https://bitbucket.org/{owner}/{repo}/get/{version}.zip",
        host_prefix="bitbucket.org/",
    ),
    # Fallback; must stay last.
    ArchiveStrategy(
        name="generic",
        pattern=re.compile(r"^.+$"),
        template="https://{path}/archive/{version}.zip",
    ),
)

_HOST_NAMES = {"github": "GitHub", "gitlab": "GitLab", "bitbucket": "Bitbucket"}


def match_strategy(module_path: str) -> ArchiveStrategy:
    """Pick the strategy for a module path.

    A path under a known host prefix that does not fit the host's
    owner/repo layout is rejected instead of falling through to ``generic``.
    """
    for strategy in STRATEGIES:
        if strategy.pattern.match(module_path):
            return strategy
        if strategy.host_prefix and module_path.startswith(strategy.host_prefix):
            host = _HOST_NAMES.get(strategy.name, strategy.name)
            raise FetchError(f"invalid {host} path: {module_path}")
    raise FetchError(f"no archive strategy for module path: {module_path!r}")


def archive_url(module_path: str, version: str) -> str:
    strategy = match_strategy(module_path)
    return strategy.url_for(module_path, version)

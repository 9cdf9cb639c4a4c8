"""auto_shared.routing — Method + path-suffix router.

Routes match on method equality and path *suffix*, so the gateway works behind
any stage or base-path prefix. The first registered match wins; register the
more specific suffixes first.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from auto_shared.http_utils import _parse_body

__all__ = ["Request", "Route", "Router"]


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    headers: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, str] = field(default_factory=dict)
    event: Dict[str, Any] = field(default_factory=dict, repr=False)

    @functools.cached_property
    def body(self) -> Dict[str, Any]:
        """JSON body; malformed input reads as ``{}``."""
        return _parse_body(self.event)


Handler = Callable[[Request], Any]


@dataclass(frozen=True)
class Route:
    method: str
    path_suffix: str
    auth_required: bool
    handler: Handler

    def matches(self, method: str, path: str) -> bool:
        return method == self.method and path.endswith(self.path_suffix)


class Router:
    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: Tuple[Route, ...] = tuple(routes)

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def match(self, method: str, path: str) -> Optional[Route]:
        for route in self._routes:
            if route.matches(method, path):
                return route
        return None

    def requires_auth(self, path: str) -> bool:
        """True if any gated route's suffix matches ``path``, whatever the method."""
        return any(r.auth_required and path.endswith(r.path_suffix) for r in self._routes)

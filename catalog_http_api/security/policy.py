# catalog_http_api/security/policy.py

"""
Role-based route policy.

The policy is an ordered table of rules. For each request the first rule
whose method set and path pattern match decides what is required:

- public: anyone, with or without a token
- authenticated: any valid identity
- roles: a valid identity holding one of the listed roles

Paths are matched relative to the API prefix and without leading or
trailing slashes ("products/12/stock"). A pattern ending in ``/**`` matches
the bare prefix and everything below it; ``**`` alone matches every path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from catalog_http_api.db.models import Role
from catalog_http_api.errors import ForbiddenError, UnauthenticatedError

ANY_METHOD: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Principal:
    """Identity attached to a request once its token has been verified."""

    subject: str
    user_id: int
    role: Role


@dataclass(frozen=True)
class AccessRule:
    patterns: Tuple[str, ...]
    methods: FrozenSet[str] = ANY_METHOD
    roles: FrozenSet[Role] = frozenset()
    public: bool = False

    def matches(self, method: str, path: str) -> bool:
        if self.methods and method.upper() not in self.methods:
            return False
        return any(path_matches(pattern, path) for pattern in self.patterns)

    def describe(self) -> str:
        if self.public:
            return "public"
        if self.roles:
            return "roles " + "/".join(sorted(r.value for r in self.roles))
        return "authenticated"


def rule(
    *patterns: str,
    methods: Iterable[str] = (),
    roles: Iterable[Role] = (),
    public: bool = False,
) -> AccessRule:
    return AccessRule(
        patterns=tuple(normalize_path(p) for p in patterns),
        methods=frozenset(m.upper() for m in methods),
        roles=frozenset(roles),
        public=public,
    )


def normalize_path(path: str) -> str:
    return path.strip().strip("/")


def path_matches(pattern: str, path: str) -> bool:
    if pattern == "**":
        return True
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return path == prefix or path.startswith(prefix + "/")
    return path == pattern


DEFAULT_RULES: Tuple[AccessRule, ...] = (
    rule("auth/login", "auth/register", public=True),
    rule("health", "docs", "docs/**", "redoc", "openapi.json", public=True),
    rule("products/**", methods=["GET"], roles=[Role.USER, Role.ADMIN]),
    rule("products/**", methods=["POST", "PUT", "PATCH", "DELETE"], roles=[Role.ADMIN]),
    rule("auth/users/**", roles=[Role.ADMIN]),
    rule("users/**", roles=[Role.ADMIN]),
    rule("**"),
)


@dataclass
class AuthorizationPolicy:
    rules: Sequence[AccessRule] = field(default_factory=lambda: DEFAULT_RULES)

    def match(self, method: str, path: str) -> AccessRule:
        normalized = normalize_path(path)
        for candidate in self.rules:
            if candidate.matches(method, normalized):
                return candidate
        # No catch-all configured: fail closed.
        return AccessRule(patterns=("**",))

    def is_public(self, method: str, path: str) -> bool:
        return self.match(method, path).public

    def check(self, method: str, path: str, principal: Optional[Principal]) -> AccessRule:
        """
        Return the matching rule if ``principal`` may proceed.

        Raises ``UnauthenticatedError`` when a non-public route has no
        principal and ``ForbiddenError`` when the role is insufficient.
        """
        matched = self.match(method, path)
        if matched.public:
            return matched
        if principal is None:
            raise UnauthenticatedError("Full authentication is required to access this resource")
        if matched.roles and principal.role not in matched.roles:
            raise ForbiddenError("You do not have permission to perform this action")
        return matched


__all__ = [
    "ANY_METHOD",
    "AccessRule",
    "AuthorizationPolicy",
    "DEFAULT_RULES",
    "Principal",
    "normalize_path",
    "path_matches",
    "rule",
]

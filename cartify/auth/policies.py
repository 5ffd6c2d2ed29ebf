"""
Policies - URL authorization rules.

An ordered table maps path patterns to a requirement:

    Rule(["/admin/**"], Requirement.has_role(Role.ADMIN))

`RuleMatcher.authorize()` scans the table in declaration order and the
first matching rule decides. Paths no rule matches need a logged-in user.
Because the first match wins, a specific pattern declared after a broader
one that covers it is dead: `/admin/products/**` must come before
`/admin/**`.

Patterns use Ant-style wildcards:
- `?`  one character within a segment
- `*`  any characters within a segment
- `**` zero or more whole segments (`/admin/**` also matches `/admin`)
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Union

import yaml

from cartify.auth.context import AuthenticatedSubject
from cartify.auth.errors import AccessError, Forbidden, RuleConfigError, Unauthorized
from cartify.auth.roles import Role


# =============================================================================
# Requirements
# =============================================================================


class Access(str, Enum):
    """What a rule demands of the caller."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ROLE = "role"


@dataclass(frozen=True)
class Requirement:
    """One of: public, authenticated, or a specific role."""

    access: Access
    role: Role | None = None

    def __post_init__(self):
        if self.access == Access.ROLE and self.role is None:
            raise RuleConfigError("Role requirement needs a role")
        if self.access != Access.ROLE and self.role is not None:
            raise RuleConfigError(f"{self.access.value} requirement takes no role")

    @classmethod
    def public(cls) -> Requirement:
        return cls(Access.PUBLIC)

    @classmethod
    def authenticated(cls) -> Requirement:
        return cls(Access.AUTHENTICATED)

    @classmethod
    def has_role(cls, role: Role | str) -> Requirement:
        return cls(Access.ROLE, Role(role))

    def __str__(self) -> str:
        if self.access == Access.ROLE:
            return f"role {self.role.value}"
        return self.access.value


# =============================================================================
# Path Patterns
# =============================================================================


def compile_pattern(pattern: str) -> re.Pattern:
    """Translate an Ant-style path pattern into an anchored regex."""
    if not pattern.startswith("/"):
        raise RuleConfigError(f"Pattern must start with '/': {pattern!r}")
    if pattern == "/":
        return re.compile(r"^/$")

    parts: list[str] = []
    for segment in pattern.strip("/").split("/"):
        if segment == "**":
            parts.append(r"(?:/.*)?")
        elif "**" in segment:
            raise RuleConfigError(f"'**' must be a whole segment: {pattern!r}")
        else:
            translated = "".join(
                "[^/]*" if ch == "*" else "[^/]" if ch == "?" else re.escape(ch)
                for ch in segment
            )
            parts.append("/" + translated)

    return re.compile("^" + "".join(parts) + "$")


def normalize_path(path: str) -> str:
    """Collapse `.`, `..` and repeated slashes before matching."""
    if not path:
        return "/"
    normalized = posixpath.normpath(path)
    # normpath keeps a leading '//' as-is
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized if normalized.startswith("/") else "/" + normalized


# =============================================================================
# Rules
# =============================================================================


class Rule:
    """A group of patterns sharing one requirement."""

    def __init__(self, patterns: Iterable[str] | str, requirement: Requirement):
        if isinstance(patterns, str):
            patterns = [patterns]
        self.patterns: tuple[str, ...] = tuple(patterns)
        if not self.patterns:
            raise RuleConfigError("Rule needs at least one pattern")
        self.requirement = requirement
        self._compiled = tuple(compile_pattern(p) for p in self.patterns)

    def matches(self, path: str) -> bool:
        return any(regex.match(path) for regex in self._compiled)

    def __repr__(self) -> str:
        return f"Rule({list(self.patterns)!r}, {self.requirement})"


# =============================================================================
# Decisions
# =============================================================================


@dataclass(frozen=True)
class Allow:
    """The request may proceed."""

    path: str
    rule: Rule | None = None


@dataclass(frozen=True)
class Deny:
    """
    The request is refused.

    `reason` is `Unauthorized` for anonymous callers (send them to log in)
    and `Forbidden` for logged-in callers missing a role.
    """

    path: str
    reason: AccessError
    rule: Rule | None = None

    @property
    def needs_login(self) -> bool:
        return isinstance(self.reason, Unauthorized)


Decision = Union[Allow, Deny]


# Applied when no configured rule matches
FALLBACK_REQUIREMENT = Requirement.authenticated()


def check_requirement(
    requirement: Requirement,
    subject: AuthenticatedSubject | None,
) -> tuple[bool, str | None]:
    """
    Check a requirement against the caller.

    Returns: (allowed, error_message)
    """
    if requirement.access == Access.PUBLIC:
        return True, None

    if subject is None:
        return False, "Authentication required"

    if requirement.access == Access.ROLE and not subject.has_role(requirement.role):
        return False, f"Requires {requirement.role.value} role"

    return True, None


# =============================================================================
# Matcher
# =============================================================================


class RuleMatcher:
    """
    First-match-wins evaluation of an ordered rule table.

    `always_public` paths are pinned ahead of the table. The login and
    access-denied pages go there so a misconfigured table can never send
    the browser round in a redirect loop.
    """

    def __init__(self, rules: Iterable[Rule], always_public: Iterable[str] = ()):
        self.configured: tuple[Rule, ...] = tuple(rules)
        pinned = [p for p in always_public if p]
        self.rules: tuple[Rule, ...] = (
            ((Rule(pinned, Requirement.public()),) if pinned else ()) + self.configured
        )

    def find_rule(self, path: str) -> Rule | None:
        """The first rule matching `path`, or None for the fallback."""
        path = normalize_path(path)
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    def authorize(self, path: str, subject: AuthenticatedSubject | None) -> Decision:
        """
        Decide whether `subject` (None = anonymous) may request `path`.

        Usage:
            decision = matcher.authorize("/admin/products/5", subject)
            if isinstance(decision, Deny) and decision.needs_login:
                ...
        """
        rule = self.find_rule(path)
        requirement = rule.requirement if rule else FALLBACK_REQUIREMENT

        allowed, _ = check_requirement(requirement, subject)
        if allowed:
            return Allow(path=path, rule=rule)

        if subject is None:
            return Deny(path=path, reason=Unauthorized(path, str(requirement)), rule=rule)
        return Deny(path=path, reason=Forbidden(path, str(requirement)), rule=rule)

    def is_public(self, path: str) -> bool:
        return isinstance(self.authorize(path, None), Allow)

    def shadowed_rules(self) -> list[tuple[Rule, str, Rule]]:
        """
        Find unreachable patterns.

        Returns (dead_rule, pattern, earlier_rule) for every configured
        pattern an earlier configured rule already covers, e.g.
        `/admin/products/**` declared after `/admin/**`. Wildcards inside
        a segment are probed with a sample value, so this is a lint, not
        a proof.
        """
        found = []
        for index, rule in enumerate(self.configured):
            for pattern in rule.patterns:
                subtree = pattern.endswith("/**")
                probe = pattern[:-3] if subtree else pattern
                probe = probe.replace("*", "x").replace("?", "x") or "/"
                for earlier in self.configured[:index]:
                    covered = earlier.matches(probe)
                    if subtree:
                        covered = covered and earlier.matches(probe.rstrip("/") + "/x/y")
                    if covered:
                        found.append((rule, pattern, earlier))
                        break
        return found


# =============================================================================
# Rule Tables
# =============================================================================


def default_rules() -> list[Rule]:
    """The Cartify URL table. Most specific first."""
    admin = Requirement.has_role(Role.ADMIN)
    return [
        # Public pages
        Rule(["/", "/home", "/register", "/login"], Requirement.public()),
        # Static resources
        Rule(["/css/**", "/js/**", "/images/**"], Requirement.public()),
        # Error pages (the access-denied page lives here)
        Rule(["/error/**"], Requirement.public()),
        # Admin sub-sections
        Rule(["/admin/products/**", "/admin/orders/**", "/admin/users/**"], admin),
        # Admin catch-all (dashboard, categories, ...)
        Rule(["/admin/**"], admin),
        # Cart: customers only
        Rule(["/cart/**"], Requirement.has_role(Role.CUSTOMER)),
        # Orders: any logged-in user
        Rule(["/orders/**"], Requirement.authenticated()),
    ]


def rule_from_dict(data: dict[str, Any]) -> Rule:
    """
    Build a rule from config.

    Format:
        patterns: ["/admin/**"]
        access: role
        role: ADMIN
    """
    if not isinstance(data, dict):
        raise RuleConfigError(f"Rule must be a mapping, got {type(data).__name__}")

    patterns = data.get("patterns") or data.get("pattern")
    if isinstance(patterns, str):
        patterns = [patterns]
    if not patterns or not all(isinstance(p, str) for p in patterns):
        raise RuleConfigError(f"Rule needs a list of string patterns: {data!r}")

    try:
        access = Access(str(data.get("access", "")).lower())
    except ValueError:
        raise RuleConfigError(f"Unknown access type: {data.get('access')!r}")

    role = data.get("role")
    if access == Access.ROLE:
        try:
            requirement = Requirement.has_role(str(role).upper())
        except ValueError:
            raise RuleConfigError(f"Unknown role: {role!r}")
    elif role is not None:
        raise RuleConfigError(f"{access.value} rule takes no role: {data!r}")
    else:
        requirement = Requirement(access)

    return Rule(patterns, requirement)


def load_rules(path: Path | str) -> list[Rule]:
    """Load an ordered rule table from YAML (a top-level `rules` list)."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("rules") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise RuleConfigError(f"{path}: expected a list of rules")

    return [rule_from_dict(entry) for entry in entries]

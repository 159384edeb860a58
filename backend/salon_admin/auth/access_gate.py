"""
Access Gate - declarative permission boundary.

A gate pairs an AccessRequirement with a fallback. ``render`` returns the
guarded content when the requirement holds for the principal, otherwise the
fallback:

    RenderFallback(node)  -> the caller-supplied replacement
    ShowAccessDenied()    -> an AccessDenied value naming the unmet requirement
    RenderNothing()       -> None

Evaluation order: admin-tier flags, then the single permission, then the
permission list. The first unmet requirement short-circuits.

NOTE: require_super_admin and require_any_admin currently check the same
thing (has_full_access). Whether "any admin" should also admit moderator
and support accounts is an open product decision.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .permission_catalog import is_valid_key
from .principal import Principal
from .resolver import PermissionResolver

FULL_ACCESS_REQUIREMENT = "full admin access"


class GateMode(str, Enum):
    ALL = "all"
    ANY = "any"


@dataclass(frozen=True, slots=True)
class AccessRequirement:
    permission: str | None = None
    permissions: tuple[str, ...] = ()
    mode: GateMode = GateMode.ANY
    require_super_admin: bool = False
    require_any_admin: bool = False

    @classmethod
    def single(cls, permission: str) -> "AccessRequirement":
        return cls(permission=permission)

    @classmethod
    def all_of(cls, *permissions: str) -> "AccessRequirement":
        return cls(permissions=tuple(permissions), mode=GateMode.ALL)

    @classmethod
    def any_of(cls, *permissions: str) -> "AccessRequirement":
        return cls(permissions=tuple(permissions), mode=GateMode.ANY)

    @classmethod
    def super_admin(cls) -> "AccessRequirement":
        return cls(require_super_admin=True)

    @classmethod
    def any_admin(cls) -> "AccessRequirement":
        return cls(require_any_admin=True)


@dataclass(frozen=True, slots=True)
class GateDecision:
    allowed: bool
    unmet: str | None = None


@dataclass(frozen=True, slots=True)
class RenderFallback:
    node: Any


@dataclass(frozen=True, slots=True)
class ShowAccessDenied:
    title: str = "Access Restricted"
    message: str = "Oops! It looks like you don't have permission to view this section."


@dataclass(frozen=True, slots=True)
class RenderNothing:
    pass


Fallback = Union[RenderFallback, ShowAccessDenied, RenderNothing]


def format_permission(permission: str) -> str:
    """Human readable label for a key: ``users.suspend`` -> ``Users Suspend``."""
    words = permission.replace(".", " ").replace("_", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


@dataclass(frozen=True, slots=True)
class AccessDenied:
    title: str
    message: str
    required_permission: str | None = None

    @property
    def formatted_permission(self) -> str | None:
        if self.required_permission is None:
            return None
        if is_valid_key(self.required_permission):
            return format_permission(self.required_permission)
        return self.required_permission


class AccessGate:
    def __init__(self, requirement: AccessRequirement, fallback: Fallback | None = None):
        self.requirement = requirement
        self.fallback: Fallback = fallback if fallback is not None else RenderNothing()

    def evaluate(self, principal: Principal | None) -> GateDecision:
        resolver = PermissionResolver(principal)
        requirement = self.requirement

        if requirement.require_super_admin and not resolver.has_full_access():
            return GateDecision(False, FULL_ACCESS_REQUIREMENT)

        if requirement.require_any_admin and not resolver.has_full_access():
            return GateDecision(False, FULL_ACCESS_REQUIREMENT)

        if requirement.permission and not resolver.has_permission(requirement.permission):
            return GateDecision(False, requirement.permission)

        if requirement.permissions:
            if requirement.mode == GateMode.ALL:
                if not resolver.has_all(requirement.permissions):
                    return GateDecision(False, "all of " + ", ".join(requirement.permissions))
            elif not resolver.has_any(requirement.permissions):
                return GateDecision(False, "any of " + ", ".join(requirement.permissions))

        return GateDecision(True)

    def allows(self, principal: Principal | None) -> bool:
        return self.evaluate(principal).allowed

    def render(self, principal: Principal | None, children: Any) -> Any:
        decision = self.evaluate(principal)
        if decision.allowed:
            return children
        return self.render_fallback(decision)

    def render_fallback(self, decision: GateDecision) -> Any:
        fallback = self.fallback
        if isinstance(fallback, RenderFallback):
            return fallback.node
        if isinstance(fallback, ShowAccessDenied):
            return AccessDenied(
                title=fallback.title,
                message=fallback.message,
                required_permission=decision.unmet,
            )
        return None

"""
Login Backend - Path Authorization

Ordered path rules decide whether a request may proceed.
Rules are defined in policies.yaml and evaluated before route dispatch.

Rules:
- Evaluated in order, first match wins
- A public rule permits everyone, including anonymous callers
- A role rule needs a principal whose role (or implied role) is listed
- Paths that match no rule need any authenticated principal
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

import yaml

from login_backend.auth.exceptions import ForbiddenError, UnauthenticatedError
from login_backend.auth.models import Role
from login_backend.gateway.auth import AuthenticatedPrincipal


logger = logging.getLogger(__name__)

DEFAULT_POLICY_PATH = Path(__file__).parent / "policies.yaml"


class AccessDecision(str, Enum):
    PERMIT = "permit"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def compile_path_pattern(pattern: str) -> re.Pattern:
    """
    Compile an Ant-style path pattern.

    "*" matches within one path segment, "**" across segments, and a
    trailing "/**" also matches the bare prefix ("/docs/**" matches "/docs").
    """
    suffix = ""
    if pattern.endswith("/**"):
        pattern, suffix = pattern[:-3], "(?:/.*)?"

    regex = []
    for part in re.split(r"(\*\*|\*)", pattern):
        if part == "**":
            regex.append(".*")
        elif part == "*":
            regex.append("[^/]*")
        else:
            regex.append(re.escape(part))
    return re.compile("^" + "".join(regex) + suffix + "$")


@dataclass(frozen=True)
class AccessRule:
    """
    One row of the decision table.

    Attributes:
        pattern: Ant-style path pattern
        roles: Roles allowed on matching paths; None means public
    """
    pattern: str
    roles: Optional[FrozenSet[Role]] = None

    def __post_init__(self):
        object.__setattr__(self, "_regex", compile_path_pattern(self.pattern))

    @property
    def is_public(self) -> bool:
        return self.roles is None

    def matches(self, path: str) -> bool:
        return self._regex.match(path) is not None


class AuthorizationGate:
    """
    Stateless allow/deny decision for (path, principal).

    Args:
        rules: Decision table in evaluation order
        hierarchy: Roles implied by each role, e.g. {ADMIN: {USER}}
        role_hierarchy: When False, roles must match a rule exactly
    """

    def __init__(
        self,
        rules: Iterable[AccessRule],
        hierarchy: Optional[Mapping[Role, Iterable[Role]]] = None,
        role_hierarchy: bool = True,
    ):
        self.rules: List[AccessRule] = list(rules)
        self._hierarchy: Dict[Role, FrozenSet[Role]] = {
            Role(role): frozenset(Role(r) for r in implied)
            for role, implied in (hierarchy or {}).items()
        }
        self.role_hierarchy = role_hierarchy

    def effective_roles(self, role: Role) -> FrozenSet[Role]:
        if not self.role_hierarchy:
            return frozenset({role})
        return frozenset({role}) | self._hierarchy.get(role, frozenset())

    def decide(
        self,
        path: str,
        principal: Optional[AuthenticatedPrincipal],
    ) -> AccessDecision:
        """Evaluate the decision table for path."""
        for rule in self.rules:
            if not rule.matches(path):
                continue
            if rule.is_public:
                return AccessDecision.PERMIT
            if principal is None:
                return AccessDecision.UNAUTHENTICATED
            if self.effective_roles(principal.role) & rule.roles:
                return AccessDecision.PERMIT
            return AccessDecision.FORBIDDEN

        if principal is None:
            return AccessDecision.UNAUTHENTICATED
        return AccessDecision.PERMIT

    def check(self, path: str, principal: Optional[AuthenticatedPrincipal]) -> None:
        """
        Enforce the decision table.

        Raises:
            UnauthenticatedError: No principal on a protected path
            ForbiddenError: Principal's role does not satisfy the rule
        """
        decision = self.decide(path, principal)
        if decision is AccessDecision.UNAUTHENTICATED:
            logger.info("Denied anonymous request to %s", path)
            raise UnauthenticatedError()
        if decision is AccessDecision.FORBIDDEN:
            logger.info("Denied %s (%s) access to %s", principal.login_id, principal.role.value, path)
            raise ForbiddenError()

    @classmethod
    def from_policy(cls, config: Mapping, role_hierarchy: bool = True) -> "AuthorizationGate":
        """
        Build a gate from a parsed policy document.

        Public paths come first, then role rules in file order.
        """
        rules = [AccessRule(pattern) for pattern in config.get("public") or []]
        for entry in config.get("rules") or []:
            rules.append(AccessRule(
                entry["pattern"],
                frozenset(Role(r) for r in entry["roles"]),
            ))
        return cls(rules, config.get("hierarchy", {}), role_hierarchy)


def load_policy(
    policy_path: Union[str, Path, None] = None,
    role_hierarchy: bool = True,
) -> AuthorizationGate:
    """Load the decision table from a YAML policy file."""
    path = Path(policy_path) if policy_path else DEFAULT_POLICY_PATH

    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}

    gate = AuthorizationGate.from_policy(config, role_hierarchy)
    logger.debug("Loaded %d access rules from %s", len(gate.rules), path)
    return gate

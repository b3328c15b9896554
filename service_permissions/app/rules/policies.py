"""
Tie-break policies for grants found at the same specificity.
"""

from enum import Enum
from typing import Iterable, Union

from shared.errors import ConfigurationError

from .models import Decision, PermissionRule


class EvaluationPolicy(str, Enum):
    """How ALLOW and VETO grants at one level combine."""
    VETO_BEATS_ALLOW = "veto_beats_allow"
    ALLOW_BEATS_VETO = "allow_beats_veto"

    def resolve(self, rules: Iterable[PermissionRule]) -> Decision:
        """Combine the rules found at the deciding level."""
        rules = set(rules)
        if not rules:
            return Decision.UNSPECIFIED
        if len(rules) == 1:
            return Decision(rules.pop().value)
        if self is EvaluationPolicy.VETO_BEATS_ALLOW:
            return Decision.VETO
        return Decision.ALLOW


def get_policy(policy: Union[EvaluationPolicy, str]) -> EvaluationPolicy:
    """Resolve a policy from its name."""
    if isinstance(policy, EvaluationPolicy):
        return policy
    try:
        return EvaluationPolicy(str(policy).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown evaluation policy: {policy}",
            {"allowed": [p.value for p in EvaluationPolicy]}
        ) from None

"""
Aggregate permission set for a principal.
"""

from typing import List, Optional

from ..features.ids import FeatureId
from ..features.registry import FeatureRegistry
from .engine import FeatureRef, PermissionEvaluator
from .models import Decision, PermissionMode


class PermissionSet:
    """The view/change questions callers actually ask.

    Each mode is evaluated on its own: being allowed to change a feature
    says nothing about being allowed to view it.
    """

    def __init__(self, evaluator: PermissionEvaluator):
        self.evaluator = evaluator

    def can_view(self, feature_id: FeatureRef, tenancy_context: Optional[str] = None) -> bool:
        return self.evaluator.evaluate(feature_id, PermissionMode.VIEWING, tenancy_context) is Decision.ALLOW

    def can_change(self, feature_id: FeatureRef, tenancy_context: Optional[str] = None) -> bool:
        return self.evaluator.evaluate(feature_id, PermissionMode.CHANGING, tenancy_context) is Decision.ALLOW

    def visible_children(
        self,
        registry: FeatureRegistry,
        feature_id: FeatureRef,
        tenancy_context: Optional[str] = None
    ) -> List[FeatureId]:
        """Registered children of a feature that this principal may view."""
        return [
            child for child in registry.children_of(feature_id)
            if self.can_view(child, tenancy_context)
        ]

"""
Feature permissions package.

Decides whether a principal may view or change an application feature
(a package, a class, or a class member) under an optional tenancy. It
provides:

- app.features: Feature ids, feature metadata and the feature registry.
- app.rules: Grant models, precedence policies and the evaluation engine.
- app.grants: Role to grant lookup used when building an evaluator.
- app.tenancy: Tenancy scope matching.
- app.cache: Per-evaluator decision cache.

Guidelines:
- The registry is built once and shared read-only.
- Build one evaluator per principal session; discard it when roles change.
- Evaluation never fails for a valid feature id; UNSPECIFIED means deny.
"""

from .features.ids import FeatureId, FeatureType, MemberType
from .features.models import CatalogEntry, Feature
from .features.registry import FeatureRegistry
from .rules.models import Decision, Evaluation, GrantRecord, PermissionGrant, PermissionMode, PermissionRule
from .rules.policies import EvaluationPolicy
from .grants.sources import GrantSource, InMemoryGrantSource
from .tenancy.resolver import PathTenancyResolver, TenancyResolver
from .rules.engine import PermissionEvaluator
from .rules.permission_set import PermissionSet

__all__ = [
    "CatalogEntry",
    "Decision",
    "Evaluation",
    "EvaluationPolicy",
    "Feature",
    "FeatureId",
    "FeatureRegistry",
    "FeatureType",
    "GrantRecord",
    "GrantSource",
    "InMemoryGrantSource",
    "MemberType",
    "PathTenancyResolver",
    "PermissionEvaluator",
    "PermissionGrant",
    "PermissionMode",
    "PermissionRule",
    "PermissionSet",
    "TenancyResolver",
]

"""
Permission evaluation engine.

Resolution is specificity first: the requested feature is checked, then
each enclosing feature in turn (owning class, then the package chain up to
the root). The first level holding at least one grant for the requested
mode and tenancy decides; less specific levels are never consulted after
that. Within the deciding level, ALLOW and VETO grants are combined by the
evaluation policy (VETO wins by default). When no level holds a grant the
decision is UNSPECIFIED, which callers must treat as denial.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from shared.config import get_config
from shared.errors import UnknownRoleError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector

from ..cache.decision_cache import DecisionCache
from ..features.ids import FeatureId, as_feature_id
from ..grants.sources import GrantSource, InMemoryGrantSource
from ..tenancy.resolver import PathTenancyResolver, TenancyResolver
from .models import Decision, Evaluation, PermissionGrant, PermissionMode
from .policies import EvaluationPolicy, get_policy

FeatureRef = Union[FeatureId, str]
ModeRef = Union[PermissionMode, str]


class PermissionEvaluator:
    """Evaluates one principal's grants.

    The grant snapshot is taken at construction and never changes; build a
    new evaluator when the principal's roles or grants may have changed.
    """

    def __init__(
        self,
        role_ids: Iterable[str],
        grant_source: GrantSource,
        *,
        principal_id: Optional[str] = None,
        tenancy_resolver: Optional[TenancyResolver] = None,
        policy: Optional[Union[EvaluationPolicy, str]] = None,
        cache_enabled: Optional[bool] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        role_ids = list(dict.fromkeys(role_ids))
        grants: List[PermissionGrant] = []
        unknown: List[str] = []
        for role_id in role_ids:
            role_grants = grant_source.grants_for_role(role_id)
            if role_grants is None:
                unknown.append(role_id)
            else:
                grants.extend(role_grants)

        self.logger = get_logger("permissions.evaluator")
        if unknown:
            self.logger.warning("Unknown roles", principal_id=principal_id, role_ids=unknown)
            raise UnknownRoleError(unknown, {"principal_id": principal_id})

        config = get_config()
        self.role_ids: Tuple[str, ...] = tuple(role_ids)
        self.principal_id = principal_id
        self.grants: Tuple[PermissionGrant, ...] = tuple(grants)
        self.tenancy_resolver = tenancy_resolver or PathTenancyResolver()
        self.policy = get_policy(policy if policy is not None else config.evaluation_policy)
        self.cache = DecisionCache(config.decision_cache_enabled if cache_enabled is None else cache_enabled)
        if metrics is None and config.metrics_enabled:
            metrics = get_metrics_collector("permissions")
        self.metrics = metrics

        index: Dict[Tuple[FeatureId, PermissionMode], List[PermissionGrant]] = defaultdict(list)
        for grant in self.grants:
            index[(grant.feature_id, grant.mode)].append(grant)
        self._index = {key: tuple(value) for key, value in index.items()}

        self.logger.info(
            "Permission evaluator created",
            principal_id=principal_id,
            roles=len(self.role_ids),
            grants=len(self.grants),
            policy=self.policy.value
        )

    @classmethod
    def from_grants(cls, grants: Iterable[PermissionGrant], **kwargs) -> "PermissionEvaluator":
        """Build an evaluator from an already loaded grant snapshot."""
        source = InMemoryGrantSource()
        for grant in grants:
            source.add_grant(grant)
        return cls(source.all_roles(), source, **kwargs)

    # Evaluation

    def evaluate(
        self,
        feature_id: FeatureRef,
        mode: ModeRef,
        tenancy_context: Optional[str] = None
    ) -> Decision:
        """Decide ALLOW, VETO or UNSPECIFIED for a feature and mode."""
        feature_id = as_feature_id(feature_id)
        mode = PermissionMode(mode)
        key = (feature_id, mode, tenancy_context)

        cached = self.cache.get(key)
        if self.metrics is not None and self.cache.enabled:
            self.metrics.record_cache_lookup(cached is not None)
        if cached is not None:
            return cached

        if self.metrics is not None:
            with self.metrics.time_operation("permission_evaluation_duration_seconds"):
                evaluation = self._resolve(feature_id, mode, tenancy_context)
            self.metrics.record_evaluation(evaluation.decision.value, mode.value)
        else:
            evaluation = self._resolve(feature_id, mode, tenancy_context)
        decision = evaluation.decision
        self.cache.put(key, decision)

        self.logger.debug(
            "Permission evaluated",
            principal_id=self.principal_id,
            feature=feature_id.encode(),
            mode=mode.value,
            tenancy_context=tenancy_context,
            decision=decision.value,
            position=evaluation.position
        )
        return decision

    def explain(
        self,
        feature_id: FeatureRef,
        mode: ModeRef,
        tenancy_context: Optional[str] = None
    ) -> Evaluation:
        """Evaluate without the cache, returning the deciding level and grants."""
        return self._resolve(as_feature_id(feature_id), PermissionMode(mode), tenancy_context)

    def can_view(self, feature_id: FeatureRef, tenancy_context: Optional[str] = None) -> bool:
        return self.evaluate(feature_id, PermissionMode.VIEWING, tenancy_context) is Decision.ALLOW

    def can_change(self, feature_id: FeatureRef, tenancy_context: Optional[str] = None) -> bool:
        return self.evaluate(feature_id, PermissionMode.CHANGING, tenancy_context) is Decision.ALLOW

    def _resolve(
        self,
        feature_id: FeatureId,
        mode: PermissionMode,
        tenancy_context: Optional[str]
    ) -> Evaluation:
        chain = (feature_id,) + feature_id.ancestors()
        for position, candidate in enumerate(chain):
            matching = self._matching_grants(candidate, mode, tenancy_context)
            if matching:
                return Evaluation(
                    feature_id=feature_id,
                    mode=mode,
                    decision=self.policy.resolve(grant.rule for grant in matching),
                    tenancy_context=tenancy_context,
                    decided_by=candidate,
                    position=position,
                    causes=matching
                )
        return Evaluation(
            feature_id=feature_id,
            mode=mode,
            decision=Decision.UNSPECIFIED,
            tenancy_context=tenancy_context
        )

    def _matching_grants(
        self,
        candidate: FeatureId,
        mode: PermissionMode,
        tenancy_context: Optional[str]
    ) -> Tuple[PermissionGrant, ...]:
        return tuple(
            grant for grant in self._index.get((candidate, mode), ())
            if self.tenancy_resolver.covers(grant.tenancy_scope, tenancy_context)
        )

    # Introspection

    def grants_for(self, feature_id: FeatureRef, mode: Optional[ModeRef] = None) -> Sequence[PermissionGrant]:
        """Grants attached directly to a feature, optionally for one mode."""
        feature_id = as_feature_id(feature_id)
        modes = [PermissionMode(mode)] if mode is not None else list(PermissionMode)
        return [grant for m in modes for grant in self._index.get((feature_id, m), ())]

    def cache_stats(self) -> Dict[str, int]:
        return self.cache.stats()

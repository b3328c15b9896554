"""
Feature registry: the full, immutable tree of features.
"""

from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, Union

from shared.config import get_config
from shared.errors import CatalogInconsistencyError, MalformedIdError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector

from .ids import FeatureId, FeatureType, MemberType, as_feature_id
from .models import CatalogEntry, Feature

FeatureRef = Union[FeatureId, str]

logger = get_logger("permissions.registry")


class FeatureRegistry:
    """Read-only index of every feature, keyed by FeatureId.

    Instances are produced by :meth:`build` and never mutated; when the
    catalog changes, build a new registry and swap it in.
    """

    def __init__(self, features: Mapping[FeatureId, Feature]):
        self._features = MappingProxyType(dict(features))

    @classmethod
    def build(
        cls,
        catalog: Iterable,
        metrics: Optional[MetricsCollector] = None
    ) -> "FeatureRegistry":
        """Build a registry from catalog entries.

        Raises CatalogInconsistencyError on dangling or contradictory
        entries; no partial registry is returned.
        """
        packages: Set[FeatureId] = {FeatureId.new_package("")}
        classes: Set[FeatureId] = set()
        members: Dict[FeatureId, bool] = {}
        member_types: Dict[Tuple[FeatureId, str], MemberType] = {}

        for index, raw in enumerate(catalog):
            entry = _coerce_entry(index, raw)

            if entry.class_name is None:
                if entry.member_name is not None or entry.member_type is not None:
                    _inconsistent("Member entry without a class", index, entry)
                package_id = _feature_id(index, entry, FeatureId.new_package, entry.package_name)
                packages.add(package_id)
                packages.update(package_id.ancestors())
                continue

            class_id = _feature_id(index, entry, FeatureId, FeatureType.CLASS, entry.package_name, entry.class_name)

            if entry.member_name is None and entry.member_type is None:
                classes.add(class_id)
                packages.update(class_id.ancestors())
                continue

            if entry.member_name is None or entry.member_type is None:
                _inconsistent("Member entry needs both a member name and a member type", index, entry)

            member_id = _feature_id(
                index, entry, FeatureId.new_member,
                entry.fully_qualified_class_name, entry.member_name, entry.member_type
            )

            declared_type = member_types.setdefault((class_id, entry.member_name), entry.member_type)
            if declared_type is not entry.member_type:
                _inconsistent(
                    f"Member declared as both {declared_type.value} and {entry.member_type.value}",
                    index, entry
                )

            declared_contributed = members.setdefault(member_id, entry.contributed)
            if declared_contributed != entry.contributed:
                _inconsistent("Member declared both contributed and not contributed", index, entry)

        for member_id in members:
            class_id = member_id.parent_class_id()
            if class_id not in classes:
                logger.warning("Member references unknown class", member=member_id.encode(), class_id=class_id.encode())
                raise CatalogInconsistencyError(
                    "Member references a class not present in the catalog",
                    {"member": member_id.encode(), "class": class_id.encode()}
                )

        children: Dict[FeatureId, Set[FeatureId]] = defaultdict(set)
        for feature_id in list(packages) + list(classes) + list(members):
            parent_id = feature_id.parent_id()
            if parent_id is not None:
                children[parent_id].add(feature_id)

        features: Dict[FeatureId, Feature] = {}
        for feature_id in packages | classes:
            features[feature_id] = Feature(feature_id, children=tuple(sorted(children[feature_id])))
        for member_id, contributed in members.items():
            features[member_id] = Feature(member_id, contributed=contributed)

        registry = cls(features)
        stats = registry.stats()
        logger.info("Feature registry built", **stats)

        if metrics is None and get_config().metrics_enabled:
            metrics = get_metrics_collector("permissions")
        if metrics is not None:
            metrics.record_registry_size({k: v for k, v in stats.items() if k != "total"})

        return registry

    # Lookups

    def find_feature(self, feature_id: FeatureRef) -> Optional[Feature]:
        """Return the feature for an id, or None when it is not registered."""
        return self._features.get(as_feature_id(feature_id))

    def children_of(self, feature_id: FeatureRef) -> Tuple[FeatureId, ...]:
        feature = self.find_feature(feature_id)
        if feature is None or feature.is_leaf:
            return ()
        return feature.children

    def parent_of(self, feature_id: FeatureRef) -> Optional[FeatureId]:
        parent_id = as_feature_id(feature_id).parent_id()
        if parent_id is None or parent_id not in self._features:
            return None
        return parent_id

    def ancestors_of(self, feature_id: FeatureRef) -> Tuple[FeatureId, ...]:
        """Registered ancestors, most specific first."""
        return tuple(
            ancestor for ancestor in as_feature_id(feature_id).ancestors()
            if ancestor in self._features
        )

    def features(self, feature_type: Optional[FeatureType] = None) -> List[Feature]:
        return [
            self._features[feature_id] for feature_id in sorted(self._features)
            if feature_type is None or feature_id.feature_type is feature_type
        ]

    def packages(self) -> List[Feature]:
        return self.features(FeatureType.PACKAGE)

    def classes(self) -> List[Feature]:
        return self.features(FeatureType.CLASS)

    def members_of(self, class_id: FeatureRef, member_type: Optional[MemberType] = None) -> List[Feature]:
        return [
            self._features[child] for child in self.children_of(class_id)
            if child.feature_type is FeatureType.MEMBER
            and (member_type is None or child.member_type is member_type)
        ]

    def stats(self) -> Dict[str, int]:
        counts = {feature_type.value.lower(): 0 for feature_type in FeatureType}
        for feature_id in self._features:
            counts[feature_id.feature_type.value.lower()] += 1
        counts["total"] = len(self._features)
        return counts

    def __contains__(self, feature_id) -> bool:
        try:
            return as_feature_id(feature_id) in self._features
        except MalformedIdError:
            return False

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[FeatureId]:
        return iter(sorted(self._features))


def _coerce_entry(index: int, raw) -> CatalogEntry:
    try:
        return CatalogEntry.coerce(raw)
    except (ValueError, TypeError) as e:
        logger.warning("Invalid catalog entry", index=index, error=str(e))
        raise CatalogInconsistencyError("Invalid catalog entry", {"index": index, "error": str(e)}) from e


def _feature_id(index: int, entry: CatalogEntry, factory, *args) -> FeatureId:
    try:
        return factory(*args)
    except MalformedIdError as e:
        logger.warning("Catalog entry has an invalid name", index=index, error=e.message)
        raise CatalogInconsistencyError(
            f"Catalog entry has an invalid name: {e.message}",
            {"index": index, **e.details}
        ) from e


def _inconsistent(message: str, index: int, entry: CatalogEntry):
    logger.warning("Inconsistent catalog entry", index=index, reason=message)
    raise CatalogInconsistencyError(message, {"index": index, "entry": entry.model_dump(mode="json")})

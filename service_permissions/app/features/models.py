"""
Feature metadata models.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field

from .ids import FeatureId, FeatureType, MemberType


@dataclass(frozen=True)
class Feature:
    """Metadata node for one feature id."""
    feature_id: FeatureId
    contributed: bool = False
    children: Tuple[FeatureId, ...] = ()

    @property
    def feature_type(self) -> FeatureType:
        return self.feature_id.feature_type

    @property
    def member_type(self) -> Optional[MemberType]:
        return self.feature_id.member_type

    @property
    def parent_id(self) -> Optional[FeatureId]:
        return self.feature_id.parent_id()

    @property
    def is_leaf(self) -> bool:
        return self.feature_type is FeatureType.MEMBER

    # Package contents

    @property
    def packages(self) -> Tuple[FeatureId, ...]:
        return self._children_of_type(FeatureType.PACKAGE)

    @property
    def classes(self) -> Tuple[FeatureId, ...]:
        return self._children_of_type(FeatureType.CLASS)

    # Class contents

    @property
    def properties(self) -> Tuple[FeatureId, ...]:
        return self._members_of_type(MemberType.PROPERTY)

    @property
    def collections(self) -> Tuple[FeatureId, ...]:
        return self._members_of_type(MemberType.COLLECTION)

    @property
    def actions(self) -> Tuple[FeatureId, ...]:
        return self._members_of_type(MemberType.ACTION)

    def _children_of_type(self, feature_type: FeatureType) -> Tuple[FeatureId, ...]:
        return tuple(child for child in self.children if child.feature_type is feature_type)

    def _members_of_type(self, member_type: MemberType) -> Tuple[FeatureId, ...]:
        return tuple(child for child in self.children if child.member_type is member_type)

    def __str__(self) -> str:
        return self.feature_id.encode()


class CatalogEntry(BaseModel):
    """One discovered package, class or member, as supplied by the host environment."""
    package_name: str = Field("", description="Dotted package name, empty for the root package")
    class_name: Optional[str] = Field(None, description="Simple class name")
    member_name: Optional[str] = Field(None, description="Member name")
    member_type: Optional[MemberType] = Field(None, description="Member type")
    contributed: bool = Field(False, description="Member synthesized by contribution")

    @classmethod
    def coerce(cls, value: Any) -> "CatalogEntry":
        """Accept a model, a mapping or a positional tuple."""
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls.model_validate(value)
        if isinstance(value, (tuple, list)):
            names = list(cls.model_fields)
            if len(value) > len(names):
                raise ValueError(f"catalog tuple has {len(value)} fields, expected at most {len(names)}")
            return cls.model_validate(dict(zip(names, value)))
        raise TypeError(f"unsupported catalog entry: {value!r}")

    @property
    def fully_qualified_class_name(self) -> Optional[str]:
        if self.class_name is None:
            return None
        return f"{self.package_name}.{self.class_name}" if self.package_name else self.class_name

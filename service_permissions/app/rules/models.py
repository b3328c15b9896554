"""
Permission grant and decision models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, Field

from ..features.ids import FeatureId, as_feature_id


class _CaseInsensitiveEnum(str, Enum):

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class PermissionRule(_CaseInsensitiveEnum):
    """Grant rule types."""
    ALLOW = "allow"
    VETO = "veto"


class PermissionMode(_CaseInsensitiveEnum):
    """Access intent, evaluated independently per mode."""
    VIEWING = "viewing"
    CHANGING = "changing"


class Decision(_CaseInsensitiveEnum):
    """Outcome of an evaluation. UNSPECIFIED must be treated as denial."""
    ALLOW = "allow"
    VETO = "veto"
    UNSPECIFIED = "unspecified"

    @property
    def granted(self) -> bool:
        return self is Decision.ALLOW


@dataclass(frozen=True)
class PermissionGrant:
    """A single rule attached to a role for a feature and mode.

    ``tenancy_scope`` of None means the grant applies in every tenancy.
    """
    role_id: str
    feature_id: FeatureId
    rule: PermissionRule
    mode: PermissionMode
    tenancy_scope: Optional[str] = None

    def __post_init__(self):
        # normalise loosely typed input; frozen, so go through object.__setattr__
        object.__setattr__(self, "feature_id", as_feature_id(self.feature_id))
        object.__setattr__(self, "rule", PermissionRule(self.rule))
        object.__setattr__(self, "mode", PermissionMode(self.mode))

    @property
    def unrestricted(self) -> bool:
        return self.tenancy_scope is None

    @classmethod
    def from_record(cls, record: Union["GrantRecord", dict]) -> "PermissionGrant":
        """Convert a stored grant; a malformed feature string raises MalformedIdError."""
        if isinstance(record, dict):
            record = GrantRecord.model_validate(record)
        return cls(
            role_id=record.role_id,
            feature_id=FeatureId.parse(record.feature),
            rule=record.rule,
            mode=record.mode,
            tenancy_scope=record.tenancy_scope
        )

    def to_record(self) -> "GrantRecord":
        return GrantRecord(
            role_id=self.role_id,
            feature=self.feature_id.encode(),
            rule=self.rule,
            mode=self.mode,
            tenancy_scope=self.tenancy_scope
        )


class GrantRecord(BaseModel):
    """Stored representation of a grant, as loaded by a persistence layer."""
    role_id: str = Field(..., description="Role ID")
    feature: str = Field(..., description="Canonical feature id, e.g. CLS:com.acme.Invoice")
    rule: PermissionRule = Field(..., description="Grant rule")
    mode: PermissionMode = Field(..., description="Access mode")
    tenancy_scope: Optional[str] = Field(None, description="Tenancy path, None for unrestricted")


@dataclass(frozen=True)
class Evaluation:
    """Decision with the grants that caused it."""
    feature_id: FeatureId
    mode: PermissionMode
    decision: Decision
    tenancy_context: Optional[str] = None
    decided_by: Optional[FeatureId] = None
    position: Optional[int] = None
    causes: Tuple[PermissionGrant, ...] = field(default_factory=tuple)

    @property
    def granted(self) -> bool:
        return self.decision.granted

    @property
    def reason(self) -> str:
        if self.decided_by is None:
            return "No grant applies"
        rules = sorted({grant.rule.value for grant in self.causes})
        return f"{'/'.join(rules)} at {self.decided_by.encode()} decided {self.decision.value}"

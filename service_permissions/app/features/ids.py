"""
Feature identifiers.

A feature is a package, a class or a class member. Every feature is
addressed by a :class:`FeatureId`, whose canonical string form is the
durable key stored alongside permission grants:

    PKG:com.acme
    CLS:com.acme.Invoice
    MEM:com.acme.Invoice#submit:ACTION

The root package is ``PKG:`` (an empty package name).
"""

import functools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from shared.errors import MalformedIdError


class FeatureType(str, Enum):
    """Kind of feature, in specificity order."""
    PACKAGE = "PACKAGE"
    CLASS = "CLASS"
    MEMBER = "MEMBER"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def ordinal(self) -> int:
        return _TYPE_ORDER.index(self)


class MemberType(str, Enum):
    """Kind of class member."""
    PROPERTY = "PROPERTY"
    COLLECTION = "COLLECTION"
    ACTION = "ACTION"


_TYPE_ORDER = (FeatureType.PACKAGE, FeatureType.CLASS, FeatureType.MEMBER)
_MEMBER_ORDER = (MemberType.PROPERTY, MemberType.COLLECTION, MemberType.ACTION)

_PREFIXES = {
    FeatureType.PACKAGE: "PKG",
    FeatureType.CLASS: "CLS",
    FeatureType.MEMBER: "MEM",
}
_TYPES_BY_PREFIX = {prefix: feature_type for feature_type, prefix in _PREFIXES.items()}

_NAME = re.compile(r"[^\s.#:]+")
_ENCODED = re.compile(r"([A-Z]+):(.*)", re.DOTALL)


def _is_name(value) -> bool:
    return isinstance(value, str) and _NAME.fullmatch(value) is not None


def _is_package_name(value) -> bool:
    if not isinstance(value, str):
        return False
    return value == "" or all(_is_name(segment) for segment in value.split("."))


def _split_class_name(fqcn: str) -> Tuple[str, str]:
    package_name, separator, class_name = fqcn.rpartition(".")
    if separator and not package_name:
        raise MalformedIdError("Empty package name before class", {"class_name": repr(fqcn)})
    return package_name, class_name


@functools.total_ordering
@dataclass(frozen=True)
class FeatureId:
    """Immutable identifier of a package, class or member.

    Exactly the fields implied by ``feature_type`` are populated:

    - PACKAGE: ``package_name`` only
    - CLASS: ``package_name`` and ``class_name``
    - MEMBER: all of ``package_name``, ``class_name``, ``member_name``
      and ``member_type``

    Construct through :meth:`new_package`, :meth:`new_class`,
    :meth:`new_member` or :meth:`parse`; an invalid combination raises
    :class:`MalformedIdError`.
    """
    feature_type: FeatureType
    package_name: str
    class_name: Optional[str] = None
    member_name: Optional[str] = None
    member_type: Optional[MemberType] = None

    def __post_init__(self):
        if not isinstance(self.feature_type, FeatureType):
            raise MalformedIdError(
                "Unrecognized feature type",
                {"feature_type": repr(self.feature_type)}
            )
        if not _is_package_name(self.package_name):
            raise MalformedIdError(
                "Invalid package name",
                {"package_name": repr(self.package_name)}
            )

        if self.feature_type is FeatureType.PACKAGE:
            populated = (self.class_name, self.member_name, self.member_type)
            if any(value is not None for value in populated):
                raise MalformedIdError(
                    "Package ids carry only a package name",
                    {"package_name": self.package_name}
                )
            return

        if not _is_name(self.class_name):
            raise MalformedIdError(
                "Invalid class name",
                {"class_name": repr(self.class_name)}
            )

        if self.feature_type is FeatureType.CLASS:
            if self.member_name is not None or self.member_type is not None:
                raise MalformedIdError(
                    "Class ids carry no member",
                    {"class_name": self.class_name}
                )
            return

        if not _is_name(self.member_name):
            raise MalformedIdError(
                "Invalid member name",
                {"member_name": repr(self.member_name)}
            )
        if not isinstance(self.member_type, MemberType):
            raise MalformedIdError(
                "Member ids require a member type",
                {"member_type": repr(self.member_type)}
            )

    # Factories

    @classmethod
    def new_package(cls, package_name: str) -> "FeatureId":
        return cls(FeatureType.PACKAGE, package_name)

    @classmethod
    def new_class(cls, fully_qualified_class_name: str) -> "FeatureId":
        if not isinstance(fully_qualified_class_name, str):
            raise MalformedIdError("Class name must be a string")
        package_name, class_name = _split_class_name(fully_qualified_class_name)
        return cls(FeatureType.CLASS, package_name, class_name)

    @classmethod
    def new_member(
        cls,
        fully_qualified_class_name: str,
        member_name: str,
        member_type: MemberType
    ) -> "FeatureId":
        class_id = cls.new_class(fully_qualified_class_name)
        if member_type is not None and not isinstance(member_type, MemberType):
            try:
                member_type = MemberType(member_type)
            except ValueError:
                raise MalformedIdError(
                    "Unrecognized member type",
                    {"member_type": repr(member_type)}
                ) from None
        return cls(
            FeatureType.MEMBER,
            class_id.package_name,
            class_id.class_name,
            member_name,
            member_type
        )

    # Encoding

    @classmethod
    def parse(cls, encoded: str) -> "FeatureId":
        """Parse a canonical string such as ``CLS:com.acme.Invoice``."""
        if not isinstance(encoded, str):
            raise MalformedIdError("Feature id must be a string", {"encoded": repr(encoded)})

        match = _ENCODED.fullmatch(encoded)
        if match is None:
            raise MalformedIdError("Feature id has no type prefix", {"encoded": encoded})

        prefix, body = match.groups()
        feature_type = _TYPES_BY_PREFIX.get(prefix)
        if feature_type is None:
            raise MalformedIdError("Unrecognized feature type prefix", {"encoded": encoded, "prefix": prefix})

        try:
            if feature_type is FeatureType.PACKAGE:
                return cls.new_package(body)
            if feature_type is FeatureType.CLASS:
                return cls.new_class(body)

            fqcn, hash_sep, member_part = body.partition("#")
            member_name, type_sep, member_type_name = member_part.rpartition(":")
            if not hash_sep or not type_sep:
                raise MalformedIdError("Member id must look like MEM:<class>#<member>:<type>")
            return cls.new_member(fqcn, member_name, member_type_name)
        except MalformedIdError as e:
            raise MalformedIdError(e.message, {**e.details, "encoded": encoded}) from None

    def encode(self) -> str:
        """Return the canonical string form."""
        if self.feature_type is FeatureType.MEMBER:
            return f"{self.feature_type.prefix}:{self.fully_qualified_name()}:{self.member_type.value}"
        return f"{self.feature_type.prefix}:{self.fully_qualified_name()}"

    # Hierarchy

    def fully_qualified_name(self) -> str:
        if self.feature_type is FeatureType.PACKAGE:
            return self.package_name
        class_fqn = f"{self.package_name}.{self.class_name}" if self.package_name else self.class_name
        if self.feature_type is FeatureType.CLASS:
            return class_fqn
        return f"{class_fqn}#{self.member_name}"

    def parent_package_id(self) -> Optional["FeatureId"]:
        """Enclosing package; None for the root package."""
        if self.feature_type is not FeatureType.PACKAGE:
            return FeatureId.new_package(self.package_name)
        if self.package_name == "":
            return None
        parent_name, _, _ = self.package_name.rpartition(".")
        return FeatureId.new_package(parent_name)

    def parent_class_id(self) -> Optional["FeatureId"]:
        """Owning class of a member; None for packages and classes."""
        if self.feature_type is not FeatureType.MEMBER:
            return None
        return FeatureId(FeatureType.CLASS, self.package_name, self.class_name)

    def parent_id(self) -> Optional["FeatureId"]:
        if self.feature_type is FeatureType.MEMBER:
            return self.parent_class_id()
        return self.parent_package_id()

    def ancestors(self) -> Tuple["FeatureId", ...]:
        """Every enclosing feature, most specific first, ending at the root package."""
        chain = []
        parent = self.parent_id()
        while parent is not None:
            chain.append(parent)
            parent = parent.parent_id()
        return tuple(chain)

    def is_root(self) -> bool:
        return self.feature_type is FeatureType.PACKAGE and self.package_name == ""

    # Ordering

    def sort_key(self) -> Tuple[int, str, int]:
        member_ordinal = _MEMBER_ORDER.index(self.member_type) if self.member_type else -1
        return (self.feature_type.ordinal, self.fully_qualified_name(), member_ordinal)

    def __lt__(self, other):
        if not isinstance(other, FeatureId):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return self.encode()


def as_feature_id(value) -> FeatureId:
    """Accept a FeatureId or its canonical string."""
    if isinstance(value, FeatureId):
        return value
    return FeatureId.parse(value)

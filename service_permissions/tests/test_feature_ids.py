"""
Unit tests for feature identifiers.
"""

import pytest

from service_permissions.app.features.ids import FeatureId, FeatureType, MemberType
from shared.errors import MalformedIdError


class TestFeatureIdConstruction:
    """Test cases for FeatureId factories and field invariants."""

    def test_new_package(self):
        feature_id = FeatureId.new_package("com.acme")

        assert feature_id.feature_type is FeatureType.PACKAGE
        assert feature_id.package_name == "com.acme"
        assert feature_id.class_name is None
        assert feature_id.member_name is None
        assert feature_id.member_type is None

    def test_new_class_splits_on_last_dot(self):
        feature_id = FeatureId.new_class("com.acme.Invoice")

        assert feature_id.feature_type is FeatureType.CLASS
        assert feature_id.package_name == "com.acme"
        assert feature_id.class_name == "Invoice"

    def test_new_class_in_root_package(self):
        feature_id = FeatureId.new_class("Invoice")

        assert feature_id.package_name == ""
        assert feature_id.fully_qualified_name() == "Invoice"

    def test_new_member(self):
        feature_id = FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION)

        assert feature_id.feature_type is FeatureType.MEMBER
        assert feature_id.class_name == "Invoice"
        assert feature_id.member_name == "submit"
        assert feature_id.member_type is MemberType.ACTION

    def test_new_member_accepts_member_type_name(self):
        feature_id = FeatureId.new_member("com.acme.Invoice", "lines", "COLLECTION")

        assert feature_id.member_type is MemberType.COLLECTION

    def test_package_with_class_name_rejected(self):
        with pytest.raises(MalformedIdError):
            FeatureId(FeatureType.PACKAGE, "com.acme", class_name="Invoice")

    def test_class_with_member_rejected(self):
        with pytest.raises(MalformedIdError):
            FeatureId(FeatureType.CLASS, "com.acme", "Invoice", member_name="submit")

    def test_member_without_type_rejected(self):
        with pytest.raises(MalformedIdError):
            FeatureId(FeatureType.MEMBER, "com.acme", "Invoice", "submit")

    @pytest.mark.parametrize("package_name", ["com..acme", ".com", "com.", "com acme", "com#acme"])
    def test_invalid_package_names_rejected(self, package_name):
        with pytest.raises(MalformedIdError):
            FeatureId.new_package(package_name)

    def test_frozen(self):
        feature_id = FeatureId.new_package("com.acme")

        with pytest.raises(AttributeError):
            feature_id.package_name = "org.other"


class TestFeatureIdEncoding:
    """Test cases for the canonical string form."""

    def test_encode_each_feature_type(self):
        assert FeatureId.new_package("com.acme").encode() == "PKG:com.acme"
        assert FeatureId.new_package("").encode() == "PKG:"
        assert FeatureId.new_class("com.acme.Invoice").encode() == "CLS:com.acme.Invoice"
        assert (
            FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION).encode()
            == "MEM:com.acme.Invoice#submit:ACTION"
        )

    def test_str_is_encoding(self):
        feature_id = FeatureId.new_class("com.acme.Invoice")

        assert str(feature_id) == "CLS:com.acme.Invoice"

    @pytest.mark.parametrize("feature_id", [
        FeatureId.new_package(""),
        FeatureId.new_package("com"),
        FeatureId.new_package("com.acme.billing"),
        FeatureId.new_class("Invoice"),
        FeatureId.new_class("com.acme.Invoice"),
        FeatureId.new_member("Invoice", "total", MemberType.PROPERTY),
        FeatureId.new_member("com.acme.Invoice", "lines", MemberType.COLLECTION),
        FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION),
    ])
    def test_parse_inverts_encode(self, feature_id):
        assert FeatureId.parse(feature_id.encode()) == feature_id

    def test_parse_member(self):
        feature_id = FeatureId.parse("MEM:com.acme.Invoice#submit:ACTION")

        assert feature_id == FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION)

    @pytest.mark.parametrize("encoded", [
        "",
        "com.acme.Invoice",
        "XYZ:com.acme",
        "pkg:com.acme",
        "CLS:",
        "CLS:com.acme.",
        "MEM:com.acme.Invoice#submit",
        "MEM:com.acme.Invoice:ACTION",
        "MEM:com.acme.Invoice#submit:METHOD",
        "MEM:com.acme.Invoice#:ACTION",
        "PKG:com.acme\n",
        "CLS:com.acme.In voice",
        "CLS:.Invoice",
        "MEM:.Invoice#x:ACTION",
    ])
    def test_parse_malformed(self, encoded):
        with pytest.raises(MalformedIdError) as exc_info:
            FeatureId.parse(encoded)

        assert exc_info.value.code == "MALFORMED_FEATURE_ID"

    def test_parse_non_string(self):
        with pytest.raises(MalformedIdError):
            FeatureId.parse(None)

    def test_malformed_id_is_value_error(self):
        with pytest.raises(ValueError):
            FeatureId.parse("nope")


class TestFeatureIdHierarchy:
    """Test cases for parents and ancestors."""

    def test_parent_package_of_package(self):
        assert FeatureId.new_package("com.acme").parent_package_id() == FeatureId.new_package("com")
        assert FeatureId.new_package("com").parent_package_id() == FeatureId.new_package("")
        assert FeatureId.new_package("").parent_package_id() is None

    def test_parent_package_of_class(self):
        assert FeatureId.new_class("com.acme.Invoice").parent_package_id() == FeatureId.new_package("com.acme")

    def test_parent_class_of_member(self):
        member = FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION)

        assert member.parent_class_id() == FeatureId.new_class("com.acme.Invoice")
        assert FeatureId.new_class("com.acme.Invoice").parent_class_id() is None

    def test_member_ancestors(self):
        member = FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION)

        assert member.ancestors() == (
            FeatureId.new_class("com.acme.Invoice"),
            FeatureId.new_package("com.acme"),
            FeatureId.new_package("com"),
            FeatureId.new_package(""),
        )

    def test_class_ancestors(self):
        assert FeatureId.new_class("com.acme.Invoice").ancestors() == (
            FeatureId.new_package("com.acme"),
            FeatureId.new_package("com"),
            FeatureId.new_package(""),
        )

    def test_root_package_has_no_ancestors(self):
        root = FeatureId.new_package("")

        assert root.is_root()
        assert root.ancestors() == ()

    @pytest.mark.parametrize("encoded", [
        "PKG:a.b.c.d.e",
        "CLS:a.b.C",
        "CLS:C",
        "MEM:a.b.C#m:PROPERTY",
    ])
    def test_ancestors_exclude_self_and_end_at_root(self, encoded):
        feature_id = FeatureId.parse(encoded)
        ancestors = feature_id.ancestors()

        assert feature_id not in ancestors
        assert ancestors[-1].is_root()
        assert len(set(ancestors)) == len(ancestors)

    def test_fully_qualified_names(self):
        assert FeatureId.new_package("com.acme").fully_qualified_name() == "com.acme"
        assert FeatureId.new_class("com.acme.Invoice").fully_qualified_name() == "com.acme.Invoice"
        assert (
            FeatureId.new_member("com.acme.Invoice", "submit", MemberType.ACTION).fully_qualified_name()
            == "com.acme.Invoice#submit"
        )


class TestFeatureIdOrdering:
    """Test cases for equality and natural ordering."""

    def test_structural_equality_and_hash(self):
        first = FeatureId.parse("CLS:com.acme.Invoice")
        second = FeatureId.new_class("com.acme.Invoice")

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_type_orders_before_name(self):
        ids = [
            FeatureId.new_member("a.B", "x", MemberType.ACTION),
            FeatureId.new_class("z.Z"),
            FeatureId.new_package("zzz"),
        ]

        assert sorted(ids) == [
            FeatureId.new_package("zzz"),
            FeatureId.new_class("z.Z"),
            FeatureId.new_member("a.B", "x", MemberType.ACTION),
        ]

    def test_lexicographic_within_type(self):
        ids = [FeatureId.new_class("com.acme.Invoice"), FeatureId.new_class("com.acme.Customer")]

        assert sorted(ids)[0] == FeatureId.new_class("com.acme.Customer")

    def test_member_type_breaks_ties(self):
        action = FeatureId.new_member("a.B", "x", MemberType.ACTION)
        prop = FeatureId.new_member("a.B", "x", MemberType.PROPERTY)

        assert action != prop
        assert prop < action

    def test_comparison_with_other_types(self):
        with pytest.raises(TypeError):
            FeatureId.new_package("a") < "PKG:a"

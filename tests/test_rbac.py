"""
Tests for vaultstage.rbac module.
"""

import pytest
from pydantic import ValidationError

from vaultstage.rbac import (
    CUSTOM_ROLE,
    PERMISSION_KEYS,
    PERMISSION_TEMPLATES,
    StandardMember,
    default_standard_members,
    detect_role,
    empty_permissions,
    granted,
    normalize_permissions,
    template_permissions,
)


class TestPermissionTemplates:
    """Tests for the permission templates."""

    def test_twenty_two_permissions(self):
        """Test the permission enumeration."""
        assert len(PERMISSION_KEYS) == 22
        assert len(set(PERMISSION_KEYS)) == 22

    def test_template_order(self):
        """Test templates are declared in detection order."""
        assert list(PERMISSION_TEMPLATES) == ["PAM", "SM-HOLDER", "SM-PROV", "SM-APP", "NONE", "FULL"]

    def test_templates_cover_every_key(self):
        """Test each template maps all 22 permissions."""
        for template in PERMISSION_TEMPLATES.values():
            assert list(template) == PERMISSION_KEYS

    def test_templates_are_read_only(self):
        """Test templates cannot be mutated."""
        with pytest.raises(TypeError):
            PERMISSION_TEMPLATES["PAM"]["UseAccounts"] = False
        with pytest.raises(TypeError):
            PERMISSION_TEMPLATES["CUSTOM"] = {}

    def test_template_permissions_returns_copy(self):
        """Test template_permissions gives a mutable copy."""
        perms = template_permissions("SM-APP")
        perms["ManageSafe"] = True
        assert PERMISSION_TEMPLATES["SM-APP"]["ManageSafe"] is False

    def test_unknown_template(self):
        """Test unknown template names raise."""
        with pytest.raises(ValueError) as exc_info:
            template_permissions("ADMIN")
        assert "ADMIN" in str(exc_info.value)

    def test_pam_excludes_request_authorization(self):
        """Test PAM grants everything except request authorization."""
        pam = template_permissions("PAM")
        assert pam["RequestsAuthorizationLevel1"] is False
        assert pam["RequestsAuthorizationLevel2"] is False
        assert len(granted(pam)) == 20


class TestDetectRole:
    """Tests for detect_role function."""

    @pytest.mark.parametrize("name", ["PAM", "SM-HOLDER", "SM-PROV", "SM-APP", "NONE"])
    def test_template_detected(self, name):
        """Test each template is detected by value."""
        assert detect_role(template_permissions(name)) == name

    def test_full_detects_as_pam(self):
        """Test FULL equals PAM, so the earlier PAM wins."""
        assert template_permissions("FULL") == template_permissions("PAM")
        assert detect_role(template_permissions("FULL")) == "PAM"

    def test_all_false_is_none(self):
        """Test the empty permission set."""
        assert detect_role(empty_permissions()) == "NONE"

    def test_mix_is_custom(self):
        """Test a set matching no template."""
        perms = template_permissions("SM-APP")
        perms["ManageSafe"] = True
        assert detect_role(perms) == CUSTOM_ROLE

    def test_partial_mapping_is_custom(self):
        """Test a mapping missing keys never matches a template."""
        assert detect_role({"UseAccounts": True}) == CUSTOM_ROLE

    def test_none_input(self):
        """Test None is treated as an empty mapping."""
        assert detect_role(None) == CUSTOM_ROLE


class TestNormalizePermissions:
    """Tests for normalize_permissions function."""

    def test_fills_missing_and_drops_unknown(self):
        """Test normalization onto the 22 keys."""
        perms = normalize_permissions({"UseAccounts": True, "Bogus": True})
        assert list(perms) == PERMISSION_KEYS
        assert perms["UseAccounts"] is True
        assert "Bogus" not in perms
        assert granted(perms) == ["UseAccounts"]

    def test_coerces_truthiness(self):
        """Test values are coerced to bool."""
        assert normalize_permissions({"ListAccounts": 1})["ListAccounts"] is True


class TestStandardMembers:
    """Tests for the managed standard members."""

    def test_defaults(self):
        """Test the default standard members and their roles."""
        members = default_standard_members()
        assert [(m.member, m.role) for m in members] == [
            ("G_PAM_ADMINS", "PAM"),
            ("G_PROVISIONING_AUTOMATION", "SM-PROV"),
            ("G_APPLICATION_READERS", "SM-APP"),
            ("G_SAFE_HOLDERS_GLOBAL", "SM-HOLDER"),
        ]
        assert all(m.domain == "Vault" for m in members)

    def test_role_derived_from_permissions(self):
        """Test the role label ignores input."""
        member = StandardMember(member="G_X", permissions=empty_permissions(), role="PAM")
        assert member.role == "NONE"

    def test_default_permissions_are_pam(self):
        """Test a new standard member gets PAM permissions."""
        assert StandardMember(member="G_NEW").role == "PAM"

    def test_member_name_required(self):
        """Test an empty member name is rejected."""
        with pytest.raises(ValidationError):
            StandardMember(member="")

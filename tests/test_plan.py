"""
Tests for vaultstage.plan module.
"""

import json

import pytest

from vaultstage.errors import ValidationError
from vaultstage.plan import Plan, load_plan, stage_plan
from vaultstage.staging import OperationKind, ResourceKind


@pytest.fixture
def plan_file(tmp_path):
    """Write a plan document and return its path."""

    def write(data):
        path = tmp_path / "plan.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    return write


class TestLoadPlan:
    """Tests for load_plan function."""

    def test_load(self, plan_file):
        """Test a plan document is parsed into sections."""
        path = plan_file(
            {
                "create": {
                    "safes": [{"name": "Finance-01", "version_retention": 10}],
                    "members": [
                        {"target_safe": "Finance-01", "member_name": "jdoe", "role": "SM-APP"}
                    ],
                },
                "remove": {"accounts": ["12_3"]},
            }
        )

        plan = load_plan(path)

        assert plan.create.safes[0].name == "Finance-01"
        assert plan.create.members[0].resolved_permissions()["UseAccounts"] is True
        assert plan.remove.accounts == ["12_3"]
        assert plan.kinds_needing_mirrors() == [ResourceKind.ACCOUNT]

    def test_unknown_role(self, plan_file):
        """Test an unknown template name is rejected."""
        path = plan_file({"create": {"members": [{"member_name": "x", "role": "ADMIN"}]}})

        with pytest.raises(ValidationError):
            load_plan(path)

    @pytest.mark.parametrize(
        "section,edits",
        [
            ("safes", {"kind": "member"}),
            ("safes", {"name": "Renamed"}),
            ("members", {"managing_cpm": "CPM2"}),
            ("accounts", {"platform_id": "Other"}),
        ],
    )
    def test_non_editable_fields(self, plan_file, section, edits):
        """Test edits outside a kind's editable fields are rejected on load."""
        path = plan_file({"modify": {section: [{"id": "x", "edits": edits}]}})

        with pytest.raises(ValidationError) as exc_info:
            load_plan(path)

        assert "Invalid plan" in exc_info.value.message

    def test_not_json(self, plan_file):
        """Test a malformed file."""
        with pytest.raises(ValidationError):
            load_plan(plan_file("{not json"))

    def test_missing_file(self, tmp_path):
        """Test a missing file."""
        with pytest.raises(ValidationError):
            load_plan(tmp_path / "missing.json")


class TestStagePlan:
    """Tests for stage_plan function."""

    @pytest.mark.asyncio
    async def test_creates_only(self, console, fake_vault):
        """Test a create-only plan needs no vault access."""
        plan = Plan.model_validate(
            {
                "create": {
                    "safes": [
                        {"name": "Finance-01", "version_retention": 10},
                        {"name": "Archive-01", "retention_mode": "days", "days_retention": 90},
                    ],
                    "members": [
                        {"target_safe": "Finance-01", "member_name": "jdoe", "role": "SM-HOLDER"}
                    ],
                    "accounts": [
                        {
                            "object_id": "db-admin",
                            "address": "db01",
                            "user_name": "dbadmin",
                            "platform_id": "WinDomain",
                            "safe_name": "Finance-01",
                        }
                    ],
                }
            }
        )

        failures = await stage_plan(console, plan)

        assert failures == 0
        assert fake_vault.calls == []
        counts = console.summary()["queues"]
        assert counts["safe-create"] == 2
        assert counts["member-create"] == 1
        assert counts["account-create"] == 1
        member = console.state.staging.queue(ResourceKind.MEMBER, OperationKind.CREATE)[0]
        assert member.role_label == "SM-HOLDER"

    @pytest.mark.asyncio
    async def test_modify_and_remove(
        self, connected_console, fake_vault, server_safes, server_accounts
    ):
        """Test modifications and removals are staged against fresh mirrors."""
        fake_vault.respond("GET", "/safes", 200, server_safes)
        fake_vault.respond("GET", "/accounts", 200, server_accounts)
        plan = Plan.model_validate(
            {
                "modify": {
                    "safes": [
                        {"id": "Legacy-02", "edits": {"retention_type": "versions", "retention_value": 4}}
                    ]
                },
                "remove": {"accounts": ["12_3", "12_4"]},
            }
        )

        failures = await stage_plan(connected_console, plan)

        assert failures == 0
        staging = connected_console.state.staging
        modified = staging.queue(ResourceKind.SAFE, OperationKind.MODIFY)[0]
        assert modified.number_of_versions_retention == 4
        assert modified.number_of_days_retention is None
        assert staging.queue(ResourceKind.ACCOUNT, OperationKind.REMOVE).ids() == ["12_3", "12_4"]

    @pytest.mark.asyncio
    async def test_failures_counted(self, connected_console, fake_vault, server_safes):
        """Test invalid entries are counted and the rest still staged."""
        fake_vault.respond("GET", "/safes", 200, server_safes)
        plan = Plan.model_validate(
            {
                "create": {"safes": [{"name": "", "version_retention": 1}, {"name": "Ok-01", "version_retention": 1}]},
                "modify": {"safes": [{"id": "Nope", "edits": {}}]},
                "remove": {"safes": ["Ops-03", "Ghost"]},
            }
        )

        failures = await stage_plan(connected_console, plan)

        assert failures == 3
        staging = connected_console.state.staging
        assert staging.queue(ResourceKind.SAFE, OperationKind.CREATE).ids() == ["Ok-01"]
        assert staging.queue(ResourceKind.SAFE, OperationKind.REMOVE).ids() == ["Ops-03"]
        assert not connected_console.state.edits[ResourceKind.SAFE].active

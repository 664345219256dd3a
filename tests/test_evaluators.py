"""
Тесты для MFA, RLS и PITR проверок.
"""

import asyncio

import pytest

from compliance.core.models import CheckStatus, Credentials, FetchFailure, Ok
from compliance.evaluators import MFAEvaluator, PITREvaluator, RLSEvaluator

from conftest import FakeDataPlane, FakeManagement, backups_path, subscription_path


# ═══════════════════════════════════════════════════════
# MFA
# ═══════════════════════════════════════════════════════

class TestMFAEvaluator:
    """Тесты MFA проверки"""

    @pytest.mark.asyncio
    async def test_all_users_enrolled_pass(self):
        users = [{"email": f"u{i}@example.com", "factors": [{"id": str(i)}]} for i in range(3)]
        result = await MFAEvaluator(FakeDataPlane(users=users)).run()

        assert result.status == CheckStatus.PASS
        assert "all 3" in result.message

    @pytest.mark.asyncio
    async def test_partial_enrollment_fail(self):
        users = [
            {"email": "a@example.com", "factors": [{"id": "1"}]},
            {"email": "b@example.com", "factors": []},
            {"email": "c@example.com"},
        ]
        result = await MFAEvaluator(FakeDataPlane(users=users)).run()

        assert result.status == CheckStatus.FAIL
        assert "1 out of 3" in result.message
        assert result.details == [
            {"email": "a@example.com", "mfa_enabled": True},
            {"email": "b@example.com", "mfa_enabled": False},
            {"email": "c@example.com", "mfa_enabled": False},
        ]

    @pytest.mark.asyncio
    async def test_no_users_pass(self):
        result = await MFAEvaluator(FakeDataPlane(users=[])).run()

        assert result.status == CheckStatus.PASS
        assert result.details == []

    @pytest.mark.asyncio
    async def test_details_do_not_leak_user_records(self):
        users = [{
            "email": "a@example.com",
            "phone": "+100000000",
            "user_metadata": {"name": "A"},
            "factors": [{"id": "1"}],
        }]
        result = await MFAEvaluator(FakeDataPlane(users=users)).run()

        assert set(result.details[0].keys()) == {"email", "mfa_enabled"}

    @pytest.mark.asyncio
    async def test_listing_failure_is_error(self):
        failure = FetchFailure(status_code=401, body="invalid JWT", reason="Unauthorized")
        result = await MFAEvaluator(FakeDataPlane(users_response=failure)).run()

        assert result.status == CheckStatus.ERROR
        assert "401" in result.message
        assert result.details["body"] == "invalid JWT"

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_error(self):
        result = await MFAEvaluator(FakeDataPlane(users_response=Ok(["not", "a", "dict"]))).run()

        assert result.status == CheckStatus.ERROR

    @pytest.mark.asyncio
    async def test_exception_in_listing_is_error(self):
        class BrokenDataPlane:
            async def list_users(self):
                raise RuntimeError("session expired")

        result = await MFAEvaluator(BrokenDataPlane()).run()

        assert result.status == CheckStatus.ERROR
        assert "session expired" in result.message
        assert result.details["exception_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_timeout_is_error(self):
        class SlowDataPlane:
            async def list_users(self):
                await asyncio.sleep(1)

        result = await MFAEvaluator(SlowDataPlane(), timeout_seconds=0.01).run()

        assert result.status == CheckStatus.ERROR
        assert result.details["timed_out"] is True


# ═══════════════════════════════════════════════════════
# RLS
# ═══════════════════════════════════════════════════════

class TestRLSEvaluator:
    """Тесты RLS проверки"""

    @pytest.mark.asyncio
    async def test_introspection_failure_is_pass(self):
        failure = FetchFailure(status_code=404, body="function not found", reason="Not Found")
        data_plane = FakeDataPlane(tables_response=failure)

        result = await RLSEvaluator(data_plane).run()

        assert result.status == CheckStatus.PASS
        assert result.details == []
        assert data_plane.rpc_calls == [("get_tables_info", None)]

    @pytest.mark.asyncio
    async def test_no_tables_is_pass(self):
        result = await RLSEvaluator(FakeDataPlane(tables=[])).run()

        assert result.status == CheckStatus.PASS
        assert result.details == []

    @pytest.mark.asyncio
    async def test_null_data_is_pass(self):
        result = await RLSEvaluator(FakeDataPlane(tables_response=Ok(None))).run()

        assert result.status == CheckStatus.PASS
        assert result.details == []

    @pytest.mark.asyncio
    async def test_partial_rls_fail(self):
        tables = [
            {"name": "profiles", "schema": "public", "rls_enabled": True},
            {"name": "orders", "schema": "public", "rls_enabled": False},
        ]
        result = await RLSEvaluator(FakeDataPlane(tables=tables)).run()

        assert result.status == CheckStatus.FAIL
        assert "1 out of 2" in result.message
        assert "orders" in result.message
        assert len(result.details) == 2

    @pytest.mark.asyncio
    async def test_all_tables_protected_pass(self):
        tables = [
            {"name": "profiles", "schema": "public", "rls_enabled": True},
            {"name": "orders", "schema": "public", "rls_enabled": True},
        ]
        result = await RLSEvaluator(FakeDataPlane(tables=tables)).run()

        assert result.status == CheckStatus.PASS
        assert "all 2" in result.message
        assert result.details[1] == {"table_name": "orders", "schema": "public", "rls_enabled": True}

    @pytest.mark.asyncio
    async def test_malformed_rows_are_error(self):
        tables = [{"name": "profiles", "schema": "public"}]
        result = await RLSEvaluator(FakeDataPlane(tables=tables)).run()

        assert result.status == CheckStatus.ERROR


# ═══════════════════════════════════════════════════════
# PITR
# ═══════════════════════════════════════════════════════

class TestPITREvaluator:
    """Тесты PITR проверки"""

    @pytest.mark.asyncio
    async def test_subscription_failure_is_free_tier_fail(self, credentials):
        # Пустой FakeManagement отвечает 404 на всё
        management = FakeManagement()
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert "free tier" in result.message
        assert result.details["tier"] == "free"
        assert management.called_paths() == [subscription_path()]

    @pytest.mark.asyncio
    async def test_subscription_transport_error_is_free_tier_fail(self, credentials):
        management = FakeManagement({
            subscription_path(): FetchFailure(status_code=None, reason="ConnectError: refused"),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert "free tier" in result.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tier", ["free", "Free", "FREE"])
    async def test_free_tier_skips_backups_call(self, credentials, tier):
        management = FakeManagement({
            subscription_path(): Ok({"tier": tier}),
            backups_path(): Ok({"pitr_enabled": True}),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert "free tier" in result.message
        assert backups_path() not in management.called_paths()

    @pytest.mark.asyncio
    async def test_plan_id_free_is_free_tier(self, credentials):
        management = FakeManagement({subscription_path(): Ok({"plan": {"id": "free"}})})
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert management.called_paths() == [subscription_path()]

    @pytest.mark.asyncio
    async def test_pro_tier_with_pitr_pass(self, credentials):
        management = FakeManagement({
            subscription_path(): Ok({"tier": "pro"}),
            backups_path(): Ok({"pitr_enabled": True, "walg_enabled": True}),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.PASS
        assert result.details == {
            "pitr_enabled": True,
            "walg_enabled": True,
            "tier": "pro",
            "configuration": "enabled",
        }
        assert management.called_paths() == [subscription_path(), backups_path()]

    @pytest.mark.asyncio
    async def test_pro_tier_without_pitr_fail(self, credentials):
        management = FakeManagement({
            subscription_path(): Ok({"tier": "pro"}),
            backups_path(): Ok({"pitr_enabled": False}),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert result.details["configuration"] == "disabled"
        assert "Enable it in project settings" in result.message

    @pytest.mark.asyncio
    async def test_backups_failure_is_unconfigured_fail(self, credentials):
        management = FakeManagement({
            subscription_path(): Ok({"tier": "team"}),
            backups_path(): FetchFailure(status_code=403, body="forbidden", reason="Forbidden"),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.FAIL
        assert "team" in result.message
        assert "403" in result.message
        assert "Database > Backups" in result.message
        assert result.details["failure"]["status_code"] == 403

    @pytest.mark.asyncio
    async def test_missing_tier_is_error(self, credentials):
        management = FakeManagement({subscription_path(): Ok({"status": "active"})})
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.ERROR

    @pytest.mark.asyncio
    async def test_missing_pitr_flag_is_error(self, credentials):
        management = FakeManagement({
            subscription_path(): Ok({"tier": "pro"}),
            backups_path(): Ok({"backups": []}),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.ERROR

    @pytest.mark.asyncio
    async def test_unresolvable_project_is_error_without_network(self):
        credentials = Credentials(
            endpoint_url="http://localhost:54321",
            data_plane_key="eyJtest",
            management_key="sbp_test",
        )
        management = FakeManagement()
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.ERROR
        assert management.calls == []

    @pytest.mark.asyncio
    async def test_explicit_project_id_is_used(self):
        credentials = Credentials(
            endpoint_url="https://custom-domain.example.com",
            data_plane_key="eyJtest",
            management_key="sbp_test",
            project_id="myref",
        )
        management = FakeManagement({
            subscription_path("myref"): Ok({"tier": "pro"}),
            backups_path("myref"): Ok({"pitr_enabled": True}),
        })
        result = await PITREvaluator(credentials, management).run()

        assert result.status == CheckStatus.PASS


# ═══════════════════════════════════════════════════════
# FAIL MESSAGES
# ═══════════════════════════════════════════════════════

HINT_VERBS = ("Enable", "Require", "Upgrade")

FAILING_EVALUATORS = {
    "mfa_partial": lambda creds: MFAEvaluator(FakeDataPlane(users=[{"email": "a@example.com", "factors": []}])),
    "rls_partial": lambda creds: RLSEvaluator(FakeDataPlane(tables=[
        {"name": "profiles", "schema": "public", "rls_enabled": False},
    ])),
    "pitr_subscription_failure": lambda creds: PITREvaluator(creds, FakeManagement()),
    "pitr_free_tier": lambda creds: PITREvaluator(creds, FakeManagement({subscription_path(): Ok({"tier": "free"})})),
    "pitr_unconfigured": lambda creds: PITREvaluator(creds, FakeManagement({
        subscription_path(): Ok({"tier": "pro"}),
        backups_path(): FetchFailure(status_code=500, body="x", reason="Internal Server Error"),
    })),
    "pitr_disabled": lambda creds: PITREvaluator(creds, FakeManagement({
        subscription_path(): Ok({"tier": "pro"}),
        backups_path(): Ok({"pitr_enabled": False}),
    })),
}


class TestFailMessages:
    """Каждый fail подсказывает, как исправить."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("case", sorted(FAILING_EVALUATORS))
    async def test_fail_carries_remediation_hint(self, credentials, case):
        result = await FAILING_EVALUATORS[case](credentials).run()

        assert result.status == CheckStatus.FAIL
        assert any(verb in result.message for verb in HINT_VERBS), result.message

"""
MFA evaluator.

Все пользователи проекта должны иметь хотя бы один зарегистрированный
MFA фактор. Оценивается только первая страница списка пользователей.
"""

from typing import Any, Dict, List

from ..core.base_evaluator import BaseEvaluator
from ..core.gateway import DataPlaneSession
from ..core.models import CheckResult, CheckStatus, FetchFailure


class MFAEvaluator(BaseEvaluator):
    """Проверка покрытия пользователей MFA."""

    key = "mfa"
    title = "MFA"

    def __init__(self, data_plane: DataPlaneSession, timeout_seconds=None):
        super().__init__(timeout_seconds)
        self.data_plane = data_plane

    async def _evaluate(self) -> CheckResult:
        response = await self.data_plane.list_users()

        if isinstance(response, FetchFailure):
            return self.error_result(
                f"Failed to check MFA status: {response.describe()}",
                response.to_dict(),
            )

        users = response.data.get("users") if isinstance(response.data, dict) else None
        if not isinstance(users, list):
            return self.error_result(
                "Failed to check MFA status: unexpected response from user listing",
                {"response": response.data},
            )

        if not users:
            return CheckResult(
                status=CheckStatus.PASS,
                message="No users found in the system",
                details=[],
            )

        user_mfa_status = [self._project_user(user) for user in users]
        enabled_count = sum(1 for user in user_mfa_status if user["mfa_enabled"])
        total = len(user_mfa_status)

        if enabled_count == total:
            return CheckResult(
                status=CheckStatus.PASS,
                message=f"MFA is enabled for all {total} users",
                details=user_mfa_status,
            )

        return CheckResult(
            status=CheckStatus.FAIL,
            message=(
                f"MFA is enabled for {enabled_count} out of {total} users. "
                "Require MFA enrollment for the remaining users."
            ),
            details=user_mfa_status,
        )

    @staticmethod
    def _project_user(user: Dict[str, Any]) -> Dict[str, Any]:
        """Только email и флаг MFA: остальные поля пользователя не выводятся."""
        if not isinstance(user, dict):
            raise ValueError(f"Unexpected user record: {type(user).__name__}")

        factors: List[Any] = user.get("factors") or []
        return {
            "email": user.get("email"),
            "mfa_enabled": len(factors) > 0,
        }

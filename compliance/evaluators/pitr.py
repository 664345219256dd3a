"""
PITR evaluator.

Два последовательных вызова Management API:
1. projects/{id}/subscription - тариф проекта
2. projects/{id}/database/backups/info - настройки бэкапов

Неудачный запрос тарифа трактуется как free tier (PITR недоступен), а
неудачный запрос настроек бэкапов как "доступен, но не настроен". Оба
случая дают fail, а не error.
"""

from typing import Any, Dict, Optional

from ..core.base_evaluator import BaseEvaluator
from ..core.gateway import ManagementGateway
from ..core.models import CheckResult, CheckStatus, Credentials, CredentialsError, FetchFailure

FREE_TIER = "free"
FREE_TIER_MESSAGE = "Point in Time Recovery is not available on the free tier"
UPGRADE_HINT = "Upgrade to a paid plan to enable PITR capabilities"
SETUP_HINT = "Enable Point in Time Recovery in project settings (Database > Backups)"


class PITREvaluator(BaseEvaluator):
    """Проверка настройки Point in Time Recovery."""

    key = "pitr"
    title = "PITR"

    def __init__(
        self,
        credentials: Credentials,
        management: ManagementGateway,
        vendor_domain: str = "supabase.co",
        timeout_seconds=None,
    ):
        super().__init__(timeout_seconds)
        self.credentials = credentials
        self.management = management
        self.vendor_domain = vendor_domain

    async def _evaluate(self) -> CheckResult:
        # 1. Project id (без сетевых вызовов при ошибке)
        try:
            project_id = self.credentials.resolve_project_id(self.vendor_domain)
        except CredentialsError as e:
            return self.error_result(
                f"Failed to check PITR status: {e}",
                {"endpoint_url": self.credentials.endpoint_url},
            )

        # 2. Тариф
        subscription = await self.management.call(f"projects/{project_id}/subscription")
        if isinstance(subscription, FetchFailure):
            self.logger.info(f"Subscription lookup failed ({subscription.describe()}), assuming free tier")
            return self._free_tier_result(lookup_failure=subscription)

        tier = self._parse_tier(subscription.data)
        if tier is None:
            return self.error_result(
                "Failed to check PITR status: subscription response has no tier",
                {"response": subscription.data},
            )

        # 3. Free tier: второй вызов не нужен
        if tier.lower() == FREE_TIER:
            return self._free_tier_result()

        # 4. Настройки бэкапов
        backups = await self.management.call(f"projects/{project_id}/database/backups/info")
        if isinstance(backups, FetchFailure):
            return CheckResult(
                status=CheckStatus.FAIL,
                message=(
                    f"Point in Time Recovery is available on the {tier} tier but is not configured: "
                    f"{backups.describe()}. {SETUP_HINT}."
                ),
                details={"tier": tier, "configuration": "unconfigured", "failure": backups.to_dict()},
            )

        if not isinstance(backups.data, dict) or not isinstance(backups.data.get("pitr_enabled"), bool):
            return self.error_result(
                "Failed to check PITR status: backups response has no pitr_enabled flag",
                {"tier": tier, "response": backups.data},
            )

        # 5. Итог
        enabled = backups.data["pitr_enabled"]
        details = {
            **backups.data,
            "tier": tier,
            "configuration": "enabled" if enabled else "disabled",
        }

        if enabled:
            return CheckResult(
                status=CheckStatus.PASS,
                message="Point in Time Recovery is enabled",
                details=details,
            )

        return CheckResult(
            status=CheckStatus.FAIL,
            message="Point in Time Recovery is available but not enabled. Enable it in project settings.",
            details=details,
        )

    @staticmethod
    def _parse_tier(data: Any) -> Optional[str]:
        """Тариф из поля tier, либо plan.id."""
        if not isinstance(data, dict):
            return None

        tier = data.get("tier")
        if not isinstance(tier, str) and isinstance(data.get("plan"), dict):
            tier = data["plan"].get("id")
        return tier if isinstance(tier, str) and tier else None

    @staticmethod
    def _free_tier_result(lookup_failure: Optional[FetchFailure] = None) -> CheckResult:
        details: Dict[str, Any] = {"tier": FREE_TIER, "hint": UPGRADE_HINT}
        if lookup_failure is not None:
            details["lookup_failure"] = lookup_failure.to_dict()

        return CheckResult(
            status=CheckStatus.FAIL,
            message=f"{FREE_TIER_MESSAGE}. {UPGRADE_HINT}.",
            details=details,
        )

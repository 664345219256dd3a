"""
Remediation actions for failed checks.

- enable_mfa: включить и потребовать MFA в настройках Auth проекта
- enable_rls: включить RLS на таблице через процедуру enable_rls
- enable_pitr: включить Point in Time Recovery

Одна попытка на действие. Ошибка вызова поднимается как RemediationError.
"""

import logging

from compliance.core.gateway import DataPlaneSession, ManagementGateway
from compliance.core.models import FetchFailure, GatewayResult

logger = logging.getLogger(__name__)


class RemediationError(Exception):
    """Действие по исправлению не выполнено."""

    def __init__(self, message: str, failure: FetchFailure = None):
        super().__init__(message)
        self.failure = failure


def _raise_on_failure(result: GatewayResult, action: str) -> None:
    if isinstance(result, FetchFailure):
        logger.error(f"{action} failed: {result.describe()}")
        raise RemediationError(f"Failed to {action}: {result.describe()}", failure=result)


async def enable_mfa(management: ManagementGateway, project_id: str) -> None:
    """Включить MFA и сделать его обязательным."""
    result = await management.call(
        f"projects/{project_id}/auth/config",
        method="PATCH",
        json={"mfa_enabled": True, "enforce_mfa": True},
    )
    _raise_on_failure(result, "enable MFA")
    logger.info(f"MFA enabled for project {project_id}")


async def enable_rls(data_plane: DataPlaneSession, table_name: str) -> None:
    """Включить RLS на таблице."""
    if not table_name:
        raise ValueError("table_name is required")

    result = await data_plane.rpc("enable_rls", {"table_name": table_name})
    _raise_on_failure(result, f"enable RLS on table {table_name}")
    logger.info(f"RLS enabled on table {table_name}")


async def enable_pitr(management: ManagementGateway, project_id: str) -> None:
    """Включить Point in Time Recovery."""
    result = await management.call(
        f"projects/{project_id}/database/backups/pitr",
        method="POST",
        json={"enabled": True},
    )
    _raise_on_failure(result, "enable PITR")
    logger.info(f"PITR enabled for project {project_id}")

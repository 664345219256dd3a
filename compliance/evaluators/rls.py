"""
RLS evaluator.

Вызывает процедуру get_tables_info, которая возвращает для каждой таблицы
{name, schema, rls_enabled}.

Если процедура недоступна или таблиц нет, результат pass: проверять пока
нечего. Это отличается от MFA, где недоступность даёт error.
"""

from typing import Any, Dict, List, Optional

from ..core.base_evaluator import BaseEvaluator
from ..core.gateway import DataPlaneSession
from ..core.models import CheckResult, CheckStatus, FetchFailure

INTROSPECTION_PROCEDURE = "get_tables_info"


class RLSEvaluator(BaseEvaluator):
    """Проверка включения Row Level Security на таблицах."""

    key = "rls"
    title = "RLS"

    def __init__(self, data_plane: DataPlaneSession, timeout_seconds=None):
        super().__init__(timeout_seconds)
        self.data_plane = data_plane

    async def _evaluate(self) -> CheckResult:
        response = await self.data_plane.rpc(INTROSPECTION_PROCEDURE)

        if isinstance(response, FetchFailure):
            self.logger.info(
                f"{INTROSPECTION_PROCEDURE} unavailable ({response.describe()}), nothing to check"
            )
            return CheckResult(
                status=CheckStatus.PASS,
                message="Table introspection is not available. No RLS configuration to check yet.",
                details=[],
            )

        if not response.data:
            return CheckResult(
                status=CheckStatus.PASS,
                message="No public tables found in the database",
                details=[],
            )

        tables = self._parse_tables(response.data)
        if tables is None:
            return self.error_result(
                "Failed to check RLS status: unexpected response from table introspection",
                {"response": response.data},
            )

        enabled_count = sum(1 for table in tables if table["rls_enabled"])
        total = len(tables)

        if enabled_count == total:
            return CheckResult(
                status=CheckStatus.PASS,
                message=f"RLS is enabled on all {total} tables",
                details=tables,
            )

        unprotected = ", ".join(t["table_name"] for t in tables if not t["rls_enabled"])
        return CheckResult(
            status=CheckStatus.FAIL,
            message=(
                f"RLS is enabled on {enabled_count} out of {total} tables. "
                f"Enable row level security on: {unprotected}"
            ),
            details=tables,
        )

    @staticmethod
    def _parse_tables(data: Any) -> Optional[List[Dict[str, Any]]]:
        """Проверить форму ответа. None, если ответ не список таблиц."""
        if not isinstance(data, list):
            return None

        tables = []
        for entry in data:
            if not isinstance(entry, dict) or not isinstance(entry.get("rls_enabled"), bool):
                return None
            tables.append({
                "table_name": entry.get("name"),
                "schema": entry.get("schema"),
                "rls_enabled": entry["rls_enabled"],
            })
        return tables

"""
Run controller for compliance checks.

Features:
- Parallel execution of the three independent checks
- Per-check error isolation (one failing check never aborts the others)
- One shared timestamp per run for evidence entries
- Vendor session per run, closed when that run finishes
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from compliance import metrics
from compliance.config import ComplianceConfig, get_default_config
from compliance.core.base_evaluator import BaseEvaluator
from compliance.core.gateway import VendorSession, open_vendor_session
from compliance.core.models import (
    CheckResult,
    CheckStatus,
    Credentials,
    EvidenceEntry,
    ResultsRecord,
    RunOutcome,
)
from compliance.evaluators import MFAEvaluator, PITREvaluator, RLSEvaluator
from compliance.reports.evidence_log import EvidenceLog


logger = logging.getLogger(__name__)

SessionFactory = Callable[[Credentials, ComplianceConfig], VendorSession]
EvaluatorFactory = Callable[[Credentials, VendorSession], List[BaseEvaluator]]


def utc_timestamp() -> str:
    """ISO-8601 в UTC с миллисекундами: 2024-01-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RunController:
    """Контроллер запусков: владеет ResultsRecord и EvidenceLog."""

    def __init__(
        self,
        config: Optional[ComplianceConfig] = None,
        session_factory: Optional[SessionFactory] = None,
        evaluator_factory: Optional[EvaluatorFactory] = None,
        evidence: Optional[EvidenceLog] = None,
    ):
        """
        Args:
            config: Конфигурация проверок
            session_factory: Создаёт новую VendorSession на каждый запуск
            evaluator_factory: Собирает проверки (по умолчанию MFA, RLS, PITR)
            evidence: Журнал (по умолчанию пустой)
        """
        self.config = config or get_default_config()
        self.session_factory = session_factory or open_vendor_session
        self.evaluator_factory = evaluator_factory or self.build_evaluators
        self.results = ResultsRecord()
        self.evidence = evidence if evidence is not None else EvidenceLog()
        self._active_runs = 0  # Запуски в процессе (перекрытие допускается)

    @property
    def is_running(self) -> bool:
        return self._active_runs > 0

    def build_evaluators(self, credentials: Credentials, session: VendorSession) -> List[BaseEvaluator]:
        """Три проверки в фиксированном порядке: MFA, RLS, PITR."""
        timeout = self.config.check_timeout_seconds
        return [
            MFAEvaluator(session.data_plane, timeout_seconds=timeout),
            RLSEvaluator(session.data_plane, timeout_seconds=timeout),
            PITREvaluator(
                credentials,
                session.management,
                vendor_domain=self.config.vendor_domain,
                timeout_seconds=timeout,
            ),
        ]

    async def run_all(self, credentials: Credentials) -> RunOutcome:
        """
        Запустить все проверки.

        Args:
            credentials: Учётные данные проекта

        Returns:
            RunOutcome с новым ResultsRecord и тремя новыми записями журнала

        Raises:
            CredentialsError: учётные данные некорректны, запуск не выполняется
        """
        credentials.validate(
            vendor_domain=self.config.vendor_domain,
            data_plane_key_prefix=self.config.data_plane_key_prefix,
            management_key_prefix=self.config.management_key_prefix,
        )

        self._active_runs += 1
        try:
            # Сессия принадлежит только этому запуску
            session = self.session_factory(credentials, self.config)
            try:
                evaluators = self.evaluator_factory(credentials, session)
                check_results = await self.run_evaluators_parallel(evaluators)
            finally:
                await self.close_session(session)
        finally:
            self._active_runs -= 1

        timestamp = utc_timestamp()
        results = ResultsRecord(**{
            evaluator.key: result for evaluator, result in zip(evaluators, check_results)
        })
        new_entries = [
            EvidenceEntry(
                timestamp=timestamp,
                check=name.upper(),
                status=result.status.value,
                details=result.message or "",
            )
            for name, result in results.items()
        ]

        self.results = results
        self.evidence.extend(new_entries)
        metrics.runs_total.inc()

        summary = ", ".join(f"{name}={result.status.value}" for name, result in results.items())
        logger.info(f"Run completed at {timestamp}: {summary}")

        return RunOutcome(results=results, new_entries=new_entries)

    async def run_evaluators_parallel(self, evaluators: List[BaseEvaluator]) -> List[CheckResult]:
        """
        Запустить проверки параллельно и дождаться всех.

        Returns:
            Результаты в порядке evaluators
        """
        logger.info(f"Running {len(evaluators)} checks in parallel...")

        # gather с return_exceptions: упавшая проверка не отменяет остальные
        results = await asyncio.gather(
            *(evaluator.run() for evaluator in evaluators),
            return_exceptions=True,
        )

        processed_results = []
        for evaluator, result in zip(evaluators, results):
            if isinstance(result, BaseException):
                logger.error(f"Check {evaluator.name} failed: {result}")
                metrics.check_results.labels(check=evaluator.key, status=CheckStatus.ERROR.value).inc()
                processed_results.append(CheckResult(
                    status=CheckStatus.ERROR,
                    message=f"{evaluator.name} Check Error: {result}",
                    details={"exception": str(result), "exception_type": type(result).__name__},
                ))
            else:
                processed_results.append(result)

        return processed_results

    @staticmethod
    async def close_session(session: Any):
        """Закрыть сессию запуска (aclose() или close())."""
        try:
            if hasattr(session, "aclose"):
                await session.aclose()
            elif hasattr(session, "close"):
                session.close()
        except Exception as e:
            logger.warning(f"Error closing vendor session {session}: {e}")

"""
Base class for check evaluators.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from .models import CheckResult, CheckStatus
from .. import metrics


class BaseEvaluator(ABC):
    """
    Базовый класс для всех проверок.

    Предоставляет:
    - Шаблон метода run()
    - Error handling: ни одно исключение не выходит из run()
    - Опциональный timeout
    - Логирование и метрики
    """

    # Ключ проверки в ResultsRecord и метка в журнале
    key: str = ""
    title: str = ""

    def __init__(self, timeout_seconds: Optional[float] = None):
        """
        Args:
            timeout_seconds: Таймаут выполнения (None = без дедлайна)
        """
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger(f"compliance.{self.key or type(self).__name__}")

    @property
    def name(self) -> str:
        return self.title or self.key.upper()

    async def run(self) -> CheckResult:
        """
        Запустить проверку с error handling и timeout.

        Returns:
            CheckResult; неожиданные исключения превращаются в status=error
        """
        self.logger.info(f"Starting {self.name} check...")
        start_time = time.perf_counter()

        try:
            result = await asyncio.wait_for(self._evaluate(), timeout=self.timeout_seconds)

        except asyncio.TimeoutError:
            self.logger.error(f"{self.name} check timed out after {self.timeout_seconds}s")
            result = self.error_result(
                f"{self.name} check timed out after {self.timeout_seconds} seconds",
                {"timeout_seconds": self.timeout_seconds, "timed_out": True},
            )

        except Exception as e:
            self.logger.error(f"{self.name} check failed with exception: {e}", exc_info=True)
            result = self.error_result(
                f"Failed to check {self.name} status: {e}",
                {"exception": str(e), "exception_type": type(e).__name__},
            )

        duration = time.perf_counter() - start_time
        metrics.check_duration.labels(check=self.key).observe(duration)
        metrics.check_results.labels(check=self.key, status=result.status.value).inc()

        self.logger.info(
            f"Completed {self.name} check: "
            f"status={result.status.value}, "
            f"duration={duration * 1000:.2f}ms"
        )
        return result

    @abstractmethod
    async def _evaluate(self) -> CheckResult:
        """
        Выполнить проверку (должен быть реализован в подклассах).

        Returns:
            Нормализованный результат
        """
        pass

    def error_result(self, message: str, details: Any = None) -> CheckResult:
        """Не удалось определить результат."""
        return CheckResult(status=CheckStatus.ERROR, message=message, details=details)

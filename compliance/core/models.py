"""
Core data models for the compliance checker.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class CheckStatus(Enum):
    """Статус проверки."""
    PASS = "pass"        # Проверка выполнена, нарушений нет
    FAIL = "fail"        # Проверка выполнена, найдено нарушение
    PENDING = "pending"  # Проверка ещё не запускалась
    ERROR = "error"      # Не удалось определить результат


class CredentialsError(ValueError):
    """Некорректные или неполные учётные данные. Блокирует запуск проверок."""
    pass


def extract_project_id(endpoint_url: str, vendor_domain: str = "supabase.co") -> Optional[str]:
    """
    Извлечь project id из URL вида https://<label>.supabase.co.

    Returns:
        Метка поддомена или None, если URL не подходит
    """
    # Хост должен заканчиваться доменом: abc.supabase.co.evil.com не подходит
    pattern = r"https://([^./]+)\." + re.escape(vendor_domain) + r"(?:[:/?#]|$)"
    match = re.match(pattern, endpoint_url or "")
    return match.group(1) if match else None


@dataclass(frozen=True)
class Credentials:
    """Учётные данные проекта. Не меняются в течение запуска."""

    endpoint_url: str
    data_plane_key: str      # service role key
    management_key: str      # Management API access token
    project_id: Optional[str] = None

    def resolve_project_id(self, vendor_domain: str = "supabase.co") -> str:
        """
        Получить project id: явный или выведенный из endpoint_url.

        Raises:
            CredentialsError: если project id не задан и не выводится из URL
        """
        if self.project_id:
            return self.project_id

        project_id = extract_project_id(self.endpoint_url, vendor_domain)
        if not project_id:
            raise CredentialsError(
                f"Cannot derive project id from URL '{self.endpoint_url}'. "
                f"Expected https://<project>.{vendor_domain}"
            )
        return project_id

    def validate(
        self,
        vendor_domain: str = "supabase.co",
        data_plane_key_prefix: str = "eyJ",
        management_key_prefix: str = "sbp_",
    ) -> None:
        """
        Проверить учётные данные до любых сетевых вызовов.

        Raises:
            CredentialsError: с указанием некорректного поля
        """
        if not self.endpoint_url or vendor_domain not in self.endpoint_url:
            raise CredentialsError(
                f"Invalid Project URL. Must be a Supabase URL (e.g., https://project.{vendor_domain})"
            )
        self.resolve_project_id(vendor_domain)

        if not (self.data_plane_key or "").startswith(data_plane_key_prefix):
            raise CredentialsError(f'Invalid Service Role Key. Must start with "{data_plane_key_prefix}"')
        if not (self.management_key or "").startswith(management_key_prefix):
            raise CredentialsError(f'Invalid Management API Key. Must start with "{management_key_prefix}"')

    def __repr__(self) -> str:
        # Ключи не попадают в логи
        return f"Credentials(endpoint_url={self.endpoint_url!r}, project_id={self.project_id!r})"


@dataclass
class CheckResult:
    """Нормализованный результат одной проверки."""

    status: CheckStatus
    message: str = ""
    details: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
        }

    @classmethod
    def pending(cls) -> "CheckResult":
        return cls(status=CheckStatus.PENDING)


# Порядок проверок фиксирован: MFA, RLS, PITR
CHECK_NAMES: Tuple[str, ...] = ("mfa", "rls", "pitr")

CHECK_LABELS: Dict[str, str] = {
    "mfa": "Multi-Factor Authentication (MFA)",
    "rls": "Row Level Security (RLS)",
    "pitr": "Point in Time Recovery (PITR)",
}


@dataclass
class ResultsRecord:
    """Результаты всех трёх проверок. Заменяется целиком при каждом запуске."""

    mfa: CheckResult = field(default_factory=CheckResult.pending)
    rls: CheckResult = field(default_factory=CheckResult.pending)
    pitr: CheckResult = field(default_factory=CheckResult.pending)

    def items(self) -> List[Tuple[str, CheckResult]]:
        return [(name, getattr(self, name)) for name in CHECK_NAMES]

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {name: result.to_dict() for name, result in self.items()}


@dataclass(frozen=True)
class EvidenceEntry:
    """Запись журнала доказательств. Создаётся один раз, не изменяется."""

    timestamp: str  # ISO-8601
    check: str      # MFA / RLS / PITR
    status: str
    details: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "timestamp": self.timestamp,
            "check": self.check,
            "status": self.status,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvidenceEntry":
        return cls(
            timestamp=str(data["timestamp"]),
            check=str(data["check"]),
            status=str(data["status"]),
            details=str(data.get("details", "")),
        )


@dataclass
class RunOutcome:
    """Итог одного запуска проверок."""

    results: ResultsRecord
    new_entries: List[EvidenceEntry]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": self.results.to_dict(),
            "new_entries": [entry.to_dict() for entry in self.new_entries],
        }


# ═══════════════════════════════════════════════════════
# Gateway results
# ═══════════════════════════════════════════════════════

@dataclass(frozen=True)
class Ok:
    """Успешный ответ: разобранный JSON."""
    data: Any


@dataclass(frozen=True)
class FetchFailure:
    """
    Неуспешный вызов.

    status_code is None для транспортных ошибок (DNS, timeout, reset).
    """
    status_code: Optional[int]
    body: str = ""
    reason: str = ""

    def describe(self) -> str:
        if self.status_code is None:
            return f"transport error: {self.reason}"
        text = f"{self.status_code} {self.reason}".strip()
        return f"{text}. Details: {self.body}" if self.body else text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "body": self.body,
            "reason": self.reason,
        }


GatewayResult = Union[Ok, FetchFailure]

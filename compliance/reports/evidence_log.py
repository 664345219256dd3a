"""
Evidence log for compliance runs.

Append-only журнал записей (по три на запуск) с экспортом:
- JSON: массив записей, pretty-printed
- CSV: заголовок Timestamp,Check,Status,Details, все поля в кавычках
"""

import csv
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Tuple

from ..core.models import EvidenceEntry
from .. import metrics

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Timestamp", "Check", "Status", "Details"]
EXPORT_FORMATS = ("json", "csv")


class EvidenceLog:
    """Журнал доказательств. Живёт в течение сессии, очищается только явно."""

    def __init__(self, entries: Iterable[EvidenceEntry] = ()):
        self._entries: List[EvidenceEntry] = list(entries)
        metrics.evidence_entries.set(len(self._entries))

    @property
    def entries(self) -> Tuple[EvidenceEntry, ...]:
        """Записи в порядке добавления (только чтение)."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: EvidenceEntry) -> None:
        self._entries.append(entry)
        metrics.evidence_entries.set(len(self._entries))

    def extend(self, entries: Iterable[EvidenceEntry]) -> None:
        for entry in entries:
            self.append(entry)

    def clear(self, confirm: bool = False) -> int:
        """
        Очистить журнал. Необратимо.

        Args:
            confirm: Явное подтверждение пользователя

        Returns:
            Количество удалённых записей

        Raises:
            ValueError: если подтверждения нет
        """
        if not confirm:
            raise ValueError("Clearing the evidence log requires explicit confirmation")

        removed = len(self._entries)
        self._entries.clear()
        metrics.evidence_entries.set(0)
        logger.info(f"Evidence log cleared ({removed} entries removed)")
        return removed

    # ═══════════════════════════════════════════════════════
    # Export
    # ═══════════════════════════════════════════════════════

    def to_json(self) -> str:
        return json.dumps([entry.to_dict() for entry in self._entries], indent=2, ensure_ascii=False)

    @staticmethod
    def from_json(text: str) -> List[EvidenceEntry]:
        return [EvidenceEntry.from_dict(item) for item in json.loads(text)]

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        # Заголовок без кавычек, как в выгрузке дашборда
        buffer.write(",".join(CSV_HEADERS) + "\n")
        for entry in self._entries:
            writer.writerow([entry.timestamp, entry.check, entry.status, entry.details])
        return buffer.getvalue()

    def export(self, fmt: str) -> str:
        if fmt == "json":
            return self.to_json()
        if fmt == "csv":
            return self.to_csv()
        raise ValueError(f"Unknown export format: {fmt}. Use one of: {', '.join(EXPORT_FORMATS)}")

    def write_export(self, directory: Path, fmt: str = "json") -> Path:
        """
        Сохранить выгрузку в файл compliance-evidence-<timestamp>.<fmt>.

        Returns:
            Путь к файлу
        """
        content = self.export(fmt)

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp_str = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        filepath = directory / f"compliance-evidence-{timestamp_str}.{fmt}"

        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        logger.info(f"Exported {len(self._entries)} evidence entries to {filepath}")
        return filepath

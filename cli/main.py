"""
CLI интерфейс для Supabase Compliance Checker.

Использует Rich для красивого вывода. Работает через backend API.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from compliance.core.models import CHECK_LABELS, EvidenceEntry
from compliance.reports.evidence_log import EXPORT_FORMATS, EvidenceLog

load_dotenv()

app = typer.Typer(
    name="compliance",
    help="Supabase Compliance Checker: MFA, RLS и PITR проверки"
)
console = Console()

BACKEND_URL = os.getenv("COMPLIANCE_BACKEND_URL", "http://localhost:8000")

STATUS_STYLES = {
    "pass": "green",
    "fail": "red",
    "error": "yellow",
    "pending": "dim",
}


def check_backend() -> bool:
    """Проверить доступность backend."""
    try:
        r = httpx.get(f"{BACKEND_URL}/health", timeout=5)
        return r.status_code == 200
    except httpx.HTTPError:
        return False


def require_backend():
    if not check_backend():
        console.print(f"[red]❌ Backend недоступен: {BACKEND_URL}. Запустите: python -m backend.main[/]")
        raise typer.Exit(1)


def error_detail(response: httpx.Response) -> str:
    """detail из JSON-ответа backend, иначе сырой текст."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    return response.text


def _status(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/]"


def render_results(results: Dict[str, Any]):
    """Таблица результатов по трём проверкам."""
    table = Table(title="🛡️  Compliance Status")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Message")

    for key, label in CHECK_LABELS.items():
        result = results.get(key, {})
        table.add_row(label, _status(result.get("status", "pending")), result.get("message") or "")

    console.print(table)

    for key, result in results.items():
        if result.get("status") == "error" and result.get("details"):
            console.print(Panel(
                str(result["details"]),
                title=f"Technical Details: {CHECK_LABELS.get(key, key)}",
                border_style="yellow",
            ))


def render_evidence(entries: List[Dict[str, Any]]):
    table = Table(title=f"📋 Evidence Log ({len(entries)})")
    table.add_column("Timestamp", style="dim")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")

    for entry in entries:
        table.add_row(entry["timestamp"], entry["check"], _status(entry["status"]), entry["details"])

    console.print(table)


@app.command()
def run(
    url: str = typer.Option(..., envvar="SUPABASE_URL", help="https://<project>.supabase.co"),
    service_role_key: str = typer.Option(..., envvar="SUPABASE_SERVICE_ROLE_KEY", help="eyJ..."),
    management_key: str = typer.Option(..., envvar="SUPABASE_MANAGEMENT_API_KEY", help="sbp_..."),
    project_id: Optional[str] = typer.Option(None, envvar="SUPABASE_PROJECT_REF"),
):
    """🔍 Запустить проверки MFA, RLS и PITR."""
    require_backend()

    payload = {
        "endpoint_url": url,
        "data_plane_key": service_role_key,
        "management_key": management_key,
        "project_id": project_id,
    }

    try:
        with console.status("[bold blue]Running Checks...[/]"):
            response = httpx.post(f"{BACKEND_URL}/checks/run", json=payload, timeout=300)
    except httpx.HTTPError as e:
        console.print(f"[red]Failed to run checks: {e}[/]")
        raise typer.Exit(1)

    if response.status_code != 200:
        console.print(f"[red]❌ {error_detail(response)}[/]")
        raise typer.Exit(1)

    data = response.json()
    render_results(data["results"])
    console.print(f"[dim]{len(data['new_entries'])} entries added to the evidence log[/]")


@app.command()
def results():
    """📊 Показать результаты последнего запуска."""
    require_backend()

    response = httpx.get(f"{BACKEND_URL}/checks/results")
    render_results(response.json())


@app.command()
def evidence():
    """📋 Показать журнал доказательств."""
    require_backend()

    response = httpx.get(f"{BACKEND_URL}/evidence")
    if response.status_code != 200:
        console.print(f"[red]❌ {error_detail(response)}[/]")
        raise typer.Exit(1)

    data = response.json()
    if not data["entries"]:
        console.print("[dim]Evidence log is empty[/]")
        return
    render_evidence(data["entries"])


@app.command()
def export(
    format: str = typer.Option("json", "--format", "-f", help="json или csv"),
    output_dir: Path = typer.Option(Path("compliance_evidence"), "--output-dir", "-o"),
):
    """💾 Сохранить журнал в файл JSON или CSV."""
    if format not in EXPORT_FORMATS:
        console.print(f"[red]Unknown format: {format}. Use json or csv[/]")
        raise typer.Exit(1)

    require_backend()

    data = httpx.get(f"{BACKEND_URL}/evidence").json()
    log = EvidenceLog(EvidenceEntry.from_dict(item) for item in data["entries"])
    filepath = log.write_export(output_dir, format)

    console.print(f"✅ Exported {len(log)} entries to {filepath}")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Не спрашивать подтверждение"),
):
    """🗑️  Очистить журнал доказательств."""
    require_backend()

    if not yes and not typer.confirm("Are you sure you want to clear all evidence logs?"):
        console.print("[yellow]Cancelled[/]")
        raise typer.Exit(0)

    response = httpx.delete(f"{BACKEND_URL}/evidence", params={"confirm": "true"})
    data = response.json()
    console.print(f"✅ Removed {data.get('removed', 0)} entries")


@app.command()
def health():
    """🏥 Проверить статус системы."""

    try:
        response = httpx.get(f"{BACKEND_URL}/health", timeout=5)
        data = response.json()

        status = "🟢" if data.get("status") == "ok" else "🔴"
        console.print(f"{status} Backend: {data.get('status')}")
        console.print(f"   Version: {data.get('version', 'N/A')}")
        console.print(f"   Run in progress: {data.get('running', False)}")

    except httpx.HTTPError as e:
        console.print(f"🔴 Backend недоступен: {e}")


if __name__ == "__main__":
    app()

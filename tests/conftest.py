"""
Pytest configuration and fixtures.

Гарантирует, что пакеты `compliance`, `backend` и `cli` доступны для импортов
в тестах, даже если pytest запускается без установки пакета.

Использование:
    pytest tests/ -v
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Корень проекта
sys.path.insert(0, str(Path(__file__).parent.parent))

from compliance.core.gateway import VendorSession
from compliance.core.models import Credentials, FetchFailure, GatewayResult, Ok


PROJECT_ID = "abcdefghijklmnop"


# ═══════════════════════════════════════════════════════
# MOCK SESSIONS
# ═══════════════════════════════════════════════════════

class FakeDataPlane:
    """Data plane без сети: ответы задаются в конструкторе."""

    def __init__(
        self,
        users: Optional[List[Dict[str, Any]]] = None,
        tables: Any = None,
        users_response: Optional[GatewayResult] = None,
        tables_response: Optional[GatewayResult] = None,
    ):
        self.users_response = users_response or Ok({"users": users or []})
        self.tables_response = tables_response or Ok(tables if tables is not None else [])
        self.rpc_calls: List[tuple] = []
        self.list_users_calls = 0
        self.closed = False

    async def list_users(self) -> GatewayResult:
        self.list_users_calls += 1
        return self.users_response

    async def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> GatewayResult:
        self.rpc_calls.append((name, params))
        if name == "get_tables_info":
            return self.tables_response
        return Ok(None)

    async def aclose(self):
        self.closed = True


class FakeManagement:
    """Management API без сети: ответы по пути, иначе 404."""

    def __init__(self, responses: Optional[Dict[str, GatewayResult]] = None):
        self.responses = responses or {}
        self.calls: List[tuple] = []
        self.closed = False

    async def call(self, endpoint_path: str, method: str = "GET", json: Any = None) -> GatewayResult:
        self.calls.append((method, endpoint_path, json))
        return self.responses.get(
            endpoint_path,
            FetchFailure(status_code=404, body='{"message":"Not Found"}', reason="Not Found"),
        )

    def called_paths(self) -> List[str]:
        return [path for _, path, _ in self.calls]

    async def aclose(self):
        self.closed = True


def subscription_path(project_id: str = PROJECT_ID) -> str:
    return f"projects/{project_id}/subscription"


def backups_path(project_id: str = PROJECT_ID) -> str:
    return f"projects/{project_id}/database/backups/info"


# ═══════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def credentials() -> Credentials:
    """Корректные учётные данные тестового проекта."""
    return Credentials(
        endpoint_url=f"https://{PROJECT_ID}.supabase.co",
        data_plane_key="eyJhbGciOiJIUzI1NiJ9.test",
        management_key="sbp_0123456789abcdef",
    )


@pytest.fixture
def compliant_session() -> VendorSession:
    """Проект, проходящий все три проверки."""
    data_plane = FakeDataPlane(
        users=[
            {"email": "a@example.com", "factors": [{"id": "f1"}]},
            {"email": "b@example.com", "factors": [{"id": "f2"}, {"id": "f3"}]},
        ],
        tables=[
            {"name": "profiles", "schema": "public", "rls_enabled": True},
        ],
    )
    management = FakeManagement({
        subscription_path(): Ok({"tier": "pro"}),
        backups_path(): Ok({"pitr_enabled": True, "region": "eu-central-1"}),
    })
    return VendorSession(data_plane=data_plane, management=management)

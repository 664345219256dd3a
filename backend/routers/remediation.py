"""Remediation router."""

import logging

from fastapi import APIRouter, HTTPException, Depends
from compliance import remediation
from compliance.core.models import Credentials, CredentialsError
from compliance.orchestrator import RunController
from compliance.remediation import RemediationError
from backend.models import CredentialsRequest, RemediationResponse
from backend.routers.checks import get_controller_from_main

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/remediation", tags=["remediation"])


def _validated(request: CredentialsRequest, controller: RunController) -> Credentials:
    credentials = request.to_credentials()
    try:
        credentials.validate(
            vendor_domain=controller.config.vendor_domain,
            data_plane_key_prefix=controller.config.data_plane_key_prefix,
            management_key_prefix=controller.config.management_key_prefix,
        )
    except CredentialsError as e:
        raise HTTPException(422, str(e))
    return credentials


async def _perform(controller: RunController, credentials: Credentials, action) -> None:
    """Выполнить действие в отдельной сессии и закрыть её."""
    session = controller.session_factory(credentials, controller.config)
    try:
        await action(session)
    except RemediationError as e:
        raise HTTPException(502, str(e))
    finally:
        await session.aclose()


@router.post("/mfa", response_model=RemediationResponse)
async def enable_mfa(
    request: CredentialsRequest,
    controller: RunController = Depends(get_controller_from_main),
):
    """Включить обязательный MFA."""
    credentials = _validated(request, controller)
    project_id = credentials.resolve_project_id(controller.config.vendor_domain)
    await _perform(controller, credentials, lambda s: remediation.enable_mfa(s.management, project_id))
    return {"status": "ok", "message": f"MFA enforcement enabled for project {project_id}"}


@router.post("/rls/{table_name}", response_model=RemediationResponse)
async def enable_rls(
    table_name: str,
    request: CredentialsRequest,
    controller: RunController = Depends(get_controller_from_main),
):
    """Включить RLS на таблице."""
    credentials = _validated(request, controller)
    await _perform(controller, credentials, lambda s: remediation.enable_rls(s.data_plane, table_name))
    return {"status": "ok", "message": f"RLS enabled on table {table_name}"}


@router.post("/pitr", response_model=RemediationResponse)
async def enable_pitr(
    request: CredentialsRequest,
    controller: RunController = Depends(get_controller_from_main),
):
    """Включить Point in Time Recovery."""
    credentials = _validated(request, controller)
    project_id = credentials.resolve_project_id(controller.config.vendor_domain)
    await _perform(controller, credentials, lambda s: remediation.enable_pitr(s.management, project_id))
    return {"status": "ok", "message": f"Point in Time Recovery enabled for project {project_id}"}

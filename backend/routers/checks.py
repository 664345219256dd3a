"""Checks router."""

import logging

from fastapi import APIRouter, HTTPException, Depends
from compliance.core.models import CredentialsError
from compliance.orchestrator import RunController
from backend.models import CredentialsRequest, ResultsResponse, RunResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checks", tags=["checks"])


def get_controller_from_main() -> RunController:
    """Получить контроллер из main модуля."""
    from backend.main import controller
    if controller is None:
        raise HTTPException(503, "Controller not initialized")
    return controller


@router.post("/run", response_model=RunResponse)
async def run_checks(
    request: CredentialsRequest,
    controller: RunController = Depends(get_controller_from_main),
):
    """
    Запустить MFA, RLS и PITR проверки.

    Ошибки:
    - 409: предыдущий запуск ещё не завершён
    - 422: некорректные учётные данные (проверки не запускаются)
    """
    if controller.is_running:
        raise HTTPException(409, "A compliance run is already in progress")

    try:
        outcome = await controller.run_all(request.to_credentials())
    except CredentialsError as e:
        logger.warning(f"Run rejected: {e}")
        raise HTTPException(422, str(e))

    return outcome.to_dict()


@router.get("/results", response_model=ResultsResponse)
async def get_results(controller: RunController = Depends(get_controller_from_main)):
    """Результаты последнего запуска (pending до первого запуска)."""
    return controller.results.to_dict()

"""
FastAPI backend для Supabase Compliance Checker.

Единственный event loop: все async операции здесь.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from backend.config import get_settings
from backend.routers import checks, evidence, health, remediation
from compliance import __version__
from compliance.orchestrator import RunController

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Контроллер запусков (владеет результатами и журналом).
# Сессии к Supabase создаются заново на каждый запуск.
controller: Optional[RunController] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: startup и shutdown."""
    global controller

    # === STARTUP ===
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    controller = RunController(settings.to_compliance_config())

    logger.info(f"🚀 Compliance checker {__version__} started")
    logger.info(f"📡 Management API: {settings.management_api_base}")

    yield

    # === SHUTDOWN ===
    logger.info(f"Controller stopped ({len(controller.evidence) if controller else 0} evidence entries discarded)")


app = FastAPI(
    title="Supabase Compliance Checker API",
    version=__version__,
    description="MFA, RLS and PITR compliance checks with an exportable evidence log",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Подключение роутеров ====================

app.include_router(health.router)
app.include_router(checks.router)
app.include_router(evidence.router)
app.include_router(remediation.router)

app.mount("/metrics", make_asgi_app())


# ==================== Run ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

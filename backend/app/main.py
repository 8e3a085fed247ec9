"""
Point d'entrée principal de l'API TutorApp.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401 (enregistre tous les modèles dans Base.metadata avant les routers)
from app.database import Base, engine
from app.exceptions import AppError
from app.routers import (
    accounts,
    courses,
    debug,
    enrollments,
    homework,
    messages,
    notes,
    notifications,
    payments,
    sessions,
    teaching_materials,
)
from app.scheduler import start_scheduler, stop_scheduler
from app.services.token_service import get_token_signer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Cycle de vie de l'application : crée les tables manquantes, construit le
    signataire de jetons (refus de démarrer sans SECRET_KEY en production),
    puis démarre et arrête le scheduler APScheduler.
    """
    Base.metadata.create_all(bind=engine)
    get_token_signer()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="TutorApp API",
    description="API de gestion de cours particuliers : comptes, cours, séances, devoirs, messagerie",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(accounts.router)
app.include_router(courses.router)
app.include_router(enrollments.router)
app.include_router(sessions.router)
app.include_router(homework.router)
app.include_router(messages.router)
app.include_router(notes.router)
app.include_router(notifications.router)
app.include_router(payments.router)
app.include_router(teaching_materials.router)
app.include_router(debug.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Erreurs métier : statut de la classe d'erreur, message lisible et code stable."""
    if exc.status_code >= 500:
        logger.error("Incohérence détectée (%s) : %s", exc.code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue.", "code": "INTERNAL_ERROR"},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "TutorApp API", "version": "0.1.0"}

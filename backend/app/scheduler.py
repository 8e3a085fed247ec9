"""
Planificateur APScheduler pour la suppression des comptes désactivés.

Le job s'exécute toutes les CLEANUP_INTERVAL_HOURS heures (24 par défaut)
et supprime les comptes désactivés depuis plus de DEACTIVATION_RETENTION_DAYS jours.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _cleanup_deactivated_accounts() -> None:
    """
    Tâche planifiée : un cycle de nettoyage avec sa propre session.
    Import local pour éviter les imports circulaires.
    """
    from app.services.cleanup_service import run_cleanup

    db = SessionLocal()
    try:
        report = run_cleanup(db)
        logger.info(
            "Nettoyage terminé : %d supprimé(s), %d échec(s)",
            len(report.deleted),
            len(report.failed),
        )
    except Exception as exc:
        logger.error("Erreur lors du nettoyage des comptes désactivés : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    if not settings.CLEANUP_ENABLED:
        logger.info("Nettoyage automatique désactivé (CLEANUP_ENABLED=false).")
        return
    scheduler.add_job(
        _cleanup_deactivated_accounts,
        trigger="interval",
        hours=settings.CLEANUP_INTERVAL_HOURS,
        id="deactivated_accounts_cleanup",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré, nettoyage des comptes toutes les %d heures.", settings.CLEANUP_INTERVAL_HOURS)


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")

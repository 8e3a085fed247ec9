"""
Router de diagnostic : vérifie qu'un jeton est accepté, sans accès à la base.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_token_subject

router = APIRouter(prefix="/api/v1/debug", tags=["Diagnostic"])


@router.get("/auth", summary="Vérifier le jeton")
def check_auth(username: str = Depends(get_token_subject)):
    return {"authenticated": True, "username": username}

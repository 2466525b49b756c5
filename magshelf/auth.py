# magshelf/auth.py
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request

from .models import VerifyRequest, VerifyResponse

logger = logging.getLogger(__name__)

ADMIN_HEADER = "x-admin-password"

router = APIRouter(prefix="/api/auth", tags=["auth"])


def check_password(candidate: Optional[str], expected: str) -> bool:
    if candidate is None:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def require_admin(
    request: Request,
    x_admin_password: Optional[str] = Header(default=None),
) -> None:
    """Dependency guarding every mutating route."""
    if not check_password(x_admin_password, request.app.state.settings.admin_password):
        logger.warning("Rejected %s %s: bad admin password", request.method, request.url.path)
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/verify", response_model=VerifyResponse)
def verify(req: VerifyRequest, request: Request):
    if not check_password(req.password, request.app.state.settings.admin_password):
        raise HTTPException(status_code=401, detail="Invalid password")
    return VerifyResponse(success=True)

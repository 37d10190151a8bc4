from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from pay_engine.config import settings
from pay_engine.database import get_db
from pay_engine.services.engine import build_engine, build_fair_work_client


def get_pay_engine(db: Session = Depends(get_db)):
    """One engine per request, bound to the request's session."""
    client = build_fair_work_client(settings)
    try:
        yield build_engine(db, settings, client)
    finally:
        if client is not None:
            client.close()


async def require_admin(
    x_admin_secret: str = Header(..., alias="X-Admin-Secret"),
):
    if not settings.admin_secret or x_admin_secret != settings.admin_secret:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing admin secret.",
        )

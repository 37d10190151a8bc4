from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pay_engine.database import get_db
from pay_engine.dependencies import require_admin
from pay_engine.models.schemas import CatalogSyncPayload, CatalogSyncResult
from pay_engine.services.catalog_sync import apply_catalog_payload

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/catalog/sync", response_model=CatalogSyncResult, dependencies=[Depends(require_admin)])
async def sync_catalog(payload: CatalogSyncPayload, db: Session = Depends(get_db)):
    """Apply one batch from the catalog sync process. All or nothing."""
    return apply_catalog_payload(db, payload)

from fastapi import APIRouter
from sqlalchemy import text

from harmony.core.deps import SessionDep

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(db: SessionDep):
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}

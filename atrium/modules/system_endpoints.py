from fastapi import APIRouter, Depends, HTTPException
from atrium.modules.database import database, ping
from atrium.modules.migration_runner import run_migrations
from atrium.modules.users.auth.middleware import require_super_admin

router = APIRouter(prefix="/api/system", tags=["System"])


@router.get("/health")
async def health():
    return {"status": "online", "database": await ping()}


@router.post("/migrate", dependencies=[Depends(require_super_admin)])
async def trigger_migrations():
    """
    Manually checks and runs pending database migrations.
    Useful for deployment hooks.
    """
    try:
        applied = await run_migrations(database)
        return {"status": "success", "message": "Database migrations applied.", "applied": applied}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

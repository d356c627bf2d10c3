from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Request
from videohub.database import Database, get_database

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request, db: Database = Depends(get_database)):
    """Liveness plus datastore connectivity. Unauthenticated."""
    backend = getattr(request.app.state, "storage_backend", None)
    return {
        "status": "OK",
        "database": "connected" if db.ping() else "disconnected",
        "storage": backend.describe() if backend is not None else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

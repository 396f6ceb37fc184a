from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from grocery.data.database import get_db, ping

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        ping(db)
    except OperationalError:
        raise HTTPException(status_code=503, detail="database unavailable")
    return {"status": "ok"}

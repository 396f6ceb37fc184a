# grocery/api/routers/profile.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from grocery.api.deps import get_user_db
from grocery.api.errors import http_error
from grocery.domain.errors import StoreError
from grocery.domain.schemas import ProfileOut, ProfileUpdateIn
from grocery.security.identity import current_identity
from grocery.services.profile_service import ProfileService
from grocery.utils.retry import storage_retry

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
def get_profile(db: Session = Depends(get_user_db)):
    svc = ProfileService(db)
    try:
        profile = svc.get_profile()
        if profile is None:
            # missing row: provisioning is idempotent
            profile = storage_retry()(svc.ensure_profile)(current_identity(db).user_id)
    except StoreError as e:
        raise http_error(e)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.patch("", response_model=ProfileOut)
def update_profile(payload: ProfileUpdateIn, db: Session = Depends(get_user_db)):
    try:
        profile = ProfileService(db).update_profile(payload.model_dump(exclude_unset=True, mode="json"))
    except StoreError as e:
        raise http_error(e)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app import models, schemas
from app.api import deps
from app.core.exceptions import (
    BadShareToken,
    ShareExpired,
    ShareNotAuthorized,
    ShareNotFound,
    SharePersistenceError,
)
from app.core.share_cipher import ShareCipher
from app.services import share_service

router = APIRouter()
logger = logging.getLogger(__name__)

# Expired and unknown links look the same from outside
NOT_FOUND_DETAIL = "Share link not found or expired"

@router.post("/create", response_model=schemas.ShareLinkOut, status_code=201)
def create_share(
    *,
    db: Session = Depends(deps.get_db),
    cipher: ShareCipher = Depends(deps.get_cipher),
    current_user: models.User = Depends(deps.get_current_user),
    share_in: schemas.ShareCreate,
) -> Any:
    """
    Create (or reuse) the public link for one of my records.
    """
    try:
        return share_service.create_or_reuse_share_link(
            db, record_id=share_in.record_id, sharer_id=current_user.id, cipher=cipher
        )
    except ShareNotAuthorized as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except ShareNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except SharePersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

@router.get("/record/{public_code}", response_model=schemas.PublicRecord)
def get_public_record(
    *,
    db: Session = Depends(deps.get_db),
    public_code: str,
) -> Any:
    """
    Public, unauthenticated view of a shared record.
    """
    try:
        return share_service.resolve_public_record(db, public_code=public_code)
    except ShareExpired:
        logger.info("Share link %s expired", public_code)
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    except ShareNotFound:
        logger.info("Share link %s not found", public_code)
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    except SharePersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

@router.post("/track-view")
def track_view(
    *,
    db: Session = Depends(deps.get_db),
    cipher: ShareCipher = Depends(deps.get_cipher),
    track_in: schemas.TrackView,
    request: Request,
) -> Any:
    """
    Record an anonymous view. Always succeeds from the client's point of view.
    """
    share_service.track_view(
        db,
        public_code=track_in.public_code,
        token=track_in.token,
        session_id=track_in.session_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent", ""),
        cipher=cipher,
    )
    return {"success": True}

@router.post("/connect-friend", response_model=schemas.ConnectFriendResult)
def connect_friend(
    *,
    db: Session = Depends(deps.get_db),
    cipher: ShareCipher = Depends(deps.get_cipher),
    current_user: models.User = Depends(deps.get_current_user),
    connect_in: schemas.ConnectFriend,
) -> Any:
    """
    Befriend the sharer whose link brought me here (after sign-up/login).
    """
    try:
        return share_service.connect_friend(
            db,
            token=connect_in.token,
            recipient_id=current_user.id,
            cipher=cipher,
            session_id=connect_in.session_id,
        )
    except BadShareToken:
        raise HTTPException(status_code=400, detail="Invalid share reference")
    except SharePersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

@router.get("/my-stats", response_model=List[schemas.ShareStat])
def read_my_share_stats(
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
) -> Any:
    """
    Views and conversions of my active links.
    """
    return share_service.get_share_stats(db, sharer_id=current_user.id)

@router.delete("/{public_code}", status_code=204)
def deactivate_share(
    *,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
    public_code: str,
) -> Response:
    """
    Turn off one of my links. The row is kept.
    """
    try:
        share_service.deactivate_share_link(db, public_code=public_code, sharer_id=current_user.id)
    except ShareNotFound:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return Response(status_code=204)

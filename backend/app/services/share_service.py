"""Service layer for public share links, view tracking and referral friend links."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud, schemas
from app.core.config import settings
from app.core.exceptions import (
    BadShareToken,
    ShareExpired,
    ShareNotAuthorized,
    ShareNotFound,
    SharePersistenceError,
)
from app.core.metrics import record_track_failure
from app.core.share_cipher import ShareCipher
from app.models.friendship import FRIENDSHIP_ACCEPTED, FRIENDSHIP_PENDING
from app.models.record import MealRecord
from app.models.share import ShareLink

logger = logging.getLogger(__name__)

# Attempts at drawing a public code that is not taken yet
MAX_CODE_ATTEMPTS = 3

MSG_SELF = "Cannot befriend yourself"
MSG_ALREADY_FRIENDS = "Already friends"
MSG_PENDING = "Friend request already sent"
MSG_FRIEND_ADDED = "Friend added successfully"


def _sharer_from_token(cipher: ShareCipher, token: str) -> int:
    identifier = cipher.decode(token)
    try:
        return int(identifier)
    except ValueError as exc:
        raise BadShareToken("Invalid share reference") from exc


def build_share_url(base_url: str, public_code: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/share/record/{public_code}?{urlencode({'ref': token})}"


def _absolute_photo_url(base_url: str, photo: str) -> str:
    if photo.startswith(("http://", "https://")):
        return photo
    return f"{base_url.rstrip('/')}/{photo.lstrip('/')}"


# Fixed English names; strftime("%B") follows the host locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _month_label(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    return f"{MONTH_NAMES[moment.month - 1]} {moment.year}"


def _new_share_link(db: Session, cipher: ShareCipher, *, record_id: int, sharer_id: int,
                    expire_days: int) -> ShareLink:
    expires_at = datetime.utcnow() + timedelta(days=expire_days)
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        public_code = cipher.new_public_code()
        try:
            return crud.share_link.create_for_record(
                db, record_id=record_id, sharer_id=sharer_id,
                public_code=public_code, expires_at=expires_at,
            )
        except IntegrityError:
            db.rollback()
            logger.warning("Public code collision on attempt %d for record %s", attempt, record_id)
    raise SharePersistenceError("Could not allocate a unique public code")


def create_or_reuse_share_link(
    db: Session,
    *,
    record_id: int,
    sharer_id: int,
    cipher: ShareCipher,
    base_url: Optional[str] = None,
    expire_days: Optional[int] = None,
) -> schemas.ShareLinkOut:
    """
    Return the public link for (record, sharer), creating it on first share.

    Lookup and creation are separate statements, so two concurrent first
    shares may both create a link. Later calls reuse whichever is newest.
    """
    record = crud.record.get(db, id=record_id)
    if record is None:
        raise ShareNotFound("Record not found")
    if not crud.record.is_owned_by(record, sharer_id):
        raise ShareNotAuthorized("You can only share your own records")

    try:
        link = crud.share_link.get_active_for_record(db, record_id=record_id, sharer_id=sharer_id)
        if link is None:
            link = _new_share_link(
                db, cipher, record_id=record_id, sharer_id=sharer_id,
                expire_days=expire_days or settings.SHARE_LINK_EXPIRE_DAYS,
            )
            logger.info("Created share link %s for record %s", link.public_code, record_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create share link for record %s", record_id)
        raise SharePersistenceError("Failed to create share link") from exc

    token = cipher.encode(str(sharer_id))
    return schemas.ShareLinkOut(
        public_code=link.public_code,
        url=build_share_url(base_url or settings.FRONTEND_URL, link.public_code, token),
        token=token,
    )


def _project_record(record: MealRecord, link: ShareLink, api_base_url: str) -> schemas.PublicRecord:
    sharer = link.sharer
    photos = [_absolute_photo_url(api_base_url, p) for p in (record.photos or []) if p]
    return schemas.PublicRecord(
        id=record.id,
        name=record.name,
        photos=photos,
        location=record.location,
        rating=record.rating,
        memo=record.memo,
        price=float(record.price) if record.price is not None else None,
        category=record.category,
        created_at=_month_label(record.created_at),
        sharer_name=sharer.name if sharer else "",
        sharer_profile_image=sharer.profile_image if sharer else None,
        view_count=link.view_count,
    )


def resolve_public_record(
    db: Session, *, public_code: str, api_base_url: Optional[str] = None
) -> schemas.PublicRecord:
    link = crud.share_link.get_by_code(db, public_code=public_code, active_only=True)
    if link is None:
        raise ShareNotFound("Share link not found")
    if link.expires_at and datetime.utcnow() > link.expires_at:
        raise ShareExpired("Share link has expired")

    record = link.record
    if record is None:
        raise ShareNotFound("Shared record no longer exists")

    try:
        crud.share_link.increment_view_count(db, share_link=link)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to count view for share link %s", public_code)
        raise SharePersistenceError("Failed to load shared record") from exc

    return _project_record(record, link, api_base_url or settings.API_BASE_URL)


def track_view(
    db: Session,
    *,
    public_code: str,
    token: str,
    session_id: str,
    ip_address: Optional[str],
    user_agent: Optional[str],
    cipher: ShareCipher,
) -> bool:
    """
    Record an anonymous view as an attribution candidate.

    Never raises: failures go to the log and the failure counter, and the
    return value says whether anything was recorded.
    """
    try:
        sharer_id = _sharer_from_token(cipher, token)
    except BadShareToken:
        logger.warning("Dropping view on %s: undecodable share reference", public_code)
        record_track_failure("bad_token")
        return False

    try:
        link = crud.share_link.get_by_code(db, public_code=public_code)
        if link is None:
            logger.warning("Dropping view: unknown public code %s", public_code)
            record_track_failure("unknown_link")
            return False

        existing = crud.view_event.get_by_session(db, share_link_id=link.id, session_id=session_id)
        if existing is not None:
            # Sharer recorded on first view is kept
            crud.view_event.touch(db, event=existing)
            return True

        crud.view_event.create_for_view(
            db,
            share_link_id=link.id,
            sharer_id=sharer_id,
            session_id=session_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to track view on %s", public_code)
        record_track_failure("persistence")
        return False
    except Exception:
        # Driver errors SQLAlchemy does not wrap (bad encodings, NUL bytes)
        db.rollback()
        logger.exception("Unexpected error tracking view on %s", public_code)
        record_track_failure("unexpected")
        return False


def link_friends(db: Session, *, sharer_id: int, recipient_id: int) -> None:
    """
    Create an accepted friendship in both directions.

    Referral connections skip the request/accept handshake: sharing the link
    and signing in through it count as consent on both sides.
    """
    crud.friendship.create_accepted_pair(db, user_id=sharer_id, friend_id=recipient_id)
    logger.info("Linked users %s and %s through a shared link", sharer_id, recipient_id)


def connect_friend(
    db: Session,
    *,
    token: str,
    recipient_id: int,
    cipher: ShareCipher,
    session_id: Optional[str] = None,
) -> schemas.ConnectFriendResult:
    """
    Attribute a sign-up/login to the sharer behind ``token`` and befriend them.

    The steps are committed one by one. A failure halfway can leave a view
    attributed without a friendship; retrying may attribute another view.
    """
    sharer_id = _sharer_from_token(cipher, token)

    if sharer_id == recipient_id:
        return schemas.ConnectFriendResult(success=False, message=MSG_SELF)

    try:
        if crud.user.get(db, id=sharer_id) is None:
            raise BadShareToken("Invalid share reference")

        event = crud.view_event.latest_unattributed(db, sharer_id=sharer_id, session_id=session_id)
        if event is not None:
            crud.view_event.mark_converted(db, event=event, recipient_id=recipient_id)

        # Rejected or blocked edges do not stop a referral link
        statuses = {f.status for f in crud.friendship.get_between(db, user_id=sharer_id, other_id=recipient_id)}
        if FRIENDSHIP_ACCEPTED in statuses:
            return schemas.ConnectFriendResult(success=False, message=MSG_ALREADY_FRIENDS)
        if FRIENDSHIP_PENDING in statuses:
            return schemas.ConnectFriendResult(success=False, message=MSG_PENDING)

        link_friends(db, sharer_id=sharer_id, recipient_id=recipient_id)

        if event is not None:
            crud.view_event.mark_friend_link_created(db, event=event)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to connect %s with sharer %s", recipient_id, sharer_id)
        raise SharePersistenceError("Failed to connect friend") from exc

    return schemas.ConnectFriendResult(success=True, message=MSG_FRIEND_ADDED)


def get_share_stats(db: Session, *, sharer_id: int) -> List[schemas.ShareStat]:
    rows = crud.share_link.stats_for_sharer(db, sharer_id=sharer_id)
    return [
        schemas.ShareStat(
            public_code=link.public_code,
            record_label=record_name,
            view_count=link.view_count,
            tracking_count=tracking_count,
            conversions=conversions,
            created_at=link.created_at,
        )
        for link, record_name, tracking_count, conversions in rows
    ]


def deactivate_share_link(db: Session, *, public_code: str, sharer_id: int) -> None:
    link = crud.share_link.get_by_code(db, public_code=public_code)
    if link is None or link.sharer_id != sharer_id:
        raise ShareNotFound("Share link not found")
    crud.share_link.deactivate(db, share_link=link)
    logger.info("Deactivated share link %s", public_code)

import logging
from typing import Annotated, Optional

from fastapi import Request, Depends
from firebase_admin.auth import verify_id_token

from models.user import User
from services.firestore import FirestoreDB
from services.posts import PostAuthority

logger = logging.getLogger(__name__)


async def get_principal(request: Request) -> Optional[User]:
    """
    Verify the Firebase ID token from the Authorization header.
    Returns None when no principal can be resolved; the post authority decides
    whether that is an error for the operation at hand.
    """
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization.split("Bearer ")[1]
    try:
        decoded_token = verify_id_token(token, check_revoked=True, clock_skew_seconds=10)
    except Exception as e:
        logger.warning("Invalid authentication token: %s", e)
        return None

    return User(
        user_id=decoded_token["uid"],
        email=decoded_token.get("email"),
    )


async def get_firestore(request: Request) -> FirestoreDB:
    """ Get Firestore DB from app state """
    return request.app.state.firestore


async def get_post_authority(db: Annotated[FirestoreDB, Depends(get_firestore)]) -> PostAuthority:
    """Build the post authority on top of the app's Firestore client"""
    return PostAuthority(db)


# Type annotations for dependency injection
Principal = Annotated[Optional[User], Depends(get_principal)]
Firestore = Annotated[FirestoreDB, Depends(get_firestore)]
Posts = Annotated[PostAuthority, Depends(get_post_authority)]

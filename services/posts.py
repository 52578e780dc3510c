import logging
from contextlib import contextmanager
from typing import Iterable, List, Mapping, Optional

from google.api_core.exceptions import GoogleAPIError
from google.api_core.exceptions import NotFound as DocumentNotFound

from models.post import DeleteConfirmation, Post, PostRecord
from models.user import User, UserSummary
from services.errors import Conflict, Forbidden, NotFound, ServiceFailure, Unauthorized
from services.firestore import FirestoreDB

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown"


def is_owner(principal: User, post: PostRecord) -> bool:
    """Ownership is plain identity equality against the post's author"""
    return principal.user_id == post.author_id


def resolve_post(record: PostRecord, usernames: Mapping[str, str]) -> Post:
    """
    Turn a stored post into its wire form, replacing the author and liker ids
    with {id, displayName} pairs

    Args:
        record: The post as stored
        usernames: Mapping of user IDs to usernames; missing IDs resolve to "Unknown"
    """

    def summary(user_id: str) -> UserSummary:
        return UserSummary(id=user_id, displayName=usernames.get(user_id, UNKNOWN_USER))

    return Post(
        id=record.id,
        content=record.content,
        author=summary(record.author_id),
        likedBy=[summary(user_id) for user_id in sorted(record.liked_by)],
        createdAt=record.created_at,
    )


@contextmanager
def store_errors(message: str):
    """Re-raise Firestore failures as ServiceFailure carrying a short message"""
    try:
        yield
    except DocumentNotFound as e:
        # the post was deleted between the read and the write
        raise NotFound("Post not found") from e
    except GoogleAPIError as e:
        logger.exception(message)
        raise ServiceFailure(message) from e


class PostAuthority:
    """
    Owns the rules for reading and mutating posts.

    Every mutating operation takes the resolved principal explicitly; `None`
    means the caller could not be authenticated.
    """

    def __init__(self, db: FirestoreDB):
        self.db = db

    def _resolve(self, records: Iterable[PostRecord]) -> List[Post]:
        records = list(records)
        user_ids = set()
        for record in records:
            user_ids.add(record.author_id)
            user_ids.update(record.liked_by)

        usernames = self.db.get_usernames(user_ids)
        return [resolve_post(record, usernames) for record in records]

    def _load(self, post_id: str) -> PostRecord:
        record = self.db.get_post(post_id)
        if record is None:
            raise NotFound("Post not found")
        return record

    @staticmethod
    def _require_principal(principal: Optional[User]) -> User:
        if principal is None:
            raise Unauthorized("Not authenticated")
        return principal

    def list_all(self) -> List[Post]:
        with store_errors("Error fetching posts"):
            return self._resolve(self.db.get_all_posts())

    def list_by_author_name(self, name: str) -> List[Post]:
        with store_errors("Error fetching user posts"):
            author_id = self.db.find_user_by_username(name)
            if author_id is None:
                raise NotFound("User not found")
            return self._resolve(self.db.get_all_posts(author_id=author_id))

    def get(self, post_id: str) -> Post:
        with store_errors("Error fetching post"):
            return self._resolve([self._load(post_id)])[0]

    def create(self, principal: Optional[User], content: str) -> Post:
        principal = self._require_principal(principal)
        with store_errors("Error creating post"):
            record = self.db.create_post(principal.user_id, content)
            logger.info("Post %s created by %s", record.id, principal.user_id)
            return self._resolve([record])[0]

    def update(self, principal: Optional[User], post_id: str, content: str) -> Post:
        principal = self._require_principal(principal)
        with store_errors("Error updating post"):
            record = self._load(post_id)
            if not is_owner(principal, record):
                raise Forbidden("Not authorized")

            self.db.update_post_content(post_id, content)
            logger.info("Post %s updated by %s", post_id, principal.user_id)
            return self._resolve([self._load(post_id)])[0]

    def delete(self, principal: Optional[User], post_id: str) -> DeleteConfirmation:
        principal = self._require_principal(principal)
        with store_errors("Error deleting post"):
            record = self._load(post_id)
            if not is_owner(principal, record):
                raise Forbidden("Not authorized")

            self.db.delete_post(post_id)
            logger.info("Post %s deleted by %s", post_id, principal.user_id)
            return DeleteConfirmation(message="Post deleted")

    def like(self, principal: Optional[User], post_id: str) -> Post:
        principal = self._require_principal(principal)
        with store_errors("Error liking post"):
            record = self._load(post_id)
            if principal.user_id in record.liked_by:
                raise Conflict("Post already liked")

            self.db.add_like(post_id, principal.user_id)
            logger.info("Post %s liked by %s", post_id, principal.user_id)
            return self._resolve([self._load(post_id)])[0]

    def unlike(self, principal: Optional[User], post_id: str) -> Post:
        principal = self._require_principal(principal)
        with store_errors("Error unliking post"):
            record = self._load(post_id)
            if principal.user_id not in record.liked_by:
                raise Conflict("Post not liked yet")

            self.db.remove_like(post_id, principal.user_id)
            logger.info("Post %s unliked by %s", post_id, principal.user_id)
            return self._resolve([self._load(post_id)])[0]

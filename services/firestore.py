from typing import Dict, Iterable, List, Optional

import firebase_admin
from firebase_admin import firestore as fs
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter

from config import POSTS_COLLECTION, USERS_COLLECTION
from models.post import PostRecord


class FirestoreDB:
    def __init__(
            self,
            app: firebase_admin.App,
            posts_collection: str = POSTS_COLLECTION,
            users_collection: str = USERS_COLLECTION,
    ):
        self.db = fs.client(app)
        self.posts_collection = posts_collection
        self.users_collection = users_collection

    def collection(self, name: str):
        return self.db.collection(name)

    def _posts(self):
        return self.collection(self.posts_collection)

    @staticmethod
    def _to_record(snapshot) -> PostRecord:
        data = snapshot.to_dict()
        return PostRecord(
            id=snapshot.id,
            content=data.get("content", ""),
            author_id=data["author_id"],
            liked_by=set(data.get("liked_by", [])),
            created_at=data["created_at"],
        )

    def get_all_posts(self, author_id: Optional[str] = None) -> List[PostRecord]:
        """Get posts sorted by creation date descending, optionally for a single author"""
        query = self._posts()
        if author_id is not None:
            query = query.where(filter=FieldFilter("author_id", "==", author_id))

        posts_ref = query.order_by("created_at", direction=firestore.Query.DESCENDING).stream()
        return [self._to_record(doc) for doc in posts_ref]

    def get_post(self, post_id: str) -> Optional[PostRecord]:
        """Get a post by ID"""
        snapshot = self._posts().document(post_id).get()
        if not snapshot.exists:
            return None
        return self._to_record(snapshot)

    def create_post(self, author_id: str, content: str) -> PostRecord:
        """
        Create a new post and read it back so the server timestamp is populated
        """
        new_post_ref = self._posts().document()
        new_post_ref.set({
            "author_id": author_id,
            "content": content,
            "liked_by": [],
            "created_at": firestore.SERVER_TIMESTAMP,
        })
        return self._to_record(new_post_ref.get())

    def update_post_content(self, post_id: str, content: str) -> None:
        """Replace the content of a post, leaving every other field alone"""
        self._posts().document(post_id).update({"content": content})

    def delete_post(self, post_id: str) -> None:
        self._posts().document(post_id).delete()

    def add_like(self, post_id: str, user_id: str) -> None:
        """Add a user to the post's likers with a field transform"""
        self._posts().document(post_id).update({"liked_by": firestore.ArrayUnion([user_id])})

    def remove_like(self, post_id: str, user_id: str) -> None:
        """Remove a user from the post's likers with a field transform"""
        self._posts().document(post_id).update({"liked_by": firestore.ArrayRemove([user_id])})

    def find_user_by_username(self, username: str) -> Optional[str]:
        """Return the id of the user with this username, if any"""
        users_ref = self.collection(self.users_collection).where(
            filter=FieldFilter("username", "==", username)
        ).limit(1).stream()

        for doc in users_ref:
            return doc.id
        return None

    def get_usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """
        Batch fetch usernames for a set of user IDs
        Returns a dictionary mapping user IDs to usernames; unknown IDs are left out
        """
        unique_ids = sorted(set(user_ids))
        if not unique_ids:
            return {}

        refs = [self.collection(self.users_collection).document(user_id) for user_id in unique_ids]
        usernames = {}
        for snapshot in self.db.get_all(refs):
            if not snapshot.exists:
                continue
            username = (snapshot.to_dict() or {}).get("username")
            if username:
                usernames[snapshot.id] = username
        return usernames

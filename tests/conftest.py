import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import NotFound as DocumentNotFound
from google.api_core.exceptions import ServiceUnavailable

import dependencies
from dependencies import get_firestore
from main import app
from models.post import PostRecord
from models.user import User
from services.posts import PostAuthority

EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeFirestore:
    """In-memory stand-in exposing the same methods as FirestoreDB"""

    def __init__(self):
        self.posts: Dict[str, PostRecord] = {}
        self.usernames: Dict[str, str] = {}
        self.down = False
        self._clock = itertools.count()

    def _check(self):
        if self.down:
            raise ServiceUnavailable("firestore unavailable")

    def _existing(self, post_id: str) -> PostRecord:
        # document.update() on a missing document fails the same way
        if post_id not in self.posts:
            raise DocumentNotFound(f"No document to update: {post_id}")
        return self.posts[post_id]

    def add_user(self, user_id: str, username: str):
        self.usernames[user_id] = username

    def get_all_posts(self, author_id: Optional[str] = None) -> List[PostRecord]:
        self._check()
        records = [
            record.model_copy(deep=True)
            for record in self.posts.values()
            if author_id is None or record.author_id == author_id
        ]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def get_post(self, post_id: str) -> Optional[PostRecord]:
        self._check()
        record = self.posts.get(post_id)
        return record.model_copy(deep=True) if record else None

    def create_post(self, author_id: str, content: str) -> PostRecord:
        self._check()
        record = PostRecord(
            id=uuid.uuid4().hex,
            content=content,
            author_id=author_id,
            created_at=EPOCH + timedelta(seconds=next(self._clock)),
        )
        self.posts[record.id] = record
        return record.model_copy(deep=True)

    def update_post_content(self, post_id: str, content: str) -> None:
        self._check()
        self._existing(post_id).content = content

    def delete_post(self, post_id: str) -> None:
        self._check()
        del self.posts[post_id]

    def add_like(self, post_id: str, user_id: str) -> None:
        self._check()
        self._existing(post_id).liked_by.add(user_id)

    def remove_like(self, post_id: str, user_id: str) -> None:
        self._check()
        self._existing(post_id).liked_by.discard(user_id)

    def find_user_by_username(self, username: str) -> Optional[str]:
        self._check()
        for user_id, name in self.usernames.items():
            if name == username:
                return user_id
        return None

    def get_usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        self._check()
        return {user_id: self.usernames[user_id] for user_id in set(user_ids) if user_id in self.usernames}


@pytest.fixture
def fake_db() -> FakeFirestore:
    db = FakeFirestore()
    db.add_user("uid-alice", "alice")
    db.add_user("uid-bob", "bob")
    return db


@pytest.fixture
def authority(fake_db) -> PostAuthority:
    return PostAuthority(fake_db)


@pytest.fixture
def alice() -> User:
    return User(user_id="uid-alice", email="alice@example.com")


@pytest.fixture
def bob() -> User:
    return User(user_id="uid-bob", email="bob@example.com")


def fake_verify_id_token(token: str, check_revoked: bool = False, clock_skew_seconds: int = 0) -> dict:
    # Tokens in tests are "token-<uid>"; anything else is rejected
    if not token.startswith("token-"):
        raise ValueError("Invalid token")
    uid = token[len("token-"):]
    return {"uid": uid, "email": f"{uid}@example.com"}


@pytest.fixture
def client(fake_db, monkeypatch) -> TestClient:
    monkeypatch.setattr(dependencies, "verify_id_token", fake_verify_id_token)
    app.dependency_overrides[get_firestore] = lambda: fake_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()

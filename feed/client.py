import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)


class FeedClient:
    """
    Thin consumer of the posts API.

    Holds the feed as last returned by `GET /posts` and refetches the whole
    list after every successful mutation. Failures are logged and leave the
    feed untouched.
    """

    def __init__(self, session: aiohttp.ClientSession, base_url: str, token: Optional[str] = None):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.posts: List[Dict[str, Any]] = []

    @property
    def can_create(self) -> bool:
        return self.token is not None

    def _headers(self) -> Dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, **kwargs) -> Optional[Any]:
        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(method, url, headers=self._headers(), **kwargs) as response:
                data = await response.json(content_type=None)
                if response.status >= 400:
                    message = data.get("detail") if isinstance(data, dict) else data
                    logger.error("%s %s failed (%s): %s", method, path, response.status, message)
                    return None
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("%s %s failed: %s", method, path, e)
            return None

    async def refresh(self) -> bool:
        """Replace the feed with the server's current list"""
        posts = await self._request("GET", "/posts")
        if posts is None:
            return False
        if not isinstance(posts, list):
            logger.error("GET /posts returned %s instead of a list", type(posts).__name__)
            return False
        self.posts = posts
        return True

    async def _mutate(self, method: str, path: str, **kwargs) -> bool:
        if await self._request(method, path, **kwargs) is None:
            return False
        return await self.refresh()

    async def create(self, content: str) -> bool:
        if not self.can_create:
            logger.warning("Sign in to create posts")
            return False
        return await self._mutate("POST", "/posts", json={"content": content})

    async def update(self, post_id: str, content: str) -> bool:
        return await self._mutate("PUT", f"/posts/{post_id}", json={"content": content})

    async def delete(self, post_id: str) -> bool:
        return await self._mutate("DELETE", f"/posts/{post_id}")

    async def like(self, post_id: str) -> bool:
        return await self._mutate("POST", f"/posts/{post_id}/like")

    async def unlike(self, post_id: str) -> bool:
        return await self._mutate("DELETE", f"/posts/{post_id}/like")

    def render(self) -> List[str]:
        """Render the feed as text lines in server order"""
        lines = []
        for post in self.posts:
            likers = [liker["displayName"] for liker in post.get("likedBy", [])]
            line = f"{post['author']['displayName']}: {post['content']} ({len(likers)} likes)"
            if likers:
                line += f" liked by {', '.join(likers)}"
            lines.append(line)
        return lines

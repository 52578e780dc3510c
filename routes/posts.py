from typing import List

from fastapi import APIRouter, status

from dependencies import Posts, Principal
from models.post import DeleteConfirmation, Post, PostContent

router = APIRouter()


@router.get("", response_model=List[Post])
async def get_posts(posts: Posts):
    """Get all posts, newest first"""
    return posts.list_all()


@router.get("/user/{username}", response_model=List[Post])
async def get_user_posts(username: str, posts: Posts):
    """
    Get the posts written by one user

    Args:
        username: Display name of the author
        posts: Post authority
    """
    return posts.list_by_author_name(username)


@router.get("/{post_id}", response_model=Post)
async def get_post(post_id: str, posts: Posts):
    """Get a single post"""
    return posts.get(post_id)


@router.post("", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostContent, principal: Principal, posts: Posts):
    """Create a new post owned by the caller"""
    return posts.create(principal, body.content)


@router.put("/{post_id}", response_model=Post)
async def update_post(post_id: str, body: PostContent, principal: Principal, posts: Posts):
    """
    Replace the content of a post. Only its author may do this.

    Args:
        post_id: The ID of the post to edit
        body: The new content
        principal: Caller resolved from the bearer token
        posts: Post authority
    """
    return posts.update(principal, post_id, body.content)


@router.delete("/{post_id}", response_model=DeleteConfirmation)
async def delete_post(post_id: str, principal: Principal, posts: Posts):
    """Delete a post permanently. Only its author may do this."""
    return posts.delete(principal, post_id)


@router.post("/{post_id}/like", response_model=Post)
async def like_post(post_id: str, principal: Principal, posts: Posts):
    """Like a post; liking it twice is rejected"""
    return posts.like(principal, post_id)


@router.delete("/{post_id}/like", response_model=Post)
async def unlike_post(post_id: str, principal: Principal, posts: Posts):
    """Remove the caller's like; unliking a post that isn't liked is rejected"""
    return posts.unlike(principal, post_id)

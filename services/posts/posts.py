"""Post read routes for Post Service."""

from math import ceil

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import or_, update
from sqlalchemy.orm import Query as ORMQuery
from sqlalchemy.orm import Session

from services.posts.dependencies import DBSession
from services.posts.models import Post, ShadowUser
from services.posts.schemas import PaginatedPosts, PostResponse, ViewCountResponse

router = APIRouter(prefix="/api/v1/posts", tags=["Posts"])


def posts_with_creator(db: Session) -> ORMQuery:
    """Query posts together with the replicated creator name.

    The outer join keeps posts whose creator has no shadow record.
    """
    return db.query(Post, ShadowUser.name).outerjoin(
        ShadowUser, Post.user_id == ShadowUser.id
    )


def to_response(post: Post, creator_name: str | None) -> PostResponse:
    """Build a post response with its creator name."""
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        user_id=post.user_id,
        creator_name=creator_name,
        view_count=post.view_count,
        created_at=post.created_at,
    )


def newest_first(query: ORMQuery) -> ORMQuery:
    """Order posts newest first, breaking ties by id."""
    return query.order_by(Post.created_at.desc(), Post.id)


@router.get("/latest", response_model=list[PostResponse])
def get_latest_posts(
    db: DBSession,
    limit: int = Query(10, ge=1, le=100),
) -> list[PostResponse]:
    """
    Get the most recent posts.

    Args:
        db: Database session
        limit: Maximum number of posts

    Returns:
        list[PostResponse]: Posts, newest first
    """
    rows = newest_first(posts_with_creator(db)).limit(limit).all()
    return [to_response(post, name) for post, name in rows]


@router.get("/creator", response_model=list[PostResponse])
def get_posts_by_creator(
    db: DBSession,
    name: str = Query(..., min_length=1),
) -> list[PostResponse]:
    """
    Get posts by creator name.

    The name is resolved through the replicated users, so posts of deleted
    users are not found.

    Args:
        db: Database session
        name: Creator name

    Returns:
        list[PostResponse]: The creator's posts, newest first
    """
    rows = newest_first(posts_with_creator(db).filter(ShadowUser.name == name)).all()
    return [to_response(post, creator) for post, creator in rows]


@router.get("/search", response_model=list[PostResponse])
def search_posts(
    db: DBSession,
    query: str = Query(..., min_length=1),
) -> list[PostResponse]:
    """
    Search posts by title or content (case-insensitive).

    Args:
        db: Database session
        query: Search text

    Returns:
        list[PostResponse]: Matching posts, newest first
    """
    pattern = f"%{query}%"
    rows = newest_first(
        posts_with_creator(db).filter(
            or_(Post.title.ilike(pattern), Post.content.ilike(pattern))
        )
    ).all()
    return [to_response(post, name) for post, name in rows]


@router.get("", response_model=PaginatedPosts)
def list_posts(
    db: DBSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaginatedPosts:
    """
    List posts with pagination.

    Args:
        db: Database session
        page: Page number (1-indexed)
        page_size: Number of items per page

    Returns:
        PaginatedPosts: Paginated list of posts
    """
    total = db.query(Post).count()
    total_pages = ceil(total / page_size) if total > 0 else 1

    rows = (
        newest_first(posts_with_creator(db))
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    return PaginatedPosts(
        items=[to_response(post, name) for post, name in rows],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: DBSession) -> PostResponse:
    """
    Get a post by id.

    Args:
        post_id: The post's ID
        db: Database session

    Returns:
        PostResponse: Post data
    """
    row = posts_with_creator(db).filter(Post.id == post_id).first()
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    post, name = row
    return to_response(post, name)


@router.patch("/{post_id}/view", response_model=ViewCountResponse)
def increment_views(post_id: str, db: DBSession) -> ViewCountResponse:
    """
    Increment a post's view count.

    The increment is a single UPDATE so concurrent views are not lost.

    Args:
        post_id: The post's ID
        db: Database session

    Returns:
        ViewCountResponse: The new view count
    """
    result = db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(view_count=Post.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    db.commit()

    view_count = db.query(Post.view_count).filter(Post.id == post_id).scalar()
    return ViewCountResponse(id=post_id, view_count=view_count)

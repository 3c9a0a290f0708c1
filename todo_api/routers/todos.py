"""Todo API endpoints. All routes require a Bearer access token."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from todo_api.cache import CacheService, get_cache, invalidate_user_cache, user_stats_key, user_todos_key
from todo_api.config import get_settings
from todo_api.database import get_db
from todo_api.dependencies import CurrentUser, get_current_user
from todo_api.rate_limit import api_limit
from todo_api.schemas.todo import Pagination, TodoCreate, TodoResponse, TodoStats, TodoUpdate
from todo_api.services.todo import DEFAULT_PAGE_SIZE, ListQuery, get_todo_service

settings = get_settings()

router = APIRouter(tags=["Todos"], dependencies=[Depends(get_current_user)])


def _todo_json(todo) -> dict:
    return TodoResponse.model_validate(todo).to_json()


@router.post("", status_code=201)
@api_limit
def create_todo(
    request: Request,
    body: TodoCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """Create a todo for the current user."""
    todo = get_todo_service().create_todo(db, user.user_id, body)
    invalidate_user_cache(cache, user.user_id)
    return {"success": True, "message": "Todo created successfully", "data": {"todo": _todo_json(todo)}}


@router.get("")
@api_limit
def list_todos(
    request: Request,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """List the current user's non-archived todos."""
    q = ListQuery.build(page, limit, status, priority, search, sort_by, sort_order)

    key = user_todos_key(user.user_id, q.cache_params())
    cached = cache.get(key)
    if cached is not None:
        return {"success": True, "data": cached}

    result = get_todo_service().list_todos(db, user.user_id, q)
    pagination = Pagination(
        current_page=result.page,
        total_pages=result.total_pages,
        total_count=result.total,
        has_next_page=result.has_next_page,
        has_prev_page=result.has_prev_page,
        limit=result.limit,
    )
    data = {"todos": [_todo_json(t) for t in result.items], "pagination": pagination.to_json()}
    cache.set(key, data, settings.CACHE_TTL_SECONDS)
    return {"success": True, "data": data}


@router.get("/stats")
@api_limit
def todo_stats(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """Aggregate counts over the current user's non-archived todos."""
    key = user_stats_key(user.user_id)
    cached = cache.get(key)
    if cached is not None:
        return {"success": True, "data": {"stats": cached}}

    stats = TodoStats(**get_todo_service().get_stats(db, user.user_id)).to_json()
    cache.set(key, stats, settings.STATS_CACHE_TTL_SECONDS)
    return {"success": True, "data": {"stats": stats}}


@router.get("/{todo_id}")
@api_limit
def get_todo(
    request: Request,
    todo_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Get a single todo by ID."""
    todo = get_todo_service().get_todo(db, todo_id, user.user_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"success": True, "data": {"todo": _todo_json(todo)}}


@router.put("/{todo_id}")
@api_limit
def update_todo(
    request: Request,
    todo_id: int,
    body: TodoUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """Partially update a todo."""
    service = get_todo_service()
    todo = service.get_todo(db, todo_id, user.user_id)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found or access denied")

    todo = service.update_todo(db, todo, body)
    invalidate_user_cache(cache, user.user_id)
    return {"success": True, "message": "Todo updated successfully", "data": {"todo": _todo_json(todo)}}


@router.delete("/{todo_id}")
@api_limit
def delete_todo(
    request: Request,
    todo_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """Permanently delete a todo, archived or not."""
    service = get_todo_service()
    todo = service.get_todo(db, todo_id, user.user_id, include_archived=True)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found or access denied")

    service.delete_todo(db, todo)
    invalidate_user_cache(cache, user.user_id)
    return {"success": True, "message": "Todo deleted successfully"}


@router.patch("/{todo_id}/archive")
@api_limit
def toggle_archive(
    request: Request,
    todo_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: CacheService = Depends(get_cache),
) -> dict:
    """Archive or unarchive a todo."""
    service = get_todo_service()
    todo = service.get_todo(db, todo_id, user.user_id, include_archived=True)
    if not todo:
        raise HTTPException(status_code=404, detail="Todo not found or access denied")

    todo = service.toggle_archive(db, todo)
    invalidate_user_cache(cache, user.user_id)
    state = "archived" if todo.is_archived else "unarchived"
    return {"success": True, "message": f"Todo {state} successfully", "data": {"todo": _todo_json(todo)}}

"""Todo service for owner-scoped CRUD, listing, and statistics."""

import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from todo_api.models.todo import PRIORITIES, STATUSES, Todo
from todo_api.schemas.todo import TodoCreate, TodoUpdate

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 10

PRIORITY_RANK = case({"low": 0, "medium": 1, "high": 2}, value=Todo.priority, else_=1)

SORT_FIELDS = {
    "createdAt": Todo.created_at,
    "updatedAt": Todo.updated_at,
    "title": Todo.title,
    "priority": PRIORITY_RANK,
    "dueDate": Todo.due_date,
}


def escape_like(text: str) -> str:
    """Make % and _ match literally inside a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class ListQuery:
    """Normalized list parameters. Use ListQuery.build() to clamp raw input."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    status: str | None = None
    priority: str | None = None
    search: str | None = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @classmethod
    def build(
        cls,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> "ListQuery":
        """Clamp paging, drop unknown filters, and fall back to the default sort."""
        return cls(
            page=max(1, page),
            limit=min(MAX_PAGE_SIZE, max(1, limit)),
            status=status if status in STATUSES else None,
            priority=priority if priority in PRIORITIES else None,
            search=search.strip() if search and search.strip() else None,
            sort_by=sort_by if sort_by in SORT_FIELDS else "createdAt",
            sort_order="asc" if sort_order == "asc" else "desc",
        )

    def cache_params(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "status": self.status,
            "priority": self.priority,
            "search": self.search,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
        }


@dataclass
class TodoPage:
    """One page of list results plus paging metadata."""

    items: list[Todo]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


class TodoService:
    """Handles todo persistence. Every query is filtered by the owning user."""

    def _owned(self, db: Session, user_id: int, include_archived: bool = False):
        query = db.query(Todo).filter(Todo.user_id == user_id)
        if not include_archived:
            query = query.filter(Todo.is_archived.is_(False))
        return query

    def create_todo(self, db: Session, user_id: int, data: TodoCreate) -> Todo:
        """Create a todo owned by the user."""
        todo = Todo(
            title=data.title,
            description=data.description,
            priority=data.priority or "medium",
            due_date=data.due_date,
            user_id=user_id,
        )
        db.add(todo)
        db.commit()
        db.refresh(todo)
        return todo

    def list_todos(self, db: Session, user_id: int, q: ListQuery) -> TodoPage:
        """List non-archived todos with filtering, sorting, and pagination."""
        query = self._owned(db, user_id)

        if q.status:
            query = query.filter(Todo.status == q.status)
        if q.priority:
            query = query.filter(Todo.priority == q.priority)
        if q.search:
            pattern = f"%{escape_like(q.search)}%"
            query = query.filter(
                or_(Todo.title.ilike(pattern, escape="\\"), Todo.description.ilike(pattern, escape="\\"))
            )

        total = query.count()

        column = SORT_FIELDS[q.sort_by]
        order = column.asc() if q.sort_order == "asc" else column.desc()
        items = query.order_by(order, Todo.id.desc()).offset((q.page - 1) * q.limit).limit(q.limit).all()

        return TodoPage(items=items, total=total, page=q.page, limit=q.limit)

    def get_todo(self, db: Session, todo_id: int, user_id: int, include_archived: bool = False) -> Todo | None:
        """Get a single todo by ID, scoped to user."""
        return self._owned(db, user_id, include_archived).filter(Todo.id == todo_id).first()

    def update_todo(self, db: Session, todo: Todo, data: TodoUpdate) -> Todo:
        """Apply the fields present in the update body."""
        for field in ("title", "description", "status", "priority", "due_date"):
            if field in data.model_fields_set:
                setattr(todo, field, getattr(data, field))
        db.commit()
        db.refresh(todo)
        return todo

    def delete_todo(self, db: Session, todo: Todo) -> None:
        db.delete(todo)
        db.commit()

    def toggle_archive(self, db: Session, todo: Todo) -> Todo:
        """Flip the archived flag."""
        todo.is_archived = not todo.is_archived
        db.commit()
        db.refresh(todo)
        return todo

    def get_stats(self, db: Session, user_id: int, now: datetime | None = None) -> dict[str, int]:
        """Aggregate counts over the user's non-archived todos."""
        now = now or datetime.utcnow()

        def count_where(*conditions):
            return func.coalesce(func.sum(case((and_(*conditions), 1), else_=0)), 0)

        row = (
            db.query(
                func.count(Todo.id),
                count_where(Todo.status == "pending"),
                count_where(Todo.status == "in-progress"),
                count_where(Todo.status == "completed"),
                count_where(Todo.priority == "high"),
                count_where(Todo.due_date.isnot(None), Todo.due_date < now, Todo.status != "completed"),
            )
            .filter(Todo.user_id == user_id, Todo.is_archived.is_(False))
            .one()
        )

        total, pending, in_progress, completed, high_priority, overdue = (int(v or 0) for v in row)
        return {
            "total": total,
            "pending": pending,
            "in_progress": in_progress,
            "completed": completed,
            "high_priority": high_priority,
            "overdue": overdue,
        }


_todo_service: TodoService | None = None


def get_todo_service() -> TodoService:
    """Get singleton todo service instance."""
    global _todo_service
    if _todo_service is None:
        _todo_service = TodoService()
    return _todo_service

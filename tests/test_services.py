"""Unit tests for services and schema helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from todo_api.models.todo import Todo
from todo_api.schemas.todo import TodoCreate, TodoUpdate, parse_due_date
from todo_api.services.jwt import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE, JWTService
from todo_api.services.todo import ListQuery, TodoPage, TodoService


class TestListQuery:
    def test_defaults(self):
        q = ListQuery.build()
        assert (q.page, q.limit, q.sort_by, q.sort_order) == (1, 10, "createdAt", "desc")

    @pytest.mark.parametrize("page,limit,expected", [(0, 100, (1, 50)), (-5, -1, (1, 1)), (4, 25, (4, 25))])
    def test_clamping(self, page, limit, expected):
        q = ListQuery.build(page=page, limit=limit)
        assert (q.page, q.limit) == expected

    def test_unknown_values_dropped(self):
        q = ListQuery.build(status="done", priority="urgent", search="   ", sort_by="password", sort_order="sideways")
        assert q.status is None
        assert q.priority is None
        assert q.search is None
        assert q.sort_by == "createdAt"
        assert q.sort_order == "desc"

    def test_page_math(self):
        page = TodoPage(items=[], total=21, page=2, limit=10)
        assert page.total_pages == 3
        assert page.has_next_page is True
        assert page.has_prev_page is True


class TestParseDueDate:
    def test_date_only_string(self):
        assert parse_due_date("2031-05-06") == datetime(2031, 5, 6)

    def test_date_object(self):
        assert parse_due_date(date(2031, 5, 6)) == datetime(2031, 5, 6)

    def test_aware_datetime_converted_to_utc(self):
        aware = datetime(2031, 5, 6, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert parse_due_date(aware) == datetime(2031, 5, 6, 17, 0)

    def test_blank_is_none(self):
        assert parse_due_date("") is None
        assert parse_due_date(None) is None

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_due_date("soon")


class TestJWTService:
    def test_token_types_are_not_interchangeable(self):
        service = JWTService()
        pair = service.create_token_pair(7)

        assert service.decode_token(pair.access_token, ACCESS_TOKEN_TYPE)["sub"] == 7
        assert service.decode_token(pair.refresh_token, REFRESH_TOKEN_TYPE)["sub"] == 7
        assert service.decode_token(pair.access_token, REFRESH_TOKEN_TYPE) is None
        assert service.decode_token(pair.refresh_token, ACCESS_TOKEN_TYPE) is None

    def test_wrong_secret_rejected(self):
        service = JWTService()
        token = service.create_token(1)
        other = JWTService()
        other.secret_key = "another-secret"
        assert other.decode_token(token) is None

    def test_refresh_outlives_access(self):
        service = JWTService()
        pair = service.create_token_pair(1)
        access_exp = service.decode_token(pair.access_token)["exp"]
        refresh_exp = service.decode_token(pair.refresh_token, REFRESH_TOKEN_TYPE)["exp"]
        assert refresh_exp > access_exp


class TestTodoService:
    def test_stats_overdue_is_strictly_before_now(self, db_session: Session, test_user: dict):
        service = TodoService()
        user_id = test_user["user_id"]
        now = datetime(2030, 6, 1, 12, 0)

        service.create_todo(db_session, user_id, TodoCreate(title="exactly now", due_date=now))
        service.create_todo(db_session, user_id, TodoCreate(title="a second ago", due_date=now - timedelta(seconds=1)))
        service.create_todo(db_session, user_id, TodoCreate(title="tomorrow", due_date=now + timedelta(days=1)))

        stats = service.get_stats(db_session, user_id, now=now)
        assert stats["total"] == 3
        assert stats["overdue"] == 1

    def test_update_applies_only_sent_fields(self, db_session: Session, test_user: dict):
        service = TodoService()
        todo = service.create_todo(
            db_session, test_user["user_id"], TodoCreate(title="t", description="d", due_date=datetime(2030, 1, 1))
        )

        service.update_todo(db_session, todo, TodoUpdate.model_validate({"priority": "high"}))
        assert (todo.title, todo.description, todo.priority) == ("t", "d", "high")
        assert todo.due_date == datetime(2030, 1, 1)

        service.update_todo(db_session, todo, TodoUpdate.model_validate({"dueDate": None}))
        assert todo.due_date is None

    def test_completed_at_coupling_on_model(self):
        todo = Todo(title="t", user_id=1)
        todo.status = "completed"
        stamped = todo.completed_at
        assert stamped is not None

        todo.status = "completed"
        assert todo.completed_at == stamped

        todo.status = "pending"
        assert todo.completed_at is None

    def test_scoped_lookup(self, db_session: Session, test_user: dict, other_user: dict):
        service = TodoService()
        todo = service.create_todo(db_session, test_user["user_id"], TodoCreate(title="mine"))

        assert service.get_todo(db_session, todo.id, test_user["user_id"]) is not None
        assert service.get_todo(db_session, todo.id, other_user["user_id"]) is None

        service.toggle_archive(db_session, todo)
        assert service.get_todo(db_session, todo.id, test_user["user_id"]) is None
        assert service.get_todo(db_session, todo.id, test_user["user_id"], include_archived=True) is not None

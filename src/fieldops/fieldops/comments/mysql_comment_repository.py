from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import CommentAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Comment
from .repository import CommentRepository


class MySQLCommentRepository(CommentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        project_id: int,
        user_id: Optional[int],
        content: str,
        action_type: CommentAction,
        created_at: datetime,
        progress: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_comments(project_id, user_id, content, action_type, progress, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(project_id), user_id, content, action_type.value, progress, created_at),
            )
            return int(cur.lastrowid)

    def list_for_project(self, project_id: int, *, action_type: Optional[CommentAction] = None) -> Sequence[Comment]:
        clauses = ["project_id=%s"]
        params: list[object] = [int(project_id)]
        if action_type is not None:
            clauses.append("action_type=%s")
            params.append(action_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT comment_id, project_id, user_id, content, action_type, progress, created_at
                FROM project_comments
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC, comment_id DESC
                """,
                tuple(params),
            )
            return [
                Comment(
                    comment_id=int(r["comment_id"]),
                    project_id=int(r["project_id"]),
                    user_id=r.get("user_id"),
                    content=r["content"],
                    action_type=CommentAction(r["action_type"]),
                    progress=r.get("progress"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

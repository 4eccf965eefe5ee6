from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CommentAction
from .model import Comment


class CommentRepository(Protocol):
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
        raise NotImplementedError

    def list_for_project(self, project_id: int, *, action_type: Optional[CommentAction] = None) -> Sequence[Comment]:
        """Newest first."""

        raise NotImplementedError

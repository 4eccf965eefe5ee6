from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CommentAction


@dataclass(frozen=True)
class Comment:
    """Audit note left on a project when its progress or status changes."""

    comment_id: int
    project_id: int
    user_id: Optional[int]
    content: str
    action_type: CommentAction
    created_at: datetime
    progress: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.comment_id,
            "project": self.project_id,
            "user": self.user_id,
            "content": self.content,
            "actionType": self.action_type.value,
            "progress": self.progress,
            "createdAt": self.created_at.isoformat(),
        }

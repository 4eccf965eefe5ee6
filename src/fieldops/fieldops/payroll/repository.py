from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import LaborInputs


class LaborSourceRepository(Protocol):
    def load(
        self,
        project_id: int,
        *,
        start: Optional[date],
        end: Optional[date],
        crew_start: Optional[date],
        crew_end: Optional[date],
    ) -> Optional[LaborInputs]:
        """Roster, wages and present project attendance; None if the project does not exist."""

        raise NotImplementedError

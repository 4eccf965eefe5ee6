from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Person


class PersonRepository(Protocol):
    """Repository interface for Person.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Person]:
        raise NotImplementedError

    def get_many(self, person_ids: Iterable[int]) -> Sequence[Person]:
        raise NotImplementedError

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[Person]:
        raise NotImplementedError

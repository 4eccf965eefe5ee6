from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Person:
    """Domain entity: anyone who can log in, be rostered or be paid.

    `daily_wage` is what one day of presence on a project is worth.
    """

    person_id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: Role
    daily_wage: Decimal = Decimal("0")
    phone: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.ADMIN, Role.SUPER_ADMIN)

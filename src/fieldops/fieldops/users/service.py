from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import PersonRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, people: PersonRepository):
        self._people = people

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        person = self._people.get_by_email(email)
        if not person or not person.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(person.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' in seed data
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(user_id=person.person_id, full_name=person.full_name, role=person.role)

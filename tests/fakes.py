from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from src.fieldops.fieldops.attendance.model import AttendanceFilter, AttendanceRecord
from src.fieldops.fieldops.comments.model import Comment
from src.fieldops.fieldops.core.enums import AttendanceKind, CommentAction, ProjectStatus, Role
from src.fieldops.fieldops.expenses.model import Expense, MaterialItem
from src.fieldops.fieldops.payroll.model import LaborInputs, LaborSnapshot
from src.fieldops.fieldops.projects.model import Client, Project, ProjectFilter
from src.fieldops.fieldops.users.model import Person


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def person(person_id: int, role: Role, *, wage: str = "0", first: str = "", last: str = "", email: str = "") -> Person:
    return Person(
        person_id=person_id,
        first_name=first or role.value.capitalize(),
        last_name=last or str(person_id),
        email=email or f"{role.value}{person_id}@example.com",
        password_hash="x",
        role=role,
        daily_wage=Decimal(wage),
        phone=f"+1000{person_id}",
    )


class InMemoryPeople:
    def __init__(self, people: Iterable[Person] = ()):
        self.by_id: dict[int, Person] = {p.person_id: p for p in people}

    def add(self, p: Person) -> Person:
        self.by_id[p.person_id] = p
        return p

    def get_by_id(self, person_id: int) -> Optional[Person]:
        return self.by_id.get(int(person_id))

    def get_by_email(self, email: str) -> Optional[Person]:
        return next((p for p in self.by_id.values() if p.email.lower() == email.lower()), None)

    def get_many(self, person_ids: Iterable[int]) -> Sequence[Person]:
        return [self.by_id[int(i)] for i in person_ids if int(i) in self.by_id]

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[Person]:
        roles = set(roles)
        return [p for p in self.by_id.values() if p.role in roles]


class InMemoryProjects:
    def __init__(self):
        self.by_id: dict[int, Project] = {}
        self.clients: dict[int, Client] = {}
        self._next_id = 1
        # set to make the next compare-and-set lose, like a concurrent writer
        self.fail_next_write = False

    def add_client(self, client: Client) -> Client:
        self.clients[client.client_id] = client
        return client

    def add(self, project: Project) -> Project:
        self.by_id[project.project_id] = project
        self._next_id = max(self._next_id, project.project_id + 1)
        return project

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self.by_id.get(int(project_id))

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.clients.get(int(client_id))

    def count_numbers_with_prefix(self, prefix: str) -> int:
        return sum(1 for p in self.by_id.values() if p.project_number.startswith(prefix))

    def create(self, *, project_number, project_name, client_id, location, building, apartment_number, description, created_by, created_at) -> int:
        pid = self._next_id
        self._next_id += 1
        self.by_id[pid] = Project(
            project_id=pid,
            project_number=project_number,
            project_name=project_name,
            client_id=client_id,
            location=location,
            building=building,
            apartment_number=apartment_number,
            description=description,
            created_by=created_by,
            updated_by=created_by,
            created_at=created_at,
            updated_at=created_at,
        )
        return pid

    def list(self, filt: ProjectFilter, *, offset: int, limit: int):
        items = list(self.by_id.values())
        if filt.status is not None:
            items = [p for p in items if p.status == filt.status]
        if filt.client_id is not None:
            items = [p for p in items if p.client_id == filt.client_id]
        if filt.assigned_to is not None:
            items = [p for p in items if p.assigned_to == filt.assigned_to]
        if filt.assigned_driver_id is not None:
            items = [p for p in items if p.assigned_driver_id == filt.assigned_driver_id]
        if filt.search:
            needle = filt.search.lower()
            items = [
                p
                for p in items
                if needle in " ".join(
                    [p.project_name, p.description or "", p.location, p.building, p.apartment_number, p.project_number]
                ).lower()
            ]
        items.sort(key=lambda p: (p.created_at or datetime.min, p.project_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def _lose_race(self) -> bool:
        if self.fail_next_write:
            self.fail_next_write = False
            return True
        return False

    def update_fields(self, project_id: int, *, fields: dict, updated_by, updated_at) -> bool:
        p = self.by_id.get(int(project_id))
        if not p:
            return False
        self.by_id[p.project_id] = replace(p, **fields, updated_by=updated_by, updated_at=updated_at)
        return True

    def compare_and_set_state(
        self, project_id: int, *, expected_status, status, progress=None, fields=None, updated_by, updated_at
    ) -> bool:
        p = self.by_id.get(int(project_id))
        if not p or p.status != expected_status or self._lose_race():
            return False
        self.by_id[p.project_id] = replace(
            p,
            **(fields or {}),
            status=status,
            progress=p.progress if progress is None else progress,
            updated_by=updated_by,
            updated_at=updated_at,
        )
        return True

    def set_roster(self, project_id: int, *, expected_status, status, worker_ids, driver_id, updated_by, updated_at) -> bool:
        p = self.by_id.get(int(project_id))
        if not p or p.status != expected_status or self._lose_race():
            return False
        self.by_id[p.project_id] = replace(
            p,
            status=status,
            assigned_worker_ids=tuple(worker_ids),
            assigned_driver_id=driver_id,
            updated_by=updated_by,
            updated_at=updated_at,
        )
        return True

    def delete(self, project_id: int, *, expected_status) -> bool:
        p = self.by_id.get(int(project_id))
        if not p or p.status != expected_status or self._lose_race():
            return False
        del self.by_id[p.project_id]
        return True


class InMemoryComments:
    def __init__(self):
        self.items: list[Comment] = []

    def create(self, *, project_id, user_id, content, action_type, created_at, progress=None) -> int:
        cid = len(self.items) + 1
        self.items.append(
            Comment(
                comment_id=cid,
                project_id=project_id,
                user_id=user_id,
                content=content,
                action_type=action_type,
                created_at=created_at,
                progress=progress,
            )
        )
        return cid

    def list_for_project(self, project_id: int, *, action_type: Optional[CommentAction] = None) -> Sequence[Comment]:
        items = [c for c in self.items if c.project_id == project_id]
        if action_type is not None:
            items = [c for c in items if c.action_type == action_type]
        return sorted(items, key=lambda c: (c.created_at, c.comment_id), reverse=True)


class InMemoryAttendance:
    """Keyed by the natural key, so a second mark updates in place like the unique index."""

    def __init__(self):
        self.by_key: dict[tuple, AttendanceRecord] = {}
        self._next_id = 1

    def upsert(self, *, user_id, project_id, work_date, kind, present, marked_by, now) -> AttendanceRecord:
        key = (int(user_id), project_id, work_date, AttendanceKind(kind))
        existing = self.by_key.get(key)
        if existing:
            rec = replace(existing, present=present, marked_by=marked_by, updated_at=now)
        else:
            rec = AttendanceRecord(
                attendance_id=self._next_id,
                user_id=int(user_id),
                project_id=project_id,
                work_date=work_date,
                kind=AttendanceKind(kind),
                present=present,
                marked_by=marked_by,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
        self.by_key[key] = rec
        return rec

    def query(self, filt: AttendanceFilter) -> Sequence[AttendanceRecord]:
        out = []
        for r in self.by_key.values():
            if filt.subject_id is not None and r.user_id != filt.subject_id:
                continue
            if filt.project_id is not None and r.project_id != filt.project_id:
                continue
            if filt.kind is not None and r.kind != filt.kind:
                continue
            if filt.start is not None and r.work_date < filt.start:
                continue
            if filt.end is not None and r.work_date > filt.end:
                continue
            if filt.present is not None and r.present != filt.present:
                continue
            out.append(r)
        return sorted(out, key=lambda r: (r.work_date, r.user_id))


class InMemoryLaborSource:
    """Builds LaborInputs from the other fakes, the way the MySQL source does in one snapshot."""

    def __init__(self, projects: InMemoryProjects, people: InMemoryPeople, attendance: InMemoryAttendance):
        self._projects = projects
        self._people = people
        self._attendance = attendance

    def _present(self, project_id: int, start: Optional[date], end: Optional[date]):
        return list(
            self._attendance.query(
                AttendanceFilter(project_id=project_id, kind=AttendanceKind.PROJECT, start=start, end=end, present=True)
            )
        )

    def load(self, project_id: int, *, start, end, crew_start, crew_end) -> Optional[LaborInputs]:
        project = self._projects.get_by_id(project_id)
        if not project:
            return None
        roster = list(project.assigned_worker_ids)
        if project.assigned_driver_id is not None:
            roster.append(project.assigned_driver_id)
        return LaborInputs(
            project=project,
            people={p.person_id: p for p in self._people.get_many(roster)},
            worker_records=self._present(project.project_id, start, end),
            crew_records=self._present(project.project_id, crew_start, crew_end),
        )


class InMemoryExpenses:
    def __init__(self):
        self.by_id: dict[int, Expense] = {}
        self._next_id = 1

    def create(self, *, project_id, materials, total_material_cost, labor: LaborSnapshot, created_by, now) -> int:
        eid = self._next_id
        self._next_id += 1
        self.by_id[eid] = Expense(
            expense_id=eid,
            project_id=project_id,
            materials=tuple(replace(m, item_id=i) for i, m in enumerate(materials, start=1)),
            total_material_cost=total_material_cost,
            labor=labor,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        return eid

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        return self.by_id.get(int(expense_id))

    def _for_project(self, project_id: int) -> list[Expense]:
        items = [e for e in self.by_id.values() if e.project_id == project_id]
        return sorted(items, key=lambda e: (e.created_at, e.expense_id), reverse=True)

    def list_for_project(self, project_id: int, *, offset: int, limit: int):
        items = self._for_project(project_id)
        return items[offset : offset + limit], len(items)

    def list_all_for_project(self, project_id: int) -> Sequence[Expense]:
        return self._for_project(project_id)

    def replace_lines(self, expense_id: int, *, materials: Sequence[MaterialItem], total_material_cost, labor, now) -> bool:
        e = self.by_id.get(int(expense_id))
        if not e:
            return False
        self.by_id[e.expense_id] = replace(
            e,
            materials=tuple(materials),
            total_material_cost=total_material_cost,
            labor=labor,
            updated_at=now,
        )
        return True

    def delete(self, expense_id: int) -> bool:
        return self.by_id.pop(int(expense_id), None) is not None


class RecordingSender:
    def __init__(self, *, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    def send(self, *, to, subject, text, bcc=()) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append({"to": list(to), "subject": subject, "text": text, "bcc": list(bcc)})


def draft_project(project_id: int = 1, *, status: ProjectStatus = ProjectStatus.DRAFT, **kw) -> Project:
    values = dict(
        project_id=project_id,
        project_number=f"PRJ-202601-{project_id:04d}",
        project_name=f"Tower {project_id}",
        client_id=1,
        location="Dubai Marina",
        building="Block A",
        apartment_number="1203",
        status=status,
        created_at=datetime(2026, 1, 1, 8, 0),
    )
    values.update(kw)
    return Project(**values)

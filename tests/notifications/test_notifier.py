from __future__ import annotations

from src.fieldops.fieldops.core.enums import Role
from src.fieldops.fieldops.notifications import sender as sender_module
from src.fieldops.fieldops.notifications.sender import SmtpNotificationSender, SmtpSettings
from src.fieldops.fieldops.notifications.service import ProjectNotifier
from src.fieldops.fieldops.projects.model import Client
from tests.fakes import RecordingSender, draft_project, person


def test_progress_mail_goes_to_inbox_with_recipients_in_bcc():
    sender = RecordingSender()
    notifier = ProjectNotifier(sender, base_url="https://ops.example/", inbox="ops@example.com")

    ok = notifier.progress_updated(
        draft_project(7),
        progress=40,
        comment="Walls primed",
        client=Client(client_id=1, client_name="HV", email="client@example.com"),
        engineer=person(2, Role.ENGINEER, email="eng@example.com"),
        admins=[person(1, Role.ADMIN, email="eng@example.com")],
    )

    assert ok is True
    [mail] = sender.sent
    assert mail["to"] == ["ops@example.com"]
    assert mail["bcc"] == ["client@example.com", "eng@example.com"]
    assert "https://ops.example/app/project-view/7" in mail["text"]
    assert "Walls primed" in mail["text"]


def test_failures_and_empty_recipients_return_false():
    failing = ProjectNotifier(RecordingSender(fail=True))
    assert failing.team_assigned(draft_project(7), members=[person(10, Role.WORKER)], admins=[]) is False

    quiet = ProjectNotifier(RecordingSender())
    assert quiet.progress_updated(draft_project(7), progress=5, comment=None, client=None, engineer=None, admins=[]) is False


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg, to_addrs=None):
        self.sent.append((msg, to_addrs))


def test_smtp_sender_keeps_bcc_out_of_headers(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(sender_module.smtplib, "SMTP_SSL", FakeSMTP)
    smtp = SmtpNotificationSender(
        SmtpSettings(host="smtp.example", port=465, user="bot", password="pw", mail_from="bot@example.com")
    )

    smtp.send(to=["ops@example.com"], subject="Hi", text="body", bcc=["hidden@example.com"])

    [server] = FakeSMTP.instances
    assert server.logged_in == ("bot", "pw")
    [(msg, to_addrs)] = server.sent
    assert to_addrs == ["ops@example.com", "hidden@example.com"]
    assert msg["Bcc"] is None
    assert msg["To"] == "ops@example.com"

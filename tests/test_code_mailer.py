import pytest

from conftest import FakeSMTP, RejectingSMTP
from learnhub.auth import code_mailer as mailer_module
from learnhub.auth.code_mailer import CodeMailer


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def configured_mailer(**kwargs) -> CodeMailer:
    options = dict(host="smtp.test", port=2525, user="bot@learnhub.dev", password="secret")
    options.update(kwargs)
    return CodeMailer(**options)


def test_disabled_without_credentials(fake_smtp):
    mailer = CodeMailer(user=None, password=None)
    assert not mailer.enabled
    assert mailer.send_login_code("jane@student.com", "123456") is False
    assert fake_smtp.instances == []


def test_sends_code_over_tls(fake_smtp):
    assert configured_mailer().send_login_code("jane@student.com", "123456") is True

    smtp = fake_smtp.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.test", 2525)
    assert smtp.started_tls
    assert smtp.logged_in_as == "bot@learnhub.dev"

    message = smtp.sent[0]
    assert message["To"] == "jane@student.com"
    assert "bot@learnhub.dev" in message["From"]
    assert "123456" in message.get_body(preferencelist=("plain",)).get_content()


def test_plain_connection_when_tls_off(fake_smtp):
    configured_mailer(use_tls=False).send_login_code("jane@student.com", "123456")
    assert not fake_smtp.instances[0].started_tls


def test_smtp_failure_reports_not_delivered(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", RejectingSMTP)
    assert configured_mailer().send_login_code("jane@student.com", "123456") is False

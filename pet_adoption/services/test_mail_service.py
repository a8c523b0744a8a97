# pet_adoption/services/test_mail_service.py
import pytest
from flask import Flask

from pet_adoption.services import mail_service
from pet_adoption.services.mail_service import MailService


def _service(**config):
    app = Flask(__name__)
    app.config.update(config)
    service = MailService()
    service.init_app(app)
    return service


class FakeSMTP:
    sent = []

    def __init__(self, server, port, timeout=None):
        self.server = server
        self.port = port
        self.logged_in = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        self.logged_in = username

    def sendmail(self, sender, recipients, body):
        FakeSMTP.sent.append({'from': sender, 'to': recipients, 'body': body, 'user': self.logged_in})


def test_suppressed_mail_goes_to_outbox():
    service = _service(MAIL_SUPPRESS_SEND=True)
    service.send_password_reset('ana@example.com', 'Ana', 'http://frontend.test/reset-password/abc', 30)

    assert len(service.outbox) == 1
    mail = service.outbox[0]
    assert mail['to'] == 'ana@example.com'
    assert 'http://frontend.test/reset-password/abc' in mail['body']
    assert '30 minutos' in mail['body']


def test_send_without_server_fails():
    with pytest.raises(RuntimeError):
        _service(MAIL_SERVER=None).send('ana@example.com', 'Asunto', 'Cuerpo')


def test_send_over_smtp(monkeypatch):
    FakeSMTP.sent = []
    monkeypatch.setattr(mail_service.smtplib, 'SMTP', FakeSMTP)
    service = _service(MAIL_SERVER='smtp.example.com', MAIL_USERNAME='refugio@example.com', MAIL_PASSWORD='x')

    service.send('ana@example.com', 'Recuperación de contraseña', 'Hola')

    assert len(FakeSMTP.sent) == 1
    assert FakeSMTP.sent[0]['from'] == 'refugio@example.com'
    assert FakeSMTP.sent[0]['to'] == ['ana@example.com']
    assert FakeSMTP.sent[0]['user'] == 'refugio@example.com'

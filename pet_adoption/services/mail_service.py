# pet_adoption/services/mail_service.py
import smtplib
import logging
from email.mime.text import MIMEText
from typing import Any, Dict, List
from flask import Flask


class MailService:
    """
    Envío de correos por SMTP (recuperación de contraseña).
    Con MAIL_SUPPRESS_SEND activo los mensajes se guardan en 'outbox' y no salen del proceso.
    """

    def __init__(self):
        self.config: Dict[str, Any] = {}
        self.outbox: List[Dict[str, str]] = []

    def init_app(self, app: Flask):
        self.config = {
            'server': app.config.get('MAIL_SERVER'),
            'port': app.config.get('MAIL_PORT', 587),
            'username': app.config.get('MAIL_USERNAME'),
            'password': app.config.get('MAIL_PASSWORD'),
            'use_tls': app.config.get('MAIL_USE_TLS', True),
            'sender': app.config.get('MAIL_DEFAULT_SENDER') or app.config.get('MAIL_USERNAME'),
            'suppress': app.config.get('MAIL_SUPPRESS_SEND', False),
        }
        if not self.config['suppress'] and not self.config['server']:
            logging.warning("MailService: MAIL_SERVER no configurado; el envío de correos fallará.")

    def send(self, to_email: str, subject: str, body: str) -> None:
        """
        Envía un correo de texto plano en UTF-8.

        :raises RuntimeError: si SMTP no está configurado
        :raises smtplib.SMTPException: si el servidor rechaza el envío
        """
        if self.config.get('suppress'):
            self.outbox.append({'to': to_email, 'subject': subject, 'body': body})
            logging.info(f"Correo suprimido (modo pruebas) para {to_email}: {subject}")
            return

        if not self.config.get('server'):
            raise RuntimeError("SMTP no configurado (MAIL_SERVER).")

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.config['sender']
        msg["To"] = to_email

        with smtplib.SMTP(self.config['server'], self.config['port'], timeout=10) as smtp:
            if self.config['use_tls']:
                smtp.starttls()
            if self.config['username']:
                smtp.login(self.config['username'], self.config['password'])
            smtp.sendmail(self.config['sender'], [to_email], msg.as_string())
        logging.info(f"Correo enviado a {to_email}: {subject}")

    def send_password_reset(self, to_email: str, nombre: str, link: str, expires_minutes: int = 60) -> None:
        body = (
            f"Hola {nombre or ''},\n\n"
            "Recibimos una solicitud para restablecer tu contraseña.\n"
            f"Puedes crear una nueva desde este enlace:\n\n{link}\n\n"
            f"El enlace caduca en {expires_minutes} minutos. Si no lo pediste, ignora este mensaje.\n"
        )
        self.send(to_email, "Recuperación de contraseña", body)

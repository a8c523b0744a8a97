# pet_adoption/api/auth/services.py
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional, Set, Tuple

from pet_adoption.api.users.services import UserService
from pet_adoption.core.security import issue_access_token
from pet_adoption.models.user import User, UserRole
from pet_adoption.services.mail_service import MailService
from pet_adoption.utils.datetime_utils import DateTimeUtils


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


class AuthService:
    """
    Registro, inicio y cierre de sesión y recuperación de contraseña.

    Los tokens revocados (logout) se guardan en un conjunto en memoria del proceso:
    se pierden al reiniciar y no se comparten entre procesos.
    """

    def __init__(self, user_service: UserService, mail_service: MailService,
                 frontend_url: str, reset_token_expires: timedelta):
        self.user_service = user_service
        self.mail_service = mail_service
        self.frontend_url = frontend_url.rstrip('/')
        self.reset_token_expires = reset_token_expires
        self._revoked_jtis: Set[str] = set()

    # --- Revocación de tokens ---
    def revoke_token(self, jwt_payload: dict) -> None:
        self._revoked_jtis.add(jwt_payload['jti'])
        logging.info(f"Token revocado. JTI: {jwt_payload['jti'][:8]}...")

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        return jwt_payload.get('jti') in self._revoked_jtis

    # --- Registro e inicio de sesión ---
    def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """El registro público siempre crea cuentas con rol 'usuario'."""
        return self.user_service.create_user(data, rol=UserRole.USUARIO.value)

    def login(self, email: str, password: str) -> Tuple[str, User]:
        """
        Comprueba credenciales y emite un token de acceso.

        :raises LookupError: email desconocido
        :raises PermissionError: cuenta borrada o desactivada
        :raises ValueError: contraseña incorrecta
        """
        data = self.user_service.find_by_email(email)
        if not data:
            raise LookupError("Usuario no encontrado")

        user = User.from_dict(data)
        if user.is_blocked:
            raise PermissionError("Cuenta desactivada o eliminada")
        if not self.user_service.password_matches(data, password):
            raise ValueError("Contraseña incorrecta")

        logging.info(f"Inicio de sesión: {user.id}")
        return issue_access_token(user), user

    # --- Contraseñas ---
    def request_password_reset(self, email: str) -> None:
        """
        Genera un token de un solo uso, guarda su hash con caducidad y envía el enlace por correo.

        :raises LookupError: email desconocido
        """
        user = self.user_service.require_by_email(email)

        token = secrets.token_urlsafe(32)
        expires_at = DateTimeUtils.now() + self.reset_token_expires
        self.user_service.set_reset_token(user['id'], hash_reset_token(token), expires_at)

        link = f"{self.frontend_url}/reset-password/{token}"
        minutes = int(self.reset_token_expires.total_seconds() // 60)
        self.mail_service.send_password_reset(user['email'], user.get('nombre'), link, expires_minutes=minutes)
        logging.info(f"Enlace de recuperación enviado al usuario {user['id']}")

    def reset_password(self, token: str, new_password: str) -> None:
        user = self.user_service.find_by_reset_token(hash_reset_token(token))
        if not user:
            raise ValueError("Token inválido o expirado")
        self.user_service.set_password(user['id'], new_password)
        logging.info(f"Contraseña restablecida para el usuario {user['id']}")

    def change_password(self, user_id: str, new_password: str) -> None:
        self.user_service.set_password(user_id, new_password)

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.user_service.get_user(user_id)

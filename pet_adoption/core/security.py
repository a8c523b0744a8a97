# pet_adoption/core/security.py
import logging
from functools import wraps
from typing import Optional
from flask import Flask, g, jsonify, current_app
from flask_jwt_extended import (
    JWTManager,
    create_access_token,
    verify_jwt_in_request,
    get_current_user
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from pet_adoption.models.user import User

# Al menos 8 caracteres con minúscula, mayúscula, número y un símbolo de @$!%*?&._-
PASSWORD_REGEX = r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&._-])[A-Za-z\d@$!%*?&._-]{8,}$'
PASSWORD_POLICY_MSG = (
    "La contraseña debe tener al menos 8 caracteres e incluir mayúscula, minúscula, "
    "número y un símbolo (@$!%*?&._-)."
)

jwt = JWTManager()


def _auth_error(error_code: str, msg: str, status: int = 401):
    return jsonify({"error_code": error_code, "msg": msg}), status


def init_jwt(app: Flask):
    """Registra JWTManager y los callbacks de verificación en la app."""
    jwt.init_app(app)


@jwt.token_in_blocklist_loader
def check_if_token_revoked(jwt_header, jwt_payload: dict) -> bool:
    return current_app.services['auth'].is_token_revoked(jwt_payload)


@jwt.user_lookup_loader
def load_user_from_token(jwt_header, jwt_payload: dict) -> Optional[User]:
    # None hace que flask-jwt-extended responda con user_lookup_error_loader
    return current_app.services['users'].get_user_model(jwt_payload['sub'])


@jwt.unauthorized_loader
def missing_token_callback(reason: str):
    return _auth_error("TOKEN_MISSING", "No token, autorización denegada")


@jwt.invalid_token_loader
def invalid_token_callback(reason: str):
    logging.warning(f"Token inválido: {reason}")
    return _auth_error("TOKEN_INVALID", "Token inválido o expirado")


@jwt.expired_token_loader
def expired_token_callback(jwt_header, jwt_payload: dict):
    return _auth_error("TOKEN_EXPIRED", "Token inválido o expirado")


@jwt.revoked_token_loader
def revoked_token_callback(jwt_header, jwt_payload: dict):
    return _auth_error("TOKEN_REVOKED", "La sesión fue cerrada. Inicia sesión de nuevo.")


@jwt.user_lookup_error_loader
def user_lookup_error_callback(jwt_header, jwt_payload: dict):
    return _auth_error("USER_NOT_FOUND", "El usuario del token ya no existe")


def issue_access_token(user: User) -> str:
    """Token de acceso con el id de usuario como identidad y los datos que decodifica el frontend."""
    return create_access_token(
        identity=user.id,
        additional_claims={"id": user.id, "rol": user.rol.value, "nombre": user.nombre}
    )


def current_user() -> Optional[User]:
    """Usuario autenticado de la petición actual, o None en rutas con login opcional."""
    return get_current_user()


def is_owner_or_admin(user: Optional[User], owner_id: Optional[str]) -> bool:
    if user is None:
        return False
    return user.is_admin or (owner_id is not None and owner_id == user.id)


def _blocked_response():
    return _auth_error("ACCOUNT_DISABLED", "Cuenta desactivada o eliminada", 403)


def login_required(fn):
    """Exige un token válido de una cuenta activa (los admin nunca quedan bloqueados)."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = get_current_user()
        if user.is_blocked and not user.is_admin:
            return _blocked_response()
        return fn(*args, **kwargs)
    return wrapper


def optional_login(fn):
    """
    El token es opcional. Un token que no supera la verificación o una cuenta
    bloqueada se tratan como petición anónima.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            verify_jwt_in_request(optional=True)
        except (JWTExtendedException, PyJWTError) as e:
            logging.info(f"Token ignorado en ruta pública: {e.__class__.__name__}")
            g.anonymous_request = True
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = get_current_user()
        if not user.is_admin:
            return _auth_error("FORBIDDEN", "Acceso restringido", 403)
        return fn(*args, **kwargs)
    return wrapper


def admin_or_self_required(fn):
    """Admin, o el propio usuario cuando la ruta recibe su 'user_id'."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        user = get_current_user()
        if user.is_blocked and not user.is_admin:
            return _blocked_response()
        if not (user.is_admin or kwargs.get('user_id') == user.id):
            return _auth_error("FORBIDDEN", "Acceso restringido", 403)
        return fn(*args, **kwargs)
    return wrapper


def active_user_or_none() -> Optional[User]:
    """Para rutas con login opcional: el usuario sólo cuenta si su cuenta está activa."""
    if g.get('anonymous_request'):
        return None
    user = get_current_user()
    if user is None or (user.is_blocked and not user.is_admin):
        return None
    return user

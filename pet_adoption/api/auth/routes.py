# pet_adoption/api/auth/routes.py

import logging
import smtplib
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from pet_adoption.api.users.schemas import UserResponseSchema
from pet_adoption.core.security import login_required, current_user
from pet_adoption.utils.request_utils import get_payload
from .schemas import (
    RegisterSchema,
    LoginSchema,
    ForgotPasswordSchema,
    ResetPasswordSchema,
    ChangePasswordSchema,
    ProfileUpdateSchema,
    LoginUserSchema
)

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Registro público. El rol siempre es 'usuario'."""
    auth_service = current_app.services['auth']
    try:
        data = RegisterSchema().load(get_payload())
        usuario = auth_service.register(data)
        return jsonify({"msg": "Usuario creado correctamente", "usuario": UserResponseSchema().dump(usuario)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Nombre, email y contraseña son obligatorios",
                        "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "USER_EXISTS", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error en el registro: {e}", exc_info=True)
        return jsonify({"error_code": "REGISTER_FAILED", "msg": "Error al crear usuario"}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(get_payload())
        token, user = auth_service.login(data['email'], data['contrasena'])
        return jsonify({
            "msg": "Inicio de sesión exitoso",
            "token": token,
            "user": LoginUserSchema().dump(user)
        }), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Email y contraseña son obligatorios",
                        "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except PermissionError as e:
        return jsonify({"error_code": "ACCOUNT_DISABLED", "msg": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "INVALID_CREDENTIALS", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error en el inicio de sesión: {e}", exc_info=True)
        return jsonify({"error_code": "LOGIN_FAILED", "msg": "Error en el servidor"}), 500


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Revoca el token presentado; las siguientes peticiones con él reciben 401."""
    current_app.services['auth'].revoke_token(get_jwt())
    return jsonify({"msg": "Sesión cerrada correctamente"}), 200


@auth_bp.route('/recuperar-password', methods=['POST'])
def forgot_password():
    auth_service = current_app.services['auth']
    try:
        data = ForgotPasswordSchema().load(get_payload())
        auth_service.request_password_reset(data['email'])
        return jsonify({"msg": "Te enviamos un correo con el enlace para restablecer tu contraseña"}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Email no válido", "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except (smtplib.SMTPException, OSError, RuntimeError) as e:
        logging.error(f"Fallo al enviar el correo de recuperación: {e}", exc_info=True)
        return jsonify({"error_code": "MAIL_SEND_FAILED", "msg": "No se pudo enviar el correo de recuperación"}), 500
    except Exception as e:
        logging.error(f"Error en la recuperación de contraseña: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "msg": "Error en el servidor"}), 500


@auth_bp.route('/restablecer-password/<string:token>', methods=['POST'])
def reset_password(token: str):
    auth_service = current_app.services['auth']
    try:
        data = ResetPasswordSchema().load(get_payload())
        auth_service.reset_password(token, data['nuevaContrasena'])
        return jsonify({"msg": "Contraseña restablecida correctamente"}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Contraseña no válida", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_RESET_TOKEN", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al restablecer la contraseña: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "msg": "Error en el servidor"}), 500


@auth_bp.route('/cambiar-password', methods=['PATCH'])
@login_required
def change_password():
    auth_service = current_app.services['auth']
    user = current_user()
    try:
        data = ChangePasswordSchema().load(get_payload())
        auth_service.change_password(user.id, data['nuevaPassword'])
        return jsonify({"msg": "Contraseña actualizada correctamente"}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Contraseña no válida", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Error al cambiar la contraseña (user_id: {user.id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "msg": "Error en el servidor"}), 500


@auth_bp.route('/perfil', methods=['GET'])
@login_required
def get_profile():
    usuario = current_app.services['auth'].get_profile(current_user().id)
    return jsonify({"usuario": UserResponseSchema().dump(usuario)}), 200


@auth_bp.route('/perfil', methods=['PATCH'])
@login_required
def update_profile():
    """Datos básicos del perfil y, opcionalmente, la foto ('fotoPerfil' en multipart)."""
    user_service = current_app.services['users']
    storage_service = current_app.services['storage']
    user = current_user()
    try:
        changes = ProfileUpdateSchema().load(get_payload())
        photo_path = storage_service.save_optional(request.files, 'fotoPerfil')
        try:
            usuario = user_service.update_profile(user.id, changes, photo_path)
        except Exception:
            storage_service.discard(photo_path)
            raise
        return jsonify({"msg": "Perfil actualizado", "usuario": UserResponseSchema().dump(usuario)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "msg": str(e)}), 400
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"Error al actualizar el perfil (user_id: {user.id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "msg": "Error al actualizar el perfil"}), 500

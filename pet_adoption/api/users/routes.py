# pet_adoption/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from pet_adoption.core.security import (
    admin_required,
    admin_or_self_required,
    current_user
)
from pet_adoption.utils.pagination import parse_page
from pet_adoption.utils.request_utils import get_payload, query_flag
from .schemas import (
    UserCreateSchema,
    UserUpdateSchema,
    UserFilterSchema,
    UserResponseSchema,
    UserOptionSchema
)

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/', methods=['GET'])
@admin_required
def list_users():
    """[Admin] Listado paginado con filtros por nombre, apellido, email y rol."""
    user_service = current_app.services['users']
    try:
        filters = UserFilterSchema().load(request.args.to_dict())
        result = user_service.list_users(
            filters,
            page=parse_page(request.args.get('page')),
            include_inactive=query_flag('inactivas')
        )
        result['docs'] = UserResponseSchema(many=True).dump(result['docs'])
        return jsonify(result), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Filtros no válidos", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Error al listar usuarios: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener los usuarios"}), 500


@users_bp.route('/all', methods=['GET'])
@admin_required
def list_user_options():
    """[Admin] Todos los usuarios no borrados, ordenados por nombre, para selectores."""
    user_service = current_app.services['users']
    try:
        return jsonify(UserOptionSchema(many=True).dump(user_service.list_for_select())), 200
    except Exception as e:
        logging.error(f"Error al listar usuarios para selector: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener los usuarios"}), 500


@users_bp.route('/<string:user_id>', methods=['GET'])
@admin_or_self_required
def get_user(user_id: str):
    user_service = current_app.services['users']
    try:
        user = user_service.get_visible_user(user_id, current_user())
        return jsonify(UserResponseSchema().dump(user)), 200
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al obtener el usuario (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener el usuario"}), 500


@users_bp.route('/', methods=['POST'])
@admin_required
def create_user():
    """[Admin] Alta de usuario con rol a elección."""
    user_service = current_app.services['users']
    try:
        data = UserCreateSchema().load(get_payload())
        usuario = user_service.create_user(data, rol=data['rol'])
        return jsonify({"msg": "Usuario creado correctamente", "usuario": UserResponseSchema().dump(usuario)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "USER_EXISTS", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al crear usuario: {e}", exc_info=True)
        return jsonify({"error_code": "CREATE_FAILED", "msg": "Error al crear usuario"}), 500


@users_bp.route('/<string:user_id>', methods=['PATCH'])
@admin_or_self_required
def update_user(user_id: str):
    """Admin o el propio usuario. Solo un admin puede tocar 'rol' y 'activo'."""
    user_service = current_app.services['users']
    try:
        changes = UserUpdateSchema().load(get_payload())
        usuario = user_service.update_user(user_id, changes, current_user())
        return jsonify({"msg": "Usuario actualizado", "usuario": UserResponseSchema().dump(usuario)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "UPDATE_REJECTED", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al actualizar usuario (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "msg": "Error al actualizar usuario"}), 500


@users_bp.route('/<string:user_id>', methods=['DELETE'])
@admin_or_self_required
def delete_user(user_id: str):
    """Borrado lógico: la cuenta queda borrada e inactiva."""
    user_service = current_app.services['users']
    try:
        user_service.soft_delete_user(user_id)
        return jsonify({"msg": "Usuario eliminado correctamente"}), 200
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al eliminar usuario (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "msg": "Error al eliminar usuario"}), 500


@users_bp.route('/restore/<string:user_id>', methods=['PATCH'])
@admin_required
def restore_user(user_id: str):
    user_service = current_app.services['users']
    try:
        usuario = user_service.restore_user(user_id)
        return jsonify({"msg": "Usuario restaurado correctamente", "usuario": UserResponseSchema().dump(usuario)}), 200
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al restaurar usuario (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RESTORE_FAILED", "msg": "Error al restaurar usuario"}), 500

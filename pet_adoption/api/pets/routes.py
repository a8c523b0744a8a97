# pet_adoption/api/pets/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from pet_adoption.core.security import (
    login_required,
    optional_login,
    current_user,
    active_user_or_none
)
from pet_adoption.utils.pagination import parse_page
from pet_adoption.utils.request_utils import get_payload, query_flag
from .schemas import (
    PetCreateSchema,
    PetUpdateSchema,
    PetFilterSchema,
    PetResponseSchema
)

pets_bp = Blueprint('pets_bp', __name__)


@pets_bp.route('/', methods=['GET'])
@optional_login
def list_pets():
    """Listado público paginado. 'borradas=true' solo tiene efecto para un admin."""
    pet_service = current_app.services['pets']
    actor = active_user_or_none()
    try:
        filters = PetFilterSchema().load(request.args.to_dict())
        include_deleted = query_flag('borradas') and actor is not None and actor.is_admin
        result = pet_service.list_pets(filters, parse_page(request.args.get('page')), include_deleted)
        result['docs'] = PetResponseSchema(many=True).dump(result['docs'])
        return jsonify(result), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Filtros no válidos", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Error al listar mascotas: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener las mascotas"}), 500


@pets_bp.route('/mis-publicaciones', methods=['GET'])
@login_required
def list_my_pets():
    pet_service = current_app.services['pets']
    try:
        result = pet_service.list_user_pets(current_user().id, parse_page(request.args.get('page')))
        result['docs'] = PetResponseSchema(many=True).dump(result['docs'])
        return jsonify(result), 200
    except Exception as e:
        logging.error(f"Error al listar mis publicaciones: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener las mascotas"}), 500


@pets_bp.route('/<string:pet_id>', methods=['GET'])
@optional_login
def get_pet(pet_id: str):
    pet_service = current_app.services['pets']
    try:
        pet = pet_service.get_visible_pet(pet_id, active_user_or_none())
        return jsonify(PetResponseSchema().dump(pet)), 200
    except LookupError as e:
        return jsonify({"error_code": "PET_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al obtener la mascota (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener la mascota"}), 500


@pets_bp.route('/', methods=['POST'])
@login_required
def create_pet():
    """Publica una mascota. Acepta JSON o multipart con la foto en 'foto'."""
    pet_service = current_app.services['pets']
    storage_service = current_app.services['storage']
    try:
        data = PetCreateSchema().load(get_payload())
        photo_path = storage_service.save_optional(request.files, 'foto')
        try:
            pet = pet_service.create_pet(data, current_user(), photo_path)
        except Exception:
            storage_service.discard(photo_path)
            raise
        return jsonify(PetResponseSchema().dump(pet)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos de la mascota no válidos",
                        "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_FILE", "msg": str(e)}), 400
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"Error al crear mascota: {e}", exc_info=True)
        return jsonify({"error_code": "CREATE_FAILED", "msg": "Error al crear mascota"}), 500


@pets_bp.route('/<string:pet_id>', methods=['PATCH'])
@login_required
def update_pet(pet_id: str):
    """[Dueño o admin] Actualización parcial; una foto nueva se añade a 'fotos'."""
    pet_service = current_app.services['pets']
    storage_service = current_app.services['storage']
    try:
        changes = PetUpdateSchema().load(get_payload())
        pet_service.get_writable_pet(pet_id, current_user())
        photo_path = storage_service.save_optional(request.files, 'foto')
        try:
            pet = pet_service.update_pet(pet_id, changes, current_user(), photo_path)
        except Exception:
            storage_service.discard(photo_path)
            raise
        return jsonify(PetResponseSchema().dump(pet)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos de la mascota no válidos",
                        "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "msg": str(e)}), 400
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"Error al actualizar la mascota (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "msg": "Error al actualizar la mascota"}), 500


@pets_bp.route('/<string:pet_id>', methods=['DELETE'])
@login_required
def delete_pet(pet_id: str):
    pet_service = current_app.services['pets']
    try:
        pet_service.soft_delete_pet(pet_id, current_user())
        return jsonify({"msg": "Mascota eliminada correctamente"}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "PET_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al eliminar la mascota (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "msg": "Error al eliminar la mascota"}), 500


@pets_bp.route('/restore/<string:pet_id>', methods=['PATCH'])
@login_required
def restore_pet(pet_id: str):
    pet_service = current_app.services['pets']
    try:
        pet = pet_service.restore_pet(pet_id, current_user())
        return jsonify({"msg": "Mascota restaurada correctamente", "mascota": PetResponseSchema().dump(pet)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "PET_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al restaurar la mascota (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RESTORE_FAILED", "msg": "Error al restaurar la mascota"}), 500

# pet_adoption/api/adoptions/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from pet_adoption.core.security import login_required, current_user
from pet_adoption.utils.pagination import parse_page
from pet_adoption.utils.request_utils import get_payload, query_flag
from .schemas import (
    AdoptionCreateSchema,
    AdoptionUpdateSchema,
    AdoptionFilterSchema,
    AdoptionResponseSchema
)

adoptions_bp = Blueprint('adoptions_bp', __name__)


@adoptions_bp.route('/', methods=['GET'])
@login_required
def list_adoptions():
    adoption_service = current_app.services['adoptions']
    actor = current_user()
    try:
        filters = AdoptionFilterSchema().load(request.args.to_dict())
        result = adoption_service.list_adoptions(
            actor, filters,
            page=parse_page(request.args.get('page')),
            include_deleted=query_flag('borradas') and actor.is_admin
        )
        result['docs'] = AdoptionResponseSchema(many=True).dump(result['docs'])
        return jsonify(result), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Filtros no válidos", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Error al listar adopciones: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener las adopciones"}), 500


@adoptions_bp.route('/<string:adoption_id>', methods=['GET'])
@login_required
def get_adoption(adoption_id: str):
    adoption_service = current_app.services['adoptions']
    try:
        adoption = adoption_service.get_adoption(adoption_id, current_user())
        return jsonify(AdoptionResponseSchema().dump(adoption)), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "ADOPTION_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al obtener la solicitud (adoption_id: {adoption_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener la solicitud"}), 500


@adoptions_bp.route('/', methods=['POST'])
@login_required
def create_adoption():
    adoption_service = current_app.services['adoptions']
    try:
        data = AdoptionCreateSchema().load(get_payload())
        adoption = adoption_service.create_adoption(data, current_user())
        return jsonify(AdoptionResponseSchema().dump(adoption)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Debe incluir id_mascota y mensaje",
                        "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "ADOPTION_REJECTED", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al registrar la adopción: {e}", exc_info=True)
        return jsonify({"error_code": "CREATE_FAILED", "msg": "Error al registrar la adopción"}), 500


@adoptions_bp.route('/<string:adoption_id>', methods=['PATCH'])
@login_required
def update_adoption(adoption_id: str):
    adoption_service = current_app.services['adoptions']
    try:
        changes = AdoptionUpdateSchema().load(get_payload())
        adoption = adoption_service.update_adoption(adoption_id, changes, current_user())
        return jsonify(AdoptionResponseSchema().dump(adoption)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "ADOPTION_NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al actualizar la adopción (adoption_id: {adoption_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "msg": "Error al actualizar la adopción"}), 500


@adoptions_bp.route('/<string:adoption_id>', methods=['DELETE'])
@login_required
def delete_adoption(adoption_id: str):
    adoption_service = current_app.services['adoptions']
    try:
        adoption_service.soft_delete_adoption(adoption_id, current_user())
        return jsonify({"msg": "Solicitud eliminada correctamente"}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "ADOPTION_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al eliminar la solicitud (adoption_id: {adoption_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "msg": "Error al eliminar la solicitud"}), 500


@adoptions_bp.route('/restore/<string:adoption_id>', methods=['PATCH'])
@login_required
def restore_adoption(adoption_id: str):
    adoption_service = current_app.services['adoptions']
    try:
        adoption = adoption_service.restore_adoption(adoption_id, current_user())
        return jsonify({"msg": "Solicitud restaurada correctamente",
                        "adopcion": AdoptionResponseSchema().dump(adoption)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "ADOPTION_NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "ADOPTION_REJECTED", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al restaurar la solicitud (adoption_id: {adoption_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RESTORE_FAILED", "msg": "Error al restaurar la solicitud"}), 500

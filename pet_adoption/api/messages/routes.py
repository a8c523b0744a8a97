# pet_adoption/api/messages/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from pet_adoption.core.security import login_required, current_user
from pet_adoption.utils.pagination import parse_page
from pet_adoption.utils.request_utils import get_payload, query_flag
from .schemas import (
    MessageCreateSchema,
    MessageUpdateSchema,
    MessageFilterSchema,
    MessageResponseSchema,
    REQUIRED_MSG
)

messages_bp = Blueprint('messages_bp', __name__)


@messages_bp.route('/', methods=['GET'])
@login_required
def list_messages():
    """Un admin ve todos los mensajes; el resto solo los suyos."""
    message_service = current_app.services['messages']
    actor = current_user()
    try:
        filters = MessageFilterSchema().load(request.args.to_dict())
        result = message_service.list_messages(
            actor, filters,
            page=parse_page(request.args.get('page')),
            include_deleted=query_flag('borradas') and actor.is_admin
        )
        result['docs'] = MessageResponseSchema(many=True).dump(result['docs'])
        return jsonify(result), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Filtros no válidos", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Error al listar mensajes: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener los mensajes"}), 500


@messages_bp.route('/<string:message_id>', methods=['GET'])
@login_required
def get_message(message_id: str):
    message_service = current_app.services['messages']
    try:
        message = message_service.get_message(message_id, current_user())
        return jsonify(MessageResponseSchema().dump(message)), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "MESSAGE_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al obtener el mensaje (message_id: {message_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "msg": "Error al obtener el mensaje"}), 500


@messages_bp.route('/', methods=['POST'])
@login_required
def create_message():
    message_service = current_app.services['messages']
    try:
        data = MessageCreateSchema().load(get_payload())
        message = message_service.create_message(data, current_user())
        return jsonify(MessageResponseSchema().dump(message)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": REQUIRED_MSG, "details": err.messages}), 400
    except LookupError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al enviar el mensaje: {e}", exc_info=True)
        return jsonify({"error_code": "CREATE_FAILED", "msg": "Error al enviar el mensaje"}), 500


@messages_bp.route('/<string:message_id>', methods=['PATCH'])
@login_required
def update_message(message_id: str):
    message_service = current_app.services['messages']
    try:
        changes = MessageUpdateSchema().load(get_payload())
        message = message_service.update_message(message_id, changes, current_user())
        return jsonify(MessageResponseSchema().dump(message)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "MESSAGE_NOT_FOUND", "msg": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_PAYLOAD", "msg": str(e)}), 400
    except Exception as e:
        logging.error(f"Error al actualizar el mensaje (message_id: {message_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "msg": "Error al actualizar el mensaje"}), 500


@messages_bp.route('/<string:message_id>', methods=['DELETE'])
@login_required
def delete_message(message_id: str):
    message_service = current_app.services['messages']
    try:
        message_service.soft_delete_message(message_id, current_user())
        return jsonify({"msg": "Mensaje eliminado correctamente"}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "MESSAGE_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al eliminar el mensaje (message_id: {message_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "msg": "Error al eliminar el mensaje"}), 500


@messages_bp.route('/restore/<string:message_id>', methods=['PATCH'])
@login_required
def restore_message(message_id: str):
    message_service = current_app.services['messages']
    try:
        message = message_service.restore_message(message_id, current_user())
        return jsonify({"msg": "Mensaje restaurado correctamente",
                        "mensaje": MessageResponseSchema().dump(message)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "msg": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "MESSAGE_NOT_FOUND", "msg": str(e)}), 404
    except Exception as e:
        logging.error(f"Error al restaurar el mensaje (message_id: {message_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RESTORE_FAILED", "msg": "Error al restaurar el mensaje"}), 500

# pet_adoption/api/messages/services.py
import logging
import uuid
from typing import Dict, Any, List

from pet_adoption.api.users.services import UserService
from pet_adoption.core.security import is_owner_or_admin
from pet_adoption.models.message import Message, MessageStatus
from pet_adoption.models.user import User
from pet_adoption.services import firestore_service as fs
from pet_adoption.utils.pagination import paginate

SENDER_SUMMARY_FIELDS = ('nombre', 'email')


class MessageService:
    """Mensajes de contacto y soporte. El autor los gestiona; un admin los ve y gestiona todos."""

    def __init__(self, db, user_service: UserService, page_size: int = 6):
        self.db = db
        self.messages_ref = self.db.collection('mensajes')
        self.user_service = user_service
        self.page_size = page_size

    def _get_for(self, message_id: str, actor: User, action: str) -> Dict[str, Any]:
        message = fs.get_document(self.messages_ref, message_id)
        if not message:
            raise LookupError("Mensaje no encontrado")
        if not is_owner_or_admin(actor, message.get('id_usuario')):
            raise PermissionError(f"No tienes permisos para {action} este mensaje")
        return message

    def populate(self, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        senders = self.user_service.summaries((m.get('id_usuario') for m in messages), SENDER_SUMMARY_FIELDS)
        populated = []
        for message in messages:
            message = dict(message)
            message['id_usuario'] = senders.get(message.get('id_usuario'))
            populated.append(message)
        return populated

    def list_messages(self, actor: User, filters: Dict[str, Any], page: int,
                      include_deleted: bool = False) -> Dict[str, Any]:
        query = fs.where_equal(self.messages_ref, {'tipo': filters.get('tipo'), 'estado': filters.get('estado')})
        if not actor.is_admin:
            query = query.where('id_usuario', '==', actor.id)
            include_deleted = False
        if not include_deleted:
            query = fs.only_active(query)

        messages = fs.stream_to_dicts(query)
        if filters.get('asunto'):
            messages = [m for m in messages if fs.text_matches(m.get('asunto'), filters['asunto'])]

        result = paginate(fs.sort_newest_first(messages), page, self.page_size)
        result['docs'] = self.populate(result['docs'])
        return result

    def get_message(self, message_id: str, actor: User) -> Dict[str, Any]:
        message = self._get_for(message_id, actor, 'ver')
        if message.get('borrado') and not actor.is_admin:
            raise LookupError("Mensaje no encontrado")
        return self.populate([message])[0]

    def create_message(self, data: Dict[str, Any], actor: User) -> Dict[str, Any]:
        """Un admin puede fijar el estado inicial y enviar en nombre de otro usuario ('email_usuario')."""
        sender_id = actor.id
        estado = MessageStatus.ABIERTO.value
        if actor.is_admin:
            if data.get('email_usuario'):
                sender_id = self.user_service.require_by_email(data['email_usuario'])['id']
            estado = data.get('estado') or estado

        message = Message.from_dict({
            'id': str(uuid.uuid4()),
            'id_usuario': sender_id,
            'asunto': data['asunto'],
            'contenido': data['contenido'],
            'tipo': data['tipo'],
            'estado': estado,
        })
        created = fs.create_document(self.messages_ref, message.to_document(), doc_id=message.id)
        logging.info(f"Mensaje {message.id} ({message.tipo.value}) enviado por {sender_id}")
        return self.populate([created])[0]

    def update_message(self, message_id: str, changes: Dict[str, Any], actor: User) -> Dict[str, Any]:
        message = self._get_for(message_id, actor, 'actualizar')
        if message.get('borrado') and not actor.is_admin:
            raise LookupError("Mensaje no encontrado")
        if not changes:
            raise ValueError("No se enviaron datos para actualizar")
        updated = fs.update_document(self.messages_ref, message_id, changes)
        logging.info(f"Mensaje {message_id} actualizado. Campos: {list(changes.keys())}")
        return self.populate([updated])[0]

    def soft_delete_message(self, message_id: str, actor: User) -> None:
        message = self._get_for(message_id, actor, 'eliminar')
        if message.get('borrado'):
            raise LookupError("Mensaje no encontrado")
        fs.update_document(self.messages_ref, message_id, fs.soft_delete_fields())
        logging.info(f"Mensaje {message_id} marcado como borrado")

    def restore_message(self, message_id: str, actor: User) -> Dict[str, Any]:
        self._get_for(message_id, actor, 'restaurar')
        restored = fs.update_document(self.messages_ref, message_id, fs.restore_fields())
        logging.info(f"Mensaje {message_id} restaurado")
        return self.populate([restored])[0]

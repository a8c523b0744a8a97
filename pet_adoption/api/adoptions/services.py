# pet_adoption/api/adoptions/services.py
import logging
import uuid
from typing import Dict, Any, List, Optional

from pet_adoption.api.pets.services import PetService
from pet_adoption.api.users.services import UserService
from pet_adoption.core.security import is_owner_or_admin
from pet_adoption.models.adoption import Adoption
from pet_adoption.models.user import User
from pet_adoption.services import firestore_service as fs
from pet_adoption.utils.pagination import paginate

REQUESTER_SUMMARY_FIELDS = ('nombre', 'email')
PET_SUMMARY_FIELDS = ('nombre', 'tipo', 'raza')


class AdoptionService:
    """
    Solicitudes de adopción.

    Solo puede haber una solicitud no borrada por (usuario, mascota). La comprobación
    es lectura-y-luego-escritura: dos peticiones simultáneas podrían colarse ambas.
    """

    def __init__(self, db, pet_service: PetService, user_service: UserService, page_size: int = 6):
        self.db = db
        self.adoptions_ref = self.db.collection('adopciones')
        self.pet_service = pet_service
        self.user_service = user_service
        self.page_size = page_size

    # --- Lectura ---
    def _get(self, adoption_id: str) -> Dict[str, Any]:
        adoption = fs.get_document(self.adoptions_ref, adoption_id)
        if not adoption:
            raise LookupError("Solicitud no encontrada")
        return adoption

    def _pet_owner_id(self, adoption: Dict[str, Any]) -> Optional[str]:
        pet = self.pet_service.get_pet(adoption.get('id_mascota'))
        return pet.get('id_usuario') if pet else None

    def get_adoption(self, adoption_id: str, actor: User) -> Dict[str, Any]:
        """El solicitante, el dueño de la mascota o un admin."""
        adoption = self._get(adoption_id)
        if adoption.get('borrado') and not actor.is_admin:
            raise LookupError("Solicitud no encontrada")
        if not (is_owner_or_admin(actor, adoption.get('id_usuario'))
                or self._pet_owner_id(adoption) == actor.id):
            raise PermissionError("No tienes permisos para ver esta solicitud")
        return self.populate([adoption])[0]

    def list_adoptions(self, actor: User, filters: Dict[str, Any], page: int,
                       include_deleted: bool = False) -> Dict[str, Any]:
        """
        Un admin ve todas las solicitudes. El resto ve las que hizo y las que
        recibieron sus mascotas.
        """
        query = fs.where_equal(self.adoptions_ref, {'estado': filters.get('estado')})
        if actor.is_admin:
            if not include_deleted:
                query = fs.only_active(query)
            adoptions = fs.stream_to_dicts(query)
        else:
            query = fs.only_active(query)
            mine = fs.stream_to_dicts(query.where('id_usuario', '==', actor.id))
            received = fs.get_many_in(query, 'id_mascota', self.pet_service.ids_owned_by(actor.id))
            adoptions = list({a['id']: a for a in mine + received}.values())

        result = paginate(fs.sort_newest_first(adoptions), page, self.page_size)
        result['docs'] = self.populate(result['docs'])
        return result

    def populate(self, adoptions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        requesters = self.user_service.summaries((a.get('id_usuario') for a in adoptions), REQUESTER_SUMMARY_FIELDS)
        pets = {}
        for pet_id in {a.get('id_mascota') for a in adoptions if a.get('id_mascota')}:
            pets[pet_id] = fs.summarize(self.pet_service.get_pet(pet_id), PET_SUMMARY_FIELDS)

        populated = []
        for adoption in adoptions:
            adoption = dict(adoption)
            adoption['id_usuario'] = requesters.get(adoption.get('id_usuario'))
            adoption['id_mascota'] = pets.get(adoption.get('id_mascota'))
            populated.append(adoption)
        return populated

    def _has_active_request(self, user_id: str, pet_id: str, exclude_id: Optional[str] = None) -> bool:
        query = (self.adoptions_ref
                 .where('id_usuario', '==', user_id)
                 .where('id_mascota', '==', pet_id))
        return any(
            not a.get('borrado') and a['id'] != exclude_id
            for a in fs.stream_to_dicts(query)
        )

    # --- Escritura ---
    def create_adoption(self, data: Dict[str, Any], actor: User) -> Dict[str, Any]:
        """
        :raises LookupError: la mascota (o el 'email_usuario' indicado por un admin) no existe
        :raises ValueError: mascota no disponible o solicitud duplicada
        """
        requester_id = actor.id
        if data.get('email_usuario') and actor.is_admin:
            requester_id = self.user_service.require_by_email(data['email_usuario'])['id']

        pet = self.pet_service.get_active_pet(data['id_mascota'])
        if not pet.get('estado', True):
            raise ValueError("La mascota no está disponible para adopción")
        if self._has_active_request(requester_id, pet['id']):
            raise ValueError("Ya existe una solicitud activa para esta mascota")

        adoption = Adoption(
            id=str(uuid.uuid4()),
            id_usuario=requester_id,
            id_mascota=pet['id'],
            mensaje=data['mensaje'],
        )
        created = fs.create_document(self.adoptions_ref, adoption.to_document(), doc_id=adoption.id)
        logging.info(f"Solicitud de adopción {adoption.id} creada (usuario {requester_id}, mascota {pet['id']})")
        return self.populate([created])[0]

    def update_adoption(self, adoption_id: str, changes: Dict[str, Any], actor: User) -> Dict[str, Any]:
        """
        'mensaje' lo edita el solicitante o un admin; 'estado' el dueño de la mascota o un admin.
        Cualquier estado puede pasar a cualquier otro.
        """
        adoption = self._get(adoption_id)
        is_requester = adoption.get('id_usuario') == actor.id
        is_pet_owner = self._pet_owner_id(adoption) == actor.id

        if not (actor.is_admin or is_requester or is_pet_owner):
            raise PermissionError("No tienes permisos para actualizar esta solicitud")
        if adoption.get('borrado') and not actor.is_admin:
            raise LookupError("Solicitud no encontrada")
        if 'mensaje' in changes and not (actor.is_admin or is_requester):
            raise PermissionError("Solo el solicitante puede cambiar el mensaje")
        if 'estado' in changes and not (actor.is_admin or is_pet_owner):
            raise PermissionError("Solo el dueño de la mascota puede cambiar el estado")
        if not changes:
            raise ValueError("No se enviaron datos para actualizar")

        updated = fs.update_document(self.adoptions_ref, adoption_id, changes)
        logging.info(f"Solicitud {adoption_id} actualizada. Campos: {list(changes.keys())}")
        return self.populate([updated])[0]

    def soft_delete_adoption(self, adoption_id: str, actor: User) -> None:
        adoption = self._get(adoption_id)
        if not is_owner_or_admin(actor, adoption.get('id_usuario')):
            raise PermissionError("No tienes permisos para eliminar esta solicitud")
        if adoption.get('borrado'):
            raise LookupError("Solicitud no encontrada")
        fs.update_document(self.adoptions_ref, adoption_id, fs.soft_delete_fields())
        logging.info(f"Solicitud {adoption_id} marcada como borrada")

    def restore_adoption(self, adoption_id: str, actor: User) -> Dict[str, Any]:
        adoption = self._get(adoption_id)
        if not is_owner_or_admin(actor, adoption.get('id_usuario')):
            raise PermissionError("No tienes permisos para restaurar esta solicitud")
        if self._has_active_request(adoption['id_usuario'], adoption['id_mascota'], exclude_id=adoption_id):
            raise ValueError("Ya existe otra solicitud activa para esta mascota")
        restored = fs.update_document(self.adoptions_ref, adoption_id, fs.restore_fields())
        logging.info(f"Solicitud {adoption_id} restaurada")
        return self.populate([restored])[0]

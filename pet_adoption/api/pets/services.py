# pet_adoption/api/pets/services.py
import logging
import uuid
from typing import Dict, Any, List, Optional

from pet_adoption.api.users.services import UserService
from pet_adoption.core.security import is_owner_or_admin
from pet_adoption.models.pet import Pet
from pet_adoption.models.user import User
from pet_adoption.services import firestore_service as fs
from pet_adoption.utils.pagination import paginate

TEXT_FILTERS = ('nombre', 'raza', 'ubicacion')
EXACT_FILTERS = ('tipo', 'tamano', 'genero', 'estado')
OWNER_SUMMARY_FIELDS = ('nombre', 'email', 'foto_perfil')


class PetService:
    """Publicaciones de mascotas en adopción."""

    def __init__(self, db, user_service: UserService, page_size: int = 6):
        self.db = db
        self.pets_ref = self.db.collection('mascotas')
        self.user_service = user_service
        self.page_size = page_size
        logging.info("PetService initialized with dependencies.")

    # --- Lectura ---
    def get_pet(self, pet_id: str) -> Optional[Dict[str, Any]]:
        """Documento tal cual (incluidos los borrados), sin poblar."""
        return fs.get_document(self.pets_ref, pet_id)

    def get_active_pet(self, pet_id: str) -> Dict[str, Any]:
        """Mascota no borrada; LookupError en otro caso."""
        pet = self.get_pet(pet_id)
        if not pet or pet.get('borrado'):
            raise LookupError("Mascota no encontrada")
        return pet

    def get_visible_pet(self, pet_id: str, actor: Optional[User]) -> Dict[str, Any]:
        """Detalle público; un admin también ve las mascotas borradas."""
        pet = self.get_pet(pet_id)
        if not pet or (pet.get('borrado') and not (actor and actor.is_admin)):
            raise LookupError("Mascota no encontrada")
        return self.populate([pet])[0]

    def list_pets(self, filters: Dict[str, Any], page: int, include_deleted: bool = False) -> Dict[str, Any]:
        query = fs.where_equal(self.pets_ref, {field: filters.get(field) for field in EXACT_FILTERS})
        if not include_deleted:
            query = fs.only_active(query)
        pets = fs.stream_to_dicts(query)
        # Firestore no tiene búsqueda por subcadena
        for field in TEXT_FILTERS:
            if filters.get(field):
                pets = [p for p in pets if fs.text_matches(p.get(field), filters[field])]

        result = paginate(fs.sort_newest_first(pets), page, self.page_size)
        result['docs'] = self.populate(result['docs'])
        return result

    def list_user_pets(self, user_id: str, page: int) -> Dict[str, Any]:
        query = fs.only_active(self.pets_ref.where('id_usuario', '==', user_id))
        result = paginate(fs.sort_newest_first(fs.stream_to_dicts(query)), page, self.page_size)
        result['docs'] = self.populate(result['docs'])
        return result

    def ids_owned_by(self, user_id: str) -> List[str]:
        return [p['id'] for p in fs.stream_to_dicts(self.pets_ref.where('id_usuario', '==', user_id))]

    def populate(self, pets: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Sustituye 'id_usuario' por el resumen público del dueño."""
        owners = self.user_service.summaries((p.get('id_usuario') for p in pets), OWNER_SUMMARY_FIELDS)
        populated = []
        for pet in pets:
            pet = dict(pet)
            pet['id_usuario'] = owners.get(pet.get('id_usuario'))
            populated.append(pet)
        return populated

    # --- Escritura ---
    def _resolve_owner(self, data: Dict[str, Any], actor: User) -> Optional[str]:
        """
        Un admin puede asignar la mascota a otro usuario con 'email_usuario'.
        Para el resto de usuarios el campo se ignora.
        """
        email = data.pop('email_usuario', None)
        if not email or not actor.is_admin:
            return None
        return self.user_service.require_by_email(email)['id']

    def create_pet(self, data: Dict[str, Any], actor: User, photo_path: Optional[str] = None) -> Dict[str, Any]:
        data = dict(data)
        owner_id = self._resolve_owner(data, actor) or actor.id

        pet = Pet.from_dict({
            **data,
            'id': str(uuid.uuid4()),
            'id_usuario': owner_id,
            'fotos': [photo_path] if photo_path else [],
        })
        created = fs.create_document(self.pets_ref, pet.to_document(), doc_id=pet.id)
        logging.info(f"Mascota {pet.id} publicada por el usuario {owner_id}")
        return self.populate([created])[0]

    def get_writable_pet(self, pet_id: str, actor: User, action: str = 'actualizar',
                         allow_deleted: bool = False) -> Dict[str, Any]:
        """
        Mascota que 'actor' puede modificar. Las rutas la consultan antes de guardar
        cualquier archivo subido.

        :raises LookupError: no existe, o está borrada y el actor no es admin
        :raises PermissionError: el actor no es el dueño ni admin
        """
        pet = self.get_pet(pet_id)
        if not pet:
            raise LookupError("Mascota no encontrada")
        if not is_owner_or_admin(actor, pet.get('id_usuario')):
            raise PermissionError(f"No tienes permisos para {action} esta mascota")
        if pet.get('borrado') and not (allow_deleted or actor.is_admin):
            raise LookupError("Mascota no encontrada")
        return pet

    def update_pet(self, pet_id: str, changes: Dict[str, Any], actor: User,
                   photo_path: Optional[str] = None) -> Dict[str, Any]:
        pet = self.get_writable_pet(pet_id, actor)
        changes = dict(changes)
        new_owner = self._resolve_owner(changes, actor)
        if new_owner:
            changes['id_usuario'] = new_owner
        if photo_path:
            changes['fotos'] = list(pet.get('fotos') or []) + [photo_path]
        if not changes:
            raise ValueError("No se enviaron datos para actualizar")

        updated = fs.update_document(self.pets_ref, pet_id, changes)
        logging.info(f"Mascota {pet_id} actualizada. Campos: {list(changes.keys())}")
        return self.populate([updated])[0]

    def soft_delete_pet(self, pet_id: str, actor: User) -> None:
        pet = self.get_writable_pet(pet_id, actor, 'eliminar', allow_deleted=True)
        if pet.get('borrado'):
            raise LookupError("Mascota no encontrada")
        fs.update_document(self.pets_ref, pet_id, fs.soft_delete_fields())
        logging.info(f"Mascota {pet_id} marcada como borrada")

    def restore_pet(self, pet_id: str, actor: User) -> Dict[str, Any]:
        self.get_writable_pet(pet_id, actor, 'restaurar', allow_deleted=True)
        restored = fs.update_document(self.pets_ref, pet_id, fs.restore_fields())
        logging.info(f"Mascota {pet_id} restaurada")
        return self.populate([restored])[0]

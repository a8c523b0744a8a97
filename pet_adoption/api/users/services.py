# pet_adoption/api/users/services.py
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional
from werkzeug.security import generate_password_hash, check_password_hash

from pet_adoption.models.user import User, UserRole
from pet_adoption.services import firestore_service as fs
from pet_adoption.utils.datetime_utils import DateTimeUtils
from pet_adoption.utils.pagination import paginate

TEXT_FILTERS = ('nombre', 'apellido', 'email')


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


class UserService:
    """Cuentas de usuario: alta, consulta, edición, borrado lógico y contraseñas."""

    def __init__(self, db, page_size: int = 6):
        self.db = db
        self.users_ref = self.db.collection('usuarios')
        self.page_size = page_size

    # --- Lectura ---
    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Documento tal cual, incluidos los borrados."""
        return fs.get_document(self.users_ref, user_id)

    def get_user_model(self, user_id: str) -> Optional[User]:
        data = self.get_user(user_id)
        return User.from_dict(data) if data else None

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        email = normalize_email(email)
        if not email:
            return None
        docs = fs.stream_to_dicts(self.users_ref.where('email', '==', email).limit(1))
        return docs[0] if docs else None

    def require_by_email(self, email: str) -> Dict[str, Any]:
        """Usuario activo con ese email; LookupError si no existe o está borrado."""
        user = self.find_by_email(email)
        if not user or user.get('borrado'):
            raise LookupError("Usuario no encontrado")
        return user

    def get_visible_user(self, user_id: str, actor: User) -> Dict[str, Any]:
        user = self.get_user(user_id)
        if not user or (user.get('borrado') and not actor.is_admin):
            raise LookupError("Usuario no encontrado")
        return user

    def list_users(self, filters: Dict[str, Any], page: int, include_inactive: bool = False) -> Dict[str, Any]:
        query = fs.where_equal(self.users_ref, {'rol': filters.get('rol')})
        if not include_inactive:
            query = fs.only_active(query).where('activo', '==', True)
        users = fs.stream_to_dicts(query)
        for field in TEXT_FILTERS:
            if filters.get(field):
                users = [u for u in users if fs.text_matches(u.get(field), filters[field])]
        return paginate(fs.sort_newest_first(users), page, self.page_size)

    def list_for_select(self) -> List[Dict[str, Any]]:
        users = fs.stream_to_dicts(fs.only_active(self.users_ref))
        return sorted(users, key=lambda u: (u.get('nombre') or '').lower())

    def summaries(self, user_ids: Iterable[str], fields: Iterable[str]) -> Dict[str, Optional[Dict[str, Any]]]:
        """Resúmenes públicos por id, para poblar referencias 'id_usuario' en otros listados."""
        fields = tuple(fields)
        cache: Dict[str, Optional[Dict[str, Any]]] = {}
        for user_id in set(filter(None, user_ids)):
            cache[user_id] = fs.summarize(self.get_user(user_id), fields)
        return cache

    # --- Escritura ---
    def create_user(self, data: Dict[str, Any], rol: str = UserRole.USUARIO.value) -> Dict[str, Any]:
        """
        Crea una cuenta nueva con la contraseña cifrada.

        :raises ValueError: si ya existe una cuenta con ese email (aunque esté borrada)
        """
        email = normalize_email(data['email'])
        if self.find_by_email(email):
            raise ValueError("El usuario ya existe")

        user = User(
            id=str(uuid.uuid4()),
            nombre=data['nombre'].strip(),
            apellido=data.get('apellido'),
            email=email,
            contrasena=generate_password_hash(data['contrasena']),
            telefono=data.get('telefono'),
            direccion=data.get('direccion'),
            rol=UserRole(rol),
        )
        created = fs.create_document(self.users_ref, user.to_document(), doc_id=user.id)
        logging.info(f"Usuario creado: {user.id} ({user.rol.value})")
        return created

    def update_user(self, user_id: str, changes: Dict[str, Any], actor: User) -> Dict[str, Any]:
        user = self.get_user(user_id)
        if not user or (user.get('borrado') and not actor.is_admin):
            raise LookupError("Usuario no encontrado")
        if ('rol' in changes or 'activo' in changes) and not actor.is_admin:
            raise PermissionError("Solo un administrador puede cambiar el rol o el estado de la cuenta")
        if not changes:
            raise ValueError("No se enviaron datos para actualizar")

        changes = dict(changes)
        if 'email' in changes:
            changes['email'] = normalize_email(changes['email'])
            existing = self.find_by_email(changes['email'])
            if existing and existing['id'] != user_id:
                raise ValueError("El email ya está registrado")
        if changes.get('contrasena'):
            changes['contrasena'] = generate_password_hash(changes['contrasena'])

        updated = fs.update_document(self.users_ref, user_id, changes)
        logging.info(f"Usuario {user_id} actualizado. Campos: {list(changes.keys())}")
        return updated

    def update_profile(self, user_id: str, changes: Dict[str, Any], photo_path: Optional[str] = None) -> Dict[str, Any]:
        changes = dict(changes)
        if photo_path:
            changes['foto_perfil'] = photo_path
        if not changes:
            raise ValueError("No se enviaron datos para actualizar")
        return fs.update_document(self.users_ref, user_id, changes)

    def soft_delete_user(self, user_id: str) -> Dict[str, Any]:
        user = self.get_user(user_id)
        if not user or user.get('borrado'):
            raise LookupError("Usuario no encontrado")
        changes = fs.soft_delete_fields()
        changes['activo'] = False
        logging.info(f"Usuario {user_id} marcado como borrado")
        return fs.update_document(self.users_ref, user_id, changes)

    def restore_user(self, user_id: str) -> Dict[str, Any]:
        if not self.get_user(user_id):
            raise LookupError("Usuario no encontrado")
        changes = fs.restore_fields()
        changes['activo'] = True
        logging.info(f"Usuario {user_id} restaurado")
        return fs.update_document(self.users_ref, user_id, changes)

    # --- Contraseñas ---
    @staticmethod
    def password_matches(user: Dict[str, Any], password: str) -> bool:
        stored = user.get('contrasena')
        return bool(stored and password) and check_password_hash(stored, password)

    def set_password(self, user_id: str, new_password: str) -> None:
        fs.update_document(self.users_ref, user_id, {
            'contrasena': generate_password_hash(new_password),
            'reset_token': None,
            'reset_token_expira': None,
        })

    def set_reset_token(self, user_id: str, token_hash: str, expires_at) -> None:
        fs.update_document(self.users_ref, user_id, {
            'reset_token': token_hash,
            'reset_token_expira': expires_at,
        })

    def find_by_reset_token(self, token_hash: str) -> Optional[Dict[str, Any]]:
        docs = fs.stream_to_dicts(self.users_ref.where('reset_token', '==', token_hash).limit(1))
        if not docs:
            return None
        user = docs[0]
        if DateTimeUtils.is_expired(user.get('reset_token_expira')):
            return None
        return user

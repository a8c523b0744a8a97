# pet_adoption/models/user.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
import logging

from pet_adoption.utils.datetime_utils import DateTimeUtils


class UserRole(Enum):
    USUARIO = "usuario"
    ADMIN = "admin"


@dataclass
class User:
    """
    Documento de la colección 'usuarios'.
    'contrasena' guarda siempre el hash, nunca la contraseña en claro.
    """
    id: str
    nombre: str
    email: str
    contrasena: str
    apellido: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    rol: UserRole = UserRole.USUARIO
    activo: bool = True
    foto_perfil: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expira: Optional[datetime] = None
    fecha_registro: datetime = field(default_factory=DateTimeUtils.now)
    borrado: bool = False
    borrado_en: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.rol == UserRole.ADMIN

    @property
    def is_blocked(self) -> bool:
        """Cuenta borrada o desactivada."""
        return self.borrado or not self.activo

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Crea un User a partir de un documento leído (con 'id'); ignora campos desconocidos."""
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        rol = known.get('rol')
        if isinstance(rol, str):
            try:
                known['rol'] = UserRole(rol)
            except ValueError:
                logging.warning(f"Rol desconocido '{rol}' para el usuario {data.get('id')}. Se usa 'usuario'.")
                known['rol'] = UserRole.USUARIO
        elif rol is None:
            known.pop('rol', None)
        for flag in ('activo', 'borrado'):
            if known.get(flag) is None:
                known.pop(flag, None)
        return cls(**known)

    def to_document(self) -> Dict[str, Any]:
        """Diccionario listo para Firestore (sin 'id', que es el id del documento)."""
        data = asdict(self)
        data.pop('id')
        data['rol'] = self.rol.value
        return DateTimeUtils.for_firestore(data)

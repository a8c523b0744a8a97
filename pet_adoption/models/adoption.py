# pet_adoption/models/adoption.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pet_adoption.utils.datetime_utils import DateTimeUtils


class AdoptionStatus(Enum):
    # Cualquier estado puede pasar a cualquier otro; no hay transiciones prohibidas.
    PENDIENTE = "pendiente"
    ACEPTADA = "aceptada"
    RECHAZADA = "rechazada"


@dataclass
class Adoption:
    """Solicitud de adopción de 'id_usuario' para la mascota 'id_mascota' (colección 'adopciones')."""
    id: str
    id_usuario: str
    id_mascota: str
    mensaje: str
    estado: AdoptionStatus = AdoptionStatus.PENDIENTE
    fecha_solicitud: datetime = field(default_factory=DateTimeUtils.now)
    borrado: bool = False
    borrado_en: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('id')
        data['estado'] = self.estado.value
        return DateTimeUtils.for_firestore(data)

# pet_adoption/models/message.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pet_adoption.utils.datetime_utils import DateTimeUtils


class MessageType(Enum):
    CONSULTA = "consulta"
    SOPORTE = "soporte"
    REPORTE = "reporte"


class MessageStatus(Enum):
    ABIERTO = "abierto"
    EN_PROCESO = "en_proceso"
    CERRADO = "cerrado"


@dataclass
class Message:
    """Mensaje de contacto o soporte enviado por un usuario (colección 'mensajes')."""
    id: str
    id_usuario: str
    asunto: str
    contenido: str
    tipo: MessageType
    estado: MessageStatus = MessageStatus.ABIERTO
    fecha_envio: datetime = field(default_factory=DateTimeUtils.now)
    borrado: bool = False
    borrado_en: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        processed = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        processed['tipo'] = MessageType(processed['tipo'])
        if processed.get('estado'):
            processed['estado'] = MessageStatus(processed['estado'])
        else:
            processed.pop('estado', None)
        return cls(**processed)

    def to_document(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('id')
        data['tipo'] = self.tipo.value
        data['estado'] = self.estado.value
        return DateTimeUtils.for_firestore(data)

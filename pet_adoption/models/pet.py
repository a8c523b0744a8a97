# pet_adoption/models/pet.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from pet_adoption.utils.datetime_utils import DateTimeUtils


class PetType(Enum):
    PERRO = "perro"
    GATO = "gato"
    OTRO = "otro"


class PetGender(Enum):
    MACHO = "macho"
    HEMBRA = "hembra"
    DESCONOCIDO = "desconocido"


class PetSize(Enum):
    PEQUENO = "pequeño"
    MEDIANO = "mediano"
    GRANDE = "grande"


@dataclass
class Pet:
    """
    Documento de la colección 'mascotas'.
    'estado' indica si la mascota sigue disponible para adopción.
    'id_usuario' es el usuario que la publicó.
    """
    id: str
    nombre: str
    tipo: PetType
    id_usuario: str
    edad: Optional[float] = None
    raza: Optional[str] = None
    genero: Optional[PetGender] = None
    tamano: Optional[PetSize] = None
    descripcion: Optional[str] = None
    fotos: List[str] = field(default_factory=list)
    ubicacion: Optional[str] = None
    telefono: Optional[str] = None
    estado: bool = True
    fecha_publicacion: datetime = field(default_factory=DateTimeUtils.now)
    borrado: bool = False
    borrado_en: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pet":
        """
        Crea un Pet desde un documento o desde datos ya validados.
        Los valores de enumeración llegan como cadena y se convierten aquí.
        """
        processed = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        processed['tipo'] = PetType(processed['tipo'])
        if processed.get('genero'):
            processed['genero'] = PetGender(processed['genero'])
        if processed.get('tamano'):
            processed['tamano'] = PetSize(processed['tamano'])
        if processed.get('fotos') is None:
            processed['fotos'] = []
        return cls(**processed)

    def to_document(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('id')
        data['tipo'] = self.tipo.value
        data['genero'] = self.genero.value if self.genero else None
        data['tamano'] = self.tamano.value if self.tamano else None
        return DateTimeUtils.for_firestore(data)

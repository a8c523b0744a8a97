# pet_adoption/utils/datetime_utils.py
"""
Manejo centralizado de fechas y horas.

Todas las fechas se guardan en UTC y con zona horaria (timezone-aware); el
frontend las convierte a la hora local. Firestore devuelve sus timestamps como
subclases de datetime, y el almacén en memoria o los datos de prueba pueden
traer cadenas ISO: from_firestore() normaliza ambos casos.
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """Utilidades de fecha/hora usadas por modelos y servicios."""

    @staticmethod
    def now() -> datetime:
        """Hora actual en UTC."""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        Convierte una cadena ISO 8601 a datetime UTC.

        Acepta sufijo 'Z', desplazamientos ('+02:00'), microsegundos y cadenas
        sin zona horaria (se asume UTC).
        """
        try:
            if not iso_string:
                raise ValueError("No se puede interpretar una cadena vacía")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"Fallo al interpretar fecha ISO: {iso_string} - {e}")
            raise ValueError(f"Formato de fecha ISO inválido: {iso_string}")

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Prepara un valor para guardarlo en Firestore.

        - date -> datetime 00:00:00 UTC
        - datetime sin zona -> datetime UTC
        - dict / list: conversión recursiva
        """
        if isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Normaliza los valores leídos del almacén.

        Los campos de fecha conocidos que llegan como cadena ISO se convierten a
        datetime; el resto de cadenas no se tocan.
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        if isinstance(obj, dict):
            converted = {}
            for key, value in obj.items():
                if isinstance(value, str) and key in DATETIME_FIELDS:
                    try:
                        converted[key] = DateTimeUtils.parse_iso_datetime(value)
                        continue
                    except ValueError:
                        logger.warning(f"Campo de fecha '{key}' con valor no válido: {value}")
                converted[key] = DateTimeUtils.from_firestore(value)
            return converted
        if isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def is_expired(expires_at: Any) -> bool:
        """True si la fecha ya pasó o no es una fecha válida."""
        if isinstance(expires_at, str):
            try:
                expires_at = DateTimeUtils.parse_iso_datetime(expires_at)
            except ValueError:
                return True
        if not isinstance(expires_at, datetime):
            return True
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= DateTimeUtils.now()


# Campos de fecha de los documentos (usuarios, mascotas, adopciones, mensajes).
DATETIME_FIELDS = frozenset({
    'created_at', 'updated_at', 'borrado_en',
    'fecha_registro', 'fecha_publicacion', 'fecha_solicitud', 'fecha_envio',
    'reset_token_expira',
})

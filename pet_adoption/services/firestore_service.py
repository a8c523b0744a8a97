# pet_adoption/services/firestore_service.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from pet_adoption.utils.datetime_utils import DateTimeUtils

# Tamaño máximo de la lista de valores de un filtro 'in' en Firestore
IN_QUERY_LIMIT = 30


def snapshot_to_dict(doc) -> Optional[Dict[str, Any]]:
    """
    Convierte un DocumentSnapshot en diccionario con el id del documento en 'id'.
    Las cadenas ISO de los campos de fecha conocidos se vuelven datetime.

    :param doc: snapshot devuelto por get() o stream()
    :return: diccionario del documento, o None si no existe
    """
    if doc is None or not doc.exists:
        return None
    data = DateTimeUtils.from_firestore(doc.to_dict() or {})
    data['id'] = doc.id
    return data


def stream_to_dicts(query) -> List[Dict[str, Any]]:
    return [snapshot_to_dict(doc) for doc in query.stream()]


def get_document(collection_ref, doc_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not doc_id:
        return None
    return snapshot_to_dict(collection_ref.document(str(doc_id)).get())


def get_many_in(query, field: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
    """Consulta 'field in values' partiendo la lista en bloques aceptados por Firestore."""
    values = list(values)
    results: List[Dict[str, Any]] = []
    for start in range(0, len(values), IN_QUERY_LIMIT):
        chunk = values[start:start + IN_QUERY_LIMIT]
        results.extend(stream_to_dicts(query.where(field, 'in', chunk)))
    return results


def create_document(collection_ref, data: Dict[str, Any], doc_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Guarda un documento nuevo añadiendo created_at / updated_at y lo devuelve leído de nuevo.
    """
    timestamp = DateTimeUtils.now()
    payload = dict(data)
    payload.setdefault('borrado', False)
    payload.setdefault('borrado_en', None)
    payload['created_at'] = timestamp
    payload['updated_at'] = timestamp

    doc_ref = collection_ref.document(doc_id) if doc_id else collection_ref.document()
    try:
        doc_ref.set(DateTimeUtils.for_firestore(payload))
    except Exception as e:
        logging.error(f"Error al guardar en Firestore (Doc ID: {doc_ref.id}): {e}", exc_info=True)
        raise
    logging.info(f"Documento creado en Firestore (Doc ID: {doc_ref.id})")
    return snapshot_to_dict(doc_ref.get())


def update_document(collection_ref, doc_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(changes)
    payload['updated_at'] = DateTimeUtils.now()
    doc_ref = collection_ref.document(doc_id)
    doc_ref.update(DateTimeUtils.for_firestore(payload))
    return snapshot_to_dict(doc_ref.get())


def soft_delete_fields() -> Dict[str, Any]:
    return {'borrado': True, 'borrado_en': DateTimeUtils.now()}


def restore_fields() -> Dict[str, Any]:
    return {'borrado': False, 'borrado_en': None}


def text_matches(value: Any, needle: Optional[str]) -> bool:
    """Coincidencia parcial sin distinguir mayúsculas. Un filtro vacío siempre coincide."""
    if not needle:
        return True
    if value is None:
        return False
    return needle.strip().lower() in str(value).lower()


def sort_newest_first(items: List[Dict[str, Any]], field: str = 'created_at') -> List[Dict[str, Any]]:
    dated = [item for item in items if item.get(field) is not None]
    undated = [item for item in items if item.get(field) is None]
    dated.sort(key=lambda item: item[field], reverse=True)
    return dated + undated


def summarize(data: Optional[Dict[str, Any]], fields: Iterable[str]) -> Optional[Dict[str, Any]]:
    """Subconjunto público de un documento referenciado, para incrustarlo en otra respuesta."""
    if not data:
        return None
    summary = {'id': data['id']}
    for field in fields:
        summary[field] = data.get(field)
    return summary


def where_equal(query, conditions: Dict[str, Any]):
    """Añade un filtro '==' por cada condición; los valores None no filtran."""
    for field, value in conditions.items():
        if value is not None:
            query = query.where(field, '==', value)
    return query


def only_active(query):
    """Excluye los documentos con borrado lógico en la propia consulta."""
    return query.where('borrado', '==', False)

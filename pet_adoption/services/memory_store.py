# pet_adoption/services/memory_store.py
"""
Almacén de documentos en memoria para desarrollo local y pruebas (DATASTORE=memory).

Expone el mismo subconjunto de la API de colecciones de Firestore que usan los
servicios: collection().document().get/set/update, where(), order_by(),
limit() y stream(). Los datos viven solo mientras dure el proceso.
"""

import copy
import operator
import threading
import uuid
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

ASCENDING = 'ASCENDING'
DESCENDING = 'DESCENDING'

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    'in': lambda field_value, values: field_value in values,
    'not-in': lambda field_value, values: field_value not in values,
    'array_contains': lambda field_value, value: isinstance(field_value, list) and value in field_value,
}


class MemoryDocumentSnapshot:
    def __init__(self, reference: 'MemoryDocumentReference', data: Optional[Dict[str, Any]]):
        self.reference = reference
        self._data = data

    @property
    def id(self) -> str:
        return self.reference.id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def get(self, field_path: str) -> Any:
        return (self._data or {}).get(field_path)

    def to_dict(self) -> Optional[Dict[str, Any]]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)


class MemoryDocumentReference:
    def __init__(self, store: 'MemoryFirestore', collection_name: str, document_id: str):
        self._store = store
        self._collection_name = collection_name
        self.id = document_id

    @property
    def path(self) -> str:
        return f"{self._collection_name}/{self.id}"

    def get(self) -> MemoryDocumentSnapshot:
        with self._store.lock:
            data = self._store.collection_data(self._collection_name).get(self.id)
            return MemoryDocumentSnapshot(self, copy.deepcopy(data))

    def set(self, document_data: Dict[str, Any], merge: bool = False) -> None:
        with self._store.lock:
            documents = self._store.collection_data(self._collection_name)
            if merge and self.id in documents:
                documents[self.id].update(copy.deepcopy(document_data))
            else:
                documents[self.id] = copy.deepcopy(document_data)

    def update(self, field_updates: Dict[str, Any]) -> None:
        with self._store.lock:
            documents = self._store.collection_data(self._collection_name)
            if self.id not in documents:
                raise LookupError(f"No existe el documento: {self.path}")
            documents[self.id].update(copy.deepcopy(field_updates))

    def delete(self) -> None:
        with self._store.lock:
            self._store.collection_data(self._collection_name).pop(self.id, None)


class MemoryQuery:
    def __init__(self, store: 'MemoryFirestore', collection_name: str,
                 filters: Tuple = (), orders: Tuple = (), limit_count: Optional[int] = None):
        self._store = store
        self._collection_name = collection_name
        self._filters = filters
        self._orders = orders
        self._limit = limit_count

    def _copy(self, **changes) -> 'MemoryQuery':
        params = dict(filters=self._filters, orders=self._orders, limit_count=self._limit)
        params.update(changes)
        return MemoryQuery(self._store, self._collection_name, **params)

    def where(self, field_path: str, op_string: str, value: Any) -> 'MemoryQuery':
        if op_string not in _OPERATORS:
            raise ValueError(f"Operador no soportado: {op_string}")
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> 'MemoryQuery':
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count: int) -> 'MemoryQuery':
        return self._copy(limit_count=count)

    def _matches(self, data: Dict[str, Any]) -> bool:
        for field_path, op_string, value in self._filters:
            # Igual que Firestore: un documento sin el campo nunca cumple el filtro.
            if field_path not in data:
                return False
            try:
                if not _OPERATORS[op_string](data[field_path], value):
                    return False
            except TypeError:
                return False
        return True

    def stream(self) -> Iterator[MemoryDocumentSnapshot]:
        with self._store.lock:
            documents = self._store.collection_data(self._collection_name)
            matched: List[Tuple[str, Dict[str, Any]]] = [
                (doc_id, copy.deepcopy(data))
                for doc_id, data in documents.items()
                if self._matches(data)
            ]

        for field_path, direction in reversed(self._orders):
            present = [item for item in matched if item[1].get(field_path) is not None]
            missing = [item for item in matched if item[1].get(field_path) is None]
            present.sort(key=lambda item: item[1][field_path], reverse=(direction == DESCENDING))
            matched = present + missing

        if self._limit is not None:
            matched = matched[:self._limit]

        for doc_id, data in matched:
            reference = MemoryDocumentReference(self._store, self._collection_name, doc_id)
            yield MemoryDocumentSnapshot(reference, data)

    def get(self) -> List[MemoryDocumentSnapshot]:
        return list(self.stream())


class MemoryCollectionReference(MemoryQuery):
    def __init__(self, store: 'MemoryFirestore', collection_name: str):
        super().__init__(store, collection_name)
        self.id = collection_name

    def document(self, document_id: Optional[str] = None) -> MemoryDocumentReference:
        return MemoryDocumentReference(self._store, self._collection_name, document_id or uuid.uuid4().hex)


class MemoryFirestore:
    """Cliente en memoria con la forma de firestore.client()."""

    def __init__(self):
        self.lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def collection(self, collection_name: str) -> MemoryCollectionReference:
        return MemoryCollectionReference(self, collection_name)

    def collection_data(self, collection_name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection_name, {})

    def reset(self) -> None:
        """Vacía todas las colecciones (útil en pruebas)."""
        with self.lock:
            self._collections.clear()

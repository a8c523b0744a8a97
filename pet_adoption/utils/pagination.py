# pet_adoption/utils/pagination.py
import math
from typing import Any, Dict, List, Optional


def parse_page(value: Optional[str]) -> int:
    """Número de página desde el query string; cualquier valor inválido o < 1 es la página 1."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def paginate(items: List[Any], page: int, limit: int) -> Dict[str, Any]:
    """
    Recorta una lista ya filtrada y ordenada a la página pedida.

    Devuelve la misma forma que usa el frontend (docs, totalDocs, totalPages, ...).
    Una página fuera de rango devuelve 'docs' vacío con los totales correctos.
    """
    total_docs = len(items)
    total_pages = math.ceil(total_docs / limit) if limit else 0
    start = (page - 1) * limit
    docs = items[start:start + limit]

    has_prev = page > 1
    has_next = page < total_pages
    return {
        "docs": docs,
        "totalDocs": total_docs,
        "limit": limit,
        "page": page,
        "totalPages": total_pages,
        "pagingCounter": start + 1,
        "hasPrevPage": has_prev,
        "hasNextPage": has_next,
        "prevPage": page - 1 if has_prev else None,
        "nextPage": page + 1 if has_next else None,
    }

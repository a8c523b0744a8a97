# pet_adoption/utils/__init__.py
"""
Utilidades compartidas: fechas, paginación y lectura de peticiones.
"""

from .datetime_utils import DateTimeUtils
from .pagination import paginate, parse_page
from .request_utils import get_payload, query_flag

__all__ = [
    'DateTimeUtils',
    'paginate', 'parse_page',
    'get_payload', 'query_flag'
]

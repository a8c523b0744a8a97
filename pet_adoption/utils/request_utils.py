# pet_adoption/utils/request_utils.py
from typing import Any, Dict
from flask import request


def get_payload() -> Dict[str, Any]:
    """
    Cuerpo de la petición como diccionario.
    Los formularios multipart (con foto) llegan en request.form; el resto como JSON.
    """
    if request.mimetype and request.mimetype.startswith('multipart/'):
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


def query_flag(name: str) -> bool:
    """'true' / '1' / 'si' en el query string activan la bandera."""
    return (request.args.get(name) or '').strip().lower() in ('true', '1', 'si', 'sí')

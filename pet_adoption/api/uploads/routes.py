# pet_adoption/api/uploads/routes.py

import logging
from flask import Blueprint, current_app, send_from_directory

# Sirve las fotos guardadas por StorageService bajo '/uploads/<archivo>'.
uploads_bp = Blueprint('uploads', __name__)


@uploads_bp.route('/<path:filename>', methods=['GET'])
def serve_upload(filename: str):
    """
    Devuelve un archivo subido. send_from_directory rechaza rutas fuera de la carpeta
    y responde 404 si el archivo no existe.
    """
    storage_service = current_app.services['storage']
    logging.debug(f"Sirviendo archivo subido: {filename}")
    return send_from_directory(storage_service.upload_folder, filename)

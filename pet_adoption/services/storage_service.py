# pet_adoption/services/storage_service.py
import os
import time
import logging
from typing import Optional
from flask import Flask
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

PUBLIC_PREFIX = '/uploads/'


class StorageService:
    """
    Guarda las fotos subidas en el disco local (UPLOAD_FOLDER).
    La referencia que se persiste en los documentos es la ruta pública '/uploads/<archivo>'.
    """

    def __init__(self):
        """
        La carpeta se configura más tarde en init_app.
        """
        self.upload_folder: Optional[str] = None
        self.allowed_extensions = set()

    def init_app(self, app: Flask):
        """
        Se llama una sola vez desde create_app. Crea la carpeta de subidas si no existe.

        :param app: aplicación Flask
        """
        folder = app.config.get('UPLOAD_FOLDER')
        if not folder:
            raise ValueError("UPLOAD_FOLDER debe estar definido en la configuración.")

        os.makedirs(folder, exist_ok=True)
        self.upload_folder = folder
        self.allowed_extensions = {ext.lower() for ext in app.config.get('ALLOWED_IMAGE_EXTENSIONS', ())}
        logging.info(f"StorageService: carpeta de subidas lista en {folder}")

    def save_upload(self, file: FileStorage, field_name: str) -> str:
        """
        Guarda un archivo recibido en un formulario multipart.

        El nombre final es '<epoch-ms>-<campo><extensión>'; la extensión sale del
        nombre original ya saneado.

        :param file: archivo del formulario (request.files[...])
        :param field_name: nombre del campo del formulario (p. ej. 'foto')
        :return: ruta pública del archivo guardado
        """
        if not self.upload_folder:
            raise RuntimeError("StorageService no está inicializado. Llama primero a init_app.")

        original_name = secure_filename(file.filename or '')
        extension = os.path.splitext(original_name)[1].lower()
        if extension.lstrip('.') not in self.allowed_extensions:
            raise ValueError(f"Tipo de archivo no permitido: '{extension or original_name}'.")

        filename, destination = self._reserve_name(field_name, extension)
        try:
            file.save(destination)
        except OSError as e:
            logging.error(f"No se pudo guardar el archivo {filename}: {e}", exc_info=True)
            os.remove(destination)
            raise

        logging.info(f"Archivo subido guardado: {filename}")
        return f"{PUBLIC_PREFIX}{filename}"

    def _reserve_name(self, field_name: str, extension: str):
        """
        Reserva '<epoch-ms>-<campo><extensión>' creando el archivo en exclusiva.
        Si el nombre ya existe (mismo campo en el mismo milisegundo) se avanza un milisegundo.
        """
        stamp = int(time.time() * 1000)
        while True:
            filename = f"{stamp}-{field_name}{extension}"
            destination = os.path.join(self.upload_folder, filename)
            try:
                with open(destination, 'xb'):
                    pass
                return filename, destination
            except FileExistsError:
                stamp += 1

    def save_optional(self, files, field_name: str) -> Optional[str]:
        """Guarda el archivo del campo si el formulario lo trae; si no, devuelve None."""
        file = files.get(field_name) if files else None
        if not file or not file.filename:
            return None
        return self.save_upload(file, field_name)

    def local_path(self, public_path: str) -> str:
        """Ruta en disco correspondiente a una ruta pública '/uploads/...'."""
        if not public_path.startswith(PUBLIC_PREFIX):
            raise ValueError(f"Ruta de subida no válida: {public_path}")
        return os.path.join(self.upload_folder, public_path[len(PUBLIC_PREFIX):])

    def discard(self, public_path: Optional[str]) -> None:
        """Borra una subida que no llegó a guardarse en ningún documento."""
        if not public_path:
            return
        try:
            os.remove(self.local_path(public_path))
            logging.info(f"Archivo subido descartado: {public_path}")
        except FileNotFoundError:
            logging.warning(f"El archivo a descartar ya no existe: {public_path}")

# pet_adoption/__init__.py

# =====================================================================================
# 1. Variables de entorno (antes que cualquier otra cosa)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Importaciones
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from flask_cors import CORS
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials, firestore

# - Configuración y seguridad
from pet_adoption.core.config import config_by_name
from pet_adoption.core.security import init_jwt

# - Blueprints
from pet_adoption.api.auth.routes import auth_bp
from pet_adoption.api.users.routes import users_bp
from pet_adoption.api.pets.routes import pets_bp
from pet_adoption.api.adoptions.routes import adoptions_bp
from pet_adoption.api.messages.routes import messages_bp
from pet_adoption.api.uploads.routes import uploads_bp

# - Servicios
from pet_adoption.services.memory_store import MemoryFirestore
from pet_adoption.services.storage_service import StorageService
from pet_adoption.services.mail_service import MailService
from pet_adoption.api.users.services import UserService
from pet_adoption.api.auth.services import AuthService
from pet_adoption.api.pets.services import PetService
from pet_adoption.api.adoptions.services import AdoptionService
from pet_adoption.api.messages.services import MessageService


def _init_datastore(app: Flask):
    """Cliente de documentos según DATASTORE: Firestore real o almacén en memoria."""
    if app.config['DATASTORE'] == 'memory':
        logging.info("Usando almacén de documentos en memoria")
        return MemoryFirestore()

    if not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"No se encuentra el archivo de credenciales de Firebase: {cred_path}")
        firebase_admin.initialize_app(credentials.Certificate(cred_path))
    return firestore.client()


def create_app(config_name: Optional[str] = None, test_config: Optional[dict] = None):
    """
    Fábrica de la aplicación Flask.
    """
    # =====================================================================================
    # 3. Aplicación y configuración
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if test_config:
        app.config.update(test_config)
    app.json.ensure_ascii = False
    app.url_map.strict_slashes = False

    # =====================================================================================
    # 4. Extensiones y servicios externos
    # =====================================================================================
    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}}, supports_credentials=True)
    init_jwt(app)
    db = _init_datastore(app)

    # =====================================================================================
    # 5. Servicios en 'app.services' (inyección de dependencias)
    # =====================================================================================
    app.services = {}
    page_size = app.config['PAGE_SIZE']

    # 5-1. Servicios comunes sin dependencias
    try:
        storage_instance = StorageService()
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    mail_instance = MailService()
    mail_instance.init_app(app)
    app.services['mail'] = mail_instance
    app.services['db'] = db

    # 5-2. Servicios de dominio
    app.services['users'] = UserService(db, page_size=page_size)
    app.services['auth'] = AuthService(
        user_service=app.services['users'],
        mail_service=app.services['mail'],
        frontend_url=app.config['FRONTEND_URL'],
        reset_token_expires=app.config['RESET_TOKEN_EXPIRES']
    )
    app.services['pets'] = PetService(db, user_service=app.services['users'], page_size=page_size)
    app.services['adoptions'] = AdoptionService(
        db,
        pet_service=app.services['pets'],
        user_service=app.services['users'],
        page_size=page_size
    )
    app.services['messages'] = MessageService(db, user_service=app.services['users'], page_size=page_size)

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/admin/users')
    app.register_blueprint(pets_bp, url_prefix='/mascotas')
    app.register_blueprint(adoptions_bp, url_prefix='/adopciones')
    app.register_blueprint(messages_bp, url_prefix='/mensajes')
    app.register_blueprint(uploads_bp, url_prefix='/uploads')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok"}), 200

    # =====================================================================================
    # 7. Manejadores de error globales
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "msg": "Datos no válidos", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        error_code = (err.name or "HTTP_ERROR").upper().replace(' ', '_')
        return jsonify({"error_code": error_code, "msg": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # Cualquier excepción que no haya gestionado otro manejador
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "msg": "Error inesperado en el servidor."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. Logging y retorno
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app

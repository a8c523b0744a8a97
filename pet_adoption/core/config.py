# pet_adoption/core/config.py

import os
from datetime import timedelta


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Configuración común a todos los entornos."""
    # Clave con la que se firman y verifican los tokens JWT.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me')
    # Duración del token de acceso. El frontend cierra la sesión por inactividad a los 10 minutos,
    # el servidor acota la sesión completa con este valor.
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', '2')))
    JWT_TOKEN_LOCATION = ['headers']

    # 'firestore' usa firebase-admin; 'memory' usa el almacén en memoria del proceso.
    DATASTORE = os.getenv('DATASTORE', 'firestore')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # Subida de fotos a disco local.
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
    ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # Tamaño de página fijo para todos los listados.
    PAGE_SIZE = int(os.getenv('PAGE_SIZE', '6'))

    # Recuperación de contraseña.
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:5173')
    RESET_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv('RESET_TOKEN_MINUTES', '60')))

    MAIL_SERVER = os.getenv('MAIL_SERVER')
    MAIL_PORT = int(os.getenv('MAIL_PORT', '587'))
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_USE_TLS = _env_bool('MAIL_USE_TLS', 'true')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'no-reply@adopciones.local')
    MAIL_SUPPRESS_SEND = _env_bool('MAIL_SUPPRESS_SEND')

    # Lista blanca de orígenes del frontend.
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:3000,http://localhost:5173'
        ).split(',')
        if origin.strip()
    ]


class DevelopmentConfig(Config):
    """Entorno de desarrollo."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    """Entorno de pruebas: almacén en memoria y correo desactivado."""
    TESTING = True
    DEBUG = False
    DATASTORE = os.getenv('TEST_DATASTORE', 'memory')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    MAIL_SUPPRESS_SEND = True


class ProductionConfig(Config):
    DEBUG = False


# Se selecciona en create_app() según FLASK_ENV.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)

# pet_adoption/conftest.py
"""
Fixtures comunes: aplicación con TestingConfig y almacén en memoria, cliente de
pruebas y ayudas para crear usuarios, iniciar sesión y publicar mascotas.
"""

import pytest

from pet_adoption import create_app

DEFAULT_PASSWORD = "Secreta.123"


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', {
        'DATASTORE': 'memory',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'FRONTEND_URL': 'http://frontend.test',
    })
    yield app
    app.services['db'].reset()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Crea un usuario directamente en el servicio; 'extra' se aplica después (p. ej. activo=False)."""
    def _make(email, nombre="Usuario", rol="usuario", contrasena=DEFAULT_PASSWORD, **extra):
        users = app.services['users']
        user = users.create_user({'nombre': nombre, 'email': email, 'contrasena': contrasena}, rol=rol)
        if extra:
            users.users_ref.document(user['id']).update(extra)
            user = users.get_user(user['id'])
        return user
    return _make


@pytest.fixture
def login(client):
    """Inicia sesión por la API y devuelve las cabeceras Authorization."""
    def _login(email, contrasena=DEFAULT_PASSWORD):
        resp = client.post('/auth/login', json={'email': email, 'contrasena': contrasena})
        assert resp.status_code == 200, resp.get_json()
        return {'Authorization': f"Bearer {resp.get_json()['token']}"}
    return _login


@pytest.fixture
def user(make_user):
    return make_user('ana@example.com', nombre='Ana')


@pytest.fixture
def other_user(make_user):
    return make_user('beto@example.com', nombre='Beto')


@pytest.fixture
def admin(make_user):
    return make_user('admin@example.com', nombre='Admin', rol='admin')


@pytest.fixture
def user_headers(user, login):
    return login(user['email'])


@pytest.fixture
def other_headers(other_user, login):
    return login(other_user['email'])


@pytest.fixture
def admin_headers(admin, login):
    return login(admin['email'])


@pytest.fixture
def make_pet(client):
    """Publica una mascota por la API con las cabeceras dadas."""
    def _make(headers, **fields):
        payload = {'nombre': 'Luna', 'tipo': 'perro'}
        payload.update(fields)
        resp = client.post('/mascotas/', json=payload, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _make

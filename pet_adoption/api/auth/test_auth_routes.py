# pet_adoption/api/auth/test_auth_routes.py
import io
import re
from datetime import timedelta

from flask_jwt_extended import decode_token

from pet_adoption.api.auth.services import hash_reset_token
from pet_adoption.utils.datetime_utils import DateTimeUtils

DEFAULT_PASSWORD = "Secreta.123"


def test_register_creates_plain_user(client):
    resp = client.post('/auth/register', json={
        'nombre': 'Carla', 'email': 'Carla@Example.com', 'contrasena': DEFAULT_PASSWORD, 'rol': 'admin'
    })

    assert resp.status_code == 201
    usuario = resp.get_json()['usuario']
    assert usuario['email'] == 'carla@example.com'
    assert usuario['rol'] == 'usuario'
    assert usuario['_id']
    assert 'contrasena' not in usuario
    assert usuario['borrado'] is False


def test_register_rejects_missing_fields_and_duplicates(client, user):
    resp = client.post('/auth/register', json={'email': 'x@example.com'})
    assert resp.status_code == 400
    assert 'nombre' in resp.get_json()['details']

    resp = client.post('/auth/register', json={
        'nombre': 'Ana', 'email': user['email'], 'contrasena': DEFAULT_PASSWORD
    })
    assert resp.status_code == 400
    assert resp.get_json()['msg'] == "El usuario ya existe"


def test_register_rejects_weak_password(client):
    resp = client.post('/auth/register', json={'nombre': 'Eva', 'email': 'eva@example.com', 'contrasena': 'abc'})
    assert resp.status_code == 400
    assert 'contrasena' in resp.get_json()['details']


def test_login_returns_token_with_claims(app, client, user):
    resp = client.post('/auth/login', json={'email': user['email'], 'contrasena': DEFAULT_PASSWORD})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body['user'] == {
        'id': user['id'], 'nombre': 'Ana', 'apellido': None, 'rol': 'usuario', 'email': user['email']
    }
    with app.app_context():
        claims = decode_token(body['token'])
    assert claims['sub'] == user['id']
    assert claims['rol'] == 'usuario'
    assert claims['nombre'] == 'Ana'


def test_login_errors(client, user, make_user):
    assert client.post('/auth/login', json={'email': 'nadie@example.com', 'contrasena': 'x'}).status_code == 404
    assert client.post('/auth/login', json={'email': user['email'], 'contrasena': 'Incorrecta.1'}).status_code == 400

    borrado = make_user('borrado@example.com', borrado=True, borrado_en=DateTimeUtils.now())
    inactivo = make_user('inactivo@example.com', activo=False)
    for cuenta in (borrado, inactivo):
        resp = client.post('/auth/login', json={'email': cuenta['email'], 'contrasena': DEFAULT_PASSWORD})
        assert resp.status_code == 403


def test_protected_route_requires_token(client):
    resp = client.get('/auth/perfil')
    assert resp.status_code == 401
    assert resp.get_json()['error_code'] == 'TOKEN_MISSING'

    resp = client.get('/auth/perfil', headers={'Authorization': 'Bearer no-es-un-token'})
    assert resp.status_code == 401


def test_logout_revokes_token(client, user_headers):
    assert client.get('/auth/perfil', headers=user_headers).status_code == 200

    assert client.post('/auth/logout', headers=user_headers).status_code == 200

    resp = client.get('/auth/perfil', headers=user_headers)
    assert resp.status_code == 401
    assert resp.get_json()['error_code'] == 'TOKEN_REVOKED'


def test_token_of_deleted_account_is_forbidden(app, client, user, user_headers):
    app.services['users'].soft_delete_user(user['id'])
    assert client.get('/auth/perfil', headers=user_headers).status_code == 403


def test_profile_update_with_photo(app, client, user_headers):
    resp = client.patch('/auth/perfil', headers=user_headers, content_type='multipart/form-data', data={
        'telefono': '600111222',
        'fotoPerfil': (io.BytesIO(b'imagen'), 'yo.jpg'),
    })

    assert resp.status_code == 200
    usuario = resp.get_json()['usuario']
    assert usuario['telefono'] == '600111222'
    assert re.fullmatch(r'/uploads/\d+-fotoPerfil\.jpg', usuario['foto_perfil'])

    served = client.get(usuario['foto_perfil'])
    assert served.status_code == 200
    assert served.data == b'imagen'


def test_profile_photo_over_size_limit(app, client, user_headers):
    resp = client.patch('/auth/perfil', headers=user_headers, content_type='multipart/form-data', data={
        'fotoPerfil': (io.BytesIO(b'x' * (6 * 1024 * 1024)), 'yo.jpg'),
    })

    assert resp.status_code == 413
    assert resp.get_json()['error_code'] == 'REQUEST_ENTITY_TOO_LARGE'
    assert client.get('/auth/perfil', headers=user_headers).get_json()['usuario']['foto_perfil'] is None


def test_password_reset_flow(app, client, user):
    resp = client.post('/auth/recuperar-password', json={'email': user['email']})
    assert resp.status_code == 200

    mail = app.services['mail'].outbox[-1]
    assert mail['to'] == user['email']
    token = re.search(r'http://frontend\.test/reset-password/(\S+)', mail['body']).group(1)

    stored = app.services['users'].get_user(user['id'])
    assert stored['reset_token'] == hash_reset_token(token)

    nueva = 'NuevaClave.456'
    resp = client.post(f'/auth/restablecer-password/{token}', json={'nuevaContrasena': nueva})
    assert resp.status_code == 200

    assert client.post('/auth/login', json={'email': user['email'], 'contrasena': nueva}).status_code == 200
    # El token es de un solo uso
    resp = client.post(f'/auth/restablecer-password/{token}', json={'nuevaContrasena': 'OtraClave.789'})
    assert resp.status_code == 400


def test_password_reset_unknown_email_and_expired_token(app, client, user):
    assert client.post('/auth/recuperar-password', json={'email': 'nadie@example.com'}).status_code == 404

    app.services['users'].set_reset_token(
        user['id'], hash_reset_token('caducado'), DateTimeUtils.now() - timedelta(minutes=1)
    )
    resp = client.post('/auth/restablecer-password/caducado', json={'nuevaContrasena': 'NuevaClave.456'})
    assert resp.status_code == 400


def test_change_password(client, user, user_headers, login):
    resp = client.patch('/auth/cambiar-password', headers=user_headers,
                        json={'nuevaPassword': 'Cambiada.123', 'confirmarPassword': 'Distinta.123'})
    assert resp.status_code == 400

    resp = client.patch('/auth/cambiar-password', headers=user_headers,
                        json={'nuevaPassword': 'debil', 'confirmarPassword': 'debil'})
    assert resp.status_code == 400

    resp = client.patch('/auth/cambiar-password', headers=user_headers,
                        json={'nuevaPassword': 'Cambiada.123', 'confirmarPassword': 'Cambiada.123'})
    assert resp.status_code == 200
    login(user['email'], 'Cambiada.123')


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json() == {'status': 'ok'}

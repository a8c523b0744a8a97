# pet_adoption/api/pets/test_pets_routes.py
import io
import os
import re
from datetime import timedelta

from flask_jwt_extended import create_access_token


def test_create_pet_requires_fields(client, user_headers):
    resp = client.post('/mascotas/', json={'raza': 'mestizo'}, headers=user_headers)
    assert resp.status_code == 400
    details = resp.get_json()['details']
    assert 'nombre' in details and 'tipo' in details

    resp = client.post('/mascotas/', json={'nombre': 'Luna', 'tipo': 'dragon'}, headers=user_headers)
    assert resp.status_code == 400

    assert client.post('/mascotas/', json={'nombre': 'Luna', 'tipo': 'perro'}).status_code == 401


def test_create_pet_sets_owner_and_populates(client, user, user_headers):
    resp = client.post('/mascotas/', headers=user_headers, json={
        'nombre': 'Luna', 'tipo': 'perro', 'edad': 3, 'tamano': 'mediano', 'genero': 'hembra'
    })

    assert resp.status_code == 201
    pet = resp.get_json()
    assert pet['estado'] is True
    assert pet['borrado'] is False
    assert pet['fotos'] == []
    assert pet['id_usuario'] == {
        '_id': user['id'], 'nombre': 'Ana', 'email': user['email'], 'foto_perfil': None
    }


def test_admin_assigns_owner_by_email(client, other_user, admin_headers, user_headers):
    resp = client.post('/mascotas/', headers=admin_headers,
                       json={'nombre': 'Toby', 'tipo': 'perro', 'email_usuario': 'nadie@example.com'})
    assert resp.status_code == 404

    resp = client.post('/mascotas/', headers=admin_headers,
                       json={'nombre': 'Toby', 'tipo': 'perro', 'email_usuario': other_user['email']})
    assert resp.status_code == 201
    assert resp.get_json()['id_usuario']['_id'] == other_user['id']

    # Para un usuario normal el campo no tiene efecto
    resp = client.post('/mascotas/', headers=user_headers,
                       json={'nombre': 'Kira', 'tipo': 'gato', 'email_usuario': other_user['email']})
    assert resp.status_code == 201
    assert resp.get_json()['id_usuario']['_id'] != other_user['id']


def test_multipart_create_stores_upload_path(app, client, user_headers):
    resp = client.post('/mascotas/', headers=user_headers, content_type='multipart/form-data', data={
        'nombre': 'Michi', 'tipo': 'gato', 'edad': '2', 'estado': 'true', 'genero': '',
        'foto': (io.BytesIO(b'png-bytes'), 'michi.png'),
    })

    assert resp.status_code == 201
    pet = resp.get_json()
    assert pet['edad'] == 2.0
    assert len(pet['fotos']) == 1
    assert re.fullmatch(r'/uploads/\d+-foto\.png', pet['fotos'][0])
    assert client.get(pet['fotos'][0]).data == b'png-bytes'

    resp = client.patch(f"/mascotas/{pet['_id']}", headers=user_headers, content_type='multipart/form-data',
                        data={'foto': (io.BytesIO(b'otra'), 'michi2.jpg')})
    assert resp.status_code == 200
    assert len(resp.get_json()['fotos']) == 2


def test_upload_rejects_unknown_extension(client, user_headers):
    resp = client.post('/mascotas/', headers=user_headers, content_type='multipart/form-data', data={
        'nombre': 'Michi', 'tipo': 'gato', 'foto': (io.BytesIO(b'exe'), 'virus.exe'),
    })
    assert resp.status_code == 400


def test_public_listing_paginates_known_dataset(client, user_headers, make_pet):
    for i in range(14):
        make_pet(user_headers, nombre=f"Mascota {i}")

    resp = client.get('/mascotas/')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['totalDocs'] == 14
    assert body['totalPages'] == 3
    assert len(body['docs']) == 6
    assert body['hasNextPage'] is True

    last = client.get('/mascotas/?page=3').get_json()
    assert len(last['docs']) == 2
    assert last['hasNextPage'] is False

    assert client.get('/mascotas/?page=abc').get_json()['page'] == 1


def test_listing_filters(client, user_headers, make_pet):
    make_pet(user_headers, nombre='Rex', tipo='perro', raza='Pastor Alemán', ubicacion='Madrid', tamano='grande')
    make_pet(user_headers, nombre='Misu', tipo='gato', raza='Siamés', ubicacion='Sevilla', estado=False)
    make_pet(user_headers, nombre='Rocky', tipo='perro', raza='Beagle', ubicacion='madrid centro')

    def nombres(query):
        return sorted(p['nombre'] for p in client.get(f'/mascotas/?{query}').get_json()['docs'])

    assert nombres('tipo=perro') == ['Rex', 'Rocky']
    assert nombres('ubicacion=MADRID') == ['Rex', 'Rocky']
    assert nombres('raza=pastor') == ['Rex']
    assert nombres('estado=false') == ['Misu']
    assert nombres('tamano=grande&tipo=perro') == ['Rex']
    assert client.get('/mascotas/?tipo=dragon').status_code == 400


def test_non_owner_cannot_modify(client, user_headers, other_headers, admin_headers, make_pet):
    pet = make_pet(user_headers)

    assert client.patch(f"/mascotas/{pet['_id']}", json={'nombre': 'X'}, headers=other_headers).status_code == 403
    assert client.delete(f"/mascotas/{pet['_id']}", headers=other_headers).status_code == 403
    assert client.patch('/mascotas/no-existe', json={'nombre': 'X'}, headers=user_headers).status_code == 404

    resp = client.patch(f"/mascotas/{pet['_id']}", json={'estado': False}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()['estado'] is False


def test_soft_delete_and_restore(client, user_headers, other_headers, admin_headers, make_pet):
    pet = make_pet(user_headers)
    make_pet(user_headers, nombre='Otra')

    resp = client.delete(f"/mascotas/{pet['_id']}", headers=user_headers)
    assert resp.status_code == 200

    listed = [p['_id'] for p in client.get('/mascotas/').get_json()['docs']]
    assert pet['_id'] not in listed
    assert client.get(f"/mascotas/{pet['_id']}").status_code == 404
    assert client.get('/mascotas/mis-publicaciones', headers=user_headers).get_json()['totalDocs'] == 1

    # 'borradas' solo funciona para un admin
    listed = [p['_id'] for p in client.get('/mascotas/?borradas=true', headers=user_headers).get_json()['docs']]
    assert pet['_id'] not in listed
    docs = client.get('/mascotas/?borradas=true', headers=admin_headers).get_json()['docs']
    deleted = next(p for p in docs if p['_id'] == pet['_id'])
    assert deleted['borrado'] is True
    assert deleted['borradoEn'] is not None
    assert client.get(f"/mascotas/{pet['_id']}", headers=admin_headers).status_code == 200

    assert client.patch(f"/mascotas/restore/{pet['_id']}", headers=other_headers).status_code == 403
    resp = client.patch(f"/mascotas/restore/{pet['_id']}", headers=user_headers)
    assert resp.status_code == 200
    assert resp.get_json()['mascota']['borrado'] is False
    assert resp.get_json()['mascota']['borradoEn'] is None
    assert client.get(f"/mascotas/{pet['_id']}").status_code == 200


def test_my_publications_only_lists_own(client, user_headers, other_headers, make_pet):
    make_pet(user_headers, nombre='Mía')
    make_pet(other_headers, nombre='Ajena')

    resp = client.get('/mascotas/mis-publicaciones', headers=user_headers)
    assert resp.status_code == 200
    assert [p['nombre'] for p in resp.get_json()['docs']] == ['Mía']
    assert client.get('/mascotas/mis-publicaciones').status_code == 401


def _uploads(app):
    return sorted(os.listdir(app.config['UPLOAD_FOLDER']))


def _photo_form(**fields):
    data = {'foto': (io.BytesIO(b'png-bytes'), 'luna.png')}
    data.update(fields)
    return data


def test_rejected_update_does_not_store_upload(app, client, user_headers, other_headers, make_pet):
    pet = make_pet(user_headers)
    before = _uploads(app)

    resp = client.patch(f"/mascotas/{pet['_id']}", headers=other_headers,
                        content_type='multipart/form-data', data=_photo_form(nombre='Robada'))
    assert resp.status_code == 403
    assert _uploads(app) == before

    resp = client.patch('/mascotas/no-existe', headers=user_headers,
                        content_type='multipart/form-data', data=_photo_form())
    assert resp.status_code == 404
    assert _uploads(app) == before


def test_failed_create_discards_upload(app, client, admin_headers):
    resp = client.post('/mascotas/', headers=admin_headers, content_type='multipart/form-data',
                       data=_photo_form(nombre='Toby', tipo='perro', email_usuario='nadie@example.com'))

    assert resp.status_code == 404
    assert _uploads(app) == []


def test_oversized_upload_returns_413(app, client, user_headers, make_pet):
    big = {'foto': (io.BytesIO(b'x' * (6 * 1024 * 1024)), 'enorme.png')}

    resp = client.post('/mascotas/', headers=user_headers, content_type='multipart/form-data',
                       data={'nombre': 'Luna', 'tipo': 'perro', **big})
    assert resp.status_code == 413
    assert resp.get_json()['error_code'] == 'REQUEST_ENTITY_TOO_LARGE'

    pet = make_pet(user_headers)
    big = {'foto': (io.BytesIO(b'x' * (6 * 1024 * 1024)), 'enorme.png')}
    resp = client.patch(f"/mascotas/{pet['_id']}", headers=user_headers,
                        content_type='multipart/form-data', data=big)
    assert resp.status_code == 413
    assert _uploads(app) == []


def test_public_routes_ignore_revoked_token(client, user_headers, make_pet):
    pet = make_pet(user_headers)
    assert client.post('/auth/logout', headers=user_headers).status_code == 200

    assert client.get('/mascotas/', headers=user_headers).status_code == 200
    assert client.get(f"/mascotas/{pet['_id']}", headers=user_headers).status_code == 200
    assert client.get('/mascotas/mis-publicaciones', headers=user_headers).status_code == 401


def test_public_routes_ignore_expired_token(app, client, user, user_headers, make_pet):
    pet = make_pet(user_headers)
    with app.app_context():
        token = create_access_token(identity=user['id'], expires_delta=timedelta(seconds=-1))
    headers = {'Authorization': f"Bearer {token}"}

    resp = client.get('/mascotas/', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['totalDocs'] == 1
    assert client.get(f"/mascotas/{pet['_id']}", headers=headers).status_code == 200
    assert client.get('/mascotas/', headers={'Authorization': 'Bearer basura'}).status_code == 200


def test_deleted_pet_only_editable_by_admin(client, user_headers, admin_headers, make_pet):
    pet = make_pet(user_headers)
    assert client.delete(f"/mascotas/{pet['_id']}", headers=user_headers).status_code == 200

    resp = client.patch(f"/mascotas/{pet['_id']}", json={'nombre': 'Fantasma'}, headers=user_headers)
    assert resp.status_code == 404
    assert client.delete(f"/mascotas/{pet['_id']}", headers=user_headers).status_code == 404

    resp = client.patch(f"/mascotas/{pet['_id']}", json={'nombre': 'Fantasma'}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()['borrado'] is True

# pet_adoption/api/users/test_users_routes.py
NEW_PASSWORD = "Nueva.Clave1"


def test_only_admin_lists_users(client, user_headers, admin_headers):
    assert client.get('/admin/users/', headers=user_headers).status_code == 403

    resp = client.get('/admin/users/', headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['totalDocs'] == 2
    assert body['limit'] == 6
    assert all('contrasena' not in u and 'reset_token' not in u for u in body['docs'])


def test_list_users_filters_and_pagination(client, make_user, admin_headers):
    for i in range(8):
        make_user(f"socio{i}@example.com", nombre=f"Socio {i}")

    resp = client.get('/admin/users/?nombre=socio&page=2', headers=admin_headers)
    body = resp.get_json()
    assert body['totalDocs'] == 8
    assert body['totalPages'] == 2
    assert body['page'] == 2
    assert len(body['docs']) == 2

    resp = client.get('/admin/users/?rol=admin', headers=admin_headers)
    assert [u['email'] for u in resp.get_json()['docs']] == ['admin@example.com']


def test_soft_deleted_users_hidden_unless_inactivas(client, user, admin_headers):
    assert client.delete(f"/admin/users/{user['id']}", headers=admin_headers).status_code == 200

    emails = [u['email'] for u in client.get('/admin/users/', headers=admin_headers).get_json()['docs']]
    assert user['email'] not in emails

    docs = client.get('/admin/users/?inactivas=true', headers=admin_headers).get_json()['docs']
    borrado = next(u for u in docs if u['email'] == user['email'])
    assert borrado['borrado'] is True
    assert borrado['activo'] is False
    assert borrado['borradoEn'] is not None


def test_get_user_admin_or_self(client, user, other_user, user_headers, admin_headers):
    assert client.get(f"/admin/users/{user['id']}", headers=user_headers).status_code == 200
    assert client.get(f"/admin/users/{other_user['id']}", headers=user_headers).status_code == 403
    assert client.get(f"/admin/users/{other_user['id']}", headers=admin_headers).status_code == 200
    assert client.get('/admin/users/no-existe', headers=admin_headers).status_code == 404


def test_admin_creates_user_and_rejects_duplicates(client, user, admin_headers, login):
    payload = {'nombre': 'Gestor', 'email': 'gestor@example.com', 'contrasena': NEW_PASSWORD, 'rol': 'admin'}
    resp = client.post('/admin/users/', json=payload, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.get_json()['usuario']['rol'] == 'admin'
    login('gestor@example.com', NEW_PASSWORD)

    payload['email'] = user['email']
    assert client.post('/admin/users/', json=payload, headers=admin_headers).status_code == 400


def test_update_self_but_not_role(client, user, other_user, user_headers, login):
    resp = client.patch(f"/admin/users/{user['id']}", headers=user_headers,
                        json={'apellido': 'García', 'contrasena': NEW_PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()['usuario']['apellido'] == 'García'
    login(user['email'], NEW_PASSWORD)

    assert client.patch(f"/admin/users/{user['id']}", headers=user_headers, json={'rol': 'admin'}).status_code == 403
    resp = client.patch(f"/admin/users/{user['id']}", headers=user_headers, json={'email': other_user['email']})
    assert resp.status_code == 400
    assert client.patch(f"/admin/users/{other_user['id']}", headers=user_headers,
                        json={'nombre': 'X'}).status_code == 403


def test_admin_deactivates_account(client, user, admin_headers):
    resp = client.patch(f"/admin/users/{user['id']}", headers=admin_headers, json={'activo': False})
    assert resp.status_code == 200

    resp = client.post('/auth/login', json={'email': user['email'], 'contrasena': 'Secreta.123'})
    assert resp.status_code == 403


def test_restore_is_admin_only(client, user, user_headers, admin_headers, login):
    assert client.delete(f"/admin/users/{user['id']}", headers=user_headers).status_code == 200
    # La cuenta borrada ya no puede usar su token
    assert client.patch(f"/admin/users/restore/{user['id']}", headers=user_headers).status_code == 403

    resp = client.patch(f"/admin/users/restore/{user['id']}", headers=admin_headers)
    assert resp.status_code == 200
    restored = resp.get_json()['usuario']
    assert restored['borrado'] is False
    assert restored['borradoEn'] is None
    assert restored['activo'] is True
    login(user['email'])


def test_user_options_sorted_by_name(client, make_user, admin_headers):
    make_user('zoe@example.com', nombre='Zoe')
    make_user('bruno@example.com', nombre='bruno')

    resp = client.get('/admin/users/all', headers=admin_headers)
    assert resp.status_code == 200
    assert [u['nombre'] for u in resp.get_json()] == ['Admin', 'bruno', 'Zoe']
    assert set(resp.get_json()[0]) == {'_id', 'nombre', 'apellido', 'email'}

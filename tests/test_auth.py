"""Test authentication and operator account endpoints."""
import json

def test_health_check(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['status'] == 'ok'
    assert data['message'] == 'API is running'

def test_login_success(client, admin_user):
    """Test successful login."""
    response = client.post('/api/auth/login', json={
        'username': 'admin',
        'password': 'admin123'
    })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] == False
    assert 'token' in data['data']
    assert data['data']['user']['username'] == 'admin'
    assert data['data']['user']['role'] == 'admin'
    assert 'password_hash' not in data['data']['user']

def test_login_invalid_credentials(client, admin_user):
    response = client.post('/api/auth/login', json={
        'username': 'admin',
        'password': 'wrong-password'
    })
    assert response.status_code == 401
    assert json.loads(response.data)['message'] == 'Invalid credentials'

    response = client.post('/api/auth/login', json={
        'username': 'nobody',
        'password': 'admin123'
    })
    assert response.status_code == 401

def test_login_requires_both_fields(client):
    response = client.post('/api/auth/login', json={'username': 'admin'})
    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'Username and password are required'

def test_login_token_authenticates_later_requests(client, regular_user):
    response = client.post('/api/auth/login', json={
        'username': 'scanner',
        'password': 'scanner123'
    })
    token = json.loads(response.data)['data']['token']

    response = client.get('/api/auth/verify', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    assert json.loads(response.data)['data']['user']['username'] == 'scanner'

def test_verify_without_token(client):
    response = client.get('/api/auth/verify')
    assert response.status_code == 401
    data = json.loads(response.data)
    assert data['error'] == True
    assert data['message'] == 'No token, authorization denied'

def test_verify_with_garbage_token(client):
    response = client.get('/api/auth/verify', headers={'Authorization': 'Bearer not-a-jwt'})
    assert response.status_code == 401

def test_deactivated_user_is_rejected(client, regular_user, user_headers):
    regular_user.update(is_active=False)

    response = client.get('/api/auth/verify', headers=user_headers)
    assert response.status_code == 401

def test_admin_registers_operator(client, admin_headers):
    response = client.post('/api/auth/register', headers=admin_headers, json={
        'username': 'gate2',
        'password': 'secret12',
        'email': 'gate2@example.com'
    })

    assert response.status_code == 201
    user = json.loads(response.data)['data']['user']
    assert user['username'] == 'gate2'
    assert user['role'] == 'user'

    response = client.post('/api/auth/login', json={'username': 'gate2', 'password': 'secret12'})
    assert response.status_code == 200

def test_register_duplicate_username(client, admin_headers):
    response = client.post('/api/auth/register', headers=admin_headers, json={
        'username': 'admin',
        'password': 'another1'
    })
    assert response.status_code == 409

def test_register_validation(client, admin_headers):
    response = client.post('/api/auth/register', headers=admin_headers, json={})
    assert response.status_code == 400

    response = client.post('/api/auth/register', headers=admin_headers, json={
        'username': 'gate3',
        'password': '123'
    })
    assert response.status_code == 400

    response = client.post('/api/auth/register', headers=admin_headers, json={
        'username': 'gate3',
        'password': 'secret12',
        'email': 'invalid-email'
    })
    assert response.status_code == 400

def test_register_requires_admin(client, user_headers):
    payload = {'username': 'gate4', 'password': 'secret12'}

    response = client.post('/api/auth/register', json=payload)
    assert response.status_code == 401

    response = client.post('/api/auth/register', headers=user_headers, json=payload)
    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Admin access required'

def test_list_users(client, admin_headers, regular_user):
    response = client.get('/api/users', headers=admin_headers)

    assert response.status_code == 200
    usernames = sorted(user['username'] for user in json.loads(response.data)['data'])
    assert usernames == ['admin', 'scanner']

def test_list_users_requires_admin(client, user_headers):
    response = client.get('/api/users', headers=user_headers)
    assert response.status_code == 403

def test_profile(client, user_headers):
    response = client.get('/api/users/profile', headers=user_headers)

    assert response.status_code == 200
    assert json.loads(response.data)['data']['username'] == 'scanner'

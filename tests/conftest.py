"""Shared fixtures: application, client, operators and attendees."""
from datetime import datetime

import pytest
import requests
from flask_jwt_extended import create_access_token
from requests.structures import CaseInsensitiveDict

from qr_attendance import create_app, db
from qr_attendance.models.attendee import Attendee
from qr_attendance.models.user import User, UserRole

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

def _make_user(username, password, role):
    user = User(username=username, email=f'{username}@example.com', role=role)
    user.set_password(password)
    return user.save()

@pytest.fixture
def admin_user(app):
    return _make_user('admin', 'admin123', UserRole.ADMIN)

@pytest.fixture
def regular_user(app):
    return _make_user('scanner', 'scanner123', UserRole.USER)

@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token(identity=str(admin_user.id))
    return {'Authorization': f'Bearer {token}'}

@pytest.fixture
def user_headers(regular_user):
    token = create_access_token(identity=str(regular_user.id))
    return {'Authorization': f'Bearer {token}'}

@pytest.fixture
def make_attendee(app):
    """Factory creating attendees straight in the store."""
    def factory(reg_no='U100', qr='ABC123', name='Jane Doe', branch='CSE', **extra):
        attendee = Attendee(
            full_name=name,
            university_reg_no=reg_no,
            branch=branch,
            qrcode_number=qr,
            signup_date=datetime.now(),
            **extra
        )
        return attendee.save()
    return factory

@pytest.fixture
def noon_today():
    """A fixed moment well inside the current local day."""
    return datetime.now().replace(hour=12, minute=0, second=0, microsecond=0)

class FlaskHttp:
    """Stands in for ``requests.Session`` and routes calls to the Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, json=None, files=None, **kwargs):
        path = '/' + url.split('://', 1)[-1].split('/', 1)[-1]
        self.calls.append((method, path))

        options = {'headers': headers or {}}
        if json is not None:
            options['json'] = json
        if files:
            options['data'] = {
                name: (fh, filename, content_type)
                for name, (filename, fh, content_type) in files.items()
            }
            options['content_type'] = 'multipart/form-data'

        flask_response = self.test_client.open(path, method=method, **options)

        response = requests.Response()
        response.status_code = flask_response.status_code
        response.reason = flask_response.status.split(' ', 1)[-1]
        response.headers = CaseInsensitiveDict(dict(flask_response.headers))
        response._content = flask_response.data
        response.url = url
        return response

@pytest.fixture
def flask_http(client):
    return FlaskHttp(client)

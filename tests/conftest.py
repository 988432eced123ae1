"""
Pytest configuration and fixtures
"""
from urllib.parse import urlsplit

import pytest

from myrentcard import create_app
from myrentcard.client import ApiClient
from myrentcard.models import db as _db

PASSWORD = 'password123'


@pytest.fixture(scope="function")
def app():
    """Application bound to a fresh in-memory database.

    No app context stays pushed: requests from different test clients must not
    share flask.g, where Flask-Login keeps the current user.
    """
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """Anonymous test client"""
    return app.test_client()


def register(client, email, user_type, first_name, last_name, **extra):
    payload = {
        'email': email,
        'password': PASSWORD,
        'firstName': first_name,
        'lastName': last_name,
        'userType': user_type,
    }
    payload.update(extra)
    response = client.post('/api/auth/register', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['user']


@pytest.fixture(scope="function")
def tenant_client(app):
    """Test client logged in as tenant John Smith"""
    client = app.test_client()
    client.user = register(client, 'john.smith@example.com', 'tenant', 'John', 'Smith')
    return client


@pytest.fixture(scope="function")
def other_tenant_client(app):
    """Second tenant, for ownership checks"""
    client = app.test_client()
    client.user = register(client, 'mary.major@example.com', 'tenant', 'Mary', 'Major')
    return client


@pytest.fixture(scope="function")
def landlord_client(app):
    """Test client logged in as landlord Lisa Lane"""
    client = app.test_client()
    client.user = register(client, 'lisa@lanehomes.com', 'landlord', 'Lisa', 'Lane',
                           phone='555-0100', companyName='Lane Homes')
    return client


@pytest.fixture
def reference_payload():
    return {
        'name': 'Jane Doe',
        'relationship': 'previous_landlord',
        'email': 'jane.doe@example.com',
        'phone': '555-0199',
        'notes': 'Rented 12 Elm St 2019-2022',
    }


@pytest.fixture
def create_reference(tenant_client, reference_payload):
    """Factory adding a reference for the logged-in tenant"""
    def _create(**overrides):
        payload = dict(reference_payload)
        payload.update(overrides)
        response = tenant_client.post('/api/tenant/references', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create


@pytest.fixture
def issue_link(tenant_client):
    """Factory sending a verification link; returns the token"""
    def _issue(reference_id):
        response = tenant_client.post(f'/api/tenant/references/{reference_id}/send-verification')
        assert response.status_code == 200, response.get_json()
        return response.get_json()['verificationUrl'].rsplit('/', 1)[-1]
    return _issue


class FlaskResponse:
    """The parts of requests.Response the client library reads"""

    def __init__(self, response):
        self.status_code = response.status_code
        self.text = response.get_data(as_text=True)
        self._json = response.get_json(silent=True)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError('Response body is not JSON')
        return self._json


class FlaskSession:
    """requests.Session stand-in that dispatches to a Flask test client"""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, json=None, params=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path, json))
        response = self.test_client.open(path, method=method, json=json, query_string=params)
        return FlaskResponse(response)


@pytest.fixture
def make_api_client():
    """Factory wrapping a Flask test client in the real ApiClient"""
    def _make(test_client):
        return ApiClient(base_url='http://testserver', session=FlaskSession(test_client), timeout=5)
    return _make

"""
Thin JSON-over-HTTP client for the MyRentCard REST API.
"""
import logging
import requests
from myrentcard.config import Config
from myrentcard.client.errors import ApiError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = 'Something went wrong. Please try again.'


def error_from_response(response):
    """Build an ApiError from a failed response; ``message`` is None unless the JSON body has one."""
    message = None
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get('message') or body.get('error')
        code = body.get('code')

    return ApiError(response.status_code, message, code)


class ApiClient:
    """
    Session-backed API client.

    ``session`` may be any object with a ``requests.Session``-style
    ``request`` method; cookies set by ``/api/auth/login`` persist on it.
    """

    def __init__(self, base_url=None, session=None, timeout=None):
        self.base_url = (base_url if base_url is not None else Config.MYRENTCARD_API_URL).rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else Config.API_TIMEOUT

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, payload=None, params=None):
        """
        Send one request and return the decoded JSON body.
        Raises ApiError for non-2xx responses and NetworkError when no response arrives.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self.session.request(
                method,
                self.url(path),
                json=payload,
                params=params or None,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise NetworkError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        if not response.ok:
            raise error_from_response(response)

        if response.status_code == 204 or not response.text:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, payload=None):
        return self.request('POST', path, payload=payload)

    def put(self, path, payload=None):
        return self.request('PUT', path, payload=payload)

    def patch(self, path, payload=None):
        return self.request('PATCH', path, payload=payload)

    def delete(self, path):
        return self.request('DELETE', path)

    def login(self, email, password):
        """Start a session; later requests reuse its cookie."""
        return self.post('/api/auth/login', {'email': email, 'password': password})

    def logout(self):
        return self.post('/api/auth/logout')

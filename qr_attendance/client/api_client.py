"""HTTP client for the QR Attendance API."""
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from qr_attendance.client.session import Session

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:5000'

class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status})"

def format_api_url(url: str) -> str:
    """Normalise a base URL so it ends in ``/api`` exactly once."""
    base_url = url.rstrip('/')
    if base_url.endswith('/api'):
        return base_url
    return f"{base_url}/api"

class ApiClient:
    """Thin wrapper over ``requests`` that understands the API's JSON envelope."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[Session] = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None
    ):
        self.base_url = format_api_url(base_url or os.environ.get('QR_ATTENDANCE_API_URL') or DEFAULT_API_URL)
        self.session = session
        self.timeout = timeout
        self.http = http or requests.Session()

    # ---------- plumbing ----------

    def _headers(self) -> Dict[str, str]:
        return self.session.auth_header() if self.session else {}

    def _send(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        headers = {**self._headers(), **kwargs.pop('headers', {})}

        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(0, f"Cannot reach {self.base_url}: {e}")

        if not response.ok:
            raise ApiError(response.status_code, self._error_message(response))
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason
        return body.get('message') or response.reason

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        response = self._send(method, endpoint, **kwargs)
        if not response.content:
            return None

        body = response.json()
        if isinstance(body, dict) and 'data' in body:
            return body['data']
        return body

    # ---------- auth ----------

    def login(self, username: str, password: str) -> Session:
        data = self._request('POST', '/auth/login', json={'username': username, 'password': password})
        self.session = Session(token=data['token'], user=data['user'])
        return self.session

    def logout(self) -> None:
        self.session = None

    def verify(self) -> Dict:
        return self._request('GET', '/auth/verify')['user']

    def register_user(self, username: str, password: str, email: Optional[str] = None,
                      role: str = 'user') -> Dict:
        payload = {'username': username, 'password': password, 'role': role}
        if email:
            payload['email'] = email
        return self._request('POST', '/auth/register', json=payload)['user']

    def list_users(self) -> List[Dict]:
        return self._request('GET', '/users')

    # ---------- attendees ----------

    def list_attendees(self) -> List[Dict]:
        return self._request('GET', '/attendance/attendees')

    def get_attendee(self, attendee_id: int) -> Dict:
        return self._request('GET', f'/attendance/attendee/{attendee_id}')

    def create_attendee(self, attendee: Dict) -> Dict:
        return self._request('POST', '/attendance/attendee', json=attendee)

    def update_attendee(self, attendee_id: int, attendee: Dict) -> Dict:
        return self._request('PUT', f'/attendance/attendee/{attendee_id}', json=attendee)

    def delete_attendee(self, attendee_id: int) -> Dict:
        return self._request('DELETE', f'/attendance/attendee/{attendee_id}')

    def attendee_qrcode(self, attendee_id: int) -> bytes:
        return self._send('GET', f'/attendance/attendee/{attendee_id}/qrcode').content

    # ---------- attendance ----------

    def mark(self, qr_code: str, event_type: str) -> Dict:
        return self._request('POST', '/attendance/mark', json={'qrCode': qr_code, 'type': event_type})

    def delete_record(self, record_id: int) -> Dict:
        return self._request('DELETE', f'/attendance/record/{record_id}')

    def stats(self) -> Dict:
        return self._request('GET', '/attendance/stats')

    def history(self) -> List[Dict]:
        return self._request('GET', '/attendance/history')

    # ---------- import ----------

    def import_csv(self, path: str) -> Dict:
        with open(path, 'rb') as fh:
            files = {'file': (os.path.basename(path), fh, 'text/csv')}
            return self._request('POST', '/attendance/import', files=files)

    def import_template(self) -> str:
        return self._send('GET', '/attendance/import/template').text

    def health(self) -> Dict:
        return self._request('GET', '/health')

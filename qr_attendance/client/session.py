"""Operator session held by the console between login and logout.

The session is an explicit object handed to ``ApiClient``; nothing reads a
token from global state. ``SessionStore`` persists it between console
invocations: ``login`` creates the file and ``logout`` removes it.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = os.path.join(os.path.expanduser('~'), '.qr-attendance', 'session.json')

@dataclass
class Session:
    """Authenticated operator: bearer token plus the user it was issued to."""
    token: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def username(self) -> Optional[str]:
        return self.user.get('username')

    @property
    def is_admin(self) -> bool:
        return self.user.get('role') == 'admin'

    def auth_header(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self.token}'}

class SessionStore:
    """Reads and writes a ``Session`` to a private JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.environ.get('QR_ATTENDANCE_SESSION') or DEFAULT_SESSION_PATH

    def load(self) -> Optional[Session]:
        if not os.path.exists(self.path):
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None

        if not data.get('token'):
            return None
        return Session(token=data['token'], user=data.get('user') or {})

    def save(self, session: Session) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(asdict(session), fh)
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)

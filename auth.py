# auth.py
# Admin login against the admin rows served by the sheet API (plain-text passwords)

import logging
from typing import Iterable, Optional

from models import Admin

logger = logging.getLogger(__name__)


def find_admin(admins: Iterable[Admin], username: str, password: str) -> Optional[Admin]:
    for admin in admins:
        if admin.username == username and admin.password == password:
            return admin
    return None


def login(admins: Iterable[Admin], username: str, password: str) -> bool:
    return find_admin(admins, username, password) is not None


class AdminSession:
    """In-memory login flag for the current app session."""

    def __init__(self) -> None:
        self.is_logged_in = False
        self.current_user: Optional[str] = None

    def sign_in(self, admins: Iterable[Admin], username: str, password: str) -> bool:
        if not login(admins, username, password):
            logger.warning(f"Failed admin login for {username!r}")
            return False
        self.is_logged_in = True
        self.current_user = username
        return True

    def sign_out(self) -> None:
        self.is_logged_in = False
        self.current_user = None

    @property
    def display_name(self) -> str:
        return self.current_user or "Admin"

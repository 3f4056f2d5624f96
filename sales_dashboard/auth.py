"""
Admin access check for the dashboard.

A single configured credential pair unlocks the admin view (amounts,
uploads). Everyone else gets the restricted, rank-only view.
"""

import hmac
import logging

from .config import ADMIN_PASSWORD, ADMIN_USERNAME

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def verify_admin(
    username: str,
    password: str,
    expected_username: str = ADMIN_USERNAME,
    expected_password: str = ADMIN_PASSWORD,
) -> bool:
    """Return True when username/password match the admin credentials."""
    user_ok = hmac.compare_digest(str(username).encode(), expected_username.encode())
    pass_ok = hmac.compare_digest(str(password).encode(), expected_password.encode())
    if user_ok and pass_ok:
        logger.info("Admin login succeeded")
        return True
    logger.warning("Admin login failed for user '%s'", username)
    return False

import hmac
from hospital_billing.exceptions import AuthenticationError
from hospital_billing.logger import logger
from hospital_billing.models import User
from hospital_billing.services.storage import DatabaseStorage


class AuthService:
    """Username/password check against the users table.

    Passwords are stored and compared as plaintext; there is no session or
    token issuance. See DESIGN.md before putting this in front of real data.
    """

    def authenticate(self, storage: DatabaseStorage, username: str, password: str) -> User:
        user = storage.get_user_by_username(username)
        if not user or not hmac.compare_digest(
            user.password.encode("utf-8"), password.encode("utf-8")
        ):
            logger.warning(f"🚫 Failed login for '{username}'")
            raise AuthenticationError("Invalid credentials")

        logger.info(f"🔓 {user.username} logged in ({user.role})")
        return user


# Global auth service instance
auth_service = AuthService()

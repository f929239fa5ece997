from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer
from passlib.context import CryptContext

from errors import AuthenticationError, ValidationError

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def change_password(account, current_password: str, new_password: str) -> None:
    """
    Replace the account's password hash after re-checking the current
    password. The caller commits.
    """
    if not current_password or not new_password:
        raise ValidationError("Please provide current and new password")
    if not verify_password(current_password, account.password_hash):
        raise AuthenticationError("Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    account.password_hash = hash_password(new_password)


class TokenSigner:
    """
    Issues and checks bearer tokens carrying an account id.

    Tokens are signed and timestamped; they stop validating max_age
    seconds after issue.
    """

    def __init__(self, secret_key: str, max_age: int):
        self.serializer = URLSafeTimedSerializer(secret_key, salt="access-token")
        self.max_age = max_age

    def create(self, account_id: int) -> str:
        return self.serializer.dumps({"account_id": account_id})

    def read(self, token: str) -> Optional[int]:
        """
        Returns the account id if the token is valid,
        or None if it is invalid/expired.
        """
        try:
            data = self.serializer.loads(token, max_age=self.max_age)
        except BadSignature:
            return None
        if not isinstance(data, dict):
            return None
        account_id = data.get("account_id")
        return account_id if isinstance(account_id, int) else None

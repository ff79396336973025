from passlib.context import CryptContext

from ...application.ports.password_hasher import PasswordHasher


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Stored value is not a recognizable hash
            return False

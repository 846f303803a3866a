"""
Хеширование паролей для таблицы users.

Пользователи — заготовка без HTTP-входа: пароль хранится только как bcrypt-хеш,
его пишет AssetStorage.create_user.
"""
import bcrypt

# bcrypt учитывает не больше 72 байт пароля
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Хеш для колонки users.password."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, stored_hash: str) -> bool:
    """Сверяет пароль с хешем из users.password; битый хеш — просто несовпадение."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), stored_hash.encode("utf-8"))
    except ValueError:
        return False

import bcrypt

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False

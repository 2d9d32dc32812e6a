"""
Password hashing and verification
"""
from werkzeug.security import generate_password_hash, check_password_hash

# Salted scrypt with a fixed work factor (N=32768, r=8, p=1)
PASSWORD_HASH_METHOD = "scrypt:32768:8:1"

# Checked against when the identity does not exist, so unknown emails cost one hash check too
_DUMMY_HASH = generate_password_hash("not-a-real-password", method=PASSWORD_HASH_METHOD)


def hash_password(password):
    """Generate password hash"""
    return generate_password_hash(password, method=PASSWORD_HASH_METHOD)


def verify_password(password_hash, password):
    """Verify password against hash"""
    if not password_hash or password is None:
        check_password_hash(_DUMMY_HASH, password or "")
        return False
    return check_password_hash(password_hash, password)

import base64
import hashlib
import hmac
import os

import bcrypt
from dotenv import load_dotenv

load_dotenv()

pepper_value = os.getenv("PEPPER")
if pepper_value is None:
    raise RuntimeError("PEPPER environment variable is not set.")
PEPPER = pepper_value.encode('utf-8')


def pepper_password(password):
    # 44 bytes of base64, inside bcrypt's 72-byte input limit for any password length
    digest = hmac.new(PEPPER, password.encode('utf-8'), hashlib.sha256).digest()
    return base64.b64encode(digest)


def hash_password(password):
    return bcrypt.hashpw(pepper_password(password), bcrypt.gensalt()).decode('utf-8')


def verify_password(entered_password, stored_hash):
    if not entered_password or not stored_hash:
        return False
    try:
        return bcrypt.checkpw(pepper_password(entered_password), stored_hash.encode('utf-8'))
    except ValueError:
        # malformed stored hash
        return False

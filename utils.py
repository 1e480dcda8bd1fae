import hashlib
import logging

LOG_LEVEL = logging.INFO

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger("FluxBencode")


def sha1_hash(data: bytes) -> bytes:
    """Computes the SHA-1 hash of the given binary data."""
    return hashlib.sha1(data).digest()


# Typed lookups on decoded dictionaries.
# Each returns None when the key is missing or holds another kind of value.

def get_bytes(d, key):
    value = d.get(key)
    return value if isinstance(value, bytes) else None


def get_text(d, key, encoding='utf-8'):
    """Byte string value decoded as text, or None if it does not decode."""
    value = get_bytes(d, key)
    if value is None:
        return None
    try:
        return value.decode(encoding)
    except UnicodeDecodeError:
        return None


def get_int(d, key):
    value = d.get(key)
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def get_list(d, key):
    value = d.get(key)
    return value if isinstance(value, list) else None


def get_dict(d, key):
    value = d.get(key)
    return value if isinstance(value, dict) else None

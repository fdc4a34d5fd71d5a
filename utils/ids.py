import time
import random
import string


def create_id_with_prefix(prefix: str) -> str:
    # timestamp + 4 random chars
    stamp = int(time.time() * 1000)
    rand = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"{prefix}_{stamp}_{rand}"


def storage_key(user_id: str, filename: str) -> str:
    """Object key for an uploaded evidence image: <user>/<millis>_<name>."""
    safe = ''.join(ch if ch.isalnum() or ch in '._-' else '_' for ch in filename) or 'image.jpg'
    return f"{user_id}/{int(time.time() * 1000)}_{safe}"

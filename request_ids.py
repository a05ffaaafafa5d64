# request_ids.py - human-readable request IDs, e.g. RP-20251019-7KX4QM
import secrets
import datetime
from config import LOCAL_TZ

PREFIX = "RP"
SUFFIX_LENGTH = 6
# no 0/O or 1/I so the ID can be read back over the phone
ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"


def generate_request_id(now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    local_day = now.astimezone(LOCAL_TZ).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{PREFIX}-{local_day}-{suffix}"

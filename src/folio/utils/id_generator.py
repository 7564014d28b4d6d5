import secrets
import string

DOCUMENT_ID_ALPHABET = string.ascii_letters + string.digits
DOCUMENT_ID_LENGTH = 20


def new_document_id() -> str:
    """Opaque 20-character document id, same shape as hosted document stores issue."""
    return "".join(secrets.choice(DOCUMENT_ID_ALPHABET) for _ in range(DOCUMENT_ID_LENGTH))

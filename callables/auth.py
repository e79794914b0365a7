import os
from typing import Optional

TOKEN_ENV = "FIREBASE_ID_TOKEN"
TOKEN_FILE = os.getenv("FIREBASE_TOKEN_FILE", "credentials/id_token.txt")


class MissingCredentialError(Exception):
    pass


def get_id_token(token_file: Optional[str] = None) -> str:
    """Return the bearer token for the callable channel.

    The token is issued elsewhere (Firebase Auth sign-in); this only looks it
    up, first in FIREBASE_ID_TOKEN, then in the credentials file.
    """
    token = os.getenv(TOKEN_ENV)
    if token and token.strip():
        return token.strip()

    path = token_file or TOKEN_FILE
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            token = f.read().strip()
        if token:
            return token

    raise MissingCredentialError(
        f"No Firebase ID token found: set {TOKEN_ENV} or write one to {path}"
    )

"""
Referral token cipher.

Sharer ids travel inside share URLs as ``ref=<token>``. The token is the
AES-256-CBC encryption of the id under a key derived from
``SHARE_ENCRYPTION_KEY`` with scrypt, hex encoded.

The IV is fixed (all zero bytes), so the same id always produces the same
token and no server-side token table is needed. This also means identical
ids give identical ciphertexts: fine for hiding a user id in a link, not for
anything that needs semantic security. Swap the implementation behind
``ShareCipher`` (random nonce, lookup table) without touching callers if
that ever changes.
"""
import secrets
from functools import lru_cache

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from app.core.config import settings, validate_share_secret
from app.core.exceptions import BadShareToken

KEY_LENGTH = 32
BLOCK_SIZE_BITS = 128
FIXED_IV = bytes(16)
# 8 random bytes -> 11 url-safe characters
PUBLIC_CODE_BYTES = 8


class ShareCipher:
    def __init__(self, secret: str, salt: str = "salt"):
        validate_share_secret(secret)
        kdf = Scrypt(salt=salt.encode("utf-8"), length=KEY_LENGTH, n=2**14, r=8, p=1)
        self._key = kdf.derive(secret.encode("utf-8"))

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(FIXED_IV))

    def encode(self, identifier: str) -> str:
        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(identifier.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return (encryptor.update(padded) + encryptor.finalize()).hex()

    def decode(self, token: str) -> str:
        """
        Inverse of ``encode``. Raises BadShareToken for anything that is not
        one of our tokens; callers must not retry on it.
        """
        try:
            raw = bytes.fromhex(token)
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(raw) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except (ValueError, TypeError) as exc:
            raise BadShareToken("Invalid share reference") from exc

    @staticmethod
    def new_public_code() -> str:
        return secrets.token_urlsafe(PUBLIC_CODE_BYTES)


@lru_cache
def get_share_cipher() -> ShareCipher:
    return ShareCipher(settings.SHARE_ENCRYPTION_KEY, settings.SHARE_ENCRYPTION_SALT)

from __future__ import annotations

import hashlib

import itsdangerous

SIGNER_NAMESPACE = "crumbs.signed-cookie"


class PayloadSigner:
    """
    Keyed signature of a serialized cookie payload.

    The store salt is the secret key. Signatures are HMAC-SHA256 digests,
    base64 encoded by itsdangerous. The signature travels next to the payload
    instead of being appended to it, so only the digest part of
    `itsdangerous.Signer` is used here.
    """

    def __init__(self, secret_key: str | bytes) -> None:
        self._signer = itsdangerous.Signer(
            secret_key,
            salt=SIGNER_NAMESPACE,
            key_derivation="hmac",
            digest_method=hashlib.sha256,
        )

    def signature(self, payload: str | bytes) -> str:
        return self._signer.get_signature(payload).decode("ascii")

    def verify(self, payload: str | bytes, signature: str | bytes) -> bool:
        """Constant-time check of `signature` against `payload`."""
        return self._signer.verify_signature(payload, signature)

from __future__ import annotations

import hashlib
import hmac


class TrillionSignatureVerifier:
    """
    HMAC-SHA256 verification for inbound Trillion webhooks.
    Verification is disabled when no secret is configured.
    """

    def __init__(self, secret: str | bytes | None = None) -> None:
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self.secret = secret or None

    @property
    def enabled(self) -> bool:
        return self.secret is not None

    def build_expected_signature(self, payload: bytes) -> str:
        if not self.secret:
            return ""
        return hmac.new(self.secret, payload, hashlib.sha256).hexdigest()

    def verify(self, payload: bytes, signature: str | None) -> bool:
        if not self.secret:
            return True
        if not signature:
            return False
        try:
            provided = bytes.fromhex(signature.strip())
        except ValueError:
            return False
        expected = hmac.new(self.secret, payload, hashlib.sha256).digest()
        return hmac.compare_digest(provided, expected)


def verify_signature(payload: bytes, signature: str | None, secret: str | bytes | None) -> bool:
    return TrillionSignatureVerifier(secret).verify(payload, signature)

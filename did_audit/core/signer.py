"""
DID-Audit Record Signer

Ed25519 signatures over DID event records.

The signed message is the record's canonical content without the signature
field (EventRecord.signing_payload), so a signature can be stored inside the
record it covers. Signature strings take the form "ed25519:<base64>".

Usage:
    >>> from did_audit.core.signer import Ed25519Signer, sign_record
    >>>
    >>> signer = Ed25519Signer()
    >>> signed = sign_record(record, signer)
    >>> verify_record_signature(signed, signer.public_key_b64).is_valid
    True
"""

import base64
import dataclasses
from dataclasses import dataclass
from typing import Optional, Tuple

from nacl.signing import SigningKey, VerifyKey
from nacl.exceptions import BadSignatureError, CryptoError

from did_audit.core.events import EventRecord


SIGNATURE_SCHEME = "ed25519"


@dataclass
class SignatureResult:
    """Result of a signing operation."""
    signature: bytes
    signature_b64: str
    public_key: bytes
    public_key_b64: str


@dataclass
class VerificationResult:
    """Result of a signature verification."""
    is_valid: bool
    error_message: Optional[str] = None


class Ed25519Signer:
    """
    Ed25519 digital signature provider backed by PyNaCl.
    """

    def __init__(self, private_key: Optional[bytes] = None):
        """
        Initialize the signer.

        Args:
            private_key: Optional 32-byte private key (seed). If not provided,
                        a new key pair will be generated.
        """
        if private_key:
            self._signing_key = SigningKey(private_key)
        else:
            self._signing_key = SigningKey.generate()
        self._verify_key = self._signing_key.verify_key

    @classmethod
    def from_private_key_b64(cls, private_key_b64: str) -> 'Ed25519Signer':
        """Create a signer from a base64-encoded private key."""
        return cls(private_key=base64.b64decode(private_key_b64))

    @property
    def public_key(self) -> bytes:
        return bytes(self._verify_key)

    @property
    def public_key_b64(self) -> str:
        return base64.b64encode(self.public_key).decode('ascii')

    @property
    def private_key(self) -> bytes:
        return bytes(self._signing_key)

    @property
    def private_key_b64(self) -> str:
        return base64.b64encode(self.private_key).decode('ascii')

    def sign(self, data: bytes) -> SignatureResult:
        """
        Sign data with the private key.

        Args:
            data: The bytes to sign

        Returns:
            SignatureResult: Contains signature and public key
        """
        signature = self._signing_key.sign(data).signature
        return SignatureResult(
            signature=signature,
            signature_b64=base64.b64encode(signature).decode('ascii'),
            public_key=self.public_key,
            public_key_b64=self.public_key_b64
        )

    def sign_string(self, data: str) -> SignatureResult:
        """Sign a string (UTF-8 encoded)."""
        return self.sign(data.encode('utf-8'))

    @staticmethod
    def verify_with_public_key_b64(
        data: bytes,
        signature_b64: str,
        public_key_b64: str
    ) -> VerificationResult:
        """
        Verify using base64-encoded signature and public key.

        Args:
            data: The original signed data
            signature_b64: Base64-encoded signature
            public_key_b64: Base64-encoded public key

        Returns:
            VerificationResult: Contains is_valid and optional error
        """
        try:
            signature = base64.b64decode(signature_b64, validate=True)
            verify_key = VerifyKey(base64.b64decode(public_key_b64, validate=True))
            verify_key.verify(data, signature)
            return VerificationResult(is_valid=True)
        except BadSignatureError as e:
            return VerificationResult(is_valid=False, error_message=str(e))
        except (CryptoError, ValueError, TypeError) as e:
            return VerificationResult(is_valid=False, error_message=f"Decode error: {e}")


def generate_key_pair_b64() -> Tuple[str, str]:
    """
    Generate a new Ed25519 key pair as base64 strings.

    Returns:
        Tuple[str, str]: (private_key_b64, public_key_b64)
    """
    signer = Ed25519Signer()
    return (signer.private_key_b64, signer.public_key_b64)


def sign_record(record: EventRecord, signer: Ed25519Signer) -> EventRecord:
    """
    Return a copy of the record carrying a signature over its content.

    Args:
        record: Record to sign (its current signature is ignored)
        signer: Signing key

    Returns:
        EventRecord: The signed record
    """
    result = signer.sign_string(record.signing_payload())
    return dataclasses.replace(record, signature=f"{SIGNATURE_SCHEME}:{result.signature_b64}")


def verify_record_signature(record: EventRecord, public_key_b64: str) -> VerificationResult:
    """
    Verify the Ed25519 signature carried by a record.

    Args:
        record: Signed record
        public_key_b64: Base64-encoded public key of the signer

    Returns:
        VerificationResult: Contains is_valid and optional error
    """
    scheme, _, signature_b64 = record.signature.partition(':')
    if scheme != SIGNATURE_SCHEME or not signature_b64:
        return VerificationResult(
            is_valid=False,
            error_message=f"Unsupported signature format: {record.signature[:16]!r}"
        )
    return Ed25519Signer.verify_with_public_key_b64(
        record.signing_payload().encode('utf-8'),
        signature_b64,
        public_key_b64
    )

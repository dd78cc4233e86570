from nacl.signing import SigningKey, VerifyKey
from nacl.exceptions import BadSignatureError


def publisher_pubkey(seed: bytes) -> bytes:
    return bytes(SigningKey(seed).verify_key)


def sign_ed25519(seed: bytes, message: bytes) -> tuple[bytes, bytes]:
    """Returns (signature, public key) for a 32-byte seed."""
    sk = SigningKey(seed)
    return sk.sign(message).signature, bytes(sk.verify_key)


def verify_ed25519(public_key_bytes: bytes, message: bytes, signature: bytes) -> bool:
    try:
        VerifyKey(public_key_bytes).verify(message, signature)
    except (BadSignatureError, ValueError):
        return False
    return True

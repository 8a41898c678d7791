"""
puzzlevm/keys.py - BLS12-381 Key Material

Thin wrapper over blspy's AugSchemeMPL. Keys, signatures and hashes travel
through puzzlevm as plain fixed-length ``bytes``; blspy objects only exist
inside this module.
"""

from typing import Iterable, List

from blspy import AugSchemeMPL, G1Element, G2Element, PrivateKey

from .errors import RangeError

PRIV_KEY_LEN = 32
PUB_KEY_LEN = 48
SIG_LEN = 96

# Scalar field order of BLS12-381
GROUP_ORDER = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001


def _check_len(blob: bytes, expected: int, what: str) -> bytes:
    blob = bytes(blob)
    if len(blob) != expected:
        raise RangeError(f"{what} must be {expected} bytes, got {len(blob)}")
    return blob


def g1_from_bytes(blob: bytes) -> G1Element:
    blob = _check_len(blob, PUB_KEY_LEN, "public key")
    try:
        return G1Element.from_bytes(blob)
    except (ValueError, RuntimeError) as e:
        raise RangeError(f"invalid G1 element: {e}")


def private_key_for_exponent(exponent: int) -> PrivateKey:
    """Secret key whose scalar is ``exponent mod GROUP_ORDER``."""
    blob = (exponent % GROUP_ORDER).to_bytes(PRIV_KEY_LEN, "big")
    return PrivateKey.from_bytes(blob)


def public_key_for_exponent(exponent: int) -> bytes:
    """exponent·G in compressed form."""
    return bytes(private_key_for_exponent(exponent).get_g1())


def aggregate_public_keys(public_keys: Iterable[bytes]) -> bytes:
    """Sum of G1 points; the empty sum is the point at infinity."""
    total = G1Element()
    for pk in public_keys:
        total = total + g1_from_bytes(pk)
    return bytes(total)


def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    pk = g1_from_bytes(public_key)
    sig_blob = _check_len(signature, SIG_LEN, "signature")
    try:
        sig = G2Element.from_bytes(sig_blob)
    except (ValueError, RuntimeError) as e:
        raise RangeError(f"invalid G2 element: {e}")
    return AugSchemeMPL.verify(pk, bytes(message), sig)


class Key:
    """
    A BLS private key and the operations the wallet needs from it.

        key = Key.generate(seed)
        sig = key.sign(b"message")
        assert Key.verify(key.public_key, b"message", sig)
    """

    PRIV_KEY_LEN = PRIV_KEY_LEN
    PUB_KEY_LEN = PUB_KEY_LEN
    SIG_LEN = SIG_LEN

    def __init__(self, private_key: bytes):
        blob = _check_len(private_key, PRIV_KEY_LEN, "private key")
        try:
            self._sk = PrivateKey.from_bytes(blob)
        except (ValueError, RuntimeError) as e:
            raise RangeError(f"invalid private key: {e}")

    @classmethod
    def generate(cls, seed: bytes) -> "Key":
        """KeyGen(seed); the seed must hold at least 32 bytes of entropy."""
        if len(seed) < 32:
            raise RangeError(f"seed must be at least 32 bytes, got {len(seed)}")
        return cls(bytes(AugSchemeMPL.key_gen(bytes(seed))))

    @classmethod
    def from_secret_exponent(cls, exponent: int) -> "Key":
        return cls(bytes(private_key_for_exponent(exponent)))

    @property
    def private_key(self) -> bytes:
        return bytes(self._sk)

    @property
    def secret_exponent(self) -> int:
        return int.from_bytes(bytes(self._sk), "big")

    @property
    def public_key(self) -> bytes:
        return bytes(self._sk.get_g1())

    def sign(self, message: bytes) -> bytes:
        return bytes(AugSchemeMPL.sign(self._sk, bytes(message)))

    @staticmethod
    def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
        return verify(public_key, message, signature)

    @staticmethod
    def aggregate_public_keys(public_keys: Iterable[bytes]) -> bytes:
        return aggregate_public_keys(public_keys)

    def derive_child(self, index: int) -> "Key":
        return Key(bytes(AugSchemeMPL.derive_child_sk(self._sk, index)))

    def derive_path(self, path: List[int]) -> "Key":
        key = self
        for index in path:
            key = key.derive_child(index)
        return key

    def __eq__(self, other) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self.private_key == other.private_key

    def __hash__(self) -> int:
        return hash(self.public_key)

    def __repr__(self) -> str:
        return f"Key(public_key={self.public_key.hex()})"

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shush.kms.key import KeyReference


@dataclass(frozen=True)
class DecryptResult:
    key_id: str
    plaintext: str


class KMSProvider(ABC):
    """Abstract KMS provider interface. Each call is one remote round trip."""

    @abstractmethod
    def encrypt(self, key: KeyReference, plaintext: bytes) -> bytes:
        """Return the raw ciphertext blob for `plaintext` under `key`."""

    @abstractmethod
    def decrypt(self, ciphertext: bytes) -> DecryptResult:
        """Return the plaintext together with the id of the key KMS used.
        The key is recovered from the ciphertext blob, no reference is needed.
        """

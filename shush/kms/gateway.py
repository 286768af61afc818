from shush.errors import InputError
from shush.kms import codec
from shush.kms.key import KeyReference
from shush.kms.provider import DecryptResult, KMSProvider


class KmsGateway:
    """Text level encrypt/decrypt: a KMS provider plus the base64 envelope."""

    def __init__(self, provider: KMSProvider):
        self.provider = provider

    def encrypt(self, key: KeyReference, plaintext: str, no_padding: bool = False) -> str:
        try:
            data = plaintext.encode('utf-8')
        except UnicodeEncodeError as e:
            raise InputError(f"Plaintext is not valid UTF-8: {e}") from e
        blob = self.provider.encrypt(key, data)
        return codec.encode(blob, no_padding)

    def decrypt(self, token: str, no_padding: bool = False) -> DecryptResult:
        # Malformed tokens fail here, before any network call.
        blob = codec.decode(token, no_padding)
        return self.provider.decrypt(blob)

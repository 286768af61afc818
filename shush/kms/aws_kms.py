import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shush.errors import MissingPayload, RemoteFailure
from shush.kms.key import KeyReference
from .provider import DecryptResult, KMSProvider

logger = logging.getLogger(__name__)


def _error_code(e: Exception) -> str | None:
    if isinstance(e, ClientError):
        return e.response.get('Error', {}).get('Code')
    return None


class AWSKMSProvider(KMSProvider):
    """AWS KMS provider using the Encrypt/Decrypt APIs.

    Expects AWS credentials available in environment, shared config or
    instance role. Failures are raised immediately, nothing is retried here.
    """

    def __init__(self, region_name: str | None = None, endpoint_url: str | None = None,
                 profile_name: str | None = None, client=None):
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.profile_name = profile_name
        self._client = client

    @property
    def client(self):
        # Created on first use so commands that never reach KMS need no AWS setup.
        if self._client is None:
            try:
                if self.profile_name:
                    session = boto3.Session(profile_name=self.profile_name)
                    self._client = session.client('kms', region_name=self.region_name,
                                                  endpoint_url=self.endpoint_url)
                else:
                    self._client = boto3.client('kms', region_name=self.region_name,
                                                endpoint_url=self.endpoint_url)
            except BotoCoreError as e:
                raise RemoteFailure(f"Could not create KMS client: {e}") from e
        return self._client

    def encrypt(self, key: KeyReference, plaintext: bytes) -> bytes:
        logger.debug("KMS encrypt with key %s", key.key_id)
        try:
            resp = self.client.encrypt(KeyId=key.key_id, Plaintext=plaintext)
        except (BotoCoreError, ClientError) as e:
            raise RemoteFailure(f"KMS encrypt failed: {e}", code=_error_code(e)) from e

        blob = resp.get('CiphertextBlob')
        if not blob:
            raise MissingPayload("Could not get encrypted cipher text")
        return blob

    def decrypt(self, ciphertext: bytes) -> DecryptResult:
        try:
            resp = self.client.decrypt(CiphertextBlob=ciphertext)
        except (BotoCoreError, ClientError) as e:
            raise RemoteFailure(f"KMS decrypt failed: {e}", code=_error_code(e)) from e

        blob = resp.get('Plaintext')
        if blob is None:
            raise MissingPayload("Could not get decrypted plain text")
        key_id = resp.get('KeyId') or ''
        logger.debug("KMS decrypt used key %s", key_id)
        return DecryptResult(key_id=key_id, plaintext=blob.decode('utf-8', errors='replace'))

from unittest.mock import patch, MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError
from shush.errors import MissingPayload, RemoteFailure
from shush.kms.aws_kms import AWSKMSProvider
from shush.kms.key import resolve_key


def _client_error(code, op):
    return ClientError({'Error': {'Code': code, 'Message': 'boom'}}, op)


def test_aws_kms_encrypt_decrypt():
    mock_client = MagicMock()
    mock_client.encrypt.return_value = {'CiphertextBlob': b'cipher', 'KeyId': 'arn:aws:kms:eu-west-1:1:key/abc'}
    mock_client.decrypt.return_value = {
        'Plaintext': b'super secret',
        'KeyId': 'arn:aws:kms:eu-west-1:1:key/abc',
    }

    with patch('boto3.client', return_value=mock_client) as factory:
        kms = AWSKMSProvider(region_name='eu-west-1')
        assert kms.encrypt(resolve_key('test'), b'super secret') == b'cipher'
        mock_client.encrypt.assert_called_once_with(KeyId='alias/test', Plaintext=b'super secret')

        res = kms.decrypt(b'cipher')
        assert res.plaintext == 'super secret'
        assert res.key_id == 'arn:aws:kms:eu-west-1:1:key/abc'
        mock_client.decrypt.assert_called_once_with(CiphertextBlob=b'cipher')

    factory.assert_called_once_with('kms', region_name='eu-west-1', endpoint_url=None)


def test_client_is_created_lazily():
    with patch('boto3.client') as factory:
        AWSKMSProvider()
        factory.assert_not_called()


def test_profile_uses_session():
    with patch('boto3.Session') as session_cls:
        kms = AWSKMSProvider(profile_name='dev', region_name='us-east-1')
        kms.client
        session_cls.assert_called_once_with(profile_name='dev')
        session_cls.return_value.client.assert_called_once_with(
            'kms', region_name='us-east-1', endpoint_url=None)


def test_client_creation_failure_is_remote_failure():
    with patch('boto3.client', side_effect=NoRegionError()):
        kms = AWSKMSProvider()
        with pytest.raises(RemoteFailure):
            kms.decrypt(b'cipher')


def test_encrypt_rejected_key():
    mock_client = MagicMock()
    mock_client.encrypt.side_effect = _client_error('NotFoundException', 'Encrypt')
    kms = AWSKMSProvider(client=mock_client)

    with pytest.raises(RemoteFailure) as exc:
        kms.encrypt(resolve_key('missing'), b'x')
    assert exc.value.code == 'NotFoundException'
    assert not isinstance(exc.value, MissingPayload)


def test_encrypt_without_ciphertext():
    mock_client = MagicMock()
    mock_client.encrypt.return_value = {'KeyId': 'abc'}
    kms = AWSKMSProvider(client=mock_client)

    with pytest.raises(MissingPayload):
        kms.encrypt(resolve_key('key'), b'x')


def test_decrypt_network_failure():
    mock_client = MagicMock()
    mock_client.decrypt.side_effect = EndpointConnectionError(endpoint_url='https://kms.local')
    kms = AWSKMSProvider(client=mock_client)

    with pytest.raises(RemoteFailure) as exc:
        kms.decrypt(b'cipher')
    assert exc.value.code is None
    assert mock_client.decrypt.call_count == 1


def test_decrypt_without_plaintext():
    mock_client = MagicMock()
    mock_client.decrypt.return_value = {'KeyId': 'abc'}
    kms = AWSKMSProvider(client=mock_client)

    with pytest.raises(MissingPayload):
        kms.decrypt(b'cipher')


def test_decrypt_missing_key_id_defaults_to_empty():
    mock_client = MagicMock()
    mock_client.decrypt.return_value = {'Plaintext': b'value'}
    kms = AWSKMSProvider(client=mock_client)

    assert kms.decrypt(b'cipher').key_id == ''


def test_decrypt_invalid_utf8_is_replaced():
    mock_client = MagicMock()
    mock_client.decrypt.return_value = {'Plaintext': b'ok\xff', 'KeyId': 'abc'}
    kms = AWSKMSProvider(client=mock_client)

    assert kms.decrypt(b'cipher').plaintext == 'ok\ufffd'

"""Text envelope for KMS ciphertext blobs.

Tokens use the standard base64 alphabet, either with trailing ``=``
padding or without it. The token carries no marker for the mode, so the
same ``no_padding`` flag must be used to encode and decode a value.
"""
import base64
import binascii

from shush.errors import DecodeFailure


def encode(data: bytes, no_padding: bool = False) -> str:
    token = base64.b64encode(data).decode('ascii')
    if no_padding:
        token = token.rstrip('=')
    return token


def decode(token: str, no_padding: bool = False) -> bytes:
    try:
        raw = token.encode('ascii')
    except UnicodeEncodeError:
        raise DecodeFailure("Invalid base64: non-ASCII character in token")

    if no_padding:
        if b'=' in raw:
            raise DecodeFailure("Invalid base64: padding present in unpadded token")
        if len(raw) % 4 == 1:
            raise DecodeFailure("Invalid base64: impossible token length")
        raw += b'=' * (-len(raw) % 4)

    try:
        return base64.b64decode(raw, validate=True)
    except binascii.Error as e:
        raise DecodeFailure(f"Invalid base64: {e}") from e

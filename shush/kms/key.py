import re
from uuid import UUID
from dataclasses import dataclass

ARN_PREFIX = "arn:aws:kms"
ALIAS_PREFIX = "alias/"

# UUID() also accepts braces, urn: prefixes and bare hex; only the
# hyphenated 8-4-4-4-12 form counts as a key id.
_CANONICAL_UUID = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


class KeyReference:
    """A KMS key addressed by id, ARN or alias."""

    @property
    def key_id(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Identifier(KeyReference):
    value: UUID

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class ResourceName(KeyReference):
    arn: str

    def __str__(self):
        return self.arn


@dataclass(frozen=True)
class Alias(KeyReference):
    name: str

    def __str__(self):
        return self.name


def resolve_key(raw: str) -> KeyReference:
    """Normalize a user supplied key string.

    ARNs are kept verbatim, canonical UUIDs become key ids and anything
    else is treated as an alias, gaining the ``alias/`` prefix if missing.
    Never fails.
    """
    if raw.startswith(ARN_PREFIX):
        return ResourceName(raw)
    if _CANONICAL_UUID.fullmatch(raw):
        return Identifier(UUID(raw))
    if raw.startswith(ALIAS_PREFIX):
        return Alias(raw)
    return Alias(ALIAS_PREFIX + raw)

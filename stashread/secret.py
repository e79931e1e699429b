"""Fetching, verifying and decrypting credstash secrets."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

log = logging.getLogger(__name__)

AES_BLOCK_SIZE = 16
DATA_KEY_SIZE = 32
DEFAULT_DIGEST = "SHA256"

Item = Mapping[str, Mapping[str, Any]]

_DIGESTS: dict[str, Callable[..., Any]] = {
    "SHA1": hashlib.sha1,
    "SHA224": hashlib.sha224,
    "SHA256": hashlib.sha256,
    "SHA384": hashlib.sha384,
    "SHA512": hashlib.sha512,
    "MD5": hashlib.md5,
}


class CredstashError(Exception):
    """Raised when a secret cannot be fetched, verified or decoded."""


class DynamoDB(Protocol):
    """The part of a DynamoDB client used to look up secrets."""

    def get_item(self, **kwargs: Any) -> Mapping[str, Any]:
        """Return a mapping holding the requested item under ``Item``."""

    def query(self, **kwargs: Any) -> Mapping[str, Any]:
        """Return a mapping holding ``Count`` and ``Items``."""


class Decrypter(Protocol):
    """The part of a KMS client used to decrypt data keys."""

    def decrypt(self, **kwargs: Any) -> Mapping[str, Any]:
        """Return a mapping holding the decrypted bytes under ``Plaintext``."""


@dataclass
class KeyMaterial:
    """One stored secret as read from the table."""

    name: str = ""
    version: str = ""
    digest: str = ""
    content: bytes = b""
    hmac: bytes = b""
    key: bytes = b""


def create_nonce() -> bytes:
    """Return the fixed counter-mode nonce credstash uses: fifteen zeros and a one."""
    return bytes(AES_BLOCK_SIZE - 1) + b"\x01"


def decrypt_data(material: KeyMaterial, key: bytes) -> str:
    """Decrypt the secret content with AES-CTR; an unusable key yields an empty string."""
    try:
        algorithm = algorithms.AES(key)
    except ValueError:
        return ""
    decryptor = Cipher(algorithm, modes.CTR(create_nonce())).decryptor()
    secret = decryptor.update(material.content) + decryptor.finalize()
    return secret.decode("utf-8", errors="surrogateescape")


def get_digest_func(digest: str) -> Callable[..., Any]:
    """Return the hash constructor for a credstash digest name."""
    try:
        return _DIGESTS[digest]
    except KeyError:
        raise CredstashError(f"digest {digest} is not supported") from None


def check_hmac(material: KeyMaterial, hmac_key: bytes) -> None:
    """Raise unless the stored HMAC matches the one computed over the content."""
    digest_func = get_digest_func(material.digest)
    expected = hmac.new(hmac_key, material.content, digest_func).digest()
    if not hmac.compare_digest(expected, material.hmac):
        raise CredstashError(
            f"Computed HMAC on {material.name} does not match stored HMAC"
        )


def decrypt_key(
    decrypter: Decrypter, ciphertext: bytes, context: Mapping[str, str] | None
) -> tuple[bytes, bytes]:
    """Decrypt the wrapped key and split it into the data key and the HMAC key."""
    out = decrypter.decrypt(
        CiphertextBlob=ciphertext, EncryptionContext=dict(context or {})
    )
    plaintext = bytes(out.get("Plaintext") or b"")
    if len(plaintext) < DATA_KEY_SIZE:
        raise CredstashError(
            f"decrypted key is {len(plaintext)} bytes, expected at least {DATA_KEY_SIZE}"
        )
    return plaintext[:DATA_KEY_SIZE], plaintext[DATA_KEY_SIZE:]


def get_key_material(db: DynamoDB, name: str, version: str, table: str) -> KeyMaterial:
    """Read a secret's material, the newest version when ``version`` is empty."""
    if not version:
        return get_latest_version(db, name, table)
    return get_specific_version(db, name, version, table)


def get_specific_version(
    db: DynamoDB, name: str, version: str, table: str
) -> KeyMaterial:
    """Read one named version of a secret."""
    out = db.get_item(
        ConsistentRead=True,
        TableName=table,
        Key={"name": {"S": name}, "version": {"S": version}},
    )
    return key_material_from_db_item(out.get("Item") or {})


def get_latest_version(db: DynamoDB, name: str, table: str) -> KeyMaterial:
    """Read the highest version of a secret."""
    out = db.query(
        TableName=table,
        ConsistentRead=True,
        Limit=1,
        ScanIndexForward=False,
        KeyConditionExpression="#N = :nameval",
        ExpressionAttributeNames={"#N": "name"},
        ExpressionAttributeValues={":nameval": {"S": name}},
    )
    items = out.get("Items") or []
    if not out.get("Count") or not items:
        raise CredstashError(f"secret with name {name} could not be found")
    return key_material_from_db_item(items[0])


def get_digest(item: Item) -> str:
    """Return the item's digest name, SHA256 when the item has none."""
    if "digest" in item:
        return item["digest"].get("S") or ""
    return DEFAULT_DIGEST


def _get_string(item: Item, key: str) -> str:
    try:
        value = item[key]
    except KeyError:
        raise CredstashError(f"missing key: {key}") from None
    return value.get("S") or ""


def _decode_hex(data: str | bytes, key: str) -> bytes:
    try:
        return binascii.unhexlify(data)
    except (binascii.Error, ValueError) as exc:
        raise CredstashError(f"invalid hex in {key}: {exc}") from exc


def _decode_base64(data: str, key: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CredstashError(f"invalid base64 in {key}: {exc}") from exc


def key_material_from_db_item(item: Item) -> KeyMaterial:
    """Build key material from a DynamoDB item, decoding its encoded fields."""
    material = KeyMaterial(digest=get_digest(item))
    material.name = _get_string(item, "name")
    material.version = _get_string(item, "version")

    material.hmac = _decode_hex(_get_string(item, "hmac"), "hmac")
    # Older credstash stores the HMAC as a hex string, newer as hex in a binary field.
    if not material.hmac:
        material.hmac = _decode_hex(bytes(item["hmac"].get("B") or b""), "hmac")

    material.key = _decode_base64(_get_string(item, "key"), "key")
    material.content = _decode_base64(_get_string(item, "contents"), "contents")
    return material
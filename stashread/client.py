"""A client that reads and decrypts credstash secrets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .secret import (
    Decrypter,
    DynamoDB,
    check_hmac,
    decrypt_data,
    decrypt_key,
    get_key_material,
)


@dataclass
class Client:
    """Reads secrets from a DynamoDB table and decrypts them through KMS."""

    table: str
    dynamodb: DynamoDB
    decrypter: Decrypter

    def get_secret(
        self,
        name: str,
        table: str = "",
        version: str = "",
        context: Mapping[str, str] | None = None,
    ) -> str:
        """Return the plaintext of a secret, using the client's table when none is given."""
        material = get_key_material(self.dynamodb, name, version, table or self.table)
        data_key, hmac_key = decrypt_key(self.decrypter, material.key, context)
        check_hmac(material, hmac_key)
        return decrypt_data(material, data_key)
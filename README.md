# stashread

`stashread` reads secrets written by credstash. Credstash keeps them in a
DynamoDB table, and KMS seals the key for each one. For each secret the
package:

1. fetches the stored item, either the latest version or the version you name;
2. asks KMS to decrypt the wrapped key, using your encryption context, and
   splits the result into a 32-byte data key and the HMAC key;
3. checks the HMAC of the ciphertext with the digest recorded in the item
   (SHA1, SHA224, SHA256, SHA384, SHA512 or MD5; SHA256 when the item has
   no digest);
4. decrypts the contents with AES in counter mode, using the fixed nonce
   credstash uses (fifteen zero bytes and a one).

Both ways of storing the HMAC are read: as a hex string and as hex text in a
binary attribute.

## Installation

```
pip install stashread
```

## Supplying the AWS calls

The package talks to no AWS service itself. You pass in objects that do the
DynamoDB and KMS calls. They must fit the `DynamoDB` and `Decrypter`
protocols in `stashread.secret`:

- `get_item(**kwargs)` returns a mapping with the item under `"Item"`;
- `query(**kwargs)` returns a mapping with `"Count"` and `"Items"`;
- `decrypt(**kwargs)` returns a mapping with the key bytes under `"Plaintext"`.

Items use the DynamoDB attribute form, e.g. `{"name": {"S": "db_user"}}`.
boto3 clients for `dynamodb` and `kms` have this shape; boto3 is not a
dependency of this package and has to be installed separately. Test doubles
work just as well.

## Reading a secret

```python
import boto3

from stashread.client import Client

client = Client(
    table="credential-store",
    dynamodb=boto3.client("dynamodb", region_name="eu-west-1"),
    decrypter=boto3.client("kms", region_name="eu-west-1"),
)

value = client.get_secret("db_user", table="", version="", context={"env": "prod"})
```

An empty `table` uses the client's default table. An empty `version` fetches
the newest version of the secret.

`stashread.secret.CredstashError` is raised when the secret cannot be found,
an item lacks a field or holds malformed hex or base64, the digest is not
supported, the decrypted key is shorter than 32 bytes, or the HMAC does not
match. Errors raised by the objects you pass in propagate unchanged.

The lower-level steps are available on their own in `stashread.secret`:
`get_key_material`, `get_latest_version`, `get_specific_version`,
`key_material_from_db_item`, `get_digest`, `get_digest_func`, `decrypt_key`,
`check_hmac`, `decrypt_data` and `create_nonce`, working on `KeyMaterial`
records.

## Provider-style settings

`stashread.datasource` takes settings in the form a data-source
configuration uses:

```python
import os

from stashread.client import Client
from stashread.datasource import read_secret, resolve_provider_config

config = resolve_provider_config({"table": "credential-store"}, os.environ)
# config.region comes from AWS_REGION or AWS_DEFAULT_REGION when not given;
# config.table defaults to "credential-store" and config.profile to "default".

client = Client(table=config.table, dynamodb=dynamodb, decrypter=kms)
data = read_secret(client, {"name": "db_user", "context": {"env": "prod"}})
print(data.id)      # SHA-256 hex digest of the value, as from hash_value()
print(data.value)
```

`read_secret` accepts optional `version`, `table` and `context` settings;
context values are turned into strings (booleans as `true`/`false`).

`resolve_provider_config` raises `stashread.datasource.ConfigError` if no
region can be found, and `read_secret` raises it if no `name` is given.

## What it does not do

- It does not create AWS sessions or clients. `ProviderConfig` holds the
  region, table and profile, and `ProviderConfig.uses_named_profile` tells
  whether a non-default profile was asked for, but building clients from
  them is up to you.
- It only reads secrets; it cannot store, list or delete them.
- It provides no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```
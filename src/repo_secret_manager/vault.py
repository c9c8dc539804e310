"""
Password-protected vault blob holding the catalogue payload.

Blob layout (text):

    $RSMVAULT;1.0;FERNET-PBKDF2
    <base64 salt>
    <Fernet token>

The Fernet key is derived from the password with PBKDF2-HMAC-SHA256. A fresh
salt is drawn on every write.

Ansible Vault 1.1/1.2 AES256 blobs, the format of earlier releases, are still
read; the next save rewrites them in the layout above.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
from pathlib import Path
from typing import TextIO

from cryptography.exceptions import InvalidSignature
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .catalogue import Catalogue
from .config import (
    ANSIBLE_KDF_ITERATIONS,
    ANSIBLE_VAULT_CIPHER,
    ANSIBLE_VAULT_PREFIX,
    DEFAULT_PASSWORD_ENV,
    VAULT_HEADER,
    VAULT_KDF_ITERATIONS,
    VAULT_SALT_BYTES,
)
from .errors import VaultError

logger = logging.getLogger(__name__)


def derive_key(password: str, salt: bytes, iterations: int = VAULT_KDF_ITERATIONS) -> bytes:
    """Derive a urlsafe-base64 Fernet key from a password."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))


def encrypt(plaintext: str, password: str) -> str:
    """Encrypt plaintext into a vault blob."""
    if not password:
        raise VaultError("A vault password is required")
    salt = secrets.token_bytes(VAULT_SALT_BYTES)
    token = Fernet(derive_key(password, salt)).encrypt(plaintext.encode("utf-8"))
    return "\n".join([
        VAULT_HEADER,
        base64.b64encode(salt).decode("ascii"),
        token.decode("ascii"),
    ]) + "\n"


def decrypt(blob: str, password: str) -> str:
    """
    Decrypt a vault blob.

    Raises:
        VaultError: wrong password, unknown header or corrupt blob
    """
    lines = blob.strip().splitlines()
    if lines and lines[0].startswith(ANSIBLE_VAULT_PREFIX):
        return decrypt_ansible(lines, password)
    if len(lines) != 3 or lines[0].strip() != VAULT_HEADER:
        raise VaultError("Not a repo-secret-manager vault (unrecognized header)")

    try:
        salt = base64.b64decode(lines[1].strip(), validate=True)
    except ValueError as e:
        raise VaultError("Corrupt vault: invalid salt") from e

    try:
        plaintext = Fernet(derive_key(password, salt)).decrypt(lines[2].strip().encode("ascii"))
    except (InvalidToken, ValueError) as e:
        raise VaultError("Could not decrypt vault: wrong password or corrupt file") from e

    return plaintext.decode("utf-8")


def decrypt_ansible(lines: list[str], password: str) -> str:
    """
    Decrypt an Ansible Vault AES256 blob given as its lines.

    The hex body decodes to ``salt\\nhmac\\nciphertext`` (each hex again).
    PBKDF2-HMAC-SHA256 yields 80 bytes: AES key, HMAC key and CTR counter.
    """
    header = lines[0].strip().split(";")
    if len(header) < 3 or header[2] != ANSIBLE_VAULT_CIPHER:
        raise VaultError(f"Unsupported Ansible Vault cipher: {lines[0].strip()}")

    try:
        salt_hex, hmac_hex, ciphertext_hex = binascii.unhexlify(
            "".join(line.strip() for line in lines[1:])
        ).split(b"\n", 2)
        salt = binascii.unhexlify(salt_hex)
        expected = binascii.unhexlify(hmac_hex)
        ciphertext = binascii.unhexlify(ciphertext_hex)
    except (binascii.Error, ValueError) as e:
        raise VaultError("Corrupt Ansible Vault blob") from e

    derived = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=80,
        salt=salt,
        iterations=ANSIBLE_KDF_ITERATIONS,
    ).derive(password.encode("utf-8"))
    cipher_key, hmac_key, counter = derived[:32], derived[32:64], derived[64:]

    signer = hmac.HMAC(hmac_key, hashes.SHA256())
    signer.update(ciphertext)
    try:
        signer.verify(expected)
    except InvalidSignature as e:
        raise VaultError("Could not decrypt vault: wrong password or corrupt file") from e

    decryptor = Cipher(algorithms.AES(cipher_key), modes.CTR(counter)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        plaintext = (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise VaultError("Corrupt Ansible Vault blob") from e

    logger.info("Read legacy Ansible Vault; it is rewritten on the next save")
    return plaintext


def load_catalogue(path: Path | str, password: str) -> Catalogue:
    """Read and decrypt the vault file into a Catalogue."""
    path = Path(path)
    if not path.exists():
        raise VaultError(
            f"Vault file does not exist: {path}. "
            "Create a vault by adding a secret with: rsm add <secret>"
        )
    try:
        blob = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise VaultError(f"Could not read vault file {path}: {e}") from e

    return Catalogue.from_json(decrypt(blob, password))


def save_catalogue(path: Path | str, password: str, catalogue: Catalogue) -> None:
    """Serialize, encrypt and write the catalogue in one step."""
    path = Path(path)
    blob = encrypt(catalogue.to_json(), password)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(blob, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as e:
        raise VaultError(f"Could not write vault file {path}: {e}") from e
    logger.debug("Wrote vault %s (%d secrets)", path, len(catalogue))


def resolve_password(
    password_file: Path | str | None = None,
    password: str | None = None,
    env_var: str | None = DEFAULT_PASSWORD_ENV,
    stdin: TextIO | None = None,
) -> str | None:
    """
    Find the vault password.

    Priority: password file, explicit password, environment variable, then
    piped stdin (only when ``stdin`` is not a terminal).

    Returns:
        The password, or None when no source provides one
    """
    if password_file:
        try:
            return Path(password_file).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise VaultError(f"Failed to read password file: {e}") from e

    if password:
        return password

    if env_var:
        from_env = os.environ.get(env_var)
        if from_env:
            return from_env

    if stdin is not None and not stdin.isatty():
        piped = stdin.read().strip()
        if piped:
            return piped

    return None

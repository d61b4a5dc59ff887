"""Reversible credential obfuscation for persisted configurations.

Passwords are never written in clear text: the stored form is the
``Encrypted`` prefix followed by the hex of the UTF-8 bytes XOR-ed with a
fixed seed. This hides credentials from casual reading only; it is not
encryption in any cryptographic sense.

The stored value is a bare integer, so leading NUL characters of a password
are not kept: ``"\\x00pw"`` is restored as ``"pw"``. Stored values written
by other tools share this limit.
"""

from __future__ import annotations

from row_document.core.variables import has_variables

PASSWORD_PREFIX = "Encrypted "

_SEED = 933910847463829827159347601486730416058


def encrypt_password(password: str) -> str:
    """Obfuscate *password*. An empty password stays empty."""
    if not password:
        return ""
    value = int.from_bytes(password.encode("utf-8"), "big")
    return PASSWORD_PREFIX + format(value ^ _SEED, "x")


def decrypt_password(encrypted: str) -> str:
    """Reverse :func:`encrypt_password` for a value without the prefix.

    Raises:
        ValueError: If *encrypted* is not a hex string or does not decode
            to UTF-8 text.
    """
    if not encrypted:
        return ""
    value = int(encrypted.strip(), 16) ^ _SEED
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return raw.decode("utf-8")


def encrypt_password_if_not_using_variables(password: str | None) -> str:
    """Obfuscate *password* unless it references variables.

    A ``${PASSWORD}`` reference must stay readable so it can be substituted
    at run time.
    """
    if not password:
        return ""
    if has_variables(password):
        return password
    return encrypt_password(password)


def decrypt_password_if_encrypted(stored: str | None) -> str:
    """Restore a stored password; values without the prefix pass through."""
    if not stored:
        return ""
    if stored.startswith(PASSWORD_PREFIX):
        return decrypt_password(stored[len(PASSWORD_PREFIX) :])
    return stored

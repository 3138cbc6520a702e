"""Password hashing built on ``werkzeug.security``."""

from __future__ import annotations

from typing import Final

from werkzeug.security import check_password_hash, generate_password_hash

#: scrypt with N=2**15, r=8, p=1: roughly 50-100 ms per verification.
DEFAULT_METHOD: Final[str] = "scrypt:32768:8:1"


class CredentialStore:
    """
    Hash and verify user passwords.

    Hashes are salted and adaptive; the method string (algorithm and cost)
    is stored inside each hash, so raising the cost later keeps old hashes
    verifiable.

    :param method: Werkzeug method string, e.g. ``"scrypt:32768:8:1"`` or
        ``"pbkdf2:sha256:600000"``.
    :type method: str
    """

    def __init__(self, method: str = DEFAULT_METHOD) -> None:
        self.method = method

    def hash(self, password: str) -> str:
        """
        Produce a salted hash of ``password``.

        :param password: Plain text password; never logged or stored.
        :type password: str
        :returns: ``method$salt$hash`` string.
        :rtype: str
        :raises ValueError: If the password is empty.
        """
        if not isinstance(password, str) or not password:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(password, method=self.method)

    def verify(self, password: str, password_hash: str | None) -> bool:
        """
        Check ``password`` against a stored hash in constant time.

        Malformed or unknown-method hashes verify as ``False`` rather than
        raising.

        :param password: Candidate plain text password.
        :type password: str
        :param password_hash: Stored hash.
        :type password_hash: str | None
        :returns: ``True`` when the password matches.
        :rtype: bool
        """
        if not password_hash or not isinstance(password, str):
            return False
        try:
            return bool(check_password_hash(password_hash, password))
        except (ValueError, TypeError):
            return False

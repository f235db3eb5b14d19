"""
Password Hashing

bcrypt-backed hash/verify capability. Both operations are CPU-bound, so the
async variants run them in Starlette's threadpool and the event loop keeps
serving other requests meanwhile.
"""

import logging
from typing import Optional

import bcrypt
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; recent releases reject longer input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Password hashing and verification using bcrypt."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_digest: Optional[str] = None

    @property
    def dummy_digest(self) -> str:
        """
        Digest to verify against when the username is unknown, so that the
        response time does not reveal whether an account exists.
        """
        if self._dummy_digest is None:
            self._dummy_digest = self.hash("not-a-real-password")
        return self._dummy_digest

    @staticmethod
    def _encode(plain: str) -> bytes:
        return plain.encode("utf-8")[:MAX_PASSWORD_BYTES]

    def hash(self, plain: str) -> str:
        """
        Hash a password.

        Args:
            plain: Plain text password

        Returns:
            bcrypt digest as text
        """
        digest = bcrypt.hashpw(self._encode(plain), bcrypt.gensalt(rounds=self.rounds))
        return digest.decode("utf-8")

    def verify(self, plain: str, digest: str) -> bool:
        """Return True if plain matches digest. Malformed digests never match."""
        try:
            return bcrypt.checkpw(self._encode(plain), digest.encode("utf-8"))
        except ValueError:
            logger.error("Stored password digest is malformed")
            return False

    async def hash_async(self, plain: str) -> str:
        return await run_in_threadpool(self.hash, plain)

    async def verify_async(self, plain: str, digest: Optional[str] = None) -> bool:
        """Verify off the event loop; with no digest, burn the same time and fail."""
        if digest is None:
            await run_in_threadpool(self.verify, plain, self.dummy_digest)
            return False
        return await run_in_threadpool(self.verify, plain, digest)

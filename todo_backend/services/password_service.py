"""
Todo Backend — Password Service
=================================

What:  One-way, salted, cost-parameterized password hashing (argon2id).
How:   Thin wrapper over argon2-cffi's PasswordHasher. The encoded hash string
       carries its own salt and cost parameters, so verification never needs
       the settings that produced it.
Who:   AuthService, through a worker thread (hashing is CPU-bound).

Failure modes:
    verify() on a wrong password  → False (not an error)
    verify() on a malformed hash  → InvalidHashError
    hash() when argon2 fails      → PasswordHashingError
"""

from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError as Argon2InvalidHashError
from argon2.exceptions import VerificationError, VerifyMismatchError

from todo_backend.config import Settings, settings as default_settings
from todo_backend.exceptions import InvalidHashError, PasswordHashingError


class PasswordService:
    """
    argon2id hasher with tunable work factor.

    Args:
        time_cost:   iterations
        memory_cost: memory in KiB
        parallelism: lanes
    """

    def __init__(self, time_cost: int, memory_cost: int, parallelism: int):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "PasswordService":
        config = config or default_settings
        return cls(
            time_cost=config.password_hash_time_cost,
            memory_cost=config.password_hash_memory_cost,
            parallelism=config.password_hash_parallelism,
        )

    def hash(self, plaintext: str) -> str:
        try:
            return self._hasher.hash(plaintext)
        except HashingError as e:
            raise PasswordHashingError(context={"error_type": type(e).__name__}) from e

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Returns True iff plaintext matches the stored hash."""
        try:
            return self._hasher.verify(password_hash, plaintext)
        except VerifyMismatchError:
            return False
        except Argon2InvalidHashError as e:
            raise InvalidHashError(context={"error_type": type(e).__name__}) from e
        except VerificationError:
            return False

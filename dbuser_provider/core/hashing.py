"""Password hashing and verification for the supported stored-hash formats.

The configured hash-function name is resolved once into one of four
algorithm variants, each exposing the same `hash`/`verify` contract:

- `DigestAlgorithm`: lowercase hex of a message digest (MD5, SHA-1, SHA3, ...).
- `BcryptAlgorithm`: modular-crypt bcrypt strings (`$2a$`, `$2b$`, `$2y$`).
- `Argon2Algorithm`: PHC-encoded Argon2d/Argon2i/Argon2id strings.
- `Pbkdf2Algorithm`: `PBKDF2-SHA256$<iterations>$<salt>$<base64 key>`.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Dict, Union

import bcrypt
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError
from Crypto.Hash import MD2

from .errors import ConfigurationError, MalformedHashError

logger = logging.getLogger(__name__)

BCRYPT_COST = 14

ARGON2_PARALLELISM = 4
ARGON2_MEMORY_KIB = 125000
ARGON2_ITERATIONS = 2

PBKDF2_NAME = "PBKDF2-SHA256"
PBKDF2_ITERATIONS = 650000
PBKDF2_SALT_BYTES = 16
PBKDF2_KEY_BYTES = 32

BLOWFISH_NAME = "Blowfish (bcrypt)"


def _md2(data: bytes) -> bytes:
    return MD2.new(data).digest()


def _hashlib(name: str) -> Callable[[bytes], bytes]:
    def digest(data: bytes) -> bytes:
        return hashlib.new(name, data).digest()

    return digest


DIGESTS: Dict[str, Callable[[bytes], bytes]] = {
    "MD2": _md2,
    "MD5": _hashlib("md5"),
    "SHA-1": _hashlib("sha1"),
    "SHA-224": _hashlib("sha224"),
    "SHA-256": _hashlib("sha256"),
    "SHA-384": _hashlib("sha384"),
    "SHA-512": _hashlib("sha512"),
    "SHA-512/224": _hashlib("sha512_224"),
    "SHA-512/256": _hashlib("sha512_256"),
    "SHA3-224": _hashlib("sha3_224"),
    "SHA3-256": _hashlib("sha3_256"),
    "SHA3-384": _hashlib("sha3_384"),
    "SHA3-512": _hashlib("sha3_512"),
}

ARGON2_TYPES: Dict[str, Type] = {
    "Argon2d": Type.D,
    "Argon2i": Type.I,
    "Argon2id": Type.ID,
}

HASH_FUNCTIONS = [
    BLOWFISH_NAME,
    "MD2",
    "MD5",
    "SHA-1",
    "SHA-256",
    "SHA3-224",
    "SHA3-256",
    "SHA3-384",
    "SHA3-512",
    "SHA-384",
    "SHA-512/224",
    "SHA-512/256",
    "SHA-512",
    PBKDF2_NAME,
    "Argon2d",
    "Argon2i",
    "Argon2id",
]


@dataclass(frozen=True)
class DigestAlgorithm:
    """Unsalted digest stored as lowercase hex."""

    name: str

    def hash(self, plain: str) -> str:
        return DIGESTS[self.name](plain.encode("utf-8")).hex()

    def verify(self, stored: str, plain: str) -> bool:
        return self.hash(plain) == (stored or "")


@dataclass(frozen=True)
class BcryptAlgorithm:
    name: str = BLOWFISH_NAME
    cost: int = BCRYPT_COST

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.cost)).decode("ascii")

    def verify(self, stored: str, plain: str) -> bool:
        if not stored:
            return False
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            logger.warning("Stored bcrypt hash is malformed.")
            return False


@dataclass(frozen=True)
class Argon2Algorithm:
    """Argon2 with fixed cost parameters; `name` selects the variant."""

    name: str

    @property
    def type(self) -> Type:
        return ARGON2_TYPES[self.name]

    def _hasher(self) -> PasswordHasher:
        return PasswordHasher(
            time_cost=ARGON2_ITERATIONS,
            memory_cost=ARGON2_MEMORY_KIB,
            parallelism=ARGON2_PARALLELISM,
            type=self.type,
        )

    def hash(self, plain: str) -> str:
        return self._hasher().hash(plain)

    def verify(self, stored: str, plain: str) -> bool:
        if not stored:
            return False
        # The encoded hash carries its own variant; only accept the configured one.
        if not stored.startswith(f"${self.name.lower()}$"):
            return False
        try:
            return self._hasher().verify(stored, plain)
        except VerificationError:
            return False
        except InvalidHashError:
            logger.warning("Stored %s hash is malformed.", self.name)
            return False


@dataclass(frozen=True)
class Pbkdf2Algorithm:
    """PBKDF2-HMAC-SHA256 with a 256-bit key.

    The salt field is used as text: its UTF-8 bytes are the KDF salt.
    """

    name: str = PBKDF2_NAME
    iterations: int = PBKDF2_ITERATIONS

    @staticmethod
    def derive(plain: str, salt: str, iterations: int) -> str:
        key = hashlib.pbkdf2_hmac(
            "sha256", plain.encode("utf-8"), salt.encode("utf-8"), iterations, PBKDF2_KEY_BYTES
        )
        return base64.b64encode(key).decode("ascii")

    def hash(self, plain: str) -> str:
        salt = base64.b64encode(secrets.token_bytes(PBKDF2_SALT_BYTES)).decode("ascii")
        key = self.derive(plain, salt, self.iterations)
        return f"{self.name}${self.iterations}${salt}${key}"

    def verify(self, stored: str, plain: str) -> bool:
        if not stored:
            return False
        parts = stored.split("$")
        if len(parts) != 4:
            raise MalformedHashError(
                f"Stored {self.name} hash must have 4 '$'-separated fields, got {len(parts)}."
            )
        _, iterations, salt, key = parts
        try:
            rounds = int(iterations)
        except ValueError as exc:
            raise MalformedHashError(f"Invalid {self.name} iteration count: {iterations!r}.") from exc
        if rounds < 1:
            raise MalformedHashError(f"Invalid {self.name} iteration count: {iterations!r}.")
        return self.derive(plain, salt, rounds) == key


HashAlgorithm = Union[DigestAlgorithm, BcryptAlgorithm, Argon2Algorithm, Pbkdf2Algorithm]


def resolve_hash_algorithm(name: str) -> HashAlgorithm:
    """Map a configured hash-function name to its algorithm variant.

    Raises:
        ConfigurationError: The name matches no supported algorithm.
    """

    value = (name or "").strip()
    if "blowfish" in value.lower() or value.lower() == "bcrypt":
        return BcryptAlgorithm()
    if value in ARGON2_TYPES:
        return Argon2Algorithm(value)
    if value == PBKDF2_NAME:
        return Pbkdf2Algorithm()
    if value in DIGESTS:
        return DigestAlgorithm(value)
    raise ConfigurationError(f"Unsupported hash function: {name!r}.")


def _algorithm(algorithm: Union[HashAlgorithm, str]) -> HashAlgorithm:
    if isinstance(algorithm, str):
        return resolve_hash_algorithm(algorithm)
    return algorithm


def hash_password(plain: str, algorithm: Union[HashAlgorithm, str]) -> str:
    """Hash `plain` with `algorithm` (a variant or a configured name)."""

    return _algorithm(algorithm).hash(plain)


def verify_password(stored: str, plain: str, algorithm: Union[HashAlgorithm, str]) -> bool:
    """Check `plain` against the `stored` hash.

    An empty stored hash never verifies. A malformed PBKDF2 value raises
    `MalformedHashError`.
    """

    return _algorithm(algorithm).verify(stored, plain)

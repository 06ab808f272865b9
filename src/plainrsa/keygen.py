"""Core Key Generation Utility, mainly focusing on the generation of random primes.

This module is responsible for generating RSA key pairs roughly based on FIPS 186-5. We will be focusing on probable
primes. Unlike FIPS 186-5 we allow small (textbook) key sizes, as long as the requested size can still hold two
distinct primes and a public exponent smaller than the totient.

All randomness is drawn from an injectable `random.Random` instance, defaulting to the system CSPRNG, so that tests
can seed generation deterministically.

Typical usage example:

    p, q = generate_primes(2048)
    (n, e), (n, d) = generate_key_pair(512, rng=random.Random(42))
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import random
import secrets
from typing import Literal, overload

from plainrsa.errors import GenerationError

logger = logging.getLogger(__name__)

MIN_KEY_SIZE: int = 16
DEFAULT_PUB_EXP: int = 65537

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100
_SYSTEM_RANDOM = secrets.SystemRandom()


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses `_SMALL_PRIMES` as a cache if available. Regeneration occurs if the requested range is greater, forced by
    `change` or the cache is empty. The cache is only ever replaced as a whole, never mutated in place.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Miller-Rabin by using modulo division on our known frequent primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to generate primes. Defaults to 10000.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int, rng: random.Random | None = None) -> bool:
    """Perform Miller-Rabin primality test.

    Performs the Miller-Rabin primality test as specified in FIPS 186-5.

    Args:
        w: Odd integer to be tested.
        iters: Number of Miller-Rabin iterations to perform.
        rng: Source of the random bases. Defaults to the system CSPRNG.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w in (2, 3)
    if w % 2 == 0:
        return False
    rng = rng or _SYSTEM_RANDOM
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(iters):
        b = rng.randrange(2, w - 1)
        z = pow(b, m, w)
        if z in (1, tw):
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == tw:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def _mr_iterations(bits: int) -> int:
    """Miller-Rabin rounds per FIPS 186-5 Appendix C.1, for an error probability far below 2**-100."""
    if bits <= 512:
        return 40
    if bits <= 1024:
        return 56
    if bits <= 1536:
        return 64
    if bits <= 2048:
        return 70
    return 74


def check_prime(candidate: int, iters: None | int = None, n: int = 10000, rng: random.Random | None = None) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    In interest of providing a result expediently we run a trial division with all primes up to `n`, before proceeding
    with a FIPS 186-5 based Miller-Rabin primality test.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which to generate primes. Defaults to 10000.
            Passed to `_trial_division()`.
        rng: Source of the Miller-Rabin bases. Defaults to the system CSPRNG.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        iters = _mr_iterations(candidate.bit_length())
    return _miller_rabin(candidate, iters, rng)


def _too_close(candidate: int, other: int, size: int) -> bool:
    """Whether `candidate` collides with, or lies too close to, the first prime of the pair."""
    if candidate == other:
        return True
    shift = size - _MINIMUM_PRIME_SEPARATION
    return shift > 0 and abs(other - candidate) <= (1 << shift)


def _generate_probable_prime(size: int,
                             pub: int = DEFAULT_PUB_EXP,
                             prm_p: int | None = None,
                             rng: random.Random | None = None) -> int:
    """Generate a probable prime number of the specified bit size.

    Implements parts of the FIPS 186-5 protocol for generation of prime numbers that are probably prime.
    In this case we're using a multi-use function for both p and q.

    Args:
        size: The size of the prime to generate in bits. Must be >= 3.
        pub: The public exponent the prime has to be compatible with. Defaults to 65537.
        prm_p: The other prime in the pair if this is the second generation. Adds tests as per specification.
            Optional, if not provided generates 1st prime.
        rng: Source of randomness. Defaults to the system CSPRNG.

    Returns:
        A probable prime number of exactly `size` bits.

    Raises:
        GenerationError: If generation loops way beyond a reasonable time, or the random source fails.
    """
    rng = rng or _SYSTEM_RANDOM
    rep_cap = max(size, 64) * 5 * (1 if prm_p is None else 2)
    # Top two bits set so the product of two such primes has exactly the combined length; low bit for oddness.
    msk = (1 << size - 1) | (1 << size - 2) | 1
    for attempt in range(1, rep_cap + 1):
        try:
            byts = rng.getrandbits(size) | msk
        except OSError as exc:
            raise GenerationError("System random number generator failed.") from exc
        if prm_p is not None and _too_close(byts, prm_p, size):
            continue
        if math.gcd(byts - 1, pub) == 1 and check_prime(byts, rng=rng):
            logger.debug("Found %d-bit probable prime after %d candidates.", size, attempt)
            return byts
    raise GenerationError(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def _validate(size: int, pub: int) -> None:
    if pub % 2 == 0 or not 3 <= pub < 2**256:
        raise ValueError("Public exponent does not meet requirements.")
    if size < MIN_KEY_SIZE:
        raise GenerationError(f"Size must be at least {MIN_KEY_SIZE} bits.")
    if pub.bit_length() >= size // 2:
        raise GenerationError(f"Size {size} is too small for a {pub.bit_length()}-bit public exponent.")


def generate_primes(size: int, pub: int = DEFAULT_PUB_EXP, rng: random.Random | None = None) -> tuple[int, int]:
    """Generates an RSA-suitable pair of prime numbers.

    Completes the FIPS 186-5 protocol for generating prime numbers that are probably prime, with the main loops being
    in `_generate_probable_prime`. Odd sizes are split with the extra bit going to `p`.

    Args:
        size: The key size to generate the prime pair for.
        pub: The public exponent the primes must be compatible with. Defaults to 65537.
            Has to be odd and in range `[3, 2**256)`.
        rng: Source of randomness. Defaults to the system CSPRNG.

    Returns:
        A pair of distinct prime numbers whose product has exactly `size` bits.

    Raises:
        ValueError: If `pub` does not meet requirements.
        GenerationError: If `size` cannot hold a key for `pub`, or the prime search fails.
    """
    _validate(size, pub)
    p_size, q_size = size - size // 2, size // 2
    p = _generate_probable_prime(p_size, pub, rng=rng)
    q = _generate_probable_prime(q_size, pub, p, rng)
    while p == q:  # (Un)Likely story.
        q = _generate_probable_prime(q_size, pub, p, rng)
    return p, q


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_PUB_EXP,
                      expose_primes: Literal[False] = False,
                      rng: random.Random | None = None) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(size: int,
                      pub: int = DEFAULT_PUB_EXP,
                      expose_primes: Literal[True] = ...,
                      rng: random.Random | None = None) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    size: int,
    pub: int = DEFAULT_PUB_EXP,
    expose_primes: bool = False,
    rng: random.Random | None = None,
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Fully generates a valid RSA Key, deriving the private exponent against the Carmichael totient
    `lcm(p - 1, q - 1)`.

    Args:
        size: The bit length of the modulus.
        pub: The public exponent. Defaults (and recommended) to use 65537.
        expose_primes: Whether to export the prime numbers as well or not. Defaults to False.
            Provides some acceleration for decryption if used correctly.
        rng: Source of randomness. Defaults to the system CSPRNG.

    Returns:
        A tuple of tuples of (public, private) sub-tuples (modulus, exponent) or if exposed for the private
        (modulus, exponent, p, q)

    Raises:
        GenerationError: If no key can be generated for the given parameters.
    """
    p, q = generate_primes(size, pub, rng)
    n = p * q
    totient = math.lcm(p - 1, q - 1)
    if not 1 < pub < totient:
        raise GenerationError("Public exponent is not smaller than the totient.")
    try:
        d = pow(pub, -1, totient)
    except ValueError as exc:
        raise GenerationError("Public exponent has no inverse modulo the totient.") from exc
    logger.debug("Generated %d-bit key pair.", n.bit_length())
    if not expose_primes:
        del p, q
        return (n, pub), (n, d)
    return (n, pub), (n, d, p, q)

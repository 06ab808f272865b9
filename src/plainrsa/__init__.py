"""Textbook RSA in an Academic Sense.

Provides raw (unpadded) RSA key generation, encryption and decryption of byte strings through their big-endian
integer representative, and key import/export in a plain hexadecimal text format or PEM (PKCS1 public key, PKCS8
private key). Furthermore, provides various prime-generation utilities under-the-hood.

Raw RSA is deterministic and malleable. Do not use it to protect anything.

Typical usage example:

    pub, priv = generate_key(512)
    c = encrypt(b"hello world", pub)
    r = decrypt(c, priv)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from plainrsa.errors import EncodingLimitError
from plainrsa.errors import GenerationError
from plainrsa.errors import KeyLoadError
from plainrsa.errors import ParseError
from plainrsa.keygen import check_prime
from plainrsa.keygen import generate_key_pair
from plainrsa.keygen import generate_primes
from plainrsa.keygen import get_pre_primes
from plainrsa.rsa import bytes_to_integer
from plainrsa.rsa import decrypt
from plainrsa.rsa import encrypt
from plainrsa.rsa import generate_key
from plainrsa.rsa import integer_to_bytes
from plainrsa.rsa import load_private_key
from plainrsa.rsa import load_public_key
from plainrsa.rsa import parse_integer
from plainrsa.rsa import RSAPrivKey
from plainrsa.rsa import RSAPubKey
from plainrsa.rsa import write_key

__version__ = "0.1.0"
__all__ = [
    "RSAPrivKey",
    "RSAPubKey",
    "generate_key",
    "encrypt",
    "decrypt",
    "load_public_key",
    "load_private_key",
    "write_key",
    "bytes_to_integer",
    "integer_to_bytes",
    "parse_integer",
    "get_pre_primes",
    "check_prime",
    "generate_primes",
    "generate_key_pair",
    "GenerationError",
    "KeyLoadError",
    "EncodingLimitError",
    "ParseError",
]

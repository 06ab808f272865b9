"""Exceptions raised by the engine.

Each error extends the builtin the rest of the package used to raise for the same situation, so callers catching
`ValueError` or `IOError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class GenerationError(RuntimeError):
    """Key generation could not produce a valid key pair."""


class KeyLoadError(IOError):
    """A key file is missing, malformed or does not hold the requested key material."""


class EncodingLimitError(ValueError):
    """A message representative does not fit under the modulus."""


class ParseError(ValueError):
    """A supplied value is not a valid non-negative integer literal."""

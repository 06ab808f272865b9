"""Configures pytest further."""
import random

import pytest

# Textbook example: p = 61, q = 53.
TEXTBOOK = {"n": 3233, "e": 17, "d": 2753, "p": 61, "q": 53}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")
    parser.addoption("--seed", type=int, default=161, help="seed for deterministic key generation")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


@pytest.fixture
def rng(request) -> random.Random:
    """A freshly seeded random source, so generated keys are reproducible per test."""
    return random.Random(request.config.getoption("--seed"))


@pytest.fixture
def textbook() -> dict[str, int]:
    return dict(TEXTBOOK)

import logging
import os

import pytest

from netstruct import protocols
from netstruct.registry import Registry


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


@pytest.fixture
def registry():
    """An empty registry, so that the tests don't touch the default one."""
    return Registry()


@pytest.fixture
def net():
    """A registry with the protocols shipped with the package."""
    return protocols.install(Registry())

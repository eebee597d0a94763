import os

import pytest


@pytest.fixture
def test_root_dir():
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

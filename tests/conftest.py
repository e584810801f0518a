"""Shared fixtures: the three-word cat/dog/car embedding and its datasets."""

import logging
from pathlib import Path

import pytest

from binsim.core.loader import load_vectors
from binsim.core.vocabulary import Vocabulary

# 8-bit vectors, one 8-bit block each
CAT = 0b00001111
DOG = 0b00001110
CAR = 0b11110000


@pytest.fixture(autouse=True)
def reset_binsim_logger():
    """Undo handlers installed by the CLI so later tests see a clean logger."""
    yield
    logger = logging.getLogger("binsim")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def filtered_embedding(tmp_path) -> Path:
    path = tmp_path / "binary_8.vec"
    path.write_text(f"8\ncat {CAT}\ndog {DOG}\ncar {CAR}\n")
    return path


@pytest.fixture
def building_embedding(tmp_path) -> Path:
    path = tmp_path / "binary_8_counted.vec"
    path.write_text(f"3 8\ncat {CAT}\ndog {DOG}\ncar {CAR}\n")
    return path


@pytest.fixture
def datasets_dir(tmp_path) -> Path:
    directory = tmp_path / "datasets"
    directory.mkdir()
    (directory / "pets.txt").write_text("Cat dog 0.9\ncat CAR 0.1\n")
    (directory / "unknown.txt").write_text("zebra yak 5.0\nemu gnu 2.5\n")
    return directory


@pytest.fixture
def scenario(building_embedding):
    """Vocabulary and store loaded from the counted cat/dog/car file."""
    vocabulary = Vocabulary()
    store = load_vectors(building_embedding, vocabulary, build_vocabulary=True, block_size=8)
    return vocabulary, store

# ent_prep/fixtures.py
"""Bundled subject tests and demo users shipped under ``ent_prep/data``."""
import json
from functools import lru_cache
from pathlib import Path
from typing import List

from .schemas.test_schemas import Test


DATA_DIR = Path(__file__).resolve().parent / "data"


def _read_json(relative: str):
    with open(DATA_DIR / relative, encoding="utf-8") as f:
        return json.load(f)


@lru_cache()
def _bundled_tests() -> tuple:
    tests = []
    for entry in _read_json("tests_index.json"):
        test = Test.model_validate(_read_json(entry["reference"]))
        test.reference = entry["reference"]
        tests.append(test)
    return tuple(tests)


def load_bundled_tests() -> List[Test]:
    """Fresh copies of the bundled tests, ordered as in tests_index.json."""
    return [t.model_copy(deep=True) for t in _bundled_tests()]


def load_bundled_users() -> List[dict]:
    return _read_json("users.json")

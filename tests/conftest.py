# File: tests/conftest.py
# Contains pytest fixtures shared by the generator tests.

import importlib
import sys
from pathlib import Path
from typing import List

import pytest

from pb_model_generator.domain.models import CollectionSchema, ExpansionMapping

from factories import blog_collections, blog_mappings


@pytest.fixture
def collections() -> List[CollectionSchema]:
    """The blog schema snapshot, in server order."""
    return blog_collections()


@pytest.fixture
def mappings() -> List[ExpansionMapping]:
    return blog_mappings()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """An existing, empty package directory for generated models."""
    path = tmp_path / "pbmodels"
    path.mkdir()
    return path


@pytest.fixture
def import_generated(tmp_path: Path):
    """
    Import a generated package from tmp_path and forget it afterwards so
    other tests can generate a package with the same name.
    """
    imported = []

    def _import(package_name: str):
        sys.path.insert(0, str(tmp_path))
        importlib.invalidate_caches()
        imported.append(package_name)
        return importlib.import_module(package_name)

    yield _import

    if str(tmp_path) in sys.path:
        sys.path.remove(str(tmp_path))
    for package_name in imported:
        for module_name in list(sys.modules):
            if module_name == package_name or module_name.startswith(f"{package_name}."):
                del sys.modules[module_name]

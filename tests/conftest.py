"""Shared fixtures for hotswap tests."""

import importlib.util
import sys
import textwrap

import pytest


@pytest.fixture
def make_module(tmp_path):
    """
    Factory that writes a module under tmp_path and imports it.

    The module is registered in sys.modules under the given name and
    removed again after the test.
    """
    created = []

    def factory(name, source):
        path = tmp_path / f"{name}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        created.append(name)
        spec.loader.exec_module(module)
        return module

    yield factory

    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture
def rewrite_module():
    """Replace the source file of a module created by make_module."""

    def rewrite(module, source):
        with open(module.__file__, "w", encoding="utf-8") as f:
            f.write(textwrap.dedent(source))

    return rewrite

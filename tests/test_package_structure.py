"""Package surface tests ensuring a single flat module layout."""

import importlib
import importlib.util

import pytest


def test_run_app_exposed():
    """The package should expose the run_app helper at top level."""

    sigsynth = importlib.import_module("sigsynth")
    assert hasattr(sigsynth, "run_app")
    assert callable(sigsynth.run_app)


@pytest.mark.parametrize(
    "module",
    ["app", "application", "cli", "config", "envelope", "melody", "notes", "render", "signals", "wavio"],
)
def test_modules_reside_in_sigsynth(module: str):
    """Modules should resolve directly from the sigsynth package."""

    spec = importlib.util.find_spec(f"sigsynth.{module}")
    assert spec is not None, f"sigsynth.{module} should be importable"


def test_default_config_is_packaged():
    from sigsynth.config import DEFAULT_CONFIG_PATH

    assert DEFAULT_CONFIG_PATH.is_file()

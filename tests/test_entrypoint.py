"""Tests for the CLI entry point.

pip-generated console_scripts wrappers call the target function directly,
so the entry point must be the sync `run()` wrapper around the async
`main()`. These tests call it as a plain callable, the way pip does.
"""

import asyncio
import inspect
import importlib.metadata

import pytest


def test_run_is_not_a_coroutine_function():
    """run() must be a regular sync function, not async def."""
    from planetary_registry.server import run
    assert not inspect.iscoroutinefunction(run)


def test_main_is_a_coroutine_function():
    """main() stays async; run() wraps it with asyncio.run()."""
    from planetary_registry.server import main
    assert inspect.iscoroutinefunction(main)


def test_calling_run_does_not_return_coroutine(monkeypatch):
    """Simulate what pip does: call run() as a plain function."""
    import planetary_registry.server as server_module

    called_with_coroutine = []

    def fake_asyncio_run(coro):
        called_with_coroutine.append(inspect.iscoroutine(coro))
        # Close the coroutine cleanly to avoid ResourceWarning
        coro.close()

    monkeypatch.setattr(asyncio, "run", fake_asyncio_run)

    result = server_module.run()

    assert result is None
    assert called_with_coroutine == [True]


def test_module_entry_point_uses_run():
    import planetary_registry.__main__ as main_module
    import planetary_registry.server as server_module
    assert main_module.run is server_module.run


def test_pyproject_entry_point_targets_run():
    """[project.scripts] must point to server:run, not server:main."""
    eps = importlib.metadata.entry_points(group="console_scripts")
    our_ep = next((ep for ep in eps if ep.name == "planetary-registry-mcp"), None)

    if our_ep is None:
        pytest.skip("planetary-registry-mcp not found in installed entry points (not installed editable?)")

    assert our_ep.value == "planetary_registry.server:run"

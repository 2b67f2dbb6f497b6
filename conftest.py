import pytest


def pytest_addoption(parser):
    """Add custom command-line options to pytest."""
    parser.addoption(
        "--visible", action="store_true", default=False, help="Show browser window"
    )
    parser.addoption(
        "--base-url", action="store", default=None, help="Base URL of the store under test"
    )
    parser.addoption(
        "--run-integration", action="store_true", default=False,
        help="Run the browser tests against the live store"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(reason="needs --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)

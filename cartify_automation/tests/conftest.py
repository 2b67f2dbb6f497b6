"""Test configuration for pytest."""

import logging

import pytest

from cartify_automation.config import Config
from cartify_automation.core.browser_manager import BrowserManager
from cartify_automation.core.diagnostics_manager import DiagnosticsManager
from cartify_automation.pages.cart_page import CartPage
from cartify_automation.pages.checkout_page import CheckoutPage
from cartify_automation.pages.products_page import ProductsPage

logger = logging.getLogger(__name__)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the test item so fixtures can see failures."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# --- Pytest Fixtures ---

@pytest.fixture(scope="session")
def config(request):
    """Suite configuration, with the --base-url option taking precedence."""
    config = Config()
    base_url = request.config.getoption("--base-url")
    if base_url:
        config.set("site.base_url", base_url)
    config.configure_logging()
    return config


@pytest.fixture
def diagnostics(request, config):
    return DiagnosticsManager(
        run_id=request.node.name,
        base_output_dir=config.get_storage_path("results")
    )


@pytest.fixture
def driver(request, config, diagnostics):
    """A browser session owned by one test; screenshots and the action log are kept on failure."""
    headless = False if request.config.getoption("--visible") else None
    with BrowserManager.from_config(config, headless=headless) as driver:
        yield driver
        report = getattr(request.node, "rep_call", None)
        if report is not None and report.failed:
            artifacts = diagnostics.capture_failure(driver, request.node.name)
            logger.info(f"Failure artifacts for {request.node.name}: {artifacts}")


def _page(page_class, name, driver, config, diagnostics):
    return page_class(
        driver,
        config.page_url(name),
        timeout=config.timeout,
        poll_interval=config.poll_interval,
        diagnostics_manager=diagnostics
    )


@pytest.fixture
def products_page(driver, config, diagnostics):
    return _page(ProductsPage, "products", driver, config, diagnostics)


@pytest.fixture
def cart_page(driver, config, diagnostics):
    return _page(CartPage, "cart", driver, config, diagnostics)


@pytest.fixture
def checkout_page(driver, config, diagnostics):
    return _page(CheckoutPage, "checkout", driver, config, diagnostics)

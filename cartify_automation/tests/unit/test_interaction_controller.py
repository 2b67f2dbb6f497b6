import unittest
from unittest.mock import MagicMock

from cartify_automation.core.diagnostics_manager import DiagnosticsManager
from cartify_automation.core.exceptions import (InteractionError,
                                                SessionError,
                                                StaleElementError, StateError,
                                                WaitTimeoutError)
from cartify_automation.core.interaction_controller import (
    InteractionController, SelectBy)
from cartify_automation.core.locator import Locator
from cartify_automation.tests.fake_browser import (FakeClock, FakeDriver,
                                                   FakeElement, select)
from cartify_automation.tools.constants import (SCRIPT_CLICK,
                                                SCRIPT_SCROLL_INTO_VIEW,
                                                SCRIPT_SCROLL_TO_BOTTOM,
                                                SCRIPT_SCROLL_TO_TOP)

BUTTON = Locator.css(".checkout-btn")
FIELD = Locator.css("input[name='email']")
DROPDOWN = Locator.css("select#country")
ITEMS = Locator.css(".cart-item")


class TestInteractionController(unittest.TestCase):
    """Verbs wait for their precondition, then act once."""

    def setUp(self):
        self.clock = FakeClock()
        self.driver = FakeDriver(self.clock)
        self.controller = InteractionController(
            self.driver,
            timeout=5.0,
            poll_interval=0.5,
            clock=self.clock.time,
            sleep=self.clock.sleep
        )

    def test_click_waits_for_late_element(self):
        button = FakeElement(visible_at=2.0)
        self.driver.add(BUTTON, button)
        self.controller.click(BUTTON)
        self.assertEqual(button.clicks, 1)
        self.assertGreaterEqual(self.clock.now, 2.0)
        self.assertLess(self.clock.now, 5.0)

    def test_click_on_missing_element_times_out(self):
        with self.assertRaises(WaitTimeoutError) as ctx:
            self.controller.click(BUTTON)
        self.assertAlmostEqual(self.clock.now, 5.0)
        self.assertEqual(ctx.exception.locator, BUTTON)

    def test_click_waits_for_enabled(self):
        button = FakeElement(enabled=False)
        self.driver.add(BUTTON, button)
        with self.assertRaises(WaitTimeoutError):
            self.controller.click(BUTTON)
        self.assertEqual(button.clicks, 0)

    def test_rejected_action_becomes_interaction_error(self):
        self.driver.add(BUTTON, FakeElement(click_error=RuntimeError("intercepted by overlay")))
        with self.assertRaises(InteractionError) as ctx:
            self.controller.click(BUTTON)
        self.assertEqual(ctx.exception.verb, "click")
        self.assertIn("intercepted by overlay", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_rejected_action_is_not_retried(self):
        button = FakeElement(click_error=RuntimeError("intercepted"))
        self.driver.add(BUTTON, button)
        with self.assertRaises(InteractionError):
            self.controller.click(BUTTON)
        self.assertEqual(self.clock.sleeps, [])

    def test_fatal_lookup_error_propagates_unwrapped(self):
        button = FakeElement()
        self.driver.add(BUTTON, button)
        self.driver.lookup_errors = [RuntimeError("Unexpected token in selector")]
        with self.assertRaises(RuntimeError) as ctx:
            self.controller.click(BUTTON)
        self.assertNotIsInstance(ctx.exception, InteractionError)
        self.assertIn("Unexpected token", str(ctx.exception))
        self.assertEqual(button.clicks, 0)
        self.assertEqual(self.clock.now, 0.0)

    def test_stale_lookups_recover_before_deadline(self):
        button = FakeElement()
        self.driver.add(BUTTON, button)
        self.driver.lookup_errors = [StaleElementError("element is not attached to the DOM") for _ in range(3)]
        self.controller.click(BUTTON)
        self.assertEqual(button.clicks, 1)
        self.assertEqual(self.clock.now, 1.5)

    def test_session_error_passes_through(self):
        self.driver.add(BUTTON, FakeElement(click_error=SessionError("target closed")))
        with self.assertRaises(SessionError):
            self.controller.click(BUTTON)

    def test_click_via_script(self):
        button = FakeElement()
        self.driver.add(BUTTON, button)
        self.controller.click_via_script(BUTTON)
        self.assertEqual(self.driver.scripts[0][0], SCRIPT_CLICK)
        self.assertEqual(button.clicks, 1)

    def test_clear_and_type_replaces_value(self):
        field = FakeElement(tag="input")
        field.value = "old@example.com"
        self.driver.add(FIELD, field)
        self.controller.clear_and_type(FIELD, "fatma@test.com")
        self.assertEqual(field.value, "fatma@test.com")

    def test_type_text_appends(self):
        field = FakeElement(tag="input")
        self.driver.add(FIELD, field)
        self.controller.type_text(FIELD, "ab")
        self.controller.type_text(FIELD, "c")
        self.assertEqual(field.value, "abc")

    def test_select_by_text_value_and_index(self):
        dropdown = select("eg=Egypt", "fr=France", "de=Germany")
        self.driver.add(DROPDOWN, dropdown)

        self.assertEqual(self.controller.select_option(DROPDOWN, SelectBy.TEXT, "France").value, "fr")
        self.assertEqual(dropdown.value, "fr")
        self.controller.select_option(DROPDOWN, SelectBy.VALUE, "de")
        self.assertEqual(dropdown.value, "de")
        self.controller.select_option(DROPDOWN, SelectBy.INDEX, 0)
        self.assertEqual(self.controller.selected_option(DROPDOWN).text, "Egypt")

    def test_select_text_ignores_extra_whitespace(self):
        self.driver.add(DROPDOWN, select("ca=  Cairo   City "))
        self.assertEqual(self.controller.select_option(DROPDOWN, SelectBy.TEXT, "Cairo City").value, "ca")

    def test_select_unknown_entry_suggests_close_matches(self):
        self.driver.add(DROPDOWN, select("eg=Egypt", "fr=France"))
        with self.assertRaises(StateError) as ctx:
            self.controller.select_option(DROPDOWN, SelectBy.TEXT, "Frence")
        self.assertIn("'France'", str(ctx.exception))
        self.assertEqual(ctx.exception.context["available"], ["Egypt", "France"])

    def test_select_index_out_of_range(self):
        self.driver.add(DROPDOWN, select("eg=Egypt"))
        with self.assertRaises(StateError):
            self.controller.select_option(DROPDOWN, SelectBy.INDEX, 3)
        with self.assertRaises(StateError):
            self.controller.select_option(DROPDOWN, SelectBy.INDEX, "0")

    def test_select_on_non_select_element(self):
        self.driver.add(DROPDOWN, FakeElement(tag="input"))
        with self.assertRaises(StateError):
            self.controller.select_option(DROPDOWN, SelectBy.TEXT, "Egypt")

    def test_probes_do_not_wait(self):
        self.assertFalse(self.controller.is_displayed(BUTTON))
        self.assertFalse(self.controller.is_enabled(BUTTON))
        self.driver.add(BUTTON, FakeElement(visible_at=1.0))
        self.assertFalse(self.controller.is_displayed(BUTTON))
        self.assertEqual(self.clock.sleeps, [])

    def test_probe_on_detached_element_is_false(self):
        element = FakeElement()
        element.stale = True
        self.driver.add(BUTTON, element)
        self.assertFalse(self.controller.is_displayed(BUTTON))

    def test_read_text_waits_for_visibility(self):
        self.driver.add(BUTTON, FakeElement("Checkout", visible_at=1.0))
        self.assertEqual(self.controller.read_text(BUTTON), "Checkout")
        self.assertEqual(self.clock.now, 1.0)

    def test_enumerate_and_count(self):
        self.assertEqual(self.controller.count(ITEMS), 0)
        self.driver.add(ITEMS, FakeElement("a"), FakeElement("b"), FakeElement("c", attached_at=10.0))
        self.assertEqual(self.controller.count(ITEMS), 2)
        self.assertEqual([e.text for e in self.controller.enumerate(ITEMS)], ["a", "b"])

    def test_evaluate_on_passes_element(self):
        form = FakeElement(tag="form")
        self.driver.add(FIELD, form)
        self.driver.script_results["(f) => f.name"] = lambda el: el.tag
        self.assertEqual(self.controller.evaluate_on(FIELD, "(f) => f.name"), "form")

    def test_scroll_into_view_is_best_effort(self):
        self.assertFalse(self.controller.scroll_into_view(BUTTON))
        self.driver.add(BUTTON, FakeElement())
        self.assertTrue(self.controller.scroll_into_view(BUTTON))
        self.assertEqual(self.driver.scripts[-1][0], SCRIPT_SCROLL_INTO_VIEW)

    def test_double_click(self):
        button = FakeElement()
        self.driver.add(BUTTON, button)
        self.controller.double_click(BUTTON)
        self.assertEqual(button.clicks, 2)

    def test_page_scrolls(self):
        self.controller.scroll_to_top()
        self.controller.scroll_to_bottom()
        self.assertEqual([s for s, _ in self.driver.scripts], [SCRIPT_SCROLL_TO_TOP, SCRIPT_SCROLL_TO_BOTTOM])

    def test_wait_until_invisible(self):
        self.driver.add(BUTTON, FakeElement(detached_at=1.5))
        self.assertTrue(self.controller.wait_until_invisible(BUTTON))
        self.assertEqual(self.clock.now, 1.5)

    def test_wait_for_text(self):
        element = FakeElement("Processing")
        self.driver.add(BUTTON, element)
        with self.assertRaises(WaitTimeoutError):
            self.controller.wait_for_text(BUTTON, "Order placed", timeout=1.0)
        element.text = "Order placed successfully"
        self.assertTrue(self.controller.wait_for_text(BUTTON, "Order placed"))

    def test_wait_for_count(self):
        self.driver.add(ITEMS, FakeElement(), FakeElement(attached_at=2.0))
        self.assertEqual(len(self.controller.wait_for_count(ITEMS, 2)), 2)
        self.assertEqual(self.clock.now, 2.0)

    def test_read_attribute(self):
        self.driver.add(FIELD, FakeElement(tag="input", attributes={"placeholder": "Email"}))
        self.assertEqual(self.controller.read_attribute(FIELD, "placeholder"), "Email")

    def test_wait_for_url_contains(self):
        self.driver.url = "https://shop.test/products"
        self.assertEqual(self.controller.wait_for_url_contains("cart", "products"), "https://shop.test/products")
        with self.assertRaises(WaitTimeoutError):
            self.controller.wait_for_url_contains("checkout", timeout=1.0)

    def test_diagnostics_record_each_verb(self):
        diagnostics = DiagnosticsManager("unit", enabled=True, base_output_dir="unused")
        controller = InteractionController(self.driver, timeout=1.0, poll_interval=0.5,
                                           diagnostics_manager=diagnostics,
                                           clock=self.clock.time, sleep=self.clock.sleep)
        self.driver.add(BUTTON, FakeElement())
        controller.click(BUTTON)
        with self.assertRaises(WaitTimeoutError):
            controller.click(FIELD)

        self.assertEqual([a.verb for a in diagnostics.actions], ["click", "click"])
        self.assertTrue(diagnostics.actions[0].success)
        failed = diagnostics.failed_actions()
        self.assertEqual(len(failed), 1)
        self.assertEqual(failed[0].error_type, "WaitTimeoutError")
        self.assertEqual(failed[0].target, str(FIELD))

    def test_verbs_report_to_any_diagnostics_manager(self):
        manager = MagicMock()
        controller = InteractionController(self.driver, diagnostics_manager=manager)
        self.driver.add(BUTTON, FakeElement())
        controller.click(BUTTON)
        manager.track_action.assert_called_once_with("click", BUTTON)


if __name__ == '__main__':
    unittest.main()

"""Shopping cart page."""

import re
from types import MappingProxyType

from cartify_automation.core.exceptions import StateError, WaitTimeoutError
from cartify_automation.core.locator import Locator
from cartify_automation.pages.base_page import BasePage


class CartPage(BasePage):
    """Cart contents, price summary and the buttons leading out of the cart."""

    LOCATORS = MappingProxyType({
        "cart_title": Locator.css(".cart-title"),
        "cart_count": Locator.css(".cart-count"),
        "cart_container": Locator.id("cart-container"),
        "checkout_button": Locator.css(".checkout-btn"),
        "continue_shopping_button": Locator.css(".continue-shopping"),
        "start_shopping_button": Locator.css(".start-shopping"),
        "empty_cart_message": Locator.css(".empty-cart-message"),
        "subtotal": Locator.id("subtotal"),
        "shipping": Locator.id("shipping"),
        "tax": Locator.id("tax"),
        "total": Locator.id("total"),
        "cart_items": Locator.css(".cart-item"),
        "delete_item_button": Locator.css(".delete-item"),
    })

    def load_signal(self) -> Locator:
        return self.locators["cart_title"]

    def is_loaded(self) -> bool:
        return self._signal_visible(self.load_signal())

    # --- Cart Item Methods ---

    def is_cart_empty(self) -> bool:
        return self.actions.is_displayed(self.locators["empty_cart_message"])

    def get_empty_cart_message(self) -> str:
        return self.actions.read_text(self.locators["empty_cart_message"])

    def get_cart_item_count(self) -> int:
        """Item count shown by the cart counter; 0 for an empty cart.

        Raises:
            StateError: If the counter shows no number
        """
        if self.is_cart_empty():
            return 0
        count_text = self.actions.read_text(self.locators["cart_count"])
        digits = re.sub(r"[^0-9]", "", count_text)
        if not digits:
            raise StateError(
                f"Cart counter shows no item count: '{count_text}'",
                locator=self.locators["cart_count"]
            )
        return int(digits)

    def get_actual_cart_items_count(self) -> int:
        """Number of item rows present in the DOM."""
        return self.actions.count(self.locators["cart_items"])

    def remove_item_by_index(self, index: int) -> None:
        """Press the delete button of the item at position index (0-based).

        Raises:
            StateError: If the cart has no item at that position
        """
        buttons = self.locators["delete_item_button"]
        available = self.actions.count(buttons)
        if available == 0:
            raise StateError("Cannot remove item - cart is empty")
        if not 0 <= index < available:
            raise StateError(
                f"Cart item index out of range: {index} (items: {available})",
                locator=buttons,
                context={"index": index, "available": available}
            )
        self.actions.click(buttons.nth(index))

    # --- Price Methods ---

    def get_subtotal(self) -> str:
        return self.actions.read_text(self.locators["subtotal"])

    def get_shipping(self) -> str:
        return self.actions.read_text(self.locators["shipping"])

    def get_tax(self) -> str:
        return self.actions.read_text(self.locators["tax"])

    def get_total(self) -> str:
        return self.actions.read_text(self.locators["total"])

    # --- Navigation Methods ---

    def click_proceed_to_checkout(self) -> None:
        self.actions.click(self.locators["checkout_button"])

    def click_continue_shopping(self) -> None:
        self.actions.click(self.locators["continue_shopping_button"])

    def click_start_shopping(self) -> None:
        """Follow the empty cart's call to action back to the catalogue."""
        self.actions.click(self.locators["start_shopping_button"])

    # --- Button Verification Methods ---

    def is_checkout_button_visible(self) -> bool:
        return self.actions.is_displayed(self.locators["checkout_button"])

    def is_checkout_button_enabled(self) -> bool:
        return self.actions.is_enabled(self.locators["checkout_button"])

    def is_continue_shopping_button_visible(self) -> bool:
        return self.actions.is_displayed(self.locators["continue_shopping_button"])

    def is_delete_button_visible(self) -> bool:
        return self.actions.is_displayed(self.locators["delete_item_button"])

    def is_cart_container_displayed(self) -> bool:
        try:
            self.actions.wait_until_visible(self.locators["cart_container"])
            return True
        except WaitTimeoutError:
            return False

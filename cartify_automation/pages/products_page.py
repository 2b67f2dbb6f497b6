"""Product listing page."""

from types import MappingProxyType
from typing import List

from cartify_automation.core.exceptions import StateError
from cartify_automation.core.locator import Locator
from cartify_automation.pages.base_page import BasePage


class ProductsPage(BasePage):
    """The catalogue: products, their add-to-cart buttons and the cart icon.

    An empty catalogue is a valid state of this page, reported by
    is_products_page_empty(), not a load failure.
    """

    LOCATORS = MappingProxyType({
        "page_title": Locator.css(".products-title"),
        "products_list": Locator.css(".products-list"),
        "product_items": Locator.css(".product-item"),
        "add_to_cart_buttons": Locator.css(".add-to-cart-btn"),
        "empty_products_message": Locator.css(".empty-products-message"),
        "cart_icon": Locator.css(".cart-icon"),
        "product_name": Locator.css(".product-name"),
        "product_price": Locator.css(".product-price"),
    })

    def load_signal(self) -> Locator:
        return self.locators["page_title"]

    def is_loaded(self) -> bool:
        return self._signal_visible(self.load_signal())

    # --- Products Verification Methods ---

    def get_product_count(self) -> int:
        return self.actions.count(self.locators["product_items"])

    def is_products_page_empty(self) -> bool:
        return self.get_product_count() == 0

    def is_empty_products_message_displayed(self) -> bool:
        return self.actions.is_displayed(self.locators["empty_products_message"])

    def get_empty_products_message(self) -> str:
        return self.actions.read_text(self.locators["empty_products_message"])

    def get_product_names(self) -> List[str]:
        locator = self.locators["product_name"]
        return [self.actions.read_text(locator.nth(i)) for i in range(self.actions.count(locator))]

    def get_product_prices(self) -> List[str]:
        locator = self.locators["product_price"]
        return [self.actions.read_text(locator.nth(i)) for i in range(self.actions.count(locator))]

    # --- Add to Cart Methods ---

    def attempt_to_add_product_to_cart(self) -> None:
        """Add the first product to the cart.

        Raises:
            StateError: If the catalogue is empty
        """
        if self.is_products_page_empty():
            raise StateError("Cannot add product to cart - products page is empty")
        self.actions.click(self.locators["add_to_cart_buttons"].nth(0))

    def add_product_to_cart_by_index(self, index: int) -> None:
        """Add the product at position index (0-based) to the cart.

        Raises:
            StateError: If there is no product at that position
        """
        buttons = self.locators["add_to_cart_buttons"]
        available = self.actions.count(buttons)
        if available == 0:
            raise StateError("Cannot add product to cart - products page is empty")
        if not 0 <= index < available:
            raise StateError(
                f"Product index out of range: {index} (products available: {available})",
                locator=buttons,
                context={"index": index, "available": available}
            )
        self.logger.info(f"Adding product {index} to cart")
        self.actions.click(buttons.nth(index))

    def are_add_to_cart_buttons_visible(self) -> bool:
        return self.actions.count(self.locators["add_to_cart_buttons"]) > 0

    # --- Navigation Methods ---

    def click_cart_icon(self) -> None:
        self.actions.click(self.locators["cart_icon"])

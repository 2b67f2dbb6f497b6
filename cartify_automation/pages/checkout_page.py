"""Checkout form page."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Optional

from cartify_automation.core.exceptions import WaitTimeoutError
from cartify_automation.core.interaction_controller import SelectBy
from cartify_automation.core.locator import Locator
from cartify_automation.pages.base_page import BasePage

# Names of the form controls currently failing HTML5 constraint validation
SCRIPT_INVALID_FIELDS = (
    "(form) => Array.from(form.elements)"
    ".filter(e => e.willValidate && !e.checkValidity())"
    ".map(e => e.name || e.id)"
)


class PaymentMethod(Enum):
    """Entries of the payment select; the value is the option value."""
    CASH_ON_DELIVERY = "cod"
    CREDIT_CARD = "card"
    PAYPAL = "paypal"


@dataclass
class ShippingInfo:
    """Customer and delivery details entered in the checkout form."""
    full_name: str
    email: str
    phone: str
    zip_code: str
    address: str
    gender: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    mobile: Optional[str] = None


@dataclass
class CardDetails:
    number: str
    holder_name: str
    expiry: str
    cvc: str


class CheckoutPage(BasePage):
    """The order form: shipping details, payment method and submission.

    Selecting a payment method reveals its field group asynchronously, so the
    card and PayPal fillers wait for their group before typing.
    """

    LOCATORS = MappingProxyType({
        "checkout_form": Locator.css("form#myform"),
        "checkout_title": Locator.css("form#myform h1"),
        "full_name": Locator.css("input[name='fullname']"),
        "email": Locator.css("input[name='email']"),
        "phone": Locator.css("input[name='phone']"),
        "zip_code": Locator.css("input[name='ZIP']"),
        "mobile": Locator.css("input[name='mobile']"),
        "address": Locator.css("textarea[name='address']"),
        "gender": Locator.css("select[name='gender']"),
        "city": Locator.css("select#city"),
        "country": Locator.css("select#country"),
        "payment_method": Locator.css("select[name='payment']"),
        "card_info": Locator.css("#card-info"),
        "card_number": Locator.css("input[name='cardnumber']"),
        "card_name": Locator.css("input[name='cardname']"),
        "card_expiry": Locator.css("input[name='expiry']"),
        "card_cvc": Locator.css("input[name='cvc']"),
        "paypal_section": Locator.css("#paypal"),
        "paypal_email": Locator.css("input#paypalEmail"),
        "submit_button": Locator.css("button[type='submit']"),
        "success_notification": Locator.css("#successNotification"),
        "validation_message": Locator.css(".notification, .error"),
    })

    def load_signal(self) -> Locator:
        return self.locators["checkout_form"]

    def is_loaded(self) -> bool:
        return self._signal_visible(self.load_signal())

    # --- Shipping Information ---

    def fill_full_name(self, full_name: str) -> None:
        self.actions.clear_and_type(self.locators["full_name"], full_name)

    def fill_email(self, email: str) -> None:
        self.actions.clear_and_type(self.locators["email"], email)

    def fill_phone(self, phone: str) -> None:
        self.actions.clear_and_type(self.locators["phone"], phone)

    def fill_mobile(self, mobile: str) -> None:
        self.actions.clear_and_type(self.locators["mobile"], mobile)

    def fill_zip_code(self, zip_code: str) -> None:
        self.actions.clear_and_type(self.locators["zip_code"], zip_code)

    def fill_address(self, address: str) -> None:
        self.actions.clear_and_type(self.locators["address"], address)

    def select_gender(self, gender: str) -> None:
        self.actions.select_option(self.locators["gender"], SelectBy.TEXT, gender)

    def select_city(self, city: str) -> None:
        self.actions.select_option(self.locators["city"], SelectBy.TEXT, city)

    def select_country(self, country: str) -> None:
        self.actions.select_option(self.locators["country"], SelectBy.TEXT, country)

    def fill_basic_checkout_info(self, info: ShippingInfo) -> None:
        """Fill every shipping field; optional fields left as None are not touched."""
        self.logger.info(f"Filling shipping details for {info.full_name}")
        self.fill_full_name(info.full_name)
        self.fill_email(info.email)
        self.fill_phone(info.phone)
        self.fill_zip_code(info.zip_code)
        self.fill_address(info.address)
        if info.mobile is not None:
            self.fill_mobile(info.mobile)
        if info.gender is not None:
            self.select_gender(info.gender)
        if info.country is not None:
            self.select_country(info.country)
        if info.city is not None:
            self.select_city(info.city)

    # --- Payment ---

    def select_payment_method(self, method: PaymentMethod) -> None:
        self.logger.info(f"Selecting payment method '{method.value}'")
        self.actions.select_option(self.locators["payment_method"], SelectBy.VALUE, method.value)

    def select_cash_on_delivery(self) -> None:
        self.select_payment_method(PaymentMethod.CASH_ON_DELIVERY)

    def select_credit_card(self) -> None:
        self.select_payment_method(PaymentMethod.CREDIT_CARD)

    def select_paypal(self) -> None:
        self.select_payment_method(PaymentMethod.PAYPAL)

    def fill_credit_card_info(self, card: CardDetails) -> None:
        """Fill the card fields once the card group is shown.

        Raises:
            WaitTimeoutError: If the card group never appears (card payment not selected)
        """
        self.actions.wait_until_visible(self.locators["card_info"])
        self.actions.clear_and_type(self.locators["card_number"], card.number)
        self.actions.clear_and_type(self.locators["card_name"], card.holder_name)
        self.actions.clear_and_type(self.locators["card_expiry"], card.expiry)
        self.actions.clear_and_type(self.locators["card_cvc"], card.cvc)

    def fill_paypal_info(self, email: str) -> None:
        self.actions.wait_until_visible(self.locators["paypal_section"])
        self.actions.clear_and_type(self.locators["paypal_email"], email)

    def is_card_info_visible(self) -> bool:
        return self.actions.is_displayed(self.locators["card_info"])

    def is_paypal_section_visible(self) -> bool:
        return self.actions.is_displayed(self.locators["paypal_section"])

    # --- Submission ---

    def click_submit_order(self) -> None:
        self.actions.scroll_into_view(self.locators["submit_button"])
        self.actions.click(self.locators["submit_button"])

    def wait_for_order_confirmation(self, timeout: Optional[float] = None) -> str:
        """Wait for the success notification and return its text.

        Raises:
            WaitTimeoutError: If no confirmation is shown within the timeout
        """
        self.actions.wait_until_visible(self.locators["success_notification"], timeout)
        return self.actions.read_text(self.locators["success_notification"])

    def is_order_placed_successfully(self) -> bool:
        try:
            self.wait_for_order_confirmation()
            return True
        except WaitTimeoutError:
            return False

    def get_success_message(self) -> str:
        return self.actions.read_text(self.locators["success_notification"])

    def is_validation_message_displayed(self) -> bool:
        return self.actions.is_displayed(self.locators["validation_message"])

    def get_validation_message(self) -> str:
        return self.actions.read_text(self.locators["validation_message"])

    def get_invalid_fields(self) -> List[str]:
        """Names of the form controls the browser currently considers invalid."""
        return list(self.actions.evaluate_on(self.locators["checkout_form"], SCRIPT_INVALID_FIELDS) or [])

    def is_still_on_checkout_page(self) -> bool:
        """Probe: the URL still points at the checkout and the form is shown."""
        return "checkout" in self.get_current_url() and self.actions.is_displayed(self.locators["checkout_form"])

    def get_checkout_title(self) -> str:
        return self.actions.read_text(self.locators["checkout_title"])

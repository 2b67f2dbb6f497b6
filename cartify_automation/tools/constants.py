"""Constants for the interaction layer."""

# Timeouts and Delays
DEFAULT_TIMEOUT = 10.0   # seconds, per-page explicit wait bound
POLL_INTERVAL = 0.5      # seconds between condition evaluations
ACTION_TIMEOUT_MS = 2000  # ms, driver-side bound on a single action once its precondition holds
NAVIGATION_TIMEOUT_MS = 30000  # ms

# Similarity thresholds (0 to 100, thefuzz scale)
OPTION_SUGGESTION_THRESHOLD = 60
OPTION_SUGGESTION_LIMIT = 3

# Scripts, written as function expressions taking the element (or nothing)
SCRIPT_CLICK = "(el) => el.click()"
SCRIPT_SCROLL_INTO_VIEW = "(el) => el.scrollIntoView(true)"
SCRIPT_SCROLL_TO_TOP = "() => window.scrollTo(0, 0)"
SCRIPT_SCROLL_TO_BOTTOM = "() => window.scrollTo(0, document.body.scrollHeight)"

# Playwright reports a node removed mid-action, or a navigation racing an
# evaluation, with these messages rather than with dedicated exception types.
DETACHED_MESSAGE_MARKERS = (
    "not attached to the dom",
    "element is not attached",
    "execution context was destroyed",
    "element handle is disposed",
    "node is detached",
)

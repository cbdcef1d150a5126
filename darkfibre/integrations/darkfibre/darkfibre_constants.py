import httpx

DEFAULT_BASE_URL: str = "https://api.darkfibre.dev/v1"

# Socket inactivity / request timeout; per-call overrides are allowed on POST.
HTTP_TIMEOUT_SECONDS: float = 30.0
HTTP_POOL_LIMITS: httpx.Limits = httpx.Limits(
    max_connections=50,
    max_keepalive_connections=10,
)

REGISTER_ENDPOINT: str = "/auth/register"
PROFILE_ENDPOINT: str = "/auth/profile"
BUY_ENDPOINT: str = "/tx/buy"
SELL_ENDPOINT: str = "/tx/sell"
SWAP_ENDPOINT: str = "/tx/swap"
SUBMIT_ENDPOINT: str = "/tx/submit"

REGISTER_MESSAGE_PREFIX: str = "darkfibre:"

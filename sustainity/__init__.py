# Configure SSL warnings before any HTTP client is used for URL sources.
from sustainity.config import DISABLE_SSL_VERIFY

# Suppress InsecureRequestWarning when SSL verification is disabled
if DISABLE_SSL_VERIFY:
    import urllib3
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

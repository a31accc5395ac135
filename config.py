import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invoicing.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    CREATE_TABLES = bool(data.get("CREATE_TABLES", True))  # create missing tables on startup

    # Owner scope is resolved upstream (session / API token) and forwarded in this header
    OWNER_HEADER = data.get("OWNER_HEADER", "X-Owner-ID")

    # Invoice numbering
    INVOICE_NUMBER_TEMPLATE = data.get("INVOICE_NUMBER_TEMPLATE", "%YYYY%-%04C%")
    USE_LOCAL_COUNTER = bool(data.get("USE_LOCAL_COUNTER", False))  # counter per buyer company

    # Invoice defaults
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "EUR")
    DEFAULT_PAYMENT_DAYS = data.get("DEFAULT_PAYMENT_DAYS", 14)
    MONEY_DECIMAL_PLACES = data.get("MONEY_DECIMAL_PLACES", 2)  # presentation only

    # Transactions
    TRANSACTION_TIMEOUT_SECONDS = data.get("TRANSACTION_TIMEOUT_SECONDS", 10.0)
    LOCK_TIMEOUT_MS = data.get("LOCK_TIMEOUT_MS", 5000)  # Postgres only

    # Listing
    INVOICE_LIST_DEFAULT_LIMIT = data.get("INVOICE_LIST_DEFAULT_LIMIT", 50)
    INVOICE_LIST_MAX_LIMIT = data.get("INVOICE_LIST_MAX_LIMIT", 200)

    # Seller profile (used for verification, e-invoice export and PDF header)
    SELLER_NAME = data.get("SELLER_NAME", "")
    SELLER_ADDRESS1 = data.get("SELLER_ADDRESS1", "")
    SELLER_ADDRESS2 = data.get("SELLER_ADDRESS2", "")
    SELLER_ZIP = data.get("SELLER_ZIP", "")
    SELLER_CITY = data.get("SELLER_CITY", "")
    SELLER_COUNTRY_CODE = data.get("SELLER_COUNTRY_CODE", "DE")
    SELLER_VAT_ID = data.get("SELLER_VAT_ID", "")
    SELLER_CONTACT = data.get("SELLER_CONTACT", "")
    SELLER_EMAIL = data.get("SELLER_EMAIL", "")
    SELLER_BANK_IBAN = data.get("SELLER_BANK_IBAN", "")
    SELLER_BANK_BIC = data.get("SELLER_BANK_BIC", "")
    SELLER_BANK_NAME = data.get("SELLER_BANK_NAME", "")

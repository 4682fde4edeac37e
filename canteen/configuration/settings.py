import logging
import os
from dotenv import load_dotenv

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Load environment variables
load_dotenv(dotenv_path=".env", encoding="utf-8")

# Silence SQLAlchemy engine logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

INSECURE_DEFAULT_SECRET = "your-secret-key-change-in-production"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Configuration:
    def __init__(self):

        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development").lower()
        self.is_production = self.environment == "production"

        # Tokens
        self.jwt_secret = os.getenv("JWT_SECRET")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_expiration_days = int(os.getenv("JWT_EXPIRATION_DAYS", 7))
        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", 10))

        # Authorization and order lifecycle behaviour
        self.forbidden_status_code = int(os.getenv("FORBIDDEN_STATUS_CODE", 401))
        self.strict_order_transitions = _env_bool("STRICT_ORDER_TRANSITIONS", False)
        self.expose_errors = _env_bool("EXPOSE_ERRORS", not self.is_production)

        # POSTGRES
        self.database_url = os.getenv("DATABASE_URL")
        self.db_user = os.getenv("DB_USER")
        self.db_password = os.getenv("DB_PASSWORD")
        self.db_host = os.getenv("DB_HOST")
        self.db_port = os.getenv("DB_PORT", "5432")
        self.db_name = os.getenv("DB_NAME")
        self.init_database = _env_bool("INIT_DATABASE", True)

        # Seed admin
        self.admin_name = os.getenv("ADMIN_NAME", "Administrator")
        self.admin_email = os.getenv("ADMIN_EMAIL")
        self.admin_password = os.getenv("ADMIN_PASSWORD")

        # Razorpay
        self.razorpay_key_id = os.getenv("RAZORPAY_KEY_ID")
        self.razorpay_key_secret = os.getenv("RAZORPAY_KEY_SECRET")
        self.currency = os.getenv("CURRENCY", "INR")
        self.currency_locale = os.getenv("CURRENCY_LOCALE", "en_IN")

        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        self.cors_origins = [origin.strip() for origin in origins.split(",") if origin.strip()]

    @property
    def signing_secret(self) -> str:
        if self.jwt_secret:
            return self.jwt_secret
        if self.is_production:
            raise RuntimeError("JWT_SECRET must be set in production")
        logging.warning("AUTH >>> JWT_SECRET not set, using the insecure default secret")
        return INSECURE_DEFAULT_SECRET

    def connect_to_database(self) -> str:
        if self.database_url:
            return self.database_url
        if self.db_host:
            db_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"
            logging.info(f"DATABASE >>> Using PostgreSQL at {self.db_host}:{self.db_port}/{self.db_name}")
            return db_url
        logging.info("DATABASE >>> No database configured, using local SQLite file canteen.db")
        return "sqlite:///./canteen.db"

import os


def _env_list(name, default):
    raw = os.getenv(name)
    if not raw:
        return default
    return [x.strip() for x in raw.split(",") if x.strip()]


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # POS
    INVOICE_PREFIX = os.getenv("INVOICE_PREFIX", "ANN")
    TAX_RATE = os.getenv("TAX_RATE", "0")                # fraction, "0.05" = 5%
    DEFAULT_PAYMENT_MODE = os.getenv("DEFAULT_PAYMENT_MODE", "Cash")
    PAYMENT_MODES = _env_list("PAYMENT_MODES", ["Cash", "UPI", "Card"])
    SALES_LIST_LIMIT = int(os.getenv("SALES_LIST_LIMIT", "200"))
    DEFAULT_TERMINAL = "default"

    @staticmethod
    def init_app(app):
        if app.config.get("SQLALCHEMY_DATABASE_URI"):
            return
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'pos.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")

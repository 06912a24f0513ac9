import os, logging
from flask import Flask
from sqlalchemy import text

from db import create_engine_with_fallback, ensure_schema
from identity import ProviderIdentityResolver
from course_settings import PROMO_CODE_CASE_SENSITIVE

# ---------------- App & config ----------------
app = Flask(__name__)
app.secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL)
log = logging.getLogger("enrollment-default")

# -------------- DB connection --------------
ENGINE = create_engine_with_fallback()
ensure_schema(ENGINE)
app.config["DB_ENGINE"] = ENGINE
app.config["IDENTITY_RESOLVER"] = ProviderIdentityResolver.from_env()
app.config["PROMO_CODE_CASE_SENSITIVE"] = PROMO_CODE_CASE_SENSITIVE

# -------------- Routes --------------
@app.get("/healthz")
def healthz():
    try:
        with ENGINE.begin() as c:
            c.execute(text("SELECT 1"))
        return "ok", 200
    except Exception:
        log.exception("Health check failed")
        return "db error", 500

# ---- Blueprints ----
from subscriptions import subscription_bp, configure_cors
app.register_blueprint(subscription_bp)

from price import price_bp
app.register_blueprint(price_bp, url_prefix="/price")

configure_cors(app)

from werkzeug.middleware.proxy_fix import ProxyFix

# Trust the hosting proxy so scheme/host are correct
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)


# ---------------------------------------------------------------
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 8080)), debug=False)

"""Development entrypoint: ``python app.py`` or ``flask --app app run``."""

import logging
import os

from src.pension_system.pension_system.main import create_app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=bool(app.config.get("DEBUG")))

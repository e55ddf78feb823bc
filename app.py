"""Development entrypoint: `python app.py` (APP_ENV picks the settings module)."""

from src.bakery_app.bakery_app.main import create_app

app = create_app()


if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))

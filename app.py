import importlib

from config import get_settings_module

from src.timeharbor.timeharbor.main import create_app

app = create_app()

if __name__ == "__main__":
    settings = importlib.import_module(get_settings_module())
    app.run(host="0.0.0.0", port=getattr(settings, "API_PORT", 3001), debug=app.config["DEBUG"])

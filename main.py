from shorty.config import Config
from shorty.main import create_app

config = Config.from_env()
app = create_app(config)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=config.port)  # По умолчанию 8080

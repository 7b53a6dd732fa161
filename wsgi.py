"""
WSGI entry point — used by gunicorn in Procfile.
"""
from webhook_service import create_app
from webhook_service.config import Settings

settings = Settings.from_env()
app = create_app(settings)

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port)

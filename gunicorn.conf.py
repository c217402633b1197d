import os

# gunicorn -c gunicorn.conf.py app.main:app
wsgi_app = "app.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', 8000)}"
workers = int(os.getenv('WEB_CONCURRENCY', 2))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.getenv('GUNICORN_TIMEOUT', 30))
max_requests = 1000
max_requests_jitter = 100
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
accesslog = "-"

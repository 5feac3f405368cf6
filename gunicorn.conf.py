import os

bind = f"0.0.0.0:{os.getenv('PORT', 8000)}"
# State lives in process memory; more than one worker would split it
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "glamping.main:app"
worker_connections = 1000
timeout = int(os.getenv('GUNICORN_TIMEOUT', 120))
preload_app = False

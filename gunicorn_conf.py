import multiprocessing

from lavanderia.core.config import get_settings

settings = get_settings()

_workers_default = (multiprocessing.cpu_count() * 2) + 1

bind = f"0.0.0.0:{settings.PORT}"
workers = settings.GUNICORN_WORKERS or _workers_default
worker_class = settings.GUNICORN_WORKER_CLASS

accesslog = "-"
errorlog = "-"
loglevel = settings.LOG_LEVEL.lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(L)s'

preload_app = False

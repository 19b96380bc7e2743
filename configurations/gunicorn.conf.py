# gunicorn.conf.py

import multiprocessing
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = multiprocessing.cpu_count() * 2 + 1
threads = 2
worker_class = "sync"
timeout = 120
preload_app = True  # enables when_ready()

accesslog = "-"
errorlog = "-"

def when_ready(server):
    import django
    from django.conf import settings

    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'configurations.settings')
    django.setup()

    server.log.info("[Gunicorn] Running system_start_checks()")
    from configurations.system_start_checks import system_start_checks
    system_start_checks()
    server.log.info(f"urlconf={settings.ROOT_URLCONF} debug={settings.DEBUG}")

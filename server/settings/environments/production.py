"""Settings for the production environment."""

from server.settings.components import config

DEBUG = False

ALLOWED_HOSTS = [
    host.strip()
    for host in config('DOMAIN_NAMES', default='').split(',')
    if host.strip()
]

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

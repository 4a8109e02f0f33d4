"""QR label and download URL settings."""

from server.settings.components import config

# Explicit public base URL for download links, e.g. http://files.example.com
SERVER_BASE_URL = config('SERVER_BASE_URL', default='')

# Comma-separated frontend origins; the first non-localhost host is used
# as the public server address when SERVER_BASE_URL is not set
FRONTEND_URLS = config('FRONTEND_URLS', default='')

SERVER_IP = config('SERVER_IP', default='')
SERVER_PORT = config('SERVER_PORT', cast=int, default=6301)

"""
WSGI config for the Participium project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "participium.settings")

application = get_wsgi_application()

"""
WSGI config for the MeshIt project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'meshit.settings')

application = get_wsgi_application()

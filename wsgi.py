import os
import sys

# Add your project directory to the sys.path
project_home = os.path.dirname(os.path.abspath(__file__))
if project_home not in sys.path:
    sys.path.insert(0, project_home)

from app import create_app, init_db

application = create_app(os.environ.get('FLASK_ENV', 'production'))
init_db(application)

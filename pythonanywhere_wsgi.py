import sys
import os

# Add your project directory to the sys.path
project_home = '/home/YOUR_USERNAME/recipe-box'
if project_home not in sys.path:
    sys.path.insert(0, project_home)

# Set the working directory
os.chdir(project_home)

# Production settings unless overridden in the web app's environment
os.environ.setdefault('FLASK_ENV', 'production')

# Import the Flask app
from app import app as application

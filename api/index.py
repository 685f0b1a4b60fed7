from mangum import Mangum
import sys
import os
import tempfile

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from punchcard.api import create_app
from punchcard.config import Settings

# The function filesystem is read-only apart from the temp directory
settings = Settings.from_env(default_store_path=os.path.join(tempfile.gettempdir(), "punchcard_data.json"))

app = create_app(settings=settings, root_path="/api")

handler = Mangum(app)

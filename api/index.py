import logging
from app.main import app

# Setup basic logging to capture errors in Vercel Logs
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

logger.info("Show Picker api/index.py initialized")

# Entry point for Vercel Serverless Functions: exports the FastAPI app
__all__ = ["app"]

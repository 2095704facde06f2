import uvicorn
import logging
from chatrelay import create_app
from chatrelay.core.config import configure_logging, settings

configure_logging()

app = create_app()

if __name__ == "__main__":
    # Start the FastAPI server
    logging.info(f"Chat relay starting on port {settings.PORT}...")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

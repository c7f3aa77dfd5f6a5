"""Run the API with uvicorn: python -m nolook"""

import uvicorn

from nolook.config import settings

if __name__ == "__main__":
    uvicorn.run("nolook.main:app", host=settings.host, port=settings.port)

import logging

import uvicorn

from .main import HOST, PORT, create_app

logging.basicConfig(level=logging.INFO)

if __name__ == "__main__":
    uvicorn.run(create_app(), host=HOST, port=PORT)

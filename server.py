import logging

import uvicorn

from journal_insights.main import create_app
from journal_insights.settings import HOST, LOG_LEVEL, PORT


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(), host=HOST, port=PORT)


if __name__ == "__main__":
    main()

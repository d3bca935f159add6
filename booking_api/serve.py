"""Run the booking API with uvicorn.

Usage:
    python -m booking_api.serve
"""
import logging

import uvicorn

from booking_api.core import config


def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    uvicorn.run('booking_api.main:app', host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()

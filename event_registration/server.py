"""Run the service with uvicorn.

Usage::

    event-registration

Host, port and log level come from ``HOST``, ``PORT`` and ``LOG_LEVEL``.
"""

import uvicorn

from event_registration.core.config import HOST, LOG_LEVEL, PORT


def main() -> None:
    uvicorn.run("event_registration.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()

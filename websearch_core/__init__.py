# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import logging

from uvicorn.logging import DefaultFormatter

from websearch_core.config import settings

__version__ = "0.1.0"

# the search subsystem owns the process log output, one handler on the root logger
root_logger = logging.getLogger()
for existing in list(root_logger.handlers):
    root_logger.removeHandler(existing)

handler = logging.StreamHandler()
handler.setFormatter(DefaultFormatter(fmt="%(levelprefix)s %(message)s (%(name)s:%(lineno)d)"))
root_logger.addHandler(handler)
root_logger.setLevel(settings.log_level)

# Every provider request goes through httpx, keep its transport chatter out of the search logs
for noisy in ("httpx", "httpcore"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

# Runtime configuration
#
# Every knob is a module-level constant read once from the environment.
#
#   QROUTE_EXHAUSTIVE_LIMIT : largest number of candidate assignments
#                             (N choose L) * L! that strategy="auto" will
#                             enumerate before switching to the heuristic
#   QROUTE_LOG_FILE         : log file written in the working directory,
#                             empty string disables file logging
#   LOG_TO_CONSOLE          : "true" mirrors the log to stdout
import os

EXHAUSTIVE_LIMIT = int(os.getenv("QROUTE_EXHAUSTIVE_LIMIT", "2000000"))

LOG_FILE_NAME = os.getenv("QROUTE_LOG_FILE", "qroute.log")

LOG_TO_CONSOLE = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"

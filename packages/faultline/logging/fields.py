"""Canonical logging field names.

Formatters and context helpers share these keys so structured output keeps a
stable shape across applications embedding faultline.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EXCEPTION = "exception"

# Structured error fields.
ERROR = "error"
ERROR_ID = "error_id"
ERROR_CATEGORY = "error_category"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"

"""Constants for resolving the calling user of an API request."""

USER_ID_HEADER: str = "X-User-Id"

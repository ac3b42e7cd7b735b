"""Network configuration constants for the portal API."""

import os

DEFAULT_HOST: str = os.environ.get("EDUPORTAL_HOST", "0.0.0.0")
DEFAULT_PORT: int = int(os.environ.get("EDUPORTAL_PORT", "8000"))

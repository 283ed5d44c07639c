"""Core package: provides models, database stores, errors, settings, and shared utilities."""

from .db import CategoryStore, ExpenseStore, get_db_session  # noqa: F401
from .errors import MoneyWhisperError  # noqa: F401
from .models import ExpenseOut, ProjectionReport  # noqa: F401
from .settings import Settings  # noqa: F401
from .utils import get_logger  # noqa: F401

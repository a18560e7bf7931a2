"""Month pipeline: the monthly step orchestrator and the choice resolver."""

from .choices import apply_choice  # noqa: F401
from .orchestrator import MonthResult, commit_month, run_one_month  # noqa: F401

from .submission import Submission, SubmissionState
from .validators import fee_bounds, order_params_violation, validate_order_params

__all__ = [
    "Submission",
    "SubmissionState",
    "fee_bounds",
    "order_params_violation",
    "validate_order_params",
]

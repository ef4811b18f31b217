"""
Validation package.

Guards and safe_calculate are leaf utilities used by the formula library,
so only they are re-exported here. The loan validator builds on the
formulas; import it from lifeos.validation.validator.
"""

from lifeos.validation.guards import (
    is_affordable,
    is_non_negative,
    is_valid_amount,
    is_valid_debt_to_income,
    is_valid_interest_rate,
    is_valid_percentage,
    is_valid_savings_target,
    is_valid_tenure,
    safe_calculate,
)

__all__ = [
    "is_affordable",
    "is_non_negative",
    "is_valid_amount",
    "is_valid_debt_to_income",
    "is_valid_interest_rate",
    "is_valid_percentage",
    "is_valid_savings_target",
    "is_valid_tenure",
    "safe_calculate",
]

"""Mortgage calculator tool exposed to the assistant.

Holds the pure amortization math, the validated input model and the tool
declaration the AI provider advertises to the model.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mortgage_assistant.exceptions import ValidationError
from mortgage_assistant.utils.logger import logger

TOOL_NAME = "mortgageCalculator"
TOOL_DESCRIPTION = "Calculate mortgage for the U.S real estate market"

# Upper bounds keep (1 + i) ** n within float range
MAX_LOAN_TERM_YEARS = 50
MAX_INTEREST_RATE = 100


class MortgageInput(BaseModel):
    """Loan inputs as sent by the model (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    home_price: float = Field(
        alias="homePrice",
        gt=0,
        description="The home price that you are trying to calculate the mortgage.",
    )
    down_payment: float = Field(
        alias="downPayment",
        ge=0,
        description="Portion of the sale price of a home that is not financed.",
    )
    loan_term: float = Field(
        alias="loanTerm",
        gt=0,
        le=MAX_LOAN_TERM_YEARS,
        description="The Amount of time or number of years that you will have to repay a loan.",
    )
    interest_rate: float = Field(
        alias="interestRate",
        ge=0,
        le=MAX_INTEREST_RATE,
        description=(
            "Amount you will pay each year to borrow the money for your loan, "
            "expressed as a percentage."
        ),
    )
    zip_code: str = Field(alias="zipCode", min_length=1, description="The zip code")

    @model_validator(mode="after")
    def check_down_payment(self) -> "MortgageInput":
        if self.down_payment > self.home_price:
            raise ValueError("downPayment cannot exceed homePrice")
        return self


class MortgageResult(BaseModel):
    """Calculated payment figures, rounded to cents."""

    model_config = ConfigDict(populate_by_name=True)

    monthly_payment: float = Field(
        alias="monthlyPayment",
        description=(
            "The amount of money that you will have to pay every month to "
            "finance a home with the provided values."
        ),
    )
    total_amount: float = Field(
        alias="totalAmount", description="Total Amount Paid over the loan term."
    )
    total_interest: float = Field(
        alias="totalInterest", description="Total Interest Paid over the loan term."
    )


def _round_currency(value: float) -> float:
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def calculate_mortgage(mortgage: MortgageInput) -> MortgageResult:
    """Compute the fixed monthly payment with the standard amortization formula.

    M = P [ i(1 + i)^n ] / [ (1 + i)^n - 1 ]

    where P is the loan amount, i the monthly rate and n the number of
    payments. Inputs are not validated here; ``MortgageInput`` does that.
    """
    loan_amount = mortgage.home_price - mortgage.down_payment
    monthly_rate = mortgage.interest_rate / 100 / 12
    number_of_payments = mortgage.loan_term * 12

    if monthly_rate == 0:
        monthly_payment = loan_amount / number_of_payments
    else:
        power_term = (1 + monthly_rate) ** number_of_payments
        monthly_payment = (loan_amount * (monthly_rate * power_term)) / (power_term - 1)

    monthly_payment = _round_currency(monthly_payment)
    total_amount = _round_currency(monthly_payment * number_of_payments)
    total_interest = _round_currency(total_amount - loan_amount)

    return MortgageResult(
        monthly_payment=monthly_payment,
        total_amount=total_amount,
        total_interest=total_interest,
    )


class MortgageCalculatorTool:
    """The calculator as a callable tool with a human approval gate.

    Args:
        require_approval: When True every invocation pauses for the user's consent
    """

    name = TOOL_NAME
    description = TOOL_DESCRIPTION

    def __init__(self, require_approval: bool = True) -> None:
        self.require_approval = require_approval

    def parameters_schema(self) -> dict[str, Any]:
        """JSON schema of the tool arguments, using the wire (alias) names."""
        schema = MortgageInput.model_json_schema(by_alias=True)
        return {
            "type": "object",
            "properties": {
                name: {"type": prop["type"], "description": prop["description"]}
                for name, prop in schema["properties"].items()
            },
            "required": schema["required"],
        }

    def parse_input(self, tool_input: dict[str, Any]) -> MortgageInput:
        try:
            return MortgageInput.model_validate(tool_input)
        except ValueError as e:
            logger.warning("Rejected mortgage calculator input", error=str(e))
            raise ValidationError(f"Invalid mortgage calculator input: {e}") from e

    def requires_approval(self, tool_input: dict[str, Any]) -> bool:
        """Decide whether this invocation has to wait for the user's approval."""
        return self.require_approval

    def run(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        mortgage = self.parse_input(tool_input)
        result = calculate_mortgage(mortgage)
        logger.info(
            "Mortgage calculated",
            zip_code=mortgage.zip_code,
            monthly_payment=result.monthly_payment,
        )
        return result.model_dump(by_alias=True)

    def cancel(self, tool_input: dict[str, Any]) -> dict[str, Any]:
        """Tool output used when the user rejects the calculation."""
        return {
            "status": "cancelled",
            "message": "The user declined the mortgage calculation. Nothing was calculated.",
        }

    def describe_request(self, tool_input: dict[str, Any]) -> str:
        """Build the approval prompt shown to the user."""
        lines = ["I'm ready to run a mortgage calculation with these details:"]
        labels = [
            ("homePrice", "Home price", "${:,.2f}"),
            ("downPayment", "Down payment", "${:,.2f}"),
            ("loanTerm", "Loan term", "{:g} years"),
            ("interestRate", "Interest rate", "{:g}%"),
            ("zipCode", "Zip code", "{}"),
        ]
        for key, label, template in labels:
            if key not in tool_input:
                continue
            value = tool_input[key]
            try:
                lines.append(f"- {label}: {template.format(value)}")
            except (TypeError, ValueError):
                lines.append(f"- {label}: {value}")
        lines.append("Do you approve this calculation?")
        return "\n".join(lines)

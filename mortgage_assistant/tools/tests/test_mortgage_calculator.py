"""Tests for the mortgage calculator tool."""

import pytest

from mortgage_assistant.exceptions import ValidationError
from mortgage_assistant.tools.mortgage_calculator import (
    TOOL_NAME,
    MortgageCalculatorTool,
    MortgageInput,
    calculate_mortgage,
)


def make_input(**overrides) -> MortgageInput:
    values = {
        "homePrice": 300000,
        "downPayment": 60000,
        "loanTerm": 30,
        "interestRate": 6,
        "zipCode": "94105",
    }
    values.update(overrides)
    return MortgageInput.model_validate(values)


class TestCalculateMortgage:
    """Amortization math."""

    def test_thirty_year_fixed_at_six_percent(self):
        result = calculate_mortgage(make_input())

        assert result.monthly_payment == pytest.approx(1438.92)
        assert result.total_amount == pytest.approx(518011.20)
        assert result.total_interest == pytest.approx(278011.20)

    def test_totals_derive_from_rounded_monthly_payment(self):
        mortgage = make_input(homePrice=452000, downPayment=37500, loanTerm=15, interestRate=7.125)
        result = calculate_mortgage(mortgage)

        number_of_payments = 15 * 12
        loan_amount = 452000 - 37500
        assert result.total_amount == pytest.approx(
            round(result.monthly_payment * number_of_payments, 2), abs=0.005
        )
        assert result.total_interest == pytest.approx(result.total_amount - loan_amount, abs=0.005)

    def test_zero_interest_divides_evenly(self):
        mortgage = make_input(homePrice=150000, downPayment=30000, loanTerm=10, interestRate=0)
        result = calculate_mortgage(mortgage)

        assert result.monthly_payment == 1000.00
        assert result.total_amount == 120000.00
        assert result.total_interest == 0.00

    def test_zip_code_does_not_change_result(self):
        first = calculate_mortgage(make_input(zipCode="10001"))
        second = calculate_mortgage(make_input(zipCode="73301"))

        assert first == second

    def test_result_serializes_with_wire_names(self):
        result = calculate_mortgage(make_input())

        assert set(result.model_dump(by_alias=True)) == {
            "monthlyPayment",
            "totalAmount",
            "totalInterest",
        }


class TestMortgageInput:
    """Validation applied before the formula runs."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"loanTerm": 0},
            {"loanTerm": -5},
            {"homePrice": 0},
            {"downPayment": -1},
            {"interestRate": -0.5},
            {"zipCode": ""},
            {"downPayment": 400000},
            {"loanTerm": 100000},
            {"interestRate": 150},
            {"homePrice": float("inf")},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            make_input(**overrides)

    def test_accepts_snake_case_names(self):
        mortgage = MortgageInput(
            home_price=200000,
            down_payment=20000,
            loan_term=30,
            interest_rate=5.5,
            zip_code="30301",
        )

        assert mortgage.home_price == 200000


class TestMortgageCalculatorTool:
    """The calculator wrapped as a model tool."""

    @pytest.fixture
    def tool(self):
        return MortgageCalculatorTool()

    @pytest.fixture
    def tool_input(self):
        return {
            "homePrice": 300000,
            "downPayment": 60000,
            "loanTerm": 30,
            "interestRate": 6,
            "zipCode": "94105",
        }

    def test_declaration_uses_wire_names(self, tool):
        schema = tool.parameters_schema()

        assert tool.name == TOOL_NAME == "mortgageCalculator"
        assert schema["type"] == "object"
        assert set(schema["required"]) == {
            "homePrice",
            "downPayment",
            "loanTerm",
            "interestRate",
            "zipCode",
        }
        assert schema["properties"]["zipCode"]["type"] == "string"
        assert schema["properties"]["homePrice"]["type"] == "number"

    def test_run_returns_result_payload(self, tool, tool_input):
        output = tool.run(tool_input)

        assert output["monthlyPayment"] == pytest.approx(1438.92)

    def test_run_rejects_invalid_input(self, tool, tool_input):
        tool_input["loanTerm"] = 0

        with pytest.raises(ValidationError) as exc_info:
            tool.run(tool_input)

        assert exc_info.value.status_code == 400

    def test_run_rejects_term_too_long_to_amortize(self, tool, tool_input):
        tool_input["loanTerm"] = 100000

        with pytest.raises(ValidationError, match="loanTerm"):
            tool.run(tool_input)

    def test_cancel_does_not_calculate(self, tool, tool_input):
        output = tool.cancel(tool_input)

        assert output["status"] == "cancelled"
        assert "monthlyPayment" not in output

    def test_approval_follows_setting(self, tool_input):
        assert MortgageCalculatorTool().requires_approval(tool_input) is True
        assert MortgageCalculatorTool(require_approval=False).requires_approval(tool_input) is False

    def test_describe_request_lists_inputs(self, tool, tool_input):
        prompt = tool.describe_request(tool_input)

        assert "$300,000.00" in prompt
        assert "30 years" in prompt
        assert "6%" in prompt
        assert "94105" in prompt
        assert prompt.endswith("Do you approve this calculation?")

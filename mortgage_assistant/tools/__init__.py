"""Tools the assistant can call."""

from mortgage_assistant.tools.mortgage_calculator import (
    MortgageCalculatorTool,
    MortgageInput,
    MortgageResult,
    calculate_mortgage,
)

__all__ = [
    "MortgageCalculatorTool",
    "MortgageInput",
    "MortgageResult",
    "calculate_mortgage",
]

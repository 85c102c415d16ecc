"""Retirement and VA disability offset contract.

milpay does not compute combined VA ratings or concurrent-receipt
(CRDP/CRSC) offsets. This module only fixes the input/output shape so an
external calculator can be plugged in behind ``RetirementOffsetProvider``.
"""

from typing import Annotated, List, Protocol

from pydantic import BaseModel, ConfigDict, Field


class RetirementOffsetRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    disability_ratings: List[Annotated[int, Field(ge=0, le=100)]] = Field(
        default_factory=list,
        description="Individual VA disability percentages (0-100)",
    )
    years_of_service: float = Field(..., ge=0)
    high_three_base_pay: float = Field(..., ge=0, description="Average of the highest 36 months of base pay")

    @property
    def has_disability(self) -> bool:
        return any(rating > 0 for rating in self.disability_ratings)


class RetirementOffsetResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    combined_rating: int = Field(..., ge=0, le=100)
    gross_monthly_retirement: float = Field(..., ge=0)
    crdp_offset: float = 0
    crsc_offset: float = 0


class RetirementOffsetProvider(Protocol):
    """External calculator for retirement pay and disability offsets."""

    def calculate(self, request: RetirementOffsetRequest) -> RetirementOffsetResult:
        ...

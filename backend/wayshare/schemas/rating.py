"""
WayShare Backend - Rating Transfer Object (/api/ratings)
=========================================================

The score range is the only business rule in the data model that is
validated: 1 and 5 are accepted, 0 and 6 are rejected with a 400.
"""

from typing import Optional

from pydantic import Field

from wayshare.schemas.common import EntityDTO, RefDTO, partial_model

MIN_SCORE = 1
MAX_SCORE = 5


class RatingDTO(EntityDTO):
    score: int = Field(ge=MIN_SCORE, le=MAX_SCORE, description="Score from 1 to 5")
    feedback: Optional[str] = Field(default=None)
    giver: Optional[RefDTO] = Field(default=None, description="Member giving the rating")
    receiver: Optional[RefDTO] = Field(default=None, description="Member being rated")


RatingPatchDTO = partial_model(RatingDTO)

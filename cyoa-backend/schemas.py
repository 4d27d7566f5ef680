from pydantic import BaseModel, Field
from typing import List


class IntroRequest(BaseModel):
    scenario: str = Field(min_length=1)


class StoryRequest(BaseModel):
    previous_action: str = Field(min_length=1)
    step_number: int = Field(ge=1)


class StoryResponse(BaseModel):
    passage: str
    choices: List[str]
    step_number: int
    is_ending: bool


class ErrorResponse(BaseModel):
    error: str
    detail: str

import logging
from typing import Optional

import openai
from openai import OpenAI

from config import StoryConfig

logger = logging.getLogger(__name__)

MAX_CHOICES = 3
MAX_PARAGRAPHS = 2


class StoryServiceError(RuntimeError):
    """Base class for failures talking to the text generation service."""

    status_code = 502
    default_message = "The story service failed to generate a response."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class ServiceUnreachable(StoryServiceError):
    status_code = 503
    default_message = "Failed to connect to the story service. Please check your internet connection."


class AuthenticationRejected(StoryServiceError):
    default_message = "Invalid API key. Please check your configuration."


class RateLimited(StoryServiceError):
    status_code = 429
    default_message = "The story service rate limit was exceeded. Please try again later."


class MalformedResponse(StoryServiceError):
    default_message = "The story service returned a response without any text."


class GenericServiceFault(StoryServiceError):
    pass


class InvalidStoryInput(ValueError):
    """Raised when a story request is empty or has a step below 1."""


def classify_error(exc: Exception) -> StoryServiceError:
    """Map an OpenAI SDK exception onto the story service error it stands for."""
    # Connection errors (timeouts included) and response validation errors are
    # APIError subclasses, so they are checked before the generic case.
    if isinstance(exc, openai.APIConnectionError):
        return ServiceUnreachable()
    if isinstance(exc, openai.AuthenticationError):
        return AuthenticationRejected()
    if isinstance(exc, openai.RateLimitError):
        return RateLimited()
    if isinstance(exc, openai.APIResponseValidationError):
        return MalformedResponse(f"The story service returned a malformed response: {exc}")
    if isinstance(exc, openai.APIError):
        return GenericServiceFault(f"Story service API error: {exc}")
    return GenericServiceFault(f"Error generating response: {exc}")


def build_next_story_prompt(previous_action: str, step_number: int, final_step: int = 5) -> str:
    if step_number >= final_step:
        ending_rule = (
            f"This is step {step_number} and the story must end here. "
            "End the story with a proper conclusion and do NOT provide more choices."
        )
    else:
        ending_rule = (
            f"If the story feels naturally complete, or this is step {final_step}, "
            "end the story with a proper conclusion and do NOT provide more choices."
        )

    return f"""
    The user has made the following choice: "{previous_action}"
    This is step {step_number} of the story.

    Continue the story based on the user's choice.
    The result should be a maximum of {MAX_PARAGRAPHS} paragraphs.

    {ending_rule}

    If the story continues, provide a maximum of {MAX_CHOICES} different choices for the user to choose from in the format:
    "1.", "2.", "3.", etc.
    """


def build_intro_prompt(scenario: str) -> str:
    return f"""
    You are a storyteller.
    You are given a scenario and you need to generate a story based on the scenario.
    Scenario: "{scenario}"
    Please provide a maximum of {MAX_CHOICES} different choices for the user to choose from to get the story started.
    The choices should be in the format of "1.", "2.", "3.", etc.
    """


class NarrationRequester:
    """Sends story prompts to an OpenAI-compatible chat completion API."""

    def __init__(self, config: StoryConfig, client=None):
        self.config = config
        if client is None:
            try:
                client = OpenAI(api_key=config.api_key, base_url=config.base_url)
            except openai.OpenAIError as exc:
                logger.error("Could not create the OpenAI client: %s", exc)
                raise AuthenticationRejected("No API key configured. Please set OPENAI_API_KEY.") from exc
        self.client = client

    def generate_next_story(self, previous_action: str, step_number: int) -> str:
        if not previous_action or not previous_action.strip():
            raise InvalidStoryInput("previous_action must not be empty")
        if step_number < 1:
            raise InvalidStoryInput(f"step_number must be >= 1, got {step_number}")

        logger.info("Generating story step %d", step_number)
        prompt = build_next_story_prompt(previous_action, step_number, self.config.final_step)
        return self._complete(prompt)

    def generate_intro(self, scenario: str) -> str:
        if not scenario or not scenario.strip():
            raise InvalidStoryInput("scenario must not be empty")

        logger.info("Generating intro choices")
        return self._complete(build_intro_prompt(scenario))

    def _complete(self, prompt: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.OpenAIError as exc:
            error = classify_error(exc)
            logger.error("%s: %s", type(error).__name__, exc)
            raise error from exc

        choices = getattr(completion, "choices", None)
        if not choices:
            logger.error("Completion contained no choices")
            raise MalformedResponse()

        content = getattr(choices[0].message, "content", None)
        if not content:
            logger.error("Completion message had no content")
            raise MalformedResponse()

        return content

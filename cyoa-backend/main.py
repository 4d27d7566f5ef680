import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import StoryConfig
from narration import parse_narration
from schemas import ErrorResponse, IntroRequest, StoryRequest, StoryResponse
from story_service import InvalidStoryInput, NarrationRequester, StoryServiceError

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {429: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


def get_requester(request: Request) -> NarrationRequester:
    app = request.app
    if getattr(app.state, "requester", None) is None:
        app.state.requester = NarrationRequester(app.state.config)
    return app.state.requester


def create_app(config: Optional[StoryConfig] = None) -> FastAPI:
    if config is None:
        config = StoryConfig.from_env()

    logging.basicConfig(level=config.log_level.upper())

    app = FastAPI(title="Choose Your Own Adventure")
    app.state.config = config
    app.state.requester = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoryServiceError)
    async def story_service_error_handler(request: Request, exc: StoryServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.exception_handler(InvalidStoryInput)
    async def invalid_input_handler(request: Request, exc: InvalidStoryInput):
        return JSONResponse(status_code=422, content={"error": "InvalidStoryInput", "detail": str(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok", "model": config.model}

    @app.post("/story/intro", response_model=StoryResponse, responses=ERROR_RESPONSES)
    def story_intro(body: IntroRequest, requester: NarrationRequester = Depends(get_requester)):
        raw = requester.generate_intro(body.scenario)
        parsed = parse_narration(raw)
        return StoryResponse(
            passage=parsed.passage,
            choices=parsed.choices,
            step_number=0,
            is_ending=parsed.is_ending,
        )

    @app.post("/story/next", response_model=StoryResponse, responses=ERROR_RESPONSES)
    def story_next(body: StoryRequest, requester: NarrationRequester = Depends(get_requester)):
        raw = requester.generate_next_story(body.previous_action, body.step_number)
        parsed = parse_narration(raw)
        if parsed.is_ending:
            logger.info("Story ended at step %d", body.step_number)
        return StoryResponse(
            passage=parsed.passage,
            choices=parsed.choices,
            step_number=body.step_number,
            is_ending=parsed.is_ending,
        )

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)

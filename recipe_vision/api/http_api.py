"""
HTTP API adapter for the recipe generation session.

Architectural role:
- Expose the session state and user operations over JSON endpoints.
- Enforce adapter-level input validation.
- Delegate all pipeline work to `GenerationOrchestrator`.

Endpoint responsibilities:
- `GET  /v1/catalog`: list catalog items and the active selection.
- `GET  /v1/state`: current selection, instruction, and submission state.
- `POST /v1/selection`: change the active image.
- `POST /v1/selection/load-status`: report whether the active image rendered.
- `PUT  /v1/instruction`: replace the instruction text.
- `POST /v1/submit`: run one generation round-trip.

Request lifecycle (`POST /v1/submit`):
1. Parse optional `reference` / `instruction` overrides.
2. Await `orchestrator.submit(...)` on the server event loop.
3. Return the resulting state. A submit issued while another is in flight
   returns the in-flight state immediately without a second service call.

Input validation behavior:
- Malformed bodies -> HTTP 422 (FastAPI/pydantic).
- Unknown reference with strict selection -> HTTP 400.

Error handling strategy:
- Pipeline failures never raise here; they arrive as `status: "failed"` with a
  user-visible `message`.

Side effects:
- One process-wide session per app instance; state lives in memory only.
- Every endpoint is `async def`, so all session reads and writes run on the
  server event loop alongside in-flight submissions.
- Loads environment variables at import time via `load_dotenv()`.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from recipe_vision.core.errors import UnknownReferenceError
from recipe_vision.core.orchestrator import GenerationOrchestrator


logger = logging.getLogger(__name__)


# ============================================================
# Request Schemas
# ============================================================

class SelectionRequest(BaseModel):
    reference: str


class LoadStatusRequest(BaseModel):
    loaded: bool


class InstructionRequest(BaseModel):
    instruction: str


class SubmitRequest(BaseModel):
    """Optional per-call overrides; omitted fields use the session's values."""
    reference: str | None = None
    instruction: str | None = None


# ============================================================
# Response Shaping
# ============================================================

def state_payload(orchestrator: GenerationOrchestrator) -> dict:
    """Serialize everything a client needs to render the page."""
    state = orchestrator.state
    return {
        "selected": orchestrator.selected,
        "load_error": orchestrator.load_error,
        "instruction": orchestrator.instruction,
        "model": orchestrator.model,
        "in_flight": orchestrator.in_flight,
        "status": state.status.value,
        "text": state.text,
        "message": state.message,
        "output": orchestrator.output,
        "formatted_output": orchestrator.formatted_output,
    }


# ============================================================
# App Factory
# ============================================================

def build_app(orchestrator: GenerationOrchestrator | None = None) -> FastAPI:
    """Create the FastAPI app bound to one session."""
    session = orchestrator or GenerationOrchestrator()
    api = FastAPI(title="recipe-vision")

    @api.get("/v1/catalog")
    async def get_catalog():
        return {
            "items": [
                {"reference": item.reference, "label": item.label}
                for item in session.catalog
            ],
            "selected": session.selected,
        }

    @api.get("/v1/state")
    async def get_state():
        return state_payload(session)

    @api.post("/v1/selection")
    async def post_selection(body: SelectionRequest):
        try:
            session.select(body.reference)
        except UnknownReferenceError as exc:
            logger.warning("Rejected selection: %s", exc)
            return JSONResponse(status_code=400, content={"error": str(exc)})
        return state_payload(session)

    @api.post("/v1/selection/load-status")
    async def post_load_status(body: LoadStatusRequest):
        if body.loaded:
            session.report_image_loaded()
        else:
            session.report_image_error()
        return state_payload(session)

    @api.put("/v1/instruction")
    async def put_instruction(body: InstructionRequest):
        session.set_instruction(body.instruction)
        return state_payload(session)

    @api.post("/v1/submit")
    async def post_submit(body: SubmitRequest | None = None):
        body = body or SubmitRequest()
        await session.submit(reference=body.reference, instruction=body.instruction)
        return state_payload(session)

    return api


app = build_app()


def main():
    """Serve `app` with uvicorn (`HOST` / `PORT` env vars)."""
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()

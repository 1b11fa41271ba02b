"""Generation request orchestration.

Architectural role:
    Owns the whole interactive state of one session (selection, instruction,
    submission lifecycle) and turns a submit action into one completed or
    failed generation round-trip. Adapters (HTTP, CLI) read state through the
    accessors below and mutate it only through the defined operations.

Control-flow model (`submit`):
    1. Drop the call if a submission is already in flight.
    2. Enter `IN_FLIGHT`, clearing the previous output.
    3. Encode the referenced image (`image.encoder.encode_resource`).
    4. Build the two-part request and call the generation service
       (`llm.service.generate_from_image`).
    5. Record `SUCCEEDED(text)` or `FAILED("Error: ...")`.
    6. Clear the in-flight flag, always after step 5.

Concurrency:
    Single event loop, no locks. The in-flight flag is the only guard; a
    second submit is neither queued nor rejected with an error. Selection and
    instruction edits stay available while a submission is in flight and do
    not affect it.

Error handling strategy:
    Every exception from steps 3-4 is classified (`core.errors`), logged, and
    absorbed into `FAILED`. Nothing is raised to adapters. No retries.

Known limitation:
    No timeout is applied unless configured, so a hung service call keeps the
    session in flight indefinitely.
"""

import asyncio
import logging
from typing import Protocol, Sequence

from recipe_vision.core.catalog import CatalogItem, load_catalog
from recipe_vision.core.errors import PipelineError, describe_error
from recipe_vision.core.formatter import format_output
from recipe_vision.core.selection import SelectionState
from recipe_vision.core.state import SubmissionState
from recipe_vision.image.encoder import EncodedPayload, encode_resource
from recipe_vision.llm.provider_config import DEFAULT_PROMPT, MODEL_NAME, STRICT_SELECTION
from recipe_vision.llm.service import generate_from_image


logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Error: Submission cancelled"


class EncoderProtocol(Protocol):
    """Async callable resolving a reference to an encoded payload."""

    async def __call__(self, reference: str) -> EncodedPayload:
        ...


class GeneratorProtocol(Protocol):
    """Async callable invoking the generation service."""

    async def __call__(self, payload: EncodedPayload, instruction: str, model: str | None = None) -> str:
        ...


class GenerationOrchestrator:
    """Session state plus the guarded submit pipeline.

    Args:
        catalog: Catalog items; defaults to `load_catalog()`.
        encoder: Resource encoder; defaults to `encode_resource`.
        generator: Generation call; defaults to `generate_from_image`.
        model: Model identifier; defaults to `MODEL_NAME`.
        instruction: Initial instruction; defaults to `DEFAULT_PROMPT`.
        strict_selection: Reject unknown references in `select`; defaults to
            `STRICT_SELECTION`.
    """

    def __init__(
        self,
        catalog: Sequence[CatalogItem] | None = None,
        encoder: EncoderProtocol | None = None,
        generator: GeneratorProtocol | None = None,
        model: str | None = None,
        instruction: str | None = None,
        strict_selection: bool | None = None,
    ) -> None:
        if strict_selection is None:
            strict_selection = STRICT_SELECTION
        self._selection = SelectionState(
            catalog if catalog is not None else load_catalog(),
            strict=strict_selection,
        )
        self._encoder = encoder or encode_resource
        self._generator = generator or generate_from_image
        self._model = model or MODEL_NAME
        self._instruction = DEFAULT_PROMPT if instruction is None else instruction
        self._state = SubmissionState.idle()
        self._in_flight = False

    # ------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------

    @property
    def catalog(self) -> tuple[CatalogItem, ...]:
        return self._selection.catalog

    @property
    def selected(self) -> str:
        return self._selection.selected

    @property
    def load_error(self) -> str | None:
        return self._selection.load_error

    @property
    def instruction(self) -> str:
        return self._instruction

    @property
    def model(self) -> str:
        return self._model

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def output(self) -> str:
        return self._state.output

    @property
    def formatted_output(self) -> str:
        return format_output(self._state.output)

    # ------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------

    def select(self, reference: str) -> None:
        """Change the active image; never touches an in-flight submission."""
        self._selection.select(reference)

    def report_image_error(self) -> None:
        self._selection.report_load_error()

    def report_image_loaded(self) -> None:
        self._selection.report_load_success()

    def set_instruction(self, instruction: str) -> None:
        self._instruction = instruction

    async def submit(self, reference: str | None = None, instruction: str | None = None) -> SubmissionState:
        """Run one generation round-trip.

        Args:
            reference: Image to use; defaults to the current selection.
            instruction: Instruction to use; defaults to the current one.

        Returns:
            The terminal state of this submission, or the current state when
            the call was dropped because another submission is in flight.
        """
        if self._in_flight:
            logger.debug("Submit ignored: a submission is already in flight")
            return self._state

        reference = self._selection.selected if reference is None else reference
        instruction = self._instruction if instruction is None else instruction

        self._in_flight = True
        self._state = SubmissionState.in_flight()

        try:
            payload = await self._encoder(reference)
            text = await self._generator(payload, instruction, model=self._model)
            self._state = SubmissionState.succeeded(text)

        except asyncio.CancelledError:
            self._state = SubmissionState.failed(CANCELLED_MESSAGE)
            raise

        except PipelineError as exc:
            logger.error("Error: %s", exc)
            self._state = SubmissionState.failed(describe_error(exc))

        except Exception as exc:
            logger.exception("Unexpected submission failure")
            self._state = SubmissionState.failed(describe_error(exc))

        finally:
            self._in_flight = False

        return self._state

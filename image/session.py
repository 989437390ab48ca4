"""Generation session - at most one run at a time, latest outcome only."""
from threading import Lock
from typing import Any, Union

from common.error_messages import ErrorCode, StudioError
from image.models import (
    DescribingState,
    FailedState,
    GeneratedImage,
    GenerationRequest,
    IdleState,
    SucceededState,
    SynthesizingState,
)
from image.services import generate_images
from utils.logger import get_logger

logger = get_logger("image.session")

_PHASE_STATES = {
    "describing": DescribingState,
    "synthesizing": SynthesizingState,
}


class GenerationSession:
    """Owns the user-visible generation state.

    - A new submission is refused while another one is describing or
      synthesizing; nothing is queued or cancelled.
    - Each run replaces the previous result or error wholesale.
    """

    def __init__(self):
        self._run_lock = Lock()
        self._state_lock = Lock()
        self._state = IdleState()

    @property
    def state(self) -> Union[IdleState, DescribingState, SynthesizingState, SucceededState, FailedState]:
        with self._state_lock:
            return self._state

    def _set_state(self, state) -> None:
        with self._state_lock:
            self._state = state
        logger.debug(f"Generation state -> {state.phase}")

    def _on_phase(self, phase: str) -> None:
        self._set_state(_PHASE_STATES[phase]())

    def submit(self, client: Any, request: GenerationRequest) -> SucceededState:
        """
        Run the pipeline for request and record the outcome.

        Raises:
            StudioError: GENERATION_IN_PROGRESS if a run is active, or the
                classified failure of this run
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Rejected submission: a generation is already in progress")
            raise StudioError(ErrorCode.GENERATION_IN_PROGRESS)
        try:
            self._set_state(IdleState())
            try:
                images = generate_images(client, request, on_phase=self._on_phase)
            except StudioError as e:
                logger.error(f"Generation failed ({e.code.value}): {e.message}")
                self._set_state(FailedState(error=e.message, error_code=e.code))
                raise
            except Exception as e:
                logger.error(f"Unexpected error during generation: {e}", exc_info=True)
                error = StudioError(ErrorCode.UNKNOWN_ERROR, str(e))
                self._set_state(FailedState(error=error.message, error_code=error.code))
                raise error from e

            result = SucceededState(style=request.style, images=images)
            self._set_state(result)
            return result
        finally:
            self._run_lock.release()

    def image(self, index: int) -> GeneratedImage:
        """The index-th (1-based) image of the latest successful run."""
        state = self.state
        if not isinstance(state, SucceededState) or not 1 <= index <= len(state.images):
            raise StudioError(ErrorCode.IMAGE_NOT_FOUND)
        return state.images[index - 1]

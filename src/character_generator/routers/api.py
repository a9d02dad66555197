import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from character_generator.config import SESSION_COOKIE
from character_generator.deps import get_session, get_session_store
from character_generator.options import ENVIRONMENTS, OUTFITS, STYLES, OutfitMode
from character_generator.schemas import (
    DataUrlUpload,
    Option,
    OptionsResponse,
    ParametersUpdate,
    SessionSnapshot,
)
from character_generator.services.generation import ImageRequiredError
from character_generator.services.images import (
    ImageReadError,
    ImageTooLargeError,
    UnsupportedImageTypeError,
    read_data_url,
    read_uploaded_image,
)
from character_generator.sessions import Session, SessionStore
from character_generator.state import InlineImage

logger = logging.getLogger(__name__)

router = APIRouter()

# Parameter edits cannot change either image; leave the data URLs out.
IMAGE_FIELDS = {"uploaded_image", "generated_image"}


def _options(choices: dict[str, str]) -> list[Option]:
    return [Option(value=value, label=label) for value, label in choices.items()]


def _accept_image(session: Session, read) -> SessionSnapshot:
    """Run an image reader and store its result, mapping failures to the session or HTTP."""
    try:
        image: InlineImage = read()
    except UnsupportedImageTypeError as e:
        logger.warning("Rejected upload: %s", e)
        raise HTTPException(status_code=415, detail=str(e)) from e
    except ImageTooLargeError as e:
        logger.warning("Rejected upload: %s", e)
        raise HTTPException(status_code=413, detail=str(e)) from e
    except ImageReadError as e:
        logger.warning("Could not read uploaded image: %s", e.__cause__ or e)
        if not session.orchestrator.record_read_failure(str(e)):
            raise HTTPException(status_code=400, detail=str(e)) from e
        return session.snapshot()

    session.set_image(image)
    return session.snapshot()


@router.get("/options", response_model=OptionsResponse)
async def get_options():
    """Fixed choices for the environment, style and outfit selectors."""
    return OptionsResponse(
        environments=_options(ENVIRONMENTS),
        styles=_options(STYLES),
        outfits=_options(OUTFITS),
        outfit_modes=list(OutfitMode),
    )


@router.get("/state", response_model=SessionSnapshot)
async def get_state(session: Session = Depends(get_session)):
    return session.snapshot()


@router.patch(
    "/parameters",
    response_model=SessionSnapshot,
    response_model_exclude=IMAGE_FIELDS,
)
async def update_parameters(
    update: ParametersUpdate, session: Session = Depends(get_session)
):
    session.update_parameters(**update.model_dump(exclude_none=True))
    return session.snapshot()


@router.post("/image", response_model=SessionSnapshot)
async def upload_image(
    file: UploadFile = File(...), session: Session = Depends(get_session)
):
    img_bytes = await file.read()
    return _accept_image(
        session, lambda: read_uploaded_image(img_bytes, file.content_type or "")
    )


@router.post("/image/data-url", response_model=SessionSnapshot)
async def upload_image_data_url(
    req: DataUrlUpload, session: Session = Depends(get_session)
):
    return _accept_image(session, lambda: read_data_url(req.data_url))


@router.post("/generate", response_model=SessionSnapshot)
async def generate(
    update: Optional[ParametersUpdate] = None,
    session: Session = Depends(get_session),
):
    """
    Run one generation and return the resulting state.

    Form values sent with the trigger are applied first, so the prompt never
    depends on a parameter update still in flight.
    """
    if update is not None:
        session.update_parameters(**update.model_dump(exclude_none=True))
    try:
        await session.orchestrator.generate()
    except ImageRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return session.snapshot()


@router.delete("/session", status_code=204)
async def discard_session(
    response: Response,
    session: Session = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    store.discard(session.id)
    response.delete_cookie(SESSION_COOKIE)


def get_router():
    return router

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse

from .config import settings
from .game import GameStateError
from .globals import get_provider, get_vocabulary, templates
from .models import SelectRequest, SelectResponse, SessionSnapshot, StartRequest
from .provider import WordPairProvider
from .sessions import create_session, drop_session, get_active_session
from .vocabulary import VocabularyManager


router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def session_invalid() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


def state_conflict(e: GameStateError) -> JSONResponse:
    return JSONResponse({"error": str(e)}, status_code=409)


# --- Routes ---


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request, vocabulary: VocabularyManager = Depends(get_vocabulary)
):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"difficulties": vocabulary.get_difficulties()},
    )


@router.get("/api/difficulties")
async def get_difficulties(vocabulary: VocabularyManager = Depends(get_vocabulary)):
    return vocabulary.get_difficulties()


@router.post("/api/start", response_model=SessionSnapshot)
async def start_game(
    payload: StartRequest,
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    provider: WordPairProvider = Depends(get_provider),
    vocabulary: VocabularyManager = Depends(get_vocabulary),
):
    session = get_active_session(session_id)
    if session is None:
        session = create_session(provider, vocabulary)
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=session.session_id,
            httponly=True,
            samesite="Lax",
        )

    try:
        await session.controller.start(payload.difficulty)
    except GameStateError as e:
        return state_conflict(e)
    return session.controller.snapshot()


@router.get("/api/state", response_model=SessionSnapshot)
async def get_state(session_id: Optional[str] = Depends(get_session_id)):
    session = get_active_session(session_id)
    if not session:
        return session_invalid()
    return session.controller.snapshot()


@router.post("/api/select", response_model=SelectResponse)
async def select_card(
    payload: SelectRequest, session_id: Optional[str] = Depends(get_session_id)
):
    session = get_active_session(session_id)
    if not session:
        return session_invalid()
    outcome = session.controller.select(payload.card_id)
    return SelectResponse(outcome=outcome, state=session.controller.snapshot())


@router.post("/api/abort", response_model=SessionSnapshot)
async def abort_game(session_id: Optional[str] = Depends(get_session_id)):
    session = get_active_session(session_id)
    if not session:
        return session_invalid()
    try:
        session.controller.abort()
    except GameStateError as e:
        return state_conflict(e)
    return session.controller.snapshot()


@router.post("/api/change-difficulty", response_model=SessionSnapshot)
async def change_difficulty(session_id: Optional[str] = Depends(get_session_id)):
    session = get_active_session(session_id)
    if not session:
        return session_invalid()
    try:
        session.controller.change_difficulty()
    except GameStateError as e:
        return state_conflict(e)
    return session.controller.snapshot()


@router.post("/api/replay", response_model=SessionSnapshot)
async def replay_game(session_id: Optional[str] = Depends(get_session_id)):
    session = get_active_session(session_id)
    if not session:
        return session_invalid()
    try:
        await session.controller.replay()
    except GameStateError as e:
        return state_conflict(e)
    return session.controller.snapshot()


@router.post("/api/reset")
async def reset_session(
    response: Response, session_id: Optional[str] = Depends(get_session_id)
):
    drop_session(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}

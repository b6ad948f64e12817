from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Enums ---
class Difficulty(str, Enum):
    PRIMARY = "小学英语"
    MIDDLE = "初中词汇"
    HIGH = "高中必备"
    COLLEGE = "大学四六级"
    ADVANCED = "托福/雅思/GRE"


class GameStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    FINISHED = "finished"


class Side(str, Enum):
    EN = "en"
    ZH = "zh"


class SelectOutcome(str, Enum):
    IGNORED = "ignored"
    SELECTED = "selected"
    MATCH = "match"
    MISMATCH = "mismatch"


# --- Game data ---
class WordPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    en: str
    zh: str
    explanation: Optional[str] = None

    @field_validator("id", "en", "zh")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class Card(BaseModel):
    id: str
    pair_id: str
    content: str
    side: Side
    is_matched: bool = False


class SessionState(BaseModel):
    status: GameStatus = GameStatus.IDLE
    difficulty: Difficulty = Difficulty.MIDDLE
    words: List[WordPair] = Field(default_factory=list)
    cards: List[Card] = Field(default_factory=list)
    selection: List[str] = Field(default_factory=list)
    elapsed_seconds: int = 0
    score: int = 0


# --- Views ---
class CardView(BaseModel):
    id: str
    content: str
    side: Side
    is_matched: bool
    is_selected: bool


class SessionSnapshot(BaseModel):
    status: GameStatus
    difficulty: Difficulty
    score: int
    elapsed_seconds: int
    elapsed_display: str
    cards: List[CardView]
    words: List[WordPair]


# --- Requests ---
class StartRequest(BaseModel):
    difficulty: Difficulty = Difficulty.MIDDLE


class SelectRequest(BaseModel):
    card_id: str


class SelectResponse(BaseModel):
    outcome: SelectOutcome
    state: SessionSnapshot

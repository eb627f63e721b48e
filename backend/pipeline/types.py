from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal

TraderProfileType = Literal["beginner", "intermediate", "advanced", "professional", "custom"]


class LayoutItem(BaseModel):
    """
    Одна карточка на сетке. Координаты в ячейках: x — колонка, y — ряд.
    На вход допускаются «грязные» координаты (наложения, x за границей) —
    их чистит компактор; размеры проверяет он же.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    x: int = 0
    y: int = 0
    w: int = 1
    h: int = 1
    min_w: Optional[int] = Field(None, alias="minW")
    max_w: Optional[int] = Field(None, alias="maxW")

class CardOption(BaseModel):
    id: str
    title: str
    description: str = ""
    visible: bool = True

class DashboardPreferences(BaseModel):
    columns: int = Field(3, ge=1, le=3)
    visible_cards: List[str] = Field(default_factory=list)
    trader_profile: TraderProfileType = "custom"
    timestamp: Optional[str] = None

class StoredLayout(BaseModel):
    layout: List[LayoutItem]
    columns: int
    timestamp: str

class CompactionResult(BaseModel):
    layout: List[LayoutItem]
    iterations: int
    converged: bool

class DashboardState(BaseModel):
    columns: int
    visible_cards: List[str]
    trader_profile: TraderProfileType = "custom"
    layout: List[LayoutItem]
    cards: List[CardOption]

# ---- HTTP ----

class CompactRequest(BaseModel):
    layout: List[LayoutItem]
    columns: int = Field(3, ge=1)

class CompactResponse(BaseModel):
    layout: List[LayoutItem]
    iterations: int
    converged: bool

class ToggleRequest(BaseModel):
    card_id: str

class ColumnsRequest(BaseModel):
    columns: int = Field(..., ge=1, le=3)

class LayoutUpdateRequest(BaseModel):
    layout: List[LayoutItem]

class PreferencesRequest(BaseModel):
    columns: int = Field(3, ge=1, le=3)
    visible_cards: List[str]
    trader_profile: TraderProfileType = "custom"

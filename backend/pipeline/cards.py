# backend/pipeline/cards.py
from __future__ import annotations
from typing import Iterable, List

from .types import CardOption

# Каталог карточек дашборда. Порядок важен: в нём строятся раскладки
# по умолчанию и список видимых карточек.
CATALOG: List[CardOption] = [
    CardOption(id="profile", title="AI Agent Profile",
               description="View and interact with your AI trading assistant"),
    CardOption(id="investment", title="Investment Portfolio",
               description="Track your investments and portfolio performance"),
    CardOption(id="signals", title="Trading Signals",
               description="Real-time AI-generated trading signals"),
    CardOption(id="tokenSearch", title="Token Search",
               description="Search and analyze Solana ecosystem tokens"),
    CardOption(id="tokenDetails", title="Token Details",
               description="In-depth token analysis and metrics"),
    CardOption(id="social", title="Social Presence",
               description="Community updates and social metrics"),
    CardOption(id="performance", title="Performance Analytics",
               description="Track trading performance and returns"),
    CardOption(id="chatHistory", title="Chat History",
               description="View your conversation history with the AI"),
]

CARD_IDS: List[str] = [c.id for c in CATALOG]

# Карточки, которые по умолчанию занимают две колонки
WIDE_CARDS = frozenset({"tokenSearch"})


class UnknownCardError(KeyError):
    pass


def normalize_visible(ids: Iterable[str]) -> List[str]:
    """Убираем дубли и неизвестные id, порядок — как в каталоге."""
    wanted = set(ids)
    return [cid for cid in CARD_IDS if cid in wanted]


def card_options(visible: Iterable[str]) -> List[CardOption]:
    shown = set(visible)
    return [c.model_copy(update={"visible": c.id in shown}) for c in CATALOG]


def toggle_visibility(visible: Iterable[str], card_id: str) -> List[str]:
    if card_id not in CARD_IDS:
        raise UnknownCardError(card_id)
    shown = set(visible)
    if card_id in shown:
        shown.discard(card_id)
    else:
        shown.add(card_id)
    return normalize_visible(shown)

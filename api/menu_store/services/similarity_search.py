from __future__ import annotations
import asyncio
import re
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple
from menu_store.config import SEARCH_MAX_RESULTS, SEARCH_MIN_SCORE
from menu_store.models.schemas import IndexEntry, MenuDocument, ScoredMenu
from menu_store.obs.decorators import traced
from menu_store.obs.logging_setup import get_logger
from menu_store.obs.metrics import inc_counter
from menu_store.services.index_manager import IndexManager
from menu_store.utils.parsing import parse_leading_int

logger = get_logger(__name__)

LOAD_LEVELS: FrozenSet[str] = frozenset({"A", "B", "C"})
# "30分" style tokens, or minutes written as digits followed by "min"
DURATION_TOKEN = re.compile(r".*分|\d+min")
DURATION_WINDOW = (0.8, 1.2)

# Section-name markers, matched case-insensitively
WARMUP_MARKER = "w-up"
MAIN_MARKER = "main"
COOLDOWN_MARKER = "down"

@dataclass(frozen=True)
class ParsedQuery:
    load_levels: FrozenSet[str] = frozenset()
    keywords: Tuple[str, ...] = field(default_factory=tuple)

def parse_query(query: str) -> ParsedQuery:
    """
    Split a free-text query into load levels and keywords.

    Load levels are tokens exactly equal to one of A/B/C. Keywords are the
    remaining lower-cased tokens longer than one character that are not
    durations such as "30分".
    """
    tokens = query.split()
    levels = frozenset(t for t in tokens if t in LOAD_LEVELS)

    keywords = []
    for token in tokens:
        if token in LOAD_LEVELS:
            continue
        word = token.lower()
        if len(word) <= 1 or DURATION_TOKEN.fullmatch(word):
            continue
        if word not in keywords:
            keywords.append(word)

    return ParsedQuery(load_levels=levels, keywords=tuple(keywords))

def in_duration_window(menu_duration: int, target_duration: float) -> bool:
    low, high = DURATION_WINDOW
    return target_duration * low <= menu_duration <= target_duration * high

def metadata_score(entry: IndexEntry, parsed: ParsedQuery, menu_duration: int, target_duration: float) -> int:
    """Score from the index metadata alone; assumes the duration window already passed."""
    metadata = entry.metadata

    score = 3
    diff = abs(target_duration - menu_duration)
    if diff <= 5:
        score += 2
    elif diff <= 10:
        score += 1

    score += 2 * sum(1 for level in metadata.load_levels.split(",") if level in parsed.load_levels)

    menu_text = " ".join([metadata.title, metadata.notes, *metadata.target_skills]).lower()
    score += sum(1 for keyword in parsed.keywords if keyword in menu_text)

    return score

def structure_score(document: MenuDocument) -> int:
    """One point each for a warm-up, main and cool-down section."""
    names = [section.name.lower() for section in document.sections]
    return sum(
        1 for marker in (WARMUP_MARKER, MAIN_MARKER, COOLDOWN_MARKER)
        if any(marker in name for name in names)
    )

class SimilaritySearch:
    """Heuristic similarity search over the menu index."""

    def __init__(
        self,
        index_manager: IndexManager,
        max_results: int = SEARCH_MAX_RESULTS,
        min_score: int = SEARCH_MIN_SCORE
    ):
        self.index_manager = index_manager
        self.max_results = max_results
        self.min_score = min_score

    @traced("menu_search")
    async def search(self, query: str, target_duration: float) -> List[ScoredMenu]:
        """Best matching menus for `query` around `target_duration` minutes, highest score first."""
        inc_counter("searches")
        try:
            index = await self.index_manager.load()
            parsed = parse_query(query)
            logger.info(
                "Searching menus",
                query=query,
                target_duration=target_duration,
                load_levels=sorted(parsed.load_levels),
                keywords=list(parsed.keywords),
                candidates=len(index.menus)
            )

            # gather keeps index order, so the stable sort below breaks ties by index position
            scored = await asyncio.gather(*(
                self._score_entry(entry, parsed, target_duration) for entry in index.menus
            ))
        except Exception as e:
            logger.error("Menu search failed", query=query, error=str(e))
            return []

        results = [result for result in scored if result is not None]
        results.sort(key=lambda result: result.score, reverse=True)
        return results[:self.max_results]

    async def _score_entry(
        self, entry: IndexEntry, parsed: ParsedQuery, target_duration: float
    ) -> Optional[ScoredMenu]:
        try:
            menu_duration = parse_leading_int(entry.metadata.duration)
            if menu_duration is None or not in_duration_window(menu_duration, target_duration):
                return None

            score = metadata_score(entry, parsed, menu_duration, target_duration)

            if not entry.menu_data_url:
                return None
            raw = await self.index_manager.blob_store.read(entry.menu_data_url)
            document = MenuDocument.model_validate(raw)
            score += structure_score(document)
        except Exception as e:
            logger.error("Failed to score menu", menu_id=entry.id, error=str(e))
            inc_counter("search_entry_failures")
            return None

        if score < self.min_score:
            return None
        return ScoredMenu(menu=document, score=score)

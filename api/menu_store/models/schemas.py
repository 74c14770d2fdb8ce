from __future__ import annotations
from typing import Any, List, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from menu_store.utils.parsing import stringify_number

class _CamelModel(BaseModel):
    """Stored JSON uses camelCase keys; attributes stay snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

class MenuItem(_CamelModel):
    model_config = ConfigDict(extra="allow")

    description: str
    distance: Union[str, int, float]
    sets: int
    circle: Union[str, int]
    rest: Union[int, float, str]
    equipment: Optional[str] = None
    notes: Optional[str] = None
    time: Optional[Union[int, float]] = None

class MenuSection(_CamelModel):
    model_config = ConfigDict(extra="allow")

    name: str
    items: List[MenuItem] = Field(default_factory=list)
    total_time: Optional[Union[int, float]] = None

class MenuDocument(_CamelModel):
    """A generated training menu as stored in the blob store."""
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    sections: List[MenuSection] = Field(default_factory=list, alias="menu")
    total_time: Optional[Union[int, float]] = None
    intensity: Optional[str] = None
    target_skills: Optional[List[str]] = None
    # Generation request echoed into the document; the index metadata is built from these
    load_levels: Optional[List[str]] = None
    duration: Optional[Union[int, float]] = None
    notes: Optional[str] = None
    ai_model: Optional[str] = None

class MenuMetadata(_CamelModel):
    """Denormalized summary kept in the index so listing and search skip the blob fetch."""
    model_config = ConfigDict(extra="allow")

    load_levels: str = ""
    duration: str = "0"
    notes: str = ""
    created_at: str = ""
    total_time: str = "0"
    intensity: str = ""
    target_skills: List[str] = Field(default_factory=list)
    title: str = "Untitled"
    ai_model: str = "Unknown"

    @field_validator("target_skills", mode="before")
    @classmethod
    def _skills_as_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("duration", "total_time", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return stringify_number(value) if value is None or isinstance(value, (int, float)) else value

    @field_validator("load_levels", "notes", "intensity", "created_at", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("title", "ai_model", mode="before")
    @classmethod
    def _none_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

class IndexEntry(_CamelModel):
    id: str
    metadata: MenuMetadata = Field(default_factory=MenuMetadata)
    menu_data_url: Optional[str] = None

class MenuIndex(_CamelModel):
    menus: List[IndexEntry] = Field(default_factory=list)

    # Stored entries that failed validation, with their original positions
    _unparsed: List[Tuple[int, Any]] = PrivateAttr(default_factory=list)

    @classmethod
    def from_stored(cls, raw: Any) -> "MenuIndex":
        """
        Parse a stored index entry by entry.

        Entries that fail validation are left out of `menus` but kept as raw
        JSON, so writing the index back does not drop them.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get("menus"), list):
            return cls.model_validate(raw)

        index = cls()
        for position, item in enumerate(raw["menus"]):
            try:
                index.menus.append(IndexEntry.model_validate(item))
            except ValidationError:
                index._unparsed.append((position, item))
        return index

    @property
    def unparsed_entries(self) -> List[Any]:
        return [item for _, item in self._unparsed]

    def to_json_dict(self) -> dict:
        data = super().to_json_dict()
        for position, item in self._unparsed:
            data["menus"].insert(position, item)
        return data

class HistoryRecord(_CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str
    load_levels: List[str] = Field(default_factory=list)
    duration: int = 0
    notes: str = ""
    created_at: str = ""
    total_time: int = 0
    intensity: str = ""
    target_skills: List[str] = Field(default_factory=list)
    title: str = "Untitled"
    ai_model: str = "Unknown"

class ScoredMenu(BaseModel):
    menu: MenuDocument
    score: int

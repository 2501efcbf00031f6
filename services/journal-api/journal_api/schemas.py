from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Older clients address entries by "filename"
EntryId = Annotated[
    str, Field(validation_alias=AliasChoices("id", "filename"), min_length=1)
]

ListOrder = Literal["created", "display"]


class JournalEntryCreate(BaseModel):
    date: str
    title: str
    text: str
    categories: list[str] = Field(default_factory=list)


class JournalEntryUpdate(BaseModel):
    id: EntryId
    date: str
    title: str
    text: str
    categories: list[str] = Field(default_factory=list)
    pinned: bool | None = None


class JournalEntryRef(BaseModel):
    id: EntryId


class JournalEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: str | None = None
    title: str | None = None
    text: str | None = None
    categories: list[str] = Field(default_factory=list)
    created_at: int = Field(alias="createdAt")
    pinned: bool = False


class JournalEntryList(BaseModel):
    entries: list[JournalEntry]


class JournalCategories(BaseModel):
    categories: list[str]


class CreatedResponse(BaseModel):
    success: bool = True
    id: str


class SuccessResponse(BaseModel):
    success: bool = True

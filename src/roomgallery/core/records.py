"""Photo metadata records stored in the metadata store.

Every blob key has one JSON document in the metadata store.  Documents come in
two flavours, distinguished by an explicit ``type`` tag:

``original``
    A photo uploaded to the blob store and tagged by the ingestion run.
``generated``
    An image produced by the image generation service and persisted under the
    reserved ``generated/`` key prefix.

Field names are camelCase on the wire (``publicUrl``, ``promptUsed``...) and
snake_case in Python.  Unknown fields found in stored documents are kept so a
read-modify-write never drops data written by another version.

Legacy documents
----------------
Older documents were written without a ``type`` tag.  :func:`parse_record`
backfills it from the key prefix before validation; this is the only place
the tag is ever derived instead of read.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    TypeAdapter,
    model_serializer,
)

GENERATED_PREFIX = "generated/"

DEFAULT_ROOM = "Uncategorized"
GENERATED_ROOM = "Generated"


def is_generated_key(key: str) -> bool:
    """Return ``True`` when *key* lives under the reserved generated prefix."""
    return key.startswith(GENERATED_PREFIX)


def public_url_for(prefix: str, key: str) -> str:
    """Build the public URL of a blob key."""
    return f"{prefix}/{key}"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class PhotoAnalysis(_CamelModel):
    """Result of running the vision model over a photo.

    Attributes:
        description: Free-text description of the image.
        raw_ai_response: Whatever the vision model returned, kept for debugging.
        extracted_room: Room inferred by the extraction heuristic.
        extracted_categories: Categories inferred by the extraction heuristic.
        error: Failure message when the vision call failed.
    """

    description: str | None = None
    raw_ai_response: Any = Field(default=None, alias="rawAiResponse")
    extracted_room: str | None = Field(default=None, alias="extractedRoom")
    extracted_categories: list[str] | None = Field(default=None, alias="extractedCategories")
    error: str | None = None

    @model_serializer(mode="wrap")
    def _keep_explicit_raw_response(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict:
        # A failed analysis records rawAiResponse as an explicit null.
        data = handler(self)
        if "raw_ai_response" in self.model_fields_set:
            field_name = "rawAiResponse" if info.by_alias else "raw_ai_response"
            data.setdefault(field_name, self.raw_ai_response)
        return data


class _PhotoRecordBase(_CamelModel):
    key: str
    public_url: str = Field(alias="publicUrl")
    analysis: PhotoAnalysis | None = None
    categories: list[str] = Field(default_factory=list)
    last_modified: datetime | None = Field(default=None, alias="lastModified")

    def to_document(self) -> dict:
        """Serialise the record into its JSON-compatible wire form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialise the record into the string stored in the metadata store."""
        return json.dumps(self.to_document())


class OriginalPhoto(_PhotoRecordBase):
    """A photo uploaded to the blob store and tagged by ingestion."""

    type: Literal["original"] = "original"
    room: str = DEFAULT_ROOM


class GeneratedPhoto(_PhotoRecordBase):
    """An image produced by the image generation service."""

    type: Literal["generated"] = "generated"
    room: str = GENERATED_ROOM
    original_image_key: str | None = Field(default=None, alias="originalImageKey")
    prompt_used: str | None = Field(default=None, alias="promptUsed")


PhotoRecord = Annotated[Union[OriginalPhoto, GeneratedPhoto], Field(discriminator="type")]

_record_adapter: TypeAdapter[PhotoRecord] = TypeAdapter(PhotoRecord)


def parse_record(document: dict) -> OriginalPhoto | GeneratedPhoto:
    """Validate a stored document into a typed record.

    Documents without a ``type`` tag are legacy entries: the tag is filled in
    from the key prefix.  ``None`` values for ``room`` and ``categories`` are
    dropped so the per-type defaults apply.

    Args:
        document: Decoded JSON document from the metadata store.

    Returns:
        The matching :class:`OriginalPhoto` or :class:`GeneratedPhoto`.

    Raises:
        pydantic.ValidationError: If the document is not a valid record.
    """
    document = dict(document)
    if not document.get("type"):
        key = document.get("key") or ""
        document["type"] = "generated" if is_generated_key(key) else "original"
    for field_name in ("room", "categories"):
        if document.get(field_name) is None:
            document.pop(field_name, None)
    return _record_adapter.validate_python(document)


def loads_record(raw: str) -> OriginalPhoto | GeneratedPhoto:
    """Decode and validate a JSON string from the metadata store."""
    return parse_record(json.loads(raw))

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping

ComponentId = str

# Message types carried on a document channel
REGISTER = "REGISTER"
UNREGISTER = "UNREGISTER"
SAVE = "SAVE"
MESSAGE_TYPES = (REGISTER, UNREGISTER, SAVE)


@dataclass
class Component:
    id: ComponentId
    content: str = ""

    @classmethod
    def from_data(cls, data: "Component | Mapping[str, Any]") -> "Component":
        if isinstance(data, Component):
            return cls(id=data.id, content=data.content)
        return cls(id=str(data["id"]), content=str(data.get("content") or ""))

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "content": self.content}


@dataclass(frozen=True)
class Span:
    kind: str  # "wiki" | "url" | "email"
    start: int  # offsets into the unmodified line
    end: int
    text: str


@dataclass(frozen=True)
class DocumentSnapshot:
    title: str
    old_title: str
    body: str
    tags: str = ""
    metadata: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "body": self.body,
            "title": self.title,
            "old_title": self.old_title,
            "tags": self.tags,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentSnapshot":
        return cls(
            title=data.get("title") or "",
            old_title=data.get("old_title") or "",
            body=data.get("body") or "",
            tags=data.get("tags") or "",
            metadata=data.get("metadata") or "",
        )


@dataclass(frozen=True)
class Message:
    type: str  # REGISTER | UNREGISTER | SAVE
    data: Any = None  # component dict | id | {"id", "content"} | None

    def to_dict(self) -> dict[str, Any]:
        data = self.data
        if isinstance(data, Component):
            data = data.to_dict()
        elif isinstance(data, Mapping):
            data = dict(data)
        return {"type": self.type, "data": data}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Message":
        return cls(type=payload.get("type", ""), data=payload.get("data"))


@dataclass
class StoredDocument:
    title: str
    body: str = ""
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)

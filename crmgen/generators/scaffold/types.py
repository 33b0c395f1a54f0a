"""Enums and dataclasses for scaffold generation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class FieldType(str, Enum):
    STRING = "STRING"
    TEXT = "TEXT"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    JSON = "JSON"
    ENUM = "ENUM"
    UUID = "UUID"


class RelationType(str, Enum):
    HAS_ONE = "hasOne"
    HAS_MANY = "hasMany"
    BELONGS_TO = "belongsTo"
    BELONGS_TO_MANY = "belongsToMany"


class ArtifactKind(str, Enum):
    MODEL = "model"
    VALIDATION = "validation"
    CONTROLLER = "controller"
    ROUTES = "routes"
    SERVER = "server"
    DB_CONFIG = "db_config"


# Route names a generated router binds, in registration order
CRUD_ROUTES = ("list", "get", "create", "update", "delete")


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative path from output directory
    content: str  # File contents
    kind: str = "shared"


@dataclass
class ArtifactSet:
    """Files written and index registrations made for one ModelSpec."""
    model_name: str
    files: Dict[str, str] = field(default_factory=dict)  # kind -> relative path
    indexes: List[str] = field(default_factory=list)  # index files the model was registered in

    def paths(self) -> List[str]:
        return list(self.files.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_name": self.model_name,
            "files": dict(self.files),
            "indexes": list(self.indexes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtifactSet":
        return cls(
            model_name=data["model_name"],
            files=dict(data.get("files") or {}),
            indexes=list(data.get("indexes") or []),
        )

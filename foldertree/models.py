from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    ok: bool


class SessionSummary(BaseModel):
    id: str
    name: Optional[str] = None
    source: Optional[Literal["directory", "archive"]] = None
    item_count: int = 0
    loading: bool = False
    error: Optional[str] = None
    fully_expanded: bool = False


class DirectoryIngestRequest(BaseModel):
    path: str = Field("", description="Folder path, relative to the configured browse root")
    collapsed: bool = Field(False, description="Start with every folder collapsed")


class TogglePathRequest(BaseModel):
    path: str = Field(..., description="Canonical folder path; the root is ''")


class ExpansionResponse(BaseModel):
    expanded: list[str]
    fully_expanded: bool
    toggled: Optional[bool] = None


class TreeViewNode(BaseModel):
    name: str
    path: str
    kind: Literal["directory", "file"]
    expanded: Optional[bool] = None
    has_children: Optional[bool] = None
    children: list[TreeViewNode] = Field(default_factory=list)


class TreeViewResponse(BaseModel):
    session_id: str
    item_count: int
    fully_expanded: bool
    root: TreeViewNode


TreeViewNode.model_rebuild()

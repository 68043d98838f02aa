from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


class HttpMethod(str, Enum):
    get = "GET"
    post = "POST"
    patch = "PATCH"


class BodyMode(str, Enum):
    none = "none"
    payload = "payload"
    scope = "scope"


class ToolContract(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    title: str
    description: str
    method: HttpMethod
    path: str = Field(..., pattern=r"^/")
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    body: BodyMode = BodyMode.none

    def render_path(self, arguments: Dict[str, Any]) -> str:
        rendered = self.path
        for key, value in arguments.items():
            placeholder = "{" + key + "}"
            if placeholder in rendered:
                rendered = rendered.replace(placeholder, quote(str(value), safe=""))
        return rendered

    def request_body(self, arguments: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if self.method == HttpMethod.get or self.body == BodyMode.none:
            return None
        if self.body == BodyMode.scope:
            scope = arguments.get("scope")
            return dict(scope) if isinstance(scope, dict) else {}
        return dict(arguments)

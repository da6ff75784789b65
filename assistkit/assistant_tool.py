"""A tool answering questions about the project: repositories, docs, examples, templates."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

REPOS: dict[str, str] = {
    "eino": "https://git.example.com/eino",
    "eino-ext": "https://git.example.com/eino-ext",
    "eino-examples": "https://git.example.com/eino-examples",
}

DOCS: dict[str, str] = {
    "eino_index": "https://docs.example.com/eino/",
    "quickstart": "https://docs.example.com/eino/quick_start/",
    "graph": "https://docs.example.com/eino/core_modules/chain_and_graph_orchestration/",
    "agent": "https://docs.example.com/eino/core_modules/flow_integration_components/",
    "components": "https://docs.example.com/eino/core_modules/components/",
    "integrate": "https://docs.example.com/eino/ecosystem_integration/",
}

EXAMPLES: dict[str, list[str]] = {
    "agent": ["https://git.example.com/eino-examples/tree/main/flow/agent/react"],
    "components": ["https://git.example.com/eino-examples/tree/main/components"],
    "graph": ["https://git.example.com/eino-examples/tree/main/compose/graph/tool_call_agent.go"],
    "quickstart": ["https://git.example.com/eino-examples/tree/main/quickstart"],
}

TEMPLATES: dict[str, list[str]] = {
    "react_agent": ["react_agent/main.go"],
    "simple_llm": ["simple_llm/main.go"],
    "http_agent": ["http_agent/main.go", "http_agent/README.md", "http_agent/client/main.go"],
}


class AssistantAction(str, enum.Enum):
    """What the assistant tool is asked to do."""

    GET_EXAMPLE_PROJECT = "get_example_project"
    GET_GITHUB_REPO = "get_github_repo"
    GET_DOC_URL = "get_doc_url"
    INIT_TEMPLATE = "init_template"


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


@dataclass
class AssistantRequest:
    """A request naming an action and the kind of item it concerns."""

    action: Union[AssistantAction, str] = ""
    example_type: str = ""
    repo_type: str = ""
    doc_type: str = ""
    template_type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssistantRequest":
        if not isinstance(data, Mapping):
            raise ValueError("request must be a JSON object")
        raw_action = _text(data, "action")
        try:
            action: Union[AssistantAction, str] = AssistantAction(raw_action)
        except ValueError:
            action = raw_action
        return cls(
            action=action,
            example_type=_text(data, "example_type"),
            repo_type=_text(data, "repo_type"),
            doc_type=_text(data, "doc_type"),
            template_type=_text(data, "template_type"),
        )


@dataclass
class AssistantResponse:
    """Either a message or an error text."""

    message: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "error": self.error}


class AssistantTool:
    """Looks up project links and copies project templates into ``base_dir``."""

    name = "eino_tool"
    description = (
        "eino tool can get eino project info,\n"
        "action:\n"
        "- get_example_project: get the example project url, path of eino-examples\n"
        "- get_github_repo: get the github repo url, e.g. eino, eino-ext, eino-examples\n"
        "- get_doc_url: get the doc url of eino website\n"
        "- init_template: init the eino project template, to create files from template\n"
    )

    def __init__(
        self,
        base_dir: str | Path = "./data/eino",
        template_dir: str | Path | None = None,
        *,
        repos: Mapping[str, str] | None = None,
        docs: Mapping[str, str] | None = None,
        examples: Mapping[str, Sequence[str]] | None = None,
        templates: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.template_dir = Path(template_dir) if template_dir is not None else Path(__file__).with_name("templates")
        self.repos = dict(REPOS if repos is None else repos)
        self.docs = dict(DOCS if docs is None else docs)
        self.examples = dict(EXAMPLES if examples is None else examples)
        self.templates = dict(TEMPLATES if templates is None else templates)

    def invoke(self, request: AssistantRequest | Mapping[str, Any]) -> AssistantResponse:
        """Answer ``request``; failures are reported in the response's error."""
        if not isinstance(request, AssistantRequest):
            request = AssistantRequest.from_dict(request)
        action = request.action

        if action == AssistantAction.GET_EXAMPLE_PROJECT:
            urls = self.examples.get(request.example_type)
            if not urls:
                return AssistantResponse(
                    error="invalid example type, can be one of: agent, components, graph, quickstart. "
                    "example repo is " + self.repos.get("eino-examples", "")
                )
            return AssistantResponse(message=urls[0])

        if action == AssistantAction.GET_GITHUB_REPO:
            url = self.repos.get(request.repo_type, "")
            if not url:
                return AssistantResponse(
                    error="invalid repo type, can be one of: eino, eino-ext, eino-examples. "
                    "eino repo url is " + self.repos.get("eino", "")
                )
            return AssistantResponse(message=url)

        if action == AssistantAction.GET_DOC_URL:
            url = self.docs.get(request.doc_type, "")
            if not url:
                return AssistantResponse(
                    error="invalid doc type, can be one of: eino_index, quickstart, graph, agent, "
                    "components, integrate. eino doc url is " + self.docs.get("eino_index", "")
                )
            return AssistantResponse(message=url)

        if action == AssistantAction.INIT_TEMPLATE:
            return self._init_template(request.template_type)

        return AssistantResponse(
            error="invalid action, can be one of: get_example_project, get_github_repo, get_doc_url"
        )

    def _init_template(self, template_type: str) -> AssistantResponse:
        files = self.templates.get(template_type)
        if not files:
            return AssistantResponse(error="invalid template type, can be one of: react_agent, simple_llm, http_agent")

        for name in files:
            try:
                content = (self.template_dir / name).read_bytes()
            except OSError as exc:
                return AssistantResponse(error=f"failed to read template file: {exc}")
            target = self.base_dir / name
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                return AssistantResponse(error=f"failed to create directory: {exc}")
            try:
                target.write_bytes(content)
            except OSError as exc:
                return AssistantResponse(error=f"failed to write file: {exc}")

        path = os.path.abspath(self.base_dir / template_type)
        return AssistantResponse(message="success, init template, path is: " + path)
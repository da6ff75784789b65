# assistkit

Building blocks for a chat assistant, plus a small Flask web service that
ties them together.

## What is inside

- `assistkit.messages`: chat messages (`Message`, `Role`, `UserMessage`)
  with `system_message`, `user_message`, `assistant_message` and
  `concat_messages`, which joins streamed chunks into one message and raises
  `ValueError` when they are empty, missing or disagree on role or name.
- `assistkit.prompts`: `ChatTemplate` fills `{name}` fields in its messages
  and expands `MessagesPlaceholder` entries into lists of messages;
  `format_fstring` fills a single string. A missing variable raises
  `TemplateError`. `agent_chat_template()` builds the assistant's system
  prompt with optional history; `query_from_input` and
  `variables_from_input` turn a `UserMessage` into a retrieval query and
  template variables (`content`, `history`, `date`).
  `create_messages_from_template()` fills a sample template.
- `assistkit.memory`: `SimpleMemory` keeps each conversation in a JSON Lines
  file under its directory. `get_conversation`, `list_conversations` and
  `delete_conversation` manage them; `Conversation.recent_messages()`
  returns the last `max_window_size` messages. `default_memory()` uses
  `data/memory` with a window of six.
- `assistkit.env`: `load_env` reads a `.env` file without overriding
  variables already set; `require_envs` raises `MissingEnvError` for the
  first unset or empty variable.
- `assistkit.tasks`: `TaskStorage` keeps tasks in `tasks.jsonl`; deleted
  tasks stay in the file, marked as deleted. `TaskTool.invoke` handles
  `add`, `update`, `delete` and `list` requests and reports failures in the
  returned `TaskResponse`. Listing puts open tasks before completed ones,
  newest first.
- `assistkit.assistant_tool`: `AssistantTool` looks up example projects,
  repositories and documentation links, and copies template files from its
  `template_dir` into `base_dir`.
- `assistkit.gitclone`: `GitCloneTool` clones or pulls a repository with
  the `git` command into `base_dir/<group>/<repo>`, accepting SSH, HTTPS or
  bare `host/group/repo` forms (`is_valid_git_url`, `with_git`,
  `extract_repo_dir`).
- `assistkit.opener`: `OpenTool` opens a file, directory or web address with
  the system's default application (`xdg-open`, `open` or `rundll32`);
  `open_command` returns the command for a platform.
- `assistkit.webapp`: `create_app` builds the Flask application; `main`
  starts it.

## Installing

```
pip install .
```

## Example: conversation memory

```python
from assistkit.memory import SimpleMemory
from assistkit.messages import user_message, assistant_message

memory = SimpleMemory("data/memory", max_window_size=6)
conversation = memory.get_conversation("demo", create_if_missing=True)
conversation.append(user_message("hello"))
conversation.append(assistant_message("hi there"))
print([m.content for m in conversation.recent_messages()])
print(memory.list_conversations())
```

## Example: tasks

```python
from assistkit.tasks import TaskStorage, TaskTool, TaskRequest

tool = TaskTool(TaskStorage("data/task"))
response = tool.invoke(TaskRequest.from_dict(
    {"action": "add", "task": {"title": "write docs"}}
))
print(response.to_dict())
```

## Running the web service

Put the required settings in a `.env` file in the working directory:

```
ARK_CHAT_MODEL=placeholder
ARK_EMBEDDING_MODEL=placeholder
ARK_API_KEY=placeholder
```

Then start the server:

```
assistkit-server
```

Options: `--host` (default `0.0.0.0`) and `--port` (default `PORT` from the
environment, else 8080). The server routes are:

- `POST /task/api`: a task request as JSON, answered with a task response.
- `GET /agent/api/chat?id=...&message=...`: streams the reply as
  server-sent events and stores both sides in the conversation.
- `GET /agent/api/history`: lists conversation ids, or with `id` returns one
  conversation; `DELETE /agent/api/history?id=...` removes it.
- `GET /agent/api/log`: streams new lines of `log/eino.log` as server-sent
  events.
- `GET /`: redirects to `/agent`.

`/task/` and `/agent/` also serve static files from a `web/task` or
`web/agent` directory next to `assistkit/webapp.py`, answering 404 when a
file is absent.

## What the package does not do

- It contains no language-model client. Chat replies come from a callable
  you set as `app.config["AGENT_RUNNER"]`: it receives a `UserMessage` and
  returns an iterable of `Message` chunks. Without one, `/agent/api/chat`
  answers 500.
- It has no document indexing or vector retrieval; the `documents` variable
  of `agent_chat_template()` must be supplied by the caller.
- No web pages or project templates are shipped: supply the `web`
  directory for the server and a `template_dir` for `AssistantTool`.

## Running the tests

```
pip install ".[test]"
pytest
```
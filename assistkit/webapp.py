"""HTTP server for the assistant: task API, chat streaming, history and logs."""

from __future__ import annotations

import argparse
import logging
import mimetypes
import os
import time
from pathlib import Path
from typing import Any, Iterator

from flask import Blueprint, Flask, Response, current_app, g, jsonify, redirect, request

from assistkit.env import MissingEnvError, load_env, require_envs
from assistkit.memory import ConversationError, SimpleMemory, default_memory
from assistkit.messages import Message, UserMessage, concat_messages, user_message
from assistkit.tasks import TaskRequest, TaskStorage, TaskTool, default_storage

logger = logging.getLogger(__name__)

_WEB_DIR = Path(__file__).with_name("web")


def _sse(data: str) -> str:
    lines = "".join(f"data: {line}\n" for line in data.split("\n"))
    return lines + "\n"


def _static(directory: Path, name: str) -> Response:
    path = (directory / name).resolve()
    try:
        path.relative_to(directory.resolve())
        content = path.read_bytes()
    except (ValueError, OSError):
        return Response("File not found", status=404, mimetype="text/plain")
    content_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return Response(content, status=200, content_type=content_type)


def _task_blueprint(tool: TaskTool) -> Blueprint:
    bp = Blueprint("task", __name__, url_prefix="/task")
    web_dir = _WEB_DIR / "task"

    @bp.post("/api")
    def task_api():
        data = request.get_json(silent=True)
        if data is None:
            return jsonify(status="error", error="invalid JSON body"), 400
        try:
            task_request = TaskRequest.from_dict(data)
        except ValueError as exc:
            return jsonify(status="error", error=str(exc)), 400
        try:
            response = tool.invoke(task_request)
        except (OSError, ValueError) as exc:
            return jsonify(status="error", error=str(exc)), 500
        return jsonify(response.to_dict()), 200

    @bp.get("/")
    def task_index():
        return _static(web_dir, "index.html")

    @bp.get("/<file>")
    def task_file(file: str):
        return _static(web_dir, file)

    return bp


def _chat_events(memory: SimpleMemory, conversation_id: str, text: str, chunks: Any) -> Iterator[str]:
    conversation = memory.get_conversation(conversation_id, True)
    received: list[Message] = []
    try:
        for chunk in chunks:
            received.append(chunk)
            yield _sse(chunk.content)
    except Exception as exc:  # the runner may fail mid-stream; the reply so far is kept
        logger.error("[Chat] Error receiving message: %s", exc)
    finally:
        conversation.append(user_message(text))
        try:
            conversation.append(concat_messages(received))
        except ValueError as exc:
            logger.error("error concatenating messages: %s", exc)
        logger.info("[Chat] Finished chat with ID: %s", conversation_id)


def _agent_blueprint(memory: SimpleMemory) -> Blueprint:
    bp = Blueprint("agent", __name__, url_prefix="/agent")
    web_dir = _WEB_DIR / "agent"

    @bp.get("/api/chat")
    def chat():
        conversation_id = request.args.get("id", "")
        text = request.args.get("message", "")
        if not conversation_id or not text:
            return jsonify(status="error", error="missing id or message parameter"), 400

        logger.info("[Chat] Starting chat with ID: %s, Message: %s", conversation_id, text)
        runner = current_app.config.get("AGENT_RUNNER")
        if runner is None:
            return jsonify(status="error", error="failed to build agent graph: no agent configured"), 500

        conversation = memory.get_conversation(conversation_id, True)
        incoming = UserMessage(id=conversation_id, query=text, history=conversation.recent_messages())
        try:
            chunks = iter(runner(incoming))
        except Exception as exc:  # any failure to start the agent becomes a 500
            logger.error("[Chat] Error running agent: %s", exc)
            return jsonify(status="error", error=str(exc)), 500

        return Response(
            _chat_events(memory, conversation_id, text, chunks),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    @bp.get("/api/log")
    def log_stream():
        try:
            handle = Path(current_app.config["LOG_PATH"]).open("r", encoding="utf-8")
        except OSError as exc:
            return jsonify(status="error", error=str(exc)), 500
        handle.seek(0, os.SEEK_END)

        def events() -> Iterator[str]:
            try:
                while True:
                    line = handle.readline()
                    if line:
                        yield _sse(line)
                    else:
                        time.sleep(0.1)
            finally:
                handle.close()

        return Response(events(), mimetype="text/event-stream")

    @bp.get("/api/history")
    def history():
        conversation_id = request.args.get("id", "")
        if not conversation_id:
            return jsonify(ids=memory.list_conversations()), 200
        conversation = memory.get_conversation(conversation_id, False)
        if conversation is None:
            return jsonify(error="conversation not found"), 404
        return jsonify(conversation=conversation.to_dict()), 200

    @bp.delete("/api/history")
    def delete_history():
        conversation_id = request.args.get("id", "")
        if not conversation_id:
            return jsonify(error="missing id parameter"), 400
        try:
            memory.delete_conversation(conversation_id)
        except ConversationError as exc:
            logger.warning("delete conversation %s: %s", conversation_id, exc)
        return jsonify(status="success"), 200

    @bp.get("/")
    def agent_index():
        return _static(web_dir, "index.html")

    @bp.get("/<file>")
    def agent_file(file: str):
        return _static(web_dir, file)

    return bp


def create_app(storage: TaskStorage | None = None, memory: SimpleMemory | None = None) -> Flask:
    """Build the application.

    ``app.config["AGENT_RUNNER"]`` takes a callable that receives a
    UserMessage and returns the reply as an iterable of message chunks;
    ``app.config["LOG_PATH"]`` names the log file streamed by ``/agent/api/log``.
    """
    app = Flask(__name__)
    app.config.setdefault("LOG_PATH", "log/eino.log")
    app.config.setdefault("AGENT_RUNNER", None)

    tool = TaskTool(storage if storage is not None else default_storage())
    memory = memory if memory is not None else default_memory()

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get("request_started", time.perf_counter())
        latency = time.perf_counter() - started
        logger.info("[HTTP] %s %s %d %.3fms", request.method, request.path, response.status_code, latency * 1000)
        return response

    app.register_blueprint(_task_blueprint(tool))
    app.register_blueprint(_agent_blueprint(memory))

    @app.get("/")
    def root():
        return redirect("/agent", code=302)

    return app


def main(argv: list[str] | None = None) -> int:
    """Load the environment, check it and serve the application."""
    parser = argparse.ArgumentParser(description="assistant HTTP server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT") or 8080))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        load_env()
        require_envs("ARK_CHAT_MODEL", "ARK_EMBEDDING_MODEL", "ARK_API_KEY")
    except (FileNotFoundError, MissingEnvError) as exc:
        logger.error("[ERROR] %s", exc)
        return 1

    log_path = Path("log/eino.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.touch(exist_ok=True)

    app = create_app()
    app.config["LOG_PATH"] = str(log_path)
    app.run(host=args.host, port=args.port)
    return 0
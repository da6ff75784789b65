import json

import pytest

from assistkit.memory import ConversationError, SimpleMemory, default_memory
from assistkit.messages import Message, assistant_message, user_message


def test_missing_conversation_without_create(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    assert memory.get_conversation("abc", False) is None
    assert not (tmp_path / "abc.jsonl").exists()


def test_create_makes_empty_file(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    conv = memory.get_conversation("abc", True)
    assert conv.id == "abc"
    assert conv.full_messages() == []
    assert (tmp_path / "abc.jsonl").read_text() == ""


def test_same_object_returned_from_cache(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    first = memory.get_conversation("c", True)
    assert memory.get_conversation("c", False) is first


def test_append_persists_and_reloads(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    conv = memory.get_conversation("c", True)
    msgs = [user_message("你好"), assistant_message("hello")]
    for m in msgs:
        conv.append(m)
    lines = (tmp_path / "c.jsonl").read_text(encoding="utf-8").splitlines()
    assert [Message.from_dict(json.loads(line)) for line in lines] == msgs

    reloaded = SimpleMemory(tmp_path, max_window_size=6).get_conversation("c", False)
    assert reloaded.full_messages() == msgs


def test_recent_messages_window(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=2)
    conv = memory.get_conversation("w", True)
    msgs = [user_message(str(n)) for n in range(5)]
    for m in msgs:
        conv.append(m)
    assert conv.recent_messages() == msgs[-2:]
    assert conv.full_messages() == msgs


def test_zero_window_gives_nothing(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=0)
    conv = memory.get_conversation("z", True)
    conv.append(user_message("a"))
    assert conv.recent_messages() == []


def test_short_history_returned_whole(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    conv = memory.get_conversation("s", True)
    conv.append(user_message("a"))
    assert conv.recent_messages() == [user_message("a")]


def test_load_stops_at_bad_line(tmp_path):
    good = json.dumps(user_message("ok").to_dict())
    (tmp_path / "bad.jsonl").write_text(good + "\nnot json\n" + good + "\n", encoding="utf-8")
    conv = SimpleMemory(tmp_path).get_conversation("bad", False)
    assert conv.full_messages() == [user_message("ok")]


def test_list_conversations(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    memory.get_conversation("b", True)
    memory.get_conversation("a", True)
    (tmp_path / "subdir").mkdir()
    assert memory.list_conversations() == ["a", "b"]


def test_delete_conversation(tmp_path):
    memory = SimpleMemory(tmp_path, max_window_size=6)
    memory.get_conversation("d", True)
    memory.delete_conversation("d")
    assert memory.list_conversations() == []
    assert memory.get_conversation("d", False) is None


def test_delete_missing_conversation_fails(tmp_path):
    memory = SimpleMemory(tmp_path)
    with pytest.raises(ConversationError):
        memory.delete_conversation("nope")


def test_to_dict(tmp_path):
    conv = SimpleMemory(tmp_path).get_conversation("t", True)
    conv.append(user_message("q"))
    assert conv.to_dict() == {"id": "t", "messages": [{"role": "user", "content": "q"}]}


def test_default_memory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    memory = default_memory()
    assert memory.max_window_size == 6
    assert (tmp_path / "data" / "memory").is_dir()
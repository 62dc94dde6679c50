"""Tests for the JSON store and the per-chat ledgers."""

from __future__ import annotations

import json
import pytest
from datetime import date
from pathlib import Path

from stark.memory.facts import FactLedger
from stark.memory.history import HistoryLedger
from stark.memory.store import JsonStore
from stark.memory.todos import EMPTY_LIST, TodoLedger, format_date


@pytest.fixture
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path / "data")


class TestJsonStore:
    def test_creates_root(self, store: JsonStore):
        assert store.root.is_dir()

    def test_missing_returns_default(self, store: JsonStore):
        assert store.load("todos", {}) == {}

    def test_save_and_load(self, store: JsonStore):
        store.save("memory", {"1": ["Beslissing: Supabase"]})
        assert store.load("memory", {}) == {"1": ["Beslissing: Supabase"]}

    def test_unicode_kept_readable(self, store: JsonStore):
        store.save("todos", {"1": [{"text": "✅ café"}]})
        assert "café" in store.path("todos").read_text(encoding="utf-8")

    def test_corrupt_returns_default(self, store: JsonStore, caplog):
        store.path("conversations").write_text("{not json", encoding="utf-8")
        assert store.load("conversations", {"fallback": True}) == {"fallback": True}
        assert "Error loading" in caplog.text

    def test_wrong_shape_returns_default(self, store: JsonStore, caplog):
        store.path("todos").write_text("[]", encoding="utf-8")
        assert store.load("todos", {}) == {}
        assert "expected dict, got list" in caplog.text

    def test_write_error_is_swallowed(self, store: JsonStore, caplog):
        store.save("memory", {"bad": object()})  # not JSON serializable
        assert "Error saving" in caplog.text


class TestHistoryLedger:
    def test_append_and_turns(self, store: JsonStore):
        history = HistoryLedger(store)
        history.append("1", "user", "[Ann]: hoi")
        history.append("1", "assistant", "Hoi Ann!")
        assert history.turns("1") == [
            {"role": "user", "content": "[Ann]: hoi"},
            {"role": "assistant", "content": "Hoi Ann!"},
        ]

    def test_window_keeps_most_recent(self, store: JsonStore):
        history = HistoryLedger(store, window=4)
        for i in range(7):
            history.append("1", "user", f"msg {i}")
            assert len(history.turns("1")) <= 4
        assert [t["content"] for t in history.turns("1")] == ["msg 3", "msg 4", "msg 5", "msg 6"]

    def test_short_history_untouched(self, store: JsonStore):
        history = HistoryLedger(store, window=4)
        history.append("1", "user", "a")
        history.append("1", "assistant", "b")
        assert [t["content"] for t in history.turns("1")] == ["a", "b"]

    def test_malformed_turns_skipped(self, store: JsonStore):
        store.save("conversations", {"1": [{"role": "user", "content": "a"}, "junk", {"role": "x"}], "2": 5})
        history = HistoryLedger(store)
        assert history.turns("1") == [{"role": "user", "content": "a"}]
        assert history.turns("2") == []

    def test_invalid_window(self, store: JsonStore):
        with pytest.raises(ValueError):
            HistoryLedger(store, window=0)

    def test_persist_and_reload(self, store: JsonStore):
        history = HistoryLedger(store)
        history.append("1", "user", "hallo")
        history.save()
        assert HistoryLedger(store).turns("1") == [{"role": "user", "content": "hallo"}]

    def test_reset_only_that_chat(self, store: JsonStore):
        history = HistoryLedger(store)
        history.append("1", "user", "a")
        history.append("2", "user", "b")
        history.reset("1")
        assert history.turns("1") == []
        assert history.turns("2") == [{"role": "user", "content": "b"}]
        assert json.loads(store.path("conversations").read_text())["1"] == []

    def test_turns_is_a_copy(self, store: JsonStore):
        history = HistoryLedger(store)
        history.append("1", "user", "a")
        history.turns("1").clear()
        assert len(history.turns("1")) == 1


class TestFactLedger:
    def test_append_no_dedup(self, store: JsonStore):
        facts = FactLedger(store)
        facts.append("1", ["budget approved", "budget approved"])
        assert facts.facts("1") == ["budget approved", "budget approved"]

    def test_render(self, store: JsonStore):
        facts = FactLedger(store)
        facts.append("1", ["a", "b"])
        assert facts.render("1") == "- a\n- b"

    def test_render_empty(self, store: JsonStore):
        assert FactLedger(store).render("unknown") == ""

    def test_empty_append_does_not_write(self, store: JsonStore):
        FactLedger(store).append("1", [])
        assert not store.path("memory").exists()

    def test_malformed_document(self, store: JsonStore):
        store.save("memory", {"1": "geen lijst", "2": ["ok"]})
        facts = FactLedger(store)
        assert facts.facts("1") == []
        assert facts.render("1") == ""
        assert facts.facts("2") == ["ok"]

    def test_persisted(self, store: JsonStore):
        FactLedger(store).append(42, ["launch in maart"])
        assert FactLedger(store).facts("42") == ["launch in maart"]


class TestTodoLedger:
    @pytest.fixture
    def todos(self, store: JsonStore) -> TodoLedger:
        return TodoLedger(store)

    def test_add_and_render(self, todos: TodoLedger):
        todos.add("1", "Buy coffee", "Ann")
        rendered = todos.render("1")
        assert "1. ⬜ Buy coffee" in rendered
        assert "Ann" in rendered
        assert format_date(date.today()) in rendered

    def test_render_empty(self, todos: TodoLedger):
        assert todos.render("1") == EMPTY_LIST

    def test_complete_single(self, todos: TodoLedger):
        todos.add("1", "Buy coffee", "Ann")
        assert todos.complete("1", 0) is True
        assert "1. ✅ Buy coffee" in todos.render("1")

    def test_complete_leaves_others(self, todos: TodoLedger):
        for text in ["a", "b", "c"]:
            todos.add("1", text, "Ann")
        todos.complete("1", 1)
        assert [(t.text, t.done) for t in todos.items("1")] == [
            ("a", False),
            ("b", True),
            ("c", False),
        ]

    def test_complete_out_of_range(self, todos: TodoLedger):
        todos.add("1", "a", "Ann")
        assert todos.complete("1", 5) is False
        assert todos.complete("1", -1) is False
        assert todos.complete("unknown", 0) is False

    def test_remove_shifts_down(self, todos: TodoLedger):
        for text in ["a", "b", "c", "d"]:
            todos.add("1", text, "Ann")
        assert todos.remove("1", 1) is True
        rendered = todos.render("1")
        assert "1. ⬜ a" in rendered
        assert "2. ⬜ c" in rendered
        assert "3. ⬜ d" in rendered
        assert "4." not in rendered

    def test_remove_out_of_range(self, todos: TodoLedger):
        assert todos.remove("1", 0) is False

    def test_stable_ids(self, todos: TodoLedger):
        first = todos.add("1", "a", "Ann")
        second = todos.add("1", "b", "Ann")
        todos.remove("1", 0)
        assert first.id != second.id
        assert todos.items("1")[0].id == second.id

    def test_persist_and_reload(self, store: JsonStore, todos: TodoLedger):
        item = todos.add("1", "Buy coffee", "Ann")
        todos.complete("1", 0)
        reloaded = TodoLedger(store).items("1")
        assert reloaded[0].text == "Buy coffee"
        assert reloaded[0].done is True
        assert reloaded[0].id == item.id

    def test_wrong_top_level_shape(self, store: JsonStore):
        store.path("todos").write_text("[]", encoding="utf-8")
        todos = TodoLedger(store)
        assert todos.render("1") == EMPTY_LIST
        todos.add("1", "a", "Ann")
        assert [i.text for i in todos.items("1")] == ["a"]

    def test_malformed_items_dropped(self, store: JsonStore, caplog):
        store.save("todos", {"1": [{"text": "a", "addedBy": "Ann", "date": "1-2-2026"}, "junk"], "2": 3})
        todos = TodoLedger(store)
        assert [i.text for i in todos.items("1")] == ["a"]
        assert todos.items("2") == []
        assert "malformed" in caplog.text

    def test_legacy_records_get_ids(self, store: JsonStore):
        store.save("todos", {"1": [{"text": "a", "done": False, "addedBy": "Ann", "date": "1-2-2026"}]})
        items = TodoLedger(store).items("1")
        assert items[0].id
        assert items[0].date == "1-2-2026"

    def test_render_for_prompt(self, todos: TodoLedger):
        assert todos.render_for_prompt("1") == "Geen taken op dit moment."
        todos.add("1", "Deploy", "Bob")
        assert todos.render_for_prompt("1").startswith("1. [⬜] Deploy (toegevoegd door Bob op ")

    def test_format_date(self):
        assert format_date(date(2026, 3, 7)) == "7-3-2026"

from __future__ import annotations

import json

import pytest

from research_swarm.services import prompt_store
from research_swarm.services.prompt_store import clear_prompt_cache, render_prompt


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt("planner.prompt", topic="solid state batteries", min_dimensions=3, max_dimensions=5)

    assert 'Target Topic: "solid state batteries"' in prompt
    assert "3 to 5 distinct" in prompt
    assert "\n" in prompt


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_render_prompt_names_missing_value():
    with pytest.raises(KeyError) as exc_info:
        render_prompt("retrieval.prompt", query="only the query")

    assert "results" in str(exc_info.value)


def test_every_stage_has_system_and_prompt():
    for stage in ("planner", "retrieval", "extraction", "synthesis"):
        assert render_prompt(f"{stage}.system", today="2026-10-19")


def test_catalog_reloads_when_file_changes(tmp_path, monkeypatch):
    catalog = tmp_path / "prompts.json"
    catalog.write_text(json.dumps({"greeting": "hello $name"}), encoding="utf-8")
    monkeypatch.setattr(prompt_store, "PROMPTS_PATH", catalog)
    clear_prompt_cache()

    assert render_prompt("greeting", name="world") == "hello world"

    catalog.write_text(json.dumps({"greeting": ["hi", "$name"]}), encoding="utf-8")
    prompt_store._catalog_mtime_ns = -1

    assert render_prompt("greeting", name="world") == "hi\nworld"
    clear_prompt_cache()

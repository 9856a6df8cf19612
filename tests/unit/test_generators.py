"""
Unit tests for generator discovery, loading, stages and file writing.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from genwizard.exceptions import (
    GeneratorLoadError,
    GeneratorNotFoundError,
    GeneratorRunFailedError,
)
from genwizard.generators import (
    Generator,
    GeneratorAdapter,
    GeneratorEnvironment,
    GeneratorLog,
    discover_generators,
    scan_generator_dir,
)
from tests.helpers.filesystem import write_generator


class RecordingAdapter(GeneratorAdapter):
    """Adapter that records log lines and answers prompts from a dict."""

    def __init__(self, answers: dict[str, Any] | None = None):
        self.lines: list[tuple[str, str]] = []
        self.answers = answers or {}
        self.log = GeneratorLog(lambda prefix, text: self.lines.append((prefix, text)))

    def prompt(self, questions):
        items = questions if isinstance(questions, list) else [questions]
        return {q["name"]: self.answers.get(q["name"]) for q in items}

    def diff(self, actual, expected):
        pass


# ── Discovery ─────────────────────────────────────────────────────

def test_scan_finds_modules_and_packages(tmp_path):
    gens = tmp_path / "gens"
    write_generator(gens, "app", "class App(Generator):\n    pass\n")
    write_generator(gens, "router", "class Router(Generator):\n    pass\n", package=True)
    write_generator(gens, "_helpers", "X = 1\n")
    (gens / "notes.txt").write_text("ignored")
    (gens / "empty_dir").mkdir()

    found = scan_generator_dir(gens)

    assert sorted(found) == ["app", "router"]
    assert found["router"] == (gens / "router").resolve()


def test_scan_missing_dir_is_empty(tmp_path):
    assert scan_generator_dir(tmp_path / "nope") == {}


def test_discover_first_directory_wins(tmp_path):
    local, user = tmp_path / "local", tmp_path / "user"
    write_generator(local, "app", "class App(Generator):\n    pass\n")
    write_generator(user, "app", "class App(Generator):\n    pass\n")
    write_generator(user, "lib", "class Lib(Generator):\n    pass\n")

    found = discover_generators([local, user])

    assert list(found) == ["app", "lib"]
    assert found["app"].resolved == str((local / "app.py").resolve())


def test_environment_search_order(tmp_path):
    extra = tmp_path / "extra"
    env = GeneratorEnvironment(cwd=tmp_path / "ws", search_paths=[extra], user_dir=tmp_path / "user")

    assert env.search_dirs() == [
        tmp_path / "ws" / ".genwizard" / "generators",
        extra,
        tmp_path / "user",
    ]


def test_from_config_uses_configured_paths(data_dir, tmp_path):
    from genwizard.config import GenWizardConfig, save_config

    config = GenWizardConfig()
    config.generators.search_paths = [str(tmp_path / "shared")]
    config.generators.workspace_subdir = "gens"
    save_config(config)

    env = GeneratorEnvironment.from_config(tmp_path / "ws")

    assert env.search_dirs() == [
        tmp_path / "ws" / "gens",
        tmp_path / "shared",
        data_dir.resolve() / "generators",
    ]


# ── Loading & running ─────────────────────────────────────────────

def test_load_unknown_generator(tmp_path):
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()

    with pytest.raises(GeneratorNotFoundError):
        env.load("ghost")


def test_load_module_without_generator_class(tmp_path):
    gens = tmp_path / ".genwizard" / "generators"
    gens.mkdir(parents=True)
    (gens / "plain.py").write_text("VALUE = 1\n")
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()

    with pytest.raises(GeneratorLoadError):
        env.load("plain")


def test_load_import_error(tmp_path):
    gens = tmp_path / ".genwizard" / "generators"
    gens.mkdir(parents=True)
    (gens / "broken.py").write_text("raise ImportError('nope')\n")
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()

    with pytest.raises(GeneratorLoadError):
        env.load("broken")


def test_stages_run_in_order(tmp_path):
    write_generator(
        tmp_path / ".genwizard" / "generators",
        "staged",
        """
        class Staged(Generator):
            def end(self):
                self.log.info("end")

            def writing(self):
                self.log.info("writing")

            def initializing(self):
                self.log.info("initializing")

            def prompting(self):
                self.log.info("prompting")
        """,
    )
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()
    adapter = RecordingAdapter()

    env.run("staged", adapter)

    assert adapter.lines == [
        ("[INFO]", "initializing"),
        ("[INFO]", "prompting"),
        ("[INFO]", "writing"),
        ("[INFO]", "end"),
    ]


def test_run_wraps_generator_errors(tmp_path):
    write_generator(
        tmp_path / ".genwizard" / "generators",
        "crash",
        """
        class Crash(Generator):
            def writing(self):
                raise ValueError("disk on fire")
        """,
    )
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()

    with pytest.raises(GeneratorRunFailedError, match="disk on fire"):
        env.run("crash", RecordingAdapter())


def test_package_generator_can_import_submodules(tmp_path):
    pkg_init = write_generator(
        tmp_path / ".genwizard" / "generators",
        "pkg",
        """
        from .templates import README


        class Pkg(Generator):
            def writing(self):
                self.write("README.md", README)
        """,
        package=True,
    )
    (pkg_init.parent / "templates.py").write_text('README = "# pkg\\n"\n')
    env = GeneratorEnvironment(cwd=tmp_path)
    env.lookup()

    env.run("pkg", RecordingAdapter())

    assert (tmp_path / "README.md").read_text() == "# pkg\n"


# ── File writing ─────────────────────────────────────────────────

def _generator(root: Path) -> tuple[Generator, RecordingAdapter]:
    adapter = RecordingAdapter()
    return Generator(name="test", destination_root=root, adapter=adapter), adapter


def test_write_create_identical_conflict_force(tmp_path):
    gen, adapter = _generator(tmp_path)

    assert gen.write("src/a.txt", "one") is True
    assert gen.write("src/a.txt", "one") is False
    assert gen.write("src/a.txt", "two") is False
    assert (tmp_path / "src" / "a.txt").read_text() == "one"
    assert gen.write("src/a.txt", "two", force=True) is True
    assert (tmp_path / "src" / "a.txt").read_text() == "two"

    assert adapter.lines == [
        ("[CREATE]", "src/a.txt"),
        ("[IDENTICAL]", "src/a.txt"),
        ("[CONFLICT]", "src/a.txt"),
        ("[SKIP]", "src/a.txt"),
        ("[FORCE]", "src/a.txt"),
    ]


def test_write_outside_destination_rejected(tmp_path):
    gen, _ = _generator(tmp_path / "ws")

    with pytest.raises(ValueError):
        gen.write("../escape.txt", "x")
    assert not (tmp_path / "escape.txt").exists()


def test_generator_prompt_goes_through_adapter(tmp_path):
    gen, adapter = _generator(tmp_path)
    adapter.answers = {"project": "demo"}

    assert gen.prompt({"name": "project"}) == {"project": "demo"}


def test_log_call_and_tags():
    lines: list[tuple[str, str]] = []
    log = GeneratorLog(lambda prefix, text: lines.append((prefix, text)))

    log("plain")("chained")
    log.ok("fine")
    log.error("bad")
    log.invoke("sub")

    assert lines == [("", "plain"), ("", "chained"), ("[OK]", "fine"), ("[ERROR]", "bad"), ("[INVOKE]", "sub")]

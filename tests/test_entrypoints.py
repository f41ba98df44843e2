import pytest

import terminalzero.__main__ as module_main
import terminalzero.main as main


def test_module_entrypoint_calls_main_entry(monkeypatch) -> None:
    called = {"value": 0}
    monkeypatch.setattr(module_main, "main_entry", lambda: called.__setitem__("value", 1))
    module_main.main()
    assert called["value"] == 1


def test_main_entry_exits_with_run_status(monkeypatch) -> None:
    monkeypatch.setattr(main, "run", lambda: 0)
    with pytest.raises(SystemExit) as excinfo:
        main.main_entry()
    assert excinfo.value.code == 0


def test_run_passes_level_to_shell(monkeypatch) -> None:
    seen: dict[str, int] = {}

    def fake_shell(*, start_level: int) -> int:
        seen["level"] = start_level
        return 0

    monkeypatch.setattr(main, "play_shell", fake_shell)
    monkeypatch.setattr(main, "configure_logging", lambda verbose=False: None)
    assert main.run(["play", "--level", "12"]) == 0
    assert seen["level"] == 12


def test_run_rejects_out_of_range_level(monkeypatch) -> None:
    monkeypatch.setattr(main, "play_shell", lambda **kwargs: 0)
    with pytest.raises(SystemExit):
        main.run(["--level", "61"])

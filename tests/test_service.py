import pytest

from terminalzero.service import GameService


def test_submit_completes_level_and_appends_notice(catalog) -> None:
    service = GameService(catalog=catalog)
    assert service.level_data().title == "First Steps"

    outcome = service.submit("cat secret.txt")
    assert outcome.result.level_completed is True
    assert outcome.text.endswith("\n\nYou've completed level 1. Moving to level 2.")
    assert outcome.level_before == 1
    assert outcome.level_after == 2
    assert outcome.advanced is True
    assert service.level_data().title == "Hidden Files"


def test_submit_without_progress(catalog) -> None:
    service = GameService(catalog=catalog)
    outcome = service.submit("ls")
    assert outcome.text == outcome.result.output
    assert outcome.advanced is False


def test_moderator_skip_through_service(catalog) -> None:
    service = GameService(start_level=5, catalog=catalog)
    outcome = service.submit("!skip 21")
    assert outcome.text.endswith("You've been granted access to level 21.")
    assert service.level == 21
    assert service.progress.xp == 200
    assert service.progress.rank == "Hacker"


def test_state_persists_across_levels_within_a_session(catalog) -> None:
    service = GameService(start_level=3, catalog=catalog)
    service.submit("chmod +r locked.txt")
    service.submit("cat locked.txt")
    assert service.level == 4
    assert service.session.flag(3, "permissionsChanged") is True
    assert service.session.command_history == ["chmod +r locked.txt", "cat locked.txt"]


def test_edit_then_save_solves_level10(catalog) -> None:
    service = GameService(start_level=10, catalog=catalog)
    seed = service.edit_seed("script.js")
    assert seed.blocked is None
    assert seed.hint.endswith("Hint: The add function has a bug. It should add numbers, not subtract them.")
    fixed = seed.content.replace("return a - b;", "return a + b;")

    saved = service.save_file("script.js", fixed)
    assert saved.text == "File script.js saved successfully."
    assert service.session.flag(10, "scriptEdited") is True

    outcome = service.submit("node script.js")
    assert outcome.result.output.startswith("Running script.js...\nOutput: 8\n\n")
    assert service.level == 11


def test_edit_seed_blocked_until_prerequisite(catalog) -> None:
    service = GameService(start_level=13, catalog=catalog)
    assert service.edit_seed("regex.js").blocked is not None
    service.submit("cat text.txt")
    assert service.edit_seed("regex.js").content.startswith("// Create a script")


def test_save_file_rejects_bad_names(catalog) -> None:
    service = GameService(catalog=catalog)
    with pytest.raises(ValueError):
        service.save_file("", "x")
    with pytest.raises(ValueError):
        service.save_file("two words.js", "x")


def test_separate_services_do_not_share_state(catalog) -> None:
    first = GameService(catalog=catalog)
    second = GameService(catalog=catalog)
    first.save_file("notes.txt", "private")
    assert second.session.files.get("notes.txt") is None
    assert second.submit("cat notes.txt").text == "cat: notes.txt: No such file or directory"

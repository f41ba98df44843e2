import pytest

from terminalzero.validator import UNBALANCED_CODE, check_syntax, has_validator, validate_level_solution


def test_level10_accepts_fixed_add() -> None:
    result = validate_level_solution(10, "function add(a,b){return a+b;}")
    assert result.is_valid is True
    assert result.meets_requirements is True


def test_level10_ignores_whitespace() -> None:
    result = validate_level_solution(10, "function add(a, b) {\n  return   a +  b;\n}")
    assert result.meets_requirements is True


def test_level10_rejects_subtraction() -> None:
    result = validate_level_solution(10, "function add(a,b){return a-b;}")
    assert result.is_valid is True
    assert result.meets_requirements is False
    assert "should add the numbers" in result.feedback


def test_level10_grades_literal_form_only() -> None:
    result = validate_level_solution(10, "function add(a,b){return b+a;}")
    assert result.is_valid is True
    assert result.meets_requirements is False


def test_unbalanced_code_is_a_syntax_error() -> None:
    result = validate_level_solution(10, "function add(a,b){return a+b")
    assert result.is_valid is False
    assert result.meets_requirements is False
    assert result.feedback.startswith("Your code has a syntax error: ")


@pytest.mark.parametrize(
    "code",
    [
        "function add(a,b){return a+b;}}); (function(){",
        "return a+b;\n}).call(function(){",
        "return a+b;\n}, function(){",
    ],
)
def test_code_that_closes_its_wrapper_is_rejected(code: str) -> None:
    result = validate_level_solution(10, code)
    assert result.is_valid is False
    assert result.meets_requirements is False
    assert result.feedback == f"Your code has a syntax error: {UNBALANCED_CODE}"


@pytest.mark.parametrize(
    "code",
    [
        "var interface = 1;\nfunction add(a,b){return a+b;}",
        "with (Math) { var biggest = max(1, 2); }",
        "var mode = 017;",
        "function pick(a, a) { return a; }",
    ],
)
def test_sloppy_mode_bodies_are_valid(code: str) -> None:
    assert check_syntax(code) is None


def test_empty_code() -> None:
    for code in ("", None):
        result = validate_level_solution(11, code)
        assert result.is_valid is False
        assert result.meets_requirements is False
        assert result.feedback == "No code provided for validation"


def test_check_syntax_accepts_top_level_return_and_require() -> None:
    assert check_syntax("const fs = require('fs');\nreturn fs;") is None
    assert check_syntax("const re = /\\w+@\\w+\\.\\w+/;\n// trailing comment") is None
    assert check_syntax("const = 5;") is not None


def test_level11_reverse() -> None:
    code = "const numbers = [1, 2, 3];\nnumbers.reverse();\nconsole.log(numbers);"
    assert validate_level_solution(11, code).meets_requirements is True
    spaced = "const numbers = [1, 2, 3];\nnumbers . reverse ( );"
    assert validate_level_solution(11, spaced).meets_requirements is True
    missing = "const numbers = [1, 2, 3];\nconsole.log(numbers);"
    result = validate_level_solution(11, missing)
    assert result.meets_requirements is False
    assert "numbers.reverse()" in result.feedback


@pytest.mark.parametrize(
    ("code", "feedback"),
    [
        ("const data = {};", "doesn't use JSON.parse()"),
        ("const data = JSON.parse('{}');", "doesn't read the data.json file"),
        ("const data = JSON.parse(fs.readFileSync('data.json'));", "doesn't look for the admin user"),
        (
            "const data = JSON.parse(fs.readFileSync('data.json'));\nconst u = data.users;",
            "doesn't extract the password",
        ),
    ],
)
def test_level12_first_failing_check_wins(code: str, feedback: str) -> None:
    code = "const fs = require('fs');\n" + code
    result = validate_level_solution(12, code)
    assert result.is_valid is True
    assert result.meets_requirements is False
    assert feedback in result.feedback


def test_level12_complete_script() -> None:
    code = (
        "const fs = require('fs');\n"
        "const data = JSON.parse(fs.readFileSync('data.json', 'utf8'));\n"
        "const admin = data.users.find(u => u.username === 'admin');\n"
        "console.log(admin.password);\n"
    )
    result = validate_level_solution(12, code)
    assert result.meets_requirements is True


def test_level13_patterns() -> None:
    complete = (
        "const text = 'x';\n"
        "const email = text.match(/\\w+@\\w+\\.\\w+/);\n"
        "const phone = text.match(/\\d{3}-\\d{3}-\\d{4}/);\n"
    )
    assert validate_level_solution(13, complete).meets_requirements is True

    no_method = "const email = '@';"
    assert "doesn't appear to use regular expressions" in validate_level_solution(13, no_method).feedback

    email_only = "const email = 'x'.match(/\\w+@\\w+/);"
    assert "phone numbers" in validate_level_solution(13, email_only).feedback

    phone_only = "const phone = 'x'.match(/\\d{3}/);"
    assert "email addresses" in validate_level_solution(13, phone_only).feedback

    neither = "const found = 'x'.match(/abc/);"
    assert "both email and phone" in validate_level_solution(13, neither).feedback


def test_other_levels_only_check_syntax() -> None:
    assert validate_level_solution(14, "for (let i = 1; i <= 10; i++) console.log(i);").feedback == "Code looks good!"
    assert validate_level_solution(14, "for (let i = 1; i <= 10; i++ {").is_valid is False
    assert has_validator(12) is True
    assert has_validator(14) is False

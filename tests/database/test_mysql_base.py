from src.pension_system.pension_system.database.mysql_base import in_clause, like_contains


def test_like_contains_escapes_wildcards():
    assert like_contains("karim") == "%karim%"
    assert like_contains("_") == "%!_%"
    assert like_contains("50%!") == "%50!%!!%"


def test_in_clause_placeholders():
    assert in_clause(["a", "b", "c"]) == ("%s,%s,%s", ["a", "b", "c"])

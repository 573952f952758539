from proptree import lex


def test_spaces_are_dropped():
    assert list(lex("!A -> B | A & C")) == list("!A->B|A&C")


def test_other_characters_pass_through():
    assert list(lex("a\t& 1 | Z(")) == ["a", "\t", "&", "1", "|", "Z", "("]


def test_empty_and_blank_input():
    assert len(lex("")) == 0
    assert len(lex("   ")) == 0

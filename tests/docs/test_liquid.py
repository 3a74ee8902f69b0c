from atlas_docaudit.docs.liquid import (
    check_tag_balance,
    extract_includes,
    extract_language_markers,
    iter_tags,
)


def test_balanced_blocks_have_no_issues():
    text = "{% if a %}\n{%- for x in y -%}\n{% endfor %}\n{% else %}\n{% endif %}\n"
    assert check_tag_balance(text) == []


def test_unclosed_block():
    issues = check_tag_balance("intro\n{% if a %}\ntext\n", start_line=10)
    assert [(i.kind, i.tag, i.line, i.expected) for i in issues] == [("unclosed", "if", 11, "endif")]


def test_unexpected_end():
    issues = check_tag_balance("{% endif %}\n")
    assert [(i.kind, i.tag, i.line) for i in issues] == [("unexpected_end", "endif", 1)]


def test_mismatched_inner_block_is_reported_once():
    issues = check_tag_balance("{% if a %}\n{% for x in y %}\n{% endif %}\n")
    assert [(i.kind, i.tag, i.line, i.expected) for i in issues] == [("mismatched", "for", 2, "endfor")]


def test_raw_region_is_literal():
    text = "{% raw %}\n{% if broken %}\n{% endraw %}\n"
    assert [name for name, _, _ in iter_tags(text)] == ["raw", "endraw"]
    assert check_tag_balance(text) == []


def test_tags_inside_fences_still_count():
    assert len(check_tag_balance("```\n{% if a %}\n```\n")) == 1


def test_extract_includes():
    text = '{% include note.html param="x" %}\n{% include_relative ../a.md %}\n{% include {{ page.x }} %}\n'
    assert [(i.tag, i.file, i.line) for i in extract_includes(text)] == [
        ("include", "note.html", 1),
        ("include_relative", "../a.md", 2),
    ]


def test_extract_language_markers():
    body = "{:.language-java}\n```java\n{:.language-go}\n```\n<div class=\"highlight language-py\">\n`{:.language-rust}`\n"
    markers = extract_language_markers(body)
    assert [(m.language, m.line) for m in markers] == [("java", 1), ("py", 5)]

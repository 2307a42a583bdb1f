"""Tests for agileflow.lib.mdparse module."""

from agileflow.lib.mdparse import (
    checklist,
    fenced_blocks,
    find_placeholders,
    get_section,
    has_content,
    headings,
    list_items,
)

DOC = """# Title

## Description

Some text.

### Detail

More text.

## Definition of Done

- [x] Done thing
- [ ] Open thing
"""


class TestSections:

    def test_section_includes_subsections(self):
        section = get_section(DOC, "Description")
        assert "Some text." in section
        assert "### Detail" in section
        assert "Definition of Done" not in section

    def test_section_case_insensitive_and_aliases(self):
        assert get_section(DOC, "DoD", "definition of done").strip().startswith("- [x]")

    def test_missing_section_is_none(self):
        assert get_section(DOC, "Assumptions") is None

    def test_headings_in_fences_ignored(self):
        text = "## Real\n\n```markdown\n## Fake\n```\n"
        assert [h.title for h in headings(text)] == ["Real"]
        assert "## Fake" in get_section(text, "Real")


class TestFences:

    def test_nested_fence_is_content(self):
        text = "````markdown\n```gherkin\nScenario: x\n```\n````\n\n```gherkin\nScenario: y\n```\n"
        blocks = fenced_blocks(text)
        assert [b.info for b in blocks] == ["markdown", "gherkin"]
        assert "```gherkin" in blocks[0].content
        assert blocks[1].content == "Scenario: y"

    def test_unterminated_fence_runs_to_end(self):
        blocks = fenced_blocks("```gherkin\nScenario: x\n")
        assert len(blocks) == 1
        assert blocks[0].content == "Scenario: x"


class TestLists:

    def test_checklist(self):
        assert checklist(get_section(DOC, "Definition of Done")) == [
            (True, "Done thing"),
            (False, "Open thing"),
        ]

    def test_list_items_skip_comments_and_fences(self):
        section = "- one\n<!-- - hidden -->\n```\n- code\n```\n1. two\n"
        assert list_items(section) == ["one", "two"]


class TestPlaceholders:

    def test_bracket_tokens(self):
        assert find_placeholders("Fix [describe the bug] now") == ["[describe the bug]"]

    def test_checkboxes_and_links_are_not_placeholders(self):
        text = "- [ ] item\n- [x] done\nSee [the docs](https://example.com) and [ref][1]."
        assert find_placeholders(text) == []

    def test_other_markers(self):
        assert find_placeholders("{{title}} TODO: later, owner TBD") == ["{{title}}", "TODO:", "TBD"]

    def test_inline_code_ignored(self):
        assert find_placeholders("Use `[name]` syntax") == []

    def test_skip_fences(self):
        text = "Text\n```\n[inside]\n```\n"
        assert find_placeholders(text) == ["[inside]"]
        assert find_placeholders(text, skip_fences=True) == []

    def test_distinct(self):
        assert find_placeholders("[a b] and [a b]") == ["[a b]"]


class TestHasContent:

    def test_placeholders_only(self):
        assert not has_content("[Who is the user?]\n")

    def test_comment_and_bare_markers(self):
        assert not has_content("<!-- fill me -->\n- \n")

    def test_none(self):
        assert not has_content(None)

    def test_real_text(self):
        assert has_content("Analysts on the finance team.")

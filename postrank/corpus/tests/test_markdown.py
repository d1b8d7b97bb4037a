from postrank.corpus.markdown import (
    extract_title,
    markdown_to_plain_text,
    parse_frontmatter,
)


def test_headings_links_and_emphasis_are_stripped():
    markdown = (
        "## Writing a **fast** [parser](http://example.com)\n"
        "\n"
        "Some *emphasis*, `inline code` and ![a diagram](img.png).\n"
    )

    text = markdown_to_plain_text(markdown)

    assert text == (
        "Writing a fast parser\n"
        "\n"
        "Some emphasis, inline code and a diagram."
    )


def test_code_fence_content_kept_without_fences():
    markdown = "Title\n\n```csharp\nvar x = 1;\n```\n"

    assert markdown_to_plain_text(markdown) == "Title\n\nvar x = 1;"


def test_intraword_underscores_survive():
    assert markdown_to_plain_text("call my_func_name now") == "call my_func_name now"


def test_lists_quotes_and_rules():
    markdown = "> quoted\n\n- one\n- two\n\n---\n\n1. first\n"

    assert markdown_to_plain_text(markdown) == "quoted\n\none\ntwo\n\nfirst"


def test_setext_heading_and_reference_links():
    markdown = "My Title\n========\n\nSee [docs][1].\n\n[1]: http://example.com\n"

    assert markdown_to_plain_text(markdown) == "My Title\n\nSee docs."


def test_html_tags_removed():
    assert markdown_to_plain_text("<p>Hello <b>there</b></p>") == "Hello there"


def test_frontmatter_removed_and_parsed():
    markdown = "---\ntags: [a, b]\n---\nBody text\n"

    frontmatter, remaining = parse_frontmatter(markdown)

    assert frontmatter == {"tags": ["a", "b"]}
    assert remaining == "Body text\n"
    assert markdown_to_plain_text(markdown) == "Body text"


def test_invalid_frontmatter_ignored():
    frontmatter, _ = parse_frontmatter("---\n: [unclosed\n---\nBody\n")
    assert frontmatter == {}


def test_windows_line_endings():
    assert markdown_to_plain_text("## Title\r\n\r\nBody\r\n") == "Title\n\nBody"


def test_extract_title_skips_blank_lines():
    assert extract_title("\n\n  First line  \nsecond") == "First line"
    assert extract_title("   \n") == ""

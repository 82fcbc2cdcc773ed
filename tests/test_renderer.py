"""Tests for cursor-aware rendering."""

from marginalia.markdown import (
    cursor_touches,
    parse_markdown,
    render,
    tokenize,
    wiki_link_base,
)


def html(text, cursor=-1, titles=None, **kwargs):
    return parse_markdown(text, cursor, titles, **kwargs).html


def test_bold_formatted_without_cursor():
    assert render(tokenize("**bold**"), -1) == "<strong>bold</strong>"


def test_bold_raw_under_cursor():
    assert render(tokenize("**bold**"), 2) == "**bold**"


def test_wiki_link_raw_under_cursor():
    assert html("[[entry-123]]", 5) == "[[entry-123]]"


def test_cursor_at_span_edges_is_inclusive():
    text = "**bold** text"
    assert html(text, 0) == "<p>**bold** text</p>"
    assert html(text, 8) == "<p>**bold** text</p>"
    assert html(text, 9) == "<p><strong>bold</strong> text</p>"


def test_heading_cursor_after_newline_is_next_line():
    text = "# Title\nmore"
    assert html(text, 7) == "# Title\n<p>more</p>"
    assert html(text, 8) == "<h1>Title</h1><p>more</p>"


def test_heading_without_newline_inclusive_end():
    assert html("# Title", 7) == "# Title"


def test_adjacent_inline_tokens_share_boundary():
    assert html("**a**`b`", 5) == "**a**`b`"


def test_negative_cursor_means_none():
    assert html("**a**", -5) == "<strong>a</strong>"


def test_cursor_touches():
    token = tokenize("**bold**")[0]
    assert cursor_touches(token, 0)
    assert cursor_touches(token, 8)
    assert not cursor_touches(token, 9)
    assert not cursor_touches(token, -1)


def test_block_tokens():
    assert html("# One\n## Two") == "<h1>One</h1><h2>Two</h2>"
    assert html("- a\n- b") == "<li>a</li><li>b</li>"
    assert html("> wise words") == "<blockquote>wise words</blockquote>"
    assert html("---") == "<hr>"


def test_code_block_rendering():
    out = html("```python\nx = 1 < 2\n```\nafter")
    assert out == '<pre><code class="language-python">x = 1 &lt; 2</code></pre><p>after</p>'
    assert html("```\nplain\n```") == "<pre><code>plain</code></pre>"


def test_inline_rendering():
    assert html("a *b* ~~c~~ `d`") == "<p>a <em>b</em> <del>c</del> <code>d</code></p>"
    assert html("[Ex](https://example.com)") == '<a href="https://example.com">Ex</a>'


def test_html_is_escaped():
    assert html("<script>&") == "<p>&lt;script&gt;&amp;</p>"
    assert html("a \"b\" 'c'") == "<p>a &quot;b&quot; &#039;c&#039;</p>"


def test_raw_mode_is_escaped():
    assert html("**<b>**", 0) == "**&lt;b&gt;**"


def test_wiki_link_label_priority():
    titles = {"abc": "Resolved Title"}
    assert html("[[abc]]", titles=titles) == (
        '<a href="/entries/abc" class="wiki-link">Resolved Title</a>'
    )
    assert html("[[abc|Shown]]", titles=titles) == (
        '<a href="/entries/abc" class="wiki-link">Shown</a>'
    )
    assert html("[[abc]]") == '<a href="/entries/abc" class="wiki-link">abc</a>'


def test_wiki_link_title_is_escaped():
    out = html("[[abc]]", titles={"abc": "<Tom & Jerry>"})
    assert "&lt;Tom &amp; Jerry&gt;" in out


def test_wiki_link_base():
    assert wiki_link_base("Team Notes") == "/wiki/team-notes"
    out = html("[[abc]]", link_base=wiki_link_base("Team Notes"))
    assert 'href="/wiki/team-notes/abc"' in out


def test_plain_text_paragraph():
    assert html("single * asterisk") == "<p>single * asterisk</p>"


def test_blank_run_is_not_wrapped():
    assert html("---\n\n") == "<hr>\n"


def test_rendering_is_deterministic():
    text = "# T\nSome **b** and [[x|y]]\n- item\n"
    assert html(text, 12) == html(text, 12)


def test_parse_markdown_returns_tokens():
    result = parse_markdown("**a** b")
    assert [t.type for t in result.tokens] == ["bold", "text"]
    assert result.html == "<p><strong>a</strong> b</p>"


def test_only_plain_text_runs_become_paragraphs():
    assert html("**a** **b**") == "<strong>a</strong> <strong>b</strong>"
    assert html("Check [[x]] out.") == (
        '<p>Check <a href="/entries/x" class="wiki-link">x</a> out.</p>'
    )
    assert html("# H\n*e*\n") == "<h1>H</h1><em>e</em>\n"

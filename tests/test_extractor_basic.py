from promptfeed.extractor import classify, extract, find_image, scan_fence, LineKind
from promptfeed.models import SourceDescriptor


SRC = SourceDescriptor(name="t", url="https://host/dir/readme.md", default_attribution="someone")


def test_one_record_per_heading_in_order():
    md = "\n".join([
        "## First",
        "> prompt one",
        "### Second",
        "```",
        "prompt two",
        "```",
        "#### Third",
        "![x](https://cdn/x.png)",
    ])
    out = extract(md, SRC)
    assert [r.title for r in out] == ["First", "Second", "Third"]
    assert out[0].body == "prompt one"
    assert out[1].body == "prompt two"
    assert out[2].preview == "https://cdn/x.png"
    assert out[2].body == ""


def test_heading_without_content_is_dropped():
    md = "## Empty\njust prose\n## Kept\n> hi\n## Trailing empty\n"
    out = extract(md, SRC)
    assert [r.title for r in out] == ["Kept"]


def test_lines_before_first_heading_and_top_level_heading_ignored():
    md = "# Awesome prompts\n![banner](banner.png)\n> intro quote\n## Real\n> body\n"
    out = extract(md, SRC)
    assert len(out) == 1
    assert out[0].title == "Real"
    assert out[0].preview == ""


def test_relative_image_resolved_against_document_dir():
    out = extract("## A\n![x](img.png)\n", SRC)
    assert out[0].preview == "https://host/dir/img.png"


def test_relative_image_variants():
    assert extract("## A\n![x](./a/b.png)\n", SRC)[0].preview == "https://host/dir/a/b.png"
    assert extract("## A\n![x](/b.png)\n", SRC)[0].preview == "https://host/dir/b.png"
    assert extract("## A\n![x](//cdn/b.png)\n", SRC)[0].preview == "https://cdn/b.png"
    assert extract('## A\n<img width="300" src="images/c.jpg">\n', SRC)[0].preview == "https://host/dir/images/c.jpg"


def test_preview_is_first_image_only():
    md = "## A\n![one](https://x/1.png)\n![two](https://x/2.png)\n<img src='https://x/3.png'>\n"
    assert extract(md, SRC)[0].preview == "https://x/1.png"


def test_markdown_image_preferred_over_html_on_same_line():
    line = '<img src="https://x/html.png"> ![md](https://x/md.png)'
    assert find_image(line) == "https://x/md.png"
    assert find_image('![t](https://x/a.png "caption")') == "https://x/a.png"
    assert find_image("no image here") is None


def test_two_fenced_blocks_joined_by_blank_line():
    md = "## A\n```\nfoo\n```\ntext\n```text\nbar\n```\n"
    assert extract(md, SRC)[0].body == "foo\n\nbar"


def test_contiguous_quote_lines_single_newline():
    md = "## A\n> line1\n> line2\n"
    assert extract(md, SRC)[0].body == "line1\nline2"


def test_separate_quote_runs_and_fences_are_separate_paragraphs():
    md = "## A\n```\ncode\n```\n> q1\n>\n> q2\n\n> q3\n"
    assert extract(md, SRC)[0].body == "code\n\nq1\nq2\n\nq3"


def test_fence_content_is_verbatim_and_not_scanned():
    md = "## A\n```\n  ## not a heading\n  > not a quote\n```\n"
    out = extract(md, SRC)
    assert len(out) == 1
    assert out[0].body == "## not a heading\n  > not a quote"


def test_blank_fence_adds_nothing():
    md = "## A\n```\n   \n```\n## B\n```\nx\n```\n"
    assert [r.title for r in extract(md, SRC)] == ["B"]


def test_unclosed_fence_runs_to_end():
    lines = ["```", "a", "b"]
    assert scan_fence(lines, 0, "```") == ("a\nb", 3)
    out = extract("## A\n```\nstill open\n## swallowed", SRC)
    assert len(out) == 1
    assert out[0].body == "still open\n## swallowed"


def test_tilde_fence_closes_only_on_tilde():
    md = "## A\n~~~\nx\n```\ny\n~~~\n"
    assert extract(md, SRC)[0].body == "x\n```\ny"


def test_defaults_come_from_source():
    src = SourceDescriptor(
        name="gh",
        url="https://raw.githubusercontent.com/o/r/refs/heads/master/README.md",
        default_attribution="o",
        mode="generate",
        category="art",
        sub_category="poster",
    )
    rec = extract("## T\n> p\n", src)[0]
    assert rec.attribution == "o"
    assert rec.origin_link == "https://github.com/o/r/blob/master/README.md"
    assert (rec.mode, rec.category, rec.sub_category) == ("generate", "art", "poster")


def test_duplicate_titles_are_kept():
    md = "## Same\n> a\n## Same\n> b\n"
    assert [r.body for r in extract(md, SRC)] == ["a", "b"]


def test_extraction_is_idempotent():
    md = "## A\r\n![x](a.png)\r\n```\r\nfoo\r\n```\r\n## B\r\n> q\r\n"
    assert extract(md, SRC) == extract(md, SRC)
    assert extract(md, SRC)[0].body == "foo"


def test_degenerate_input_yields_nothing():
    assert extract("", SRC) == []
    assert extract(None, SRC) == []
    assert extract("##\n> orphan body\n", SRC) == []


def test_classify():
    assert classify("## x") is LineKind.HEADING
    assert classify("# x") is LineKind.OTHER
    assert classify("```python") is LineKind.FENCE_OPEN
    assert classify("> q") is LineKind.QUOTE
    assert classify("plain") is LineKind.OTHER


def test_image_destination_with_space_is_not_truncated():
    assert find_image("![x](my image.png)") == "my image.png"
    assert find_image("![x](my image.png 'caption')") == "my image.png"
    assert find_image("![x](<a b.png>)") == "a b.png"
    assert extract("## A\n![x](my image.png)\n", SRC)[0].preview == "https://host/dir/my image.png"

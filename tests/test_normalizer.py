"""Tests for markup splitting, section classification and symbol extraction."""

from datetime import datetime

import pytest

from pkgdocs_mcp.docs.models import ContentFormat, RawFetchResult, ResolutionKey, SectionLabel, SourceKind
from pkgdocs_mcp.docs.parsing import SectionNormalizer, SectionPolicy, match_signature, to_plain_sections



def _raw(content: str, content_format: ContentFormat = ContentFormat.MARKDOWN) -> RawFetchResult:
    return RawFetchResult(
        content=content,
        source_kind=SourceKind.REGISTRY_API,
        source_name="registry",
        content_format=content_format,
        fetched_at=datetime(2024, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def normalizer():
    return SectionNormalizer()


@pytest.fixture
def key():
    return ResolutionKey.build("npm", "mylib")


def test_readme_yields_description_and_usage_only(normalizer, key, mylib_readme) -> None:
    doc = normalizer.normalize(_raw(mylib_readme), key)

    assert [s.label for s in doc.sections] == [SectionLabel.DESCRIPTION, SectionLabel.USAGE]
    assert doc.sections[0].body == "A short description."
    assert "import mylib" in doc.sections[1].body
    assert "```" in doc.sections[1].body
    assert not any("MIT" in s.body or "License" in s.heading for s in doc.sections)
    assert doc.degraded is False
    assert [s.order for s in doc.sections] == [0, 1]


def test_boilerplate_subsections_are_dropped_with_parent(normalizer, key) -> None:
    content = (
        "Intro text.\n\n"
        "## Contributing\nOpen a PR.\n\n"
        "### Code style\nUse black.\n\n"
        "## Features\nFast.\n"
    )

    doc = normalizer.normalize(_raw(content), key)

    assert [(s.label, s.heading) for s in doc.sections] == [
        (SectionLabel.DESCRIPTION, ""),
        (SectionLabel.OTHER, "Features"),
    ]


@pytest.mark.parametrize(
    "heading",
    ["Table of Contents", "Contents", "TOC", "Code of Conduct", "Release Notes", "Support", "Running tests"],
)
def test_navigation_and_project_headings_are_dropped(normalizer, key, heading) -> None:
    content = f"Intro.\n\n## {heading}\n- [Usage](#usage)\n\n## Features\nFast.\n"

    doc = normalizer.normalize(_raw(content), key)

    assert [s.heading for s in doc.sections] == ["", "Features"]


def test_reference_heading_is_api(normalizer, key) -> None:
    content = (
        "Intro.\n\n"
        "## Table of Contents\n- [Usage](#usage)\n\n"
        "## Reference\nconnect(host, port)\n"
    )

    doc = normalizer.normalize(_raw(content), key)

    assert [(s.label, s.heading) for s in doc.sections] == [
        (SectionLabel.DESCRIPTION, ""),
        (SectionLabel.API, "Reference"),
    ]
    assert [s.name for s in doc.symbols] == ["connect"]


def test_generic_words_inside_longer_headings_are_kept(normalizer, key) -> None:
    content = (
        "Intro.\n\n"
        "## API Support\nconnect(host)\n\n"
        "## TypeScript support\nTypes are bundled.\n\n"
        "## Testing utilities\nUse the mock transport.\n\n"
        "## Security\nReport privately.\n"
    )

    doc = normalizer.normalize(_raw(content), key)

    assert [(s.label, s.heading) for s in doc.sections] == [
        (SectionLabel.DESCRIPTION, ""),
        (SectionLabel.API, "API Support"),
        (SectionLabel.OTHER, "TypeScript support"),
        (SectionLabel.OTHER, "Testing utilities"),
    ]


def test_subheadings_inherit_api_and_symbols_are_extracted(normalizer, key) -> None:
    content = (
        "# mylib\n\nHTTP helpers.\n\n"
        "## API\n\n"
        "### connect(host, port)\nOpens a connection.\n\n"
        "### `close()`\nCloses it.\n\n"
        "Also see `retry(times: int) -> None` and `connect(url)`.\n"
    )

    doc = normalizer.normalize(_raw(content), key)

    labels = [s.label for s in doc.sections]
    assert labels == [SectionLabel.DESCRIPTION, SectionLabel.API, SectionLabel.API]
    names = [s.name for s in doc.symbols]
    assert names == ["connect", "close", "retry"]
    connect = doc.symbols[0]
    assert connect.signature == "connect(host, port)"
    assert doc.sections[connect.section_index].heading == "connect(host, port)"


def test_example_requires_fenced_code(normalizer, key) -> None:
    content = (
        "Intro.\n\n"
        "## Examples\nSee the website.\n\n"
        "## Demo\n```js\nmylib.run()\n```\n"
    )

    doc = normalizer.normalize(_raw(content), key)

    assert [(s.heading, s.label) for s in doc.sections] == [
        ("", SectionLabel.DESCRIPTION),
        ("Examples", SectionLabel.OTHER),
        ("Demo", SectionLabel.EXAMPLE),
    ]


def test_first_unlabeled_section_is_description_without_preamble(normalizer, key) -> None:
    content = "## Overview\nDoes things.\n\n## Installation\nnpm i mylib\n"

    doc = normalizer.normalize(_raw(content), key)

    assert [s.label for s in doc.sections] == [SectionLabel.DESCRIPTION, SectionLabel.OTHER]


def test_headings_inside_code_fences_do_not_split(normalizer, key) -> None:
    content = "## Usage\n```bash\n# install\npip install mylib\n```\n"

    doc = normalizer.normalize(_raw(content), key)

    assert len(doc.sections) == 1
    assert "# install" in doc.sections[0].body


def test_badges_and_comments_are_removed() -> None:
    content = (
        "[![Build](https://ci/badge.svg)](https://ci) <!-- hidden -->\n"
        "Real intro.\n"
    )

    blocks = to_plain_sections(content, ContentFormat.MARKDOWN)

    assert blocks[0].body == "Real intro."


def test_setext_headings_are_recognized() -> None:
    content = "Title\n=====\n\nIntro.\n\nUsage\n-----\nrun()\n"

    blocks = to_plain_sections(content, ContentFormat.MARKDOWN)

    assert [(b.heading, b.level) for b in blocks] == [("", 0), ("Title", 1), ("Usage", 2)]
    assert blocks[2].body == "run()"


def test_empty_content_is_degraded(normalizer, key) -> None:
    doc = normalizer.normalize(_raw("## License\nMIT\n"), key)

    assert doc.degraded is True
    assert len(doc.sections) == 1
    assert doc.sections[0].label == SectionLabel.OTHER
    assert "No usable documentation" in doc.sections[0].body
    assert doc.symbols == ()


def test_normalization_is_deterministic(normalizer, key, mylib_readme) -> None:
    raw = _raw(mylib_readme)

    first = normalizer.normalize(raw, key)
    second = normalizer.normalize(raw, key)

    assert first == second
    assert first.to_dict() == second.to_dict()
    assert first.cached_at == raw.fetched_at


def test_pydoc_text_output(normalizer) -> None:
    content = (
        "Help on package mylib:\n"
        "\n"
        "NAME\n"
        "    mylib - Tiny client library.\n"
        "\n"
        "DESCRIPTION\n"
        "    Longer description here.\n"
        "\n"
        "PACKAGE CONTENTS\n"
        "    core\n"
        "\n"
        "FUNCTIONS\n"
        "    connect(host, port)\n"
        "        Open a connection.\n"
        "\n"
        "VERSION\n"
        "    1.0\n"
    )
    key = ResolutionKey.build("python", "mylib")

    doc = normalizer.normalize(_raw(content, ContentFormat.TEXT), key)

    assert doc.sections[0].label == SectionLabel.DESCRIPTION
    assert doc.sections[0].body == "mylib - Tiny client library.\n\nLonger description here."
    api = doc.sections_with_label(SectionLabel.API)
    assert len(api) == 1
    assert api[0].heading == "Functions"
    assert api[0].body.startswith("connect(host, port)")
    assert [s.name for s in doc.symbols] == ["connect"]


def test_pydoc_symbol_output_extracts_symbols_from_all_sections(normalizer) -> None:
    content = (
        "Help on function get in module requests.api:\n"
        "\n"
        "get(url, params=None, **kwargs)\n"
        "    Sends a GET request.\n"
    )
    key = ResolutionKey.build("python", "requests", symbol="get")

    doc = normalizer.normalize(_raw(content, ContentFormat.TEXT), key)

    assert doc.sections[0].label == SectionLabel.DESCRIPTION
    assert [s.name for s in doc.symbols] == ["get"]
    assert doc.symbols[0].signature == "get(url, params=None, **kwargs)"


def test_html_page(normalizer) -> None:
    html = (
        "<html><head><style>p {}</style></head><body>"
        "<nav>menu</nav>"
        "<main><h1>netclient</h1><p>Fast client.</p>"
        "<h2>API</h2><pre>connect(host, port)</pre>"
        "<h2>License</h2><p>MIT</p></main>"
        "</body></html>"
    )
    key = ResolutionKey.build("rust", "netclient")

    doc = normalizer.normalize(_raw(html, ContentFormat.HTML), key)

    assert [(s.label, s.heading) for s in doc.sections] == [
        (SectionLabel.DESCRIPTION, "netclient"),
        (SectionLabel.API, "API"),
    ]
    assert doc.sections[0].body == "Fast client."
    assert doc.sections[1].body == "```\nconnect(host, port)\n```"
    assert [s.name for s in doc.symbols] == ["connect"]
    assert all("menu" not in s.body for s in doc.sections)


def test_custom_policy_patterns(key) -> None:
    policy = SectionPolicy(boilerplate=(r"\bfaq\b",))
    normalizer = SectionNormalizer(policy)

    doc = normalizer.normalize(_raw("Intro.\n\n## FAQ\nq\n\n## License\nMIT\n"), key)

    assert [s.heading for s in doc.sections] == ["", "License"]


@pytest.mark.parametrize(
    "line,name",
    [
        ("func (d *Decoder) Decode(v any) error", "Decode"),
        ("func Marshal(v any) ([]byte, error)", "Marshal"),
        ("async def fetch(url: str) -> bytes:", "fetch"),
        ("pub fn from_str(s: &str) -> Result<Value>", "from_str"),
        ("type Decoder struct {", "Decoder"),
        ("class Session(SessionRedirectMixin)", "Session"),
        ("axios.get(url[, config])", "get"),
        ("requests.get = get(url, params=None, **kwargs)", "get"),
    ],
)
def test_signature_shapes(line, name) -> None:
    found = match_signature(line)

    assert found is not None
    assert found[0] == name


@pytest.mark.parametrize("line", ["if (ready) {", "Returns the value (in seconds).", "", "# comment()"])
def test_non_signatures(line) -> None:
    assert match_signature(line) is None

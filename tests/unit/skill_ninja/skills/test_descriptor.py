from skill_ninja.skills.descriptor import (
    directory_name_for,
    parse_descriptor,
    shorten_description,
    split_metadata_block,
)


def test_descriptor_without_metadata_block_uses_directory_name() -> None:
    fallback = directory_name_for("skills/foo/SKILL.md")
    metadata = parse_descriptor("# Foo\n\nJust instructions.\n", fallback)

    assert metadata.name == "foo"
    assert metadata.description == ""
    assert metadata.categories == []


def test_parses_name_description_and_categories() -> None:
    text = (
        "---\n"
        "name: pdf-tools\n"
        "description: Extract text and tables from PDF files\n"
        "categories: [documents, 'pdf', \"documents\"]\n"
        "---\n"
        "Body\n"
    )

    metadata = parse_descriptor(text, "fallback")

    assert metadata.name == "pdf-tools"
    assert metadata.description == "Extract text and tables from PDF files"
    assert metadata.categories == ["documents", "pdf"]


def test_empty_fields_do_not_read_the_next_line() -> None:
    metadata = parse_descriptor("---\nname:\ndescription:\ncategories: [x]\n---\n", "fallback")

    assert metadata.name == "fallback"
    assert metadata.description == ""
    assert metadata.categories == ["x"]


def test_quoted_descriptions() -> None:
    double = parse_descriptor('---\nname: a\ndescription: "Use: when needed"\n---\n', "a")
    single = parse_descriptor("---\nname: b\ndescription: 'It''s handy'\n---\n", "b")

    assert double.description == "Use: when needed"
    assert single.description == "It's handy"


def test_block_scalar_description_is_empty() -> None:
    metadata = parse_descriptor("---\nname: a\ndescription: >\n  folded text\n---\n", "a")

    assert metadata.description == ""


def test_missing_name_falls_back_to_directory() -> None:
    metadata = parse_descriptor("---\ndescription: Something\n---\n", "dir-name")

    assert metadata.name == "dir-name"
    assert metadata.description == "Something"


def test_invalid_yaml_still_yields_fields() -> None:
    text = "---\nname: broken\ndescription: has: colons: everywhere\nkey: [unclosed\n---\n"

    metadata = parse_descriptor(text, "x")

    assert metadata.name == "broken"
    assert metadata.description == "has: colons: everywhere"


def test_unterminated_block_is_treated_as_absent() -> None:
    block, body = split_metadata_block("---\nname: nope\n")

    assert block is None
    assert body == "---\nname: nope\n"


def test_crlf_line_endings() -> None:
    metadata = parse_descriptor("---\r\nname: win\r\ndescription: Windows file\r\n---\r\n", "x")

    assert metadata.name == "win"
    assert metadata.description == "Windows file"


def test_directory_name_for_root_level_file() -> None:
    assert directory_name_for("SKILL.md") == "Unknown"
    assert directory_name_for("a\\b\\SKILL.md") == "b"


def test_shorten_description() -> None:
    short = "Fits easily."
    assert shorten_description(short) == short

    sentence = "Extract text from PDFs. " + "More detail " * 10
    assert shorten_description(sentence) == "Extract text from PDFs."

    japanese = "PDFを扱います。" + "詳細" * 50
    assert shorten_description(japanese) == "PDFを扱います。"

    long_word = "x" * 120
    assert shorten_description(long_word) == "x" * 80 + "..."

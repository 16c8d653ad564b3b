from chatify.semantic import MAX_CHUNK_CHARS, chunk_file


def test_generic_small_file_is_one_chunk():
    chunks = chunk_file("/p/a.py", "import os\n\nprint(os.name)\n")
    assert len(chunks) == 1
    chunk = chunks[0]
    assert chunk.path == "/p/a.py"
    assert (chunk.start_line, chunk.end_line) == (1, 4)
    assert chunk.content == "import os\n\nprint(os.name)\n"


def test_generic_greedy_split_by_budget():
    lines = ["x" * 9] * 10  # each line costs 10 chars
    chunks = chunk_file("a.txt", "\n".join(lines), max_chars=30)
    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 3), (4, 6), (7, 9), (10, 10)]
    assert all(len(c.content) <= 30 for c in chunks)


def test_generic_oversized_line_gets_own_chunk():
    text = "short\n" + "y" * 50 + "\nafter"
    chunks = chunk_file("a.txt", text, max_chars=20)
    assert [c.content for c in chunks] == ["short", "y" * 50, "after"]
    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 1), (2, 2), (3, 3)]


def test_markdown_front_matter_and_sections():
    text = "\n".join(
        [
            "---",
            "title: Doc",
            "---",
            "intro",
            "# One",
            "first",
            "## Two",
            "second",
        ]
    )
    chunks = chunk_file("README.md", text)
    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 3), (4, 4), (5, 6), (7, 8)]
    assert chunks[0].content == "---\ntitle: Doc\n---"
    assert chunks[2].content == "# One\nfirst"
    assert chunks[3].content == "## Two\nsecond"


def test_markdown_unclosed_front_matter_is_plain_section():
    chunks = chunk_file("a.mdx", "---\nnot closed\n# H\nbody")
    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 2), (3, 4)]


def test_markdown_large_section_splits_on_paragraphs():
    para = "word " * 4  # 20 chars per line
    text = "\n".join(["# Big", para, para, "", para, para, "", para])
    chunks = chunk_file("doc.md", text, max_chars=50)

    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 4), (5, 7), (8, 8)]
    assert chunks[0].content.startswith("# Big")
    assert all(len(c.content) <= 70 for c in chunks)


def test_markdown_oversized_paragraph_hard_split():
    line = "z" * 15
    text = "\n".join(["# H"] + [line] * 6)
    chunks = chunk_file("doc.md", text, max_chars=40)
    # whole section is one paragraph: split on lines at (len + 1) cost
    assert [(c.start_line, c.end_line) for c in chunks] == [(1, 3), (4, 5), (6, 7)]
    assert all(len(c.content) <= 40 for c in chunks)


def test_default_budget():
    assert MAX_CHUNK_CHARS == 6000
    text = "\n".join(["a" * 99] * 120)  # 100 chars per line
    chunks = chunk_file("big.txt", text)
    assert len(chunks) == 2
    assert chunks[0].end_line == 60

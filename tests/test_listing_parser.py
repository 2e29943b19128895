from scpdeck.domain.listing import EntryKind, RemoteEntry, build_listing_command, parse_line, parse_listing


def test_listing_directory_first():
    output = "-rw-r--r--  1 u g 10 Jan 1 00:00 a.txt\ndrwxr-xr-x 2 u g 64 Jan 1 00:00 sub/"

    entries = parse_listing(output)

    assert entries == [
        RemoteEntry(name="sub", kind=EntryKind.DIRECTORY),
        RemoteEntry(name="a.txt", kind=EntryKind.FILE),
    ]


def test_short_lines_and_total_are_skipped():
    output = "\n".join(
        [
            "total 24",
            "",
            "-rw-r--r-- 1 u g 10 Jan 1 a.txt",
            "garbage",
            "-rw-r--r-- 1 u g 10 Jan 1 00:00 b.txt",
        ]
    )

    assert [entry.name for entry in parse_listing(output)] == ["b.txt"]


def test_names_with_spaces_are_kept():
    entry = parse_line("-rw-r--r-- 1 u g 10 Jan 1 00:00 my holiday photo.jpg")

    assert entry.name == "my holiday photo.jpg"
    assert entry.kind == EntryKind.FILE


def test_type_markers():
    assert parse_line("drwxr-xr-x 2 u g 64 Jan 1 00:00 ./") == RemoteEntry(".", EntryKind.DIRECTORY)
    assert parse_line("lrwxrwxrwx 1 u g 7 Jan 1 00:00 latest@ -> v2/").kind == EntryKind.DIRECTORY
    assert parse_line("lrwxrwxrwx 1 u g 7 Jan 1 00:00 latest@ -> v2/").name == "latest"
    assert parse_line("lrwxrwxrwx 1 u g 7 Jan 1 00:00 current -> releases/7/") == RemoteEntry("current", EntryKind.DIRECTORY)
    # "@" on a non-link: the permissions decide
    assert parse_line("-rw-r--r-- 1 u g 7 Jan 1 00:00 odd@").kind == EntryKind.FILE
    assert parse_line("-rwxr-xr-x 1 u g 7 Jan 1 00:00 run.sh*").name == "run.sh*"


def test_sort_is_case_insensitive_within_groups():
    output = "\n".join(
        [
            "-rw-r--r-- 1 u g 1 Jan 1 00:00 beta",
            "-rw-r--r-- 1 u g 1 Jan 1 00:00 Alpha",
            "drwxr-xr-x 2 u g 1 Jan 1 00:00 zeta/",
            "drwxr-xr-x 2 u g 1 Jan 1 00:00 Docs/",
        ]
    )

    assert [entry.name for entry in parse_listing(output)] == ["Docs", "zeta", "Alpha", "beta"]


def test_listing_command_for_home_paths():
    assert build_listing_command("~") == "cd ~ && ls -laF --group-directories-first '.' 2>/dev/null"
    assert (
        build_listing_command("~/My Files")
        == "cd ~ && ls -laF --group-directories-first 'My Files' 2>/dev/null"
    )


def test_listing_command_quotes_absolute_paths():
    assert build_listing_command("/srv/it's") == "ls -laF --group-directories-first '/srv/it'\\''s' 2>/dev/null"

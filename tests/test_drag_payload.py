import pytest

from scpdeck.core.exceptions import PayloadError
from scpdeck.domain.listing import EntryKind, RemoteEntry
from scpdeck.domain.transfer import decode_drag_payload, encode_remote_payload


def test_remote_items():
    payload = decode_drag_payload('{"items": [{"name": "logs", "dir": true}, {"name": "a.txt", "dir": false}]}')

    assert payload.is_remote
    assert payload.entries == [RemoteEntry("logs", EntryKind.DIRECTORY), RemoteEntry("a.txt", EntryKind.FILE)]


def test_local_file_urls_and_paths():
    payload = decode_drag_payload(
        '{"paths": ["file:///Users/al/My%20Docs/a.txt", "file://localhost/tmp/b", "/tmp/c"]}'
    )

    assert not payload.is_remote
    assert payload.paths == ["/Users/al/My Docs/a.txt", "/tmp/b", "/tmp/c"]


def test_encode_matches_decode():
    entries = [RemoteEntry("sub", EntryKind.DIRECTORY)]

    assert decode_drag_payload(encode_remote_payload(entries)).entries == entries


@pytest.mark.parametrize(
    "data",
    [
        "not json",
        "[1, 2]",
        '{"other": []}',
        '{"items": [{"dir": true}]}',
        '{"paths": [42]}',
        '{"paths": ["file://server/share/x"]}',
        '{"items": [{"name": "..", "dir": true}]}',
        '{"items": [{"name": ".", "dir": true}]}',
    ],
)
def test_invalid_payloads(data):
    with pytest.raises(PayloadError):
        decode_drag_payload(data)


def test_empty_lists():
    assert decode_drag_payload('{"items": []}').is_empty

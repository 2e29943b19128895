import asyncio

import pytest

from scpdeck.core.exceptions import TransferBusyError
from scpdeck.domain.listing import EntryKind, RemoteEntry
from scpdeck.domain.listing.parser import parse_line
from scpdeck.domain.session import SessionResult
from scpdeck.domain.transfer import TaskStatus, TransferService
from fakes import FakeConfirm


def _files(*names):
    return [RemoteEntry(name, EntryKind.FILE) for name in names]


def test_download_batch_continues_after_failure(runner, executor, context, tmp_path):
    def scp(argv):
        if argv[-2].endswith("/b.txt"):
            return SessionResult(exit_code=1, stderr="scp: /srv/b.txt: Permission denied\n")
        return SessionResult(exit_code=0)

    runner.handler = scp
    refreshes = []
    service = TransferService(executor, confirmation=FakeConfirm())

    batch = asyncio.run(
        service.download(
            context,
            _files("a.txt", "b.txt", "c.txt"),
            "/srv",
            str(tmp_path),
            on_refresh=lambda: refreshes.append(1),
        )
    )

    assert [status.state for status in batch.statuses] == [
        TaskStatus.SUCCEEDED,
        TaskStatus.FAILED,
        TaskStatus.SUCCEEDED,
    ]
    assert "Permission denied" in batch.statuses[1].message
    assert len(refreshes) == 2
    assert [argv[-2] for argv in runner.argv_for("scp")] == [
        "alice@files.example.com:/srv/a.txt",
        "alice@files.example.com:/srv/b.txt",
        "alice@files.example.com:/srv/c.txt",
    ]
    assert service.is_transferring is False


def test_symlinked_directory_is_copied_recursively(runner, executor, context, tmp_path):
    runner.handler = lambda argv: SessionResult(exit_code=0)
    service = TransferService(executor, confirmation=FakeConfirm())
    link = parse_line("lrwxrwxrwx 1 u g 10 Jan 1 00:00 current -> releases/7/")

    batch = asyncio.run(service.download(context, [link], "/srv", str(tmp_path)))

    assert batch.report().ok
    (argv,) = runner.argv_for("scp")
    assert "-r" in argv
    assert argv[-2] == "alice@files.example.com:/srv/current"


def test_declined_overwrite_runs_nothing(runner, executor, context, tmp_path):
    (tmp_path / "a.txt").write_text("local copy")
    confirm = FakeConfirm(answer=False)
    service = TransferService(executor, confirmation=confirm)

    batch = asyncio.run(service.download(context, _files("a.txt"), "/srv", str(tmp_path)))

    assert batch is None
    assert runner.calls == []
    assert service.batch is None
    assert confirm.asked == [f"File exists: a.txt already exist in {tmp_path}. Overwrite?"]


def test_collision_without_confirmation_aborts(runner, executor, context, tmp_path):
    (tmp_path / "a.txt").write_text("x")
    service = TransferService(executor)

    assert asyncio.run(service.download(context, _files("a.txt"), "/srv", str(tmp_path))) is None
    assert runner.calls == []


def test_accepted_overwrite_copies(runner, executor, context, tmp_path):
    (tmp_path / "a.txt").write_text("x")
    service = TransferService(executor, confirmation=FakeConfirm(answer=True))

    batch = asyncio.run(service.download(context, _files("a.txt", "new.txt"), "/srv", str(tmp_path)))

    assert batch.report().ok
    assert len(runner.argv_for("scp")) == 2


def test_upload_probes_remote_names(runner, executor, context, tmp_path):
    local_dir = tmp_path / "site"
    local_dir.mkdir()
    local_file = tmp_path / "notes.txt"
    local_file.write_text("n")

    def remote(argv):
        if argv[0] == "ssh":
            return SessionResult(exit_code=0, stdout="exists\n" if "notes.txt" in argv[-1] else "missing\n")
        return SessionResult(exit_code=0)

    runner.handler = remote
    confirm = FakeConfirm(answer=True)
    service = TransferService(executor, confirmation=confirm)

    batch = asyncio.run(service.upload(context, [str(local_dir), str(local_file)], "/srv/www"))

    assert confirm.asked == ["File exists: notes.txt already exist in /srv/www. Overwrite?"]
    scp_calls = runner.argv_for("scp")
    assert "-r" in scp_calls[0] and "-r" not in scp_calls[1]
    assert scp_calls[0][-1] == "alice@files.example.com:/srv/www/"
    assert [status.item.kind for status in batch.statuses] == [EntryKind.DIRECTORY, EntryKind.FILE]


def test_second_batch_is_rejected_while_running(executor, context, tmp_path):
    service = TransferService(executor)
    release = None

    async def scenario():
        nonlocal release
        release = asyncio.Event()

        async def slow_refresh():
            await release.wait()

        first = asyncio.ensure_future(
            service.download(context, _files("a.txt"), "/srv", str(tmp_path), on_refresh=slow_refresh)
        )
        await asyncio.sleep(0.05)
        assert service.is_transferring
        with pytest.raises(TransferBusyError):
            await service.download(context, _files("b.txt"), "/srv", str(tmp_path))
        release.set()
        return await first

    batch = asyncio.run(scenario())

    assert batch.report().succeeded == 1
    assert service.is_transferring is False


def test_updates_are_reported(runner, executor, context, tmp_path):
    runner.handler = lambda argv: SessionResult(exit_code=0, stderr="Sending file modes: C0644 3 a.txt\n")
    seen = []
    service = TransferService(executor)

    asyncio.run(
        service.download(
            context, _files("a.txt"), "/srv", str(tmp_path), on_update=lambda s: seen.append((s.state, s.progress))
        )
    )

    assert seen[0] == (TaskStatus.RUNNING, "")
    assert (TaskStatus.RUNNING, "Sending file modes: C0644 3 a.txt") in seen
    assert seen[-1][0] == TaskStatus.SUCCEEDED


def test_scoped_local_access_held_per_item(runner, executor, context, tmp_path, bookmarks):
    service = TransferService(executor, bookmarks=bookmarks)

    asyncio.run(service.download(context, _files("a", "b"), "/srv", str(tmp_path), local_scope=str(tmp_path)))

    assert bookmarks.started == [str(tmp_path), str(tmp_path)]
    assert bookmarks.stopped == bookmarks.started


def test_empty_request_is_a_no_op(runner, executor, context, tmp_path):
    service = TransferService(executor)

    assert asyncio.run(service.download(context, [], "/srv", str(tmp_path))) is None
    assert asyncio.run(service.upload(context, [], "/srv")) is None
    assert runner.calls == []

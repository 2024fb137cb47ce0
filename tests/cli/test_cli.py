from __future__ import annotations

import http.client
from pathlib import Path

import pytest

from nexusprune import cli
from nexusprune.client import DeleteOutcome, NexusError, SearchResult
from nexusprune.config import NexusEndpoint
from nexusprune.coordinates import Gav


class FakeClient:
    def __init__(self, *, fail: bool = False, hits: int = 1) -> None:
        self.fail = fail
        self.hits = hits
        self.endpoint: NexusEndpoint | None = None
        self.timeout: float | None = None
        self.searched: list[str] = []
        self.deleted: list[Gav] = []

    def __call__(self, endpoint: NexusEndpoint, timeout: float | None = None) -> "FakeClient":
        self.endpoint = endpoint
        self.timeout = timeout
        return self

    def search(self, query: Gav, count: int) -> SearchResult:
        if self.fail:
            raise NexusError("cannot reach nexus", url="http://localhost:8081/nexus/")
        self.searched.append(query.group_id)
        artifacts = tuple(
            Gav(group_id=query.group_id, artifact_id="app", version=f"1.{index}", latest_release="1.0")
            for index in range(self.hits)
        )
        return SearchResult(
            count=len(artifacts),
            from_=0,
            total_count=len(artifacts),
            too_many_results=False,
            artifacts=artifacts,
        )

    def delete(self, gav: Gav) -> DeleteOutcome:
        self.deleted.append(gav)
        return DeleteOutcome.DELETED


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> FakeClient:
    client = FakeClient()
    monkeypatch.setattr(cli, "NexusClient", client)
    return client


def test_cli_reports_hits_in_given_order(
    fake_client: FakeClient, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli.main(["--no-shuffle", "org.b", "org.a"], environ={})

    captured = capsys.readouterr()
    assert exit_code == 0
    assert fake_client.searched == ["org.b", "org.a"]
    assert captured.out.splitlines() == ["org.b:app:1.0", "org.a:app:1.0"]
    assert fake_client.deleted == []


def test_cli_builds_endpoint_from_flags_and_environment(fake_client: FakeClient) -> None:
    exit_code = cli.main(
        ["--server", "nexus.internal", "--repository", "", "--timeout", "3", "org.a"],
        environ={"NEXUSPRUNE_PASSWORD": "from-env", "NEXUSPRUNE_PORT": "9090"},
    )

    assert exit_code == 0
    assert fake_client.endpoint == NexusEndpoint(
        server="nexus.internal", port="9090", password="from-env", repository_id=""
    )
    assert fake_client.timeout == 3.0


def test_cli_reads_groups_from_file(fake_client: FakeClient, tmp_path: Path) -> None:
    listing = tmp_path / "groups.txt"
    listing.write_text("org.a\norg.b\n", encoding="utf-8")

    exit_code = cli.main(["--no-shuffle", f"@{listing}"], environ={})

    assert exit_code == 0
    assert fake_client.searched == ["org.a", "org.b"]


def test_cli_deletes_when_enabled(fake_client: FakeClient) -> None:
    fake_client.hits = 3

    exit_code = cli.main(["--delete", "--expect", "3", "--throttle", "5", "org.a"], environ={})

    assert exit_code == 0
    assert [gav.version for gav in fake_client.deleted] == ["1.1", "1.2"]


def test_cli_no_keep_latest_deletes_everything(fake_client: FakeClient) -> None:
    exit_code = cli.main(["--delete", "--no-keep-latest", "--throttle", "5", "org.a"], environ={})

    assert exit_code == 0
    assert [gav.version for gav in fake_client.deleted] == ["1.0"]


def test_cli_expectation_exceeded_exit_code(
    fake_client: FakeClient, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_client.hits = 2

    exit_code = cli.main(["--delete", "org.a"], environ={})

    assert exit_code == 1
    assert fake_client.deleted == []
    assert "expect is 1" in capsys.readouterr().err


def test_cli_backend_failure_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "NexusClient", FakeClient(fail=True))

    assert cli.main(["org.a"], environ={}) == 2


def test_cli_seed_makes_order_reproducible(monkeypatch: pytest.MonkeyPatch) -> None:
    groups = [f"org.g{index}" for index in range(12)]
    orders = []
    for _ in range(2):
        client = FakeClient(hits=0)
        monkeypatch.setattr(cli, "NexusClient", client)
        assert cli.main(["--seed", "1234", *groups], environ={}) == 0
        orders.append(client.searched)

    assert orders[0] == orders[1]
    assert sorted(orders[0]) == sorted(groups)


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["@groups.txt", "org.a"],
        ["--throttle", "-1", "org.a"],
        ["--count", "0", "org.a"],
        [""],
        ["org.a", "  "],
        ["--port", "abc", "org.a"],
        ["--delete", "--repository", "", "org.a"],
    ],
)
def test_cli_usage_errors(fake_client: FakeClient, argv: list[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv, environ={})

    assert exc.value.code == 2
    assert fake_client.searched == []


def test_cli_missing_group_file_is_usage_error(fake_client: FakeClient, tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([f"@{tmp_path / 'missing.txt'}"], environ={})

    assert exc.value.code == 2


def test_cli_rejects_non_numeric_port_from_environment(fake_client: FakeClient) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["org.a"], environ={"NEXUSPRUNE_PORT": "abc"})

    assert exc.value.code == 2
    assert fake_client.searched == []


def test_cli_transport_fault_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):  # type: ignore[no-untyped-def]
        raise http.client.InvalidURL("nonnumeric port: 'abc'")

    monkeypatch.setattr("nexusprune.client.urlopen", fake_urlopen)

    assert cli.main(["--no-shuffle", "org.a"], environ={}) == 2

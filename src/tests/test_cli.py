import pytest

import cli


def test_no_arguments_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main([])

    assert "--list-channels" in capsys.readouterr().out


def test_sync_arguments_are_forwarded(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run_loader(config_path, **kwargs):  # type: ignore[no-untyped-def]
        calls.append((config_path, kwargs))
        return []

    monkeypatch.setattr(cli, "run_loader", fake_run_loader)

    cli.main(["--config", "cfg.yaml", "--sync", "general", "eng", "--days", "2"])

    assert calls == [
        (
            "cfg.yaml",
            {
                "channels": ["general", "eng"],
                "sync_days": 2,
                "reset_sync_state": False,
                "incremental": False,
            },
        )
    ]


def test_bare_sync_uses_configured_channels(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(
        cli, "run_loader", lambda path, **kwargs: calls.append(kwargs) or []
    )

    cli.main(["--sync"])

    assert calls[0]["channels"] is None


def test_recent_flag_requests_incremental_sync(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls = []
    monkeypatch.setattr(
        cli, "run_loader", lambda path, **kwargs: calls.append(kwargs) or []
    )

    cli.main(["--sync", "general", "--recent"])

    assert calls[0]["incremental"] is True
    assert calls[0]["channels"] == ["general"]

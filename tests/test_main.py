"""Tests for application startup."""

import pytest

from sleep_tracker import main


def test_migrations_skipped_in_test_environment(monkeypatch):
    """No alembic upgrade runs when ENVIRONMENT=test."""
    calls = []
    monkeypatch.setattr(main.command, "upgrade", lambda cfg, rev: calls.append(rev))

    main.run_migrations()

    assert main.settings.is_testing
    assert calls == []


def test_migrations_upgrade_to_head_outside_tests(monkeypatch):
    """Other environments upgrade to head without reconfiguring logging."""
    calls = []
    monkeypatch.setattr(main.settings, "environment", "development")
    monkeypatch.setattr(
        main.command,
        "upgrade",
        lambda cfg, rev: calls.append((rev, cfg.attributes["configure_logger"])),
    )

    main.run_migrations()

    assert calls == [("head", False)]


def test_migration_failure_propagates(monkeypatch):
    """A failed upgrade stops startup."""

    def fail(cfg, rev):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(main.settings, "environment", "production")
    monkeypatch.setattr(main.command, "upgrade", fail)

    with pytest.raises(RuntimeError):
        main.run_migrations()

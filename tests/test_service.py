"""
test_service.py — Unit tests for autoshutdown/service/shutdown.py.

The host is replaced with in-memory fakes; the clock is pinned so that the
plan is fully deterministic.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from autoshutdown.host.base import (
    AnnouncementSink,
    ConfigSource,
    EventRegistry,
    ExitCode,
    ShutdownMask,
    ShutdownPrimitive,
)
from autoshutdown.service.shutdown import ShutdownService, format_announcement

NOW = datetime(2024, 1, 1, 10, 0, 0)   # Monday


# ── Fakes ──────────────────────────────────────────────────────────────────
class FakeConfig(ConfigSource):
    def __init__(self, **options: Any) -> None:
        self.options = {f"ServerAutoShutdown.{k.replace('__', '.')}": v for k, v in options.items()}

    def get_option(self, key: str, default: Any) -> Any:
        return self.options.get(key, default)


class FakeHost(AnnouncementSink, ShutdownPrimitive, EventRegistry):
    def __init__(self) -> None:
        self.messages: list[str] = []
        self.shutdowns: list[tuple[int, ShutdownMask, ExitCode]] = []
        self.cancels = 0
        self.events: list[int] = []

    def send_server_message(self, message: str) -> None:
        self.messages.append(message)

    def shutdown_serv(self, grace_s: int, mask: ShutdownMask, exit_code: ExitCode) -> None:
        self.shutdowns.append((grace_s, mask, exit_code))

    def shutdown_cancel(self) -> None:
        self.cancels += 1

    def start_event(self, event_id: int) -> None:
        if event_id == 13:
            raise RuntimeError("unknown event")
        self.events.append(event_id)

    def describe_event(self, event_id: int) -> str:
        return f"event {event_id}"


def _service(host: FakeHost | None = None, **options: Any) -> tuple[ShutdownService, FakeHost]:
    host = host or FakeHost()
    service = ShutdownService(
        FakeConfig(**options),
        announcer=host,
        world=host,
        events=host,
        clock=lambda: NOW,
    )
    return service, host


# ── init ───────────────────────────────────────────────────────────────────
class TestInit:
    def test_disabled_schedules_nothing(self) -> None:
        service, host = _service(Enabled=False)
        service.init()
        assert not service.enabled
        assert len(service.scheduler) == 0
        assert host.cancels == 0

    def test_disabled_by_default(self) -> None:
        service, _ = _service()
        service.init()
        assert not service.enabled

    def test_enabled_registers_one_callback_per_time(self) -> None:
        service, host = _service(Enabled=True, Time="11:00:00;20:00:00")
        service.init()

        assert service.enabled
        assert len(service.scheduler) == 2
        assert service.plan is not None
        assert len(service.plan.entries) == 2
        assert host.cancels == 1

    def test_default_time_is_four_am(self) -> None:
        service, _ = _service(Enabled=True)
        service.init()
        assert service.plan.entries[0].shutdown.fire_at == datetime(2024, 1, 2, 4, 0, 0)

    def test_reinit_replaces_pending_callbacks(self) -> None:
        service, host = _service(Enabled=True, Time="11:00:00;20:00:00")
        service.init()
        service.init()

        assert len(service.scheduler) == 2
        assert host.cancels == 2

    def test_no_valid_times_disables_module(self) -> None:
        service, host = _service(Enabled=True, Time="garbage;25:00:00")
        service.init()

        assert not service.enabled
        assert len(service.scheduler) == 0
        assert host.cancels == 0

    def test_invalid_every_days_disables_module(self) -> None:
        for every_days in (0, 366):
            service, _ = _service(Enabled=True, EveryDays=every_days)
            service.init()
            assert not service.enabled

    def test_invalid_weekday_falls_back_to_daily(self) -> None:
        service, _ = _service(Enabled=True, Weekday=9)
        service.init()
        assert service.enabled
        assert service.plan.rule.kind == "every_days"

    def test_valid_weekday_selects_weekday_rule(self) -> None:
        service, _ = _service(Enabled=True, Weekday=3, Time="04:00:00")
        service.init()
        assert service.plan.rule.kind == "weekday"
        assert service.plan.entries[0].shutdown.fire_at == datetime(2024, 1, 3, 4, 0, 0)

    def test_disabling_on_reload_drops_pending(self) -> None:
        host = FakeHost()
        service, _ = _service(host, Enabled=True, Time="20:00:00")
        service.init()
        assert len(service.scheduler) == 1

        service.config = FakeConfig(Enabled=False)
        service.init()

        assert not service.enabled
        assert len(service.scheduler) == 0

    def test_string_options_are_coerced(self) -> None:
        service, _ = _service(Enabled="true", Time="20:00:00", PreAnnounce__Seconds="600")
        service.init()
        assert service.enabled
        assert service.plan.entries[0].lead_s == 600

    def test_unicode_digit_time_is_dropped(self) -> None:
        service, _ = _service(Enabled=True, Time="0²:00:00;20:00:00")
        service.init()
        assert service.enabled
        assert [str(e.time) for e in service.plan.entries] == ["20:00:00"]

    def test_bool_is_not_taken_as_number(self) -> None:
        service, _ = _service(Enabled=True, Time="20:00:00", Weekday=True)
        service.init()
        assert service.plan.rule.kind == "every_days"

    def test_unparseable_number_uses_default(self) -> None:
        service, _ = _service(Enabled=True, Time="20:00:00", PreAnnounce__Seconds="soon")
        service.init()
        assert service.plan.entries[0].lead_s == 3600


# ── Firing ─────────────────────────────────────────────────────────────────
class TestFiring:
    def test_pre_announce_fires_at_lead_before_shutdown(self) -> None:
        service, host = _service(Enabled=True, Time="10:30:00", PreAnnounce__Seconds=600)
        service.init()

        service.on_update(1199_000)
        assert host.messages == []

        service.on_update(1000)
        assert host.messages == ["[SERVER]: Automated (quick) server restart in 10 minutes"]
        assert host.shutdowns == [(600, ShutdownMask.RESTART, ExitCode.SHUTDOWN)]

    def test_short_fuse_fires_after_one_second(self) -> None:
        service, host = _service(Enabled=True, Time="10:00:30", PreAnnounce__Seconds=3600)
        service.init()

        service.on_update(999)
        assert host.shutdowns == []
        service.on_update(1)

        assert host.messages == ["[SERVER]: Automated (quick) server restart in 30 seconds"]
        assert host.shutdowns[0][0] == 30

    def test_custom_template(self) -> None:
        service, host = _service(
            Enabled=True, Time="10:00:30", PreAnnounce__Seconds=3600,
            PreAnnounce__Message="Restart in {}!",
        )
        service.init()
        service.on_update(1000)
        assert host.messages == ["Restart in 30 seconds!"]

    def test_each_entry_fires_independently(self) -> None:
        service, host = _service(Enabled=True, Time="10:01:00;10:02:00", PreAnnounce__Seconds=30)
        service.init()

        service.on_update(30_000)
        assert len(host.shutdowns) == 1
        service.on_update(60_000)
        assert len(host.shutdowns) == 2

    def test_on_update_is_ignored_when_disabled(self) -> None:
        service, _ = _service(Enabled=False)
        service.init()
        service.on_update(5000)
        assert service.scheduler.now_ms == 0

    def test_too_soon_time_is_never_fired(self) -> None:
        service, host = _service(Enabled=True, Time="10:00:05", PreAnnounce__Seconds=0)
        service.init()

        assert service.enabled
        assert service.plan.entries == []
        service.on_update(60_000)
        assert host.shutdowns == []


# ── format_announcement ────────────────────────────────────────────────────
class TestFormatAnnouncement:
    def test_fills_placeholder(self) -> None:
        assert format_announcement("Restart in {}", 3661) == "Restart in 1 hour 1 minute 1 second"

    def test_malformed_template_uses_default(self) -> None:
        assert format_announcement("{0} {1}", 60) == "[SERVER]: Automated (quick) server restart in 1 minute"

    def test_template_without_placeholder_is_kept(self) -> None:
        assert format_announcement("Restarting soon", 60) == "Restarting soon"


# ── start_persistent_events ────────────────────────────────────────────────
class TestStartPersistentEvents:
    def test_starts_listed_events(self) -> None:
        service, host = _service(StartEvents="1 2  3")
        service.start_persistent_events()
        assert host.events == [1, 2, 3]

    def test_skips_invalid_tokens(self) -> None:
        service, host = _service(StartEvents="1 x -4 5")
        service.start_persistent_events()
        assert host.events == [1, 5]

    def test_skips_unicode_digit_tokens(self) -> None:
        service, host = _service(StartEvents="5 ² 7")
        service.start_persistent_events()
        assert host.events == [5, 7]

    def test_failing_event_does_not_stop_others(self) -> None:
        service, host = _service(StartEvents="13 14")
        service.start_persistent_events()
        assert host.events == [14]

    def test_empty_list_is_noop(self) -> None:
        service, host = _service()
        service.start_persistent_events()
        assert host.events == []

    def test_without_registry_is_noop(self) -> None:
        host = FakeHost()
        service = ShutdownService(FakeConfig(StartEvents="1"), announcer=host, world=host)
        service.start_persistent_events()
        assert host.events == []


# ── status ─────────────────────────────────────────────────────────────────
class TestStatus:
    def test_reports_pending_work(self) -> None:
        service, _ = _service(Enabled=True, Time="10:30:00", PreAnnounce__Seconds=600)
        service.init()

        status = service.status()

        assert status == {
            "enabled": True,
            "pending": 1,
            "next_fire_in_ms": 1200_000,
            "entries": 1,
        }

"""Tests for probing, status classification and the service registry."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from fgp_dashboard.config.models import DashboardConfig
from fgp_dashboard.errors import (
    InvalidServiceName,
    ServiceNotFound,
    ServiceUnhealthy,
    ServiceUnreachable,
)
from fgp_dashboard.registry.classify import classify
from fgp_dashboard.registry.health import probe, probe_all
from fgp_dashboard.registry.models import (
    ConnectError,
    HealthPayload,
    NotInstalled,
    Responding,
    ServiceRecord,
    ServiceStatus,
)
from fgp_dashboard.registry.registry import ServiceRegistry

# ─── HealthPayload tests ───


class TestHealthPayload:
    def test_reads_known_fields(self):
        p = HealthPayload.from_mapping({"status": "healthy", "version": "1.2", "uptime_seconds": 42, "pid": 7})
        assert (p.status, p.version, p.uptime_seconds, p.pid) == ("healthy", "1.2", 42, 7)

    def test_missing_fields_are_none(self):
        p = HealthPayload.from_mapping({})
        assert p.status is None
        assert p.version is None
        assert p.uptime_seconds is None

    def test_wrong_types_are_none(self):
        p = HealthPayload.from_mapping({"status": 3, "version": 1.2, "uptime_seconds": "42"})
        assert p.status is None
        assert p.version is None
        assert p.uptime_seconds is None

    def test_negative_and_bool_uptime_are_none(self):
        assert HealthPayload.from_mapping({"uptime_seconds": -1}).uptime_seconds is None
        assert HealthPayload.from_mapping({"uptime_seconds": True}).uptime_seconds is None


# ─── classify tests ───


class TestClassify:
    def test_no_endpoint_is_stopped(self):
        c = classify(NotInstalled())
        assert c.status == "stopped"
        assert c.version is None
        assert c.uptime_seconds is None

    def test_connect_error_is_unreachable(self):
        c = classify(ConnectError(error="Connection refused"))
        assert c.status == ServiceStatus.UNREACHABLE.value
        assert c.error == "Connection refused"
        assert c.version is None

    def test_negative_envelope_is_unhealthy(self):
        c = classify(Responding(ok=False, error="token expired"))
        assert c.status == "unhealthy"
        assert c.error == "token expired"

    def test_affirmative_uses_payload(self):
        c = classify(Responding(ok=True, payload={"status": "degraded", "version": "1.2", "uptime_seconds": 42}))
        assert c.status == "degraded"
        assert c.version == "1.2"
        assert c.uptime_seconds == 42
        assert c.error is None

    def test_affirmative_defaults_to_running(self):
        c = classify(Responding(ok=True, payload={}))
        assert c.status == "running"
        assert c.version is None
        assert c.uptime_seconds is None

    def test_unknown_result(self):
        with pytest.raises(TypeError):
            classify("nonsense")  # type: ignore[arg-type]


# ─── probe tests ───


class TestProbe:
    @pytest.mark.asyncio
    async def test_no_socket(self, config: DashboardConfig, install_service):
        install_service("gmail")
        assert await probe("gmail", config) == NotInstalled()

    @pytest.mark.asyncio
    async def test_stale_socket(self, config: DashboardConfig, install_service):
        install_service("gmail")
        config.socket_path("gmail").write_text("")
        result = await probe("gmail", config)
        assert isinstance(result, ConnectError)
        assert result.error

    @pytest.mark.asyncio
    async def test_healthy(self, config: DashboardConfig, fake_daemon):
        async with fake_daemon("gmail", responses={"health": {"ok": True, "result": {"version": "2.0"}}}):
            result = await probe("gmail", config)
        assert result == Responding(ok=True, payload={"version": "2.0"})

    @pytest.mark.asyncio
    async def test_missing_result_is_empty_payload(self, config: DashboardConfig, fake_daemon):
        async with fake_daemon("gmail", responses={"health": {"ok": True}}):
            result = await probe("gmail", config)
        assert result == Responding(ok=True, payload={})

    @pytest.mark.asyncio
    async def test_negative_envelope(self, config: DashboardConfig, fake_daemon):
        envelope = {"ok": False, "error": {"code": "AUTH", "message": "token expired"}}
        async with fake_daemon("gmail", responses={"health": envelope}):
            result = await probe("gmail", config)
        assert result == Responding(ok=False, payload={}, error="token expired")

    @pytest.mark.asyncio
    async def test_hung_service_times_out(self, services_dir, fake_daemon):
        cfg = DashboardConfig(services_dir=services_dir, probe_timeout=0.2)
        async with fake_daemon("hung", delay=2.0):
            result = await probe("hung", cfg)
        assert isinstance(result, ConnectError)
        assert "Timed out" in result.error


class TestProbeAll:
    @pytest.mark.asyncio
    async def test_mixed(self, config: DashboardConfig, install_service, fake_daemon):
        install_service("stopped-one")
        async with fake_daemon("live"):
            results = await probe_all(["stopped-one", "live"], config)
        assert results["stopped-one"] == NotInstalled()
        assert isinstance(results["live"], Responding)

    @pytest.mark.asyncio
    async def test_exception_is_absorbed(self, config: DashboardConfig):
        async def _boom(name, cfg):
            if name == "bad":
                raise RuntimeError("kaboom")
            return NotInstalled()

        with patch("fgp_dashboard.registry.health.probe", side_effect=_boom):
            results = await probe_all(["bad", "good"], config)
        assert results["bad"] == ConnectError(error="kaboom")
        assert results["good"] == NotInstalled()

    @pytest.mark.asyncio
    async def test_empty(self, config: DashboardConfig):
        assert await probe_all([], config) == {}


# ─── ServiceRegistry tests ───


class TestServiceRegistryListing:
    @pytest.mark.asyncio
    async def test_no_registry_root(self, config: DashboardConfig):
        reg = ServiceRegistry(config)
        assert await reg.list_services() == []

    @pytest.mark.asyncio
    async def test_stopped_service(self, config: DashboardConfig, install_service):
        install_service("gmail")
        records = await ServiceRegistry(config).list_services()
        assert records == [
            ServiceRecord(
                name="gmail",
                status="stopped",
                control_address=str(config.socket_path("gmail")),
            )
        ]

    @pytest.mark.asyncio
    async def test_unreachable_distinct_from_stopped(self, config: DashboardConfig, install_service):
        install_service("crashed")
        install_service("idle")
        config.socket_path("crashed").write_text("")
        records = {r.name: r for r in await ServiceRegistry(config).list_services()}
        assert records["crashed"].status == "unreachable"
        assert records["crashed"].error
        assert records["idle"].status == "stopped"

    @pytest.mark.asyncio
    async def test_hung_service_does_not_stall_listing(self, services_dir, fake_daemon):
        cfg = DashboardConfig(services_dir=services_dir, probe_timeout=0.3)
        loop = asyncio.get_running_loop()
        async with fake_daemon("hung", delay=3.0), fake_daemon("live"):
            started = loop.time()
            records = {r.name: r for r in await ServiceRegistry(cfg).list_services()}
            elapsed = loop.time() - started
        assert elapsed < 1.5
        assert records["hung"].status == "unreachable"
        assert "Timed out" in records["hung"].error
        assert records["live"].status == "running"

    @pytest.mark.asyncio
    async def test_degraded_payload(self, config: DashboardConfig, fake_daemon):
        result = {"status": "degraded", "version": "1.2", "uptime_seconds": 42}
        async with fake_daemon("calendar", responses={"health": {"ok": True, "result": result}}):
            records = await ServiceRegistry(config).list_services()
        assert len(records) == 1
        assert records[0].status == "degraded"
        assert records[0].version == "1.2"
        assert records[0].uptime_seconds == 42

    @pytest.mark.asyncio
    async def test_unhealthy_carries_message(self, config: DashboardConfig, fake_daemon):
        envelope = {"ok": False, "error": {"code": "AUTH", "message": "token expired"}}
        async with fake_daemon("gmail", responses={"health": envelope}):
            records = await ServiceRegistry(config).list_services()
        assert records[0].status == "unhealthy"
        assert records[0].error == "token expired"

    @pytest.mark.asyncio
    async def test_sorted_regardless_of_discovery_order(self, config: DashboardConfig, install_service):
        for name in ("zeta", "alpha", "mid"):
            install_service(name)
        reg = ServiceRegistry(config)
        with patch.object(reg, "service_names", return_value=["zeta", "alpha", "mid"]):
            records = await reg.list_services()
        assert [r.name for r in records] == ["alpha", "mid", "zeta"]

    @pytest.mark.asyncio
    async def test_bytewise_order(self, config: DashboardConfig, install_service):
        for name in ("beta", "Zulu", "alpha"):
            install_service(name)
        records = await ServiceRegistry(config).list_services()
        assert [r.name for r in records] == ["Zulu", "alpha", "beta"]

    @pytest.mark.asyncio
    async def test_listing_is_repeatable(self, config: DashboardConfig, install_service, fake_daemon):
        install_service("idle")
        async with fake_daemon("live", responses={"health": {"ok": True, "result": {"version": "3"}}}):
            reg = ServiceRegistry(config)
            first = await reg.list_services()
            second = await reg.list_services()
        assert first == second

    def test_sync_wrapper(self, config: DashboardConfig, install_service):
        install_service("gmail")
        records = ServiceRegistry(config).get_all_statuses_sync()
        assert [r.status for r in records] == ["stopped"]


class TestServiceRegistryHealth:
    @pytest.mark.asyncio
    async def test_not_found(self, config: DashboardConfig):
        with pytest.raises(ServiceNotFound, match="ghost"):
            await ServiceRegistry(config).get_service_health("ghost")

    @pytest.mark.asyncio
    async def test_unreachable(self, config: DashboardConfig, install_service):
        install_service("crashed")
        config.socket_path("crashed").write_text("")
        with pytest.raises(ServiceUnreachable):
            await ServiceRegistry(config).get_service_health("crashed")

    @pytest.mark.asyncio
    async def test_unhealthy(self, config: DashboardConfig, fake_daemon):
        envelope = {"ok": False, "error": {"code": "AUTH", "message": "token expired"}}
        async with fake_daemon("gmail", responses={"health": envelope}):
            with pytest.raises(ServiceUnhealthy, match="token expired"):
                await ServiceRegistry(config).get_service_health("gmail")

    @pytest.mark.asyncio
    async def test_unhealthy_without_message(self, config: DashboardConfig, fake_daemon):
        async with fake_daemon("gmail", responses={"health": {"ok": False}}):
            with pytest.raises(ServiceUnhealthy, match="reported an error"):
                await ServiceRegistry(config).get_service_health("gmail")

    @pytest.mark.asyncio
    async def test_raw_payload_returned(self, config: DashboardConfig, fake_daemon):
        payload = {"status": "healthy", "services": {"imap": {"ok": True}}, "extra": [1, 2]}
        async with fake_daemon("gmail", responses={"health": {"ok": True, "result": payload}}):
            detail = await ServiceRegistry(config).get_service_health("gmail")
        assert detail.payload == payload
        assert detail.control_address == str(config.socket_path("gmail"))

    @pytest.mark.asyncio
    async def test_invalid_name(self, config: DashboardConfig):
        with pytest.raises(InvalidServiceName):
            await ServiceRegistry(config).get_service_health("..")

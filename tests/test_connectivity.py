"""
Tests for connectivity probes.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from storefront.services.connectivity import (
    SocketConnectivityProbe,
    StaticConnectivityProbe,
)


class TestStaticConnectivityProbe:
    @pytest.mark.asyncio
    async def test_reports_configured_state(self):
        probe = StaticConnectivityProbe(online=False)
        assert not await probe.is_online()

        probe.set_online(True)
        assert await probe.is_online()


class TestSocketConnectivityProbe:
    def test_host_and_port_from_base_url(self):
        probe = SocketConnectivityProbe("http://192.168.1.235:8000/api")
        assert (probe.host, probe.port) == ("192.168.1.235", 8000)

        probe = SocketConnectivityProbe("https://shop.example.com/api")
        assert (probe.host, probe.port) == ("shop.example.com", 443)

    @pytest.mark.asyncio
    async def test_reachable_server(self):
        server = await asyncio.start_server(
            lambda reader, writer: writer.close(), "127.0.0.1", 0
        )
        port = server.sockets[0].getsockname()[1]
        try:
            probe = SocketConnectivityProbe(f"http://127.0.0.1:{port}/api", ttl=0)
            assert await probe.is_online()
        finally:
            server.close()
            await server.wait_closed()

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        server = await asyncio.start_server(
            lambda reader, writer: writer.close(), "127.0.0.1", 0
        )
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        probe = SocketConnectivityProbe(
            f"http://127.0.0.1:{port}/api", timeout=1.0, ttl=0
        )
        assert not await probe.is_online()

    @pytest.mark.asyncio
    async def test_result_is_memoised_within_ttl(self):
        probe = SocketConnectivityProbe("http://backend.test/api", ttl=60)
        probe._probe = AsyncMock(return_value=True)

        assert await probe.is_online()
        assert await probe.is_online()

        probe._probe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_zero_ttl_probes_every_time(self):
        probe = SocketConnectivityProbe("http://backend.test/api", ttl=0)
        probe._probe = AsyncMock(side_effect=[True, False])

        assert await probe.is_online()
        assert not await probe.is_online()

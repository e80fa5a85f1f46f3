import anyio
import pytest

from expense_categorizer.services.leases import OwnerLeases

pytestmark = pytest.mark.anyio


async def test_second_holder_waits_for_release() -> None:
    leases = OwnerLeases()
    order: list[str] = []

    async def second() -> None:
        async with leases.hold("owner"):
            order.append("second")

    async with anyio.create_task_group() as tg:
        async with leases.hold("owner"):
            assert leases.is_held("owner")
            tg.start_soon(second)
            await anyio.sleep(0.01)
            order.append("first")

    assert order == ["first", "second"]
    assert not leases.is_held("owner")


async def test_owners_do_not_block_each_other() -> None:
    leases = OwnerLeases()

    async with leases.hold("a"):
        with anyio.fail_after(1):
            async with leases.hold("b"):
                assert leases.is_held("a")
                assert leases.is_held("b")


async def test_lease_released_on_error() -> None:
    leases = OwnerLeases()

    with pytest.raises(RuntimeError):
        async with leases.hold("owner"):
            raise RuntimeError("run failed")

    assert not leases.is_held("owner")
    assert leases._locks == {}

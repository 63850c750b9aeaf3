"""Draw/announce scheduler tests: retries, crash recovery and manual announce."""

import asyncio

import pytest

from conftest import ADMIN_IDS, GROUP_ID, join_users
from database.base_repository import BaseRepository
from services.lifecycle import DrawOutcome
from services.scheduler import AnnounceResult, DrawScheduler


def winner_announcements(gateway):
    return [text for text in gateway.public_texts() if "CHÚC MỪNG" in text]


@pytest.mark.asyncio
async def test_tick_draws_announces_and_sends_proofs(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(winners=2, duration=60)
    await join_users(service, giveaway.id, [1, 2, 3])
    clock.advance(60)

    assert await scheduler.tick() == 1
    await scheduler.flush_notifications()

    announced = await service.get(giveaway.id)
    assert announced.announced and announced.announced_at == clock()
    winners = await service.winners(giveaway.id)
    [text] = winner_announcements(gateway)
    for winner in winners:
        assert f"{winner.position}. User {winner.user_id} ({winner.user_id})" in text

    assert sorted(user_id for user_id, _ in gateway.private) == sorted(ADMIN_IDS)
    assert all(giveaway.seed in proof for _, proof in gateway.private)
    # The group never sees the seed
    assert all(giveaway.seed not in text for text in gateway.public_texts())


@pytest.mark.asyncio
async def test_nothing_due_before_close_time(scheduler, gateway, clock, open_giveaway):
    await open_giveaway(duration=60)
    clock.advance(59)
    assert await scheduler.tick() == 0
    assert len(gateway.public) == 1  # only the creation post


@pytest.mark.asyncio
async def test_publish_retried_until_success(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(winners=2, duration=60)
    await join_users(service, giveaway.id, [1, 2, 3, 4])
    clock.advance(60)
    gateway.fail_public = 2

    assert await scheduler.tick() == 0
    first_batch = await service.winners(giveaway.id)
    assert not (await service.get(giveaway.id)).announced

    clock.advance(30)
    assert await scheduler.tick() == 0
    clock.advance(30)
    assert await scheduler.tick() == 1

    assert await service.winners(giveaway.id) == first_batch
    assert len(winner_announcements(gateway)) == 1
    assert (await service.get(giveaway.id)).announced_at == clock()

    assert await scheduler.tick() == 0
    assert len(winner_announcements(gateway)) == 1


@pytest.mark.asyncio
async def test_publish_timeout_counts_as_failure(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1])
    clock.advance(60)
    gateway.hang_public = True

    assert await scheduler.tick() == 0
    assert not (await service.get(giveaway.id)).announced
    assert len(await service.winners(giveaway.id)) == 1


@pytest.mark.asyncio
async def test_restart_after_draw_announces_stored_winners(service, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(winners=2, duration=60)
    await join_users(service, giveaway.id, [1, 2, 3, 4, 5])
    clock.advance(60)
    # Process stopped right after the draw committed
    assert await service.draw(giveaway.id) is DrawOutcome.DRAWN
    stored = await service.winners(giveaway.id)

    restarted = DrawScheduler(service, admin_ids=(), interval=5, publish_timeout=0.2)
    assert await restarted.tick() == 1

    assert await service.winners(giveaway.id) == stored
    [text] = winner_announcements(gateway)
    assert all(f"({w.user_id})" in text for w in stored)


@pytest.mark.asyncio
async def test_empty_giveaway_announced_once(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    clock.advance(60)

    assert await scheduler.tick() == 1
    assert await scheduler.tick() == 0

    empty = [t for t in gateway.public_texts() if "không có ai tham gia" in t]
    assert len(empty) == 1
    assert (await service.get(giveaway.id)).announced


@pytest.mark.asyncio
async def test_canceled_giveaway_skipped(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1])
    await service.cancel(giveaway.id, "x")
    clock.advance(60)

    assert await scheduler.tick() == 0
    assert winner_announcements(gateway) == []
    assert await service.winners(giveaway.id) == []


@pytest.mark.asyncio
async def test_missing_winners_left_for_retry(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1, 2])
    await BaseRepository.execute("UPDATE giveaways SET ended=1 WHERE id=?", (giveaway.id,))
    clock.advance(60)

    assert await scheduler.tick() == 0
    assert not (await service.get(giveaway.id)).announced
    assert winner_announcements(gateway) == []


@pytest.mark.asyncio
async def test_one_failing_giveaway_does_not_block_others(service, scheduler, gateway, clock, open_giveaway):
    broken = await open_giveaway(duration=60)
    healthy = await open_giveaway(duration=60)
    await join_users(service, healthy.id, [1])
    await BaseRepository.execute("UPDATE giveaways SET seed=NULL WHERE id=?", (broken.id,))
    clock.advance(60)

    assert await scheduler.tick() == 1
    assert (await service.get(healthy.id)).announced
    assert not (await service.get(broken.id)).ended


@pytest.mark.asyncio
async def test_proof_failures_do_not_undo_announce(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1])
    clock.advance(60)
    gateway.fail_private = True

    assert await scheduler.tick() == 1
    await scheduler.flush_notifications()
    assert (await service.get(giveaway.id)).announced


@pytest.mark.asyncio
async def test_overlapping_tick_is_skipped(scheduler, clock, open_giveaway):
    await open_giveaway(duration=60)
    clock.advance(60)

    async with scheduler._tick_lock:
        assert await scheduler.tick() == 0
    assert await scheduler.tick() == 1


@pytest.mark.asyncio
async def test_start_and_stop(service, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    clock.advance(60)
    scheduler = DrawScheduler(service, admin_ids=ADMIN_IDS, interval=5, publish_timeout=0.2)

    await scheduler.start()
    for _ in range(50):
        if (await service.get(giveaway.id)).announced:
            break
        await asyncio.sleep(0.02)
    await scheduler.stop()

    assert (await service.get(giveaway.id)).announced
    assert not scheduler.running
    assert len(gateway.private) == len(ADMIN_IDS)


# --- Manual announce ----------------------------------------------------------

@pytest.mark.asyncio
async def test_manual_announce_refusals(service, scheduler, clock, open_giveaway):
    assert await scheduler.announce(404) is AnnounceResult.NOT_FOUND

    pending = await open_giveaway(duration=60)
    assert await scheduler.announce(pending.id) is AnnounceResult.NOT_ENDED

    canceled = await open_giveaway(duration=60)
    await service.cancel(canceled.id, "x")
    assert await scheduler.announce(canceled.id) is AnnounceResult.CANCELED

    empty = await open_giveaway(duration=60)
    clock.advance(60)
    await service.draw(empty.id)
    assert await scheduler.announce(empty.id) is AnnounceResult.NO_WINNERS


@pytest.mark.asyncio
async def test_manual_reannounce_keeps_first_timestamp(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1, 2])
    clock.advance(60)
    await scheduler.tick()
    first = (await service.get(giveaway.id)).announced_at

    clock.advance(600)
    assert await scheduler.announce(giveaway.id) is AnnounceResult.ANNOUNCED

    assert len(winner_announcements(gateway)) == 2
    assert gateway.public[-1][0] == GROUP_ID
    assert (await service.get(giveaway.id)).announced_at == first


@pytest.mark.asyncio
async def test_manual_announce_reports_publish_failure(service, scheduler, gateway, clock, open_giveaway):
    giveaway = await open_giveaway(duration=60)
    await join_users(service, giveaway.id, [1])
    clock.advance(60)
    await service.draw(giveaway.id)
    gateway.fail_public = 1

    assert await scheduler.announce(giveaway.id) is AnnounceResult.FAILED
    assert not (await service.get(giveaway.id)).announced
    assert await scheduler.announce(giveaway.id) is AnnounceResult.ANNOUNCED
    assert (await service.get(giveaway.id)).announced

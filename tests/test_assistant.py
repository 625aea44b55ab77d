import asyncio
import random

import pytest

from planner.client.assistant import ASSISTANT_MESSAGES, MessageRotator, random_message


def test_random_message_is_from_the_list():
    rng = random.Random(7)
    assert all(random_message(rng) in ASSISTANT_MESSAGES for _ in range(20))


def test_rotator_emits_messages_until_stopped():
    seen = []

    async def scenario():
        rotator = MessageRotator(seen.append, interval=0.01, chance=1.0, rng=random.Random(1))
        async with rotator:
            assert rotator.running
            await asyncio.sleep(0.08)
        assert not rotator.running
        count = len(seen)
        await asyncio.sleep(0.05)
        return count

    count = asyncio.run(scenario())
    assert count >= 1
    assert len(seen) == count
    assert all(m in ASSISTANT_MESSAGES for m in seen)


def test_rotator_with_zero_chance_stays_quiet():
    seen = []

    async def scenario():
        async with MessageRotator(seen.append, interval=0.01, chance=0.0):
            await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert seen == []


def test_start_is_idempotent():
    async def scenario():
        rotator = MessageRotator(lambda m: None, interval=10)
        first = rotator.start()
        assert rotator.start() is first
        await rotator.stop()
        assert first.cancelled()

    asyncio.run(scenario())


@pytest.mark.parametrize("kwargs", [{"interval": 0}, {"chance": 1.5}])
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        MessageRotator(lambda m: None, **kwargs)


def test_interval_comes_from_settings(monkeypatch):
    monkeypatch.setenv("ASSISTANT_INTERVAL_SECONDS", "45")
    rotator = MessageRotator.from_settings(lambda m: None, chance=0.5)
    assert rotator.interval == 45.0


def test_interval_defaults_to_five_minutes(monkeypatch):
    monkeypatch.delenv("ASSISTANT_INTERVAL_SECONDS", raising=False)
    assert MessageRotator.from_settings(lambda m: None).interval == 300.0

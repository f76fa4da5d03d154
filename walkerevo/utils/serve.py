import asyncio
from collections.abc import Awaitable, Iterable
import contextlib
import signal


async def serve_until_signal(
    *,
    stop_coros: Iterable[Awaitable] = (),
    on_stop: Iterable[asyncio.Future] = (),
) -> None:
    """
    Wait until SIGINT/SIGTERM or until any task in ``on_stop`` finishes, then
    await the stop coroutines and cancel whatever is still running.
    """
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    on_stop = [t for t in on_stop if t is not None]

    loop.add_signal_handler(signal.SIGINT, stop_event.set)
    loop.add_signal_handler(signal.SIGTERM, stop_event.set)

    try:
        waiter = asyncio.create_task(stop_event.wait())
        done, _ = await asyncio.wait([waiter, *on_stop], return_when=asyncio.FIRST_COMPLETED)
        if waiter not in done:
            waiter.cancel()

        await asyncio.gather(*stop_coros, return_exceptions=True)
        await asyncio.sleep(0)

        pending = [t for t in on_stop if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(*pending, return_exceptions=True)
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
